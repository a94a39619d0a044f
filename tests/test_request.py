"""
Unit tests for request construction.
"""

import hashlib
from urllib.parse import parse_qsl, urlsplit

import pytest

from scribd_client import (
    ConfigurationError,
    MissingCredentialsError,
    ServiceConfig,
    SessionContext,
    build_request,
)
from scribd_client.constants import ERR_NO_API_KEY, ERR_NO_SECRET_KEY
from scribd_client.request import encode_params


def query_of(url):
    return parse_qsl(urlsplit(url).query, keep_blank_values=True)


class TestBuildRequest:
    """Test RequestBuilder behaviour."""

    @pytest.fixture
    def config(self):
        """Create unsigned config."""
        return ServiceConfig.create("K", b"S", api_url="http://api.example.com/api")

    @pytest.fixture
    def signed_config(self):
        """Create config with signing enforced."""
        return ServiceConfig.create("K", b"S", api_url="http://api.example.com/api",
                                    enforce_signing=True)

    def test_end_to_end_signed(self, signed_config):
        """Test the documented example call."""
        request = build_request(signed_config, "docs.getSettings", {"doc_id": "42"})

        query = dict(query_of(request.url))
        assert query["method"] == "docs.getSettings"
        assert query["doc_id"] == "42"
        assert query["api_key"] == "K"

        expected = hashlib.md5(b"S" + b"api_keyKdoc_id42methoddocs.getSettings").hexdigest()
        assert query["api_sig"] == expected
        assert request.signature == expected
        assert request.url.endswith(f"&api_sig={expected}")

    def test_url_layout(self, config):
        """Test URL is base?method=...&params in insertion order."""
        request = build_request(config, "docs.getSettings", {"doc_id": "42"})

        assert request.url == "http://api.example.com/api?method=docs.getSettings&doc_id=42&api_key=K"
        assert request.signature is None
        assert "api_sig" not in request.url

    def test_signing_requires_flag(self, config):
        """Test a configured secret alone does not sign calls."""
        request = build_request(config, "docs.getList", {})

        assert request.signing_required is False
        assert request.signature is None

    def test_empty_api_key(self):
        """Test empty API key fails before anything else."""
        config = ServiceConfig.create("", b"S")

        with pytest.raises(MissingCredentialsError) as exc_info:
            build_request(config, "docs.getList", {})

        assert exc_info.value.code == ERR_NO_API_KEY
        assert isinstance(exc_info.value, ConfigurationError)

    def test_signing_without_secret(self):
        """Test enforced signing without secret fails."""
        config = ServiceConfig.create("K", None, enforce_signing=True)

        with pytest.raises(MissingCredentialsError) as exc_info:
            build_request(config, "docs.getList", {})

        assert exc_info.value.code == ERR_NO_SECRET_KEY

    def test_no_secret_without_signing(self):
        """Test calls without a secret are fine when signing is not enforced."""
        config = ServiceConfig.create("K", None)
        request = build_request(config, "docs.getList", {})

        assert dict(query_of(request.url))["api_key"] == "K"

    def test_caller_api_key_wins(self, config):
        """Test caller supplied api_key is not overwritten."""
        request = build_request(config, "docs.getList", {"api_key": "OTHER"})

        assert request.params["api_key"] == "OTHER"

    def test_session_key_injected(self, config):
        """Test session key is added from the session context."""
        session = SessionContext(session_key="sess-1", phantom_id="phantom")
        request = build_request(config, "docs.getList", {}, session)

        assert request.params["session_key"] == "sess-1"
        assert "my_user_id" not in request.params

    def test_session_key_caller_wins(self, config):
        """Test caller supplied session_key is kept."""
        session = SessionContext(session_key="sess-1")
        request = build_request(config, "docs.getList", {"session_key": "mine"}, session)

        assert request.params["session_key"] == "mine"

    def test_phantom_on_docs_method(self, config):
        """Test phantom id becomes my_user_id on docs.* methods."""
        session = SessionContext(phantom_id="phantom")
        request = build_request(config, "docs.upload", {"file": "/tmp/a.pdf"}, session)

        assert request.params["my_user_id"] == "phantom"

    def test_phantom_ignored_outside_docs(self, config):
        """Test phantom id is not sent to other namespaces."""
        session = SessionContext(phantom_id="phantom")
        request = build_request(config, "user.getAutoSigninUrl", {"next_url": "x"}, session)

        assert "my_user_id" not in request.params

    def test_file_parameter_removed(self, signed_config):
        """Test the file path is taken out of the query and signature."""
        request = build_request(signed_config, "docs.upload",
                                {"file": "/tmp/report.pdf", "access": "private"})

        assert request.file_path == "/tmp/report.pdf"
        assert "file" not in request.params
        assert "report.pdf" not in request.url
        assert request.is_upload

        without_file = build_request(signed_config, "docs.upload", {"access": "private"})
        assert request.signature == without_file.signature
        assert not without_file.is_upload

    def test_signature_covers_injected_params(self, signed_config):
        """Test signature is computed after session and api_key injection."""
        session = SessionContext(session_key="sess-1")
        request = build_request(signed_config, "docs.getList", {"limit": "10"}, session)

        source = b"api_keyKlimit10methoddocs.getListsession_keysess-1"
        assert request.signature == hashlib.md5(b"S" + source).hexdigest()

    def test_values_url_encoded(self, config):
        """Test values are URL-encoded once."""
        request = build_request(config, "docs.search", {"query": "a&b c/é"})

        assert "query=a%26b+c%2F%C3%A9" in request.url
        assert dict(query_of(request.url))["query"] == "a&b c/é"

    def test_params_not_mutated(self, config):
        """Test the caller's parameter set is copied."""
        params = {"file": "/tmp/a.pdf"}
        build_request(config, "docs.upload", params, SessionContext(session_key="s"))

        assert params == {"file": "/tmp/a.pdf"}

    def test_redacted_url(self, signed_config):
        """Test logs never see the signature or session key."""
        request = build_request(signed_config, "docs.getList", {},
                                SessionContext(session_key="secret-session"))

        assert request.signature not in request.redacted_url
        assert "secret-session" not in request.redacted_url


class TestEncodeParams:
    """Test query string encoding."""

    def test_path_encoding_is_idempotent_on_encoded_values(self):
        """Test the whole-string pass leaves percent escapes alone."""
        assert encode_params({"a": "x y", "b": "100%"}) == "a=x+y&b=100%25"

    def test_non_string_values(self):
        """Test values are converted to strings."""
        assert encode_params({"doc_id": 42}) == "doc_id=42"
