"""
Integration tests for the Scribd client against a local fake API server.
"""

import hashlib
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qsl, urlsplit

import pytest

from scribd_client import ScribdClient, documents, users

SECRET_KEY = "integration-secret"

SETTINGS_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<rsp stat="ok">
  <doc_id>{doc_id}</doc_id>
  <title>Document {doc_id}</title>
  <access>public</access>
  <access_key>key-{doc_id}</access_key>
</rsp>"""

LOGIN_XML = """<rsp stat="ok">
  <user_id>7</user_id>
  <username>tester</username>
  <name>Test User</name>
  <session_key>sess-1</session_key>
</rsp>"""


def _fail(code, message):
    return f'<rsp stat="fail"><error code="{code}" message="{message}"/></rsp>'


def _split_multipart(content_type, body):
    """Return (headers, file bytes) of a single-part multipart body."""
    boundary = content_type.split("boundary=", 1)[1].encode()
    opening = b"--" + boundary + b"\r\n"
    closing = b"\r\n--" + boundary + b"--\r\n"
    if not body.startswith(opening) or not body.endswith(closing):
        raise ValueError("bad multipart framing")
    headers, data = body[len(opening):-len(closing)].split(b"\r\n\r\n", 1)
    return headers.decode(), data


class FakeScribdHandler(BaseHTTPRequestHandler):
    """Answers a small subset of the REST API and checks signatures."""

    def log_message(self, format, *args):
        pass

    def _reply(self, xml, status=200):
        payload = xml.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/xml; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def _params(self):
        parts = urlsplit(self.path)
        return parts.path, dict(parse_qsl(parts.query, keep_blank_values=True))

    def _signature_valid(self, params):
        params = dict(params)
        received = params.pop("api_sig", None)
        source = "".join(key + value for key, value in sorted(params.items()))
        expected = hashlib.md5(SECRET_KEY.encode() + source.encode("utf-8")).hexdigest()
        return received == expected

    def do_GET(self):
        path, params = self._params()
        if path == "/broken":
            self._reply("", status=500)
            return
        if path == "/garbage":
            self._reply("this is not xml")
            return
        if not self._signature_valid(params):
            self._reply(_fail(401, "Invalid signature"))
            return

        method = params.get("method")
        if method == "docs.getSettings":
            self._reply(SETTINGS_TEMPLATE.format(doc_id=params["doc_id"]))
        elif method == "user.login":
            if params.get("password") == "pw":
                self._reply(LOGIN_XML)
            else:
                self._reply(_fail(650, "Invalid username or password"))
        elif method == "docs.getList":
            if params.get("session_key") != "sess-1":
                self._reply(_fail(401, "Not logged in"))
                return
            self._reply('<rsp stat="ok"><resultset list="true"><result>'
                        '<doc_id>99</doc_id><title>Mine</title>'
                        '<conversion_status>DONE</conversion_status>'
                        '</result></resultset></rsp>')
        else:
            self._reply(_fail(404, "Unknown method"))

    def do_POST(self):
        _, params = self._params()
        body = self.rfile.read(int(self.headers["Content-Length"]))

        if not self._signature_valid(params):
            self._reply(_fail(401, "Invalid signature"))
            return
        if params.get("method") != "docs.upload":
            self._reply(_fail(404, "Unknown method"))
            return

        try:
            headers, data = _split_multipart(self.headers["Content-Type"], body)
        except ValueError as e:
            self._reply(_fail(400, str(e)))
            return

        filename = headers.split('filename="', 1)[1].split('"', 1)[0]
        self._reply(f'<rsp stat="ok"><doc_id>{len(data)}</doc_id>'
                    f'<access_key>key-{filename}</access_key></rsp>')


class TestIntegration:
    """Integration tests with a local API server."""

    @pytest.fixture(scope="class")
    def server_url(self):
        """Start the fake API server for the test class."""
        server = ThreadingHTTPServer(("127.0.0.1", 0), FakeScribdHandler)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()

        yield f"http://127.0.0.1:{server.server_address[1]}"

        server.shutdown()
        server.server_close()
        thread.join(5)

    @pytest.fixture
    def client(self, server_url):
        """Create signing Scribd client."""
        with ScribdClient("test-key", SECRET_KEY, api_url=f"{server_url}/api",
                          enforce_signing=True) as client:
            yield client

    @pytest.fixture
    def upload_file(self, tmp_path):
        path = tmp_path / "report.pdf"
        path.write_bytes(b"%PDF-1.4 " + b"x" * 20000)
        return path

    def test_signed_call(self, client):
        """Test the server accepts the client's signature."""
        doc = documents.get_settings(client, 42)

        assert doc is not None
        assert doc.doc_id == 42
        assert doc.title == "Document 42"

    def test_wrong_secret_key(self, server_url):
        """Test a wrong secret is rejected by the server."""
        with ScribdClient("test-key", "wrong-secret", api_url=f"{server_url}/api",
                          enforce_signing=True) as client:
            errors = []
            client.errors.subscribe(errors.append)

            result = client.execute("docs.getSettings", {"doc_id": "1"})

        assert not result.ok
        assert [e.code for e in errors] == [401]

    def test_unicode_parameters(self, client):
        """Test non-ASCII values survive encoding and signing."""
        result = client.execute("docs.getSettings", {"doc_id": "5", "title": "Ünïcödé & more"})

        assert result.ok

    def test_upload(self, client, upload_file):
        """Test multipart upload reaches the server intact."""
        doc = documents.upload(client, str(upload_file))

        assert doc is not None
        assert doc.doc_id == len(upload_file.read_bytes())
        assert doc.access_key == "key-report.pdf"

    def test_upload_async_with_progress(self, client, upload_file):
        """Test asynchronous upload publishes progress and completes."""
        events = []
        client.upload_progress.subscribe(events.append)

        task = client.upload_async("docs.upload", {"file": str(upload_file)})
        result = task.result(timeout=10)

        assert result.ok
        assert events
        assert events[-1].bytes_sent == events[-1].total_bytes

    def test_login_then_list(self, client):
        """Test the session key from login is used for later calls."""
        assert users.login(client, "tester", "pw")

        docs = documents.get_list(client)

        assert [doc.doc_id for doc in docs] == [99]

    def test_login_failure(self, client):
        """Test a rejected login leaves the client logged out."""
        assert users.login(client, "tester", "bad") is False
        assert not client.is_user_logged_in

    def test_http_error(self, server_url):
        """Test a non-2xx answer is reported as a transport error."""
        with ScribdClient("test-key", api_url=f"{server_url}/broken") as client:
            result = client.execute("docs.getSettings", {"doc_id": "1"})

        assert result.response is None
        assert result.error is not None

    def test_unparseable_answer(self, server_url):
        """Test a garbage answer gives an empty response, not an exception."""
        with ScribdClient("test-key", api_url=f"{server_url}/garbage") as client:
            errors = []
            client.errors.subscribe(errors.append)

            response = client.call("docs.getSettings", {"doc_id": "1"})

        assert response is not None
        assert not response
        assert [e.code for e in errors] == [666]

    def test_concurrent_requests(self, client):
        """Test concurrent signed calls."""
        results = []

        def make_request(i):
            results.append(client.execute("docs.getSettings", {"doc_id": str(i)}).ok)

        threads = [threading.Thread(target=make_request, args=(i,)) for i in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == [True] * 5
