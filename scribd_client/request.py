"""
Request construction for the Scribd REST API.

Turns a method name and a parameter set into a fully encoded, optionally
signed request URL.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional
from urllib.parse import quote, quote_plus

from .config import ServiceConfig
from .constants import (
    DOCUMENT_NAMESPACE,
    ERR_NO_API_KEY,
    ERR_NO_SECRET_KEY,
    ERROR_MESSAGES,
    PARAM_API_KEY,
    PARAM_API_SIG,
    PARAM_FILE,
    PARAM_MY_USER_ID,
    PARAM_SESSION_KEY,
)
from .exceptions import MissingCredentialsError
from .signing import sign

logger = logging.getLogger(__name__)

# Characters the whole-query path encoding leaves untouched
_PATH_SAFE = "!#$%&'()*+,/:;=?@[]~"


@dataclass(frozen=True)
class SessionContext:
    """Identity attached to a call: a session key or a phantom user id."""

    session_key: Optional[str] = None
    phantom_id: Optional[str] = None

    def __bool__(self):
        return bool(self.session_key or self.phantom_id)


@dataclass
class Request:
    """A built request, ready to hand to the transport."""

    method: str
    params: Dict[str, str]
    url: str
    session: Optional[SessionContext] = None
    signing_required: bool = False
    signature: Optional[str] = None
    file_path: Optional[str] = None
    content_type: Optional[str] = field(default=None, compare=False)

    @property
    def is_upload(self) -> bool:
        return self.file_path is not None

    @property
    def redacted_url(self) -> str:
        """URL safe for logs: signature and session key removed."""
        url = self.url
        if self.signature:
            url = url.replace(self.signature, "***")
        session_key = self.params.get(PARAM_SESSION_KEY)
        if session_key:
            url = url.replace(quote_plus(session_key), "***")
        return url


def encode_params(params: Mapping[str, str]) -> str:
    """
    Encode a parameter set as a query string.

    Every value is URL-encoded, then the joined string is path-encoded as a
    whole. The second pass only touches spaces and non-ASCII characters and
    is kept for wire compatibility with the service.
    """
    query = "&".join(f"{key}={quote_plus(str(value))}" for key, value in params.items())
    return quote(query, safe=_PATH_SAFE)


def _inject_session(method: str, params: Dict[str, str],
                    session: Optional[SessionContext]):
    if session is None:
        return

    if session.session_key:
        params.setdefault(PARAM_SESSION_KEY, session.session_key)
    elif session.phantom_id and method.startswith(DOCUMENT_NAMESPACE):
        params.setdefault(PARAM_MY_USER_ID, session.phantom_id)


def build_request(config: ServiceConfig, method: str,
                  params: Optional[Mapping[str, str]] = None,
                  session: Optional[SessionContext] = None,
                  content_type: Optional[str] = None) -> Request:
    """
    Build and sign a request.

    Args:
        config: Service configuration (API key, secret, signing flag)
        method: REST method name, e.g. "docs.getSettings"
        params: Method parameters; a "file" entry is taken out and sent
            as the multipart body instead of the query string
        session: Session context of the calling user
        content_type: Content type of the uploaded file, if any

    Returns:
        Request with the encoded URL

    Raises:
        MissingCredentialsError: If the API key is empty, or signing is
            enforced and no secret key is configured
    """
    if not config.api_key:
        raise MissingCredentialsError(ERROR_MESSAGES[ERR_NO_API_KEY], code=ERR_NO_API_KEY)

    if config.enforce_signing and not config.can_sign:
        raise MissingCredentialsError(ERROR_MESSAGES[ERR_NO_SECRET_KEY], code=ERR_NO_SECRET_KEY)

    values = {key: str(value) for key, value in (params or {}).items()}
    file_path = values.pop(PARAM_FILE, None)

    _inject_session(method, values, session)
    values.setdefault(PARAM_API_KEY, config.api_key)

    url = f"{config.api_url}?method={method}&{encode_params(values)}"

    signature = None
    if config.enforce_signing:
        signature = sign(method, values, config.secret_key)
        url += f"&{PARAM_API_SIG}={signature}"

    request = Request(
        method=method,
        params=values,
        url=url,
        session=session,
        signing_required=config.enforce_signing,
        signature=signature,
        file_path=file_path,
        content_type=content_type,
    )
    logger.debug("Built %s request: %s", method, request.redacted_url)
    return request
