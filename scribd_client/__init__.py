"""
Scribd Client Library

A Python client library for the Scribd document-hosting REST API. It builds
MD5-signed request URLs, uploads files as multipart/form-data and parses the
XML responses.

Example usage:
    from scribd_client import ScribdClient, documents

    client = ScribdClient("your-api-key", "your-secret-key", enforce_signing=True)
    doc = documents.upload(client, "report.pdf")
"""

from . import categories, collections, documents, search, security, users
from .client import CallResult, ScribdClient, UploadTask
from .config import ServiceConfig
from .exceptions import (
    ScribdClientError,
    ConfigurationError,
    MissingCredentialsError,
    TransportError,
    UploadCancelledError,
    ProtocolError,
    RemoteError
)
from .notifications import ErrorEvent, PostEvent, ProgressEvent
from .request import Request, SessionContext, build_request
from .response import Response, parse_response
from .signing import sign
from .transport import Transport
from .users import User
from .documents import Document
from .search import Criteria, SearchResult, SearchScope
from .collections import Collection, CollectionScope
from .categories import Category
from .constants import (
    API_URL,
    PARAM_API_SIG,
    DEFAULT_CONFIG,
    ERR_NO_API_KEY,
    ERR_NO_SECRET_KEY,
    ERR_NO_PUBLISHER_ID,
    ERR_UNEXPECTED
)

__version__ = "1.0.0"
__all__ = [
    "ScribdClient",
    "CallResult",
    "UploadTask",
    "ServiceConfig",
    "Transport",
    "Request",
    "SessionContext",
    "Response",
    "User",
    "Document",
    "ErrorEvent",
    "PostEvent",
    "ProgressEvent",
    "build_request",
    "parse_response",
    "sign",
    "documents",
    "users",
    "search",
    "collections",
    "categories",
    "security",
    "Criteria",
    "SearchResult",
    "SearchScope",
    "Collection",
    "CollectionScope",
    "Category",
    "ScribdClientError",
    "ConfigurationError",
    "MissingCredentialsError",
    "TransportError",
    "UploadCancelledError",
    "ProtocolError",
    "RemoteError",
    "API_URL",
    "PARAM_API_SIG",
    "DEFAULT_CONFIG",
    "ERR_NO_API_KEY",
    "ERR_NO_SECRET_KEY",
    "ERR_NO_PUBLISHER_ID",
    "ERR_UNEXPECTED"
]
