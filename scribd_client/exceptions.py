"""
Custom exceptions for Scribd client library.
"""

from typing import Optional

from .constants import ERR_UNEXPECTED


class ScribdClientError(Exception):
    """Base exception for Scribd client errors.

    Every error carries a numeric ``code`` so it can be published on the
    error channel next to the codes returned by the service.
    """

    default_code = ERR_UNEXPECTED

    def __init__(self, message: str, code: Optional[int] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.code = self.default_code if code is None else code
        self.cause = cause


class ConfigurationError(ScribdClientError):
    """Raised when client configuration is invalid or incomplete."""
    pass


class MissingCredentialsError(ConfigurationError):
    """Raised when a request cannot carry the API key or signature it needs."""
    pass


class TransportError(ScribdClientError):
    """Raised when the network exchange fails."""
    pass


class UploadCancelledError(TransportError):
    """Raised when an upload is cancelled while the body is streamed."""
    pass


class ProtocolError(ScribdClientError):
    """Raised when a response is not the XML document we expect."""
    pass


class RemoteError(ScribdClientError):
    """Raised when the service answers with an <error> element."""

    def __str__(self):
        return f"[Error {self.code}] {self.message}"
