"""
Network exchange with the Scribd REST API.

Two call shapes: a plain GET of a request URL, and a multipart POST that
streams a local file. Neither retries; callers own the retry policy.
"""

import logging
from typing import Callable, Optional

import requests

from .config import ServiceConfig
from .exceptions import TransportError, UploadCancelledError
from .multipart import MultipartFileBody
from .notifications import ProgressEvent

logger = logging.getLogger(__name__)


class Transport:
    """HTTP transport bound to one ServiceConfig."""

    def __init__(self, config: ServiceConfig, session: Optional[requests.Session] = None):
        self.config = config

        # Create HTTP session
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": config.user_agent})
        if config.proxies:
            self.session.proxies.update(config.proxies)

    def _send(self, method: str, url: str, **kwargs) -> bytes:
        try:
            response = self.session.request(method, url, **kwargs)
        except UploadCancelledError:
            raise
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Request to Scribd timed out: {e}", cause=e)
        except requests.exceptions.ConnectionError as e:
            # requests wraps errors raised while streaming the body
            if isinstance(e.__context__, UploadCancelledError):
                raise e.__context__
            raise TransportError(f"Failed to connect to Scribd: {e}", cause=e)
        except requests.RequestException as e:
            raise TransportError(f"HTTP request failed: {e}", cause=e)

        if not response.ok:
            raise TransportError(
                f"Scribd answered {response.status_code} {response.reason}",
                cause=requests.HTTPError(response=response),
            )
        return response.content

    def get(self, url: str) -> bytes:
        """
        Perform a simple call.

        Args:
            url: Fully built request URL

        Returns:
            Raw response body

        Raises:
            TransportError: On network failure, timeout or non-2xx status
        """
        return self._send("GET", url, timeout=self.config.timeout)

    def upload_file(self, path: str, url: str, content_type: Optional[str] = None,
                    progress: Optional[Callable[[ProgressEvent], None]] = None,
                    cancel_event=None) -> bytes:
        """
        POST a local file as a multipart/form-data body.

        Persistent connections and redirects are disabled and no timeout is
        applied, since upload durations are not predictable.

        Args:
            path: Local file to upload
            url: Fully built request URL (without the file parameter)
            content_type: Content type of the file part
            progress: Called with a ProgressEvent for every chunk written
            cancel_event: threading.Event aborting the upload when set

        Returns:
            Raw response body

        Raises:
            TransportError: On network or file access failure
            UploadCancelledError: If cancel_event was set mid-upload
        """
        try:
            body = MultipartFileBody(path, content_type, progress=progress,
                                     cancel_event=cancel_event)
        except OSError as e:
            raise TransportError(f"Cannot read upload file {path}: {e}", cause=e)

        headers = {
            "Content-Type": body.content_type,
            "Content-Length": str(len(body)),
            "Connection": "close",
            "Accept": "*/*",
        }

        logger.info("Uploading %s (%d bytes)", path, len(body))
        with body:
            try:
                return self._send("POST", url, data=body, headers=headers,
                                  allow_redirects=False, timeout=None)
            except OSError as e:
                raise TransportError(f"Cannot read upload file {path}: {e}", cause=e)

    def close(self):
        """Close HTTP session."""
        if self.session:
            self.session.close()
