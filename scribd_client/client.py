"""
Scribd API client.

Builds and signs each call, sends it through the transport and parses the
XML answer. Failures never escape a call: they are returned in a
CallResult and published on the client's error channel.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Union
from urllib.parse import urlencode

from .config import ServiceConfig
from .constants import ERR_NO_PUBLISHER_ID, ERR_UNEXPECTED, ERROR_MESSAGES, SLURP_URL
from .exceptions import (
    ConfigurationError,
    ProtocolError,
    ScribdClientError,
    TransportError,
    UploadCancelledError,
)
from .notifications import ErrorNotifier, Notifier, PostEvent, ProgressEvent
from .request import Request, SessionContext, build_request
from .response import Response, parse_response
from .transport import Transport
from .users import User

logger = logging.getLogger(__name__)


@dataclass
class CallResult:
    """Outcome of one call: a response, an error, or both."""

    request: Optional[Request]
    response: Optional[Response] = None
    error: Optional[ScribdClientError] = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.response is not None and self.response.ok


class UploadTask:
    """Handle on an upload running on a worker thread."""

    def __init__(self, future: "Future[CallResult]", cancel_event: threading.Event,
                 request: Optional[Request] = None):
        self.future = future
        self.request = request
        self._cancel_event = cancel_event

    def cancel(self) -> bool:
        """
        Ask the upload to stop.

        A queued upload ends without sending anything; a running one aborts
        before the next chunk. Either way the future and the completion
        callback receive a cancelled CallResult.
        """
        self._cancel_event.set()
        return True

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: Optional[float] = None) -> CallResult:
        return self.future.result(timeout)


class ScribdClient:
    """
    Client for the Scribd REST API.

    Holds the service configuration, the transport, the current user and
    the notification channels (errors, before/after post, upload progress).
    """

    def __init__(self, api_key: str = "", secret_key: Optional[Union[str, bytes]] = None,
                 config: Optional[ServiceConfig] = None,
                 transport: Optional[Transport] = None, **options):
        """
        Initialize Scribd client.

        Args:
            api_key: Scribd API key
            secret_key: Shared secret used to sign calls
            config: Prebuilt configuration; api_key, secret_key and options
                are ignored when given
            transport: Transport to use instead of a new requests session
            **options: Configuration options (see DEFAULT_CONFIG)
        """
        self._config = config or ServiceConfig.create(api_key, secret_key, **options)
        self.transport = transport or Transport(self._config)

        self.errors = ErrorNotifier()
        self.before_post: Notifier[PostEvent] = Notifier("before_post")
        self.after_post: Notifier[PostEvent] = Notifier("after_post")
        self.upload_progress: Notifier[ProgressEvent] = Notifier("upload_progress")

        self.user = User()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

    @property
    def config(self) -> ServiceConfig:
        """Configuration fixed at construction; the transport shares it."""
        return self._config

    @property
    def is_user_logged_in(self) -> bool:
        return self.user.is_logged_in and bool(self.user.name)

    def _report(self, error: ScribdClientError):
        logger.warning("Scribd error %s: %s", error.code, error.message)
        self.errors.report(error)

    def prepare(self, method: str, params: Optional[Mapping[str, str]] = None,
                session: Optional[SessionContext] = None, user: Optional[User] = None,
                content_type: Optional[str] = None) -> Request:
        """
        Build a request for this client.

        The session context is, in order: ``session``, ``user``'s context,
        then the current user's context.

        Raises:
            MissingCredentialsError: If the API key or secret is missing
        """
        if session is None:
            session = (user or self.user).session_context()
        return build_request(self.config, method, params, session, content_type)

    def post_request(self, request: Request,
                     progress: Optional[Callable[[ProgressEvent], None]] = None,
                     cancel_event: Optional[threading.Event] = None) -> CallResult:
        """
        Send a built request and parse the answer.

        Server errors are published on ``errors`` one code at a time. Any
        failure in the network phase is published too and leaves
        ``response`` as None.

        Args:
            request: Request from prepare()
            progress: Progress callback for uploads
            cancel_event: Event cancelling an upload

        Returns:
            CallResult
        """
        event = PostEvent(request.url, request.method)
        self.before_post.notify(event)
        if event.cancel:
            logger.info("Call to %s cancelled by a before_post observer", request.method)
            return CallResult(request, cancelled=True)

        result = CallResult(request)
        try:
            if request.is_upload:
                payload = self.transport.upload_file(
                    request.file_path, request.url, request.content_type,
                    progress=progress or self.upload_progress.notify,
                    cancel_event=cancel_event,
                )
            else:
                payload = self.transport.get(request.url)

            response = parse_response(payload, self.errors)
            result.response = response
            event.response_xml = response.xml

            if not response:
                result.error = ProtocolError("response could not be parsed")
            elif not response.ok:
                remote_errors = response.remote_errors()
                for error in remote_errors:
                    self._report(error)
                result.error = remote_errors[0] if remote_errors else ProtocolError(
                    f"response status is {response.status!r}")
        except TransportError as e:
            result.error = e
            result.cancelled = isinstance(e, UploadCancelledError)
            self._report(e)
        except Exception as e:
            logger.error("Unexpected failure calling %s", request.method, exc_info=True)
            result.error = ScribdClientError(str(e), code=ERR_UNEXPECTED, cause=e)
            self._report(result.error)
        finally:
            self.after_post.notify(event)

        return result

    def execute(self, method: str, params: Optional[Mapping[str, str]] = None,
                session: Optional[SessionContext] = None, user: Optional[User] = None,
                content_type: Optional[str] = None) -> CallResult:
        """Build and send a call; missing credentials abort before any I/O."""
        try:
            request = self.prepare(method, params, session, user, content_type)
        except ConfigurationError as e:
            self._report(e)
            return CallResult(None, error=e)

        return self.post_request(request)

    def call(self, method: str, params: Optional[Mapping[str, str]] = None,
             **kwargs) -> Optional[Response]:
        """
        Make a call and return its parsed response.

        Returns:
            Response, or None when the call could not be made
        """
        return self.execute(method, params, **kwargs).response

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.config.max_workers,
                    thread_name_prefix="scribd-upload",
                )
            return self._executor

    def upload_async(self, method: str, params: Mapping[str, str],
                     on_complete: Optional[Callable[[CallResult], None]] = None,
                     session: Optional[SessionContext] = None, user: Optional[User] = None,
                     content_type: Optional[str] = None) -> UploadTask:
        """
        Upload a file on a worker thread.

        Progress is published on ``upload_progress``; the result is handed to
        ``on_complete`` and to the returned task's future.

        Args:
            method: Upload method, e.g. "docs.upload"
            params: Parameters, including "file" with the local path
            on_complete: Called with the CallResult when the upload ends

        Returns:
            UploadTask
        """
        cancel_event = threading.Event()

        try:
            request = self.prepare(method, params, session, user, content_type)
        except ConfigurationError as e:
            self._report(e)
            future: "Future[CallResult]" = Future()
            future.set_result(CallResult(None, error=e))
            return UploadTask(future, cancel_event)

        if not request.is_upload:
            raise ValueError(f"{method} has no file parameter to upload")

        def run() -> CallResult:
            if cancel_event.is_set():
                # Cancelled while still queued
                error = UploadCancelledError(f"upload of {request.file_path} was cancelled")
                self._report(error)
                result = CallResult(request, error=error, cancelled=True)
            else:
                result = self.post_request(request, cancel_event=cancel_event)

            if on_complete is not None:
                try:
                    on_complete(result)
                except Exception:
                    logger.exception("Upload completion callback failed")
            return result

        future = self._get_executor().submit(run)
        return UploadTask(future, cancel_event, request)

    def slurpify(self, url: str, display_mode: str = "scribd", private: bool = False) -> str:
        """
        Build a slurp link that imports ``url`` into Scribd.

        Returns an empty string and reports code 10004 when no publisher id
        is configured.
        """
        if not self.config.publisher_id:
            self._report(ConfigurationError(ERROR_MESSAGES[ERR_NO_PUBLISHER_ID],
                                            code=ERR_NO_PUBLISHER_ID))
            return ""

        query = urlencode({
            "url": url,
            "display_mode": str(getattr(display_mode, "value", display_mode)).lower(),
            "privacy": "private" if private else "public",
            "publisher_id": self.config.publisher_id,
        })
        return f"{SLURP_URL}?{query}"

    def close(self):
        """Close HTTP session and stop upload workers."""
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
        self.transport.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
