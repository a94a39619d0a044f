"""
Observer channels for errors, posts and upload progress.

Notifications are fire-and-forget: an observer that raises is logged and
skipped, and the call that triggered the notification carries on.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, TypeVar

from .exceptions import ScribdClientError

logger = logging.getLogger(__name__)

E = TypeVar("E")


@dataclass(frozen=True)
class ErrorEvent:
    """An error reported by the client or returned by the service."""

    code: int
    message: str
    cause: Optional[BaseException] = None


@dataclass
class PostEvent:
    """A call about to be made (before_post) or just made (after_post)."""

    url: str
    method: str
    response_xml: Optional[str] = None
    cancel: bool = False


@dataclass(frozen=True)
class ProgressEvent:
    """Bytes of a multipart body written so far."""

    bytes_sent: int
    total_bytes: int

    @property
    def percentage(self) -> int:
        if not self.total_bytes:
            return 100
        return int(self.bytes_sent * 100 / self.total_bytes)


class Notifier(Generic[E]):
    """A list of callbacks receiving one kind of event."""

    def __init__(self, name: str):
        self.name = name
        self._observers: List[Callable[[E], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, observer: Callable[[E], None]) -> Callable[[E], None]:
        """Add an observer; returns it so this can be used as a decorator."""
        with self._lock:
            self._observers.append(observer)
        return observer

    def unsubscribe(self, observer: Callable[[E], None]):
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def __len__(self):
        return len(self._observers)

    def notify(self, event: E):
        with self._lock:
            observers = list(self._observers)

        for observer in observers:
            try:
                observer(event)
            except Exception:
                logger.exception("%s observer %r failed", self.name, observer)


class ErrorNotifier(Notifier[ErrorEvent]):
    """Process errors as (code, message, cause) events."""

    def __init__(self):
        super().__init__("error")

    def report(self, error: ScribdClientError):
        """Publish a client error."""
        self.notify(ErrorEvent(error.code, error.message, error.cause))
