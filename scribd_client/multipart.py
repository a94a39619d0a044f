"""
multipart/form-data framing for file uploads.

The body holds a single part named "file" and is streamed from disk, so
large documents never have to fit in memory.
"""

import os
import uuid
from typing import Callable, Iterator, Optional

from .constants import (
    DEFAULT_CONTENT_TYPE,
    MULTIPART_BOUNDARY_PREFIX,
    PARAM_FILE,
    UPLOAD_CHUNK_SIZE,
)
from .exceptions import UploadCancelledError
from .notifications import ProgressEvent


def make_boundary() -> str:
    """Generate a random per-request boundary token."""
    return MULTIPART_BOUNDARY_PREFIX + uuid.uuid4().hex


def part_header(boundary: str, filename: str, content_type: str) -> bytes:
    """Opening boundary and headers of the file part."""
    filename = filename.replace('"', "%22")
    return (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{PARAM_FILE}"; filename="{filename}"\r\n'
        f"Content-Type: {content_type}\r\n"
        f"\r\n"
    ).encode("utf-8")


def closing_boundary(boundary: str) -> bytes:
    """Trailing boundary, on a line by itself."""
    return f"\r\n--{boundary}--\r\n".encode("ascii")


class MultipartFileBody:
    """
    File-like multipart body with a known length.

    ``requests`` reads it chunk by chunk and sends an exact Content-Length.
    Every chunk handed out triggers the progress callback; a set
    ``cancel_event`` aborts the upload before the next chunk.
    """

    def __init__(self, path: str, content_type: Optional[str] = None,
                 boundary: Optional[str] = None,
                 progress: Optional[Callable[[ProgressEvent], None]] = None,
                 cancel_event=None, chunk_size: int = UPLOAD_CHUNK_SIZE):
        self.path = path
        self.boundary = boundary or make_boundary()
        self.file_content_type = content_type or DEFAULT_CONTENT_TYPE
        self.progress = progress
        self.cancel_event = cancel_event
        self.chunk_size = chunk_size

        self._header = part_header(self.boundary, os.path.basename(path), self.file_content_type)
        self._trailer = closing_boundary(self.boundary)
        self._file_size = os.path.getsize(path)

        self._stage = 0  # 0 header, 1 file, 2 trailer, 3 done
        self._offset = 0
        self._file = None
        self.bytes_sent = 0

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def __len__(self):
        return len(self._header) + self._file_size + len(self._trailer)

    def __iter__(self) -> Iterator[bytes]:
        return iter(lambda: self.read(self.chunk_size), b"")

    def _take(self, data: bytes, size: int) -> bytes:
        piece = data[self._offset:self._offset + size]
        self._offset += len(piece)
        if self._offset >= len(data):
            self._stage += 1
            self._offset = 0
        return piece

    def _next_piece(self, size: int) -> bytes:
        while self._stage < 3:
            if self._stage == 0:
                return self._take(self._header, size)

            if self._stage == 1:
                if self._file is None:
                    self._file = open(self.path, "rb")
                piece = self._file.read(min(size, self.chunk_size))
                if piece:
                    return piece
                self._file.close()
                self._stage = 2
                continue

            return self._take(self._trailer, size)
        return b""

    def read(self, size: int = -1) -> bytes:
        if self.cancel_event is not None and self.cancel_event.is_set():
            self.close()
            raise UploadCancelledError(f"upload of {self.path} was cancelled")

        if size is None or size < 0:
            size = len(self)

        chunks = []
        remaining = size
        while remaining > 0:
            piece = self._next_piece(remaining)
            if not piece:
                break
            chunks.append(piece)
            remaining -= len(piece)

        data = b"".join(chunks)
        if data:
            self.bytes_sent += len(data)
            if self.progress is not None:
                self.progress(ProgressEvent(self.bytes_sent, len(self)))
        return data

    def close(self):
        if self._file is not None and not self._file.closed:
            self._file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
