"""
Scribd documents.

Thin wrappers over the docs.* methods: upload, read and change settings,
download links, conversion status, listing and deletion.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Callable, List, Optional, Tuple

from .exceptions import ProtocolError
from .response import Response

logger = logging.getLogger(__name__)


class AccessType(Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class ConversionStatus(Enum):
    NONE_SPECIFIED = "none"
    DISPLAYABLE = "displayable"
    DONE = "done"
    ERROR = "error"
    PROCESSING = "processing"
    PUBLISHED = "published"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ConversionStatus":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.NONE_SPECIFIED


class DownloadAndDRM(Enum):
    """Download options for paid content."""
    DEFAULT = None
    DOWNLOAD_PDF = "download-pdf"
    DOWNLOAD_PDF_AND_ORIGINAL = "download-pdf-orig"
    DOWNLOAD_DRM = "download-drm"
    VIEW_ONLY = "view-only"


class DisplayMode(Enum):
    FULLSCREEN = "fullscreen"
    SCRIBD = "scribd"


@dataclass
class Document:
    """Scribd document representation."""
    doc_id: int = 0
    title: str = ""
    description: str = ""
    access_key: Optional[str] = None
    access: AccessType = AccessType.PUBLIC
    secret_password: Optional[str] = None
    conversion_status: ConversionStatus = ConversionStatus.NONE_SPECIFIED

    # Settings
    license: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    thumbnail_url: Optional[str] = None
    link_back_url: Optional[str] = None
    page_count: Optional[int] = None
    category_id: Optional[int] = None
    download_formats: List[str] = field(default_factory=list)

    # Publishing
    author: Optional[str] = None
    publisher: Optional[str] = None
    when_published: Optional[str] = None
    edition: Optional[str] = None

    @property
    def large_image_url(self) -> Optional[str]:
        if not self.thumbnail_url:
            return None
        return self.thumbnail_url.replace("thumb", "large")

    def _apply_security(self, node):
        password = node.findtext("secret_password")
        if password is not None:
            self.access = AccessType.PRIVATE
            self.secret_password = password

    @classmethod
    def from_upload(cls, response: Response) -> "Document":
        """Build from a docs.upload / docs.uploadFromUrl answer."""
        doc = cls(
            doc_id=_to_int(response.require_text("doc_id")),
            access_key=response.require_text("access_key"),
        )
        doc._apply_security(response.root)
        return doc

    @classmethod
    def from_settings(cls, response: Response) -> "Document":
        """Build from a docs.getSettings answer."""
        node = response.root
        doc = cls(
            doc_id=_to_int(response.require_text("doc_id")),
            title=response.findtext("title", "").strip(),
            description=response.findtext("description", "").strip(),
            access_key=response.findtext("access_key"),
            access=AccessType.PRIVATE if response.findtext("access") == "private" else AccessType.PUBLIC,
            license=(response.findtext("license") or "").lower() or None,
            thumbnail_url=response.findtext("thumbnail_url"),
            link_back_url=response.findtext("link_back_url"),
            author=response.findtext("author"),
            publisher=response.findtext("publisher"),
            when_published=response.findtext("when_published") or None,
            edition=response.findtext("edition"),
        )

        tags = response.findtext("tags")
        if tags:
            doc.tags = [tag.strip() for tag in tags.split(",") if tag.strip()]

        formats = response.findtext("download_formats")
        if formats:
            doc.download_formats = [f.strip() for f in formats.split(",") if f.strip()]

        doc.page_count = _to_int_or_none(response.findtext("page_count"))
        doc.category_id = _to_int_or_none(response.findtext("category_id"))
        doc._apply_security(node)
        return doc

    @classmethod
    def from_list_item(cls, node) -> "Document":
        """Build from one <result> of a docs.getList answer."""
        doc_id = node.findtext("doc_id")
        if doc_id is None:
            raise ProtocolError("list result is missing <doc_id>")

        doc = cls(
            doc_id=_to_int(doc_id),
            title=(node.findtext("title") or "").strip(),
            description=(node.findtext("description") or "").strip(),
            access_key=node.findtext("access_key"),
            conversion_status=ConversionStatus.parse(node.findtext("conversion_status")),
        )
        doc._apply_security(node)
        return doc


def _to_int(value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as e:
        raise ProtocolError(f"expected an integer, got {value!r}", cause=e)


def _to_int_or_none(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _is_url(path: str) -> bool:
    return path.startswith("http://") or path.startswith("https://")


def _upload_params(path: str, access: AccessType, rev_id: int, doc_type: Optional[str],
                   paid_content: bool, download_type: DownloadAndDRM) -> Tuple[str, dict]:
    if _is_url(path):
        method, params = "docs.uploadFromUrl", {"url": path}
    else:
        method, params = "docs.upload", {"file": path}

    if doc_type:
        params["doc_type"] = doc_type.lower()

    params["access"] = access.value

    if rev_id:
        params["rev_id"] = str(rev_id)

    if paid_content:
        params["paid_content"] = "1"
        if download_type is not DownloadAndDRM.DEFAULT:
            params["download_and_drm"] = download_type.value

    return method, params


def _parse_or_report(client, response: Optional[Response], parse) -> Optional[Document]:
    if response is None or not response.is_usable:
        return None
    try:
        return parse(response)
    except ProtocolError as e:
        client.errors.report(e)
        return None


def upload(client, path: str, access: AccessType = AccessType.PUBLIC, rev_id: int = 0,
           doc_type: Optional[str] = None, paid_content: bool = False,
           download_type: DownloadAndDRM = DownloadAndDRM.DEFAULT,
           content_type: Optional[str] = None) -> Optional[Document]:
    """
    Upload a local file, or import one from an http(s) URL.

    Args:
        client: ScribdClient
        path: Local file path or http(s) URL
        access: Public or private
        rev_id: Document id to replace with a new revision
        doc_type: File extension hint, e.g. "pdf"
        paid_content: Sell the document in the Scribd store
        download_type: Download options for paid content
        content_type: Content type of the uploaded file part

    Returns:
        The new Document, or None if the upload failed
    """
    method, params = _upload_params(path, access, rev_id, doc_type, paid_content, download_type)
    response = client.call(method, params, content_type=content_type)
    return _parse_or_report(client, response, Document.from_upload)


def upload_async(client, path: str, on_uploaded: Optional[Callable[[Optional[Document]], None]] = None,
                 access: AccessType = AccessType.PUBLIC, rev_id: int = 0,
                 doc_type: Optional[str] = None, content_type: Optional[str] = None):
    """
    Upload a local file on a worker thread.

    ``on_uploaded`` receives the new Document (or None on failure). Progress
    is published on ``client.upload_progress``.

    Returns:
        UploadTask
    """
    if _is_url(path):
        raise ValueError("asynchronous uploads need a local file")

    method, params = _upload_params(path, access, rev_id, doc_type, False, DownloadAndDRM.DEFAULT)

    def completed(result):
        document = _parse_or_report(client, result.response, Document.from_upload)
        if on_uploaded is not None:
            on_uploaded(document)

    return client.upload_async(method, params, on_complete=completed, content_type=content_type)


def upload_stream(client, stream: BinaryIO, **kwargs) -> Optional[Document]:
    """
    Upload an in-memory or open binary stream.

    The stream is staged to a temporary file (under the configured temp_dir
    when set) which is removed afterwards.
    """
    stream.seek(0)
    data = stream.read()
    if not data:
        return None

    fd, temp_path = tempfile.mkstemp(dir=client.config.temp_dir)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        return upload(client, temp_path, **kwargs)
    finally:
        try:
            os.remove(temp_path)
        except OSError as e:
            logger.warning("Could not remove staged upload %s: %s", temp_path, e)


def upload_thumbnail(client, doc_id: int, path: str, content_type: Optional[str] = None) -> bool:
    """Replace a document's thumbnail image."""
    response = client.call("docs.uploadThumb", {"doc_id": str(doc_id), "file": path},
                           content_type=content_type)
    return response is not None and response.ok


def get_settings(client, doc_id: int) -> Optional[Document]:
    """Fetch a document's metadata and settings."""
    response = client.call("docs.getSettings", {"doc_id": str(doc_id)})
    return _parse_or_report(client, response, Document.from_settings)


def save(client, document: Document) -> bool:
    """Push a document's editable settings (docs.changeSettings)."""
    params = {
        "doc_ids": str(document.doc_id),
        "title": document.title,
        "description": document.description,
        "access": document.access.value,
    }
    if document.license:
        params["license"] = document.license
    if document.tags:
        params["tags"] = ",".join(document.tags)
    if document.link_back_url:
        params["link_back_url"] = document.link_back_url
    if document.category_id:
        params["category_id"] = str(document.category_id)
    for name in ("author", "publisher", "when_published", "edition"):
        value = getattr(document, name)
        if value:
            params[name] = value

    response = client.call("docs.changeSettings", params)
    return response is not None and response.ok


def get_download_url(client, doc_id: int, doc_type: str = "pdf") -> Optional[str]:
    """Direct download link for a document in the given format."""
    response = client.call("docs.getDownloadUrl", {"doc_id": str(doc_id), "doc_type": doc_type.lower()})
    if response is None or not response.is_usable:
        return None
    return response.findtext("download_link")


def get_conversion_status(client, doc_id: int) -> ConversionStatus:
    response = client.call("docs.getConversionStatus", {"doc_id": str(doc_id)})
    if response is None or not response.is_usable:
        return ConversionStatus.NONE_SPECIFIED
    return ConversionStatus.parse(response.findtext("conversion_status"))


def delete(client, doc_id: int) -> bool:
    response = client.call("docs.delete", {"doc_id": str(doc_id)})
    return response is not None and response.ok


def get_list(client, user=None, limit: int = 1000, offset: int = 1,
             include_details: bool = False) -> List[Document]:
    """
    List a user's documents.

    Args:
        client: ScribdClient
        user: User whose documents to list (defaults to the current user)
        limit: Maximum number of documents
        offset: Offset into the list
        include_details: Fetch full settings for every document

    Returns:
        List of Document
    """
    response = client.call("docs.getList", {"limit": str(limit), "offset": str(offset)}, user=user)
    if response is None or not response.is_usable:
        return []

    documents = []
    for node in response.iter("result"):
        try:
            doc = Document.from_list_item(node)
        except ProtocolError as e:
            client.errors.report(e)
            continue

        if include_details:
            detailed = get_settings(client, doc.doc_id)
            if detailed is not None:
                detailed.conversion_status = doc.conversion_status
                doc = detailed
        documents.append(doc)
    return documents
