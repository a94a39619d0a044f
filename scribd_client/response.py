"""
Response parsing for the Scribd REST API.

Every answer is an XML document rooted at ``<rsp stat="ok|fail">`` with
zero or more ``<error code=".." message=".."/>`` elements next to the
method-specific result nodes.
"""

import logging
from typing import Dict, Iterator, List, Optional, Union
from xml.etree import ElementTree

from .constants import ERR_UNEXPECTED, STATUS_OK, STATUS_UNKNOWN
from .exceptions import ProtocolError, RemoteError

logger = logging.getLogger(__name__)


class Response:
    """Parsed response document.

    ``root`` is ``None`` when the payload could not be parsed; every view
    then degrades to an empty result instead of raising.
    """

    def __init__(self, root: Optional[ElementTree.Element] = None, xml: str = ""):
        self.root = root
        self.xml = xml

    def __bool__(self):
        return self.root is not None

    def __repr__(self):
        return f"<Response status={self.status!r} errors={self.errors!r}>"

    @property
    def status(self) -> str:
        """Value of the root's stat attribute, or "unknown"."""
        if self.root is None:
            return STATUS_UNKNOWN
        return self.root.get("stat") or STATUS_UNKNOWN

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    @property
    def errors(self) -> Dict[int, str]:
        """Error code to message for every <error> in the document."""
        result: Dict[int, str] = {}
        if self.root is None:
            return result

        for node in self.root.iter("error"):
            code = node.get("code")
            try:
                result[int(code)] = node.get("message", "")
            except (TypeError, ValueError):
                logger.warning("Skipping <error> with non-numeric code %r", code)
        return result

    @property
    def is_usable(self) -> bool:
        """True when the document parsed and carries no errors."""
        return self.root is not None and not self.errors

    def find(self, path: str) -> Optional[ElementTree.Element]:
        if self.root is None:
            return None
        return self.root.find(path)

    def findtext(self, path: str, default: Optional[str] = None) -> Optional[str]:
        if self.root is None:
            return default
        return self.root.findtext(path, default)

    def findall(self, path: str) -> List[ElementTree.Element]:
        if self.root is None:
            return []
        return self.root.findall(path)

    def iter(self, tag: str) -> Iterator[ElementTree.Element]:
        if self.root is None:
            return iter(())
        return self.root.iter(tag)

    def require_text(self, path: str) -> str:
        """
        Text of a node the caller cannot do without.

        Raises:
            ProtocolError: If the node is missing
        """
        value = self.findtext(path)
        if value is None:
            raise ProtocolError(f"response is missing <{path}>")
        return value

    def remote_errors(self) -> List[RemoteError]:
        return [RemoteError(message, code=code) for code, message in self.errors.items()]

    def raise_for_errors(self):
        """Raise the first server error when the status is not "ok"."""
        if self.ok:
            return
        errors = self.remote_errors()
        if errors:
            raise errors[0]
        raise ProtocolError(f"response status is {self.status!r}")


def parse_response(data: Union[bytes, str, None], notifier=None) -> Response:
    """
    Parse a raw payload into a Response.

    A malformed payload is reported on the notifier (code 666) and yields an
    empty Response rather than an exception.

    Args:
        data: Raw response body
        notifier: Optional ErrorNotifier receiving parse faults

    Returns:
        Response, possibly empty
    """
    if isinstance(data, bytes):
        payload = data
        text = data.decode("utf-8", errors="replace")
    else:
        payload = text = data or ""

    try:
        root = ElementTree.fromstring(payload)
    except (ElementTree.ParseError, LookupError, ValueError) as e:
        # LookupError: the XML declaration names an unknown encoding
        logger.warning("Malformed response payload: %s", e)
        if notifier is not None:
            notifier.report(ProtocolError(str(e), code=ERR_UNEXPECTED, cause=e))
        return Response(xml=text)

    return Response(root, text)
