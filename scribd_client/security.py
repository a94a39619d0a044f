"""
Access control for secure documents (security.*).
"""

import logging
from typing import List, Optional

from .documents import Document, _to_int_or_none
from .exceptions import ProtocolError

logger = logging.getLogger(__name__)


def _user_identifier(client, user_identifier: Optional[str]) -> str:
    identifier = user_identifier or client.user.user_name
    if not identifier:
        raise ValueError("user_identifier is required when no user is logged in")
    return identifier


def set_access(client, allowed: bool, doc_id: int = 0,
               user_identifier: Optional[str] = None) -> bool:
    """
    Disable or re-enable a user's access to secure documents.

    Initial access is granted through the embed code; this call only
    revokes or restores it.

    Args:
        client: ScribdClient
        allowed: Whether access is allowed
        doc_id: Restrict the change to one document (0 means all documents)
        user_identifier: Defaults to the current user's username
    """
    params = {
        "user_identifier": _user_identifier(client, user_identifier),
        "allowed": "1" if allowed else "0",
    }
    if doc_id > 0:
        params["doc_id"] = str(doc_id)

    response = client.call("security.setAccess", params)
    return response is not None and response.is_usable


def get_document_access_list(client, doc_id: int) -> List[str]:
    """User identifiers currently allowed to view a document."""
    response = client.call("security.getDocumentAccessList", {"doc_id": str(doc_id)})
    if response is None or not response.is_usable:
        return []

    return [node.findtext("user_identifier") for node in response.iter("result")
            if node.findtext("user_identifier") is not None]


def get_user_access_list(client, user_identifier: Optional[str] = None) -> List[Document]:
    """Secure documents a user is allowed to access."""
    response = client.call("security.getUserAccessList",
                           {"user_identifier": _user_identifier(client, user_identifier)})
    if response is None or not response.is_usable:
        return []

    documents = []
    for node in response.iter("result"):
        try:
            doc = Document.from_list_item(node)
        except ProtocolError as e:
            client.errors.report(e)
            continue
        doc.page_count = _to_int_or_none(node.findtext("page_count"))
        documents.append(doc)

    logger.debug("%d secure documents accessible", len(documents))
    return documents
