"""
Scribd document search (docs.search).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Union

from .documents import Document, _to_int_or_none
from .exceptions import ProtocolError

logger = logging.getLogger(__name__)

MAX_RESULTS = 1000
MAX_START_INDEX = 1000


class SearchScope(Enum):
    ALL = "all"
    USER = "user"
    ACCOUNT = "account"


@dataclass(frozen=True)
class Criteria:
    """What to search for and which page of results to return."""
    query: str
    scope: SearchScope = SearchScope.ALL
    max_results: int = 10
    start_index: int = 1

    def clamped(self) -> "Criteria":
        """Criteria with paging forced into the range the service accepts."""
        max_results = min(self.max_results, MAX_RESULTS)
        start_index = self.start_index
        if start_index < 1 or start_index > MAX_START_INDEX:
            start_index = 1
        return Criteria(self.query, self.scope, max_results, start_index)


@dataclass
class SearchResult:
    criteria: Criteria
    documents: List[Document] = field(default_factory=list)
    total_available: int = 0
    first_result_index: int = 0


def _document_from_result(node) -> Document:
    doc = Document.from_list_item(node)
    doc.thumbnail_url = node.findtext("thumbnail_url")
    tags = node.findtext("tags") or ""
    doc.tags = [tag.strip() for tag in tags.split(",") if tag.strip()]
    return doc


def find(client, query: Union[str, Criteria], scope: SearchScope = SearchScope.ALL,
         max_results: int = 10, start_index: int = 1) -> SearchResult:
    """
    Search Scribd for documents.

    With ``SearchScope.USER`` the logged-in user's documents are searched
    (or the API account's when nobody is logged in); ``SearchScope.ALL``
    only covers public documents.

    Args:
        client: ScribdClient
        query: Search terms, or a complete Criteria
        scope: Where to search
        max_results: Results per page, at most 1000
        start_index: 1-based index of the first result, at most 1000

    Returns:
        SearchResult; empty when the call failed
    """
    if isinstance(query, Criteria):
        criteria = query.clamped()
    else:
        criteria = Criteria(query, scope, max_results, start_index).clamped()

    result = SearchResult(criteria)
    response = client.call("docs.search", {
        "query": criteria.query,
        "num_results": str(criteria.max_results),
        "num_start": str(criteria.start_index),
        "scope": criteria.scope.value,
    })
    if response is None or not response.is_usable:
        return result

    result_set = response.find("result_set")
    if result_set is not None:
        result.total_available = _to_int_or_none(result_set.get("totalResultsAvailable")) or 0
        result.first_result_index = _to_int_or_none(result_set.get("firstResultPosition")) or 0

    for node in response.iter("result"):
        try:
            result.documents.append(_document_from_result(node))
        except ProtocolError as e:
            client.errors.report(e)

    logger.debug("Search %r returned %d of %d documents",
                 criteria.query, len(result.documents), result.total_available)
    return result
