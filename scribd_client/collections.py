"""
Scribd collections (docs.getCollections).
"""

from dataclasses import dataclass
from enum import Enum
from typing import List

from .documents import _to_int
from .exceptions import ProtocolError


class CollectionScope(Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    BOTH = None


@dataclass(frozen=True)
class Collection:
    """A named group of a user's documents."""
    collection_id: int
    name: str
    doc_count: int = 0

    @classmethod
    def from_node(cls, node) -> "Collection":
        collection_id = node.findtext("collection_id")
        if collection_id is None:
            raise ProtocolError("collection is missing <collection_id>")
        return cls(
            collection_id=_to_int(collection_id),
            name=(node.findtext("collection_name") or "").strip(),
            doc_count=_to_int(node.findtext("doc_count") or "0"),
        )


def get_collections(client, scope: CollectionScope = CollectionScope.BOTH,
                    user=None) -> List[Collection]:
    """
    List a user's collections.

    Args:
        client: ScribdClient
        scope: Public, private or both
        user: User whose collections to list (defaults to the current user)
    """
    params = {}
    if scope is not CollectionScope.BOTH:
        params["scope"] = scope.value

    response = client.call("docs.getCollections", params, user=user)
    if response is None or not response.is_usable:
        return []

    collections = []
    for node in response.iter("result"):
        try:
            collections.append(Collection.from_node(node))
        except ProtocolError as e:
            client.errors.report(e)
    return collections
