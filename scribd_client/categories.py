"""
Scribd document categories (docs.getCategories).

Categories form a tree: top-level categories can carry their subcategories
when requested, and each subcategory points back at its parent.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .documents import _to_int
from .exceptions import ProtocolError


@dataclass
class Category:
    category_id: int
    name: str
    parent: Optional["Category"] = field(default=None, repr=False, compare=False)
    subcategories: List["Category"] = field(default_factory=list)

    @classmethod
    def from_node(cls, node, parent: Optional["Category"] = None) -> "Category":
        """Build a category and, recursively, its <subcategories>."""
        category_id = node.findtext("id")
        if category_id is None:
            raise ProtocolError("category is missing <id>")

        category = cls(_to_int(category_id), (node.findtext("name") or "").strip(), parent)
        subcategories = node.find("subcategories")
        if subcategories is not None:
            category.subcategories = [cls.from_node(child, category) for child in subcategories]
        return category


def get_categories(client, parent_id: Optional[int] = None,
                   include_subcategories: bool = False) -> List[Category]:
    """
    List categories.

    Args:
        client: ScribdClient
        parent_id: List the subcategories of this category instead of the
            top level
        include_subcategories: Nest each category's subcategories
    """
    params = {}
    if parent_id is not None:
        params["category_id"] = str(parent_id)
    if include_subcategories:
        params["with_subcategories"] = "true"

    response = client.call("docs.getCategories", params)
    if response is None or not response.is_usable:
        return []

    # Subcategory nodes are parsed with their parent
    nested = {child for node in response.iter("subcategories") for child in node}

    categories = []
    for node in response.iter("result"):
        if node in nested:
            continue
        try:
            categories.append(Category.from_node(node))
        except ProtocolError as e:
            client.errors.report(e)
    return categories
