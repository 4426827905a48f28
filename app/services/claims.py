"""Per-extraction registry of elements already assigned to a section."""

from typing import Dict, Iterator

from bs4 import PageElement, Tag

from app.services.dom import is_boundary


class ClaimRegistry:
    """Single-owner set of claimed elements, keyed by object identity.

    BeautifulSoup tags compare by markup, so two identical ``<p>`` elements
    are ``==``; identity is the only safe key.  A registry lives for one
    extraction call and is discarded with the tree it points into.
    """

    def __init__(self) -> None:
        self._claimed: Dict[int, Tag] = {}

    def claim(self, element: Tag) -> None:
        self._claimed[id(element)] = element

    def __contains__(self, element: object) -> bool:
        return id(element) in self._claimed

    def __len__(self) -> int:
        return len(self._claimed)

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._claimed.values())

    def is_covered(self, node: PageElement) -> bool:
        """Return True when *node*'s content already belongs to a claimed section.

        Claimed elements cover their subtree up to the next nested section
        boundary, because the field extractor never descends into one.  A
        boundary element is therefore covered only when claimed itself.
        """
        if isinstance(node, Tag):
            if node in self:
                return True
            if is_boundary(node):
                return False
        for ancestor in node.parents:
            if ancestor in self:
                return True
            if is_boundary(ancestor):
                return False
        return False
