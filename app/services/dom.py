"""Tree helpers shared by extraction, generation and preview.

Everything here works on BeautifulSoup trees produced by
:func:`app.services.sanitizer.parse`; nothing keeps state between calls.
"""

import logging
from typing import AbstractSet, Dict, Iterator, List, Optional

import soupsieve
from bs4 import BeautifulSoup, NavigableString, PageElement, Tag
from bs4.element import PreformattedString

from app.services.normalizer import collapse_whitespace

logger = logging.getLogger(__name__)

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
LIST_TAGS = ["ul", "ol"]

# Elements that own their content as a separate section
BOUNDARY_TAGS = frozenset({"header", "nav", "main", "footer", "article", "aside", "section"})
SECTION_MARKER_ATTRS = ("data-section", "data-section-id")

# Inline elements never start a new block of loose text
INLINE_TAGS = frozenset(
    {
        "a", "abbr", "b", "bdi", "bdo", "br", "cite", "code", "data", "dfn", "em",
        "i", "kbd", "label", "mark", "q", "s", "samp", "small", "span", "strong",
        "sub", "sup", "time", "u", "var", "wbr",
    }
)

# Strings inside these elements are never content
_NON_CONTENT_PARENTS = frozenset({"script", "style", "noscript", "template", "title"})


def root_container(soup: BeautifulSoup) -> Tag:
    """Return the element that holds the page content (``<body>`` when present)."""
    return soup.body or soup.find("html") or soup


def owner_document(node: PageElement) -> BeautifulSoup:
    """Return the :class:`BeautifulSoup` object *node* belongs to."""
    for candidate in (node, *node.parents):
        if isinstance(candidate, BeautifulSoup):
            return candidate
    raise ValueError("Element is detached from its document.")


def is_boundary(tag: Tag) -> bool:
    """Return True when *tag* starts its own section."""
    if tag.name in BOUNDARY_TAGS:
        return True
    return any(tag.has_attr(attr) for attr in SECTION_MARKER_ATTRS)


def is_direct(node: PageElement, container: Tag, excluded_ids: AbstractSet[int] = frozenset()) -> bool:
    """Return True when *node* belongs to *container* itself.

    A node is not direct when a nested section boundary, or an element whose
    identity is in *excluded_ids*, sits between it and *container*.
    """
    if isinstance(node, Tag) and node is not container:
        if is_boundary(node) or id(node) in excluded_ids:
            return False
    for ancestor in node.parents:
        if ancestor is container:
            return True
        if is_boundary(ancestor) or id(ancestor) in excluded_ids:
            return False
    return False


def direct_descendants(
    container: Tag, names: List[str], excluded_ids: AbstractSet[int] = frozenset()
) -> List[Tag]:
    """Return descendants of *container* named *names* that are not inside a nested section."""
    return [tag for tag in container.find_all(names) if is_direct(tag, container, excluded_ids)]


def top_level_lists(container: Tag, excluded_ids: AbstractSet[int] = frozenset()) -> List[Tag]:
    """Direct ``ul``/``ol`` elements that are not sub-lists and hold at least one item."""
    lists = []
    for lst in direct_descendants(container, LIST_TAGS, excluded_ids):
        if _inside_list(lst, container):
            continue
        if lst.find("li", recursive=False) is None:
            continue
        lists.append(lst)
    return lists


def _inside_list(tag: Tag, container: Tag) -> bool:
    for ancestor in tag.parents:
        if ancestor is container:
            return False
        if ancestor.name in LIST_TAGS:
            return True
    return False


def text_of(tag: Tag) -> str:
    return collapse_whitespace(tag.get_text(" "))


def iter_content_strings(container: Tag) -> Iterator[NavigableString]:
    """Yield non-empty text nodes under *container* that carry page content."""
    for string in container.find_all(string=True):
        if isinstance(string, PreformattedString):
            continue
        if string.parent is not None and string.parent.name in _NON_CONTENT_PARENTS:
            continue
        if string.strip():
            yield string


def has_editable_content(node: PageElement) -> bool:
    if isinstance(node, NavigableString):
        return not isinstance(node, PreformattedString) and bool(node.strip())
    if isinstance(node, Tag):
        return next(iter_content_strings(node), None) is not None
    return False


def block_ancestor(node: PageElement) -> Optional[Tag]:
    """Return the closest ancestor of *node* that is not an inline element."""
    for ancestor in node.parents:
        if ancestor.name not in INLINE_TAGS:
            return ancestor
    return None


# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------

def select_one(scope: Tag, selector: Optional[str]) -> Optional[Tag]:
    """Like ``scope.select_one`` but treats an invalid selector as no match."""
    if not selector:
        return None
    try:
        return scope.select_one(selector)
    except (soupsieve.SelectorSyntaxError, NotImplementedError) as exc:
        logger.debug("Ignoring invalid selector %r: %s", selector, exc)
        return None


def select_all(scope: Tag, selector: Optional[str]) -> List[Tag]:
    if not selector:
        return []
    try:
        return scope.select(selector)
    except (soupsieve.SelectorSyntaxError, NotImplementedError) as exc:
        logger.debug("Ignoring invalid selector %r: %s", selector, exc)
        return []


def css_path(element: Tag) -> str:
    """Return an exact child-combinator path from the document root to *element*."""
    parts: List[str] = []
    current = element
    while current is not None and not isinstance(current, BeautifulSoup):
        name = soupsieve.escape(current.name)
        parent = current.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            parts.insert(0, name)
            break
        siblings = parent.find_all(current.name, recursive=False)
        position = next(i for i, sibling in enumerate(siblings, 1) if sibling is current)
        parts.insert(0, f"{name}:nth-of-type({position})")
        current = parent
    return " > ".join(parts)


def generate_selector(element: Tag) -> str:
    """Return a selector that resolves back to *element* in its unmodified document.

    Prefers ``#id``, then ``tag.class1.class2``, and falls back to the full
    :func:`css_path` when the shorter forms are ambiguous.
    """
    document = owner_document(element)

    element_id = element.get("id")
    if element_id:
        candidate = f"#{soupsieve.escape(element_id)}"
        if select_one(document, candidate) is element:
            return candidate

    classes = element.get("class") or []
    if classes:
        candidate = soupsieve.escape(element.name) + "".join(
            f".{soupsieve.escape(cls)}" for cls in classes
        )
        if select_one(document, candidate) is element:
            return candidate

    return css_path(element)


def position_index(root: Tag) -> Dict[int, int]:
    """Map element identity to its document-order index under *root*."""
    return {id(tag): index for index, tag in enumerate(root.find_all(True))}


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

def write_value(tag: Tag, value: str, attribute: Optional[str] = None) -> None:
    """Write *value* into *tag*: an attribute, a form-control value, or its text."""
    if attribute:
        tag[attribute] = value
    elif tag.name == "img":
        tag["src"] = value
    elif tag.name == "meta":
        tag["content"] = value
    elif tag.name == "input":
        tag["value"] = value
    elif text_of(tag) != collapse_whitespace(value):
        # textarea included: its text is the control's value.  Unchanged text
        # keeps its inline markup.
        tag.string = value
