"""Heuristic dispatch tables.

Each concern is an ordered list of ``(predicate, result)`` rules evaluated
first-match-wins, so every table can be tested without running the
extractor or the generator.
"""

from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple

from bs4 import Tag

from app.models.content import SECTION_TYPES, SectionType
from app.services.dom import HEADING_TAGS, INLINE_TAGS, direct_descendants, text_of
from app.services.normalizer import collapse_whitespace, slugify, snippet

# ---------------------------------------------------------------------------
# Semantic categories (extraction pass 1), in processing order
# ---------------------------------------------------------------------------


class SemanticCategory(NamedTuple):
    tag: str
    section_type: SectionType
    label: str


SEMANTIC_CATEGORIES: Tuple[SemanticCategory, ...] = (
    SemanticCategory("header", "hero", "Header"),
    SemanticCategory("nav", "navigation", "Navigation"),
    SemanticCategory("main", "main", "Main Content"),
    SemanticCategory("footer", "footer", "Footer"),
    SemanticCategory("article", "article", "Article"),
    SemanticCategory("aside", "sidebar", "Sidebar"),
)

# Generic containers picked up by extraction pass 2
EXPLICIT_CONTAINER_SELECTOR = "section, [data-section], [data-section-id]"

SECTION_TYPE_ATTR = "data-section-type"

# ---------------------------------------------------------------------------
# Section type inference
# ---------------------------------------------------------------------------

SectionTypeRule = Tuple[Callable[[Tag, Dict[str, Any]], bool], SectionType]

SECTION_TYPE_RULES: List[SectionTypeRule] = [
    (lambda element, content: element.find("form") is not None, "contact"),
    (lambda element, content: "lists" in content, "list"),
    (lambda element, content: set(content) == {"heading"}, "hero"),
]


def explicit_section_type(element: Tag) -> Optional[SectionType]:
    """Return the ``data-section-type`` override when it names a known type."""
    value = (element.get(SECTION_TYPE_ATTR) or "").strip().lower()
    return value if value in SECTION_TYPES else None


def infer_section_type(
    element: Tag, content: Dict[str, Any], default: SectionType = "content"
) -> SectionType:
    """Infer a section type: explicit override first, then content shape."""
    override = explicit_section_type(element)
    if override:
        return override
    for predicate, section_type in SECTION_TYPE_RULES:
        if predicate(element, content):
            return section_type
    return default


# ---------------------------------------------------------------------------
# Section ids and labels
# ---------------------------------------------------------------------------

def generate_section_id(element: Tag, index: int) -> str:
    """Return the element's own id, its ``data-section-id``, or ``<tag>-<n>``."""
    element_id = (element.get("id") or "").strip()
    if element_id:
        return element_id
    data_id = (element.get("data-section-id") or "").strip()
    if data_id:
        return data_id
    return f"{slugify(element.name, fallback='element')}-{index + 1}"


def generate_section_label(element: Tag, index: int, fallback: Optional[str] = None) -> str:
    """Human label: aria-label, data-label, first heading, text snippet, then a fallback."""
    for attr in ("aria-label", "data-label"):
        value = collapse_whitespace(element.get(attr) or "")
        if value:
            return value

    heading = element.find(HEADING_TAGS)
    if heading is not None:
        text = text_of(heading)
        if text:
            return text

    text = snippet(element.get_text(" "))
    if text:
        return text

    return (fallback or f"{element.name.capitalize()} {index + 1}").strip()


# ---------------------------------------------------------------------------
# Field name -> element inside a section
# ---------------------------------------------------------------------------

FIELD_ATTRS = ("data-field", "data-section-field")
SIMPLE_TEXT_TAGS = frozenset({"p", "span", "a", "button"})


class FieldTarget(NamedTuple):
    tag: Tag
    attribute: Optional[str] = None


def _contains(*keywords: str) -> Callable[[str], bool]:
    return lambda name: any(keyword in name for keyword in keywords)


def _ends_with(*suffixes: str) -> Callable[[str], bool]:
    return lambda name: name.endswith(suffixes)


def _headings(element: Tag) -> List[Tag]:
    return direct_descendants(element, HEADING_TAGS)


def _first_heading(element: Tag) -> Optional[Tag]:
    headings = _headings(element)
    return headings[0] if headings else None


def _subheading(element: Tag) -> Optional[Tag]:
    headings = _headings(element)
    if len(headings) >= 2:
        return headings[1]
    if headings:
        following = headings[0].find_next_sibling()
        if following is not None and following.name == "p":
            return following
    return None


def _first_of(*names: str) -> Callable[[Tag], Optional[Tag]]:
    def finder(element: Tag) -> Optional[Tag]:
        matches = direct_descendants(element, list(names))
        return matches[0] if matches else None

    return finder


def _leaf_self(element: Tag) -> Optional[Tag]:
    """The section element itself, when it holds only text and inline markup."""
    if any(tag.name not in INLINE_TAGS for tag in element.find_all(True)):
        return None
    return element


def _either(*finders: Callable[[Tag], Optional[Tag]]) -> Callable[[Tag], Optional[Tag]]:
    def finder(element: Tag) -> Optional[Tag]:
        for candidate in finders:
            tag = candidate(element)
            if tag is not None:
                return tag
        return None

    return finder


FieldRule = Tuple[Callable[[str], bool], Callable[[Tag], Optional[Tag]], Optional[str]]

# (name predicate, finder, attribute written instead of text); the first
# rule whose predicate matches decides, even when its finder comes back empty
FIELD_TARGET_RULES: List[FieldRule] = [
    (_contains("subtitle", "subheading", "tagline"), _subheading, None),
    (_contains("title", "heading", "headline"), _first_heading, None),
    (_contains("image", "img", "logo", "photo"), _first_of("img"), "src"),
    (_ends_with("href", "url", "link"), _first_of("a"), "href"),
    (_contains("cta", "button"), _first_of("a", "button"), None),
    (
        _contains("text", "description", "body", "summary", "intro", "copyright"),
        _either(_first_of("p"), _leaf_self),
        None,
    ),
]


def find_by_field_attribute(element: Tag, field: str) -> Optional[Tag]:
    for attr in FIELD_ATTRS:
        if element.get(attr) == field:
            return element
        match = element.find(attrs={attr: field})
        if match is not None:
            return match
    return None


def resolve_field_target(element: Tag, field: str) -> Optional[FieldTarget]:
    """Find where a string value for *field* should be written inside *element*."""
    explicit = find_by_field_attribute(element, field)
    if explicit is not None:
        return FieldTarget(explicit)

    name = field.lower()
    for predicate, finder, attribute in FIELD_TARGET_RULES:
        if predicate(name):
            tag = finder(element)
            return FieldTarget(tag, attribute) if tag is not None else None
    return None
