"""Writing content values back into a parsed document.

Shared by the generator (full model) and the preview (change lists).
Every writer returns True when it changed the tree and False when it found
nowhere to put the value; none of them removes unrelated markup.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from bs4 import BeautifulSoup, Tag

from app.models.page_definition import FieldDefinition
from app.services.dom import (
    LIST_TAGS,
    direct_descendants,
    owner_document,
    text_of,
    top_level_lists,
    write_value,
)
from app.services.heuristics import SIMPLE_TEXT_TAGS, FieldTarget, resolve_field_target
from app.services.schema_extractor import faq_parts, field_elements

logger = logging.getLogger(__name__)

# Derived on extraction; never written back
READ_ONLY_FIELDS = frozenset({"fragments"})


# ---------------------------------------------------------------------------
# Heuristic fields
# ---------------------------------------------------------------------------

def _write_paragraphs(element: Tag, values: List[Any]) -> bool:
    paragraphs = [p for p in direct_descendants(element, ["p"]) if text_of(p)]
    document = owner_document(element)
    anchor = paragraphs[-1] if paragraphs else None
    written = False

    for index, value in enumerate(values):
        if not isinstance(value, str):
            continue
        if index < len(paragraphs):
            write_value(paragraphs[index], value)
        else:
            new_p = document.new_tag("p")
            new_p.string = value
            if anchor is not None:
                anchor.insert_after(new_p)
            else:
                element.append(new_p)
            anchor = new_p
        written = True
    return written


def _write_lists(element: Tag, values: List[Any]) -> bool:
    written = False
    for lst, items in zip(top_level_lists(element), values):
        if not isinstance(items, list):
            continue
        items = [item for item in items if isinstance(item, str)]
        current = [text_of(li) for li in lst.find_all("li", recursive=False)]
        if current != items:
            _rebuild_list(lst, items)
        written = True
    return written


def _write_links(element: Tag, values: List[Any]) -> bool:
    written = False
    for anchor, link in zip(direct_descendants(element, ["a"]), values):
        if not isinstance(link, dict):
            continue
        if link.get("text"):
            write_value(anchor, link["text"])
            written = True
        if link.get("href"):
            anchor["href"] = link["href"]
            written = True
    return written


def _write_images(element: Tag, values: List[Any]) -> bool:
    written = False
    for img, image in zip(direct_descendants(element, ["img"]), values):
        if not isinstance(image, dict):
            continue
        if image.get("src"):
            img["src"] = image["src"]
            written = True
        if "alt" in image and image["alt"] is not None:
            img["alt"] = image["alt"]
            written = True
    return written


ArrayWriter = Callable[[Tag, List[Any]], bool]

ARRAY_WRITERS: Dict[str, ArrayWriter] = {
    "paragraphs": _write_paragraphs,
    "lists": _write_lists,
    "links": _write_links,
    "images": _write_images,
}

# Anchors and images are addressed by their position at extraction time, so
# they are written before paragraph or list rewrites can remove any of them
_EARLY_FIELDS = frozenset({"links", "images"})


def write_order(field: str) -> int:
    """Sort key that puts positional anchor/image writes first."""
    return 0 if field in _EARLY_FIELDS else 1


def _write_string(element: Tag, field: str, value: str, fallback_to_self: bool) -> bool:
    target = resolve_field_target(element, field)
    if target is None and fallback_to_self and element.name in SIMPLE_TEXT_TAGS:
        target = FieldTarget(element)
    if target is None:
        return False
    write_value(target.tag, value, target.attribute)
    return True


def apply_field(element: Tag, field: str, value: Any, fallback_to_self: bool = False) -> bool:
    """Write one content field into *element*, dispatching on the value's shape.

    Strings (and numbers) go to the element picked by the field-name
    heuristics; ``paragraphs``, ``lists``, ``links`` and ``images`` arrays are
    zipped positionally into the matching direct children.  With
    *fallback_to_self*, a simple text element receives a string value
    directly when no sub-target is found.
    """
    if field in READ_ONLY_FIELDS or value is None:
        return False

    if isinstance(value, list):
        writer = ARRAY_WRITERS.get(field)
        if writer is None:
            logger.debug("No writer for array field '%s'", field)
            return False
        return writer(element, value)

    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        logger.debug("Unsupported value shape for field '%s': %s", field, type(value).__name__)
        return False
    return _write_string(element, field, str(value), fallback_to_self)


# ---------------------------------------------------------------------------
# Page-definition fields
# ---------------------------------------------------------------------------

def write_defined_field(
    soup: BeautifulSoup, section: Tag, field_def: FieldDefinition, value: Any
) -> bool:
    """Write *value* through the selectors of *field_def*."""
    matches = field_elements(soup, section, field_def)
    if not matches or value is None:
        return False

    if field_def.type == "list" and isinstance(value, list):
        return _write_defined_list(matches, value, field_def.attribute_name)
    if field_def.type == "faq" and isinstance(value, list):
        return _write_faq(matches, value)
    if field_def.type == "image" and isinstance(value, dict):
        return _write_image(matches[0], value)
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        write_value(matches[0], str(value), field_def.attribute_name)
        return True
    return False


def _write_image(match: Tag, image: Dict[str, Any]) -> bool:
    img = match if match.name == "img" else match.find("img")
    if img is None:
        return False
    if image.get("src"):
        img["src"] = image["src"]
    if image.get("alt") is not None:
        img["alt"] = image["alt"]
    return True


def _write_defined_list(matches: List[Tag], values: List[Any], attribute: Optional[str]) -> bool:
    strings = [v for v in values if isinstance(v, str)]

    # A single list element is rebuilt; otherwise items map onto matches one to one
    if len(matches) == 1 and matches[0].name in LIST_TAGS and not attribute:
        return _rebuild_list(matches[0], strings)

    for match, item in zip(matches, strings):
        write_value(match, item, attribute)
    return bool(strings)


def _rebuild_list(lst: Tag, items: List[str]) -> bool:
    document = owner_document(lst)
    lst.clear()
    for item in items:
        li = document.new_tag("li")
        li.string = item
        lst.append(li)
    return True


def _write_faq(matches: List[Tag], entries: List[Any]) -> bool:
    items: List[tuple] = []
    for match in matches:
        if match.name == "dl":
            items.extend((dt, dt.find_next_sibling("dd")) for dt in match.find_all("dt"))
        elif match.name in LIST_TAGS:
            items.extend(faq_parts(li) for li in match.find_all("li", recursive=False))
        else:
            items.append(faq_parts(match))

    written = False
    for (question, answer), entry in zip(items, entries):
        if not isinstance(entry, dict):
            continue
        if question is not None and entry.get("question"):
            question.string = entry["question"]
            written = True
        if answer is not None and entry.get("answer"):
            answer.string = entry["answer"]
            written = True
    return written


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------

def ensure_head(soup: BeautifulSoup) -> Tag:
    """Return ``<head>``, creating it at the top of ``<html>`` when missing."""
    if soup.head is not None:
        return soup.head
    head = soup.new_tag("head")
    html = soup.find("html")
    if html is not None:
        html.insert(0, head)
    else:
        soup.insert(0, head)
    return head


def set_title(soup: BeautifulSoup, title: str) -> None:
    title_tag = soup.find("title")
    if title_tag is None:
        title_tag = soup.new_tag("title")
        ensure_head(soup).append(title_tag)
    title_tag.string = title


def set_description(soup: BeautifulSoup, description: str) -> None:
    """Upsert ``<meta name="description">``."""
    meta = soup.find("meta", attrs={"name": "description"})
    if meta is None:
        meta = soup.new_tag("meta", attrs={"name": "description"})
        ensure_head(soup).append(meta)
    meta["content"] = description


METADATA_WRITERS: Dict[str, Callable[[BeautifulSoup, str], None]] = {
    "title": set_title,
    "description": set_description,
}
