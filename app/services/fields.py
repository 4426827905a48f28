"""Field extraction: turns one section element into a typed content map."""

from typing import Any, Dict, List, Optional

from bs4 import Tag

from app.services.claims import ClaimRegistry
from app.services.dom import (
    HEADING_TAGS,
    block_ancestor,
    direct_descendants,
    is_direct,
    iter_content_strings,
    text_of,
    top_level_lists,
)
from app.services.normalizer import collapse_whitespace


def extract_fields(element: Tag, claims: Optional[ClaimRegistry] = None) -> Dict[str, Any]:
    """Extract the editable fields of *element*.

    Only content that belongs to *element* itself is read: subtrees of nested
    section boundaries and of elements in *claims* are skipped.

    Fields, each present only when non-empty:

    * ``heading``    – text of the first heading
    * ``paragraphs`` – texts of all non-empty ``<p>`` elements
    * ``lists``      – one array of item texts per top-level ``<ul>``/``<ol>``
    * ``links``      – ``{"text", "href"}`` per anchor
    * ``images``     – ``{"src", "alt"}`` per image
    * ``fragments``  – leftover text not covered by the fields above
    * ``text``       – all direct text, only when none of the above matched
    """
    excluded_ids = frozenset(id(tag) for tag in claims) if claims is not None else frozenset()
    excluded_ids = excluded_ids - {id(element)}

    content: Dict[str, Any] = {}
    consumed: List[Tag] = []

    for heading in direct_descendants(element, HEADING_TAGS, excluded_ids):
        text = text_of(heading)
        if text:
            content["heading"] = text
            consumed.append(heading)
            break

    paragraphs = []
    for p in direct_descendants(element, ["p"], excluded_ids):
        text = text_of(p)
        if text:
            paragraphs.append(text)
            consumed.append(p)
    if paragraphs:
        content["paragraphs"] = paragraphs

    lists = top_level_lists(element, excluded_ids)
    if lists:
        content["lists"] = [
            [text_of(li) for li in lst.find_all("li", recursive=False)] for lst in lists
        ]
        consumed.extend(lists)

    anchors = direct_descendants(element, ["a"], excluded_ids)
    if anchors:
        content["links"] = [{"text": text_of(a), "href": a.get("href", "")} for a in anchors]
        consumed.extend(anchors)

    images = direct_descendants(element, ["img"], excluded_ids)
    if images:
        content["images"] = [
            {"src": img.get("src") or img.get("data-src") or "", "alt": img.get("alt", "")}
            for img in images
        ]

    loose = _loose_text(element, excluded_ids, consumed)
    if content:
        if loose:
            content["fragments"] = loose
    elif loose:
        content["text"] = collapse_whitespace(" ".join(loose))

    return content


def _loose_text(element: Tag, excluded_ids, consumed: List[Tag]) -> List[str]:
    """Group text not represented by another field, one entry per block element."""
    consumed_ids = {id(tag) for tag in consumed}
    blocks: Dict[int, List[str]] = {}

    for string in iter_content_strings(element):
        if not is_direct(string, element, excluded_ids):
            continue
        if any(id(ancestor) in consumed_ids for ancestor in _ancestors_within(string, element)):
            continue
        block = block_ancestor(string)
        blocks.setdefault(id(block), []).append(str(string))

    return [
        text for text in (collapse_whitespace(" ".join(parts)) for parts in blocks.values()) if text
    ]


def _ancestors_within(node, element: Tag):
    for ancestor in node.parents:
        if ancestor is element:
            return
        yield ancestor
