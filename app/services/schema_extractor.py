"""Definition-driven extraction.

Reads metadata and sections straight from the selectors of a
:class:`~app.models.page_definition.PageDefinition` instead of inferring
structure.  Sections found this way are claimed, so heuristic passes that
run afterwards only pick up what the definition does not cover.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from app.models.page_definition import FieldDefinition, MetadataFieldDefinition, PageDefinition
from app.services.dom import LIST_TAGS, select_all, select_one, text_of
from app.services.passes import ExtractionContext

logger = logging.getLogger(__name__)

_QUESTION_SELECTOR = "summary, dt, .question, .faq-question, h1, h2, h3, h4, h5, h6, strong"
_ANSWER_SELECTOR = "dd, .answer, .faq-answer, p"


def definition_pass(ctx: ExtractionContext, definition: PageDefinition) -> None:
    """Create one section per configured section whose element is present."""
    for section_def in definition.sections:
        element = select_one(ctx.soup, section_def.absolute_selector)
        if element is None:
            logger.debug("Definition section '%s' not found in document", section_def.id)
            continue
        if element in ctx.claims:
            logger.warning(
                "Definition section '%s' resolves to an element already claimed – skipping",
                section_def.id,
            )
            continue

        content: Dict[str, Any] = {}
        for field_def in section_def.fields:
            value = read_field(ctx.soup, element, field_def)
            if value not in (None, "", []):
                content[field_def.key] = value

        ctx.add_section(
            element,
            section_def.type,
            section_def.label,
            content,
            section_id=section_def.id,
        )


def extract_definition_metadata(soup: BeautifulSoup, definition: PageDefinition) -> Dict[str, str]:
    """Read every metadata entry that carries a selector; auto-managed keys are skipped."""
    metadata: Dict[str, str] = {}
    for meta_def in definition.metadata:
        if not meta_def.absolute_selector:
            continue
        element = select_one(soup, meta_def.absolute_selector)
        if element is None:
            continue
        value = _read_scalar(element, meta_def.attribute_name)
        if value:
            metadata[meta_def.metadata_key] = value
    return metadata


def read_field(soup: BeautifulSoup, section: Tag, field_def: FieldDefinition) -> Any:
    """Return the value of one configured field, or *None* when it matches nothing.

    * ``list`` – every match; list elements expand to their item texts
    * ``faq``  – ``{"question", "answer"}`` per item
    * ``image`` – ``{"src", "alt"}`` of the first image
    * anything else – text of the first match, or its *attribute_name*
    """
    matches = field_elements(soup, section, field_def)
    if not matches:
        return None

    if field_def.type == "list":
        return _read_list(matches, field_def.attribute_name)
    if field_def.type == "faq":
        return _read_faq(matches)
    if field_def.type == "image":
        return _read_image(matches[0])
    return _read_scalar(matches[0], field_def.attribute_name)


def metadata_target(soup: BeautifulSoup, meta_def: MetadataFieldDefinition) -> Optional[Tag]:
    return select_one(soup, meta_def.absolute_selector)


def field_elements(soup: BeautifulSoup, section: Tag, field_def: FieldDefinition) -> List[Tag]:
    """Elements matched by *field_def*, outermost only, in document order."""
    if field_def.relative_selector:
        matches = select_all(section, field_def.relative_selector)
    else:
        matches = select_all(soup, field_def.absolute_selector)
    return _outermost(matches)


def _outermost(matches: List[Tag]) -> List[Tag]:
    """Drop matches nested inside another match so nothing is read twice."""
    ids = {id(tag) for tag in matches}
    return [tag for tag in matches if not any(id(parent) in ids for parent in tag.parents)]


def _read_scalar(element: Tag, attribute: Optional[str]) -> str:
    if attribute:
        value = element.get(attribute)
        if isinstance(value, list):
            value = " ".join(value)
        return (value or "").strip()
    if element.name == "meta":
        return (element.get("content") or "").strip()
    return text_of(element)


def _read_list(matches: List[Tag], attribute: Optional[str]) -> List[str]:
    items: List[str] = []
    for match in matches:
        if match.name in LIST_TAGS and not attribute:
            items.extend(text_of(li) for li in match.find_all("li", recursive=False))
        else:
            items.append(_read_scalar(match, attribute))
    return [item for item in items if item]


def _read_faq(matches: List[Tag]) -> List[Dict[str, str]]:
    entries: List[Dict[str, str]] = []
    for match in matches:
        if match.name == "dl":
            for dt in match.find_all("dt"):
                dd = dt.find_next_sibling("dd")
                entries.append({"question": text_of(dt), "answer": text_of(dd) if dd else ""})
        elif match.name in LIST_TAGS:
            entries.extend(_faq_entry(li) for li in match.find_all("li", recursive=False))
        else:
            entries.append(_faq_entry(match))
    return [entry for entry in entries if entry["question"] or entry["answer"]]


def faq_parts(item: Tag) -> Tuple[Optional[Tag], Optional[Tag]]:
    """Return the question and answer elements of one FAQ item (either may be None)."""
    question = select_one(item, _QUESTION_SELECTOR)
    if question is None:
        return None, None
    answer = next(
        (
            candidate
            for candidate in select_all(item, _ANSWER_SELECTOR)
            if candidate is not question
            and not _nested(candidate, question)
            and not _nested(question, candidate)
        ),
        None,
    )
    return question, answer


def _faq_entry(item: Tag) -> Dict[str, str]:
    question, answer = faq_parts(item)
    if question is None:
        return {"question": text_of(item), "answer": ""}
    if answer is not None:
        return {"question": text_of(question), "answer": text_of(answer)}

    # Answer is whatever text follows the question inside the item
    remainder = text_of(item)
    question_text = text_of(question)
    if remainder.startswith(question_text):
        remainder = remainder[len(question_text):].strip()
    return {"question": question_text, "answer": remainder}


def _nested(inner: Tag, outer: Tag) -> bool:
    return any(parent is outer for parent in inner.parents)


def _read_image(element: Tag) -> Optional[Dict[str, str]]:
    img = element if element.name == "img" else element.find("img")
    if img is None:
        return None
    return {"src": img.get("src") or img.get("data-src") or "", "alt": img.get("alt", "")}
