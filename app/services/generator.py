"""Content model → publish-ready HTML.

:func:`generate` applies a full :class:`WebsiteContent` onto a base document.
Resolution failures are logged and skipped per section or field; the only
error it raises is ``ValueError`` for an empty document.
"""

import logging
from typing import Any, Optional

from bs4 import BeautifulSoup, Tag

from app.models.content import Section, WebsiteContent
from app.models.page_definition import PageDefinition, SectionDefinition
from app.services.dom import select_one, write_value
from app.services.locator import GENERATOR_RESOLVERS, has_section_marker, locate_section
from app.services.sanitizer import parse
from app.services.schema_extractor import metadata_target
from app.services.writer import (
    METADATA_WRITERS,
    READ_ONLY_FIELDS,
    apply_field,
    write_defined_field,
    write_order,
)

logger = logging.getLogger(__name__)

SECTION_STAMP_ATTR = "data-section"


def generate(
    base_html: str, content: WebsiteContent, page_definition: Optional[PageDefinition] = None
) -> str:
    """Return *base_html* with the metadata and section fields of *content* applied.

    Raises:
        ValueError: if *base_html* is empty.
    """
    soup = parse(base_html)

    apply_metadata(soup, content, page_definition)

    applied = 0
    for section in content.sections:
        try:
            if _apply_section(soup, section, page_definition):
                applied += 1
        except Exception:
            logger.exception("Failed to apply section '%s' – skipping", section.id)

    logger.info("Generated HTML: %d of %d section(s) applied", applied, len(content.sections))
    return str(soup)


def apply_metadata(
    soup: BeautifulSoup, content: WebsiteContent, page_definition: Optional[PageDefinition] = None
) -> None:
    """Write the title and description, then any definition-mapped metadata keys."""
    values = content.metadata.model_dump(by_alias=True)

    for key, writer in METADATA_WRITERS.items():
        if values.get(key):
            writer(soup, values[key])

    if page_definition is None:
        return
    for meta_def in page_definition.metadata:
        if meta_def.metadata_key in METADATA_WRITERS or not meta_def.absolute_selector:
            continue
        value = values.get(meta_def.metadata_key)
        if value in (None, ""):
            continue
        target = metadata_target(soup, meta_def)
        if target is None:
            logger.warning("Metadata target for '%s' not found – skipping", meta_def.metadata_key)
            continue
        write_value(target, str(value), meta_def.attribute_name)


def _apply_section(
    soup: BeautifulSoup, section: Section, page_definition: Optional[PageDefinition]
) -> bool:
    section_def = page_definition.section(section.id) if page_definition else None

    element = None
    if section_def is not None:
        element = select_one(soup, section_def.absolute_selector)
    if element is None:
        element = locate_section(soup, section.id, section.selector, GENERATOR_RESOLVERS)
    if element is None:
        logger.warning("Section '%s' not found in base HTML – skipping", section.id)
        return False

    if not has_section_marker(element, section.id) and not element.has_attr(SECTION_STAMP_ATTR):
        element[SECTION_STAMP_ATTR] = section.id

    for field, value in sorted(section.content.items(), key=lambda item: write_order(item[0])):
        try:
            written = _apply_value(soup, element, section_def, field, value)
        except Exception:
            logger.exception("Failed to apply field '%s.%s' – skipping", section.id, field)
            continue
        if not written and field not in READ_ONLY_FIELDS:
            logger.warning("No target for field '%s.%s' – skipping", section.id, field)
    return True


def _apply_value(
    soup: BeautifulSoup,
    element: Tag,
    section_def: Optional[SectionDefinition],
    field: str,
    value: Any,
) -> bool:
    field_def = section_def.field(field) if section_def else None
    if field_def is not None and write_defined_field(soup, element, field_def, value):
        return True
    return apply_field(element, field, value)
