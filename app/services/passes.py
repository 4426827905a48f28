"""Heuristic extraction passes.

Each pass takes the shared :class:`ExtractionContext` and extends its claim
registry and section list.  Later passes depend on the claims left by earlier
ones, so :data:`HEURISTIC_PASSES` is applied strictly in order.
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from app.models.content import Section, SectionType
from app.services.claims import ClaimRegistry
from app.services.dom import (
    generate_selector,
    has_editable_content,
    position_index,
    select_all,
    select_one,
)
from app.services.fields import extract_fields
from app.services.heuristics import (
    EXPLICIT_CONTAINER_SELECTOR,
    SEMANTIC_CATEGORIES,
    generate_section_id,
    generate_section_label,
    infer_section_type,
)
from app.services.normalizer import collapse_whitespace

logger = logging.getLogger(__name__)

FALLBACK_SECTION_ID = "body"
LOOSE_TEXT_SECTION_ID = "orphan-text"


@dataclass
class ExtractionContext:
    """Scratch state for one extraction call."""

    soup: BeautifulSoup
    root: Tag
    claims: ClaimRegistry = field(default_factory=ClaimRegistry)
    sections: List[Section] = field(default_factory=list)
    used_ids: Set[str] = field(default_factory=set)

    def allocate_id(self, candidate: str) -> str:
        """Return *candidate*, suffixed with ``-2``, ``-3``… if already taken."""
        section_id = candidate
        suffix = 2
        while section_id in self.used_ids:
            section_id = f"{candidate}-{suffix}"
            suffix += 1
        self.used_ids.add(section_id)
        return section_id

    def tag_index(self, element: Tag) -> int:
        """Zero-based position of *element* among same-named tags in the document."""
        for index, candidate in enumerate(self.root.find_all(element.name)):
            if candidate is element:
                return index
        return 0

    def add_section(
        self,
        element: Tag,
        section_type: SectionType,
        label: str,
        content: Dict[str, Any],
        section_id: Optional[str] = None,
    ) -> Section:
        """Claim *element* and record it as a new section."""
        candidate = section_id or generate_section_id(element, self.tag_index(element))
        section = Section(
            id=self.allocate_id(candidate),
            type=section_type,
            label=label,
            content=content,
            selector=generate_selector(element),
        )
        self.claims.claim(element)
        self.sections.append(section)
        return section


Pass = Callable[[ExtractionContext], None]


def semantic_pass(ctx: ExtractionContext) -> None:
    """Pass 1: landmark elements (header, nav, main, footer, article, aside)."""
    for category in SEMANTIC_CATEGORIES:
        elements = ctx.root.find_all(category.tag)
        logger.debug("Semantic pass: %d <%s> element(s)", len(elements), category.tag)

        for index, element in enumerate(elements):
            if element in ctx.claims:
                continue
            content = extract_fields(element, ctx.claims)
            if not content:
                logger.debug("Semantic pass: skipping empty <%s>[%d]", category.tag, index)
                continue

            label = element.get("aria-label") or element.get("data-label")
            if not label:
                label = f"{category.label} {index + 1}" if len(elements) > 1 else category.label
            ctx.add_section(element, category.section_type, label, content)


def container_pass(ctx: ExtractionContext) -> None:
    """Pass 2: generic ``<section>`` and ``data-section`` containers."""
    found = 0
    for element in select_all(ctx.root, EXPLICIT_CONTAINER_SELECTOR):
        if ctx.claims.is_covered(element):
            continue
        content = extract_fields(element, ctx.claims)
        if not content:
            continue
        section_type = infer_section_type(element, content)
        label = generate_section_label(element, found)
        ctx.add_section(element, section_type, label, content)
        found += 1
    logger.debug("Container pass: %d section(s)", found)


def orphan_pass(ctx: ExtractionContext) -> None:
    """Pass 3: unclaimed top-level content the earlier passes did not reach."""
    orphans = [
        child
        for child in ctx.root.find_all(True, recursive=False)
        if not ctx.claims.is_covered(child) and has_editable_content(child)
    ]

    count = 0
    for element in orphans:
        content = extract_fields(element, ctx.claims)
        if not content:
            continue
        count += 1
        ctx.add_section(element, "orphan", f"Other Content {count}", content)

    loose = [
        str(node)
        for node in ctx.root.children
        if isinstance(node, NavigableString)
        and not isinstance(node, PreformattedString)
        and node.strip()
    ]
    if loose:
        ctx.sections.append(
            Section(
                id=ctx.allocate_id(LOOSE_TEXT_SECTION_ID),
                type="orphan",
                label="Loose Text",
                content={"text": collapse_whitespace(" ".join(loose))},
            )
        )
        count += 1
    logger.debug("Orphan pass: %d section(s)", count)


def sort_pass(ctx: ExtractionContext) -> None:
    """Pass 4: order sections by document position (stable)."""
    positions = position_index(ctx.root)

    def position(section: Section) -> int:
        element = select_one(ctx.soup, section.selector)
        if element is None:
            element = ctx.soup.find(id=section.id)
        if element is None:
            return sys.maxsize
        if element is ctx.root:
            return -1
        return positions.get(id(element), sys.maxsize)

    ctx.sections.sort(key=position)


def fallback_pass(ctx: ExtractionContext) -> None:
    """Guarantee a non-empty model: one section covering the whole root."""
    if ctx.sections:
        return
    logger.info("No sections found – using the whole document as one section")
    ctx.sections.append(
        Section(
            id=ctx.allocate_id(FALLBACK_SECTION_ID),
            type="content",
            label="Main Content",
            content=extract_fields(ctx.root),
            selector=generate_selector(ctx.root) if ctx.root.name != "[document]" else None,
        )
    )


HEURISTIC_PASSES: Sequence[Pass] = (
    semantic_pass,
    container_pass,
    orphan_pass,
    sort_pass,
    fallback_pass,
)


def run_passes(ctx: ExtractionContext, passes: Sequence[Pass] = HEURISTIC_PASSES) -> List[Section]:
    for extraction_pass in passes:
        extraction_pass(ctx)
    return ctx.sections
