"""Section element resolution.

Given a section id (and optionally the selector stored at extraction time),
find the element to patch.  Resolvers are tried in order; the first hit wins.
"""

import logging
import re
from typing import Callable, Dict, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from app.services.dom import SECTION_MARKER_ATTRS, root_container, select_one

logger = logging.getLogger(__name__)

Resolver = Callable[[BeautifulSoup, str, Optional[str]], Optional[Tag]]

# "<tag>" or "<tag>-<n>" as synthesised by the extractor
_TAG_ID_RE = re.compile(r"^([a-z][a-z0-9]*)(?:-(\d+))?$")

# Well-known ids for the semantic landmarks of a page
SEMANTIC_FALLBACKS: Dict[str, str] = {
    "header": "header",
    "hero": "header",
    "masthead": "header",
    "nav": "nav",
    "navigation": "nav",
    "menu": "nav",
    "navbar": "nav",
    "main": "main",
    "content": "main",
    "main-content": "main",
    "footer": "footer",
    "aside": "aside",
    "sidebar": "aside",
    "article": "article",
    "section": "section",
}

# Auxiliary blocks of the event-site page family that carry no section markup
AUXILIARY_SELECTORS: Dict[str, str] = {
    "next-event": "[data-cms='next-event'], section#eerstvolgende-bijeenkomst, .next-event-banner",
    "next-event-availability": "[data-cms='next-event-availability'], .next-event-availability",
    "upcoming-events": "[data-cms='upcoming-events'], .upcoming-events, section#bijeenkomsten",
    "events": "[data-cms='upcoming-events'], .upcoming-events, section#bijeenkomsten",
    "contact": "[data-cms='contact'], #contact-form, form",
    "cta": "[data-cms='cta'], .cta",
}


def by_selector(soup: BeautifulSoup, section_id: str, selector: Optional[str]) -> Optional[Tag]:
    return select_one(soup, selector)


def by_id(soup: BeautifulSoup, section_id: str, selector: Optional[str]) -> Optional[Tag]:
    return soup.find(id=section_id)


def by_section_attribute(soup: BeautifulSoup, section_id: str, selector: Optional[str]) -> Optional[Tag]:
    for attr in SECTION_MARKER_ATTRS:
        match = soup.find(attrs={attr: section_id})
        if match is not None:
            return match
    return None


def by_class(soup: BeautifulSoup, section_id: str, selector: Optional[str]) -> Optional[Tag]:
    return soup.find(class_=section_id)


def by_tag_name(soup: BeautifulSoup, section_id: str, selector: Optional[str]) -> Optional[Tag]:
    """``footer`` -> first ``<footer>``; ``section-3`` -> third ``<section>``."""
    match = _TAG_ID_RE.match(section_id.lower())
    if not match:
        return None
    tag_name, number = match.group(1), int(match.group(2) or 1)
    if number < 1:
        return None
    candidates = root_container(soup).find_all(tag_name)
    return candidates[number - 1] if len(candidates) >= number else None


def by_semantic_alias(soup: BeautifulSoup, section_id: str, selector: Optional[str]) -> Optional[Tag]:
    tag_name = SEMANTIC_FALLBACKS.get(section_id.lower())
    return root_container(soup).find(tag_name) if tag_name else None


def by_auxiliary_id(soup: BeautifulSoup, section_id: str, selector: Optional[str]) -> Optional[Tag]:
    return select_one(soup, AUXILIARY_SELECTORS.get(section_id.lower()))


GENERATOR_RESOLVERS: Sequence[Resolver] = (
    by_selector,
    by_id,
    by_section_attribute,
    by_class,
    by_tag_name,
)

PREVIEW_RESOLVERS: Sequence[Resolver] = (
    by_selector,
    by_id,
    by_section_attribute,
    by_class,
    by_tag_name,
    by_semantic_alias,
    by_auxiliary_id,
)


def locate_section(
    soup: BeautifulSoup,
    section_id: str,
    selector: Optional[str] = None,
    resolvers: Sequence[Resolver] = GENERATOR_RESOLVERS,
) -> Optional[Tag]:
    """Return the element for *section_id*, or *None* when every resolver misses."""
    for resolver in resolvers:
        element = resolver(soup, section_id, selector)
        if element is not None:
            logger.debug("Section '%s' resolved via %s", section_id, resolver.__name__)
            return element
    return None


def has_section_marker(element: Tag, section_id: str) -> bool:
    """Return True when *element* can be re-found directly by *section_id*."""
    if element.get("id") == section_id:
        return True
    if any(element.get(attr) == section_id for attr in SECTION_MARKER_ATTRS):
        return True
    return section_id in (element.get("class") or [])
