"""HTML → content model.

:func:`extract` is the only public entry point.  It runs the optional
definition pass followed by the heuristic passes from
:mod:`app.services.passes` and never raises.
"""

import logging
from typing import List, Optional

from bs4 import BeautifulSoup

from app.models.content import AssetLink, Assets, WebsiteContent, WebsiteMetadata
from app.models.page_definition import PageDefinition
from app.services.dom import root_container
from app.services.passes import HEURISTIC_PASSES, ExtractionContext, fallback_pass, run_passes, sort_pass
from app.services.sanitizer import sanitize
from app.services.schema_extractor import definition_pass, extract_definition_metadata

logger = logging.getLogger(__name__)

PLACEHOLDER_TITLE = "Extraction Failed"


def _extract_title(soup: BeautifulSoup) -> str:
    title_tag = soup.find("title")
    if title_tag:
        return title_tag.get_text(strip=True)
    og_title = soup.find("meta", attrs={"property": "og:title"})
    if og_title and og_title.get("content"):
        return str(og_title["content"]).strip()
    return ""


def _extract_description(soup: BeautifulSoup) -> str:
    meta = soup.find("meta", attrs={"name": "description"})
    if meta and meta.get("content"):
        return str(meta["content"]).strip()
    og_desc = soup.find("meta", attrs={"property": "og:description"})
    if og_desc and og_desc.get("content"):
        return str(og_desc["content"]).strip()
    return ""


def _extract_images(soup: BeautifulSoup) -> List[str]:
    seen: set = set()
    images: List[str] = []
    for img in soup.find_all("img"):
        src = img.get("src") or img.get("data-src")
        if src and src not in seen:
            seen.add(src)
            images.append(src)
    return images


def _extract_links(soup: BeautifulSoup) -> List[AssetLink]:
    links: List[AssetLink] = []
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if href:
            links.append(AssetLink(text=a.get_text(" ", strip=True), url=href))
    return links


def placeholder_content() -> WebsiteContent:
    """Minimal model returned when extraction fails, obviously wrong to an editor."""
    return WebsiteContent(metadata=WebsiteMetadata(title=PLACEHOLDER_TITLE))


def extract(html: str, page_definition: Optional[PageDefinition] = None) -> WebsiteContent:
    """Build a :class:`WebsiteContent` from *html*.

    When *page_definition* is given its sections are read first; the
    heuristic passes then run only if the definition enables them.  Any
    internal failure, including an empty document, yields
    :func:`placeholder_content`.
    """
    try:
        return _extract(html, page_definition)
    except Exception:
        logger.exception("Content extraction failed")
        return placeholder_content()


def _extract(html: str, page_definition: Optional[PageDefinition]) -> WebsiteContent:
    soup = sanitize(html)
    ctx = ExtractionContext(soup=soup, root=root_container(soup))

    metadata = WebsiteMetadata(title=_extract_title(soup), description=_extract_description(soup))

    if page_definition is not None:
        logger.info("Extracting with page definition '%s'", page_definition.id)
        values = extract_definition_metadata(soup, page_definition)
        metadata = WebsiteMetadata.model_validate({**metadata.model_dump(by_alias=True), **values})
        definition_pass(ctx, page_definition)
        if page_definition.enable_heuristic_fallback:
            run_passes(ctx)
        else:
            run_passes(ctx, (sort_pass, fallback_pass))
    else:
        run_passes(ctx, HEURISTIC_PASSES)

    logger.info("Extracted %d section(s)", len(ctx.sections))
    return WebsiteContent(
        metadata=metadata,
        sections=ctx.sections,
        assets=Assets(images=_extract_images(soup), links=_extract_links(soup)),
    )
