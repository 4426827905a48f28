"""Live preview: patch HTML with a change list and mark what changed.

:func:`apply_changes` patches only the elements the changes point at, so a
preview can be rendered without a full content model.  The highlight
overlay added by :func:`add_highlights` is cosmetic and is removed again by
:func:`strip_highlights`; highlighted HTML must never be published.
"""

import logging
from typing import Dict, Iterable, List, Optional

from bs4 import BeautifulSoup, Tag

from app.models.content import METADATA_SECTION_ID, PreviewChange, Section, WebsiteContent
from app.models.page_definition import PageDefinition
from app.services.differ import WHOLE_SECTION_FIELD
from app.services.generator import generate
from app.services.locator import PREVIEW_RESOLVERS, locate_section
from app.services.sanitizer import parse
from app.services.writer import METADATA_WRITERS, apply_field, ensure_head, write_order

logger = logging.getLogger(__name__)

HIGHLIGHT_CLASS = "cms-changed"
CHANGE_ID_ATTR = "data-change-id"
OVERLAY_ATTR = "data-highlight-overlay"

HIGHLIGHT_CSS = """
.cms-changed {
  outline: 3px solid #16a34a !important;
  outline-offset: 2px;
  background-color: rgba(34, 197, 94, 0.1) !important;
  position: relative;
}
.cms-changed::after {
  content: "Modified";
  position: absolute;
  top: -24px;
  left: 0;
  background-color: #16a34a;
  color: white;
  padding: 4px 8px;
  border-radius: 4px;
  font-size: 11px;
  font-family: system-ui, sans-serif;
  z-index: 1000;
}
"""

SectionHints = Optional[Iterable[Section]]


def _hint_map(section_hints: SectionHints) -> Dict[str, Section]:
    hints: Dict[str, Section] = {}
    for section in section_hints or ():
        hints.setdefault(section.id, section)
    return hints


def _resolve(soup: BeautifulSoup, change: PreviewChange, hints: Dict[str, Section]) -> Optional[Tag]:
    hint = hints.get(change.section_id)
    selector = hint.selector if hint is not None else None
    return locate_section(soup, change.section_id, selector, PREVIEW_RESOLVERS)


# ---------------------------------------------------------------------------
# Patching
# ---------------------------------------------------------------------------

def apply_changes(html: str, changes: List[PreviewChange], section_hints: SectionHints = None) -> str:
    """Return *html* with every resolvable change applied.

    Unresolvable changes are logged and skipped; the rest of the batch still
    applies.  With no changes the input is returned unchanged.

    Raises:
        ValueError: if *html* is empty.
    """
    if not changes:
        return html

    soup = parse(html)
    hints = _hint_map(section_hints)

    applied = 0
    for change in sorted(changes, key=lambda c: write_order(c.field)):
        try:
            if _apply_change(soup, change, hints):
                applied += 1
        except Exception:
            logger.exception("Failed to apply change '%s' – skipping", change.change_id)

    logger.info("Preview: %d of %d change(s) applied", applied, len(changes))
    return str(soup)


def _apply_change(soup: BeautifulSoup, change: PreviewChange, hints: Dict[str, Section]) -> bool:
    if change.section_id == METADATA_SECTION_ID:
        writer = METADATA_WRITERS.get(change.field)
        if writer is None or not isinstance(change.proposed_value, str):
            logger.warning("Unsupported metadata change '%s' – skipping", change.field)
            return False
        writer(soup, change.proposed_value)
        return True

    if change.field == WHOLE_SECTION_FIELD and change.change_type == "remove":
        logger.info("Preview never removes content; ignoring removal of '%s'", change.section_id)
        return False

    element = _resolve(soup, change, hints)
    if element is None:
        logger.warning("No element found for change '%s' – skipping", change.change_id)
        return False

    if change.field == WHOLE_SECTION_FIELD:
        if not isinstance(change.proposed_value, dict):
            return False
        results = [
            apply_field(element, field, value, fallback_to_self=True)
            for field, value in sorted(
                change.proposed_value.items(), key=lambda item: write_order(item[0])
            )
        ]
        return any(results)

    written = apply_field(element, change.field, change.proposed_value, fallback_to_self=True)
    if not written:
        logger.warning("No target for field '%s' in section '%s'", change.field, change.section_id)
    return written


# ---------------------------------------------------------------------------
# Highlight overlay
# ---------------------------------------------------------------------------

def add_highlights(html: str, changes: List[PreviewChange], section_hints: SectionHints = None) -> str:
    """Mark every element a change resolves to; safe to call repeatedly.

    Raises:
        ValueError: if *html* is empty.
    """
    if not changes:
        return html

    soup = parse(html)
    hints = _hint_map(section_hints)

    _inject_stylesheet(soup)

    for change in changes:
        if change.section_id == METADATA_SECTION_ID:
            continue
        try:
            element = _resolve(soup, change, hints)
        except Exception:
            logger.exception("Failed to highlight change '%s' – skipping", change.change_id)
            continue
        if element is None:
            logger.debug("No element to highlight for change '%s'", change.change_id)
            continue
        _mark(element, change.change_id)

    return str(soup)


def _inject_stylesheet(soup: BeautifulSoup) -> None:
    if soup.find("style", attrs={OVERLAY_ATTR: True}) is not None:
        return
    if soup.head is None:
        ensure_head(soup)[OVERLAY_ATTR] = "head"
    style = soup.new_tag("style", attrs={OVERLAY_ATTR: "style"})
    style.string = HIGHLIGHT_CSS
    soup.head.append(style)


def _mark(element: Tag, change_id: str) -> None:
    classes = list(element.get("class") or [])
    if HIGHLIGHT_CLASS not in classes:
        element["class"] = classes + [HIGHLIGHT_CLASS]

    ids = (element.get(CHANGE_ID_ATTR) or "").split()
    if change_id not in ids:
        element[CHANGE_ID_ATTR] = " ".join(ids + [change_id])


def strip_highlights(html: str) -> str:
    """Remove every trace of :func:`add_highlights`.

    HTML without an overlay is returned unchanged.
    """
    if not html or not html.strip():
        return html

    soup = parse(html)
    removed = False

    for style in soup.find_all("style", attrs={OVERLAY_ATTR: True}):
        style.decompose()
        removed = True

    for head in soup.find_all(attrs={OVERLAY_ATTR: True}):
        if head.find(True) is None and not head.get_text(strip=True):
            head.decompose()
        else:
            del head[OVERLAY_ATTR]
        removed = True

    for element in soup.find_all(class_=HIGHLIGHT_CLASS):
        classes = [cls for cls in element.get("class", []) if cls != HIGHLIGHT_CLASS]
        if classes:
            element["class"] = classes
        else:
            del element["class"]
        removed = True

    for element in soup.find_all(attrs={CHANGE_ID_ATTR: True}):
        del element[CHANGE_ID_ATTR]
        removed = True

    return str(soup) if removed else html


def has_highlights(html: str) -> bool:
    if not html or not html.strip():
        return False
    soup = parse(html)
    return (
        soup.find(attrs={OVERLAY_ATTR: True}) is not None
        or soup.find(class_=HIGHLIGHT_CLASS) is not None
        or soup.find(attrs={CHANGE_ID_ATTR: True}) is not None
    )


def render_for_publish(
    content: WebsiteContent,
    html: Optional[str] = None,
    base_html: Optional[str] = None,
    page_definition: Optional[PageDefinition] = None,
) -> str:
    """Return the HTML to publish.

    Pre-edited *html* wins and only has its highlights stripped; otherwise
    *content* is generated onto *base_html*.

    Raises:
        ValueError: if neither *html* nor *base_html* is given.
    """
    if html and html.strip():
        return strip_highlights(html)
    if base_html and base_html.strip():
        return generate(base_html, content, page_definition)
    raise ValueError("Either html or base_html is required to render for publishing.")
