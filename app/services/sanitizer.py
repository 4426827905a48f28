"""Parsing entry points.

Every engine operation parses its own private tree through :func:`parse`.
Extraction additionally works on a :func:`sanitize`-d copy so scripting and
styling payloads never leak into the content model.
"""

from bs4 import BeautifulSoup, Comment

# Parser used for every tree; lxml is fast and repairs broken markup.
PARSER = "lxml"

# Tags whose entire subtree carries no editable content
_REMOVE_TAGS = {
    "script",
    "style",
    "noscript",
    "template",
    "iframe",
    "object",
    "embed",
    "applet",
}


def parse(html: str) -> BeautifulSoup:
    """Parse *html* into a fresh tree.

    Raises:
        ValueError: if *html* is not a string or contains no markup at all.
    """
    if not isinstance(html, str):
        raise ValueError(f"Expected an HTML string, got {type(html).__name__}.")
    if not html.strip():
        raise ValueError("The HTML document is empty.")
    return BeautifulSoup(html, PARSER)


def sanitize(html: str) -> BeautifulSoup:
    """Parse *html* and drop non-content subtrees and comments.

    Only tags that never hold editable text are removed, so sibling
    positions of every content element stay identical to the unsanitised
    tree and selectors generated here resolve against the original.
    """
    soup = parse(html)

    for tag in soup.find_all(_REMOVE_TAGS):
        tag.decompose()

    # Remove HTML comment nodes (may contain debugging info or conditional blocks)
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    return soup


def validate_html(html: str) -> tuple[bool, str | None]:
    """Return ``(True, None)`` when *html* parses, else ``(False, reason)``."""
    try:
        parse(html)
    except ValueError as exc:
        return False, str(exc)
    return True, None
