"""Text normalisation utilities: whitespace collapsing, id slugs, canonical JSON."""

import json
import re
import unicodedata
from typing import Any

_WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces and strip the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def slugify(value: str, fallback: str = "section") -> str:
    """Return a lowercase, ASCII-only, hyphen-separated identifier for *value*."""
    slug = unicodedata.normalize("NFKD", value)
    slug = slug.encode("ascii", "ignore").decode("ascii")

    # Lowercase and replace runs of non-alphanumeric chars with a single hyphen
    slug = re.sub(r"[^a-z0-9]+", "-", slug.lower())
    slug = slug.strip("-")

    return slug or fallback


def snippet(text: str, words: int = 6) -> str:
    """Return the first *words* words of *text*."""
    return " ".join(collapse_whitespace(text).split(" ")[:words])


def canonical_json(value: Any) -> str:
    """Serialise *value* deterministically so structurally equal values compare equal."""
    return json.dumps(value, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)
