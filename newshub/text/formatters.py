"""Text formatting helpers."""

import re
import unicodedata
from typing import Set

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_EDGE_HYPHENS = re.compile(r"^-+|-+$")
_REPEATED_HYPHENS = re.compile(r"-{2,}")


def slugify(text: str) -> str:
    """
    Convert text into a URL-safe slug.

    Example: "Hello World! It's 2026" -> "hello-world-it-s-2026"
    """
    decomposed = unicodedata.normalize("NFD", text.lower())
    ascii_text = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    slug = _NON_ALNUM.sub("-", ascii_text)
    slug = _EDGE_HYPHENS.sub("", slug)
    return _REPEATED_HYPHENS.sub("-", slug)


def deduplicate_slug(slug: str, seen: Set[str]) -> str:
    """Return a slug not yet in seen, appending -2, -3, ... as needed."""
    if slug not in seen:
        seen.add(slug)
        return slug

    counter = 2
    while f"{slug}-{counter}" in seen:
        counter += 1
    unique = f"{slug}-{counter}"
    seen.add(unique)
    return unique
