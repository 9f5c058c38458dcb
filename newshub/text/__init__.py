"""Pure text transforms: sanitising, slugs and speech preprocessing."""

from .formatters import deduplicate_slug, slugify
from .sanitize import sanitize_html, sanitize_text, strip_html, truncate_on_word
from .tts_preprocessor import (
    expand_abbreviations,
    expand_acronyms,
    preprocess_for_tts,
    strip_markdown,
)

__all__ = [
    "slugify",
    "deduplicate_slug",
    "sanitize_html",
    "sanitize_text",
    "strip_html",
    "truncate_on_word",
    "strip_markdown",
    "expand_acronyms",
    "expand_abbreviations",
    "preprocess_for_tts",
]
