"""Data models for ingestion."""

from datetime import datetime
from typing import Optional, Set

from pydantic import BaseModel, Field

from ..constants import EXCERPT_MAX_LENGTH, TITLE_MAX_LENGTH
from ..text import deduplicate_slug, sanitize_text, slugify


class FetchedArticle(BaseModel):
    """Article normalised from any source, ready for insertion."""

    title: str = Field(..., description="Sanitised title")
    slug: str = Field(..., description="Slug, unique within the fetch")
    url: str = Field(..., description="Article URL")
    source: Optional[str] = Field(None, description="Source name")
    published_at: Optional[datetime] = Field(None, description="Publication date")
    thumbnail_url: Optional[str] = Field(None, description="Best-effort thumbnail")
    raw_excerpt: Optional[str] = Field(None, description="Sanitised excerpt")


class IngestResult(BaseModel):
    """Outcome of fetching one source and inserting its articles."""

    source: str = Field(..., description="Source name")
    fetched: int = Field(0, description="Articles returned by the fetcher")
    inserted: int = Field(0, description="New articles stored")
    skipped: int = Field(0, description="Duplicates rejected by the store")
    failed: int = Field(0, description="Inserts that failed for other reasons")
    error: Optional[str] = Field(None, description="Fetch error, if the source failed")

    @property
    def success(self) -> bool:
        return self.error is None


def normalise_article(
    title: str,
    url: str,
    source: Optional[str],
    seen_slugs: Set[str],
    published_at: Optional[datetime] = None,
    thumbnail_url: Optional[str] = None,
    excerpt: Optional[str] = None,
) -> Optional[FetchedArticle]:
    """
    Sanitise raw fields and assign a slug unique within seen_slugs.

    Returns None when nothing is left of the title after sanitising.
    """
    clean_title = sanitize_text(title, TITLE_MAX_LENGTH)
    if not clean_title:
        return None
    slug = deduplicate_slug(slugify(clean_title) or "article", seen_slugs)
    clean_excerpt = sanitize_text(excerpt, EXCERPT_MAX_LENGTH) if excerpt else None

    return FetchedArticle(
        title=clean_title,
        slug=slug,
        url=url,
        source=source,
        published_at=published_at,
        thumbnail_url=thumbnail_url or None,
        raw_excerpt=clean_excerpt or None,
    )
