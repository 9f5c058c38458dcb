"""Article model for ingested news items."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..constants import Category, SummaryStatus
from .base import DBModel


class ArticleMetadata(BaseModel):
    """Structured classifier output stored alongside an article."""

    relevance_score: int = Field(..., description="Relevance to AI practitioners, 1-10", ge=1, le=10)
    tech_stack: List[str] = Field(default_factory=list, description="Libraries or APIs mentioned")


class Article(DBModel):
    """Article model."""

    title: str = Field(..., description="Sanitised title", max_length=500)
    slug: str = Field(..., description="URL-safe unique slug")
    url: str = Field(..., description="Source URL")
    source: Optional[str] = Field(None, description="Source name")
    published_at: Optional[datetime] = Field(None, description="Publication timestamp")
    fetched_at: datetime = Field(..., description="When the article was ingested")
    thumbnail_url: Optional[str] = Field(None, description="Thumbnail image URL")
    raw_excerpt: Optional[str] = Field(None, description="Sanitised excerpt", max_length=5000)
    ai_summary: Optional[str] = Field(None, description="Generated summary (markdown)")
    summary_status: SummaryStatus = Field(SummaryStatus.PENDING, description="Summarisation status")
    category: Optional[Category] = Field(None, description="Topic category")
    ai_metadata: Optional[ArticleMetadata] = Field(None, description="Classifier metadata")
    is_featured: bool = Field(False, description="Pinned to the top of listings")
    is_archived: bool = Field(False, description="Hidden by housekeeping")

    @property
    def freshness_at(self) -> datetime:
        """Timestamp used for digest windows."""
        return self.published_at or self.fetched_at
