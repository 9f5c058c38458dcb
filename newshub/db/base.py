"""Store interfaces used by the pipeline."""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List, Optional, Sequence

from ..config import SourceConfig
from ..constants import AudioStatus, Category, SummaryStatus
from ..ingestion.models import FetchedArticle
from ..models import Article, ArticleMetadata, DailyDigest, Source


class ArticleStore(ABC):
    """Persistent access to articles."""

    @abstractmethod
    def insert_article(self, article: FetchedArticle) -> bool:
        """
        Insert a fetched article with status pending.

        Returns:
            True if inserted, False if the url or slug already exists

        Raises:
            AppError(DB_INSERT_FAILED) for any other failure
        """

    @abstractmethod
    def list_pending(self, limit: int) -> List[Article]:
        """Pending articles, oldest fetched first."""

    @abstractmethod
    def update_summary(
        self,
        article_id: int,
        status: SummaryStatus,
        summary: Optional[str] = None,
        category: Optional[Category] = None,
        metadata: Optional[ArticleMetadata] = None,
    ) -> bool:
        """
        Record a summarisation outcome. Fields left as None are not touched.

        Only a pending article is updated. Returns False when the article
        already left pending, for example through an overlapping run.
        """

    @abstractmethod
    def find_digest_candidates(
        self,
        since: datetime,
        categories: Sequence[Category],
        limit: int,
    ) -> List[Article]:
        """
        Completed, on-topic articles fresher than since.

        Freshness uses published_at, or fetched_at when the former is
        missing. Ordered featured first, then most recently published.
        """


class DigestStore(ABC):
    """Persistent access to daily digests."""

    @abstractmethod
    def get(self, digest_id: int) -> Optional[DailyDigest]:
        pass

    @abstractmethod
    def get_by_date(self, digest_date: date) -> Optional[DailyDigest]:
        pass

    @abstractmethod
    def insert_digest(
        self,
        digest_date: date,
        summary_text: str,
        article_ids: List[int],
    ) -> DailyDigest:
        """
        Insert a digest with audio_status pending.

        Raises:
            AppError(DIGEST_EXISTS) if a digest for that date exists
            AppError(DB_INSERT_FAILED) for any other failure
        """

    @abstractmethod
    def update_audio(
        self,
        digest_id: int,
        status: AudioStatus,
        audio_url: Optional[str] = None,
    ) -> None:
        pass


class SourceStore(ABC):
    """Persistent access to source configuration and fetch metadata."""

    @abstractmethod
    def sync_sources(self, sources: List[SourceConfig]) -> List[Source]:
        """Upsert configured sources by name and return their stored rows."""

    @abstractmethod
    def list_active(self) -> List[Source]:
        pass

    @abstractmethod
    def record_fetch(self, source_id: int, error: Optional[str] = None) -> None:
        """Store the outcome of a fetch. A successful fetch clears last_error."""
