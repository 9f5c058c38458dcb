"""In-memory stores for tests and dry runs."""

import threading
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from ..config import SourceConfig
from ..constants import AudioStatus, Category, SummaryStatus
from ..errors import AppError, ErrorCode
from ..ingestion.models import FetchedArticle
from ..models import Article, ArticleMetadata, DailyDigest, Source
from .base import ArticleStore, DigestStore, SourceStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryArticleStore(ArticleStore):
    """Article store backed by a dict, with the same uniqueness rules as the table."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self.clock = clock
        self.articles: Dict[int, Article] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def add(self, article: Article) -> Article:
        """Seed a fully-formed article, assigning an id if it has none."""
        with self._lock:
            if article.id is None:
                article = article.model_copy(update={"id": self._next_id})
            self._next_id = max(self._next_id, article.id) + 1
            self.articles[article.id] = article
            return article

    def get(self, article_id: int) -> Optional[Article]:
        return self.articles.get(article_id)

    def insert_article(self, article: FetchedArticle) -> bool:
        with self._lock:
            for existing in self.articles.values():
                if existing.url == article.url or existing.slug == article.slug:
                    return False
            now = self.clock()
            stored = Article(
                id=self._next_id,
                created_at=now,
                fetched_at=now,
                summary_status=SummaryStatus.PENDING,
                **article.model_dump(),
            )
            self.articles[stored.id] = stored
            self._next_id += 1
            return True

    def list_pending(self, limit: int) -> List[Article]:
        pending = [a for a in self.articles.values() if a.summary_status == SummaryStatus.PENDING]
        pending.sort(key=lambda a: a.fetched_at)
        return pending[:limit]

    def update_summary(
        self,
        article_id: int,
        status: SummaryStatus,
        summary: Optional[str] = None,
        category: Optional[Category] = None,
        metadata: Optional[ArticleMetadata] = None,
    ) -> bool:
        with self._lock:
            article = self.articles.get(article_id)
            if article is None:
                raise AppError(f"Article {article_id} not found", ErrorCode.DB_INSERT_FAILED)
            if article.summary_status != SummaryStatus.PENDING:
                return False

            update = {"summary_status": status, "updated_at": self.clock()}
            if summary is not None:
                update["ai_summary"] = summary
            if category is not None:
                update["category"] = category
            if metadata is not None:
                update["ai_metadata"] = metadata
            self.articles[article_id] = article.model_copy(update=update)
            return True

    def find_digest_candidates(
        self,
        since: datetime,
        categories: Sequence[Category],
        limit: int,
    ) -> List[Article]:
        wanted = set(categories)
        candidates = [
            a
            for a in self.articles.values()
            if a.summary_status == SummaryStatus.COMPLETED
            and a.category in wanted
            and not a.is_archived
            and a.freshness_at >= since
        ]

        # Featured first, then newest published; missing dates sort last
        candidates.sort(
            key=lambda a: (
                not a.is_featured,
                a.published_at is None,
                -(a.published_at.timestamp() if a.published_at else 0.0),
            )
        )
        return candidates[:limit]


class MemoryDigestStore(DigestStore):
    """Digest store keyed by id, enforcing one digest per date."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self.clock = clock
        self.digests: Dict[int, DailyDigest] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def get(self, digest_id: int) -> Optional[DailyDigest]:
        return self.digests.get(digest_id)

    def get_by_date(self, digest_date: date) -> Optional[DailyDigest]:
        for digest in self.digests.values():
            if digest.digest_date == digest_date:
                return digest
        return None

    def insert_digest(
        self,
        digest_date: date,
        summary_text: str,
        article_ids: List[int],
    ) -> DailyDigest:
        with self._lock:
            if self.get_by_date(digest_date) is not None:
                raise AppError(f"Digest already exists for {digest_date}", ErrorCode.DIGEST_EXISTS)
            digest = DailyDigest(
                id=self._next_id,
                created_at=self.clock(),
                digest_date=digest_date,
                summary_text=summary_text,
                audio_status=AudioStatus.PENDING,
                article_ids=list(article_ids),
            )
            self.digests[digest.id] = digest
            self._next_id += 1
            return digest

    def update_audio(
        self,
        digest_id: int,
        status: AudioStatus,
        audio_url: Optional[str] = None,
    ) -> None:
        with self._lock:
            digest = self.digests.get(digest_id)
            if digest is None:
                raise AppError(f"Digest {digest_id} not found", ErrorCode.DIGEST_NOT_FOUND)
            update = {"audio_status": status, "updated_at": self.clock()}
            if audio_url is not None:
                update["audio_url"] = audio_url
            self.digests[digest_id] = digest.model_copy(update=update)


class MemorySourceStore(SourceStore):
    """Source store keyed by name."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self.clock = clock
        self.sources: Dict[str, Source] = {}
        self._next_id = 1

    def sync_sources(self, sources: List[SourceConfig]) -> List[Source]:
        synced = []
        for config in sources:
            existing = self.sources.get(config.name)
            source = Source(
                id=existing.id if existing else self._next_id,
                name=config.name,
                type=config.type,
                config=config.fetcher_config(),
                is_active=config.enabled,
                last_fetched_at=existing.last_fetched_at if existing else None,
                last_error=existing.last_error if existing else None,
            )
            if existing is None:
                self._next_id += 1
            self.sources[config.name] = source
            synced.append(source)
        return synced

    def list_active(self) -> List[Source]:
        return sorted(
            (s for s in self.sources.values() if s.is_active),
            key=lambda s: s.name,
        )

    def record_fetch(self, source_id: int, error: Optional[str] = None) -> None:
        for name, source in self.sources.items():
            if source.id == source_id:
                if error is None:
                    update = {"last_fetched_at": self.clock(), "last_error": None}
                else:
                    update = {"last_error": error}
                self.sources[name] = source.model_copy(update=update)
                return
