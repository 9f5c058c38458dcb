"""Article storage in Postgres."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from psycopg import Error as PsycopgError
from psycopg.errors import UniqueViolation
from psycopg.types.json import Jsonb

from ..constants import Category, SummaryStatus
from ..errors import AppError, ErrorCode
from ..ingestion.models import FetchedArticle
from ..models import Article, ArticleMetadata
from .base import ArticleStore
from .connection import get_connection

logger = logging.getLogger(__name__)


class ArticleStorage(ArticleStore):
    """Handle article storage and deduplication."""

    def __init__(self, db_config: Dict[str, Any]) -> None:
        self.db_config = db_config

    def insert_article(self, article: FetchedArticle) -> bool:
        with get_connection(self.db_config) as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO articles (
                            title, slug, url, source, published_at,
                            thumbnail_url, raw_excerpt, summary_status
                        ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                        """,
                        (
                            article.title,
                            article.slug,
                            article.url,
                            article.source,
                            article.published_at,
                            article.thumbnail_url,
                            article.raw_excerpt,
                            SummaryStatus.PENDING.value,
                        ),
                    )
                conn.commit()
                return True
            except UniqueViolation:
                conn.rollback()
                return False
            except PsycopgError as e:
                conn.rollback()
                raise AppError(f"Failed to insert article '{article.title}': {e}", ErrorCode.DB_INSERT_FAILED) from e

    def list_pending(self, limit: int) -> List[Article]:
        return self._select(
            """
            SELECT * FROM articles
            WHERE summary_status = %s
            ORDER BY fetched_at ASC
            LIMIT %s
            """,
            (SummaryStatus.PENDING.value, limit),
        )

    def update_summary(
        self,
        article_id: int,
        status: SummaryStatus,
        summary: Optional[str] = None,
        category: Optional[Category] = None,
        metadata: Optional[ArticleMetadata] = None,
    ) -> bool:
        assignments = ["summary_status = %s"]
        params: List[Any] = [status.value]

        if summary is not None:
            assignments.append("ai_summary = %s")
            params.append(summary)
        if category is not None:
            assignments.append("category = %s")
            params.append(category.value)
        if metadata is not None:
            assignments.append("ai_metadata = %s")
            params.append(Jsonb(metadata.model_dump()))

        params.append(article_id)

        with get_connection(self.db_config) as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(
                        f"UPDATE articles SET {', '.join(assignments)} "
                        "WHERE id = %s AND summary_status = 'pending'",
                        params,
                    )
                    updated = cur.rowcount > 0
                conn.commit()
                return updated
            except PsycopgError as e:
                conn.rollback()
                raise AppError(f"Failed to update article {article_id}: {e}", ErrorCode.DB_INSERT_FAILED) from e

    def find_digest_candidates(
        self,
        since: datetime,
        categories: Sequence[Category],
        limit: int,
    ) -> List[Article]:
        return self._select(
            """
            SELECT * FROM articles
            WHERE summary_status = %s
              AND category = ANY(%s)
              AND NOT is_archived
              AND COALESCE(published_at, fetched_at) >= %s
            ORDER BY is_featured DESC, published_at DESC NULLS LAST
            LIMIT %s
            """,
            (
                SummaryStatus.COMPLETED.value,
                [c.value for c in categories],
                since,
                limit,
            ),
        )

    def _select(self, query: str, params: Sequence[Any]) -> List[Article]:
        try:
            with get_connection(self.db_config) as conn:
                with conn.cursor() as cur:
                    cur.execute(query, params)
                    rows = cur.fetchall()
        except PsycopgError as e:
            raise AppError(f"Failed to fetch articles: {e}", ErrorCode.DB_FETCH_FAILED) from e
        return [Article.model_validate(row) for row in rows]
