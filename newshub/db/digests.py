"""Daily digest storage in Postgres."""

from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from psycopg import Error as PsycopgError
from psycopg.errors import UniqueViolation

from ..constants import AudioStatus
from ..errors import AppError, ErrorCode
from ..models import DailyDigest
from .base import DigestStore
from .connection import get_connection


class DigestStorage(DigestStore):
    """Persist digests; the unique digest_date column guards against duplicates."""

    def __init__(self, db_config: Dict[str, Any]) -> None:
        self.db_config = db_config

    def get(self, digest_id: int) -> Optional[DailyDigest]:
        return self._select_one("SELECT * FROM daily_digests WHERE id = %s", (digest_id,))

    def get_by_date(self, digest_date: date) -> Optional[DailyDigest]:
        return self._select_one(
            "SELECT * FROM daily_digests WHERE digest_date = %s",
            (digest_date,),
        )

    def insert_digest(
        self,
        digest_date: date,
        summary_text: str,
        article_ids: List[int],
    ) -> DailyDigest:
        with get_connection(self.db_config) as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO daily_digests (digest_date, summary_text, audio_status, article_ids)
                        VALUES (%s, %s, %s, %s)
                        RETURNING *
                        """,
                        (digest_date, summary_text, AudioStatus.PENDING.value, list(article_ids)),
                    )
                    row = cur.fetchone()
                conn.commit()
            except UniqueViolation as e:
                conn.rollback()
                raise AppError(f"Digest already exists for {digest_date}", ErrorCode.DIGEST_EXISTS) from e
            except PsycopgError as e:
                conn.rollback()
                raise AppError(f"Failed to create digest: {e}", ErrorCode.DB_INSERT_FAILED) from e

        return DailyDigest.model_validate(row)

    def update_audio(
        self,
        digest_id: int,
        status: AudioStatus,
        audio_url: Optional[str] = None,
    ) -> None:
        with get_connection(self.db_config) as conn:
            try:
                with conn.cursor() as cur:
                    if audio_url is not None:
                        cur.execute(
                            "UPDATE daily_digests SET audio_status = %s, audio_url = %s WHERE id = %s",
                            (status.value, audio_url, digest_id),
                        )
                    else:
                        cur.execute(
                            "UPDATE daily_digests SET audio_status = %s WHERE id = %s",
                            (status.value, digest_id),
                        )
                conn.commit()
            except PsycopgError as e:
                conn.rollback()
                raise AppError(f"Failed to update digest {digest_id}: {e}", ErrorCode.DB_INSERT_FAILED) from e

    def _select_one(self, query: str, params: Sequence[Any]) -> Optional[DailyDigest]:
        try:
            with get_connection(self.db_config) as conn:
                with conn.cursor() as cur:
                    cur.execute(query, params)
                    row = cur.fetchone()
        except PsycopgError as e:
            raise AppError(f"Failed to fetch digest: {e}", ErrorCode.DB_FETCH_FAILED) from e
        return DailyDigest.model_validate(row) if row else None
