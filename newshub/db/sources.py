"""Source management in database."""

from typing import Any, Dict, List, Optional

from psycopg.types.json import Jsonb

from ..config import SourceConfig
from ..models import Source
from .base import SourceStore
from .connection import get_connection


class SourceManager(SourceStore):
    """Manage sources in database."""

    def __init__(self, db_config: Dict[str, Any]) -> None:
        self.db_config = db_config

    def sync_sources(self, sources: List[SourceConfig]) -> List[Source]:
        """Sync sources from config to database."""
        synced = []

        with get_connection(self.db_config) as conn:
            with conn.cursor() as cur:
                for source in sources:
                    cur.execute(
                        """
                        INSERT INTO sources (name, type, config, is_active)
                        VALUES (%s, %s, %s, %s)
                        ON CONFLICT (name) DO UPDATE SET
                            type = EXCLUDED.type,
                            config = EXCLUDED.config,
                            is_active = EXCLUDED.is_active
                        RETURNING *
                        """,
                        (
                            source.name,
                            source.type.value,
                            Jsonb(source.fetcher_config()),
                            source.enabled,
                        ),
                    )
                    synced.append(Source.model_validate(cur.fetchone()))
            conn.commit()

        return synced

    def list_active(self) -> List[Source]:
        with get_connection(self.db_config) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT * FROM sources WHERE is_active ORDER BY name")
                return [Source.model_validate(row) for row in cur.fetchall()]

    def record_fetch(self, source_id: int, error: Optional[str] = None) -> None:
        with get_connection(self.db_config) as conn:
            with conn.cursor() as cur:
                if error is None:
                    cur.execute(
                        """
                        UPDATE sources
                        SET last_fetched_at = CURRENT_TIMESTAMP, last_error = NULL
                        WHERE id = %s
                        """,
                        (source_id,),
                    )
                else:
                    cur.execute(
                        "UPDATE sources SET last_error = %s WHERE id = %s",
                        (error, source_id),
                    )
            conn.commit()
