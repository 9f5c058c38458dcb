"""Source model for news feeds and search APIs."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field

from ..constants import SourceType
from .base import DBModel


class Source(DBModel):
    """News source model."""

    name: str = Field(..., description="Source name")
    type: SourceType = Field(..., description="Source type (rss, api)")
    config: Dict[str, Any] = Field(default_factory=dict, description="Fetcher configuration")
    is_active: bool = Field(True, description="Whether the source is fetched")
    last_fetched_at: Optional[datetime] = Field(None, description="Last successful fetch")
    last_error: Optional[str] = Field(None, description="Last fetch error, if any")
