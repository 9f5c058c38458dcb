"""Daily digest model."""

from datetime import date
from typing import List, Optional

from pydantic import Field

from ..constants import AudioStatus
from .base import DBModel


class DailyDigest(DBModel):
    """One calendar day's briefing."""

    digest_date: date = Field(..., description="Calendar day (unique)")
    summary_text: Optional[str] = Field(None, description="Written digest markdown")
    audio_url: Optional[str] = Field(None, description="Public URL of the audio file")
    audio_status: AudioStatus = Field(AudioStatus.PENDING, description="Audio generation status")
    article_ids: List[int] = Field(default_factory=list, description="Constituent articles, in order")
