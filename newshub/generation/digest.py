"""Daily "Today in AI" digest composition."""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Callable, List, Optional

from ..config import PipelineConfig
from ..constants import DIGEST_AUDIO_BUCKET, ON_TOPIC_CATEGORIES, AudioStatus
from ..db.base import ArticleStore, DigestStore
from ..errors import AppError, ErrorCode
from ..models import Article, DailyDigest
from ..speech import SpeechSynthesizer
from ..storage import ObjectStorage
from ..text import preprocess_for_tts
from .gateway import LLMGateway
from .models import DigestResult
from .prompts import (
    AUDIO_SCRIPT_PROMPT,
    DAILY_DIGEST_PROMPT,
    build_audio_script_input,
    build_daily_digest_input,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def audio_key(digest_date: date) -> str:
    """Storage key for a day's audio; stable so a retry overwrites it."""
    return f"digest-{digest_date.isoformat()}.mp3"


class DigestComposer:
    """Compose the written digest, then its audio.

    The written digest is the primary deliverable. Audio failures are
    recorded on the digest row and never fail the job.
    """

    def __init__(
        self,
        article_store: ArticleStore,
        digest_store: DigestStore,
        gateway: LLMGateway,
        synthesizer: SpeechSynthesizer,
        storage: ObjectStorage,
        settings: Optional[PipelineConfig] = None,
        bucket: str = DIGEST_AUDIO_BUCKET,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.article_store = article_store
        self.digest_store = digest_store
        self.gateway = gateway
        self.synthesizer = synthesizer
        self.storage = storage
        self.settings = settings or PipelineConfig()
        self.bucket = bucket
        self.clock = clock

    async def generate_daily_digest(self) -> DigestResult:
        """
        Compose today's digest.

        Returns:
            DigestResult; skipped=True when too few articles are available

        Raises:
            AppError(DIGEST_EXISTS): a digest for today already exists
        """
        now = self.clock()
        today = now.date()

        if self.digest_store.get_by_date(today) is not None:
            raise AppError(f"Digest already exists for {today}", ErrorCode.DIGEST_EXISTS)

        articles = self.select_candidates(now)
        if len(articles) < self.settings.digest_min_articles:
            logger.info(
                "Skipping digest for %s: %d eligible articles in %dh",
                today,
                len(articles),
                self.settings.digest_expanded_window_hours,
            )
            return DigestResult(skipped=True)

        response = await self.gateway.generate_text(DAILY_DIGEST_PROMPT, build_daily_digest_input(articles))
        summary_text = response.text

        # Unique digest_date rejects a concurrent run that got past the check above
        digest = self.digest_store.insert_digest(today, summary_text, [a.id for a in articles])
        logger.info("Created digest %s for %s with %d articles", digest.id, today, len(articles))

        audio_url = None
        try:
            audio_url = await self._produce_audio(digest)
        except Exception as e:
            logger.error("Audio generation failed for digest %s: %s", digest.id, e)
            self.digest_store.update_audio(digest.id, AudioStatus.FAILED)

        return DigestResult(
            digest_id=digest.id,
            summary_text=summary_text,
            audio_url=audio_url,
            article_count=len(articles),
        )

    async def retry_digest_audio(self, digest_id: int) -> str:
        """
        Regenerate audio for an existing digest.

        Raises:
            AppError: DIGEST_NOT_FOUND, AUDIO_ALREADY_COMPLETED or
                SUMMARY_MISSING; failures while producing audio propagate
        """
        digest = self.digest_store.get(digest_id)
        if digest is None:
            raise AppError(f"Digest not found: {digest_id}", ErrorCode.DIGEST_NOT_FOUND)
        if digest.audio_status == AudioStatus.COMPLETED:
            raise AppError("Audio already generated for this digest", ErrorCode.AUDIO_ALREADY_COMPLETED)
        if not digest.summary_text:
            raise AppError("No summary text available for TTS", ErrorCode.SUMMARY_MISSING)

        return await self._produce_audio(digest)

    def select_candidates(self, now: datetime) -> List[Article]:
        """Completed on-topic articles from the default window, widened on low volume."""
        articles = self.article_store.find_digest_candidates(
            since=now - timedelta(hours=self.settings.digest_window_hours),
            categories=ON_TOPIC_CATEGORIES,
            limit=self.settings.digest_article_count,
        )
        if len(articles) >= self.settings.digest_min_articles:
            return articles

        logger.info(
            "Only %d articles in %dh, expanding to %dh",
            len(articles),
            self.settings.digest_window_hours,
            self.settings.digest_expanded_window_hours,
        )
        return self.article_store.find_digest_candidates(
            since=now - timedelta(hours=self.settings.digest_expanded_window_hours),
            categories=ON_TOPIC_CATEGORIES,
            limit=self.settings.digest_article_count,
        )

    async def _produce_audio(self, digest: DailyDigest) -> str:
        script = await self.gateway.generate_text(
            AUDIO_SCRIPT_PROMPT,
            build_audio_script_input(digest.summary_text),
        )

        speech_text = preprocess_for_tts(script.text)
        if not speech_text:
            raise AppError("Audio script is empty", ErrorCode.TTS_FAILED)

        speech = await self.synthesizer.synthesize(speech_text)

        key = audio_key(digest.digest_date)
        await self.storage.upload(self.bucket, key, speech.audio, speech.content_type, overwrite=True)
        url = self.storage.get_public_url(self.bucket, key)

        self.digest_store.update_audio(digest.id, AudioStatus.COMPLETED, url)
        return url
