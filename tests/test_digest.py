from datetime import date

import pytest

from newshub.constants import AudioStatus, Category
from newshub.errors import AppError, ErrorCode
from newshub.generation import DigestComposer, FailureKind
from newshub.generation.digest import audio_key
from newshub.generation.prompts import AUDIO_SCRIPT_PROMPT, DAILY_DIGEST_PROMPT
from newshub.speech import SpeechResult, SpeechSynthesizer
from newshub.storage import MemoryObjectStorage

DIGEST_TEXT = "## The Big Picture\nAgents are everywhere.\n\n## Key Releases\n- **GPT** ships an API"
SCRIPT_TEXT = "Good morning! Today's AI news is all about agents, e.g. coding assistants."


class FakeSynthesizer(SpeechSynthesizer):
    def __init__(self, error=None):
        self.error = error
        self.texts = []

    async def synthesize(self, text):
        self.texts.append(text)
        if self.error:
            raise self.error
        return SpeechResult(audio=b"ID3-fake-mp3", content_type="audio/mpeg")


@pytest.fixture
def synthesizer():
    return FakeSynthesizer()


@pytest.fixture
def storage():
    return MemoryObjectStorage(base_url="https://cdn.example.com")


@pytest.fixture
def composer(article_store, digest_store, gateway, synthesizer, storage, clock):
    return DigestComposer(article_store, digest_store, gateway, synthesizer, storage, clock=clock)


def test_audio_key_is_deterministic():
    assert audio_key(date(2026, 3, 14)) == "digest-2026-03-14.mp3"


@pytest.mark.asyncio
async def test_full_digest(composer, completed_article, primary, digest_store, synthesizer, storage, clock):
    articles = [completed_article(category=c, hours_ago=h) for c, h in (
        (Category.LLM, 1),
        (Category.AGENTS, 2),
        (Category.RESEARCH, 3),
    )]
    primary.responses = [DIGEST_TEXT, SCRIPT_TEXT]

    result = await composer.generate_daily_digest()

    assert not result.skipped
    assert result.summary_text == DIGEST_TEXT
    assert result.article_count == 3
    assert result.audio_url == "https://cdn.example.com/digests/digest-2026-03-14.mp3"

    digest = digest_store.get(result.digest_id)
    assert digest.digest_date == clock().date()
    assert digest.article_ids == [a.id for a in articles]
    assert digest.audio_status == AudioStatus.COMPLETED
    assert digest.audio_url == result.audio_url
    assert storage.objects[("digests", "digest-2026-03-14.mp3")] == (b"ID3-fake-mp3", "audio/mpeg")

    (digest_system, digest_user), (script_system, script_user) = primary.calls
    assert digest_system.endswith(DAILY_DIGEST_PROMPT)
    assert "1. [LLM] [Example Wire] Story 1" in digest_user
    assert script_system.endswith(AUDIO_SCRIPT_PROMPT)
    assert DIGEST_TEXT in script_user

    spoken = synthesizer.texts[0]
    assert "A.I." in spoken
    assert "for example" in spoken
    assert "##" not in spoken


@pytest.mark.asyncio
async def test_second_digest_same_day(composer, completed_article, primary, digest_store):
    for hours in (1, 2, 3):
        completed_article(hours_ago=hours)
    primary.responses = [DIGEST_TEXT, SCRIPT_TEXT]
    await composer.generate_daily_digest()
    calls = len(primary.calls)

    with pytest.raises(AppError) as exc:
        await composer.generate_daily_digest()

    assert exc.value.code == ErrorCode.DIGEST_EXISTS
    assert len(digest_store.digests) == 1
    assert len(primary.calls) == calls


@pytest.mark.asyncio
async def test_too_few_articles_skips_without_llm(composer, completed_article, primary, digest_store):
    completed_article(hours_ago=2)
    completed_article(hours_ago=40)
    completed_article(category=Category.TOOLS, hours_ago=1)

    result = await composer.generate_daily_digest()

    assert result.skipped
    assert result.digest_id is None
    assert result.article_count == 0
    assert primary.calls == []
    assert digest_store.digests == {}


@pytest.mark.asyncio
async def test_expands_to_48_hours(composer, completed_article, primary):
    completed_article(hours_ago=2)
    completed_article(hours_ago=30)
    completed_article(hours_ago=47)
    primary.responses = [DIGEST_TEXT, SCRIPT_TEXT]

    result = await composer.generate_daily_digest()

    assert result.article_count == 3


@pytest.mark.asyncio
async def test_tts_failure_keeps_written_digest(
    article_store, digest_store, gateway, primary, storage, clock, completed_article
):
    for hours in (1, 2, 3):
        completed_article(hours_ago=hours)
    primary.responses = [DIGEST_TEXT, SCRIPT_TEXT]
    synthesizer = FakeSynthesizer(error=AppError("TTS down", ErrorCode.TTS_FAILED, is_retryable=True))
    composer = DigestComposer(article_store, digest_store, gateway, synthesizer, storage, clock=clock)

    result = await composer.generate_daily_digest()

    assert result.digest_id is not None
    assert result.summary_text == DIGEST_TEXT
    assert result.audio_url is None
    assert digest_store.get(result.digest_id).audio_status == AudioStatus.FAILED
    assert storage.objects == {}


@pytest.mark.asyncio
async def test_script_generation_failure_is_not_fatal(composer, completed_article, primary, fallback, digest_store):
    for hours in (1, 2, 3):
        completed_article(hours_ago=hours)
    primary.responses = [DIGEST_TEXT, FailureKind.ERROR]
    fallback.responses = [FailureKind.ERROR]

    result = await composer.generate_daily_digest()

    assert result.audio_url is None
    assert digest_store.get(result.digest_id).audio_status == AudioStatus.FAILED


@pytest.mark.asyncio
async def test_digest_generation_failure_propagates(composer, completed_article, primary, fallback, digest_store):
    for hours in (1, 2, 3):
        completed_article(hours_ago=hours)
    primary.responses = [FailureKind.QUOTA]
    fallback.responses = [FailureKind.QUOTA]

    with pytest.raises(AppError) as exc:
        await composer.generate_daily_digest()

    assert exc.value.code == ErrorCode.QUOTA_EXCEEDED
    assert digest_store.digests == {}


class TestRetryAudio:
    @pytest.mark.asyncio
    async def test_retry_after_failure(self, composer, digest_store, primary, storage, clock):
        digest = digest_store.insert_digest(clock().date(), DIGEST_TEXT, [1, 2, 3])
        digest_store.update_audio(digest.id, AudioStatus.FAILED)
        storage.objects[("digests", audio_key(clock().date()))] = (b"stale", "audio/mpeg")
        primary.responses = [SCRIPT_TEXT]

        url = await composer.retry_digest_audio(digest.id)

        assert url.endswith("digest-2026-03-14.mp3")
        assert digest_store.get(digest.id).audio_status == AudioStatus.COMPLETED
        assert storage.objects[("digests", "digest-2026-03-14.mp3")][0] == b"ID3-fake-mp3"
        assert DIGEST_TEXT in primary.calls[0][1]

    @pytest.mark.asyncio
    async def test_unknown_digest(self, composer):
        with pytest.raises(AppError) as exc:
            await composer.retry_digest_audio(999)
        assert exc.value.code == ErrorCode.DIGEST_NOT_FOUND

    @pytest.mark.asyncio
    async def test_already_completed(self, composer, digest_store, clock):
        digest = digest_store.insert_digest(clock().date(), DIGEST_TEXT, [1])
        digest_store.update_audio(digest.id, AudioStatus.COMPLETED, "https://cdn/x.mp3")

        with pytest.raises(AppError) as exc:
            await composer.retry_digest_audio(digest.id)
        assert exc.value.code == ErrorCode.AUDIO_ALREADY_COMPLETED

    @pytest.mark.asyncio
    async def test_missing_summary(self, composer, digest_store, clock):
        digest = digest_store.insert_digest(clock().date(), "", [1])

        with pytest.raises(AppError) as exc:
            await composer.retry_digest_audio(digest.id)
        assert exc.value.code == ErrorCode.SUMMARY_MISSING

    @pytest.mark.asyncio
    async def test_retry_failure_propagates(self, article_store, digest_store, gateway, primary, storage, clock):
        digest = digest_store.insert_digest(clock().date(), DIGEST_TEXT, [1])
        digest_store.update_audio(digest.id, AudioStatus.FAILED)
        primary.responses = [SCRIPT_TEXT]
        synthesizer = FakeSynthesizer(error=AppError("TTS down", ErrorCode.TTS_FAILED))
        composer = DigestComposer(article_store, digest_store, gateway, synthesizer, storage, clock=clock)

        with pytest.raises(AppError) as exc:
            await composer.retry_digest_audio(digest.id)

        assert exc.value.code == ErrorCode.TTS_FAILED
        assert digest_store.get(digest.id).audio_status == AudioStatus.FAILED
