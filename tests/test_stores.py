from datetime import timedelta

import pytest

from newshub.config import SourceConfig
from newshub.constants import AudioStatus, Category, SourceType, SummaryStatus
from newshub.errors import AppError, ErrorCode
from newshub.models import ArticleMetadata

ON_TOPIC = [Category.LLM, Category.AGENTS, Category.MODELS, Category.RESEARCH]


def test_list_pending_is_oldest_fetched_first(article_store, make_article):
    newer = make_article(hours_ago=1)
    older = make_article(hours_ago=5)
    make_article(status=SummaryStatus.COMPLETED, hours_ago=10)

    pending = article_store.list_pending(10)

    assert [a.id for a in pending] == [older.id, newer.id]
    assert article_store.list_pending(1)[0].id == older.id


def test_update_summary_leaves_unset_fields(article_store, make_article):
    article = make_article(summary="existing")

    article_store.update_summary(
        article.id,
        SummaryStatus.SKIPPED,
        category=Category.TOOLS,
        metadata=ArticleMetadata(relevance_score=3),
    )

    stored = article_store.get(article.id)
    assert stored.summary_status == SummaryStatus.SKIPPED
    assert stored.ai_summary == "existing"
    assert stored.category == Category.TOOLS
    assert stored.ai_metadata.relevance_score == 3


def test_candidates_filter_and_order(article_store, completed_article, make_article, clock):
    recent = completed_article(hours_ago=2)
    newest = completed_article(hours_ago=1)
    featured = completed_article(hours_ago=20, featured=True)
    undated = completed_article(hours_ago=3, published=False)
    completed_article(category=Category.TOOLS, hours_ago=1)
    completed_article(category=Category.OTHER, hours_ago=1)
    completed_article(hours_ago=1, archived=True)
    completed_article(hours_ago=30)
    make_article(category=Category.LLM, hours_ago=1)

    candidates = article_store.find_digest_candidates(clock() - timedelta(hours=24), ON_TOPIC, 10)

    assert [a.id for a in candidates] == [featured.id, newest.id, recent.id, undated.id]


def test_candidates_respect_limit(article_store, completed_article, clock):
    for hours in range(1, 6):
        completed_article(hours_ago=hours)

    assert len(article_store.find_digest_candidates(clock() - timedelta(hours=24), ON_TOPIC, 3)) == 3


def test_digest_date_is_unique(digest_store, clock):
    digest = digest_store.insert_digest(clock().date(), "text", [1, 2, 3])

    with pytest.raises(AppError) as exc:
        digest_store.insert_digest(clock().date(), "again", [4])

    assert exc.value.code == ErrorCode.DIGEST_EXISTS
    assert len(digest_store.digests) == 1
    assert digest.audio_status == AudioStatus.PENDING
    assert digest_store.get_by_date(clock().date()).id == digest.id


def test_update_audio(digest_store, clock):
    digest = digest_store.insert_digest(clock().date(), "text", [1])

    digest_store.update_audio(digest.id, AudioStatus.COMPLETED, "https://cdn/x.mp3")

    stored = digest_store.get(digest.id)
    assert stored.audio_status == AudioStatus.COMPLETED
    assert stored.audio_url == "https://cdn/x.mp3"


def test_sync_sources_upserts_by_name(source_store):
    first = source_store.sync_sources([SourceConfig(name="Feed", url="https://a/rss")])
    second = source_store.sync_sources([
        SourceConfig(name="Feed", url="https://b/rss"),
        SourceConfig(name="Search", type=SourceType.API, provider="gnews", query="llm"),
    ])

    assert second[0].id == first[0].id
    assert second[0].config == {"url": "https://b/rss"}
    assert second[1].config["provider"] == "gnews"
    assert [s.name for s in source_store.list_active()] == ["Feed", "Search"]


def test_update_summary_only_leaves_pending_once(article_store, make_article):
    article = make_article()

    assert article_store.update_summary(article.id, SummaryStatus.COMPLETED, summary="first")
    assert not article_store.update_summary(article.id, SummaryStatus.SKIPPED, summary="second")

    stored = article_store.get(article.id)
    assert stored.summary_status == SummaryStatus.COMPLETED
    assert stored.ai_summary == "first"
