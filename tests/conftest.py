import json
from datetime import date, datetime, timedelta, timezone

import pytest

from newshub.constants import Category, SummaryStatus
from newshub.db.memory import MemoryArticleStore, MemoryDigestStore, MemorySourceStore
from newshub.generation import LLMGateway, MockLLMProvider, UsageTracker
from newshub.models import Article

NOW = datetime(2026, 3, 14, 9, 0, tzinfo=timezone.utc)


def verdict_json(classification="llm", score=8, **extra):
    payload = {
        "classification": classification,
        "relevance_score": score,
        "tldr": "A new open model tops the leaderboard.",
        "key_points": ["Released under Apache 2.0", "Beats the previous best by 4 points"],
        "tech_stack": ["PyTorch"],
        "why_it_matters": "Teams can self-host a frontier-grade model.",
    }
    payload.update(extra)
    return json.dumps(payload)


class DummyClock:
    """Settable clock shared by stores and the digest composer."""

    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def today(self) -> date:
        return self.now.date()

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return DummyClock()


@pytest.fixture
def article_store(clock):
    return MemoryArticleStore(clock=clock)


@pytest.fixture
def digest_store(clock):
    return MemoryDigestStore(clock=clock)


@pytest.fixture
def source_store(clock):
    return MemorySourceStore(clock=clock)


@pytest.fixture
def usage(clock):
    return UsageTracker(daily_limit=10, warning_threshold=0.8, today=clock.today)


@pytest.fixture
def primary():
    return MockLLMProvider(name="primary")


@pytest.fixture
def fallback():
    return MockLLMProvider(name="fallback")


@pytest.fixture
def gateway(primary, fallback, usage):
    return LLMGateway(primary, fallback, usage)


@pytest.fixture
def make_article(article_store, clock):
    """Seed an article directly into the memory store."""
    counter = {"n": 0}

    def _make(
        status=SummaryStatus.PENDING,
        category=None,
        hours_ago=1.0,
        published=True,
        featured=False,
        archived=False,
        summary=None,
        title=None,
    ):
        counter["n"] += 1
        n = counter["n"]
        when = clock() - timedelta(hours=hours_ago)
        return article_store.add(
            Article(
                title=title or f"Story {n}",
                slug=f"story-{n}",
                url=f"https://news.example.com/{n}",
                source="Example Wire",
                published_at=when if published else None,
                fetched_at=when,
                raw_excerpt=f"Excerpt for story {n}",
                ai_summary=summary,
                summary_status=status,
                category=category,
                is_featured=featured,
                is_archived=archived,
            )
        )

    return _make


@pytest.fixture
def completed_article(make_article):
    def _make(category=Category.LLM, **kwargs):
        kwargs.setdefault("summary", "Summary text")
        return make_article(status=SummaryStatus.COMPLETED, category=category, **kwargs)

    return _make
