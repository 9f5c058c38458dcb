import pytest
from conftest import verdict_json

from newshub.constants import Category, SummaryStatus
from newshub.generation import ArticleSummariser, FailureKind, parse_llm_response
from newshub.generation.summariser import clamp_score, format_summary_markdown, normalise_category


class TestParseLLMResponse:
    def test_plain_json(self):
        verdict = parse_llm_response(verdict_json())
        assert verdict.classification == "llm"
        assert verdict.relevance_score == 8

    def test_fenced_json(self):
        verdict = parse_llm_response(f"```json\n{verdict_json('agents', 6)}\n```")
        assert verdict.classification == "agents"

    @pytest.mark.parametrize(
        "text",
        [
            "Sure! Here is a summary of the article.",
            "[1, 2, 3]",
            '{"relevance_score": 7}',
            '{"classification": "llm"}',
            '{"classification": "llm", "relevance_score": "high"}',
            '{"classification": "llm", "relevance_score": true}',
            '{"classification": "", "relevance_score": 7}',
        ],
    )
    def test_rejects_unusable_output(self, text):
        assert parse_llm_response(text) is None

    def test_optional_fields_are_lenient(self):
        verdict = parse_llm_response('{"classification": "tools", "relevance_score": 6, "key_points": "oops", "tldr": 3}')
        assert verdict.key_points == []
        assert verdict.tldr == ""


def test_normalise_category():
    assert normalise_category(" LLM ") == Category.LLM
    assert normalise_category("robotics") == Category.OTHER


def test_clamp_score():
    assert clamp_score(7.6) == 8
    assert clamp_score(42) == 10
    assert clamp_score(-3) == 1


def test_format_summary_markdown():
    verdict = parse_llm_response(verdict_json())
    markdown = format_summary_markdown(verdict)
    assert markdown.startswith("A new open model tops the leaderboard.")
    assert "- Released under Apache 2.0" in markdown
    assert "**Why it matters:** Teams can self-host" in markdown


@pytest.mark.asyncio
async def test_relevant_article_completes(gateway, primary, make_article):
    primary.responses = [verdict_json("models", 9)]
    article = make_article(title="Open weights model")

    result = await ArticleSummariser(gateway).summarise_one(article)

    assert result.id == article.id
    assert result.status == SummaryStatus.COMPLETED
    assert result.category == Category.MODELS
    assert result.metadata.relevance_score == 9
    assert result.metadata.tech_stack == ["PyTorch"]
    assert "Why it matters" in result.summary

    _, user_prompt = primary.calls[0]
    assert "Title: Open weights model" in user_prompt
    assert "Source: Example Wire" in user_prompt
    assert "Excerpt: Excerpt for story" in user_prompt


@pytest.mark.asyncio
async def test_low_relevance_is_skipped_without_summary(gateway, primary, make_article):
    primary.responses = [verdict_json("tools", 3)]

    result = await ArticleSummariser(gateway, relevance_threshold=5).summarise_one(make_article())

    assert result.status == SummaryStatus.SKIPPED
    assert result.summary is None
    assert result.category == Category.TOOLS
    assert result.metadata.relevance_score == 3
    assert result.error == "Low relevance score: 3/5"


@pytest.mark.asyncio
async def test_malformed_output_stored_raw(gateway, primary, make_article):
    primary.responses = ["This article is about a new chatbot."]

    result = await ArticleSummariser(gateway).summarise_one(make_article())

    assert result.status == SummaryStatus.COMPLETED
    assert result.summary == "This article is about a new chatbot."
    assert result.category is None


@pytest.mark.asyncio
async def test_safety_block(gateway, primary, make_article):
    primary.responses = [FailureKind.SAFETY]

    result = await ArticleSummariser(gateway).summarise_one(make_article())

    assert result.status == SummaryStatus.FAILED_SAFETY
    assert result.error == "Content blocked by safety filters"


@pytest.mark.asyncio
async def test_quota_exhaustion(gateway, primary, fallback, make_article):
    primary.responses = [FailureKind.QUOTA]
    fallback.responses = [FailureKind.RATE_LIMITED]

    result = await ArticleSummariser(gateway).summarise_one(make_article())

    assert result.status == SummaryStatus.FAILED_QUOTA


@pytest.mark.asyncio
async def test_other_failures_skip_with_message(gateway, primary, fallback, make_article):
    primary.responses = [FailureKind.ERROR]
    fallback.responses = [FailureKind.EMPTY]

    result = await ArticleSummariser(gateway).summarise_one(make_article())

    assert result.status == SummaryStatus.SKIPPED
    assert result.error.startswith("Both providers failed")


@pytest.mark.asyncio
async def test_unexpected_exception_never_escapes(gateway, make_article, monkeypatch):
    async def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(gateway, "generate_text", explode)

    result = await ArticleSummariser(gateway).summarise_one(make_article())

    assert result.status == SummaryStatus.SKIPPED
    assert result.error == "boom"
