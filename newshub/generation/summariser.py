"""Article classification and summarisation."""

import json
import logging
import re
from typing import Optional

from pydantic import ValidationError

from ..constants import RELEVANCE_THRESHOLD, Category, SummaryStatus
from ..errors import AppError, is_quota_or_rate_limit, is_safety_block
from ..models import Article, ArticleMetadata
from .gateway import LLMGateway
from .models import ArticleVerdict, SummarisationResult
from .prompts import ARTICLE_SUMMARY_PROMPT, build_article_summary_input

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


def parse_llm_response(text: str) -> Optional[ArticleVerdict]:
    """
    Parse the classifier's JSON verdict.

    Returns:
        ArticleVerdict, or None if the text is not JSON or lacks a
        classification string and a numeric relevance_score
    """
    cleaned = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text.strip(), count=1), count=1).strip()
    try:
        data = json.loads(cleaned)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    try:
        return ArticleVerdict.model_validate(data)
    except ValidationError:
        return None


def format_summary_markdown(verdict: ArticleVerdict) -> str:
    """Render a verdict as the stored summary."""
    lines = [verdict.tldr, ""]
    if verdict.key_points:
        lines.extend(f"- {point}" for point in verdict.key_points)
        lines.append("")
    if verdict.why_it_matters:
        lines.append(f"**Why it matters:** {verdict.why_it_matters}")
    return "\n".join(lines).strip()


def normalise_category(classification: str) -> Category:
    """Map a model-supplied classification onto a Category, defaulting to other."""
    try:
        return Category(classification.strip().lower())
    except ValueError:
        return Category.OTHER


def clamp_score(score: float) -> int:
    return max(1, min(10, int(round(score))))


class ArticleSummariser:
    """Classify and summarise one article at a time."""

    def __init__(self, gateway: LLMGateway, relevance_threshold: int = RELEVANCE_THRESHOLD) -> None:
        self.gateway = gateway
        self.relevance_threshold = relevance_threshold

    async def summarise_one(self, article: Article) -> SummarisationResult:
        """Summarise an article. Always returns a result, never raises."""
        try:
            response = await self.gateway.generate_text(
                ARTICLE_SUMMARY_PROMPT,
                build_article_summary_input(article),
            )
        except AppError as e:
            if is_safety_block(e):
                return SummarisationResult(
                    id=article.id,
                    status=SummaryStatus.FAILED_SAFETY,
                    error="Content blocked by safety filters",
                )
            if is_quota_or_rate_limit(e):
                return SummarisationResult(id=article.id, status=SummaryStatus.FAILED_QUOTA, error=e.message)
            return SummarisationResult(id=article.id, status=SummaryStatus.SKIPPED, error=e.message)
        except Exception as e:
            logger.exception("Unexpected error summarising article %s", article.id)
            return SummarisationResult(id=article.id, status=SummaryStatus.SKIPPED, error=str(e))

        verdict = parse_llm_response(response.text)
        if verdict is None:
            # Degraded but usable: keep whatever the model wrote
            logger.debug("Unparseable verdict for article %s, storing raw text", article.id)
            return SummarisationResult(id=article.id, status=SummaryStatus.COMPLETED, summary=response.text)

        category = normalise_category(verdict.classification)
        metadata = ArticleMetadata(
            relevance_score=clamp_score(verdict.relevance_score),
            tech_stack=verdict.tech_stack,
        )

        if verdict.relevance_score < self.relevance_threshold:
            return SummarisationResult(
                id=article.id,
                status=SummaryStatus.SKIPPED,
                category=category,
                metadata=metadata,
                error=f"Low relevance score: {verdict.relevance_score:g}/{self.relevance_threshold}",
            )

        return SummarisationResult(
            id=article.id,
            status=SummaryStatus.COMPLETED,
            summary=format_summary_markdown(verdict) or response.text,
            category=category,
            metadata=metadata,
        )
