"""Data models for generation."""

import datetime
import math
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..constants import Category, SummaryStatus
from ..models import ArticleMetadata


class FailureKind(str, Enum):
    """Closed set of provider failure tags."""

    SAFETY = "safety"
    QUOTA = "quota"
    RATE_LIMITED = "rate_limited"
    EMPTY = "empty"
    CONFIG = "config"
    ERROR = "error"


class ProviderFailure(BaseModel):
    """Why a provider call produced no text."""

    kind: FailureKind = Field(..., description="Failure tag")
    message: str = Field(..., description="Provider error text, for diagnostics")


class ProviderOutcome(BaseModel):
    """Result of one provider call: text on success, a tagged failure otherwise."""

    provider: str = Field(..., description="Provider name")
    text: Optional[str] = Field(None, description="Generated text")
    failure: Optional[ProviderFailure] = Field(None, description="Failure, if the call failed")

    @property
    def ok(self) -> bool:
        return self.failure is None and bool(self.text)

    @classmethod
    def success(cls, provider: str, text: str) -> "ProviderOutcome":
        return cls(provider=provider, text=text)

    @classmethod
    def failed(cls, provider: str, kind: FailureKind, message: str) -> "ProviderOutcome":
        return cls(provider=provider, failure=ProviderFailure(kind=kind, message=message))


class GenerationOptions(BaseModel):
    """Per-call overrides of provider sampling settings."""

    temperature: Optional[float] = Field(None, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: Optional[int] = Field(None, ge=1, description="Output token cap")


class LLMResponse(BaseModel):
    """Text returned by the gateway."""

    text: str = Field(..., description="Generated text")
    provider_used: str = Field(..., description="Provider that produced the text")


class ArticleVerdict(BaseModel):
    """Structured classifier output.

    Only classification and relevance_score are required; the rest is
    accepted loosely and replaced with empty values when malformed.
    """

    classification: str = Field(..., description="Topic category as returned by the model")
    relevance_score: float = Field(..., description="Relevance to AI practitioners, 1-10")
    tldr: str = Field("", description="One sentence of impact")
    key_points: List[str] = Field(default_factory=list, description="2-3 key points")
    tech_stack: List[str] = Field(default_factory=list, description="Libraries or APIs mentioned")
    why_it_matters: str = Field("", description="One line of practical impact")

    @field_validator("classification", mode="before")
    @classmethod
    def require_classification(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("classification must be a non-empty string")
        return value.strip()

    @field_validator("relevance_score", mode="before")
    @classmethod
    def require_number(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise ValueError("relevance_score must be a number")
        return value

    @field_validator("tldr", "why_it_matters", mode="before")
    @classmethod
    def lenient_text(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("key_points", "tech_stack", mode="before")
    @classmethod
    def lenient_list(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [str(item) for item in value if isinstance(item, (str, int, float)) and str(item).strip()]


class SummarisationResult(BaseModel):
    """Terminal outcome for one article."""

    id: int = Field(..., description="Article ID")
    status: SummaryStatus = Field(..., description="Terminal summary status")
    summary: Optional[str] = Field(None, description="Summary markdown")
    category: Optional[Category] = Field(None, description="Normalised category")
    metadata: Optional[ArticleMetadata] = Field(None, description="Relevance and tech stack")
    error: Optional[str] = Field(None, description="Diagnostic message")


class BatchResult(BaseModel):
    """Outcome of one summarisation batch."""

    processed: int = Field(0, description="Articles processed")
    completed: int = Field(0, description="Articles with status completed")
    failed: int = Field(0, description="Articles with any other status")
    results: List[SummarisationResult] = Field(default_factory=list, description="Per-article results")


class DigestResult(BaseModel):
    """Outcome of composing the daily digest."""

    digest_id: Optional[int] = Field(None, description="Created digest ID")
    summary_text: Optional[str] = Field(None, description="Written digest")
    audio_url: Optional[str] = Field(None, description="Public audio URL, if audio succeeded")
    article_count: int = Field(0, description="Articles included")
    skipped: bool = Field(False, description="True when too few articles were available")


class UsageStats(BaseModel):
    """Snapshot of primary-provider usage for the current UTC day."""

    date: datetime.date = Field(..., description="UTC day")
    call_count: int = Field(..., description="Successful primary calls today")
    limit: int = Field(..., description="Daily soft limit")
    percent_used: int = Field(..., description="Share of the soft limit used, rounded")
    using_fallback: bool = Field(..., description="Whether calls are routed to the fallback")
