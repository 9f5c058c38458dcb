"""LLM gateway, article summarisation and digest composition."""

from .digest import DigestComposer
from .gateway import LLMGateway, build_system_prompt, wrap_user_content
from .llm_provider import (
    GeminiProvider,
    LLMProvider,
    MockLLMProvider,
    OpenAICompatibleProvider,
    looks_like_quota,
)
from .models import (
    ArticleVerdict,
    BatchResult,
    DigestResult,
    FailureKind,
    GenerationOptions,
    LLMResponse,
    ProviderFailure,
    ProviderOutcome,
    SummarisationResult,
    UsageStats,
)
from .summariser import ArticleSummariser, parse_llm_response
from .usage import UsageTracker

__all__ = [
    "ArticleSummariser",
    "ArticleVerdict",
    "BatchResult",
    "DigestComposer",
    "DigestResult",
    "FailureKind",
    "GeminiProvider",
    "GenerationOptions",
    "LLMGateway",
    "LLMProvider",
    "LLMResponse",
    "MockLLMProvider",
    "OpenAICompatibleProvider",
    "ProviderFailure",
    "ProviderOutcome",
    "SummarisationResult",
    "UsageStats",
    "UsageTracker",
    "build_system_prompt",
    "looks_like_quota",
    "parse_llm_response",
    "wrap_user_content",
]
