"""LLM provider interface and implementations.

Adapters never raise for provider failures. Each one translates its SDK's
errors into a ProviderOutcome tagged with a FailureKind, so the gateway can
route on the tag. The translation functions below are the only place that
inspects provider error text; they depend on message formats the providers
do not document and should be revisited when an SDK is upgraded.
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple, Union

import openai
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from openai import AsyncOpenAI

from .models import FailureKind, GenerationOptions, ProviderFailure, ProviderOutcome

logger = logging.getLogger(__name__)

_QUOTA_MARKERS = re.compile(r"quota|\brate[ _-]?limit|\brate\b|429|resource_exhausted", re.IGNORECASE)

_GEMINI_SAFETY_REASONS = {"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII", "IMAGE_SAFETY"}


def looks_like_quota(message: str) -> bool:
    """Whether provider error text signals quota exhaustion or rate limiting."""
    return bool(_QUOTA_MARKERS.search(message or ""))


def _enum_name(value: object) -> str:
    return str(getattr(value, "value", value) or "").upper()


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    name: str = "provider"

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[GenerationOptions] = None,
    ) -> ProviderOutcome:
        """
        Generate text for a system and user prompt pair.

        Args:
            system_prompt: Task instructions
            user_prompt: Content to process
            options: Optional sampling overrides

        Returns:
            ProviderOutcome with text, or a tagged failure
        """
        pass


def translate_gemini_error(error: BaseException) -> ProviderFailure:
    """Map a google-genai exception to a failure tag."""
    message = str(error)
    if isinstance(error, genai_errors.APIError):
        if error.code == 429 or _enum_name(error.status) == "RESOURCE_EXHAUSTED":
            return ProviderFailure(kind=FailureKind.QUOTA, message=message)
    if looks_like_quota(message):
        return ProviderFailure(kind=FailureKind.QUOTA, message=message)
    return ProviderFailure(kind=FailureKind.ERROR, message=message)


class GeminiProvider(LLMProvider):
    """Google Gemini implementation of LLM provider."""

    name = "gemini"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.0-flash",
        temperature: float = 0.3,
        max_tokens: int = 2048,
        timeout: float = 60.0,
        client: Optional[genai.Client] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[GenerationOptions] = None,
    ) -> ProviderOutcome:
        if not self.api_key and self._client is None:
            return ProviderOutcome.failed(self.name, FailureKind.CONFIG, "GEMINI_API_KEY is not set")

        options = options or GenerationOptions()
        config = genai_types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=options.temperature if options.temperature is not None else self.temperature,
            max_output_tokens=options.max_tokens or self.max_tokens,
        )

        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_content(
                    model=self.model,
                    contents=user_prompt,
                    config=config,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            return ProviderOutcome.failed(self.name, FailureKind.ERROR, f"Gemini timed out after {self.timeout}s")
        except Exception as e:
            logger.debug("Gemini call failed", exc_info=True)
            return ProviderOutcome(provider=self.name, failure=translate_gemini_error(e))

        return self._interpret(response)

    def _interpret(self, response: genai_types.GenerateContentResponse) -> ProviderOutcome:
        text = response.text
        if text and text.strip():
            return ProviderOutcome.success(self.name, text)

        feedback = response.prompt_feedback
        if feedback is not None and feedback.block_reason:
            return ProviderOutcome.failed(
                self.name,
                FailureKind.SAFETY,
                f"Prompt blocked by Gemini: {_enum_name(feedback.block_reason)}",
            )

        if response.candidates:
            reason = _enum_name(response.candidates[0].finish_reason)
            if reason in _GEMINI_SAFETY_REASONS:
                return ProviderOutcome.failed(
                    self.name,
                    FailureKind.SAFETY,
                    "Content blocked by Gemini safety filters",
                )

        return ProviderOutcome.failed(self.name, FailureKind.EMPTY, "Gemini returned empty response")


def translate_openai_error(error: BaseException) -> ProviderFailure:
    """Map an openai SDK exception to a failure tag."""
    message = str(error)
    if isinstance(error, openai.RateLimitError) or getattr(error, "status_code", None) == 429:
        code = getattr(error, "code", None) or ""
        if "quota" in str(code).lower() or "quota" in message.lower():
            return ProviderFailure(kind=FailureKind.QUOTA, message=message)
        return ProviderFailure(kind=FailureKind.RATE_LIMITED, message=message)
    if looks_like_quota(message):
        return ProviderFailure(kind=FailureKind.QUOTA, message=message)
    return ProviderFailure(kind=FailureKind.ERROR, message=message)


class OpenAICompatibleProvider(LLMProvider):
    """Chat completions provider for OpenAI-compatible endpoints such as Groq."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "llama-3.3-70b-versatile",
        base_url: Optional[str] = None,
        name: str = "groq",
        temperature: float = 0.3,
        max_tokens: int = 1024,
        timeout: float = 60.0,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.name = name
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[GenerationOptions] = None,
    ) -> ProviderOutcome:
        if not self.api_key and self._client is None:
            return ProviderOutcome.failed(self.name, FailureKind.CONFIG, f"API key for {self.name} is not set")

        options = options or GenerationOptions()
        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    temperature=options.temperature if options.temperature is not None else self.temperature,
                    max_tokens=options.max_tokens or self.max_tokens,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            return ProviderOutcome.failed(self.name, FailureKind.ERROR, f"{self.name} timed out after {self.timeout}s")
        except Exception as e:
            logger.debug("%s call failed", self.name, exc_info=True)
            return ProviderOutcome(provider=self.name, failure=translate_openai_error(e))

        choice = response.choices[0] if response.choices else None
        if choice is not None and choice.finish_reason == "content_filter":
            return ProviderOutcome.failed(self.name, FailureKind.SAFETY, f"Content blocked by {self.name} content filter")

        text = choice.message.content if choice is not None else None
        if not text or not text.strip():
            return ProviderOutcome.failed(self.name, FailureKind.EMPTY, f"{self.name} returned empty response")

        return ProviderOutcome.success(self.name, text)


ScriptedResponse = Union[str, FailureKind, ProviderFailure, Callable[[str, str], str]]


class MockLLMProvider(LLMProvider):
    """Mock LLM provider for testing.

    Responses are consumed in order; once exhausted, `default` is returned.
    A response may be text, a FailureKind, a ProviderFailure, or a callable
    taking (system_prompt, user_prompt) and returning text.
    """

    def __init__(
        self,
        name: str = "mock",
        responses: Optional[List[ScriptedResponse]] = None,
        default: ScriptedResponse = "Mock response",
    ) -> None:
        """Initialize mock provider."""
        self.name = name
        self.responses = list(responses or [])
        self.default = default
        self.calls: List[Tuple[str, str]] = []

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[GenerationOptions] = None,
    ) -> ProviderOutcome:
        self.calls.append((system_prompt, user_prompt))
        item = self.responses.pop(0) if self.responses else self.default

        if isinstance(item, FailureKind):
            return ProviderOutcome.failed(self.name, item, f"mock {item.value} failure")
        if isinstance(item, ProviderFailure):
            return ProviderOutcome(provider=self.name, failure=item)
        if callable(item):
            item = item(system_prompt, user_prompt)
        if not item or not item.strip():
            return ProviderOutcome.failed(self.name, FailureKind.EMPTY, "mock returned empty response")
        return ProviderOutcome.success(self.name, item)
