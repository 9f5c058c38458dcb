import asyncio
from types import SimpleNamespace

import httpx
import openai
import pytest

from newshub.generation import FailureKind, GeminiProvider, MockLLMProvider, OpenAICompatibleProvider
from newshub.generation.llm_provider import translate_gemini_error, translate_openai_error


class FakeGeminiModels:
    def __init__(self, response=None, error=None, delay=0.0):
        self.response = response
        self.error = error
        self.delay = delay
        self.kwargs = None

    async def generate_content(self, **kwargs):
        self.kwargs = kwargs
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.response


def gemini_client(models):
    return SimpleNamespace(aio=SimpleNamespace(models=models))


def gemini_response(text=None, block_reason=None, finish_reason="STOP"):
    feedback = SimpleNamespace(block_reason=block_reason) if block_reason else None
    return SimpleNamespace(
        text=text,
        prompt_feedback=feedback,
        candidates=[SimpleNamespace(finish_reason=finish_reason)],
    )


class FakeCompletions:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        return self.response


def openai_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def chat_response(content, finish_reason="stop"):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason=finish_reason)])


def rate_limit_error(message):
    request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
    return openai.RateLimitError(message, response=httpx.Response(429, request=request), body=None)


class TestGemini:
    @pytest.mark.asyncio
    async def test_success_passes_prompts(self):
        models = FakeGeminiModels(response=gemini_response(text="hello"))
        provider = GeminiProvider(api_key="k", model="gemini-test", client=gemini_client(models))

        outcome = await provider.complete("system", "user")

        assert outcome.ok
        assert outcome.text == "hello"
        assert outcome.provider == "gemini"
        assert models.kwargs["model"] == "gemini-test"
        assert models.kwargs["contents"] == "user"
        assert models.kwargs["config"].system_instruction == "system"

    @pytest.mark.asyncio
    async def test_missing_key_is_config_failure(self):
        outcome = await GeminiProvider(api_key=None).complete("system", "user")

        assert outcome.failure.kind == FailureKind.CONFIG

    @pytest.mark.asyncio
    async def test_blocked_prompt_is_safety(self):
        models = FakeGeminiModels(response=gemini_response(block_reason="PROHIBITED_CONTENT"))
        provider = GeminiProvider(api_key="k", client=gemini_client(models))

        outcome = await provider.complete("system", "user")

        assert outcome.failure.kind == FailureKind.SAFETY

    @pytest.mark.asyncio
    async def test_safety_finish_reason(self):
        models = FakeGeminiModels(response=gemini_response(finish_reason="SAFETY"))
        provider = GeminiProvider(api_key="k", client=gemini_client(models))

        outcome = await provider.complete("system", "user")

        assert outcome.failure.kind == FailureKind.SAFETY

    @pytest.mark.asyncio
    async def test_blank_text_is_empty(self):
        models = FakeGeminiModels(response=gemini_response(text="   "))
        provider = GeminiProvider(api_key="k", client=gemini_client(models))

        outcome = await provider.complete("system", "user")

        assert outcome.failure.kind == FailureKind.EMPTY

    @pytest.mark.asyncio
    async def test_quota_error_text(self):
        models = FakeGeminiModels(error=RuntimeError("429 RESOURCE_EXHAUSTED. Quota exceeded"))
        provider = GeminiProvider(api_key="k", client=gemini_client(models))

        outcome = await provider.complete("system", "user")

        assert outcome.failure.kind == FailureKind.QUOTA

    @pytest.mark.asyncio
    async def test_timeout_is_error(self):
        models = FakeGeminiModels(response=gemini_response(text="late"), delay=1.0)
        provider = GeminiProvider(api_key="k", timeout=0.01, client=gemini_client(models))

        outcome = await provider.complete("system", "user")

        assert outcome.failure.kind == FailureKind.ERROR
        assert "timed out" in outcome.failure.message

    def test_translate_generic_error(self):
        assert translate_gemini_error(ValueError("bad request")).kind == FailureKind.ERROR


class TestOpenAICompatible:
    @pytest.mark.asyncio
    async def test_success_sends_messages(self):
        completions = FakeCompletions(response=chat_response("fallback text"))
        provider = OpenAICompatibleProvider(api_key="k", model="llama-test", client=openai_client(completions))

        outcome = await provider.complete("system", "user")

        assert outcome.text == "fallback text"
        assert outcome.provider == "groq"
        assert completions.kwargs["model"] == "llama-test"
        assert completions.kwargs["messages"] == [
            {"role": "system", "content": "system"},
            {"role": "user", "content": "user"},
        ]

    @pytest.mark.asyncio
    async def test_content_filter_is_safety(self):
        completions = FakeCompletions(response=chat_response(None, finish_reason="content_filter"))
        provider = OpenAICompatibleProvider(api_key="k", client=openai_client(completions))

        outcome = await provider.complete("system", "user")

        assert outcome.failure.kind == FailureKind.SAFETY

    @pytest.mark.asyncio
    async def test_empty_content(self):
        completions = FakeCompletions(response=chat_response(""))
        provider = OpenAICompatibleProvider(api_key="k", client=openai_client(completions))

        outcome = await provider.complete("system", "user")

        assert outcome.failure.kind == FailureKind.EMPTY

    @pytest.mark.asyncio
    async def test_rate_limit(self):
        completions = FakeCompletions(error=rate_limit_error("Rate limit reached for requests"))
        provider = OpenAICompatibleProvider(api_key="k", client=openai_client(completions))

        outcome = await provider.complete("system", "user")

        assert outcome.failure.kind == FailureKind.RATE_LIMITED

    def test_quota_flavoured_429(self):
        error = rate_limit_error("You exceeded your current quota")
        assert translate_openai_error(error).kind == FailureKind.QUOTA

    @pytest.mark.asyncio
    async def test_missing_key_is_config_failure(self):
        outcome = await OpenAICompatibleProvider(api_key=None, name="groq").complete("system", "user")

        assert outcome.failure.kind == FailureKind.CONFIG
        assert "groq" in outcome.failure.message


class TestMockProvider:
    @pytest.mark.asyncio
    async def test_scripted_then_default(self):
        provider = MockLLMProvider(responses=["first", FailureKind.QUOTA], default=lambda s, u: u.upper())

        first = await provider.complete("s", "a")
        second = await provider.complete("s", "b")
        third = await provider.complete("s", "c")

        assert first.text == "first"
        assert second.failure.kind == FailureKind.QUOTA
        assert third.text == "C"
        assert [user for _, user in provider.calls] == ["a", "b", "c"]
