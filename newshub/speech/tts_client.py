"""Speech synthesis gateway."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, Field

from ..errors import AppError, ErrorCode
from ..text import truncate_on_word

logger = logging.getLogger(__name__)

# Input limit of the OpenAI speech endpoint
MAX_INPUT_CHARS = 4096

CONTENT_TYPES = {
    "mp3": "audio/mpeg",
    "opus": "audio/opus",
    "aac": "audio/aac",
    "flac": "audio/flac",
    "wav": "audio/wav",
}


class SpeechResult(BaseModel):
    """Synthesised audio."""

    audio: bytes = Field(..., description="Encoded audio bytes")
    content_type: str = Field("audio/mpeg", description="MIME type of the audio")


class SpeechSynthesizer(ABC):
    """Turns text into audio bytes with a fixed voice configuration."""

    @abstractmethod
    async def synthesize(self, text: str) -> SpeechResult:
        """
        Raises:
            AppError(TTS_FAILED): provider failure or empty audio
            AppError(CONFIG_MISSING): no credentials
        """


class OpenAISpeechSynthesizer(SpeechSynthesizer):
    """OpenAI text-to-speech with one standard voice."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "tts-1",
        voice: str = "onyx",
        response_format: str = "mp3",
        timeout: float = 90.0,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.voice = voice
        self.response_format = response_format
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def synthesize(self, text: str) -> SpeechResult:
        if not self.api_key and self._client is None:
            raise AppError("OPENAI_API_KEY is not set", ErrorCode.CONFIG_MISSING)

        speech_input = truncate_on_word(text, MAX_INPUT_CHARS)
        if len(speech_input) < len(text):
            logger.warning("Speech input truncated from %d to %d characters", len(text), len(speech_input))

        try:
            response = await asyncio.wait_for(
                self.client.audio.speech.create(
                    model=self.model,
                    voice=self.voice,
                    input=speech_input,
                    response_format=self.response_format,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise AppError(f"Speech synthesis timed out after {self.timeout}s", ErrorCode.TTS_FAILED, is_retryable=True) from e
        except openai.OpenAIError as e:
            raise AppError(f"Speech synthesis failed: {e}", ErrorCode.TTS_FAILED, is_retryable=True) from e

        audio = response.content
        if not audio:
            raise AppError("TTS returned no audio content", ErrorCode.TTS_FAILED, is_retryable=True)

        return SpeechResult(
            audio=audio,
            content_type=CONTENT_TYPES.get(self.response_format, "application/octet-stream"),
        )
