"""Speech synthesis."""

from .tts_client import OpenAISpeechSynthesizer, SpeechResult, SpeechSynthesizer

__all__ = ["OpenAISpeechSynthesizer", "SpeechResult", "SpeechSynthesizer"]
