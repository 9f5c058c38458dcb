"""Typed application errors."""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Error codes raised across the pipeline."""

    # LLM
    SAFETY_BLOCK = "SAFETY_BLOCK"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    RATE_LIMITED = "RATE_LIMITED"
    LLM_EMPTY_RESPONSE = "LLM_EMPTY_RESPONSE"
    LLM_BOTH_FAILED = "LLM_BOTH_FAILED"

    # Digest
    DIGEST_EXISTS = "DIGEST_EXISTS"
    DIGEST_NOT_FOUND = "DIGEST_NOT_FOUND"
    AUDIO_ALREADY_COMPLETED = "AUDIO_ALREADY_COMPLETED"
    SUMMARY_MISSING = "SUMMARY_MISSING"
    INSUFFICIENT_ARTICLES = "INSUFFICIENT_ARTICLES"

    # Storage
    DB_FETCH_FAILED = "DB_FETCH_FAILED"
    DB_INSERT_FAILED = "DB_INSERT_FAILED"
    UPLOAD_FAILED = "UPLOAD_FAILED"

    # General
    CONFIG_MISSING = "CONFIG_MISSING"
    FETCH_FAILED = "FETCH_FAILED"
    TTS_FAILED = "TTS_FAILED"


class AppError(Exception):
    """Application error carrying a code and a retryability hint."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        is_retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.is_retryable = is_retryable

    def __repr__(self) -> str:
        return f"AppError({self.code.value}: {self.message})"


class FetchError(AppError):
    """A source fetch failed, optionally with the HTTP response that caused it."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message, ErrorCode.FETCH_FAILED, is_retryable=True)
        self.status_code = status_code
        self.body = body


def is_safety_block(error: BaseException) -> bool:
    return isinstance(error, AppError) and error.code == ErrorCode.SAFETY_BLOCK


def is_quota_or_rate_limit(error: BaseException) -> bool:
    return isinstance(error, AppError) and error.code in (
        ErrorCode.QUOTA_EXCEEDED,
        ErrorCode.RATE_LIMITED,
    )


def is_digest_exists(error: BaseException) -> bool:
    return isinstance(error, AppError) and error.code == ErrorCode.DIGEST_EXISTS
