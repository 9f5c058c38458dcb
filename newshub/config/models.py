"""Configuration models."""

import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator

from .. import constants
from ..constants import SourceType


def _from_env(name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    return os.environ.get(name) or None


class PostgresConfig(BaseModel):
    """Postgres configuration."""

    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port")
    database: str = Field("newshub", description="Database name")
    user: str = Field("newshub", description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    password_env: Optional[str] = Field("NEWSHUB_DB_PASSWORD", description="Environment variable for password")


class ProviderConfig(BaseModel):
    """A generative-text provider."""

    model: str = Field(..., description="Model name")
    api_key_env: Optional[str] = Field(None, description="Environment variable for API key")
    api_key: Optional[str] = Field(None, description="API key (prefer api_key_env)")
    base_url: Optional[str] = Field(None, description="Base URL for OpenAI-compatible APIs")
    temperature: float = Field(0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(1024, ge=1)

    def resolve_api_key(self) -> Optional[str]:
        return _from_env(self.api_key_env) or self.api_key


def _default_primary() -> ProviderConfig:
    return ProviderConfig(model="gemini-2.0-flash", api_key_env="GEMINI_API_KEY", max_tokens=2048)


def _default_fallback() -> ProviderConfig:
    return ProviderConfig(
        model="llama-3.3-70b-versatile",
        api_key_env="GROQ_API_KEY",
        base_url="https://api.groq.com/openai/v1",
    )


class LLMConfig(BaseModel):
    """LLM gateway configuration."""

    primary: ProviderConfig = Field(default_factory=_default_primary)
    fallback: ProviderConfig = Field(default_factory=_default_fallback)
    daily_soft_limit: int = Field(constants.PRIMARY_DAILY_SOFT_LIMIT, ge=1, description="Primary calls per UTC day")
    warning_threshold: float = Field(constants.USAGE_WARNING_THRESHOLD, gt=0.0, le=1.0)
    timeout_seconds: float = Field(60.0, gt=0.0, description="Per-call timeout")


class TTSConfig(BaseModel):
    """Speech synthesis configuration."""

    model: str = Field("tts-1", description="Speech model (standard tier)")
    voice: str = Field("onyx", description="Voice name")
    response_format: str = Field("mp3", description="Audio encoding")
    api_key_env: Optional[str] = Field("OPENAI_API_KEY", description="Environment variable for API key")
    api_key: Optional[str] = Field(None, description="API key (prefer api_key_env)")
    timeout_seconds: float = Field(90.0, gt=0.0)

    def resolve_api_key(self) -> Optional[str]:
        return _from_env(self.api_key_env) or self.api_key


class StorageConfig(BaseModel):
    """Object storage (Supabase Storage) configuration."""

    url: Optional[str] = Field(None, description="Supabase project URL")
    url_env: Optional[str] = Field("SUPABASE_URL", description="Environment variable for project URL")
    key_env: Optional[str] = Field("SUPABASE_SECRET_KEY", description="Environment variable for service key")
    bucket: str = Field(constants.DIGEST_AUDIO_BUCKET, description="Bucket for digest audio")
    timeout_seconds: float = Field(30.0, gt=0.0)

    def resolve_url(self) -> Optional[str]:
        return _from_env(self.url_env) or self.url

    def resolve_key(self) -> Optional[str]:
        return _from_env(self.key_env)


class GNewsConfig(BaseModel):
    """GNews search API configuration."""

    base_url: str = Field("https://gnews.io/api/v4", description="API base URL")
    api_key_env: Optional[str] = Field("GNEWS_API_KEY", description="Environment variable for API key")
    timeout_seconds: float = Field(constants.GNEWS_TIMEOUT_SECONDS, gt=0.0)

    def resolve_api_key(self) -> Optional[str]:
        return _from_env(self.api_key_env)


class RSSConfig(BaseModel):
    """RSS fetcher configuration."""

    timeout_seconds: float = Field(constants.RSS_TIMEOUT_SECONDS, gt=0.0)
    user_agent: str = Field(constants.RSS_USER_AGENT, description="User-Agent header")


class PipelineConfig(BaseModel):
    """Batch and digest parameters."""

    summarise_batch_size: int = Field(constants.SUMMARISE_BATCH_SIZE, ge=1, le=100)
    summarise_concurrency: int = Field(constants.SUMMARISE_CONCURRENCY, ge=1, le=10)
    relevance_threshold: int = Field(constants.RELEVANCE_THRESHOLD, ge=1, le=10)
    digest_article_count: int = Field(constants.DIGEST_ARTICLE_COUNT, ge=1, le=50)
    digest_min_articles: int = Field(constants.DIGEST_MIN_ARTICLES, ge=1)
    digest_window_hours: int = Field(constants.DIGEST_WINDOW_HOURS, ge=1)
    digest_expanded_window_hours: int = Field(constants.DIGEST_EXPANDED_WINDOW_HOURS, ge=1)

    @model_validator(mode="after")
    def validate_windows(self) -> "PipelineConfig":
        """The expanded window must not be narrower than the default one."""
        if self.digest_expanded_window_hours < self.digest_window_hours:
            raise ValueError("digest_expanded_window_hours must be >= digest_window_hours")
        return self


class ConfigModel(BaseModel):
    """Main configuration model."""

    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    tts: TTSConfig = Field(default_factory=TTSConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    gnews: GNewsConfig = Field(default_factory=GNewsConfig)
    rss: RSSConfig = Field(default_factory=RSSConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)


class SourceConfig(BaseModel):
    """Source configuration from sources.yaml."""

    name: str = Field(..., description="Source name")
    type: SourceType = Field(SourceType.RSS, description="Source type (rss, api)")
    url: Optional[str] = Field(None, description="RSS feed URL")
    provider: Optional[str] = Field(None, description="API provider (gnews)")
    query: Optional[str] = Field(None, description="Search query for API sources")
    lang: str = Field("en", description="Language for API sources")
    max: int = Field(10, ge=1, le=100, description="Articles per API request")
    page: int = Field(1, ge=1, description="Result page for API sources")
    enabled: bool = Field(True, description="Whether source is enabled")

    @model_validator(mode="after")
    def validate_type_fields(self) -> "SourceConfig":
        """RSS sources need a URL, API sources need a provider."""
        if self.type == SourceType.RSS and not self.url:
            raise ValueError(f"RSS source '{self.name}' requires a url")
        if self.type == SourceType.API and not self.provider:
            raise ValueError(f"API source '{self.name}' requires a provider")
        return self

    def fetcher_config(self) -> Dict[str, Any]:
        """Configuration blob stored in the sources table."""
        if self.type == SourceType.RSS:
            return {"url": self.url}
        return {
            "provider": self.provider,
            "query": self.query,
            "lang": self.lang,
            "max": self.max,
            "page": self.page,
        }
