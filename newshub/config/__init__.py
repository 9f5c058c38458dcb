"""Configuration management for AI News Hub."""

from .loader import Config, load_config, load_sources, save_config, save_sources
from .models import (
    ConfigModel,
    GNewsConfig,
    LLMConfig,
    PipelineConfig,
    PostgresConfig,
    ProviderConfig,
    RSSConfig,
    SourceConfig,
    StorageConfig,
    TTSConfig,
)

__all__ = [
    "Config",
    "ConfigModel",
    "GNewsConfig",
    "LLMConfig",
    "PipelineConfig",
    "PostgresConfig",
    "ProviderConfig",
    "RSSConfig",
    "SourceConfig",
    "StorageConfig",
    "TTSConfig",
    "load_config",
    "load_sources",
    "save_config",
    "save_sources",
]
