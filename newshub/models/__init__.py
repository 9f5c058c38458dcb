"""Data models for AI News Hub."""

from .article import Article, ArticleMetadata
from .digest import DailyDigest
from .source import Source

__all__ = ["Article", "ArticleMetadata", "DailyDigest", "Source"]
