"""News ingestion from RSS feeds and search APIs."""

from .gnews_fetcher import GNewsFetcher
from .models import FetchedArticle, IngestResult, normalise_article
from .rss_fetcher import RSSFetcher

__all__ = [
    "FetchedArticle",
    "GNewsFetcher",
    "IngestResult",
    "RSSFetcher",
    "normalise_article",
]
