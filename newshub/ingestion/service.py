"""Fetch sources and insert their articles."""

import logging
from typing import List, Optional

from ..config import SourceConfig
from ..constants import SourceType
from ..db.base import ArticleStore, SourceStore
from ..errors import AppError
from ..models import Source
from .gnews_fetcher import GNewsFetcher
from .models import FetchedArticle, IngestResult
from .rss_fetcher import RSSFetcher

logger = logging.getLogger(__name__)


async def fetch_source(
    source: Source,
    rss_fetcher: RSSFetcher,
    gnews_fetcher: Optional[GNewsFetcher] = None,
) -> List[FetchedArticle]:
    """Dispatch a source to the fetcher for its type and provider."""
    config = source.config

    if source.type == SourceType.RSS:
        url = config.get("url")
        if not url:
            raise ValueError("No URL in config")
        return await rss_fetcher.fetch(url, source.name)

    provider = config.get("provider")
    if provider == "gnews":
        if gnews_fetcher is None:
            raise ValueError("GNews fetcher is not configured")
        return await gnews_fetcher.fetch(config)
    raise ValueError(f"Unknown API provider: {provider}")


async def fetch_and_ingest(
    source: Source,
    article_store: ArticleStore,
    rss_fetcher: RSSFetcher,
    gnews_fetcher: Optional[GNewsFetcher] = None,
) -> IngestResult:
    """
    Fetch one source and insert each article as pending.

    Duplicates count as skipped, other insert errors as failed. Fetch
    errors are reported on the result rather than raised.
    """
    try:
        articles = await fetch_source(source, rss_fetcher, gnews_fetcher)
    except (AppError, ValueError) as e:
        logger.warning("Fetch failed for %s: %s", source.name, e)
        return IngestResult(source=source.name, error=str(e))

    result = IngestResult(source=source.name, fetched=len(articles))
    for article in articles:
        try:
            if article_store.insert_article(article):
                result.inserted += 1
            else:
                result.skipped += 1
        except AppError as e:
            logger.error("Insert error for %r: %s", article.title, e.message)
            result.failed += 1

    return result


async def ingest_all_sources(
    source_store: SourceStore,
    article_store: ArticleStore,
    rss_fetcher: RSSFetcher,
    gnews_fetcher: Optional[GNewsFetcher] = None,
    sources: Optional[List[SourceConfig]] = None,
) -> List[IngestResult]:
    """Sync configured sources, then fetch every active one in turn."""
    if sources is not None:
        source_store.sync_sources(sources)

    results = []
    for source in source_store.list_active():
        result = await fetch_and_ingest(source, article_store, rss_fetcher, gnews_fetcher)
        source_store.record_fetch(source.id, result.error)
        results.append(result)

    return results
