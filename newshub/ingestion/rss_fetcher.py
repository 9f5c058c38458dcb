"""RSS feed fetcher."""

import logging
from datetime import datetime
from typing import Any, List, Optional

import feedparser
import httpx
import pendulum

from ..constants import RSS_TIMEOUT_SECONDS, RSS_USER_AGENT
from ..errors import FetchError
from .models import FetchedArticle, normalise_article

logger = logging.getLogger(__name__)


def _first(value: Any) -> Optional[dict]:
    """feedparser exposes media fields as lists of dicts."""
    if isinstance(value, list):
        return value[0] if value else None
    return value or None


def extract_thumbnail(entry: Any) -> Optional[str]:
    """Best-effort thumbnail: media:thumbnail, then image media:content, then image enclosure."""
    thumbnail = _first(entry.get("media_thumbnail"))
    if thumbnail and thumbnail.get("url"):
        return thumbnail["url"]

    content = _first(entry.get("media_content"))
    if content and content.get("url"):
        if content.get("medium") == "image" or str(content.get("type", "")).startswith("image/"):
            return content["url"]

    for enclosure in entry.get("enclosures") or []:
        if str(enclosure.get("type", "")).startswith("image/"):
            return enclosure.get("href") or enclosure.get("url")

    return None


def _published(entry: Any) -> Optional[datetime]:
    # feedparser normalises parsed dates to UTC struct_time
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if not parsed:
        return None
    try:
        return pendulum.datetime(*parsed[:6], tz="UTC")
    except ValueError:
        return None


def _excerpt(entry: Any) -> Optional[str]:
    if entry.get("summary"):
        return entry["summary"]
    content = entry.get("content")
    if content:
        return content[0].get("value")
    return None


class RSSFetcher:
    """Fetch and parse RSS feeds."""

    def __init__(
        self,
        timeout: float = RSS_TIMEOUT_SECONDS,
        user_agent: str = RSS_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize RSS fetcher."""
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport

    async def fetch(self, feed_url: str, source_name: str) -> List[FetchedArticle]:
        """
        Fetch a feed and normalise its entries.

        Entries missing a title or link are dropped. Slugs are unique
        within the returned list.

        Raises:
            FetchError: on HTTP failure, timeout or an unparseable feed
        """
        text = await self._download(feed_url)

        feed = feedparser.parse(text)
        if feed.bozo and not feed.entries:
            raise FetchError(f"Invalid RSS feed {feed_url}: {feed.get('bozo_exception')}")

        seen_slugs = set()
        articles = []
        for entry in feed.entries:
            title = entry.get("title")
            link = entry.get("link")
            if not title or not link:
                continue

            article = normalise_article(
                title=title,
                url=link,
                source=source_name,
                seen_slugs=seen_slugs,
                published_at=_published(entry),
                thumbnail_url=extract_thumbnail(entry),
                excerpt=_excerpt(entry),
            )
            if article is not None:
                articles.append(article)

        logger.debug("Fetched %d articles from %s", len(articles), source_name)
        return articles

    async def _download(self, feed_url: str) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            ) as client:
                response = await client.get(feed_url)
                response.raise_for_status()
                return response.text
        except httpx.TimeoutException as e:
            raise FetchError(f"Timed out fetching {feed_url}") from e
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"HTTP {e.response.status_code} fetching {feed_url}",
                status_code=e.response.status_code,
                body=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(f"HTTP error fetching {feed_url}: {e}") from e
