"""GNews search API fetcher.

Free tier: 100 requests/day, up to 10 articles per request, 12 hour delay.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
import pendulum

from ..constants import GNEWS_TIMEOUT_SECONDS
from ..errors import AppError, ErrorCode, FetchError
from .models import FetchedArticle, normalise_article

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://gnews.io/api/v4"
DEFAULT_QUERY = "artificial intelligence"


def _text_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _parse_date(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return pendulum.parse(value)
    except ValueError:
        return None


class GNewsFetcher:
    """Fetch articles from the GNews search endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = GNEWS_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def fetch(self, config: Dict[str, Any]) -> List[FetchedArticle]:
        """
        Run one search described by a source config blob.

        Args:
            config: {"query", "lang", "max", "page"}; missing keys use defaults

        Raises:
            AppError(CONFIG_MISSING): if no API key is configured
            FetchError: on non-2xx responses, timeouts or malformed bodies
        """
        if not self.api_key:
            raise AppError("GNEWS_API_KEY is not set", ErrorCode.CONFIG_MISSING)

        params = {
            "q": config.get("query") or DEFAULT_QUERY,
            "lang": config.get("lang") or "en",
            "max": int(config.get("max") or 10),
            "page": int(config.get("page") or 1),
            "token": self.api_key,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(f"{self.base_url}/search", params=params)
        except httpx.TimeoutException as e:
            raise FetchError("GNews request timed out") from e
        except httpx.HTTPError as e:
            raise FetchError(f"GNews request failed: {e}") from e

        if not response.is_success:
            raise FetchError(
                f"GNews API error {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError("GNews returned invalid JSON", status_code=response.status_code) from e

        if not isinstance(data, dict):
            raise FetchError(
                f"GNews returned unexpected JSON ({type(data).__name__})",
                status_code=response.status_code,
                body=response.text,
            )
        items = data.get("articles") or []
        if not isinstance(items, list):
            raise FetchError("GNews 'articles' is not a list", status_code=response.status_code, body=response.text)

        seen_slugs = set()
        articles = []
        for item in items:
            if not isinstance(item, dict):
                continue
            title, url = item.get("title"), item.get("url")
            if not isinstance(title, str) or not isinstance(url, str) or not title or not url:
                continue
            source = item.get("source")
            article = normalise_article(
                title=title,
                url=url,
                source=source.get("name") if isinstance(source, dict) else None,
                seen_slugs=seen_slugs,
                published_at=_parse_date(item.get("publishedAt")),
                thumbnail_url=_text_or_none(item.get("image")),
                excerpt=_text_or_none(item.get("description")),
            )
            if article is not None:
                articles.append(article)

        logger.debug("GNews returned %d articles for %r", len(articles), params["q"])
        return articles
