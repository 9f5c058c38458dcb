"""Application-wide constants."""

from enum import Enum

APP_NAME = "AI News Hub"


class SummaryStatus(str, Enum):
    """Summary status values stored on articles."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED_SAFETY = "failed_safety"
    FAILED_QUOTA = "failed_quota"
    SKIPPED = "skipped"


class AudioStatus(str, Enum):
    """Audio status values stored on daily digests."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Category(str, Enum):
    """Topic categories assigned by the classifier."""

    LLM = "llm"
    AGENTS = "agents"
    MODELS = "models"
    RESEARCH = "research"
    TOOLS = "tools"
    OTHER = "other"


class SourceType(str, Enum):
    """Kinds of news source."""

    RSS = "rss"
    API = "api"


# Categories eligible for the daily digest
ON_TOPIC_CATEGORIES = (
    Category.LLM,
    Category.AGENTS,
    Category.MODELS,
    Category.RESEARCH,
)

TITLE_MAX_LENGTH = 500
EXCERPT_MAX_LENGTH = 5000

RSS_TIMEOUT_SECONDS = 10.0
RSS_USER_AGENT = "newshub/0.1 (+AI News Hub)"
GNEWS_TIMEOUT_SECONDS = 15.0

# 250 requests/day on the primary provider's free tier, minus a buffer
PRIMARY_DAILY_SOFT_LIMIT = 230
USAGE_WARNING_THRESHOLD = 0.8

RELEVANCE_THRESHOLD = 5
SUMMARISE_BATCH_SIZE = 10
SUMMARISE_CONCURRENCY = 3

DIGEST_ARTICLE_COUNT = 10
DIGEST_MIN_ARTICLES = 3
DIGEST_WINDOW_HOURS = 24
DIGEST_EXPANDED_WINDOW_HOURS = 48
DIGEST_AUDIO_BUCKET = "digests"
