"""Daily call counter for the primary LLM provider.

The counter lives in memory and resets lazily on the first access of a new
UTC day. A process restart forgets same-day usage, which the buffer between
the soft limit and the provider's hard quota absorbs.
"""

import math
import threading
from datetime import date
from typing import Callable, Optional

import pendulum

from ..constants import PRIMARY_DAILY_SOFT_LIMIT, USAGE_WARNING_THRESHOLD
from .models import UsageStats


def utc_today() -> date:
    return pendulum.now("UTC").date()


class UsageTracker:
    """Thread-safe counter of successful primary-provider calls."""

    def __init__(
        self,
        daily_limit: int = PRIMARY_DAILY_SOFT_LIMIT,
        warning_threshold: float = USAGE_WARNING_THRESHOLD,
        today: Callable[[], date] = utc_today,
    ) -> None:
        self.daily_limit = daily_limit
        self.warning_threshold = warning_threshold
        self.today = today
        self._lock = threading.Lock()
        self._date: Optional[date] = None
        self._count = 0

    def _reset_if_new_day(self) -> None:
        # Caller holds the lock
        current = self.today()
        if self._date != current:
            self._date = current
            self._count = 0

    def record_call(self) -> int:
        """Record one successful primary call and return today's count."""
        with self._lock:
            self._reset_if_new_day()
            self._count += 1
            return self._count

    @property
    def call_count(self) -> int:
        with self._lock:
            self._reset_if_new_day()
            return self._count

    def should_use_primary(self) -> bool:
        """False once today's count reaches the soft limit."""
        return self.call_count < self.daily_limit

    def is_near_limit(self) -> bool:
        return self.call_count >= math.floor(self.daily_limit * self.warning_threshold)

    def get_stats(self) -> UsageStats:
        with self._lock:
            self._reset_if_new_day()
            count = self._count
            today = self._date

        percent = round(count / self.daily_limit * 100) if self.daily_limit > 0 else 100
        return UsageStats(
            date=today,
            call_count=count,
            limit=self.daily_limit,
            percent_used=percent,
            using_fallback=count >= self.daily_limit,
        )
