"""TheSportsDB API HTTP client.

Handles raw HTTP requests to TSDB endpoints with rate limiting and caching.
No data transformation - just fetch and return JSON.

TSDB is the designated free fallback: the public key "123" works without
signing up but is limited to 30 requests/minute. Inside a request/response
call we cannot sleep through a cooldown, so a full window fails fast with
ProviderError instead of waiting.

Caching stays within rate limits:
- Events by date: tiered by date proximity (see get_cache_ttl_for_date)
- Team search: 24 hours
- Team last/next events: 1 hour
"""

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import date, datetime

import httpx

from matchrank.core.exceptions import ProviderError
from matchrank.providers.base import BaseAPIClient
from matchrank.utilities.cache import (
    CACHE_TTL_TEAM_SCHEDULE,
    CACHE_TTL_TEAM_SEARCH,
    TTLCache,
    make_cache_key,
)

logger = logging.getLogger(__name__)

TSDB_BASE_URL = "https://www.thesportsdb.com/api/v1/json"


def get_cache_ttl_for_date(target_date: date, today: date | None = None) -> int:
    """Get cache TTL based on how far the date is from today.

    Past:       7 days (results are final)
    Today:      10 minutes (live scores)
    Tomorrow:   1 hour
    Later:      4 hours
    """
    today = today or date.today()
    days_from_today = (target_date - today).days

    if days_from_today < 0:
        return 7 * 24 * 3600
    if days_from_today == 0:
        return 10 * 60
    if days_from_today == 1:
        return 3600
    return 4 * 3600


@dataclass
class RateLimitStats:
    """Statistics about rate limiting, reported in provider health."""

    total_requests: int = 0
    rejected_requests: int = 0
    last_rejected_at: datetime | None = None
    session_start: datetime = field(default_factory=datetime.now)

    @property
    def is_rate_limited(self) -> bool:
        return self.rejected_requests > 0

    def to_dict(self) -> dict:
        return {
            "total_requests": self.total_requests,
            "rejected_requests": self.rejected_requests,
            "last_rejected_at": self.last_rejected_at.isoformat() if self.last_rejected_at else None,
            "is_rate_limited": self.is_rate_limited,
            "session_start": self.session_start.isoformat(),
        }


class RateLimiter:
    """Non-blocking sliding window rate limiter.

    try_acquire() returns False instead of sleeping when the window is full.
    Premium API keys bypass rate limiting entirely.
    """

    def __init__(
        self,
        max_requests: int = 30,
        window_seconds: float = 60.0,
        is_premium: bool = False,
        clock=time.monotonic,
    ):
        self._max_requests = max_requests
        self._window = window_seconds
        self._is_premium = is_premium
        self._clock = clock
        self._requests: deque[float] = deque()
        self._lock = threading.Lock()
        self._stats = RateLimitStats()

    @property
    def stats(self) -> RateLimitStats:
        return self._stats

    def try_acquire(self) -> bool:
        with self._lock:
            self._stats.total_requests += 1
            if self._is_premium:
                return True

            now = self._clock()
            # Remove expired timestamps
            while self._requests and self._requests[0] <= now - self._window:
                self._requests.popleft()

            if len(self._requests) >= self._max_requests:
                self._stats.rejected_requests += 1
                self._stats.last_rejected_at = datetime.now()
                return False

            self._requests.append(now)
            return True


class TSDBClient(BaseAPIClient):
    """Low-level TheSportsDB API client with rate limiting.

    API key resolution:
    1. Explicit api_key parameter (premium)
    2. Free test key "123"

    Free tier limitations:
    - 30 requests/minute
    - eventsnext.php only shows HOME events
    - No livescores
    """

    PROVIDER = "tsdb"
    LOG_TAG = "TSDB"

    # Free test key
    FREE_API_KEY = "123"

    def __init__(
        self,
        base_url: str = TSDB_BASE_URL,
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
        requests_per_minute: int = 30,
    ):
        super().__init__(base_url, api_key or self.FREE_API_KEY, timeout, transport)
        self._rate_limiter = RateLimiter(
            max_requests=requests_per_minute,
            window_seconds=60.0,
            is_premium=self.is_premium,
        )
        self._cache = TTLCache()
        if self.is_premium:
            logger.info("[TSDB] Using premium API key - rate limiting disabled")

    @property
    def is_premium(self) -> bool:
        return self._api_key != self.FREE_API_KEY

    def rate_limit_stats(self) -> dict:
        return self._rate_limiter.stats.to_dict()

    def _url(self, path: str) -> str:
        # Key is part of the path: /api/v1/json/{key}/{endpoint}
        return f"{self._base_url}/{self._api_key}/{path.lstrip('/')}"

    def _cached_request(self, endpoint: str, params: dict, ttl: int) -> dict:
        cache_key = make_cache_key("tsdb", endpoint, *sorted(f"{k}={v}" for k, v in params.items()))
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("[TSDB] Cache hit: %s", cache_key)
            return cached

        if not self._rate_limiter.try_acquire():
            logger.warning("[TSDB] Free API limit reached - skipping %s", endpoint)
            raise ProviderError(self.PROVIDER, "rate limit window full")

        data = self._request(endpoint, params)
        if not isinstance(data, dict):
            raise ProviderError(self.PROVIDER, f"unexpected payload from {endpoint}")
        self._cache.set(cache_key, data, ttl)
        return data

    def get_events_by_date(self, day: date, sport: str = "Soccer") -> dict:
        """All events of a sport on a date (eventsday.php)."""
        return self._cached_request(
            "eventsday.php",
            {"d": day.isoformat(), "s": sport},
            get_cache_ttl_for_date(day),
        )

    def get_team_last_events(self, team_id: str) -> dict:
        """Last 5 events for a team (eventslast.php, results under 'results')."""
        return self._cached_request("eventslast.php", {"id": team_id}, CACHE_TTL_TEAM_SCHEDULE)

    def get_team_next_events(self, team_id: str) -> dict:
        """Next events for a team (eventsnext.php)."""
        return self._cached_request("eventsnext.php", {"id": team_id}, CACHE_TTL_TEAM_SCHEDULE)

    def search_teams(self, name: str) -> dict:
        """Search teams by name (searchteams.php)."""
        return self._cached_request("searchteams.php", {"t": name}, CACHE_TTL_TEAM_SEARCH)
