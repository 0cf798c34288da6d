"""Environment-backed collaborators.

EnvCredentialSource implements the CredentialSource protocol from Config
(one credential per known provider) and tracks calls per UTC day against
each provider's daily limit. StaticChannelConfig maps channel ids to IANA
timezones with a configured default.
"""

import logging
import threading
from collections.abc import Callable, Iterable
from datetime import date, datetime

from matchrank.config import PROVIDER_DEFAULTS, Config
from matchrank.core import ProviderCredential
from matchrank.utilities.tz import now_utc

logger = logging.getLogger(__name__)


class EnvCredentialSource:
    """Credentials from the environment plus an in-memory daily quota counter.

    A limit of 0 or less means unlimited. Counters reset when the UTC date
    changes.
    """

    def __init__(
        self,
        credentials: Iterable[ProviderCredential] | None = None,
        daily_limits: dict[str, int] | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        if credentials is None:
            settings = [Config.get_provider_settings(name) for name in PROVIDER_DEFAULTS]
            credentials = [
                ProviderCredential(
                    name=s["name"],
                    api_key=s["api_key"],
                    base_url=s["base_url"],
                    priority=s["priority"],
                    is_active=s["is_active"],
                    username=s["username"],
                )
                for s in settings
            ]
            if daily_limits is None:
                daily_limits = {s["name"]: s["daily_limit"] for s in settings}

        self._credentials = list(credentials)
        self._limits = dict(daily_limits or {})
        self._clock = clock
        self._lock = threading.Lock()
        self._usage: dict[str, int] = {}
        self._usage_date: date | None = None

    def get_provider_credentials(self) -> list[ProviderCredential]:
        return list(self._credentials)

    def _roll_over(self) -> None:
        # Caller holds the lock
        today = self._clock().date()
        if self._usage_date != today:
            if self._usage_date is not None:
                logger.debug("[QUOTA] New day %s - resetting call counters", today)
            self._usage = {}
            self._usage_date = today

    def is_quota_exhausted(self, provider_name: str) -> bool:
        limit = self._limits.get(provider_name, 0)
        if limit <= 0:
            return False
        with self._lock:
            self._roll_over()
            return self._usage.get(provider_name, 0) >= limit

    def record_call(self, provider_name: str, count: int = 1) -> None:
        with self._lock:
            self._roll_over()
            used = self._usage.get(provider_name, 0) + count
            self._usage[provider_name] = used
        limit = self._limits.get(provider_name, 0)
        if limit > 0 and used >= limit:
            logger.warning("[QUOTA] %s reached its daily limit (%d/%d)", provider_name, used, limit)

    def usage(self, provider_name: str) -> dict:
        """Calls used today, the daily limit, and what is left (None = unlimited)."""
        with self._lock:
            self._roll_over()
            used = self._usage.get(provider_name, 0)
        limit = self._limits.get(provider_name, 0)
        return {
            "provider": provider_name,
            "used": used,
            "limit": limit if limit > 0 else None,
            "remaining": max(0, limit - used) if limit > 0 else None,
        }


class StaticChannelConfig:
    """Channel id -> IANA timezone, with a default for unknown channels."""

    def __init__(self, timezones: dict[str, str] | None = None, default: str | None = None):
        self._timezones = dict(timezones or {})
        self._default = default or Config.DEFAULT_CHANNEL_TIMEZONE

    def get_channel_timezone(self, channel_id: str) -> str:
        return self._timezones.get(channel_id) or self._default
