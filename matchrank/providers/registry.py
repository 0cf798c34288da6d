"""Provider registry.

Holds the configured adapters in static priority order (lower number = tried
first) together with their health. One instance is owned by the aggregator;
there is no module-level state.

Health rules:
- quota_exhausted comes from the credential store. It is re-read when the
  TTL (5 minutes by default) has elapsed, on demand, and right after calls
  are recorded for a provider.
- failures belong to a ProviderPass. A provider that failed is skipped for
  the rest of that pass only, and concurrent passes never see each other's
  failures.
- is_working in the shared health reflects the most recent outcome and is
  used for reporting.
"""

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from matchrank.core import (
    CredentialSource,
    FootballProvider,
    ProviderHealth,
    SystemHealth,
)
from matchrank.utilities.tz import now_utc

logger = logging.getLogger(__name__)

DEFAULT_HEALTH_TTL_SECONDS = 300


@dataclass(frozen=True)
class ProviderEntry:
    """A configured adapter and its static priority."""

    name: str
    provider: FootballProvider
    priority: int


class ProviderRegistry:
    """Ordered adapters plus per-provider health."""

    def __init__(
        self,
        entries: Iterable[ProviderEntry],
        fallback: FootballProvider | None = None,
        credential_source: CredentialSource | None = None,
        clock: Callable[[], datetime] = now_utc,
        health_ttl_seconds: int = DEFAULT_HEALTH_TTL_SECONDS,
    ):
        self._entries = sorted(entries, key=lambda e: (e.priority, e.name))
        self._fallback = fallback
        self._credential_source = credential_source
        self._clock = clock
        self._ttl = timedelta(seconds=health_ttl_seconds)
        self._lock = threading.Lock()
        self._last_refresh: datetime | None = None

        names = [e.name for e in self._entries]
        if fallback is not None:
            names.append(fallback.name)
        self._health: dict[str, ProviderHealth] = {n: ProviderHealth(name=n) for n in names}

    @classmethod
    def from_credentials(
        cls,
        credential_source: CredentialSource,
        factories: dict[str, Callable],
        free_provider: str | None = None,
        transport=None,
        clock: Callable[[], datetime] = now_utc,
        health_ttl_seconds: int = DEFAULT_HEALTH_TTL_SECONDS,
    ) -> "ProviderRegistry":
        """Build adapters for every active credential that has a factory.

        Credentials without an API key are skipped, except the free
        provider, which becomes the fallback rather than a ranked entry.
        """
        entries: list[ProviderEntry] = []
        fallback: FootballProvider | None = None

        for credential in credential_source.get_provider_credentials():
            factory = factories.get(credential.name)
            if factory is None:
                logger.warning("[REGISTRY] No adapter for provider %r - skipping", credential.name)
                continue
            if not credential.is_active:
                logger.info("[REGISTRY] Provider %s is disabled", credential.name)
                continue
            if credential.name == free_provider:
                fallback = factory(credential, transport)
                continue
            if not credential.api_key:
                logger.info("[REGISTRY] Provider %s has no API key - skipping", credential.name)
                continue
            entries.append(
                ProviderEntry(credential.name, factory(credential, transport), credential.priority)
            )

        registry = cls(
            entries,
            fallback=fallback,
            credential_source=credential_source,
            clock=clock,
            health_ttl_seconds=health_ttl_seconds,
        )
        logger.info(
            "[REGISTRY] Providers in priority order: %s (fallback: %s)",
            ", ".join(registry.names()) or "none",
            fallback.name if fallback else "none",
        )
        return registry

    # =========================================================================
    # Lookup
    # =========================================================================

    def names(self) -> list[str]:
        """Ranked provider names, highest priority first (fallback excluded)."""
        return [e.name for e in self._entries]

    def providers(self) -> list[FootballProvider]:
        return [e.provider for e in self._entries]

    @property
    def fallback(self) -> FootballProvider | None:
        return self._fallback

    def get(self, name: str) -> FootballProvider | None:
        """Any registered adapter by name, including the fallback."""
        for entry in self._entries:
            if entry.name == name:
                return entry.provider
        if self._fallback is not None and self._fallback.name == name:
            return self._fallback
        return None

    # =========================================================================
    # Health
    # =========================================================================

    def begin_pass(self, force_refresh: bool = False) -> "ProviderPass":
        """Start an aggregation pass, re-reading quota state when the TTL has elapsed."""
        self.refresh_health(force=force_refresh)
        return ProviderPass(self)

    def refresh_health(self, force: bool = False) -> bool:
        """Re-read quota state if the TTL has elapsed. Returns True if refreshed."""
        now = self._clock()
        with self._lock:
            if not force and self._last_refresh and now - self._last_refresh < self._ttl:
                return False
            self._last_refresh = now
            names = list(self._health)

        for name in names:
            exhausted = self._check_quota(name)
            with self._lock:
                health = self._health[name]
                health.quota_exhausted = exhausted
                health.last_checked_at = now
        logger.debug("[REGISTRY] Health refreshed for %d providers", len(names))
        return True

    def _check_quota(self, name: str) -> bool:
        if self._credential_source is None:
            return False
        try:
            exhausted = self._credential_source.is_quota_exhausted(name)
        except Exception as e:
            # An unreadable quota store counts as exhausted
            logger.warning("[REGISTRY] Quota check failed for %s: %s", name, e)
            return True
        if exhausted:
            logger.info("[REGISTRY] Provider %s has exhausted its quota", name)
        return bool(exhausted)

    def is_usable(self, name: str) -> bool:
        """Reported usability: the last outcome succeeded and quota remains."""
        with self._lock:
            health = self._health.get(name)
            return bool(health and health.is_usable)

    def is_quota_exhausted(self, name: str) -> bool:
        with self._lock:
            health = self._health.get(name)
            return bool(health and health.quota_exhausted)

    def record_outcome(self, name: str, success: bool | None, calls: int = 1) -> None:
        """Record the result of a call attempt.

        success=None reports the calls without touching health. Every attempt
        is reported to the quota tracker and the provider's quota is re-checked
        straight away, so a budget used up mid-pass stops further calls.
        """
        if success is not None:
            with self._lock:
                health = self._health.get(name)
                if health is not None:
                    health.is_working = success
                    health.last_checked_at = self._clock()

        if self._credential_source is None or calls <= 0:
            return
        try:
            self._credential_source.record_call(name, calls)
        except Exception as e:
            logger.warning("[REGISTRY] Failed to record %d call(s) for %s: %s", calls, name, e)
            return
        if self._check_quota(name):
            with self._lock:
                health = self._health.get(name)
                if health is not None:
                    health.quota_exhausted = True

    def health(self, name: str) -> ProviderHealth | None:
        """Snapshot of one provider's health."""
        with self._lock:
            health = self._health.get(name)
            return replace(health) if health else None

    def system_health(self) -> SystemHealth:
        with self._lock:
            snapshots = tuple(replace(h) for h in self._health.values())
        checked = [h.last_checked_at for h in snapshots if h.last_checked_at]
        return SystemHealth(
            working_providers=sum(1 for h in snapshots if h.is_usable),
            total_providers=len(snapshots),
            last_check_timestamp=max(checked) if checked else None,
            providers=snapshots,
        )

    def close(self) -> None:
        for provider in [*self.providers(), *([self._fallback] if self._fallback else [])]:
            provider.close()


class ProviderPass:
    """Failure bookkeeping for one aggregation pass.

    Outcomes that arrive after end() come from workers that outlived the
    pass; they still count against the quota but leave health alone.
    """

    def __init__(self, registry: ProviderRegistry):
        self._registry = registry
        self._lock = threading.Lock()
        self._failed: set[str] = set()
        self._ended = False

    def __enter__(self) -> "ProviderPass":
        return self

    def __exit__(self, *exc) -> None:
        self.end()

    @property
    def ended(self) -> bool:
        return self._ended

    def end(self) -> None:
        with self._lock:
            self._ended = True

    def is_usable(self, name: str) -> bool:
        with self._lock:
            if name in self._failed:
                return False
        return self._registry.get(name) is not None and not self._registry.is_quota_exhausted(name)

    def usable_providers(self, exclude: Iterable[str] = ()) -> list[FootballProvider]:
        """Usable ranked adapters in priority order."""
        skip = set(exclude)
        return [p for p in self._registry.providers() if p.name not in skip and self.is_usable(p.name)]

    def next_usable(self, exclude: Iterable[str] = ()) -> FootballProvider | None:
        """Highest-priority usable adapter not in exclude, or None."""
        usable = self.usable_providers(exclude)
        return usable[0] if usable else None

    def record_outcome(self, name: str, success: bool, calls: int = 1) -> None:
        """A failure skips the provider for the rest of this pass."""
        with self._lock:
            ended = self._ended
            if not ended and not success:
                self._failed.add(name)

        if ended:
            logger.debug("[REGISTRY] Ignoring late outcome from %s, its pass has ended", name)
            self._registry.record_outcome(name, None, calls)
            return
        if not success:
            logger.info("[REGISTRY] Provider %s marked not working for this pass", name)
        self._registry.record_outcome(name, success, calls)
