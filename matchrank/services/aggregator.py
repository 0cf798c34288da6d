"""Match aggregator.

Fetches canonical matches for a content type's date window from the
provider registry:

- days are fetched concurrently (they are independent)
- within a day, providers are tried strictly in priority order and the first
  one returning at least one match wins that day (no mixing of id schemes)
- if nothing at all was found, the free fallback provider is tried once
- results are deduplicated; nothing is ever fabricated

Each call runs inside its own ProviderPass, so failures seen by one request
never hide providers from another, and a day fetch that outlives its
deadline cannot change provider health afterwards.
"""

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import date, datetime

from matchrank.config import Config
from matchrank.core import ContentType, DateRange, Match, ProviderError
from matchrank.providers.registry import ProviderPass, ProviderRegistry
from matchrank.scoring.policy import window_for
from matchrank.utilities.cancellation import CancellationToken
from matchrank.utilities.fuzzy_match import slugify
from matchrank.utilities.tz import now_utc

logger = logging.getLogger(__name__)


@dataclass
class DayResult:
    """What happened for one day of the window."""

    day: date
    provider: str | None = None  # provider whose matches were accepted
    matches: list[Match] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class AggregationResult:
    window: DateRange
    matches: list[Match] = field(default_factory=list)
    days: list[DayResult] = field(default_factory=list)
    used_fallback: bool = False
    cancelled: bool = False

    @property
    def failed_days(self) -> int:
        return sum(1 for d in self.days if d.provider is None)


def deduplicate_matches(matches: list[Match]) -> list[Match]:
    """Drop repeated fixtures, keeping the first occurrence.

    A fixture is identified by (home id, away id, UTC kickoff date); the same
    key built from team-name slugs catches copies reported under another
    provider's id scheme.
    """
    seen_ids: set[tuple] = set()
    seen_names: set[tuple] = set()
    unique = []
    for match in matches:
        day = match.kickoff_date
        id_key = (match.home_team.id, match.away_team.id, day)
        name_key = (slugify(match.home_team.name), slugify(match.away_team.name), day)
        if id_key in seen_ids or name_key in seen_names:
            continue
        seen_ids.add(id_key)
        seen_names.add(name_key)
        unique.append(match)
    return unique


class MatchAggregator:
    """Drives a ProviderRegistry to produce canonical matches."""

    def __init__(
        self,
        registry: ProviderRegistry,
        clock: Callable[[], datetime] = now_utc,
        max_workers: int | None = None,
    ):
        self._registry = registry
        self._clock = clock
        self._max_workers = max_workers or Config.AGGREGATOR_MAX_WORKERS

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    def fetch_canonical_matches(
        self,
        content_type: ContentType | str,
        language_hint: str = "en",
        now: datetime | None = None,
        cancel: CancellationToken | None = None,
    ) -> list[Match]:
        """Matches for the content type's window. Empty when every provider fails."""
        return self.aggregate(content_type, language_hint, now, cancel).matches

    def aggregate(
        self,
        content_type: ContentType | str,
        language_hint: str = "en",
        now: datetime | None = None,
        cancel: CancellationToken | None = None,
    ) -> AggregationResult:
        # Providers return the same fixtures for every language; the hint is
        # carried for logging only
        now = now or self._clock()
        window = window_for(content_type, now)
        logger.info(
            "[AGGREGATOR] Fetching %s matches for %s..%s (lang=%s)",
            ContentType(content_type).value,
            window.start,
            window.end,
            language_hint,
        )
        return self.aggregate_range(window, cancel)

    def aggregate_range(
        self,
        window: DateRange,
        cancel: CancellationToken | None = None,
    ) -> AggregationResult:
        result = AggregationResult(window=window)
        with self._registry.begin_pass() as provider_pass:
            result.days = self._fetch_days(window.days(), provider_pass, cancel)

            matches = [m for day in result.days for m in day.matches]
            result.cancelled = bool(cancel and cancel.is_cancelled)

            if not matches and not result.cancelled:
                matches = self._fetch_fallback(window, provider_pass)
                result.used_fallback = True

        result.matches = sorted(deduplicate_matches(matches), key=lambda m: (m.kickoff, m.id))
        logger.info(
            "[AGGREGATOR] %d matches (%d days without data%s)",
            len(result.matches),
            result.failed_days,
            ", free fallback used" if result.used_fallback else "",
        )
        return result

    def _fetch_days(
        self, days: list[date], provider_pass: ProviderPass, cancel: CancellationToken | None
    ) -> list[DayResult]:
        if not days:
            return []

        executor = ThreadPoolExecutor(
            max_workers=min(self._max_workers, len(days)), thread_name_prefix="aggregator"
        )
        try:
            future_to_day = {
                executor.submit(self._fetch_day, day, provider_pass, cancel): day
                for day in days
            }
            done, not_done = wait(future_to_day, timeout=cancel.remaining() if cancel else None)
            for future in not_done:
                future.cancel()
            if not_done:
                logger.warning("[AGGREGATOR] %d day fetches did not finish in time", len(not_done))
                if cancel:
                    cancel.cancel()

            results = []
            for future in done:
                day = future_to_day[future]
                try:
                    results.append(future.result())
                except Exception as e:
                    logger.warning("[AGGREGATOR] Day %s failed unexpectedly: %s", day, e)
                    results.append(DayResult(day=day, errors=[str(e)]))
            for future in not_done:
                results.append(DayResult(day=future_to_day[future], errors=["cancelled"]))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return sorted(results, key=lambda r: r.day)

    def _fetch_day(
        self, day: date, provider_pass: ProviderPass, cancel: CancellationToken | None
    ) -> DayResult:
        """Try providers in priority order until one returns matches for the day."""
        result = DayResult(day=day)
        attempted: set[str] = set()

        while not (cancel and cancel.is_cancelled):
            provider = provider_pass.next_usable(exclude=attempted)
            if provider is None:
                break
            attempted.add(provider.name)

            try:
                matches = provider.fetch_fixtures(DateRange.single(day))
            except ProviderError as e:
                logger.warning("[AGGREGATOR] %s failed for %s: %s", provider.name, day, e)
                provider_pass.record_outcome(provider.name, success=False)
                result.errors.append(str(e))
                continue
            except Exception as e:
                logger.exception("[AGGREGATOR] %s raised unexpectedly for %s", provider.name, day)
                provider_pass.record_outcome(provider.name, success=False)
                result.errors.append(f"{provider.name}: {e}")
                continue

            provider_pass.record_outcome(provider.name, success=True)
            if matches:
                logger.debug("[AGGREGATOR] %s: %d matches from %s", day, len(matches), provider.name)
                result.provider = provider.name
                result.matches = matches
                return result
            logger.debug("[AGGREGATOR] %s: no matches from %s", day, provider.name)

        return result

    def _fetch_fallback(self, window: DateRange, provider_pass: ProviderPass) -> list[Match]:
        fallback = self._registry.fallback
        if fallback is None or not provider_pass.is_usable(fallback.name):
            logger.warning("[AGGREGATOR] No provider returned matches and no free fallback is usable")
            return []

        logger.info("[AGGREGATOR] All providers empty - trying free fallback %s", fallback.name)
        try:
            matches = fallback.fetch_fixtures(window)
        except ProviderError as e:
            logger.warning("[AGGREGATOR] Free fallback %s failed: %s", fallback.name, e)
            provider_pass.record_outcome(fallback.name, success=False, calls=len(window))
            return []
        except Exception:
            logger.exception("[AGGREGATOR] Free fallback %s raised unexpectedly", fallback.name)
            provider_pass.record_outcome(fallback.name, success=False, calls=len(window))
            return []

        provider_pass.record_outcome(fallback.name, success=True, calls=len(window))
        return matches
