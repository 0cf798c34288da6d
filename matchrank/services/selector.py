"""Match selector - the facade content generators call.

Aggregate -> score -> filter -> rank, then optionally enrich the top matches
with team analysis and head-to-head data fetched concurrently. An empty
result is the normal answer to "nothing suitable right now"; nothing here
raises for provider or timezone problems.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import replace
from datetime import datetime

import httpx

from matchrank.config import Config
from matchrank.core import (
    ChannelConfigSource,
    CompleteAnalysis,
    ContentType,
    EnrichedMatch,
    FootballProvider,
    HeadToHead,
    Match,
    MatchRecommendation,
    ProviderError,
    ScoredMatch,
    ScoringRequest,
    SelectionResult,
    SystemHealth,
    Team,
    TeamAnalysis,
)
from matchrank.providers import build_registry
from matchrank.providers.registry import ProviderRegistry
from matchrank.scoring import RelevanceScorer, select_matches
from matchrank.services.aggregator import MatchAggregator
from matchrank.services.credentials import EnvCredentialSource, StaticChannelConfig
from matchrank.services.team_analysis import build_team_analysis, resolve_team, summarize_head_to_head
from matchrank.utilities.cancellation import CancellationToken
from matchrank.utilities.fuzzy_match import synthetic_id
from matchrank.utilities.tz import now_utc, resolve_timezone

logger = logging.getLogger(__name__)

HEAD_TO_HEAD_LIMIT = 10

# Suitability -> recommendation label, checked top-down
RECOMMENDATION_LEVELS = ((80, "excellent"), (60, "good"), (40, "moderate"))

# Detail branches fetched per enriched match
HOME, AWAY, H2H = "home", "away", "h2h"


def recommendation_label(suitability: int) -> str:
    for floor, label in RECOMMENDATION_LEVELS:
        if suitability >= floor:
            return label
    return "limited"


class MatchSelector:
    """Picks the most relevant matches for a content type and channel."""

    def __init__(
        self,
        aggregator: MatchAggregator,
        registry: ProviderRegistry | None = None,
        scorer: RelevanceScorer | None = None,
        channel_config: ChannelConfigSource | None = None,
        default_timezone: str | None = None,
        clock: Callable[[], datetime] = now_utc,
        detail_max_workers: int | None = None,
        timeout_seconds: float | None = None,
    ):
        self._aggregator = aggregator
        self._registry = registry or aggregator.registry
        self._scorer = scorer or RelevanceScorer()
        self._channel_config = channel_config
        self._default_timezone = default_timezone or Config.DEFAULT_CHANNEL_TIMEZONE
        self._clock = clock
        self._detail_workers = detail_max_workers or Config.DETAIL_MAX_WORKERS
        self._timeout = timeout_seconds if timeout_seconds is not None else Config.SELECTOR_TIMEOUT_SECONDS

    def _token(self, cancel: CancellationToken | None) -> CancellationToken:
        return cancel or CancellationToken(self._timeout or None)

    def _timezone_for(self, request: ScoringRequest, channel_id: str | None) -> str | None:
        if request.channel_timezone:
            return request.channel_timezone
        if channel_id and self._channel_config is not None:
            try:
                return self._channel_config.get_channel_timezone(channel_id)
            except Exception as e:
                logger.warning("[SELECTOR] Channel config lookup failed for %s: %s", channel_id, e)
        return self._default_timezone

    # =========================================================================
    # Selection
    # =========================================================================

    def get_best_matches(
        self,
        request: ScoringRequest,
        channel_id: str | None = None,
        cancel: CancellationToken | None = None,
    ) -> SelectionResult:
        """Ranked, filtered matches for a request.

        An invalid timezone is scored as UTC and flagged as degraded.
        """
        cancel = self._token(cancel)
        now = request.reference_time or self._clock()
        zone, degraded = resolve_timezone(self._timezone_for(request, channel_id))
        scoring_request = replace(request, channel_timezone=zone.key, reference_time=now)

        matches = self._aggregator.fetch_canonical_matches(
            request.content_type, request.language, now=now, cancel=cancel
        )
        scored = self._scorer.score_all(matches, scoring_request, now)
        selected = select_matches(scored, request.content_type, now, limit=request.max_results)

        logger.info(
            "[SELECTOR] %s: %d of %d matches selected (tz=%s%s)",
            request.content_type.value,
            len(selected),
            len(matches),
            zone.key,
            ", degraded" if degraded else "",
        )
        return SelectionResult(
            matches=tuple(selected),
            timezone=zone.key,
            degraded=degraded,
            reference_time=now,
        )

    def get_best_match_for_content_type(
        self,
        content_type: ContentType | str,
        language: str = "en",
        channel_id: str | None = None,
        cancel: CancellationToken | None = None,
    ) -> ScoredMatch | None:
        """The single best match, or None. Never a placeholder."""
        request = ScoringRequest(content_type=content_type, language=language, max_results=1)
        return self.get_best_matches(request, channel_id, cancel).best

    def get_matches_for_content_type(
        self,
        content_type: ContentType | str,
        limit: int = 5,
        language: str = "en",
        channel_id: str | None = None,
        cancel: CancellationToken | None = None,
    ) -> list[MatchRecommendation]:
        """Selected matches labelled by how well they suit the content type."""
        request = ScoringRequest(content_type=content_type, language=language, max_results=limit)
        result = self.get_best_matches(request, channel_id, cancel)

        recommendations = []
        for item in result.matches:
            suitability = item.content_suitability.for_type(request.content_type)
            recommendations.append(
                MatchRecommendation(
                    match=item,
                    suitability=suitability,
                    recommendation=recommendation_label(suitability),
                    reasons=item.reasons,
                )
            )
        return recommendations

    # =========================================================================
    # Details
    # =========================================================================

    def get_top_matches_with_details(
        self,
        content_type: ContentType | str,
        n: int = 3,
        language: str = "en",
        channel_id: str | None = None,
        cancel: CancellationToken | None = None,
    ) -> list[EnrichedMatch]:
        """Top n matches, each with whatever detail branches completed."""
        cancel = self._token(cancel)
        request = ScoringRequest(content_type=content_type, language=language, max_results=n)
        result = self.get_best_matches(request, channel_id, cancel)
        return self.enrich(list(result.matches), cancel)

    def get_complete_analysis(
        self,
        content_type: ContentType | str,
        language: str = "en",
        channel_id: str | None = None,
        cancel: CancellationToken | None = None,
    ) -> CompleteAnalysis:
        """Best match plus its details; every field None when nothing qualifies."""
        cancel = self._token(cancel)
        request = ScoringRequest(content_type=content_type, language=language, max_results=1)
        best = self.get_best_matches(request, channel_id, cancel).best
        if best is None:
            return CompleteAnalysis()

        detailed = self.enrich([best], cancel)[0]
        return CompleteAnalysis(
            best_match=best,
            detailed_info=detailed,
            home_team_analysis=detailed.home_team_stats,
            away_team_analysis=detailed.away_team_stats,
        )

    def enrich(
        self,
        scored: list[ScoredMatch],
        cancel: CancellationToken | None = None,
    ) -> list[EnrichedMatch]:
        """Fetch home/away analysis and head-to-head for each match concurrently.

        A failed or unfinished branch leaves its field as None; the other
        branches and matches are unaffected.
        """
        if not scored:
            return []
        cancel = self._token(cancel)
        details: dict[int, dict[str, object]] = defaultdict(dict)

        executor = ThreadPoolExecutor(max_workers=self._detail_workers, thread_name_prefix="details")
        try:
            future_to_branch = {}
            for index, item in enumerate(scored):
                source = self._detail_source(item.match)
                if source is None:
                    logger.debug("[SELECTOR] No detail provider for %s", item.match.name)
                    continue
                provider, match = source
                for branch in (HOME, AWAY, H2H):
                    future = executor.submit(self._fetch_branch, provider, match, branch, cancel)
                    future_to_branch[future] = (index, branch)

            done, not_done = wait(future_to_branch, timeout=cancel.remaining())
            for future in not_done:
                future.cancel()
            if not_done:
                logger.warning("[SELECTOR] %d detail fetches did not finish in time", len(not_done))
                cancel.cancel()

            for future in done:
                index, branch = future_to_branch[future]
                try:
                    details[index][branch] = future.result()
                except ProviderError as e:
                    logger.warning("[SELECTOR] %s details failed for %s: %s", branch, scored[index].match.name, e)
                except Exception:
                    logger.exception("[SELECTOR] %s details raised for %s", branch, scored[index].match.name)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return [
            EnrichedMatch(
                match=item,
                head_to_head=details[index].get(H2H),
                home_team_stats=details[index].get(HOME),
                away_team_stats=details[index].get(AWAY),
            )
            for index, item in enumerate(scored)
        ]

    def _detail_source(self, match: Match) -> tuple[FootballProvider, Match] | None:
        """The adapter whose ids the match carries, else the free fallback by name."""
        provider = self._registry.get(match.provider) if match.provider else None
        if provider is not None:
            return provider, match

        fallback = self._registry.fallback
        if fallback is None:
            return None
        # Ids from an unknown scheme are useless elsewhere; look the teams up by name
        home, away = match.home_team, match.away_team
        return fallback, replace(
            match,
            home_team=Team(synthetic_id(home.name), home.name),
            away_team=Team(synthetic_id(away.name), away.name),
        )

    def _fetch_branch(
        self,
        provider: FootballProvider,
        match: Match,
        branch: str,
        cancel: CancellationToken,
    ) -> TeamAnalysis | HeadToHead | None:
        if cancel.is_cancelled:
            return None
        if branch == HOME:
            return build_team_analysis(provider, match.home_team)
        if branch == AWAY:
            return build_team_analysis(provider, match.away_team)
        return self._head_to_head(provider, match)

    @staticmethod
    def _head_to_head(provider: FootballProvider, match: Match) -> HeadToHead | None:
        home = resolve_team(provider, match.home_team)
        away = resolve_team(provider, match.away_team)
        if home is None or away is None:
            return None
        if home is not match.home_team or away is not match.away_team:
            match = replace(match, home_team=home, away_team=away)
        meetings = provider.get_head_to_head(match, limit=HEAD_TO_HEAD_LIMIT)
        return summarize_head_to_head(home, away, meetings)

    # =========================================================================
    # Health
    # =========================================================================

    def get_system_health(self) -> SystemHealth:
        """Working vs configured providers, refreshing quota state if stale."""
        self._registry.refresh_health()
        return self._registry.system_health()

    def close(self) -> None:
        self._registry.close()


def create_default_selector(transport: httpx.BaseTransport | None = None) -> MatchSelector:
    """Wire Config -> credentials -> registry -> aggregator -> selector."""
    credentials = EnvCredentialSource()
    registry = build_registry(credentials, transport=transport)
    aggregator = MatchAggregator(registry)
    return MatchSelector(aggregator, registry, channel_config=StaticChannelConfig())
