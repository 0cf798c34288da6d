"""Relevance scorer.

Maps a canonical Match plus a ScoringRequest to a ScoredMatch. The scorer
does no I/O and holds no per-request state; filtering by thresholds is the
caller's job (see scoring/filters.py).
"""

import logging
from collections import Counter
from datetime import datetime

from matchrank.core import (
    ContentSuitability,
    ContentType,
    InvalidTimezoneError,
    Match,
    RelevanceScore,
    ScoredMatch,
    ScoringRequest,
    UserPreferences,
)
from matchrank.scoring.tables import (
    COMPETITION_TIERS,
    DEFAULT_COMPETITION_TIER,
    DEFAULT_TEAM_POPULARITY,
    RIVALRIES,
    TEAM_POPULARITY,
    Rivalry,
    TierTable,
)
from matchrank.scoring.timing import local_days_until, timing_score
from matchrank.utilities.fuzzy_match import names_match
from matchrank.utilities.tz import UTC_ZONE, now_utc, resolve_timezone

logger = logging.getLogger(__name__)

# Tournament stage weighting is not modelled yet; every match gets the same value
STAGE_SCORE = 1

# Suitability: base = min(total * SCALE, 100), then per-type adjustments
SUITABILITY_SCALE = 3
SUITABILITY_FACTORS = {
    ContentType.NEWS: 1.0,
    ContentType.POLL: 0.9,
    ContentType.ANALYSIS: 0.95,
    ContentType.DAILY_SUMMARY: 0.8,
    ContentType.WEEKLY_SUMMARY: 0.85,
}
BETTING_LIVE_PENALTY = 30
BETTING_FINISHED_PENALTY = 60
LIVE_UPDATE_NOT_LIVE_PENALTY = 50

# Reason thresholds
PREMIUM_COMPETITION = 8
POPULAR_TEAMS = 15
NOTABLE_TIMING = 4
HIGH_INTEREST = 25


def _clamp(value: float) -> int:
    return max(0, min(100, round(value)))


def content_suitability(match: Match, score: RelevanceScore) -> ContentSuitability:
    """0-100 fit for every content type, derived from the total."""
    base = min(score.total * SUITABILITY_SCALE, 100)

    if match.is_finished:
        betting = base - BETTING_FINISHED_PENALTY
    elif match.is_live:
        betting = base - BETTING_LIVE_PENALTY
    else:
        betting = base

    live = 100 if match.is_live else base - LIVE_UPDATE_NOT_LIVE_PENALTY

    return ContentSuitability(
        news=_clamp(base * SUITABILITY_FACTORS[ContentType.NEWS]),
        betting_tip=_clamp(betting),
        poll=_clamp(base * SUITABILITY_FACTORS[ContentType.POLL]),
        analysis=_clamp(base * SUITABILITY_FACTORS[ContentType.ANALYSIS]),
        daily_summary=_clamp(base * SUITABILITY_FACTORS[ContentType.DAILY_SUMMARY]),
        weekly_summary=_clamp(base * SUITABILITY_FACTORS[ContentType.WEEKLY_SUMMARY]),
        live_update=_clamp(live),
    )


class RelevanceScorer:
    """Scores matches against static importance tables and a timing curve."""

    def __init__(
        self,
        competition_tiers: dict[str, int] = COMPETITION_TIERS,
        team_popularity: dict[str, int] = TEAM_POPULARITY,
        rivalries: tuple[Rivalry, ...] = RIVALRIES,
    ):
        self._competitions = TierTable(competition_tiers, DEFAULT_COMPETITION_TIER)
        self._teams = TierTable(team_popularity, DEFAULT_TEAM_POPULARITY)
        self._rivalries = rivalries

    # =========================================================================
    # Sub-scores
    # =========================================================================

    def competition_score(self, match: Match) -> int:
        return self._competitions.lookup(match.competition.name)

    def team_score(self, match: Match, preferences: UserPreferences | None = None) -> tuple[int, bool]:
        """Popularity of both teams plus the favourite boost. Returns (points, boosted)."""
        points = self._teams.lookup(match.home_team.name) + self._teams.lookup(match.away_team.name)
        boosted = False
        if preferences and preferences.favorite_teams and preferences.boost_score:
            boosted = any(
                names_match(team.name, favorite)
                for favorite in preferences.favorite_teams
                for team in (match.home_team, match.away_team)
            )
            if boosted:
                points += preferences.boost_score
        return points, boosted

    def find_rivalry(self, match: Match) -> Rivalry | None:
        for rivalry in self._rivalries:
            if rivalry.matches(match.home_team.name, match.away_team.name):
                return rivalry
        return None

    def rivalry_score(self, match: Match) -> int:
        rivalry = self.find_rivalry(match)
        return rivalry.bonus if rivalry else 0

    @staticmethod
    def stage_score(match: Match) -> int:
        return STAGE_SCORE

    # =========================================================================
    # Scoring
    # =========================================================================

    def score(
        self,
        match: Match,
        request: ScoringRequest,
        now: datetime | None = None,
    ) -> ScoredMatch:
        """Score one match for a request.

        An invalid channel timezone degrades to UTC with a warning.
        """
        now = now or request.reference_time or now_utc()
        try:
            timing = timing_score(match, now, request.content_type, request.channel_timezone)
            zone, _ = resolve_timezone(request.channel_timezone)
        except InvalidTimezoneError:
            logger.warning(
                "[SCORER] Invalid timezone %r for match %s - scoring in UTC",
                request.channel_timezone,
                match.id,
            )
            timing = timing_score(match, now, request.content_type, None)
            zone = UTC_ZONE

        teams, boosted = self.team_score(match, request.user_preferences)
        rivalry = self.find_rivalry(match)
        relevance = RelevanceScore(
            competition=self.competition_score(match),
            teams=teams,
            timing=timing,
            stage=self.stage_score(match),
            rivalry=rivalry.bonus if rivalry else 0,
        )
        return ScoredMatch(
            match=match,
            relevance_score=relevance,
            reasons=tuple(self._reasons(match, relevance, rivalry, boosted, now, zone)),
            content_suitability=content_suitability(match, relevance),
        )

    def score_all(
        self,
        matches: list[Match],
        request: ScoringRequest,
        now: datetime | None = None,
    ) -> list[ScoredMatch]:
        now = now or request.reference_time or now_utc()
        return [self.score(match, request, now) for match in matches]

    def _reasons(
        self,
        match: Match,
        score: RelevanceScore,
        rivalry: Rivalry | None,
        boosted: bool,
        now: datetime,
        zone,
    ) -> list[str]:
        reasons = []
        if score.competition >= PREMIUM_COMPETITION:
            reasons.append(f"Premium competition: {match.competition.name}")
        if score.teams >= POPULAR_TEAMS:
            reasons.append(f"Popular teams: {match.home_team.name} vs {match.away_team.name}")
        if boosted:
            reasons.append("Favourite team involved")
        if score.timing >= NOTABLE_TIMING:
            reasons.append(self._timing_reason(match, now, zone))
        if rivalry:
            reasons.append(f"Derby: {rivalry.name}")
        if score.total >= HIGH_INTEREST:
            reasons.append("High overall interest")
        return reasons

    @staticmethod
    def _timing_reason(match: Match, now: datetime, zone) -> str:
        if match.is_live:
            return "Live now"
        days, same_local_day = local_days_until(match, now, zone)
        if same_local_day:
            return "Kicks off today" if days >= 0 else "Played today"
        count = max(1, round(abs(days)))
        unit = "day" if count == 1 else "days"
        if days > 0:
            return f"Kicks off in {count} {unit}"
        return f"Played {count} {unit} ago"


# =============================================================================
# STATISTICS
# =============================================================================

DISTRIBUTION_BUCKETS = (("30+", 30), ("25-29", 25), ("20-24", 20), ("15-19", 15), ("<15", None))


def scoring_stats(scored: list[ScoredMatch]) -> dict:
    """Summary of a scored batch: count, average, top competitions, distribution."""
    distribution = {label: 0 for label, _ in DISTRIBUTION_BUCKETS}
    for item in scored:
        for label, floor in DISTRIBUTION_BUCKETS:
            if floor is None or item.total >= floor:
                distribution[label] += 1
                break

    competitions = Counter(item.match.competition.name for item in scored)
    average = sum(item.total for item in scored) / len(scored) if scored else 0.0
    return {
        "total_matches": len(scored),
        "average_score": round(average, 1),
        "top_competitions": [name for name, _ in competitions.most_common(5)],
        "score_distribution": distribution,
    }
