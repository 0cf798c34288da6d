"""Core data types for matchrank.

All data structures are dataclasses with attribute access.
Every match carries the `provider` that produced it; ids are scoped to that provider.
Instants are always timezone-aware UTC.
"""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from enum import Enum

# Prefix for ids derived from a name when the provider omits one
SYNTHETIC_ID_PREFIX = "slug:"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class MatchStatus(str, Enum):
    """Canonical match state."""

    SCHEDULED = "SCHEDULED"
    LIVE = "LIVE"  # paused / half-time
    IN_PLAY = "IN_PLAY"  # clock running
    FINISHED = "FINISHED"

    @property
    def is_live(self) -> bool:
        return self in (MatchStatus.LIVE, MatchStatus.IN_PLAY)


class ContentType(str, Enum):
    """Consumer-facing category of generated content."""

    NEWS = "news"
    BETTING_TIP = "betting_tip"
    POLL = "poll"
    ANALYSIS = "analysis"
    DAILY_SUMMARY = "daily_summary"
    WEEKLY_SUMMARY = "weekly_summary"
    LIVE_UPDATE = "live_update"


# =============================================================================
# CANONICAL MATCH
# =============================================================================


@dataclass(frozen=True)
class Team:
    """Team identity."""

    id: str
    name: str

    @property
    def has_provider_id(self) -> bool:
        """False when the id was synthesized from the name."""
        return bool(self.id) and not self.id.startswith(SYNTHETIC_ID_PREFIX)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class Competition:
    """Competition identity. Only used as a scoring lookup key."""

    id: str
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class Score:
    """Full-time (or current) score."""

    home: int
    away: int

    def to_dict(self) -> dict:
        return {"home": self.home, "away": self.away}


@dataclass(frozen=True)
class Match:
    """Provider-agnostic fixture or result.

    kickoff is stored as an absolute UTC instant; naive datetimes are rejected.
    """

    id: str
    home_team: Team
    away_team: Team
    competition: Competition
    kickoff: datetime
    status: MatchStatus = MatchStatus.SCHEDULED
    score: Score | None = None
    season: str = ""
    provider: str = ""

    def __post_init__(self) -> None:
        if self.kickoff.tzinfo is None:
            raise ValueError(f"Match {self.id}: kickoff must be timezone-aware")
        if self.kickoff.tzinfo is not UTC:
            object.__setattr__(self, "kickoff", self.kickoff.astimezone(UTC))

    @property
    def is_live(self) -> bool:
        return self.status.is_live

    @property
    def is_finished(self) -> bool:
        return self.status == MatchStatus.FINISHED

    @property
    def kickoff_date(self) -> date:
        """Kickoff calendar date in UTC."""
        return self.kickoff.date()

    @property
    def name(self) -> str:
        return f"{self.home_team.name} vs {self.away_team.name}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "home_team": self.home_team.to_dict(),
            "away_team": self.away_team.to_dict(),
            "competition": self.competition.to_dict(),
            "kickoff": self.kickoff.isoformat(),
            "status": self.status.value,
            "score": self.score.to_dict() if self.score else None,
            "season": self.season,
            "provider": self.provider,
        }


# =============================================================================
# SCORING
# =============================================================================


@dataclass(frozen=True)
class RelevanceScore:
    """Sub-scores combined by simple addition."""

    competition: int = 0
    teams: int = 0
    timing: int = 0
    stage: int = 0
    rivalry: int = 0

    @property
    def total(self) -> int:
        return self.competition + self.teams + self.timing + self.stage + self.rivalry

    def to_dict(self) -> dict:
        return {
            "competition": self.competition,
            "teams": self.teams,
            "timing": self.timing,
            "stage": self.stage,
            "rivalry": self.rivalry,
            "total": self.total,
        }


@dataclass(frozen=True)
class ContentSuitability:
    """0-100 fit of a match for each content type."""

    news: int = 0
    betting_tip: int = 0
    poll: int = 0
    analysis: int = 0
    daily_summary: int = 0
    weekly_summary: int = 0
    live_update: int = 0

    def for_type(self, content_type: ContentType) -> int:
        return getattr(self, ContentType(content_type).value)

    def to_dict(self) -> dict:
        return {ct.value: self.for_type(ct) for ct in ContentType}


@dataclass(frozen=True)
class ScoredMatch:
    """A match with its relevance score. Recomputed per request, never persisted."""

    match: Match
    relevance_score: RelevanceScore
    reasons: tuple[str, ...] = ()
    content_suitability: ContentSuitability = field(default_factory=ContentSuitability)

    @property
    def total(self) -> int:
        return self.relevance_score.total

    def to_dict(self) -> dict:
        return {
            "match": self.match.to_dict(),
            "relevance_score": self.relevance_score.to_dict(),
            "reasons": list(self.reasons),
            "content_suitability": self.content_suitability.to_dict(),
        }


@dataclass
class UserPreferences:
    """Caller preferences that boost the team score."""

    favorite_teams: list[str] = field(default_factory=list)
    boost_score: int = 0


@dataclass
class ScoringRequest:
    """What the caller wants ranked."""

    content_type: ContentType
    language: str = "en"
    max_results: int = 5
    channel_timezone: str | None = None
    reference_time: datetime | None = None
    user_preferences: UserPreferences | None = None

    def __post_init__(self) -> None:
        self.content_type = ContentType(self.content_type)


# =============================================================================
# PROVIDERS
# =============================================================================


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of UTC calendar dates."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"DateRange end {self.end} is before start {self.start}")

    @classmethod
    def single(cls, day: date) -> "DateRange":
        return cls(day, day)

    def days(self) -> list[date]:
        return [self.start + timedelta(days=i) for i in range((self.end - self.start).days + 1)]

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def __len__(self) -> int:
        return (self.end - self.start).days + 1


@dataclass(frozen=True)
class ProviderCredential:
    """Connection settings for one upstream provider."""

    name: str
    api_key: str
    base_url: str
    priority: int
    is_active: bool = True
    username: str | None = None  # SoccersAPI authenticates with user + token


@dataclass
class ProviderHealth:
    """Process-local health of one provider.

    is_working follows the most recent call outcome; quota_exhausted
    is refreshed from the quota tracker on a TTL.
    """

    name: str
    is_working: bool = True
    quota_exhausted: bool = False
    last_checked_at: datetime | None = None

    @property
    def is_usable(self) -> bool:
        return self.is_working and not self.quota_exhausted

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "is_working": self.is_working,
            "quota_exhausted": self.quota_exhausted,
            "last_checked_at": _iso(self.last_checked_at),
        }


@dataclass(frozen=True)
class SystemHealth:
    """Health probe result."""

    working_providers: int
    total_providers: int
    last_check_timestamp: datetime | None
    providers: tuple[ProviderHealth, ...] = ()

    @property
    def is_healthy(self) -> bool:
        return self.working_providers > 0

    def to_dict(self) -> dict:
        return {
            "working_providers": self.working_providers,
            "total_providers": self.total_providers,
            "last_check_timestamp": _iso(self.last_check_timestamp),
            "is_healthy": self.is_healthy,
            "providers": [p.to_dict() for p in self.providers],
        }


# =============================================================================
# DETAILS
# =============================================================================


@dataclass(frozen=True)
class TeamStatistics:
    """Aggregate record over a team's finished matches."""

    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    win_rate: float = 0.0  # percent
    form: str = ""  # most recent first, e.g. "WWDLW"

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    def to_dict(self) -> dict:
        return {
            "played": self.played,
            "wins": self.wins,
            "draws": self.draws,
            "losses": self.losses,
            "goals_for": self.goals_for,
            "goals_against": self.goals_against,
            "goal_difference": self.goal_difference,
            "win_rate": self.win_rate,
            "form": self.form,
        }


@dataclass(frozen=True)
class TeamAnalysis:
    team: Team
    recent_matches: tuple[Match, ...] = ()
    upcoming_matches: tuple[Match, ...] = ()
    statistics: TeamStatistics = field(default_factory=TeamStatistics)

    def to_dict(self) -> dict:
        return {
            "team": self.team.to_dict(),
            "recent_matches": [m.to_dict() for m in self.recent_matches],
            "upcoming_matches": [m.to_dict() for m in self.upcoming_matches],
            "statistics": self.statistics.to_dict(),
        }


@dataclass(frozen=True)
class HeadToHead:
    total_meetings: int = 0
    home_wins: int = 0
    away_wins: int = 0
    draws: int = 0
    last_meetings: tuple[Match, ...] = ()

    def to_dict(self) -> dict:
        return {
            "total_meetings": self.total_meetings,
            "home_wins": self.home_wins,
            "away_wins": self.away_wins,
            "draws": self.draws,
            "last_meetings": [m.to_dict() for m in self.last_meetings],
        }


@dataclass(frozen=True)
class EnrichedMatch:
    """A top match plus whatever detail branches completed."""

    match: ScoredMatch
    head_to_head: HeadToHead | None = None
    home_team_stats: TeamAnalysis | None = None
    away_team_stats: TeamAnalysis | None = None

    def to_dict(self) -> dict:
        return {
            "match": self.match.to_dict(),
            "head_to_head": self.head_to_head.to_dict() if self.head_to_head else None,
            "home_team_stats": self.home_team_stats.to_dict() if self.home_team_stats else None,
            "away_team_stats": self.away_team_stats.to_dict() if self.away_team_stats else None,
        }


@dataclass(frozen=True)
class CompleteAnalysis:
    """Best match with its details. All fields are None when nothing qualifies."""

    best_match: ScoredMatch | None = None
    detailed_info: EnrichedMatch | None = None
    home_team_analysis: TeamAnalysis | None = None
    away_team_analysis: TeamAnalysis | None = None

    @property
    def is_empty(self) -> bool:
        return self.best_match is None

    def to_dict(self) -> dict:
        def dump(value):
            return value.to_dict() if value is not None else None

        return {
            "best_match": dump(self.best_match),
            "detailed_info": dump(self.detailed_info),
            "team_analysis": {
                "home_team": dump(self.home_team_analysis),
                "away_team": dump(self.away_team_analysis),
            },
        }


@dataclass(frozen=True)
class SelectionResult:
    """Ranked matches for one request.

    degraded is True when the requested timezone was invalid and UTC was used.
    """

    matches: tuple[ScoredMatch, ...]
    timezone: str
    degraded: bool = False
    reference_time: datetime | None = None

    @property
    def best(self) -> ScoredMatch | None:
        return self.matches[0] if self.matches else None

    def to_dict(self) -> dict:
        return {
            "matches": [m.to_dict() for m in self.matches],
            "timezone": self.timezone,
            "degraded": self.degraded,
            "reference_time": _iso(self.reference_time),
        }


@dataclass(frozen=True)
class MatchRecommendation:
    """A selected match with a human-readable suitability label."""

    match: ScoredMatch
    suitability: int
    recommendation: str  # excellent | good | moderate | limited
    reasons: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "match": self.match.to_dict(),
            "suitability": self.suitability,
            "recommendation": self.recommendation,
            "reasons": list(self.reasons),
        }
