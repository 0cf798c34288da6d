"""Pydantic models for API responses.

Built from the core dataclasses' to_dict() output with model_validate().
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

# =============================================================================
# Matches
# =============================================================================


class TeamModel(BaseModel):
    id: str
    name: str


class CompetitionModel(BaseModel):
    id: str
    name: str


class ScoreModel(BaseModel):
    home: int
    away: int


class MatchModel(BaseModel):
    """Canonical match."""

    id: str
    home_team: TeamModel
    away_team: TeamModel
    competition: CompetitionModel
    kickoff: datetime
    status: str
    score: ScoreModel | None = None
    season: str = ""
    provider: str = ""


class RelevanceScoreModel(BaseModel):
    competition: int
    teams: int
    timing: int
    stage: int
    rivalry: int
    total: int


class ScoredMatchModel(BaseModel):
    """A match with its relevance score, reasons and per-type suitability."""

    match: MatchModel
    relevance_score: RelevanceScoreModel
    reasons: list[str] = []
    content_suitability: dict[str, int] = {}


class BestMatchResponse(BaseModel):
    """Response for the best-match endpoint. match is null when nothing qualifies."""

    content_type: str
    match: ScoredMatchModel | None = None
    timezone: str
    degraded: bool = False
    reference_time: datetime | None = None


class RecommendationModel(BaseModel):
    match: ScoredMatchModel
    suitability: int
    recommendation: str
    reasons: list[str] = []


class RecommendationsResponse(BaseModel):
    content_type: str
    count: int
    recommendations: list[RecommendationModel]


# =============================================================================
# Details
# =============================================================================


class TeamStatisticsModel(BaseModel):
    played: int
    wins: int
    draws: int
    losses: int
    goals_for: int
    goals_against: int
    goal_difference: int
    win_rate: float
    form: str


class TeamAnalysisModel(BaseModel):
    team: TeamModel
    recent_matches: list[MatchModel] = []
    upcoming_matches: list[MatchModel] = []
    statistics: TeamStatisticsModel


class HeadToHeadModel(BaseModel):
    total_meetings: int
    home_wins: int
    away_wins: int
    draws: int
    last_meetings: list[MatchModel] = []


class EnrichedMatchModel(BaseModel):
    """A top match plus whichever detail branches completed."""

    match: ScoredMatchModel
    head_to_head: HeadToHeadModel | None = None
    home_team_stats: TeamAnalysisModel | None = None
    away_team_stats: TeamAnalysisModel | None = None


class TopMatchesResponse(BaseModel):
    content_type: str
    count: int
    matches: list[EnrichedMatchModel]


class TeamAnalysisPair(BaseModel):
    home_team: TeamAnalysisModel | None = None
    away_team: TeamAnalysisModel | None = None


class CompleteAnalysisResponse(BaseModel):
    """Best match with details. Every field is null when nothing qualifies."""

    best_match: ScoredMatchModel | None = None
    detailed_info: EnrichedMatchModel | None = None
    team_analysis: TeamAnalysisPair = TeamAnalysisPair()


# =============================================================================
# Health
# =============================================================================


class ProviderHealthModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    is_working: bool
    quota_exhausted: bool
    last_checked_at: datetime | None = None


class SystemHealthResponse(BaseModel):
    working_providers: int
    total_providers: int
    last_check_timestamp: datetime | None = None
    is_healthy: bool
    providers: list[ProviderHealthModel] = []


class HealthResponse(BaseModel):
    status: str
    version: str
