"""Core types and interfaces."""

from matchrank.core.exceptions import InvalidTimezoneError, MatchRankError, ProviderError
from matchrank.core.interfaces import ChannelConfigSource, CredentialSource, FootballProvider
from matchrank.core.types import (
    SYNTHETIC_ID_PREFIX,
    Competition,
    CompleteAnalysis,
    ContentSuitability,
    ContentType,
    DateRange,
    EnrichedMatch,
    HeadToHead,
    Match,
    MatchRecommendation,
    MatchStatus,
    ProviderCredential,
    ProviderHealth,
    RelevanceScore,
    Score,
    ScoredMatch,
    ScoringRequest,
    SelectionResult,
    SystemHealth,
    Team,
    TeamAnalysis,
    TeamStatistics,
    UserPreferences,
)

__all__ = [
    "SYNTHETIC_ID_PREFIX",
    "ChannelConfigSource",
    "Competition",
    "CompleteAnalysis",
    "ContentSuitability",
    "ContentType",
    "CredentialSource",
    "DateRange",
    "EnrichedMatch",
    "FootballProvider",
    "HeadToHead",
    "InvalidTimezoneError",
    "Match",
    "MatchRankError",
    "MatchRecommendation",
    "MatchStatus",
    "ProviderCredential",
    "ProviderError",
    "ProviderHealth",
    "RelevanceScore",
    "Score",
    "ScoredMatch",
    "ScoringRequest",
    "SelectionResult",
    "SystemHealth",
    "Team",
    "TeamAnalysis",
    "TeamStatistics",
    "UserPreferences",
]
