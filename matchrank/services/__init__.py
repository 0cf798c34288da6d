"""Services: aggregation, team analysis, credentials and the selector facade."""

from matchrank.services.aggregator import AggregationResult, MatchAggregator, deduplicate_matches
from matchrank.services.credentials import EnvCredentialSource, StaticChannelConfig
from matchrank.services.selector import MatchSelector, create_default_selector, recommendation_label
from matchrank.services.team_analysis import (
    build_team_analysis,
    calculate_team_statistics,
    summarize_head_to_head,
)

__all__ = [
    "AggregationResult",
    "EnvCredentialSource",
    "MatchAggregator",
    "MatchSelector",
    "StaticChannelConfig",
    "build_team_analysis",
    "calculate_team_statistics",
    "create_default_selector",
    "deduplicate_matches",
    "recommendation_label",
    "summarize_head_to_head",
]
