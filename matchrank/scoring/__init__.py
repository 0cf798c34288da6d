"""Relevance scoring: tables, timing curves, scorer and filters."""

from matchrank.scoring.filters import rank, rejection_reason, select_matches
from matchrank.scoring.policy import (
    POLICIES,
    SUITABILITY_FLOOR,
    ContentPolicy,
    TimingCurve,
    get_policy,
    window_for,
)
from matchrank.scoring.scorer import RelevanceScorer, content_suitability, scoring_stats
from matchrank.scoring.timing import timing_score

__all__ = [
    "POLICIES",
    "SUITABILITY_FLOOR",
    "ContentPolicy",
    "RelevanceScorer",
    "TimingCurve",
    "content_suitability",
    "get_policy",
    "rank",
    "rejection_reason",
    "scoring_stats",
    "select_matches",
    "timing_score",
    "window_for",
]
