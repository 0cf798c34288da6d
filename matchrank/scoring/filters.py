"""Caller-side filtering and ranking of scored matches.

Thresholds come from scoring/policy.py. Look-back and look-ahead edges are
inclusive: a kickoff exactly max_lookback_hours before now is kept.
"""

import logging
from datetime import datetime, timedelta

from matchrank.core import ContentType, ScoredMatch
from matchrank.scoring.policy import SUITABILITY_FLOOR, get_policy

logger = logging.getLogger(__name__)


def rejection_reason(
    scored: ScoredMatch,
    content_type: ContentType | str,
    now: datetime,
) -> str | None:
    """Why a scored match is filtered out for a content type, or None if it passes."""
    policy = get_policy(content_type)
    match = scored.match
    score = scored.relevance_score

    if match.kickoff < now - timedelta(hours=policy.max_lookback_hours):
        return "too old"
    if match.kickoff > now + timedelta(days=policy.max_lookahead_days):
        return "too far ahead"
    if score.timing < policy.min_timing:
        return "timing below minimum"
    if score.total < policy.min_total:
        return "total below minimum"
    if scored.content_suitability.for_type(policy.content_type) < SUITABILITY_FLOOR:
        return "suitability below floor"
    return None


def rank(scored: list[ScoredMatch]) -> list[ScoredMatch]:
    """Sort by total descending; ties by earlier kickoff, then id."""
    return sorted(scored, key=lambda s: (-s.total, s.match.kickoff, s.match.id))


def select_matches(
    scored: list[ScoredMatch],
    content_type: ContentType | str,
    now: datetime,
    limit: int | None = None,
) -> list[ScoredMatch]:
    """Drop matches that fail the content type's thresholds, rank the rest."""
    kept = []
    for item in scored:
        reason = rejection_reason(item, content_type, now)
        if reason:
            logger.debug("[FILTER] %s dropped for %s: %s", item.match.name, content_type, reason)
            continue
        kept.append(item)

    ranked = rank(kept)
    logger.debug(
        "[FILTER] %d of %d matches kept for %s", len(ranked), len(scored), ContentType(content_type).value
    )
    return ranked[:limit] if limit else ranked
