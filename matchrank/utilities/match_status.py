"""Match status utilities.

Single source of truth for "is this match finished" checks and
for picking completed matches out of a team's schedule.
"""

from datetime import datetime

from matchrank.core.types import Match, MatchStatus


def is_match_final(match: Match | None) -> bool:
    """Check if a match has finished and its score can be trusted."""
    return bool(match) and match.status == MatchStatus.FINISHED


def completed_matches(
    matches: list[Match],
    before_time: datetime | None = None,
) -> list[Match]:
    """Finished matches with a score, newest first.

    Args:
        matches: Matches in any order
        before_time: If provided, only consider matches kicking off before this time
    """
    done = [
        m
        for m in matches
        if is_match_final(m)
        and m.score is not None
        and (before_time is None or m.kickoff < before_time)
    ]
    return sorted(done, key=lambda m: m.kickoff, reverse=True)
