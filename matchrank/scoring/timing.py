"""Timing relevance.

timing_score() is pure: the result depends only on (match, now, content_type,
timezone). Distances are measured between channel-local wall clocks, so a
kickoff "tomorrow at 21:00" scores the same for every channel that sees it
that way, including across DST changes.
"""

from datetime import datetime
from zoneinfo import ZoneInfo

from matchrank.core.types import ContentType, Match
from matchrank.scoring.policy import get_policy
from matchrank.utilities.tz import UTC_ZONE, get_zone, utc_to_local

SECONDS_PER_DAY = 86400

LIVE_SCORE = 10


def local_days_until(match: Match, now: datetime, zone: ZoneInfo) -> tuple[float, bool]:
    """Wall-clock days from now to kickoff in zone, and whether both fall on the same local date.

    Negative for matches in the past.
    """
    local_kickoff = utc_to_local(match.kickoff, zone)
    local_now = utc_to_local(now, zone)
    delta = local_kickoff.replace(tzinfo=None) - local_now.replace(tzinfo=None)
    return delta.total_seconds() / SECONDS_PER_DAY, local_kickoff.date() == local_now.date()


def _live_update_points(match: Match, days: float, same_local_day: bool) -> int:
    if match.is_live:
        return LIVE_SCORE
    if same_local_day:
        hours = abs(days) * 24
        if hours <= 3:
            return 9
        if hours <= 6:
            return 8
        if hours <= 12:
            return 7
        return 6
    if abs(days) < 0.5:
        return 5
    return 2


def timing_score(
    match: Match,
    now: datetime,
    content_type: ContentType | str,
    timezone: str | ZoneInfo | None = None,
) -> int:
    """Timing sub-score for a match.

    Raises:
        InvalidTimezoneError: timezone is given but not a valid IANA name
    """
    content_type = ContentType(content_type)
    zone = get_zone(timezone) if timezone else UTC_ZONE
    days, same_local_day = local_days_until(match, now, zone)

    if content_type == ContentType.LIVE_UPDATE:
        return _live_update_points(match, days, same_local_day)

    curve = get_policy(content_type).timing
    if days < 0:
        return curve.points_past(-days)
    return curve.points_future(days)
