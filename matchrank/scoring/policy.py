"""Per-content-type policy: fetch windows, timing curves and filter thresholds.

Every date-window decision goes through window_for(); every threshold the
selector filters on lives in POLICIES. The numbers are product-tuned
heuristics, kept here as data so they can be adjusted without touching the
scoring code.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from matchrank.core.types import ContentType, DateRange

# Matches whose suitability for the requested type is below this are dropped
SUITABILITY_FLOOR = 30

# (max_days, points) steps, checked in order; first bound >= distance wins
Curve = tuple[tuple[float, int], ...]


@dataclass(frozen=True)
class TimingCurve:
    past: Curve
    future: Curve
    past_default: int = 0
    future_default: int = 0

    def points_past(self, days_ago: float) -> int:
        for bound, points in self.past:
            if days_ago <= bound:
                return points
        return self.past_default

    def points_future(self, days_ahead: float) -> int:
        for bound, points in self.future:
            if days_ahead <= bound:
                return points
        return self.future_default


@dataclass(frozen=True)
class ContentPolicy:
    """Everything the engine needs to know about one content type."""

    content_type: ContentType
    window_start_days: int  # relative to today (UTC), inclusive
    window_end_days: int
    min_timing: int
    max_lookback_hours: float
    max_lookahead_days: float
    min_total: int
    timing: TimingCurve


# live_update has its own timing rule (see timing.py); its curve is unused
_LIVE_PLACEHOLDER = TimingCurve(past=(), future=())

POLICIES: dict[ContentType, ContentPolicy] = {
    ContentType.NEWS: ContentPolicy(
        ContentType.NEWS,
        window_start_days=-3,
        window_end_days=7,
        min_timing=1,
        max_lookback_hours=7 * 24,
        max_lookahead_days=60,
        min_total=12,
        timing=TimingCurve(
            past=((0.2, 6), (0.5, 5), (1, 4), (3, 3), (7, 1)),
            future=((1, 8), (7, 6), (30, 4)),
            past_default=0,
            future_default=1,
        ),
    ),
    ContentType.BETTING_TIP: ContentPolicy(
        ContentType.BETTING_TIP,
        window_start_days=0,
        window_end_days=14,
        min_timing=2,
        max_lookback_hours=0,
        max_lookahead_days=14,
        min_total=12,
        timing=TimingCurve(
            past=(),
            future=((0.2, 9), (1, 8), (2, 7), (7, 6), (14, 4)),
            past_default=0,
            future_default=2,
        ),
    ),
    ContentType.POLL: ContentPolicy(
        ContentType.POLL,
        window_start_days=-1,
        window_end_days=7,
        min_timing=1,
        max_lookback_hours=48,
        max_lookahead_days=14,
        min_total=12,
        timing=TimingCurve(
            past=((0.2, 7), (1, 6), (2, 5), (7, 3)),
            future=((1, 8), (7, 6), (14, 4)),
            past_default=0,
            future_default=2,
        ),
    ),
    ContentType.ANALYSIS: ContentPolicy(
        ContentType.ANALYSIS,
        window_start_days=-2,
        window_end_days=7,
        min_timing=1,
        max_lookback_hours=5 * 24,
        max_lookahead_days=14,
        min_total=12,
        timing=TimingCurve(
            past=((0.5, 8), (2, 7), (5, 5)),
            future=((2, 7), (7, 5), (14, 3)),
            past_default=1,
            future_default=1,
        ),
    ),
    ContentType.DAILY_SUMMARY: ContentPolicy(
        ContentType.DAILY_SUMMARY,
        window_start_days=-1,
        window_end_days=-1,
        min_timing=2,
        max_lookback_hours=48,
        max_lookahead_days=14,
        min_total=12,
        timing=TimingCurve(past=((1, 10), (2, 8)), future=(), past_default=0, future_default=0),
    ),
    ContentType.WEEKLY_SUMMARY: ContentPolicy(
        ContentType.WEEKLY_SUMMARY,
        window_start_days=-7,
        window_end_days=-1,
        min_timing=1,
        max_lookback_hours=7 * 24,
        max_lookahead_days=14,
        min_total=12,
        timing=TimingCurve(past=((1, 8), (7, 10)), future=(), past_default=0, future_default=0),
    ),
    ContentType.LIVE_UPDATE: ContentPolicy(
        ContentType.LIVE_UPDATE,
        window_start_days=-1,
        window_end_days=1,
        min_timing=1,
        max_lookback_hours=12,
        max_lookahead_days=14,
        min_total=8,
        timing=_LIVE_PLACEHOLDER,
    ),
}


def get_policy(content_type: ContentType | str) -> ContentPolicy:
    """Policy for a content type. Raises ValueError for unknown types."""
    return POLICIES[ContentType(content_type)]


def window_for(content_type: ContentType | str, now: datetime) -> DateRange:
    """UTC date window to fetch fixtures for.

    Pure: depends only on the content type and the reference instant.
    """
    policy = get_policy(content_type)
    today = now.astimezone(UTC).date() if now.tzinfo else now.date()
    return DateRange(
        today + timedelta(days=policy.window_start_days),
        today + timedelta(days=policy.window_end_days),
    )
