"""Timezone utilities.

Single source of truth for UTC <-> channel-local conversion.
DST is delegated to the IANA database via zoneinfo; there are no offset tables here.

Unrecognized timezone names raise InvalidTimezoneError. Callers that must not
fail use resolve_timezone(), which falls back to UTC and reports degraded mode.
"""

import logging
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from matchrank.core.exceptions import InvalidTimezoneError

logger = logging.getLogger(__name__)

UTC_ZONE = ZoneInfo("UTC")

__all__ = [
    "UTC_ZONE",
    "current_local_hour",
    "format_for_channel",
    "get_timezone_info",
    "get_zone",
    "is_valid_timezone",
    "is_within_active_hours",
    "local_to_utc",
    "now_utc",
    "offset",
    "resolve_timezone",
    "to_utc",
    "utc_for_local_hour",
    "utc_to_local",
]


def now_utc() -> datetime:
    """Get current time in UTC."""
    return datetime.now(UTC)


def get_zone(tz: str | ZoneInfo) -> ZoneInfo:
    """Get a ZoneInfo for an IANA name.

    Raises:
        InvalidTimezoneError: name is empty or unknown to the tz database
    """
    if isinstance(tz, ZoneInfo):
        return tz
    if not tz or not isinstance(tz, str):
        raise InvalidTimezoneError(tz)
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidTimezoneError(tz) from e


def is_valid_timezone(tz: str) -> bool:
    """Check whether tz is a recognized IANA identifier."""
    try:
        get_zone(tz)
        return True
    except InvalidTimezoneError:
        return False


def resolve_timezone(tz: str | None) -> tuple[ZoneInfo, bool]:
    """Resolve a channel timezone, falling back to UTC.

    Returns:
        (zone, degraded) - degraded is True when tz was given but invalid.
        No timezone at all resolves to UTC without degradation.
    """
    if not tz:
        return UTC_ZONE, False
    try:
        return get_zone(tz), False
    except InvalidTimezoneError:
        logger.warning("[TZ] Invalid timezone %r - falling back to UTC (degraded mode)", tz)
        return UTC_ZONE, True


def to_utc(dt: datetime) -> datetime:
    """Convert an aware datetime to UTC.

    Raises:
        ValueError: dt is naive
    """
    if dt.tzinfo is None:
        raise ValueError("Cannot convert naive datetime - must be timezone-aware")
    return dt.astimezone(UTC)


def utc_to_local(instant: datetime, tz: str | ZoneInfo) -> datetime:
    """Convert an absolute instant to wall-clock time in tz.

    The result is aware and carries the correct fold for ambiguous
    (fall-back) hours, so local_to_utc() inverts it exactly.
    """
    if instant.tzinfo is None:
        raise ValueError("Cannot convert naive datetime - must be timezone-aware")
    return instant.astimezone(get_zone(tz))


def local_to_utc(wall_clock: datetime, tz: str | ZoneInfo) -> datetime:
    """Convert channel-local wall-clock time to an absolute UTC instant.

    Naive values are interpreted in tz (ambiguous times use fold=0, the
    earlier instant). Aware values are already instants and only need
    normalizing to UTC.
    """
    zone = get_zone(tz)
    if wall_clock.tzinfo is None:
        wall_clock = wall_clock.replace(tzinfo=zone)
    return wall_clock.astimezone(UTC)


def offset(tz: str | ZoneInfo, instant: datetime | None = None) -> timedelta:
    """UTC offset of tz at the given instant (now by default)."""
    instant = instant or now_utc()
    return utc_to_local(instant, tz).utcoffset() or timedelta(0)


def current_local_hour(tz: str | ZoneInfo, now: datetime | None = None) -> int:
    """Hour of day (0-23) in tz."""
    return utc_to_local(now or now_utc(), tz).hour


def _format_offset(delta: timedelta) -> str:
    total_minutes = int(delta.total_seconds() // 60)
    sign = "+" if total_minutes >= 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def get_timezone_info(tz: str, at: datetime | None = None) -> dict:
    """Describe tz at an instant: offset string, DST flag and abbreviation."""
    local = utc_to_local(at or now_utc(), tz)
    dst = local.dst()
    return {
        "timezone": tz,
        "offset": _format_offset(local.utcoffset() or timedelta(0)),
        "is_dst": bool(dst),
        "abbreviation": local.tzname(),
        "local_time": local.isoformat(),
    }


def format_for_channel(instant: datetime, tz: str, fmt: str = "%Y-%m-%d %H:%M") -> str:
    """Format an instant as channel-local wall-clock text."""
    return utc_to_local(instant, tz).strftime(fmt)


def is_within_active_hours(
    tz: str,
    start_hour: int = 6,
    end_hour: int = 23,
    now: datetime | None = None,
) -> bool:
    """Check whether the channel-local hour lies in [start_hour, end_hour]."""
    hour = current_local_hour(tz, now)
    return start_hour <= hour <= end_hour


def utc_for_local_hour(tz: str, hour: int, on_date: date, minute: int = 0) -> datetime:
    """UTC instant at which the channel-local clock shows hour:minute on on_date."""
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be 0-23, got {hour}")
    return local_to_utc(datetime.combine(on_date, time(hour, minute)), tz)
