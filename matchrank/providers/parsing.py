"""Field-level parsing helpers shared by provider adapters.

Adapters own their field maps; these helpers only turn individual raw
values into canonical pieces (ids, scores, UTC instants).
"""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from matchrank.core.types import Competition, Score, Team
from matchrank.utilities.fuzzy_match import synthetic_id
from matchrank.utilities.tz import local_to_utc


def clean_id(value) -> str:
    """Stringify a provider id; None/empty/0 become ''."""
    if value is None or value == "" or value == 0:
        return ""
    return str(value).strip()


def make_team(raw_id, name: str | None) -> Team:
    """Build a Team, synthesizing a stable id from the name when missing."""
    name = (name or "").strip()
    team_id = clean_id(raw_id) or synthetic_id(name)
    return Team(id=team_id, name=name)


def make_competition(raw_id, name: str | None) -> Competition:
    name = (name or "").strip()
    return Competition(id=clean_id(raw_id) or synthetic_id(name), name=name)


def parse_score(value) -> int | None:
    """Parse a goal count. Empty strings and None mean 'not played'."""
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def build_score(home, away) -> Score | None:
    home_goals = parse_score(home)
    away_goals = parse_score(away)
    if home_goals is None or away_goals is None:
        return None
    return Score(home=home_goals, away=away_goals)


def parse_iso_datetime(value: str | None, assume: ZoneInfo | None = None) -> datetime | None:
    """Parse an ISO-8601 timestamp into UTC.

    Handles the "Z" suffix. Values without an offset are read in `assume`
    (UTC by default).
    """
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        if assume is not None:
            return local_to_utc(dt, assume)
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_split_datetime(
    date_str: str | None,
    time_str: str | None,
    zone: ZoneInfo | None = None,
) -> datetime | None:
    """Combine separate date and time fields (wall clock in zone) into UTC."""
    if not date_str:
        return None
    time_str = (time_str or "").strip() or "00:00"
    if len(time_str) == 5:
        time_str = f"{time_str}:00"
    try:
        naive = datetime.fromisoformat(f"{date_str.strip()}T{time_str[:8]}")
    except ValueError:
        return None
    if naive.tzinfo is not None:
        return naive.astimezone(UTC)
    if zone is None:
        return naive.replace(tzinfo=UTC)
    return local_to_utc(naive, zone)


def parse_epoch(value) -> datetime | None:
    """Unix seconds to UTC."""
    try:
        seconds = int(value)
    except (ValueError, TypeError):
        return None
    if seconds <= 0:
        return None
    return datetime.fromtimestamp(seconds, tz=UTC)
