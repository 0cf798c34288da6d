"""SoccersAPI provider implementation.

Payload shape (per fixture, under "data"):
    {"id", "status": 0|1|2|3, "status_name": "Notstarted" | "Inplay" | "HT" | "Finished",
     "time": {"date": "2024-03-11", "time": "20:00:00", "timestamp": 1710187200},
     "league": {"id", "name"}, "season_id",
     "teams": {"home": {"id", "name"}, "away": {...}},
     "scores": {"home_score", "away_score"}}

Times are UTC. Only the fixture list is offered by this plan; detail
lookups use the FootballProvider defaults.
"""

import logging

from matchrank.core import DateRange, FootballProvider, Match, MatchStatus, ProviderError
from matchrank.providers.parsing import (
    build_score,
    clean_id,
    make_competition,
    make_team,
    parse_epoch,
    parse_split_datetime,
)
from matchrank.providers.soccersapi.client import SoccersAPIClient

logger = logging.getLogger(__name__)

FINISHED_NAMES = {"finished", "ft", "aet", "pen", "after penalties", "after extra time"}
PAUSED_NAMES = {"ht", "half time", "break"}
RUNNING_NAMES = {"inplay", "in play", "live", "1st half", "2nd half", "extra time", "penalties"}

# Numeric status codes
STATUS_CODES = {1: MatchStatus.IN_PLAY, 2: MatchStatus.LIVE, 3: MatchStatus.FINISHED}


def parse_status(status_name: str | None, status_code=None) -> MatchStatus:
    name = (status_name or "").strip().lower()
    if name in FINISHED_NAMES:
        return MatchStatus.FINISHED
    if name in PAUSED_NAMES:
        return MatchStatus.LIVE
    if name in RUNNING_NAMES:
        return MatchStatus.IN_PLAY
    try:
        return STATUS_CODES.get(int(status_code), MatchStatus.SCHEDULED)
    except (TypeError, ValueError):
        return MatchStatus.SCHEDULED


class SoccersAPIProvider(FootballProvider):
    """SoccersAPI v2.2."""

    def __init__(self, client: SoccersAPIClient):
        self._client = client

    @property
    def name(self) -> str:
        return "soccersapi"

    def fetch_fixtures(self, date_range: DateRange) -> list[Match]:
        matches: list[Match] = []
        for day in date_range.days():
            data = self._client.get_schedule(day)
            matches.extend(m for m in self._parse_fixtures(data) if m.kickoff_date == day)
        return matches

    def _parse_fixtures(self, data: dict) -> list[Match]:
        raw_fixtures = data.get("data") or []
        if not isinstance(raw_fixtures, list):
            raise ProviderError(self.name, "unexpected payload: 'data' is not a list")
        matches = []
        for raw in raw_fixtures:
            if not isinstance(raw, dict):
                continue
            match = self._parse_fixture(raw)
            if match:
                matches.append(match)
        return matches

    def _parse_fixture(self, data: dict) -> Match | None:
        try:
            when = data.get("time") or {}
            kickoff = parse_epoch(when.get("timestamp")) or parse_split_datetime(
                when.get("date"), when.get("time")
            )
            if not kickoff:
                return None
            teams = data["teams"]
            league = data.get("league") or {}
            scores = data.get("scores") or {}
            status = parse_status(data.get("status_name"), data.get("status"))
            # Not-started fixtures report 0-0
            score = None
            if status != MatchStatus.SCHEDULED:
                score = build_score(scores.get("home_score"), scores.get("away_score"))
            return Match(
                id=clean_id(data.get("id")),
                home_team=make_team(teams["home"].get("id"), teams["home"].get("name")),
                away_team=make_team(teams["away"].get("id"), teams["away"].get("name")),
                competition=make_competition(league.get("id"), league.get("name")),
                kickoff=kickoff,
                status=status,
                score=score,
                season=clean_id(data.get("season_id")),
                provider=self.name,
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            logger.warning("[SOCCERSAPI] Failed to parse fixture %s: %s", data.get("id"), e)
            return None

    def close(self) -> None:
        self._client.close()
