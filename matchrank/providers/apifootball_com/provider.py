"""apifootball.com provider implementation.

Payload shape (list of events):
    {"match_id", "match_date": "2024-03-11", "match_time": "21:00",
     "match_status": "" | "Finished" | "Half Time" | "67" | ...,
     "match_live": "0" | "1",
     "match_hometeam_id", "match_hometeam_name", "match_hometeam_score",
     "match_awayteam_id", "match_awayteam_name", "match_awayteam_score",
     "league_id", "league_name", "league_year": "2023/2024"}

Date and time are split, wall-clock in the request timezone, and are
normalized to UTC here.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from matchrank.core import DateRange, FootballProvider, Match, MatchStatus, ProviderError, Team
from matchrank.providers.apifootball_com.client import APIFootballComClient
from matchrank.providers.parsing import (
    build_score,
    clean_id,
    make_competition,
    make_team,
    parse_split_datetime,
)
from matchrank.utilities.tz import get_zone, now_utc

logger = logging.getLogger(__name__)

FINISHED_STATUSES = {"finished", "after et", "after pen.", "ft", "aet", "awarded"}
PAUSED_STATUSES = {"half time", "ht", "break time"}
RUNNING_STATUSES = {"extra time", "penalties", "live"}

# Team schedules are fetched as a date window around today
TEAM_LOOKBACK_DAYS = 60
TEAM_LOOKAHEAD_DAYS = 60


def parse_status(match_status: str | None, match_live: str | None = None) -> MatchStatus:
    status = (match_status or "").strip().lower()
    if status in FINISHED_STATUSES:
        return MatchStatus.FINISHED
    if status in PAUSED_STATUSES:
        return MatchStatus.LIVE
    # Running clock shows the minute: "67", "45+2", "90'"
    if status in RUNNING_STATUSES or (status[:1].isdigit()) or match_live == "1":
        return MatchStatus.IN_PLAY
    return MatchStatus.SCHEDULED


class APIFootballComProvider(FootballProvider):
    """apifootball.com v3."""

    def __init__(
        self,
        client: APIFootballComClient,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._client = client
        self._clock = clock
        self._zone = get_zone(client.source_timezone)

    @property
    def name(self) -> str:
        return "apifootball_com"

    def fetch_fixtures(self, date_range: DateRange) -> list[Match]:
        # Source wall-clock dates can straddle UTC midnight; pad by a day and filter
        data = self._client.get_events(
            date_range.start - timedelta(days=1), date_range.end + timedelta(days=1)
        )
        return [m for m in self._parse_events(data) if date_range.contains(m.kickoff_date)]

    def _team_events(self, team: Team) -> list[Match]:
        today = self._clock().date()
        data = self._client.get_events(
            today - timedelta(days=TEAM_LOOKBACK_DAYS),
            today + timedelta(days=TEAM_LOOKAHEAD_DAYS),
            team_id=team.id,
        )
        return self._parse_events(data)

    def get_team_recent_matches(self, team: Team, limit: int = 5) -> list[Match]:
        if not team.has_provider_id:
            return []
        finished = [m for m in self._team_events(team) if m.is_finished]
        return sorted(finished, key=lambda m: m.kickoff, reverse=True)[:limit]

    def get_team_upcoming_matches(self, team: Team, limit: int = 3) -> list[Match]:
        if not team.has_provider_id:
            return []
        now = self._clock()
        pending = [m for m in self._team_events(team) if not m.is_finished and m.kickoff >= now]
        return sorted(pending, key=lambda m: m.kickoff)[:limit]

    def get_head_to_head(self, match: Match, limit: int = 10) -> list[Match]:
        home, away = match.home_team, match.away_team
        if not (home.has_provider_id and away.has_provider_id):
            return []
        data = self._client.get_h2h(home.id, away.id)
        raw = data.get("firstTeam_VS_secondTeam", []) if isinstance(data, dict) else data
        meetings = [m for m in self._parse_events(raw) if m.id != match.id and m.is_finished]
        return sorted(meetings, key=lambda m: m.kickoff, reverse=True)[:limit]

    def _parse_events(self, data) -> list[Match]:
        if not isinstance(data, list):
            raise ProviderError(self.name, "unexpected payload: expected a list of events")
        matches = []
        for raw in data:
            if not isinstance(raw, dict):
                continue
            match = self._parse_event(raw)
            if match:
                matches.append(match)
        return matches

    def _parse_event(self, data: dict) -> Match | None:
        try:
            kickoff = parse_split_datetime(
                data.get("match_date"), data.get("match_time"), self._zone
            )
            if not kickoff:
                return None
            return Match(
                id=clean_id(data.get("match_id")),
                home_team=make_team(data.get("match_hometeam_id"), data.get("match_hometeam_name")),
                away_team=make_team(data.get("match_awayteam_id"), data.get("match_awayteam_name")),
                competition=make_competition(data.get("league_id"), data.get("league_name")),
                kickoff=kickoff,
                status=parse_status(data.get("match_status"), data.get("match_live")),
                score=build_score(
                    data.get("match_hometeam_score"), data.get("match_awayteam_score")
                ),
                season=str(data.get("league_year") or ""),
                provider=self.name,
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            logger.warning(
                "[APIFOOTBALL_COM] Failed to parse event %s: %s", data.get("match_id"), e
            )
            return None

    def close(self) -> None:
        self._client.close()
