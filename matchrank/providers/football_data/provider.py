"""football-data.org provider implementation.

Transforms football-data.org v4 payloads into canonical Match records.

Payload shape (per match):
    {"id", "utcDate", "status", "homeTeam": {"id", "name"}, "awayTeam": {...},
     "competition": {"id", "name", "code"}, "season": {"startDate", "endDate"},
     "score": {"fullTime": {"home", "away"}}}
"""

import logging
from datetime import timedelta

from matchrank.core import DateRange, FootballProvider, Match, MatchStatus, ProviderError, Team
from matchrank.providers.football_data.client import FootballDataClient
from matchrank.providers.parsing import (
    build_score,
    clean_id,
    make_competition,
    make_team,
    parse_iso_datetime,
)

logger = logging.getLogger(__name__)

STATUS_MAP = {
    "FINISHED": MatchStatus.FINISHED,
    "AWARDED": MatchStatus.FINISHED,
    "IN_PLAY": MatchStatus.IN_PLAY,
    "LIVE": MatchStatus.IN_PLAY,
    "PAUSED": MatchStatus.LIVE,
}


class FootballDataProvider(FootballProvider):
    """football-data.org v4. Covers the major European competitions."""

    def __init__(self, client: FootballDataClient):
        self._client = client

    @property
    def name(self) -> str:
        return "football_data"

    def fetch_fixtures(self, date_range: DateRange) -> list[Match]:
        # dateTo is requested one day past the range; extra days are filtered out
        data = self._client.get_matches(date_range.start, date_range.end + timedelta(days=1))
        matches = self._parse_matches(data)
        return [m for m in matches if date_range.contains(m.kickoff_date)]

    def get_team_recent_matches(self, team: Team, limit: int = 5) -> list[Match]:
        if not team.has_provider_id:
            return []
        data = self._client.get_team_matches(team.id, "FINISHED", limit)
        matches = sorted(self._parse_matches(data), key=lambda m: m.kickoff, reverse=True)
        return matches[:limit]

    def get_team_upcoming_matches(self, team: Team, limit: int = 3) -> list[Match]:
        if not team.has_provider_id:
            return []
        data = self._client.get_team_matches(team.id, "SCHEDULED", limit)
        return sorted(self._parse_matches(data), key=lambda m: m.kickoff)[:limit]

    def get_head_to_head(self, match: Match, limit: int = 10) -> list[Match]:
        if match.provider != self.name:
            return super().get_head_to_head(match, limit)
        data = self._client.get_head_to_head(match.id, limit)
        meetings = [m for m in self._parse_matches(data) if m.id != match.id]
        return sorted(meetings, key=lambda m: m.kickoff, reverse=True)[:limit]

    def _parse_matches(self, data) -> list[Match]:
        if not isinstance(data, dict):
            raise ProviderError(self.name, "unexpected payload: expected an object")
        raw_matches = data.get("matches") or []
        if not isinstance(raw_matches, list):
            raise ProviderError(self.name, "unexpected payload: 'matches' is not a list")

        matches = []
        for raw in raw_matches:
            if not isinstance(raw, dict):
                continue
            match = self._parse_match(raw)
            if match:
                matches.append(match)
        return matches

    def _parse_match(self, data: dict) -> Match | None:
        try:
            kickoff = parse_iso_datetime(data.get("utcDate"))
            if not kickoff:
                return None
            home = data["homeTeam"]
            away = data["awayTeam"]
            competition = data.get("competition") or {}
            full_time = (data.get("score") or {}).get("fullTime") or {}
            return Match(
                id=clean_id(data.get("id")),
                home_team=make_team(home.get("id"), home.get("name")),
                away_team=make_team(away.get("id"), away.get("name")),
                competition=make_competition(competition.get("id"), competition.get("name")),
                kickoff=kickoff,
                status=STATUS_MAP.get(str(data.get("status", "")).upper(), MatchStatus.SCHEDULED),
                score=build_score(full_time.get("home"), full_time.get("away")),
                season=self._season_label(data.get("season") or {}),
                provider=self.name,
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            logger.warning(
                "[FOOTBALL_DATA] Failed to parse match %s: %s", data.get("id", "unknown"), e
            )
            return None

    @staticmethod
    def _season_label(season: dict) -> str:
        start = (season.get("startDate") or "")[:4]
        end = (season.get("endDate") or "")[:4]
        if start and end and start != end:
            return f"{start}/{end}"
        return start

    def close(self) -> None:
        self._client.close()
