"""API-Football provider implementation.

Payload shape (per fixture, under "response"):
    {"fixture": {"id", "date", "status": {"short"}},
     "league": {"id", "name", "season"},
     "teams": {"home": {"id", "name"}, "away": {...}},
     "goals": {"home", "away"}}
"""

import logging

from matchrank.core import DateRange, FootballProvider, Match, MatchStatus, ProviderError, Team
from matchrank.providers.api_football.client import APIFootballClient
from matchrank.providers.parsing import (
    build_score,
    clean_id,
    make_competition,
    make_team,
    parse_iso_datetime,
)
from matchrank.utilities.cache import CACHE_TTL_TEAM_SEARCH, TTLCache, make_cache_key
from matchrank.utilities.fuzzy_match import best_match

logger = logging.getLogger(__name__)

# fixture.status.short vocabulary
FINISHED_CODES = {"FT", "AET", "PEN", "AWD", "WO"}
PAUSED_CODES = {"HT", "BT"}
RUNNING_CODES = {"1H", "2H", "ET", "P", "LIVE", "INT", "SUSP"}


def parse_status(short: str | None) -> MatchStatus:
    code = (short or "").upper()
    if code in FINISHED_CODES:
        return MatchStatus.FINISHED
    if code in PAUSED_CODES:
        return MatchStatus.LIVE
    if code in RUNNING_CODES:
        return MatchStatus.IN_PLAY
    return MatchStatus.SCHEDULED


class APIFootballProvider(FootballProvider):
    """API-Football v3 (direct or through RapidAPI)."""

    def __init__(self, client: APIFootballClient):
        self._client = client
        self._cache = TTLCache(default_ttl_seconds=CACHE_TTL_TEAM_SEARCH, max_size=500)

    @property
    def name(self) -> str:
        return "api_football"

    def fetch_fixtures(self, date_range: DateRange) -> list[Match]:
        # The date filter takes one day; one call per day in the range
        matches: list[Match] = []
        for day in date_range.days():
            data = self._client.get_fixtures_by_date(day)
            matches.extend(m for m in self._parse_fixtures(data) if m.kickoff_date == day)
        return matches

    def get_team_recent_matches(self, team: Team, limit: int = 5) -> list[Match]:
        if not team.has_provider_id:
            return []
        data = self._client.get_team_fixtures(team.id, last=limit)
        return sorted(self._parse_fixtures(data), key=lambda m: m.kickoff, reverse=True)[:limit]

    def get_team_upcoming_matches(self, team: Team, limit: int = 3) -> list[Match]:
        if not team.has_provider_id:
            return []
        data = self._client.get_team_fixtures(team.id, next_=limit)
        return sorted(self._parse_fixtures(data), key=lambda m: m.kickoff)[:limit]

    def get_head_to_head(self, match: Match, limit: int = 10) -> list[Match]:
        home, away = match.home_team, match.away_team
        if not (home.has_provider_id and away.has_provider_id):
            return []
        data = self._client.get_head_to_head(home.id, away.id, limit)
        meetings = [m for m in self._parse_fixtures(data) if m.id != match.id and m.is_finished]
        return sorted(meetings, key=lambda m: m.kickoff, reverse=True)[:limit]

    def search_team(self, name: str) -> Team | None:
        cache_key = make_cache_key("api_football", "search", name.lower())
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        data = self._client.search_teams(name)
        candidates = {}
        for item in data.get("response") or []:
            team = (item or {}).get("team") or {}
            if team.get("id") and team.get("name"):
                candidates[team["name"]] = make_team(team["id"], team["name"])
        if not candidates:
            return None

        result = best_match(name, list(candidates))
        if not result.matched:
            logger.debug("[API_FOOTBALL] No confident team match for %r", name)
            return None
        found = candidates[result.pattern_used]
        self._cache.set(cache_key, found)
        return found

    def _parse_fixtures(self, data: dict) -> list[Match]:
        raw_fixtures = data.get("response") or []
        if not isinstance(raw_fixtures, list):
            raise ProviderError(self.name, "unexpected payload: 'response' is not a list")
        matches = []
        for raw in raw_fixtures:
            if not isinstance(raw, dict):
                continue
            match = self._parse_fixture(raw)
            if match:
                matches.append(match)
        return matches

    def _parse_fixture(self, data: dict) -> Match | None:
        fixture = data.get("fixture") or {}
        try:
            kickoff = parse_iso_datetime(fixture.get("date"))
            if not kickoff:
                return None
            league = data.get("league") or {}
            teams = data["teams"]
            goals = data.get("goals") or {}
            return Match(
                id=clean_id(fixture.get("id")),
                home_team=make_team(teams["home"].get("id"), teams["home"].get("name")),
                away_team=make_team(teams["away"].get("id"), teams["away"].get("name")),
                competition=make_competition(league.get("id"), league.get("name")),
                kickoff=kickoff,
                status=parse_status((fixture.get("status") or {}).get("short")),
                score=build_score(goals.get("home"), goals.get("away")),
                season=clean_id(league.get("season")),
                provider=self.name,
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            logger.warning("[API_FOOTBALL] Failed to parse fixture %s: %s", fixture.get("id"), e)
            return None

    def close(self) -> None:
        self._client.close()
