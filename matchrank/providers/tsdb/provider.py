"""TheSportsDB provider implementation.

Transforms TSDB events into canonical Match records. Used as the free
last-resort provider, so fixtures are restricted to a curated set of top
leagues.

Payload shape (per event):
    {"idEvent", "idHomeTeam", "strHomeTeam", "idAwayTeam", "strAwayTeam",
     "idLeague", "strLeague", "strSeason", "strTimestamp", "dateEvent",
     "strTime", "strStatus", "strPostponed", "intHomeScore", "intAwayScore"}
"""

import logging

from matchrank.core import DateRange, FootballProvider, Match, MatchStatus, ProviderError, Team
from matchrank.providers.parsing import (
    build_score,
    clean_id,
    make_competition,
    make_team,
    parse_iso_datetime,
    parse_split_datetime,
)
from matchrank.providers.tsdb.client import TSDBClient
from matchrank.utilities.fuzzy_match import best_match

logger = logging.getLogger(__name__)

# idLeague -> strLeague for the leagues the free fallback covers
CURATED_LEAGUES: dict[str, str] = {
    "4328": "English Premier League",
    "4335": "Spanish La Liga",
    "4332": "Italian Serie A",
    "4331": "German Bundesliga",
    "4334": "French Ligue 1",
    "4480": "UEFA Champions League",
}


def parse_status(status_str: str | None, postponed: str | None = None) -> MatchStatus:
    """Map TSDB strStatus to a canonical status."""
    if postponed == "yes":
        return MatchStatus.SCHEDULED

    status_lower = (status_str or "").strip().lower()
    if status_lower in ("ft", "aet", "pen", "finished", "match finished"):
        return MatchStatus.FINISHED
    if status_lower in ("ht", "half time", "break"):
        return MatchStatus.LIVE
    if status_lower in ("live", "playing", "1h", "2h", "et", "in progress"):
        return MatchStatus.IN_PLAY
    return MatchStatus.SCHEDULED


class TSDBProvider(FootballProvider):
    """TheSportsDB restricted to CURATED_LEAGUES."""

    def __init__(self, client: TSDBClient, leagues: dict[str, str] | None = None):
        self._client = client
        self._leagues = leagues if leagues is not None else CURATED_LEAGUES

    @property
    def name(self) -> str:
        return "tsdb"

    @property
    def leagues(self) -> dict[str, str]:
        return dict(self._leagues)

    def fetch_fixtures(self, date_range: DateRange) -> list[Match]:
        matches: list[Match] = []
        for day in date_range.days():
            data = self._client.get_events_by_date(day)
            for match in self._parse_events(data, "events"):
                if match.competition.id in self._leagues and match.kickoff_date == day:
                    matches.append(match)
        return matches

    def get_team_recent_matches(self, team: Team, limit: int = 5) -> list[Match]:
        if not team.has_provider_id:
            return []
        data = self._client.get_team_last_events(team.id)
        finished = [m for m in self._parse_events(data, "results") if m.is_finished]
        return sorted(finished, key=lambda m: m.kickoff, reverse=True)[:limit]

    def get_team_upcoming_matches(self, team: Team, limit: int = 3) -> list[Match]:
        if not team.has_provider_id:
            return []
        data = self._client.get_team_next_events(team.id)
        return sorted(self._parse_events(data, "events"), key=lambda m: m.kickoff)[:limit]

    def search_team(self, name: str) -> Team | None:
        data = self._client.search_teams(name)
        candidates = {}
        for item in data.get("teams") or []:
            if not isinstance(item, dict) or item.get("strSport", "Soccer") != "Soccer":
                continue
            if item.get("idTeam") and item.get("strTeam"):
                candidates[item["strTeam"]] = make_team(item["idTeam"], item["strTeam"])
        if not candidates:
            return None
        result = best_match(name, list(candidates))
        return candidates[result.pattern_used] if result.matched else None

    def _parse_events(self, data: dict, key: str) -> list[Match]:
        # TSDB returns {"events": null} when there is nothing
        raw_events = data.get(key) or []
        if not isinstance(raw_events, list):
            raise ProviderError(self.name, f"unexpected payload: '{key}' is not a list")
        matches = []
        for raw in raw_events:
            if not isinstance(raw, dict):
                continue
            match = self._parse_event(raw)
            if match:
                matches.append(match)
        return matches

    def _parse_event(self, data: dict) -> Match | None:
        try:
            # Timestamp first (most reliable), then date + time; both UTC
            kickoff = parse_iso_datetime(data.get("strTimestamp")) or parse_split_datetime(
                data.get("dateEvent"), data.get("strTime")
            )
            if not kickoff:
                return None
            if not data.get("strHomeTeam") or not data.get("strAwayTeam"):
                return None
            league_id = clean_id(data.get("idLeague"))
            return Match(
                id=clean_id(data.get("idEvent")),
                home_team=make_team(data.get("idHomeTeam"), data.get("strHomeTeam")),
                away_team=make_team(data.get("idAwayTeam"), data.get("strAwayTeam")),
                competition=make_competition(
                    league_id, data.get("strLeague") or self._leagues.get(league_id)
                ),
                kickoff=kickoff,
                status=parse_status(data.get("strStatus"), data.get("strPostponed")),
                score=build_score(data.get("intHomeScore"), data.get("intAwayScore")),
                season=str(data.get("strSeason") or ""),
                provider=self.name,
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            logger.warning("[TSDB] Failed to parse event %s: %s", data.get("idEvent", "unknown"), e)
            return None

    def rate_limit_stats(self) -> dict:
        return self._client.rate_limit_stats()

    def close(self) -> None:
        self._client.close()
