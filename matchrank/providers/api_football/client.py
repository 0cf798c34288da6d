"""API-Football (api-sports v3) HTTP client.

Handles raw HTTP requests only - no data transformation.

Auth depends on where the key was issued:
- api-sports.io dashboard: x-apisports-key header
- RapidAPI marketplace: X-RapidAPI-Key + X-RapidAPI-Host headers

The API answers 200 with a non-empty "errors" member for bad keys and
exhausted quotas; that is surfaced as ProviderError here.
"""

from datetime import date
from urllib.parse import urlparse

from matchrank.core.exceptions import ProviderError
from matchrank.providers.base import BaseAPIClient

API_FOOTBALL_BASE_URL = "https://v3.football.api-sports.io"


class APIFootballClient(BaseAPIClient):
    """Low-level API-Football client."""

    PROVIDER = "api_football"
    LOG_TAG = "API_FOOTBALL"

    @property
    def is_rapidapi(self) -> bool:
        return "rapidapi.com" in self._base_url

    def _headers(self) -> dict[str, str]:
        if self.is_rapidapi:
            return {
                "X-RapidAPI-Key": self._api_key,
                "X-RapidAPI-Host": urlparse(self._base_url).netloc,
            }
        return {"x-apisports-key": self._api_key}

    def _get(self, path: str, params: dict) -> dict:
        data = self._request(path, params)
        if not isinstance(data, dict):
            raise ProviderError(self.PROVIDER, "unexpected payload: expected an object")
        errors = data.get("errors")
        if errors:
            raise ProviderError(self.PROVIDER, f"API error: {errors}")
        return data

    def get_fixtures_by_date(self, day: date) -> dict:
        """All fixtures on one UTC date."""
        return self._get("fixtures", {"date": day.isoformat(), "timezone": "UTC"})

    def get_team_fixtures(self, team_id: str, last: int | None = None, next_: int | None = None) -> dict:
        """A team's last N or next N fixtures."""
        params: dict = {"team": team_id, "timezone": "UTC"}
        if last:
            params["last"] = last
        if next_:
            params["next"] = next_
        return self._get("fixtures", params)

    def get_head_to_head(self, home_id: str, away_id: str, last: int) -> dict:
        return self._get(
            "fixtures/headtohead", {"h2h": f"{home_id}-{away_id}", "last": last, "timezone": "UTC"}
        )

    def search_teams(self, name: str) -> dict:
        return self._get("teams", {"search": name})
