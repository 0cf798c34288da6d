"""football-data.org v4 HTTP client.

Handles raw HTTP requests only - no data transformation.
Auth: X-Auth-Token header. Free tier allows 10 requests/minute.
"""

from datetime import date

from matchrank.providers.base import BaseAPIClient

FOOTBALL_DATA_BASE_URL = "https://api.football-data.org/v4"


class FootballDataClient(BaseAPIClient):
    """Low-level football-data.org client."""

    PROVIDER = "football_data"
    LOG_TAG = "FOOTBALL_DATA"

    def _headers(self) -> dict[str, str]:
        return {"X-Auth-Token": self._api_key}

    def get_matches(self, date_from: date, date_to: date) -> dict:
        """All matches visible to the plan between two dates (inclusive)."""
        return self._request(
            "matches",
            {"dateFrom": date_from.isoformat(), "dateTo": date_to.isoformat()},
        )

    def get_team_matches(self, team_id: str, status: str, limit: int) -> dict:
        """A team's matches filtered by status (FINISHED or SCHEDULED)."""
        return self._request(f"teams/{team_id}/matches", {"status": status, "limit": limit})

    def get_head_to_head(self, match_id: str, limit: int) -> dict:
        """Previous meetings of the two teams of a match."""
        return self._request(f"matches/{match_id}/head2head", {"limit": limit})
