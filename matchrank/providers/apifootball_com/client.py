"""apifootball.com v3 HTTP client.

Every endpoint is the site root with an `action` query parameter; the key
travels as the `APIkey` query parameter. Times in responses are wall-clock
in the `timezone` parameter sent with the request.

"No results" is reported as {"error": 404, "message": "No event found..."}
with HTTP 200; any other error object is a real failure.
"""

from datetime import date

from matchrank.core.exceptions import ProviderError
from matchrank.providers.base import BaseAPIClient

APIFOOTBALL_COM_BASE_URL = "https://apiv3.apifootball.com"
NO_RESULTS_ERROR = 404


class APIFootballComClient(BaseAPIClient):
    """Low-level apifootball.com client."""

    PROVIDER = "apifootball_com"
    LOG_TAG = "APIFOOTBALL_COM"

    def __init__(self, *args, source_timezone: str = "Europe/Berlin", **kwargs):
        super().__init__(*args, **kwargs)
        self.source_timezone = source_timezone

    def _auth_params(self) -> dict[str, str]:
        return {"APIkey": self._api_key}

    def _action(self, action: str, params: dict) -> list | dict:
        data = self._request("", {"action": action, **params})
        if isinstance(data, dict) and "error" in data:
            if str(data.get("error")) == str(NO_RESULTS_ERROR):
                return []
            raise ProviderError(self.PROVIDER, f"API error {data.get('error')}: {data.get('message')}")
        return data

    def get_events(self, date_from: date, date_to: date, team_id: str | None = None) -> list:
        params = {
            "from": date_from.isoformat(),
            "to": date_to.isoformat(),
            "timezone": self.source_timezone,
        }
        if team_id:
            params["team_id"] = team_id
        return self._action("get_events", params)

    def get_h2h(self, first_team_id: str, second_team_id: str) -> dict | list:
        return self._action(
            "get_H2H",
            {
                "firstTeamId": first_team_id,
                "secondTeamId": second_team_id,
                "timezone": self.source_timezone,
            },
        )
