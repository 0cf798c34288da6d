"""SoccersAPI v2.2 HTTP client.

Auth is a `user` + `token` query pair. Responses wrap results in "data";
failures come back as {"errors": [...]} or {"data": null, "message": ...}.
"""

from datetime import date

from matchrank.core.exceptions import ProviderError
from matchrank.providers.base import BaseAPIClient

SOCCERSAPI_BASE_URL = "https://api.soccersapi.com/v2.2"


class SoccersAPIClient(BaseAPIClient):
    """Low-level SoccersAPI client."""

    PROVIDER = "soccersapi"
    LOG_TAG = "SOCCERSAPI"

    def __init__(self, *args, username: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._username = username or ""

    def _auth_params(self) -> dict[str, str]:
        return {"user": self._username, "token": self._api_key}

    def get_schedule(self, day: date) -> dict:
        """Fixtures on one date."""
        data = self._request("fixtures/", {"t": "schedule", "d": day.isoformat()})
        if not isinstance(data, dict):
            raise ProviderError(self.PROVIDER, "unexpected payload: expected an object")
        if data.get("errors"):
            raise ProviderError(self.PROVIDER, f"API error: {data['errors']}")
        return data
