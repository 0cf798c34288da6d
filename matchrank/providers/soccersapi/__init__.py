"""SoccersAPI v2.2 provider."""

from matchrank.providers.soccersapi.client import SoccersAPIClient
from matchrank.providers.soccersapi.provider import SoccersAPIProvider

__all__ = ["SoccersAPIClient", "SoccersAPIProvider"]
