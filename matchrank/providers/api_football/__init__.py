"""API-Football (api-sports v3) provider."""

from matchrank.providers.api_football.client import APIFootballClient
from matchrank.providers.api_football.provider import APIFootballProvider

__all__ = ["APIFootballClient", "APIFootballProvider"]
