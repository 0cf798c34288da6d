"""apifootball.com v3 provider."""

from matchrank.providers.apifootball_com.client import APIFootballComClient
from matchrank.providers.apifootball_com.provider import APIFootballComProvider

__all__ = ["APIFootballComClient", "APIFootballComProvider"]
