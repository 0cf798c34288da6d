"""football-data.org v4 provider."""

from matchrank.providers.football_data.client import FootballDataClient
from matchrank.providers.football_data.provider import FootballDataProvider

__all__ = ["FootballDataClient", "FootballDataProvider"]
