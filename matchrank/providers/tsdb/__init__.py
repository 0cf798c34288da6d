"""TheSportsDB provider (free fallback)."""

from matchrank.providers.tsdb.client import TSDBClient
from matchrank.providers.tsdb.provider import CURATED_LEAGUES, TSDBProvider

__all__ = ["CURATED_LEAGUES", "TSDBClient", "TSDBProvider"]
