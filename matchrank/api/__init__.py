"""HTTP facade over MatchSelector."""

from matchrank.api.app import create_app

__all__ = ["create_app"]
