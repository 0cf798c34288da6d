"""Abstract interfaces for matchrank.

Defines the contracts that providers and external collaborators implement.
"""

from abc import ABC, abstractmethod
from typing import Protocol

from matchrank.core.types import DateRange, Match, ProviderCredential, Team

# =============================================================================
# EXTERNAL COLLABORATORS
# =============================================================================


class CredentialSource(Protocol):
    """Credential and quota store.

    The registry depends on this protocol, not on a concrete store.
    Implementations can be env-backed, database-backed, or mocked for testing.
    """

    def get_provider_credentials(self) -> list[ProviderCredential]:
        """Get connection settings for every configured provider."""
        ...

    def is_quota_exhausted(self, provider_name: str) -> bool:
        """Check whether the provider has used up its call budget."""
        ...

    def record_call(self, provider_name: str, count: int = 1) -> None:
        """Count calls against the provider's budget."""
        ...


class ChannelConfigSource(Protocol):
    """Channel configuration lookup."""

    def get_channel_timezone(self, channel_id: str) -> str:
        """Get the IANA timezone for a channel (a fixed default when unset)."""
        ...


# =============================================================================
# FOOTBALL PROVIDER - Main provider interface
# =============================================================================


class FootballProvider(ABC):
    """Abstract base for upstream football-data providers.

    Each implementation owns its own field mapping and returns canonical
    Match records. Failures raise ProviderError; zero results return [].
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier (e.g., 'football_data', 'tsdb')."""
        ...

    @abstractmethod
    def fetch_fixtures(self, date_range: DateRange) -> list[Match]:
        """Get all fixtures/results whose UTC kickoff date falls in the range."""
        ...

    def get_team_recent_matches(self, team: Team, limit: int = 5) -> list[Match]:
        """Get a team's most recent finished matches, newest first.

        Optional - returns empty list by default.
        """
        return []

    def get_team_upcoming_matches(self, team: Team, limit: int = 3) -> list[Match]:
        """Get a team's next scheduled matches, soonest first.

        Optional - returns empty list by default.
        """
        return []

    def get_head_to_head(self, match: Match, limit: int = 10) -> list[Match]:
        """Get previous meetings between the match's two teams.

        Default implementation filters the home team's recent matches.
        """
        away = match.away_team
        recent = self.get_team_recent_matches(match.home_team, limit=max(limit * 3, 20))
        meetings = [
            m
            for m in recent
            if m.id != match.id and (m.home_team.id == away.id or m.away_team.id == away.id)
        ]
        return meetings[:limit]

    def search_team(self, name: str) -> Team | None:
        """Look up a team by name.

        Optional - returns None by default.
        """
        return None

    def close(self) -> None:
        """Release network resources. Optional."""
        return None
