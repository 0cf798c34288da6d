"""Shared fixtures: a fixed clock, in-memory providers and credential stores."""

import threading
from datetime import UTC, datetime

import pytest

from matchrank.core import (
    Competition,
    DateRange,
    FootballProvider,
    Match,
    MatchStatus,
    ProviderCredential,
    ProviderError,
    Score,
    Team,
)
from matchrank.providers.registry import ProviderEntry, ProviderRegistry
from matchrank.services.aggregator import MatchAggregator
from matchrank.services.selector import MatchSelector
from matchrank.utilities.fuzzy_match import synthetic_id

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)


# =============================================================================
# TEST DOUBLES
# =============================================================================


class FakeClock:
    """Callable clock whose time tests can move."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeProvider(FootballProvider):
    """In-memory provider.

    fixtures are filtered by the requested range unless respect_range is False.
    error makes every fixture call fail; detail_errors maps team ids to failures.
    gate, when given, holds every fixture call until it is set.
    """

    def __init__(
        self,
        name: str,
        fixtures: list[Match] | None = None,
        error: Exception | None = None,
        recent: dict[str, list[Match]] | None = None,
        upcoming: dict[str, list[Match]] | None = None,
        h2h: list[Match] | None = None,
        teams: dict[str, Team] | None = None,
        detail_errors: dict[str, Exception] | None = None,
        respect_range: bool = True,
        gate: threading.Event | None = None,
    ):
        self._name = name
        self.fixtures = list(fixtures or [])
        self.error = error
        self.recent = recent or {}
        self.upcoming = upcoming or {}
        self.h2h = h2h
        self.teams = teams or {}
        self.detail_errors = detail_errors or {}
        self.respect_range = respect_range
        self.gate = gate
        self.calls: list[DateRange] = []
        self.searches: list[str] = []
        self.closed = False

    @property
    def name(self) -> str:
        return self._name

    def fetch_fixtures(self, date_range: DateRange) -> list[Match]:
        self.calls.append(date_range)
        if self.gate is not None:
            self.gate.wait(5)
        if self.error is not None:
            raise self.error
        if not self.respect_range:
            return list(self.fixtures)
        return [m for m in self.fixtures if date_range.contains(m.kickoff_date)]

    def get_team_recent_matches(self, team: Team, limit: int = 5) -> list[Match]:
        if team.id in self.detail_errors:
            raise self.detail_errors[team.id]
        return self.recent.get(team.id, [])[:limit]

    def get_team_upcoming_matches(self, team: Team, limit: int = 3) -> list[Match]:
        if team.id in self.detail_errors:
            raise self.detail_errors[team.id]
        return self.upcoming.get(team.id, [])[:limit]

    def get_head_to_head(self, match: Match, limit: int = 10) -> list[Match]:
        if self.h2h is None:
            return super().get_head_to_head(match, limit)
        return self.h2h[:limit]

    def search_team(self, name: str) -> Team | None:
        self.searches.append(name)
        return self.teams.get(name)

    def close(self) -> None:
        self.closed = True


class FakeCredentials:
    """CredentialSource with settable quota state that records calls."""

    def __init__(self, credentials: list[ProviderCredential] | None = None):
        self.credentials = list(credentials or [])
        self.exhausted: set[str] = set()
        self.recorded: dict[str, int] = {}
        self.quota_checks = 0
        self.fail_quota_check = False

    def get_provider_credentials(self) -> list[ProviderCredential]:
        return list(self.credentials)

    def is_quota_exhausted(self, provider_name: str) -> bool:
        self.quota_checks += 1
        if self.fail_quota_check:
            raise ConnectionError("quota store unavailable")
        return provider_name in self.exhausted

    def record_call(self, provider_name: str, count: int = 1) -> None:
        self.recorded[provider_name] = self.recorded.get(provider_name, 0) + count


def build_match(
    home: str = "Real Madrid",
    away: str = "Barcelona",
    competition: str = "La Liga",
    kickoff: datetime = datetime(2024, 3, 11, 20, 0, tzinfo=UTC),
    status: MatchStatus = MatchStatus.SCHEDULED,
    score: tuple[int, int] | None = None,
    match_id: str | None = None,
    provider: str = "p1",
    home_id: str | None = None,
    away_id: str | None = None,
) -> Match:
    """Canonical match with readable defaults (El Clasico, the day after NOW)."""
    return Match(
        id=match_id or f"{synthetic_id(home)}-{synthetic_id(away)}-{kickoff:%Y%m%d}",
        home_team=Team(home_id or synthetic_id(home), home),
        away_team=Team(away_id or synthetic_id(away), away),
        competition=Competition(synthetic_id(competition), competition),
        kickoff=kickoff,
        status=status,
        score=Score(*score) if score else None,
        provider=provider,
    )


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def clock():
    return FakeClock(NOW)


@pytest.fixture
def make_match():
    return build_match


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def credentials():
    return FakeCredentials()


@pytest.fixture
def provider_error():
    def _make(provider: str = "p1", message: str = "HTTP 500 for matches") -> ProviderError:
        return ProviderError(provider, message)

    return _make


@pytest.fixture
def make_registry(credentials, clock):
    """Registry over providers in the order given (first = priority 1)."""

    def _make(*providers, fallback=None, credential_source=None, health_ttl_seconds=300):
        entries = [ProviderEntry(p.name, p, index + 1) for index, p in enumerate(providers)]
        return ProviderRegistry(
            entries,
            fallback=fallback,
            credential_source=credential_source or credentials,
            clock=clock,
            health_ttl_seconds=health_ttl_seconds,
        )

    return _make


@pytest.fixture
def make_selector(make_registry, clock):
    """Selector over fake providers, scoring in UTC at NOW."""

    def _make(*providers, fallback=None, **kwargs):
        registry = make_registry(*providers, fallback=fallback)
        aggregator = MatchAggregator(registry, clock=clock, max_workers=2)
        kwargs.setdefault("default_timezone", "UTC")
        return MatchSelector(
            aggregator,
            registry,
            clock=clock,
            detail_max_workers=2,
            timeout_seconds=10,
            **kwargs,
        )

    return _make
