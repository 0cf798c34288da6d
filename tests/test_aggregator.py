"""Tests for MatchAggregator: per-day fallback, dedup, total failure."""

import threading
import time
from datetime import UTC, date, datetime

from matchrank.core import ContentType, DateRange
from matchrank.services.aggregator import MatchAggregator, deduplicate_matches
from matchrank.services.credentials import EnvCredentialSource
from matchrank.utilities.cancellation import CancellationToken

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)
YESTERDAY = datetime(2024, 3, 9, 18, 0, tzinfo=UTC)

# daily_summary fetches exactly one day: yesterday (2024-03-09)
ONE_DAY = ContentType.DAILY_SUMMARY


def aggregator_for(registry) -> MatchAggregator:
    return MatchAggregator(registry, clock=lambda: NOW, max_workers=2)


# =============================================================================
# FALLBACK ORDER
# =============================================================================


class TestFallbackOrder:
    def test_first_provider_with_matches_wins(self, make_registry, fake_provider, make_match):
        p2_matches = [
            make_match("Arsenal", "Chelsea", "Premier League", YESTERDAY, provider="p2"),
            make_match("Liverpool", "Everton", "Premier League", YESTERDAY, provider="p2"),
        ]
        p1 = fake_provider("p1", fixtures=[])
        p2 = fake_provider("p2", fixtures=p2_matches)
        p3 = fake_provider("p3", fixtures=[make_match("Ajax", "PSV", "Eredivisie", YESTERDAY, provider="p3")])

        matches = aggregator_for(make_registry(p1, p2, p3)).fetch_canonical_matches(ONE_DAY)

        assert sorted(m.id for m in matches) == sorted(m.id for m in p2_matches)
        assert len(p1.calls) == 1
        assert len(p2.calls) == 1
        assert p3.calls == []

    def test_failed_provider_falls_through(self, make_registry, fake_provider, make_match, provider_error):
        p1 = fake_provider("p1", error=provider_error("p1"))
        p2 = fake_provider("p2", fixtures=[make_match(kickoff=YESTERDAY, provider="p2")])
        registry = make_registry(p1, p2)

        matches = aggregator_for(registry).fetch_canonical_matches(ONE_DAY)

        assert [m.provider for m in matches] == ["p2"]
        assert not registry.is_usable("p1")

    def test_unexpected_exception_treated_as_failure(self, make_registry, fake_provider, make_match):
        p1 = fake_provider("p1", error=RuntimeError("parser bug"))
        p2 = fake_provider("p2", fixtures=[make_match(kickoff=YESTERDAY, provider="p2")])

        matches = aggregator_for(make_registry(p1, p2)).fetch_canonical_matches(ONE_DAY)
        assert [m.provider for m in matches] == ["p2"]

    def test_failed_provider_not_retried_within_pass(self, make_registry, fake_provider, make_match, provider_error):
        p1 = fake_provider("p1", error=provider_error("p1"))
        p2 = fake_provider(
            "p2",
            fixtures=[
                make_match(kickoff=datetime(2024, 3, d, 18, 0, tzinfo=UTC), provider="p2") for d in range(3, 10)
            ],
        )
        # weekly_summary: seven days, fetched concurrently; p1 fails on its first attempt(s)
        registry = make_registry(p1, p2)
        result = MatchAggregator(registry, clock=lambda: NOW, max_workers=1).aggregate(
            ContentType.WEEKLY_SUMMARY
        )

        assert len(result.matches) == 7
        assert len(p1.calls) == 1

    def test_quota_exhausted_provider_never_called(self, make_registry, fake_provider, make_match, credentials):
        credentials.exhausted = {"p1"}
        p1 = fake_provider("p1", fixtures=[make_match(kickoff=YESTERDAY, provider="p1")])
        p2 = fake_provider("p2", fixtures=[make_match(kickoff=YESTERDAY, provider="p2")])

        matches = aggregator_for(make_registry(p1, p2)).fetch_canonical_matches(ONE_DAY)

        assert p1.calls == []
        assert [m.provider for m in matches] == ["p2"]

    def test_calls_are_recorded(self, make_registry, fake_provider, make_match, credentials):
        p1 = fake_provider("p1", fixtures=[])
        p2 = fake_provider("p2", fixtures=[make_match(kickoff=YESTERDAY, provider="p2")])
        aggregator_for(make_registry(p1, p2)).fetch_canonical_matches(ONE_DAY)
        assert credentials.recorded == {"p1": 1, "p2": 1}

    def test_each_day_requested_separately(self, make_registry, fake_provider):
        p1 = fake_provider("p1", fixtures=[])
        aggregator_for(make_registry(p1)).fetch_canonical_matches(ContentType.WEEKLY_SUMMARY)

        assert sorted(r.start for r in p1.calls) == [date(2024, 3, d) for d in range(3, 10)]
        assert all(len(r) == 1 for r in p1.calls)


# =============================================================================
# TOTAL FAILURE / FREE FALLBACK
# =============================================================================


class TestTotalFailure:
    def test_all_providers_failing_returns_empty(self, make_registry, fake_provider, provider_error):
        registry = make_registry(
            fake_provider("p1", error=provider_error("p1")),
            fake_provider("p2", error=provider_error("p2")),
            fallback=fake_provider("free", error=provider_error("free")),
        )
        assert aggregator_for(registry).fetch_canonical_matches(ContentType.NEWS) == []

    def test_no_providers_at_all(self, make_registry):
        assert aggregator_for(make_registry()).fetch_canonical_matches(ContentType.NEWS) == []

    def test_free_fallback_used_when_nothing_found(self, make_registry, fake_provider, make_match):
        free = fake_provider("free", fixtures=[make_match(kickoff=YESTERDAY, provider="free")])
        p1 = fake_provider("p1", fixtures=[])
        result = aggregator_for(make_registry(p1, fallback=free)).aggregate(ONE_DAY)

        assert result.used_fallback
        assert [m.provider for m in result.matches] == ["free"]
        # One call for the whole window
        assert free.calls == [DateRange.single(date(2024, 3, 9))]

    def test_free_fallback_not_used_when_ranked_provider_has_data(self, make_registry, fake_provider, make_match):
        free = fake_provider("free", fixtures=[make_match(kickoff=YESTERDAY, provider="free")])
        p1 = fake_provider("p1", fixtures=[make_match("Ajax", "PSV", "Eredivisie", YESTERDAY)])
        result = aggregator_for(make_registry(p1, fallback=free)).aggregate(ONE_DAY)

        assert not result.used_fallback
        assert free.calls == []

    def test_cancelled_pass_makes_no_calls(self, make_registry, fake_provider, make_match):
        p1 = fake_provider("p1", fixtures=[make_match(kickoff=YESTERDAY)])
        free = fake_provider("free", fixtures=[make_match(kickoff=YESTERDAY, provider="free")])
        token = CancellationToken()
        token.cancel()

        result = aggregator_for(make_registry(p1, fallback=free)).aggregate(ONE_DAY, cancel=token)

        assert result.matches == []
        assert result.cancelled
        assert p1.calls == []
        assert free.calls == []


# =============================================================================
# QUOTA / PASS SCOPE
# =============================================================================


class TestQuotaAndPassScope:
    def test_daily_limit_stops_calls_mid_pass(self, make_registry, fake_provider, clock):
        quota = EnvCredentialSource([], daily_limits={"p1": 3}, clock=clock)
        p1 = fake_provider("p1", fixtures=[])
        registry = make_registry(p1, credential_source=quota)

        # betting_tip spans 15 days; one worker keeps the calls sequential
        MatchAggregator(registry, clock=lambda: NOW, max_workers=1).aggregate(ContentType.BETTING_TIP)

        assert len(p1.calls) == 3
        assert quota.usage("p1")["used"] == 3
        assert not registry.is_usable("p1")

    def test_exhausted_provider_hands_remaining_days_to_next(self, make_registry, fake_provider, clock):
        quota = EnvCredentialSource([], daily_limits={"p1": 2}, clock=clock)
        p1 = fake_provider("p1", fixtures=[])
        p2 = fake_provider("p2", fixtures=[])
        registry = make_registry(p1, p2, credential_source=quota)

        MatchAggregator(registry, clock=lambda: NOW, max_workers=1).aggregate(ContentType.WEEKLY_SUMMARY)

        assert len(p1.calls) == 2
        assert len(p2.calls) == 7

    def test_outcome_after_deadline_leaves_health_alone(
        self, make_registry, fake_provider, credentials, provider_error
    ):
        gate = threading.Event()
        p1 = fake_provider("p1", error=provider_error("p1"), gate=gate)
        registry = make_registry(p1)

        result = aggregator_for(registry).aggregate(ONE_DAY, cancel=CancellationToken(0.5))
        assert result.cancelled
        assert result.matches == []

        gate.set()
        deadline = time.monotonic() + 5
        while "p1" not in credentials.recorded and time.monotonic() < deadline:
            time.sleep(0.01)

        assert credentials.recorded == {"p1": 1}
        assert registry.is_usable("p1")


# =============================================================================
# DEDUPLICATION
# =============================================================================


class TestDeduplication:
    def test_same_fixture_from_two_providers(self, make_match):
        first = make_match(kickoff=YESTERDAY, provider="p1", match_id="1", home_id="86", away_id="81")
        second = make_match(kickoff=YESTERDAY, provider="p2", match_id="9", home_id="541", away_id="529")
        assert deduplicate_matches([first, second]) == [first]

    def test_same_ids_same_day(self, make_match):
        first = make_match("Real Madrid CF", "FC Barcelona", kickoff=YESTERDAY, home_id="86", away_id="81")
        second = make_match("Real Madrid", "Barcelona", kickoff=YESTERDAY, home_id="86", away_id="81")
        assert len(deduplicate_matches([first, second])) == 1

    def test_reverse_fixture_is_distinct(self, make_match):
        first = make_match("Real Madrid", "Barcelona", kickoff=YESTERDAY)
        second = make_match("Barcelona", "Real Madrid", kickoff=YESTERDAY)
        assert len(deduplicate_matches([first, second])) == 2

    def test_aggregated_result_has_one_canonical_match(self, make_registry, fake_provider, make_match):
        duplicate = make_match(kickoff=YESTERDAY, provider="free")
        free = fake_provider("free", fixtures=[duplicate, make_match(kickoff=YESTERDAY, provider="free")])
        matches = aggregator_for(make_registry(fallback=free)).fetch_canonical_matches(ONE_DAY)
        assert len(matches) == 1

    def test_result_sorted_by_kickoff(self, make_registry, fake_provider, make_match):
        late = make_match("Ajax", "PSV", "Eredivisie", datetime(2024, 3, 9, 20, 0, tzinfo=UTC))
        early = make_match("Arsenal", "Chelsea", "Premier League", datetime(2024, 3, 9, 12, 0, tzinfo=UTC))
        p1 = fake_provider("p1", fixtures=[late, early])
        matches = aggregator_for(make_registry(p1)).fetch_canonical_matches(ONE_DAY)
        assert matches == [early, late]
