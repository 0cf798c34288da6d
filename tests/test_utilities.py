"""Tests for the small shared utilities: names, cache, cancellation, status helpers."""

import time
from datetime import UTC, datetime, timedelta

import pytest

from matchrank.core import MatchStatus
from matchrank.utilities.cache import TTLCache, make_cache_key
from matchrank.utilities.cancellation import CancellationToken
from matchrank.utilities.fuzzy_match import (
    best_match,
    contains_words,
    names_match,
    normalize_text,
    same_club,
    slugify,
    synthetic_id,
)
from matchrank.utilities.match_status import completed_matches, is_match_final
from matchrank.utilities.tz import current_local_hour, offset


class FakeMonotonic:
    def __init__(self):
        self.value = 1000.0

    def __call__(self) -> float:
        return self.value


# =============================================================================
# NAME MATCHING
# =============================================================================


class TestNormalization:
    def test_accents_case_and_punctuation(self):
        assert normalize_text("  Atlético-Madrid ") == "atletico madrid"

    def test_slug(self):
        assert slugify("Bayern München") == "bayern-munchen"
        assert synthetic_id("Bayern München") == "slug:bayern-munchen"

    def test_contains_whole_words_only(self):
        assert contains_words("Real Madrid CF", "real madrid")
        assert not contains_words("Internacional", "Inter")


class TestNamesMatch:
    @pytest.mark.parametrize(
        "provider_name,known",
        [
            ("Real Madrid CF", "Real Madrid"),
            ("FC Barcelona", "Barcelona"),
            ("Atlético de Madrid", "Atletico de Madrid"),
            ("Manchester United FC", "Manchester United"),
        ],
    )
    def test_same_club(self, provider_name, known):
        assert names_match(provider_name, known)

    @pytest.mark.parametrize(
        "provider_name,known",
        [("AC Milan", "Inter"), ("Real Madrid", "Atletico Madrid"), ("Manchester City", "Manchester United")],
    )
    def test_different_clubs(self, provider_name, known):
        assert not names_match(provider_name, known)

    def test_empty_names(self):
        assert not names_match("", "Real Madrid")

    def test_best_match(self):
        result = best_match("Barcelona", ["Espanyol", "FC Barcelona", "Barcelona SC"])
        assert result.matched
        assert result.pattern_used in ("FC Barcelona", "Barcelona SC")

    def test_best_match_below_threshold(self):
        result = best_match("Ajax", ["Feyenoord", "PSV Eindhoven"])
        assert not result.matched
        assert result.pattern_used is None


class TestSameClub:
    @pytest.mark.parametrize(
        "team_name,known",
        [("Inter", "Inter Milan"), ("FC Internazionale Milano", "Internazionale"), ("Real Madrid CF", "Real Madrid")],
    )
    def test_same(self, team_name, known):
        assert same_club(team_name, known)

    @pytest.mark.parametrize(
        "team_name,known",
        [("Inter Miami", "Inter Milan"), ("Internacional", "Inter Milan"), ("Milan", "Inter Milan")],
    )
    def test_different(self, team_name, known):
        assert not same_club(team_name, known)


# =============================================================================
# CACHE
# =============================================================================


class TestTTLCache:
    def test_expiry(self):
        clock = FakeMonotonic()
        cache = TTLCache(default_ttl_seconds=60, clock=clock)
        cache.set("team", {"id": "86"})

        assert cache.get("team") == {"id": "86"}
        clock.value += 60
        assert cache.get("team") is None
        assert cache.size == 0

    def test_custom_ttl(self):
        clock = FakeMonotonic()
        cache = TTLCache(default_ttl_seconds=60, clock=clock)
        cache.set("long", 1, ttl_seconds=600)
        clock.value += 120
        assert cache.get("long") == 1

    def test_lru_eviction(self):
        cache = TTLCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)

        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.get("c") == 3

    def test_cleanup_and_stats(self):
        clock = FakeMonotonic()
        cache = TTLCache(default_ttl_seconds=10, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2, ttl_seconds=100)
        cache.get("a")
        cache.get("missing")
        clock.value += 20

        assert cache.cleanup_expired() == 1
        stats = cache.stats()
        assert stats["entries"] == 1
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 0.5

    def test_delete_and_clear(self):
        cache = TTLCache()
        cache.set("a", 1)
        cache.set("b", 2)
        cache.delete("a")
        assert cache.get("a") is None
        cache.clear()
        assert cache.size == 0
        assert cache.stats()["misses"] == 0

    def test_make_cache_key(self):
        assert make_cache_key("tsdb", "search", "Real Madrid") == "tsdb:search:Real Madrid"


# =============================================================================
# CANCELLATION
# =============================================================================


class TestCancellationToken:
    def test_no_deadline(self):
        token = CancellationToken()
        assert not token.is_cancelled
        assert token.remaining() is None

    def test_cancel(self):
        token = CancellationToken(30)
        token.cancel()
        assert token.is_cancelled
        assert token.remaining() == 0.0

    def test_deadline(self):
        token = CancellationToken(30)
        assert 0 < token.remaining() <= 30
        assert not token.is_cancelled

    def test_expired_deadline(self):
        token = CancellationToken(0.001)
        time.sleep(0.01)
        assert token.is_cancelled
        assert token.remaining() == 0.0


# =============================================================================
# STATUS / TIMEZONE HELPERS
# =============================================================================


class TestMatchStatusHelpers:
    def test_is_match_final(self, make_match):
        assert is_match_final(make_match(status=MatchStatus.FINISHED, score=(1, 0)))
        assert not is_match_final(make_match(status=MatchStatus.LIVE))
        assert not is_match_final(None)

    def test_completed_matches(self, make_match):
        base = datetime(2024, 3, 1, 20, 0, tzinfo=UTC)
        old = make_match(kickoff=base - timedelta(days=7), status=MatchStatus.FINISHED, score=(1, 0))
        recent = make_match(kickoff=base, status=MatchStatus.FINISHED, score=(0, 0))
        no_score = make_match(kickoff=base, status=MatchStatus.FINISHED)
        pending = make_match(kickoff=base + timedelta(days=2))

        assert completed_matches([old, pending, recent, no_score]) == [recent, old]
        assert completed_matches([old, recent], before_time=base) == [old]

    def test_live_statuses(self):
        assert MatchStatus.LIVE.is_live
        assert MatchStatus.IN_PLAY.is_live
        assert not MatchStatus.FINISHED.is_live


class TestOffsets:
    def test_offset_follows_dst(self):
        assert offset("Europe/London", datetime(2024, 7, 1, tzinfo=UTC)) == timedelta(hours=1)
        assert offset("Europe/London", datetime(2024, 1, 1, tzinfo=UTC)) == timedelta(0)
        assert offset("America/New_York", datetime(2024, 1, 1, tzinfo=UTC)) == timedelta(hours=-5)

    def test_current_local_hour(self):
        now = datetime(2024, 3, 10, 22, 30, tzinfo=UTC)
        assert current_local_hour("Africa/Addis_Ababa", now) == 1
        assert current_local_hour("UTC", now) == 22
