"""Tests for MatchSelector: selection, timezones, details and health."""

from datetime import UTC, datetime, timedelta

import pytest

from matchrank.core import CompleteAnalysis, ContentType, MatchStatus, ScoringRequest, Team
from matchrank.scoring import RelevanceScorer
from matchrank.services.credentials import StaticChannelConfig
from matchrank.services.selector import recommendation_label
from matchrank.utilities.cancellation import CancellationToken

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)
TOMORROW_EVENING = datetime(2024, 3, 11, 20, 0, tzinfo=UTC)

MADRID = Team("86", "Real Madrid")
BARCA = Team("81", "Barcelona")


@pytest.fixture
def clasico(make_match):
    return make_match(kickoff=TOMORROW_EVENING, match_id="1001", home_id="86", away_id="81")


@pytest.fixture
def eredivisie(make_match):
    return make_match("Ajax", "PSV", "Eredivisie", TOMORROW_EVENING, match_id="1002")


@pytest.fixture
def meeting(make_match):
    def _make(home: Team, away: Team, home_goals: int, away_goals: int, days: int):
        return make_match(
            home.name,
            away.name,
            kickoff=NOW - timedelta(days=days),
            status=MatchStatus.FINISHED,
            score=(home_goals, away_goals),
            home_id=home.id,
            away_id=away.id,
        )

    return _make


# =============================================================================
# SELECTION
# =============================================================================


class TestBestMatch:
    def test_clasico_beats_eredivisie_for_betting(self, make_selector, fake_provider, clasico, eredivisie):
        selector = make_selector(fake_provider("p1", fixtures=[eredivisie, clasico]))

        best = selector.get_best_match_for_content_type(ContentType.BETTING_TIP)

        assert best.match == clasico
        assert best.total == 39
        assert best.content_suitability.betting_tip == 100

    def test_finished_match_gives_no_betting_tip(self, make_selector, fake_provider, make_match):
        finished = make_match(
            kickoff=NOW - timedelta(days=10), status=MatchStatus.FINISHED, score=(2, 1)
        )
        # Provider ignores the requested dates and returns the old result every time
        selector = make_selector(fake_provider("p1", fixtures=[finished], respect_range=False))

        assert selector.get_best_match_for_content_type("betting_tip") is None

    def test_nothing_available(self, make_selector, fake_provider, provider_error):
        selector = make_selector(
            fake_provider("p1", error=provider_error("p1")),
            fallback=fake_provider("free", error=provider_error("free")),
        )
        assert selector.get_best_match_for_content_type(ContentType.NEWS) is None

    def test_free_fallback_supplies_matches(self, make_selector, fake_provider, make_match):
        free_match = make_match(kickoff=TOMORROW_EVENING, provider="free")
        selector = make_selector(
            fake_provider("p1", fixtures=[]), fallback=fake_provider("free", fixtures=[free_match])
        )
        assert selector.get_best_match_for_content_type(ContentType.BETTING_TIP).match == free_match

    def test_max_results(self, make_selector, fake_provider, clasico, eredivisie):
        selector = make_selector(fake_provider("p1", fixtures=[eredivisie, clasico]))
        result = selector.get_best_matches(ScoringRequest(ContentType.BETTING_TIP, max_results=1))
        assert [m.match for m in result.matches] == [clasico]

    def test_reference_time_defaults_to_clock(self, make_selector, fake_provider):
        result = make_selector(fake_provider("p1")).get_best_matches(ScoringRequest(ContentType.NEWS))
        assert result.reference_time == NOW


# =============================================================================
# TIMEZONES
# =============================================================================


class TestTimezones:
    def test_invalid_timezone_degrades_to_utc(self, make_selector, fake_provider, clasico):
        selector = make_selector(fake_provider("p1", fixtures=[clasico]))
        result = selector.get_best_matches(
            ScoringRequest(ContentType.BETTING_TIP, channel_timezone="Mars/Base")
        )

        assert result.degraded
        assert result.timezone == "UTC"
        assert result.best.match == clasico

    def test_valid_timezone_not_degraded(self, make_selector, fake_provider):
        result = make_selector(fake_provider("p1")).get_best_matches(
            ScoringRequest(ContentType.NEWS, channel_timezone="Europe/Madrid")
        )
        assert not result.degraded
        assert result.timezone == "Europe/Madrid"

    def test_channel_config_timezone(self, make_selector, fake_provider):
        selector = make_selector(
            fake_provider("p1"),
            channel_config=StaticChannelConfig({"addis": "Africa/Addis_Ababa"}, default="Europe/London"),
        )
        request = ScoringRequest(ContentType.NEWS)
        assert selector.get_best_matches(request, "addis").timezone == "Africa/Addis_Ababa"
        assert selector.get_best_matches(request, "other").timezone == "Europe/London"

    def test_request_timezone_overrides_channel(self, make_selector, fake_provider):
        selector = make_selector(
            fake_provider("p1"), channel_config=StaticChannelConfig({"addis": "Africa/Addis_Ababa"})
        )
        request = ScoringRequest(ContentType.NEWS, channel_timezone="America/New_York")
        assert selector.get_best_matches(request, "addis").timezone == "America/New_York"

    def test_default_timezone_without_channel(self, make_selector, fake_provider):
        selector = make_selector(fake_provider("p1"), default_timezone="Africa/Addis_Ababa")
        assert selector.get_best_matches(ScoringRequest(ContentType.NEWS)).timezone == "Africa/Addis_Ababa"


# =============================================================================
# RECOMMENDATIONS
# =============================================================================


class TestRecommendations:
    @pytest.mark.parametrize(
        "suitability,label",
        [(100, "excellent"), (80, "excellent"), (79, "good"), (60, "good"), (45, "moderate"), (39, "limited")],
    )
    def test_labels(self, suitability, label):
        assert recommendation_label(suitability) == label

    def test_labelled_matches(self, make_selector, fake_provider, clasico, eredivisie):
        selector = make_selector(fake_provider("p1", fixtures=[eredivisie, clasico]))

        items = selector.get_matches_for_content_type(ContentType.BETTING_TIP, limit=5)

        assert [(i.match.match, i.suitability, i.recommendation) for i in items] == [
            (clasico, 100, "excellent"),
            (eredivisie, 57, "moderate"),
        ]
        assert "Derby: El Clásico" in items[0].reasons


# =============================================================================
# DETAILS
# =============================================================================


class TestDetails:
    def test_top_matches_with_all_branches(self, make_selector, fake_provider, clasico, meeting):
        provider = fake_provider(
            "p1",
            fixtures=[clasico],
            recent={"86": [meeting(MADRID, BARCA, 2, 1, 30)], "81": [meeting(MADRID, BARCA, 2, 1, 30)]},
            h2h=[meeting(MADRID, BARCA, 2, 1, 30), meeting(BARCA, MADRID, 0, 0, 120)],
        )
        selector = make_selector(provider)

        [enriched] = selector.get_top_matches_with_details(ContentType.BETTING_TIP, n=3)

        assert enriched.match.match == clasico
        assert enriched.home_team_stats.statistics.form == "W"
        assert enriched.away_team_stats.statistics.form == "L"
        assert enriched.head_to_head.total_meetings == 2
        assert enriched.head_to_head.home_wins == 1
        assert enriched.head_to_head.draws == 1

    def test_failed_branch_leaves_others(self, make_selector, fake_provider, clasico, meeting, provider_error):
        provider = fake_provider(
            "p1",
            fixtures=[clasico],
            recent={"86": [meeting(MADRID, BARCA, 1, 0, 7)]},
            h2h=[meeting(MADRID, BARCA, 1, 0, 7)],
            detail_errors={"81": provider_error("p1", "HTTP 429")},
        )

        [enriched] = make_selector(provider).get_top_matches_with_details(ContentType.BETTING_TIP)

        assert enriched.away_team_stats is None
        assert enriched.home_team_stats is not None
        assert enriched.head_to_head.total_meetings == 1

    def test_unexpected_detail_error_is_contained(self, make_selector, fake_provider, clasico):
        provider = fake_provider(
            "p1", fixtures=[clasico], h2h=[], detail_errors={"86": KeyError("team")}
        )
        [enriched] = make_selector(provider).get_top_matches_with_details(ContentType.BETTING_TIP)

        assert enriched.home_team_stats is None
        assert enriched.away_team_stats is not None

    def test_synthetic_ids_resolved_by_name(self, make_selector, fake_provider, make_match):
        named = make_match(kickoff=TOMORROW_EVENING)
        provider = fake_provider(
            "p1",
            fixtures=[named],
            teams={"Real Madrid": MADRID, "Barcelona": BARCA},
            h2h=[],
        )

        [enriched] = make_selector(provider).get_top_matches_with_details(ContentType.BETTING_TIP)

        assert set(provider.searches) == {"Real Madrid", "Barcelona"}
        assert enriched.home_team_stats.team == named.home_team
        assert enriched.head_to_head.total_meetings == 0

    def test_unknown_provider_uses_free_fallback(self, make_selector, fake_provider, make_match):
        orphan = make_match(kickoff=TOMORROW_EVENING, provider="retired", home_id="7", away_id="8")
        free = fake_provider("free", teams={"Real Madrid": MADRID, "Barcelona": BARCA}, h2h=[])

        selector = make_selector(fake_provider("p1", fixtures=[orphan]), fallback=free)

        [enriched] = selector.get_top_matches_with_details(ContentType.BETTING_TIP)

        assert set(free.searches) == {"Real Madrid", "Barcelona"}
        assert enriched.home_team_stats is not None
        assert free.calls == []

    def test_cancelled_enrich_returns_empty_details(self, make_selector, fake_provider, clasico, meeting):
        provider = fake_provider("p1", recent={"86": [meeting(MADRID, BARCA, 1, 0, 7)]}, h2h=[])
        selector = make_selector(provider)
        item = RelevanceScorer().score(clasico, ScoringRequest(ContentType.BETTING_TIP, reference_time=NOW))
        token = CancellationToken()
        token.cancel()

        [enriched] = selector.enrich([item], cancel=token)

        assert enriched.match == item
        assert enriched.home_team_stats is None
        assert enriched.away_team_stats is None
        assert enriched.head_to_head is None

    def test_enrich_nothing(self, make_selector, fake_provider):
        assert make_selector(fake_provider("p1")).enrich([]) == []


# =============================================================================
# COMPLETE ANALYSIS
# =============================================================================


class TestCompleteAnalysis:
    def test_empty_when_nothing_qualifies(self, make_selector, fake_provider):
        analysis = make_selector(fake_provider("p1")).get_complete_analysis(ContentType.BETTING_TIP)

        assert analysis == CompleteAnalysis()
        assert analysis.is_empty
        assert analysis.to_dict() == {
            "best_match": None,
            "detailed_info": None,
            "team_analysis": {"home_team": None, "away_team": None},
        }

    def test_best_match_with_team_analysis(self, make_selector, fake_provider, clasico, meeting):
        provider = fake_provider(
            "p1",
            fixtures=[clasico],
            recent={"86": [meeting(MADRID, BARCA, 3, 0, 20)], "81": [meeting(MADRID, BARCA, 3, 0, 20)]},
            h2h=[meeting(MADRID, BARCA, 3, 0, 20)],
        )

        analysis = make_selector(provider).get_complete_analysis(ContentType.BETTING_TIP)

        assert analysis.best_match.match == clasico
        assert analysis.detailed_info.match == analysis.best_match
        assert analysis.home_team_analysis == analysis.detailed_info.home_team_stats
        assert analysis.home_team_analysis.statistics.goals_for == 3
        assert analysis.away_team_analysis.statistics.goals_against == 3


# =============================================================================
# HEALTH
# =============================================================================


class TestSystemHealth:
    def test_reports_configured_providers(self, make_selector, fake_provider, credentials):
        credentials.exhausted = {"p2"}
        selector = make_selector(fake_provider("p1"), fake_provider("p2"))

        health = selector.get_system_health()

        assert health.total_providers == 2
        assert health.working_providers == 1
        assert health.is_healthy

    def test_close_closes_providers(self, make_selector, fake_provider):
        p1, free = fake_provider("p1"), fake_provider("free")
        make_selector(p1, fallback=free).close()
        assert p1.closed and free.closed
