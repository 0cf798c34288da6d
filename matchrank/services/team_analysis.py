"""Team statistics and head-to-head summaries.

Pure helpers over canonical matches, plus build_team_analysis() which pulls
a team's recent and upcoming matches from one provider.
"""

import logging

from matchrank.core import FootballProvider, HeadToHead, Match, Team, TeamAnalysis, TeamStatistics
from matchrank.utilities.fuzzy_match import names_match
from matchrank.utilities.match_status import completed_matches

logger = logging.getLogger(__name__)

FORM_LENGTH = 5


def is_same_team(a: Team, b: Team) -> bool:
    """Same id, or matching names when either id was synthesized."""
    if a.has_provider_id and b.has_provider_id:
        return a.id == b.id
    return a.id == b.id or names_match(a.name, b.name) or names_match(b.name, a.name)


def _result_for(team: Team, match: Match) -> str | None:
    """'W', 'D' or 'L' from the team's point of view; None if it did not play."""
    if match.score is None:
        return None
    if is_same_team(team, match.home_team):
        own, other = match.score.home, match.score.away
    elif is_same_team(team, match.away_team):
        own, other = match.score.away, match.score.home
    else:
        return None
    if own > other:
        return "W"
    if own < other:
        return "L"
    return "D"


def calculate_team_statistics(team: Team, matches: list[Match]) -> TeamStatistics:
    """Record over the team's finished matches.

    Matches the team did not play, and matches without a final score, are ignored.
    """
    wins = draws = losses = goals_for = goals_against = 0
    form = []

    for match in completed_matches(matches):
        result = _result_for(team, match)
        if result is None:
            continue
        home = is_same_team(team, match.home_team)
        goals_for += match.score.home if home else match.score.away
        goals_against += match.score.away if home else match.score.home
        if result == "W":
            wins += 1
        elif result == "D":
            draws += 1
        else:
            losses += 1
        if len(form) < FORM_LENGTH:
            form.append(result)

    played = wins + draws + losses
    return TeamStatistics(
        played=played,
        wins=wins,
        draws=draws,
        losses=losses,
        goals_for=goals_for,
        goals_against=goals_against,
        win_rate=round(wins / played * 100, 1) if played else 0.0,
        form="".join(form),
    )


def summarize_head_to_head(home: Team, away: Team, matches: list[Match], limit: int = 5) -> HeadToHead:
    """Summarize previous meetings between two teams.

    Wins are credited to the team, whichever side it played on back then.
    """
    home_wins = away_wins = draws = 0
    meetings = []

    for match in completed_matches(matches):
        teams = (match.home_team, match.away_team)
        if not (any(is_same_team(home, t) for t in teams) and any(is_same_team(away, t) for t in teams)):
            continue
        meetings.append(match)
        result = _result_for(home, match)
        if result == "W":
            home_wins += 1
        elif result == "L":
            away_wins += 1
        else:
            draws += 1

    return HeadToHead(
        total_meetings=len(meetings),
        home_wins=home_wins,
        away_wins=away_wins,
        draws=draws,
        last_meetings=tuple(meetings[:limit]),
    )


def resolve_team(provider: FootballProvider, team: Team) -> Team | None:
    """Team with a provider id, searching by name only when the id is synthetic."""
    if team.has_provider_id:
        return team
    found = provider.search_team(team.name)
    if found is None:
        logger.debug("[ANALYSIS] %s: no team found for %r", provider.name, team.name)
    return found


def build_team_analysis(
    provider: FootballProvider,
    team: Team,
    recent_limit: int = 5,
    upcoming_limit: int = 3,
) -> TeamAnalysis | None:
    """Recent form and upcoming fixtures for one team.

    Returns None when the team cannot be identified at the provider.
    Provider failures propagate as ProviderError.
    """
    resolved = resolve_team(provider, team)
    if resolved is None:
        return None

    recent = provider.get_team_recent_matches(resolved, limit=recent_limit)
    upcoming = provider.get_team_upcoming_matches(resolved, limit=upcoming_limit)
    return TeamAnalysis(
        team=team,
        recent_matches=tuple(recent),
        upcoming_matches=tuple(upcoming),
        statistics=calculate_team_statistics(resolved, recent),
    )
