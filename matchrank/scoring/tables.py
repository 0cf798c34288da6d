"""Static importance tables used by the relevance scorer.

Competition tiers and team popularity are looked up by name: exact
(normalized) match first, then whole-word substring match for keys of 4+ characters,
longest key first. Short codes ("PL", "SA") therefore only match exactly.
"""

from dataclasses import dataclass

from matchrank.utilities.fuzzy_match import contains_words, normalize_text, same_club

DEFAULT_COMPETITION_TIER = 2
DEFAULT_TEAM_POPULARITY = 3

# Minimum key length for the substring pass
MIN_SUBSTRING_KEY = 4

COMPETITION_TIERS: dict[str, int] = {
    # World / club-world
    "World Cup": 10,
    "FIFA World Cup": 10,
    "FIFA Club World Cup": 10,
    "Club World Cup": 10,
    "Intercontinental Cup": 10,
    "WC": 10,
    "CWC": 10,
    # Top continental / domestic
    "UEFA Champions League": 9,
    "Champions League": 9,
    "Premier League": 9,
    "European Championship": 9,
    "Euro": 9,
    "CL": 9,
    "PL": 9,
    "EC": 9,
    "La Liga": 8,
    "LaLiga": 8,
    "Primera Division": 8,
    "PD": 8,
    "Serie A": 7,
    "Bundesliga": 7,
    "SA": 7,
    "BL1": 7,
    "Ligue 1": 6,
    "Campeonato Brasileiro Serie A": 6,
    "Brasileirao": 6,
    "UEFA Europa League": 6,
    "Europa League": 6,
    "FL1": 6,
    "BSA": 6,
    "EL": 6,
    "Eredivisie": 5,
    "Primeira Liga": 5,
    "DED": 5,
    "PPL": 5,
    "MLS": 4,
    "Major League Soccer": 4,
    "EFL Championship": 4,
    "Championship": 4,
    "Super Lig": 4,
    "ELC": 4,
}

TEAM_POPULARITY: dict[str, int] = {
    "Real Madrid": 10,
    "Barcelona": 10,
    "FC Barcelona": 10,
    "Manchester United": 9,
    "Man United": 9,
    "Man Utd": 9,
    "Manchester City": 9,
    "Man City": 9,
    "Paris Saint-Germain": 9,
    "Paris SG": 9,
    "PSG": 9,
    "Liverpool": 8,
    "Chelsea": 8,
    "Arsenal": 8,
    "Bayern Munich": 8,
    "Bayern Munchen": 8,
    "Juventus": 7,
    "AC Milan": 7,
    "Inter Milan": 7,
    "Internazionale": 7,
    "Tottenham Hotspur": 7,
    "Tottenham": 7,
    "Atletico Madrid": 7,
    "Atletico de Madrid": 7,
    "Borussia Dortmund": 7,
    "AS Roma": 6,
    "Roma": 6,
    "Napoli": 6,
    "Valencia": 6,
    "Sevilla": 6,
    "Leicester City": 6,
    "West Ham United": 6,
    "West Ham": 6,
    "Newcastle United": 5,
    "Newcastle": 5,
    "Aston Villa": 5,
    "Brighton": 5,
    "Crystal Palace": 5,
    "Everton": 4,
    "Southampton": 4,
    "Leeds United": 4,
    "Leeds": 4,
}


@dataclass(frozen=True)
class Rivalry:
    """A named derby: home on one side and away on the other earns the bonus."""

    name: str
    side_a: tuple[str, ...]
    side_b: tuple[str, ...]
    bonus: int = 2

    def matches(self, home: str, away: str) -> bool:
        def on(side: tuple[str, ...], team: str) -> bool:
            return any(same_club(team, candidate) for candidate in side)

        return (on(self.side_a, home) and on(self.side_b, away)) or (
            on(self.side_b, home) and on(self.side_a, away)
        )


RIVALRIES: tuple[Rivalry, ...] = (
    Rivalry("El Clásico", ("Real Madrid",), ("FC Barcelona", "Barcelona"), bonus=3),
    Rivalry("Manchester Derby", ("Manchester United", "Man United"), ("Manchester City", "Man City")),
    Rivalry("North West Derby", ("Manchester United", "Man United"), ("Liverpool",)),
    Rivalry("North London Derby", ("Arsenal",), ("Tottenham Hotspur", "Tottenham")),
    Rivalry("Derby della Madonnina", ("AC Milan",), ("Inter Milan", "Internazionale")),
    Rivalry("Derby d'Italia", ("Juventus",), ("Inter Milan", "Internazionale")),
    Rivalry("Der Klassiker", ("Borussia Dortmund", "Dortmund"), ("Bayern Munich", "Bayern Munchen")),
)


class TierTable:
    """Name -> points lookup with exact-then-substring matching."""

    def __init__(self, table: dict[str, int], default: int):
        self._default = default
        self._exact = {normalize_text(k): v for k, v in table.items()}
        # Longest keys first so "Champions League" wins over "League"-like keys
        self._substring = sorted(
            ((k, v) for k, v in self._exact.items() if len(k) >= MIN_SUBSTRING_KEY),
            key=lambda kv: len(kv[0]),
            reverse=True,
        )

    @property
    def default(self) -> int:
        return self._default

    def lookup(self, name: str) -> int:
        key = normalize_text(name)
        if not key:
            return self._default
        if key in self._exact:
            return self._exact[key]
        for table_key, points in self._substring:
            if contains_words(key, table_key) or (
                len(key) >= MIN_SUBSTRING_KEY and contains_words(table_key, key)
            ):
                return points
        return self._default
