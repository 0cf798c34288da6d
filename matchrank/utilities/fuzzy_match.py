"""Fuzzy string matching for team and competition names.

Uses rapidfuzz for fast, maintenance-free fuzzy matching and unidecode to
fold accents, so "Atlético Madrid", "Atletico de Madrid" and "ATLETICO MADRID"
compare sensibly.
"""

import re
from dataclasses import dataclass

from rapidfuzz import fuzz
from unidecode import unidecode

from matchrank.core.types import SYNTHETIC_ID_PREFIX

# Minimum token_sort_ratio for two team names to be considered the same club
TEAM_NAME_THRESHOLD = 88.0


@dataclass
class FuzzyMatchResult:
    """Result of a fuzzy match."""

    matched: bool
    score: float
    pattern_used: str | None = None


def normalize_text(value: str) -> str:
    """Normalize text for matching.

    Applies: unidecode, lowercase, strip punctuation, normalize whitespace.
    """
    normalized = unidecode(value or "").lower().strip()
    # Remove punctuation (hyphens become spaces)
    normalized = re.sub(r"[^\w\s]", " ", normalized)
    return " ".join(normalized.split())


def slugify(value: str) -> str:
    """Deterministic ASCII slug: "Bayern München" -> "bayern-munchen"."""
    return "-".join(normalize_text(value).replace("_", " ").split())


def synthetic_id(name: str) -> str:
    """Stable id for an entity the provider sent without one."""
    return f"{SYNTHETIC_ID_PREFIX}{slugify(name)}"


def contains_words(haystack: str, needle: str) -> bool:
    """Whole-word containment on normalized text."""
    haystack = normalize_text(haystack)
    needle = normalize_text(needle)
    if not needle or not haystack:
        return False
    return re.search(rf"(?:^|\s){re.escape(needle)}(?:\s|$)", haystack) is not None


def names_match(team_name: str, candidate: str, threshold: float = TEAM_NAME_THRESHOLD) -> bool:
    """Check whether a provider team name refers to a known club name.

    True when the normalized names are equal, when the candidate appears as
    whole words inside the provider name ("Real Madrid CF" ~ "Real Madrid"),
    or when token_sort_ratio reaches the threshold. Only the candidate is
    searched inside the provider name so "Inter" never matches "AC Milan".
    """
    name = normalize_text(team_name)
    cand = normalize_text(candidate)
    if not name or not cand:
        return False
    if name == cand or contains_words(name, cand):
        return True
    return fuzz.token_sort_ratio(name, cand) >= threshold


def same_club(team_name: str, known: str) -> bool:
    """Strict club check with no fuzzy scoring.

    True for equal names, for the known name appearing as whole words in the
    team name ("Inter Milan" in "FC Inter Milan"), and for a team name made of
    the leading words of the known name ("Inter" for "Inter Milan").
    "Inter Miami" and "Internacional" are never "Inter Milan".
    """
    name = normalize_text(team_name)
    cand = normalize_text(known)
    if not name or not cand:
        return False
    return name == cand or contains_words(name, cand) or cand.startswith(f"{name} ")


def best_match(
    text: str,
    candidates: list[str],
    threshold: float = 80.0,
) -> FuzzyMatchResult:
    """Find the closest candidate to text.

    Takes the best of ratio, token_set_ratio and partial_ratio so both
    reordered and truncated names score well.
    """
    normalized = normalize_text(text)
    best_score = 0.0
    best_pattern = None
    for candidate in candidates:
        cand = normalize_text(candidate)
        if not cand:
            continue
        score = max(
            fuzz.ratio(normalized, cand),
            fuzz.token_set_ratio(normalized, cand),
            fuzz.partial_ratio(normalized, cand),
        )
        if score > best_score:
            best_score = score
            best_pattern = candidate
    return FuzzyMatchResult(
        matched=best_score >= threshold,
        score=best_score,
        pattern_used=best_pattern if best_score >= threshold else None,
    )
