"""Rating-archetype classifier.

Each archetype has a precondition over the user's score distribution and a
score describing how strongly it applies. Candidates are evaluated in a fixed
order and the strictly highest score wins, so on a tie the earlier candidate
is kept. When no candidate qualifies the user is a "wild card".
"""

import statistics

from malwrapped import records
from malwrapped.model import Archetype
from malwrapped.outcome import Evaluated, NotApplicable

MIN_RATED = 10
COMPLETIONIST_MIN_SAMPLE = 20

ARCHETYPES = {
    "generous": (
        "The Generous Soul",
        "You see the best in everything you finish and your scores show it.",
    ),
    "harsh_critic": (
        "The Harsh Critic",
        "A high score from you has to be earned, and most titles fall short.",
    ),
    "perfectionist": (
        "The Perfectionist",
        "It is a masterpiece or it is a mess. You rarely settle in between.",
    ),
    "completionist": (
        "The Completionist",
        "You start it, you finish it. Your completion rate says it all.",
    ),
    "community_voice": (
        "The Community Voice",
        "Your scores land right next to the community average.",
    ),
    "contrarian": (
        "The Contrarian",
        "You regularly disagree with the crowd by two points or more.",
    ),
    "balanced": (
        "The Balanced Judge",
        "Most of your scores sit in the comfortable middle of the scale.",
    ),
    "wild_card": (
        "The Wild Card",
        "Your ratings refuse to fit a single pattern.",
    ),
}


# ---------------------------------------------------------------------------
# Score distribution
# ---------------------------------------------------------------------------

def _fraction(values, predicate) -> float:
    if not values:
        return 0.0
    return sum(1 for v in values if predicate(v)) / len(values)


def completion_rate(entries) -> float:
    if not entries:
        return 0.0
    return sum(1 for e in entries if records.is_completed(e)) / len(entries)


def rating_profile(year_entries, lifetime_entries) -> dict | None:
    """Distribution statistics over entries carrying both a user and a community score.

    *year_entries* and *lifetime_entries* are the deduplicated, non-planned
    subsets for the selected scope and for all time. Returns None below the
    minimum sample.
    """
    pairs = [
        (records.user_score(e), records.community_score(e))
        for e in year_entries
        if records.user_score(e) > 0 and records.community_score(e) > 0
    ]
    if len(pairs) < MIN_RATED:
        return None

    scores = [u for u, _ in pairs]
    deviations = [abs(u - c) for u, c in pairs]
    return {
        "count": len(pairs),
        "mean": statistics.mean(scores),
        "low": _fraction(scores, lambda s: 1 <= s <= 5),
        "mid": _fraction(scores, lambda s: 6 <= s <= 8),
        "high": _fraction(scores, lambda s: s >= 9),
        "very_high": _fraction(scores, lambda s: s == 10),
        "very_low": _fraction(scores, lambda s: s <= 3),
        "mean_deviation": statistics.mean(deviations),
        "big_deviation": _fraction(deviations, lambda d: d >= 2),
        "year_sample": len(year_entries),
        "year_completion": completion_rate(year_entries),
        "lifetime_completion": completion_rate(lifetime_entries),
    }


# ---------------------------------------------------------------------------
# Candidates
# ---------------------------------------------------------------------------

def _generous(p):
    if p["mean"] >= 7.5 and p["low"] < 0.15:
        return 1 + (p["mean"] - 7.5) + p["high"]
    return None


def _harsh_critic(p):
    if p["mean"] < 7.0 and p["low"] > 0.25:
        return 1 + (7.0 - p["mean"]) + p["low"]
    return None


def _perfectionist(p):
    polarization = p["very_high"] + p["very_low"]
    if polarization > 0.35:
        return 1 + 2 * polarization
    return None


def _completionist(p):
    if (
        p["year_sample"] >= COMPLETIONIST_MIN_SAMPLE
        and p["year_completion"] > 0.85
        and p["lifetime_completion"] > 0.8
    ):
        return 1 + 5 * (p["year_completion"] - 0.85) + 5 * (p["lifetime_completion"] - 0.8)
    return None


def _community_voice(p):
    if p["mean_deviation"] <= 0.75 and p["big_deviation"] < 0.1:
        return 1 + (0.75 - p["mean_deviation"]) + 5 * (0.1 - p["big_deviation"])
    return None


def _contrarian(p):
    if p["big_deviation"] >= 0.3:
        return 1 + 2 * p["big_deviation"]
    return None


def _balanced(p):
    off_center = abs(p["mean"] - 7.0)
    if p["mid"] >= 0.55 and off_center <= 0.8 and p["low"] <= 0.2 and p["high"] <= 0.25:
        return 1 + p["mid"] - off_center / 1.6
    return None


CANDIDATES = [
    ("generous", _generous),
    ("harsh_critic", _harsh_critic),
    ("perfectionist", _perfectionist),
    ("completionist", _completionist),
    ("community_voice", _community_voice),
    ("contrarian", _contrarian),
    ("balanced", _balanced),
]


def score_candidates(profile) -> list[tuple[str, float]]:
    """Qualifying ``(key, score)`` pairs in evaluation order."""
    scored = []
    for key, evaluate in CANDIDATES:
        score = evaluate(profile)
        if score is not None:
            scored.append((key, score))
    return scored


def pick_archetype(profile) -> str:
    best_key, best_score = "wild_card", None
    for key, score in score_candidates(profile):
        if best_score is None or score > best_score:
            best_key, best_score = key, score
    return best_key


def classify(year_entries, lifetime_entries):
    """Archetype for the scope, or NotApplicable below the rated-entry minimum."""
    profile = rating_profile(year_entries, lifetime_entries)
    if profile is None:
        return NotApplicable(f"fewer than {MIN_RATED} rated entries with a community score")

    key = pick_archetype(profile)
    name, description = ARCHETYPES[key]
    return Evaluated(
        Archetype(
            key=key,
            name=name,
            description=description,
            mean_score=round(profile["mean"], 2),
            rated_count=profile["count"],
        )
    )
