"""Achievement badges.

Every badge whose threshold is met receives an internal priority score,
roughly the triggering magnitude divided by its threshold. Badges are ranked
by that score and only the top :data:`MAX_BADGES` are exposed; the score never
leaves this module.
"""

from collections import Counter
from dataclasses import dataclass, field

from malwrapped import records
from malwrapped.model import Badge
from malwrapped.outcome import Evaluated

MAX_BADGES = 4

HUNTER_MIN_GEMS = 10
EXPLORER_MIN_DISTINCT = 20
ARCHIVIST_MIN_SCOPE = 130
ARCHIVIST_MIN_LIFETIME = 500
STRATEGIST_MIN_PLANNED = 20
SPRINTER_MAX_DAYS = 3
LOYALIST_MIN_WORKS = 4
GUARDIAN_MIN_ENTRIES = 40
GUARDIAN_MIN_SHARE = 0.4
GUARDIAN_MIN_SAMPLE = 10
ROOKIE_MAX_LIFETIME = 20


@dataclass(frozen=True)
class BadgeContext:
    selected_year: object
    hidden_gem_count: int = 0
    distinct_genres: int = 0
    distinct_authors: int = 0
    completed_in_scope: int = 0
    completed_lifetime: int = 0
    planned_total: int = 0
    scoped_entries: tuple = ()
    top_studio: tuple | None = None
    top_author: tuple | None = None
    genre_counts: Counter = field(default_factory=Counter)
    earliest_year: int | None = None


# ---------------------------------------------------------------------------
# Individual badges: each returns (score, description) or None
# ---------------------------------------------------------------------------

def _hunter(ctx):
    if ctx.hidden_gem_count >= HUNTER_MIN_GEMS:
        return (
            ctx.hidden_gem_count / HUNTER_MIN_GEMS,
            f"You completed {ctx.hidden_gem_count} highly rated titles that few people have found.",
        )
    return None


def _explorer(ctx):
    widest = max(ctx.distinct_genres, ctx.distinct_authors)
    if widest >= EXPLORER_MIN_DISTINCT:
        if ctx.distinct_genres >= ctx.distinct_authors:
            detail = f"You explored {ctx.distinct_genres} different genres."
        else:
            detail = f"You read works by {ctx.distinct_authors} different authors."
        return widest / EXPLORER_MIN_DISTINCT, detail
    return None


def _archivist(ctx):
    scope_ratio = ctx.completed_in_scope / ARCHIVIST_MIN_SCOPE
    lifetime_ratio = ctx.completed_lifetime / ARCHIVIST_MIN_LIFETIME
    if scope_ratio >= 1 or lifetime_ratio >= 1:
        if scope_ratio >= lifetime_ratio:
            detail = f"You completed {ctx.completed_in_scope} titles."
        else:
            detail = f"You have completed {ctx.completed_lifetime} titles in total."
        return max(scope_ratio, lifetime_ratio), detail
    return None


def _strategist(ctx):
    if ctx.planned_total >= STRATEGIST_MIN_PLANNED:
        return (
            ctx.planned_total / STRATEGIST_MIN_PLANNED,
            f"{ctx.planned_total} titles are lined up on your plan-to lists.",
        )
    return None


def sprint_candidate(entries):
    """Completed entry finished within SPRINTER_MAX_DAYS of its start, most units first."""
    best, best_units = None, -1
    for entry in entries:
        if not records.is_completed(entry):
            continue
        started = records.start_date(entry)
        finished = records.finish_date(entry)
        if started is None or finished is None:
            continue
        days = (finished.date() - started.date()).days
        if not 0 <= days <= SPRINTER_MAX_DAYS:
            continue
        units = records.units_consumed(entry)
        if units > best_units:
            best, best_units = entry, units
    return best


def _sprinter(ctx):
    entry = sprint_candidate(ctx.scoped_entries)
    if entry is None:
        return None
    units = records.units_consumed(entry)
    return (
        1 + min(units, 500) / 500,
        f"You blazed through {records.title(entry)} within {SPRINTER_MAX_DAYS} days.",
    )


def _loyalist(ctx):
    best = None
    for kind, top in (("studio", ctx.top_studio), ("author", ctx.top_author)):
        if top is None:
            continue
        name, count = top
        if count >= LOYALIST_MIN_WORKS and (best is None or count > best[2]):
            best = (kind, name, count)
    if best is None:
        return None
    kind, name, count = best
    return count / LOYALIST_MIN_WORKS, f"You kept coming back to {name}: {count} works from one {kind}."


def _guardian(ctx):
    if not ctx.genre_counts:
        return None
    name, count = ctx.genre_counts.most_common(1)[0]
    total = len(ctx.scoped_entries)
    share = count / total if total else 0.0
    by_count = count >= GUARDIAN_MIN_ENTRIES
    by_share = total >= GUARDIAN_MIN_SAMPLE and share > GUARDIAN_MIN_SHARE
    if by_count or by_share:
        return (
            max(count / GUARDIAN_MIN_ENTRIES, share / GUARDIAN_MIN_SHARE),
            f"{name} defined your year with {count} titles.",
        )
    return None


def _rookie(ctx):
    if ctx.selected_year == records.ALL_TIME or ctx.earliest_year is None:
        return None
    if ctx.selected_year == ctx.earliest_year and ctx.completed_lifetime < ROOKIE_MAX_LIFETIME:
        return 1.0, "This was the year your list began."
    return None


BADGES = [
    ("hunter", "Gem Hunter", _hunter),
    ("explorer", "Explorer", _explorer),
    ("archivist", "Archivist", _archivist),
    ("strategist", "Strategist", _strategist),
    ("sprinter", "Sprinter", _sprinter),
    ("loyalist", "Loyalist", _loyalist),
    ("guardian", "Genre Guardian", _guardian),
    ("rookie", "Rookie", _rookie),
]


def score_badges(ctx) -> list[tuple[float, Badge]]:
    """Every earned badge with its internal score, in evaluation order."""
    earned = []
    for key, name, evaluate in BADGES:
        result = evaluate(ctx)
        if result is None:
            continue
        score, description = result
        earned.append((score, Badge(key=key, name=name, description=description)))
    return earned


def evaluate(ctx):
    """Top badges by score; an empty tuple means none were earned."""
    earned = score_badges(ctx)
    earned.sort(key=lambda item: item[0], reverse=True)
    return Evaluated(tuple(badge for _, badge in earned[:MAX_BADGES]))
