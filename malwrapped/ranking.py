"""Ranking selectors and the hidden-gem / rarity filter."""

from malwrapped import records
from malwrapped.model import WorkSummary

TOP_RATED_LIMIT = 5
GEM_LIMIT = 3
GEM_MIN_MEAN = 7.0

# (hidden-gem ceiling, rare-gem ceiling) on num_list_users.
ANIME_CEILINGS = (70_000, 80_000)
MANGA_CEILINGS = (50_000, 40_000)


def summarize(entry) -> WorkSummary:
    return WorkSummary(
        id=records.work_id(entry),
        title=records.title(entry),
        score=records.user_score(entry),
        mean=records.community_score(entry),
        popularity=records.popularity(entry),
        picture=records.picture(entry),
    )


# ---------------------------------------------------------------------------
# Top rated
# ---------------------------------------------------------------------------

def top_rated(entries, limit=TOP_RATED_LIMIT) -> tuple[WorkSummary, ...]:
    """Completed or in-progress entries with a score, best first.

    Equal scores keep their list order.
    """
    rated = [
        e for e in records.dedupe_by_title(entries)
        if (records.is_completed(e) or records.is_in_progress(e))
        and records.user_score(e) > 0
    ]
    rated.sort(key=records.user_score, reverse=True)
    return tuple(summarize(e) for e in rated[:limit])


# ---------------------------------------------------------------------------
# Hidden gems
# ---------------------------------------------------------------------------

def is_gem(entry, ceiling) -> bool:
    """Completed, community mean of at least GEM_MIN_MEAN, and 0 < popularity <= ceiling.

    A popularity of 0 means MAL reported no member count, not an unwatched
    title, so it never qualifies as rare.
    """
    pop = records.popularity(entry)
    return (
        records.is_completed(entry)
        and records.community_score(entry) >= GEM_MIN_MEAN
        and 0 < pop <= ceiling
    )


def gem_candidates(entries, ceiling) -> list[dict]:
    gems = [e for e in records.dedupe_by_title(entries) if is_gem(e, ceiling)]
    gems.sort(key=lambda e: (-records.community_score(e), records.popularity(e)))
    return gems


def hidden_gems(entries, ceiling, limit=GEM_LIMIT) -> tuple[WorkSummary, ...]:
    """Top completed works by community score under a popularity ceiling.

    Ties on score go to the less popular work.
    """
    return tuple(summarize(e) for e in gem_candidates(entries, ceiling)[:limit])


def hidden_gem_count(entries, ceilings) -> int:
    """All qualifying entries under the tighter of the two ceilings, uncapped."""
    return len(gem_candidates(entries, min(ceilings)))
