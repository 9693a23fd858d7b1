"""Frequency aggregators: genres, studios, authors and demographics."""

from collections import Counter

from malwrapped import records
from malwrapped.dates import round_pct
from malwrapped.model import RankedName, Share

TOP_N = 5

# Demographic category -> accepted genre spellings.
DEMOGRAPHICS = {
    "Shounen": ("Shounen", "Shonen"),
    "Shoujo": ("Shoujo", "Shojo"),
    "Seinen": ("Seinen",),
    "Josei": ("Josei",),
}

_DEMOGRAPHIC_LOOKUP = {
    spelling.lower(): category
    for category, spellings in DEMOGRAPHICS.items()
    for spelling in spellings
}


def ranked(counter: Counter, limit=TOP_N, ids=None) -> tuple[RankedName, ...]:
    # most_common sorts stably, so equal counts keep first-seen order.
    items = counter.most_common(limit)
    return tuple(
        RankedName(name=name, count=count, id=(ids or {}).get(name))
        for name, count in items
    )


def count_genres(entries) -> Counter:
    counter = Counter()
    for entry in records.dedupe_by_title(entries):
        for name in records.genres(entry):
            counter[name] += 1
    return counter


def count_studios(entries) -> Counter:
    counter = Counter()
    for entry in records.dedupe_by_title(entries):
        for name in records.studios(entry):
            counter[name] += 1
    return counter


def count_authors(entries) -> tuple[Counter, dict]:
    """Author counts plus the first MAL person id seen for each normalized name."""
    counter = Counter()
    first_ids = {}
    for entry in records.dedupe_by_title(entries):
        for name, author_id in records.authors(entry):
            counter[name] += 1
            if name not in first_ids and author_id is not None:
                first_ids[name] = author_id
    return counter, first_ids


def top_genres(entries, limit=TOP_N) -> tuple[RankedName, ...]:
    return ranked(count_genres(entries), limit)


def top_studios(entries, limit=TOP_N) -> tuple[RankedName, ...]:
    return ranked(count_studios(entries), limit)


def top_authors(entries, limit=TOP_N) -> tuple[RankedName, ...]:
    counter, first_ids = count_authors(entries)
    return ranked(counter, limit, ids=first_ids)


def demographic_category(genre_name) -> str | None:
    if not isinstance(genre_name, str):
        return None
    return _DEMOGRAPHIC_LOOKUP.get(genre_name.strip().lower())


def demographics(entries) -> tuple[Share, ...]:
    """Share of each demographic among all demographic-tagged genres.

    Categories that never occur are left out.
    """
    counter = Counter()
    for entry in records.dedupe_by_title(entries):
        for name in records.genres(entry):
            category = demographic_category(name)
            if category is not None:
                counter[category] += 1

    total = sum(counter.values())
    return tuple(
        Share(name=name, count=count, percentage=round_pct(count, total))
        for name, count in counter.most_common()
        if count > 0
    )


def season_counts(entries) -> tuple[Share, ...]:
    """Anime per release season (winter/spring/summer/fall)."""
    counter = Counter()
    for entry in records.dedupe_by_title(entries):
        season = records.season(entry)
        if season:
            counter[season] += 1
    total = sum(counter.values())
    return tuple(
        Share(name=name, count=count, percentage=round_pct(count, total))
        for name, count in counter.most_common()
    )
