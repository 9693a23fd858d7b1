"""Year-over-year comparison against the previous calendar year."""

from malwrapped import records
from malwrapped.dates import round_pct
from malwrapped.model import Delta, YearComparison
from malwrapped.outcome import Evaluated, NotApplicable


def delta(current: int, previous: int) -> Delta:
    growth = round_pct(current - previous, previous) if previous else 0
    return Delta(current=current, previous=previous, delta=current - previous, growth_pct=growth)


def _totals(anime, manga, year) -> tuple[int, int, int, int]:
    anime_scope = records.scoped(anime, year)
    manga_scope = records.scoped(manga, year)
    return (
        len(anime_scope),
        sum(records.episodes_watched(e) for e in anime_scope),
        len(manga_scope),
        sum(records.chapters_read(e) for e in manga_scope),
    )


def compare_years(anime, manga, selected_year):
    if selected_year == records.ALL_TIME:
        return NotApplicable("no previous period for all-time view")

    previous_year = selected_year - 1
    cur = _totals(anime, manga, selected_year)
    prev = _totals(anime, manga, previous_year)
    return Evaluated(
        YearComparison(
            previous_year=previous_year,
            anime=delta(cur[0], prev[0]),
            episodes=delta(cur[1], prev[1]),
            manga=delta(cur[2], prev[2]),
            chapters=delta(cur[3], prev[3]),
        )
    )
