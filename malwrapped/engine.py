"""Insight aggregation engine.

``aggregate`` turns a user's MAL anime and manga lists plus a year selector
into a fresh :class:`~malwrapped.model.InsightModel`. It performs no I/O, keeps
no state between calls apart from the generation counter, and never mutates
its inputs.
"""

import itertools
import logging

from malwrapped import archetype, badges, characters, comparison, frequency, milestones, ranking, records
from malwrapped.model import InsightModel, MediaSummary, StatusCount, WatchTime

logger = logging.getLogger(__name__)

PLANNED_LIMIT = 5

_generations = itertools.count(1)


def next_generation() -> int:
    return next(_generations)


# ---------------------------------------------------------------------------
# Per-list summary
# ---------------------------------------------------------------------------

def _status_counts(entries) -> tuple[StatusCount, ...]:
    counts = {}
    for entry in records.dedupe_by_title(entries):
        key = records.status(entry) or "unknown"
        counts[key] = counts.get(key, 0) + 1
    return tuple(StatusCount(status=k, count=v) for k, v in counts.items())


def summarize_media(entries, selected_year, kind) -> MediaSummary:
    """Totals, rankings and rarity sets for one list (``"anime"`` or ``"manga"``)."""
    partitioned = records.in_year(entries, selected_year)
    scope = records.scoped(entries, selected_year)
    planned = records.planned(entries, selected_year)

    genre_counts = frequency.count_genres(scope)
    if kind == "anime":
        creator_counts, creator_ids = frequency.count_studios(scope), {}
        ceilings = ranking.ANIME_CEILINGS
    else:
        creator_counts, creator_ids = frequency.count_authors(scope)
        ceilings = ranking.MANGA_CEILINGS
    hidden_ceiling, rare_ceiling = ceilings

    return MediaSummary(
        total=len(scope),
        completed=sum(1 for e in scope if records.is_completed(e)),
        in_progress=sum(1 for e in scope if records.is_in_progress(e)),
        planned_total=len(planned),
        status_counts=_status_counts(partitioned),
        units=sum(records.units_consumed(e) for e in scope),
        volumes=sum(records.volumes_read(e) for e in scope),
        top_genres=frequency.ranked(genre_counts),
        distinct_genres=len(genre_counts),
        top_creators=frequency.ranked(creator_counts, ids=creator_ids),
        distinct_creators=len(creator_counts),
        top_rated=ranking.top_rated(scope),
        hidden_gems=ranking.hidden_gems(scope, hidden_ceiling),
        rare_gems=ranking.hidden_gems(scope, rare_ceiling),
        hidden_gem_count=ranking.hidden_gem_count(scope, ceilings),
        demographics=frequency.demographics(scope),
        planned=tuple(records.title(e) for e in planned[:PLANNED_LIMIT]),
    )


def watch_time(anime_scope) -> WatchTime:
    minutes = int(round(sum(
        records.episodes_watched(e) * records.episode_minutes(e) for e in anime_scope
    )))
    return WatchTime(
        total_minutes=minutes,
        days=minutes // (60 * 24),
        hours=(minutes % (60 * 24)) // 60,
    )


def _top_pair(ranked):
    return (ranked[0].name, ranked[0].count) if ranked else None


# ---------------------------------------------------------------------------
# Assembler
# ---------------------------------------------------------------------------

def aggregate(anime_entries, manga_entries, selected_year="all", user_profile=None) -> InsightModel:
    """Build the full insight model for *selected_year* (an int or ``"all"``)."""
    selected_year = records.normalize_year(selected_year)
    anime_entries = list(anime_entries or [])
    manga_entries = list(manga_entries or [])
    profile = user_profile or {}

    anime = summarize_media(anime_entries, selected_year, "anime")
    manga = summarize_media(manga_entries, selected_year, "manga")

    anime_scope = records.scoped(anime_entries, selected_year)
    manga_scope = records.scoped(manga_entries, selected_year)
    anime_all = records.scoped(anime_entries, records.ALL_TIME)
    manga_all = records.scoped(manga_entries, records.ALL_TIME)
    completed_all = [e for e in anime_all + manga_all if records.is_completed(e)]
    years = records.available_years(anime_entries, manga_entries)

    anime_genres = frequency.count_genres(anime_scope)
    manga_genres = frequency.count_genres(manga_scope)
    badge_ctx = badges.BadgeContext(
        selected_year=selected_year,
        hidden_gem_count=anime.hidden_gem_count + manga.hidden_gem_count,
        distinct_genres=len(set(anime_genres) | set(manga_genres)),
        distinct_authors=manga.distinct_creators,
        completed_in_scope=anime.completed + manga.completed,
        completed_lifetime=len(completed_all),
        planned_total=anime.planned_total + manga.planned_total,
        scoped_entries=tuple(anime_scope + manga_scope),
        top_studio=_top_pair(anime.top_creators),
        top_author=_top_pair(manga.top_creators),
        genre_counts=anime_genres + manga_genres,
        earliest_year=min(years) if years else None,
    )

    top_genre_names = [g.name for g in (anime.top_genres or manga.top_genres)]
    consumed_ids = {records.work_id(e) for e in anime_scope if records.work_id(e) is not None}

    model = InsightModel(
        selected_year=selected_year,
        anime=anime,
        manga=manga,
        watch_time=watch_time(anime_scope),
        seasons=frequency.season_counts(anime_scope),
        archetype=archetype.classify(anime_scope + manga_scope, anime_all + manga_all),
        badges=badges.evaluate(badge_ctx),
        milestone=milestones.milestone(completed_all, selected_year),
        streak=milestones.streak(anime_scope + manga_scope, selected_year),
        character_twin=characters.match_twin(top_genre_names, consumed_ids, profile.get("gender")),
        year_comparison=comparison.compare_years(anime_entries, manga_entries, selected_year),
        generation=next_generation(),
    )
    logger.debug(
        "Aggregated generation %d for %s: %d anime, %d manga",
        model.generation, selected_year, anime.total, manga.total,
    )
    return model
