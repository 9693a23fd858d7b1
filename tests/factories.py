"""Small builders for MAL-shaped list entries."""

import itertools

_ids = itertools.count(1000)


def anime(
    title,
    status="completed",
    score=0,
    mean=None,
    popularity=None,
    genres=(),
    studios=(),
    episodes=12,
    start=None,
    finish=None,
    updated=None,
    anime_id=None,
    duration=None,
    season=None,
):
    node = {
        "id": anime_id if anime_id is not None else next(_ids),
        "title": title,
        "genres": [{"id": i, "name": g} for i, g in enumerate(genres, 1)],
        "studios": [{"id": i, "name": s} for i, s in enumerate(studios, 1)],
    }
    if mean is not None:
        node["mean"] = mean
    if popularity is not None:
        node["num_list_users"] = popularity
    if duration is not None:
        node["average_episode_duration"] = duration
    if season is not None:
        node["start_season"] = {"year": 2020, "season": season}
    list_status = {"status": status, "score": score, "num_episodes_watched": episodes}
    if start:
        list_status["start_date"] = start
    if finish:
        list_status["finish_date"] = finish
    if updated:
        list_status["updated_at"] = updated
    return {"node": node, "list_status": list_status}


def manga(
    title,
    status="completed",
    score=0,
    mean=None,
    popularity=None,
    genres=(),
    authors=(),
    chapters=50,
    volumes=5,
    start=None,
    finish=None,
    updated=None,
):
    node = {
        "id": next(_ids),
        "title": title,
        "genres": [{"id": i, "name": g} for i, g in enumerate(genres, 1)],
        "authors": [
            {"node": {"id": author_id, "first_name": first, "last_name": last}, "role": "Story & Art"}
            for first, last, author_id in authors
        ],
    }
    if mean is not None:
        node["mean"] = mean
    if popularity is not None:
        node["num_list_users"] = popularity
    list_status = {
        "status": status,
        "score": score,
        "num_chapters_read": chapters,
        "num_volumes_read": volumes,
    }
    if start:
        list_status["start_date"] = start
    if finish:
        list_status["finish_date"] = finish
    if updated:
        list_status["updated_at"] = updated
    return {"node": node, "list_status": list_status}


def rated(scores, means=None, status="completed", finish="2024-05-01"):
    """One completed anime per score, with a community mean for each."""
    means = means or [7.5] * len(scores)
    return [
        anime(f"Rated {i}", status=status, score=s, mean=m, finish=finish)
        for i, (s, m) in enumerate(zip(scores, means))
    ]
