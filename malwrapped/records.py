"""Accessors, dedup and year partitioning over raw MAL list entries.

Entries are the dicts MAL returns from ``/users/@me/animelist`` and
``/users/@me/mangalist``: ``{"node": {...}, "list_status": {...}}``.
Every accessor tolerates missing or malformed fields.
"""

from malwrapped.dates import parse_date, safe_float, safe_int, year_of
from malwrapped.outcome import first_available

ALL_TIME = "all"

COMPLETED = "completed"
IN_PROGRESS_STATUSES = {"watching", "reading"}
PLANNED_STATUSES = {"plan_to_watch", "plan_to_read"}


# ---------------------------------------------------------------------------
# Field accessors
# ---------------------------------------------------------------------------

def node(entry) -> dict:
    value = entry.get("node") if isinstance(entry, dict) else None
    return value if isinstance(value, dict) else {}


def list_status(entry) -> dict:
    value = entry.get("list_status") if isinstance(entry, dict) else None
    return value if isinstance(value, dict) else {}


def work_id(entry):
    return node(entry).get("id")


def title(entry) -> str:
    value = node(entry).get("title")
    return value.strip() if isinstance(value, str) else ""


def status(entry) -> str:
    value = list_status(entry).get("status")
    return value if isinstance(value, str) else ""


def is_planned(entry) -> bool:
    return status(entry) in PLANNED_STATUSES


def is_completed(entry) -> bool:
    return status(entry) == COMPLETED


def is_in_progress(entry) -> bool:
    return status(entry) in IN_PROGRESS_STATUSES


def user_score(entry) -> int:
    return safe_int(list_status(entry).get("score"), 0) or 0


def community_score(entry) -> float:
    return safe_float(node(entry).get("mean"), 0.0) or 0.0


def popularity(entry) -> int:
    return safe_int(node(entry).get("num_list_users"), 0) or 0


def _names(items) -> list[str]:
    """Distinct non-empty ``name`` values from a list of ``{"name": ...}`` dicts."""
    names = []
    if not isinstance(items, list):
        return names
    for item in items:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        if isinstance(name, str) and name.strip() and name.strip() not in names:
            names.append(name.strip())
    return names


def genres(entry) -> list[str]:
    return _names(node(entry).get("genres"))


def studios(entry) -> list[str]:
    return _names(node(entry).get("studios"))


def author_name(first, last) -> str:
    """``"First Last"`` with inner whitespace collapsed; empty when both are blank."""
    first = first.strip() if isinstance(first, str) else ""
    last = last.strip() if isinstance(last, str) else ""
    return " ".join(f"{first} {last}".split())


def authors(entry) -> list[tuple[str, object]]:
    """Distinct ``(name, author_id)`` pairs credited on a manga entry."""
    result = []
    seen = set()
    items = node(entry).get("authors")
    if not isinstance(items, list):
        return result
    for item in items:
        person = item.get("node") if isinstance(item, dict) else None
        if not isinstance(person, dict):
            continue
        name = author_name(person.get("first_name"), person.get("last_name"))
        if not name or name in seen:
            continue
        seen.add(name)
        result.append((name, person.get("id")))
    return result


def episodes_watched(entry) -> int:
    return safe_int(list_status(entry).get("num_episodes_watched"), 0) or 0


def chapters_read(entry) -> int:
    return safe_int(list_status(entry).get("num_chapters_read"), 0) or 0


def volumes_read(entry) -> int:
    return safe_int(list_status(entry).get("num_volumes_read"), 0) or 0


def units_consumed(entry) -> int:
    """Episodes for anime, chapters for manga."""
    return episodes_watched(entry) or chapters_read(entry)


def episode_minutes(entry) -> float:
    seconds = safe_float(node(entry).get("average_episode_duration"), 0.0) or 0.0
    return seconds / 60 if seconds > 0 else 24.0


def season(entry) -> str | None:
    start_season = node(entry).get("start_season")
    if not isinstance(start_season, dict):
        return None
    value = start_season.get("season")
    return value.lower() if isinstance(value, str) and value else None


def picture(entry) -> str | None:
    pictures = node(entry).get("main_picture")
    if not isinstance(pictures, dict):
        return None
    return pictures.get("large") or pictures.get("medium")


def start_date(entry):
    return parse_date(list_status(entry).get("start_date"))


def finish_date(entry):
    return parse_date(list_status(entry).get("finish_date"))


def activity_dates(entry) -> list:
    """Every parseable start / finish / last-updated timestamp on an entry."""
    ls = list_status(entry)
    dates = []
    for key in ("start_date", "finish_date", "updated_at"):
        dt = parse_date(ls.get(key))
        if dt is not None:
            dates.append(dt)
    return dates


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------

def dedupe_by_title(entries) -> list[dict]:
    """Collapse entries sharing a trimmed title; the first one seen wins.

    Entries with an empty title are dropped.
    """
    seen = set()
    result = []
    for entry in entries or []:
        key = title(entry)
        if not key or key in seen:
            continue
        seen.add(key)
        result.append(entry)
    return result


def resolve_effective_year(entry):
    """Year an entry is attributed to: finish date, then start date, then last update.

    Returns ``Evaluated(year, source=<field>)`` or ``NotApplicable``.
    """
    ls = list_status(entry)
    return first_available(
        [
            ("finish_date", lambda: year_of(ls.get("finish_date"))),
            ("start_date", lambda: year_of(ls.get("start_date"))),
            ("updated_at", lambda: year_of(ls.get("updated_at"))),
        ],
        reason="no parseable finish, start or update date",
    )


def effective_year(entry) -> int | None:
    return resolve_effective_year(entry).value


# ---------------------------------------------------------------------------
# Year Partitioner
# ---------------------------------------------------------------------------

def in_year(entries, selected_year) -> list[dict]:
    """Entries attributed to *selected_year*; ``"all"`` passes everything through."""
    entries = [e for e in entries or [] if isinstance(e, dict)]
    if selected_year == ALL_TIME:
        return list(entries)
    return [e for e in entries if effective_year(e) == selected_year]


def consumed(entries) -> list[dict]:
    """Drop planning-only entries."""
    return [e for e in entries if not is_planned(e)]


def scoped(entries, selected_year) -> list[dict]:
    """Deduplicated, year-partitioned, non-planned subset used by aggregation passes."""
    return dedupe_by_title(consumed(in_year(entries, selected_year)))


def planned(entries, selected_year) -> list[dict]:
    """Deduplicated planning entries from the partitioned (not status-filtered) set."""
    return dedupe_by_title([e for e in in_year(entries, selected_year) if is_planned(e)])


def available_years(*lists) -> list[int]:
    """Every effective year present across the given lists, newest first."""
    years = set()
    for entries in lists:
        for entry in entries or []:
            year = effective_year(entry)
            if year is not None:
                years.add(year)
    return sorted(years, reverse=True)


def normalize_year(value):
    """Coerce a year selector (``"all"``, ``2024``, ``"2024"``) to ``"all"`` or an int."""
    if value is None or value == ALL_TIME:
        return ALL_TIME
    if isinstance(value, str) and value.strip().lower() == ALL_TIME:
        return ALL_TIME
    year = safe_int(value)
    if year is None:
        raise ValueError(f"Invalid year selector: {value!r}")
    return year
