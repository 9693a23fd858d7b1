"""Date and number coercion for MyAnimeList list records."""

from datetime import date, datetime


# ---------------------------------------------------------------------------
# Date parsing helpers
# ---------------------------------------------------------------------------

# MAL list dates are "YYYY-MM-DD" but may be truncated to "YYYY-MM" or "YYYY";
# updated_at is an ISO timestamp with an offset.
_DATE_FORMATS = [
    "%Y-%m-%d",
    "%Y-%m",
    "%Y",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y/%m/%d",
]


def parse_date(date_str):
    """Try multiple date formats and return a naive datetime or None."""
    if not date_str or not isinstance(date_str, str):
        return None
    date_str = date_str.strip()
    if not date_str:
        return None
    for fmt in _DATE_FORMATS:
        try:
            dt = datetime.strptime(date_str, fmt)
            return dt.replace(tzinfo=None)
        except ValueError:
            continue
    return None


def parse_day(date_str) -> date | None:
    """Calendar day of a date string, or None."""
    dt = parse_date(date_str)
    return dt.date() if dt is not None else None


def year_of(date_str) -> int | None:
    dt = parse_date(date_str)
    return dt.year if dt is not None else None


def safe_float(value, default=None):
    """Convert a value to float, returning *default* on failure."""
    if value is None:
        return default
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def safe_int(value, default=None):
    """Convert a value to int, returning *default* on failure."""
    if value is None:
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def round_pct(part, whole) -> int:
    """Integer percentage, halves rounded away from zero."""
    if not whole:
        return 0
    value = part * 100 / whole
    if value >= 0:
        return int(value + 0.5)
    return -int(-value + 0.5)
