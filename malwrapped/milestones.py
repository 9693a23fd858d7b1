"""Lifetime completion milestones and the longest activity streak."""

from datetime import timedelta

from malwrapped import records
from malwrapped.model import Milestone, Streak
from malwrapped.outcome import Evaluated, NotApplicable

MILESTONES = (100, 250, 500, 1000)


# ---------------------------------------------------------------------------
# Milestones
# ---------------------------------------------------------------------------

def milestone(completed_entries, selected_year):
    """Milestone to show for the scope.

    *completed_entries* is every completed entry across both lists, all time.
    For ``"all"`` the highest threshold reached is shown. For a specific year
    a threshold counts only if the N-th completion, ordered by finish date,
    fell in that year; the highest such threshold wins.
    """
    total = len(completed_entries)

    if selected_year == records.ALL_TIME:
        reached = [t for t in MILESTONES if total >= t]
        if not reached:
            return NotApplicable(f"{total} lifetime completions, below {MILESTONES[0]}")
        return Evaluated(Milestone(threshold=reached[-1], lifetime_completed=total))

    dated = sorted(
        (dt for dt in (records.finish_date(e) for e in completed_entries) if dt is not None),
    )
    for threshold in reversed(MILESTONES):
        if len(dated) < threshold:
            continue
        crossed = dated[threshold - 1]
        if crossed.year == selected_year:
            return Evaluated(
                Milestone(
                    threshold=threshold,
                    lifetime_completed=total,
                    reached_on=crossed.date().isoformat(),
                )
            )
    return NotApplicable(f"no milestone crossed in {selected_year}")


# ---------------------------------------------------------------------------
# Streak
# ---------------------------------------------------------------------------

def activity_days(entries, selected_year) -> list:
    """Sorted distinct calendar days with any start, finish or update timestamp."""
    days = set()
    for entry in entries:
        for dt in records.activity_dates(entry):
            if selected_year != records.ALL_TIME and dt.year != selected_year:
                continue
            days.add(dt.date())
    return sorted(days)


def longest_streak(days) -> Streak:
    """Longest run of consecutive calendar days in a sorted, distinct day list."""
    if not days:
        return Streak()

    best_len, best_start, best_end = 1, days[0], days[0]
    run_len, run_start = 1, days[0]
    for prev, day in zip(days, days[1:]):
        if day - prev == timedelta(days=1):
            run_len += 1
        else:
            run_len, run_start = 1, day
        if run_len > best_len:
            best_len, best_start, best_end = run_len, run_start, day

    return Streak(length=best_len, start=best_start.isoformat(), end=best_end.isoformat())


def streak(entries, selected_year):
    return Evaluated(longest_streak(activity_days(entries, selected_year)))
