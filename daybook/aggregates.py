"""Derived statistics over a snapshot of records.

Every function here is pure and total: it reads the sequence it is given
once, never mutates a record and returns an empty mapping, 0 or None for
empty input instead of raising.
"""

from collections import defaultdict
from datetime import date, datetime, tzinfo
from typing import Callable, Dict, Iterable, Optional, Tuple, Union

from daybook._util import _local_day, _now_local, _sort_instant
from daybook.domain import (
    Category,
    CategoryShare,
    DayBreakdown,
    GrowthLeader,
    PeriodComparison,
    Record,
    Summary,
)
from daybook.filters import by_date_range, by_window, window_bounds


def count_by_category(records: Iterable[Record]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for r in records:
        counts[r.cat_id] = counts.get(r.cat_id, 0) + 1
    return counts


def frequency(
    records: Iterable[Record],
    window_days: Optional[float],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> float:
    """Entries per active day inside the trailing window."""
    in_window = by_window(records, window_days, now)
    days = {_local_day(r.date, tz) for r in in_window}
    if not days:
        return 0.0
    return len(in_window) / len(days)


def delta(
    records: Iterable[Record],
    field: str,
    window_days: Optional[float],
    now: Optional[datetime] = None,
) -> Optional[float]:
    """Last minus first value of `field` by date; None with under two values."""
    qualifying = [r for r in by_window(records, window_days, now) if r.value(field) is not None]
    if len(qualifying) < 2:
        return None
    ordered = sorted(qualifying, key=lambda r: _sort_instant(r.date))
    return float(ordered[-1].value(field) - ordered[0].value(field))


def group_by_day(records: Iterable[Record], tz: Optional[tzinfo] = None) -> Dict[date, Tuple[Record, ...]]:
    groups: Dict[date, list] = defaultdict(list)
    for r in records:
        groups[_local_day(r.date, tz)].append(r)
    return {day: tuple(groups[day]) for day in sorted(groups)}


def count_by_day(records: Iterable[Record], tz: Optional[tzinfo] = None) -> Dict[date, int]:
    return {day: len(rs) for day, rs in group_by_day(records, tz).items()}


def average(
    records: Iterable[Record],
    field: str,
    window_days: Optional[float] = None,
    now: Optional[datetime] = None,
) -> Optional[float]:
    values = [r.value(field) for r in by_window(records, window_days, now)]
    values = [v for v in values if v is not None]
    if not values:
        return None
    return sum(values) / len(values)


def most_common(
    records: Iterable[Record],
    key: Union[str, Callable[[Record], Optional[str]]] = "cat_id",
) -> Optional[str]:
    """Most frequent key value; ties go to the value seen first."""
    get = key if callable(key) else (lambda r: getattr(r, key))
    counts: Dict[str, int] = {}
    for r in records:
        k = get(r)
        if k is not None:
            counts[k] = counts.get(k, 0) + 1
    if not counts:
        return None
    return max(counts, key=counts.get)


def distribution(records: Iterable[Record], categories: Iterable[Category]) -> Tuple[CategoryShare, ...]:
    """Count and percentage per category, zero rows included.

    Categories referenced by records but missing from `categories` are
    appended after the known ones.
    """
    counts = count_by_category(records)
    total = sum(counts.values())
    order = [c.id for c in categories]
    order += [cid for cid in counts if cid not in order]
    return tuple(
        CategoryShare(
            cat_id=cid,
            count=counts.get(cid, 0),
            percent=(counts.get(cid, 0) / total * 100) if total else 0.0,
        )
        for cid in order
    )


def tag_counts(records: Iterable[Record]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for r in records:
        for tag in dict.fromkeys(r.tags):
            counts[tag] = counts.get(tag, 0) + 1
    return counts


def growth_leaders(
    records: Iterable[Record],
    field: str,
    window_days: Optional[float],
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> Tuple[GrowthLeader, ...]:
    """Subjects ranked by growth of `field` inside the window, largest first."""
    by_subject: Dict[str, list] = defaultdict(list)
    for r in by_window(records, window_days, now):
        if r.subject_id is not None:
            by_subject[r.subject_id].append(r)

    leaders = []
    for subject_id, rs in by_subject.items():
        growth = delta(rs, field, None)
        if growth is not None:
            leaders.append(GrowthLeader(subject_id=subject_id, growth=growth, entries=len(rs)))

    leaders.sort(key=lambda g: g.growth, reverse=True)
    if limit is not None:
        leaders = leaders[: max(0, limit)]
    return tuple(leaders)


def longest_streak(records: Iterable[Record], tz: Optional[tzinfo] = None) -> int:
    """Longest run of consecutive calendar days with at least one record."""
    days = sorted({_local_day(r.date, tz) for r in records})
    best = 0
    current = 0
    previous = None
    for day in days:
        if previous is not None and (day - previous).days == 1:
            current += 1
        else:
            current = 1
        best = max(best, current)
        previous = day
    return best


def compare_periods(
    records: Iterable[Record],
    window_days: float,
    now: Optional[datetime] = None,
) -> PeriodComparison:
    """Entries in the trailing window against the window right before it."""
    now = now or _now_local()
    records = tuple(records)
    current = len(by_window(records, window_days, now))
    previous_end, _ = window_bounds(window_days, now)
    previous_start, _ = window_bounds(window_days, previous_end)
    previous = len(by_date_range(records, previous_start, previous_end))
    change = (current - previous) / previous if previous else None
    return PeriodComparison(current=current, previous=previous, change=change)


def weighted_score(records: Iterable[Record], categories: Iterable[Category]) -> Optional[float]:
    """Mean category score of the records whose category carries one."""
    scores = {c.id: c.score for c in categories if c.score is not None}
    values = [scores[r.cat_id] for r in records if r.cat_id in scores]
    if not values:
        return None
    return sum(values) / len(values)


def daily_breakdown(
    records: Iterable[Record],
    field: Optional[str] = None,
    tz: Optional[tzinfo] = None,
) -> Tuple[DayBreakdown, ...]:
    """One row per day, newest first, with that day's change of `field`."""
    rows = []
    for day, rs in group_by_day(records, tz).items():
        rows.append(DayBreakdown(
            day=day,
            count=len(rs),
            delta=delta(rs, field, None) if field else None,
            tags=tuple(sorted({t for r in rs for t in r.tags})),
        ))
    rows.reverse()
    return tuple(rows)


def summary(records: Iterable[Record], now: Optional[datetime] = None) -> Summary:
    now = now or _now_local()
    records = tuple(records)
    return Summary(
        total=len(records),
        last_7_days=len(by_window(records, 7, now)),
        last_30_days=len(by_window(records, 30, now)),
        frequency_30_days=frequency(records, 30, now),
    )
