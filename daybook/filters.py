from datetime import datetime, timedelta
from typing import Any, Callable, Iterable, Optional, Tuple, Union

from daybook._util import _aligned, _before, _local_day, _now_local, _sort_instant
from daybook.domain import Record

SortKey = Union[str, Callable[[Record], Any]]

PERIODS = ("today", "week", "month", "all", "custom")


def has_category(cat_id: str):
    def _filter(r: Record) -> bool:
        return r.cat_id == cat_id

    return _filter


def in_range(start: datetime, end: datetime):
    def _filter(r: Record) -> bool:
        return not _before(r.date, start) and _before(r.date, end)

    return _filter


def matches_text(query: str):
    needle = query.strip().casefold()

    def _filter(r: Record) -> bool:
        if needle in r.title.casefold() or needle in r.note.casefold():
            return True
        return any(needle in tag.casefold() for tag in r.tags)

    return _filter


def has_tag(tag: str):
    wanted = tag.casefold()

    def _filter(r: Record) -> bool:
        return any(t.casefold() == wanted for t in r.tags)

    return _filter


def not_archived(r: Record) -> bool:
    return not r.archived


def is_favorite(r: Record) -> bool:
    return r.favorite


def by_category(records: Iterable[Record], cat_id: str) -> Tuple[Record, ...]:
    return tuple(filter(has_category(cat_id), records))


def by_date_range(records: Iterable[Record], start: datetime, end: datetime) -> Tuple[Record, ...]:
    """Records with start <= date < end, input order kept."""
    return tuple(filter(in_range(start, end), records))


def by_text_match(records: Iterable[Record], query: Optional[str]) -> Tuple[Record, ...]:
    if not query or not query.strip():
        return tuple(records)
    return tuple(filter(matches_text(query), records))


def by_tag(records: Iterable[Record], tag: str) -> Tuple[Record, ...]:
    return tuple(filter(has_tag(tag), records))


def by_subject(records: Iterable[Record], subject_id: str) -> Tuple[Record, ...]:
    return tuple(r for r in records if r.subject_id == subject_id)


def by_archived(records: Iterable[Record], archived: bool = False) -> Tuple[Record, ...]:
    return tuple(r for r in records if r.archived == archived)


def by_favorite(records: Iterable[Record]) -> Tuple[Record, ...]:
    return tuple(filter(is_favorite, records))


def window_bounds(window_days: float, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    now = now or _now_local()
    return now - timedelta(days=window_days), now


def in_window(window_days: Optional[float], now: Optional[datetime] = None):
    """Predicate for the trailing window [now - window_days, now].

    None means the whole history; a non-positive window matches nothing.
    """
    if window_days is None:
        return lambda r: True
    if window_days <= 0:
        return lambda r: False
    start, end = window_bounds(window_days, now)

    def _filter(r: Record) -> bool:
        return not _before(r.date, start) and not _before(end, r.date)

    return _filter


def by_window(records: Iterable[Record], window_days: Optional[float], now: Optional[datetime] = None) -> Tuple[Record, ...]:
    return tuple(filter(in_window(window_days, now), records))


def by_period(
    records: Iterable[Record],
    period: str,
    now: Optional[datetime] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> Tuple[Record, ...]:
    now = now or _now_local()
    if period == "all":
        return tuple(records)
    if period == "today":
        today = _local_day(now, now.tzinfo)
        return tuple(r for r in records if _local_day(_aligned(r.date, now), now.tzinfo) == today)
    if period == "week":
        return by_window(records, 7, now)
    if period == "month":
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        return tuple(r for r in records if not _before(r.date, month_start))
    if period == "custom":
        if start is None or end is None:
            raise ValueError("custom period needs both start and end")
        return by_date_range(records, start, end)
    raise ValueError(f"Unknown period {period!r}, expected one of {', '.join(PERIODS)}")


def _key_func(key: SortKey) -> Callable[[Record], Any]:
    if callable(key):
        return key
    if key == "date":
        return lambda r: _sort_instant(r.date)
    if key == "title":
        return lambda r: r.title.casefold()
    if key == "category":
        return lambda r: r.cat_id
    return lambda r: r.value(key)


def sort_by(records: Iterable[Record], key: SortKey = "date", direction: str = "asc") -> Tuple[Record, ...]:
    """Stable sort; records whose key is None go last in both directions."""
    if direction not in ("asc", "desc"):
        raise ValueError(f"direction must be 'asc' or 'desc', got {direction!r}")
    get = _key_func(key)
    keyed = [(get(r), r) for r in records]
    present = [item for item in keyed if item[0] is not None]
    missing = [r for k, r in keyed if k is None]
    ordered = sorted(present, key=lambda item: item[0], reverse=direction == "desc")
    return tuple(r for _, r in ordered) + tuple(missing)
