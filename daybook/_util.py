"""Shared date helpers used by filters and aggregates."""

from datetime import date, datetime, tzinfo
from typing import Optional


def _now_local() -> datetime:
    return datetime.now().astimezone()


def _with_local_tz(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.astimezone()  # local offset in effect on that date
    return dt


def _aligned(dt: datetime, ref: datetime) -> datetime:
    # naive values are read as local time when compared with aware ones
    if (dt.tzinfo is None) == (ref.tzinfo is None):
        return dt
    return _with_local_tz(dt)


def _before(a: datetime, b: datetime) -> bool:
    return _aligned(a, b) < _aligned(b, a)


def _local_day(dt: datetime, tz: Optional[tzinfo] = None) -> date:
    if tz is None:
        return dt.date() if dt.tzinfo is None else dt.astimezone().date()
    return _with_local_tz(dt).astimezone(tz).date()


def _sort_instant(dt: datetime) -> datetime:
    return _with_local_tz(dt)
