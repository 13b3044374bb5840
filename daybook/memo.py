from datetime import date
from functools import lru_cache
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from daybook.aggregates import count_by_day
from daybook.domain import Record


@lru_cache(maxsize=64)
def daily_counts(records: Tuple[Record, ...], tz_name: Optional[str] = None) -> Tuple[Tuple[date, int], ...]:
    """Per-day entry counts for calendar views, cached per snapshot."""
    tz = ZoneInfo(tz_name) if tz_name else None
    return tuple(count_by_day(records, tz).items())
