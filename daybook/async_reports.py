import asyncio
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from daybook._util import _now_local
from daybook.aggregates import summary
from daybook.domain import Record, Summary
from daybook.filters import by_window


async def window_reports(
    records: Iterable[Record],
    windows: List[int],
    now: Optional[datetime] = None,
) -> Dict[int, Summary]:
    """Summaries of several trailing windows, computed as sibling tasks.

    Each task sees the same snapshot; `total` in a window's Summary is the
    number of records inside that window.
    """
    snapshot = tuple(records)
    now = now or _now_local()

    async def one_window(days: int) -> tuple[int, Summary]:
        in_window = by_window(snapshot, days, now)
        await asyncio.sleep(0)  # cooperate
        return days, summary(in_window, now)

    results = await asyncio.gather(*(one_window(w) for w in windows))
    return {k: v for k, v in results}


async def category_counts(records: Iterable[Record], cat_ids: List[str]) -> Dict[str, int]:
    """Entry count per requested category; categories with no entries map to 0."""
    snapshot = tuple(records)

    async def count(cat_id: str) -> tuple[str, int]:
        total = sum(1 for r in snapshot if r.cat_id == cat_id)
        await asyncio.sleep(0)
        return cat_id, total

    results = await asyncio.gather(*(count(c) for c in cat_ids))
    return {k: v for k, v in results}
