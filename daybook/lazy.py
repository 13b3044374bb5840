from collections import defaultdict
from typing import Callable, Iterable, Iterator, Tuple

from daybook.domain import Category, Record


def iter_records(
    records: Iterable[Record], pred: Callable[[Record], bool]
) -> Iterator[Record]:
    for r in records:
        if pred(r):
            yield r


def lazy_top_categories(
    records: Iterable[Record], cats: Tuple[Category, ...], k: int
) -> Iterator[Tuple[str, int]]:
    """Yield (category name, entry count) for the k busiest categories."""
    category_name_by_id: dict[str, str] = {c.id: c.name for c in cats}
    counts_by_category: dict[str, int] = defaultdict(int)

    for r in records:
        counts_by_category[r.cat_id] += 1

    ordered: list[Tuple[str, int]] = sorted(
        ((category_name_by_id.get(cid, cid), total) for cid, total in counts_by_category.items()),
        key=lambda item: item[1],
        reverse=True,
    )

    for name, total in ordered[: max(0, k)]:
        yield name, total
