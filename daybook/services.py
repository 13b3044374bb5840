from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

from daybook._util import _before, _now_local, _sort_instant
from daybook.aggregates import (
    count_by_category,
    distribution,
    frequency,
    longest_streak,
    most_common,
    tag_counts,
)
from daybook.filters import by_window


class StatisticsService:
    """Facade for window statistics using injected validators and calculators.

    validators: functions taking (window_days, records, categories, now) -> Sequence[str]
    calculators: functions taking (window_days, records, categories, now, acc) -> dict (partial results)
    """

    def __init__(self, validators: Sequence[Callable[..., Sequence[str]]], calculators: Sequence[Callable[..., Dict[str, Any]]]):
        self.validators = validators
        self.calculators = calculators

    def window_report(
        self,
        window_days: Optional[float],
        records: Iterable,
        categories: Iterable,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Run validators and calculators over one snapshot and return the report with intermediate steps."""
        now = now or _now_local()
        records = tuple(records)
        categories = tuple(categories)
        report = {
            "window_days": window_days,
            "validation": [],
            "steps": [],
            "result": {}
        }

        for v in self.validators:
            try:
                msgs = v(window_days, records, categories, now)
            except Exception as e:
                msgs = [f"validator_error: {e}"]
            report["validation"].append({"validator": getattr(v, "__name__", str(v)), "messages": list(msgs)})

        acc = {}
        for calc in self.calculators:
            out = calc(window_days, records, categories, now, acc)
            report["steps"].append({"calculator": getattr(calc, "__name__", str(calc)), "output": out})
            if isinstance(out, dict):
                acc.update(out)

        report["result"] = acc
        return report


class ReportService:
    """Facade for per-category reports using injected aggregators."""

    def __init__(self, aggregators: Sequence[Callable[..., Dict[str, Any]]]):
        self.aggregators = aggregators

    def category_report(self, cat_id: str, records: Iterable, categories: Iterable) -> Dict[str, Any]:
        records = tuple(records)
        categories = tuple(categories)
        report = {"category": cat_id, "steps": [], "result": {}}
        acc = {}
        for agg in self.aggregators:
            out = agg(cat_id, records, categories, acc)
            report["steps"].append({"aggregator": getattr(agg, "__name__", str(agg)), "output": out})
            if isinstance(out, dict):
                acc.update(out)
        report["result"] = acc
        return report


def unknown_categories(window_days, records, categories, now=None) -> list:
    known = {c.id for c in categories}
    if not known:
        return []
    missing = sorted({r.cat_id for r in records} - known)
    return [f"unknown category: {cid}" for cid in missing]


def future_records(window_days, records, categories, now=None) -> list:
    now = now or _now_local()
    ahead = [r.id for r in records if _before(now, r.date)]
    return [f"record dated in the future: {rid}" for rid in ahead]


def calc_counts(window_days, records, categories, now, acc=None) -> dict:
    in_window = by_window(records, window_days, now)
    return {"entries": len(in_window), "by_category": count_by_category(in_window)}


def calc_frequency(window_days, records, categories, now, acc=None) -> dict:
    return {"frequency": frequency(records, window_days, now)}


def calc_distribution(window_days, records, categories, now, acc=None) -> dict:
    in_window = by_window(records, window_days, now)
    return {
        "distribution": [
            {"cat_id": s.cat_id, "count": s.count, "percent": round(s.percent, 1)}
            for s in distribution(in_window, categories)
        ],
        "most_common": most_common(in_window),
    }


def calc_tags(window_days, records, categories, now, acc=None) -> dict:
    return {"tags": tag_counts(by_window(records, window_days, now))}


def calc_streak(window_days, records, categories, now, acc=None) -> dict:
    return {"longest_streak": longest_streak(by_window(records, window_days, now))}


def default_statistics_service() -> StatisticsService:
    return StatisticsService(
        validators=[unknown_categories, future_records],
        calculators=[calc_counts, calc_frequency, calc_distribution, calc_tags, calc_streak],
    )


def agg_count(cat_id, records, categories, acc=None) -> dict:
    return {"count": sum(1 for r in records if r.cat_id == cat_id)}


def agg_share(cat_id, records, categories, acc=None) -> dict:
    count = (acc or {}).get("count")
    if count is None:
        count = agg_count(cat_id, records, categories)["count"]
    return {"share": count / len(records) if records else 0.0}


def agg_latest(cat_id, records, categories, acc=None) -> dict:
    dates = [r.date for r in records if r.cat_id == cat_id]
    return {"latest": max(dates, key=_sort_instant).isoformat() if dates else None}


def default_report_service() -> ReportService:
    return ReportService(aggregators=[agg_count, agg_share, agg_latest])
