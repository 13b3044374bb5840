from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from daybook.domain import Record
from daybook.filters import (
    by_archived,
    by_category,
    by_date_range,
    by_favorite,
    by_period,
    by_subject,
    by_tag,
    by_text_match,
    by_window,
    has_category,
    in_range,
    is_favorite,
    not_archived,
    sort_by,
)

NOW = datetime(2025, 9, 10, 20, 0)


def make_sample():
    return (
        Record("r1", datetime(2025, 9, 1, 9), "joy", title="Picnic", note="Sunny park", tags=("friends",)),
        Record("r2", datetime(2025, 9, 2, 9), "tired", title="Deadline", note="Late night at WORK", tags=("work",)),
        Record("r3", datetime(2025, 9, 3, 9), "joy", title="Gym", tags=("sport",), archived=True),
        Record("r4", datetime(2025, 9, 9, 9), "calm", title="reading", note="", values=(("pages", 40.0),)),
        Record("r5", datetime(2025, 9, 10, 9), "joy", title="Call", values=(("pages", 12.0),), subject_id="mum"),
    )


def ids(records):
    return [r.id for r in records]


def test_has_category_predicate():
    result = list(filter(has_category("joy"), make_sample()))
    assert ids(result) == ["r1", "r3", "r5"]


def test_by_category_preserves_order():
    assert ids(by_category(make_sample(), "joy")) == ["r1", "r3", "r5"]
    assert by_category(make_sample(), "angry") == ()


def test_by_date_range_is_half_open():
    result = by_date_range(make_sample(), datetime(2025, 9, 2, 9), datetime(2025, 9, 9, 9))
    assert ids(result) == ["r2", "r3"]


def test_by_date_range_is_idempotent():
    start, end = datetime(2025, 9, 1), datetime(2025, 9, 5)
    once = by_date_range(make_sample(), start, end)
    assert by_date_range(once, start, end) == once


def test_in_range_mixes_aware_and_naive():
    aware = Record("a", datetime(2025, 9, 2, 12, tzinfo=timezone.utc), "joy")
    start = datetime(2025, 9, 1, tzinfo=timezone.utc)
    end = datetime(2025, 9, 3, tzinfo=timezone.utc)
    assert in_range(start, end)(aware)
    assert len(by_date_range(make_sample() + (aware,), start, end)) >= 1


def test_by_text_match_case_insensitive():
    assert ids(by_text_match(make_sample(), "work")) == ["r2"]
    assert ids(by_text_match(make_sample(), "PICNIC")) == ["r1"]
    assert ids(by_text_match(make_sample(), "sport")) == ["r3"]


def test_by_text_match_empty_query_returns_input():
    records = make_sample()
    assert by_text_match(records, "") == records
    assert by_text_match(records, "   ") == records
    assert by_text_match(records, None) == records


def test_by_tag_and_subject():
    assert ids(by_tag(make_sample(), "Work")) == ["r2"]
    assert ids(by_subject(make_sample(), "mum")) == ["r5"]


def test_by_archived():
    assert ids(by_archived(make_sample())) == ["r1", "r2", "r4", "r5"]
    assert ids(filter(not_archived, make_sample())) == ["r1", "r2", "r4", "r5"]
    assert ids(by_archived(make_sample(), True)) == ["r3"]


def test_by_favorite():
    records = tuple(replace(r, favorite=True) if r.id in ("r2", "r5") else r for r in make_sample())
    assert ids(by_favorite(records)) == ["r2", "r5"]
    assert ids(filter(is_favorite, records)) == ["r2", "r5"]
    assert by_favorite(make_sample()) == ()


def test_by_window():
    assert ids(by_window(make_sample(), 2, now=NOW)) == ["r4", "r5"]
    assert by_window(make_sample(), 0, now=NOW) == ()
    assert len(by_window(make_sample(), None, now=NOW)) == 5


def test_by_period():
    records = make_sample()
    assert ids(by_period(records, "today", now=NOW)) == ["r5"]
    assert ids(by_period(records, "week", now=NOW)) == ["r4", "r5"]
    assert len(by_period(records, "month", now=NOW)) == 5
    assert by_period(records, "all", now=NOW) == records
    custom = by_period(records, "custom", now=NOW, start=datetime(2025, 9, 1), end=datetime(2025, 9, 2))
    assert ids(custom) == ["r1"]


def test_by_period_rejects_unknown():
    with pytest.raises(ValueError):
        by_period(make_sample(), "decade", now=NOW)
    with pytest.raises(ValueError):
        by_period(make_sample(), "custom", now=NOW)


def test_sort_by_date_desc():
    assert ids(sort_by(make_sample(), "date", "desc")) == ["r5", "r4", "r3", "r2", "r1"]


def test_sort_by_is_stable():
    records = make_sample()
    assert ids(sort_by(records, "category")) == ["r4", "r1", "r3", "r5", "r2"]
    assert ids(sort_by(records, "category", "desc")) == ["r2", "r1", "r3", "r5", "r4"]


def test_sort_by_title_ignores_case():
    assert ids(sort_by(make_sample(), "title")) == ["r5", "r2", "r3", "r1", "r4"]


def test_sort_by_measurement_puts_missing_last():
    assert ids(sort_by(make_sample(), "pages")) == ["r5", "r4", "r1", "r2", "r3"]
    assert ids(sort_by(make_sample(), "pages", "desc")) == ["r4", "r5", "r1", "r2", "r3"]


def test_sort_by_callable_returns_new_tuple():
    records = make_sample()
    result = sort_by(records, lambda r: len(r.tags))
    assert isinstance(result, tuple)
    assert ids(result) == ["r4", "r5", "r1", "r2", "r3"]
    assert ids(records) == ["r1", "r2", "r3", "r4", "r5"]


def test_sort_by_rejects_bad_direction():
    with pytest.raises(ValueError):
        sort_by(make_sample(), "date", "sideways")


def test_sort_by_date_handles_mixed_timezones():
    plus2 = timezone(timedelta(hours=2))
    a = Record("a", datetime(2025, 9, 1, 12, tzinfo=plus2), "joy")
    b = Record("b", datetime(2025, 9, 1, 11, tzinfo=timezone.utc), "joy")
    assert ids(sort_by((b, a), "date")) == ["a", "b"]
