import json
from dataclasses import replace
from datetime import datetime
from typing import Any, Tuple

from daybook.domain import Category, Record


def record_to_dict(r: Record) -> dict[str, Any]:
    return {
        "id": r.id,
        "date": r.date.isoformat(),
        "cat_id": r.cat_id,
        "title": r.title,
        "note": r.note,
        "values": {name: value for name, value in r.values},
        "tags": list(r.tags),
        "subject_id": r.subject_id,
        "archived": r.archived,
        "favorite": r.favorite,
    }


def record_from_dict(d: dict[str, Any]) -> Record:
    if not isinstance(d, dict):
        raise TypeError(f"Expected a record object, got {type(d).__name__}")
    values = d.get("values") or {}
    if isinstance(values, dict):
        values = values.items()
    return Record(
        id=str(d["id"]),
        date=datetime.fromisoformat(d["date"]),
        cat_id=str(d["cat_id"]),
        title=d.get("title") or "",
        note=d.get("note") or "",
        values=tuple((str(k), None if v is None else float(v)) for k, v in values),
        tags=tuple(d.get("tags") or ()),
        subject_id=d.get("subject_id"),
        archived=bool(d.get("archived", False)),
        favorite=bool(d.get("favorite", False)),
    )


def category_to_dict(c: Category) -> dict[str, Any]:
    return {"id": c.id, "name": c.name, "icon": c.icon, "color": c.color, "score": c.score}


def category_from_dict(d: dict[str, Any]) -> Category:
    if not isinstance(d, dict):
        raise TypeError(f"Expected a category object, got {type(d).__name__}")
    return Category(**d)


def load_seed(path: str) -> Tuple[Tuple[Category, ...], Tuple[Record, ...]]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    categories = tuple(category_from_dict(c) for c in data["categories"])
    records = tuple(record_from_dict(r) for r in data["records"])

    return categories, records


def add_record(records: Tuple[Record, ...], r: Record) -> Tuple[Record, ...]:
    return records + (r,)


def update_record(records: Tuple[Record, ...], r: Record) -> Tuple[Record, ...]:
    return tuple(r if old.id == r.id else old for old in records)


def delete_record(records: Tuple[Record, ...], record_id: str) -> Tuple[Record, ...]:
    return tuple(r for r in records if r.id != record_id)


def set_flag(records: Tuple[Record, ...], record_id: str, flag: str, value: bool) -> Tuple[Record, ...]:
    """Set a boolean field such as `archived` or `favorite` on one record."""
    return tuple(replace(r, **{flag: value}) if r.id == record_id else r for r in records)


def category_usage(records: Tuple[Record, ...], cat_id: str) -> int:
    return sum(1 for r in records if r.cat_id == cat_id)
