"""In-memory record collection that re-saves itself on every change.

The store is the single writer of its collection. Each mutating call
persists the full snapshot before returning; when the backend fails the
in-memory change stands, a warning is logged and PERSIST_FAILED is
published on the bus.
"""

import json
import logging
from typing import Any, Optional, Tuple

from daybook.domain import SCHEMA_VERSION, Category, Record
from daybook.errors import CategoryInUseError, RecordValidationError, UnsupportedSchemaError
from daybook.events import (
    CATEGORY_ADDED,
    CATEGORY_DELETED,
    PERSIST_FAILED,
    RECORD_ADDED,
    RECORD_DELETED,
    RECORD_UPDATED,
    EventBus,
)
from daybook.functional import Maybe, safe_category, safe_record, validate_category, validate_record
from daybook.storage import Persistence
from daybook.transforms import (
    add_record,
    category_from_dict,
    category_to_dict,
    category_usage,
    delete_record,
    record_from_dict,
    record_to_dict,
    set_flag,
    update_record,
)

logger = logging.getLogger(__name__)


def encode_snapshot(categories: Tuple[Category, ...], records: Tuple[Record, ...]) -> bytes:
    payload = {
        "schema_version": SCHEMA_VERSION,
        "categories": [category_to_dict(c) for c in categories],
        "records": [record_to_dict(r) for r in records],
    }
    return (json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False) + "\n").encode("utf-8")


def decode_snapshot(data: bytes) -> Tuple[Optional[Tuple[Category, ...]], Tuple[Record, ...]]:
    """Parse a stored payload.

    A bare list is the unversioned layout and holds records only; the
    returned categories are None in that case.
    """
    payload: Any = json.loads(data.decode("utf-8"))
    if isinstance(payload, list):
        return None, tuple(record_from_dict(r) for r in payload)
    if not isinstance(payload, dict):
        raise ValueError(f"Expected an object or a list, got {type(payload).__name__}")

    version = payload.get("schema_version", 0)
    if not isinstance(version, int) or version > SCHEMA_VERSION:
        raise UnsupportedSchemaError(version, SCHEMA_VERSION)

    categories = payload.get("categories")
    if categories is not None:
        categories = tuple(category_from_dict(c) for c in categories)
    records = tuple(record_from_dict(r) for r in payload.get("records", []))
    return categories, records


class RecordStore:
    def __init__(
        self,
        persistence: Persistence,
        key: str = "records",
        bus: Optional[EventBus] = None,
        categories: Tuple[Category, ...] = (),
    ):
        self.persistence = persistence
        self.key = key
        self.bus = bus or EventBus()
        self._categories: Tuple[Category, ...] = tuple(categories)
        self._records: Tuple[Record, ...] = ()
        self.last_save_ok = True

    def load(self) -> "RecordStore":
        try:
            data = self.persistence.load(self.key)
        except OSError as e:
            logger.error("Could not read %s: %s", self.key, e)
            return self

        if data is None:
            logger.debug("Nothing stored under %s yet", self.key)
            return self

        try:
            categories, records = decode_snapshot(data)
        except UnsupportedSchemaError:
            raise
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error("Stored data under %s is unreadable, starting empty: %s", self.key, e)
            backup = getattr(self.persistence, "backup", None)
            if backup is not None:
                backup(self.key, data)
            return self

        if categories is not None:
            self._categories = categories
        self._records = self._admit(records)
        logger.debug("Loaded %d record(s) from %s", len(self._records), self.key)
        return self

    def all(self) -> Tuple[Record, ...]:
        return self._records

    def categories(self) -> Tuple[Category, ...]:
        return self._categories

    def get(self, record_id: str) -> Maybe[Record]:
        return safe_record(self._records, record_id)

    def add(self, record: Record) -> Record:
        self._check(record)
        if self.get(record.id).is_some():
            raise RecordValidationError({
                "error": "duplicate_id",
                "message": f"Record with ID {record.id} already exists",
                "record_id": record.id,
            })
        self._records = add_record(self._records, record)
        self._persist("add")
        self.bus.publish(RECORD_ADDED, {"id": record.id, "cat_id": record.cat_id})
        return record

    def update(self, record: Record) -> bool:
        if self.get(record.id).is_none():
            return False
        self._check(record)
        self._records = update_record(self._records, record)
        self._persist("update")
        self.bus.publish(RECORD_UPDATED, {"id": record.id, "cat_id": record.cat_id})
        return True

    def delete(self, record_id: str) -> bool:
        if self.get(record_id).is_none():
            return False
        self._records = delete_record(self._records, record_id)
        self._persist("delete")
        self.bus.publish(RECORD_DELETED, {"id": record_id})
        return True

    def archive(self, record_id: str) -> bool:
        return self._set_flag(record_id, "archived", True, "archive")

    def unarchive(self, record_id: str) -> bool:
        return self._set_flag(record_id, "archived", False, "unarchive")

    def favorite(self, record_id: str) -> bool:
        return self._set_flag(record_id, "favorite", True, "favorite")

    def unfavorite(self, record_id: str) -> bool:
        return self._set_flag(record_id, "favorite", False, "unfavorite")

    def add_category(self, category: Category) -> Category:
        """Add a category.

        The first category closes an open store: category ids already used
        by records are adopted as categories named after their id.
        """
        if safe_category(self._categories, category.id).is_some():
            raise RecordValidationError({
                "error": "duplicate_id",
                "message": f"Category with ID {category.id} already exists",
                "category_id": category.id,
            })
        known = {c.id for c in self._categories} | {category.id}
        adopted = tuple(Category(cid, cid) for cid in sorted({r.cat_id for r in self._records} - known))
        result = validate_category(category, self._categories + adopted)
        if result.is_left():
            raise RecordValidationError(result.get_error())
        self._categories = self._categories + adopted + (category,)
        self._persist("add_category")
        for c in adopted + (category,):
            self.bus.publish(CATEGORY_ADDED, {"id": c.id})
        return category

    def update_category(self, category: Category) -> bool:
        if safe_category(self._categories, category.id).is_none():
            return False
        result = validate_category(category, self._categories)
        if result.is_left():
            raise RecordValidationError(result.get_error())
        self._categories = tuple(category if c.id == category.id else c for c in self._categories)
        self._persist("update_category")
        return True

    def delete_category(self, cat_id: str) -> bool:
        if safe_category(self._categories, cat_id).is_none():
            return False
        in_use = category_usage(self._records, cat_id)
        if in_use:
            raise CategoryInUseError(cat_id, in_use)
        self._categories = tuple(c for c in self._categories if c.id != cat_id)
        self._persist("delete_category")
        self.bus.publish(CATEGORY_DELETED, {"id": cat_id})
        return True

    def _set_flag(self, record_id: str, flag: str, value: bool, operation: str) -> bool:
        current = self.get(record_id)
        if current.is_none() or getattr(current.get_or_else(None), flag) == value:
            return False
        self._records = set_flag(self._records, record_id, flag, value)
        self._persist(operation)
        self.bus.publish(RECORD_UPDATED, {"id": record_id, flag: value})
        return True

    def _admit(self, records: Tuple[Record, ...]) -> Tuple[Record, ...]:
        # drops loaded records that are invalid, orphaned or repeat an id
        kept = []
        seen = set()
        for r in records:
            if r.id in seen:
                logger.warning("Skipping record %s from %s: duplicate id", r.id, self.key)
                continue
            result = validate_record(r, self._categories)
            if result.is_left():
                logger.warning("Skipping record %s from %s: %s", r.id, self.key, result.get_error()["message"])
                continue
            seen.add(r.id)
            kept.append(r)
        return tuple(kept)

    def _check(self, record: Record) -> None:
        result = validate_record(record, self._categories)
        if result.is_left():
            raise RecordValidationError(result.get_error())

    def _persist(self, operation: str) -> bool:
        reason = "backend refused the write"
        try:
            ok = bool(self.persistence.save(self.key, encode_snapshot(self._categories, self._records)))
        except OSError as e:
            ok = False
            reason = str(e)

        self.last_save_ok = ok
        if not ok:
            logger.warning("Persisting %s after %s failed: %s", self.key, operation, reason)
            self.bus.publish(PERSIST_FAILED, {"key": self.key, "operation": operation, "reason": reason})
        return ok
