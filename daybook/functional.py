import math
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Generic, Iterable, TypeVar

from daybook.domain import Category, Record

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    @abstractmethod
    def is_none(self) -> bool:
        pass


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def is_none(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Some({self._value})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def is_none(self) -> bool:
        return True

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def is_left(self) -> bool:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def is_left(self) -> bool:
        return False

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Left(self._error)

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def is_left(self) -> bool:
        return True

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def safe_record(records: Iterable[Record], record_id: str) -> Maybe[Record]:
    for r in records:
        if r.id == record_id:
            return Some(r)
    return Nothing()


def safe_category(cats: Iterable[Category], cat_id: str) -> Maybe[Category]:
    for cat in cats:
        if cat.id == cat_id:
            return Some(cat)
    return Nothing()


def validate_record(
    r: Record,
    cats: tuple[Category, ...] = (),
) -> Either[dict, Record]:
    """Check required fields and references.

    An empty `cats` means the category list is open and any non-empty
    cat_id is accepted.
    """
    if not isinstance(r.id, str) or not r.id.strip():
        return Left({
            "error": "missing_field",
            "message": "Record id is required",
            "field": "id"
        })

    if not isinstance(r.date, datetime):
        return Left({
            "error": "invalid_date",
            "message": f"Record {r.id} date must be a datetime, got {type(r.date).__name__}",
            "field": "date"
        })

    if not isinstance(r.cat_id, str) or not r.cat_id.strip():
        return Left({
            "error": "missing_field",
            "message": f"Record {r.id} has no category",
            "field": "cat_id"
        })

    if cats and not any(c.id == r.cat_id for c in cats):
        return Left({
            "error": "category_not_found",
            "message": f"Category with ID {r.cat_id} does not exist",
            "category_id": r.cat_id
        })

    for name, value in r.values:
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            return Left({
                "error": "invalid_value",
                "message": f"Measurement {name!r} must be a finite number, got {value!r}",
                "field": name
            })

    return Right(r)


def validate_category(c: Category, cats: tuple[Category, ...] = ()) -> Either[dict, Category]:
    if not c.id or not c.id.strip():
        return Left({
            "error": "missing_field",
            "message": "Category id is required",
            "field": "id"
        })
    if not c.name or not c.name.strip():
        return Left({
            "error": "missing_field",
            "message": f"Category {c.id} has no name",
            "field": "name"
        })
    # names are compared case-insensitively, like the category editors do
    clash = next(
        (o for o in cats if o.id != c.id and o.name.strip().lower() == c.name.strip().lower()),
        None,
    )
    if clash is not None:
        return Left({
            "error": "duplicate_name",
            "message": f"Category name {c.name!r} is already used by {clash.id}",
            "category_id": clash.id
        })
    return Right(c)
