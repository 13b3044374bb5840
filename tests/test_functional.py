from datetime import datetime

from daybook.functional import (
    Maybe, Some, Nothing, Either, Left, Right,
    safe_category, safe_record, validate_category, validate_record
)
from daybook.domain import Category, Record

CATS = (
    Category("joy", "Joy"),
    Category("calm", "Calm"),
)


def test_maybe_map():
    maybe_value = Some(5)
    doubled = maybe_value.map(lambda x: x * 2)

    assert doubled.is_some()
    assert doubled.get_or_else(0) == 10

    nothing = Nothing()
    mapped_nothing = nothing.map(lambda x: x * 2)
    assert mapped_nothing.is_none()
    assert mapped_nothing.get_or_else(0) == 0


def test_maybe_bind():
    def safe_divide(x: int) -> Maybe[int]:
        if x == 0:
            return Nothing()
        return Some(10 // x)

    assert Some(2).bind(safe_divide).get_or_else(0) == 5
    assert Some(0).bind(safe_divide).is_none()
    assert Nothing().bind(safe_divide).is_none()


def test_either_map_and_bind():
    def safe_divide(x: int) -> Either[str, int]:
        if x == 0:
            return Left("Division by zero")
        return Right(10 // x)

    assert Right(5).map(lambda x: x * 2).get_or_else(0) == 10
    assert Left("error").map(lambda x: x * 2).get_error() == "error"
    assert Right(2).bind(safe_divide).get_or_else(0) == 5
    assert Right(0).bind(safe_divide).get_error() == "Division by zero"
    assert Left("original error").bind(safe_divide).get_error() == "original error"


def test_safe_category():
    result = safe_category(CATS, "joy")
    assert result.is_some()
    assert result.get_or_else(None).name == "Joy"
    assert safe_category(CATS, "nonexistent").is_none()


def test_safe_record():
    r = Record("r1", datetime(2025, 9, 1), "joy")
    assert safe_record((r,), "r1") == Some(r)
    assert safe_record((r,), "r2") == Nothing()


def test_validate_record_success():
    r = Record("r1", datetime(2025, 9, 1), "joy", values=(("height", 3),))
    result = validate_record(r, CATS)
    assert result.is_right()
    assert result.get_or_else(None).id == "r1"


def test_validate_record_open_category_list():
    r = Record("r1", datetime(2025, 9, 1), "anything")
    assert validate_record(r).is_right()


def test_validate_record_missing_id():
    r = Record("  ", datetime(2025, 9, 1), "joy")
    error = validate_record(r, CATS).get_error()
    assert error["error"] == "missing_field"
    assert error["field"] == "id"


def test_validate_record_bad_date():
    r = Record("r1", "2025-09-01", "joy")
    error = validate_record(r, CATS).get_error()
    assert error["error"] == "invalid_date"


def test_validate_record_missing_category():
    r = Record("r1", datetime(2025, 9, 1), "")
    error = validate_record(r, CATS).get_error()
    assert error["field"] == "cat_id"


def test_validate_record_unknown_category():
    r = Record("r1", datetime(2025, 9, 1), "angry")
    error = validate_record(r, CATS).get_error()
    assert error["error"] == "category_not_found"
    assert "angry" in error["message"]


def test_validate_record_bad_measurement():
    for bad in ("tall", float("nan"), True):
        r = Record("r1", datetime(2025, 9, 1), "joy", values=(("height", bad),))
        error = validate_record(r, CATS).get_error()
        assert error["error"] == "invalid_value"
        assert error["field"] == "height"


def test_validate_record_allows_empty_measurement():
    r = Record("r1", datetime(2025, 9, 1), "joy", values=(("height", None),))
    assert validate_record(r, CATS).is_right()


def test_validate_category():
    assert validate_category(Category("tired", "Tired"), CATS).is_right()
    assert validate_category(Category("", "Tired"), CATS).get_error()["field"] == "id"
    assert validate_category(Category("tired", " "), CATS).get_error()["field"] == "name"
    clash = validate_category(Category("happy", "JOY"), CATS).get_error()
    assert clash["error"] == "duplicate_name"
    assert clash["category_id"] == "joy"


def test_validate_category_rename_keeps_own_name():
    assert validate_category(Category("joy", "joy"), CATS).is_right()
