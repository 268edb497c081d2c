from __future__ import annotations

from datetime import UTC, datetime

import pytest

from pyfuelmap.ingestion.normalize import (
    non_negative_or_zero,
    parse_timestamp,
    positive_or_none,
    safe_float,
    safe_int,
    safe_str,
    string_id_list,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("61.30", 61.3),
        (" 1,234.5 ", 1234.5),
        (7, 7.0),
        ("--", None),
        ("", None),
        ("nan", None),
        (float("inf"), None),
        (True, None),
        (None, None),
        ("abc", None),
    ],
)
def test_safe_float(raw: object, expected: float | None) -> None:
    assert safe_float(raw) == expected


def test_positive_or_none_treats_zero_as_unknown() -> None:
    assert positive_or_none(0) is None
    assert positive_or_none("-3") is None
    assert positive_or_none("55") == 55.0


def test_counters_never_negative() -> None:
    assert non_negative_or_zero("-1") == 0
    assert non_negative_or_zero(None) == 0
    assert non_negative_or_zero("4.0") == 4
    assert safe_int("x") is None


def test_safe_str_strips_and_blanks_to_none() -> None:
    assert safe_str("  Petron ") == "Petron"
    assert safe_str("   ") is None
    assert safe_str(12) == "12"


def test_parse_timestamp_variants() -> None:
    expected = datetime(2026, 3, 1, 8, 0, tzinfo=UTC)

    assert parse_timestamp("2026-03-01T08:00:00Z") == expected
    assert parse_timestamp("2026-03-01T08:00:00") == expected
    assert parse_timestamp("2026-03-01T16:00:00+08:00") == expected
    assert parse_timestamp(expected.timestamp()) == expected
    assert parse_timestamp(expected.timestamp() * 1000) == expected
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp("") is None


def test_string_id_list() -> None:
    assert string_id_list(None) == []
    assert string_id_list("abc") == ["abc"]
    assert string_id_list(["a", "", None, 3]) == ["a", "3"]
