from __future__ import annotations

import pytest

from casedocs.processing.normalization import (
    collapse_whitespace,
    normalize_date,
    normalize_gender,
    strip_whitespace,
    to_upper,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("01/02/2030", "2030-02-01"),
        ("15.03.1985", "1985-03-15"),
        ("1-2-30", "2030-02-01"),
        ("2030-2-1", "2030-02-01"),
        ("12/25/2024", "2024-12-25"),
    ],
)
def test_normalize_date_canonical_forms(raw: str, expected: str) -> None:
    assert normalize_date(raw) == expected


@pytest.mark.parametrize("raw", ["31/02/2030", "next tuesday", "01/02/130", " 15 March 1985 "])
def test_normalize_date_keeps_unresolvable_values(raw: str) -> None:
    assert normalize_date(raw) == raw.strip()


def test_whitespace_helpers() -> None:
    assert strip_whitespace("IE29 AIBK 9311 5212 3456 78") == "IE29AIBK93115212345678"
    assert collapse_whitespace("  SEAN \t PATRICK \n") == "SEAN PATRICK"
    assert to_upper("ab 123 456") == "AB123456"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("M", "Male"), (" male ", "Male"), ("F", "Female"), ("X", "Female")],
)
def test_normalize_gender(raw: str, expected: str) -> None:
    assert normalize_gender(raw) == expected
