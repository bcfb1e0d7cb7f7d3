"""Value post-processing applied to extracted fields."""

from __future__ import annotations

import re
from datetime import date

_DATE_PARTS = re.compile(r"^(\d{1,4})[\s./-]+(\d{1,2})[\s./-]+(\d{1,4})$")
_MAX_MONTH = 12
_TWO_DIGIT_YEAR = 2
_FOUR_DIGIT_YEAR = 4


def normalize_date(value: str) -> str:
    """Rewrite a numeric date to `YYYY-MM-DD`.

    A four digit leading component is read year-first. Otherwise the value is read
    day-month-year, unless the middle component cannot be a month while the first one
    can, in which case it is read month-day-year. Two digit years map to 20YY.

    Args:
        value (str): Raw date string, e.g. `01/02/2030`, `1.2.30`, `2030-2-1`.

    Returns:
        str: Canonical date, or the stripped input when it does not resolve to a real
        calendar date.
    """
    stripped = value.strip()
    match = _DATE_PARTS.match(stripped)
    if match is None:
        return stripped

    first, middle, last = match.groups()
    if len(first) == _FOUR_DIGIT_YEAR:
        year_text, month, day = first, int(middle), int(last)
    else:
        day, month, year_text = int(first), int(middle), last
        if month > _MAX_MONTH and day <= _MAX_MONTH:
            day, month = month, day

    if len(year_text) == _TWO_DIGIT_YEAR:
        year = 2000 + int(year_text)
    elif len(year_text) == _FOUR_DIGIT_YEAR:
        year = int(year_text)
    else:
        return stripped

    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return stripped


def strip_whitespace(value: str) -> str:
    """Remove every whitespace character, e.g. from an IBAN."""
    return re.sub(r"\s+", "", value)


def collapse_whitespace(value: str) -> str:
    """Collapse runs of whitespace into single spaces."""
    return " ".join(value.split())


def to_upper(value: str) -> str:
    """Upper-case an identifier and drop inner whitespace."""
    return strip_whitespace(value).upper()


def normalize_gender(value: str) -> str:
    """Map `M`/`Male` to `Male` and anything else to `Female`."""
    return "Male" if value.strip().upper() in {"M", "MALE"} else "Female"
