"""Calendar predicates used by validation rules.

Every predicate takes the field value and the reference day. Comparisons are done on
`datetime.date` values so the time of day never matters.
"""

from __future__ import annotations

import calendar
import re
from collections.abc import Callable
from datetime import date

from casedocs.processing.normalization import normalize_date

Predicate = Callable[[str, date], bool]


def parse_date(value: str) -> date | None:
    """Parse a date value after normalization.

    Args:
        value (str): Raw or canonical date string.

    Returns:
        date | None: Parsed date, or None when the value is not a calendar date.
    """
    try:
        return date.fromisoformat(normalize_date(value))
    except ValueError:
        return None


def months_before(day: date, months: int) -> date:
    """Return the same calendar day `months` earlier, clamped to the month length.

    Args:
        day (date): Reference day.
        months (int): Number of months to go back.

    Returns:
        date: Shifted day.
    """
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def is_valid_date(value: str, today: date) -> bool:  # noqa: ARG001
    """Return whether the value is a real calendar date."""
    return parse_date(value) is not None


def not_expired(value: str, today: date) -> bool:
    """Return whether the date is today or later."""
    parsed = parse_date(value)
    return parsed is not None and parsed >= today


def not_older_than(months: int) -> Predicate:
    """Build a predicate accepting dates within the last `months` months.

    Args:
        months (int): Recency window.

    Returns:
        Predicate: Recency predicate.
    """

    def _check(value: str, today: date) -> bool:
        parsed = parse_date(value)
        return parsed is not None and parsed >= months_before(today, months)

    return _check


def matches(pattern: str) -> Predicate:
    """Build a predicate matching the whole value against a case-insensitive regex."""
    compiled = re.compile(pattern, re.IGNORECASE)

    def _check(value: str, today: date) -> bool:  # noqa: ARG001
        return compiled.fullmatch(value.strip()) is not None

    return _check


def min_length(length: int) -> Predicate:
    """Build a predicate requiring at least `length` characters."""

    def _check(value: str, today: date) -> bool:  # noqa: ARG001
        return len(value.strip()) >= length

    return _check


def all_of(*predicates: Predicate) -> Predicate:
    """Combine predicates that must all hold."""

    def _check(value: str, today: date) -> bool:
        return all(predicate(value, today) for predicate in predicates)

    return _check
