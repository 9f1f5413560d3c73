"""
Parsing of caller-supplied calendar dates and record timestamps.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional, Union

import pendulum
from pendulum import Date, DateTime

from .exceptions import InvalidDateError, InvalidIntervalError

DATE_FORMAT = "YYYY-MM-DD"

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date(value: Union[str, date], parameter: Optional[str] = None) -> Date:
    """
    Parse a strict ``YYYY-MM-DD`` calendar date.

    Args:
        value: Date string (or an already parsed date)
        parameter: Name of the query parameter the value came from

    Returns:
        Pendulum Date

    Raises:
        InvalidDateError: If the value is not a well-formed calendar date
    """
    if isinstance(value, datetime):
        raise InvalidDateError(
            f"Expected a calendar date, got a datetime: {value}",
            value=value,
            parameter=parameter,
        )

    if isinstance(value, date):
        return pendulum.date(value.year, value.month, value.day)

    label = f" for '{parameter}'" if parameter else ""

    if not isinstance(value, str) or not _DATE_PATTERN.match(value.strip()):
        raise InvalidDateError(
            f"Invalid date{label}: {value!r} (expected {DATE_FORMAT})",
            value=value,
            parameter=parameter,
        )

    try:
        parsed = pendulum.from_format(value.strip(), DATE_FORMAT, tz="UTC")
    except ValueError as exc:
        raise InvalidDateError(
            f"Invalid date{label}: {value!r} ({exc})",
            value=value,
            parameter=parameter,
        ) from exc

    return parsed.date()


def parse_instant(value: Union[str, datetime]) -> DateTime:
    """
    Parse a record timestamp into an aware pendulum DateTime.

    Strings without an offset are read as UTC, which is how the attendance
    store serialises ``scheduledStart``/``scheduledEnd``. Naive ``datetime``
    objects are rejected.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None or value.utcoffset() is None:
            raise InvalidIntervalError(f"Timestamp {value} has no UTC offset")
        return pendulum.instance(value)

    if not isinstance(value, str) or not value.strip():
        raise InvalidIntervalError(f"Invalid timestamp: {value!r}")

    try:
        parsed = pendulum.parse(value.strip(), tz="UTC")
    except ValueError as exc:
        raise InvalidIntervalError(f"Invalid timestamp {value!r}: {exc}") from exc

    if not isinstance(parsed, DateTime):
        raise InvalidIntervalError(f"Timestamp {value!r} is not a point in time")

    return parsed
