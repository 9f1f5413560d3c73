"""
Domain layer - Pure day-overlap logic without external dependencies.
"""

from .dates import parse_date, parse_instant
from .exceptions import (
    AttendanceWindowError,
    InvalidDateError,
    InvalidIntervalError,
    InvalidQueryError,
    RecordSourceError,
)
from .models import (
    AttendanceRecord,
    DayWindow,
    DayWindowPolicy,
    OpenRange,
    QueryRange,
    ScheduledInterval,
    Window,
)
from .overlap import (
    date_range,
    days_overlapped,
    intersection,
    interval_days,
    overlaps,
    overlaps_range,
)

__all__ = [
    "AttendanceRecord",
    "AttendanceWindowError",
    "DayWindow",
    "DayWindowPolicy",
    "InvalidDateError",
    "InvalidIntervalError",
    "InvalidQueryError",
    "OpenRange",
    "QueryRange",
    "RecordSourceError",
    "ScheduledInterval",
    "Window",
    "date_range",
    "days_overlapped",
    "intersection",
    "interval_days",
    "overlaps",
    "overlaps_range",
    "parse_date",
    "parse_instant",
]
