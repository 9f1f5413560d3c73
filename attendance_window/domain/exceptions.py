"""
Domain-specific exception hierarchy for the attendance window application.
"""

from __future__ import annotations

from typing import Any, Optional


class AttendanceWindowError(Exception):
    """Base class for all application-level errors."""

    status_code = 500


class InvalidIntervalError(AttendanceWindowError, ValueError):
    """Raised when a scheduled interval does not start before it ends."""

    status_code = 400

    def __init__(self, message: str, start: Any = None, end: Any = None) -> None:
        super().__init__(message)
        self.start = start
        self.end = end


class InvalidDateError(AttendanceWindowError, ValueError):
    """Raised when a calendar date (or a pair of them) cannot be used."""

    status_code = 400

    def __init__(self, message: str, value: Any = None, parameter: Optional[str] = None) -> None:
        super().__init__(message)
        self.value = value
        self.parameter = parameter


class InvalidQueryError(AttendanceWindowError, ValueError):
    """Raised when query parameters conflict or carry unknown values."""

    status_code = 400

    def __init__(self, message: str, parameter: Optional[str] = None) -> None:
        super().__init__(message)
        self.parameter = parameter


class RecordSourceError(AttendanceWindowError):
    """Raised when attendance records cannot be fetched or parsed."""

    status_code = 502
