"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .attendance_query import STATUSES, AttendanceQuery, normalize_status
from .attendance_service import AttendanceService, RecordSourceProtocol
from .schedule import ScheduleDay, build_schedule

__all__ = [
    "STATUSES",
    "AttendanceQuery",
    "AttendanceService",
    "RecordSourceProtocol",
    "ScheduleDay",
    "build_schedule",
    "normalize_status",
]
