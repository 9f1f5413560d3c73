"""
Adapters layer - Attendance record sources (JSON exports, live API).
"""

from .api_client import AttendanceApiClient
from .json_record_store import JsonRecordStore

__all__ = ["AttendanceApiClient", "JsonRecordStore"]
