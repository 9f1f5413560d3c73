"""
Attendance records loaded from a JSON export.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..domain.exceptions import InvalidIntervalError, RecordSourceError
from ..domain.models import AttendanceRecord

logger = logging.getLogger(__name__)


class JsonRecordStore:
    """
    Record source backed by a JSON file.

    Accepts either a bare array of attendance documents or the API envelope
    ``{"status": "success", "results": n, "data": [...]}``, so a saved API
    response or a database export can be replayed offline.
    """

    def __init__(self, path: Path):
        """
        Initialize the store.

        Args:
            path: Path to the JSON file
        """
        self.path = Path(path)
        self._records: Optional[List[AttendanceRecord]] = None

    def _load_documents(self) -> List[Dict[str, Any]]:
        """Read the raw documents from disk."""
        if not self.path.exists():
            raise RecordSourceError(f"Records file not found: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise RecordSourceError(f"Could not read records from {self.path}: {exc}") from exc

        if isinstance(data, Mapping):
            data = data.get("data", [])

        if not isinstance(data, list):
            raise RecordSourceError(f"{self.path} must contain a list of attendance records")

        return data

    def _load_records(self) -> List[AttendanceRecord]:
        records: List[AttendanceRecord] = []

        for index, document in enumerate(self._load_documents()):
            if not isinstance(document, Mapping):
                logger.warning("Skipping entry %d in %s: not an object", index, self.path)
                continue
            try:
                records.append(AttendanceRecord.from_document(document))
            except InvalidIntervalError as exc:
                # Broken schedules (end before start) exist in old exports
                logger.warning("Skipping record %s: %s", document.get("_id", index), exc)

        logger.debug("Loaded %d attendance record(s) from %s", len(records), self.path)
        return records

    def fetch_records(self, params: Optional[Mapping[str, str]] = None) -> List[AttendanceRecord]:
        """
        Return every record in the file.

        The parameters are ignored; callers filter locally.
        """
        if self._records is None:
            self._records = self._load_records()
        return list(self._records)
