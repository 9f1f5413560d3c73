"""
HTTP client for the attendance API.
"""

import logging
from typing import Any, List, Mapping, Optional

import requests

from ..domain.exceptions import InvalidIntervalError, RecordSourceError
from ..domain.models import AttendanceRecord

logger = logging.getLogger(__name__)


class AttendanceApiClient:
    """
    Client for the attendance endpoints of the marketplace API.

    Uses ``GET /attendance`` with the same ``date`` / ``startDate`` /
    ``endDate`` / ``status`` query parameters the mobile apps send.
    """

    ATTENDANCE_PATH = "/attendance"

    def __init__(self, base_url: str, token: str = "", timeout: float = 30):
        """
        Initialize the API client.

        Args:
            base_url: API root, e.g. ``http://localhost:3000/api``
            token: Bearer token of a worker or employer account
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def fetch_records(self, params: Optional[Mapping[str, str]] = None) -> List[AttendanceRecord]:
        """
        Fetch attendance records from the API.

        Args:
            params: Query parameters forwarded unchanged

        Returns:
            Parsed attendance records

        Raises:
            RecordSourceError: If the request fails or the response is malformed
        """
        url = f"{self.base_url}{self.ATTENDANCE_PATH}"

        try:
            response = requests.get(
                url,
                headers=self.headers,
                params=dict(params or {}),
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.RequestException as e:
            raise RecordSourceError(f"Failed to fetch attendance records from {url}: {e}") from e
        except ValueError as e:
            raise RecordSourceError(f"Attendance API returned invalid JSON: {e}") from e

        return self._parse_response(data)

    def _parse_response(self, response_data: Any) -> List[AttendanceRecord]:
        """
        Parse the list endpoint response into our domain model.

        Response format:
        {
            "status": "success",
            "results": 1,
            "data": [
                {
                    "_id": "690e1328332325b86dcc3dee",
                    "scheduledStart": "2025-11-07T15:00:00.000Z",
                    "scheduledEnd": "2025-11-09T21:00:00.000Z",
                    "status": "scheduled",
                    ...
                }
            ]
        }
        """
        if not isinstance(response_data, Mapping) or not isinstance(response_data.get("data"), list):
            raise RecordSourceError("Attendance API response has no 'data' list")

        records: List[AttendanceRecord] = []

        for document in response_data["data"]:
            try:
                records.append(AttendanceRecord.from_document(document))
            except (InvalidIntervalError, AttributeError) as e:
                logger.warning("Could not parse attendance record: %s", e)
                continue

        declared = response_data.get("results")
        if isinstance(declared, int) and declared != len(response_data["data"]):
            logger.warning(
                "Attendance API declared %d result(s) but returned %d",
                declared,
                len(response_data["data"]),
            )

        return records
