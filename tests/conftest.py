"""
Shared fixtures.
"""

import pendulum
import pytest

from attendance_window.domain.models import AttendanceRecord


@pytest.fixture
def local_timezone():
    """Pretend the process runs in another timezone for the duration of a test."""
    def _set(name: str) -> None:
        pendulum.set_local_timezone(pendulum.timezone(name))

    yield _set
    pendulum.set_local_timezone()


@pytest.fixture
def sample_documents():
    """Attendance documents as the API returns them."""
    return [
        {
            "_id": "multi-day",
            "worker": {"_id": "w1", "firstName": "Maya", "lastName": "Lopez"},
            "job": {"_id": "j1", "title": "Warehouse Night Shift"},
            "business": "b1",
            "scheduledStart": "2025-11-07T15:00:00.000Z",
            "scheduledEnd": "2025-11-09T21:00:00.000Z",
            "status": "scheduled",
        },
        {
            "_id": "ends-at-midnight",
            "worker": "w2",
            "workerNameSnapshot": "Sam Okafor",
            "jobTitleSnapshot": "Front Desk",
            "business": "b1",
            "scheduledStart": "2025-11-07T00:00:00.000Z",
            "scheduledEnd": "2025-11-08T00:00:00.000Z",
            "status": "completed",
        },
        {
            "_id": "single-day",
            "worker": "w2",
            "workerNameSnapshot": "Sam Okafor",
            "jobTitleSnapshot": "Front Desk",
            "business": "b2",
            "scheduledStart": "2025-11-10T09:00:00.000Z",
            "scheduledEnd": "2025-11-10T17:00:00.000Z",
            "status": "clocked-in",
        },
    ]


@pytest.fixture
def sample_records(sample_documents):
    return [AttendanceRecord.from_document(document) for document in sample_documents]
