"""
Tests for the AttendanceService orchestration layer and schedule grouping.
"""

from typing import Dict, List, Optional

import pendulum
import pytest

from attendance_window.domain.exceptions import InvalidQueryError
from attendance_window.domain.models import AttendanceRecord, DayWindowPolicy, QueryRange
from attendance_window.services.attendance_service import AttendanceService
from attendance_window.services.schedule import build_schedule


class StubRecordSource:
    """Minimal stub matching RecordSourceProtocol."""

    def __init__(self, records: List[AttendanceRecord]):
        self._records = records
        self.calls: List[Dict[str, str]] = []

    def fetch_records(self, params: Optional[Dict[str, str]] = None) -> List[AttendanceRecord]:
        self.calls.append(dict(params or {}))
        return list(self._records)


def _build_service(records: List[AttendanceRecord], policy=DayWindowPolicy.UTC):
    source = StubRecordSource(records)
    return AttendanceService(record_source=source, policy=policy), source


def test_find_records_filters_locally(sample_records):
    """Records the source over-returns are dropped by the local overlap check."""
    service, source = _build_service(sample_records)

    records = service.find_records({"date": "2025-11-09"})

    assert [record.id for record in records] == ["multi-day"]
    assert source.calls == [{"date": "2025-11-09"}]


def test_find_records_range(sample_records):
    service, _ = _build_service(sample_records)

    records = service.find_records({"startDate": "2025-11-08", "endDate": "2025-11-11"})

    assert [record.id for record in records] == ["single-day", "multi-day"]


def test_find_records_forwards_normalised_params(sample_records):
    service, source = _build_service(sample_records)

    service.find_records({"from": "2025-11-08", "to": "2025-11-11", "status": "Clocked_In"})

    assert source.calls == [{"startDate": "2025-11-08", "endDate": "2025-11-11", "status": "clocked-in"}]


def test_find_schedule_groups_multi_day_shifts(sample_records):
    """A multi-day shift is listed under every day it covers."""
    service, _ = _build_service(sample_records)

    schedule = service.find_schedule(
        {"from": "2025-11-06", "to": "2025-11-11"},
        today=pendulum.date(2025, 11, 8),
    )

    assert [day.date.to_date_string() for day in schedule] == [
        "2025-11-07",
        "2025-11-08",
        "2025-11-09",
        "2025-11-10",
    ]
    assert [entry.id for entry in schedule[0].entries] == ["ends-at-midnight", "multi-day"]
    assert [entry.id for entry in schedule[1].entries] == ["multi-day"]
    assert [entry.id for entry in schedule[3].entries] == ["single-day"]


def test_find_schedule_day_flags(sample_records):
    service, _ = _build_service(sample_records)

    schedule = service.find_schedule({"from": "2025-11-07", "to": "2025-11-10"}, today=pendulum.date(2025, 11, 8))
    by_date = {day.date.to_date_string(): day for day in schedule}

    assert by_date["2025-11-07"].is_past
    assert by_date["2025-11-08"].is_today
    assert by_date["2025-11-10"].is_future
    assert by_date["2025-11-07"].day_of_week == "Friday"
    assert by_date["2025-11-07"].status_counts == {"completed": 1, "scheduled": 1}


def test_schedule_hours_are_clipped_to_the_day(sample_records):
    """Hours count only the part of each shift inside the day."""
    schedule = build_schedule(
        sample_records,
        QueryRange.parse("2025-11-07", "2025-11-10"),
        today=pendulum.date(2025, 11, 8),
    )
    hours = {day.date.to_date_string(): day.scheduled_hours() for day in schedule}

    assert hours == {
        "2025-11-07": 33.0,
        "2025-11-08": 24.0,
        "2025-11-09": 21.0,
        "2025-11-10": 8.0,
    }


def test_find_schedule_single_date(sample_records):
    service, _ = _build_service(sample_records)

    schedule = service.find_schedule({"date": "2025-11-08"}, today=pendulum.date(2025, 11, 8))

    assert len(schedule) == 1
    assert [entry.id for entry in schedule[0].entries] == ["multi-day"]


def test_find_schedule_requires_closed_range(sample_records):
    service, _ = _build_service(sample_records)

    with pytest.raises(InvalidQueryError, match="closed range"):
        service.find_schedule({"from": "2025-11-06"})


def test_find_mismatches_reports_out_of_day_records(sample_records):
    """Records a remote endpoint should not have returned are reported."""
    service, _ = _build_service(sample_records)

    mismatches = service.find_mismatches({"date": "2025-11-08"})

    assert [record.id for record in mismatches] == ["ends-at-midnight", "single-day"]


def test_local_policy_schedule(sample_records, local_timezone):
    """Under LOCAL the same records land on different days."""
    local_timezone("Asia/Tokyo")
    service, _ = _build_service(sample_records, policy="local")

    schedule = service.find_schedule({"from": "2025-11-06", "to": "2025-11-11"}, today=pendulum.date(2025, 11, 8))

    assert service.policy is DayWindowPolicy.LOCAL
    assert [day.date.to_date_string() for day in schedule] == [
        "2025-11-07",
        "2025-11-08",
        "2025-11-09",
        "2025-11-10",
        "2025-11-11",
    ]
