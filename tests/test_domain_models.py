"""
Tests for domain models.
"""

from datetime import date, datetime

import pendulum
import pytest

from attendance_window.domain.dates import parse_date, parse_instant
from attendance_window.domain.exceptions import InvalidDateError, InvalidIntervalError
from attendance_window.domain.models import (
    AttendanceRecord,
    DayWindow,
    DayWindowPolicy,
    OpenRange,
    QueryRange,
    ScheduledInterval,
    Window,
)


class TestScheduledInterval:
    """Tests for ScheduledInterval model."""

    def test_create_valid_interval(self):
        """Test creating a valid scheduled interval."""
        start = pendulum.parse("2025-11-07T09:00:00Z")
        end = pendulum.parse("2025-11-07T17:00:00Z")

        interval = ScheduledInterval(start=start, end=end)

        assert interval.start == start
        assert interval.end == end
        assert interval.duration_hours() == 8

    def test_end_before_start_raises_error(self):
        """A record scheduled to end before it starts is rejected."""
        with pytest.raises(InvalidIntervalError, match="must be before scheduled end"):
            ScheduledInterval.parse("2025-11-09T00:00:00Z", "2025-11-07T00:00:00Z")

    def test_zero_length_interval_raises_error(self):
        """Test that a zero-length interval is invalid."""
        with pytest.raises(InvalidIntervalError):
            ScheduledInterval.parse("2025-11-07T09:00:00Z", "2025-11-07T09:00:00Z")

    def test_error_carries_bounds(self):
        """The error exposes the offending bounds and maps to HTTP 400."""
        with pytest.raises(InvalidIntervalError) as exc_info:
            ScheduledInterval.parse("2025-11-09T00:00:00Z", "2025-11-07T00:00:00Z")

        assert exc_info.value.start == pendulum.parse("2025-11-09T00:00:00Z")
        assert exc_info.value.end == pendulum.parse("2025-11-07T00:00:00Z")
        assert exc_info.value.status_code == 400

    def test_naive_datetime_rejected(self):
        """Instants without an offset are ambiguous and rejected."""
        with pytest.raises(InvalidIntervalError, match="no UTC offset"):
            ScheduledInterval.parse(datetime(2025, 11, 7, 9), datetime(2025, 11, 7, 17))

    def test_parse_accepts_offsets(self):
        """Offsets other than UTC describe the same instant."""
        interval = ScheduledInterval.parse("2025-11-07T20:30:00+05:30", "2025-11-08T02:00:00+05:30")

        assert interval.start == pendulum.parse("2025-11-07T15:00:00Z")


class TestDayWindow:
    """Tests for DayWindow construction."""

    def test_utc_day_spans_24_hours(self):
        """Test UTC day boundaries."""
        window = DayWindow.for_date(pendulum.date(2025, 11, 8), DayWindowPolicy.UTC)

        assert window.day == pendulum.date(2025, 11, 8)
        assert window.start == pendulum.parse("2025-11-08T00:00:00Z")
        assert window.end == pendulum.parse("2025-11-09T00:00:00Z")

    def test_accepts_date_string(self):
        """Test that a YYYY-MM-DD string is accepted as the day."""
        window = DayWindow.for_date("2025-11-08")

        assert window.start == pendulum.parse("2025-11-08T00:00:00Z")

    def test_local_day_uses_local_midnight(self, local_timezone):
        """LOCAL day boundaries follow the process timezone."""
        local_timezone("Asia/Tokyo")

        window = DayWindow.for_date(pendulum.date(2025, 11, 8), DayWindowPolicy.LOCAL)

        assert window.start == pendulum.parse("2025-11-07T15:00:00Z")
        assert window.end == pendulum.parse("2025-11-08T15:00:00Z")

    def test_local_day_on_dst_change_is_25_hours(self, local_timezone):
        """The day clocks fall back runs from local midnight to local midnight."""
        local_timezone("America/New_York")

        window = DayWindow.for_date(pendulum.date(2025, 11, 2), DayWindowPolicy.LOCAL)

        assert window.start == pendulum.parse("2025-11-02T04:00:00Z")
        assert window.end == pendulum.parse("2025-11-03T05:00:00Z")

    def test_policy_parse_is_case_insensitive(self):
        """Test policy names."""
        assert DayWindowPolicy.parse("UTC") is DayWindowPolicy.UTC
        assert DayWindowPolicy.parse(" local ") is DayWindowPolicy.LOCAL

        with pytest.raises(ValueError, match="Unknown day window policy"):
            DayWindowPolicy.parse("berlin")


class TestWindow:
    """Tests for the generic Window model."""

    def test_zero_width_window_allowed(self):
        """A zero-width window is legal."""
        instant = pendulum.parse("2025-11-08T00:00:00Z")

        assert Window(start=instant, end=instant).is_empty()

    def test_inverted_window_raises_error(self):
        """Test that a window ending before it starts is invalid."""
        with pytest.raises(InvalidIntervalError):
            Window(start=pendulum.parse("2025-11-09T00:00:00Z"), end=pendulum.parse("2025-11-08T00:00:00Z"))


class TestQueryRange:
    """Tests for QueryRange model."""

    def test_days_are_inclusive_and_ascending(self):
        """Test day enumeration."""
        query_range = QueryRange.parse("2025-11-06", "2025-11-08")

        assert list(query_range.days()) == [
            pendulum.date(2025, 11, 6),
            pendulum.date(2025, 11, 7),
            pendulum.date(2025, 11, 8),
        ]
        assert query_range.day_count() == 3

    def test_merged_window(self):
        """The merged window runs from the first day's start to the last day's end."""
        window = QueryRange.parse("2025-11-08", "2025-11-11").window(DayWindowPolicy.UTC)

        assert window.start == pendulum.parse("2025-11-08T00:00:00Z")
        assert window.end == pendulum.parse("2025-11-12T00:00:00Z")

    def test_single_day(self):
        """Test single-day range."""
        query_range = QueryRange.single("2025-11-08")

        assert query_range.from_date == query_range.to_date == pendulum.date(2025, 11, 8)
        assert str(query_range) == "2025-11-08"

    def test_inverted_range_raises_error(self):
        """Test that from after to is rejected."""
        with pytest.raises(InvalidDateError, match="is after range end"):
            QueryRange.parse("2025-11-11", "2025-11-08")

    def test_invalid_date_names_parameter(self):
        """Test that parse errors point at the parameter."""
        with pytest.raises(InvalidDateError) as exc_info:
            QueryRange.parse("2025-11-08", "2025-11-31", to_parameter="endDate")

        assert exc_info.value.parameter == "endDate"
        assert exc_info.value.value == "2025-11-31"

    def test_widen(self):
        """Test widening by one day on each side."""
        widened = QueryRange.parse("2025-11-08", "2025-11-09").widen()

        assert widened.from_date == pendulum.date(2025, 11, 7)
        assert widened.to_date == pendulum.date(2025, 11, 10)

    def test_plain_dates_are_normalised(self):
        """Test that datetime.date bounds behave like pendulum dates."""
        query_range = QueryRange(from_date=date(2025, 11, 6), to_date=date(2025, 11, 8))

        assert isinstance(query_range.from_date, pendulum.Date)
        assert list(query_range.days())[-1] == pendulum.date(2025, 11, 8)
        assert query_range.day_count() == 3
        assert query_range.widen().from_date == pendulum.date(2025, 11, 5)
        assert str(query_range) == "2025-11-06 .. 2025-11-08"


class TestOpenRange:
    """Tests for OpenRange model."""

    def test_from_only(self):
        """Only the start side is bounded."""
        start, end = OpenRange(from_date=pendulum.date(2025, 11, 8)).bounds()

        assert start == pendulum.parse("2025-11-08T00:00:00Z")
        assert end is None

    def test_to_only(self):
        """Only the end side is bounded, at the end of the day."""
        start, end = OpenRange(to_date=pendulum.date(2025, 11, 8)).bounds()

        assert start is None
        assert end == pendulum.parse("2025-11-09T00:00:00Z")


class TestParseDate:
    """Tests for calendar date parsing."""

    def test_valid_date(self):
        assert parse_date("2025-11-08") == pendulum.date(2025, 11, 8)

    @pytest.mark.parametrize("value", ["", "2025-11-8", "08/11/2025", "2025-02-30", "2025-11-08T10:00:00Z", "tomorrow"])
    def test_invalid_dates(self, value):
        """Test that malformed and impossible dates are rejected."""
        with pytest.raises(InvalidDateError):
            parse_date(value, parameter="date")

    def test_datetime_rejected(self):
        """A datetime is not a calendar date."""
        with pytest.raises(InvalidDateError):
            parse_date(pendulum.datetime(2025, 11, 8, 10))

    def test_parse_instant_without_offset_is_utc(self):
        """Store timestamps without an offset are read as UTC."""
        assert parse_instant("2025-11-07T15:00:00") == pendulum.parse("2025-11-07T15:00:00Z")

    def test_parse_instant_garbage(self):
        with pytest.raises(InvalidIntervalError):
            parse_instant("not a timestamp")


class TestAttendanceRecord:
    """Tests for AttendanceRecord.from_document."""

    def test_from_populated_document(self):
        """Populated references and name parts are read."""
        record = AttendanceRecord.from_document({
            "_id": "690e1328332325b86dcc3dee",
            "worker": {"_id": "w1", "firstName": "Maya", "lastName": "Lopez"},
            "job": {"_id": "j1", "title": "Warehouse Night Shift"},
            "business": "b1",
            "scheduledStart": "2025-11-07T15:00:00.000Z",
            "scheduledEnd": "2025-11-09T21:00:00.000Z",
            "status": "scheduled",
        })

        assert record.id == "690e1328332325b86dcc3dee"
        assert record.worker_id == "w1"
        assert record.job_id == "j1"
        assert record.business_id == "b1"
        assert record.worker_name == "Maya Lopez"
        assert record.job_title == "Warehouse Night Shift"
        assert record.scheduled_start == pendulum.parse("2025-11-07T15:00:00Z")

    def test_snapshots_win(self):
        """Name snapshots take precedence over populated documents."""
        record = AttendanceRecord.from_document({
            "id": "r2",
            "worker": {"_id": "w1", "fullName": "Someone Else"},
            "workerNameSnapshot": "Sam Okafor",
            "jobTitleSnapshot": "Front Desk",
            "scheduledStart": "2025-11-07T09:00:00Z",
            "scheduledEnd": "2025-11-07T17:00:00Z",
        })

        assert record.worker_name == "Sam Okafor"
        assert record.job_title == "Front Desk"
        assert record.status == "scheduled"

    def test_missing_schedule_raises_error(self):
        with pytest.raises(InvalidIntervalError, match="no scheduledStart"):
            AttendanceRecord.from_document({"_id": "r3", "scheduledStart": "2025-11-07T09:00:00Z"})

    def test_to_summary(self):
        """Test the flat summary view."""
        record = AttendanceRecord.from_document({
            "_id": "r4",
            "worker": {"_id": "w9", "email": "worker@example.com"},
            "scheduledStart": "2025-11-07T09:00:00Z",
            "scheduledEnd": "2025-11-07T17:00:00Z",
            "status": "completed",
        })

        summary = record.to_summary()

        assert summary["worker"] == "worker@example.com"
        assert summary["scheduledStart"] == "2025-11-07T09:00:00Z"
        assert summary["status"] == "completed"
