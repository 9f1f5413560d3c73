"""
Domain models for scheduled intervals, day windows and query ranges.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

import pendulum
from pendulum import Date, DateTime

from .dates import parse_date, parse_instant
from .exceptions import InvalidDateError, InvalidIntervalError


class DayWindowPolicy(str, Enum):
    """How calendar-day boundaries are placed on the timeline."""

    UTC = "utc"
    LOCAL = "local"

    @classmethod
    def parse(cls, value: "str | DayWindowPolicy") -> "DayWindowPolicy":
        """Resolve a policy from its (case-insensitive) name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            choices = ", ".join(policy.value for policy in cls)
            raise ValueError(f"Unknown day window policy '{value}', expected one of: {choices}") from exc


def policy_timezone(policy: "str | DayWindowPolicy"):
    """The timezone whose midnights delimit calendar days under a policy."""
    if DayWindowPolicy.parse(policy) is DayWindowPolicy.UTC:
        return pendulum.UTC
    return pendulum.local_timezone()


def _require_aware(value: DateTime, label: str) -> None:
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidIntervalError(f"{label} {value} has no UTC offset")


@dataclass(frozen=True)
class ScheduledInterval:
    """
    The scheduled span of one attendance/job record.

    Half-open: includes ``start``, excludes ``end``.
    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        _require_aware(self.start, "Scheduled start")
        _require_aware(self.end, "Scheduled end")
        if self.start >= self.end:
            raise InvalidIntervalError(
                f"Scheduled start {self.start} must be before scheduled end {self.end}",
                start=self.start,
                end=self.end,
            )

    @classmethod
    def parse(cls, start: Any, end: Any) -> "ScheduledInterval":
        """Build an interval from ISO-8601 strings or aware datetimes."""
        return cls(start=parse_instant(start), end=parse_instant(end))

    def duration_hours(self) -> float:
        """Return the duration in hours."""
        return (self.end - self.start).total_seconds() / 3600

    def __str__(self) -> str:
        return f"{self.start.to_iso8601_string()} - {self.end.to_iso8601_string()}"


@dataclass(frozen=True)
class Window:
    """
    A half-open span of time ``[start, end)``.

    A zero-width window (start == end) is allowed and overlaps nothing.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start > self.end:
            raise InvalidIntervalError(
                f"Window start {self.start} is after window end {self.end}",
                start=self.start,
                end=self.end,
            )

    def is_empty(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True)
class DayWindow(Window):
    """The half-open span of a single calendar day under a given policy."""
    day: Date

    @classmethod
    def for_date(cls, day: date, policy: DayWindowPolicy = DayWindowPolicy.UTC) -> "DayWindow":
        """
        Build the window of a calendar day.

        UTC days always span exactly 24 hours. LOCAL days run from local
        midnight to the next local midnight, so they are 23 or 25 hours
        long on DST transition days.
        """
        day = parse_date(day)
        policy = DayWindowPolicy.parse(policy)

        if policy is DayWindowPolicy.UTC:
            start = pendulum.datetime(day.year, day.month, day.day, tz="UTC")
            return cls(start=start, end=start.add(hours=24), day=day)

        tz = policy_timezone(policy)
        following = day.add(days=1)
        start = pendulum.datetime(day.year, day.month, day.day, tz=tz)
        end = pendulum.datetime(following.year, following.month, following.day, tz=tz)
        return cls(start=start, end=end, day=day)

    def __str__(self) -> str:
        return f"{self.day.to_date_string()} [{self.start.to_iso8601_string()}, {self.end.to_iso8601_string()})"


Bounds = Tuple[Optional[DateTime], Optional[DateTime]]


@dataclass(frozen=True)
class QueryRange:
    """
    An inclusive pair of calendar dates.

    Invariant: from_date must not be after to_date.
    """
    from_date: Date
    to_date: Date

    def __post_init__(self):
        # Plain datetime.date values become pendulum Dates (frozen, hence setattr)
        object.__setattr__(self, "from_date", parse_date(self.from_date))
        object.__setattr__(self, "to_date", parse_date(self.to_date))
        if self.from_date > self.to_date:
            raise InvalidDateError(
                f"Range start {self.from_date} is after range end {self.to_date}",
                value=(self.from_date, self.to_date),
            )

    @classmethod
    def single(cls, day: Any, parameter: Optional[str] = None) -> "QueryRange":
        """A range covering exactly one calendar date."""
        parsed = parse_date(day, parameter=parameter)
        return cls(from_date=parsed, to_date=parsed)

    @classmethod
    def parse(
        cls,
        from_value: Any,
        to_value: Any,
        from_parameter: str = "from",
        to_parameter: str = "to",
    ) -> "QueryRange":
        """Parse both ends of a range, attributing errors to their parameter."""
        return cls(
            from_date=parse_date(from_value, parameter=from_parameter),
            to_date=parse_date(to_value, parameter=to_parameter),
        )

    def days(self) -> Iterator[Date]:
        """Every date in the range, ascending."""
        current = self.from_date
        while current <= self.to_date:
            yield current
            current = current.add(days=1)

    def day_count(self) -> int:
        return (self.to_date - self.from_date).in_days() + 1

    def window(self, policy: DayWindowPolicy = DayWindowPolicy.UTC) -> Window:
        """The merged window from the first day's start to the last day's end."""
        first = DayWindow.for_date(self.from_date, policy)
        last = DayWindow.for_date(self.to_date, policy)
        return Window(start=first.start, end=last.end)

    def bounds(self, policy: DayWindowPolicy = DayWindowPolicy.UTC) -> Bounds:
        window = self.window(policy)
        return window.start, window.end

    def widen(self, days: int = 1) -> "QueryRange":
        """Grow the range by ``days`` on both sides."""
        return QueryRange(
            from_date=self.from_date.subtract(days=days),
            to_date=self.to_date.add(days=days),
        )

    def __str__(self) -> str:
        if self.from_date == self.to_date:
            return self.from_date.to_date_string()
        return f"{self.from_date.to_date_string()} .. {self.to_date.to_date_string()}"


@dataclass(frozen=True)
class OpenRange:
    """
    A range bounded on at most one side.

    Only ``from_date`` set: everything from that day on.
    Only ``to_date`` set: everything up to the end of that day.
    Neither set: unbounded.
    """
    from_date: Optional[Date] = None
    to_date: Optional[Date] = None

    def __post_init__(self):
        if self.from_date is not None and self.to_date is not None:
            raise ValueError("OpenRange with both bounds set; use QueryRange instead")
        if self.from_date is not None:
            object.__setattr__(self, "from_date", parse_date(self.from_date))
        if self.to_date is not None:
            object.__setattr__(self, "to_date", parse_date(self.to_date))

    def bounds(self, policy: DayWindowPolicy = DayWindowPolicy.UTC) -> Bounds:
        start = DayWindow.for_date(self.from_date, policy).start if self.from_date else None
        end = DayWindow.for_date(self.to_date, policy).end if self.to_date else None
        return start, end

    def __str__(self) -> str:
        if self.from_date:
            return f"{self.from_date.to_date_string()} .."
        if self.to_date:
            return f".. {self.to_date.to_date_string()}"
        return "(any date)"


def _reference_id(value: Any) -> Optional[str]:
    """Read an id from a plain reference or a populated sub-document."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        ref = value.get("_id") or value.get("id")
        return str(ref) if ref is not None else None
    return str(value)


def _worker_name(document: Mapping[str, Any]) -> str:
    snapshot = document.get("workerNameSnapshot")
    if snapshot:
        return snapshot

    worker = document.get("worker")
    if not isinstance(worker, Mapping):
        return "Unknown Worker"
    if worker.get("fullName"):
        return worker["fullName"]
    parts = [part for part in (worker.get("firstName"), worker.get("lastName")) if part]
    if parts:
        return " ".join(parts)
    return worker.get("email") or "Unknown Worker"


def _job_title(document: Mapping[str, Any]) -> Optional[str]:
    snapshot = document.get("jobTitleSnapshot")
    if snapshot:
        return snapshot
    job = document.get("job")
    if isinstance(job, Mapping):
        return job.get("title")
    return None


@dataclass(frozen=True)
class AttendanceRecord:
    """
    A persisted attendance/job record, reduced to what day queries need.
    """
    id: str
    interval: ScheduledInterval
    status: str = "scheduled"
    worker_id: Optional[str] = None
    job_id: Optional[str] = None
    business_id: Optional[str] = None
    worker_name: str = "Unknown Worker"
    job_title: Optional[str] = None

    @property
    def scheduled_start(self) -> DateTime:
        return self.interval.start

    @property
    def scheduled_end(self) -> DateTime:
        return self.interval.end

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "AttendanceRecord":
        """
        Build a record from the attendance API / store JSON shape.

        Raises:
            InvalidIntervalError: If the scheduled timestamps are missing,
                malformed or out of order
        """
        record_id = document.get("_id") or document.get("id")
        if "scheduledStart" not in document or "scheduledEnd" not in document:
            raise InvalidIntervalError(f"Record {record_id} has no scheduledStart/scheduledEnd")

        interval = ScheduledInterval.parse(document["scheduledStart"], document["scheduledEnd"])

        return cls(
            id=str(record_id) if record_id is not None else "",
            interval=interval,
            status=str(document.get("status") or "scheduled"),
            worker_id=_reference_id(document.get("worker")),
            job_id=_reference_id(document.get("job")),
            business_id=_reference_id(document.get("business")),
            worker_name=_worker_name(document),
            job_title=_job_title(document),
        )

    def to_summary(self) -> Dict[str, Any]:
        """A flat, JSON-friendly view of the record."""
        return {
            "id": self.id,
            "status": self.status,
            "worker": self.worker_name,
            "job": self.job_title,
            "scheduledStart": self.scheduled_start.in_timezone("UTC").to_iso8601_string(),
            "scheduledEnd": self.scheduled_end.in_timezone("UTC").to_iso8601_string(),
        }
