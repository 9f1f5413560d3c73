"""
Per-day grouping of attendance records for the worker schedule view.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

import pendulum
from pendulum import Date

from ..domain.models import AttendanceRecord, DayWindow, DayWindowPolicy, QueryRange, policy_timezone
from ..domain.overlap import days_overlapped, intersection


@dataclass
class ScheduleDay:
    """
    All records active on one calendar day.
    """
    date: Date
    window: DayWindow
    entries: List[AttendanceRecord] = field(default_factory=list)
    is_past: bool = False
    is_today: bool = False
    is_future: bool = False

    @property
    def day_of_week(self) -> str:
        return self.date.format("dddd")

    @property
    def status_counts(self) -> Dict[str, int]:
        return dict(Counter(entry.status for entry in self.entries))

    def scheduled_hours(self) -> float:
        """Hours of scheduled work that fall inside this day (multi-day shifts are clipped)."""
        total = 0.0
        for entry in self.entries:
            part = intersection(entry.interval, self.window)
            if part is not None:
                total += (part.end.in_timezone("UTC") - part.start.in_timezone("UTC")).total_seconds() / 3600
        return round(total, 2)


def build_schedule(
    records: Iterable[AttendanceRecord],
    query_range: QueryRange,
    policy: DayWindowPolicy = DayWindowPolicy.UTC,
    today: Optional[date] = None,
) -> List[ScheduleDay]:
    """
    Group records under every day of the range they overlap.

    A shift spanning several days is listed on each of them. Days without
    any records are left out.

    Args:
        records: Attendance records to group
        query_range: Inclusive day range to lay out
        policy: Day-boundary policy
        today: Reference day for past/future flags (defaults to now)

    Returns:
        Schedule days in ascending date order
    """
    policy = DayWindowPolicy.parse(policy)
    if today is None:
        today = pendulum.now(policy_timezone(policy)).date()

    grouped: Dict[Date, ScheduleDay] = {}

    for record in sorted(records, key=lambda r: r.scheduled_start):
        for day in days_overlapped(record.interval, query_range, policy):
            if day not in grouped:
                grouped[day] = ScheduleDay(
                    date=day,
                    window=DayWindow.for_date(day, policy),
                    is_past=day < today,
                    is_today=day == today,
                    is_future=day > today,
                )
            grouped[day].entries.append(record)

    return [grouped[day] for day in sorted(grouped)]
