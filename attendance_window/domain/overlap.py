"""
Day overlap logic for scheduled intervals.

This is the heart of the application - pure functions without any external
dependencies (no API calls, no database, no I/O). Safe to call concurrently.

Every check here uses the same half-open intersection rule::

    interval.start < window.end and interval.end > window.start

An interval ending exactly at midnight therefore belongs to the earlier day
only. A zero-width window holds no instants, so it overlaps nothing, wherever
it sits.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Iterator, List, Optional, Union

from pendulum import Date

from .dates import parse_date
from .exceptions import InvalidIntervalError
from .models import (
    DayWindow,
    DayWindowPolicy,
    OpenRange,
    QueryRange,
    ScheduledInterval,
    Window,
    policy_timezone,
)

logger = logging.getLogger(__name__)


def _check_interval(interval: ScheduledInterval) -> None:
    # Intervals built through ScheduledInterval are already valid; duck-typed
    # ones are not.
    if not interval.start < interval.end:
        raise InvalidIntervalError(
            f"Scheduled start {interval.start} must be before scheduled end {interval.end}",
            start=interval.start,
            end=interval.end,
        )


def overlaps(interval: ScheduledInterval, window: Window) -> bool:
    """
    Check whether a scheduled interval intersects a window.

    Args:
        interval: Half-open scheduled interval ``[start, end)``
        window: Half-open window ``[start, end)``

    Returns:
        True if the two spans share at least one instant

    Raises:
        InvalidIntervalError: If the interval does not start before it ends
    """
    _check_interval(interval)
    # A zero-width window holds no instants, even inside the interval.
    if window.start == window.end:
        return False
    return interval.start < window.end and interval.end > window.start


def intersection(interval: ScheduledInterval, window: Window) -> Optional[Window]:
    """
    Calculate the part of the interval that falls inside the window.
    Returns None if there is no overlap.
    """
    if not overlaps(interval, window):
        return None

    return Window(start=max(interval.start, window.start), end=min(interval.end, window.end))


def date_range(from_date: date, to_date: date) -> Iterator[Date]:
    """Yield every date from ``from_date`` to ``to_date`` inclusive."""
    if from_date > to_date:
        return
    yield from QueryRange(from_date=parse_date(from_date), to_date=parse_date(to_date)).days()


class DaysOverlapped:
    """
    Lazy, restartable sequence of the candidate days an interval overlaps.

    Each iteration walks the candidates again, in their original order, and
    builds the day window for each one under the chosen policy.
    """

    def __init__(
        self,
        interval: ScheduledInterval,
        days: Union[Iterable[date], QueryRange],
        policy: DayWindowPolicy = DayWindowPolicy.UTC,
    ):
        _check_interval(interval)
        self.interval = interval
        self.policy = DayWindowPolicy.parse(policy)
        # Generators can only be walked once, so keep the candidates around.
        if isinstance(days, QueryRange):
            self._candidates = days
        else:
            self._candidates = tuple(days)

    def _candidate_days(self) -> Iterable[date]:
        if isinstance(self._candidates, QueryRange):
            return self._candidates.days()
        return self._candidates

    def __iter__(self) -> Iterator[Date]:
        for day in self._candidate_days():
            window = DayWindow.for_date(day, self.policy)
            if overlaps(self.interval, window):
                yield window.day

    def __contains__(self, day: object) -> bool:
        return any(candidate == day for candidate in self)

    def __repr__(self) -> str:
        return f"DaysOverlapped({self.interval}, policy={self.policy.value})"


def days_overlapped(
    interval: ScheduledInterval,
    days: Union[Iterable[date], QueryRange],
    policy: DayWindowPolicy = DayWindowPolicy.UTC,
) -> DaysOverlapped:
    """
    Select the candidate days whose day window the interval overlaps.

    Args:
        interval: Scheduled interval to test
        days: Ascending candidate dates, or a QueryRange to enumerate
        policy: Day-boundary policy (UTC unless LOCAL is explicitly wanted)

    Returns:
        A lazy sequence that can be iterated any number of times
    """
    return DaysOverlapped(interval, days, policy)


def overlaps_range(
    interval: ScheduledInterval,
    query_range: Union[QueryRange, OpenRange],
    policy: DayWindowPolicy = DayWindowPolicy.UTC,
) -> bool:
    """
    Single-pass test of an interval against a whole range of days.

    For a closed range this is ``overlaps`` against the merged window. For an
    open range only the bounded side is tested.
    """
    if isinstance(query_range, QueryRange):
        return overlaps(interval, query_range.window(policy))

    _check_interval(interval)
    range_start, range_end = query_range.bounds(policy)
    if range_end is not None and not interval.start < range_end:
        return False
    if range_start is not None and not interval.end > range_start:
        return False
    return True


def interval_days(
    interval: ScheduledInterval,
    policy: DayWindowPolicy = DayWindowPolicy.UTC,
) -> List[Date]:
    """
    List every calendar day the interval touches under the given policy.

    The end instant is excluded, so an interval ending at midnight does not
    list the following day.
    """
    _check_interval(interval)
    policy = DayWindowPolicy.parse(policy)
    tz = policy_timezone(policy)
    first = interval.start.in_timezone(tz).date()
    last = interval.end.in_timezone(tz).subtract(microseconds=1).date()

    days = list(days_overlapped(interval, QueryRange(from_date=first, to_date=last), policy))
    logger.debug("Interval %s touches %d day(s) under %s policy", interval, len(days), policy.value)
    return days
