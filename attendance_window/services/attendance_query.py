"""
Attendance query construction.

Turns the ``date`` / ``startDate``+``endDate`` / ``from``+``to`` request
parameters accepted by the attendance endpoints into a day range, and
expresses the day-overlap rule twice: as a storage-layer filter document and
as an in-memory predicate. Both must agree exactly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..domain.dates import parse_date
from ..domain.exceptions import InvalidQueryError
from ..domain.models import (
    AttendanceRecord,
    Bounds,
    DayWindowPolicy,
    OpenRange,
    QueryRange,
    Window,
)

logger = logging.getLogger(__name__)

STATUSES = ("scheduled", "clocked-in", "completed", "missed")

RANGE_PARAMETER_FAMILIES: Tuple[Tuple[str, str], ...] = (
    ("startDate", "endDate"),
    ("from", "to"),
)


def _param(params: Mapping[str, Any], name: str) -> Optional[str]:
    """Read a parameter, treating blanks as absent."""
    value = params.get(name)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def normalize_status(value: Optional[str]) -> Optional[str]:
    """
    Normalise a status filter value.

    ``clocked_in`` and ``Clocked-In`` both become ``clocked-in``; ``all`` (or
    nothing) means no status filter.

    Raises:
        InvalidQueryError: If the status is not a known attendance status
    """
    if value is None:
        return None
    normalized = str(value).strip().lower().replace("_", "-")
    if not normalized or normalized == "all":
        return None
    if normalized not in STATUSES:
        raise InvalidQueryError(
            f"Unknown status '{value}'. Expected one of: all, {', '.join(STATUSES)}",
            parameter="status",
        )
    return normalized


def _resolve_range(params: Mapping[str, Any]) -> Union[QueryRange, OpenRange, None]:
    day = _param(params, "date")
    if day is not None:
        # A single date wins over any range parameters.
        return QueryRange.single(day, parameter="date")

    present = [
        (from_name, to_name)
        for from_name, to_name in RANGE_PARAMETER_FAMILIES
        if _param(params, from_name) is not None or _param(params, to_name) is not None
    ]
    if not present:
        return None
    if len(present) > 1:
        names = " and ".join(f"{a}/{b}" for a, b in present)
        raise InvalidQueryError(f"Conflicting range parameters: {names}", parameter=present[1][0])

    from_name, to_name = present[0]
    from_value = _param(params, from_name)
    to_value = _param(params, to_name)

    if from_value is not None and to_value is not None:
        return QueryRange.parse(from_value, to_value, from_parameter=from_name, to_parameter=to_name)
    if from_value is not None:
        return OpenRange(from_date=parse_date(from_value, parameter=from_name))
    return OpenRange(to_date=parse_date(to_value, parameter=to_name))


@dataclass(frozen=True)
class AttendanceQuery:
    """
    A resolved attendance query: a day range plus equality filters.
    """
    query_range: Union[QueryRange, OpenRange, None] = None
    policy: DayWindowPolicy = DayWindowPolicy.UTC
    status: Optional[str] = None
    worker_id: Optional[str] = None
    job_id: Optional[str] = None
    business_id: Optional[str] = None

    @classmethod
    def from_params(
        cls,
        params: Mapping[str, Any],
        policy: DayWindowPolicy = DayWindowPolicy.UTC,
    ) -> "AttendanceQuery":
        """
        Resolve request query parameters.

        Args:
            params: Mapping with any of ``date``, ``startDate``/``endDate``,
                ``from``/``to``, ``status``, ``workerId``, ``jobId``,
                ``businessId``
            policy: Day-boundary policy

        Raises:
            InvalidDateError: If a date parameter is malformed or the range
                is inverted
            InvalidQueryError: If range parameter families are mixed or the
                status is unknown
        """
        query = cls(
            query_range=_resolve_range(params),
            policy=DayWindowPolicy.parse(policy),
            status=normalize_status(_param(params, "status")),
            worker_id=_param(params, "workerId"),
            job_id=_param(params, "jobId"),
            business_id=_param(params, "businessId"),
        )
        logger.debug("Resolved attendance query: %s", query.describe())
        return query

    def bounds(self) -> Bounds:
        """``(range_start, range_end)``; either side is None when unbounded."""
        if self.query_range is None:
            return None, None
        return self.query_range.bounds(self.policy)

    def window(self) -> Optional[Window]:
        """The merged window of a closed range, otherwise None."""
        if isinstance(self.query_range, QueryRange):
            return self.query_range.window(self.policy)
        return None

    def build_filter(self) -> Dict[str, Any]:
        """
        Build the storage-layer filter document.

        The overlap terms are ``scheduledStart < rangeEnd`` and
        ``scheduledEnd > rangeStart``, the half-open rule of
        :func:`~attendance_window.domain.overlap.overlaps`.
        """
        range_start, range_end = self.bounds()
        filter_doc: Dict[str, Any] = {}

        if range_end is not None:
            filter_doc["scheduledStart"] = {"$lt": range_end.in_timezone("UTC")}
        if range_start is not None:
            filter_doc["scheduledEnd"] = {"$gt": range_start.in_timezone("UTC")}
        if self.status:
            filter_doc["status"] = self.status
        if self.worker_id:
            filter_doc["worker"] = self.worker_id
        if self.job_id:
            filter_doc["job"] = self.job_id
        if self.business_id:
            filter_doc["business"] = self.business_id

        return filter_doc

    def matches(self, record: AttendanceRecord) -> bool:
        """Evaluate the filter document against one record in memory."""
        range_start, range_end = self.bounds()

        if range_end is not None and not record.scheduled_start < range_end:
            return False
        if range_start is not None and not record.scheduled_end > range_start:
            return False
        if self.status and record.status != self.status:
            return False
        if self.worker_id and record.worker_id != self.worker_id:
            return False
        if self.job_id and record.job_id != self.job_id:
            return False
        if self.business_id and record.business_id != self.business_id:
            return False
        return True

    def apply(
        self,
        records: Iterable[AttendanceRecord],
        descending: bool = True,
    ) -> List[AttendanceRecord]:
        """Filter records and sort them by scheduled start."""
        matched = [record for record in records if self.matches(record)]
        return sorted(matched, key=lambda record: record.scheduled_start, reverse=descending)

    def to_params(self) -> Dict[str, str]:
        """Serialise back into ``date`` or ``startDate``/``endDate`` request parameters."""
        params: Dict[str, str] = {}
        if isinstance(self.query_range, QueryRange):
            if self.query_range.from_date == self.query_range.to_date:
                params["date"] = self.query_range.from_date.to_date_string()
            else:
                params["startDate"] = self.query_range.from_date.to_date_string()
                params["endDate"] = self.query_range.to_date.to_date_string()
        elif isinstance(self.query_range, OpenRange):
            if self.query_range.from_date:
                params["startDate"] = self.query_range.from_date.to_date_string()
            if self.query_range.to_date:
                params["endDate"] = self.query_range.to_date.to_date_string()
        if self.status:
            params["status"] = self.status
        if self.worker_id:
            params["workerId"] = self.worker_id
        if self.job_id:
            params["jobId"] = self.job_id
        if self.business_id:
            params["businessId"] = self.business_id
        return params

    def describe(self) -> str:
        parts = [str(self.query_range) if self.query_range else "(any date)", f"policy={self.policy.value}"]
        if self.status:
            parts.append(f"status={self.status}")
        return ", ".join(parts)
