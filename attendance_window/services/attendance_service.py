"""
Application services for attendance day queries.

The service coordinates fetching records via a record source adapter and
delegates the day-overlap decisions to the domain layer. This keeps the CLI
thin and lets tests swap in a stub source via a simple protocol.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Protocol

from pendulum import Date

from ..domain.exceptions import InvalidQueryError
from ..domain.models import AttendanceRecord, DayWindowPolicy, QueryRange
from .attendance_query import AttendanceQuery
from .schedule import ScheduleDay, build_schedule

logger = logging.getLogger(__name__)


class RecordSourceProtocol(Protocol):
    """Protocol describing the record source behaviour needed by the service."""

    def fetch_records(self, params: Optional[Mapping[str, str]] = None) -> List[AttendanceRecord]:
        """Return attendance records, optionally narrowed by query parameters."""


class AttendanceService:
    """
    Orchestrates record retrieval and day-overlap filtering.

    Records are always re-checked locally, so a source that filters too
    loosely (or not at all) still yields exact results.
    """

    def __init__(
        self,
        record_source: RecordSourceProtocol,
        policy: DayWindowPolicy = DayWindowPolicy.UTC,
    ) -> None:
        self._record_source = record_source
        self._policy = DayWindowPolicy.parse(policy)

    @property
    def policy(self) -> DayWindowPolicy:
        return self._policy

    def build_query(self, params: Mapping[str, Any]) -> AttendanceQuery:
        return AttendanceQuery.from_params(params, policy=self._policy)

    def fetch(self, query: AttendanceQuery) -> List[AttendanceRecord]:
        """Fetch the raw records the source returns for a query."""
        records = self._record_source.fetch_records(query.to_params())
        logger.debug("Record source returned %d record(s) for %s", len(records), query.describe())
        return records

    def find_records(self, params: Mapping[str, Any]) -> List[AttendanceRecord]:
        """Return the records matching the query, latest scheduled start first."""
        query = self.build_query(params)
        return query.apply(self.fetch(query))

    def find_schedule(
        self,
        params: Mapping[str, Any],
        today: Optional[Date] = None,
    ) -> List[ScheduleDay]:
        """
        Lay out matching records per day.

        Raises:
            InvalidQueryError: If the query has no closed date range
        """
        query = self.build_query(params)
        if not isinstance(query.query_range, QueryRange):
            raise InvalidQueryError(
                "A schedule needs a closed range: pass 'date', 'from'/'to' or 'startDate'/'endDate'",
                parameter="from",
            )

        records = query.apply(self.fetch(query), descending=False)
        return build_schedule(records, query.query_range, self._policy, today=today)

    def find_mismatches(self, params: Mapping[str, Any]) -> List[AttendanceRecord]:
        """
        Return records the source returned that the query does not match.

        Used to verify that a remote endpoint applies the same day-overlap
        rule as this package.
        """
        query = self.build_query(params)
        mismatches = [record for record in self.fetch(query) if not query.matches(record)]
        if mismatches:
            logger.warning(
                "%d record(s) returned for %s do not overlap the queried days",
                len(mismatches),
                query.describe(),
            )
        return mismatches
