from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceStore
from ..common.datetime_utils import month_key, month_window, months_between
from ..core.exceptions import LoadError, ValidationError
from .aggregator import StatisticsSnapshot, aggregate
from .scope import Scope, record_filters

logger = logging.getLogger(__name__)

UNKNOWN_COURSE = "Unknown course"


@dataclass(frozen=True)
class CourseStatistics:
    course_id: int
    course_name: str
    snapshot: StatisticsSnapshot


@dataclass(frozen=True)
class CourseBreakdown:
    overall: StatisticsSnapshot
    by_course: list[CourseStatistics]


class StatisticsService:
    """Read-only attendance reporting over the store."""

    def __init__(self, store: AttendanceStore):
        self._store = store

    async def _fetch(self, **filters) -> list[AttendanceRecord]:
        try:
            return list(await self._store.query_records(**filters))
        except Exception as exc:
            logger.warning("Statistics query failed (%s): %s", filters, exc)
            raise LoadError("Could not load attendance records") from exc

    async def snapshot(self, scope: Scope) -> StatisticsSnapshot:
        records = await self._fetch(**record_filters(scope))
        return aggregate(records)

    async def course_breakdown(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> CourseBreakdown:
        records = await self._fetch(start=start, end=end)

        grouped: dict[int, list[AttendanceRecord]] = defaultdict(list)
        names: dict[int, str] = {}
        for r in records:
            if r.course_id is None:
                continue
            grouped[r.course_id].append(r)
            names.setdefault(r.course_id, r.course_name or UNKNOWN_COURSE)

        by_course = [
            CourseStatistics(course_id=cid, course_name=names[cid], snapshot=aggregate(rows))
            for cid, rows in sorted(grouped.items())
        ]
        return CourseBreakdown(overall=aggregate(records), by_course=by_course)

    async def monthly_breakdown(
        self,
        *,
        student_id: int,
        start_month: str,
        end_month: str,
    ) -> dict[str, StatisticsSnapshot]:
        months = months_between(start_month, end_month)
        if not months:
            raise ValidationError("Month range is reversed")

        records = await self._fetch(
            student_id=student_id,
            start=month_window(start_month)[0],
            end=month_window(end_month)[1],
        )

        by_month: dict[str, list[AttendanceRecord]] = {m: [] for m in months}
        for r in records:
            key = month_key(r.session_date)
            if key in by_month:
                by_month[key].append(r)
        return {m: aggregate(rows) for m, rows in by_month.items()}
