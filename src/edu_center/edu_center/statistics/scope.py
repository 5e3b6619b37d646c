"""Aggregation scopes: which attendance records a snapshot covers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from ..common.datetime_utils import month_window


@dataclass(frozen=True)
class ByGroup:
    group_id: int
    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True)
class ByCourse:
    """All groups of a course."""

    course_id: int
    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True)
class ByStudent:
    """One student across a YYYY-MM month range (inclusive)."""

    student_id: int
    start_month: str
    end_month: str

    @property
    def start(self) -> date:
        return month_window(self.start_month)[0]

    @property
    def end(self) -> date:
        return month_window(self.end_month)[1]


Scope = Union[ByGroup, ByCourse, ByStudent]


def record_filters(scope: Scope) -> dict:
    """Keyword filters for AttendanceStore.query_records."""
    if isinstance(scope, ByGroup):
        return {"group_id": scope.group_id, "start": scope.start, "end": scope.end}
    if isinstance(scope, ByCourse):
        return {"course_id": scope.course_id, "start": scope.start, "end": scope.end}
    if isinstance(scope, ByStudent):
        return {"student_id": scope.student_id, "start": scope.start, "end": scope.end}
    raise TypeError(f"Unsupported scope: {scope!r}")
