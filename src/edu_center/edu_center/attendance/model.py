from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Persisted outcome for one (student, session date) within a group."""

    attendance_id: int
    student_id: int
    group_id: int
    session_date: date
    status: AttendanceStatus
    note: Optional[str] = None
    # Filled by report queries that join the group's course.
    course_id: Optional[int] = None
    course_name: Optional[str] = None

    @property
    def key(self) -> tuple[int, date]:
        return self.student_id, self.session_date


@dataclass(frozen=True)
class NewAttendance:
    student_id: int
    group_id: int
    session_date: date
    status: AttendanceStatus
    note: Optional[str] = None
