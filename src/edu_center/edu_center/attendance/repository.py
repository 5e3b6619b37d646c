from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, NewAttendance


class AttendanceStore(Protocol):
    """Backing store for attendance records.

    Every call is awaited; implementations own their own timeouts.
    """

    async def fetch_attendance(self, group_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    async def create_attendance(self, record: NewAttendance) -> int:
        """Insert a record and return its id."""

        raise NotImplementedError

    async def update_attendance(self, attendance_id: int, status: AttendanceStatus) -> bool:
        raise NotImplementedError

    async def delete_attendance(self, attendance_id: int) -> bool:
        raise NotImplementedError

    async def query_records(
        self,
        *,
        group_id: Optional[int] = None,
        course_id: Optional[int] = None,
        student_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records matching every given filter, with course info joined."""

        raise NotImplementedError
