from __future__ import annotations

import asyncio
from datetime import date
from typing import Any, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AttendanceRecord, NewAttendance
from .repository import AttendanceStore


def _to_record(r: dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        group_id=int(r["group_id"]),
        session_date=r["session_date"],
        status=AttendanceStatus(r["status"]),
        note=r.get("note"),
        course_id=int(r["course_id"]) if r.get("course_id") is not None else None,
        course_name=r.get("course_name"),
    )


class MySQLAttendanceRepository(AttendanceStore):
    """mysql-connector backed store; blocking calls run in a worker thread."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    async def fetch_attendance(self, group_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        return await asyncio.to_thread(self.list_records, group_id=group_id, start=start, end=end)

    async def create_attendance(self, record: NewAttendance) -> int:
        return await asyncio.to_thread(self.insert, record)

    async def update_attendance(self, attendance_id: int, status: AttendanceStatus) -> bool:
        return await asyncio.to_thread(self.update_status, attendance_id, status)

    async def delete_attendance(self, attendance_id: int) -> bool:
        return await asyncio.to_thread(self.delete, attendance_id)

    async def query_records(
        self,
        *,
        group_id: Optional[int] = None,
        course_id: Optional[int] = None,
        student_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        return await asyncio.to_thread(
            self.list_records,
            group_id=group_id,
            course_id=course_id,
            student_id=student_id,
            start=start,
            end=end,
        )

    def list_records(
        self,
        *,
        group_id: Optional[int] = None,
        course_id: Optional[int] = None,
        student_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []

        if group_id is not None:
            clauses.append("a.group_id=%s")
            params.append(int(group_id))
        if course_id is not None:
            clauses.append("g.course_id=%s")
            params.append(int(course_id))
        if student_id is not None:
            clauses.append("a.student_id=%s")
            params.append(int(student_id))
        if start is not None:
            clauses.append("a.session_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("a.session_date <= %s")
            params.append(end)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    a.attendance_id, a.student_id, a.group_id, a.session_date, a.status, a.note,
                    g.course_id, c.name AS course_name
                FROM attendances a
                LEFT JOIN `groups` g ON g.group_id = a.group_id
                LEFT JOIN courses c ON c.course_id = g.course_id
                {where}
                ORDER BY a.session_date ASC, a.student_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def insert(self, record: NewAttendance) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendances(student_id, group_id, session_date, status, note)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    int(record.student_id),
                    int(record.group_id),
                    record.session_date,
                    record.status.value,
                    record.note,
                ),
            )
            return int(cur.lastrowid)

    def update_status(self, attendance_id: int, status: AttendanceStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendances SET status=%s WHERE attendance_id=%s",
                (status.value, int(attendance_id)),
            )
            return cur.rowcount > 0

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendances WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0
