from __future__ import annotations

import asyncio
from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Student
from .repository import RosterRepository


class MySQLStudentRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    async def fetch_roster(self, group_id: int) -> Sequence[Student]:
        return await asyncio.to_thread(self.list_for_group, group_id)

    def list_for_group(self, group_id: int) -> list[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, first_name, last_name, group_id
                FROM students
                WHERE group_id=%s
                ORDER BY last_name ASC, first_name ASC, student_id ASC
                """,
                (int(group_id),),
            )
            rows = fetchall(cur)
            return [
                Student(
                    student_id=int(r["student_id"]),
                    first_name=r["first_name"],
                    last_name=r.get("last_name"),
                    group_id=int(r["group_id"]) if r.get("group_id") is not None else None,
                )
                for r in rows
            ]
