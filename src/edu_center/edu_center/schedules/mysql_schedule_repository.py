from __future__ import annotations

import asyncio
from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_time
from .model import ScheduleEntry
from .repository import ScheduleRepository


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    async def fetch_pattern(self, group_id: int) -> Sequence[ScheduleEntry]:
        return await asyncio.to_thread(self.list_for_group, group_id)

    def list_for_group(self, group_id: int) -> list[ScheduleEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT schedule_id, group_id, day_of_week, start_time, end_time
                FROM schedules
                WHERE group_id=%s
                ORDER BY schedule_id ASC
                """,
                (int(group_id),),
            )
            rows = fetchall(cur)
            return [
                ScheduleEntry(
                    schedule_id=int(r["schedule_id"]),
                    group_id=int(r["group_id"]),
                    day_of_week=r["day_of_week"],
                    start_time=normalize_mysql_time(r["start_time"]),
                    end_time=normalize_mysql_time(r["end_time"]),
                )
                for r in rows
            ]
