from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .core.constants import DEFAULT_COMMIT_CONCURRENCY
from .database.connection import DBConfig, DatabaseConnection
from .ledger.matrix import MatrixLoader
from .ledger.reconciler import Reconciler
from .ledger.session import LedgerSession
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .statistics.service import StatisticsService
from .students.mysql_student_repository import MySQLStudentRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    schedules_repo: MySQLScheduleRepository
    students_repo: MySQLStudentRepository
    attendance_repo: MySQLAttendanceRepository

    matrix_loader: MatrixLoader
    reconciler: Reconciler
    statistics_service: StatisticsService

    def new_ledger_session(
        self,
        group_id: int,
        *,
        window_start: Optional[date] = None,
        window_end: Optional[date] = None,
    ) -> LedgerSession:
        return LedgerSession(
            loader=self.matrix_loader,
            reconciler=self.reconciler,
            group_id=int(group_id),
            window_start=window_start,
            window_end=window_end,
        )


def build_container(*, db_config: dict, commit_concurrency: int = DEFAULT_COMMIT_CONCURRENCY) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    schedules_repo = MySQLScheduleRepository(conn)
    students_repo = MySQLStudentRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    matrix_loader = MatrixLoader(schedules_repo, students_repo, attendance_repo)
    reconciler = Reconciler(attendance_repo, matrix_loader, concurrency=commit_concurrency)
    statistics_service = StatisticsService(attendance_repo)

    return Container(
        conn=conn,
        schedules_repo=schedules_repo,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        matrix_loader=matrix_loader,
        reconciler=reconciler,
        statistics_service=statistics_service,
    )
