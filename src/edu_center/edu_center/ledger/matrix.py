"""Roster x session-date grid built from persisted attendance records."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterator, Mapping, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceStore
from ..core.exceptions import LoadError
from ..schedules.session_calendar import generate_sessions
from ..schedules.repository import ScheduleRepository
from ..students.model import Student
from ..students.repository import RosterRepository

logger = logging.getLogger(__name__)

CellKey = tuple[int, date]


@dataclass(frozen=True)
class AttendanceMatrix:
    """Sparse map (student_id, date) -> record over a fixed axis.

    Cells without a record are "unrecorded", which is not the same as absent.
    """

    group_id: int
    window_start: date
    window_end: date
    dates: tuple[date, ...] = ()
    students: tuple[Student, ...] = ()
    cells: Mapping[CellKey, AttendanceRecord] = field(default_factory=dict)

    @classmethod
    def empty(cls, group_id: int, window_start: date, window_end: date) -> "AttendanceMatrix":
        return cls(group_id=group_id, window_start=window_start, window_end=window_end)

    @property
    def student_ids(self) -> tuple[int, ...]:
        return tuple(s.student_id for s in self.students)

    def get(self, student_id: int, session_date: date) -> Optional[AttendanceRecord]:
        return self.cells.get((student_id, session_date))

    def axis(self) -> Iterator[CellKey]:
        """Every (student_id, date) cell, row by row in display order."""
        for student in self.students:
            for session_date in self.dates:
                yield student.student_id, session_date

    def records(self) -> list[AttendanceRecord]:
        return [self.cells[key] for key in self.axis() if key in self.cells]

    def to_dict(self) -> dict:
        return {
            "group_id": self.group_id,
            "start": self.window_start.isoformat(),
            "end": self.window_end.isoformat(),
            "dates": [d.isoformat() for d in self.dates],
            "rows": [
                {
                    "student_id": s.student_id,
                    "name": s.display_name,
                    "cells": {
                        d.isoformat(): (rec.status.value if rec else None)
                        for d in self.dates
                        for rec in [self.get(s.student_id, d)]
                    },
                }
                for s in self.students
            ],
        }


def build_matrix(
    *,
    group_id: int,
    window_start: date,
    window_end: date,
    dates: list[date],
    roster: list[Student],
    records: list[AttendanceRecord],
) -> AttendanceMatrix:
    students = tuple(sorted(roster, key=Student.sort_key))
    student_ids = {s.student_id for s in students}
    date_set = set(dates)

    cells: dict[CellKey, AttendanceRecord] = {}
    for record in records:
        if record.group_id != group_id:
            continue
        if record.student_id not in student_ids or record.session_date not in date_set:
            continue
        if record.key in cells:
            logger.warning(
                "Duplicate attendance for student %s on %s in group %s; keeping id %s",
                record.student_id,
                record.session_date,
                group_id,
                cells[record.key].attendance_id,
            )
            continue
        cells[record.key] = record

    return AttendanceMatrix(
        group_id=group_id,
        window_start=window_start,
        window_end=window_end,
        dates=tuple(dates),
        students=students,
        cells=cells,
    )


class MatrixLoader:
    def __init__(self, schedules: ScheduleRepository, roster: RosterRepository, store: AttendanceStore):
        self._schedules = schedules
        self._roster = roster
        self._store = store

    async def load(self, group_id: int, window_start: date, window_end: date) -> AttendanceMatrix:
        """Fetch pattern, roster and records for the window and build the grid.

        Raises LoadError if any fetch fails; nothing partial is returned.
        """
        results = await asyncio.gather(
            self._schedules.fetch_pattern(group_id),
            self._roster.fetch_roster(group_id),
            self._store.fetch_attendance(group_id, window_start, window_end),
            return_exceptions=True,
        )
        errors = [r for r in results if isinstance(r, BaseException)]
        for exc in errors:
            logger.warning("Ledger load failed for group %s (%s..%s): %s", group_id, window_start, window_end, exc)
        if errors:
            raise LoadError(f"Could not load attendance for group {group_id}") from errors[0]

        pattern, roster, records = results
        dates = generate_sessions(pattern, window_start, window_end)
        matrix = build_matrix(
            group_id=group_id,
            window_start=window_start,
            window_end=window_end,
            dates=dates,
            roster=list(roster),
            records=list(records),
        )
        logger.debug(
            "Loaded ledger for group %s: %d students x %d sessions, %d records",
            group_id,
            len(matrix.students),
            len(matrix.dates),
            len(matrix.cells),
        )
        return matrix
