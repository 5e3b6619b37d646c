from __future__ import annotations

import asyncio
from datetime import date, time
from typing import Optional

import pytest

from src.edu_center.edu_center.attendance.model import AttendanceRecord, NewAttendance
from src.edu_center.edu_center.core.enums import AttendanceStatus
from src.edu_center.edu_center.core.exceptions import StoreError
from src.edu_center.edu_center.ledger.matrix import MatrixLoader
from src.edu_center.edu_center.ledger.reconciler import Reconciler
from src.edu_center.edu_center.schedules.model import ScheduleEntry
from src.edu_center.edu_center.students.model import Student

GROUP_ID = 7
COURSE_ID = 3

# Monday 2026-02-02 .. Sunday 2026-02-15
WEEK1_MON = date(2026, 2, 2)
WEEK1_WED = date(2026, 2, 4)
WEEK2_MON = date(2026, 2, 9)
WEEK2_WED = date(2026, 2, 11)
WINDOW_END = date(2026, 2, 15)


def slot(day: str, group_id: int = GROUP_ID) -> ScheduleEntry:
    return ScheduleEntry(group_id=group_id, day_of_week=day, start_time=time(18, 0), end_time=time(19, 30))


class InMemorySchedules:
    def __init__(self, patterns: dict[int, list[ScheduleEntry]], *, fail: bool = False):
        self.patterns = patterns
        self.fail = fail

    async def fetch_pattern(self, group_id: int):
        await asyncio.sleep(0)
        if self.fail:
            raise ConnectionError("schedule service unavailable")
        return list(self.patterns.get(group_id, []))


class InMemoryRoster:
    def __init__(self, rosters: dict[int, list[Student]], *, fail: bool = False):
        self.rosters = rosters
        self.fail = fail
        self.calls = 0

    async def fetch_roster(self, group_id: int):
        await asyncio.sleep(0)
        self.calls += 1
        if self.fail:
            raise ConnectionError("roster service unavailable")
        return list(self.rosters.get(group_id, []))


class InMemoryAttendanceStore:
    def __init__(self, course_by_group: Optional[dict[int, tuple[int, str]]] = None):
        self.records: dict[int, AttendanceRecord] = {}
        self.course_by_group = course_by_group or {}
        self.fail_fetch = False
        self.failing_ids: set[int] = set()
        self.failing_creates: set[tuple[int, date]] = set()
        self.fetch_calls = 0
        self.writes: list[str] = []
        self._next_id = 1

    def add(self, student_id: int, session_date: date, status: AttendanceStatus, *, group_id: int = GROUP_ID) -> int:
        rid = self._next_id
        self._next_id += 1
        self.records[rid] = AttendanceRecord(
            attendance_id=rid,
            student_id=student_id,
            group_id=group_id,
            session_date=session_date,
            status=status,
        )
        return rid

    def status_of(self, student_id: int, session_date: date) -> Optional[AttendanceStatus]:
        for r in self.records.values():
            if r.student_id == student_id and r.session_date == session_date:
                return r.status
        return None

    def _with_course(self, r: AttendanceRecord) -> AttendanceRecord:
        course = self.course_by_group.get(r.group_id)
        if not course:
            return r
        return AttendanceRecord(
            attendance_id=r.attendance_id,
            student_id=r.student_id,
            group_id=r.group_id,
            session_date=r.session_date,
            status=r.status,
            note=r.note,
            course_id=course[0],
            course_name=course[1],
        )

    async def fetch_attendance(self, group_id: int, start: date, end: date):
        await asyncio.sleep(0)
        self.fetch_calls += 1
        if self.fail_fetch:
            raise ConnectionError("attendance service unavailable")
        return [r for r in self.records.values() if r.group_id == group_id and start <= r.session_date <= end]

    async def create_attendance(self, record: NewAttendance) -> int:
        await asyncio.sleep(0)
        if (record.student_id, record.session_date) in self.failing_creates:
            raise StoreError("insert rejected")
        self.writes.append("create")
        return self.add(record.student_id, record.session_date, record.status, group_id=record.group_id)

    async def update_attendance(self, attendance_id: int, status: AttendanceStatus) -> bool:
        await asyncio.sleep(0)
        if attendance_id in self.failing_ids:
            raise StoreError("update rejected")
        r = self.records.get(attendance_id)
        if not r:
            return False
        self.writes.append("update")
        self.records[attendance_id] = AttendanceRecord(
            attendance_id=r.attendance_id,
            student_id=r.student_id,
            group_id=r.group_id,
            session_date=r.session_date,
            status=status,
            note=r.note,
        )
        return True

    async def delete_attendance(self, attendance_id: int) -> bool:
        await asyncio.sleep(0)
        if attendance_id in self.failing_ids:
            raise StoreError("delete rejected")
        self.writes.append("delete")
        return self.records.pop(attendance_id, None) is not None

    async def query_records(self, *, group_id=None, course_id=None, student_id=None, start=None, end=None):
        await asyncio.sleep(0)
        if self.fail_fetch:
            raise ConnectionError("attendance service unavailable")
        out = []
        for r in map(self._with_course, self.records.values()):
            if group_id is not None and r.group_id != group_id:
                continue
            if course_id is not None and r.course_id != course_id:
                continue
            if student_id is not None and r.student_id != student_id:
                continue
            if start is not None and r.session_date < start:
                continue
            if end is not None and r.session_date > end:
                continue
            out.append(r)
        return out


@pytest.fixture
def students() -> list[Student]:
    return [
        Student(student_id=2, first_name="Boris", last_name="Petrov", group_id=GROUP_ID),
        Student(student_id=1, first_name="Anna", last_name="Ivanova", group_id=GROUP_ID),
        Student(student_id=3, first_name="Alex", last_name="Ivanova", group_id=GROUP_ID),
    ]


@pytest.fixture
def schedules() -> InMemorySchedules:
    # duplicate Monday entry on purpose
    return InMemorySchedules({GROUP_ID: [slot("Monday"), slot("Wednesday"), slot("monday")]})


@pytest.fixture
def roster(students) -> InMemoryRoster:
    return InMemoryRoster({GROUP_ID: students})


@pytest.fixture
def store() -> InMemoryAttendanceStore:
    return InMemoryAttendanceStore(course_by_group={GROUP_ID: (COURSE_ID, "English B1")})


@pytest.fixture
def loader(schedules, roster, store) -> MatrixLoader:
    return MatrixLoader(schedules, roster, store)


@pytest.fixture
def reconciler(store, loader) -> Reconciler:
    return Reconciler(store, loader, concurrency=4)


@pytest.fixture
def load(loader):
    def _load(start: date = WEEK1_MON, end: date = WINDOW_END):
        return asyncio.run(loader.load(GROUP_ID, start, end))

    return _load
