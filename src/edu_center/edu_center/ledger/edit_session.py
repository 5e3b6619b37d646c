"""Buffered, uncommitted edits over a baseline attendance matrix.

An `EditSession` holds an overlay value for every axis cell of the matrix it
was opened on. Edits only touch the overlay; `diff()` compares the overlay
with the baseline and yields the smallest set of store operations needed to
realize it. Nothing here talks to the store.

Two editing modes are supported:
    - full (default): the overlay keeps all four statuses, so untouched
      `late`/`excused` cells survive a commit unchanged.
    - collapsed: the two-button present/absent editor. `late` and `excused`
      are folded into `absent` when seeding, and the baseline is folded the
      same way when diffing.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field
from datetime import date
from typing import Iterator, Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus, CellValue, OperationKind
from ..core.exceptions import ValidationError
from .matrix import AttendanceMatrix, CellKey

_COLLAPSED_VALUES = frozenset({CellValue.PRESENT, CellValue.ABSENT, CellValue.UNSET})


def fold_status(status: Optional[AttendanceStatus]) -> CellValue:
    """Two-valued view of a status: `late` and `excused` read as absent."""
    if status is None:
        return CellValue.UNSET
    if status is AttendanceStatus.PRESENT:
        return CellValue.PRESENT
    return CellValue.ABSENT


@dataclass(frozen=True)
class Operation:
    kind: OperationKind
    student_id: int
    session_date: date
    status: Optional[AttendanceStatus] = None
    attendance_id: Optional[int] = None

    def describe(self) -> str:
        target = f"student {self.student_id} on {self.session_date.isoformat()}"
        if self.kind is OperationKind.DELETE:
            return f"delete {target}"
        return f"{self.kind.value} {target} -> {self.status.value if self.status else '-'}"


@dataclass(frozen=True)
class OperationSet:
    creates: tuple[Operation, ...] = ()
    updates: tuple[Operation, ...] = ()
    deletes: tuple[Operation, ...] = ()

    def __iter__(self) -> Iterator[Operation]:
        yield from self.creates
        yield from self.updates
        yield from self.deletes

    def __len__(self) -> int:
        return len(self.creates) + len(self.updates) + len(self.deletes)

    def is_empty(self) -> bool:
        return len(self) == 0


@dataclass
class EditSession:
    baseline: AttendanceMatrix
    collapse: bool = False
    _overlay: dict[CellKey, CellValue] = field(default_factory=dict, init=False, repr=False)
    _open: bool = field(default=True, init=False)

    @classmethod
    def begin(cls, matrix: AttendanceMatrix, *, collapse: bool = False) -> "EditSession":
        session = cls(baseline=matrix, collapse=collapse)
        for key in matrix.axis():
            session._overlay[key] = session._baseline_value(matrix.cells.get(key))
        return session

    @property
    def is_open(self) -> bool:
        return self._open

    def _baseline_value(self, record: Optional[AttendanceRecord]) -> CellValue:
        status = record.status if record else None
        if self.collapse:
            return fold_status(status)
        return CellValue.from_status(status)

    def _require_open(self) -> None:
        if not self._open:
            raise ValidationError("Edit session is closed")

    def _coerce(self, value: CellValue | str | None) -> CellValue:
        if value is None:
            return CellValue.UNSET
        try:
            cell = CellValue(value)
        except ValueError:
            raise ValidationError(f"Unknown attendance value: {value!r}") from None
        if self.collapse and cell not in _COLLAPSED_VALUES:
            raise ValidationError(f"{cell.value!r} cannot be set in present/absent mode")
        return cell

    def value(self, student_id: int, session_date: date) -> CellValue:
        self._require_open()
        try:
            return self._overlay[(student_id, session_date)]
        except KeyError:
            raise ValidationError(f"No ledger cell for student {student_id} on {session_date}") from None

    def set_cell(self, student_id: int, session_date: date, value: CellValue | str | None) -> None:
        """Set one overlay cell (last write wins)."""
        self._require_open()
        key = (int(student_id), session_date)
        if key not in self._overlay:
            raise ValidationError(f"No ledger cell for student {student_id} on {session_date}")
        self._overlay[key] = self._coerce(value)

    def set_column(
        self,
        session_date: date,
        value: CellValue | str | None,
        *,
        student_ids: Collection[int] | None = None,
        overwrite: bool = True,
    ) -> None:
        """Set the same value for one session date across the roster.

        With overwrite=False only cells that are currently unset are filled.
        """
        self._require_open()
        cell = self._coerce(value)
        if session_date not in self.baseline.dates:
            raise ValidationError(f"{session_date} is not a session date")

        targets = set(student_ids) if student_ids is not None else set(self.baseline.student_ids)
        for student_id in self.baseline.student_ids:
            if student_id not in targets:
                continue
            key = (student_id, session_date)
            if not overwrite and self._overlay[key] is not CellValue.UNSET:
                continue
            self._overlay[key] = cell

    def diff(self) -> OperationSet:
        """Minimal create/update/delete set turning the baseline into the overlay."""
        self._require_open()
        creates: list[Operation] = []
        updates: list[Operation] = []
        deletes: list[Operation] = []

        for key in self.baseline.axis():
            record = self.baseline.cells.get(key)
            wanted = self._overlay[key]
            if wanted == self._baseline_value(record):
                continue

            student_id, session_date = key
            if wanted is CellValue.UNSET:
                # baseline differs from UNSET, so a record exists
                deletes.append(
                    Operation(
                        kind=OperationKind.DELETE,
                        student_id=student_id,
                        session_date=session_date,
                        attendance_id=record.attendance_id,
                    )
                )
            elif record is None:
                creates.append(
                    Operation(
                        kind=OperationKind.CREATE,
                        student_id=student_id,
                        session_date=session_date,
                        status=wanted.to_status(),
                    )
                )
            else:
                updates.append(
                    Operation(
                        kind=OperationKind.UPDATE,
                        student_id=student_id,
                        session_date=session_date,
                        status=wanted.to_status(),
                        attendance_id=record.attendance_id,
                    )
                )

        return OperationSet(creates=tuple(creates), updates=tuple(updates), deletes=tuple(deletes))

    def cancel(self) -> None:
        """Drop all pending edits."""
        self._overlay.clear()
        self._open = False
