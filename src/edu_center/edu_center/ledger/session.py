from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..common.datetime_utils import current_week_window
from ..core.enums import CellValue
from ..core.exceptions import LoadError, ValidationError
from ..statistics.aggregator import StatisticsSnapshot, aggregate
from .edit_session import EditSession
from .matrix import AttendanceMatrix, MatrixLoader
from .reconciler import CommitResult, Reconciler


@dataclass(frozen=True)
class LoadResult:
    ok: bool
    error: Optional[str] = None


@dataclass
class LedgerSession:
    """State of one attendance-ledger view for a group and a date window.

    Created when the view is entered and closed when it is left. Load and
    commit failures come back as status values and leave the last good
    matrix in place.
    """

    loader: MatrixLoader
    reconciler: Reconciler
    group_id: int
    window_start: Optional[date] = None
    window_end: Optional[date] = None
    matrix: Optional[AttendanceMatrix] = None
    edit: Optional[EditSession] = None
    last_error: Optional[str] = None
    closed: bool = field(default=False, init=False)

    def __post_init__(self):
        if self.window_start is None or self.window_end is None:
            self.window_start, self.window_end = current_week_window()
        if self.matrix is None:
            self.matrix = AttendanceMatrix.empty(self.group_id, self.window_start, self.window_end)

    def _require_active(self) -> None:
        if self.closed:
            raise ValidationError("Ledger session is closed")

    def _require_edit(self) -> EditSession:
        self._require_active()
        if self.edit is None or not self.edit.is_open:
            raise ValidationError("Ledger is not in edit mode")
        return self.edit

    @property
    def editing(self) -> bool:
        return self.edit is not None and self.edit.is_open

    async def open(self) -> LoadResult:
        return await self.reload()

    async def _load(self, group_id: int, window_start: date, window_end: date) -> LoadResult:
        # Group, window and matrix change together, only once the load succeeds.
        try:
            matrix = await self.loader.load(group_id, window_start, window_end)
        except LoadError as exc:
            self.last_error = str(exc)
            return LoadResult(ok=False, error=self.last_error)

        self.group_id = group_id
        self.window_start, self.window_end = window_start, window_end
        self.matrix = matrix
        self.last_error = None
        return LoadResult(ok=True)

    async def reload(self) -> LoadResult:
        self._require_active()
        return await self._load(self.group_id, self.window_start, self.window_end)

    async def change_window(self, window_start: date, window_end: date) -> LoadResult:
        """Switch window; an edit in progress is discarded.

        On a failed load the session stays on its previous window and grid.
        """
        self._require_active()
        self.cancel_edit()
        return await self._load(self.group_id, window_start, window_end)

    async def change_group(self, group_id: int) -> LoadResult:
        self._require_active()
        self.cancel_edit()
        return await self._load(int(group_id), self.window_start, self.window_end)

    def begin_edit(self, *, collapse: bool = False) -> EditSession:
        self._require_active()
        if self.editing:
            raise ValidationError("Ledger is already in edit mode")
        self.edit = EditSession.begin(self.matrix, collapse=collapse)
        return self.edit

    def set_cell(self, student_id: int, session_date: date, value: CellValue | str | None) -> None:
        self._require_edit().set_cell(student_id, session_date, value)

    def cancel_edit(self) -> None:
        if self.edit is not None:
            self.edit.cancel()
        self.edit = None

    async def commit(self) -> CommitResult:
        edit = self._require_edit()
        op_set = edit.diff()
        self.cancel_edit()

        result = await self.reconciler.commit(
            op_set,
            group_id=self.group_id,
            window_start=self.window_start,
            window_end=self.window_end,
        )
        if result.matrix is not None:
            self.matrix = result.matrix
            self.last_error = None
        else:
            self.last_error = result.reload_error
        return result

    def statistics(self) -> StatisticsSnapshot:
        """Snapshot over the records currently on the grid."""
        return aggregate(self.matrix.records())

    def close(self) -> None:
        self.cancel_edit()
        self.closed = True
