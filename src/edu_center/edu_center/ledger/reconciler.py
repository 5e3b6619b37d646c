from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.model import NewAttendance
from ..attendance.repository import AttendanceStore
from ..core.constants import DEFAULT_COMMIT_CONCURRENCY
from ..core.enums import OperationKind
from ..core.exceptions import LoadError, StoreError
from .edit_session import Operation, OperationSet
from .matrix import AttendanceMatrix, MatrixLoader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FailedOperation:
    operation: Operation
    reason: str


@dataclass(frozen=True)
class CommitResult:
    applied_count: int
    failed_ops: tuple[FailedOperation, ...] = ()
    # Baseline re-fetched after the commit; None when the reload failed.
    matrix: Optional[AttendanceMatrix] = None
    reload_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.failed_ops and self.reload_error is None

    def to_dict(self) -> dict:
        return {
            "success": self.ok,
            "applied_count": self.applied_count,
            "failed_ops": [
                {
                    "kind": f.operation.kind.value,
                    "student_id": f.operation.student_id,
                    "date": f.operation.session_date.isoformat(),
                    "status": f.operation.status.value if f.operation.status else None,
                    "reason": f.reason,
                }
                for f in self.failed_ops
            ],
            "reload_error": self.reload_error,
            "matrix": self.matrix.to_dict() if self.matrix else None,
        }


@dataclass
class Reconciler:
    """Applies an operation set to the store, best effort, then reloads.

    Operations are independent: one failing never stops the others, and
    nothing is rolled back.
    """

    store: AttendanceStore
    loader: MatrixLoader
    concurrency: int = DEFAULT_COMMIT_CONCURRENCY

    async def _apply(self, op: Operation, group_id: int) -> None:
        if op.kind is OperationKind.CREATE:
            await self.store.create_attendance(
                NewAttendance(
                    student_id=op.student_id,
                    group_id=group_id,
                    session_date=op.session_date,
                    status=op.status,
                )
            )
            return

        if op.kind is OperationKind.UPDATE:
            applied = await self.store.update_attendance(op.attendance_id, op.status)
        else:
            applied = await self.store.delete_attendance(op.attendance_id)
        if not applied:
            raise StoreError(f"Attendance record {op.attendance_id} not found")

    async def _guarded(self, op: Operation, group_id: int, semaphore: asyncio.Semaphore) -> Optional[FailedOperation]:
        async with semaphore:
            try:
                await self._apply(op, group_id)
            except Exception as exc:
                logger.warning("Attendance operation failed (%s): %s", op.describe(), exc)
                return FailedOperation(operation=op, reason=str(exc) or exc.__class__.__name__)
        return None

    async def commit(
        self,
        op_set: OperationSet,
        *,
        group_id: int,
        window_start: date,
        window_end: date,
    ) -> CommitResult:
        ops = list(op_set)
        semaphore = asyncio.Semaphore(max(1, int(self.concurrency)))

        outcomes = await asyncio.gather(*(self._guarded(op, group_id, semaphore) for op in ops))
        failed = tuple(o for o in outcomes if o is not None)
        applied = len(ops) - len(failed)

        if failed:
            logger.warning("Commit for group %s: %d of %d operations failed", group_id, len(failed), len(ops))
        else:
            logger.info("Commit for group %s: %d operations applied", group_id, applied)

        # Reload regardless of outcome: the store is the source of truth.
        try:
            matrix = await self.loader.load(group_id, window_start, window_end)
        except LoadError as exc:
            return CommitResult(applied_count=applied, failed_ops=failed, reload_error=str(exc))

        return CommitResult(applied_count=applied, failed_ops=failed, matrix=matrix)
