from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Persisted attendance outcome for one student on one session date."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class CellValue(str, Enum):
    """Value of one overlay cell while an edit session is open.

    UNSET means "no record" and is distinct from an explicit ABSENT.
    """

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"
    UNSET = "unset"

    @classmethod
    def from_status(cls, status: AttendanceStatus | None) -> "CellValue":
        if status is None:
            return cls.UNSET
        return cls(status.value)

    def to_status(self) -> AttendanceStatus | None:
        if self is CellValue.UNSET:
            return None
        return AttendanceStatus(self.value)


class OperationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
