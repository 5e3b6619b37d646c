from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from ..attendance.model import AttendanceRecord
from ..core.constants import RATE_DECIMALS
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatisticsSnapshot:
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0
    rate: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "present": self.present,
            "absent": self.absent,
            "late": self.late,
            "excused": self.excused,
            "attendance_rate": self.rate,
        }


def attendance_rate(attended: int, total: int) -> float:
    """(present + late) share as a percentage with one decimal, 0 when empty."""
    if total <= 0:
        return 0.0
    pct = Decimal(attended) * 100 / Decimal(total)
    return float(pct.quantize(Decimal(1).scaleb(-RATE_DECIMALS), rounding=ROUND_HALF_UP))


def aggregate(records: Iterable[AttendanceRecord]) -> StatisticsSnapshot:
    counts = Counter(r.status for r in records)
    present = counts[AttendanceStatus.PRESENT]
    late = counts[AttendanceStatus.LATE]
    total = sum(counts.values())
    return StatisticsSnapshot(
        total=total,
        present=present,
        absent=counts[AttendanceStatus.ABSENT],
        late=late,
        excused=counts[AttendanceStatus.EXCUSED],
        rate=attendance_rate(present + late, total),
    )
