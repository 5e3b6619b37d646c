from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional


@dataclass(frozen=True)
class ScheduleEntry:
    """One weekly slot of a group's recurrence pattern.

    `day_of_week` is the weekday name as stored (e.g. "Monday", "Среда").
    """

    group_id: int
    day_of_week: str
    start_time: time
    end_time: time
    schedule_id: Optional[int] = None
