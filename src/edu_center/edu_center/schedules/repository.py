from __future__ import annotations

from typing import Protocol, Sequence

from .model import ScheduleEntry


class ScheduleRepository(Protocol):
    async def fetch_pattern(self, group_id: int) -> Sequence[ScheduleEntry]:
        """Recurrence pattern entries attached to the group (may be empty)."""

        raise NotImplementedError
