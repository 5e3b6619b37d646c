from __future__ import annotations

from typing import Protocol, Sequence

from .model import Student


class RosterRepository(Protocol):
    async def fetch_roster(self, group_id: int) -> Sequence[Student]:
        """Students currently enrolled in the group."""

        raise NotImplementedError
