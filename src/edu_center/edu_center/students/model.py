from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    student_id: int
    first_name: str
    last_name: Optional[str] = None
    group_id: Optional[int] = None

    @property
    def display_name(self) -> str:
        if self.last_name:
            return f"{self.last_name} {self.first_name}"
        return self.first_name

    def sort_key(self) -> tuple[str, str, int]:
        """Tabular display order: last name, then first name."""
        return ((self.last_name or "").casefold(), self.first_name.casefold(), self.student_id)
