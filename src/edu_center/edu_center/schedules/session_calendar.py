"""Session calendar: weekly recurrence pattern -> concrete session dates."""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import iter_days
from .model import ScheduleEntry

logger = logging.getLogger(__name__)

# date.weekday(): Monday == 0 ... Sunday == 6
_WEEKDAY_NAMES = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
    "mon": 0,
    "tue": 1,
    "wed": 2,
    "thu": 3,
    "fri": 4,
    "sat": 5,
    "sun": 6,
    "понедельник": 0,
    "вторник": 1,
    "среда": 2,
    "четверг": 3,
    "пятница": 4,
    "суббота": 5,
    "воскресенье": 6,
}


def parse_weekday(name: object) -> Optional[int]:
    """Map a stored weekday name to date.weekday() numbering.

    Digits are read as ISO weekdays (1 = Monday .. 7 = Sunday).
    Returns None for anything unrecognised.
    """
    if name is None:
        return None
    key = str(name).strip().lower()
    if key.isdigit():
        iso = int(key)
        return iso - 1 if 1 <= iso <= 7 else None
    return _WEEKDAY_NAMES.get(key)


def pattern_weekdays(pattern: Iterable[ScheduleEntry]) -> frozenset[int]:
    weekdays = set()
    for entry in pattern:
        weekday = parse_weekday(entry.day_of_week)
        if weekday is None:
            logger.debug("Skipping schedule entry with unknown weekday %r", entry.day_of_week)
            continue
        weekdays.add(weekday)
    return frozenset(weekdays)


def generate_sessions(pattern: Iterable[ScheduleEntry], window_start: date, window_end: date) -> list[date]:
    """All dates in [window_start, window_end] whose weekday occurs in the pattern.

    An empty pattern or a reversed window yields an empty list.
    """
    weekdays = pattern_weekdays(pattern)
    if not weekdays:
        return []
    return [d for d in iter_days(window_start, window_end) if d.weekday() in weekdays]
