from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator

from ..core.constants import ISO_DATE_FORMAT, MONTH_FORMAT
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, ISO_DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {value!r}") from None


def parse_month(value: str) -> date:
    """Parse YYYY-MM string into the first day of that month."""
    try:
        return datetime.strptime(value, MONTH_FORMAT).date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid month: {value!r}") from None


def month_key(day: date) -> str:
    return day.strftime(MONTH_FORMAT)


def today_local() -> date:
    """Current local date.

    Wrapped so tests can patch it.
    """
    return date.today()


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar date from start to end inclusive (nothing if reversed)."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def current_week_window(today: date | None = None) -> tuple[date, date]:
    """Monday..Sunday window containing `today`."""
    today = today or today_local()
    monday = today - timedelta(days=today.weekday())
    return monday, monday + timedelta(days=6)


def month_window(month: str) -> tuple[date, date]:
    first = parse_month(month)
    last_day = calendar.monthrange(first.year, first.month)[1]
    return first, first.replace(day=last_day)


def months_between(start_month: str, end_month: str) -> list[str]:
    """Ascending list of YYYY-MM keys from start_month to end_month inclusive."""
    current = parse_month(start_month)
    end = parse_month(end_month)
    out: list[str] = []
    while current <= end:
        out.append(month_key(current))
        if current.month == 12:
            current = current.replace(year=current.year + 1, month=1)
        else:
            current = current.replace(month=current.month + 1)
    return out
