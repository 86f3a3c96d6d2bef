"""UTC-focused helpers for run metadata and weekly calendars."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Iterator

from covid_rollups.common.models import WeekStart


def utc_today_iso() -> str:
    return datetime.now(tz=timezone.utc).date().isoformat()


def parse_run_date(value: str | None) -> str:
    if not value:
        return utc_today_iso()
    parsed = date.fromisoformat(value)
    return parsed.isoformat()


def utc_timestamp_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds")


def parse_calendar_date(value: object) -> date | None:
    """Parse a ``YYYY-MM-DD`` value, returning None when it is not a valid date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None:
        return None
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def format_utc_midnight(value: date | None) -> str | None:
    if value is None:
        return None
    return f"{value.isoformat()}T00:00:00.000Z"


def floor_to_week(value: date, week_start: WeekStart) -> date:
    offset = (value.weekday() - week_start.weekday) % 7
    return value - timedelta(days=offset)


def is_week_boundary(value: date, week_start: WeekStart) -> bool:
    return floor_to_week(value, week_start) == value


def week_starts(start: date, stop: date, week_start: WeekStart) -> Iterator[date]:
    """Yield every week start in ``[start, stop)``."""
    current = floor_to_week(start, week_start)
    if current < start:
        current += timedelta(days=7)
    while current < stop:
        yield current
        current += timedelta(days=7)


def source_years(start_date: date, today: date, end_year: int | None = None) -> list[int]:
    first = start_date.year if (start_date.month, start_date.day) == (1, 1) else start_date.year + 1
    last = today.year
    if end_year is not None:
        last = min(last, end_year)
    return list(range(first, last + 1))
