from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from config import get_settings


def local_today() -> date:
    settings = get_settings()
    tz = ZoneInfo(settings.timezone)
    return datetime.now(tz).date()


def month_start(d: date) -> date:
    return d.replace(day=1)


def month_end(d: date) -> date:
    first = d.replace(day=1)
    if first.month == 12:
        next_month = first.replace(year=first.year + 1, month=1)
    else:
        next_month = first.replace(month=first.month + 1)
    return next_month - date.resolution


def add_months(d: date, count: int) -> date:
    month_index = (d.year * 12) + (d.month - 1) + count
    year = month_index // 12
    month = (month_index % 12) + 1
    return date(year, month, 1)


def same_month(a: date, b: date) -> bool:
    return a.year == b.year and a.month == b.month


def trailing_months(reference: date, months_back: int) -> list[date]:
    """First-of-month dates for the `months_back` months ending at `reference`.

    Ordered oldest first; the reference month is always the last entry.
    """
    end = month_start(reference)
    return [add_months(end, -offset) for offset in range(months_back - 1, -1, -1)]


def parse_month(value: Optional[str], *, today: Optional[date] = None) -> date:
    """Parse a ``YYYY-MM`` query value; blank means the current local month."""
    if not value:
        return month_start(today or local_today())
    try:
        year_str, month_str = value.split("-", 1)
        return date(int(year_str), int(month_str), 1)
    except ValueError as exc:
        raise ValueError(f"Invalid month {value!r}, expected YYYY-MM") from exc


def month_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"
