"""UTC datetime utilities."""

import calendar
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by whole calendar months, clamping the day (Jan 31 + 1 -> Feb 28/29)."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
