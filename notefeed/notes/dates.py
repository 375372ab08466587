from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional


def local_date(value: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar date of ``value`` in ``tz`` (system local time when None)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz).date()


def day_label(
    created_at: datetime,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> str:
    """
    "Today", "Yesterday" or "<Month> <day>", by calendar date, not elapsed hours.
    """
    now = now or datetime.now(timezone.utc)
    day = local_date(created_at, tz)
    today = local_date(now, tz)
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{day:%B} {day.day}"


def count_badge(count: int, page_size: int) -> str:
    """Exact count below ``page_size - 1``; "<threshold>+" at or above it."""
    threshold = page_size - 1
    if count >= threshold:
        return f"{threshold}+"
    return str(count)
