# backend/wakalead/timeutil.py
"""UTC clock helpers.

Timestamps are stored as naive UTC datetimes and calendar days are UTC dates,
so every "today" in the app comes from here.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional

WINDOW_DAYS = 7


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today() -> date:
    return utcnow().date()


def rolling_window(end: Optional[date] = None, days: int = WINDOW_DAYS) -> list[date]:
    """The ``days`` calendar dates ending at ``end`` (inclusive), oldest first."""
    end = end or utc_today()
    return [end - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def parse_iso_date(value: str) -> date:
    return date.fromisoformat(value.strip())
