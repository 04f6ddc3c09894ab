"""Calendar helpers shared by the extraction service.

Expiration dates are stored as ``YYYY-MM-DD`` strings and shown to users as
``Jan 25, 2027``.  Status checks compare pure calendar days, so every helper
here works with ``datetime.date`` and never with timestamps.
"""
from __future__ import annotations

import datetime as dt
import re
from typing import Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .settings import DEFAULT_SOON_DAYS

ItemStatus = Literal["expired", "soon", "ok"]

_MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


_STORED_DATE_PATTERN = re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})", re.ASCII)


class StoredDateError(ValueError):
    """Raised when a stored ``YYYY-MM-DD`` value cannot be read back."""


def format_date_for_storage(value: dt.date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_stored_date(value: str) -> dt.date:
    match = _STORED_DATE_PATTERN.fullmatch((value or "").strip())
    if match is None:
        raise StoredDateError(f"invalid_stored_date:{value!r}")
    year, month, day = (int(part) for part in match.groups())
    try:
        return dt.date(year, month, day)
    except ValueError as exc:
        raise StoredDateError(f"invalid_stored_date:{value!r}") from exc


def format_date_for_display(value: str) -> str:
    parsed = parse_stored_date(value)
    return f"{_MONTH_ABBREVIATIONS[parsed.month - 1]} {parsed.day}, {parsed.year}"


def local_today(timezone: Optional[str] = None) -> dt.date:
    """Return the current calendar day, in ``timezone`` when one is given."""

    if not timezone:
        return dt.date.today()
    try:
        zone = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RuntimeError(f"unknown_timezone:{timezone}") from exc
    return dt.datetime.now(zone).date()


def days_until(expiry: dt.date, today: dt.date) -> int:
    return (expiry - today).days


def item_status(expiry: dt.date, today: dt.date, soon_days: int = DEFAULT_SOON_DAYS) -> ItemStatus:
    remaining = days_until(expiry, today)
    if remaining < 0:
        return "expired"
    if remaining <= soon_days:
        return "soon"
    return "ok"


__all__ = [
    "ItemStatus",
    "StoredDateError",
    "days_until",
    "format_date_for_display",
    "format_date_for_storage",
    "item_status",
    "local_today",
    "parse_stored_date",
]
