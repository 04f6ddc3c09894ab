from __future__ import annotations

import datetime as dt
from types import SimpleNamespace

import pytest

from shelflife import dates
from shelflife.dates import (
    StoredDateError,
    days_until,
    format_date_for_display,
    format_date_for_storage,
    item_status,
    parse_stored_date,
)

TODAY = dt.date(2026, 10, 18)


def test_storage_format_is_zero_padded() -> None:
    assert format_date_for_storage(dt.date(2027, 1, 5)) == "2027-01-05"


def test_parse_stored_date() -> None:
    assert parse_stored_date("2027-01-05") == dt.date(2027, 1, 5)


@pytest.mark.parametrize(
    "value",
    ["", "2027/01/05", "2027-02-30", "20270105", "2027-1x-05", "2027-01-0\u00b2", "\u0662\u0660\u0662\u0667-01-05"],
)
def test_parse_stored_date_rejects_malformed_values(value: str) -> None:
    with pytest.raises(StoredDateError):
        parse_stored_date(value)


def test_display_format() -> None:
    assert format_date_for_display("2027-01-05") == "Jan 5, 2027"
    assert format_date_for_display("2026-09-30") == "Sep 30, 2026"


@pytest.mark.parametrize(
    "expiry,expected",
    [
        (dt.date(2026, 10, 17), "expired"),
        (dt.date(2026, 10, 18), "soon"),
        (dt.date(2026, 10, 25), "soon"),
        (dt.date(2026, 10, 26), "ok"),
    ],
)
def test_item_status_boundaries(expiry: dt.date, expected: str) -> None:
    assert item_status(expiry, TODAY) == expected


def test_item_status_custom_threshold() -> None:
    assert item_status(dt.date(2026, 10, 20), TODAY, soon_days=1) == "ok"
    assert item_status(dt.date(2026, 10, 18), TODAY, soon_days=0) == "soon"


def test_days_until_crosses_year_boundary() -> None:
    assert days_until(dt.date(2027, 1, 25), TODAY) == 99
    assert days_until(dt.date(2026, 10, 10), TODAY) == -8


def test_local_today_without_timezone_uses_process_clock(monkeypatch: pytest.MonkeyPatch) -> None:
    class FrozenDate(dt.date):
        @classmethod
        def today(cls) -> dt.date:
            return cls(2026, 10, 18)

    monkeypatch.setattr(dates, "dt", SimpleNamespace(date=FrozenDate))

    assert dates.local_today() == TODAY


def test_local_today_rejects_unknown_timezone() -> None:
    with pytest.raises(RuntimeError):
        dates.local_today("Not/A_Zone")
