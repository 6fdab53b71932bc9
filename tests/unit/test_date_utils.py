"""Unit tests for date helpers"""

from datetime import date, datetime, timezone
from forecast_gateway.utils.date_utils import (
    add_months,
    end_of_month,
    generate_date_range,
    start_of_month,
    to_ymd,
    today_in_timezone,
)


def test_generate_date_range_inclusive():
    days = generate_date_range(date(2024, 2, 27), date(2024, 3, 1))
    assert days == [date(2024, 2, 27), date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]


def test_generate_date_range_single_day():
    assert generate_date_range(date(2024, 3, 1), date(2024, 3, 1)) == [date(2024, 3, 1)]


def test_month_bounds():
    assert start_of_month(date(2024, 2, 17)) == date(2024, 2, 1)
    assert end_of_month(date(2024, 2, 17)) == date(2024, 2, 29)
    assert end_of_month(date(2023, 2, 17)) == date(2023, 2, 28)


def test_add_months_clamps_day():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 11, 15), 2) == date(2025, 1, 15)
    assert add_months(date(2024, 1, 15), -1) == date(2023, 12, 15)


def test_today_in_timezone_uses_local_calendar_day():
    """01:00 UTC is still the previous evening in New York"""
    now = datetime(2024, 3, 12, 1, 0, tzinfo=timezone.utc)
    assert today_in_timezone("America/New_York", now) == date(2024, 3, 11)
    assert today_in_timezone("UTC", now) == date(2024, 3, 12)


def test_to_ymd():
    assert to_ymd(date(2024, 3, 1)) == "2024-03-01"
    assert to_ymd(None) is None


def test_add_months_backwards_into_short_month():
    assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
    assert add_months(date(2023, 3, 31), -13) == date(2022, 2, 28)
