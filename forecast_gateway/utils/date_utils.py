"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo
from dateutil.relativedelta import relativedelta


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def end_of_month(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def add_months(day: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length"""
    return day + relativedelta(months=months)


def today_in_timezone(timezone: str, now: Optional[datetime] = None) -> date:
    """Calendar date at the start of the current day in the given timezone"""
    tz = ZoneInfo(timezone)
    if now is None:
        return datetime.now(tz).date()
    if now.tzinfo is None:
        return now.date()
    return now.astimezone(tz).date()


def to_ymd(day: Optional[date]) -> Optional[str]:
    return day.isoformat() if day is not None else None
