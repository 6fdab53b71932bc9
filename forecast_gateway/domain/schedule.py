"""Recurring schedule rules - occurrence dates for income and expense patterns"""

from datetime import date, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from forecast_gateway.domain.exceptions import InvalidScheduleError
from forecast_gateway.utils.date_utils import add_months, end_of_month, generate_date_range

MONTHLY_PARAMS_INVALID = "Monthly params should be -1 or integers between 1 and 28"

# Sunday-first numbering, matching how the mobile clients store weekdays
WEEKDAYS = {
    "sunday": 0,
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
}

# Widest gap between two raw occurrences of any rule (weekday monthly: 5 weeks)
SEARCH_WINDOW_DAYS = 35
# Weekend rolling moves a date by at most this many days
ROLL_SLACK_DAYS = 7


class Interval(str, Enum):
    MONTHLY = "MONTHLY"
    SEMI_MONTHLY = "SEMI_MONTHLY"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    WEEKDAY_MONTHLY = "WEEKDAY_MONTHLY"


def weekday_number(day: date) -> int:
    """Sunday = 0 ... Saturday = 6"""
    return (day.weekday() + 1) % 7


def week_since_epoch(day: date) -> int:
    # 1970-01-01 was a Thursday; weeks start on the following Sunday
    days_since_epoch = (day - date(1970, 1, 1)).days
    return (days_since_epoch - 3) // 7


def day_of_month(day_in_month: date, day: int) -> date:
    """Resolve a monthly param (-1 = last day) within day_in_month's month"""
    if day == -1:
        return end_of_month(day_in_month)
    return day_in_month.replace(day=day)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_monthly_params(params: Sequence[int]) -> None:
    for param in params:
        if param > 28 or param < -1 or param == 0:
            raise InvalidScheduleError(MONTHLY_PARAMS_INVALID)


class ScheduleRule:
    """
    Occurrence-date generator for a recurring transaction.

    Subclasses only list the raw (unrolled) dates inside a range; searching
    forwards/backwards and rolling off weekends is shared here.

    Roll direction:
    - 0: occurrences stay where they land
    - negative: weekend occurrences move to the previous Friday
    - positive: weekend occurrences move to the following Monday
    - +/-2: as +/-1, but roll the other way if that would change the month
    """

    interval: Interval

    def __init__(self, roll_direction: int = 0):
        if not _is_int(roll_direction) or roll_direction < -2 or roll_direction > 2:
            raise InvalidScheduleError("Roll direction must be an integer between -2 and 2")
        self.roll_direction = roll_direction

    @staticmethod
    def from_params(
        interval: "Interval | str",
        params: Optional[Sequence],
        roll_direction: int = 0,
        weekly_start: Optional[date] = None,
    ) -> "ScheduleRule":
        if not isinstance(interval, Interval):
            try:
                interval = Interval(str(interval).upper())
            except ValueError as e:
                raise InvalidScheduleError("Unrecognized Interval") from e

        params = list(params) if params is not None else []
        if interval is Interval.MONTHLY:
            return MonthlyRule(params, roll_direction)
        if interval is Interval.SEMI_MONTHLY:
            return SemiMonthlyRule(params, roll_direction)
        if interval is Interval.WEEKLY:
            return WeeklyRule(params, roll_direction)
        if interval is Interval.BIWEEKLY:
            return BiweeklyRule(params, roll_direction, weekly_start)
        return WeekdayMonthlyRule(params, roll_direction)

    def raw_between(self, start: date, stop: date) -> List[date]:
        """Unrolled occurrences within [start, stop], ascending"""
        raise NotImplementedError

    @property
    def params(self) -> list:
        raise NotImplementedError

    def roll(self, day: date) -> date:
        if self.roll_direction == 0 or day.weekday() < 5:
            return day

        forward = self.roll_direction > 0
        rolled = self._roll_off_weekend(day, forward)
        if abs(self.roll_direction) == 2 and rolled.month != day.month:
            rolled = self._roll_off_weekend(day, not forward)
        return rolled

    @staticmethod
    def _roll_off_weekend(day: date, forward: bool) -> date:
        step = timedelta(days=1 if forward else -1)
        while day.weekday() >= 5:
            day += step
        return day

    def _rolled(self, days: Iterable[date]) -> List[date]:
        return [self.roll(day) for day in days]

    def after(self, day: date, inclusive: bool = False) -> date:
        """First occurrence after day (on day too when inclusive)"""
        lo = day - timedelta(days=ROLL_SLACK_DAYS)
        hi = day + timedelta(days=SEARCH_WINDOW_DAYS)
        while True:
            for candidate in self._rolled(self.raw_between(lo, hi)):
                if candidate > day or (inclusive and candidate == day):
                    return candidate
            hi += timedelta(days=SEARCH_WINDOW_DAYS)

    def before(self, day: date, inclusive: bool = False) -> date:
        """Last occurrence before day (on day too when inclusive)"""
        lo = day - timedelta(days=SEARCH_WINDOW_DAYS)
        hi = day + timedelta(days=ROLL_SLACK_DAYS)
        while True:
            for candidate in reversed(self._rolled(self.raw_between(lo, hi))):
                if candidate < day or (inclusive and candidate == day):
                    return candidate
            lo -= timedelta(days=SEARCH_WINDOW_DAYS)

    def between(self, start: date, stop: date, inclusive: bool = False) -> List[date]:
        if start > stop:
            raise ValueError(f"{start} can not be greater than {stop}")

        raw = self.raw_between(start - timedelta(days=ROLL_SLACK_DAYS), stop + timedelta(days=ROLL_SLACK_DAYS))
        dates: List[date] = []
        for candidate in self._rolled(raw):
            if inclusive:
                in_range = start <= candidate <= stop
            else:
                in_range = start < candidate < stop
            # Two weekend days can roll onto the same business day
            if in_range and (not dates or dates[-1] != candidate):
                dates.append(candidate)
        return dates

    def __repr__(self) -> str:
        return f"{type(self).__name__}(params={self.params!r}, roll_direction={self.roll_direction})"


class _MonthDaysRule(ScheduleRule):
    """Rules whose occurrences are computed month by month"""

    def days_in_month(self, day_in_month: date) -> List[date]:
        raise NotImplementedError

    def raw_between(self, start: date, stop: date) -> List[date]:
        dates: List[date] = []
        month = start.replace(day=1)
        while month <= stop:
            dates.extend(d for d in self.days_in_month(month) if start <= d <= stop)
            month = add_months(month, 1)
        return sorted(dates)


class MonthlyRule(_MonthDaysRule):
    interval = Interval.MONTHLY

    def __init__(self, params: List, roll_direction: int = 0):
        super().__init__(roll_direction)
        if any(not _is_int(p) for p in params):
            raise InvalidScheduleError("params should be array of integers with length 1")
        # No params defaults to the first of the month
        if not params:
            params = [1]
        _validate_monthly_params(params)
        self.day = params[0]

    @property
    def params(self) -> list:
        return [self.day]

    def days_in_month(self, day_in_month: date) -> List[date]:
        return [day_of_month(day_in_month, self.day)]


class SemiMonthlyRule(_MonthDaysRule):
    interval = Interval.SEMI_MONTHLY

    def __init__(self, params: List, roll_direction: int = 0):
        super().__init__(roll_direction)
        if len(params) != 2 or any(not _is_int(p) for p in params):
            raise InvalidScheduleError("params should be array of integers with length 2")
        _validate_monthly_params(params)
        self.first_day, self.second_day = params

    @property
    def params(self) -> list:
        return [self.first_day, self.second_day]

    def days_in_month(self, day_in_month: date) -> List[date]:
        return sorted({day_of_month(day_in_month, self.first_day), day_of_month(day_in_month, self.second_day)})


class WeekdayMonthlyRule(_MonthDaysRule):
    """n-th weekday of every month, e.g. the 2nd friday"""

    interval = Interval.WEEKDAY_MONTHLY

    def __init__(self, params: List, roll_direction: int = 0):
        super().__init__(roll_direction)
        if len(params) != 2 or params[1] not in WEEKDAYS or not _is_int(params[0]):
            raise InvalidScheduleError("params must be an integer and a day of the week")
        if params[0] > 4 or params[0] < 1:
            raise InvalidScheduleError("params[0] must be an integer between 1 and 4")
        self.week_of_month, self.weekday = params

    @property
    def params(self) -> list:
        return [self.week_of_month, self.weekday]

    def days_in_month(self, day_in_month: date) -> List[date]:
        first = day_in_month.replace(day=1)
        offset = (WEEKDAYS[self.weekday] - weekday_number(first)) % 7
        return [first + timedelta(days=offset + 7 * (self.week_of_month - 1))]


class WeeklyRule(ScheduleRule):
    interval = Interval.WEEKLY

    def __init__(self, params: List, roll_direction: int = 0):
        super().__init__(roll_direction)
        if not params or any(p not in WEEKDAYS for p in params):
            raise InvalidScheduleError("params must be an array of lowercased weekdays")
        self.weekdays = sorted(set(params), key=lambda name: WEEKDAYS[name])

    @property
    def params(self) -> list:
        return list(self.weekdays)

    def matches(self, day: date) -> bool:
        return weekday_number(day) in {WEEKDAYS[name] for name in self.weekdays}

    def raw_between(self, start: date, stop: date) -> List[date]:
        if start > stop:
            return []
        return [day for day in generate_date_range(start, stop) if self.matches(day)]


class BiweeklyRule(WeeklyRule):
    """Every other week on one weekday; weekly_start fixes which weeks"""

    interval = Interval.BIWEEKLY

    def __init__(self, params: List, roll_direction: int = 0, weekly_start: Optional[date] = None):
        if len(params) != 1 or params[0] not in WEEKDAYS:
            raise InvalidScheduleError("params[0] must be lowercased weekday")
        if weekly_start is None:
            raise InvalidScheduleError("weekly_start is required for biweekly intervals")
        super().__init__(params, roll_direction)
        self.weekly_start = self._anchor(weekly_start, params[0])

    @staticmethod
    def _anchor(weekly_start: date, weekday: str) -> date:
        # Same-week occurrence, or the next one when that is closer to weekly_start
        in_week = weekly_start + timedelta(days=WEEKDAYS[weekday] - weekday_number(weekly_start))
        if in_week < weekly_start:
            following = in_week + timedelta(days=7)
            if (following - weekly_start) < (weekly_start - in_week):
                return following
        return in_week

    def matches(self, day: date) -> bool:
        same_parity = week_since_epoch(day) % 2 == week_since_epoch(self.weekly_start) % 2
        return same_parity and super().matches(day)
