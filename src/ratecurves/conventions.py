"""
Day count conventions, calendars and business day adjustments.

Supported Day Counts:
- ACT/360: Actual days / 360 (money markets, OIS)
- ACT/365: Actual days / 365 fixed
- ACT/ACT: ISDA actual/actual, split by calendar year
- ACT/ACT BOND: ICMA actual/actual against a coupon reference period
- 30/360: US bond basis
- 30E/360: European 30/360

Business Day Conventions:
- Following: Move to next business day
- Modified Following: Move to next business day, unless it falls in next month (then previous)
- Preceding: Move to previous business day
- Modified Preceding: Move to previous business day, unless it falls in previous month
- Unadjusted: Leave the date alone

The curve code only ever talks to this module through year_fraction,
Calendar.adjust and Calendar.advance.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import FrozenSet, Iterable, Optional
import calendar as _calendar


class DayCount(Enum):
    """Day count convention enumeration."""
    ACT_360 = "ACT/360"
    ACT_365 = "ACT/365"
    ACT_ACT = "ACT/ACT"
    ACT_ACT_BOND = "ACT/ACT BOND"
    THIRTY_360 = "30/360"
    THIRTY_360_EU = "30E/360"

    @classmethod
    def from_string(cls, s: str) -> "DayCount":
        """Parse day count from string representation."""
        mapping = {
            "ACT/360": cls.ACT_360,
            "ACT360": cls.ACT_360,
            "ACTUAL360": cls.ACT_360,
            "ACT/365": cls.ACT_365,
            "ACT365": cls.ACT_365,
            "ACT/365F": cls.ACT_365,
            "ACTUAL365FIXED": cls.ACT_365,
            "ACT/ACT": cls.ACT_ACT,
            "ACTACT": cls.ACT_ACT,
            "ACT/ACTISDA": cls.ACT_ACT,
            "ACT/ACTBOND": cls.ACT_ACT_BOND,
            "ACT/ACTICMA": cls.ACT_ACT_BOND,
            "30/360": cls.THIRTY_360,
            "30360": cls.THIRTY_360,
            "30E/360": cls.THIRTY_360_EU,
            "30/360EU": cls.THIRTY_360_EU,
        }
        key = s.upper().replace(" ", "").replace("_", "")
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown day count convention: {s}")

    def year_fraction(
        self,
        start: date,
        end: date,
        ref_start: Optional[date] = None,
        ref_end: Optional[date] = None
    ) -> float:
        """Year fraction between two dates under this convention."""
        return year_fraction(start, end, self, ref_start, ref_end)


class BusinessDayConvention(Enum):
    """Business day adjustment convention."""
    MODIFIED_FOLLOWING = "ModifiedFollowing"
    FOLLOWING = "Following"
    PRECEDING = "Preceding"
    MODIFIED_PRECEDING = "ModifiedPreceding"
    UNADJUSTED = "Unadjusted"


class Compounding(Enum):
    """Interest rate compounding convention."""
    SIMPLE = "Simple"
    COMPOUNDED = "Compounded"
    CONTINUOUS = "Continuous"
    SIMPLE_THEN_COMPOUNDED = "SimpleThenCompounded"


class Frequency(Enum):
    """Payments per year. ONCE marks a single payment at maturity."""
    ONCE = 0
    ANNUAL = 1
    SEMIANNUAL = 2
    QUARTERLY = 4
    BIMONTHLY = 6
    MONTHLY = 12
    WEEKLY = 52
    DAILY = 365

    @classmethod
    def from_string(cls, s: str) -> "Frequency":
        aliases = {
            "ANNUAL": cls.ANNUAL,
            "SEMI": cls.SEMIANNUAL,
            "SEMIANNUAL": cls.SEMIANNUAL,
            "SEMI_ANNUAL": cls.SEMIANNUAL,
            "QUARTERLY": cls.QUARTERLY,
            "MONTHLY": cls.MONTHLY,
            "ONCE": cls.ONCE,
        }
        key = s.upper().strip()
        if key in aliases:
            return aliases[key]
        raise ValueError(f"Unknown frequency: {s}")


class TimeUnit(Enum):
    """Unit of a calendar period."""
    DAYS = "D"
    WEEKS = "W"
    MONTHS = "M"
    YEARS = "Y"


def days_in_month(year: int, month: int) -> int:
    """Return number of days in a month."""
    return _calendar.monthrange(year, month)[1]


def add_months(d: date, months: int, end_of_month: bool = False) -> date:
    """
    Add calendar months, clipping the day to the target month length.

    With end_of_month set, a date on the last day of its month maps to
    the last day of the target month.
    """
    year = d.year + (d.month + months - 1) // 12
    month = (d.month + months - 1) % 12 + 1
    last = days_in_month(year, month)
    if end_of_month and d.day == days_in_month(d.year, d.month):
        return date(year, month, last)
    return date(year, month, min(d.day, last))


def year_fraction(
    start: date,
    end: date,
    day_count: DayCount,
    ref_start: Optional[date] = None,
    ref_end: Optional[date] = None
) -> float:
    """
    Calculate year fraction between two dates using specified day count convention.

    Args:
        start: Start date
        end: End date
        day_count: Day count convention
        ref_start: Reference period start (ACT/ACT BOND only)
        ref_end: Reference period end (ACT/ACT BOND only)

    Returns:
        Year fraction as float. Negative when end is before start.

    Conventions:
        ACT/360: (end - start).days / 360
        ACT/365: (end - start).days / 365
        ACT/ACT: Actual days / actual days in each calendar year spanned
        ACT/ACT BOND: days / (reference period days * coupons per year)
        30/360: Assumes 30 days per month, 360 days per year
    """
    if start == end:
        return 0.0
    if end < start:
        return -year_fraction(end, start, day_count, ref_start, ref_end)

    actual_days = (end - start).days

    if day_count == DayCount.ACT_360:
        return actual_days / 360.0

    elif day_count == DayCount.ACT_365:
        return actual_days / 365.0

    elif day_count == DayCount.ACT_ACT:
        return _act_act_isda(start, end)

    elif day_count == DayCount.ACT_ACT_BOND:
        if ref_start is None or ref_end is None or ref_end <= ref_start:
            return _act_act_isda(start, end)
        ref_days = (ref_end - ref_start).days
        ref_months = (ref_end.year - ref_start.year) * 12 + ref_end.month - ref_start.month
        ref_years = max(ref_months, 1) / 12.0
        return actual_days / ref_days * ref_years

    elif day_count == DayCount.THIRTY_360:
        d1, d2 = start.day, end.day
        if d1 == 31:
            d1 = 30
        if d2 == 31 and d1 == 30:
            d2 = 30
        return (360 * (end.year - start.year) + 30 * (end.month - start.month) + (d2 - d1)) / 360.0

    elif day_count == DayCount.THIRTY_360_EU:
        d1, d2 = min(start.day, 30), min(end.day, 30)
        return (360 * (end.year - start.year) + 30 * (end.month - start.month) + (d2 - d1)) / 360.0

    else:
        raise ValueError(f"Unknown day count: {day_count}")


def _act_act_isda(start: date, end: date) -> float:
    total = 0.0
    current = start
    while current < end:
        year_end = date(current.year + 1, 1, 1)
        period_end = min(year_end, end)
        days_in_year = 366 if _calendar.isleap(current.year) else 365
        total += (period_end - current).days / days_in_year
        current = period_end
    return total


@dataclass(frozen=True)
class Calendar:
    """
    Business day calendar.

    Weekends (Saturday/Sunday) are always holidays; extra holidays can be
    supplied as a set of dates.

    Attributes:
        name: Calendar name, used in repr and joint calendars
        holidays: Additional non-business dates
    """
    name: str = "WeekendsOnly"
    holidays: FrozenSet[date] = field(default_factory=frozenset)

    @classmethod
    def with_holidays(cls, name: str, holidays: Iterable[date]) -> "Calendar":
        return cls(name=name, holidays=frozenset(holidays))

    def joint(self, other: "Calendar") -> "Calendar":
        """Calendar whose holidays are the union of both calendars."""
        return Calendar(
            name=f"Joint({self.name}, {other.name})",
            holidays=self.holidays | other.holidays
        )

    def is_business_day(self, d: date) -> bool:
        return is_business_day(d, self.holidays)

    def is_end_of_month(self, d: date) -> bool:
        """True if d is the last business day of its month."""
        return d.month != self.adjust(d + timedelta(days=1)).month

    def end_of_month(self, d: date) -> date:
        """Last business day of the month containing d."""
        last = date(d.year, d.month, days_in_month(d.year, d.month))
        return self.adjust(last, BusinessDayConvention.PRECEDING)

    def adjust(
        self,
        d: date,
        convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING
    ) -> date:
        return adjust_business_day(d, convention, self.holidays)

    def advance(
        self,
        d: date,
        n: int,
        unit: TimeUnit = TimeUnit.DAYS,
        convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        end_of_month: bool = False
    ) -> date:
        """
        Advance a date by n units.

        Days are counted in business days; weeks, months and years are
        calendar periods adjusted with the given convention. With
        end_of_month set, a start on the last business day of a month
        lands on the last business day of the target month.
        """
        if unit == TimeUnit.DAYS:
            if n == 0:
                return self.adjust(d, convention)
            step = timedelta(days=1 if n > 0 else -1)
            result = d
            remaining = abs(n)
            while remaining > 0:
                result += step
                if self.is_business_day(result):
                    remaining -= 1
            return result

        if unit == TimeUnit.WEEKS:
            return self.adjust(d + timedelta(weeks=n), convention)

        months = n if unit == TimeUnit.MONTHS else 12 * n
        result = add_months(d, months)
        if end_of_month and self.is_end_of_month(d):
            return self.end_of_month(result)
        return self.adjust(result, convention)

    def business_days_between(self, start: date, end: date) -> int:
        """Business days in (start, end]."""
        count = 0
        current = start
        while current < end:
            current += timedelta(days=1)
            if self.is_business_day(current):
                count += 1
        return count

    def __repr__(self) -> str:
        return f"Calendar({self.name}, holidays={len(self.holidays)})"


def is_business_day(d: date, holidays: Optional[Iterable[date]] = None) -> bool:
    """
    Check if a date is a business day.

    Uses weekend-only calendar by default (Saturday/Sunday are non-business days).

    Args:
        d: Date to check
        holidays: Optional set of holiday dates

    Returns:
        True if business day, False otherwise
    """
    if d.weekday() >= 5:
        return False
    if holidays and d in holidays:
        return False
    return True


def adjust_business_day(
    d: date,
    convention: BusinessDayConvention,
    holidays: Optional[Iterable[date]] = None
) -> date:
    """
    Adjust a date according to business day convention.

    Args:
        d: Date to adjust
        convention: Business day adjustment rule
        holidays: Optional set of holiday dates

    Returns:
        Adjusted date
    """
    if convention == BusinessDayConvention.UNADJUSTED or is_business_day(d, holidays):
        return d

    one_day = timedelta(days=1)

    if convention in (BusinessDayConvention.FOLLOWING, BusinessDayConvention.MODIFIED_FOLLOWING):
        adjusted = d
        while not is_business_day(adjusted, holidays):
            adjusted += one_day
        if convention == BusinessDayConvention.MODIFIED_FOLLOWING and adjusted.month != d.month:
            return adjust_business_day(d, BusinessDayConvention.PRECEDING, holidays)
        return adjusted

    if convention in (BusinessDayConvention.PRECEDING, BusinessDayConvention.MODIFIED_PRECEDING):
        adjusted = d
        while not is_business_day(adjusted, holidays):
            adjusted -= one_day
        if convention == BusinessDayConvention.MODIFIED_PRECEDING and adjusted.month != d.month:
            return adjust_business_day(d, BusinessDayConvention.FOLLOWING, holidays)
        return adjusted

    raise ValueError(f"Unknown business day convention: {convention}")


__all__ = [
    "DayCount",
    "BusinessDayConvention",
    "Compounding",
    "Frequency",
    "TimeUnit",
    "Calendar",
    "add_months",
    "days_in_month",
    "year_fraction",
    "is_business_day",
    "adjust_business_day",
]
