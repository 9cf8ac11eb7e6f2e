"""
Date utilities for rates calculations.

Provides:
- Period: tenor value type with parsing ("3M", "2Y", "1W", "2D")
- Schedule: adjusted coupon/payment date generation for swaps and bonds
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple, Union
import re

from .conventions import (
    BusinessDayConvention,
    Calendar,
    Frequency,
    TimeUnit,
    add_months,
)
from .errors import InvalidInstrumentError


@dataclass(frozen=True)
class Period:
    """
    A tenor such as 3 months or 2 years.

    Attributes:
        length: Number of units (may be zero or negative)
        unit: Time unit
    """
    length: int
    unit: TimeUnit = TimeUnit.DAYS

    # Tenor regex pattern: number + unit (D/W/M/Y)
    TENOR_PATTERN = re.compile(r'^(-?\d+)([DWMY])$', re.IGNORECASE)

    @classmethod
    def parse(cls, tenor: Union[str, "Period"]) -> "Period":
        """
        Parse a tenor string into a Period.

        Args:
            tenor: Tenor string like "1D", "3M", "2Y" (or a Period, returned as is)

        Raises:
            ValueError: If tenor format is invalid
        """
        if isinstance(tenor, Period):
            return tenor
        match = cls.TENOR_PATTERN.match(tenor.upper().strip())
        if not match:
            raise ValueError(f"Invalid tenor format: {tenor}. Expected format like '3M', '2Y'")
        return cls(int(match.group(1)), TimeUnit(match.group(2).upper()))

    @classmethod
    def from_frequency(cls, frequency: Frequency) -> "Period":
        """Coupon period for a payment frequency."""
        if frequency == Frequency.ONCE:
            return cls(0, TimeUnit.YEARS)
        if frequency == Frequency.DAILY:
            return cls(1, TimeUnit.DAYS)
        if frequency == Frequency.WEEKLY:
            return cls(1, TimeUnit.WEEKS)
        return cls(12 // frequency.value, TimeUnit.MONTHS)

    def frequency(self) -> Frequency:
        """Payment frequency matching this period."""
        months = self.months()
        if self.length == 0:
            return Frequency.ONCE
        if months is None:
            raise ValueError(f"No frequency corresponds to {self}")
        for freq in Frequency:
            if freq.value and freq.value <= 12 and 12 // freq.value == months and 12 % freq.value == 0:
                return freq
        raise ValueError(f"No frequency corresponds to {self}")

    def months(self) -> Optional[int]:
        """Length in months for month/year periods, None otherwise."""
        if self.unit == TimeUnit.MONTHS:
            return self.length
        if self.unit == TimeUnit.YEARS:
            return 12 * self.length
        return None

    def years(self) -> float:
        """Approximate length in years (days counted as 1/365)."""
        if self.unit == TimeUnit.DAYS:
            return self.length / 365.0
        if self.unit == TimeUnit.WEEKS:
            return self.length * 7 / 365.0
        if self.unit == TimeUnit.MONTHS:
            return self.length / 12.0
        return float(self.length)

    def __neg__(self) -> "Period":
        return Period(-self.length, self.unit)

    def __str__(self) -> str:
        return f"{self.length}{self.unit.value}"


def add_period(start: date, period: Union[str, Period]) -> date:
    """
    Add a period to a date without any calendar adjustment.

    Days and weeks are calendar days; months and years clip to month end.
    """
    period = Period.parse(period)
    if period.unit == TimeUnit.DAYS:
        return start + timedelta(days=period.length)
    if period.unit == TimeUnit.WEEKS:
        return start + timedelta(weeks=period.length)
    return add_months(start, period.months())


def advance(
    start: date,
    period: Union[str, Period],
    calendar: Calendar,
    convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
    end_of_month: bool = False
) -> date:
    """Advance a date by a period on a calendar."""
    period = Period.parse(period)
    return calendar.advance(start, period.length, period.unit, convention, end_of_month)


class Schedule:
    """
    Sequence of adjusted schedule dates.

    The first date is the accrual start; each later date closes one period.
    Unadjusted dates are kept alongside, since accrual fractions under
    ACT/ACT BOND need the regular reference periods.
    """

    def __init__(
        self,
        dates: Sequence[date],
        unadjusted: Optional[Sequence[date]] = None,
        tenor: Optional[Period] = None
    ):
        if len(dates) < 2:
            raise InvalidInstrumentError("A schedule needs at least two dates")
        for d0, d1 in zip(dates[:-1], dates[1:]):
            if d1 <= d0:
                raise InvalidInstrumentError(f"Schedule dates not increasing: {d0} >= {d1}")
        self.dates: List[date] = list(dates)
        self.unadjusted: List[date] = list(unadjusted) if unadjusted is not None else list(dates)
        self.tenor = tenor

    @classmethod
    def from_dates(cls, dates: Sequence[date]) -> "Schedule":
        return cls(dates)

    @classmethod
    def generate(
        cls,
        effective: date,
        termination: date,
        tenor: Union[str, Period],
        calendar: Optional[Calendar] = None,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        termination_convention: Optional[BusinessDayConvention] = None,
        backward: bool = True,
        end_of_month: bool = False
    ) -> "Schedule":
        """
        Generate a schedule between effective and termination dates.

        Args:
            effective: Schedule start (accrual start)
            termination: Schedule end (maturity)
            tenor: Coupon period; a zero period gives a single period
            calendar: Holiday calendar for adjustments
            convention: Business day adjustment for intermediate dates
            termination_convention: Adjustment of the final date (defaults to convention)
            backward: Roll dates backward from termination (short front stub)
            end_of_month: Keep dates on month ends when the anchor date is one

        Returns:
            Schedule with adjusted dates
        """
        if termination <= effective:
            raise InvalidInstrumentError(
                f"Termination {termination} must be after effective date {effective}"
            )
        calendar = calendar or Calendar()
        tenor = Period.parse(tenor)
        if termination_convention is None:
            termination_convention = convention

        if tenor.length == 0:
            unadjusted = [effective, termination]
        elif backward:
            unadjusted = [termination]
            i = 1
            while True:
                prev = _roll(termination, tenor, -i, end_of_month)
                if prev <= effective:
                    break
                unadjusted.insert(0, prev)
                i += 1
            unadjusted.insert(0, effective)
        else:
            unadjusted = [effective]
            i = 1
            while True:
                nxt = _roll(effective, tenor, i, end_of_month)
                if nxt >= termination:
                    break
                unadjusted.append(nxt)
                i += 1
            unadjusted.append(termination)

        adjusted = [calendar.adjust(d, convention) for d in unadjusted[:-1]]
        adjusted.append(calendar.adjust(unadjusted[-1], termination_convention))

        # adjustment can collapse a short stub onto its neighbour
        dates, raw = [adjusted[0]], [unadjusted[0]]
        for d, u in zip(adjusted[1:], unadjusted[1:]):
            if d > dates[-1]:
                dates.append(d)
                raw.append(u)
        return cls(dates, raw, tenor)

    def periods(self) -> List[Tuple[date, date]]:
        """(start, end) pairs of adjusted accrual periods."""
        return list(zip(self.dates[:-1], self.dates[1:]))

    def reference_periods(self) -> List[Tuple[date, date]]:
        """
        Regular (start, end) reference periods for each accrual period.

        Stub periods get the full regular period ending (or starting) on
        their unadjusted boundary.
        """
        refs = []
        for start, end in zip(self.unadjusted[:-1], self.unadjusted[1:]):
            if self.tenor is None or self.tenor.length == 0:
                refs.append((start, end))
                continue
            regular_start = _roll(end, self.tenor, -1, False)
            if regular_start == start:
                refs.append((start, end))
            else:
                refs.append((regular_start, end))
        return refs

    @property
    def start_date(self) -> date:
        return self.dates[0]

    @property
    def end_date(self) -> date:
        return self.dates[-1]

    def __len__(self) -> int:
        return len(self.dates)

    def __iter__(self):
        return iter(self.dates)

    def __getitem__(self, i: int) -> date:
        return self.dates[i]

    def __repr__(self) -> str:
        return f"Schedule({self.start_date} -> {self.end_date}, {len(self.dates) - 1} periods)"


def _roll(anchor: date, tenor: Period, k: int, end_of_month: bool) -> date:
    """anchor moved by k tenors, counted from the anchor to avoid day drift."""
    months = tenor.months()
    if months is not None:
        return add_months(anchor, months * k, end_of_month)
    if tenor.unit == TimeUnit.WEEKS:
        return anchor + timedelta(weeks=tenor.length * k)
    return anchor + timedelta(days=tenor.length * k)


__all__ = [
    "Period",
    "Schedule",
    "add_period",
    "advance",
]
