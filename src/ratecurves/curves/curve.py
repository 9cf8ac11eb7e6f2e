"""
Yield term structures.

The YieldTermStructure base class provides:
- Discount factor P(0,t)
- Zero rate z(t) under any compounding convention
- Forward rate f(t1, t2)
- Instantaneous forward rate f(t)

Concrete curves only implement _discount_impl(t). Times are year
fractions from the reference date under the curve's day count. Queries
beyond max_time fail with ExtrapolationError unless extrapolation is
enabled on the curve, process-wide via settings, or per call.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..conventions import Compounding, DayCount, Frequency, year_fraction
from ..errors import DateBeforeReferenceError, ExtrapolationError, InvalidInstrumentError
from ..quotes import Quote, as_quote
from ..rates import InterestRate
from ..settings import settings
from .interpolation import Interpolation, Interpolator, LogLinearInterpolator, LinearInterpolator, TIME_EPSILON
from .traits import CurveTraits, Discount, ZeroYield

DateOrTime = Union[date, float]

# step used for short-rate limits at t=0 and numerical forwards
_DT = 1e-4


@dataclass
class CurveNode:
    """A single point on the curve."""
    date: date
    time: float  # Year fraction from reference date
    value: float  # In the traits' space (discount factor, zero rate)


class YieldTermStructure(ABC):
    """
    Interest rate term structure.

    Attributes:
        reference_date: Date at which discount factors equal 1
        day_count: Day count turning dates into curve times
    """

    def __init__(self, reference_date: date, day_count: DayCount = DayCount.ACT_365):
        self.reference_date = reference_date
        self.day_count = day_count
        self._extrapolate: Optional[bool] = None

    # ------------------------------------------------------------------
    # Range and extrapolation
    # ------------------------------------------------------------------
    @property
    @abstractmethod
    def max_date(self) -> date:
        """Latest date for which the curve returns values without extrapolation."""

    @property
    def max_time(self) -> float:
        return self.time_from_reference(self.max_date)

    @property
    def generation(self) -> int:
        """Token that grows whenever the curve inputs may have changed."""
        return 0

    def enable_extrapolation(self, enabled: bool = True) -> None:
        self._extrapolate = enabled

    def disable_extrapolation(self) -> None:
        self._extrapolate = False

    def allows_extrapolation(self) -> bool:
        if self._extrapolate is None:
            return settings.allow_extrapolation
        return self._extrapolate

    def time_from_reference(self, d: date) -> float:
        return year_fraction(self.reference_date, d, self.day_count)

    def _to_time(self, d_or_t: DateOrTime) -> float:
        if isinstance(d_or_t, date):
            return self.time_from_reference(d_or_t)
        return float(d_or_t)

    def _check_range(self, t: float, extrapolate: bool) -> None:
        if t < 0.0:
            raise DateBeforeReferenceError(f"Negative time ({t}) given")
        max_t = self.max_time
        if t > max_t + TIME_EPSILON * max(1.0, max_t):
            if not (extrapolate or self.allows_extrapolation()):
                raise ExtrapolationError(
                    f"Time ({t}) is past max curve time ({max_t}); enable extrapolation to query it"
                )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def discount(self, d_or_t: DateOrTime, extrapolate: bool = False) -> float:
        """
        Get discount factor P(0,t).

        Args:
            d_or_t: Date or year fraction
            extrapolate: Allow this query beyond max_date

        Returns:
            Discount factor (exactly 1.0 at the reference date)
        """
        t = self._to_time(d_or_t)
        self._check_range(t, extrapolate)
        if t == 0.0:
            return 1.0
        return self._discount_impl(t)

    def zero_rate(
        self,
        d_or_t: DateOrTime,
        day_count: Optional[DayCount] = None,
        compounding: Compounding = Compounding.CONTINUOUS,
        frequency: Frequency = Frequency.ANNUAL,
        extrapolate: bool = False,
        allow_reference: bool = False
    ) -> InterestRate:
        """
        Get zero rate z(t).

        Args:
            d_or_t: Date or year fraction
            day_count: Day count of the returned rate (default: curve's)
            compounding: Compounding convention of the returned rate
            frequency: Compounding frequency
            extrapolate: Allow this query beyond max_date
            allow_reference: Return the short-rate limit at the reference
                date instead of raising

        Returns:
            InterestRate

        Raises:
            DateBeforeReferenceError: d_or_t at or before the reference date
        """
        day_count = day_count or self.day_count
        if isinstance(d_or_t, date):
            if d_or_t <= self.reference_date and not (allow_reference and d_or_t == self.reference_date):
                raise DateBeforeReferenceError(
                    f"Zero rate requested at {d_or_t}, reference date is {self.reference_date}"
                )
            t_curve = self.time_from_reference(d_or_t)
            t_rate = year_fraction(self.reference_date, d_or_t, day_count)
        else:
            t_curve = float(d_or_t)
            t_rate = t_curve
            if t_curve <= 0.0 and not (allow_reference and t_curve == 0.0):
                raise DateBeforeReferenceError(f"Zero rate requested at non-positive time {t_curve}")

        if t_curve == 0.0:
            compound = 1.0 / self.discount(_DT, extrapolate)
            return InterestRate.implied_rate(compound, _DT, day_count, compounding, frequency)

        compound = 1.0 / self.discount(t_curve, extrapolate)
        return InterestRate.implied_rate(compound, t_rate, day_count, compounding, frequency)

    def forward_rate(
        self,
        d1: DateOrTime,
        d2: DateOrTime,
        day_count: Optional[DayCount] = None,
        compounding: Compounding = Compounding.SIMPLE,
        frequency: Frequency = Frequency.ANNUAL,
        extrapolate: bool = False
    ) -> InterestRate:
        """
        Get forward rate f(t1, t2) from discount(t1) / discount(t2).

        Args:
            d1: Start (date or year fraction)
            d2: End (date or year fraction), after d1
            day_count: Day count of the returned rate (default: curve's)
            compounding: Compounding convention
            frequency: Compounding frequency
            extrapolate: Allow this query beyond max_date

        Returns:
            InterestRate
        """
        day_count = day_count or self.day_count
        t1 = self._to_time(d1)
        t2 = self._to_time(d2)
        if isinstance(d1, date) and isinstance(d2, date):
            if d2 <= d1:
                raise ValueError(f"Forward end {d2} must be after start {d1}")
            tau = year_fraction(d1, d2, day_count)
        else:
            if t2 <= t1:
                raise ValueError("t2 must be greater than t1")
            tau = t2 - t1

        compound = self.discount(t1, extrapolate) / self.discount(t2, extrapolate)
        return InterestRate.implied_rate(compound, tau, day_count, compounding, frequency)

    def instantaneous_forward(self, d_or_t: DateOrTime, extrapolate: bool = False) -> float:
        """
        Get instantaneous forward rate f(t) = -d/dt log P(0,t).

        Central difference on log discount factors (one-sided at t=0).
        """
        t = self._to_time(d_or_t)
        t_lo = max(0.0, t - _DT / 2)
        t_hi = t_lo + _DT
        return float(
            -(np.log(self.discount(t_hi, extrapolate)) - np.log(self.discount(t_lo, extrapolate))) / _DT
        )

    @abstractmethod
    def _discount_impl(self, t: float) -> float:
        pass


class InterpolatedCurve(YieldTermStructure):
    """
    Term structure interpolating node values.

    Node 0 is always (reference_date, t=0, traits.initial_value()).
    """

    def __init__(
        self,
        reference_date: date,
        day_count: DayCount,
        traits: CurveTraits,
        interpolator: Interpolator
    ):
        super().__init__(reference_date, day_count)
        self.traits = traits
        self.interpolator = interpolator
        self._dates: List[date] = [reference_date]
        self._times: List[float] = [0.0]
        self._data: List[float] = [traits.initial_value()]
        self._interpolation: Optional[Interpolation] = None

    def _set_nodes(self, dates: Sequence[date], values: Sequence[float]) -> None:
        if len(dates) != len(values):
            raise ValueError("Dates and values must have same length")
        seeded = bool(dates) and dates[0] == self.reference_date
        if seeded:
            self._data = [float(values[0])]
            dates, values = dates[1:], values[1:]
        else:
            self._data = [self.traits.initial_value()]
        self._dates = [self.reference_date]
        self._times = [0.0]
        for d, v in zip(dates, values):
            if d <= self._dates[-1]:
                raise InvalidInstrumentError(f"Curve dates must be increasing and after {self.reference_date}: {d}")
            self._dates.append(d)
            self._times.append(self.time_from_reference(d))
            self._data.append(float(v))
        if len(self._data) < 2:
            raise InvalidInstrumentError("Curve needs at least one node after the reference date")
        if not seeded:
            self.traits.after_node(1, self._data)
        self._interpolation = self.interpolator.fit(self._times, self._data)

    @property
    def max_date(self) -> date:
        return self.dates[-1]

    @property
    def max_time(self) -> float:
        return self.times[-1]

    @property
    def dates(self) -> List[date]:
        return list(self._dates)

    @property
    def times(self) -> List[float]:
        return list(self._times)

    @property
    def data(self) -> List[float]:
        return list(self._data)

    def nodes(self) -> List[CurveNode]:
        return [CurveNode(d, t, v) for d, t, v in zip(self.dates, self.times, self.data)]

    def nodes_frame(self) -> pd.DataFrame:
        """Nodes with their discount factors and continuously compounded zero rates."""
        rows = []
        for node in self.nodes():
            df = self.discount(node.time)
            zr = float(-np.log(df) / node.time) if node.time > 0 else np.nan
            rows.append({
                "date": node.date,
                "time": node.time,
                "value": node.value,
                "discount": df,
                "zero_rate": zr,
            })
        return pd.DataFrame(rows, columns=["date", "time", "value", "discount", "zero_rate"])

    def _discount_impl(self, t: float) -> float:
        return self.traits.discount(self._interpolation, t)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(reference={self.reference_date}, "
                f"nodes={len(self._dates)}, traits={self.traits.name}, "
                f"interpolator={self.interpolator!r})")


class InterpolatedDiscountCurve(InterpolatedCurve):
    """Curve from known discount factors, log-linear by default."""

    def __init__(
        self,
        reference_date: date,
        dates: Sequence[date],
        discount_factors: Sequence[float],
        day_count: DayCount = DayCount.ACT_365,
        interpolator: Optional[Interpolator] = None
    ):
        super().__init__(reference_date, day_count, Discount(), interpolator or LogLinearInterpolator())
        if dates and dates[0] == reference_date and discount_factors[0] != 1.0:
            raise ValueError(f"Discount factor at reference date must be 1.0, got {discount_factors[0]}")
        self._set_nodes(dates, discount_factors)


class InterpolatedZeroCurve(InterpolatedCurve):
    """Curve from continuously compounded zero rates, linear by default."""

    def __init__(
        self,
        reference_date: date,
        dates: Sequence[date],
        zero_rates: Sequence[float],
        day_count: DayCount = DayCount.ACT_365,
        interpolator: Optional[Interpolator] = None
    ):
        super().__init__(reference_date, day_count, ZeroYield(), interpolator or LinearInterpolator())
        self._set_nodes(dates, zero_rates)


class FlatForward(YieldTermStructure):
    """
    Flat yield curve.

    The rate may be a Quote; it is read on every query.
    """

    def __init__(
        self,
        reference_date: date,
        rate: Union[float, Quote],
        day_count: DayCount = DayCount.ACT_365,
        compounding: Compounding = Compounding.CONTINUOUS,
        frequency: Frequency = Frequency.ANNUAL
    ):
        super().__init__(reference_date, day_count)
        self.rate = as_quote(rate)
        self.compounding = compounding
        self.frequency = frequency

    @property
    def generation(self) -> int:
        return self.rate.generation

    @property
    def max_date(self) -> date:
        return date.max

    @property
    def max_time(self) -> float:
        return float("inf")

    def _discount_impl(self, t: float) -> float:
        rate = InterestRate(self.rate.value(), self.day_count, self.compounding, self.frequency)
        return rate.discount_factor(t)

    def __repr__(self) -> str:
        return f"FlatForward(reference={self.reference_date}, rate={self.rate!r})"


__all__ = [
    "CurveNode",
    "YieldTermStructure",
    "InterpolatedCurve",
    "InterpolatedDiscountCurve",
    "InterpolatedZeroCurve",
    "FlatForward",
]
