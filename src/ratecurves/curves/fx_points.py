"""
FX forward point term structure.

Interpolates forward points between quoted tenors. Node 0 sits at the
reference date with zero points, so the forward rate there equals spot.
Beyond the last node, points stay flat at the last quoted value (only
when extrapolation is allowed).
"""

from datetime import date
from typing import List, Optional, Sequence, Union

from ..conventions import Calendar, DayCount, year_fraction
from ..dates import add_period
from ..errors import DateBeforeReferenceError, ExtrapolationError, InvalidInstrumentError
from ..fx import ExchangeRate, ForwardExchangeRate
from ..settings import settings
from .interpolation import Interpolator, LinearInterpolator, TIME_EPSILON

DateOrTime = Union[date, float]


class FxForwardPointTermStructure:
    """
    Forward points by date for one currency pair.

    Attributes:
        reference_date: Spot date of the points
        spot: Spot exchange rate
        day_count: Day count turning dates into times
        calendar: Calendar of the currency pair
    """

    def __init__(
        self,
        reference_date: date,
        spot: ExchangeRate,
        dates: Sequence[date],
        forward_points: Sequence[float],
        day_count: DayCount = DayCount.ACT_365,
        calendar: Optional[Calendar] = None,
        interpolator: Optional[Interpolator] = None
    ):
        if len(dates) != len(forward_points):
            raise ValueError("Dates and forward points must have same length")
        if not dates:
            raise InvalidInstrumentError("At least one forward point node is required")
        self.reference_date = reference_date
        self.spot = spot
        self.day_count = day_count
        self.calendar = calendar or Calendar()
        self.interpolator = interpolator or LinearInterpolator()
        self._extrapolate: Optional[bool] = None

        self._dates: List[date] = [reference_date]
        self._points: List[float] = [0.0]
        for d, p in zip(dates, forward_points):
            if d <= self._dates[-1]:
                raise InvalidInstrumentError(
                    f"Forward point dates must be increasing and after {reference_date}: {d}"
                )
            self._dates.append(d)
            self._points.append(float(p))
        self._times = [year_fraction(reference_date, d, day_count) for d in self._dates]
        self._interpolation = self.interpolator.fit(self._times, self._points)

    @classmethod
    def from_forward_rates(
        cls,
        reference_date: date,
        rates: Sequence[ForwardExchangeRate],
        day_count: DayCount = DayCount.ACT_365,
        calendar: Optional[Calendar] = None,
        interpolator: Optional[Interpolator] = None
    ) -> "FxForwardPointTermStructure":
        """Nodes at reference_date + tenor of each rate; spot from the first rate."""
        if not rates:
            raise InvalidInstrumentError("At least one forward exchange rate is required")
        dates = [add_period(reference_date, r.tenor) for r in rates]
        points = [r.forward_points for r in rates]
        return cls(reference_date, rates[0].spot, dates, points, day_count, calendar, interpolator)

    @property
    def source(self) -> str:
        return self.spot.source

    @property
    def target(self) -> str:
        return self.spot.target

    @property
    def max_date(self) -> date:
        return self._dates[-1]

    @property
    def dates(self) -> List[date]:
        return list(self._dates)

    @property
    def times(self) -> List[float]:
        return list(self._times)

    @property
    def points(self) -> List[float]:
        return list(self._points)

    def nodes(self) -> List[tuple]:
        return list(zip(self._dates, self._points))

    def enable_extrapolation(self, enabled: bool = True) -> None:
        self._extrapolate = enabled

    def allows_extrapolation(self) -> bool:
        if self._extrapolate is None:
            return settings.allow_extrapolation
        return self._extrapolate

    def time_from_reference(self, d: date) -> float:
        return year_fraction(self.reference_date, d, self.day_count)

    def forward_points(self, d_or_t: DateOrTime, extrapolate: bool = False) -> float:
        """
        Forward points at a date or time.

        Raises:
            DateBeforeReferenceError: Before the reference date
            ExtrapolationError: Past the last node without extrapolation
        """
        t = self.time_from_reference(d_or_t) if isinstance(d_or_t, date) else float(d_or_t)
        if t < 0.0:
            raise DateBeforeReferenceError(f"Negative time ({t}) given")
        t_max = self._times[-1]
        if t > t_max + TIME_EPSILON * max(1.0, t_max):
            if not (extrapolate or self.allows_extrapolation()):
                raise ExtrapolationError(
                    f"Time ({t}) is past max curve time ({t_max}); enable extrapolation to query it"
                )
            return self._points[-1]
        return self._interpolation(min(t, t_max))

    def forward_exchange_rate(self, d_or_t: DateOrTime, extrapolate: bool = False) -> ForwardExchangeRate:
        return ForwardExchangeRate(self.spot, self.forward_points(d_or_t, extrapolate))

    def __repr__(self) -> str:
        return (f"FxForwardPointTermStructure({self.source}/{self.target}, "
                f"reference={self.reference_date}, nodes={len(self._dates)})")


__all__ = ["FxForwardPointTermStructure"]
