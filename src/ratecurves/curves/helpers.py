"""
Rate helpers for bootstrapping.

Defines the instruments used to build yield curves:
- DepositRateHelper: Money market deposits
- FraRateHelper: Forward Rate Agreements
- OvernightIndexFutureRateHelper: SOFR-style futures (plus sofr_future_helper)
- SwapRateHelper: Vanilla fixed-float swaps
- OISRateHelper: Overnight Index Swaps
- FixedRateBondHelper: Fixed coupon bonds quoted by clean price
- FxSwapRateHelper: FX swap forward points against a collateral curve

Each helper knows how to:
1. Calculate its dates once, from the evaluation date
2. Price itself on a (possibly tentative) curve: implied_quote(curve)
3. Compare the result with its market quote: quote_error(curve)

A helper must never need the curve beyond its latest_relevant_date.
"""

from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import List, Optional, Tuple, Union

from ..conventions import (
    BusinessDayConvention,
    Calendar,
    DayCount,
    Frequency,
    TimeUnit,
    year_fraction,
)
from ..dates import Period, Schedule, add_period, advance
from ..errors import InvalidInstrumentError
from ..fx import POINTS_SCALE
from ..pricers.bonds import BondPricer, FixedRateBond
from ..pricers.swaps import SwapPricer, VanillaSwap
from ..quotes import Quote, as_quote
from ..settings import settings


QuoteLike = Union[float, Quote]


class RateHelper(ABC):
    """
    Abstract base for curve calibration instruments.

    Subclasses set earliest_date and latest_date in their constructor.

    Attributes:
        quote: Market quote (rate, price or points, by instrument)
        earliest_date: First date the instrument needs from the curve
        latest_date: Maturity of the instrument
    """

    def __init__(self, quote: QuoteLike):
        self.quote = as_quote(quote)
        self.earliest_date: Optional[date] = None
        self.latest_date: Optional[date] = None
        self._term_structure = None

    def _check_dates(self) -> None:
        if self.latest_date <= self.earliest_date:
            raise InvalidInstrumentError(
                f"{type(self).__name__}: latest date {self.latest_date} "
                f"must be after earliest date {self.earliest_date}"
            )

    @property
    def pillar_date(self) -> date:
        """Date of the curve node this helper calibrates."""
        return self.latest_date

    @property
    def latest_relevant_date(self) -> date:
        """Last date at which the helper reads the curve."""
        return self.latest_date

    def quotes(self) -> List[Quote]:
        """Every quote the implied quote depends on."""
        return [self.quote]

    def term_structures(self) -> list:
        """Other curves the implied quote reads."""
        return []

    def generations(self) -> Tuple[int, ...]:
        """Generations of every input the implied quote depends on."""
        return (tuple(q.generation for q in self.quotes())
                + tuple(ts.generation for ts in self.term_structures()))

    def market_quote(self) -> float:
        return self.quote.value()

    @abstractmethod
    def implied_quote(self, curve=None) -> float:
        """
        Quote implied by a curve.

        Args:
            curve: Term structure to price on (default: the bound one)
        """

    def quote_error(self, curve=None) -> float:
        return self.market_quote() - self.implied_quote(curve)

    def set_term_structure(self, curve) -> None:
        """
        Bind the curve this helper calibrates.

        Raises:
            ValueError: Already bound to a different curve
        """
        if self._term_structure is not None and self._term_structure is not curve:
            raise ValueError(f"{self.description} is already bound to another term structure")
        self._term_structure = curve

    @property
    def term_structure(self):
        return self._term_structure

    def _curve(self, curve):
        curve = curve if curve is not None else self._term_structure
        if curve is None:
            raise ValueError(f"{self.description}: no term structure given or bound")
        return curve

    @property
    def description(self) -> str:
        return f"{type(self).__name__}({self.pillar_date.isoformat()})"

    def __repr__(self) -> str:
        return f"{self.description} quote={self.quote!r}"


def _spot_date(evaluation_date: Optional[date], calendar: Calendar, days: int) -> date:
    ref = calendar.adjust(evaluation_date or settings.evaluation_date)
    return calendar.advance(ref, days, TimeUnit.DAYS)


class DepositRateHelper(RateHelper):
    """
    Money market deposit.

    Simple interest from the value date (spot) to maturity.

    Implied rate: R = (DF(t_v) / DF(t_m) - 1) / tau
    """

    def __init__(
        self,
        quote: QuoteLike,
        tenor: Union[str, Period],
        fixing_days: int = 2,
        calendar: Optional[Calendar] = None,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        end_of_month: bool = False,
        day_count: DayCount = DayCount.ACT_360,
        evaluation_date: Optional[date] = None
    ):
        super().__init__(quote)
        self.tenor = Period.parse(tenor)
        self.fixing_days = fixing_days
        self.calendar = calendar or Calendar()
        self.convention = convention
        self.end_of_month = end_of_month
        self.day_count = day_count

        self.earliest_date = _spot_date(evaluation_date, self.calendar, fixing_days)
        self.latest_date = advance(self.earliest_date, self.tenor, self.calendar, convention, end_of_month)
        self._check_dates()
        self.year_fraction = year_fraction(self.earliest_date, self.latest_date, day_count)

    def implied_quote(self, curve=None) -> float:
        curve = self._curve(curve)
        df_start = curve.discount(self.earliest_date, True)
        df_end = curve.discount(self.latest_date, True)
        return (df_start / df_end - 1.0) / self.year_fraction

    @property
    def description(self) -> str:
        return f"DepositRateHelper({self.tenor}, {self.latest_date.isoformat()})"


class FraRateHelper(RateHelper):
    """
    Forward Rate Agreement, e.g. 3x6.

    FRA rate: F = (DF(T1)/DF(T2) - 1) / tau
    """

    def __init__(
        self,
        quote: QuoteLike,
        months_to_start: int,
        months_to_end: int,
        fixing_days: int = 2,
        calendar: Optional[Calendar] = None,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        end_of_month: bool = False,
        day_count: DayCount = DayCount.ACT_360,
        evaluation_date: Optional[date] = None
    ):
        super().__init__(quote)
        if months_to_end <= months_to_start:
            raise InvalidInstrumentError(
                f"FRA end ({months_to_end}M) must be after start ({months_to_start}M)"
            )
        self.months_to_start = months_to_start
        self.months_to_end = months_to_end
        self.calendar = calendar or Calendar()
        self.day_count = day_count

        spot = _spot_date(evaluation_date, self.calendar, fixing_days)
        self.earliest_date = advance(spot, Period(months_to_start, TimeUnit.MONTHS),
                                     self.calendar, convention, end_of_month)
        self.latest_date = advance(self.earliest_date, Period(months_to_end - months_to_start, TimeUnit.MONTHS),
                                   self.calendar, convention, end_of_month)
        self._check_dates()
        self.year_fraction = year_fraction(self.earliest_date, self.latest_date, day_count)

    def implied_quote(self, curve=None) -> float:
        curve = self._curve(curve)
        df1 = curve.discount(self.earliest_date, True)
        df2 = curve.discount(self.latest_date, True)
        return (df1 / df2 - 1.0) / self.year_fraction

    @property
    def description(self) -> str:
        return f"FraRateHelper({self.months_to_start}x{self.months_to_end}, {self.latest_date.isoformat()})"


class OvernightIndexFutureRateHelper(RateHelper):
    """
    Overnight index future over a reference period.

    Quote is a price: 100 * (1 - (R + convexity adjustment)).
    R compounds the overnight forwards over the period ("compound"), or
    averages them arithmetically over business days ("simple").
    """

    def __init__(
        self,
        price: QuoteLike,
        value_date: date,
        maturity_date: date,
        convexity_adjustment: QuoteLike = 0.0,
        averaging: str = "compound",
        day_count: DayCount = DayCount.ACT_360,
        calendar: Optional[Calendar] = None
    ):
        super().__init__(price)
        if averaging not in ("compound", "simple"):
            raise ValueError(f"Unknown averaging method: {averaging}")
        self.convexity_adjustment = as_quote(convexity_adjustment)
        self.averaging = averaging
        self.day_count = day_count
        self.calendar = calendar or Calendar()
        self.earliest_date = value_date
        self.latest_date = maturity_date
        self._check_dates()
        self.year_fraction = year_fraction(value_date, maturity_date, day_count)
        self._fixing_dates = self._business_days(value_date, maturity_date)

    def _business_days(self, start: date, end: date) -> List[date]:
        days = [start]
        current = start
        while current < end:
            current = self.calendar.advance(current, 1, TimeUnit.DAYS)
            days.append(min(current, end))
        return days

    def quotes(self) -> List[Quote]:
        return [self.quote, self.convexity_adjustment]

    def forward_rate(self, curve=None) -> float:
        curve = self._curve(curve)
        if self.averaging == "compound":
            df_start = curve.discount(self.earliest_date, True)
            df_end = curve.discount(self.latest_date, True)
            return (df_start / df_end - 1.0) / self.year_fraction
        accrued = 0.0
        dfs = [curve.discount(d, True) for d in self._fixing_dates]
        for df0, df1 in zip(dfs[:-1], dfs[1:]):
            accrued += df0 / df1 - 1.0
        return accrued / self.year_fraction

    def implied_quote(self, curve=None) -> float:
        rate = self.forward_rate(curve) + self.convexity_adjustment.value()
        return 100.0 * (1.0 - rate)

    @property
    def description(self) -> str:
        return (f"OvernightIndexFutureRateHelper({self.earliest_date.isoformat()} -> "
                f"{self.latest_date.isoformat()})")


def nth_weekday(n: int, weekday: int, month: int, year: int) -> date:
    """n-th given weekday (Monday=0) of a month, e.g. third Wednesday: (3, 2, m, y)."""
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset + 7 * (n - 1))


def sofr_future_helper(
    price: QuoteLike,
    month: int,
    year: int,
    frequency: Frequency = Frequency.QUARTERLY,
    convexity_adjustment: QuoteLike = 0.0,
    calendar: Optional[Calendar] = None
) -> OvernightIndexFutureRateHelper:
    """
    SOFR future helper for a reference month.

    Quarterly contracts run between IMM dates (third Wednesdays) with
    compounded averaging; monthly contracts cover the calendar month with
    simple averaging.

    Raises:
        InvalidInstrumentError: Frequency other than monthly or quarterly
    """
    if frequency not in (Frequency.MONTHLY, Frequency.QUARTERLY):
        raise InvalidInstrumentError("Only monthly and quarterly SOFR futures accepted")
    calendar = calendar or Calendar()
    if frequency == Frequency.MONTHLY:
        start = calendar.adjust(date(year, month, 1))
        end = calendar.advance(calendar.end_of_month(date(year, month, 1)), 1, TimeUnit.DAYS)
        averaging = "simple"
    else:
        start = nth_weekday(3, 2, month, year)
        roll = add_period(start, Period(3, TimeUnit.MONTHS))
        end = nth_weekday(3, 2, roll.month, roll.year)
        averaging = "compound"
    return OvernightIndexFutureRateHelper(
        price, start, end, convexity_adjustment, averaging, DayCount.ACT_360, calendar
    )


class SwapRateHelper(RateHelper):
    """
    Vanilla fixed-float swap quoted by its fair fixed rate.

    Floating coupons fix on a full index tenor from each accrual start,
    which may run past the swap maturity; latest_relevant_date covers it.
    """

    def __init__(
        self,
        quote: QuoteLike,
        tenor: Union[str, Period],
        calendar: Optional[Calendar] = None,
        fixed_frequency: Frequency = Frequency.ANNUAL,
        fixed_convention: BusinessDayConvention = BusinessDayConvention.UNADJUSTED,
        fixed_day_count: DayCount = DayCount.THIRTY_360_EU,
        float_tenor: Union[str, Period] = "6M",
        float_day_count: DayCount = DayCount.ACT_360,
        spread: float = 0.0,
        forward_start: Union[str, Period] = Period(0),
        settlement_days: int = 2,
        end_of_month: bool = False,
        float_convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        evaluation_date: Optional[date] = None
    ):
        super().__init__(quote)
        self.tenor = Period.parse(tenor)
        self.calendar = calendar or Calendar()
        self.spread = spread

        spot = _spot_date(evaluation_date, self.calendar, settlement_days)
        start = advance(spot, Period.parse(forward_start), self.calendar, float_convention)
        end = add_period(start, self.tenor)
        if end <= start:
            raise InvalidInstrumentError(f"Swap tenor {self.tenor} gives no accrual period")

        fixed_schedule = Schedule.generate(
            start, end, Period.from_frequency(fixed_frequency), self.calendar,
            fixed_convention, fixed_convention, end_of_month=end_of_month
        )
        float_schedule = Schedule.generate(
            start, end, float_tenor, self.calendar,
            float_convention, float_convention, end_of_month=end_of_month
        )
        self.swap = VanillaSwap(
            fixed_rate=0.0,
            fixed_schedule=fixed_schedule,
            fixed_day_count=fixed_day_count,
            float_schedule=float_schedule,
            float_day_count=float_day_count,
            float_tenor=float_tenor,
            spread=spread,
            calendar=self.calendar,
            index_convention=float_convention
        )
        self.earliest_date = self.swap.start_date
        self.latest_date = self.swap.maturity_date
        self._check_dates()

    @property
    def latest_relevant_date(self) -> date:
        return max(self.latest_date, self.swap.latest_fixing_date)

    def implied_quote(self, curve=None) -> float:
        return SwapPricer(self._curve(curve)).fair_rate(self.swap)

    @property
    def description(self) -> str:
        return f"SwapRateHelper({self.tenor}, {self.latest_date.isoformat()})"


class OISRateHelper(RateHelper):
    """
    Overnight Index Swap.

    Fixed leg pays fixed rate K at each payment date.
    Floating leg pays compounded overnight rate, which telescopes to
    DF(start) - DF(end) on a single curve.

    Par swap rate: R = (DF(T0) - DF(Tn)) / sum(delta_i * DF(Ti))
    """

    def __init__(
        self,
        quote: QuoteLike,
        tenor: Union[str, Period],
        settlement_days: int = 2,
        calendar: Optional[Calendar] = None,
        payment_frequency: Frequency = Frequency.ANNUAL,
        day_count: DayCount = DayCount.ACT_360,
        convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
        end_of_month: bool = False,
        evaluation_date: Optional[date] = None
    ):
        super().__init__(quote)
        self.tenor = Period.parse(tenor)
        self.calendar = calendar or Calendar()
        self.day_count = day_count

        start = _spot_date(evaluation_date, self.calendar, settlement_days)
        end = add_period(start, self.tenor)
        if end <= start:
            raise InvalidInstrumentError(f"OIS tenor {self.tenor} gives no accrual period")
        self.schedule = Schedule.generate(
            start, end, Period.from_frequency(payment_frequency), self.calendar,
            convention, convention, end_of_month=end_of_month
        )
        self.accruals = [
            (pay, year_fraction(s, pay, day_count)) for s, pay in self.schedule.periods()
        ]
        self.earliest_date = self.schedule.start_date
        self.latest_date = self.schedule.end_date
        self._check_dates()

    def implied_quote(self, curve=None) -> float:
        curve = self._curve(curve)
        annuity = sum(tau * curve.discount(pay, True) for pay, tau in self.accruals)
        floating = curve.discount(self.earliest_date, True) - curve.discount(self.latest_date, True)
        return floating / annuity

    @property
    def description(self) -> str:
        return f"OISRateHelper({self.tenor}, {self.latest_date.isoformat()})"


class FixedRateBondHelper(RateHelper):
    """
    Fixed coupon bond quoted by clean price (per 100 face).

    The implied price is the clean price on the curve, valued at the bond
    settlement date.
    """

    def __init__(
        self,
        clean_price: QuoteLike,
        bond: FixedRateBond,
        evaluation_date: Optional[date] = None
    ):
        super().__init__(clean_price)
        self.bond = bond
        self.settlement_date = bond.settlement_date(evaluation_date or settings.evaluation_date)
        self.earliest_date = self.settlement_date
        self.latest_date = bond.maturity_date
        self._check_dates()

    def implied_quote(self, curve=None) -> float:
        return BondPricer(self._curve(curve)).clean_price(self.bond, self.settlement_date)

    @property
    def description(self) -> str:
        return f"FixedRateBondHelper({self.bond.coupons[0]:.4%}, {self.latest_date.isoformat()})"


class FxSwapRateHelper(RateHelper):
    """
    FX swap quoted in forward points (x10,000).

    The curve being built belongs to one currency of the pair; the
    collateral curve is the known curve of the other currency.

    With base-currency collateral:
        points = (R_curve / R_collateral - 1) * spot * 10000
    otherwise:
        points = (R_collateral / R_curve - 1) * spot * 10000
    where R = DF(spot date) / DF(maturity).
    """

    def __init__(
        self,
        forward_points: QuoteLike,
        spot: QuoteLike,
        tenor: Union[str, Period],
        fixing_days: int = 2,
        calendar: Optional[Calendar] = None,
        convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        end_of_month: bool = False,
        is_base_currency_collateral: bool = True,
        collateral_curve=None,
        evaluation_date: Optional[date] = None
    ):
        super().__init__(forward_points)
        if collateral_curve is None:
            raise ValueError("FxSwapRateHelper needs a collateral curve")
        self.spot = as_quote(spot)
        self.tenor = Period.parse(tenor)
        self.calendar = calendar or Calendar()
        self.is_base_currency_collateral = is_base_currency_collateral
        self.collateral_curve = collateral_curve

        self.earliest_date = _spot_date(evaluation_date, self.calendar, fixing_days)
        self.latest_date = advance(self.earliest_date, self.tenor, self.calendar, convention, end_of_month)
        self._check_dates()

    def quotes(self) -> List[Quote]:
        return [self.quote, self.spot]

    def term_structures(self) -> list:
        return [self.collateral_curve]

    def implied_quote(self, curve=None) -> float:
        curve = self._curve(curve)
        ratio = curve.discount(self.earliest_date, True) / curve.discount(self.latest_date, True)
        coll_ratio = (self.collateral_curve.discount(self.earliest_date, True)
                      / self.collateral_curve.discount(self.latest_date, True))
        if self.is_base_currency_collateral:
            return (ratio / coll_ratio - 1.0) * self.spot.value() * POINTS_SCALE
        return (coll_ratio / ratio - 1.0) * self.spot.value() * POINTS_SCALE

    @property
    def description(self) -> str:
        return f"FxSwapRateHelper({self.tenor}, {self.latest_date.isoformat()})"


__all__ = [
    "RateHelper",
    "DepositRateHelper",
    "FraRateHelper",
    "OvernightIndexFutureRateHelper",
    "sofr_future_helper",
    "nth_weekday",
    "SwapRateHelper",
    "OISRateHelper",
    "FixedRateBondHelper",
    "FxSwapRateHelper",
]
