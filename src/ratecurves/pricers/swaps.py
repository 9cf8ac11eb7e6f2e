"""
Interest rate swap pricing engine.

Prices vanilla fixed-float interest rate swaps on a single curve: the
same term structure discounts cashflows and projects floating fixings.

Each floating coupon fixes on an index period that starts at the accrual
start and runs one index tenor; the index end can fall after the accrual
end, so a swap may need the curve beyond its own maturity.

Pricing formula (single-curve):
    PV_swap = PV_float - PV_fixed

    PV_fixed = K * sum(delta_i * DF(T_i))
    PV_float = sum((F_j + spread) * delta_j * DF(T_j))
    F_j = (DF(s_j) / DF(e_j) - 1) / tau_j
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from ..conventions import BusinessDayConvention, Calendar, DayCount, year_fraction
from ..dates import Period, Schedule, advance


@dataclass
class SwapLegCashflow:
    """A single swap leg coupon."""
    payment_date: date
    accrual_start: date
    accrual_end: date
    year_fraction: float
    fixing_end: Optional[date] = None  # Floating leg only


class VanillaSwap:
    """
    Fixed-float swap description.

    Attributes:
        fixed_rate: Fixed coupon rate (decimal)
        fixed_schedule: Fixed leg schedule
        fixed_day_count: Fixed leg accrual day count
        float_schedule: Floating leg schedule
        float_day_count: Floating leg accrual and index day count
        float_tenor: Index tenor used for fixings
        spread: Spread over the floating index
        notional: Notional amount
        payer: True if the fixed leg is paid
        calendar: Index calendar
    """

    def __init__(
        self,
        fixed_rate: float,
        fixed_schedule: Schedule,
        fixed_day_count: DayCount,
        float_schedule: Schedule,
        float_day_count: DayCount,
        float_tenor: Period,
        spread: float = 0.0,
        notional: float = 1.0,
        payer: bool = True,
        calendar: Optional[Calendar] = None,
        index_convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING
    ):
        self.fixed_rate = fixed_rate
        self.fixed_schedule = fixed_schedule
        self.fixed_day_count = fixed_day_count
        self.float_schedule = float_schedule
        self.float_day_count = float_day_count
        self.float_tenor = Period.parse(float_tenor)
        self.spread = spread
        self.notional = notional
        self.payer = payer
        self.calendar = calendar or Calendar()
        self.index_convention = index_convention

        self.fixed_leg: List[SwapLegCashflow] = [
            SwapLegCashflow(end, start, end, year_fraction(start, end, fixed_day_count))
            for start, end in fixed_schedule.periods()
        ]
        self.floating_leg: List[SwapLegCashflow] = []
        for start, end in float_schedule.periods():
            fixing_end = advance(start, self.float_tenor, self.calendar, index_convention)
            self.floating_leg.append(SwapLegCashflow(
                end, start, end, year_fraction(start, end, float_day_count), fixing_end
            ))

    @property
    def start_date(self) -> date:
        return min(self.fixed_schedule.start_date, self.float_schedule.start_date)

    @property
    def maturity_date(self) -> date:
        return max(self.fixed_schedule.end_date, self.float_schedule.end_date)

    @property
    def latest_fixing_date(self) -> date:
        """Last date the floating fixings need from a projection curve."""
        return max(cf.fixing_end for cf in self.floating_leg)

    def __repr__(self) -> str:
        side = "payer" if self.payer else "receiver"
        return f"VanillaSwap({side}, {self.fixed_rate:.4%}, {self.start_date} -> {self.maturity_date})"


class SwapPricer:
    """
    Single-curve swap pricing engine.

    Attributes:
        curve: Term structure used for discounting and projection
    """

    def __init__(self, curve):
        self.curve = curve

    def _df(self, d: date) -> float:
        return self.curve.discount(d, True)

    def fixed_leg_bps(self, swap: VanillaSwap) -> float:
        """PV of one basis point paid on the fixed leg notional."""
        annuity = sum(cf.year_fraction * self._df(cf.payment_date) for cf in swap.fixed_leg)
        return annuity * swap.notional * 1e-4

    def forward_fixing(self, swap: VanillaSwap, cf: SwapLegCashflow) -> float:
        """Index forward rate for a floating coupon."""
        tau = year_fraction(cf.accrual_start, cf.fixing_end, swap.float_day_count)
        return (self._df(cf.accrual_start) / self._df(cf.fixing_end) - 1.0) / tau

    def floating_leg_npv(self, swap: VanillaSwap) -> float:
        pv = 0.0
        for cf in swap.floating_leg:
            rate = self.forward_fixing(swap, cf) + swap.spread
            pv += rate * cf.year_fraction * self._df(cf.payment_date)
        return pv * swap.notional

    def fixed_leg_npv(self, swap: VanillaSwap) -> float:
        return swap.fixed_rate * self.fixed_leg_bps(swap) * 1e4

    def fair_rate(self, swap: VanillaSwap) -> float:
        """
        Fixed rate at which the swap has zero value.

        R = PV_float / Annuity
        """
        bps = self.fixed_leg_bps(swap)
        if bps == 0.0:
            raise ValueError("Fixed leg has zero annuity")
        return self.floating_leg_npv(swap) / (bps * 1e4)

    def npv(self, swap: VanillaSwap) -> float:
        """Swap PV (positive = in-the-money for the swap's direction)."""
        value = self.floating_leg_npv(swap) - self.fixed_leg_npv(swap)
        return value if swap.payer else -value


__all__ = [
    "SwapLegCashflow",
    "VanillaSwap",
    "SwapPricer",
]
