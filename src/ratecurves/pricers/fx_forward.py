"""
FX forward valuation from spot and forward points.

Forward value (in term currency):
    V_fwd = N_base * (spot + points / 10000 - K)

Present value:
    NPV = P(0, T_delivery) * V_fwd
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..conventions import BusinessDayConvention, Calendar, DayCount, year_fraction
from ..fx import ExchangeRate, POINTS_SCALE

# currency pair terms: (day count, settlement days)
_PAIR_TERMS = {
    ("EUR", "USD"): (DayCount.ACT_365, 2),
}
_DEFAULT_TERMS = (DayCount.ACT_360, 2)


@dataclass
class FxForward:
    """
    Outright FX forward.

    Attributes:
        delivery_date: Settlement of both legs
        base: Base currency, notional leg
        term: Term currency
        base_notional: Amount of base currency bought
        contract_rate: Agreed all-in rate (term per base)
        day_count: Day count for the time to delivery (pair default when None)
        settlement_days: Spot lag of the pair (pair default when None)
        calendar: Pair calendar
        convention: Business day convention of the pair
    """
    delivery_date: date
    base: str
    term: str
    base_notional: float
    contract_rate: float
    day_count: Optional[DayCount] = None
    settlement_days: Optional[int] = None
    calendar: Calendar = field(default_factory=Calendar)
    convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING

    def __post_init__(self):
        pair_dc, pair_days = _PAIR_TERMS.get((self.base, self.term), _DEFAULT_TERMS)
        if self.day_count is None:
            self.day_count = pair_dc
        if self.settlement_days is None:
            self.settlement_days = pair_days

    @property
    def contract_all_in_rate(self) -> ExchangeRate:
        return ExchangeRate(self.base, self.term, self.contract_rate)

    @property
    def term_notional(self) -> float:
        return self.base_notional * self.contract_rate

    def __str__(self) -> str:
        return (f"{self.base}{self.term} {self.delivery_date.isoformat()} "
                f"{self.base_notional} - {self.contract_rate}")


@dataclass
class FxForwardResult:
    """Valuation of an FX forward."""
    valuation_currency: str
    valuation_date: date
    forward_value: float
    npv: float


class ForwardPointsPricer:
    """
    Values FX forwards from a spot rate, forward points and a discount curve.

    Attributes:
        valuation_currency: Currency of the reported value
        spot: Spot rate (term per base)
        forward_points: Forward points to the delivery date (x10,000)
        discount_curve: Yield term structure discounting the forward value
    """

    def __init__(self, valuation_currency: str, spot: float, forward_points: float, discount_curve):
        if discount_curve is None:
            raise ValueError("Discounting term structure is required")
        self.valuation_currency = valuation_currency
        self.spot = spot
        self.forward_points = forward_points
        self.discount_curve = discount_curve

    @property
    def forward_rate(self) -> float:
        return self.spot + self.forward_points / POINTS_SCALE

    def calculate(self, fx_forward: FxForward) -> FxForwardResult:
        valuation_date = self.discount_curve.reference_date
        t = year_fraction(valuation_date, fx_forward.delivery_date, fx_forward.day_count)
        df = self.discount_curve.discount(t)
        forward_value = fx_forward.base_notional * (self.forward_rate - fx_forward.contract_rate)
        return FxForwardResult(
            valuation_currency=self.valuation_currency,
            valuation_date=valuation_date,
            forward_value=forward_value,
            npv=df * forward_value
        )

    def npv(self, fx_forward: FxForward) -> float:
        return self.calculate(fx_forward).npv


__all__ = [
    "FxForward",
    "FxForwardResult",
    "ForwardPointsPricer",
]
