"""
Bond pricing engine.

Prices fixed-rate bonds using discount factors from a yield curve.

Features:
- Cashflow generation from a coupon schedule
- Settlement date from settlement lag and issue date
- Accrued interest against the coupon reference period
- Dirty, clean and NPV from a term structure

Conventions:
- Prices are expressed per 100 face value
- Dirty and clean prices are forward-valued to the settlement date
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from ..conventions import BusinessDayConvention, Calendar, DayCount, TimeUnit, year_fraction
from ..dates import Schedule
from ..errors import InvalidInstrumentError


@dataclass
class BondCashflow:
    """A single bond cashflow."""
    date: date  # Payment date
    amount: float  # In currency units
    type: str  # "COUPON" or "REDEMPTION"
    accrual_start: Optional[date] = None
    accrual_end: Optional[date] = None
    rate: float = 0.0


class FixedRateBond:
    """
    Fixed coupon bond.

    Attributes:
        settlement_days: Business days from trade to settlement
        face_amount: Notional
        schedule: Coupon schedule (first date is the accrual start)
        coupons: Coupon rates per period; the last rate repeats
        day_count: Accrual day count
        payment_convention: Adjustment of payment dates
        redemption: Redemption per 100 face
        issue_date: Settlement never precedes this date
        calendar: Settlement and payment calendar
    """

    def __init__(
        self,
        settlement_days: int,
        face_amount: float,
        schedule: Schedule,
        coupons: Sequence[float],
        day_count: DayCount = DayCount.ACT_ACT_BOND,
        payment_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        redemption: float = 100.0,
        issue_date: Optional[date] = None,
        calendar: Optional[Calendar] = None
    ):
        if not coupons:
            raise InvalidInstrumentError("At least one coupon rate is required")
        if face_amount <= 0:
            raise InvalidInstrumentError(f"Face amount must be positive: {face_amount}")
        self.settlement_days = settlement_days
        self.face_amount = face_amount
        self.schedule = schedule
        self.coupons = list(coupons)
        self.day_count = day_count
        self.payment_convention = payment_convention
        self.redemption = redemption
        self.issue_date = issue_date
        self.calendar = calendar or Calendar()
        self._cashflows = self._build_cashflows()

    def _build_cashflows(self) -> List[BondCashflow]:
        cashflows = []
        periods = self.schedule.periods()
        refs = self.schedule.reference_periods()
        for i, ((start, end), (ref_start, ref_end)) in enumerate(zip(periods, refs)):
            rate = self.coupons[min(i, len(self.coupons) - 1)]
            tau = year_fraction(start, end, self.day_count, ref_start, ref_end)
            cashflows.append(BondCashflow(
                date=self.calendar.adjust(end, self.payment_convention),
                amount=self.face_amount * rate * tau,
                type="COUPON",
                accrual_start=start,
                accrual_end=end,
                rate=rate
            ))
        cashflows.append(BondCashflow(
            date=self.calendar.adjust(self.schedule.end_date, self.payment_convention),
            amount=self.face_amount * self.redemption / 100.0,
            type="REDEMPTION"
        ))
        return cashflows

    @property
    def cashflows(self) -> List[BondCashflow]:
        return list(self._cashflows)

    @property
    def maturity_date(self) -> date:
        return self._cashflows[-1].date

    def settlement_date(self, trade_date: date) -> date:
        settle = self.calendar.advance(trade_date, self.settlement_days, TimeUnit.DAYS)
        if self.issue_date is not None:
            return max(settle, self.issue_date)
        return settle

    def accrued_amount(self, settlement: date) -> float:
        """
        Accrued interest per 100 face at settlement.

        Zero on a coupon date and outside the schedule.
        """
        refs = self.schedule.reference_periods()
        coupons = [cf for cf in self._cashflows if cf.type == "COUPON"]
        for cf, (ref_start, ref_end) in zip(coupons, refs):
            if cf.accrual_start <= settlement < cf.accrual_end and cf.date > settlement:
                tau = year_fraction(cf.accrual_start, settlement, self.day_count, ref_start, ref_end)
                return cf.rate * tau * 100.0
        return 0.0

    def __repr__(self) -> str:
        rates = ", ".join(f"{c:.4%}" for c in self.coupons)
        return f"FixedRateBond({self.schedule.start_date} -> {self.maturity_date}, coupons=[{rates}])"


class BondPricer:
    """
    Bond pricing engine.

    Prices bonds by discounting cashflows using a yield curve.

    Attributes:
        curve: Yield term structure for discounting
    """

    def __init__(self, curve):
        self.curve = curve

    def _pv_after(self, bond: FixedRateBond, after: date) -> float:
        pv = 0.0
        for cf in bond.cashflows:
            if cf.date > after:
                pv += cf.amount * self.curve.discount(cf.date, True)
        return pv

    def npv(self, bond: FixedRateBond) -> float:
        """PV at the curve reference date of cashflows paid after it."""
        return self._pv_after(bond, self.curve.reference_date)

    def dirty_price(self, bond: FixedRateBond, settlement: Optional[date] = None) -> float:
        """
        Dirty price per 100 face, valued at settlement.

        Args:
            bond: Bond to price
            settlement: Settlement date (default: bond settlement from the
                curve reference date)

        Returns:
            Dirty price
        """
        if settlement is None:
            settlement = bond.settlement_date(self.curve.reference_date)
        pv = self._pv_after(bond, settlement)
        return pv / self.curve.discount(settlement, True) * 100.0 / bond.face_amount

    def clean_price(self, bond: FixedRateBond, settlement: Optional[date] = None) -> float:
        if settlement is None:
            settlement = bond.settlement_date(self.curve.reference_date)
        return self.dirty_price(bond, settlement) - bond.accrued_amount(settlement)

    def accrued(self, bond: FixedRateBond, settlement: Optional[date] = None) -> float:
        if settlement is None:
            settlement = bond.settlement_date(self.curve.reference_date)
        return bond.accrued_amount(settlement)


__all__ = [
    "BondCashflow",
    "FixedRateBond",
    "BondPricer",
]
