"""
Interest rate with its day count and compounding rule.

Compound factors for a year fraction t:
    SIMPLE:                 1 + r*t
    COMPOUNDED:             (1 + r/f)^(f*t)
    CONTINUOUS:             exp(r*t)
    SIMPLE_THEN_COMPOUNDED: simple up to one period (t <= 1/f), compounded after
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

import numpy as np

from .conventions import Compounding, DayCount, Frequency, year_fraction


@dataclass(frozen=True)
class InterestRate:
    """
    An interest rate quoted under a compounding convention.

    Attributes:
        rate: Rate in decimal
        day_count: Day count used to turn dates into times
        compounding: Compounding rule
        frequency: Compounding frequency (needed for COMPOUNDED rules)
    """
    rate: float
    day_count: DayCount = DayCount.ACT_365
    compounding: Compounding = Compounding.CONTINUOUS
    frequency: Frequency = Frequency.ANNUAL

    def __post_init__(self):
        if self.compounding in (Compounding.COMPOUNDED, Compounding.SIMPLE_THEN_COMPOUNDED):
            if self.frequency in (Frequency.ONCE,):
                raise ValueError(f"{self.compounding.value} compounding needs a periodic frequency")

    def __float__(self) -> float:
        return self.rate

    def compound_factor(self, t: float) -> float:
        """Growth of one unit invested for time t."""
        if t < 0:
            raise ValueError(f"Negative time not allowed: {t}")
        r = self.rate
        if self.compounding == Compounding.SIMPLE:
            return 1.0 + r * t
        if self.compounding == Compounding.CONTINUOUS:
            return float(np.exp(r * t))
        f = self.frequency.value
        if self.compounding == Compounding.COMPOUNDED:
            return float((1.0 + r / f) ** (f * t))
        if t <= 1.0 / f:
            return 1.0 + r * t
        return float((1.0 + r / f) ** (f * t))

    def compound_factor_between(self, d1: date, d2: date) -> float:
        return self.compound_factor(year_fraction(d1, d2, self.day_count))

    def discount_factor(self, t: float) -> float:
        return 1.0 / self.compound_factor(t)

    @staticmethod
    def implied_rate(
        compound: float,
        t: float,
        day_count: DayCount = DayCount.ACT_365,
        compounding: Compounding = Compounding.CONTINUOUS,
        frequency: Frequency = Frequency.ANNUAL
    ) -> "InterestRate":
        """
        Rate that produces a given compound factor over time t.

        Args:
            compound: Compound factor (must be positive)
            t: Year fraction (must be positive)
        """
        if compound <= 0:
            raise ValueError(f"Positive compound factor required: {compound}")
        if t <= 0:
            raise ValueError(f"Positive time required: {t}")

        if compounding == Compounding.SIMPLE:
            r = (compound - 1.0) / t
        elif compounding == Compounding.CONTINUOUS:
            r = float(np.log(compound)) / t
        else:
            f = frequency.value
            if f == 0:
                raise ValueError(f"{compounding.value} compounding needs a periodic frequency")
            if compounding == Compounding.SIMPLE_THEN_COMPOUNDED and t <= 1.0 / f:
                r = (compound - 1.0) / t
            else:
                r = (compound ** (1.0 / (f * t)) - 1.0) * f
        return InterestRate(r, day_count, compounding, frequency)

    def equivalent_rate(
        self,
        t: float,
        compounding: Compounding,
        frequency: Frequency = Frequency.ANNUAL,
        day_count: Optional[DayCount] = None
    ) -> "InterestRate":
        """Same growth over time t expressed under another convention."""
        return InterestRate.implied_rate(
            self.compound_factor(t), t, day_count or self.day_count, compounding, frequency
        )

    def __repr__(self) -> str:
        freq = f" {self.frequency.name.lower()}" if self.compounding in (
            Compounding.COMPOUNDED, Compounding.SIMPLE_THEN_COMPOUNDED) else ""
        return f"InterestRate({self.rate:.8%} {self.day_count.value} {self.compounding.value}{freq})"


__all__ = ["InterestRate"]
