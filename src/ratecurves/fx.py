"""
Spot and forward exchange rates.

Currencies are ISO codes ("EUR", "USD"). A rate from source to target
converts one unit of source currency into `rate` units of target currency.

Forward rates are quoted as spot plus forward points, where points are
scaled by 10,000:
    forward = spot + points / 10000

Two rates sharing a currency can be chained into a cross rate. Which legs
are shared decides the algebra (same source, source-target,
target-source, same target).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from .dates import Period
from .errors import NotChainableError

POINTS_SCALE = 10000.0


class RateType(Enum):
    DIRECT = "Direct"
    DERIVED = "Derived"


def _check_rate(rate: float) -> None:
    if not rate > 0:
        raise ValueError(f"Exchange rate must be positive: {rate}")


@dataclass(frozen=True)
class ExchangeRate:
    """
    Spot exchange rate between two currencies.

    Attributes:
        source: Currency converted from
        target: Currency converted to
        rate: Units of target per unit of source
        type: DIRECT, or DERIVED when built by chaining
        chain_of: The two constituent rates of a derived rate
    """
    source: str
    target: str
    rate: float
    type: RateType = RateType.DIRECT
    chain_of: Optional[Tuple["ExchangeRate", "ExchangeRate"]] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        _check_rate(self.rate)

    def exchange(self, amount: float, currency: str) -> Tuple[float, str]:
        """
        Convert an amount held in one of the rate's currencies.

        Returns:
            (converted amount, currency of the converted amount)
        """
        if self.type == RateType.DIRECT:
            if currency == self.source:
                return amount * self.rate, self.target
            if currency == self.target:
                return amount / self.rate, self.source
            raise ValueError(f"Exchange rate {self.source}/{self.target} not applicable to {currency}")
        first, second = self.chain_of
        if currency in (first.source, first.target):
            return second.exchange(*first.exchange(amount, currency))
        if currency in (second.source, second.target):
            return first.exchange(*second.exchange(amount, currency))
        raise ValueError(f"Exchange rate {self.source}/{self.target} not applicable to {currency}")

    @staticmethod
    def chain(r1: "ExchangeRate", r2: "ExchangeRate") -> "ExchangeRate":
        """
        Cross rate through the currency both rates share.

        Raises:
            NotChainableError: The rates have no currency in common
        """
        if r1.source == r2.source:
            source, target, rate = r1.target, r2.target, r2.rate / r1.rate
        elif r1.source == r2.target:
            source, target, rate = r1.target, r2.source, 1.0 / (r1.rate * r2.rate)
        elif r1.target == r2.source:
            source, target, rate = r1.source, r2.target, r1.rate * r2.rate
        elif r1.target == r2.target:
            source, target, rate = r1.source, r2.source, r1.rate / r2.rate
        else:
            raise NotChainableError(
                f"Exchange rates {r1.source}/{r1.target} and {r2.source}/{r2.target} not chainable"
            )
        return ExchangeRate(source, target, rate, RateType.DERIVED, (r1, r2))

    @staticmethod
    def inverse(r: "ExchangeRate") -> "ExchangeRate":
        if r.type == RateType.DIRECT:
            return ExchangeRate(r.target, r.source, 1.0 / r.rate)
        return ExchangeRate(r.target, r.source, 1.0 / r.rate, RateType.DERIVED, r.chain_of)


class ForwardExchangeRate:
    """
    Forward exchange rate for a tenor.

    Attributes:
        spot: Spot exchange rate
        forward_points: Forward points (x10,000)
        tenor: Forward tenor
    """

    def __init__(
        self,
        spot: ExchangeRate,
        forward_points: float,
        tenor: Union[str, Period] = Period(0)
    ):
        self.spot = spot
        self.forward_points = float(forward_points)
        self.tenor = Period.parse(tenor)
        self.type = RateType.DIRECT
        self.chain_of: Optional[Tuple["ForwardExchangeRate", "ForwardExchangeRate"]] = None

    @property
    def source(self) -> str:
        return self.spot.source

    @property
    def target(self) -> str:
        return self.spot.target

    @property
    def spot_rate(self) -> float:
        return self.spot.rate

    @property
    def forward_rate(self) -> float:
        """All-in forward rate."""
        return self.spot.rate + self.forward_points / POINTS_SCALE

    def exchange(self, amount: float, currency: str) -> Tuple[float, str]:
        """Convert an amount at the all-in forward rate."""
        if self.type == RateType.DIRECT:
            if currency == self.source:
                return amount * self.forward_rate, self.target
            if currency == self.target:
                return amount / self.forward_rate, self.source
            raise ValueError(f"Exchange rate {self.source}/{self.target} not applicable to {currency}")
        first, second = self.chain_of
        if currency in (first.source, first.target):
            return second.exchange(*first.exchange(amount, currency))
        if currency in (second.source, second.target):
            return first.exchange(*second.exchange(amount, currency))
        raise ValueError(f"Exchange rate {self.source}/{self.target} not applicable to {currency}")

    @staticmethod
    def chain(r1: "ForwardExchangeRate", r2: "ForwardExchangeRate") -> "ForwardExchangeRate":
        """
        Cross forward rate through a shared currency.

        Raises:
            NotChainableError: Different tenors, or no currency in common
        """
        if r1.tenor != r2.tenor:
            raise NotChainableError(
                f"Forward exchange rates must have the same tenor to chain: {r1.tenor} vs {r2.tenor}"
            )
        spot = ExchangeRate.chain(r1.spot, r2.spot)

        if r1.source == r2.source:
            points = (r2.forward_rate / r1.forward_rate - r2.spot_rate / r1.spot_rate) * POINTS_SCALE
        elif r1.source == r2.target:
            points = (1.0 / (r1.forward_rate * r2.forward_rate)
                      - 1.0 / (r1.spot_rate * r2.spot_rate)) * POINTS_SCALE
        elif r1.target == r2.source:
            points = (r1.spot_rate * r2.forward_points + r2.spot_rate * r1.forward_points
                      + r1.forward_points * r2.forward_points / POINTS_SCALE)
        else:
            # ExchangeRate.chain leaves only the same-target case
            points = (r1.forward_rate / r2.forward_rate - r1.spot_rate / r2.spot_rate) * POINTS_SCALE

        result = ForwardExchangeRate(spot, points, r1.tenor)
        result.type = RateType.DERIVED
        result.chain_of = (r1, r2)
        return result

    @staticmethod
    def inverse(r: "ForwardExchangeRate") -> "ForwardExchangeRate":
        """Rate from target to source; points from the reciprocal forward."""
        spot = ExchangeRate.inverse(r.spot)
        points = (1.0 / r.forward_rate - spot.rate) * POINTS_SCALE
        return ForwardExchangeRate(spot, points, r.tenor)

    def __repr__(self) -> str:
        return (f"ForwardExchangeRate({self.source}/{self.target} {self.tenor}: "
                f"spot={self.spot_rate}, points={self.forward_points})")


__all__ = [
    "RateType",
    "ExchangeRate",
    "ForwardExchangeRate",
    "POINTS_SCALE",
]
