"""
Curve traits: what a node value means.

A traits object fixes the quantity stored at the curve nodes and
interpolated between them:
- Discount: node values are discount factors (pair with log-linear)
- ZeroYield: node values are continuously compounded zero rates (pair with linear)

Traits also supply what the bootstrap needs to search for a node value:
the seed value at t=0, a first guess, and hard search bounds.
"""

from abc import ABC, abstractmethod
from typing import Sequence, Tuple

import numpy as np

from ..settings import BootstrapConfig
from .interpolation import (
    Interpolation,
    Interpolator,
    LinearInterpolator,
    LogLinearInterpolator,
)


class CurveTraits(ABC):
    """Mapping between node values and discount factors."""
    name: str = ""

    @abstractmethod
    def initial_value(self) -> float:
        """Value of the seed node at t=0."""

    @abstractmethod
    def discount(self, interpolation: Interpolation, t: float) -> float:
        """Discount factor at t from a fitted interpolation of node values."""

    @abstractmethod
    def value_from_discount(self, df: float, t: float) -> float:
        """Node value equivalent to a discount factor at time t > 0."""

    @abstractmethod
    def bounds(
        self,
        i: int,
        times: Sequence[float],
        data: Sequence[float],
        config: BootstrapConfig
    ) -> Tuple[float, float]:
        """Admissible (lower, upper) range for node i given nodes 0..i-1."""

    @abstractmethod
    def fallback_interpolator(self) -> Interpolator:
        """Local scheme used while too few nodes exist for the real one."""

    def guess(self, i: int, times: Sequence[float], data: Sequence[float]) -> float:
        """
        First guess for node i from the nodes already solved.

        Continuity heuristic: carry the last segment's forward rate to t_i
        (flat zero forward on the first node).
        """
        t_prev, t_i = times[i - 1], times[i]
        df_prev = self._node_discount(times, data, i - 1)
        if i >= 2:
            df_prev2 = self._node_discount(times, data, i - 2)
            fwd = np.log(df_prev2 / df_prev) / (times[i - 1] - times[i - 2])
        else:
            fwd = 0.0
        df_guess = df_prev * np.exp(-fwd * (t_i - t_prev))
        return self.value_from_discount(float(df_guess), t_i)

    def after_node(self, i: int, data: list) -> None:
        """Hook run after node i is accepted."""

    @abstractmethod
    def _node_discount(self, times: Sequence[float], data: Sequence[float], i: int) -> float:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Discount(CurveTraits):
    """Nodes hold discount factors; the seed is 1.0."""
    name = "discount"

    def initial_value(self) -> float:
        return 1.0

    def discount(self, interpolation: Interpolation, t: float) -> float:
        return interpolation(t, True)

    def value_from_discount(self, df: float, t: float) -> float:
        return df

    def bounds(self, i, times, data, config):
        dt = times[i] - times[i - 1]
        return (
            data[i - 1] * float(np.exp(-config.max_forward_rate * dt)),
            data[i - 1] * float(np.exp(config.max_forward_rate * dt)),
        )

    def fallback_interpolator(self) -> Interpolator:
        return LogLinearInterpolator()

    def _node_discount(self, times, data, i):
        return data[i]


class ZeroYield(CurveTraits):
    """
    Nodes hold continuously compounded zero rates.

    The seed node has no rate of its own; it is overwritten with the first
    solved rate so the short end is flat.
    """
    name = "zero_yield"

    def initial_value(self) -> float:
        return 0.0

    def discount(self, interpolation: Interpolation, t: float) -> float:
        if t == 0.0:
            return 1.0
        return float(np.exp(-interpolation(t, True) * t))

    def value_from_discount(self, df: float, t: float) -> float:
        return float(-np.log(df) / t)

    def bounds(self, i, times, data, config):
        return -config.max_zero_rate, config.max_zero_rate

    def fallback_interpolator(self) -> Interpolator:
        return LinearInterpolator()

    def after_node(self, i: int, data: list) -> None:
        if i == 1:
            data[0] = data[1]

    def _node_discount(self, times, data, i):
        if times[i] == 0.0:
            return 1.0
        return float(np.exp(-data[i] * times[i]))


def create_traits(name: str) -> CurveTraits:
    """Traits by name: "discount" or "zero_yield"."""
    key = name.lower().replace("-", "_").replace(" ", "_")
    if key in ("discount", "df"):
        return Discount()
    if key in ("zero_yield", "zero", "zeroyield"):
        return ZeroYield()
    raise ValueError(f"Unknown curve traits: {name}")


__all__ = [
    "CurveTraits",
    "Discount",
    "ZeroYield",
    "create_traits",
]
