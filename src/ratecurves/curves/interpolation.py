"""
Interpolation methods for term structures.

Provides:
- LinearInterpolator: Linear interpolation of raw values (FX forward points, zero rates)
- LogLinearInterpolator: Linear interpolation of log values (discount factors)
- CubicSplineInterpolator: Natural cubic spline
- BackwardFlatInterpolator: Piecewise constant, value of the right-hand node

An interpolator is a stateless strategy. fit(times, values) validates the
nodes and returns an Interpolation, the fitted function that curves
evaluate. Outside the node range an Interpolation raises
ExtrapolationError unless extrapolate=True is passed.
"""

from abc import ABC, abstractmethod
from typing import Sequence
import numpy as np

from ..errors import DegenerateNodeError, ExtrapolationError

# node times closer than this are the same time
TIME_EPSILON = 1e-14


class Interpolation(ABC):
    """Interpolating function fitted to (time, value) nodes."""

    def __init__(self, times: np.ndarray, values: np.ndarray):
        self.times = times
        self.values = values

    @property
    def x_min(self) -> float:
        return float(self.times[0])

    @property
    def x_max(self) -> float:
        return float(self.times[-1])

    def is_in_range(self, t: float) -> bool:
        tol = TIME_EPSILON * max(1.0, abs(self.x_max))
        return self.x_min - tol <= t <= self.x_max + tol

    def _check_range(self, t: float, extrapolate: bool) -> None:
        if not extrapolate and not self.is_in_range(t):
            raise ExtrapolationError(
                f"Interpolation range is [{self.x_min}, {self.x_max}]: "
                f"extrapolation at {t} not allowed"
            )

    def _segment(self, t: float) -> int:
        """Index i of the segment [times[i], times[i+1]] used for t."""
        idx = np.searchsorted(self.times, t, side='right') - 1
        return int(max(0, min(idx, len(self.times) - 2)))

    def evaluate(self, t: float, extrapolate: bool = False) -> float:
        """Value at t."""
        self._check_range(t, extrapolate)
        return self._value(t)

    def __call__(self, t: float, extrapolate: bool = False) -> float:
        return self.evaluate(t, extrapolate)

    def derivative(self, t: float, extrapolate: bool = False) -> float:
        """First derivative at t."""
        self._check_range(t, extrapolate)
        return self._derivative(t)

    @abstractmethod
    def _value(self, t: float) -> float:
        pass

    @abstractmethod
    def _derivative(self, t: float) -> float:
        pass


class Interpolator(ABC):
    """
    Interpolation scheme.

    Attributes:
        required_points: Minimum number of nodes the scheme needs
        is_global: True if moving one node changes the function away from
            its neighbouring segments (forces global bootstrap passes)
    """
    required_points: int = 2
    is_global: bool = False
    name: str = ""

    def fit(self, times: Sequence[float], values: Sequence[float]) -> Interpolation:
        """
        Fit the interpolator to data points.

        Args:
            times: Node times (strictly increasing)
            values: Node values

        Returns:
            Fitted Interpolation

        Raises:
            DegenerateNodeError: Two nodes share the same time
            ValueError: Length mismatch, too few points, or unsorted times
        """
        times = np.asarray(times, dtype=np.float64)
        values = np.asarray(values, dtype=np.float64)
        if times.shape != values.shape:
            raise ValueError("Times and values must have same length")
        if len(times) < self.required_points:
            raise ValueError(
                f"{type(self).__name__} needs at least {self.required_points} points, "
                f"got {len(times)}"
            )
        check_node_times(times)
        return self._fit(times, values)

    @abstractmethod
    def _fit(self, times: np.ndarray, values: np.ndarray) -> Interpolation:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def check_node_times(times: np.ndarray) -> None:
    """Require strictly increasing times; equal neighbours are degenerate."""
    for i in range(1, len(times)):
        dt = times[i] - times[i - 1]
        if abs(dt) <= TIME_EPSILON * max(1.0, abs(times[i])):
            raise DegenerateNodeError(
                f"Nodes {i - 1} and {i} correspond to the same time ({times[i]})"
            )
        if dt < 0:
            raise ValueError(f"Node times not increasing: {times[i - 1]} > {times[i]}")


class LinearInterpolation(Interpolation):
    """Linear interpolation, linear continuation of the end segments."""

    def _value(self, t: float) -> float:
        i = self._segment(t)
        t0, t1 = self.times[i], self.times[i + 1]
        v0, v1 = self.values[i], self.values[i + 1]
        w = (t - t0) / (t1 - t0)
        return float(v0 + w * (v1 - v0))

    def _derivative(self, t: float) -> float:
        i = self._segment(t)
        return float((self.values[i + 1] - self.values[i]) / (self.times[i + 1] - self.times[i]))


class LinearInterpolator(Interpolator):
    """
    Linear interpolation.

    Simple linear interpolation between knot points.
    """
    name = "linear"

    def _fit(self, times: np.ndarray, values: np.ndarray) -> Interpolation:
        return LinearInterpolation(times, values)


class LogLinearInterpolation(Interpolation):
    """Linear in log(value); for discount factors this is piecewise flat forwards."""

    def __init__(self, times: np.ndarray, values: np.ndarray):
        super().__init__(times, values)
        self.log_values = np.log(values)

    def _value(self, t: float) -> float:
        i = self._segment(t)
        t0, t1 = self.times[i], self.times[i + 1]
        l0, l1 = self.log_values[i], self.log_values[i + 1]
        w = (t - t0) / (t1 - t0)
        return float(np.exp(l0 + w * (l1 - l0)))

    def _derivative(self, t: float) -> float:
        i = self._segment(t)
        slope = (self.log_values[i + 1] - self.log_values[i]) / (self.times[i + 1] - self.times[i])
        return float(self._value(t) * slope)


class LogLinearInterpolator(Interpolator):
    """
    Log-linear interpolation.

    Interpolates linearly in log space, which keeps values positive and
    gives exponential behaviour between nodes.
    """
    name = "log_linear"

    def _fit(self, times: np.ndarray, values: np.ndarray) -> Interpolation:
        if np.any(values <= 0):
            raise ValueError("Log-linear interpolation requires positive values")
        return LogLinearInterpolation(times, values)


class CubicSplineInterpolation(Interpolation):
    """
    Natural cubic spline.

    S_i(x) = a_i + b_i*(x-x_i) + c_i*(x-x_i)^2 + d_i*(x-x_i)^3 on each
    segment; the end polynomials are used for extrapolation.
    """

    def __init__(self, times: np.ndarray, values: np.ndarray):
        super().__init__(times, values)
        self.coefficients = self._solve(times, values)

    @staticmethod
    def _solve(times: np.ndarray, values: np.ndarray) -> np.ndarray:
        n = len(times)
        h = np.diff(times)

        if n == 2:
            slope = (values[1] - values[0]) / h[0]
            return np.array([[values[0], slope, 0.0, 0.0]])

        # Natural spline: M[0] = M[n-1] = 0
        A = np.zeros((n, n))
        b = np.zeros(n)
        A[0, 0] = 1.0
        A[n-1, n-1] = 1.0

        for i in range(1, n-1):
            A[i, i-1] = h[i-1]
            A[i, i] = 2 * (h[i-1] + h[i])
            A[i, i+1] = h[i]
            b[i] = 6 * ((values[i+1] - values[i]) / h[i] -
                        (values[i] - values[i-1]) / h[i-1])

        M = np.linalg.solve(A, b)

        coefficients = np.zeros((n-1, 4))
        for i in range(n-1):
            coefficients[i, 0] = values[i]
            coefficients[i, 1] = (values[i+1] - values[i]) / h[i] - h[i] * (M[i+1] + 2*M[i]) / 6
            coefficients[i, 2] = M[i] / 2
            coefficients[i, 3] = (M[i+1] - M[i]) / (6 * h[i])
        return coefficients

    def _value(self, t: float) -> float:
        i = self._segment(t)
        dx = t - self.times[i]
        a, b, c, d = self.coefficients[i]
        return float(a + b*dx + c*dx**2 + d*dx**3)

    def _derivative(self, t: float) -> float:
        i = self._segment(t)
        dx = t - self.times[i]
        _, b, c, d = self.coefficients[i]
        return float(b + 2*c*dx + 3*d*dx**2)

    def second_derivative(self, t: float, extrapolate: bool = False) -> float:
        self._check_range(t, extrapolate)
        i = self._segment(t)
        dx = t - self.times[i]
        _, _, c, d = self.coefficients[i]
        return float(2*c + 6*d*dx)


class CubicSplineInterpolator(Interpolator):
    """
    Cubic spline interpolation.

    Uses natural cubic splines (second derivative = 0 at boundaries).
    Every node influences every segment, so bootstrapping with it needs
    global passes.
    """
    name = "cubic_spline"
    is_global = True

    def _fit(self, times: np.ndarray, values: np.ndarray) -> Interpolation:
        return CubicSplineInterpolation(times, values)


class BackwardFlatInterpolation(Interpolation):
    """Value on (t_{i-1}, t_i] is the value at t_i; flat beyond the last node."""

    def _value(self, t: float) -> float:
        if t <= self.times[0]:
            return float(self.values[0])
        if t >= self.times[-1]:
            return float(self.values[-1])
        idx = int(np.searchsorted(self.times, t, side='left'))
        return float(self.values[idx])

    def _derivative(self, t: float) -> float:
        return 0.0


class BackwardFlatInterpolator(Interpolator):
    """Piecewise constant interpolation (e.g. of instantaneous forwards)."""
    name = "backward_flat"

    def _fit(self, times: np.ndarray, values: np.ndarray) -> Interpolation:
        return BackwardFlatInterpolation(times, values)


def create_interpolator(method: str) -> Interpolator:
    """
    Factory function to create an interpolator by name.

    Args:
        method: One of "linear", "log_linear", "cubic_spline", "backward_flat"

    Returns:
        Interpolator instance
    """
    method = method.lower().replace("-", "_").replace(" ", "_")

    if method in ("linear", "lin"):
        return LinearInterpolator()
    elif method in ("log_linear", "loglinear"):
        return LogLinearInterpolator()
    elif method in ("cubic_spline", "cubic", "spline"):
        return CubicSplineInterpolator()
    elif method in ("backward_flat", "backwardflat", "flat"):
        return BackwardFlatInterpolator()
    else:
        raise ValueError(f"Unknown interpolation method: {method}")


def resolve_interpolator(interpolator) -> Interpolator:
    """Accept an Interpolator instance or a method name."""
    if isinstance(interpolator, Interpolator):
        return interpolator
    if isinstance(interpolator, str):
        return create_interpolator(interpolator)
    raise TypeError(f"Expected Interpolator or method name, got {type(interpolator).__name__}")


__all__ = [
    "Interpolation",
    "Interpolator",
    "LinearInterpolator",
    "LogLinearInterpolator",
    "CubicSplineInterpolator",
    "BackwardFlatInterpolator",
    "create_interpolator",
    "resolve_interpolator",
]
