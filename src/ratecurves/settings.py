"""
Library-wide settings and bootstrap configuration.

Settings holds the process-wide evaluation date and the default
extrapolation policy. BootstrapConfig collects the numerical constants
used by the bootstrap engine, with classmethod presets.
"""

from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import date
from typing import Iterator, Optional


class Settings:
    """
    Process-wide settings.

    Attributes:
        evaluation_date: Date helpers use to derive their instrument dates
            (today when never set)
        allow_extrapolation: Default extrapolation policy for term structures
    """

    def __init__(self):
        self._evaluation_date: Optional[date] = None
        self.allow_extrapolation: bool = False

    @property
    def evaluation_date(self) -> date:
        if self._evaluation_date is None:
            return date.today()
        return self._evaluation_date

    @evaluation_date.setter
    def evaluation_date(self, d: Optional[date]) -> None:
        self._evaluation_date = d

    @contextmanager
    def at(self, d: date) -> Iterator["Settings"]:
        """Temporarily set the evaluation date."""
        saved = self._evaluation_date
        self._evaluation_date = d
        try:
            yield self
        finally:
            self._evaluation_date = saved

    def reset(self) -> None:
        self._evaluation_date = None
        self.allow_extrapolation = False


settings = Settings()


@dataclass(frozen=True)
class BootstrapConfig:
    """
    Numerical settings for piecewise curve bootstrapping.

    Attributes:
        accuracy: Root-finder tolerance and convergence bound on node changes
        max_passes: Cap on global passes over all nodes
        max_bracket_expansions: Cap on bracket widenings per node
        bracket_growth: Geometric widening factor for the bracket search
        max_forward_rate: Largest absolute forward rate the discount search admits
        max_zero_rate: Largest absolute zero rate the zero-yield search admits
        verify_tolerance: Repricing tolerance reported by BootstrapResult
    """
    accuracy: float = 1e-12
    max_passes: int = 100
    max_bracket_expansions: int = 60
    bracket_growth: float = 1.6
    max_forward_rate: float = 3.0
    max_zero_rate: float = 3.0
    verify_tolerance: float = 1e-8

    def __post_init__(self):
        if self.accuracy <= 0:
            raise ValueError("accuracy must be positive")
        if self.max_passes < 1:
            raise ValueError("max_passes must be at least 1")
        if self.bracket_growth <= 1.0:
            raise ValueError("bracket_growth must exceed 1")

    @classmethod
    def default(cls) -> "BootstrapConfig":
        return cls()

    @classmethod
    def strict(cls) -> "BootstrapConfig":
        """Tighter repricing check, fewer passes."""
        return cls(accuracy=1e-14, max_passes=50, verify_tolerance=1e-10)

    def with_overrides(self, **kwargs) -> "BootstrapConfig":
        return replace(self, **kwargs)


__all__ = [
    "Settings",
    "settings",
    "BootstrapConfig",
]
