"""
Market quotes.

A quote is a named scalar that can change over time. Instead of pushing
notifications to observers, every quote carries a generation counter that
increases on each mutation; dependants snapshot the counter and compare it
at query time to find out whether they are stale.
"""

from abc import ABC, abstractmethod
from itertools import count
from typing import Callable, Optional

from .errors import QuoteUnavailableError

_generations = count(1)


class Quote(ABC):
    """Abstract market quote."""

    @abstractmethod
    def value(self) -> float:
        """Current value. Raises QuoteUnavailableError when unset."""

    @abstractmethod
    def is_valid(self) -> bool:
        pass

    @property
    @abstractmethod
    def generation(self) -> int:
        """Token that changes whenever value() may have changed."""


class SimpleQuote(Quote):
    """
    Quote holding a value set by the caller.

    Attributes:
        name: Optional label used in error messages
    """

    def __init__(self, value: Optional[float] = None, name: str = ""):
        self.name = name
        self._value = None if value is None else float(value)
        self._generation = next(_generations)

    def value(self) -> float:
        if self._value is None:
            label = f" '{self.name}'" if self.name else ""
            raise QuoteUnavailableError(f"Quote{label} has no value")
        return self._value

    def is_valid(self) -> bool:
        return self._value is not None

    @property
    def generation(self) -> int:
        return self._generation

    def set_value(self, value: Optional[float]) -> float:
        """
        Set a new value and bump the generation if it changed.

        Returns:
            The change from the previous value (0.0 when previously unset)
        """
        new = None if value is None else float(value)
        old = self._value
        if new != old:
            self._value = new
            self._generation = next(_generations)
        if new is None or old is None:
            return 0.0
        return new - old

    def reset(self) -> None:
        self.set_value(None)

    def __repr__(self) -> str:
        return f"SimpleQuote({self._value!r}{', ' + repr(self.name) if self.name else ''})"


class DerivedQuote(Quote):
    """Quote computed from another quote, e.g. a futures price from a rate."""

    def __init__(self, source: Quote, func: Callable[[float], float]):
        self.source = source
        self.func = func

    def value(self) -> float:
        return self.func(self.source.value())

    def is_valid(self) -> bool:
        return self.source.is_valid()

    @property
    def generation(self) -> int:
        return self.source.generation


class CompositeQuote(Quote):
    """Quote combining two quotes, e.g. a rate plus a spread."""

    def __init__(self, first: Quote, second: Quote, func: Callable[[float, float], float]):
        self.first = first
        self.second = second
        self.func = func

    def value(self) -> float:
        return self.func(self.first.value(), self.second.value())

    def is_valid(self) -> bool:
        return self.first.is_valid() and self.second.is_valid()

    @property
    def generation(self) -> int:
        return self.first.generation + self.second.generation


def as_quote(value) -> Quote:
    """Wrap a plain number into a SimpleQuote; pass quotes through."""
    if isinstance(value, Quote):
        return value
    return SimpleQuote(value)


__all__ = [
    "Quote",
    "SimpleQuote",
    "DerivedQuote",
    "CompositeQuote",
    "as_quote",
]
