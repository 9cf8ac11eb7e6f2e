"""
Exception hierarchy for curve construction and querying.

Every error raised by the library derives from CurveError. Concrete
classes also derive from the builtin exception that describes the
failure (ValueError for bad inputs, RuntimeError for numerical failures)
so callers catching builtins keep working.
"""

from typing import Optional


class CurveError(Exception):
    """Base class for all ratecurves errors."""


class InvalidInstrumentError(CurveError, ValueError):
    """Instrument dates cannot be derived or describe an empty period."""


class QuoteUnavailableError(CurveError, ValueError):
    """A quote was read before a value was set."""


class DegenerateNodeError(CurveError, ValueError):
    """Two nodes fall on the same time under the curve's day count."""


class ExtrapolationError(CurveError, ValueError):
    """A query fell outside the curve range with extrapolation disabled."""


class UnboundedRootError(CurveError, RuntimeError):
    """No root could be bracketed inside the admissible domain."""


class BootstrapNonConvergenceError(CurveError, RuntimeError):
    """Global bootstrap passes did not converge within the pass limit."""


class DateBeforeReferenceError(CurveError, ValueError):
    """A rate was requested at or before the curve reference date."""


class NotChainableError(CurveError, ValueError):
    """Two exchange rates share no currency or have different tenors."""


class CurveConstructionError(CurveError, RuntimeError):
    """
    A curve build aborted while solving one of its nodes.

    Attributes:
        helper_index: Position of the failing helper in the sorted helper list
        helper_description: Human readable description of the failing helper
        cause: The underlying exception
    """

    def __init__(
        self,
        helper_index: Optional[int],
        helper_description: str,
        cause: Exception
    ):
        self.helper_index = helper_index
        self.helper_description = helper_description
        self.cause = cause
        where = f"helper {helper_index}" if helper_index is not None else "curve"
        super().__init__(
            f"Bootstrap failed at {where} ({helper_description}): "
            f"{type(cause).__name__}: {cause}"
        )


__all__ = [
    "CurveError",
    "InvalidInstrumentError",
    "QuoteUnavailableError",
    "DegenerateNodeError",
    "ExtrapolationError",
    "UnboundedRootError",
    "BootstrapNonConvergenceError",
    "DateBeforeReferenceError",
    "NotChainableError",
    "CurveConstructionError",
]
