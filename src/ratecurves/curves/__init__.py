"""
Curves package - yield curve construction and querying.

Provides:
- YieldTermStructure: Discount, zero and forward queries shared by all curves
- InterpolatedDiscountCurve / InterpolatedZeroCurve / FlatForward: Curves from known data
- PiecewiseYieldCurve: Lazy bootstrap of a curve from rate helpers
- Rate helpers: Deposits, FRAs, SOFR futures, swaps, OIS, bonds, FX swaps
- FxForwardPointTermStructure: Interpolated FX forward points
"""

from .interpolation import (
    Interpolation,
    Interpolator,
    LinearInterpolator,
    LogLinearInterpolator,
    CubicSplineInterpolator,
    BackwardFlatInterpolator,
    create_interpolator,
)
from .traits import CurveTraits, Discount, ZeroYield, create_traits
from .curve import (
    CurveNode,
    YieldTermStructure,
    InterpolatedCurve,
    InterpolatedDiscountCurve,
    InterpolatedZeroCurve,
    FlatForward,
)
from .helpers import (
    RateHelper,
    DepositRateHelper,
    FraRateHelper,
    OvernightIndexFutureRateHelper,
    SwapRateHelper,
    OISRateHelper,
    FixedRateBondHelper,
    FxSwapRateHelper,
    sofr_future_helper,
    nth_weekday,
)
from .bootstrap import (
    PiecewiseYieldCurve,
    BootstrapResult,
    build_helper,
    bootstrap_from_quotes,
)
from .loaders import load_quotes_csv, bootstrap_from_csv
from .fx_points import FxForwardPointTermStructure

__all__ = [
    "Interpolation",
    "Interpolator",
    "LinearInterpolator",
    "LogLinearInterpolator",
    "CubicSplineInterpolator",
    "BackwardFlatInterpolator",
    "create_interpolator",
    "CurveTraits",
    "Discount",
    "ZeroYield",
    "create_traits",
    "CurveNode",
    "YieldTermStructure",
    "InterpolatedCurve",
    "InterpolatedDiscountCurve",
    "InterpolatedZeroCurve",
    "FlatForward",
    "RateHelper",
    "DepositRateHelper",
    "FraRateHelper",
    "OvernightIndexFutureRateHelper",
    "SwapRateHelper",
    "OISRateHelper",
    "FixedRateBondHelper",
    "FxSwapRateHelper",
    "sofr_future_helper",
    "nth_weekday",
    "PiecewiseYieldCurve",
    "BootstrapResult",
    "build_helper",
    "bootstrap_from_quotes",
    "load_quotes_csv",
    "bootstrap_from_csv",
    "FxForwardPointTermStructure",
]
