"""
ratecurves: Piecewise Yield Curve Bootstrapping Library

A modular library for:
- Bootstrapping discount and zero-yield curves from market quotes
- Rate helpers for deposits, FRAs, SOFR futures, swaps, OIS, bonds and FX swaps
- Querying discount factors, zero rates and forward rates
- FX forward points and FX forward valuation

Curves are built lazily and rebuilt when any of their quotes change.
"""

__version__ = "0.1.0"

# Core modules
from .conventions import (
    DayCount,
    BusinessDayConvention,
    Calendar,
    Compounding,
    Frequency,
    TimeUnit,
    year_fraction,
)
from .dates import Period, Schedule, add_period, advance
from .errors import (
    CurveError,
    InvalidInstrumentError,
    QuoteUnavailableError,
    DegenerateNodeError,
    ExtrapolationError,
    UnboundedRootError,
    BootstrapNonConvergenceError,
    DateBeforeReferenceError,
    NotChainableError,
    CurveConstructionError,
)
from .settings import Settings, settings, BootstrapConfig
from .quotes import Quote, SimpleQuote, DerivedQuote, CompositeQuote
from .rates import InterestRate
from .fx import ExchangeRate, ForwardExchangeRate, RateType

# Curves
from .curves import (
    YieldTermStructure,
    InterpolatedDiscountCurve,
    InterpolatedZeroCurve,
    FlatForward,
    PiecewiseYieldCurve,
    BootstrapResult,
    bootstrap_from_quotes,
    bootstrap_from_csv,
    load_quotes_csv,
    LinearInterpolator,
    LogLinearInterpolator,
    CubicSplineInterpolator,
    BackwardFlatInterpolator,
    Discount,
    ZeroYield,
    RateHelper,
    DepositRateHelper,
    FraRateHelper,
    OvernightIndexFutureRateHelper,
    SwapRateHelper,
    OISRateHelper,
    FixedRateBondHelper,
    FxSwapRateHelper,
    sofr_future_helper,
    FxForwardPointTermStructure,
)

# Pricers
from .pricers import (
    FixedRateBond,
    BondPricer,
    VanillaSwap,
    SwapPricer,
    FxForward,
    ForwardPointsPricer,
)

__all__ = [
    # Version
    "__version__",
    # Conventions
    "DayCount",
    "BusinessDayConvention",
    "Calendar",
    "Compounding",
    "Frequency",
    "TimeUnit",
    "year_fraction",
    # Dates
    "Period",
    "Schedule",
    "add_period",
    "advance",
    # Errors
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
    # Settings
    "Settings",
    "settings",
    "BootstrapConfig",
    # Market data
    "Quote",
    "SimpleQuote",
    "DerivedQuote",
    "CompositeQuote",
    "InterestRate",
    "ExchangeRate",
    "ForwardExchangeRate",
    "RateType",
    # Curves
    "YieldTermStructure",
    "InterpolatedDiscountCurve",
    "InterpolatedZeroCurve",
    "FlatForward",
    "PiecewiseYieldCurve",
    "BootstrapResult",
    "bootstrap_from_quotes",
    "bootstrap_from_csv",
    "load_quotes_csv",
    "LinearInterpolator",
    "LogLinearInterpolator",
    "CubicSplineInterpolator",
    "BackwardFlatInterpolator",
    "Discount",
    "ZeroYield",
    # Helpers
    "RateHelper",
    "DepositRateHelper",
    "FraRateHelper",
    "OvernightIndexFutureRateHelper",
    "SwapRateHelper",
    "OISRateHelper",
    "FixedRateBondHelper",
    "FxSwapRateHelper",
    "sofr_future_helper",
    "FxForwardPointTermStructure",
    # Pricers
    "FixedRateBond",
    "BondPricer",
    "VanillaSwap",
    "SwapPricer",
    "FxForward",
    "ForwardPointsPricer",
]
