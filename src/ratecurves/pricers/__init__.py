"""
Pricers package - instrument pricing.

Provides pricing engines for:
- Fixed-rate coupon bonds
- Vanilla fixed-float interest rate swaps
- Outright FX forwards from forward points
"""

from .bonds import BondCashflow, FixedRateBond, BondPricer
from .swaps import SwapLegCashflow, VanillaSwap, SwapPricer
from .fx_forward import FxForward, FxForwardResult, ForwardPointsPricer

__all__ = [
    "BondCashflow",
    "FixedRateBond",
    "BondPricer",
    "SwapLegCashflow",
    "VanillaSwap",
    "SwapPricer",
    "FxForward",
    "FxForwardResult",
    "ForwardPointsPricer",
]
