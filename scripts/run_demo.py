#!/usr/bin/env python
"""
Curve Bootstrapping Demo Script

This script demonstrates the bootstrap workflow:
1. Build deposit rate helpers on live quotes
2. Bootstrap a piecewise log-linear discount curve
3. Print nodes and repricing diagnostics
4. Move a quote and show the curve rebuilding on the next query

Usage:
    python run_demo.py [--quotes QUOTES_CSV] [--evaluation-date YYYY-MM-DD]
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

import pandas as pd

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ratecurves import (
    BusinessDayConvention,
    Calendar,
    CurveConstructionError,
    DayCount,
    DepositRateHelper,
    PiecewiseYieldCurve,
    SimpleQuote,
    bootstrap_from_csv,
    settings,
)

DEPOSITS = [
    ("1W", -0.00523),
    ("1M", -0.00503),
    ("3M", -0.00473),
    ("6M", -0.00429),
    ("1Y", -0.00339),
]


def build_deposit_curve(evaluation_date: date):
    """Deposit curve on SimpleQuotes; returns the curve and its quotes."""
    quotes = {tenor: SimpleQuote(rate, name=tenor) for tenor, rate in DEPOSITS}
    helpers = [
        DepositRateHelper(
            quotes[tenor], tenor, fixing_days=2, calendar=Calendar(),
            convention=BusinessDayConvention.MODIFIED_FOLLOWING, end_of_month=True,
            day_count=DayCount.ACT_360, evaluation_date=evaluation_date
        )
        for tenor, _ in DEPOSITS
    ]
    reference_date = helpers[0].earliest_date
    curve = PiecewiseYieldCurve(reference_date, helpers, DayCount.ACT_ACT)
    return curve, quotes


def print_curve(curve: PiecewiseYieldCurve) -> None:
    with pd.option_context("display.float_format", "{:.10f}".format, "display.width", 120):
        print(curve.nodes_frame().to_string(index=False))
        print()
        result = curve.result()
        print(result.to_frame().to_string(index=False))
        print(f"\n{result.message} after {result.passes} pass(es)")


def main():
    parser = argparse.ArgumentParser(description="Bootstrap a yield curve")
    parser.add_argument("--quotes", type=Path, default=None,
                        help="CSV of quotes (instrument_type, tenor, quote, ...)")
    parser.add_argument("--evaluation-date", type=date.fromisoformat,
                        default=date(2020, 3, 11))
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")
    settings.evaluation_date = args.evaluation_date

    if args.quotes is not None:
        try:
            curve = bootstrap_from_csv(args.evaluation_date, args.quotes)
        except CurveConstructionError as exc:
            print(f"Bootstrap failed: {exc}")
            return 1
        print_curve(curve)
        return 0

    print("=" * 60)
    print(f"Deposit curve, evaluation date {args.evaluation_date}")
    print("=" * 60)
    curve, quotes = build_deposit_curve(args.evaluation_date)
    print_curve(curve)

    print("\nMoving the 6M deposit by +10bp")
    quotes["6M"].set_value(quotes["6M"].value() + 0.001)
    print(f"Curve stale: {curve.is_stale()}")
    print_curve(curve)
    return 0


if __name__ == "__main__":
    sys.exit(main())
