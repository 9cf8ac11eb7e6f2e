"""
Unit tests for piecewise curve bootstrapping.
"""

from datetime import date
import numpy as np
import pandas as pd
import pytest

from conftest import DEPOSIT_QUOTES, EVALUATION_DATE, REFERENCE_DATE, make_deposits
from ratecurves.conventions import Calendar, DayCount, year_fraction
from ratecurves.curves import (
    BootstrapResult,
    FixedRateBondHelper,
    FlatForward,
    FxSwapRateHelper,
    OISRateHelper,
    OvernightIndexFutureRateHelper,
    PiecewiseYieldCurve,
    RateHelper,
    SwapRateHelper,
    ZeroYield,
    bootstrap_from_csv,
    bootstrap_from_quotes,
    build_helper,
    load_quotes_csv,
)
from ratecurves.dates import Schedule
from ratecurves.errors import (
    BootstrapNonConvergenceError,
    CurveConstructionError,
    DegenerateNodeError,
    ExtrapolationError,
    InvalidInstrumentError,
    QuoteUnavailableError,
    UnboundedRootError,
)
from ratecurves.pricers import BondPricer, FixedRateBond
from ratecurves.quotes import SimpleQuote
from ratecurves.settings import BootstrapConfig


class ConstantHelper(RateHelper):
    """Helper whose implied quote ignores the curve."""

    def __init__(self, quote, pillar, implied):
        super().__init__(quote)
        self.earliest_date = REFERENCE_DATE
        self.latest_date = pillar
        self._implied = implied

    def implied_quote(self, curve=None):
        self._curve(curve)
        return self._implied


def deposit_curve(helpers=None, **kwargs):
    helpers = make_deposits() if helpers is None else helpers
    return PiecewiseYieldCurve(REFERENCE_DATE, helpers, DayCount.ACT_ACT, **kwargs)


class TestNegativeRateDeposits:
    """EUR deposits with negative rates, log-linear discount factors."""

    @pytest.fixture
    def curve(self, deposit_helpers):
        return deposit_curve(deposit_helpers)

    def test_discount_at_reference_is_one(self, curve):
        assert curve.discount(REFERENCE_DATE) == 1.0

    def test_reprices_every_deposit(self, curve):
        for helper in curve.helpers:
            assert abs(helper.implied_quote(curve) - helper.market_quote()) < 1e-11

    def test_pillars_match_simple_interest(self, curve):
        """With spot on the reference date, each pillar is 1 / (1 + r * tau)."""
        for helper in curve.helpers:
            expected = 1.0 / (1.0 + helper.market_quote() * helper.year_fraction)
            assert abs(curve.discount(helper.latest_date) - expected) < 1e-12

    def test_negative_rates_give_discount_above_one(self, curve):
        """Negative rates: discount factors exceed 1 and grow with maturity."""
        dfs = [curve.discount(h.latest_date) for h in curve.helpers]
        assert all(df > 1.0 for df in dfs)
        assert all(a < b for a, b in zip(dfs[:-1], dfs[1:]))
        df_3m = curve.discount(date(2020, 6, 15))
        df_1y = curve.discount(date(2021, 3, 15))
        assert df_1y > df_3m > 1.0

    def test_single_pass_for_local_interpolation(self, curve):
        assert curve.passes == 1

    def test_nodes(self, curve):
        assert curve.dates[0] == REFERENCE_DATE
        assert curve.data[0] == 1.0
        assert len(curve.nodes()) == len(DEPOSIT_QUOTES) + 1
        assert curve.max_date == date(2021, 3, 15)

    def test_extrapolation_disabled(self, curve):
        with pytest.raises(ExtrapolationError):
            curve.discount(date(2022, 3, 15))
        assert curve.discount(date(2022, 3, 15), extrapolate=True) > 1.0

    def test_zero_and_forward_rates_negative(self, curve):
        assert curve.zero_rate(date(2020, 9, 14)).rate < 0.0
        assert curve.forward_rate(date(2020, 6, 15), date(2020, 9, 14)).rate < 0.0

    def test_result(self, curve):
        result = curve.result()
        assert isinstance(result, BootstrapResult)
        assert result.success
        assert result.max_error < 1e-11
        assert result.message == "Bootstrap successful"
        frame = result.to_frame()
        assert list(frame.columns) == [
            "helper", "pillar_date", "time", "market_quote", "implied_quote", "error"
        ]
        assert len(frame) == len(DEPOSIT_QUOTES)

    def test_nodes_frame(self, curve):
        frame = curve.nodes_frame()
        assert isinstance(frame, pd.DataFrame)
        assert len(frame) == len(DEPOSIT_QUOTES) + 1
        assert (frame["zero_rate"].iloc[1:] < 0).all()


class TestOrdering:
    """Helpers may be given in any order."""

    def test_unsorted_input_gives_same_curve(self):
        sorted_curve = deposit_curve(make_deposits())
        shuffled = make_deposits()
        shuffled = [shuffled[i] for i in (3, 0, 4, 2, 1)]
        shuffled_curve = deposit_curve(shuffled)
        assert shuffled_curve.dates == sorted_curve.dates
        np.testing.assert_allclose(shuffled_curve.data, sorted_curve.data, rtol=0, atol=1e-15)

    def test_helpers_sorted_by_pillar(self):
        helpers = make_deposits()[::-1]
        curve = deposit_curve(helpers)
        pillars = [h.pillar_date for h in curve.helpers]
        assert pillars == sorted(pillars)

    def test_duplicate_pillar(self):
        helpers = make_deposits([("3M", -0.0047), ("3M", -0.0048)])
        with pytest.raises(DegenerateNodeError):
            deposit_curve(helpers)

    def test_pillar_on_or_before_reference(self):
        helpers = make_deposits()
        with pytest.raises(InvalidInstrumentError):
            PiecewiseYieldCurve(date(2020, 4, 1), helpers, DayCount.ACT_ACT)

    def test_empty_helpers(self):
        with pytest.raises(InvalidInstrumentError):
            PiecewiseYieldCurve(REFERENCE_DATE, [], DayCount.ACT_ACT)

    def test_helper_bound_to_one_curve(self):
        helpers = make_deposits()
        deposit_curve(helpers)
        with pytest.raises(ValueError):
            deposit_curve(helpers)


class TestLazyRebuild:
    """Curves rebuild when a quote changes."""

    def test_stale_until_queried(self):
        curve = deposit_curve()
        assert curve.is_stale()
        curve.discount(date(2020, 6, 15))
        assert not curve.is_stale()

    def test_quote_change_rebuilds(self):
        helpers = make_deposits()
        curve = deposit_curve(helpers)
        three_month = helpers[2]
        before = curve.discount(three_month.latest_date)

        three_month.quote.set_value(-0.006)
        assert curve.is_stale()
        after = curve.discount(three_month.latest_date)
        assert after != before
        assert abs(after - 1.0 / (1.0 - 0.006 * three_month.year_fraction)) < 1e-12
        assert not curve.is_stale()

    def test_unchanged_quote_keeps_curve(self):
        helpers = make_deposits()
        curve = deposit_curve(helpers)
        curve.discount(date(2020, 6, 15))
        helpers[0].quote.set_value(helpers[0].quote.value())
        assert not curve.is_stale()

    def test_recalculate(self):
        curve = deposit_curve()
        curve.recalculate()
        assert not curve.is_stale()


class TestFailures:
    """Construction errors carry the failing helper and never leave a partial curve."""

    def test_no_root_raises_unbounded(self):
        helpers = make_deposits()[:2]
        helpers.append(ConstantHelper(0.01, date(2020, 6, 15), 0.0))
        curve = deposit_curve(helpers)
        with pytest.raises(CurveConstructionError) as excinfo:
            curve.discount(date(2020, 4, 1))
        err = excinfo.value
        assert isinstance(err.cause, UnboundedRootError)
        assert isinstance(err.__cause__, UnboundedRootError)
        assert err.helper_index == 2
        assert "ConstantHelper" in err.helper_description

    def test_failure_is_repeatable(self):
        """A failed build leaves no nodes behind; the next query fails the same way."""
        helpers = [ConstantHelper(0.01, date(2020, 6, 15), 0.0)]
        curve = deposit_curve(helpers)
        for _ in range(2):
            with pytest.raises(CurveConstructionError):
                curve.discount(date(2020, 4, 1))
        assert curve.is_stale()

    def test_nan_implied_quote(self):
        helpers = [ConstantHelper(0.01, date(2020, 6, 15), float("nan"))]
        with pytest.raises(CurveConstructionError) as excinfo:
            deposit_curve(helpers).recalculate()
        assert isinstance(excinfo.value.cause, UnboundedRootError)

    def test_unset_quote(self):
        helpers = make_deposits()
        helpers[1].quote.reset()
        with pytest.raises(CurveConstructionError) as excinfo:
            deposit_curve(helpers).recalculate()
        assert isinstance(excinfo.value.cause, QuoteUnavailableError)
        assert excinfo.value.helper_index == 1

    def test_pass_limit(self):
        """Global interpolation with a single allowed pass cannot confirm convergence."""
        curve = deposit_curve(interpolator="cubic_spline", config=BootstrapConfig(max_passes=1))
        with pytest.raises(CurveConstructionError) as excinfo:
            curve.recalculate()
        assert isinstance(excinfo.value.cause, BootstrapNonConvergenceError)


class TestInterpolationChoices:
    """Traits and interpolation combinations."""

    def test_cubic_spline_uses_global_passes(self):
        curve = deposit_curve(interpolator="cubic_spline")
        assert curve.passes >= 2
        assert curve.result().max_error < 1e-11

    def test_zero_yield_linear(self):
        curve = deposit_curve(traits="zero_yield", interpolator="linear")
        assert isinstance(curve.traits, ZeroYield)
        assert curve.result().max_error < 1e-11
        # flat short end
        assert curve.data[0] == curve.data[1]
        assert all(z < 0 for z in curve.data)

    def test_default_interpolator_follows_traits(self):
        curve = deposit_curve(traits="zero_yield")
        assert curve.interpolator.name == "linear"
        assert deposit_curve().interpolator.name == "log_linear"


class TestMixedInstruments:
    """Deposits followed by swaps; bonds; FX swaps."""

    def test_deposits_and_swaps(self):
        helpers = make_deposits(DEPOSIT_QUOTES[:4])
        for tenor, rate in [("2Y", -0.0030), ("3Y", -0.0025), ("5Y", -0.0015)]:
            helpers.append(SwapRateHelper(rate, tenor, evaluation_date=EVALUATION_DATE))
        curve = deposit_curve(helpers)
        result = curve.result()
        assert result.success, result.message
        assert result.max_error < 1e-10

    def test_bonds_recover_flat_curve(self):
        """Bonds priced off a flat curve bootstrap back to that curve."""
        ref = date(2024, 1, 15)
        flat = FlatForward(ref, 0.03, DayCount.ACT_365)
        helpers = []
        for maturity in (date(2025, 1, 15), date(2026, 1, 15), date(2027, 1, 15)):
            schedule = Schedule.generate(ref, maturity, "1Y")
            bond = FixedRateBond(0, 100.0, schedule, [0.04])
            price = BondPricer(flat).clean_price(bond, ref)
            helpers.append(FixedRateBondHelper(price, bond, evaluation_date=ref))
        curve = PiecewiseYieldCurve(ref, helpers, DayCount.ACT_365)
        for helper in helpers:
            d = helper.pillar_date
            assert abs(curve.discount(d) - flat.discount(d)) < 1e-10

    def test_fx_swaps_recover_foreign_curve(self):
        """EUR curve from EUR/USD forward points against a USD collateral curve."""
        usd = FlatForward(REFERENCE_DATE, 0.015)
        eur = FlatForward(REFERENCE_DATE, -0.005)
        helpers = []
        for tenor in ("1M", "3M", "6M", "1Y"):
            helper = FxSwapRateHelper(
                SimpleQuote(0.0), 1.10, tenor, collateral_curve=usd,
                is_base_currency_collateral=False, evaluation_date=EVALUATION_DATE
            )
            helper.quote.set_value(helper.implied_quote(eur))
            helpers.append(helper)
        curve = PiecewiseYieldCurve(REFERENCE_DATE, helpers, DayCount.ACT_365)
        for helper in helpers:
            assert helper.market_quote() > 0
            d = helper.pillar_date
            assert abs(curve.discount(d) - eur.discount(d)) < 1e-10

    def test_collateral_quote_change_rebuilds(self):
        usd_rate = SimpleQuote(0.015)
        usd = FlatForward(REFERENCE_DATE, usd_rate)
        eur = FlatForward(REFERENCE_DATE, -0.005)
        helpers = []
        for tenor in ("1M", "3M", "6M", "1Y"):
            helper = FxSwapRateHelper(
                SimpleQuote(0.0), 1.10, tenor, collateral_curve=usd,
                is_base_currency_collateral=False, evaluation_date=EVALUATION_DATE
            )
            helper.quote.set_value(helper.implied_quote(eur))
            helpers.append(helper)
        curve = PiecewiseYieldCurve(REFERENCE_DATE, helpers, DayCount.ACT_365)
        df_before = curve.discount(helpers[-1].pillar_date)
        generation = curve.generation

        usd_rate.set_value(0.03)
        assert curve.is_stale()
        assert curve.generation > generation
        assert curve.discount(helpers[-1].pillar_date) != df_before
        assert curve.result().max_error < 1e-8
        assert not curve.is_stale()

    def test_swap_fixing_past_pillar_needs_global_passes(self):
        """A 6M swap on a 1Y index reads the curve beyond its own pillar."""
        helpers = make_deposits(DEPOSIT_QUOTES[:3])
        short_swap = SwapRateHelper(-0.0044, "6M", float_tenor="1Y", evaluation_date=EVALUATION_DATE)
        helpers.append(short_swap)
        helpers.append(SwapRateHelper(-0.0030, "2Y", evaluation_date=EVALUATION_DATE))
        curve = deposit_curve(helpers)
        assert short_swap.latest_relevant_date > short_swap.pillar_date
        assert curve.passes >= 2
        assert curve.result().max_error < 1e-10


class TestQuoteRecords:
    """Building curves from quote dictionaries and CSV files."""

    QUOTES = [
        {"instrument_type": "DEPOSIT", "tenor": "1M", "quote": 0.0530},
        {"instrument_type": "OIS", "tenor": "3M", "quote": 0.0532},
        {"instrument_type": "OIS", "tenor": "6M", "quote": 0.0528},
        {"instrument_type": "OIS", "tenor": "1Y", "quote": 0.0510},
        {"instrument_type": "OIS", "tenor": "2Y", "quote": 0.0470},
        {"instrument_type": "OIS", "tenor": "5Y", "quote": 0.0420},
    ]

    def test_bootstrap_from_quotes(self):
        curve = bootstrap_from_quotes(date(2024, 1, 15), self.QUOTES)
        assert not curve.is_stale()
        assert curve.result().max_error < 1e-10
        dfs = curve.data
        assert all(a > b for a, b in zip(dfs[:-1], dfs[1:]))
        # discount factors between nodes never increase for positive rates
        grid = np.linspace(0.0, curve.max_time, 200)
        sampled = [curve.discount(t) for t in grid]
        assert all(b <= a for a, b in zip(sampled[:-1], sampled[1:]))

    def test_build_helper_types(self):
        ref = date(2024, 1, 15)
        fut = build_helper({"instrument_type": "FUT", "quote": 94.8, "month": 3, "year": 2024}, ref)
        assert isinstance(fut, OvernightIndexFutureRateHelper)
        ois = build_helper({"instrument_type": "OIS", "tenor": "1Y", "quote": 0.05}, ref)
        assert isinstance(ois, OISRateHelper)
        assert ois.earliest_date == ref
        fra = build_helper({"instrument_type": "FRA", "tenor": "3M", "start_tenor": "3M",
                            "quote": 0.05}, ref)
        assert (fra.months_to_start, fra.months_to_end) == (3, 6)

    def test_unknown_instrument(self):
        with pytest.raises(InvalidInstrumentError):
            build_helper({"instrument_type": "CDS", "quote": 0.01}, date(2024, 1, 15))

    def test_csv(self, tmp_path):
        path = tmp_path / "quotes.csv"
        lines = ["instrument_type,tenor,quote,pay_freq"]
        lines += [f"{q['instrument_type']},{q['tenor']},{q['quote']},"
                  f"{'ANNUAL' if q['instrument_type'] == 'OIS' else ''}" for q in self.QUOTES]
        path.write_text("\n".join(lines) + "\n")

        records = load_quotes_csv(path)
        assert len(records) == len(self.QUOTES)
        assert "pay_freq" not in records[0]
        assert records[1]["pay_freq"] == "ANNUAL"

        curve = bootstrap_from_csv(date(2024, 1, 15), path)
        reference = bootstrap_from_quotes(date(2024, 1, 15), self.QUOTES)
        np.testing.assert_allclose(curve.data, reference.data, rtol=0, atol=1e-14)

    def test_csv_missing_columns(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("tenor,quote\n1M,0.05\n")
        with pytest.raises(InvalidInstrumentError):
            load_quotes_csv(path)
