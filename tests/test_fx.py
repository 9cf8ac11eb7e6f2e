"""
Unit tests for exchange rates, forward points and FX forwards.
"""

from datetime import date
import numpy as np
import pytest

from conftest import REFERENCE_DATE
from ratecurves.conventions import DayCount, year_fraction
from ratecurves.curves import FlatForward, FxForwardPointTermStructure
from ratecurves.errors import (
    DateBeforeReferenceError,
    ExtrapolationError,
    InvalidInstrumentError,
    NotChainableError,
)
from ratecurves.fx import ExchangeRate, ForwardExchangeRate, RateType
from ratecurves.pricers import ForwardPointsPricer, FxForward


EURUSD = ExchangeRate("EUR", "USD", 1.10)


class TestExchangeRate:
    """Tests for spot exchange rates."""

    def test_exchange_both_ways(self):
        amount, ccy = EURUSD.exchange(100.0, "EUR")
        assert ccy == "USD"
        assert amount == pytest.approx(110.0)
        amount, ccy = EURUSD.exchange(110.0, "USD")
        assert ccy == "EUR"
        assert amount == pytest.approx(100.0)

    def test_exchange_wrong_currency(self):
        with pytest.raises(ValueError):
            EURUSD.exchange(100.0, "GBP")

    def test_rate_must_be_positive(self):
        with pytest.raises(ValueError):
            ExchangeRate("EUR", "USD", 0.0)

    @pytest.mark.parametrize("r1, r2, pair, rate", [
        (ExchangeRate("EUR", "USD", 1.10), ExchangeRate("EUR", "GBP", 0.85), ("USD", "GBP"), 0.85 / 1.10),
        (ExchangeRate("USD", "JPY", 110.0), ExchangeRate("EUR", "USD", 1.10), ("JPY", "EUR"), 1.0 / 121.0),
        (ExchangeRate("EUR", "USD", 1.10), ExchangeRate("USD", "JPY", 110.0), ("EUR", "JPY"), 121.0),
        (ExchangeRate("EUR", "USD", 1.10), ExchangeRate("GBP", "USD", 1.30), ("EUR", "GBP"), 1.10 / 1.30),
    ])
    def test_chain_cases(self, r1, r2, pair, rate):
        chained = ExchangeRate.chain(r1, r2)
        assert (chained.source, chained.target) == pair
        assert chained.rate == pytest.approx(rate)
        assert chained.type == RateType.DERIVED
        assert chained.chain_of == (r1, r2)

    def test_derived_exchange_goes_through_chain(self):
        eurjpy = ExchangeRate.chain(EURUSD, ExchangeRate("USD", "JPY", 110.0))
        amount, ccy = eurjpy.exchange(100.0, "EUR")
        assert ccy == "JPY"
        assert amount == pytest.approx(12100.0)

    def test_not_chainable(self):
        with pytest.raises(NotChainableError):
            ExchangeRate.chain(EURUSD, ExchangeRate("GBP", "JPY", 150.0))

    def test_inverse(self):
        inv = ExchangeRate.inverse(EURUSD)
        assert (inv.source, inv.target) == ("USD", "EUR")
        assert inv.rate == pytest.approx(1.0 / 1.10)


class TestForwardExchangeRate:
    """Tests for forward rate chaining and inversion."""

    @staticmethod
    def forward(source, target, spot, points, tenor="3M"):
        return ForwardExchangeRate(ExchangeRate(source, target, spot), points, tenor)

    def test_all_in_rate(self):
        fwd = self.forward("EUR", "USD", 1.10, 50.0)
        assert fwd.forward_rate == pytest.approx(1.105)
        amount, ccy = fwd.exchange(100.0, "EUR")
        assert (amount, ccy) == (pytest.approx(110.5), "USD")

    @pytest.mark.parametrize("legs", [
        (("EUR", "USD", 1.10, 50.0), ("EUR", "GBP", 0.85, 12.0)),
        (("USD", "JPY", 110.0, -2000.0), ("EUR", "USD", 1.10, 50.0)),
        (("EUR", "USD", 1.10, 50.0), ("USD", "JPY", 110.0, -2000.0)),
        (("EUR", "USD", 1.10, 50.0), ("GBP", "USD", 1.30, 30.0)),
    ])
    def test_chain_matches_cross_of_outright_rates(self, legs):
        """Chained points reproduce the cross of the two all-in forwards."""
        r1, r2 = self.forward(*legs[0]), self.forward(*legs[1])
        chained = ForwardExchangeRate.chain(r1, r2)
        outright = ExchangeRate.chain(
            ExchangeRate(r1.source, r1.target, r1.forward_rate),
            ExchangeRate(r2.source, r2.target, r2.forward_rate),
        )
        assert (chained.source, chained.target) == (outright.source, outright.target)
        assert chained.forward_rate == pytest.approx(outright.rate, rel=1e-12)
        assert chained.type == RateType.DERIVED

    def test_chain_target_source_points(self):
        chained = ForwardExchangeRate.chain(
            self.forward("EUR", "USD", 1.10, 50.0),
            self.forward("USD", "JPY", 110.0, -2000.0),
        )
        assert chained.forward_points == pytest.approx(3290.0)

    def test_chain_requires_same_tenor(self):
        with pytest.raises(NotChainableError):
            ForwardExchangeRate.chain(
                self.forward("EUR", "USD", 1.10, 50.0, "3M"),
                self.forward("USD", "JPY", 110.0, -2000.0, "6M"),
            )

    def test_inverse(self):
        fwd = self.forward("EUR", "USD", 1.10, 50.0)
        inv = ForwardExchangeRate.inverse(fwd)
        assert (inv.source, inv.target) == ("USD", "EUR")
        assert inv.spot_rate == pytest.approx(1.0 / 1.10)
        assert inv.forward_rate == pytest.approx(1.0 / 1.105)
        assert inv.forward_points < 0

    def test_chain_with_inverse_is_identity(self):
        fwd = self.forward("EUR", "USD", 1.10, 50.0)
        identity = ForwardExchangeRate.chain(fwd, ForwardExchangeRate.inverse(fwd))
        assert identity.spot_rate == pytest.approx(1.0)
        assert identity.forward_rate == pytest.approx(1.0)
        assert abs(identity.forward_points) < 1e-8


class TestForwardPointTermStructure:
    """Tests for interpolated forward points."""

    @pytest.fixture
    def points(self):
        return FxForwardPointTermStructure(
            REFERENCE_DATE, EURUSD,
            [date(2020, 4, 13), date(2020, 6, 15), date(2021, 3, 15)],
            [10.0, 30.0, 80.0],
        )

    def test_zero_points_at_spot(self, points):
        assert points.forward_points(REFERENCE_DATE) == 0.0
        assert points.forward_exchange_rate(REFERENCE_DATE).forward_rate == pytest.approx(1.10)

    def test_nodes(self, points):
        assert points.forward_points(date(2020, 6, 15)) == pytest.approx(30.0)
        assert len(points.nodes()) == 4
        assert (points.source, points.target) == ("EUR", "USD")

    def test_linear_between_nodes(self, points):
        t1 = points.time_from_reference(date(2020, 4, 13))
        t2 = points.time_from_reference(date(2020, 6, 15))
        mid = (t1 + t2) / 2
        assert points.forward_points(mid) == pytest.approx(20.0)

    def test_extrapolation(self, points):
        with pytest.raises(ExtrapolationError):
            points.forward_points(date(2022, 1, 3))
        assert points.forward_points(date(2022, 1, 3), extrapolate=True) == 80.0
        points.enable_extrapolation()
        assert points.forward_points(date(2022, 1, 3)) == 80.0

    def test_before_reference(self, points):
        with pytest.raises(DateBeforeReferenceError):
            points.forward_points(date(2020, 3, 1))

    def test_dates_must_increase(self):
        with pytest.raises(InvalidInstrumentError):
            FxForwardPointTermStructure(
                REFERENCE_DATE, EURUSD, [date(2020, 6, 15), date(2020, 4, 13)], [30.0, 10.0]
            )

    def test_from_forward_rates(self):
        rates = [
            ForwardExchangeRate(EURUSD, 10.0, "1M"),
            ForwardExchangeRate(EURUSD, 30.0, "3M"),
        ]
        points = FxForwardPointTermStructure.from_forward_rates(REFERENCE_DATE, rates)
        assert points.dates == [REFERENCE_DATE, date(2020, 4, 13), date(2020, 6, 13)]
        assert points.points == [0.0, 10.0, 30.0]


class TestForwardPointsPricer:
    """Tests for FX forward valuation."""

    def test_pair_defaults(self):
        eurusd = FxForward(date(2021, 3, 15), "EUR", "USD", 1e6, 1.10)
        gbpusd = FxForward(date(2021, 3, 15), "GBP", "USD", 1e6, 1.30)
        assert eurusd.day_count == DayCount.ACT_365
        assert gbpusd.day_count == DayCount.ACT_360
        assert eurusd.settlement_days == 2
        assert eurusd.term_notional == pytest.approx(1.1e6)

    def test_npv(self):
        curve = FlatForward(REFERENCE_DATE, 0.01, DayCount.ACT_365)
        fx_forward = FxForward(date(2021, 3, 15), "EUR", "USD", 1e6, 1.10)
        pricer = ForwardPointsPricer("USD", 1.10, 50.0, curve)
        result = pricer.calculate(fx_forward)

        t = year_fraction(REFERENCE_DATE, date(2021, 3, 15), DayCount.ACT_365)
        assert result.forward_value == pytest.approx(1e6 * 0.005)
        assert result.npv == pytest.approx(1e6 * 0.005 * np.exp(-0.01 * t))
        assert result.valuation_date == REFERENCE_DATE
        assert pricer.npv(fx_forward) == pytest.approx(result.npv)

    def test_requires_curve(self):
        with pytest.raises(ValueError):
            ForwardPointsPricer("USD", 1.10, 50.0, None)
