"""
Unit tests for quotes, rates and settings.
"""

from datetime import date
import numpy as np
import pytest

from ratecurves.conventions import Compounding, DayCount, Frequency
from ratecurves.errors import QuoteUnavailableError
from ratecurves.quotes import CompositeQuote, DerivedQuote, SimpleQuote, as_quote
from ratecurves.rates import InterestRate
from ratecurves.settings import BootstrapConfig, settings


class TestSimpleQuote:
    """Tests for SimpleQuote."""

    def test_unset_quote_raises(self):
        q = SimpleQuote(name="3M")
        assert not q.is_valid()
        with pytest.raises(QuoteUnavailableError, match="3M"):
            q.value()

    def test_set_value_returns_change(self):
        q = SimpleQuote(0.01)
        assert q.set_value(0.015) == pytest.approx(0.005)
        assert q.value() == 0.015

    def test_generation_moves_only_on_change(self):
        q = SimpleQuote(0.01)
        g0 = q.generation
        q.set_value(0.01)
        assert q.generation == g0
        q.set_value(0.02)
        assert q.generation != g0

    def test_reset(self):
        q = SimpleQuote(0.01)
        q.reset()
        assert not q.is_valid()

    def test_as_quote(self):
        q = SimpleQuote(1.0)
        assert as_quote(q) is q
        assert as_quote(2.5).value() == 2.5


class TestDerivedQuotes:
    """Tests for derived and composite quotes."""

    def test_derived_follows_source(self):
        rate = SimpleQuote(0.05)
        price = DerivedQuote(rate, lambda r: 100.0 * (1.0 - r))
        assert price.value() == pytest.approx(95.0)
        g0 = price.generation
        rate.set_value(0.04)
        assert price.value() == pytest.approx(96.0)
        assert price.generation != g0

    def test_composite(self):
        rate, spread = SimpleQuote(0.03), SimpleQuote(0.001)
        total = CompositeQuote(rate, spread, lambda a, b: a + b)
        assert total.value() == pytest.approx(0.031)
        g0 = total.generation
        spread.set_value(0.002)
        assert total.generation != g0

    def test_composite_invalid_when_leg_unset(self):
        total = CompositeQuote(SimpleQuote(), SimpleQuote(1.0), lambda a, b: a + b)
        assert not total.is_valid()


class TestInterestRate:
    """Tests for InterestRate compounding."""

    def test_simple(self):
        r = InterestRate(0.05, compounding=Compounding.SIMPLE)
        assert r.compound_factor(0.5) == pytest.approx(1.025)

    def test_compounded(self):
        r = InterestRate(0.05, compounding=Compounding.COMPOUNDED, frequency=Frequency.SEMIANNUAL)
        assert r.compound_factor(1.0) == pytest.approx(1.025 ** 2)

    def test_continuous(self):
        r = InterestRate(0.05)
        assert r.compound_factor(2.0) == pytest.approx(np.exp(0.1))
        assert r.discount_factor(2.0) == pytest.approx(np.exp(-0.1))

    def test_simple_then_compounded(self):
        r = InterestRate(0.05, compounding=Compounding.SIMPLE_THEN_COMPOUNDED,
                         frequency=Frequency.QUARTERLY)
        assert r.compound_factor(0.2) == pytest.approx(1.01)
        assert r.compound_factor(1.0) == pytest.approx(1.0125 ** 4)

    def test_negative_time_raises(self):
        with pytest.raises(ValueError):
            InterestRate(0.05).compound_factor(-1.0)

    def test_compounded_needs_frequency(self):
        with pytest.raises(ValueError):
            InterestRate(0.05, compounding=Compounding.COMPOUNDED, frequency=Frequency.ONCE)

    def test_implied_rate_round_trip(self):
        r = InterestRate(0.05, compounding=Compounding.COMPOUNDED, frequency=Frequency.SEMIANNUAL)
        implied = InterestRate.implied_rate(
            r.compound_factor(2.0), 2.0, DayCount.ACT_365,
            Compounding.COMPOUNDED, Frequency.SEMIANNUAL
        )
        assert implied.rate == pytest.approx(0.05, abs=1e-14)

    def test_implied_rate_rejects_bad_input(self):
        with pytest.raises(ValueError):
            InterestRate.implied_rate(0.0, 1.0)
        with pytest.raises(ValueError):
            InterestRate.implied_rate(1.01, 0.0)

    def test_equivalent_rate(self):
        r = InterestRate(0.05)
        annual = r.equivalent_rate(1.0, Compounding.COMPOUNDED, Frequency.ANNUAL)
        assert annual.rate == pytest.approx(np.exp(0.05) - 1.0)
        assert float(annual) == annual.rate

    def test_compound_factor_between_dates(self):
        r = InterestRate(0.036, DayCount.ACT_360, Compounding.SIMPLE)
        cf = r.compound_factor_between(date(2024, 1, 15), date(2024, 4, 15))
        assert cf == pytest.approx(1.0 + 0.036 * 91 / 360)


class TestSettings:
    """Tests for Settings and BootstrapConfig."""

    def test_evaluation_date_context(self):
        with settings.at(date(2020, 3, 11)):
            assert settings.evaluation_date == date(2020, 3, 11)
        assert settings.evaluation_date == date.today()

    def test_reset(self):
        settings.evaluation_date = date(2020, 1, 2)
        settings.allow_extrapolation = True
        settings.reset()
        assert not settings.allow_extrapolation
        assert settings.evaluation_date == date.today()

    def test_config_defaults(self):
        config = BootstrapConfig.default()
        assert config.accuracy == 1e-12
        assert config.max_passes == 100

    def test_config_overrides(self):
        config = BootstrapConfig.strict().with_overrides(max_passes=5)
        assert config.max_passes == 5
        assert config.accuracy == 1e-14

    def test_config_validation(self):
        with pytest.raises(ValueError):
            BootstrapConfig(accuracy=0.0)
        with pytest.raises(ValueError):
            BootstrapConfig(max_passes=0)
        with pytest.raises(ValueError):
            BootstrapConfig(bracket_growth=1.0)
