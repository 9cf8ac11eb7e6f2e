"""
Curve bootstrapping engine.

Implements the piecewise bootstrap of a yield curve from rate helpers:
1. Sort helpers by pillar date and seed node 0 at the reference date
2. Solve node values one by one so each helper reprices to its quote
3. Repeat whole passes while later nodes move earlier segments
   (global interpolators, helpers reading past their pillar)
4. Freeze the nodes; verify repricing on request

The build is lazy: it runs on the first query and again whenever a
quote's (or a collateral curve's) generation counter has moved since the
last build.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from ..conventions import BusinessDayConvention, Calendar, DayCount, Frequency
from ..dates import Period
from ..errors import (
    BootstrapNonConvergenceError,
    CurveConstructionError,
    DegenerateNodeError,
    InvalidInstrumentError,
)
from ..settings import BootstrapConfig
from ..solvers import solve
from .curve import InterpolatedCurve
from .helpers import (
    DepositRateHelper,
    FraRateHelper,
    OISRateHelper,
    RateHelper,
    SwapRateHelper,
    sofr_future_helper,
)
from .interpolation import Interpolator, check_node_times, resolve_interpolator
from .traits import CurveTraits, create_traits

logger = logging.getLogger(__name__)


@dataclass
class BootstrapResult:
    """Repricing diagnostics of a bootstrapped curve."""
    curve: "PiecewiseYieldCurve"
    repricing_errors: Dict[str, float]
    passes: int
    tolerance: float
    details: List[Dict] = field(default_factory=list)

    @property
    def max_error(self) -> float:
        if not self.repricing_errors:
            return 0.0
        return max(abs(e) for e in self.repricing_errors.values())

    @property
    def success(self) -> bool:
        return self.max_error <= self.tolerance

    @property
    def message(self) -> str:
        if self.success:
            return "Bootstrap successful"
        return f"Repricing error {self.max_error:.2e} exceeds tolerance {self.tolerance:.2e}"

    def to_frame(self) -> pd.DataFrame:
        """One row per helper: pillar, market and implied quotes, error."""
        return pd.DataFrame(
            self.details,
            columns=["helper", "pillar_date", "time", "market_quote", "implied_quote", "error"]
        )


class PiecewiseYieldCurve(InterpolatedCurve):
    """
    Yield curve bootstrapped from rate helpers.

    Attributes:
        reference_date: Curve date, where node 0 sits
        day_count: Day count turning dates into node times
        traits: Meaning of node values (Discount or ZeroYield)
        interpolator: Scheme connecting the nodes
        config: Numerical settings (tolerances, caps)
    """

    def __init__(
        self,
        reference_date: date,
        helpers: Sequence[RateHelper],
        day_count: DayCount = DayCount.ACT_365,
        traits: Union[CurveTraits, str, None] = None,
        interpolator: Union[Interpolator, str, None] = None,
        config: Optional[BootstrapConfig] = None
    ):
        if isinstance(traits, str):
            traits = create_traits(traits)
        traits = traits or create_traits("discount")
        interpolator = resolve_interpolator(interpolator) if interpolator is not None \
            else traits.fallback_interpolator()
        super().__init__(reference_date, day_count, traits, interpolator)
        self.config = config or BootstrapConfig.default()

        if not helpers:
            raise InvalidInstrumentError("No rate helpers provided")
        # stable sort keeps input order among equal keys
        self._helpers: List[RateHelper] = sorted(helpers, key=lambda h: h.pillar_date)
        self._pillar_dates = [reference_date]
        for helper in self._helpers:
            pillar = helper.pillar_date
            if pillar <= reference_date:
                raise InvalidInstrumentError(
                    f"{helper.description}: pillar {pillar} not after reference date {reference_date}"
                )
            if pillar == self._pillar_dates[-1]:
                raise DegenerateNodeError(
                    f"More than one instrument with pillar {pillar}"
                )
            self._pillar_dates.append(pillar)
        self._pillar_times = [self.time_from_reference(d) for d in self._pillar_dates]
        check_node_times(self._pillar_times)

        for helper in self._helpers:
            helper.set_term_structure(self)

        self._snapshot: Optional[Tuple[int, ...]] = None
        self._building = False
        self._passes = 0

    # ------------------------------------------------------------------
    # Lazy evaluation
    # ------------------------------------------------------------------
    @property
    def helpers(self) -> List[RateHelper]:
        return list(self._helpers)

    def _quote_generations(self) -> Tuple[int, ...]:
        return tuple(g for h in self._helpers for g in h.generations())

    @property
    def generation(self) -> int:
        # generation counters are global and only grow, so the max only grows
        return max(self._quote_generations(), default=0)

    def is_stale(self) -> bool:
        return self._snapshot is None or self._snapshot != self._quote_generations()

    def _ensure_built(self) -> None:
        if self._building:
            return
        snapshot = self._quote_generations()
        if self._snapshot is not None and snapshot == self._snapshot:
            return
        if self._snapshot is not None:
            logger.debug("Quotes changed since last build; rebuilding curve")
        self._build(snapshot)

    def recalculate(self) -> None:
        """Force a rebuild on the current quotes."""
        self._snapshot = None
        self._ensure_built()

    def _build(self, snapshot: Tuple[int, ...]) -> None:
        self._building = True
        try:
            self._passes = self._perform_bootstrap()
        except Exception:
            self._reset_nodes()
            raise
        finally:
            self._building = False
        self._snapshot = snapshot
        logger.info(
            "Bootstrapped %s nodes (%s, %s) in %s pass(es)",
            len(self._helpers), self.traits.name, self.interpolator.name, self._passes
        )

    def _reset_nodes(self) -> None:
        self._dates = [self.reference_date]
        self._times = [0.0]
        self._data = [self.traits.initial_value()]
        self._interpolation = None
        self._snapshot = None

    # ------------------------------------------------------------------
    # Bootstrap
    # ------------------------------------------------------------------
    def _needs_global_passes(self) -> bool:
        if self.interpolator.is_global:
            return True
        return any(h.latest_relevant_date > h.pillar_date for h in self._helpers)

    def _interpolator_for(self, n_nodes: int) -> Interpolator:
        if n_nodes < self.interpolator.required_points:
            return self.traits.fallback_interpolator()
        return self.interpolator

    def _perform_bootstrap(self) -> int:
        n = len(self._helpers)
        self._dates = list(self._pillar_dates)
        self._times = list(self._pillar_times)
        self._data = [self.traits.initial_value()] * (n + 1)

        global_passes = self._needs_global_passes()
        max_passes = self.config.max_passes if global_passes else 1

        for pass_no in range(1, max_passes + 1):
            previous = list(self._data)
            for i in range(1, n + 1):
                helper = self._helpers[i - 1]
                try:
                    self._solve_node(i, helper, pass_no)
                except Exception as exc:
                    logger.error("Bootstrap failed at helper %s (%s): %s", i - 1, helper.description, exc)
                    raise CurveConstructionError(i - 1, helper.description, exc) from exc

            if not global_passes:
                break
            changes = [abs(a - b) for a, b in zip(self._data[1:], previous[1:])]
            change = max(changes)
            logger.debug("Pass %s: max node change %.3e", pass_no, change)
            if pass_no > 1 and change <= self.config.accuracy:
                break
        else:
            worst = max(range(n), key=lambda k: changes[k])
            exc = BootstrapNonConvergenceError(
                f"Convergence not reached after {max_passes} passes; "
                f"last max node change {change:.3e}, accuracy {self.config.accuracy:.1e}"
            )
            helper = self._helpers[worst]
            logger.error("Bootstrap did not converge: %s", exc)
            raise CurveConstructionError(worst, helper.description, exc) from exc

        self._interpolation = self.interpolator.fit(self._times, self._data)
        return pass_no

    def _solve_node(self, i: int, helper: RateHelper, pass_no: int) -> None:
        times, data = self._times, self._data
        # first pass: only nodes 0..i exist; later passes refit every node
        n_nodes = i + 1 if pass_no == 1 else len(times)
        interpolator = self._interpolator_for(n_nodes)

        if pass_no == 1:
            guess = self.traits.guess(i, times, data)
            step = 1e-3 * max(1.0, abs(guess))
        else:
            guess = data[i]
            step = max(1e3 * self.config.accuracy, 1e-8)
        lower, upper = self.traits.bounds(i, times, data, self.config)
        target = helper.market_quote()

        def objective(x: float) -> float:
            data[i] = x
            self.traits.after_node(i, data)
            self._interpolation = interpolator.fit(times[:n_nodes], data[:n_nodes])
            return helper.implied_quote(self) - target

        result = solve(
            objective, guess, lower, upper,
            accuracy=0.01 * self.config.accuracy,
            step=step,
            growth=self.config.bracket_growth,
            max_expansions=self.config.max_bracket_expansions,
        )
        objective(result.root)
        logger.debug(
            "Node %s (%s) = %.15g after %s iterations",
            i, self._dates[i], result.root, result.iterations
        )

    # ------------------------------------------------------------------
    # Inspectors (trigger the build)
    # ------------------------------------------------------------------
    @property
    def max_date(self) -> date:
        self._ensure_built()
        return self._dates[-1]

    @property
    def max_time(self) -> float:
        self._ensure_built()
        return self._times[-1]

    @property
    def dates(self) -> List[date]:
        self._ensure_built()
        return list(self._dates)

    @property
    def times(self) -> List[float]:
        self._ensure_built()
        return list(self._times)

    @property
    def data(self) -> List[float]:
        self._ensure_built()
        return list(self._data)

    @property
    def passes(self) -> int:
        self._ensure_built()
        return self._passes

    def _discount_impl(self, t: float) -> float:
        self._ensure_built()
        return super()._discount_impl(t)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------
    def repricing_errors(self) -> Dict[str, float]:
        """implied - market quote per helper description."""
        return self.result().repricing_errors

    def result(self) -> BootstrapResult:
        self._ensure_built()
        errors = {}
        details = []
        for helper in self._helpers:
            market = helper.market_quote()
            implied = helper.implied_quote(self)
            errors[helper.description] = implied - market
            details.append({
                "helper": helper.description,
                "pillar_date": helper.pillar_date,
                "time": self.time_from_reference(helper.pillar_date),
                "market_quote": market,
                "implied_quote": implied,
                "error": implied - market,
            })
        return BootstrapResult(
            curve=self,
            repricing_errors=errors,
            passes=self._passes,
            tolerance=self.config.verify_tolerance,
            details=details
        )


def _parse_enum(value, parser, default):
    if value is None:
        return default
    if isinstance(value, str):
        return parser(value)
    return value


def build_helper(
    q: Dict,
    evaluation_date: date,
    calendar: Optional[Calendar] = None
) -> RateHelper:
    """
    Create a rate helper from a quote record.

    Keys: instrument_type (DEPOSIT, FRA, FUTURE, OIS, SWAP), quote and, by
    type, tenor, day_count, start_tenor, pay_freq, float_tenor, month,
    year, frequency, fixing_days/settlement_days (default 0).
    """
    inst_type = str(q.get("instrument_type", "")).upper()
    quote = float(q["quote"])
    days = int(q.get("fixing_days", q.get("settlement_days", 0)))
    calendar = calendar or Calendar()

    if inst_type == "DEPOSIT":
        return DepositRateHelper(
            quote, q["tenor"], days, calendar,
            day_count=_parse_enum(q.get("day_count"), DayCount.from_string, DayCount.ACT_360),
            evaluation_date=evaluation_date
        )
    if inst_type == "FRA":
        start = Period.parse(q.get("start_tenor", "0M")).months()
        length = Period.parse(q["tenor"]).months()
        if start is None or length is None:
            raise InvalidInstrumentError(f"FRA tenors must be in months or years: {q}")
        return FraRateHelper(
            quote, start, start + length, days, calendar,
            day_count=_parse_enum(q.get("day_count"), DayCount.from_string, DayCount.ACT_360),
            evaluation_date=evaluation_date
        )
    if inst_type in ("FUT", "FUTURE", "SOFR_FUTURE"):
        return sofr_future_helper(
            quote, int(q["month"]), int(q["year"]),
            _parse_enum(q.get("frequency"), Frequency.from_string, Frequency.QUARTERLY),
            float(q.get("convexity_adjustment", 0.0)),
            calendar
        )
    if inst_type == "OIS":
        return OISRateHelper(
            quote, q["tenor"], days, calendar,
            payment_frequency=_parse_enum(q.get("pay_freq"), Frequency.from_string, Frequency.ANNUAL),
            day_count=_parse_enum(q.get("day_count"), DayCount.from_string, DayCount.ACT_360),
            evaluation_date=evaluation_date
        )
    if inst_type == "SWAP":
        return SwapRateHelper(
            quote, q["tenor"], calendar,
            fixed_frequency=_parse_enum(q.get("pay_freq"), Frequency.from_string, Frequency.ANNUAL),
            fixed_convention=BusinessDayConvention.MODIFIED_FOLLOWING,
            fixed_day_count=_parse_enum(q.get("day_count"), DayCount.from_string, DayCount.THIRTY_360_EU),
            float_tenor=q.get("float_tenor", "6M"),
            float_day_count=_parse_enum(q.get("float_day_count"), DayCount.from_string, DayCount.ACT_360),
            settlement_days=days,
            evaluation_date=evaluation_date
        )
    raise InvalidInstrumentError(f"Unknown instrument type: {q.get('instrument_type')!r}")


def bootstrap_from_quotes(
    reference_date: date,
    quotes: List[Dict],
    day_count: DayCount = DayCount.ACT_365,
    traits: Union[CurveTraits, str] = "discount",
    interpolation: Union[Interpolator, str] = "log_linear",
    config: Optional[BootstrapConfig] = None,
    calendar: Optional[Calendar] = None
) -> PiecewiseYieldCurve:
    """
    Convenience function to bootstrap curve from quote dictionaries.

    Helpers start at reference_date (fixing days default to 0). The
    curve is built before returning, so construction errors surface here.

    Args:
        reference_date: Valuation date
        quotes: List of dicts with keys: instrument_type, tenor, quote, ...
        day_count: Curve day count
        traits: Node value meaning ("discount" or "zero_yield")
        interpolation: Interpolation method
        config: Bootstrap settings

    Returns:
        Bootstrapped curve

    Example quote format:
        {"instrument_type": "DEPOSIT", "tenor": "1M", "quote": 0.053}
        {"instrument_type": "OIS", "tenor": "2Y", "quote": 0.0532}
    """
    helpers = [build_helper(q, reference_date, calendar) for q in quotes]
    curve = PiecewiseYieldCurve(reference_date, helpers, day_count, traits, interpolation, config)
    curve.recalculate()
    return curve


__all__ = [
    "PiecewiseYieldCurve",
    "BootstrapResult",
    "build_helper",
    "bootstrap_from_quotes",
]
