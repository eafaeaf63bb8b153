"""Greek-validation sweep over a Cartesian grid of contracts and markets.

The grid is two lazy, restartable sequences: option setups
(type x strike x maturity, each with its own dividend schedule) and market
points (underlying x dividend yield x rate x vol).  Each setup gets a fresh
:class:`MarketState` which the market points then overwrite in place.

Sequential by default.  With ``workers > 1`` setups run in separate
processes; every worker builds its own market and schedule, so no mutable
state is shared between them.
"""

from __future__ import annotations

import datetime as dt
import itertools
import logging
from collections import Counter
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Iterator, Optional

from .core import (
    CALL, PUT, GREEKS, GreekSet,
    Payoff, Exercise, DividendSchedule, MarketState, DividendOption,
)
from .dates import DAY_COUNTER_BASE, add_period, today
from .engine import AnalyticDividendEuropeanEngine
from .exceptions import GridConfigurationError
from .risk import BumpPolicy, FiniteDifferenceValidator, is_degenerate
from .validation import DEFAULT_TOLERANCE, Outcome, ToleranceViolation, compare_greeks, default_tolerances

__all__ = [
    "GridConfig",
    "OptionSetup",
    "MarketPoint",
    "GridPoint",
    "PointResult",
    "SweepReport",
    "build_dividend_schedule",
    "iter_option_setups",
    "iter_market_points",
    "iter_grid_points",
    "validate_point",
    "run_sweep",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class GridConfig:
    """Sweep axes and validation policy.

    Parameters
    ----------
    option_types, strikes : tuple
        Contract axes.
    lengths : tuple of int
        Maturities in annual-base units of ``DAY_COUNTER_BASE`` days.
    underlyings, dividend_yields, risk_free_rates, volatilities : tuple
        Market axes.
    dividend_amount : float
        Cash amount of every scheduled dividend.
    first_dividend_months, dividend_every_months : int
        First dividend this many months after valuation, then one every
        ``dividend_every_months`` until maturity (exclusive).
    tolerance : float
        Maximum relative error for every Greek.
    degenerate_threshold : float
        Points valued at or below ``spot * degenerate_threshold`` are skipped.
    bump_policy : BumpPolicy
        Finite-difference step sizes.
    """
    option_types: tuple = (CALL, PUT)
    strikes: tuple = (50.0, 99.5, 100.0, 100.5, 150.0)
    lengths: tuple = (1, 2)
    underlyings: tuple = (100.0,)
    dividend_yields: tuple = (0.00, 0.10, 0.30)
    risk_free_rates: tuple = (0.01, 0.05, 0.15)
    volatilities: tuple = (0.05, 0.20, 0.70)
    dividend_amount: float = 5.0
    first_dividend_months: int = 3
    dividend_every_months: int = 6
    tolerance: float = DEFAULT_TOLERANCE
    degenerate_threshold: float = 1e-5
    bump_policy: BumpPolicy = field(default_factory=BumpPolicy)

    def __post_init__(self):
        for axis in ("option_types", "strikes", "lengths", "underlyings",
                     "dividend_yields", "risk_free_rates", "volatilities"):
            if len(getattr(self, axis)) == 0:
                raise GridConfigurationError(f"grid axis {axis!r} is empty")
        if self.dividend_every_months <= 0:
            raise GridConfigurationError(
                f"dividend_every_months must be positive, got {self.dividend_every_months}"
            )
        if any(n <= 0 for n in self.lengths):
            raise GridConfigurationError(f"lengths must be positive, got {self.lengths}")

    def tolerances(self) -> GreekSet:
        return default_tolerances(self.tolerance)

    @property
    def n_setups(self) -> int:
        return len(self.option_types) * len(self.strikes) * len(self.lengths)

    @property
    def n_points(self) -> int:
        return self.n_setups * (len(self.underlyings) * len(self.dividend_yields)
                                * len(self.risk_free_rates) * len(self.volatilities))


# ---------------------------------------------------------------------------
# Grid points
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class OptionSetup:
    kind: str
    strike: float
    length: int
    payoff: Payoff
    exercise: Exercise
    dividends: DividendSchedule


@dataclass(frozen=True)
class MarketPoint:
    spot: float
    dividend_yield: float
    risk_free_rate: float
    volatility: float

    def apply(self, market: MarketState) -> None:
        market.spot = self.spot
        market.dividend_yield = self.dividend_yield
        market.risk_free_rate = self.risk_free_rate
        market.volatility = self.volatility


@dataclass(frozen=True)
class GridPoint:
    setup: OptionSetup
    market: MarketPoint


def build_dividend_schedule(
    valuation_date: dt.date,
    maturity: dt.date,
    amount: float = 5.0,
    first_months: int = 3,
    every_months: int = 6,
) -> DividendSchedule:
    """Fixed ``amount`` every ``every_months`` from ``valuation + first_months``,
    strictly before ``maturity``.

    Each date is stepped from the previous one, so end-of-month clamping
    carries forward.
    """
    if every_months <= 0:
        raise GridConfigurationError(f"every_months must be positive, got {every_months}")
    dates = []
    d = add_period(valuation_date, first_months, "months")
    while d < maturity:
        dates.append(d)
        d = add_period(d, every_months, "months")
    schedule = DividendSchedule(tuple(dates), (amount,) * len(dates))
    schedule.validate(valuation_date, maturity)
    return schedule


def iter_option_setups(config: GridConfig, valuation_date: dt.date) -> Iterator[OptionSetup]:
    for kind, strike, length in itertools.product(
        config.option_types, config.strikes, config.lengths
    ):
        maturity = add_period(valuation_date, length * DAY_COUNTER_BASE, "days")
        yield OptionSetup(
            kind=kind,
            strike=float(strike),
            length=length,
            payoff=Payoff(kind, float(strike)),
            exercise=Exercise(maturity),
            dividends=build_dividend_schedule(
                valuation_date, maturity, config.dividend_amount,
                config.first_dividend_months, config.dividend_every_months,
            ),
        )


def iter_market_points(config: GridConfig) -> Iterator[MarketPoint]:
    for u, q, r, v in itertools.product(
        config.underlyings, config.dividend_yields,
        config.risk_free_rates, config.volatilities,
    ):
        yield MarketPoint(float(u), float(q), float(r), float(v))


def iter_grid_points(config: GridConfig, valuation_date: dt.date) -> Iterator[GridPoint]:
    for setup in iter_option_setups(config, valuation_date):
        for mp in iter_market_points(config):
            yield GridPoint(setup, mp)


# ---------------------------------------------------------------------------
# Validation of a single point
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class PointResult:
    kind: str
    strike: float
    maturity: dt.date
    market: MarketPoint
    value: float
    skipped: bool
    outcomes: tuple = ()


def validate_point(
    option: DividendOption,
    engine: AnalyticDividendEuropeanEngine,
    validator: FiniteDifferenceValidator,
    tolerances: GreekSet,
    degenerate_threshold: float = 1e-5,
) -> PointResult:
    """Price once at the current market, bump-and-reprice, compare.

    ``option.market`` is left exactly as it was found.
    """
    m = option.market
    point = MarketPoint(m.spot, m.dividend_yield, m.risk_free_rate, m.volatility)
    res = option.results(engine)

    if is_degenerate(res.value, m.spot, degenerate_threshold):
        logger.debug("skipping %s K=%s %s: value %.3e below threshold",
                     option.payoff.kind, option.payoff.strike, point, res.value)
        return PointResult(option.payoff.kind, option.payoff.strike,
                           option.exercise.maturity, point, res.value, skipped=True)

    expected = validator.estimate(option)
    outcomes = compare_greeks(option, res.greeks, expected, tolerances)
    for o in outcomes:
        if not o.ok:
            logger.warning("%s %s K=%s: %s expected %.10f calculated %.10f "
                           "error %.3e > %.1e",
                           o.exercise_type, o.option_type, o.strike, o.greek,
                           o.expected, o.calculated, o.error, o.tolerance)
    return PointResult(option.payoff.kind, option.payoff.strike,
                       option.exercise.maturity, point, res.value,
                       skipped=False, outcomes=tuple(outcomes))


def _run_setup(
    setup: OptionSetup,
    config: GridConfig,
    valuation_date: dt.date,
    engine: AnalyticDividendEuropeanEngine,
) -> list[PointResult]:
    market = MarketState(valuation_date=valuation_date)
    option = DividendOption(setup.payoff, setup.exercise, setup.dividends, market)
    validator = FiniteDifferenceValidator(engine, config.bump_policy, engine.day_counter)
    tolerances = config.tolerances()

    results = []
    for mp in iter_market_points(config):
        mp.apply(market)
        results.append(validate_point(option, engine, validator, tolerances,
                                      config.degenerate_threshold))
    return results


# ---------------------------------------------------------------------------
# Sweep
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class SweepReport:
    valuation_date: dt.date
    points: tuple = ()

    @property
    def n_points(self) -> int:
        return len(self.points)

    @property
    def n_skipped(self) -> int:
        return sum(1 for p in self.points if p.skipped)

    @property
    def outcomes(self) -> list[Outcome]:
        return [o for p in self.points for o in p.outcomes]

    @property
    def failures(self) -> list[ToleranceViolation]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def n_passed(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def all_passed(self) -> bool:
        return not self.failures

    def by_greek(self) -> dict[str, int]:
        """Failure count per Greek (zero entries included)."""
        counts = Counter(f.greek for f in self.failures)
        return {g: counts.get(g, 0) for g in GREEKS}


def run_sweep(
    config: Optional[GridConfig] = None,
    valuation_date: Optional[dt.date] = None,
    *,
    engine: Optional[AnalyticDividendEuropeanEngine] = None,
    workers: int = 1,
) -> SweepReport:
    """Validate analytic Greeks at every grid point.

    Parameters
    ----------
    config : GridConfig, optional
        Default: the standard grid.
    valuation_date : date, optional
        Default: today.
    engine : AnalyticDividendEuropeanEngine, optional
    workers : int
        Processes to spread option setups over; 1 runs in-process.

    Returns
    -------
    SweepReport
        Point results in grid order regardless of ``workers``.
    """
    config = config or GridConfig()
    valuation_date = valuation_date or today()
    engine = engine or AnalyticDividendEuropeanEngine()

    logger.info("sweeping %d grid points (%d option setups) valued %s, workers=%d",
                config.n_points, config.n_setups, valuation_date, workers)

    points: list[PointResult] = []
    if workers <= 1:
        for setup in iter_option_setups(config, valuation_date):
            points.extend(_run_setup(setup, config, valuation_date, engine))
    else:
        setups = list(iter_option_setups(config, valuation_date))
        with ProcessPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(_run_setup, s, config, valuation_date, engine)
                       for s in setups]
            for fut in futures:
                points.extend(fut.result())

    report = SweepReport(valuation_date, tuple(points))
    logger.info("sweep done: %d points, %d skipped, %d greeks passed, %d failed",
                report.n_points, report.n_skipped, report.n_passed, len(report.failures))
    return report
