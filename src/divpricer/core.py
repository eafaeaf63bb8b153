from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field, astuple
from typing import TYPE_CHECKING, Dict, Iterator

from .exceptions import InvalidInputError, GridConfigurationError

if TYPE_CHECKING:
    from .engine import AnalyticDividendEuropeanEngine, PricingResult


CALL = "call"
PUT  = "put"
OPTION_TYPES = (CALL, PUT)

GREEKS = ("delta", "gamma", "theta", "rho", "vega")

# greek name -> value; analytic results, finite-difference estimates and
# tolerances all share this shape
GreekSet = Dict[str, float]


# ---------------------------------------------------------------------------
# Contract terms — immutable once built
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Payoff:
    """Plain vanilla payoff ``max(S - K, 0)`` / ``max(K - S, 0)``.

    Parameters
    ----------
    kind : str
        ``"call"`` or ``"put"``.
    strike : float
        Strike price.  Positivity is an engine precondition, checked at
        pricing time.
    """
    kind: str
    strike: float

    name = "plain vanilla"

    def __post_init__(self):
        if self.kind not in OPTION_TYPES:
            raise InvalidInputError(
                f"kind must be 'call' or 'put', got {self.kind!r}"
            )

    def value(self, S: float) -> float:
        if self.kind == CALL:
            return max(S - self.strike, 0.0)
        return max(self.strike - S, 0.0)


@dataclass(frozen=True)
class Exercise:
    """European exercise: a single maturity date."""
    maturity: dt.date

    exercise_type = "European"

    @property
    def last_date(self) -> dt.date:
        return self.maturity


@dataclass(frozen=True)
class DividendSchedule:
    """Deterministic cash dividends, ordered by payment date.

    Parameters
    ----------
    dates : tuple of date
        Strictly increasing payment dates.
    amounts : tuple of float
        Positive cash amounts (not yields), one per date.
    """
    dates: tuple = ()
    amounts: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "dates", tuple(self.dates))
        object.__setattr__(self, "amounts", tuple(float(a) for a in self.amounts))
        if len(self.dates) != len(self.amounts):
            raise InvalidInputError(
                f"got {len(self.dates)} dividend dates but {len(self.amounts)} amounts"
            )
        for prev, nxt in zip(self.dates, self.dates[1:]):
            if nxt <= prev:
                raise InvalidInputError(
                    f"dividend dates must be strictly increasing: {prev} then {nxt}"
                )
        for a in self.amounts:
            if a <= 0:
                raise InvalidInputError(f"dividend amounts must be positive, got {a}")

    @classmethod
    def empty(cls) -> DividendSchedule:
        return cls((), ())

    def __len__(self) -> int:
        return len(self.dates)

    def __iter__(self) -> Iterator[tuple[dt.date, float]]:
        return iter(zip(self.dates, self.amounts))

    def validate(self, valuation_date: dt.date, maturity: dt.date) -> None:
        """Fail fast unless every payment falls strictly inside (valuation, maturity)."""
        for d in self.dates:
            if not valuation_date < d < maturity:
                raise GridConfigurationError(
                    f"dividend on {d} does not fall strictly between "
                    f"{valuation_date} and {maturity}"
                )


# ---------------------------------------------------------------------------
# Market snapshot — the only mutable state in the package
# ---------------------------------------------------------------------------
@dataclass
class MarketState:
    """What is *moving*: spot, flat curves and the valuation date.

    Fields are overwritten in place by the sweep and by finite-difference
    bumps; every bump must put back the exact object it replaced (see
    :func:`divpricer.risk.bumped`).

    Parameters
    ----------
    spot : float
        Underlying price.
    dividend_yield : float
        Flat continuous dividend yield.
    risk_free_rate : float
        Flat continuously-compounded risk-free rate.
    volatility : float
        Flat Black volatility.
    valuation_date : date
        Date the option is valued on; theta moves it.
    """
    spot: float = 0.0
    dividend_yield: float = 0.0
    risk_free_rate: float = 0.0
    volatility: float = 0.0
    valuation_date: dt.date = field(default_factory=dt.date.today)

    def snapshot(self) -> tuple:
        """Frozen copy of every field, for exact before/after comparisons."""
        return astuple(self)


# ---------------------------------------------------------------------------
# Option instance — contract terms bound to a shared market
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class DividendOption:
    """European option paying discrete dividends before expiry.

    Owns no mutable state: repricing after a change to ``market`` picks the
    change up automatically.
    """
    payoff: Payoff
    exercise: Exercise
    dividends: DividendSchedule
    market: MarketState

    def __post_init__(self):
        for d in self.dividends.dates:
            if d >= self.exercise.maturity:
                raise InvalidInputError(
                    f"dividend on {d} is not before maturity {self.exercise.maturity}"
                )

    def results(
        self, engine: AnalyticDividendEuropeanEngine | None = None
    ) -> PricingResult:
        if engine is None:
            from .engine import AnalyticDividendEuropeanEngine
            engine = AnalyticDividendEuropeanEngine()
        return engine.calculate(self.market, self.dividends, self.payoff, self.exercise)

    def npv(self, engine: AnalyticDividendEuropeanEngine | None = None) -> float:
        return self.results(engine).value
