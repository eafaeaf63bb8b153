# divpricer — European options with discrete cash dividends
# Public API

# Data model
from .core import (
    CALL, PUT, OPTION_TYPES, GREEKS,
    Payoff, Exercise, DividendSchedule, MarketState, DividendOption,
)
from .exceptions import DivPricerError, InvalidInputError, GridConfigurationError
from .dates import DAY_COUNTER_BASE, year_fraction, add_period

# Pricing
from .black_scholes import escrowed_black_scholes
from .engine import (
    AnalyticDividendEuropeanEngine, PricingResult,
    price_and_greeks, implied_volatility,
)

# Finite differences & comparison
from .risk import BumpPolicy, FiniteDifferenceValidator, bumped, is_degenerate
from .validation import (
    DEFAULT_TOLERANCE, relative_error, compare_greeks,
    Ok, ToleranceViolation, put_call_parity_gap,
)

# Sweep
from .grid import (
    GridConfig, SweepReport, build_dividend_schedule,
    iter_grid_points, validate_point, run_sweep,
)

__all__ = [
    # Data model
    "CALL", "PUT", "OPTION_TYPES", "GREEKS",
    "Payoff", "Exercise", "DividendSchedule", "MarketState", "DividendOption",
    "DivPricerError", "InvalidInputError", "GridConfigurationError",
    "DAY_COUNTER_BASE", "year_fraction", "add_period",
    # Pricing
    "escrowed_black_scholes",
    "AnalyticDividendEuropeanEngine", "PricingResult",
    "price_and_greeks", "implied_volatility",
    # Finite differences & comparison
    "BumpPolicy", "FiniteDifferenceValidator", "bumped", "is_degenerate",
    "DEFAULT_TOLERANCE", "relative_error", "compare_greeks",
    "Ok", "ToleranceViolation", "put_call_parity_gap",
    # Sweep
    "GridConfig", "SweepReport", "build_dividend_schedule",
    "iter_grid_points", "validate_point", "run_sweep",
]

__version__ = "0.1.0"
