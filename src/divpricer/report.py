# report.py
# Human-readable rendering of sweep results.  The pricing and validation
# modules only produce values; all text is built here.

from __future__ import annotations

from dataclasses import asdict

from .grid import SweepReport
from .validation import ToleranceViolation

__all__ = ["format_failure", "format_summary", "failure_rows"]


def _rate(x: float) -> str:
    return f"{x * 100:.6f} %"


def format_failure(v: ToleranceViolation) -> str:
    """Multi-line description of one tolerance violation."""
    return (
        f"{v.exercise_type} {v.option_type} option with {v.payoff_kind} payoff:\n"
        f"    spot value:       {v.spot:.6f}\n"
        f"    strike:           {v.strike:.6f}\n"
        f"    dividend yield:   {_rate(v.dividend_yield)}\n"
        f"    risk-free rate:   {_rate(v.risk_free_rate)}\n"
        f"    reference date:   {v.valuation_date.isoformat()}\n"
        f"    maturity:         {v.maturity.isoformat()}\n"
        f"    volatility:       {_rate(v.volatility)}\n"
        f"\n"
        f"    expected   {v.greek}: {v.expected:.10f}\n"
        f"    calculated {v.greek}: {v.calculated:.10f}\n"
        f"    error:            {v.error:.3e}\n"
        f"    tolerance:        {v.tolerance:.3e}"
    )


def format_summary(report: SweepReport) -> str:
    per_greek = "  ".join(f"{g}={n}" for g, n in report.by_greek().items())
    status = "OK" if report.all_passed else "FAILED"
    return (
        f"{status}: {report.n_points} points valued {report.valuation_date.isoformat()}  |  "
        f"skipped: {report.n_skipped}  |  passed: {report.n_passed}  |  "
        f"failed: {len(report.failures)}\n"
        f"  failures by greek: {per_greek}"
    )


def failure_rows(report: SweepReport) -> list[dict]:
    """Flat dicts, one per violation, with dates as ISO strings (CSV/JSON ready)."""
    rows = []
    for v in report.failures:
        row = asdict(v)
        row["valuation_date"] = v.valuation_date.isoformat()
        row["maturity"] = v.maturity.isoformat()
        rows.append(row)
    return rows
