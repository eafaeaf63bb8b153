#!/usr/bin/env python3
"""Production script: run the dividend Greek-validation sweep and export failures.

Usage
-----
    python scripts/greek_sweep.py --output failures.csv
    python scripts/greek_sweep.py --output failures.json --date 2026-10-18 --workers 4

Output
------
    CSV or JSON, one row per tolerance violation, with columns:
    option_type, payoff_kind, exercise_type, strike, spot, dividend_yield,
    risk_free_rate, valuation_date, maturity, volatility, greek, expected,
    calculated, error, tolerance
"""

from __future__ import annotations
import argparse
import csv
import datetime as dt
import json
import logging
import sys
from dataclasses import fields
from pathlib import Path

# Allow running from repo root: python scripts/greek_sweep.py
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from divpricer.grid import GridConfig, run_sweep
from divpricer.report import failure_rows, format_summary
from divpricer.validation import ToleranceViolation


def main():
    parser = argparse.ArgumentParser(
        description="Check analytic dividend-option Greeks against finite differences."
    )
    parser.add_argument("--output", required=True, help="Output path (.csv or .json)")
    parser.add_argument("--date", default=None, help="Valuation date YYYY-MM-DD (default today)")
    parser.add_argument("--workers", type=int, default=1, help="Worker processes")
    parser.add_argument("--tolerance", type=float, default=1e-5)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    valuation_date = dt.date.fromisoformat(args.date) if args.date else None
    config = GridConfig(tolerance=args.tolerance)
    print(f"Sweeping {config.n_points} grid points...")

    report = run_sweep(config, valuation_date, workers=args.workers)
    rows = failure_rows(report)

    # Write output
    output_path = Path(args.output)
    if output_path.suffix == ".json":
        with open(output_path, "w") as f:
            json.dump(rows, f, indent=2)
    else:
        fieldnames = [f.name for f in fields(ToleranceViolation)]
        with open(output_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(rows)

    print(f"{len(rows)} failures written to {args.output}")
    print(format_summary(report))
    sys.exit(0 if report.all_passed else 1)


if __name__ == "__main__":
    main()
