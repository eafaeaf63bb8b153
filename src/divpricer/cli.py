import argparse
import datetime as dt
import logging
import sys

from .core import CALL, PUT, GREEKS, Payoff, Exercise, DividendSchedule, MarketState, DividendOption
from .dates import today
from .exceptions import DivPricerError
from .grid import GridConfig, run_sweep
from .report import format_failure, format_summary


def _kind(s: str):
    s = s.lower()
    if s in {"call", "c"}:
        return CALL
    if s in {"put", "p"}:
        return PUT
    raise argparse.ArgumentTypeError("kind must be 'call' or 'put'")


def _date(s: str) -> dt.date:
    try:
        return dt.date.fromisoformat(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {s!r}")


def _dividend(s: str):
    """``YYYY-MM-DD:AMOUNT``"""
    try:
        d, amount = s.split(":")
        return dt.date.fromisoformat(d), float(amount)
    except ValueError:
        raise argparse.ArgumentTypeError(f"dividend must be YYYY-MM-DD:AMOUNT, got {s!r}")


def cmd_price(args):
    divs = sorted(args.dividend or [])
    schedule = DividendSchedule(tuple(d for d, _ in divs), tuple(a for _, a in divs))
    market = MarketState(args.spot, args.q, args.r, args.sigma, args.date or today())
    option = DividendOption(Payoff(args.kind, args.strike), Exercise(args.maturity),
                            schedule, market)
    res = option.results()
    print(f"value        {res.value:.10f}")
    print(f"escrowed S   {res.escrowed_spot:.10f}")
    for g in GREEKS:
        print(f"{g:<12s} {res.greeks[g]:.10f}")
    return 0


def cmd_sweep(args):
    config = GridConfig(tolerance=args.tolerance)
    report = run_sweep(config, args.date, workers=args.workers)
    for v in report.failures:
        print(format_failure(v))
        print()
    print(format_summary(report))
    return 0 if report.all_passed else 1


def main(argv=None):
    p = argparse.ArgumentParser(prog="divpricer",
                                description="European options with discrete dividends")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    # Price
    p_px = sub.add_parser("price", help="value and Greeks of one option")
    p_px.add_argument("--spot", type=float, required=True)
    p_px.add_argument("--strike", type=float, required=True)
    p_px.add_argument("--maturity", type=_date, required=True, help="YYYY-MM-DD")
    p_px.add_argument("--r", type=float, required=True, help="cont. risk-free")
    p_px.add_argument("--sigma", type=float, required=True)
    p_px.add_argument("--q", type=float, default=0.0, help="cont. dividend yield")
    p_px.add_argument("--kind", type=_kind, default=CALL, help="call|put")
    p_px.add_argument("--date", type=_date, default=None, help="valuation date (default today)")
    p_px.add_argument("--dividend", type=_dividend, action="append", default=None,
                      help="YYYY-MM-DD:AMOUNT, repeatable")
    p_px.set_defaults(func=cmd_price)

    # Greek validation sweep
    p_sw = sub.add_parser("sweep", help="check analytic Greeks against finite differences")
    p_sw.add_argument("--date", type=_date, default=None, help="valuation date (default today)")
    p_sw.add_argument("--workers", type=int, default=1)
    p_sw.add_argument("--tolerance", type=float, default=1e-5)
    p_sw.set_defaults(func=cmd_sweep)

    args = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except DivPricerError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
