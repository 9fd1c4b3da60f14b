"""
===============================================================================
  DAILY BIAS FORECASTER — Command Line
===============================================================================
  Forecast today's bias from the previous two daily candles.

  Usage:
    python main.py --d2 1.10 1.12 1.09 1.115 --d1 1.115 1.125 1.095 1.097
    python main.py --csv eurusd_daily.csv --symbol EURUSD
    python main.py --csv eurusd_daily.csv --json
===============================================================================
"""

from __future__ import annotations

import argparse
import json
import sys

import pandas as pd

import config as cfg
from forecaster.bias import classify_bias, classify_bias_from_frame
from forecaster.errors import ForecastError
from forecaster.recommendation import format_report
from forecaster.validation import bar_from_row
from utils.logger import setup_logging, get_logger

log = get_logger("main")


def _bar_from_args(values: list[str], label: str):
    return bar_from_row(dict(zip(("open", "high", "low", "close"), values)), label)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Daily Bias Forecaster")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--d2", nargs=4, metavar=("OPEN", "HIGH", "LOW", "CLOSE"),
        help="OHLC of the day before the previous day",
    )
    source.add_argument(
        "--csv", metavar="PATH",
        help="CSV with open/high/low/close columns; the last two rows are used",
    )
    parser.add_argument(
        "--d1", nargs=4, metavar=("OPEN", "HIGH", "LOW", "CLOSE"),
        help="OHLC of the previous day (required with --d2)",
    )
    parser.add_argument("--symbol", default=cfg.DEFAULT_SYMBOL, help="Symbol label")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    return parser


def _read_csv(path: str) -> pd.DataFrame | None:
    try:
        return pd.read_csv(path)
    except (OSError, pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        log.error(f"Cannot read {path}: {e}")
        return None


def run(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.d2 is not None and args.d1 is None:
        parser.error("--d1 is required with --d2")
    if args.csv and args.d1 is not None:
        parser.error("--d1 is only valid with --d2")

    try:
        if args.csv:
            df = _read_csv(args.csv)
            if df is None:
                return 1
            result = classify_bias_from_frame(df, args.symbol)
        else:
            result = classify_bias(
                _bar_from_args(args.d2, "D-2"),
                _bar_from_args(args.d1, "D-1"),
                args.symbol,
            )
    except ForecastError as e:
        log.error(f"Invalid input: {e}")
        return 2

    log.info(f"{result.symbol}: {result.bias} ({result.strength}%)")

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_report(result))
    return 0


# ═════════════════════════════════════════════════════════════════════════════
#  ENTRY POINT
# ═════════════════════════════════════════════════════════════════════════════

def main():
    setup_logging()
    sys.exit(run())


if __name__ == "__main__":
    main()
