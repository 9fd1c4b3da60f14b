"""
===============================================================================
  Input validation & bar adapters
===============================================================================
  The engine only accepts well-formed bars:
      - every field a finite number
      - high > low
      - open and close inside [low, high]
  Anything else raises InvalidInputError naming the bar and field, before any
  analysis runs.
===============================================================================
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from forecaster.errors import InvalidInputError
from forecaster.models import PriceBar

FIELDS = ("open", "high", "low", "close")


def validate_bar(bar: PriceBar, label: str = "bar") -> PriceBar:
    """Check one bar; returns it unchanged when valid."""
    for name in FIELDS:
        value = getattr(bar, name)
        if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
            raise InvalidInputError(
                f"{label}: {name} must be a number, got {value!r}",
                bar=label, field=name, value=value,
            )
        try:
            number = float(value)
        except OverflowError:
            raise InvalidInputError(
                f"{label}: {name} is too large to be a price, got {value!r}",
                bar=label, field=name, value=value,
            ) from None
        if not np.isfinite(number):
            raise InvalidInputError(
                f"{label}: {name} must be a finite number, got {value!r}",
                bar=label, field=name, value=value,
            )

    if bar.high <= bar.low:
        raise InvalidInputError(
            f"{label}: high must be greater than low (high={bar.high}, low={bar.low})",
            bar=label, field="high", value=bar.high,
        )

    for name in ("open", "close"):
        value = getattr(bar, name)
        if value < bar.low or value > bar.high:
            raise InvalidInputError(
                f"{label}: {name} must be within the high-low range "
                f"({name}={value}, range={bar.low} - {bar.high})",
                bar=label, field=name, value=value,
            )
    return bar


def validate_bars(d2_bar: PriceBar, d1_bar: PriceBar):
    validate_bar(d2_bar, "D-2")
    validate_bar(d1_bar, "D-1")


# ═════════════════════════════════════════════════════════════════════════════
#  ADAPTERS
# ═════════════════════════════════════════════════════════════════════════════

def bar_from_row(row, label: str = "bar") -> PriceBar:
    """
    Build a PriceBar from a mapping or a pandas row with open/high/low/close.
    Values are converted with float(); missing or unparseable fields raise
    InvalidInputError.
    """
    values = {}
    for name in FIELDS:
        try:
            raw = row[name]
        except (KeyError, IndexError):
            raise InvalidInputError(
                f"{label}: missing field '{name}'", bar=label, field=name,
            ) from None
        try:
            values[name] = float(raw)
        except (TypeError, ValueError):
            raise InvalidInputError(
                f"{label}: {name} must be a number, got {raw!r}",
                bar=label, field=name, value=raw,
            ) from None
    return PriceBar(**values)


def bars_from_frame(df: pd.DataFrame) -> tuple[PriceBar, PriceBar]:
    """Last two rows of an OHLC DataFrame as (D-2, D-1)."""
    if df is None or len(df) < 2:
        raise InvalidInputError("Need at least two OHLC rows (D-2 and D-1)")

    df = df.rename(columns=lambda c: str(c).strip().lower())
    missing = [c for c in FIELDS if c not in df.columns]
    if missing:
        raise InvalidInputError(
            f"OHLC frame is missing columns: {', '.join(missing)}", field=missing[0],
        )

    return bar_from_row(df.iloc[-2], "D-2"), bar_from_row(df.iloc[-1], "D-1")
