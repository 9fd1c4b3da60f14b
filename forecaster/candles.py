"""
===============================================================================
  Candle Classifier — one OHLC bar → shape metrics
===============================================================================
  Body size as a % of the full range decides the shape:
      < 10%  → DOJI (overrides direction)
      > 70%  → STRONG BULLISH / STRONG BEARISH   (±3)
      > 50%  → BULLISH / BEARISH                 (±2)
      else   → WEAK BULLISH / WEAK BEARISH       (±1)

  A wick longer than twice the body is a rejection on that side.
===============================================================================
"""

from __future__ import annotations

import config as cfg
from forecaster.errors import DegenerateRangeError
from forecaster.models import CandleProfile, PriceBar


# ═════════════════════════════════════════════════════════════════════════════
#  HELPERS
# ═════════════════════════════════════════════════════════════════════════════

def _body(bar: PriceBar) -> float:
    return abs(bar.close - bar.open)


def _upper_wick(bar: PriceBar) -> float:
    return bar.high - max(bar.close, bar.open)


def _lower_wick(bar: PriceBar) -> float:
    return min(bar.close, bar.open) - bar.low


def _bucket(body_percent: float, bullish: bool) -> tuple[str, int]:
    side = "BULLISH" if bullish else "BEARISH"
    sign = 1 if bullish else -1
    if body_percent > cfg.STRONG_BODY_PCT:
        return f"STRONG {side}", 3 * sign
    if body_percent > cfg.BODY_PCT:
        return side, 2 * sign
    return f"WEAK {side}", sign


# ═════════════════════════════════════════════════════════════════════════════
#  CLASSIFIER
# ═════════════════════════════════════════════════════════════════════════════

def classify_candle(bar: PriceBar) -> CandleProfile:
    """
    Classify a single bar.

    The caller is expected to have validated the bar; a zero range is a
    contract violation and raises DegenerateRangeError.  When the body is
    zero any positive wick counts as a rejection.
    """
    rng = bar.high - bar.low
    if rng <= 0:
        raise DegenerateRangeError(
            f"Bar range must be positive (high={bar.high}, low={bar.low})"
        )

    body = _body(bar)
    upper = _upper_wick(bar)
    lower = _lower_wick(bar)
    body_percent = body / rng * 100

    is_doji = body_percent < cfg.DOJI_BODY_PCT
    is_bullish = not is_doji and bar.close > bar.open
    is_bearish = not is_doji and bar.close < bar.open

    if is_doji:
        shape, strength = "DOJI", 0
    elif is_bullish or is_bearish:
        shape, strength = _bucket(body_percent, is_bullish)
    else:
        # close == open without a doji body; unreachable for a valid bar
        shape, strength = "NEUTRAL", 0

    return CandleProfile(
        bar=bar,
        shape=shape,
        body=body,
        body_percent=round(body_percent, 1),
        upper_wick=upper,
        lower_wick=lower,
        strength_score=strength,
        is_bullish=is_bullish,
        is_bearish=is_bearish,
        is_doji=is_doji,
        has_upper_wick_rejection=upper > body * cfg.WICK_REJECTION_MULT,
        has_lower_wick_rejection=lower > body * cfg.WICK_REJECTION_MULT,
    )


def close_position(bar: PriceBar) -> float:
    """Where the close sits inside the bar's range, 0 (low) to 100 (high)."""
    rng = bar.high - bar.low
    if rng <= 0:
        raise DegenerateRangeError(
            f"Bar range must be positive (high={bar.high}, low={bar.low})"
        )
    return (bar.close - bar.low) / rng * 100
