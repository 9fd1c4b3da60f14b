"""
===============================================================================
  Structure Analyzer — compares D-1 against D-2
===============================================================================
  Every check runs, in order, and may:
    - move the signed confluence score
    - raise a scenario flag
    - append one line to the reasoning trail

  Flags and score deltas compound: an outside bar is also a breakout on both
  sides, an uptrend is also a high breakout, and a fake breakout keeps the
  breakout's own ±1.
===============================================================================
"""

from __future__ import annotations

import config as cfg
from forecaster.candles import close_position
from forecaster.models import AnalysisState, CandleProfile, KeyLevels
from utils.logger import get_logger

log = get_logger("structure")


# ═════════════════════════════════════════════════════════════════════════════
#  CANDLE PATTERNS
# ═════════════════════════════════════════════════════════════════════════════

def analyze_candle_patterns(state: AnalysisState, dbpd: CandleProfile, pd: CandleProfile):
    """Momentum, reversal and rejection checks on the two candles."""
    flags = state.flags

    state.add(0, f"D-2 candle: {dbpd.shape} (body {dbpd.body_percent:.1f}% of range)")
    state.add(0, f"D-1 candle: {pd.shape} (body {pd.body_percent:.1f}% of range)")

    if dbpd.is_bullish and pd.is_bullish:
        state.add(+2, "Two consecutive BULLISH candles — upward momentum")

    if dbpd.is_bearish and pd.is_bearish:
        state.add(-2, "Two consecutive BEARISH candles — downward momentum")

    if dbpd.is_bearish and pd.is_bullish:
        flags.reversal_up = True
        state.add(+1, "Reversal: bearish D-2 followed by bullish D-1 — potential turn UP")

    if dbpd.is_bullish and pd.is_bearish:
        flags.reversal_down = True
        state.add(-1, "Reversal: bullish D-2 followed by bearish D-1 — potential turn DOWN")

    if pd.has_upper_wick_rejection:
        flags.upper_rejection = True
        state.add(-1, "D-1 upper wick rejection — sellers active at the highs")

    if pd.has_lower_wick_rejection:
        flags.lower_rejection = True
        state.add(+1, "D-1 lower wick rejection — buyers active at the lows")

    if pd.is_doji:
        flags.indecision = True
        state.add(0, "D-1 doji — indecision, expect a breakout")

    if pd.strength_score >= cfg.MOMENTUM_STRENGTH:
        state.add(0, "Strong bullish momentum — expect continuation or a pullback to buy")
    elif pd.strength_score <= -cfg.MOMENTUM_STRENGTH:
        state.add(0, "Strong bearish momentum — expect continuation or a pullback to sell")


# ═════════════════════════════════════════════════════════════════════════════
#  PRICE STRUCTURE
# ═════════════════════════════════════════════════════════════════════════════

def analyze_price_structure(state: AnalysisState, dbpd: CandleProfile, pd: CandleProfile):
    """Breakouts, inside/outside bars and HH/HL – LH/LL structure."""
    flags = state.flags
    d2 = dbpd.bar
    d1 = pd.bar

    if d1.high > d2.high:
        flags.breakout_high = True
        state.add(+1, f"D-1 high ({d1.high}) broke D-2 high ({d2.high})")
        if d1.close > d2.high:
            state.add(+1, "D-1 closed above D-2 high — bullish structure confirmed")
        else:
            flags.fake_breakout_high = True
            state.add(0, "D-1 swept D-2 high but closed back inside — potential fake breakout")

    if d1.low < d2.low:
        flags.breakout_low = True
        state.add(-1, f"D-1 low ({d1.low}) broke D-2 low ({d2.low})")
        if d1.close < d2.low:
            state.add(-1, "D-1 closed below D-2 low — bearish structure confirmed")
        else:
            flags.fake_breakout_low = True
            state.add(0, "D-1 swept D-2 low but closed back inside — potential fake breakout")

    if d1.high <= d2.high and d1.low >= d2.low:
        flags.inside_bar = True
        state.add(0, "Inside bar — consolidation, expect an expansion move")

    if d1.high > d2.high and d1.low < d2.low:
        flags.outside_bar = True
        state.add(0, "Outside bar — high volatility range")
        if d1.close > d1.open:
            state.add(+2, "Outside bar closed BULLISH — buyers won the session")
        else:
            state.add(-2, "Outside bar closed BEARISH — sellers won the session")

    if d1.high > d2.high and d1.low > d2.low:
        flags.uptrend = True
        state.add(+2, "Higher high and higher low — uptrend structure")

    if d1.high < d2.high and d1.low < d2.low:
        flags.downtrend = True
        state.add(-2, "Lower high and lower low — downtrend structure")


# ═════════════════════════════════════════════════════════════════════════════
#  KEY LEVELS & CLOSE POSITION
# ═════════════════════════════════════════════════════════════════════════════

def analyze_close_position(state: AnalysisState, dbpd: CandleProfile, pd: CandleProfile):
    state.key_levels = KeyLevels.from_bars(dbpd.bar, pd.bar)

    pos = close_position(pd.bar)
    if pos > cfg.CLOSE_POSITION_UPPER_PCT:
        state.add(+1, "D-1 closed in the upper quarter of its range — bullish close")
    elif pos < cfg.CLOSE_POSITION_LOWER_PCT:
        state.add(-1, "D-1 closed in the lower quarter of its range — bearish close")
    else:
        state.add(0, "D-1 closed mid-range — neutral close")


def analyze_structure(dbpd: CandleProfile, pd: CandleProfile) -> AnalysisState:
    """Run every check and return the filled accumulator."""
    state = AnalysisState()
    analyze_candle_patterns(state, dbpd, pd)
    analyze_price_structure(state, dbpd, pd)
    analyze_close_position(state, dbpd, pd)

    log.debug(
        f"confluence={state.confluence:+d} flags={','.join(state.flags.active()) or '-'}"
    )
    return state
