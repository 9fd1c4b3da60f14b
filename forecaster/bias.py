"""
===============================================================================
  Bias Resolver — scenario flags + confluence → one forecast
===============================================================================
  A first-match priority table.  Rules are tried top to bottom and the first
  guard that passes produces the verdict; later rules are never consulted.

      1  fake breakout high            → BEARISH REVERSAL
      2  fake breakout low             → BULLISH REVERSAL
      3  uptrend + bullish D-1         → BULLISH CONTINUATION
      4  downtrend + bearish D-1       → BEARISH CONTINUATION
      5  inside bar                    → BREAKOUT (both setups)
      6  confluence >= +3              → BULLISH
      7  confluence <= -3              → BEARISH
      8  anything else                 → NEUTRAL
===============================================================================
"""

from __future__ import annotations

from typing import Callable

import config as cfg
from forecaster.candles import classify_candle
from forecaster.models import (
    AnalysisState,
    CandleAnalysis,
    CandleProfile,
    ForecastResult,
    PriceBar,
    Target,
    TradeSetup,
    Verdict,
)
from forecaster.recommendation import format_recommendation
from forecaster.structure import analyze_structure
from forecaster.validation import bars_from_frame, validate_bars
from utils.logger import get_logger

log = get_logger("bias")

Guard = Callable[[AnalysisState, CandleProfile, CandleProfile], bool]
Producer = Callable[[AnalysisState, CandleProfile, CandleProfile], Verdict]


# ═════════════════════════════════════════════════════════════════════════════
#  HELPERS
# ═════════════════════════════════════════════════════════════════════════════

def _px(value: float) -> float:
    return round(float(value), cfg.PRICE_DECIMALS)


def _zone(low: float, high: float) -> str:
    return f"{low:.{cfg.PRICE_DECIMALS}f} - {high:.{cfg.PRICE_DECIMALS}f}"


def _strength(value: float) -> int:
    return int(max(0, min(100, value)))


def _scaled(base: int, step: int, points: int) -> int:
    return _strength(min(base + step * points, cfg.MAX_STRENGTH))


def _setup(sweep: float, zone: str, stop: float, *targets: tuple[float, str]) -> TradeSetup:
    return TradeSetup(
        sweep_level=_px(sweep),
        entry_zone=zone,
        invalidation=_px(stop),
        targets=tuple(Target(level=_px(lvl), label=label) for lvl, label in targets),
    )


# ═════════════════════════════════════════════════════════════════════════════
#  RULE PRODUCERS
# ═════════════════════════════════════════════════════════════════════════════

def _bearish_reversal(state, dbpd, pd) -> Verdict:
    d1, d2 = pd.bar, dbpd.bar
    return Verdict(
        rule="fake_breakout_high",
        bias="BEARISH REVERSAL",
        direction="LOOK FOR SELL",
        strength=_strength(cfg.REVERSAL_STRENGTH),
        headline="FORECAST: swept D-2 high but closed inside — SELL the high (liquidity grab)",
        bearish_setup=_setup(
            d1.high,
            _zone(d1.high, d1.high * (1 + cfg.SWEEP_ENTRY_BUFFER)),
            d1.high + d1.range * cfg.REVERSAL_STOP_RANGE_MULT,
            (d1.close, "PD Close"),
            (d1.low, "PD Low"),
            (d2.low, "D-2 Low"),
        ),
    )


def _bullish_reversal(state, dbpd, pd) -> Verdict:
    d1, d2 = pd.bar, dbpd.bar
    return Verdict(
        rule="fake_breakout_low",
        bias="BULLISH REVERSAL",
        direction="LOOK FOR BUY",
        strength=_strength(cfg.REVERSAL_STRENGTH),
        headline="FORECAST: swept D-2 low but closed inside — BUY the dip (liquidity grab)",
        bullish_setup=_setup(
            d1.low,
            _zone(d1.low * (1 - cfg.SWEEP_ENTRY_BUFFER), d1.low),
            d1.low - d1.range * cfg.REVERSAL_STOP_RANGE_MULT,
            (d1.close, "PD Close"),
            (d1.high, "PD High"),
            (d2.high, "D-2 High"),
        ),
    )


def _bullish_continuation(state, dbpd, pd) -> Verdict:
    d1, d2 = pd.bar, dbpd.bar
    return Verdict(
        rule="uptrend",
        bias="BULLISH CONTINUATION",
        direction="BUY PULLBACKS",
        strength=_scaled(cfg.CONTINUATION_BASE, cfg.CONTINUATION_STEP, state.confluence),
        headline="FORECAST: uptrend + bullish close — BUY dips toward the PD low",
        bullish_setup=_setup(
            d1.low,
            _zone(d1.low - d1.range * cfg.CONTINUATION_ENTRY_RANGE_MULT, d1.low),
            d2.low,
            (d1.high, "Equal PD High"),
            (d1.high + d1.range * cfg.CONTINUATION_EXT_1_MULT, "Extension 1"),
            (d1.high + d1.range * cfg.CONTINUATION_EXT_2_MULT, "Extension 2"),
        ),
    )


def _bearish_continuation(state, dbpd, pd) -> Verdict:
    d1, d2 = pd.bar, dbpd.bar
    return Verdict(
        rule="downtrend",
        bias="BEARISH CONTINUATION",
        direction="SELL RALLIES",
        strength=_scaled(cfg.CONTINUATION_BASE, cfg.CONTINUATION_STEP, -state.confluence),
        headline="FORECAST: downtrend + bearish close — SELL rallies toward the PD high",
        bearish_setup=_setup(
            d1.high,
            _zone(d1.high, d1.high + d1.range * cfg.CONTINUATION_ENTRY_RANGE_MULT),
            d2.high,
            (d1.low, "Equal PD Low"),
            (d1.low - d1.range * cfg.CONTINUATION_EXT_1_MULT, "Extension 1"),
            (d1.low - d1.range * cfg.CONTINUATION_EXT_2_MULT, "Extension 2"),
        ),
    )


def _inside_bar_breakout(state, dbpd, pd) -> Verdict:
    d1, d2 = pd.bar, dbpd.bar
    if pd.is_bullish:
        bias, direction, strength = "BULLISH BREAKOUT", "BUY ABOVE PD HIGH", cfg.INSIDE_BAR_STRENGTH
    elif pd.is_bearish:
        bias, direction, strength = "BEARISH BREAKOUT", "SELL BELOW PD LOW", cfg.INSIDE_BAR_STRENGTH
    else:
        bias, direction, strength = "NEUTRAL - WAIT", "TRADE BREAKOUT", cfg.NEUTRAL_STRENGTH

    return Verdict(
        rule="inside_bar",
        bias=bias,
        direction=direction,
        strength=_strength(strength),
        headline="FORECAST: inside bar — trade the breakout direction",
        bullish_setup=_setup(
            d1.high,
            _zone(d1.high, d1.high * (1 + cfg.INSIDE_BAR_ENTRY_BUFFER)),
            d1.low,
            (d2.high, "D-2 High"),
            (d2.high + d1.range, "Measured Move"),
        ),
        bearish_setup=_setup(
            d1.low,
            _zone(d1.low * (1 - cfg.INSIDE_BAR_ENTRY_BUFFER), d1.low),
            d1.high,
            (d2.low, "D-2 Low"),
            (d2.low - d1.range, "Measured Move"),
        ),
    )


def _bullish_confluence(state, dbpd, pd) -> Verdict:
    d1, d2 = pd.bar, dbpd.bar
    return Verdict(
        rule="bullish_confluence",
        bias="BULLISH",
        direction="LOOK FOR BUY SETUPS",
        strength=_scaled(cfg.CONFLUENCE_BASE, cfg.CONFLUENCE_STEP, state.confluence),
        bullish_setup=_setup(
            d1.low,
            _zone(d1.low - d1.range * cfg.CONFLUENCE_ENTRY_RANGE_MULT, d1.low),
            d2.low,
            (d1.high, "PD High"),
            (d1.high + d1.range * cfg.FIB_EXTENSION_MULT, "1.618 Extension"),
        ),
    )


def _bearish_confluence(state, dbpd, pd) -> Verdict:
    d1, d2 = pd.bar, dbpd.bar
    return Verdict(
        rule="bearish_confluence",
        bias="BEARISH",
        direction="LOOK FOR SELL SETUPS",
        strength=_scaled(cfg.CONFLUENCE_BASE, cfg.CONFLUENCE_STEP, -state.confluence),
        bearish_setup=_setup(
            d1.high,
            _zone(d1.high, d1.high + d1.range * cfg.CONFLUENCE_ENTRY_RANGE_MULT),
            d2.high,
            (d1.low, "PD Low"),
            (d1.low - d1.range * cfg.FIB_EXTENSION_MULT, "1.618 Extension"),
        ),
    )


def _neutral(state, dbpd, pd) -> Verdict:
    return Verdict(
        rule="neutral",
        bias="NEUTRAL",
        direction="WAIT FOR CLEAR SIGNAL",
        strength=_strength(cfg.NEUTRAL_STRENGTH),
        headline="Mixed signals — no clear bias, wait for price action confirmation",
    )


# ═════════════════════════════════════════════════════════════════════════════
#  PRIORITY TABLE
# ═════════════════════════════════════════════════════════════════════════════

RULES: tuple[tuple[str, Guard, Producer], ...] = (
    ("fake_breakout_high",
     lambda s, dbpd, pd: s.flags.fake_breakout_high, _bearish_reversal),
    ("fake_breakout_low",
     lambda s, dbpd, pd: s.flags.fake_breakout_low, _bullish_reversal),
    ("uptrend",
     lambda s, dbpd, pd: s.flags.uptrend and pd.is_bullish, _bullish_continuation),
    ("downtrend",
     lambda s, dbpd, pd: s.flags.downtrend and pd.is_bearish, _bearish_continuation),
    ("inside_bar",
     lambda s, dbpd, pd: s.flags.inside_bar, _inside_bar_breakout),
    ("bullish_confluence",
     lambda s, dbpd, pd: s.confluence >= cfg.BIAS_CONFLUENCE_THRESHOLD, _bullish_confluence),
    ("bearish_confluence",
     lambda s, dbpd, pd: s.confluence <= -cfg.BIAS_CONFLUENCE_THRESHOLD, _bearish_confluence),
    ("neutral",
     lambda s, dbpd, pd: True, _neutral),
)


def resolve_bias(state: AnalysisState, dbpd: CandleProfile, pd: CandleProfile) -> Verdict:
    """Return the verdict of the first rule whose guard passes."""
    for name, guard, produce in RULES:
        if guard(state, dbpd, pd):
            verdict = produce(state, dbpd, pd)
            log.debug(
                f"rule={name} bias={verdict.bias} strength={verdict.strength} "
                f"confluence={state.confluence:+d}"
            )
            return verdict
    # the last rule always matches
    raise AssertionError("bias priority table fell through")


# ═════════════════════════════════════════════════════════════════════════════
#  ENTRY POINT
# ═════════════════════════════════════════════════════════════════════════════

def classify_bias(d2_bar: PriceBar, d1_bar: PriceBar, symbol: str | None = None) -> ForecastResult:
    """
    Forecast today's bias from the day before yesterday (D-2) and yesterday
    (D-1).

    Raises InvalidInputError before any analysis if either bar is malformed.
    No state is kept between calls.
    """
    validate_bars(d2_bar, d1_bar)

    dbpd = classify_candle(d2_bar)
    pd = classify_candle(d1_bar)

    state = analyze_structure(dbpd, pd)
    verdict = resolve_bias(state, dbpd, pd)

    symbol = symbol or cfg.DEFAULT_SYMBOL
    log.debug(f"{symbol}: {verdict.bias} ({verdict.strength}%) via {verdict.rule}")

    return ForecastResult(
        symbol=symbol,
        bias=verdict.bias,
        direction=verdict.direction,
        strength=verdict.strength,
        headline=verdict.headline,
        reasoning=tuple(state.reasoning),
        recommendation=format_recommendation(verdict, d1_bar),
        candle_analysis=CandleAnalysis(dbpd=dbpd, pd=pd),
        key_levels=state.key_levels,
        confluence=state.confluence,
        flags=tuple(state.flags.active()),
        rule=verdict.rule,
        bullish_setup=verdict.bullish_setup,
        bearish_setup=verdict.bearish_setup,
    )


def classify_bias_from_frame(df, symbol: str | None = None) -> ForecastResult:
    """Forecast from the last two rows of an OHLC pandas DataFrame."""
    d2_bar, d1_bar = bars_from_frame(df)
    return classify_bias(d2_bar, d1_bar, symbol)
