"""
===============================================================================
  Recommendation Formatter — verdict → trading plan text
===============================================================================
"""

from __future__ import annotations

import config as cfg
from forecaster.models import ForecastResult, PriceBar, TradeSetup, Verdict


def _fmt(price: float) -> str:
    return f"{price:.{cfg.PRICE_DECIMALS}f}"


def format_recommendation(verdict: Verdict, pd_bar: PriceBar) -> str:
    """
    One-sentence plan.  Directional biases point at their setup's sweep level;
    NEUTRAL and NEUTRAL - WAIT quote the two D-1 breakout triggers.
    """
    if "BULLISH" in verdict.bias and verdict.bullish_setup is not None:
        return (
            f"Watch for price to sweep or approach {_fmt(verdict.bullish_setup.sweep_level)}, "
            f"then look for bullish confirmation (rejection wick, bullish engulfing, etc.) "
            f"for a BUY entry."
        )
    if "BEARISH" in verdict.bias and verdict.bearish_setup is not None:
        return (
            f"Watch for price to sweep or approach {_fmt(verdict.bearish_setup.sweep_level)}, "
            f"then look for bearish confirmation (rejection wick, bearish engulfing, etc.) "
            f"for a SELL entry."
        )
    return (
        f"No clear bias. Wait for price to break and close above {_fmt(pd_bar.high)} "
        f"(bullish) or below {_fmt(pd_bar.low)} (bearish) before entering trades."
    )


# ═════════════════════════════════════════════════════════════════════════════
#  TEXT REPORT
# ═════════════════════════════════════════════════════════════════════════════

def _setup_lines(title: str, setup: TradeSetup) -> list[str]:
    lines = [
        f"  {title}",
        f"    Sweep level:  {_fmt(setup.sweep_level)}",
        f"    Entry zone:   {setup.entry_zone}",
        f"    Stop loss:    {_fmt(setup.invalidation)}",
        "    Targets:",
    ]
    for i, t in enumerate(setup.targets, 1):
        lines.append(f"      {i}. {_fmt(t.level)}  ({t.label})")
    return lines


def format_report(result: ForecastResult) -> str:
    """Plain-text rendering of a forecast for terminals and logs."""
    lines = [
        "=" * 60,
        f"  DAILY BIAS FORECAST — {result.symbol}",
        "=" * 60,
        f"  Bias:       {result.bias}",
        f"  Direction:  {result.direction}",
        f"  Confidence: {result.strength}%",
        f"  Confluence: {result.confluence:+d}",
    ]
    if result.headline:
        lines += ["", f"  {result.headline}"]

    lines += ["", "  Analysis:"]
    lines += [f"    • {reason}" for reason in result.reasoning]
    lines += ["", f"  Plan: {result.recommendation}"]

    if result.bullish_setup:
        lines += [""] + _setup_lines("BULLISH SETUP (BUY)", result.bullish_setup)
    if result.bearish_setup:
        lines += [""] + _setup_lines("BEARISH SETUP (SELL)", result.bearish_setup)

    lines += ["", f"  {'Period':6s} {'Open':>10s} {'High':>10s} {'Low':>10s} {'Close':>10s}  Candle"]
    for label, key in (("D-2", "dbpd"), ("D-1", "pd")):
        c = result.candle_analysis[key]
        b = c.bar
        lines.append(
            f"  {label:6s} {_fmt(b.open):>10s} {_fmt(b.high):>10s} "
            f"{_fmt(b.low):>10s} {_fmt(b.close):>10s}  {c.shape} ({c.body_percent:.1f}%)"
        )

    kl = result.key_levels
    lines += [
        f"  D-2 midpoint: {_fmt(kl.dbpd_mid)}   D-1 midpoint: {_fmt(kl.pd_mid)}",
        "=" * 60,
    ]
    return "\n".join(lines)
