"""
Bias forecaster data model.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Literal, Optional, get_args


CandleShape = Literal[
    "STRONG BULLISH", "BULLISH", "WEAK BULLISH",
    "DOJI",
    "STRONG BEARISH", "BEARISH", "WEAK BEARISH",
    "NEUTRAL",
]

BiasLabel = Literal[
    "BEARISH REVERSAL",
    "BULLISH REVERSAL",
    "BULLISH CONTINUATION",
    "BEARISH CONTINUATION",
    "BULLISH BREAKOUT",
    "BEARISH BREAKOUT",
    "NEUTRAL - WAIT",
    "BULLISH",
    "BEARISH",
    "NEUTRAL",
]

BIAS_LABELS: tuple[str, ...] = get_args(BiasLabel)


@dataclass(frozen=True)
class PriceBar:
    open: float
    high: float
    low: float
    close: float

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def midpoint(self) -> float:
        return (self.high + self.low) / 2

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CandleProfile:
    """Shape metrics for a single bar."""
    bar: PriceBar
    shape: CandleShape
    body: float
    body_percent: float         # % of range, 1 decimal
    upper_wick: float
    lower_wick: float
    strength_score: int         # -3 … +3
    is_bullish: bool
    is_bearish: bool
    is_doji: bool
    has_upper_wick_rejection: bool
    has_lower_wick_rejection: bool

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ScenarioFlags:
    """Closed set of patterns the structure analyzer can raise."""
    reversal_up: bool = False
    reversal_down: bool = False
    upper_rejection: bool = False
    lower_rejection: bool = False
    indecision: bool = False
    breakout_high: bool = False
    fake_breakout_high: bool = False
    breakout_low: bool = False
    fake_breakout_low: bool = False
    inside_bar: bool = False
    outside_bar: bool = False
    uptrend: bool = False
    downtrend: bool = False

    def active(self) -> list[str]:
        return [k for k, v in asdict(self).items() if v]


@dataclass(frozen=True)
class KeyLevels:
    pd_open: float
    pd_high: float
    pd_low: float
    pd_close: float
    pd_mid: float
    dbpd_open: float
    dbpd_high: float
    dbpd_low: float
    dbpd_close: float
    dbpd_mid: float

    @classmethod
    def from_bars(cls, dbpd: PriceBar, pd: PriceBar) -> "KeyLevels":
        return cls(
            pd_open=pd.open,
            pd_high=pd.high,
            pd_low=pd.low,
            pd_close=pd.close,
            pd_mid=pd.midpoint,
            dbpd_open=dbpd.open,
            dbpd_high=dbpd.high,
            dbpd_low=dbpd.low,
            dbpd_close=dbpd.close,
            dbpd_mid=dbpd.midpoint,
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AnalysisState:
    """Accumulator for one classify_bias() call."""
    confluence: int = 0
    reasoning: list[str] = field(default_factory=list)
    flags: ScenarioFlags = field(default_factory=ScenarioFlags)
    key_levels: Optional[KeyLevels] = None

    def add(self, delta: int, reason: str):
        self.confluence += delta
        self.reasoning.append(reason)


@dataclass(frozen=True)
class Target:
    level: float
    label: str


@dataclass(frozen=True)
class TradeSetup:
    sweep_level: float
    entry_zone: str             # "low - high"
    invalidation: float         # stop level
    targets: tuple[Target, ...] = ()

    def to_dict(self) -> dict:
        return {
            "sweep_level": self.sweep_level,
            "entry_zone": self.entry_zone,
            "invalidation": self.invalidation,
            "targets": [{"level": t.level, "label": t.label} for t in self.targets],
        }


@dataclass(frozen=True)
class Verdict:
    """What the bias resolver decided, before the recommendation is written."""
    rule: str
    bias: BiasLabel
    direction: str
    strength: int
    headline: Optional[str] = None
    bullish_setup: Optional[TradeSetup] = None
    bearish_setup: Optional[TradeSetup] = None


@dataclass(frozen=True)
class CandleAnalysis:
    """Profiles of both input bars, addressable as analysis["dbpd"] / ["pd"]."""
    dbpd: CandleProfile
    pd: CandleProfile

    def __getitem__(self, key: str) -> CandleProfile:
        if key not in ("dbpd", "pd"):
            raise KeyError(key)
        return getattr(self, key)

    def keys(self) -> tuple[str, ...]:
        return ("dbpd", "pd")

    def values(self) -> tuple[CandleProfile, ...]:
        return (self.dbpd, self.pd)

    def to_dict(self) -> dict:
        return {"dbpd": self.dbpd.to_dict(), "pd": self.pd.to_dict()}


@dataclass(frozen=True)
class ForecastResult:
    """Final, read-only output of classify_bias()."""
    symbol: str
    bias: BiasLabel
    direction: str
    strength: int               # 0-100
    headline: Optional[str]
    reasoning: tuple[str, ...]
    recommendation: str
    candle_analysis: CandleAnalysis
    key_levels: KeyLevels
    confluence: int
    flags: tuple[str, ...] = ()
    rule: str = ""
    bullish_setup: Optional[TradeSetup] = None
    bearish_setup: Optional[TradeSetup] = None

    @property
    def full_reasoning(self) -> list[str]:
        """Headline first, then the trail in evaluation order."""
        head = [self.headline] if self.headline else []
        return head + list(self.reasoning)

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "bias": self.bias,
            "direction": self.direction,
            "strength": self.strength,
            "headline": self.headline,
            "reasoning": self.full_reasoning,
            "recommendation": self.recommendation,
            "bullish_setup": self.bullish_setup.to_dict() if self.bullish_setup else {},
            "bearish_setup": self.bearish_setup.to_dict() if self.bearish_setup else {},
            "candle_analysis": self.candle_analysis.to_dict(),
            "key_levels": self.key_levels.to_dict(),
            "confluence": self.confluence,
            "flags": list(self.flags),
            "rule": self.rule,
        }
