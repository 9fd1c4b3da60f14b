"""Daily bias forecaster: two OHLC bars in, one forecast out."""

from .bias import classify_bias, classify_bias_from_frame, resolve_bias  # noqa: F401
from .candles import classify_candle  # noqa: F401
from .errors import DegenerateRangeError, ForecastError, InvalidInputError  # noqa: F401
from .models import (  # noqa: F401
    BIAS_LABELS,
    AnalysisState,
    CandleAnalysis,
    CandleProfile,
    ForecastResult,
    KeyLevels,
    PriceBar,
    ScenarioFlags,
    Target,
    TradeSetup,
    Verdict,
)
from .recommendation import format_recommendation, format_report  # noqa: F401
from .structure import analyze_structure  # noqa: F401
from .validation import bar_from_row, bars_from_frame, validate_bar  # noqa: F401
