"""
===============================================================================
  DAILY BIAS FORECASTER — Master Configuration
===============================================================================
  Every tunable parameter lives here.  Nothing is hard-coded elsewhere.
  Values that make sense per-environment are loaded from .env; everything
  else has a sensible default that can be overridden at runtime.
===============================================================================
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ── Load .env ────────────────────────────────────────────────────────────────
_ENV_PATH = Path(__file__).parent / ".env"
load_dotenv(_ENV_PATH)

# ═════════════════════════════════════════════════════════════════════════════
#  SYMBOL
# ═════════════════════════════════════════════════════════════════════════════
DEFAULT_SYMBOL: str = os.getenv("DEFAULT_SYMBOL", "N/A")

# ═════════════════════════════════════════════════════════════════════════════
#  CANDLE CLASSIFICATION  (all values are % of the bar's high-low range)
# ═════════════════════════════════════════════════════════════════════════════
DOJI_BODY_PCT: float = 10.0           # body below this → doji
STRONG_BODY_PCT: float = 70.0         # body above this → strong candle
BODY_PCT: float = 50.0                # body above this → regular candle
WICK_REJECTION_MULT: float = 2.0      # wick > 2x body → rejection
MOMENTUM_STRENGTH: int = 2            # |strength| >= this → momentum note

# ═════════════════════════════════════════════════════════════════════════════
#  CLOSE POSITION  (where D-1 closed inside its own range)
# ═════════════════════════════════════════════════════════════════════════════
CLOSE_POSITION_UPPER_PCT: float = 75.0
CLOSE_POSITION_LOWER_PCT: float = 25.0

# ═════════════════════════════════════════════════════════════════════════════
#  BIAS STRENGTH  (0-100)
# ═════════════════════════════════════════════════════════════════════════════
REVERSAL_STRENGTH: int = 85           # fake breakout → reversal
CONTINUATION_BASE: int = 75           # trend + matching close
CONTINUATION_STEP: int = 3            # per confluence point
INSIDE_BAR_STRENGTH: int = 70         # inside bar with a directional close
NEUTRAL_STRENGTH: int = 50
CONFLUENCE_BASE: int = 60             # confluence-only bias
CONFLUENCE_STEP: int = 5
MAX_STRENGTH: int = 95
BIAS_CONFLUENCE_THRESHOLD: int = 3    # |confluence| >= this → directional

# ═════════════════════════════════════════════════════════════════════════════
#  SETUP GEOMETRY
# ═════════════════════════════════════════════════════════════════════════════
SWEEP_ENTRY_BUFFER: float = 0.0005        # 0.05% beyond the swept extreme
REVERSAL_STOP_RANGE_MULT: float = 0.3     # stop 30% of PD range past sweep
CONTINUATION_ENTRY_RANGE_MULT: float = 0.2
CONTINUATION_EXT_1_MULT: float = 0.5
CONTINUATION_EXT_2_MULT: float = 1.0
INSIDE_BAR_ENTRY_BUFFER: float = 0.001    # 0.1% past the inside-bar extreme
CONFLUENCE_ENTRY_RANGE_MULT: float = 0.15
FIB_EXTENSION_MULT: float = 0.618         # "1.618 Extension" target

PRICE_DECIMALS: int = 5

# ═════════════════════════════════════════════════════════════════════════════
#  LOGGING
# ═════════════════════════════════════════════════════════════════════════════
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR: Path = Path(os.getenv("LOG_DIR", str(Path(__file__).parent / "logs")))

# ═════════════════════════════════════════════════════════════════════════════
#  PATHS
# ═════════════════════════════════════════════════════════════════════════════
BASE_DIR: Path = Path(__file__).parent
