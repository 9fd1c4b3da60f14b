"""
===============================================================================
  Logging — console + rotating file output
===============================================================================
  Library modules only ask for child loggers; handlers are attached when an
  entry point calls setup_logging(), so importing the engine touches no files.
===============================================================================
"""

import logging
import sys
from logging.handlers import RotatingFileHandler

import config as cfg

ROOT_LOGGER = "forecaster"


def setup_logging(name: str = ROOT_LOGGER, to_file: bool = True) -> logging.Logger:
    """Create and return a configured logger instance."""
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, cfg.LOG_LEVEL.upper(), logging.INFO))

    if logger.handlers:
        return logger

    fmt = logging.Formatter(
        "[%(asctime)s] %(levelname)-8s %(name)-24s │ %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # ── Console handler ──────────────────────────────────────────────────
    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    # ── File handler (10 MB, 5 backups) ──────────────────────────────────
    if to_file:
        cfg.LOG_DIR.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            cfg.LOG_DIR / f"{name}.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger


def get_logger(module: str) -> logging.Logger:
    """Return a child logger for *module*."""
    return logging.getLogger(ROOT_LOGGER).getChild(module)
