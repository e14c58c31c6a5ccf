"""
logging.py — Backend Logging Setup

Purpose:
- One stream for API requests, quote fetches, retries and model recomputes,
  formatted as: timestamp | level | module | message
- Keep third-party HTTP and provider chatter (urllib3, httpx, openai,
  yfinance) at WARNING unless the backend itself runs at DEBUG.
"""

import logging
from typing import Iterable

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

NOISY_LOGGERS = ("urllib3", "httpx", "httpcore", "openai", "yfinance", "peewee")


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def quiet_loggers(names: Iterable[str], level: int = logging.WARNING) -> None:
    for name in names:
        logging.getLogger(name).setLevel(level)


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging. Called once from `main.py` at startup.

    Unknown level names fall back to INFO.
    """
    resolved = _resolve_level(level)
    logging.basicConfig(level=resolved, format=LOG_FORMAT)

    if resolved > logging.DEBUG:
        quiet_loggers(NOISY_LOGGERS)

    logging.getLogger(__name__).info("Logging initialized at %s", logging.getLevelName(resolved))


def get_logger(name: str) -> logging.Logger:
    """
    Usage:
        from pitchly.core.logging import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)
