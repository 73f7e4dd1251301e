# nnue_forensics/logging.py
"""
Logging setup using Loguru.

- Debug toggle
- Human-readable console formatting, or JSON lines for tooling
"""
from __future__ import annotations

import sys

from loguru import logger


def configure_logging(*, debug: bool = False, json: bool = False) -> None:
    """Configure loguru logging sinks.

    Args:
        debug: Enable verbose debug logging.
        json: Emit serialized JSON records instead of formatted text.
    """
    logger.remove()
    level = "DEBUG" if debug else "INFO"
    if json:
        logger.add(sys.stderr, level=level, serialize=True)
        return
    fmt = (
        "<green>{time:HH:mm:ss.SSS}</green> "
        "| <level>{level: <8}</level> "
        "| <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> "
        "- <level>{message}</level>"
    )
    logger.add(sys.stderr, level=level, format=fmt, backtrace=debug, diagnose=debug)
