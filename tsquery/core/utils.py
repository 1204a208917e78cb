"""
Small shared utilities.
"""
from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Generator


@contextmanager
def timed(logger: logging.Logger, label: str) -> Generator[dict, None, None]:
    """Record elapsed wall-clock milliseconds and log them under *label*.

    The elapsed time is logged even when the body raises; the exception
    itself is left to propagate.
    """
    result: dict = {}
    start = time.perf_counter()
    try:
        yield result
    finally:
        result["elapsed_ms"] = int((time.perf_counter() - start) * 1000)
        logger.info("%s took %d ms", label, result["elapsed_ms"])
