"""Step timing helpers for the recommendation pipeline's DEBUG logs."""
import time
from typing import Optional, Callable
import logging

logger = logging.getLogger(__name__)


def now_ms() -> float:
    """Return current time in milliseconds using high-resolution timer."""
    return time.perf_counter() * 1000


def log_elapsed(start_ms: float, label: str, log_fn: Optional[Callable[[str], None]] = None) -> float:
    """
    Log elapsed time since start_ms and return current time.

    Args:
        start_ms: Start time in milliseconds (from now_ms())
        label: Description of the step
        log_fn: Optional logging function (defaults to logger.debug)

    Returns:
        Current time in milliseconds, so steps can be chained:

        t = now_ms()
        t = log_elapsed(t, "load_library")
        t = log_elapsed(t, "generate_candidates")
    """
    elapsed = now_ms() - start_ms
    (log_fn or logger.debug)(f"{label}: {elapsed:.2f}ms")
    return now_ms()
