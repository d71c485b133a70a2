"""
Rate-limited logging.

Degenerate-input warnings fire once per particle and scan cycle; emitting
them unthrottled would flood the log at filter rate.
"""

from __future__ import annotations

import logging
import threading
import time

_lock = threading.Lock()
_last_emitted: dict[tuple[str, str], float] = {}


def warn_throttled(logger: logging.Logger, period_sec: float, msg: str, *args) -> bool:
    """
    Log ``msg`` at WARNING level at most once per ``period_sec`` per (logger, msg).

    Safe to call from worker threads.

    Returns:
        True if the message was emitted.
    """
    key = (logger.name, msg)
    now = time.monotonic()
    with _lock:
        last = _last_emitted.get(key)
        if last is not None and now - last < period_sec:
            return False
        _last_emitted[key] = now
    logger.warning(msg, *args)
    return True


def reset_throttle() -> None:
    """Forget all throttle timestamps."""
    with _lock:
        _last_emitted.clear()
