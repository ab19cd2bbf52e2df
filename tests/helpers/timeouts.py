"""Centralized test timeout configuration.

All test timeouts should use these configurable values to work reliably
in slow CI environments and different hardware configurations.

Environment variables:
- TEST_TIMEOUT_MULTIPLIER: Multiply all timeouts by this factor (default: 1.0)
- TEST_THREAD_JOIN_TIMEOUT: Timeout for thread joins (default: 10.0)
- TEST_LOCK_TIMEOUT: Timeout for lock/capture acquisition (default: 2.0)
- TEST_SUBPROCESS_TIMEOUT: Timeout for subprocess operations (default: 60)
"""
from __future__ import annotations

import os
import time
from typing import Callable


def _get_float_env(name: str, default: float) -> float:
    """Get float from environment variable with fallback."""
    try:
        return float(os.environ.get(name, str(default)))
    except (ValueError, TypeError):
        return default


# Global timeout multiplier for CI environments
TIMEOUT_MULTIPLIER = _get_float_env("TEST_TIMEOUT_MULTIPLIER", 1.0)

POLL_INTERVAL = _get_float_env("TEST_POLL_INTERVAL", 0.01)
THREAD_JOIN_TIMEOUT = _get_float_env("TEST_THREAD_JOIN_TIMEOUT", 10.0) * TIMEOUT_MULTIPLIER
LOCK_TIMEOUT = _get_float_env("TEST_LOCK_TIMEOUT", 2.0) * TIMEOUT_MULTIPLIER
SUBPROCESS_TIMEOUT = _get_float_env("TEST_SUBPROCESS_TIMEOUT", 60.0) * TIMEOUT_MULTIPLIER

# Short sleeps for coordination (e.g., ensuring background task starts)
SHORT_SLEEP = _get_float_env("TEST_SHORT_SLEEP", 0.05) * TIMEOUT_MULTIPLIER


def wait_for_condition(
    condition: Callable[[], bool],
    timeout: float | None = None,
    poll_interval: float | None = None,
) -> bool:
    """Wait for a condition to be true with configurable timeout.

    Returns:
        True if condition met within timeout, False otherwise
    """
    timeout = timeout if timeout is not None else THREAD_JOIN_TIMEOUT
    poll_interval = poll_interval if poll_interval is not None else POLL_INTERVAL

    deadline = time.time() + timeout
    while time.time() < deadline:
        if condition():
            return True
        time.sleep(poll_interval)
    return condition()
