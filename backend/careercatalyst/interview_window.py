"""
Interview link window.

An interview link is reachable for 15 minutes before and 15 minutes after the
scheduled instant. Here I only classify a pair of instants (scheduled, now),
both in epoch milliseconds, into one of three states. Nothing is stored: as
real time goes by the same link simply moves inactive -> active -> expired.
"""

import math
import time
from enum import Enum
from typing import Any, Callable, Tuple

from .exceptions import InvalidInputError


BUFFER_MS = 15 * 60 * 1000

# a clock is anything that returns "now" in epoch milliseconds
Clock = Callable[[], int]


class WindowState(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    EXPIRED = "expired"

    @property
    def message(self) -> str:
        return STATE_MESSAGES[self]


STATE_MESSAGES = {
    WindowState.ACTIVE: "Interview link is active",
    WindowState.INACTIVE: "Interview link is not yet active",
    WindowState.EXPIRED: "Interview has expired",
}


def system_clock() -> int:
    """Wall clock in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def _as_epoch_ms(value: Any, field: str) -> int:
    """
    Accepts ints and integral finite floats (JavaScript clients may send
    1700000000000.0). Booleans, strings, None and everything else are refused.
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"{field} must be a number of epoch milliseconds")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    if value is None:
        raise InvalidInputError(f"{field} is required")
    raise InvalidInputError(f"{field} must be a number of epoch milliseconds")


def window_bounds(interview_timestamp: Any) -> Tuple[int, int]:
    """Returns (opens_at, closes_at) in epoch ms, both inclusive."""
    scheduled = _as_epoch_ms(interview_timestamp, "interviewTimestamp")
    return scheduled - BUFFER_MS, scheduled + BUFFER_MS


def evaluate_window(interview_timestamp: Any, now: Any) -> WindowState:
    """
    Classify `now` against the window [T - B, T + B].

    Boundary instants count as active.

    >>> evaluate_window(1700000000000, 1700000900000)
    <WindowState.ACTIVE: 'active'>
    """
    opens_at, closes_at = window_bounds(interview_timestamp)
    now_ms = _as_epoch_ms(now, "now")

    if now_ms < opens_at:
        return WindowState.INACTIVE
    if now_ms > closes_at:
        return WindowState.EXPIRED
    return WindowState.ACTIVE
