from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now_ms(self) -> float: ...


class MonotonicClock:
    """Default clock: monotonic milliseconds, immune to wall-clock jumps."""

    def now_ms(self) -> float:
        return time.monotonic() * 1000
