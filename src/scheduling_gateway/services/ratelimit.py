from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional


@dataclass(frozen=True, slots=True)
class RateDecision:
    allowed: bool
    remaining: Optional[int] = None
    reset_in: Optional[float] = None


@dataclass(slots=True)
class _Window:
    count: int
    reset_at: float


@dataclass
class RateLimiter:
    """Fixed-window counter keyed by caller.

    A call landing after the window expired opens a new window. Calls beyond
    ``limit`` are rejected without being counted.
    """

    limit: int
    window_seconds: float = 60.0
    clock: Callable[[], float] = time.monotonic
    _windows: Dict[str, _Window] = field(default_factory=dict, repr=False)

    @property
    def enabled(self) -> bool:
        return self.limit > 0

    def check(self, key: str) -> RateDecision:
        if not self.enabled:
            return RateDecision(allowed=True)
        now = self.clock()
        window = self._windows.get(key)
        if window is None or now >= window.reset_at:
            window = _Window(count=0, reset_at=now + self.window_seconds)
            self._windows[key] = window
        reset_in = max(window.reset_at - now, 0.0)
        if window.count >= self.limit:
            return RateDecision(allowed=False, remaining=0, reset_in=reset_in)
        window.count += 1
        return RateDecision(allowed=True, remaining=self.limit - window.count, reset_in=reset_in)

    def reset(self) -> None:
        self._windows.clear()
