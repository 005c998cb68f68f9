"""Shared request throttle for the results provider."""

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable


class RateLimiter:
    """Sliding-window token bucket capping provider requests.

    One instance is shared by every caller of a provider; it is passed in
    explicitly rather than held in module state.
    """

    def __init__(
        self,
        max_events: int,
        window_seconds: float = 60.0,
        *,
        time_fn: Callable[[], float] | None = None,
        sleep_fn: Callable[[float], None] | None = None,
    ) -> None:
        self.max_events = max_events
        self.window_seconds = window_seconds
        self._timestamps: deque[float] = deque()
        self._time = time_fn or time.monotonic
        self._sleep = sleep_fn or time.sleep
        self._lock = threading.Lock()

    def wait_for_slot(self) -> float:
        """Block until a request may go out; returns the seconds slept."""

        if self.max_events <= 0:
            return 0.0
        with self._lock:
            now = self._time()
            cutoff = now - self.window_seconds
            while self._timestamps and self._timestamps[0] <= cutoff:
                self._timestamps.popleft()
            slept = 0.0
            if len(self._timestamps) >= self.max_events:
                slept = self.window_seconds - (now - self._timestamps[0])
                if slept > 0:
                    self._sleep(slept)
                self._timestamps.popleft()
            self._timestamps.append(self._time())
            return max(slept, 0.0)
