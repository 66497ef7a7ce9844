"""
Per-caller sliding-window rate limiting for inbound calls.

Each caller gets a deque of request timestamps. A request is allowed while
fewer than max_requests timestamps fall inside the trailing window. Windows
live in an LRU-ordered map capped at max_callers, and a background sweeper
drops windows with no activity inside the window length.
"""

import logging
import threading
import time
from collections import OrderedDict, deque
from collections.abc import Callable

from notifications.errors import RateLimited

logger = logging.getLogger(__name__)


class RateGovernor:
    """
    Sliding-window limiter keyed by caller identity.

    All state changes happen under one lock, so allow() from different
    threads and the sweeper never interleave.
    """

    def __init__(
        self,
        window_seconds: float = 60.0,
        max_requests: int = 20,
        sweep_interval: float = 60.0,
        max_callers: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if max_callers < 1:
            raise ValueError("max_callers must be at least 1")

        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.sweep_interval = sweep_interval
        self.max_callers = max_callers
        self._clock = clock

        self._windows: OrderedDict[str, deque[float]] = OrderedDict()
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._sweeper: threading.Thread | None = None

    def _evict_expired(self, window: deque[float], now: float) -> None:
        cutoff = now - self.window_seconds
        while window and window[0] <= cutoff:
            window.popleft()

    def allow(self, caller_id: str) -> bool:
        """Record and allow the request, or return False if over the cap."""
        now = self._clock()
        with self._lock:
            window = self._windows.get(caller_id)
            if window is None:
                window = deque()
                self._windows[caller_id] = window
                while len(self._windows) > self.max_callers:
                    self._windows.popitem(last=False)
            else:
                self._windows.move_to_end(caller_id)

            self._evict_expired(window, now)
            if len(window) >= self.max_requests:
                return False

            window.append(now)
            return True

    def retry_after(self, caller_id: str) -> float:
        """Seconds until the caller's oldest counted request leaves the window."""
        now = self._clock()
        with self._lock:
            window = self._windows.get(caller_id)
            if not window:
                return 0.0
            self._evict_expired(window, now)
            if len(window) < self.max_requests:
                return 0.0
            return max(0.0, window[0] + self.window_seconds - now)

    def check(self, caller_id: str) -> None:
        """
        Like allow(), but raises instead of returning False.

        Raises:
            RateLimited: If the caller is over the cap
        """
        if not self.allow(caller_id):
            retry_after = self.retry_after(caller_id)
            logger.warning(
                "Rate limit exceeded for %s",
                caller_id,
                extra={"event": "rate_limited", "caller": caller_id, "retry_after": retry_after},
            )
            raise RateLimited(retry_after=retry_after)

    def sweep(self) -> int:
        """
        Drop windows with no request inside the window length.

        Returns:
            Number of caller windows removed
        """
        now = self._clock()
        removed = 0
        with self._lock:
            for caller_id in list(self._windows):
                window = self._windows[caller_id]
                self._evict_expired(window, now)
                if not window:
                    del self._windows[caller_id]
                    removed += 1
        if removed:
            logger.debug("Swept %d idle rate windows", removed, extra={"event": "rate_sweep"})
        return removed

    def tracked_callers(self) -> int:
        with self._lock:
            return len(self._windows)

    def _run_sweeper(self) -> None:
        while not self._stop.wait(self.sweep_interval):
            self.sweep()

    def start(self) -> None:
        """Start the background sweeper thread (idempotent)."""
        if self._sweeper is not None and self._sweeper.is_alive():
            return
        self._stop.clear()
        self._sweeper = threading.Thread(
            target=self._run_sweeper, name="rate-governor-sweeper", daemon=True
        )
        self._sweeper.start()

    def stop(self) -> None:
        """Stop the sweeper and wait for it to exit."""
        self._stop.set()
        if self._sweeper is not None:
            self._sweeper.join()
            self._sweeper = None

    def __enter__(self) -> "RateGovernor":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
