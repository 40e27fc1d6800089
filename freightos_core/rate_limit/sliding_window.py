"""
Rolling Window Rate Limiter
===========================
Sliding window quota over a persisted list of call timestamps.
"""

import time
from datetime import datetime
from typing import Callable, List, Optional

import structlog

from .models import AcquireResult, PersistenceResult, RateLimitStatus
from .store import CallStore

logger = structlog.get_logger(__name__)

RATE_LIMIT = 100
RATE_LIMIT_WINDOW_MS = 60 * 60 * 1000
RATE_LIMIT_WARNING_THRESHOLD = 80


def format_clock_time(epoch_ms: Optional[int], default: str = "unknown") -> str:
    """Render an epoch-ms instant as local HH:MM:SS."""
    if epoch_ms is None:
        return default
    return datetime.fromtimestamp(epoch_ms / 1000).strftime("%H:%M:%S")


class RollingWindowLimiter:
    """
    Rolling window limiter backed by an injected call store.

    Every evaluation prunes timestamps that fell out of the window relative
    to the current clock. The check in ``try_acquire`` and the append in
    ``record_call`` are separate steps, so concurrent processes sharing a
    store can overshoot the limit slightly.
    """

    def __init__(
        self,
        store: CallStore,
        limit: int = RATE_LIMIT,
        window_ms: int = RATE_LIMIT_WINDOW_MS,
        warning_threshold: int = RATE_LIMIT_WARNING_THRESHOLD,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            store: Call history backend
            limit: Calls allowed per window
            window_ms: Window size in milliseconds
            warning_threshold: Call count at which a warning is attached
            clock: Returns the current time in seconds since the epoch
        """
        self.store = store
        self.limit = limit
        self.window_ms = window_ms
        self.warning_threshold = warning_threshold
        self.clock = clock
        self.last_persistence: Optional[PersistenceResult] = None

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def prune(self, calls: List[int], now_ms: int) -> List[int]:
        """Keep only the timestamps inside the window ending at ``now_ms``."""
        cutoff = now_ms - self.window_ms
        return [ts for ts in calls if ts > cutoff]

    def _build_status(self, recent: List[int]) -> RateLimitStatus:
        count = len(recent)
        remaining = max(0, self.limit - count)
        # halves round up, in integers
        percent_used = (count * 200 + self.limit) // (2 * self.limit) if self.limit else 100

        resets_at = None
        if recent and remaining == 0:
            resets_at = min(recent) + self.window_ms

        warning = None
        if count >= self.limit:
            warning = (
                f"RATE LIMIT REACHED: {count}/{self.limit} calls used. "
                f"Wait until {format_clock_time(resets_at)} for more capacity."
            )
        elif count >= self.warning_threshold:
            warning = (
                f"Rate limit warning: {count}/{self.limit} calls used "
                f"({percent_used}%). {remaining} remaining this hour."
            )

        return RateLimitStatus(
            calls_in_window=count,
            limit=self.limit,
            remaining=remaining,
            percent_used=percent_used,
            resets_at=resets_at,
            warning=warning,
        )

    def _save(self, calls: List[int]) -> PersistenceResult:
        self.last_persistence = self.store.save(calls)
        return self.last_persistence

    def current_status(self) -> RateLimitStatus:
        """Compute quota status; stale entries are written back out."""
        calls = self.store.load()
        recent = self.prune(calls, self._now_ms())
        if len(recent) != len(calls):
            self._save(recent)
        return self._build_status(recent)

    def record_call(self) -> PersistenceResult:
        """Append the current instant to the history."""
        now_ms = self._now_ms()
        recent = self.prune(self.store.load(), now_ms)
        recent.append(now_ms)
        result = self._save(recent)
        logger.debug(
            "Recorded API call",
            calls_in_window=len(recent),
            limit=self.limit,
            persistence=result.value,
        )
        return result

    def try_acquire(self) -> AcquireResult:
        """Check whether one more call fits in the window."""
        status = self.current_status()
        if status.exhausted:
            logger.warning(
                "Rate limit exhausted",
                calls_in_window=status.calls_in_window,
                resets_at=status.resets_at,
            )
        return AcquireResult(allowed=status.remaining > 0, status=status)
