"""
Rate Limit Models
=================
Data models for the rolling-window quota.
"""

from typing import Optional
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class PersistenceResult(str, Enum):
    """Outcome of writing the call history to its store."""
    PERSISTED = "persisted"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class RateLimitStatus:
    """Quota snapshot computed from the calls inside the window."""
    calls_in_window: int
    limit: int
    remaining: int
    percent_used: int
    resets_at: Optional[int] = None  # epoch ms, set only when exhausted
    warning: Optional[str] = None

    @property
    def exhausted(self) -> bool:
        return self.remaining == 0

    @property
    def level(self) -> str:
        if self.remaining > 20:
            return "OK"
        if self.remaining > 0:
            return "LOW"
        return "EXHAUSTED"

    @property
    def resets_at_datetime(self) -> Optional[datetime]:
        if self.resets_at is None:
            return None
        return datetime.fromtimestamp(self.resets_at / 1000, tz=timezone.utc)


@dataclass(frozen=True)
class AcquireResult:
    """Pre-flight quota decision."""
    allowed: bool
    status: RateLimitStatus
