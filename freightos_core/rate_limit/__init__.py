"""
Rate Limiting Module for Freightos Core
=======================================
Rolling one-hour call quota persisted to a local JSON file.
"""

from .models import AcquireResult, PersistenceResult, RateLimitStatus
from .store import CallStore, InMemoryCallStore, JsonFileCallStore
from .sliding_window import (
    RATE_LIMIT,
    RATE_LIMIT_WARNING_THRESHOLD,
    RATE_LIMIT_WINDOW_MS,
    RollingWindowLimiter,
    format_clock_time,
)

__all__ = [
    # Models
    "AcquireResult",
    "PersistenceResult",
    "RateLimitStatus",
    # Stores
    "CallStore",
    "InMemoryCallStore",
    "JsonFileCallStore",
    # Limiter
    "RollingWindowLimiter",
    "format_clock_time",
    "RATE_LIMIT",
    "RATE_LIMIT_WINDOW_MS",
    "RATE_LIMIT_WARNING_THRESHOLD",
]
