"""
Call History Stores
===================
Persistence backends for the rolling-window call history.

The file store keeps the document ``{"calls": [<epoch ms>, ...]}`` and never
raises on bad state: unreadable or malformed content loads as an empty
history, and failed writes fall back to an in-process copy.
"""

import json
import math
from pathlib import Path
from typing import List, Optional, Protocol, Union

import structlog

from .models import PersistenceResult

logger = structlog.get_logger(__name__)


class CallStore(Protocol):
    """Anything that can load and save a list of call timestamps."""

    def load(self) -> List[int]:
        ...

    def save(self, calls: List[int]) -> PersistenceResult:
        ...


class InMemoryCallStore:
    """
    Process-local call history.

    For tests and runs that should not touch the cache directory.
    """

    def __init__(self, calls: Optional[List[int]] = None):
        self._calls: List[int] = list(calls or [])

    def load(self) -> List[int]:
        return list(self._calls)

    def save(self, calls: List[int]) -> PersistenceResult:
        self._calls = list(calls)
        return PersistenceResult.PERSISTED


def _coerce_calls(raw) -> List[int]:
    if not isinstance(raw, dict):
        raise ValueError("rate limit document is not an object")
    calls = raw.get("calls") or []
    if not isinstance(calls, list):
        raise ValueError("'calls' is not a list")
    # bool is an int subclass; a stray true/false is not a timestamp.
    # json accepts Infinity and NaN, which have no integer value.
    return [
        int(ts) for ts in calls
        if isinstance(ts, (int, float)) and not isinstance(ts, bool) and math.isfinite(ts)
    ]


class JsonFileCallStore:
    """
    JSON file backed call history.

    Args:
        path: Location of the rate limit document
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()
        self._fallback: Optional[List[int]] = None
        self.last_result: Optional[PersistenceResult] = None

    @property
    def degraded(self) -> bool:
        return self.last_result is PersistenceResult.DEGRADED

    def load(self) -> List[int]:
        """Read stored timestamps; any failure yields an empty history."""
        if self._fallback is not None:
            return list(self._fallback)

        if not self.path.exists():
            return []

        try:
            with self.path.open("r", encoding="utf-8") as fh:
                return _coerce_calls(json.load(fh))
        except (OSError, ValueError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning(
                "Rate limit file unreadable, starting fresh",
                path=str(self.path),
                error=str(e),
            )
            return []

    def save(self, calls: List[int]) -> PersistenceResult:
        """Write timestamps; on failure keep them in memory for this process."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as fh:
                json.dump({"calls": list(calls)}, fh, indent=2)
        except OSError as e:
            logger.warning(
                "Rate limit file not writable, tracking in memory only",
                path=str(self.path),
                error=str(e),
            )
            self._fallback = list(calls)
            self.last_result = PersistenceResult.DEGRADED
            return self.last_result

        self._fallback = None
        self.last_result = PersistenceResult.PERSISTED
        return self.last_result
