"""
Tests for the rolling window rate limiter and its stores.
"""

import json

import pytest

from freightos_core.rate_limit import (
    InMemoryCallStore,
    JsonFileCallStore,
    PersistenceResult,
    RollingWindowLimiter,
)


class TestPruning:
    """Tests for window pruning."""

    def test_prunes_exactly_stale_entries(self, clock, window_ms):
        """Entries at or beyond the window edge go, the rest stay."""
        now = clock.now_ms
        inside = [now - 1, now - window_ms + 1, now - 10_000]
        outside = [now - window_ms, now - window_ms - 1, now - 5 * window_ms]
        limiter = RollingWindowLimiter(InMemoryCallStore(), clock=clock)

        kept = limiter.prune(outside[:1] + inside[:2] + outside[1:] + inside[2:], now)

        assert sorted(kept) == sorted(inside)

    def test_pruning_ignores_order(self, clock, window_ms):
        """Shuffled input keeps the same set."""
        now = clock.now_ms
        calls = [now - window_ms - 5, now - 3, now - 2 * window_ms, now - 100]
        limiter = RollingWindowLimiter(InMemoryCallStore(), clock=clock)

        assert set(limiter.prune(calls, now)) == set(limiter.prune(list(reversed(calls)), now))
        assert set(limiter.prune(calls, now)) == {now - 3, now - 100}

    def test_calls_age_out(self, clock):
        """A recorded call stops counting once the hour passes."""
        limiter = RollingWindowLimiter(InMemoryCallStore(), clock=clock)
        limiter.record_call()
        assert limiter.current_status().calls_in_window == 1

        clock.advance(3600)

        assert limiter.current_status().calls_in_window == 0

    def test_status_read_writes_back_pruned_history(self, clock, window_ms):
        """Stale entries are dropped from storage on read."""
        now = clock.now_ms
        store = InMemoryCallStore([now - window_ms - 1, now - 10])
        limiter = RollingWindowLimiter(store, clock=clock)

        limiter.current_status()

        assert store.load() == [now - 10]


class TestStatus:
    """Tests for computed quota status."""

    def test_empty_history(self, limiter):
        """No calls means full quota and no warning."""
        status = limiter.current_status()

        assert status.calls_in_window == 0
        assert status.limit == 100
        assert status.remaining == 100
        assert status.percent_used == 0
        assert status.resets_at is None
        assert status.warning is None
        assert status.level == "OK"

    def test_remaining_never_negative(self, clock):
        """Over-limit histories clamp remaining at zero."""
        store = InMemoryCallStore([clock.now_ms - i for i in range(130)])
        status = RollingWindowLimiter(store, clock=clock).current_status()

        assert status.calls_in_window == 130
        assert status.remaining == 0
        assert status.percent_used == 130

    @pytest.mark.parametrize("limit, count, expected", [(8, 1, 13), (200, 1, 1), (200, 5, 3), (3, 1, 33)])
    def test_percent_rounds_half_up(self, clock, limit, count, expected):
        store = InMemoryCallStore([clock.now_ms - i for i in range(count)])
        status = RollingWindowLimiter(store, limit=limit, clock=clock).current_status()

        assert status.percent_used == expected

    @pytest.mark.parametrize("count", [0, 1, 50, 79])
    def test_no_warning_below_threshold(self, clock, count):
        store = InMemoryCallStore([clock.now_ms - i for i in range(count)])
        assert RollingWindowLimiter(store, clock=clock).current_status().warning is None

    @pytest.mark.parametrize("count", [80, 85, 99])
    def test_approaching_warning(self, clock, count):
        """80% usage attaches the approaching-limit warning."""
        store = InMemoryCallStore([clock.now_ms - i for i in range(count)])
        status = RollingWindowLimiter(store, clock=clock).current_status()

        assert status.warning.startswith("Rate limit warning:")
        assert f"{count}/100" in status.warning
        assert status.resets_at is None

    def test_warning_text_at_threshold(self, clock):
        store = InMemoryCallStore([clock.now_ms - i for i in range(80)])
        status = RollingWindowLimiter(store, clock=clock).current_status()

        assert status.warning == "Rate limit warning: 80/100 calls used (80%). 20 remaining this hour."
        assert status.level == "LOW"

    @pytest.mark.parametrize("count", [100, 101])
    def test_reached_warning(self, clock, count):
        """Full usage switches to the reached variant."""
        store = InMemoryCallStore([clock.now_ms - i for i in range(count)])
        status = RollingWindowLimiter(store, clock=clock).current_status()

        assert status.warning.startswith("RATE LIMIT REACHED:")
        assert status.level == "EXHAUSTED"

    def test_resets_at_is_oldest_call_plus_window(self, clock, window_ms):
        """Reset time is when the oldest call leaves the window."""
        oldest = clock.now_ms - 30 * 60 * 1000
        calls = [oldest] + [clock.now_ms - i for i in range(99)]
        status = RollingWindowLimiter(InMemoryCallStore(calls), clock=clock).current_status()

        assert status.resets_at == oldest + window_ms
        assert status.resets_at_datetime is not None


class TestAcquire:
    """Tests for try_acquire / record_call."""

    def test_allowed_until_limit(self, clock):
        limiter = RollingWindowLimiter(InMemoryCallStore(), limit=3, clock=clock)

        for _ in range(3):
            assert limiter.try_acquire().allowed is True
            limiter.record_call()

        result = limiter.try_acquire()
        assert result.allowed is False
        assert result.status.remaining == 0

    def test_try_acquire_does_not_record(self, clock):
        store = InMemoryCallStore()
        limiter = RollingWindowLimiter(store, clock=clock)

        limiter.try_acquire()

        assert store.load() == []

    def test_record_call_appends_now(self, limiter, clock, stored_calls):
        """record_call persists the pruned history plus the current instant."""
        assert limiter.record_call() is PersistenceResult.PERSISTED
        assert stored_calls() == [clock.now_ms]
        assert limiter.last_persistence is PersistenceResult.PERSISTED


class TestJsonFileCallStore:
    """Tests for file persistence and its failure modes."""

    def test_missing_file_is_empty(self, rate_limit_file):
        assert JsonFileCallStore(rate_limit_file).load() == []

    @pytest.mark.parametrize("content", [
        "not json{",
        "[1, 2, 3]",
        '{"calls": "nope"}',
        "",
        '{"calls": [Infinity]}',
        '{"calls": [-Infinity, NaN]}',
    ])
    def test_corrupted_file_is_empty(self, rate_limit_file, limiter, content):
        """Unparseable state degrades to zero recorded calls."""
        rate_limit_file.parent.mkdir(parents=True)
        rate_limit_file.write_text(content)

        assert limiter.current_status().calls_in_window == 0

    def test_non_numeric_entries_dropped(self, rate_limit_file, clock):
        rate_limit_file.parent.mkdir(parents=True)
        rate_limit_file.write_text(json.dumps({"calls": [clock.now_ms, "x", None, True]}))

        assert JsonFileCallStore(rate_limit_file).load() == [clock.now_ms]

    def test_file_shape(self, limiter, rate_limit_file):
        limiter.record_call()

        data = json.loads(rate_limit_file.read_text())
        assert list(data.keys()) == ["calls"]
        assert isinstance(data["calls"][0], int)

    def test_unwritable_location_degrades_to_memory(self, tmp_path, clock):
        """Write failures are reported, not raised, and counting continues."""
        blocker = tmp_path / "blocker"
        blocker.write_text("a file where a directory should be")
        store = JsonFileCallStore(blocker / "ratelimit.json")
        limiter = RollingWindowLimiter(store, clock=clock)

        assert limiter.record_call() is PersistenceResult.DEGRADED
        assert store.degraded is True

        limiter.record_call()
        assert limiter.current_status().calls_in_window == 2
