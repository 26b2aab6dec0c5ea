"""
Tests for the Debouncer.

Requires Python 3.11+.
"""

import asyncio
import threading
import time

import pytest
from structlog.testing import capture_logs

from watcher.debouncer import DEFAULT_QUIET_PERIOD_MS, Debouncer


class SettleCounter:
    """Callable that records settles and signals the first one."""

    def __init__(self) -> None:
        self.count = 0
        self.fired = threading.Event()

    def __call__(self) -> None:
        self.count += 1
        self.fired.set()


class TestDebouncer:
    """Test cases for Debouncer."""

    @pytest.fixture
    def counter(self) -> SettleCounter:
        return SettleCounter()

    def test_default_quiet_period(self):
        """Quiet period defaults to 300 ms."""
        assert DEFAULT_QUIET_PERIOD_MS == 300
        assert Debouncer().delay_ms == 300

    def test_burst_produces_single_settle(self, counter: SettleCounter):
        """Many rapid ticks fire the callback exactly once."""
        debouncer = Debouncer(delay_ms=100, callback=counter)

        for _ in range(10):
            debouncer.debounce()
            time.sleep(0.005)

        assert counter.fired.wait(2.0)
        time.sleep(0.25)

        assert counter.count == 1
        assert debouncer.pending_count == 0
        assert not debouncer.is_pending

    def test_tick_resets_countdown(self, counter: SettleCounter):
        """A tick inside the quiet period postpones the settle."""
        debouncer = Debouncer(delay_ms=300, callback=counter)

        debouncer.debounce()
        time.sleep(0.15)
        debouncer.debounce()
        time.sleep(0.15)

        # 300 ms since the first tick but only 150 ms since the last
        assert counter.count == 0
        assert counter.fired.wait(2.0)
        assert counter.count == 1

    def test_separate_bursts_settle_separately(self, counter: SettleCounter):
        """Bursts separated by more than the quiet period each settle."""
        debouncer = Debouncer(delay_ms=50, callback=counter)

        debouncer.debounce()
        assert counter.fired.wait(2.0)
        counter.fired.clear()

        debouncer.debounce()
        assert counter.fired.wait(2.0)

        assert counter.count == 2

    def test_cancel_drops_pending_ticks(self, counter: SettleCounter):
        """Cancelled ticks never fire."""
        debouncer = Debouncer(delay_ms=50, callback=counter)

        debouncer.debounce()
        debouncer.cancel()
        time.sleep(0.2)

        assert counter.count == 0
        assert debouncer.pending_count == 0

    def test_flush_fires_immediately(self, counter: SettleCounter):
        """Flush fires once and disarms the timer."""
        debouncer = Debouncer(delay_ms=1000, callback=counter)

        debouncer.debounce()
        assert debouncer.flush() is True
        assert counter.count == 1

        time.sleep(0.05)
        assert debouncer.flush() is False
        assert counter.count == 1

    def test_callback_error_is_contained(self):
        """A failing callback does not break later settles."""
        calls = []

        def failing_callback():
            calls.append(1)
            raise RuntimeError("Test error")

        debouncer = Debouncer(delay_ms=10, callback=failing_callback)
        debouncer.debounce()
        assert debouncer.flush() is True
        debouncer.debounce()
        assert debouncer.flush() is True

        assert calls == [1, 1]

    def test_set_callback_replaces_target(self, counter: SettleCounter):
        debouncer = Debouncer(delay_ms=10)
        debouncer.debounce()
        debouncer.flush()

        debouncer.set_callback(counter)
        debouncer.debounce()
        debouncer.flush()

        assert counter.count == 1

    @pytest.mark.asyncio
    async def test_async_callback_runs_on_event_loop(self):
        """Coroutine callbacks are scheduled on the configured loop."""
        loop = asyncio.get_running_loop()
        settled = asyncio.Event()
        seen_threads = []

        async def on_settle():
            seen_threads.append(threading.get_ident())
            settled.set()

        debouncer = Debouncer(delay_ms=20, callback=on_settle)
        debouncer.set_event_loop(loop)

        debouncer.debounce()
        debouncer.debounce()
        await asyncio.wait_for(settled.wait(), 2.0)

        assert seen_threads == [threading.get_ident()]

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            Debouncer(delay_ms=-5)

    @pytest.mark.asyncio
    async def test_async_callback_failure_is_logged(self):
        """Exceptions raised on the event loop are not lost."""
        started = asyncio.Event()

        async def on_settle():
            started.set()
            raise RuntimeError("boom")

        with capture_logs() as logs:
            debouncer = Debouncer(delay_ms=10, callback=on_settle)
            debouncer.set_event_loop(asyncio.get_running_loop())
            debouncer.debounce()
            assert debouncer.flush() is True

            await asyncio.wait_for(started.wait(), 2.0)
            await asyncio.sleep(0.05)

        failures = [entry for entry in logs if entry["event"] == "debounce_callback_failed"]
        assert failures and failures[0]["error"] == "boom"
