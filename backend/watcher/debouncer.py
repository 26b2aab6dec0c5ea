"""
DesignSync Debouncer.

Collapses bursts of file change ticks into one settle signal.
Requires Python 3.11+.
"""

import asyncio
import inspect
import threading
from concurrent.futures import Future
from collections.abc import Callable
from typing import Any

from utils.logger import LoggerMixin

DEFAULT_QUIET_PERIOD_MS = 300


class Debouncer(LoggerMixin):
    """
    Debounces rapid change ticks.

    Every tick restarts the countdown; the callback fires once the
    quiet period elapses with no further ticks. Editors that write a
    file in several steps therefore produce a single settle.
    """

    def __init__(
        self,
        delay_ms: int = DEFAULT_QUIET_PERIOD_MS,
        callback: Callable[[], Any] | None = None,
    ) -> None:
        """
        Initialize the debouncer.

        Args:
            delay_ms: Quiet period in milliseconds
            callback: Function (sync or async) to call on settle
        """
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be non-negative, got {delay_ms}")
        self._delay = delay_ms / 1000.0
        self._callback = callback
        self._ticks = 0
        self._generation = 0
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None

    def set_callback(self, callback: Callable[[], Any]) -> None:
        """Set or update the callback function."""
        self._callback = callback

    def set_event_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Set the event loop for async callbacks."""
        self._loop = loop

    @property
    def delay_ms(self) -> int:
        return round(self._delay * 1000)

    def debounce(self) -> None:
        """
        Register a change tick and restart the countdown.

        The callback will be triggered after delay_ms milliseconds
        of no new ticks.
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

            self._ticks += 1
            self._generation += 1

            self._timer = threading.Timer(self._delay, self._settle, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()

    def _settle(self, generation: int) -> None:
        """Timer expiry: fire the callback for the absorbed ticks."""
        with self._lock:
            # A tick arrived while this timer was already firing
            if generation != self._generation or self._ticks == 0:
                return
            ticks = self._ticks
            self._ticks = 0
            self._timer = None

        self.log.debug("debounce_settled", ticks=ticks)
        self._dispatch()

    def _dispatch(self) -> None:
        if self._callback is None:
            return

        try:
            if inspect.iscoroutinefunction(self._callback):
                if self._loop is not None:
                    future = asyncio.run_coroutine_threadsafe(self._callback(), self._loop)
                    future.add_done_callback(self._log_callback_failure)
                else:
                    # No event loop set, run in a fresh one
                    asyncio.run(self._callback())
            else:
                self._callback()
        except Exception as e:
            self.log.error("debounce_callback_failed", error=str(e))

    def _log_callback_failure(self, future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            self.log.error("debounce_callback_failed", error=str(error) or type(error).__name__)

    def flush(self) -> bool:
        """
        Fire immediately if ticks are pending.

        Returns:
            True if a settle was fired
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._generation += 1
            ticks = self._ticks
            self._ticks = 0

        if ticks:
            self.log.debug("debounce_flushed", ticks=ticks)
            self._dispatch()
        return bool(ticks)

    def cancel(self) -> None:
        """Drop pending ticks without firing."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._generation += 1
            self._ticks = 0

    @property
    def pending_count(self) -> int:
        """Number of ticks absorbed since the last settle."""
        return self._ticks

    @property
    def is_pending(self) -> bool:
        """Whether a settle is scheduled."""
        return self._ticks > 0
