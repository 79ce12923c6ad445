"""
Question Delivery Scheduler.

Asyncio delay timer that fires a callback at random intervals in
[min_interval_ms, max_interval_ms].

- A tick is skipped while a question is still active (``is_busy``).
- ``pause()`` cancels the pending timer and remembers the remaining delay.
- ``resume()`` restarts the timer with that remaining delay, or with a
  fresh random interval when nothing was pending.
"""

from __future__ import annotations

import asyncio
import inspect
import random
import time
from typing import Any, Callable

from loguru import logger

DueCallback = Callable[[], Any]


class QuestionScheduler:
    """
    Random-interval timer for question delivery.

    Must be started from inside a running event loop.
    """

    def __init__(
        self,
        on_due: DueCallback,
        min_interval_ms: int = 120_000,
        max_interval_ms: int = 600_000,
        is_busy: Callable[[], bool] | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the scheduler.

        Args:
            on_due: Called (or awaited) when a question should be shown
            min_interval_ms: Shortest delay
            max_interval_ms: Longest delay (swapped with min if smaller)
            is_busy: Returns True while a question is active
            rng: Random source for interval draws
            clock: Monotonic clock in seconds
        """
        self.on_due = on_due
        self.min_interval_ms = min(min_interval_ms, max_interval_ms)
        self.max_interval_ms = max(min_interval_ms, max_interval_ms)
        self.is_busy = is_busy or (lambda: False)
        self.rng = rng or random.Random()
        self.clock = clock

        self._handle: asyncio.TimerHandle | None = None
        self._due_at: float | None = None
        self._remaining_ms: float | None = None
        self._tasks: set[asyncio.Task] = set()
        self.paused = False
        self.next_delay_ms: float | None = None
        self.fired = 0
        self.skipped = 0

    @property
    def is_scheduled(self) -> bool:
        return self._handle is not None

    def random_interval_ms(self) -> int:
        return self.rng.randint(self.min_interval_ms, self.max_interval_ms)

    def remaining_ms(self) -> float | None:
        """Delay left on the pending timer, or the remembered delay while paused."""
        if self.paused:
            return self._remaining_ms
        if self._due_at is None:
            return None
        return max(0.0, (self._due_at - self.clock()) * 1000)

    # -------------------------------------------------------------------------
    # Timer control
    # -------------------------------------------------------------------------

    def start(self) -> None:
        self.paused = False
        self.schedule_next()

    def schedule_next(self, delay_ms: float | None = None) -> None:
        """Replace any pending timer with one firing after ``delay_ms`` (random if None)."""
        self._cancel_timer()
        delay = self.random_interval_ms() if delay_ms is None else max(0.0, delay_ms)
        loop = asyncio.get_running_loop()
        self.next_delay_ms = delay
        self._due_at = self.clock() + delay / 1000
        self._handle = loop.call_later(delay / 1000, self._fire)
        logger.debug(f"Next question in {delay / 1000:.1f}s")

    def pause(self) -> None:
        if self.paused:
            return
        self._remaining_ms = self.remaining_ms() if self._handle is not None else None
        self._cancel_timer()
        self.paused = True
        logger.debug(f"Scheduler paused (remaining={self._remaining_ms})")

    def resume(self) -> None:
        if not self.paused:
            return
        self.paused = False
        remaining = self._remaining_ms
        self._remaining_ms = None
        if remaining is not None and remaining > 0:
            self.schedule_next(remaining)
        else:
            self.schedule_next()

    def stop(self) -> None:
        self._cancel_timer()
        self._remaining_ms = None
        for task in list(self._tasks):
            task.cancel()

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._due_at = None

    # -------------------------------------------------------------------------
    # Firing
    # -------------------------------------------------------------------------

    def _fire(self) -> None:
        self._handle = None
        self._due_at = None
        if self.paused:
            return

        if self.is_busy():
            self.skipped += 1
            logger.debug("Question still active, skipping this tick")
        else:
            self.fired += 1
            result = self.on_due()
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._tasks.add(task)
                task.add_done_callback(self._task_done)

        self.schedule_next()

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Scheduled delivery failed: {error}")
