"""Cancellable periodic tasks used for the day countdown and the discussion loop.

Both timers run on the asyncio event loop. Starting a timer always cancels
the previous run of the same timer, and stop() is safe to call at any time,
including from inside the timer's own callback.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional


logger = logging.getLogger(__name__)


class PeriodicTask:
    """Runs an async callback every `interval` seconds until stopped.

    The callback may return False to stop the task from inside; any other
    return value keeps it running.

    Usage:
        task = PeriodicTask(15.0, on_tick, name="discussion")
        task.start()
        ...
        task.stop()
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], Awaitable[Optional[bool]]],
        name: str = "periodic",
    ):
        self.interval = interval
        self.name = name
        self._callback = callback
        self._task: Optional[asyncio.Task] = None
        # Bumped on every start/stop so a superseded loop never runs another tick
        self._generation = 0

    @property
    def is_active(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def task(self) -> Optional[asyncio.Task]:
        """The running asyncio task, if any."""
        return self._task

    def start(self) -> None:
        """Start ticking, cancelling any previous run.

        Must be called from within a running event loop.
        """
        self.stop()
        generation = self._generation
        self._task = asyncio.get_running_loop().create_task(
            self._run(generation), name=f"nightfall-{self.name}"
        )

    def stop(self) -> None:
        """Stop ticking. Idempotent."""
        self._generation += 1
        task, self._task = self._task, None
        if task is None or task.done():
            return
        if task is asyncio.current_task():
            # Stopping from inside the callback: the loop sees the new
            # generation and exits once the callback returns.
            return
        task.cancel()

    async def _run(self, generation: int) -> None:
        try:
            while generation == self._generation:
                await asyncio.sleep(self.interval)
                if generation != self._generation:
                    break
                try:
                    keep_going = await self._callback()
                except asyncio.CancelledError:
                    raise
                except Exception:
                    logger.exception("%s tick failed", self.name)
                    continue
                if keep_going is False:
                    break
        finally:
            if generation == self._generation:
                self._task = None


class Countdown:
    """Day countdown measured in whole time units.

    Calls on_expire (synchronously) once the remaining time reaches zero.
    """

    def __init__(self, time_unit: float = 1.0):
        self.time_unit = time_unit
        self.duration: Optional[int] = None
        self.remaining: Optional[int] = None
        self._on_expire: Optional[Callable[[], None]] = None
        self._task = PeriodicTask(time_unit, self._tick, name="countdown")

    @property
    def is_active(self) -> bool:
        return self._task.is_active

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task.task

    def start(self, duration: int, on_expire: Callable[[], None]) -> None:
        """Start a new countdown, cancelling any running one.

        Args:
            duration: Length in time units.
            on_expire: Called once when the countdown reaches zero.
        """
        self.stop()
        self.duration = duration
        self.remaining = duration
        self._on_expire = on_expire
        self._task.start()

    def stop(self) -> None:
        self._task.stop()
        self.remaining = None
        self._on_expire = None

    async def _tick(self) -> bool:
        if self.remaining is None:
            return False

        self.remaining -= 1
        if self.remaining > 0:
            return True

        on_expire = self._on_expire
        self.stop()
        if on_expire:
            on_expire()
        return False

    def formatted_remaining(self) -> Optional[str]:
        """Remaining time as MM:SS, or None if no countdown is running."""
        if self.remaining is None:
            return None
        minutes, seconds = divmod(max(self.remaining, 0), 60)
        return f"{minutes:02d}:{seconds:02d}"

    def remaining_percentage(self, total_duration: Optional[int] = None) -> Optional[float]:
        """Percentage (0-100) of time remaining, or None if not running."""
        if self.remaining is None:
            return None
        total = total_duration if total_duration is not None else self.duration
        if not total:
            return 0.0
        return max(0.0, min(100.0, self.remaining / total * 100))
