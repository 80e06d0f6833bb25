"""Tests for PeriodicTask and Countdown."""

import asyncio

import pytest

from nightfall.engine.timers import Countdown, PeriodicTask


TICK = 0.01


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll until predicate() is true or fail after timeout."""
    async def poll():
        while not predicate():
            await asyncio.sleep(TICK / 2)
    await asyncio.wait_for(poll(), timeout)


class TestPeriodicTask:
    """Tests for PeriodicTask."""

    @pytest.mark.asyncio
    async def test_ticks_until_stopped(self) -> None:
        ticks = []

        async def on_tick():
            ticks.append(1)

        task = PeriodicTask(TICK, on_tick)
        task.start()
        assert task.is_active
        await wait_until(lambda: len(ticks) >= 3)

        task.stop()
        assert not task.is_active
        count = len(ticks)
        await asyncio.sleep(TICK * 5)
        assert len(ticks) == count

    @pytest.mark.asyncio
    async def test_callback_returning_false_stops(self) -> None:
        ticks = []

        async def on_tick():
            ticks.append(1)
            return len(ticks) < 2

        task = PeriodicTask(TICK, on_tick)
        task.start()
        await wait_until(lambda: not task.is_active)
        assert len(ticks) == 2

    @pytest.mark.asyncio
    async def test_stop_from_inside_callback(self) -> None:
        ticks = []
        task: PeriodicTask

        async def on_tick():
            ticks.append(1)
            task.stop()
            return True

        task = PeriodicTask(TICK, on_tick)
        task.start()
        await wait_until(lambda: len(ticks) == 1)
        await asyncio.sleep(TICK * 5)
        assert len(ticks) == 1
        assert not task.is_active

    @pytest.mark.asyncio
    async def test_restart_replaces_previous_run(self) -> None:
        ticks = []

        async def on_tick():
            ticks.append(1)

        task = PeriodicTask(TICK * 5, on_tick)
        task.start()
        first = task.task
        task.start()
        await asyncio.sleep(0)
        assert first.cancelled() or first.done()
        task.stop()

    @pytest.mark.asyncio
    async def test_failing_callback_keeps_running(self) -> None:
        ticks = []

        async def on_tick():
            ticks.append(1)
            raise RuntimeError("boom")

        task = PeriodicTask(TICK, on_tick)
        task.start()
        await wait_until(lambda: len(ticks) >= 2)
        assert task.is_active
        task.stop()

    def test_stop_is_idempotent_without_start(self) -> None:
        task = PeriodicTask(TICK, None)
        task.stop()
        task.stop()
        assert not task.is_active


class TestCountdown:
    """Tests for Countdown."""

    @pytest.mark.asyncio
    async def test_expires_once(self) -> None:
        expired = []
        countdown = Countdown(time_unit=TICK)
        countdown.start(3, lambda: expired.append(1))

        assert countdown.remaining == 3
        await wait_until(lambda: expired)
        await asyncio.sleep(TICK * 3)

        assert expired == [1]
        assert countdown.remaining is None
        assert not countdown.is_active

    @pytest.mark.asyncio
    async def test_stop_prevents_expiry(self) -> None:
        expired = []
        countdown = Countdown(time_unit=TICK)
        countdown.start(3, lambda: expired.append(1))
        countdown.stop()
        countdown.stop()

        await asyncio.sleep(TICK * 6)
        assert expired == []
        assert countdown.remaining is None

    @pytest.mark.asyncio
    async def test_restart_resets_remaining(self) -> None:
        countdown = Countdown(time_unit=1.0)
        countdown.start(100, lambda: None)
        countdown.start(50, lambda: None)
        assert countdown.remaining == 50
        assert countdown.duration == 50
        countdown.stop()

    def test_formatting(self) -> None:
        countdown = Countdown()
        assert countdown.formatted_remaining() is None
        assert countdown.remaining_percentage() is None

        countdown.duration = 180
        countdown.remaining = 125
        assert countdown.formatted_remaining() == "02:05"
        assert countdown.remaining_percentage() == pytest.approx(125 / 180 * 100)
        assert countdown.remaining_percentage(250) == pytest.approx(50.0)

    def test_percentage_is_clamped(self) -> None:
        countdown = Countdown()
        countdown.duration = 10
        countdown.remaining = 20
        assert countdown.remaining_percentage() == 100.0
        assert countdown.remaining_percentage(0) == 0.0
