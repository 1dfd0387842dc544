import asyncio
import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from sessionguard.session.timers import TimerSlot, SessionTimers


async def test_one_shot_fires_once():
    slot = TimerSlot('test')
    fired = []
    slot.arm(0.01, lambda: fired.append(1))

    await asyncio.sleep(0.05)

    assert fired == [1]
    assert not slot.is_armed


async def test_rearm_cancels_previous():
    slot = TimerSlot('test')
    fired = []
    slot.arm(0.01, lambda: fired.append('first'))
    slot.arm(0.02, lambda: fired.append('second'))

    await asyncio.sleep(0.05)

    assert fired == ['second']


async def test_async_callback_awaited():
    slot = TimerSlot('test')
    fired = []

    async def callback():
        fired.append('async')

    slot.arm(0, callback)
    await asyncio.sleep(0.01)

    assert fired == ['async']


async def test_callback_may_rearm_own_slot():
    slot = TimerSlot('test')
    fired = []

    def callback():
        fired.append(1)
        if len(fired) < 3:
            slot.arm(0, callback)

    slot.arm(0, callback)
    await asyncio.sleep(0.05)

    assert fired == [1, 1, 1]


async def test_interval_until_cancelled():
    slot = TimerSlot('tick')
    ticks = []

    def tick():
        ticks.append(1)
        if len(ticks) == 3:
            slot.cancel()

    slot.arm_interval(0.001, tick)
    await asyncio.sleep(0.1)

    assert ticks == [1, 1, 1]
    assert not slot.is_armed


async def test_failing_callback_is_contained():
    slot = TimerSlot('test')
    slot.arm(0, lambda: 1 / 0)
    await asyncio.sleep(0.01)
    assert not slot.is_armed


async def test_cancel_all():
    timers = SessionTimers()
    timers.poll.arm(10, lambda: None)
    timers.force_login.arm(10, lambda: None)
    timers.countdown.arm_interval(1, lambda: None)

    timers.cancel_all()

    assert not timers.poll.is_armed
    assert not timers.force_login.is_armed
    assert not timers.countdown.is_armed
    assert timers.poll.delay is None
