"""
Timer slots for the session guard.

Each purpose (poll, forced login, warning countdown) owns exactly one slot,
and a slot owns at most one live asyncio task. Arming a slot always cancels
the task it already holds, so rapid state changes never leave duplicate
timers behind.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class TimerSlot:
    """A single re-armable timer backed by an asyncio task."""

    def __init__(self, name: str):
        self.name = name
        self.delay: Optional[float] = None
        self.repeating = False
        self._task: Optional[asyncio.Task] = None

    @property
    def is_armed(self) -> bool:
        return self._task is not None and not self._task.done()

    def arm(self, delay: float, callback: Callable[[], Any]) -> None:
        """Run callback once after delay seconds, replacing any pending timer."""
        self.cancel()
        self.delay = delay
        self.repeating = False

        async def fire():
            await asyncio.sleep(delay)
            # Detach first so the callback may re-arm this slot
            self._task = None
            await _invoke(self.name, callback)

        self._task = asyncio.create_task(fire())
        logger.debug(f"Timer '{self.name}' armed for {delay}s")

    def arm_interval(self, period: float, callback: Callable[[], Any]) -> None:
        """Run callback every period seconds until cancelled."""
        self.cancel()
        self.delay = period
        self.repeating = True

        async def tick():
            while True:
                await asyncio.sleep(period)
                await _invoke(self.name, callback)

        self._task = asyncio.create_task(tick())
        logger.debug(f"Timer '{self.name}' ticking every {period}s")

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self.delay = None
        self.repeating = False


async def _invoke(name: str, callback: Callable[[], Any]) -> None:
    try:
        result = callback()
        if asyncio.iscoroutine(result):
            await result
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.error(f"Error in timer '{name}': {e}")


class SessionTimers:
    """The three timer purposes of the session guard."""

    def __init__(self):
        self.poll = TimerSlot('poll')
        self.force_login = TimerSlot('force_login')
        self.countdown = TimerSlot('countdown')

    def cancel_all(self) -> None:
        self.poll.cancel()
        self.force_login.cancel()
        self.countdown.cancel()
