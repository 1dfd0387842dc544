"""
Session Monitor for SessionGuard.

Polls the remaining session time and decides whether to stay idle, warn the
user, or force re-authentication. The monitor never touches UI itself; it
emits events that the ModalPresenter (or anything else) subscribes to.

Events:
- 'show_warning': remaining time dropped into the warning window
- 'show_login': the session has expired (or its state is unknown)
- 'resubmit_login': expiry confirmed while a login submission was waiting
- 'hide_modals': the session is healthy again
- 'remaining_updated': every update, with the new remaining seconds
- 'logged_out': after logout, with the redirect URL
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Set

from sessionguard.constants import UNKNOWN_REMAINING_TIME
from sessionguard.errors import SessionGuardError
from sessionguard.session.api import SessionApi
from sessionguard.session.state import Decision, SessionState, decide
from sessionguard.session.timers import SessionTimers

logger = logging.getLogger(__name__)

EVENTS = (
    'show_warning',
    'show_login',
    'resubmit_login',
    'hide_modals',
    'remaining_updated',
    'logged_out',
)


class SessionMonitor:
    """
    Owns the session poll loop.

    Scheduling rules:
    - at most one outstanding poll; re-arming cancels the previous one
    - a forced-login timer is armed when the session will die before the next poll
    - network races are last-write-wins; in-flight requests are never cancelled
    """

    def __init__(
        self,
        api: SessionApi,
        state: Optional[SessionState] = None,
        timers: Optional[SessionTimers] = None,
    ):
        self._api = api
        self._state = state or SessionState()
        self._timers = timers or SessionTimers()
        self._callbacks: Dict[str, List[Callable]] = {event: [] for event in EVENTS}
        self._listener_tasks: Set[asyncio.Task] = set()
        self._stopped = False

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def timers(self) -> SessionTimers:
        return self._timers

    @property
    def remaining_seconds(self) -> Optional[int]:
        return self._state.remaining_seconds

    # --- Events ---

    def on(self, event: str, callback: Callable) -> None:
        """Register a callback for one of EVENTS."""
        if event not in self._callbacks:
            raise ValueError(f"Unknown event: {event}")
        self._callbacks[event].append(callback)

    def off(self, event: str, callback: Callable) -> None:
        """Remove a callback for an event type."""
        if event in self._callbacks and callback in self._callbacks[event]:
            self._callbacks[event].remove(callback)

    def _emit(self, event: str, data: Any = None) -> None:
        """Emit an event to all registered callbacks."""
        for callback in list(self._callbacks.get(event, [])):
            try:
                result = callback(data)
                # Handle async callbacks
                if asyncio.iscoroutine(result):
                    task = asyncio.create_task(result)
                    self._listener_tasks.add(task)
                    task.add_done_callback(self._listener_done)
            except Exception as e:
                logger.error(f"Error in callback for {event}: {e}")

    def _listener_done(self, task: asyncio.Task) -> None:
        self._listener_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Error in async listener: {task.exception()}")

    async def drain(self) -> None:
        """Wait until every async listener spawned so far (and by them) has finished."""
        while True:
            pending = [task for task in self._listener_tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # --- Lifecycle ---

    def start(self, username: Optional[str], remaining_session_time: Optional[int] = None) -> None:
        """
        Begin monitoring for a logged-in identity.

        Uses the remaining time rendered with the page so the first decision
        needs no network round-trip. Without a cached value the first poll is
        scheduled immediately instead.
        """
        if not username:
            logger.debug("No identity on this page, session monitor idle")
            return

        self._stopped = False

        if remaining_session_time is None:
            self._timers.poll.arm(0, self.refresh)
            return

        self.update_remaining_seconds(remaining_session_time)

    @property
    def stopped(self) -> bool:
        return self._stopped

    def stop(self) -> None:
        """Stop polling for good. Answers to requests already in flight are dropped."""
        self._stopped = True
        self._timers.cancel_all()

    async def refresh(self, extend: bool = False) -> None:
        """
        Ask the server how long the session has left.

        A failed query is treated as an expired session.
        """
        try:
            info = await self._api.session_info(extend)
        except SessionGuardError as e:
            if self._stopped:
                return
            logger.warning(f"Session info unavailable, assuming expired: {e}")
            self.update_remaining_seconds(UNKNOWN_REMAINING_TIME)
            return

        if self._stopped:
            logger.debug("Session info arrived after stop, ignored")
            return

        self.update_remaining_seconds(info.timeout)
        self._state.submit_login_if_logged_out = False

    async def renew(self) -> None:
        """Extend the session ("keep me signed in")."""
        await self.refresh(extend=True)

    async def logout(self) -> None:
        """End the session on the server and announce the redirect target."""
        self.stop()
        try:
            redirect = await self._api.logout()
        except SessionGuardError as e:
            logger.warning(f"Logout request failed, resuming session checks: {e}")
            self._stopped = False
            self._timers.poll.arm(0, self.refresh)
            return
        self._emit('logged_out', redirect or '')

    # --- Decision ---

    def update_remaining_seconds(self, remaining_seconds: int) -> Optional[Decision]:
        """Record a remaining time and apply the resulting transition. No-op once stopped."""
        if self._stopped:
            return None

        remaining_seconds = int(remaining_seconds)
        decision = decide(self._state, remaining_seconds)
        self._state.remaining_seconds = remaining_seconds
        logger.debug(f"Remaining session time {remaining_seconds}s -> {decision.mode.value}")

        if decision.show_warning:
            self._emit('show_warning', remaining_seconds)

        if decision.force_login_in is not None:
            self._timers.force_login.arm(decision.force_login_in, self._force_login)

        if decision.resubmit_login:
            self._emit('resubmit_login')
        elif decision.show_login:
            self._emit('show_login')

        if decision.hide_modals:
            self._timers.force_login.cancel()
            self._emit('hide_modals')

        self._timers.poll.arm(decision.next_poll_in, self.refresh)
        self._emit('remaining_updated', remaining_seconds)
        return decision

    def _force_login(self) -> None:
        if self._stopped:
            return
        logger.info("Session expired between polls, forcing login")
        self._emit('show_login')
