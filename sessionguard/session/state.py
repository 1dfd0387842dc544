"""
Session State - single source of truth for the session guard.

The remaining session time is server-authoritative. The mode is never
stored; it is derived from remaining_seconds on every read so it cannot
drift from the last server answer.

decide() is the whole policy: given the state and a fresh remaining time it
returns the Decision the monitor must apply. It has no side effects.

remember_remaining()/cached_remaining() carry the last known remaining time
across page loads, so start() can decide without a network round-trip.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from sessionguard.constants import CHECK_INTERVAL, MIN_SAFE_SESSION_TIME


class Mode(Enum):
    IDLE = "idle"
    WARNING = "warning"
    EXPIRED = "expired"


class ModalKind(Enum):
    """Which modal is visible. One value, so two modals can never be flagged."""
    NONE = "none"
    WARNING = "warning"
    LOGIN = "login"


def mode_for(remaining_seconds: Optional[int], warning_threshold: int) -> Mode:
    """Classify a remaining time. None (not checked yet) counts as idle."""
    if remaining_seconds is None or remaining_seconds >= warning_threshold:
        return Mode.IDLE
    if remaining_seconds > 0:
        return Mode.WARNING
    return Mode.EXPIRED


@dataclass
class SessionState:
    """Mutable per-page session state shared by monitor, presenter and flow."""
    remaining_seconds: Optional[int] = None
    warning_threshold: int = MIN_SAFE_SESSION_TIME
    poll_interval: int = CHECK_INTERVAL
    modal: ModalKind = ModalKind.NONE
    submit_login_if_logged_out: bool = False

    @property
    def mode(self) -> Mode:
        return mode_for(self.remaining_seconds, self.warning_threshold)

    @property
    def showing_warning(self) -> bool:
        return self.modal is ModalKind.WARNING

    @property
    def showing_login(self) -> bool:
        return self.modal is ModalKind.LOGIN


@dataclass(frozen=True)
class Decision:
    """What to do after a remaining-time update."""
    mode: Mode
    next_poll_in: int
    show_warning: bool = False
    show_login: bool = False
    resubmit_login: bool = False
    hide_modals: bool = False
    force_login_in: Optional[int] = None


def next_poll_delay(remaining_seconds: int, warning_threshold: int, poll_interval: int) -> int:
    """
    Delay before the next passive poll while the session is healthy.

    Polls early when the warning boundary would be crossed before the
    regular interval, so the warning shows within a second of the crossing.
    """
    if remaining_seconds < warning_threshold + poll_interval:
        return max(min(poll_interval, remaining_seconds - warning_threshold + 1), 1)
    return poll_interval


def decide(state: SessionState, remaining_seconds: int) -> Decision:
    """Compute the transition for a new remaining time against the current state."""
    threshold = state.warning_threshold
    interval = state.poll_interval
    mode = mode_for(remaining_seconds, threshold)

    if mode is Mode.EXPIRED:
        if state.showing_login:
            return Decision(
                mode=mode,
                next_poll_in=interval,
                resubmit_login=state.submit_login_if_logged_out,
            )
        return Decision(mode=mode, next_poll_in=interval, show_login=True)

    if mode is Mode.WARNING:
        return Decision(
            mode=mode,
            next_poll_in=interval,
            show_warning=not state.showing_warning,
            force_login_in=remaining_seconds if remaining_seconds < interval else None,
        )

    return Decision(
        mode=mode,
        next_poll_in=next_poll_delay(remaining_seconds, threshold, interval),
        hide_modals=True,
    )


def remember_remaining(remaining_seconds: int, now: Optional[float] = None) -> Dict[str, Any]:
    """Storage entry for a remaining time, stamped with when it was observed."""
    return {
        'seconds': int(remaining_seconds),
        'at': time.time() if now is None else now,
    }


def cached_remaining(entry: Any, max_age: float, now: Optional[float] = None) -> Optional[int]:
    """
    Remaining time from a stored entry, aged by the time since it was stored.

    Returns None (poll the server first) when the entry is missing, malformed,
    older than max_age, or does not describe a live session.
    """
    if not isinstance(entry, dict):
        return None
    try:
        seconds = int(entry['seconds'])
        stored_at = float(entry['at'])
    except (KeyError, TypeError, ValueError):
        return None

    age = (time.time() if now is None else now) - stored_at
    if age < 0 or age > max_age:
        return None

    remaining = seconds - int(age)
    if remaining <= 0:
        return None
    return remaining
