"""
Session monitoring for SessionGuard.

Polls the server-side session countdown and decides when to warn
and when to ask the user to sign in again.
"""

from sessionguard.session.state import (
    SessionState,
    Mode,
    ModalKind,
    Decision,
    decide,
    remember_remaining,
    cached_remaining,
)
from sessionguard.session.timers import TimerSlot, SessionTimers
from sessionguard.session.api import SessionApi, SessionInfo, LoginResult
from sessionguard.session.monitor import SessionMonitor

__all__ = [
    'SessionState',
    'Mode',
    'ModalKind',
    'Decision',
    'decide',
    'remember_remaining',
    'cached_remaining',
    'TimerSlot',
    'SessionTimers',
    'SessionApi',
    'SessionInfo',
    'LoginResult',
    'SessionMonitor',
]
