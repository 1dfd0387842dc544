"""
Exception taxonomy for SessionGuard.

Every network call made by the session guard raises one of these; callers
convert them into a user-visible outcome and never let them escape.
"""

from typing import Optional


class SessionGuardError(Exception):
    """Base class for all session guard failures."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message


class TransportError(SessionGuardError):
    """The server could not be reached (connection error, timeout, bad payload)."""


class RequestRejected(SessionGuardError):
    """The server answered with a non-2xx status."""

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ReauthError(SessionGuardError):
    """A secondary credential (security key, MFA code) was not accepted."""
