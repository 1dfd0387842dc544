"""
SessionApi Protocol Definition.

This module defines the server contracts the session guard depends on.
HttpSessionApi talks to a live CMS; tests use in-memory fakes.

All methods raise sessionguard.errors.SessionGuardError subclasses on failure.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class SessionInfo:
    """Answer of the remaining-session-time query."""
    timeout: int
    csrf_token: Optional[str] = None


@dataclass(frozen=True)
class LoginResult:
    """Answer of a primary credential submission."""
    mfa: bool = False
    mfa_form: Optional[str] = None


@runtime_checkable
class SessionApi(Protocol):
    """Server endpoints used by the monitor and the re-authentication flow."""

    async def session_info(self, extend_session: bool) -> SessionInfo:
        """
        Query the remaining session time.

        Args:
            extend_session: When False the query must not renew the session.
        """
        ...

    async def login(self, login_name: str, password: str) -> LoginResult:
        """Submit primary credentials. Raises RequestRejected on bad credentials."""
        ...

    async def logout(self) -> Optional[str]:
        """End the session. Returns the URL to redirect to, if the server gave one."""
        ...

    async def verify_mfa(self, code: str) -> None:
        """Submit a secondary-factor code for a pending MFA challenge."""
        ...

    async def webauthn_options(self, login_name: str) -> Dict[str, Any]:
        """Fetch assertion options for a security-key login."""
        ...

    async def webauthn_login(self, login_name: str, credential: Dict[str, Any]) -> None:
        """Submit a signed security-key assertion."""
        ...
