"""
Secondary-credential capabilities.

The re-authentication flow only knows these protocols; BrowserWebAuthn and
ApiMfa are the live implementations, tests substitute fakes.
"""

import logging
from typing import Protocol, runtime_checkable

from sessionguard.auth.identity import Identity
from sessionguard.session.api import SessionApi

logger = logging.getLogger(__name__)

_WEBAUTHN_PROBE_JS = '!!(window.PublicKeyCredential && navigator.credentials && navigator.credentials.get)'


@runtime_checkable
class WebAuthnCapability(Protocol):
    async def start_login(self, login_name: str) -> None:
        """Run a security-key assertion. Raises a SessionGuardError on failure."""
        ...


@runtime_checkable
class MfaCapability(Protocol):
    async def submit_code(self, code: str) -> None:
        """Answer a pending MFA challenge. Raises a SessionGuardError on failure."""
        ...


class ApiMfa:
    """MFA continuation through the verify endpoint of a SessionApi."""

    def __init__(self, api: SessionApi):
        self._api = api

    async def submit_code(self, code: str) -> None:
        await self._api.verify_mfa(code)


def security_key_available(identity: Identity, platform_supported: bool) -> bool:
    """A security key can be offered only to MFA identities with keys, on capable platforms."""
    return identity.require_mfa and identity.has_security_keys and platform_supported


async def browser_supports_webauthn(client) -> bool:
    """
    Ask a connected NiceGUI client whether the browser can do WebAuthn.

    Any failure to get an answer (disconnected client, timeout) counts as no support.
    """
    try:
        result = await client.run_javascript(_WEBAUTHN_PROBE_JS, timeout=2.0)
    except Exception as e:
        logger.info(f"WebAuthn capability probe failed: {e}")
        return False
    return bool(result)
