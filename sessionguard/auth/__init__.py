"""
Re-authentication for SessionGuard.

Password, security-key and MFA-continuation logins against the CMS,
submitted from the login modal without a page reload.
"""

from sessionguard.auth.identity import Identity
from sessionguard.auth.reauth import ReauthFlow, ReauthAttempt, ReauthMethod
from sessionguard.auth.capabilities import (
    WebAuthnCapability,
    MfaCapability,
    ApiMfa,
    security_key_available,
    browser_supports_webauthn,
)

__all__ = [
    'Identity',
    'ReauthFlow',
    'ReauthAttempt',
    'ReauthMethod',
    'WebAuthnCapability',
    'MfaCapability',
    'ApiMfa',
    'security_key_available',
    'browser_supports_webauthn',
]
