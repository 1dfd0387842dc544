"""
SessionGuard - session expiry and re-authentication for the CMS control panel.

Warns before the server-side session runs out, lets the user renew it,
and collects a password, security key or MFA code in place when it has
ended, without reloading the page.
"""

from sessionguard.manager import AuthManager
from sessionguard.auth.identity import Identity
from sessionguard.config import Settings, get_settings

__all__ = ['AuthManager', 'Identity', 'Settings', 'get_settings']
