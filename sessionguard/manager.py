"""
AuthManager - the page-level shell of the session guard.

One AuthManager is created per page (per NiceGUI client). It constructs the
SessionMonitor, the ModalPresenter and the ReauthFlow, and subscribes the
presenter to the monitor's events. Nothing here is global.
"""

import logging
from typing import Callable, Optional

from sessionguard.auth.capabilities import MfaCapability, WebAuthnCapability, ApiMfa
from sessionguard.auth.identity import Identity
from sessionguard.auth.reauth import ReauthFlow
from sessionguard.config import Settings
from sessionguard.session.api import SessionApi
from sessionguard.session.monitor import SessionMonitor
from sessionguard.session.state import SessionState
from sessionguard.ui.presenter import ModalPresenter, ModalView

logger = logging.getLogger(__name__)


class AuthManager:
    """Owns the session guard components for one page."""

    def __init__(
        self,
        api: SessionApi,
        view: ModalView,
        identity: Identity,
        settings: Optional[Settings] = None,
        supports_security_key: Callable[[], bool] = lambda: False,
        webauthn: Optional[WebAuthnCapability] = None,
        mfa: Optional[MfaCapability] = None,
    ):
        settings = settings or Settings()
        self.identity = identity
        self.settings = settings

        self.monitor = SessionMonitor(api, state=SessionState(
            warning_threshold=settings.min_safe_session_time,
            poll_interval=settings.check_interval,
        ))
        self.presenter = ModalPresenter(
            view,
            self.monitor,
            identity,
            supports_security_key=supports_security_key,
            min_password_length=settings.min_password_length,
        )
        self.flow = ReauthFlow(
            self.monitor,
            self.presenter,
            api,
            identity,
            webauthn=webauthn,
            mfa=mfa if mfa is not None else ApiMfa(api),
        )

        self.monitor.on('show_warning', self.presenter.show_warning)
        self.monitor.on('show_login', self.presenter.show_login)
        self.monitor.on('hide_modals', self.presenter.hide_modals)

    def start(self, remaining_session_time: Optional[int] = None) -> None:
        """Start monitoring with the remaining time known at page render."""
        logger.info(f"Session guard started for {self.identity.username or 'guest'}")
        self.monitor.start(self.identity.username, remaining_session_time)

    def stop(self) -> None:
        self.monitor.stop()
