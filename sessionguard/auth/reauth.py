"""
Re-authentication flow.

Turns a submitted login form into exactly one outcome:
- success: the login modal closes and normal polling resumes
- failure: the message is shown in the modal, which stays open for a retry

Before any credential is sent the session is re-checked once. If another
tab has already signed back in, the check comes back healthy, the modal
closes and nothing is submitted. Only a confirmed expiry makes the monitor
fire 'resubmit_login', which lands in resubmit().
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sessionguard.auth.identity import Identity
from sessionguard.errors import SessionGuardError

if TYPE_CHECKING:
    from sessionguard.auth.capabilities import MfaCapability, WebAuthnCapability
    from sessionguard.session.api import SessionApi
    from sessionguard.session.monitor import SessionMonitor
    from sessionguard.ui.presenter import ModalPresenter

logger = logging.getLogger(__name__)


class ReauthMethod(Enum):
    PASSWORD = "password"
    SECURITY_KEY = "security_key"
    MFA = "mfa"


@dataclass
class ReauthAttempt:
    """One login submission. Credentials live only as long as the attempt."""
    method: ReauthMethod
    pending_credentials: Optional[str] = None
    mfa_state: Optional[str] = None  # challenge markup the code answers

    def clear_credentials(self) -> None:
        self.pending_credentials = None


class ReauthFlow:
    """Submits re-authentication for the page's identity."""

    def __init__(
        self,
        monitor: 'SessionMonitor',
        presenter: 'ModalPresenter',
        api: 'SessionApi',
        identity: Identity,
        webauthn: Optional['WebAuthnCapability'] = None,
        mfa: Optional['MfaCapability'] = None,
    ):
        self._monitor = monitor
        self._presenter = presenter
        self._api = api
        self._identity = identity
        self._webauthn = webauthn
        self._mfa = mfa
        self._attempt: Optional[ReauthAttempt] = None

        presenter.set_submit_handler(self.login)
        presenter.set_on_login_closed(self.discard)
        monitor.on('resubmit_login', self.resubmit)

    @property
    def attempt(self) -> Optional[ReauthAttempt]:
        return self._attempt

    def discard(self) -> None:
        """Drop the pending attempt (modal closed)."""
        if self._attempt is not None:
            self._attempt.clear_credentials()
        self._attempt = None

    async def login(self) -> None:
        """Handle a login form submission."""
        form = self._presenter.login_form
        if form is None or not form.can_submit:
            return

        if form.method is ReauthMethod.PASSWORD:
            credentials = form.password
        elif form.method is ReauthMethod.MFA:
            credentials = form.mfa_code.strip()
        else:
            credentials = None

        self._attempt = ReauthAttempt(
            method=form.method,
            pending_credentials=credentials,
            mfa_state=form.mfa_form,
        )

        # Busy until the attempt resolves; a healthy session closes the form instead
        self._presenter.set_busy(True)

        # Check the session one last time in case another tab already signed back in
        self._monitor.state.submit_login_if_logged_out = True
        await self._monitor.refresh()

    async def resubmit(self, _data=None) -> None:
        """Send the pending attempt now that expiry is confirmed."""
        attempt = self._attempt
        if attempt is None:
            logger.debug("Expiry confirmed but no login attempt is pending")
            return
        # Each attempt is sent at most once
        self._attempt = None

        if attempt.method is ReauthMethod.SECURITY_KEY:
            await self._webauthn_login(attempt)
        elif attempt.method is ReauthMethod.MFA:
            await self._mfa_login(attempt)
        else:
            await self._submit_password(attempt)

    async def _submit_password(self, attempt: ReauthAttempt) -> None:
        self._presenter.clear_login_error()
        self._presenter.set_busy(True)
        password = attempt.pending_credentials or ''
        attempt.clear_credentials()

        try:
            result = await self._api.login(self._identity.username or '', password)
        except SessionGuardError as e:
            logger.warning(f"Password login rejected for {self._identity.username}: {e}")
            self._fail(attempt, e.message, shake=True)
            return

        if result.mfa:
            self._finish(attempt)
            self._presenter.enter_mfa(result.mfa_form)
            return

        await self._succeed(attempt)

    async def _webauthn_login(self, attempt: ReauthAttempt) -> None:
        self._presenter.clear_login_error()
        if self._webauthn is None:
            self._fail(attempt, None)
            return

        self._presenter.set_busy(True)
        try:
            await self._webauthn.start_login(self._identity.username or '')
        except SessionGuardError as e:
            logger.warning(f"Security key login failed: {e}")
            self._fail(attempt, e.message)
            return

        await self._succeed(attempt)

    async def _mfa_login(self, attempt: ReauthAttempt) -> None:
        self._presenter.clear_login_error()
        if attempt.mfa_state is None:
            # A code is only meaningful as the answer to a server-issued challenge
            logger.warning("MFA code submitted without a pending challenge")
            self._fail(attempt, None)
            return
        if self._mfa is None:
            self._fail(attempt, None)
            return

        code = attempt.pending_credentials or ''
        attempt.clear_credentials()
        self._presenter.set_busy(True)
        try:
            await self._mfa.submit_code(code)
        except SessionGuardError as e:
            logger.warning(f"MFA verification failed: {e}")
            self._fail(attempt, e.message)
            return
        finally:
            self._presenter.set_busy(False)

        await self._succeed(attempt)

    def _finish(self, attempt: ReauthAttempt) -> None:
        attempt.clear_credentials()
        if self._attempt is attempt:
            self._attempt = None

    def _fail(self, attempt: ReauthAttempt, message: Optional[str], shake: bool = False) -> None:
        self._finish(attempt)
        self._presenter.show_login_error(message, shake=shake)

    async def _succeed(self, attempt: ReauthAttempt) -> None:
        self._finish(attempt)
        logger.info(f"Re-authenticated {self._identity.username} ({attempt.method.value})")
        self._presenter.close_login()
        await self._monitor.refresh()
