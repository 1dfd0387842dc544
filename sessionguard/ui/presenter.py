"""
Modal Presenter - owns the logout-warning and login modals.

The presenter is the only writer of SessionState.modal. Every public method
leaves exactly one of {no modal, warning, login} visible before returning.
When one modal replaces the other, the outgoing one is hidden with the
quick (no animation) transition and the incoming one is shown quickly too,
so two shades never overlap.

Rendering is delegated to a ModalView (NiceGUIModalView in production, a
recording fake in tests). The presenter keeps the login form as a plain
view-model and pushes it to the view after each change.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from sessionguard.auth.capabilities import security_key_available
from sessionguard.auth.identity import Identity
from sessionguard.auth.reauth import ReauthMethod
from sessionguard.constants import (
    COUNTDOWN_TICK,
    MIN_PASSWORD_LENGTH,
    MSG_SERVER_ERROR,
    MSG_SESSION_EXPIRING,
    LABEL_SIGN_IN,
    LABEL_SIGN_IN_SECURITY_KEY,
    LABEL_VERIFY,
    LABEL_USE_SECURITY_KEY,
    LABEL_USE_PASSWORD,
)
from sessionguard.formatting import seconds_to_human_duration
from sessionguard.session.monitor import SessionMonitor
from sessionguard.session.state import ModalKind

logger = logging.getLogger(__name__)


@dataclass
class LoginForm:
    """View-model of one login modal instance."""
    method: ReauthMethod = ReauthMethod.PASSWORD
    alternative_available: bool = False
    min_password_length: int = MIN_PASSWORD_LENGTH
    password: str = ''
    mfa_code: str = ''
    mfa_form: Optional[str] = None
    error: str = ''
    busy: bool = False

    @property
    def password_visible(self) -> bool:
        return self.method is ReauthMethod.PASSWORD

    @property
    def show_alternative(self) -> bool:
        return self.alternative_available and self.method is not ReauthMethod.MFA

    @property
    def button_label(self) -> str:
        if self.method is ReauthMethod.SECURITY_KEY:
            return LABEL_SIGN_IN_SECURITY_KEY
        if self.method is ReauthMethod.MFA:
            return LABEL_VERIFY
        return LABEL_SIGN_IN

    @property
    def alternative_label(self) -> str:
        if self.method is ReauthMethod.SECURITY_KEY:
            return LABEL_USE_PASSWORD
        return LABEL_USE_SECURITY_KEY

    @property
    def can_submit(self) -> bool:
        if self.busy:
            return False
        if self.method is ReauthMethod.PASSWORD:
            return len(self.password) >= self.min_password_length
        if self.method is ReauthMethod.MFA:
            return bool(self.mfa_code.strip())
        return True


@dataclass
class LoginHandlers:
    """Callbacks the login view wires to its inputs and buttons."""
    on_password: Callable[[str], None]
    on_mfa_code: Callable[[str], None]
    on_submit: Callable[[], Any]
    on_toggle: Callable[[], None]


class ModalView(Protocol):
    """Rendering backend for the two modals."""

    def build_warning(self, on_logout: Callable[[], Any], on_renew: Callable[[], Any]) -> None: ...

    def show_warning(self, quick: bool) -> None: ...

    def hide_warning(self, quick: bool) -> None: ...

    def set_warning_message(self, text: str) -> None: ...

    def build_login(self, form: LoginForm, handlers: LoginHandlers) -> None: ...

    def render_login(self, form: LoginForm) -> None: ...

    def show_login(self, quick: bool) -> None: ...

    def hide_login(self, quick: bool) -> None: ...

    def destroy_login(self) -> None: ...

    def shake_login(self) -> None: ...

    def focus_password(self) -> None: ...


class ModalPresenter:
    """Drives the warning and login modals from monitor and flow events."""

    def __init__(
        self,
        view: ModalView,
        monitor: SessionMonitor,
        identity: Identity,
        supports_security_key: Callable[[], bool] = lambda: False,
        min_password_length: int = MIN_PASSWORD_LENGTH,
    ):
        """
        Initialize ModalPresenter.

        Args:
            view: Rendering backend
            monitor: The page's SessionMonitor (state, timers, renew/logout)
            identity: Identity the page belongs to
            supports_security_key: Capability probe for the current platform
            min_password_length: Minimum password length before submit is enabled
        """
        self._view = view
        self._monitor = monitor
        self._state = monitor.state
        self._identity = identity
        self._supports_security_key = supports_security_key
        self._min_password_length = min_password_length

        self._warning_built = False
        self._login: Optional[LoginForm] = None
        self._submit_handler: Optional[Callable[[], Any]] = None
        self._on_login_closed: Optional[Callable[[], None]] = None

    @property
    def login_form(self) -> Optional[LoginForm]:
        return self._login

    @property
    def showing_warning(self) -> bool:
        return self._state.showing_warning

    @property
    def showing_login(self) -> bool:
        return self._state.showing_login

    def set_submit_handler(self, handler: Callable[[], Any]) -> None:
        """Set what runs when the login form is submitted."""
        self._submit_handler = handler

    def set_on_login_closed(self, callback: Callable[[], None]) -> None:
        """Set what runs when the login modal is torn down."""
        self._on_login_closed = callback

    # --- Warning modal ---

    def show_warning(self, _remaining: Any = None) -> None:
        if self._state.showing_warning:
            self._update_warning_message()
            return

        quick = False
        if self._state.showing_login:
            self.hide_login(quick=True)
            quick = True

        self._state.modal = ModalKind.WARNING

        if not self._warning_built:
            self._view.build_warning(on_logout=self.logout, on_renew=self.renew_session)
            self._warning_built = True

        self._view.show_warning(quick)
        self._update_warning_message()
        self._monitor.timers.countdown.arm_interval(COUNTDOWN_TICK, self._decrement_warning)
        logger.info("Session expiry warning shown")

    def hide_warning(self, quick: bool = False) -> None:
        if not self._state.showing_warning:
            return

        self._state.modal = ModalKind.NONE
        self._view.hide_warning(quick)
        self._monitor.timers.countdown.cancel()

    def _update_warning_message(self) -> None:
        remaining = max(self._state.remaining_seconds or 0, 0)
        self._view.set_warning_message(
            MSG_SESSION_EXPIRING.format(time=seconds_to_human_duration(remaining))
        )

    def _decrement_warning(self) -> None:
        """Display-only countdown; the server poll stays authoritative."""
        remaining = self._state.remaining_seconds or 0
        if remaining > 0:
            self._state.remaining_seconds = remaining - 1
            self._update_warning_message()

        if (self._state.remaining_seconds or 0) <= 0:
            self._monitor.timers.countdown.cancel()

    async def renew_session(self) -> None:
        self.hide_warning()
        await self._monitor.renew()

    async def logout(self) -> None:
        await self._monitor.logout()

    # --- Login modal ---

    def show_login(self, _data: Any = None) -> None:
        if self._state.showing_login:
            return

        quick = False
        if self._state.showing_warning:
            self.hide_warning(quick=True)
            quick = True

        self._state.modal = ModalKind.LOGIN

        if self._login is None:
            self._login = self._new_login_form()
            self._view.build_login(self._login, LoginHandlers(
                on_password=self.set_password,
                on_mfa_code=self.set_mfa_code,
                on_submit=self.submit,
                on_toggle=self.toggle_method,
            ))

        self._view.show_login(quick)
        logger.info(f"Login modal shown ({self._login.method.value})")

    def _new_login_form(self) -> LoginForm:
        use_key = security_key_available(self._identity, self._supports_security_key())
        return LoginForm(
            method=ReauthMethod.SECURITY_KEY if use_key else ReauthMethod.PASSWORD,
            alternative_available=use_key,
            min_password_length=self._min_password_length,
        )

    def hide_login(self, quick: bool = False) -> None:
        if self._state.showing_login:
            self._state.modal = ModalKind.NONE

        if self._login is None:
            return

        # Never reuse a login modal: stale passwords and errors must not leak
        self._view.hide_login(quick)
        self._view.destroy_login()
        self._login = None
        if self._on_login_closed:
            self._on_login_closed()

    def hide_modals(self, _data: Any = None) -> None:
        self.hide_warning()
        self.hide_login()

    def toggle_method(self) -> None:
        form = self._login
        if form is None or not form.show_alternative or form.busy:
            return

        if form.method is ReauthMethod.PASSWORD:
            form.method = ReauthMethod.SECURITY_KEY
        else:
            form.method = ReauthMethod.PASSWORD
        form.password = ''
        form.error = ''
        self._view.render_login(form)

    def set_password(self, value: str) -> None:
        if self._login is None:
            return
        self._login.password = value or ''
        self._view.render_login(self._login)

    def set_mfa_code(self, value: str) -> None:
        if self._login is None:
            return
        self._login.mfa_code = value or ''
        self._view.render_login(self._login)

    def submit(self) -> Any:
        """Submit the login form if it is valid. Returns the handler's result."""
        if self._login is None or not self._login.can_submit:
            return None
        if self._submit_handler is None:
            logger.warning("Login submitted without a handler")
            return None
        return self._submit_handler()

    def set_busy(self, busy: bool) -> None:
        if self._login is None:
            return
        self._login.busy = busy
        self._view.render_login(self._login)

    def clear_login_error(self) -> None:
        if self._login is None:
            return
        self._login.error = ''
        self._view.render_login(self._login)

    def show_login_error(self, message: Optional[str], shake: bool = False) -> None:
        if self._login is None:
            return

        if message is None or not str(message).strip():
            message = MSG_SERVER_ERROR

        self._login.error = str(message)
        self._login.busy = False
        self._view.render_login(self._login)

        if shake:
            self._view.shake_login()
            if self._login.password_visible:
                self._view.focus_password()

    def enter_mfa(self, mfa_form: Optional[str]) -> None:
        """Switch the open login modal to the MFA challenge in place."""
        if self._login is None:
            return

        form = self._login
        form.method = ReauthMethod.MFA
        form.mfa_form = mfa_form or ''
        form.password = ''
        form.mfa_code = ''
        form.error = ''
        form.busy = False
        self._view.render_login(form)
        logger.info("Login requires a second factor")

    def close_login(self) -> None:
        """Successful re-authentication."""
        if self._login is not None:
            self._login.busy = False
        self.hide_login()
