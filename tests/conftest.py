"""
Shared fakes for the session guard tests.

FakeSessionApi answers from in-memory settings and records every call;
RecordingView implements ModalView and tracks what would be on screen.
"""

import asyncio
import sys
from pathlib import Path

import pytest
import pytest_asyncio

sys.path.insert(0, str(Path(__file__).parent.parent))

from sessionguard.auth.identity import Identity
from sessionguard.config import Settings
from sessionguard.errors import TransportError
from sessionguard.manager import AuthManager
from sessionguard.session.api import LoginResult, SessionInfo


class FakeSessionApi:
    """In-memory SessionApi."""

    def __init__(self, timeout=300):
        self.timeout = timeout
        self.queued_timeouts = []
        self.session_unreachable = False
        self.session_delay = 0
        self.session_calls = []

        self.login_result = LoginResult()
        self.login_error = None
        self.login_calls = []

        self.mfa_error = None
        self.mfa_codes = []

        self.logout_redirect = '/login'
        self.logout_error = None
        self.logout_calls = 0

    async def session_info(self, extend_session):
        self.session_calls.append(extend_session)
        if self.session_delay:
            await asyncio.sleep(self.session_delay)
        if self.session_unreachable:
            raise TransportError('connection refused')
        if self.queued_timeouts:
            return SessionInfo(timeout=self.queued_timeouts.pop(0))
        return SessionInfo(timeout=self.timeout)

    async def login(self, login_name, password):
        self.login_calls.append((login_name, password))
        if self.login_error is not None:
            raise self.login_error
        return self.login_result

    async def logout(self):
        self.logout_calls += 1
        if self.logout_error is not None:
            raise self.logout_error
        return self.logout_redirect

    async def verify_mfa(self, code):
        self.mfa_codes.append(code)
        if self.mfa_error is not None:
            raise self.mfa_error

    async def webauthn_options(self, login_name):
        return {'challenge': 'abc'}

    async def webauthn_login(self, login_name, credential):
        return None


class FakeWebAuthn:
    def __init__(self, error=None):
        self.error = error
        self.logins = []

    async def start_login(self, login_name):
        self.logins.append(login_name)
        if self.error is not None:
            raise self.error


class RecordingView:
    """ModalView that records calls and tracks visibility."""

    def __init__(self):
        self.calls = []
        self.warning_built = 0
        self.login_built = 0
        self.warning_visible = False
        self.login_visible = False
        self.warning_message = ''
        self.form = None
        self.handlers = None
        self.warning_handlers = None
        self.shakes = 0
        self.focuses = 0

    def build_warning(self, on_logout, on_renew):
        self.calls.append(('build_warning',))
        self.warning_built += 1
        self.warning_handlers = (on_logout, on_renew)

    def show_warning(self, quick):
        self.calls.append(('show_warning', quick))
        assert not self.login_visible, "warning shown over a visible login modal"
        self.warning_visible = True

    def hide_warning(self, quick):
        self.calls.append(('hide_warning', quick))
        self.warning_visible = False

    def set_warning_message(self, text):
        self.warning_message = text

    def build_login(self, form, handlers):
        self.calls.append(('build_login',))
        self.login_built += 1
        self.form = form
        self.handlers = handlers

    def render_login(self, form):
        self.form = form

    def show_login(self, quick):
        self.calls.append(('show_login', quick))
        assert not self.warning_visible, "login shown over a visible warning modal"
        self.login_visible = True

    def hide_login(self, quick):
        self.calls.append(('hide_login', quick))
        self.login_visible = False

    def destroy_login(self):
        self.calls.append(('destroy_login',))
        self.form = None
        self.handlers = None

    def shake_login(self):
        self.shakes += 1

    def focus_password(self):
        self.focuses += 1


def make_manager(api=None, view=None, identity=None, supports_security_key=False, webauthn=None):
    api = api or FakeSessionApi()
    view = view or RecordingView()
    identity = identity or Identity(username='admin')
    manager = AuthManager(
        api,
        view,
        identity,
        settings=Settings(check_interval=60, min_safe_session_time=120),
        supports_security_key=lambda: supports_security_key,
        webauthn=webauthn,
    )
    return manager, api, view


@pytest.fixture
def fake_api():
    return FakeSessionApi()


@pytest.fixture
def view():
    return RecordingView()


@pytest_asyncio.fixture
async def guard(fake_api, view):
    """An AuthManager wired to the fakes; timers are cancelled afterwards."""
    manager, _, _ = make_manager(api=fake_api, view=view)
    yield manager
    manager.stop()
