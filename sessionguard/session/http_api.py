"""
HTTP implementation of SessionApi.

Talks to the CMS controller actions at {base_url}/{action_trigger}/{action}.
Requests are made with a blocking requests.Session and pushed off the event
loop with nicegui's run.io_bound, the same way long-running git calls are.
"""

import logging
from typing import Any, Dict, Optional

import requests
from nicegui import run

from sessionguard.errors import RequestRejected, TransportError
from sessionguard.session.api import LoginResult, SessionInfo

logger = logging.getLogger(__name__)


class HttpSessionApi:
    """
    SessionApi over HTTP with CSRF tracking.

    The CSRF token is sent with every request once known. A token returned by
    session-info only replaces an existing one; pages rendered without CSRF
    protection never start sending it.
    """

    SESSION_INFO_ACTION = 'users/session-info'
    LOGIN_ACTION = 'users/login'
    LOGOUT_ACTION = 'users/logout'
    VERIFY_MFA_ACTION = 'auth/verify-totp'
    WEBAUTHN_OPTIONS_ACTION = 'auth/start-webauthn-login'
    WEBAUTHN_LOGIN_ACTION = 'auth/webauthn-login'

    def __init__(
        self,
        base_url: str,
        action_trigger: str = 'actions',
        timeout: float = 10.0,
        csrf_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize HttpSessionApi.

        Args:
            base_url: CMS site URL (e.g. https://cms.example.com)
            action_trigger: URL segment that routes to controller actions
            timeout: Per-request timeout in seconds
            csrf_token: Token rendered into the page, if any
            session: Optional preconfigured requests.Session (cookies, auth)
        """
        self._base_url = base_url.rstrip('/')
        self._action_trigger = action_trigger.strip('/')
        self._timeout = timeout
        self._http = session or requests.Session()
        self.csrf_token = csrf_token

    def action_url(self, action: str) -> str:
        return f"{self._base_url}/{self._action_trigger}/{action}"

    def _request(
        self,
        method: str,
        action: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Perform a blocking action request and return the decoded JSON body."""
        headers = {
            'Accept': 'application/json',
            'X-Requested-With': 'XMLHttpRequest',
        }
        if self.csrf_token is not None:
            headers['X-CSRF-Token'] = self.csrf_token

        try:
            response = self._http.request(
                method,
                self.action_url(action),
                params=params,
                json=data,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {action} failed: {e}")
            raise TransportError(str(e)) from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if not response.ok:
            logger.warning(f"{method} {action} rejected with HTTP {response.status_code}")
            raise RequestRejected(payload.get('message') or None, status_code=response.status_code)

        return payload

    # --- Blocking calls ---

    def fetch_session_info(self, extend_session: bool) -> SessionInfo:
        params = None if extend_session else {'dontExtendSession': 1}
        payload = self._request('GET', self.SESSION_INFO_ACTION, params=params)

        try:
            timeout = int(payload['timeout'])
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError(f"Malformed session info: {payload!r}") from e

        csrf_token = payload.get('csrfTokenValue')
        if csrf_token is not None and self.csrf_token is not None:
            self.csrf_token = csrf_token

        return SessionInfo(timeout=timeout, csrf_token=csrf_token)

    def submit_login(self, login_name: str, password: str) -> LoginResult:
        payload = self._request('POST', self.LOGIN_ACTION, data={
            'loginName': login_name,
            'password': password,
        })
        return LoginResult(
            mfa=payload.get('mfa') is True,
            mfa_form=payload.get('mfaForm'),
        )

    def submit_logout(self) -> Optional[str]:
        payload = self._request('POST', self.LOGOUT_ACTION)
        return payload.get('returnUrl')

    def submit_mfa_code(self, code: str) -> None:
        self._request('POST', self.VERIFY_MFA_ACTION, data={'code': code})

    def fetch_webauthn_options(self, login_name: str) -> Dict[str, Any]:
        payload = self._request('POST', self.WEBAUTHN_OPTIONS_ACTION, data={'loginName': login_name})
        options = payload.get('authenticationOptions')
        if not isinstance(options, dict):
            raise TransportError("Missing authenticationOptions in response")
        return options

    def submit_webauthn_credential(self, login_name: str, credential: Dict[str, Any]) -> None:
        self._request('POST', self.WEBAUTHN_LOGIN_ACTION, data={
            'loginName': login_name,
            'credential': credential,
        })

    # --- SessionApi ---

    async def session_info(self, extend_session: bool) -> SessionInfo:
        return await run.io_bound(self.fetch_session_info, extend_session)

    async def login(self, login_name: str, password: str) -> LoginResult:
        return await run.io_bound(self.submit_login, login_name, password)

    async def logout(self) -> Optional[str]:
        return await run.io_bound(self.submit_logout)

    async def verify_mfa(self, code: str) -> None:
        await run.io_bound(self.submit_mfa_code, code)

    async def webauthn_options(self, login_name: str) -> Dict[str, Any]:
        return await run.io_bound(self.fetch_webauthn_options, login_name)

    async def webauthn_login(self, login_name: str, credential: Dict[str, Any]) -> None:
        await run.io_bound(self.submit_webauthn_credential, login_name, credential)
