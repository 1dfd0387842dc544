"""
Main NiceGUI application for SessionGuard.

Serves the control-panel shell and attaches one AuthManager to every
connected page: the session countdown is polled from the CMS, the logout
warning and the login modal are shown in place, and the user can sign back
in without losing what is on the page.
"""

import logging
import sys

from dotenv import load_dotenv
from nicegui import ui, app, Client

load_dotenv()

from sessionguard import AuthManager, Identity, get_settings
from sessionguard.auth import browser_supports_webauthn
from sessionguard.auth.webauthn import BrowserWebAuthn
from sessionguard.session import cached_remaining, remember_remaining
from sessionguard.session.http_api import HttpSessionApi
from sessionguard.ui import NiceGUIModalView

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)


@ui.page('/')
async def control_panel(client: Client):
    """Control panel shell with the session guard attached."""
    identity = Identity(
        username=settings.username,
        require_mfa=settings.require_mfa,
        has_security_keys=settings.has_security_keys,
    )

    refs = {}

    with ui.header().classes('items-center justify-between bg-slate-900'):
        ui.label('Control Panel').classes('text-lg font-bold')
        if identity.is_logged_in:
            with ui.button(icon='account_circle').props('flat round color=white'):
                with ui.menu():
                    ui.label(identity.username).classes('font-bold p-2')
                    ui.separator()
                    ui.menu_item('Sign out', on_click=lambda: refs['manager'].monitor.logout())

    with ui.column().classes('w-full max-w-3xl mx-auto p-4 gap-4') as content:
        ui.label('Entries').classes('text-2xl font-bold')
        ui.textarea('Draft', placeholder='Work in progress stays here while you sign back in')\
            .classes('w-full').props('outlined autogrow')

    if not identity.is_logged_in:
        ui.label('No signed-in user configured (set SESSIONGUARD_USERNAME).').classes('text-gray-400')
        return

    view = NiceGUIModalView(container=content)
    api = HttpSessionApi(
        settings.base_url,
        action_trigger=settings.action_trigger,
        timeout=settings.request_timeout,
    )

    await client.connected()
    webauthn_supported = await browser_supports_webauthn(client)

    manager = AuthManager(
        api,
        view,
        identity,
        settings=settings,
        supports_security_key=lambda: webauthn_supported,
        webauthn=BrowserWebAuthn(api, client),
    )

    def store_remaining(seconds):
        app.storage.user['remaining_session_time'] = remember_remaining(seconds)

    def redirect(url):
        with content:
            ui.navigate.to(url or settings.logout_redirect)

    manager.monitor.on('remaining_updated', store_remaining)
    manager.monitor.on('logged_out', redirect)
    refs['manager'] = manager
    client.on_disconnect(manager.stop)

    # A stale or expired entry means polling first rather than flashing the login modal
    manager.start(cached_remaining(
        app.storage.user.get('remaining_session_time'),
        max_age=settings.check_interval,
    ))


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title='SessionGuard',
        port=8081,
        reload=not getattr(sys, 'frozen', False),
        storage_secret='sessionguard_secret_key',
    )
