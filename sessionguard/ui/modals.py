"""
NiceGUI rendering of the session modals.

Both dialogs are persistent (no escape, no backdrop dismiss) and are built
inside a container captured when the view is created, because they are
opened from timer tasks that run outside any NiceGUI slot context.
"""

import logging
from typing import Any, Callable, Optional

from nicegui import ui

from sessionguard.constants import (
    MSG_SESSION_ENDED,
    MSG_LOG_BACK_IN,
    MSG_PASSWORD_PLACEHOLDER,
    MSG_MFA_CODE_PLACEHOLDER,
    LABEL_SIGN_OUT_NOW,
    LABEL_KEEP_SIGNED_IN,
)
from sessionguard.auth.reauth import ReauthMethod
from sessionguard.ui.presenter import LoginForm, LoginHandlers

logger = logging.getLogger(__name__)

_SHAKE_CSS = '''
    <style>
        @keyframes sessionguard-shake {
            10%, 90% { transform: translateX(-2px); }
            20%, 80% { transform: translateX(4px); }
            30%, 50%, 70% { transform: translateX(-8px); }
            40%, 60% { transform: translateX(8px); }
        }
        .sessionguard-shake {
            animation: sessionguard-shake 0.5s both;
        }
    </style>
'''

SHAKE_DURATION = 0.5


class NiceGUIModalView:
    """ModalView backed by ui.dialog elements."""

    def __init__(self, container: Optional[ui.element] = None):
        """
        Create the view inside the current page.

        Args:
            container: Element the dialogs are attached to. Defaults to a new
                hidden-by-default div in the current slot.
        """
        ui.add_head_html(_SHAKE_CSS)
        self._root = container or ui.element('div')

        self._warning_dialog: Optional[ui.dialog] = None
        self._warning_label: Optional[ui.label] = None

        self._login_dialog: Optional[ui.dialog] = None
        self._login_card: Optional[ui.card] = None
        self._password_row: Optional[ui.element] = None
        self._password_input: Optional[ui.input] = None
        self._mfa_container: Optional[ui.column] = None
        self._mfa_input: Optional[ui.input] = None
        self._mfa_markup: Optional[str] = None
        self._login_button: Optional[ui.button] = None
        self._alternative_button: Optional[ui.button] = None
        self._error_label: Optional[ui.label] = None
        self._mfa_handlers: Optional[LoginHandlers] = None

    @staticmethod
    def _set_quick(dialog: ui.dialog, quick: bool) -> None:
        if quick:
            dialog.props('transition-duration=0')
        else:
            dialog.props(remove='transition-duration')

    # --- Warning ---

    def build_warning(self, on_logout: Callable[[], Any], on_renew: Callable[[], Any]) -> None:
        with self._root:
            with ui.dialog().props('persistent') as dialog, ui.card().classes('w-96'):
                self._warning_label = ui.label('').classes('text-base')
                with ui.row().classes('w-full justify-end gap-2 mt-4'):
                    ui.button(LABEL_SIGN_OUT_NOW, on_click=on_logout).props('flat')
                    ui.button(LABEL_KEEP_SIGNED_IN, on_click=on_renew).props('color=primary autofocus')
        self._warning_dialog = dialog

    def show_warning(self, quick: bool) -> None:
        if self._warning_dialog is None:
            return
        self._set_quick(self._warning_dialog, quick)
        self._warning_dialog.open()

    def hide_warning(self, quick: bool) -> None:
        if self._warning_dialog is None:
            return
        self._set_quick(self._warning_dialog, quick)
        self._warning_dialog.close()

    def set_warning_message(self, text: str) -> None:
        if self._warning_label is not None:
            self._warning_label.text = text

    # --- Login ---

    def build_login(self, form: LoginForm, handlers: LoginHandlers) -> None:
        with self._root:
            with ui.dialog().props('persistent') as dialog:
                with ui.card().classes('w-96') as card:
                    ui.label(MSG_SESSION_ENDED).classes('text-xl font-bold')
                    ui.label(MSG_LOG_BACK_IN).classes('text-gray-400')

                    with ui.row().classes('w-full items-center no-wrap gap-2') as password_row:
                        self._password_input = ui.input(
                            placeholder=MSG_PASSWORD_PLACEHOLDER,
                            password=True,
                            password_toggle_button=True,
                            on_change=lambda e: handlers.on_password(e.value),
                        ).props('outlined dense autocomplete=current-password autofocus').classes('flex-grow')
                        self._password_input.on('keydown.enter', handlers.on_submit)

                    self._mfa_container = ui.column().classes('w-full gap-2')
                    self._mfa_container.set_visibility(False)

                    self._login_button = ui.button(form.button_label, on_click=handlers.on_submit)\
                        .classes('w-full').props('color=primary')

                    self._alternative_button = ui.button(form.alternative_label, on_click=handlers.on_toggle)\
                        .props('flat dense no-caps')

                    self._error_label = ui.label('').classes('text-red-500 text-sm')

        self._login_dialog = dialog
        self._login_card = card
        self._password_row = password_row
        self._mfa_handlers = handlers
        self.render_login(form)

    def render_login(self, form: LoginForm) -> None:
        if self._login_dialog is None:
            return

        if self._password_row is not None:
            if form.method is ReauthMethod.MFA:
                # The password input leaves the DOM once the second factor is requested
                self._password_row.delete()
                self._password_row = None
                self._password_input = None
            else:
                self._password_row.set_visibility(form.password_visible)
                if not form.password and self._password_input.value:
                    self._password_input.value = ''

        if form.mfa_form is not None:
            self._render_mfa(form)

        self._login_button.text = form.button_label
        if form.can_submit:
            self._login_button.enable()
        else:
            self._login_button.disable()
        if form.busy:
            self._login_button.props('loading')
        else:
            self._login_button.props(remove='loading')

        if self._alternative_button is not None:
            if form.show_alternative:
                self._alternative_button.text = form.alternative_label
                self._alternative_button.set_visibility(True)
            else:
                self._alternative_button.delete()
                self._alternative_button = None

        self._error_label.text = form.error

    def _render_mfa(self, form: LoginForm) -> None:
        if self._mfa_markup == form.mfa_form:
            return
        self._mfa_markup = form.mfa_form
        self._mfa_container.clear()
        with self._mfa_container:
            if form.mfa_form:
                ui.html(form.mfa_form)
            self._mfa_input = ui.input(
                placeholder=MSG_MFA_CODE_PLACEHOLDER,
                on_change=lambda e: self._mfa_handlers.on_mfa_code(e.value),
            ).props('outlined dense autocomplete=one-time-code autofocus').classes('w-full')
            self._mfa_input.on('keydown.enter', self._mfa_handlers.on_submit)
        self._mfa_container.set_visibility(True)

    def show_login(self, quick: bool) -> None:
        if self._login_dialog is None:
            return
        self._set_quick(self._login_dialog, quick)
        self._login_dialog.open()

    def hide_login(self, quick: bool) -> None:
        if self._login_dialog is None:
            return
        self._set_quick(self._login_dialog, quick)
        self._login_dialog.close()

    def destroy_login(self) -> None:
        if self._login_dialog is None:
            return
        self._login_dialog.delete()
        self._login_dialog = None
        self._login_card = None
        self._password_row = None
        self._password_input = None
        self._mfa_container = None
        self._mfa_input = None
        self._mfa_markup = None
        self._login_button = None
        self._alternative_button = None
        self._error_label = None

    def shake_login(self) -> None:
        card = self._login_card
        if card is None:
            return
        card.classes(add='sessionguard-shake')
        with self._root:
            ui.timer(SHAKE_DURATION, lambda: card.classes(remove='sessionguard-shake'), once=True)

    def focus_password(self) -> None:
        if self._password_input is not None:
            self._password_input.run_method('focus')
