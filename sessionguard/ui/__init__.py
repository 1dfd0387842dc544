"""
Session modals for SessionGuard.

- ModalPresenter: mutually exclusive warning/login modal state
- NiceGUIModalView: the NiceGUI dialogs it drives
"""

from sessionguard.ui.presenter import ModalPresenter, ModalView, LoginForm, LoginHandlers
from sessionguard.ui.modals import NiceGUIModalView

__all__ = ['ModalPresenter', 'ModalView', 'LoginForm', 'LoginHandlers', 'NiceGUIModalView']
