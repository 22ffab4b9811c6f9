"""Application-wide Qt signals and utility slots for ExpenseClient.

This module provides:
    - logout slot: drops the in-memory session and asks for a new sign-in.
    - Signals: custom Qt signals for configuration changes, session lifecycle,
      data changes (expenses, categories, receipts) and UI requests (pages, logs, settings).
"""
import logging

from PySide6 import QtCore, QtWidgets


@QtCore.Slot()
def logout() -> None:
    """
    Clears the session and requests the login dialog.
    """
    from ..core.auth import auth_manager

    auth_manager.logout()
    signals.loggedOut.emit()
    signals.authenticationRequested.emit()


class Signals(QtCore.QObject):
    """Centralized Qt signals for application config, session, data, and UI events."""
    initializationRequested = QtCore.Signal()

    authenticationRequested = QtCore.Signal()
    loggedIn = QtCore.Signal(object)  # LoginResponse
    loggedOut = QtCore.Signal()
    logoutRequested = QtCore.Signal()

    configSectionChanged = QtCore.Signal(str)
    metadataChanged = QtCore.Signal(str, object)

    expensesChanged = QtCore.Signal()
    categoriesChanged = QtCore.Signal()
    receiptsChanged = QtCore.Signal()
    receiptUploaded = QtCore.Signal(object)  # Receipt

    editExpenseRequested = QtCore.Signal(object)  # Expense

    pageRequested = QtCore.Signal(str)
    showLogs = QtCore.Signal()
    showSettings = QtCore.Signal()

    error = QtCore.Signal(str)

    def __init__(self):
        super().__init__()
        self._login_dialog = None
        self._connect_signals()

    def _connect_signals(self):
        self.logoutRequested.connect(logout)

        @QtCore.Slot()
        def _on_authentication_requested() -> None:
            if not QtWidgets.QApplication.instance():
                logging.warning('Authentication requested without a running application.')
                return
            if self._login_dialog is not None and self._login_dialog.isVisible():
                return

            from .login import LoginDialog
            self._login_dialog = LoginDialog()
            self._login_dialog.open()

        self.authenticationRequested.connect(_on_authentication_requested)

        # A fresh session reloads every page
        self.loggedIn.connect(lambda _: self.initializationRequested.emit())

        @QtCore.Slot(str, object)
        def metadata_changed(key: str, value: object) -> None:
            if key != 'theme':
                return

            try:
                from . import ui
                ui.apply_theme()
            except (RuntimeError, FileNotFoundError, KeyError, AttributeError) as ex:
                logging.debug(f'Error applying theme: {ex}')

        self.metadataChanged.connect(metadata_changed)


signals = Signals()
