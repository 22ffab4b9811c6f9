"""Sign-in dialog.

The dialog is opened whenever a session is needed: at startup, after a logout and
when the backend rejects the current token.
"""
from typing import Optional

from PySide6 import QtWidgets, QtCore

from . import ui
from .actions import signals
from .widgets import MessageLabel
from ..core import auth
from ..settings import lib
from ..status import status


class LoginDialog(QtWidgets.QDialog):
    """Email and password form.

    On success the email is remembered in the settings and
    :attr:`Signals.loggedIn` is emitted with the new session.
    """

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setWindowTitle('Sign In')
        self.setModal(True)
        self.setObjectName('ExpenseClientLoginDialog')

        self._create_ui()
        self._connect_signals()
        self.init_data()

    def _create_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)
        o = ui.Size.Margin(1.0)
        layout.setContentsMargins(o, o, o, o)
        layout.setSpacing(ui.Size.Indicator(2.0))

        heading = QtWidgets.QLabel('Sign in to Expense Tracker', self)
        heading.setProperty('heading', True)
        layout.addWidget(heading)

        label = QtWidgets.QLabel(f'Server: {lib.settings.base_url}', self)
        label.setProperty('secondary', True)
        layout.addWidget(label)
        self.server_label = label

        form = QtWidgets.QFormLayout()
        self.email_editor = QtWidgets.QLineEdit(self)
        self.email_editor.setPlaceholderText('you@example.com')
        form.addRow('Email', self.email_editor)

        self.password_editor = QtWidgets.QLineEdit(self)
        self.password_editor.setEchoMode(QtWidgets.QLineEdit.Password)
        form.addRow('Password', self.password_editor)
        layout.addLayout(form)

        self.message_label = MessageLabel(self)
        layout.addWidget(self.message_label)

        row = QtWidgets.QHBoxLayout()
        self.settings_button = QtWidgets.QPushButton('Settings', self)
        row.addWidget(self.settings_button)
        row.addStretch(1)
        self.quit_button = QtWidgets.QPushButton('Quit', self)
        row.addWidget(self.quit_button)
        self.login_button = QtWidgets.QPushButton('Sign In', self)
        self.login_button.setProperty('primary', True)
        self.login_button.setDefault(True)
        row.addWidget(self.login_button)
        layout.addLayout(row)

    def _connect_signals(self) -> None:
        self.login_button.clicked.connect(self.login)
        self.password_editor.returnPressed.connect(self.login)
        self.email_editor.returnPressed.connect(self.password_editor.setFocus)
        self.quit_button.clicked.connect(QtWidgets.QApplication.quit)
        self.settings_button.clicked.connect(signals.showSettings)

        @QtCore.Slot(str)
        def on_section_changed(section: str) -> None:
            if section == 'server':
                self.server_label.setText(f'Server: {lib.settings.base_url}')

        signals.configSectionChanged.connect(on_section_changed)

    def init_data(self) -> None:
        email = lib.settings['email']
        self.email_editor.setText(email or '')
        if email:
            self.password_editor.setFocus()
        else:
            self.email_editor.setFocus()

    @QtCore.Slot()
    def login(self) -> None:
        self.message_label.clear_message()

        email = self.email_editor.text().strip()
        password = self.password_editor.text()
        if not email or not password:
            self.message_label.show_error('Email and password are required.')
            return

        self.login_button.setEnabled(False)
        try:
            response = auth.login(email, password)
        except status.BaseStatusException as ex:
            self.message_label.show_error(status.describe(ex, 'Login failed. Please check your credentials.'))
            self.password_editor.selectAll()
            self.password_editor.setFocus()
            return
        finally:
            self.login_button.setEnabled(True)

        lib.settings['email'] = email
        self.password_editor.clear()
        self.accept()
        signals.loggedIn.emit(response)

    def reject(self) -> None:
        # no session means nothing to show
        if not auth.auth_manager.is_authenticated():
            QtWidgets.QApplication.quit()
        super().reject()

    def sizeHint(self) -> QtCore.QSize:
        return QtCore.QSize(ui.Size.DefaultWidth(0.7), ui.Size.DefaultHeight(0.5))
