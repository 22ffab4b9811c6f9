"""Server editor: the REST base url and the request timeout.

The values are applied together so a half-typed url is never used for requests.
"""
import logging

from PySide6 import QtCore, QtWidgets

from .. import lib
from ...ui import ui
from ...ui.actions import signals
from ...ui.widgets import MessageLabel


class ServerEditor(QtWidgets.QWidget):
    """Edit and apply the ``server`` section."""

    def __init__(self, parent=None):
        super().__init__(parent=parent)
        self.setSizePolicy(QtWidgets.QSizePolicy.MinimumExpanding, QtWidgets.QSizePolicy.Maximum)

        self.base_url_editor = None
        self.timeout_editor = None
        self.apply_button = None
        self.revert_button = None
        self.message_label = None

        self._create_ui()
        self._connect_signals()
        self.init_data()

    def _create_ui(self):
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(ui.Size.Indicator(1.0))

        form = QtWidgets.QFormLayout()
        self.base_url_editor = QtWidgets.QLineEdit(self)
        self.base_url_editor.setPlaceholderText(lib.DEFAULT_BASE_URL)
        form.addRow('Base URL', self.base_url_editor)

        self.timeout_editor = QtWidgets.QSpinBox(self)
        self.timeout_editor.setRange(1, 600)
        self.timeout_editor.setSuffix(' s')
        form.addRow('Timeout', self.timeout_editor)
        layout.addLayout(form)

        self.message_label = MessageLabel(self)
        layout.addWidget(self.message_label)

        row = QtWidgets.QHBoxLayout()
        row.addStretch(1)
        self.revert_button = QtWidgets.QPushButton('Revert to Default', self)
        row.addWidget(self.revert_button)
        self.apply_button = QtWidgets.QPushButton('Apply', self)
        self.apply_button.setProperty('primary', True)
        row.addWidget(self.apply_button)
        layout.addLayout(row)

    def _connect_signals(self):
        self.apply_button.clicked.connect(self.save)
        self.base_url_editor.returnPressed.connect(self.save)
        self.revert_button.clicked.connect(self.revert)

        @QtCore.Slot(str)
        def on_section_changed(section: str) -> None:
            if section == 'server':
                self.init_data()

        signals.configSectionChanged.connect(on_section_changed)

    @QtCore.Slot()
    def init_data(self):
        data = lib.settings.get_section('server')
        self.base_url_editor.setText(data.get('base_url', ''))
        self.timeout_editor.setValue(data.get('timeout', lib.DEFAULT_TIMEOUT))

    @QtCore.Slot()
    def save(self):
        self.message_label.clear_message()
        data = {
            'base_url': self.base_url_editor.text().strip(),
            'timeout': self.timeout_editor.value(),
        }
        try:
            lib.settings.set_section('server', data)
        except (ValueError, TypeError) as ex:
            self.message_label.show_error(str(ex))
            return
        logging.info(f'Server set to {lib.settings.base_url}')
        self.message_label.show_success('Server settings saved.')

    @QtCore.Slot()
    def revert(self):
        self.message_label.clear_message()
        lib.settings.revert_section('server')
