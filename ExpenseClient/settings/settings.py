"""Settings UI and dock widget for configuring application preferences.

Provides:
    - SettingsScrollArea: scroll area ensuring horizontal expansion without scrollbars.
    - SettingsWidget: composite editor for the server and the general preferences.
    - SettingsDockWidget: dockable container wrapping the settings UI.
"""
from typing import Optional

from PySide6 import QtWidgets, QtCore

from .editors import metadata_editor
from .editors import server_editor
from ..ui import ui
from ..ui.dockable_widget import DockableWidget


class SettingsScrollArea(QtWidgets.QScrollArea):
    """
    QScrollArea keeping the contained widget as wide as the viewport.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWidgetResizable(True)

        self.setHorizontalScrollBarPolicy(QtCore.Qt.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(QtCore.Qt.ScrollBarAsNeeded)

        self.setFrameShape(QtWidgets.QFrame.NoFrame)
        self.setFocusPolicy(QtCore.Qt.NoFocus)


class SettingsWidget(QtWidgets.QWidget):

    def __init__(self, parent=None):
        super().__init__(parent)

        self.setObjectName('ExpenseClientSettingsWidget')
        self.setWindowTitle('Settings')

        self._sections = []

        self.server_editor = None
        self.metadata_editor = None

        self._create_ui()

    def _add_section(self, title: str, label: str, parent: QtWidgets.QWidget, editor):
        title_widget = QtWidgets.QLabel(title)
        title_widget.setProperty('heading', True)

        parent.layout().addSpacing(ui.Size.Margin(0.5))
        parent.layout().addWidget(title_widget, 0)

        group = QtWidgets.QFrame()
        group.setProperty('card', True)
        QtWidgets.QFormLayout(group)

        o = ui.Size.Margin(0.5)
        group.layout().setContentsMargins(o, o, o, o)
        group.layout().setSpacing(o)
        group.layout().setRowWrapPolicy(QtWidgets.QFormLayout.WrapAllRows)
        group.layout().addRow(label, editor)

        parent.layout().addWidget(group, 0)

        self._sections.append([title, group])

        return group

    def _create_ui(self):
        QtWidgets.QVBoxLayout(self)
        self.layout().setContentsMargins(0, 0, 0, 0)
        self.layout().setSpacing(0)

        scroll_area = SettingsScrollArea(self)
        self.layout().addWidget(scroll_area)

        parent = QtWidgets.QWidget()
        QtWidgets.QVBoxLayout(parent)
        scroll_area.setFocusProxy(parent)
        scroll_area.setWidget(parent)

        parent.setSizePolicy(
            QtWidgets.QSizePolicy.MinimumExpanding,
            QtWidgets.QSizePolicy.Maximum
        )

        o = ui.Size.Margin(0.5)
        parent.layout().setContentsMargins(o, o, o, o)
        parent.layout().setSpacing(o)

        self.server_editor = server_editor.ServerEditor(self)
        self._add_section(
            'Server',
            'The REST API the client talks to.',
            parent,
            self.server_editor
        )

        self.metadata_editor = metadata_editor.MetadataWidget(self)
        self._add_section(
            'General Settings',
            'Formatting, theme, paging and dashboard options.',
            parent,
            self.metadata_editor
        )

        parent.layout().addStretch(1)

    def sizeHint(self):
        return QtCore.QSize(
            ui.Size.DefaultWidth(0.8),
            ui.Size.DefaultHeight(1.2)
        )


class SettingsDockWidget(DockableWidget):
    """Dockable widget for editing app settings."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__('Settings', parent=parent, min_width=ui.Size.DefaultWidth(0.6))
        self.setObjectName('ExpenseClientSettingsDockWidget')

        self.settings_widget = SettingsWidget(parent=self)
        self.settings_widget.setWindowFlags(QtCore.Qt.Widget)
        self.setWidget(self.settings_widget)
