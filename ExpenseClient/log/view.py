"""Log views and dock widget for displaying and interacting with log messages.

This module provides:
    - LogTableView: table view for formatted log entries
    - LogEntryDialog: read-only dialog showing a single entry
    - LogDockWidget: dockable container with level and clear actions
"""
import logging

from PySide6 import QtCore, QtWidgets, QtGui

from . import log
from .model import LogFilterProxyModel, LogTableModel, Columns, get_handler
from ..ui import ui
from ..ui.dockable_widget import DockableWidget

LEVELS = (
    ('Debug', logging.DEBUG),
    ('Info', logging.INFO),
    ('Warning', logging.WARNING),
    ('Error', logging.ERROR),
    ('Critical', logging.CRITICAL),
)


class LogTableView(QtWidgets.QTableView):
    """A QTableView displaying log messages from LogTableModel."""

    def __init__(self, parent=None):
        super().__init__(parent=parent)
        self.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.setWordWrap(False)

        self.setItemDelegate(ui.RoundedRowDelegate(parent=self))
        self.setProperty('noitembackground', True)

        self._init_model()
        self._init_headers()
        self._connect_signals()

    def _init_model(self):
        proxy = LogFilterProxyModel(self)
        proxy.setSourceModel(LogTableModel(parent=self))
        self.setModel(proxy)

    def _init_headers(self):
        header = self.horizontalHeader()
        header.setDefaultAlignment(QtCore.Qt.AlignLeft | QtCore.Qt.AlignVCenter)
        header.setDefaultSectionSize(ui.Size.DefaultWidth(0.25))
        for column in (Columns.Date, Columns.Module, Columns.Level):
            header.setSectionResizeMode(column.value, QtWidgets.QHeaderView.Interactive)
        header.setSectionResizeMode(Columns.Message.value, QtWidgets.QHeaderView.Stretch)

        self.setSortingEnabled(True)
        self.sortByColumn(Columns.Date, QtCore.Qt.DescendingOrder)

        header = self.verticalHeader()
        header.setDefaultSectionSize(ui.Size.RowHeight(1.0))
        header.setHidden(True)

    def _connect_signals(self):
        self.model().rowsInserted.connect(self.scrollToTop)
        self.activated.connect(self.on_entry_activated)

    @QtCore.Slot(QtCore.QModelIndex)
    def on_entry_activated(self, index: QtCore.QModelIndex) -> None:
        if not index.isValid():
            return
        proxy = self.model()
        entry = proxy.sourceModel().get_entry(proxy.mapToSource(index).row())
        LogEntryDialog(entry, parent=self.window()).open()

    def sizeHint(self):
        return QtCore.QSize(
            ui.Size.DefaultWidth(1.0),
            ui.Size.DefaultHeight(0.5)
        )


class LogEntryDialog(QtWidgets.QDialog):
    """Dialog to display details for a single log entry."""

    def __init__(self, entry: dict[str, object], parent=None):
        super().__init__(parent)
        self.setWindowTitle('Log Entry Details')
        self.setAttribute(QtCore.Qt.WA_DeleteOnClose, True)

        layout = QtWidgets.QVBoxLayout(self)

        header = QtWidgets.QLabel(
            f'{entry["date"]}  <{entry["module"]}>  {entry["level_enum"].name}', self)
        layout.addWidget(header)

        self.editor = QtWidgets.QPlainTextEdit(self)
        self.editor.setReadOnly(True)
        self.editor.setPlainText(str(entry['message']))
        layout.addWidget(self.editor, 1)

        buttons = QtWidgets.QDialogButtonBox(QtWidgets.QDialogButtonBox.Close, parent=self)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def sizeHint(self):
        return QtCore.QSize(
            ui.Size.DefaultWidth(1.0),
            ui.Size.DefaultHeight(0.5)
        )


class LogDockWidget(DockableWidget):
    """Dockable widget for viewing app logs."""

    def __init__(self, parent=None) -> None:
        super().__init__('Logs', parent)
        self.setObjectName('ExpenseClientLogDockWidget')

        widget = QtWidgets.QWidget(self)
        widget.setProperty('rounded', True)
        QtWidgets.QVBoxLayout(widget)
        widget.layout().setContentsMargins(0, 0, 0, 0)
        widget.layout().setSpacing(0)

        self.view = LogTableView(widget)
        self.view.setContextMenuPolicy(QtCore.Qt.ActionsContextMenu)
        widget.layout().addWidget(self.view, 1)

        self.setWidget(widget)

        self._init_actions()
        self._connect_signals()

    def _connect_signals(self) -> None:
        self.visibilityChanged.connect(self.on_visibility_changed)

    def _add_level_menu(self, label, tooltip, current, callback) -> None:
        action = QtGui.QAction(label, self)
        menu = QtWidgets.QMenu(self)
        action_group = QtGui.QActionGroup(self)
        action_group.setExclusive(True)

        for name, lvl in LEVELS:
            act = menu.addAction(name)
            act.setData(lvl)
            act.setCheckable(True)
            act.setChecked(current == lvl)
            action_group.addAction(act)
        action_group.triggered.connect(lambda a: callback(a.data()))

        action.setMenu(menu)
        action.setToolTip(tooltip)
        self.view.addAction(action)

    def _init_actions(self) -> None:
        proxy = self.view.model()

        self._add_level_menu(
            'App Level', 'Set application logging level',
            logging.getLogger().level, log.set_logging_level
        )
        self._add_level_menu(
            'View Filter', 'Filter view by minimum logging level',
            proxy.filter_level(), proxy.set_filter_level
        )

        action = QtGui.QAction('Clear Logs', self)
        action.setToolTip('Clear all log entries')
        action.triggered.connect(self.clear_logs)
        self.view.addAction(action)

    @QtCore.Slot()
    def clear_logs(self) -> None:
        try:
            get_handler().clear_logs()
        except RuntimeError:
            logging.warning('TankHandler not found; cannot clear underlying logs.')
        self.view.model().sourceModel().clear_logs()

    @QtCore.Slot(bool)
    def on_visibility_changed(self, visible: bool) -> None:
        model = self.view.model().sourceModel()
        if visible:
            model.resume()
        else:
            model.pause()
