"""Table model and filter proxy over the records stored in the TankHandler."""
import enum
import logging
import re
from datetime import datetime
from typing import Any

from PySide6 import QtCore

from .log import TankHandler
from ..ui import ui


class Columns(enum.IntEnum):
    """Column indexes of the log table."""
    Date = 0
    Module = 1
    Level = 2
    Message = 3


class Level(enum.IntEnum):
    """Maps standard log level names to their numeric values."""
    NOTSET = logging.NOTSET
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


LogLevelRole = QtCore.Qt.UserRole + 1


def get_handler():
    """Returns the TankHandler from the root logger or raises RuntimeError."""
    root_logger = logging.getLogger()
    handler = [h for h in root_logger.handlers if isinstance(h, TankHandler)]
    if not handler:
        raise RuntimeError('TankHandler not found in root logger')
    if len(handler) > 1:
        raise RuntimeError('Multiple TankHandlers found in root logger')
    return handler[0]


def parse_log_message(raw_message: str) -> dict[str, Any]:
    """
    Splits a formatted log line into its date, module, level and message parts.

    Lines not matching the log format are kept whole in ``message`` with a NOTSET level.
    """
    result: dict[str, Any] = {
        'date': '',
        'module': '',
        'level_enum': Level.NOTSET,
        'message': raw_message
    }

    match = LogTableModel.re_log_pattern.match(raw_message)
    if not match:
        return result

    try:
        level_enum = Level[match.group('level').strip().upper()]
    except KeyError:
        level_enum = Level.NOTSET

    result.update({
        'date': match.group('date'),
        'module': match.group('module'),
        'level_enum': level_enum,
        'message': match.group('message'),
    })
    return result


class LogTableModel(QtCore.QAbstractTableModel):
    """Polls the TankHandler and exposes its records as table rows."""

    re_log_pattern = re.compile(
        r'^\[(?P<date>[^\]]+)\]\s+<(?P<module>[^>]+)>\s+(?P<level>[^:]+):\s+(?P<message>.*)$',
        flags=re.DOTALL
    )

    def __init__(self, parent: Any = None, fetch_interval_ms: int = 1000):
        super().__init__(parent=parent)
        self._logs: list[dict[str, Any]] = []
        self._is_paused = False

        self._timer = QtCore.QTimer(self)
        self._timer.timeout.connect(self.fetch_new_logs)
        self._timer.start(fetch_interval_ms)

    @QtCore.Slot()
    def pause(self) -> None:
        self._is_paused = True

    @QtCore.Slot()
    def resume(self) -> None:
        self._is_paused = False

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._logs)

    def columnCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(Columns)

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole) -> Any:
        if not index.isValid() or index.row() >= len(self._logs):
            return None

        entry = self._logs[index.row()]

        if role == QtCore.Qt.DisplayRole:
            if index.column() == Columns.Date:
                return entry['date']
            elif index.column() == Columns.Module:
                return entry['module']
            elif index.column() == Columns.Level:
                return entry['level_enum'].name
            elif index.column() == Columns.Message:
                return entry['message']

        if role == QtCore.Qt.ToolTipRole and index.column() == Columns.Message:
            return entry['message']

        if role == QtCore.Qt.TextAlignmentRole:
            return QtCore.Qt.AlignLeft | QtCore.Qt.AlignVCenter

        if role == QtCore.Qt.FontRole and entry['level_enum'] >= Level.ERROR:
            font, _ = ui.Font.BoldFont(ui.Size.MediumText(1.0))
            return font

        if role == QtCore.Qt.ForegroundRole:
            if entry['level_enum'] == Level.DEBUG:
                return ui.Color.SecondaryText()
            elif entry['level_enum'] == Level.WARNING:
                return ui.Color.Yellow()
            elif entry['level_enum'] >= Level.ERROR:
                return ui.Color.Red()

        if role == LogLevelRole:
            return entry['level_enum'].value

        return None

    def headerData(self, section: int, orientation, role: int = QtCore.Qt.DisplayRole) -> Any:
        if orientation == QtCore.Qt.Horizontal and role == QtCore.Qt.DisplayRole:
            return Columns(section).name
        return super().headerData(section, orientation, role)

    def get_entry(self, row: int) -> dict[str, Any]:
        """Return a copy of the parsed entry at ``row``."""
        return dict(self._logs[row])

    @QtCore.Slot()
    def fetch_new_logs(self) -> None:
        """Append records that arrived in the tank since the last poll."""
        if self._is_paused:
            return

        try:
            handler = get_handler()
        except RuntimeError:
            return

        all_logs = handler.get_logs(logging.NOTSET)
        existing_count = len(self._logs)
        if len(all_logs) < existing_count:
            # The tank was cleared elsewhere
            self.clear_logs()
            existing_count = 0

        incoming = all_logs[existing_count:]
        if not incoming:
            return

        parsed = [parse_log_message(msg) for msg in incoming]
        self.beginInsertRows(QtCore.QModelIndex(), existing_count, existing_count + len(parsed) - 1)
        self._logs.extend(parsed)
        self.endInsertRows()

    @QtCore.Slot()
    def clear_logs(self) -> None:
        self.beginResetModel()
        self._logs = []
        self.endResetModel()


class LogFilterProxyModel(QtCore.QSortFilterProxyModel):
    """Sorts log rows (parsing the date column) and hides rows below a minimum level."""

    def __init__(self, parent: Any = None):
        super().__init__(parent)
        self._filter_level = logging.NOTSET

    def filter_level(self) -> int:
        return self._filter_level

    def set_filter_level(self, level: int) -> None:
        self._filter_level = level
        self.invalidateFilter()

    def filterAcceptsRow(self, source_row: int, source_parent: QtCore.QModelIndex) -> bool:
        index = self.sourceModel().index(source_row, Columns.Date, source_parent)
        level_value = self.sourceModel().data(index, LogLevelRole)
        if level_value is None:
            return True
        return level_value >= self._filter_level

    def lessThan(self, left: QtCore.QModelIndex, right: QtCore.QModelIndex) -> bool:
        left_data = self.sourceModel().data(left, QtCore.Qt.DisplayRole) or ''
        right_data = self.sourceModel().data(right, QtCore.Qt.DisplayRole) or ''

        if left.column() == Columns.Date and right.column() == Columns.Date:
            try:
                return (datetime.strptime(left_data, '%Y-%m-%d %H:%M:%S') <
                        datetime.strptime(right_data, '%Y-%m-%d %H:%M:%S'))
            except ValueError:
                pass
        return left_data < right_data
