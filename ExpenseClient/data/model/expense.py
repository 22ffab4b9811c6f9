import enum
import logging
from typing import Any, List, Optional

from PySide6 import QtCore

from ...core.types import Expense
from ...settings import lib
from ...settings import locale
from ...ui import ui

ExpenseRole = QtCore.Qt.UserRole + 1
IdRole = QtCore.Qt.UserRole + 2
AmountRole = QtCore.Qt.UserRole + 3


class Columns(enum.IntEnum):
    Date = 0
    Description = 1
    Category = 2
    Amount = 3
    Tags = 4


class ExpensesTableModel(QtCore.QAbstractTableModel):
    """Table model of one page of expenses."""
    header = ['Date', 'Description', 'Category', 'Amount', 'Tags']

    def __init__(self, parent: QtCore.QObject | None = None) -> None:
        super().__init__(parent=parent)
        self.setObjectName('ExpenseClientExpensesTableModel')
        self._expenses: List[Expense] = []

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._expenses)

    def columnCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self.header)

    def expense(self, row: int) -> Optional[Expense]:
        if 0 <= row < len(self._expenses):
            return self._expenses[row]
        return None

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole) -> Any:
        if not index.isValid():
            return None

        expense = self.expense(index.row())
        if expense is None:
            return None

        if role == ExpenseRole:
            return expense
        if role == IdRole:
            return expense.id
        if role == AmountRole:
            return expense.amount

        col = index.column()

        if role == QtCore.Qt.DisplayRole:
            if col == Columns.Date:
                return locale.format_date(expense.date, lib.settings['locale'])
            if col == Columns.Description:
                return expense.description or '-'
            if col == Columns.Category:
                return expense.category_name or 'Uncategorized'
            if col == Columns.Amount:
                return locale.format_currency_value(expense.amount, expense.currency, lib.settings['locale'])
            if col == Columns.Tags:
                return ', '.join(expense.tags)
            return None

        if role in (QtCore.Qt.ToolTipRole, QtCore.Qt.StatusTipRole):
            if col == Columns.Description and expense.description:
                return expense.description
            if col == Columns.Tags and expense.tags:
                return ', '.join(expense.tags)
            return None

        if role == QtCore.Qt.FontRole and col == Columns.Amount:
            font, _ = ui.Font.BoldFont(ui.Size.MediumText(1.0))
            return font

        if role == QtCore.Qt.ForegroundRole:
            if col in (Columns.Category, Columns.Tags) or (col == Columns.Description and not expense.description):
                return ui.Color.SecondaryText()

        if role == QtCore.Qt.TextAlignmentRole:
            if col == Columns.Amount:
                return QtCore.Qt.AlignRight | QtCore.Qt.AlignVCenter
            return QtCore.Qt.AlignLeft | QtCore.Qt.AlignVCenter

        return None

    def headerData(self, section: int, orientation: QtCore.Qt.Orientation,
                   role: int = QtCore.Qt.DisplayRole) -> Any:
        if orientation != QtCore.Qt.Horizontal:
            return None
        if role == QtCore.Qt.DisplayRole and 0 <= section < len(self.header):
            return self.header[section]
        if role == QtCore.Qt.TextAlignmentRole and section == Columns.Amount:
            return QtCore.Qt.AlignRight | QtCore.Qt.AlignVCenter
        return None

    def set_expenses(self, expenses: List[Expense]) -> None:
        logging.debug(f'Showing {len(expenses)} expenses')
        self.beginResetModel()
        self._expenses = list(expenses)
        self.endResetModel()

    @QtCore.Slot()
    def clear_data(self) -> None:
        self.beginResetModel()
        self._expenses = []
        self.endResetModel()
