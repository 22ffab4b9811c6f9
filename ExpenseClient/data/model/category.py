import logging
from typing import Any, List, Optional

from PySide6 import QtCore

from ...core.types import Category
from ...settings import lib
from ...settings import locale

CategoryRole = QtCore.Qt.UserRole + 1
IdRole = QtCore.Qt.UserRole + 2


class CategoryListModel(QtCore.QAbstractListModel):
    """List model of categories, used by the category page and the category pickers."""

    def __init__(self, parent: QtCore.QObject | None = None) -> None:
        super().__init__(parent=parent)
        self.setObjectName('ExpenseClientCategoryListModel')
        self._categories: List[Category] = []

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._categories)

    def category(self, row: int) -> Optional[Category]:
        if 0 <= row < len(self._categories):
            return self._categories[row]
        return None

    def row_of(self, category_id: Optional[int]) -> int:
        """The row of the category with the given id, or -1."""
        for i, f in enumerate(self._categories):
            if f.id == category_id:
                return i
        return -1

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole) -> Any:
        if not index.isValid():
            return None
        category = self.category(index.row())
        if category is None:
            return None

        if role == QtCore.Qt.DisplayRole:
            return category.name
        if role in (QtCore.Qt.ToolTipRole, QtCore.Qt.StatusTipRole):
            if category.created_at:
                created = locale.format_datetime(category.created_at, lib.settings['locale'])
                return f'{category.name}\nCreated {created}'
            return category.name
        if role == CategoryRole:
            return category
        if role == IdRole:
            return category.id
        return None

    def set_categories(self, categories: List[Category]) -> None:
        logging.debug(f'Showing {len(categories)} categories')
        self.beginResetModel()
        self._categories = list(categories)
        self.endResetModel()

    @QtCore.Slot()
    def clear_data(self) -> None:
        self.beginResetModel()
        self._categories = []
        self.endResetModel()
