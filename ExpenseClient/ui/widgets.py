"""Small widgets shared by the pages.

This module provides:
    - PopupCombobox: combo box whose popup widens to fit its items
    - CategoryComboBox: category picker fed from the categories endpoint
    - CurrencyComboBox: picker of the supported currencies
    - MessageLabel: inline error and success banner
    - confirm: yes/no question box
"""
import logging
from typing import List, Optional

from PySide6 import QtWidgets, QtCore

from . import ui
from ..core.types import Category
from ..settings import locale


class PopupCombobox(QtWidgets.QComboBox):
    """Combo box that expands its popup to fit content width."""

    def showPopup(self):
        metrics = self.fontMetrics()
        max_text = max((metrics.horizontalAdvance(self.itemText(i)) for i in range(self.count())), default=0)

        padding = ui.Size.Margin(2.0)
        sb_width = self.view().verticalScrollBar().sizeHint().width()
        total_w = max(max_text + padding + sb_width, self.width())
        self.view().setMinimumWidth(total_w)

        super().showPopup()


class CategoryComboBox(PopupCombobox):
    """Category picker.

    The first item stands for "no category" and carries ``None`` as its data.
    While the categories are being fetched the box shows ``Loading categories...``.
    """

    def __init__(self, empty_label: str = 'No category', parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self._empty_label = empty_label
        self._pending_id: Optional[int] = None
        self.setMinimumWidth(ui.Size.DefaultWidth(0.25))
        self.set_categories([])

    def set_loading(self) -> None:
        self.blockSignals(True)
        self.clear()
        self.addItem('Loading categories...', userData=None)
        self.setEnabled(False)
        self.blockSignals(False)

    def set_categories(self, categories: List[Category]) -> None:
        current = self.category_id() if self._pending_id is None else self._pending_id

        self.blockSignals(True)
        self.clear()
        self.addItem(self._empty_label, userData=None)
        for category in categories:
            self.addItem(category.name, userData=category.id)
        self.setEnabled(True)
        self.blockSignals(False)

        self._pending_id = None
        self.set_category_id(current)

    def category_id(self) -> Optional[int]:
        if not self.isEnabled():
            return self._pending_id
        return self.currentData()

    def set_category_id(self, category_id: Optional[int]) -> None:
        """Select a category. The selection is kept until the categories arrive when they are loading."""
        if not self.isEnabled():
            self._pending_id = category_id
            return
        idx = self.findData(category_id) if category_id is not None else 0
        if idx < 0:
            logging.debug(f'Category {category_id} is not listed')
            idx = 0
        self.setCurrentIndex(idx)


class CurrencyComboBox(PopupCombobox):
    """Picker of the supported currencies, optionally with an "any" entry."""

    def __init__(self, any_label: Optional[str] = None, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        if any_label is not None:
            self.addItem(any_label, userData='')
        for code in locale.CURRENCIES:
            self.addItem(code, userData=code)

    def currency(self) -> str:
        return self.currentData() or ''

    def set_currency(self, code: str) -> None:
        idx = self.findData(code or '')
        self.setCurrentIndex(max(idx, 0))


class MessageLabel(QtWidgets.QLabel):
    """Word-wrapped banner, hidden while empty."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setWordWrap(True)
        self.setTextInteractionFlags(QtCore.Qt.TextSelectableByMouse)
        self.hide()

    def _set(self, text: str, kind: str) -> None:
        self.setProperty('error', kind == 'error')
        self.setProperty('success', kind == 'success')
        self.setProperty('secondary', kind == 'info')
        self.setText(text)
        self.setVisible(bool(text))
        # re-apply the stylesheet for the dynamic properties
        self.style().unpolish(self)
        self.style().polish(self)

    def show_error(self, text: str) -> None:
        self._set(text, 'error')

    def show_success(self, text: str) -> None:
        self._set(text, 'success')

    def show_info(self, text: str) -> None:
        self._set(text, 'info')

    def clear_message(self) -> None:
        self._set('', 'error')


def confirm(parent: Optional[QtWidgets.QWidget], title: str, text: str) -> bool:
    """Ask a yes/no question; True when the user answered yes."""
    res = QtWidgets.QMessageBox.question(
        parent,
        title,
        text,
        QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.No,
        QtWidgets.QMessageBox.No,
    )
    return res == QtWidgets.QMessageBox.Yes
