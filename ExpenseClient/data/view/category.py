"""Category management page.

This module provides:
    - CategoryEditor: the shared add/edit form
    - CategoriesWidget: searchable category list with add, edit and delete
"""
from typing import Optional

from PySide6 import QtWidgets, QtCore, QtGui

from .. import validation
from ..model.category import CategoryListModel, CategoryRole
from ...core import categories as categories_api
from ...core.types import Category
from ...status import status
from ...ui import ui
from ...ui.actions import signals
from ...ui.widgets import MessageLabel, confirm


class CategoryEditor(QtWidgets.QFrame):
    """Name editor used both to add a category and to rename one."""
    submitted = QtCore.Signal(str)
    cancelled = QtCore.Signal()

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setProperty('card', True)
        self._category: Optional[Category] = None

        layout = QtWidgets.QHBoxLayout(self)
        o = ui.Size.Margin(0.5)
        layout.setContentsMargins(o, o, o, o)
        layout.setSpacing(ui.Size.Indicator(2.0))

        self.name_editor = QtWidgets.QLineEdit(self)
        self.name_editor.setPlaceholderText('Category name')
        layout.addWidget(self.name_editor, 1)

        self.cancel_button = QtWidgets.QPushButton('Cancel', self)
        self.cancel_button.hide()
        layout.addWidget(self.cancel_button)

        self.save_button = QtWidgets.QPushButton('Add Category', self)
        self.save_button.setProperty('primary', True)
        layout.addWidget(self.save_button)

        self.save_button.clicked.connect(lambda: self.submitted.emit(self.name_editor.text()))
        self.name_editor.returnPressed.connect(lambda: self.submitted.emit(self.name_editor.text()))
        self.cancel_button.clicked.connect(self.cancelled)

    @property
    def category(self) -> Optional[Category]:
        """The category being renamed, None when adding."""
        return self._category

    def edit(self, category: Optional[Category]) -> None:
        self._category = category
        self.name_editor.setText(category.name if category else '')
        self.save_button.setText('Save' if category else 'Add Category')
        self.cancel_button.setVisible(category is not None)
        self.name_editor.setFocus()


class CategoriesWidget(QtWidgets.QWidget):
    """List, search, add, rename and delete categories."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setObjectName('ExpenseClientCategoriesWidget')

        self._search_timer = QtCore.QTimer(self)
        self._search_timer.setSingleShot(True)
        self._search_timer.setInterval(QtWidgets.QApplication.keyboardInputInterval())

        self._create_ui()
        self._init_actions()
        self._connect_signals()

    def _create_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)
        o = ui.Size.Margin(1.0)
        layout.setContentsMargins(o, o, o, o)
        layout.setSpacing(ui.Size.Indicator(2.0))

        heading = QtWidgets.QLabel('Categories', self)
        heading.setProperty('heading', True)
        layout.addWidget(heading)

        self.editor = CategoryEditor(self)
        layout.addWidget(self.editor)

        self.message_label = MessageLabel(self)
        layout.addWidget(self.message_label)

        self.search_editor = QtWidgets.QLineEdit(self)
        self.search_editor.setPlaceholderText('Search categories...')
        self.search_editor.setClearButtonEnabled(True)
        layout.addWidget(self.search_editor)

        self.view = QtWidgets.QListView(self)
        self.view.setModel(CategoryListModel(self.view))
        self.view.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.view.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.view.setContextMenuPolicy(QtCore.Qt.ActionsContextMenu)
        self.view.setUniformItemSizes(True)
        self.view.setProperty('noitembackground', True)
        layout.addWidget(self.view, 1)

        self.empty_label = QtWidgets.QLabel('No categories yet. Add one above.', self)
        self.empty_label.setAlignment(QtCore.Qt.AlignCenter)
        self.empty_label.setProperty('secondary', True)
        self.empty_label.hide()
        layout.addWidget(self.empty_label, 1)

        buttons = QtWidgets.QHBoxLayout()
        buttons.addStretch(1)
        self.edit_button = QtWidgets.QPushButton('Edit', self)
        buttons.addWidget(self.edit_button)
        self.delete_button = QtWidgets.QPushButton('Delete', self)
        self.delete_button.setProperty('danger', True)
        buttons.addWidget(self.delete_button)
        layout.addLayout(buttons)

    def _init_actions(self) -> None:
        action = QtGui.QAction('Edit', self.view)
        action.triggered.connect(self.edit_current)
        self.view.addAction(action)

        action = QtGui.QAction('Delete', self.view)
        action.setShortcut(QtGui.QKeySequence.Delete)
        action.setShortcutContext(QtCore.Qt.WidgetShortcut)
        action.triggered.connect(self.delete_current)
        self.view.addAction(action)

    def _connect_signals(self) -> None:
        self.editor.submitted.connect(self.save_category)
        self.editor.cancelled.connect(lambda: self.editor.edit(None))

        self.edit_button.clicked.connect(self.edit_current)
        self.delete_button.clicked.connect(self.delete_current)
        self.view.doubleClicked.connect(self.edit_current)

        self.search_editor.textChanged.connect(lambda _: self._search_timer.start())
        self._search_timer.timeout.connect(self.init_data)

        signals.initializationRequested.connect(self.init_data)
        signals.categoriesChanged.connect(self.init_data)
        signals.loggedOut.connect(self.clear_data)

    def current_category(self) -> Optional[Category]:
        index = self.view.currentIndex()
        if not index.isValid():
            return None
        return index.data(CategoryRole)

    @QtCore.Slot()
    def init_data(self) -> None:
        """Fetch every category, or the ones matching the search text."""
        q = self.search_editor.text().strip()
        try:
            if q:
                result = categories_api.search_categories(q)
            else:
                result = categories_api.list_categories()
        except status.BaseStatusException as ex:
            self.message_label.show_error(status.describe(ex, 'Failed to load categories'))
            return

        categories = categories_api.as_list(result)
        self.view.model().set_categories(categories)
        self.view.setVisible(bool(categories))
        self.empty_label.setVisible(not categories)
        if not categories and q:
            self.empty_label.setText(f'No categories match "{q}".')
        else:
            self.empty_label.setText('No categories yet. Add one above.')

    @QtCore.Slot(str)
    def save_category(self, name: str) -> None:
        self.message_label.clear_message()

        error = validation.validate_category_name(name)
        if error:
            self.message_label.show_error(error)
            return

        category = self.editor.category
        try:
            if category is None:
                categories_api.create_category(name.strip())
            else:
                categories_api.update_category(category.id, name.strip())
        except status.BaseStatusException as ex:
            self.message_label.show_error(status.describe(ex, 'Failed to save category'))
            return

        self.editor.edit(None)
        signals.categoriesChanged.emit()

    @QtCore.Slot()
    def edit_current(self) -> None:
        category = self.current_category()
        if category is not None:
            self.message_label.clear_message()
            self.editor.edit(category)

    @QtCore.Slot()
    def delete_current(self) -> None:
        category = self.current_category()
        if category is None:
            return
        if not confirm(self, 'Delete Category', f'Are you sure you want to delete category "{category.name}"?'):
            return
        try:
            categories_api.delete_category(category.id)
        except status.BaseStatusException as ex:
            self.message_label.show_error(status.describe(ex, 'Failed to delete category'))
            return

        if self.editor.category is not None and self.editor.category.id == category.id:
            self.editor.edit(None)
        signals.categoriesChanged.emit()
        # expenses of a deleted category lose it
        signals.expensesChanged.emit()

    @QtCore.Slot()
    def clear_data(self) -> None:
        self.view.model().clear_data()
        self.editor.edit(None)
        self.search_editor.blockSignals(True)
        self.search_editor.clear()
        self.search_editor.blockSignals(False)
        self.message_label.clear_message()
