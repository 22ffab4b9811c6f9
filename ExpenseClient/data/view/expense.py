"""Expense list page.

This module provides:
    - FilterBar: the search, date, category, amount, currency and tag filters
    - PaginationBar: page size, previous/next and the range labels
    - ExpensesView: table of the current page with edit and delete actions
    - ExpensesWidget: the page tying them to the expenses endpoints
"""
import logging
from typing import Optional

from PySide6 import QtWidgets, QtCore, QtGui

from ..filters import ExpenseListState, FilterFields, PAGE_SIZES, SORT
from ..model.expense import ExpensesTableModel, ExpenseRole, Columns
from ...core import categories as categories_api
from ...core import expenses as expenses_api
from ...core.types import Expense
from ...settings import lib
from ...settings import locale
from ...status import status
from ...ui import ui
from ...ui.actions import signals
from ...ui.widgets import CategoryComboBox, CurrencyComboBox, MessageLabel, confirm


class FilterBar(QtWidgets.QFrame):
    """Filter inputs of the expense list.

    Signals:
        applyRequested (): The user asked to apply the filters.
        clearRequested (): The user asked to clear the filters.
    """
    applyRequested = QtCore.Signal()
    clearRequested = QtCore.Signal()

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setProperty('card', True)

        self.search_editor: QtWidgets.QLineEdit
        self.from_editor: QtWidgets.QLineEdit
        self.to_editor: QtWidgets.QLineEdit
        self.category_editor: CategoryComboBox
        self.min_editor: QtWidgets.QLineEdit
        self.max_editor: QtWidgets.QLineEdit
        self.currency_editor: CurrencyComboBox
        self.tag_editor: QtWidgets.QLineEdit

        self._create_ui()
        self._connect_signals()

    def _create_ui(self) -> None:
        layout = QtWidgets.QGridLayout(self)
        o = ui.Size.Margin(0.5)
        layout.setContentsMargins(o, o, o, o)
        layout.setSpacing(ui.Size.Indicator(2.0))

        self.search_editor = QtWidgets.QLineEdit(self)
        self.search_editor.setPlaceholderText('Search description...')
        self.search_editor.setClearButtonEnabled(True)

        self.from_editor = QtWidgets.QLineEdit(self)
        self.from_editor.setPlaceholderText('From (YYYY-MM-DD)')
        self.to_editor = QtWidgets.QLineEdit(self)
        self.to_editor.setPlaceholderText('To (YYYY-MM-DD)')

        self.category_editor = CategoryComboBox('All categories', parent=self)

        self.min_editor = QtWidgets.QLineEdit(self)
        self.min_editor.setPlaceholderText('Min amount')
        self.max_editor = QtWidgets.QLineEdit(self)
        self.max_editor.setPlaceholderText('Max amount')

        self.currency_editor = CurrencyComboBox('All currencies', parent=self)

        self.tag_editor = QtWidgets.QLineEdit(self)
        self.tag_editor.setPlaceholderText('Tag')

        self.apply_button = QtWidgets.QPushButton('Apply Filters', self)
        self.apply_button.setProperty('primary', True)
        self.clear_button = QtWidgets.QPushButton('Clear', self)

        layout.addWidget(self.search_editor, 0, 0, 1, 2)
        layout.addWidget(self.from_editor, 0, 2)
        layout.addWidget(self.to_editor, 0, 3)
        layout.addWidget(self.category_editor, 1, 0)
        layout.addWidget(self.min_editor, 1, 1)
        layout.addWidget(self.max_editor, 1, 2)
        layout.addWidget(self.currency_editor, 1, 3)
        layout.addWidget(self.tag_editor, 2, 0)

        buttons = QtWidgets.QHBoxLayout()
        buttons.addStretch(1)
        buttons.addWidget(self.clear_button)
        buttons.addWidget(self.apply_button)
        layout.addLayout(buttons, 2, 1, 1, 3)

    def _connect_signals(self) -> None:
        self.apply_button.clicked.connect(self.applyRequested)
        self.clear_button.clicked.connect(self.clearRequested)
        for editor in (self.search_editor, self.from_editor, self.to_editor,
                       self.min_editor, self.max_editor, self.tag_editor):
            editor.returnPressed.connect(self.applyRequested)

    def fields(self) -> FilterFields:
        return FilterFields(
            q=self.search_editor.text(),
            from_date=self.from_editor.text(),
            to_date=self.to_editor.text(),
            category_id=self.category_editor.category_id(),
            min_amount=self.min_editor.text(),
            max_amount=self.max_editor.text(),
            currency=self.currency_editor.currency(),
            tag=self.tag_editor.text(),
        )

    def set_fields(self, fields: FilterFields) -> None:
        self.search_editor.setText(fields.q)
        self.from_editor.setText(fields.from_date)
        self.to_editor.setText(fields.to_date)
        self.category_editor.set_category_id(fields.category_id)
        self.min_editor.setText(fields.min_amount)
        self.max_editor.setText(fields.max_amount)
        self.currency_editor.set_currency(fields.currency)
        self.tag_editor.setText(fields.tag)


class PaginationBar(QtWidgets.QWidget):
    """Page size picker, previous/next buttons and the range labels."""
    previousRequested = QtCore.Signal()
    nextRequested = QtCore.Signal()
    sizeChanged = QtCore.Signal(int)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self._create_ui()
        self._connect_signals()

    def _create_ui(self) -> None:
        layout = QtWidgets.QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(ui.Size.Indicator(2.0))

        self.range_label = QtWidgets.QLabel('', self)
        self.range_label.setProperty('secondary', True)
        layout.addWidget(self.range_label)

        self.total_label = QtWidgets.QLabel('', self)
        layout.addWidget(self.total_label)

        layout.addStretch(1)

        label = QtWidgets.QLabel('Per page:', self)
        label.setProperty('secondary', True)
        layout.addWidget(label)

        self.size_editor = QtWidgets.QComboBox(self)
        for size in PAGE_SIZES:
            self.size_editor.addItem(str(size), userData=size)
        layout.addWidget(self.size_editor)

        self.previous_button = QtWidgets.QPushButton('Previous', self)
        layout.addWidget(self.previous_button)

        self.page_label = QtWidgets.QLabel('', self)
        layout.addWidget(self.page_label)

        self.next_button = QtWidgets.QPushButton('Next', self)
        layout.addWidget(self.next_button)

    def _connect_signals(self) -> None:
        self.previous_button.clicked.connect(self.previousRequested)
        self.next_button.clicked.connect(self.nextRequested)
        self.size_editor.activated.connect(
            lambda idx: self.sizeChanged.emit(self.size_editor.itemData(idx))
        )

    def update_state(self, state: ExpenseListState) -> None:
        self.range_label.setText(state.range_text())
        self.page_label.setText(state.page_text())
        self.previous_button.setEnabled(state.has_previous())
        self.next_button.setEnabled(state.has_next())
        idx = self.size_editor.findData(state.size)
        if idx >= 0 and idx != self.size_editor.currentIndex():
            self.size_editor.setCurrentIndex(idx)

    def set_total(self, text: str) -> None:
        self.total_label.setText(text)


class ExpensesView(QtWidgets.QTableView):
    """Table of the expenses of the current page."""
    editRequested = QtCore.Signal(object)
    deleteRequested = QtCore.Signal(object)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.setContextMenuPolicy(QtCore.Qt.ActionsContextMenu)

        self.setShowGrid(False)
        self.setWordWrap(False)
        self.setTextElideMode(QtCore.Qt.ElideRight)

        self.setItemDelegate(ui.RoundedRowDelegate(parent=self))
        self.setProperty('noitembackground', True)

        self.setModel(ExpensesTableModel(self))
        self._init_headers()
        self._init_actions()

        self.doubleClicked.connect(self._on_double_clicked)

    def _init_headers(self) -> None:
        self.verticalHeader().setVisible(False)
        self.verticalHeader().setSectionResizeMode(QtWidgets.QHeaderView.Fixed)
        self.verticalHeader().setDefaultSectionSize(ui.Size.RowHeight(1.0))

        header = self.horizontalHeader()
        header.setSectionResizeMode(QtWidgets.QHeaderView.ResizeToContents)
        header.setSectionResizeMode(Columns.Description, QtWidgets.QHeaderView.Stretch)
        header.setHighlightSections(False)

    def _init_actions(self) -> None:
        action = QtGui.QAction('Edit', self)
        action.setShortcut('Ctrl+E')
        action.setShortcutContext(QtCore.Qt.WidgetShortcut)
        action.triggered.connect(lambda: self._emit_for_current(self.editRequested))
        self.addAction(action)

        action = QtGui.QAction('Delete', self)
        action.setShortcut(QtGui.QKeySequence.Delete)
        action.setShortcutContext(QtCore.Qt.WidgetShortcut)
        action.triggered.connect(lambda: self._emit_for_current(self.deleteRequested))
        self.addAction(action)

    def current_expense(self) -> Optional[Expense]:
        index = self.currentIndex()
        if not index.isValid():
            return None
        return index.data(ExpenseRole)

    def _emit_for_current(self, signal: QtCore.SignalInstance) -> None:
        expense = self.current_expense()
        if expense is not None:
            signal.emit(expense)

    @QtCore.Slot(QtCore.QModelIndex)
    def _on_double_clicked(self, index: QtCore.QModelIndex) -> None:
        expense = index.data(ExpenseRole)
        if expense is not None:
            self.editRequested.emit(expense)


class ExpensesWidget(QtWidgets.QWidget):
    """The expense list page: filters, paginated table and the filtered total."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setObjectName('ExpenseClientExpensesWidget')

        self.state = ExpenseListState(lib.settings['page_size'])

        self.filter_bar: FilterBar
        self.message_label: MessageLabel
        self.view: ExpensesView
        self.empty_label: QtWidgets.QLabel
        self.pagination: PaginationBar

        self._init_data_timer = QtCore.QTimer(self)
        self._init_data_timer.setSingleShot(True)
        self._init_data_timer.setInterval(0)

        self._create_ui()
        self._connect_signals()
        self._update_controls()

    def _create_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)
        o = ui.Size.Margin(1.0)
        layout.setContentsMargins(o, o, o, o)
        layout.setSpacing(ui.Size.Indicator(2.0))

        row = QtWidgets.QHBoxLayout()
        heading = QtWidgets.QLabel('Expenses', self)
        heading.setProperty('heading', True)
        row.addWidget(heading)
        row.addStretch(1)
        self.add_button = QtWidgets.QPushButton('Add Expense', self)
        self.add_button.setProperty('primary', True)
        row.addWidget(self.add_button)
        layout.addLayout(row)

        self.filter_bar = FilterBar(self)
        layout.addWidget(self.filter_bar)

        self.message_label = MessageLabel(self)
        layout.addWidget(self.message_label)

        self.view = ExpensesView(self)
        layout.addWidget(self.view, 1)

        self.empty_label = QtWidgets.QLabel('No expenses found. Try adjusting your filters.', self)
        self.empty_label.setAlignment(QtCore.Qt.AlignCenter)
        self.empty_label.setProperty('secondary', True)
        self.empty_label.hide()
        layout.addWidget(self.empty_label, 1)

        self.pagination = PaginationBar(self)
        layout.addWidget(self.pagination)

    def _connect_signals(self) -> None:
        self._init_data_timer.timeout.connect(self.init_data)

        self.filter_bar.applyRequested.connect(self.apply_filters)
        self.filter_bar.clearRequested.connect(self.clear_filters)

        self.pagination.previousRequested.connect(self.previous_page)
        self.pagination.nextRequested.connect(self.next_page)
        self.pagination.sizeChanged.connect(self.set_page_size)

        self.view.editRequested.connect(signals.editExpenseRequested)
        self.view.deleteRequested.connect(self.delete_expense)

        self.add_button.clicked.connect(lambda: signals.pageRequested.emit('new_expense'))

        signals.initializationRequested.connect(self.start_init_data_timer)
        signals.initializationRequested.connect(self.init_categories)
        signals.expensesChanged.connect(self.start_init_data_timer)
        signals.categoriesChanged.connect(self.init_categories)
        signals.loggedOut.connect(self.clear_data)

        @QtCore.Slot(str, object)
        def metadata_changed(key: str, value: object) -> None:
            if key in ('locale', 'currency'):
                self.view.model().layoutChanged.emit()

        signals.metadataChanged.connect(metadata_changed)

    @QtCore.Slot()
    def start_init_data_timer(self) -> None:
        self._init_data_timer.start(self._init_data_timer.interval())

    @QtCore.Slot()
    def init_categories(self) -> None:
        self.filter_bar.category_editor.set_loading()
        try:
            result = categories_api.list_categories()
        except status.BaseStatusException as ex:
            logging.error(f'Failed to load categories: {ex}')
            self.filter_bar.category_editor.set_categories([])
            return
        self.filter_bar.category_editor.set_categories(categories_api.as_list(result))

    @QtCore.Slot()
    def init_data(self) -> None:
        """Fetch the current page with the active filters, then the filtered total."""
        self.message_label.clear_message()
        try:
            page = expenses_api.list_expenses(
                page=self.state.page,
                size=self.state.size,
                sort=SORT,
                filters=self.state.filters,
            )
        except status.BaseStatusException as ex:
            self.message_label.show_error(status.describe(ex, 'Failed to load expenses'))
            self.view.model().clear_data()
            self._update_controls()
            return

        # the last row of the last page was deleted
        if not page.content and 0 < page.total_pages <= self.state.page:
            self.state.page = page.total_pages - 1
            self.init_data()
            return

        self.state.update(page)
        self.view.model().set_expenses(page.content)
        self._update_controls()
        self.init_total()

    @QtCore.Slot()
    def init_total(self) -> None:
        try:
            total = expenses_api.get_total(self.state.filters)
        except status.BaseStatusException as ex:
            logging.warning(f'Failed to load the expense total: {ex}')
            self.pagination.set_total('')
            return
        amount = locale.format_currency_value(total, lib.settings['currency'], lib.settings['locale'])
        self.pagination.set_total(f'Total: {amount}')

    def _update_controls(self) -> None:
        has_rows = self.view.model().rowCount() > 0
        self.view.setVisible(has_rows)
        self.empty_label.setVisible(not has_rows)
        self.pagination.update_state(self.state)

    @QtCore.Slot()
    def apply_filters(self) -> None:
        try:
            self.state.apply_filters(self.filter_bar.fields())
        except ValueError as ex:
            self.message_label.show_error(str(ex))
            return
        self.init_data()

    @QtCore.Slot()
    def clear_filters(self) -> None:
        self.state.clear_filters()
        self.filter_bar.set_fields(self.state.fields)
        self.init_data()

    @QtCore.Slot()
    def previous_page(self) -> None:
        if not self.state.has_previous():
            return
        self.state.previous_page()
        self.init_data()

    @QtCore.Slot()
    def next_page(self) -> None:
        if not self.state.has_next():
            return
        self.state.next_page()
        self.init_data()

    @QtCore.Slot(int)
    def set_page_size(self, size: int) -> None:
        if size == self.state.size:
            return
        self.state.set_size(size)
        self.init_data()

    @QtCore.Slot(object)
    def delete_expense(self, expense: Expense) -> None:
        if not confirm(self, 'Delete Expense', 'Are you sure you want to delete this expense?'):
            return
        try:
            expenses_api.delete_expense(expense.id)
        except status.BaseStatusException as ex:
            self.message_label.show_error(status.describe(ex, 'Failed to delete expense'))
            return
        signals.expensesChanged.emit()

    @QtCore.Slot()
    def clear_data(self) -> None:
        self.state = ExpenseListState(lib.settings['page_size'])
        self.filter_bar.set_fields(self.state.fields)
        self.view.model().clear_data()
        self.pagination.set_total('')
        self.message_label.clear_message()
        self._update_controls()
