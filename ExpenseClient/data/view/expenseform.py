"""Expense form for creating and editing expenses.

This module provides:
    - ReceiptPicker: file chooser for an optional receipt attached on submit
    - ExpenseFormWidget: the form, in create or edit mode
    - ExpenseFormDialog: modal wrapper used to edit an existing expense
"""
import logging
import pathlib
from typing import Dict, Optional

from PySide6 import QtWidgets, QtCore

from .. import validation
from ...core import categories as categories_api
from ...core import expenses as expenses_api
from ...core import receipts as receipts_api
from ...core.types import Expense
from ...settings import lib
from ...settings import locale
from ...status import status
from ...ui import ui
from ...ui.actions import signals
from ...ui.widgets import CategoryComboBox, CurrencyComboBox, MessageLabel


class ReceiptPicker(QtWidgets.QWidget):
    """Choose a receipt file; shows its name and size."""
    pathChanged = QtCore.Signal(str)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self._path: Optional[str] = None

        layout = QtWidgets.QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(ui.Size.Indicator(2.0))

        self.choose_button = QtWidgets.QPushButton('Choose File...', self)
        layout.addWidget(self.choose_button)

        self.label = QtWidgets.QLabel('No file selected', self)
        self.label.setProperty('secondary', True)
        layout.addWidget(self.label, 1)

        self.clear_button = QtWidgets.QPushButton('Remove', self)
        self.clear_button.hide()
        layout.addWidget(self.clear_button)

        self.choose_button.clicked.connect(self.choose)
        self.clear_button.clicked.connect(lambda: self.set_path(None))

    def path(self) -> Optional[str]:
        return self._path

    def set_path(self, path: Optional[str]) -> None:
        self._path = path or None
        if self._path:
            p = pathlib.Path(self._path)
            size = p.stat().st_size if p.is_file() else 0
            self.label.setText(f'{p.name} ({size / 1024:.2f} KB)')
        else:
            self.label.setText('No file selected')
        self.clear_button.setVisible(bool(self._path))
        self.pathChanged.emit(self._path or '')

    @QtCore.Slot()
    def choose(self) -> None:
        path, _ = QtWidgets.QFileDialog.getOpenFileName(
            self, 'Select Receipt', '', validation.RECEIPT_FILE_FILTER
        )
        if not path:
            return
        error = validation.validate_receipt_file(path)
        if error:
            QtWidgets.QMessageBox.warning(self, 'Receipt', error)
            return
        self.set_path(path)


class ExpenseFormWidget(QtWidgets.QWidget):
    """Create or edit an expense.

    In create mode a successful submit resets the form; in edit mode the form is
    pre-filled from ``expense`` and the changes are sent with an update request.

    Signals:
        saved (Expense): Emitted with the stored expense after a successful submit.
        cancelled (): Emitted when the user leaves the form without saving.
    """
    saved = QtCore.Signal(object)
    cancelled = QtCore.Signal()

    def __init__(self, expense: Optional[Expense] = None, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setObjectName('ExpenseClientExpenseFormWidget')

        self._expense = expense
        self._error_labels: Dict[str, QtWidgets.QLabel] = {}

        self._create_ui()
        self._connect_signals()
        self.reset()

    @property
    def edit_mode(self) -> bool:
        return self._expense is not None

    def _create_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)
        o = ui.Size.Margin(1.0)
        layout.setContentsMargins(o, o, o, o)
        layout.setSpacing(ui.Size.Indicator(2.0))

        heading = QtWidgets.QLabel('Edit Expense' if self.edit_mode else 'New Expense', self)
        heading.setProperty('heading', True)
        layout.addWidget(heading)

        self.message_label = MessageLabel(self)
        layout.addWidget(self.message_label)

        card = QtWidgets.QFrame(self)
        card.setProperty('card', True)
        form = QtWidgets.QFormLayout(card)
        form.setFieldGrowthPolicy(QtWidgets.QFormLayout.AllNonFixedFieldsGrow)
        form.setContentsMargins(o, o, o, o)
        layout.addWidget(card)

        def add_row(label: str, key: str, editor: QtWidgets.QWidget) -> None:
            column = QtWidgets.QWidget(card)
            column_layout = QtWidgets.QVBoxLayout(column)
            column_layout.setContentsMargins(0, 0, 0, 0)
            column_layout.setSpacing(0)
            column_layout.addWidget(editor)

            error_label = QtWidgets.QLabel('', column)
            error_label.setProperty('error', True)
            error_label.hide()
            column_layout.addWidget(error_label)
            self._error_labels[key] = error_label

            form.addRow(label, column)

        self.amount_editor = QtWidgets.QLineEdit(card)
        self.amount_editor.setPlaceholderText('0.00')
        add_row('Amount *', 'amount', self.amount_editor)

        self.currency_editor = CurrencyComboBox(parent=card)
        add_row('Currency *', 'currency', self.currency_editor)

        self.date_editor = QtWidgets.QLineEdit(card)
        self.date_editor.setPlaceholderText('YYYY-MM-DD')
        add_row('Date *', 'date', self.date_editor)

        self.category_editor = CategoryComboBox(parent=card)
        add_row('Category', 'category', self.category_editor)

        self.description_editor = QtWidgets.QPlainTextEdit(card)
        self.description_editor.setPlaceholderText('What was it for?')
        self.description_editor.setFixedHeight(ui.Size.RowHeight(2.5))
        add_row('Description', 'description', self.description_editor)

        self.tags_editor = QtWidgets.QLineEdit(card)
        self.tags_editor.setPlaceholderText('Comma separated, e.g. food, travel')
        add_row('Tags', 'tags', self.tags_editor)

        self.receipt_picker = ReceiptPicker(card)
        add_row('Receipt', 'receipt', self.receipt_picker)

        self.receipt_label = QtWidgets.QLabel('', card)
        self.receipt_label.setProperty('secondary', True)
        self.receipt_label.hide()
        form.addRow('', self.receipt_label)

        buttons = QtWidgets.QHBoxLayout()
        buttons.addStretch(1)
        self.cancel_button = QtWidgets.QPushButton('Cancel', self)
        self.cancel_button.setVisible(self.edit_mode)
        buttons.addWidget(self.cancel_button)
        self.submit_button = QtWidgets.QPushButton('Save Changes' if self.edit_mode else 'Add Expense', self)
        self.submit_button.setProperty('primary', True)
        buttons.addWidget(self.submit_button)
        layout.addLayout(buttons)

        layout.addStretch(1)

    def _connect_signals(self) -> None:
        self.submit_button.clicked.connect(self.submit)
        self.cancel_button.clicked.connect(self.cancelled)
        self.amount_editor.returnPressed.connect(self.submit)

        signals.initializationRequested.connect(self.init_categories)
        signals.categoriesChanged.connect(self.init_categories)

    @QtCore.Slot()
    def init_categories(self) -> None:
        """Fetch the categories into the category picker."""
        self.category_editor.set_loading()
        try:
            result = categories_api.list_categories()
        except status.BaseStatusException as ex:
            logging.error(f'Failed to load categories: {ex}')
            self.category_editor.set_categories([])
            return
        self.category_editor.set_categories(categories_api.as_list(result))

    def form_data(self) -> validation.ExpenseFormData:
        return validation.ExpenseFormData(
            amount=self.amount_editor.text(),
            currency=self.currency_editor.currency(),
            date=self.date_editor.text(),
            category_id=self.category_editor.category_id(),
            description=self.description_editor.toPlainText(),
            tags=self.tags_editor.text(),
            receipt_path=self.receipt_picker.path(),
        )

    def set_form_data(self, form: validation.ExpenseFormData) -> None:
        self.amount_editor.setText(form.amount)
        self.currency_editor.set_currency(form.currency)
        self.date_editor.setText(form.date)
        self.category_editor.set_category_id(form.category_id)
        self.description_editor.setPlainText(form.description)
        self.tags_editor.setText(form.tags)
        self.receipt_picker.set_path(form.receipt_path)

    @QtCore.Slot()
    def reset(self) -> None:
        """Back to the defaults, or to the edited expense's values."""
        if self._expense is not None:
            form = validation.ExpenseFormData.from_expense(self._expense)
        else:
            form = validation.ExpenseFormData(currency=lib.settings['currency'])
        self.set_form_data(form)
        self.show_errors({})

        has_receipt = bool(self._expense and self._expense.receipt_mongo_id)
        self.receipt_label.setText('A receipt is attached. Choosing a file replaces it.' if has_receipt else '')
        self.receipt_label.setVisible(has_receipt)

    def show_errors(self, errors: Dict[str, str]) -> None:
        for key, label in self._error_labels.items():
            label.setText(errors.get(key, ''))
            label.setVisible(key in errors)

    @QtCore.Slot()
    def submit(self) -> None:
        """Validate, upload the receipt if one is chosen, then create or update the expense."""
        self.message_label.clear_message()

        form = self.form_data()
        errors = validation.validate_expense_form(form)
        self.show_errors(errors)
        if errors:
            return

        receipt_id = self._expense.receipt_mongo_id if self._expense else None
        if form.receipt_path:
            try:
                receipt = receipts_api.upload_receipt(form.receipt_path)
            except status.BaseStatusException as ex:
                logging.error(f'Receipt upload failed: {ex}')
                self.message_label.show_error('Failed to upload receipt. Please try again.')
                return
            receipt_id = receipt.id

        try:
            if self.edit_mode:
                expense = expenses_api.update_expense(
                    self._expense.id,
                    validation.build_expense_changes(form, receipt_id)
                )
            else:
                expense = expenses_api.create_expense(
                    validation.build_expense_draft(form, receipt_id)
                )
        except status.BaseStatusException as ex:
            fallback = (
                'Failed to update expense. Please try again.' if self.edit_mode
                else 'Failed to create expense. Please try again.'
            )
            self.message_label.show_error(status.describe(ex, fallback))
            return

        if self.edit_mode:
            self._expense = expense
            self.message_label.show_success('Expense updated successfully.')
        else:
            amount = locale.format_currency_value(expense.amount, expense.currency, lib.settings['locale'])
            self.message_label.show_success(f'Expense of {amount} added successfully.')
        self.reset()

        self.saved.emit(expense)
        signals.expensesChanged.emit()
        if form.receipt_path:
            signals.receiptsChanged.emit()


class ExpenseFormDialog(QtWidgets.QDialog):
    """Modal dialog editing an existing expense."""

    def __init__(self, expense: Expense, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setWindowTitle('Edit Expense')
        self.setModal(True)

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.form = ExpenseFormWidget(expense, parent=self)
        layout.addWidget(self.form)

        self.form.saved.connect(self.accept)
        self.form.cancelled.connect(self.reject)

        QtCore.QTimer.singleShot(0, self.form.init_categories)

    def sizeHint(self) -> QtCore.QSize:
        return QtCore.QSize(ui.Size.DefaultWidth(1.0), ui.Size.DefaultHeight(1.2))
