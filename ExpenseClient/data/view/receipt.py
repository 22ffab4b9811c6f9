"""Receipt upload, gallery and detail views.

This module provides:
    - ReceiptUploadWidget: pick, preview and upload a receipt file
    - ReceiptDelegate: thumbnail card painter of the gallery
    - ReceiptGallery: grid of receipts with background thumbnails
    - ReceiptDialog: receipt details with notes, link, unlink and delete
    - ReceiptsWidget: the receipts page listing unassigned receipts
"""
import logging
import pathlib
from typing import Optional

from PySide6 import QtWidgets, QtCore, QtGui

from .. import validation
from ..model.receipt import ReceiptListModel, ReceiptRole, ThumbnailRole, thumbnail_from_bytes
from ...core import receipts as receipts_api
from ...core.types import Receipt
from ...settings import lib
from ...settings import locale
from ...status import status
from ...ui import ui
from ...ui.actions import signals
from ...ui.widgets import MessageLabel, confirm


class ReceiptUploadWidget(QtWidgets.QFrame):
    """Choose an image or PDF file and upload it as an unassigned receipt.

    Signals:
        uploaded (Receipt): Emitted with the stored receipt.
    """
    uploaded = QtCore.Signal(object)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setProperty('card', True)
        self._path: Optional[str] = None

        self._create_ui()
        self._connect_signals()

    def _create_ui(self) -> None:
        layout = QtWidgets.QHBoxLayout(self)
        o = ui.Size.Margin(0.5)
        layout.setContentsMargins(o, o, o, o)
        layout.setSpacing(ui.Size.Margin(0.5))

        self.preview_label = QtWidgets.QLabel(self)
        self.preview_label.setFixedSize(ui.Size.Thumbnail(0.75), ui.Size.Thumbnail(0.75))
        self.preview_label.setAlignment(QtCore.Qt.AlignCenter)
        self.preview_label.setProperty('secondary', True)
        layout.addWidget(self.preview_label)

        column = QtWidgets.QVBoxLayout()
        column.setSpacing(ui.Size.Indicator(1.0))
        layout.addLayout(column, 1)

        row = QtWidgets.QHBoxLayout()
        self.choose_button = QtWidgets.QPushButton('Choose File...', self)
        row.addWidget(self.choose_button)
        self.file_label = QtWidgets.QLabel('No file selected', self)
        self.file_label.setProperty('secondary', True)
        row.addWidget(self.file_label, 1)
        column.addLayout(row)

        self.notes_editor = QtWidgets.QLineEdit(self)
        self.notes_editor.setPlaceholderText('Notes (optional)')
        column.addWidget(self.notes_editor)

        self.message_label = MessageLabel(self)
        column.addWidget(self.message_label)

        row = QtWidgets.QHBoxLayout()
        row.addStretch(1)
        self.upload_button = QtWidgets.QPushButton('Upload Receipt', self)
        self.upload_button.setProperty('primary', True)
        row.addWidget(self.upload_button)
        column.addLayout(row)

    def _connect_signals(self) -> None:
        self.choose_button.clicked.connect(self.choose)
        self.upload_button.clicked.connect(self.upload)

    def path(self) -> Optional[str]:
        return self._path

    @QtCore.Slot()
    def choose(self) -> None:
        path, _ = QtWidgets.QFileDialog.getOpenFileName(
            self, 'Select Receipt', '', validation.RECEIPT_FILE_FILTER
        )
        if path:
            self.set_path(path)

    def set_path(self, path: Optional[str]) -> None:
        """Select a file. Unsupported files are rejected with a message."""
        self.message_label.clear_message()
        self.preview_label.clear()

        if path:
            error = validation.validate_receipt_file(path, receipts_api.guess_mime_type(path))
            if error:
                self._path = None
                self.file_label.setText('No file selected')
                self.message_label.show_error(error)
                return

        self._path = path or None
        if not self._path:
            self.file_label.setText('No file selected')
            return

        p = pathlib.Path(self._path)
        size = p.stat().st_size if p.is_file() else 0
        self.file_label.setText(f'{p.name} ({size / 1024:.2f} KB)')

        if p.suffix.lower() == validation.PDF_SUFFIX:
            self.preview_label.setText('PDF')
            return
        pixmap = QtGui.QPixmap(self._path)
        if pixmap.isNull():
            self.preview_label.setText('No preview')
            return
        self.preview_label.setPixmap(pixmap.scaled(
            self.preview_label.size(), QtCore.Qt.KeepAspectRatio, QtCore.Qt.SmoothTransformation
        ))

    @QtCore.Slot()
    def upload(self) -> None:
        self.message_label.clear_message()
        error = validation.validate_receipt_file(self._path)
        if error:
            self.message_label.show_error(error)
            return

        try:
            receipt = receipts_api.upload_receipt(self._path, self.notes_editor.text().strip() or None)
        except status.BaseStatusException as ex:
            self.message_label.show_error(status.describe(ex, 'Failed to upload receipt'))
            return

        self.notes_editor.clear()
        self.set_path(None)
        self.message_label.show_success(f'Uploaded {receipt.file_name}.')
        self.uploaded.emit(receipt)


class ReceiptDelegate(QtWidgets.QStyledItemDelegate):
    """Paints a receipt as a card: thumbnail or file type badge above the file name."""

    def sizeHint(self, option: QtWidgets.QStyleOptionViewItem, index: QtCore.QModelIndex) -> QtCore.QSize:
        edge = ui.Size.Thumbnail(1.0) + ui.Size.Margin(1.0)
        return QtCore.QSize(edge, edge + ui.Size.RowHeight(1.0))

    def paint(self, painter: QtGui.QPainter, option: QtWidgets.QStyleOptionViewItem,
              index: QtCore.QModelIndex) -> None:
        receipt: Receipt = index.data(ReceiptRole)
        if receipt is None:
            return

        hover = option.state & QtWidgets.QStyle.State_MouseOver
        selected = option.state & QtWidgets.QStyle.State_Selected

        painter.save()
        painter.setRenderHint(QtGui.QPainter.Antialiasing, True)

        o = ui.Size.Indicator(1.0)
        rect = QtCore.QRectF(option.rect).adjusted(o, o, -o, -o)
        r = ui.Size.Indicator(2.0)

        painter.setPen(QtCore.Qt.NoPen)
        color = ui.Color.Background() if (hover or selected) else ui.Color.DarkBackground()
        painter.setBrush(color)
        painter.drawRoundedRect(rect, r, r)

        name_h = ui.Size.RowHeight(1.0)
        image_rect = rect.adjusted(o, o, -o, -name_h)
        name_rect = QtCore.QRectF(rect.left() + o, rect.bottom() - name_h, rect.width() - o * 2, name_h)

        pixmap = index.data(ThumbnailRole)
        if pixmap is not None and not pixmap.isNull():
            size = pixmap.size().scaled(image_rect.size().toSize(), QtCore.Qt.KeepAspectRatio)
            target = QtCore.QRectF(0, 0, size.width(), size.height())
            target.moveCenter(image_rect.center())
            painter.drawPixmap(target.toRect(), pixmap)
        else:
            font, _ = ui.Font.BoldFont(ui.Size.LargeText(1.0))
            painter.setFont(font)
            painter.setPen(ui.Color.DisabledText())
            if receipt.is_pdf:
                badge = 'PDF'
            elif receipt.is_image:
                badge = 'Loading...'
            else:
                badge = 'File'
            painter.drawText(image_rect, QtCore.Qt.AlignCenter, badge)

        font, metrics = ui.Font.MediumFont(ui.Size.SmallText(1.0))
        painter.setFont(font)
        painter.setPen(ui.Color.Text())
        text = metrics.elidedText(receipt.file_name, QtCore.Qt.ElideMiddle, name_rect.width())
        painter.drawText(name_rect, QtCore.Qt.AlignCenter, text)

        painter.restore()


class ReceiptGallery(QtWidgets.QListView):
    """Grid of receipts.

    Signals:
        receiptActivated (Receipt): Emitted when a receipt is clicked.
        deleteRequested (Receipt): Emitted by the delete action.
    """
    receiptActivated = QtCore.Signal(object)
    deleteRequested = QtCore.Signal(object)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self.setViewMode(QtWidgets.QListView.IconMode)
        self.setResizeMode(QtWidgets.QListView.Adjust)
        self.setMovement(QtWidgets.QListView.Static)
        self.setUniformItemSizes(True)
        self.setSpacing(ui.Size.Indicator(2.0))
        self.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.setMouseTracking(True)
        self.setContextMenuPolicy(QtCore.Qt.ActionsContextMenu)
        self.setProperty('noitembackground', True)

        self.setItemDelegate(ReceiptDelegate(self))
        self.setModel(ReceiptListModel(self))

        self._init_actions()
        self.clicked.connect(self._on_clicked)

    def _init_actions(self) -> None:
        action = QtGui.QAction('Open', self)
        action.triggered.connect(lambda: self._on_clicked(self.currentIndex()))
        self.addAction(action)

        action = QtGui.QAction('Delete', self)
        action.setShortcut(QtGui.QKeySequence.Delete)
        action.setShortcutContext(QtCore.Qt.WidgetShortcut)
        action.triggered.connect(self._on_delete)
        self.addAction(action)

    @QtCore.Slot(QtCore.QModelIndex)
    def _on_clicked(self, index: QtCore.QModelIndex) -> None:
        if not index.isValid():
            return
        receipt = index.data(ReceiptRole)
        if receipt is not None:
            self.receiptActivated.emit(receipt)

    @QtCore.Slot()
    def _on_delete(self) -> None:
        index = self.currentIndex()
        if index.isValid():
            self.deleteRequested.emit(index.data(ReceiptRole))


class ReceiptDialog(QtWidgets.QDialog):
    """Details of one receipt.

    Shows the image (or a PDF placeholder), the file name, type, size, upload date,
    the linked expense and the notes. The notes can be edited and the receipt can
    be linked to an expense, unlinked or deleted.

    Signals:
        receiptChanged (Receipt): Emitted after the notes or the link changed.
        receiptDeleted (str): Emitted with the id of the deleted receipt.
    """
    receiptChanged = QtCore.Signal(object)
    receiptDeleted = QtCore.Signal(str)

    def __init__(self, receipt: Receipt, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setWindowTitle(receipt.file_name or 'Receipt')
        self._receipt = receipt

        self._create_ui()
        self._connect_signals()
        self._update_details()

        QtCore.QTimer.singleShot(0, self.init_preview)

    @property
    def receipt(self) -> Receipt:
        return self._receipt

    def _create_ui(self) -> None:
        layout = QtWidgets.QHBoxLayout(self)
        o = ui.Size.Margin(1.0)
        layout.setContentsMargins(o, o, o, o)
        layout.setSpacing(o)

        self.preview_label = QtWidgets.QLabel(self)
        self.preview_label.setMinimumSize(ui.Size.Thumbnail(2.5), ui.Size.Thumbnail(2.5))
        self.preview_label.setAlignment(QtCore.Qt.AlignCenter)
        self.preview_label.setProperty('secondary', True)
        layout.addWidget(self.preview_label, 1)

        column = QtWidgets.QVBoxLayout()
        layout.addLayout(column)

        form = QtWidgets.QFormLayout()
        self.name_label = QtWidgets.QLabel(self)
        self.name_label.setTextInteractionFlags(QtCore.Qt.TextSelectableByMouse)
        form.addRow('File name', self.name_label)
        self.type_label = QtWidgets.QLabel(self)
        form.addRow('Type', self.type_label)
        self.size_label = QtWidgets.QLabel(self)
        form.addRow('Size', self.size_label)
        self.date_label = QtWidgets.QLabel(self)
        form.addRow('Uploaded', self.date_label)
        self.expense_label = QtWidgets.QLabel(self)
        form.addRow('Linked expense', self.expense_label)
        column.addLayout(form)

        self.notes_editor = QtWidgets.QPlainTextEdit(self)
        self.notes_editor.setPlaceholderText('Notes')
        self.notes_editor.setFixedHeight(ui.Size.RowHeight(3.0))
        column.addWidget(self.notes_editor)

        row = QtWidgets.QHBoxLayout()
        row.addStretch(1)
        self.save_notes_button = QtWidgets.QPushButton('Save Notes', self)
        row.addWidget(self.save_notes_button)
        column.addLayout(row)

        row = QtWidgets.QHBoxLayout()
        self.expense_editor = QtWidgets.QSpinBox(self)
        self.expense_editor.setRange(1, 2 ** 31 - 1)
        self.expense_editor.setPrefix('ID #')
        row.addWidget(self.expense_editor, 1)
        self.link_button = QtWidgets.QPushButton('Link to Expense', self)
        row.addWidget(self.link_button)
        self.unlink_button = QtWidgets.QPushButton('Unlink', self)
        row.addWidget(self.unlink_button)
        column.addLayout(row)

        self.message_label = MessageLabel(self)
        column.addWidget(self.message_label)

        column.addStretch(1)

        row = QtWidgets.QHBoxLayout()
        self.delete_button = QtWidgets.QPushButton('Delete', self)
        self.delete_button.setProperty('danger', True)
        row.addWidget(self.delete_button)
        row.addStretch(1)
        self.close_button = QtWidgets.QPushButton('Close', self)
        row.addWidget(self.close_button)
        column.addLayout(row)

    def _connect_signals(self) -> None:
        self.save_notes_button.clicked.connect(self.save_notes)
        self.link_button.clicked.connect(self.link)
        self.unlink_button.clicked.connect(self.unlink)
        self.delete_button.clicked.connect(self.delete)
        self.close_button.clicked.connect(self.accept)

    def _update_details(self) -> None:
        receipt = self._receipt
        self.name_label.setText(receipt.file_name)
        self.type_label.setText(receipt.mime_type)
        self.size_label.setText(locale.format_file_size(receipt.file_size))
        self.date_label.setText(locale.format_datetime(receipt.created_at, lib.settings['locale']))
        if receipt.expense_id is not None:
            self.expense_label.setText(f'ID #{receipt.expense_id}')
        else:
            self.expense_label.setText('Not linked')
        self.notes_editor.setPlainText(receipt.notes or '')
        self.unlink_button.setEnabled(receipt.expense_id is not None)

    @QtCore.Slot()
    def init_preview(self) -> None:
        """Download and show the image; PDF files get a placeholder."""
        if not self._receipt.is_image:
            self.preview_label.setText('PDF document' if self._receipt.is_pdf else 'No preview available')
            return

        try:
            data = receipts_api.download_receipt(self._receipt.id)
        except status.BaseStatusException as ex:
            self.preview_label.setText('Failed to load preview')
            logging.error(f'Failed to load receipt {self._receipt.id}: {ex}')
            return

        pixmap = thumbnail_from_bytes(data, ui.Size.Thumbnail(2.5))
        if pixmap is None:
            self.preview_label.setText('No preview available')
            return
        self.preview_label.setPixmap(pixmap)

    def _set_receipt(self, receipt: Receipt) -> None:
        self._receipt = receipt
        self._update_details()
        self.receiptChanged.emit(receipt)

    @QtCore.Slot()
    def save_notes(self) -> None:
        self.message_label.clear_message()
        try:
            receipt = receipts_api.update_receipt_notes(self._receipt.id, self.notes_editor.toPlainText())
        except status.BaseStatusException as ex:
            self.message_label.show_error(status.describe(ex, 'Failed to save notes'))
            return
        self._set_receipt(receipt)
        self.message_label.show_success('Notes saved.')

    def _reload(self) -> None:
        try:
            receipt = receipts_api.get_receipt_metadata(self._receipt.id)
        except status.BaseStatusException as ex:
            logging.error(f'Failed to reload receipt {self._receipt.id}: {ex}')
            return
        self._set_receipt(receipt)

    @QtCore.Slot()
    def link(self) -> None:
        self.message_label.clear_message()
        expense_id = self.expense_editor.value()
        try:
            receipts_api.link_receipt(self._receipt.id, expense_id)
        except status.BaseStatusException as ex:
            self.message_label.show_error(status.describe(ex, 'Failed to link receipt'))
            return
        self._reload()
        self.message_label.show_success(f'Linked to expense ID #{expense_id}.')
        signals.expensesChanged.emit()

    @QtCore.Slot()
    def unlink(self) -> None:
        self.message_label.clear_message()
        try:
            receipts_api.unlink_receipt(self._receipt.id)
        except status.BaseStatusException as ex:
            self.message_label.show_error(status.describe(ex, 'Failed to unlink receipt'))
            return
        self._reload()
        self.message_label.show_success('Receipt unlinked.')
        signals.expensesChanged.emit()

    @QtCore.Slot()
    def delete(self) -> None:
        if not confirm(self, 'Delete Receipt', 'Are you sure you want to delete this receipt?'):
            return
        try:
            receipts_api.delete_receipt(self._receipt.id)
        except status.BaseStatusException as ex:
            self.message_label.show_error(status.describe(ex, 'Failed to delete receipt'))
            return
        self.receiptDeleted.emit(self._receipt.id)
        self.accept()

    def sizeHint(self) -> QtCore.QSize:
        return QtCore.QSize(ui.Size.DefaultWidth(1.4), ui.Size.DefaultHeight(1.0))


class ReceiptsWidget(QtWidgets.QWidget):
    """The receipts page: upload form and the gallery of unassigned receipts."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setObjectName('ExpenseClientReceiptsWidget')

        self._create_ui()
        self._connect_signals()

    def _create_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)
        o = ui.Size.Margin(1.0)
        layout.setContentsMargins(o, o, o, o)
        layout.setSpacing(ui.Size.Indicator(2.0))

        heading = QtWidgets.QLabel('Receipts', self)
        heading.setProperty('heading', True)
        layout.addWidget(heading)

        self.upload_widget = ReceiptUploadWidget(self)
        layout.addWidget(self.upload_widget)

        label = QtWidgets.QLabel('Unassigned receipts', self)
        label.setProperty('secondary', True)
        layout.addWidget(label)

        self.message_label = MessageLabel(self)
        layout.addWidget(self.message_label)

        self.gallery = ReceiptGallery(self)
        layout.addWidget(self.gallery, 1)

        self.empty_label = QtWidgets.QLabel('No unassigned receipts.', self)
        self.empty_label.setAlignment(QtCore.Qt.AlignCenter)
        self.empty_label.setProperty('secondary', True)
        self.empty_label.hide()
        layout.addWidget(self.empty_label, 1)

    def _connect_signals(self) -> None:
        self.upload_widget.uploaded.connect(signals.receiptUploaded)
        self.gallery.receiptActivated.connect(self.open_receipt)
        self.gallery.deleteRequested.connect(self.delete_receipt)

        signals.initializationRequested.connect(self.init_data)
        signals.receiptsChanged.connect(self.init_data)
        signals.receiptUploaded.connect(self.add_receipt)
        signals.loggedOut.connect(self.clear_data)

    @property
    def model(self) -> ReceiptListModel:
        return self.gallery.model()

    def _update_empty(self) -> None:
        empty = self.model.rowCount() == 0
        self.gallery.setVisible(not empty)
        self.empty_label.setVisible(empty)

    @QtCore.Slot()
    def init_data(self) -> None:
        self.message_label.clear_message()
        try:
            receipts = receipts_api.list_unassigned_receipts()
        except status.BaseStatusException as ex:
            self.message_label.show_error(status.describe(ex, 'Failed to load receipts'))
            return
        self.model.set_receipts(receipts)
        self._update_empty()

    @QtCore.Slot(object)
    def add_receipt(self, receipt: Receipt) -> None:
        """Put a freshly uploaded receipt at the top of the gallery."""
        self.model.prepend(receipt)
        self._update_empty()

    @QtCore.Slot(object)
    def open_receipt(self, receipt: Receipt) -> None:
        dialog = ReceiptDialog(receipt, parent=self)

        @QtCore.Slot(object)
        def on_changed(changed: Receipt) -> None:
            # linked receipts leave the unassigned list
            if changed.expense_id is not None:
                self.model.remove(changed.id)
            else:
                self.model.replace(changed)
            self._update_empty()

        @QtCore.Slot(str)
        def on_deleted(receipt_id: str) -> None:
            self.model.remove(receipt_id)
            self._update_empty()

        dialog.receiptChanged.connect(on_changed)
        dialog.receiptDeleted.connect(on_deleted)
        dialog.finished.connect(dialog.deleteLater)
        dialog.open()

    @QtCore.Slot(object)
    def delete_receipt(self, receipt: Receipt) -> None:
        if not confirm(self, 'Delete Receipt', 'Are you sure you want to delete this receipt?'):
            return
        try:
            receipts_api.delete_receipt(receipt.id)
        except status.BaseStatusException as ex:
            self.message_label.show_error(status.describe(ex, 'Failed to delete receipt'))
            return
        self.model.remove(receipt.id)
        self._update_empty()

    @QtCore.Slot()
    def clear_data(self) -> None:
        self.model.clear_data()
        self.message_label.clear_message()
        self._update_empty()
