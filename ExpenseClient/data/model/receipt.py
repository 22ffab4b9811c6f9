"""List model of receipts with thumbnails fetched in the background.

Image receipts get a thumbnail the first time they are displayed. Each receipt
has at most one download in flight; loaded thumbnails are cached on the model
and only ever touched from the GUI thread.
"""
import logging
from typing import Any, Dict, List, Optional, Set, Tuple

from PySide6 import QtCore, QtGui

from ...core import receipts as receipts_api
from ...core import service
from ...core.types import Receipt
from ...settings import lib
from ...settings import locale
from ...status import status
from ...ui import ui

ReceiptRole = QtCore.Qt.UserRole + 1
IdRole = QtCore.Qt.UserRole + 2
ThumbnailRole = QtCore.Qt.UserRole + 3


def _fetch_thumbnail(receipt_id: str) -> Tuple[str, bytes]:
    try:
        return receipt_id, receipts_api._download_receipt(receipt_id)
    except status.BaseStatusException as ex:
        raise ThumbnailError(receipt_id, ex) from ex


class ThumbnailError(Exception):
    """Raised by a background thumbnail download, carries the receipt id."""

    def __init__(self, receipt_id: str, error: Exception) -> None:
        super().__init__(f'Failed to load thumbnail of {receipt_id}: {error}')
        self.receipt_id = receipt_id


def thumbnail_from_bytes(data: bytes, size: int) -> Optional[QtGui.QPixmap]:
    """Decode image bytes into a pixmap scaled to fit ``size``. None when the data is not an image."""
    image = QtGui.QImage()
    if not data or not image.loadFromData(data):
        return None
    image = image.scaled(
        size, size,
        QtCore.Qt.KeepAspectRatio,
        QtCore.Qt.SmoothTransformation
    )
    return QtGui.QPixmap.fromImage(image)


class ReceiptListModel(QtCore.QAbstractListModel):
    """Receipts shown in the gallery."""

    def __init__(self, parent: QtCore.QObject | None = None) -> None:
        super().__init__(parent=parent)
        self.setObjectName('ExpenseClientReceiptListModel')

        self._receipts: List[Receipt] = []
        self._thumbnails: Dict[str, QtGui.QPixmap] = {}
        self._loading: Set[str] = set()
        self._failed: Set[str] = set()

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._receipts)

    def receipt(self, row: int) -> Optional[Receipt]:
        if 0 <= row < len(self._receipts):
            return self._receipts[row]
        return None

    def row_of(self, receipt_id: str) -> int:
        for i, f in enumerate(self._receipts):
            if f.id == receipt_id:
                return i
        return -1

    def thumbnail(self, receipt_id: str) -> Optional[QtGui.QPixmap]:
        return self._thumbnails.get(receipt_id)

    def is_loading(self, receipt_id: str) -> bool:
        return receipt_id in self._loading

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole) -> Any:
        if not index.isValid():
            return None
        receipt = self.receipt(index.row())
        if receipt is None:
            return None

        if role == QtCore.Qt.DisplayRole:
            return receipt.file_name
        if role in (QtCore.Qt.ToolTipRole, QtCore.Qt.StatusTipRole):
            lines = [
                receipt.file_name,
                locale.format_file_size(receipt.file_size),
                locale.format_datetime(receipt.created_at, lib.settings['locale']),
            ]
            if receipt.notes:
                lines.append(receipt.notes)
            return '\n'.join(f for f in lines if f)
        if role in (QtCore.Qt.DecorationRole, ThumbnailRole):
            if not receipt.is_image:
                return None
            pixmap = self._thumbnails.get(receipt.id)
            if pixmap is None:
                self.load_thumbnail(receipt.id)
            return pixmap
        if role == ReceiptRole:
            return receipt
        if role == IdRole:
            return receipt.id
        return None

    def load_thumbnail(self, receipt_id: str) -> None:
        """Start a background download of the receipt's image unless one is already running."""
        if receipt_id in self._thumbnails or receipt_id in self._loading or receipt_id in self._failed:
            return

        self._loading.add(receipt_id)
        service.run_in_background(
            _fetch_thumbnail,
            receipt_id,
            on_result=self.on_thumbnail_loaded,
            on_error=self.on_thumbnail_failed,
            max_attempts=1,
        )

    @QtCore.Slot(object)
    def on_thumbnail_loaded(self, result: Tuple[str, bytes]) -> None:
        receipt_id, data = result
        self._loading.discard(receipt_id)

        pixmap = thumbnail_from_bytes(data, int(ui.Size.Thumbnail(1.0)))
        if pixmap is None:
            logging.warning(f'Receipt {receipt_id} is not a readable image')
            self._failed.add(receipt_id)
            return
        self._thumbnails[receipt_id] = pixmap
        self._emit_row_changed(receipt_id)

    @QtCore.Slot(object)
    def on_thumbnail_failed(self, error: Exception) -> None:
        if isinstance(error, ThumbnailError):
            self._loading.discard(error.receipt_id)
            self._failed.add(error.receipt_id)
        logging.error(f'{error}')

    def _emit_row_changed(self, receipt_id: str) -> None:
        row = self.row_of(receipt_id)
        if row < 0:
            return
        index = self.index(row, 0)
        self.dataChanged.emit(index, index, [QtCore.Qt.DecorationRole, ThumbnailRole])

    def set_receipts(self, receipts: List[Receipt]) -> None:
        logging.debug(f'Showing {len(receipts)} receipts')
        self.beginResetModel()
        self._receipts = list(receipts)
        self._failed.clear()
        self.endResetModel()

    def prepend(self, receipt: Receipt) -> None:
        """Insert a new receipt at the top."""
        existing = self.row_of(receipt.id)
        if existing >= 0:
            self.remove(receipt.id)
        self.beginInsertRows(QtCore.QModelIndex(), 0, 0)
        self._receipts.insert(0, receipt)
        self.endInsertRows()

    def replace(self, receipt: Receipt) -> None:
        """Swap in an updated copy of a listed receipt."""
        row = self.row_of(receipt.id)
        if row < 0:
            return
        self._receipts[row] = receipt
        index = self.index(row, 0)
        self.dataChanged.emit(index, index)

    def remove(self, receipt_id: str) -> None:
        row = self.row_of(receipt_id)
        if row < 0:
            return
        self.beginRemoveRows(QtCore.QModelIndex(), row, row)
        del self._receipts[row]
        self.endRemoveRows()
        self._thumbnails.pop(receipt_id, None)

    @QtCore.Slot()
    def clear_data(self) -> None:
        self.beginResetModel()
        self._receipts = []
        self._thumbnails.clear()
        self._failed.clear()
        self.endResetModel()
