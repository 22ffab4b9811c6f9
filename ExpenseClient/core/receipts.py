"""Receipt endpoints.

Receipts are files (images or PDFs) stored by the backend, optionally linked to
an expense. ``download_receipt`` returns the raw bytes, used for previews.
"""
import logging
import mimetypes
import pathlib
from typing import List, Optional, Union

from . import service
from .api import client
from .types import Receipt


def guess_mime_type(path: Union[str, pathlib.Path]) -> str:
    mime_type, _ = mimetypes.guess_type(str(path))
    return mime_type or 'application/octet-stream'


def _upload_receipt(path: Union[str, pathlib.Path], notes: Optional[str] = None) -> Receipt:
    """
    Upload a file as a multipart ``file`` field.

    Args:
        path: The file to upload.
        notes (str): Optional notes stored with the receipt.

    Returns:
        Receipt: The stored receipt.
    """
    path = pathlib.Path(path)
    if not path.is_file():
        raise FileNotFoundError(f'Receipt file not found: {path}')

    data = {'notes': notes} if notes else None
    with path.open('rb') as f:
        result = client.post(
            '/receipts',
            files={'file': (path.name, f, guess_mime_type(path))},
            data=data,
        )
    receipt = Receipt.from_json(result)
    logging.info(f'Uploaded receipt {receipt.id} ({receipt.file_name})')
    return receipt


def upload_receipt(path: Union[str, pathlib.Path], notes: Optional[str] = None) -> Receipt:
    return service.start_asynchronous(_upload_receipt, path, notes, status_text='Uploading receipt...')


def _download_receipt(receipt_id: str) -> bytes:
    return client.get(f'/receipts/{receipt_id}', binary=True) or b''


def download_receipt(receipt_id: str) -> bytes:
    return service.start_asynchronous(_download_receipt, receipt_id, status_text='Loading receipt...')


def _get_receipt_metadata(receipt_id: str) -> Receipt:
    return Receipt.from_json(client.get(f'/receipts/{receipt_id}/metadata'))


def get_receipt_metadata(receipt_id: str) -> Receipt:
    return service.start_asynchronous(_get_receipt_metadata, receipt_id, status_text='Loading receipt...')


def _update_receipt_notes(receipt_id: str, notes: str) -> Receipt:
    receipt = Receipt.from_json(client.patch(f'/receipts/{receipt_id}', json={'notes': notes}))
    logging.info(f'Updated notes of receipt {receipt_id}')
    return receipt


def update_receipt_notes(receipt_id: str, notes: str) -> Receipt:
    return service.start_asynchronous(_update_receipt_notes, receipt_id, notes, status_text='Saving notes...')


def _delete_receipt(receipt_id: str) -> None:
    client.delete(f'/receipts/{receipt_id}')
    logging.info(f'Deleted receipt {receipt_id}')


def delete_receipt(receipt_id: str) -> None:
    return service.start_asynchronous(_delete_receipt, receipt_id, status_text='Deleting receipt...')


def _link_receipt(receipt_id: str, expense_id: int) -> None:
    client.post(f'/receipts/{receipt_id}/link/{expense_id}')
    logging.info(f'Linked receipt {receipt_id} to expense {expense_id}')


def link_receipt(receipt_id: str, expense_id: int) -> None:
    return service.start_asynchronous(_link_receipt, receipt_id, expense_id, status_text='Linking receipt...')


def _unlink_receipt(receipt_id: str) -> None:
    client.post(f'/receipts/{receipt_id}/unlink')
    logging.info(f'Unlinked receipt {receipt_id}')


def unlink_receipt(receipt_id: str) -> None:
    return service.start_asynchronous(_unlink_receipt, receipt_id, status_text='Unlinking receipt...')


def _list_unassigned_receipts() -> List[Receipt]:
    return [Receipt.from_json(f) for f in client.get('/receipts/unassigned') or []]


def list_unassigned_receipts() -> List[Receipt]:
    return service.start_asynchronous(_list_unassigned_receipts, status_text='Loading receipts...')
