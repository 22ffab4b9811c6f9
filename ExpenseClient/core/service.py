"""Asynchronous execution of blocking backend calls.

Provides:
    - AsyncWorker: runs a blocking function on a QThread, retrying when the server is unreachable
    - RequestProgressDialog: countdown dialog shown while a request runs
    - start_asynchronous: runs a function on a worker and waits for it in a local event loop
    - run_in_background: runs a function on a worker without blocking or showing a dialog
"""

import logging
import time
from typing import Any, Callable, Dict, Optional, Set

from PySide6 import QtCore, QtWidgets

from ..status import status
from ..ui.ui import BaseProgressDialog

TOTAL_TIMEOUT: int = 60
MAX_RETRIES: int = 3

_background_workers: Set['AsyncWorker'] = set()


class AsyncWorker(QtCore.QThread):
    """
    Generic worker thread with retry logic for blocking functions.

    Only :class:`status.ServiceUnavailableException` is retried, any other
    error is reported straight away.

    Signals:
        resultReady (object): Emitted with the function's result on success.
        errorOccurred (object): Emitted with the exception on failure.
    """
    resultReady = QtCore.Signal(object)
    errorOccurred = QtCore.Signal(object)

    def __init__(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        super().__init__()
        self.func = func
        self.args = args

        self.max_attempts = kwargs.pop('max_attempts', MAX_RETRIES)
        self.wait_seconds = kwargs.pop('wait_seconds', 1.0)
        self.kwargs = kwargs

    def run(self) -> None:
        attempts = 0
        last_exception = None
        while attempts < self.max_attempts:
            attempts += 1
            try:
                result = self.func(*self.args, **self.kwargs)
                self.resultReady.emit(result)
                return
            except status.ServiceUnavailableException as ex:
                logging.debug(f'Attempt {attempts}/{self.max_attempts} failed: {ex}')
                last_exception = ex
                if attempts < self.max_attempts:
                    time.sleep(self.wait_seconds)
            except Exception as ex:
                self.errorOccurred.emit(ex)
                return
        self.errorOccurred.emit(last_exception)


class RequestProgressDialog(BaseProgressDialog):
    """
    Progress dialog for asynchronous API operations.

    Signals:
        cancelled (): Emitted when the user cancels the operation.
    """

    def __init__(self, total_timeout: int = TOTAL_TIMEOUT,
                 status_text: str = 'Loading...') -> None:
        super().__init__(total_timeout, status_text)

    def _populate_content(self, layout: QtWidgets.QVBoxLayout) -> None:
        from ..ui import ui

        self.status_label = QtWidgets.QLabel(self.status_text)
        layout.addWidget(self.status_label, 1)

        self.error_label = QtWidgets.QLabel('')
        self.error_label.setWordWrap(True)
        self.error_label.setProperty('error', True)
        layout.addWidget(self.error_label, 1)

        self.countdown_label = QtWidgets.QLabel(f'Please wait ({self.remaining}s).')
        self.countdown_label.setProperty('secondary', True)
        layout.addWidget(self.countdown_label, 1)

        layout.addSpacing(ui.Size.Margin(1.0))

        self.cancel_button = QtWidgets.QPushButton('Cancel')
        layout.addWidget(self.cancel_button, 1)

    def _connect_signals(self) -> None:
        super()._connect_signals()
        self.errorOccurred.connect(self.on_error)

    @QtCore.Slot(str)
    def on_error(self, msg: str) -> None:
        """Update the error label with a new error message."""
        self.error_label.setText(msg)


def start_asynchronous(func: Callable[..., Any], *args: Any, total_timeout: int = TOTAL_TIMEOUT,
                       status_text: str = 'Loading...', **kwargs: Any) -> Any:
    """
    Generic asynchronous operation wrapper.

    Creates and runs an AsyncWorker with a progress dialog and event loop.

    Args:
        func: The blocking function to run.
        *args, **kwargs: Arguments passed to func.
        total_timeout (int): Total operation timeout.
        status_text (str): Label displayed in the progress dialog.

    Returns:
        The result of the function on success.

    Raises:
        status.OperationCancelledException: If the operation is cancelled or times out.
        status.BaseStatusException: The error raised by ``func``.
        status.UnknownException: If ``func`` raised any other error.
    """
    dialog = RequestProgressDialog(total_timeout, status_text=status_text)
    worker = AsyncWorker(func, *args, **kwargs)

    result: Dict[str, Any] = {'data': None, 'error': None, 'done': False}
    loop = QtCore.QEventLoop()

    worker.errorOccurred.connect(
        lambda err: dialog.errorOccurred.emit(str(err)),
        QtCore.Qt.QueuedConnection
    )
    worker.resultReady.connect(lambda d: (result.update({'data': d, 'done': True}), loop.quit()))
    worker.errorOccurred.connect(lambda err: (result.update({'error': err, 'done': True}), loop.quit()))
    dialog.cancelled.connect(loop.quit)

    worker.start()
    dialog.open()

    timer = QtCore.QTimer()
    timer.setSingleShot(True)
    timer.setInterval(total_timeout * 1000)
    timer.timeout.connect(lambda: (dialog.countdown_timer.stop(), loop.quit()))
    timer.start()
    loop.exec()
    timer.stop()

    # The worker may still be returning from run() after emitting its outcome
    if not result['done']:
        dialog.close()
        worker.terminate()
        worker.wait()
        raise status.OperationCancelledException(status_text)
    worker.wait()
    dialog.close()

    if result['error'] is not None:
        err = result['error']
        if isinstance(err, status.BaseStatusException):
            raise err
        raise status.UnknownException(str(err)) from err
    return result['data']


def run_in_background(
        func: Callable[..., Any],
        *args: Any,
        on_result: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Any], None]] = None,
        **kwargs: Any
) -> AsyncWorker:
    """
    Run a blocking function on a worker thread without waiting for it.

    The callbacks are invoked on the thread of their receiver, pass bound slots
    of GUI objects to have them called on the GUI thread.

    Args:
        func: The blocking function to run.
        on_result: Called with the function's result.
        on_error: Called with the exception raised by the function.

    Returns:
        AsyncWorker: The started worker.
    """
    worker = AsyncWorker(func, *args, **kwargs)
    if on_result is not None:
        worker.resultReady.connect(on_result)
    if on_error is not None:
        worker.errorOccurred.connect(on_error)

    # Keep a reference until the thread is done
    _background_workers.add(worker)
    worker.finished.connect(lambda: _background_workers.discard(worker))
    worker.finished.connect(worker.deleteLater)

    worker.start()
    return worker
