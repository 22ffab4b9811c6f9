"""Tests for ExpenseClient.core.service: workers, retries and the blocking wrapper.

The functions run on real QThreads; only the HTTP session is mocked so that
pages reloading in the background never leave the process.

Run with:
    python -m unittest tests.test_service
"""
import threading
from unittest.mock import patch

from PySide6 import QtCore

from ExpenseClient.core import service
from ExpenseClient.core.service import AsyncWorker, run_in_background, start_asynchronous
from ExpenseClient.status import status
from tests.base import BaseApiTestCase


class Flaky:
    """Callable failing with the given errors before returning ``result``."""

    def __init__(self, errors, result=None) -> None:
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    def __call__(self, *args, **kwargs):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


class AsyncWorkerTests(BaseApiTestCase):

    def run_worker(self, func, **kwargs):
        results, errors = [], []
        worker = AsyncWorker(func, wait_seconds=0, **kwargs)
        worker.resultReady.connect(lambda r: results.append(r), QtCore.Qt.DirectConnection)
        worker.errorOccurred.connect(lambda e: errors.append(e), QtCore.Qt.DirectConnection)
        worker.run()
        return results, errors

    def test_unavailable_is_retried(self):
        func = Flaky([status.ServiceUnavailableException() for _ in range(5)])
        results, errors = self.run_worker(func, max_attempts=3)
        self.assertEqual(func.calls, 3)
        self.assertEqual(results, [])
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], status.ServiceUnavailableException)

    def test_recovers_after_retry(self):
        func = Flaky([status.ServiceUnavailableException()], result='ok')
        results, errors = self.run_worker(func, max_attempts=3)
        self.assertEqual(func.calls, 2)
        self.assertEqual(results, ['ok'])
        self.assertEqual(errors, [])

    def test_other_errors_are_not_retried(self):
        func = Flaky([status.NotFoundException(http_status=404, server_message='Expense not found')])
        results, errors = self.run_worker(func, max_attempts=3)
        self.assertEqual(func.calls, 1)
        self.assertIsInstance(errors[0], status.NotFoundException)

    def test_arguments_are_passed(self):
        worker = AsyncWorker(lambda a, b=0: a + b, 2, b=3, max_attempts=1, wait_seconds=0)
        self.assertEqual(worker.kwargs, {'b': 3})
        self.assertEqual((worker.max_attempts, worker.wait_seconds), (1, 0))

        received = []
        worker.resultReady.connect(lambda r: received.append(r), QtCore.Qt.DirectConnection)
        worker.run()
        self.assertEqual(received, [5])


class StartAsynchronousTests(BaseApiTestCase):

    def test_returns_result(self):
        self.assertEqual(start_asynchronous(lambda a, b: a + b, 2, 3, status_text='Adding...'), 5)

    def test_status_errors_are_raised(self):
        func = Flaky([status.ConflictException(http_status=409, server_message='Category already exists')])
        with self.assertRaises(status.ConflictException) as ctx:
            start_asynchronous(func, max_attempts=3, wait_seconds=0)
        self.assertEqual(ctx.exception.server_message, 'Category already exists')
        self.assertEqual(func.calls, 1)

    def test_unavailable_after_retries(self):
        func = Flaky([status.ServiceUnavailableException() for _ in range(3)])
        with self.assertRaises(status.ServiceUnavailableException):
            start_asynchronous(func, max_attempts=3, wait_seconds=0)
        self.assertEqual(func.calls, 3)

    def test_other_errors_are_wrapped(self):
        def broken():
            raise ValueError('bad payload')

        with self.assertRaises(status.UnknownException) as ctx:
            start_asynchronous(broken)
        self.assertIsInstance(ctx.exception.__cause__, ValueError)

    def test_timeout_cancels(self):
        release = threading.Event()

        def blocking():
            release.wait(10)

        # let the worker finish instead of killing the thread
        terminate = patch.object(AsyncWorker, 'terminate', side_effect=release.set).start()

        with self.assertRaises(status.OperationCancelledException) as ctx:
            start_asynchronous(blocking, total_timeout=1, status_text='Waiting...')
        self.assertIn('Waiting...', str(ctx.exception))
        terminate.assert_called_once_with()
        self.assertTrue(release.is_set())


class RunInBackgroundTests(BaseApiTestCase):

    def wait_for(self, received, worker) -> None:
        loop = QtCore.QEventLoop()
        timer = QtCore.QTimer()
        timer.setInterval(20)
        # finished workers are released and scheduled for deletion
        timer.timeout.connect(
            lambda: loop.quit() if received and worker not in service._background_workers else None
        )
        QtCore.QTimer.singleShot(5000, loop.quit)
        timer.start()
        loop.exec()
        timer.stop()

    def test_result_callback(self):
        received = []
        worker = run_in_background(lambda value: value * 2, 21, on_result=received.append)
        self.assertIn(worker, service._background_workers)
        self.wait_for(received, worker)
        self.assertEqual(received, [42])

    def test_error_callback(self):
        received = []
        func = Flaky([status.ServerErrorException(http_status=500)])
        worker = run_in_background(func, on_result=received.append, on_error=received.append, max_attempts=1)
        self.wait_for(received, worker)
        self.assertEqual(len(received), 1)
        self.assertIsInstance(received[0], status.ServerErrorException)
