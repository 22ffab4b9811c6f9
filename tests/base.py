"""Unittest base classes for creating a clean test environment.

The client config lives in the temporary directory set up by :mod:`tests`;
each test starts from the default template. Requests never leave the process:
:class:`BaseApiTestCase` replaces the HTTP session with a mock answering with
:class:`FakeResponse` objects.
"""
import json
import logging
import os
import shutil
import unittest
from contextlib import contextmanager
from typing import Any, Optional
from unittest import mock
from unittest.mock import patch

from PySide6 import QtWidgets, QtCore

from ExpenseClient.core import api
from ExpenseClient.core import service
from ExpenseClient.core.auth import auth_manager
from ExpenseClient.core.types import LoginResponse
from ExpenseClient.settings import lib


@contextmanager
def mute_ui_signals():
    from ExpenseClient.ui.actions import signals
    blocker = QtCore.QSignalBlocker(signals)  # blocks every signal in `signals`
    try:
        yield
    finally:
        del blocker


def run_synchronously(func, *args, total_timeout=None, status_text=None, **kwargs):
    """Stand-in for :func:`service.start_asynchronous` calling ``func`` on the calling thread."""
    return func(*args, **kwargs)


class FakeResponse:
    """Minimal stand-in for :class:`requests.Response`."""

    def __init__(self, status_code: int = 200, body: Any = None, content: Optional[bytes] = None) -> None:
        self.status_code = status_code
        if content is None:
            content = json.dumps(body).encode('utf-8') if body is not None else b''
        self.content = content

    def json(self) -> Any:
        return json.loads(self.content.decode('utf-8'))


def make_session(token: str = 'test-token') -> LoginResponse:
    return LoginResponse(
        token=token,
        token_type='Bearer',
        user_id=1,
        email='jane@example.com',
        name='Jane Doe',
    )


class BaseTestCase(unittest.TestCase):
    """Base test case resetting the client config and the login session."""

    def setUp(self) -> None:
        """Set up a clean config directory and reinitialize the settings."""
        if 'QT_QPA_PLATFORM' not in os.environ:
            os.environ['QT_QPA_PLATFORM'] = 'offscreen'
            logging.debug('QT_QPA_PLATFORM set to offscreen for headless testing.')

        # Ensure a QApplication is available
        if not QtWidgets.QApplication.instance():
            QtWidgets.QApplication([])  # type: ignore
            logging.debug('QtWidgets.QApplication initialized for tests.')

        config_dir = lib.ConfigPaths().config_dir
        if config_dir.exists():
            shutil.rmtree(config_dir)
            logging.debug(f'Removed test config directory {config_dir}')

        lib.settings = lib.SettingsAPI()
        logging.debug('SettingsAPI reinitialized.')

        auth_manager.logout()

    def tearDown(self) -> None:
        patch.stopall()
        auth_manager.logout()


class BaseApiTestCase(BaseTestCase):
    """Base test case with a signed-in session and a mocked HTTP session.

    Set ``self.http.request.return_value`` (or ``side_effect``) to the
    :class:`FakeResponse` objects the server should answer with.
    """

    def setUp(self) -> None:
        super().setUp()

        self.http = mock.Mock()
        self.http.request.return_value = FakeResponse(204)
        patch.object(
            api.ApiClient, 'session',
            new_callable=mock.PropertyMock,
            return_value=self.http
        ).start()

        patch.object(service, 'start_asynchronous', new=run_synchronously).start()

        with auth_manager._lock:
            auth_manager._session = make_session()

    def respond(self, body: Any = None, status_code: int = 200, content: Optional[bytes] = None) -> None:
        self.http.request.return_value = FakeResponse(status_code, body, content)

    def last_request(self):
        """Return ``(method, url, kwargs)`` of the last request sent."""
        self.assertTrue(self.http.request.called, 'No request was sent.')
        args, kwargs = self.http.request.call_args
        return args[0], args[1], kwargs

    def url(self, path: str) -> str:
        return f'{lib.DEFAULT_BASE_URL}{path}'
