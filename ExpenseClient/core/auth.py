"""
Session management for the REST backend.

The bearer token returned by ``POST /auth/login`` is held in memory only and is
dropped on logout or when the backend answers 401.
"""

import logging
import threading
from typing import Dict, Optional, Any

from .types import LoginResponse


class AuthManager:
    """Holds the login session with thread-safe access."""

    def __init__(self):
        self._lock = threading.Lock()
        self._session: Optional[LoginResponse] = None

    @property
    def token(self) -> Optional[str]:
        """The bearer token of the current session, or None."""
        with self._lock:
            return self._session.token if self._session else None

    @property
    def session(self) -> Optional[LoginResponse]:
        with self._lock:
            return self._session

    def is_authenticated(self) -> bool:
        return self.token is not None

    def user_info(self) -> Optional[Dict[str, Any]]:
        """Return ``user_id``, ``email`` and ``name`` of the signed-in user, or None."""
        with self._lock:
            if not self._session:
                return None
            return {
                'user_id': self._session.user_id,
                'email': self._session.email,
                'name': self._session.name,
            }

    def login(self, email: str, password: str) -> LoginResponse:
        """
        Sign in and store the session.

        Args:
            email (str): The account email.
            password (str): The account password.

        Returns:
            LoginResponse: The new session.

        Raises:
            status.ApiException: If the credentials were rejected.
            status.ServiceUnavailableException: If the server could not be reached.
        """
        from .api import client

        data = client.post(
            '/auth/login',
            json={'email': email, 'password': password},
            authenticate=False,
        )
        response = LoginResponse.from_json(data)
        with self._lock:
            self._session = response
        logging.info(f'Signed in as {response.email}')
        return response

    def logout(self) -> None:
        """Drop the current session."""
        with self._lock:
            if self._session:
                logging.info(f'Signed out {self._session.email}')
            self._session = None


auth_manager = AuthManager()


def login(email: str, password: str) -> LoginResponse:
    """Sign in on a worker thread while a progress dialog is shown."""
    from . import service
    return service.start_asynchronous(
        auth_manager.login, email, password,
        status_text='Signing in...'
    )
