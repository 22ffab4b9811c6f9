"""HTTP access to the expense-tracking REST backend.

A thin layer over :class:`requests.Session` that prefixes the base url, adds the
bearer token of the current session and maps unsuccessful responses to
:mod:`ExpenseClient.status` exceptions.
"""
import logging
import threading
from typing import Any, Dict, Optional

import requests

from .auth import auth_manager
from ..status import status


class ApiClient:
    """Sends requests to the backend and decodes the responses.

    Args:
        base_url (str): Overrides the configured base url.
        timeout (int): Overrides the configured timeout, in seconds.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """The session of the calling thread."""
        session = getattr(self._local, 'session', None)
        if session is None:
            session = requests.Session()
            session.headers.update({'Accept': 'application/json'})
            self._local.session = session
        return session

    @property
    def base_url(self) -> str:
        if self._base_url:
            return self._base_url.rstrip('/')
        from ..settings import lib
        return lib.settings.base_url

    @property
    def timeout(self) -> int:
        if self._timeout:
            return self._timeout
        from ..settings import lib
        return lib.settings.timeout

    def url(self, path: str) -> str:
        return f'{self.base_url}/{path.lstrip("/")}'

    def request(
            self,
            method: str,
            path: str,
            params: Optional[Dict[str, Any]] = None,
            json: Any = None,
            files: Optional[Dict[str, Any]] = None,
            data: Optional[Dict[str, Any]] = None,
            binary: bool = False,
            authenticate: bool = True,
    ) -> Any:
        """Send a request and return the decoded response body.

        Args:
            method (str): HTTP method.
            path (str): Path relative to the base url, e.g. ``/expenses``.
            params (dict): Query parameters.
            json: JSON body.
            files (dict): Multipart files.
            data (dict): Multipart form fields.
            binary (bool): Return the raw response bytes.
            authenticate (bool): Send the session token, and treat a 401 as an expired session.

        Returns:
            The decoded JSON body, the raw bytes when ``binary`` is set, or None for empty responses.

        Raises:
            status.ServiceUnavailableException: If the server could not be reached or did not answer in time.
            status.ApiException: If the server answered with an unsuccessful status.
        """
        headers = {}
        if authenticate:
            token = auth_manager.token
            if token:
                headers['Authorization'] = f'Bearer {token}'

        url = self.url(path)
        logging.debug(f'{method} {url} {params or ""}')

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json,
                files=files,
                data=data,
                headers=headers,
                timeout=self.timeout,
            )
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as ex:
            logging.debug(f'{method} {url} failed: {ex}')
            raise status.ServiceUnavailableException from ex
        except requests.exceptions.RequestException as ex:
            raise status.RequestFailedException(str(ex)) from ex

        code = response.status_code
        logging.debug(f'{method} {url} -> {code}')

        if not 200 <= code < 300:
            raise self._error(response, authenticate)

        if code == 204 or not response.content:
            return None
        if binary:
            return response.content
        try:
            return response.json()
        except ValueError as ex:
            raise status.RequestFailedException(f'Invalid JSON in response from {url}') from ex

    def _error(self, response: requests.Response, authenticate: bool) -> status.ApiException:
        from .types import ErrorResponse

        code = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None
        error = ErrorResponse.from_json(body) if isinstance(body, dict) else ErrorResponse(status=code)

        if code == 401 and authenticate:
            auth_manager.logout()
            from ..ui.actions import signals
            signals.authenticationRequested.emit()

        cls = status.exception_for_status(code)
        return cls(
            http_status=code,
            server_message=error.message,
            validation_errors=[{'field': f.field, 'message': f.message} for f in error.validation_errors],
        )

    def get(self, path: str, **kwargs) -> Any:
        return self.request('GET', path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        return self.request('POST', path, **kwargs)

    def put(self, path: str, **kwargs) -> Any:
        return self.request('PUT', path, **kwargs)

    def patch(self, path: str, **kwargs) -> Any:
        return self.request('PATCH', path, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request('DELETE', path, **kwargs)


client: ApiClient = ApiClient()
