# tests/test_api.py
"""
Tests for ExpenseClient.core.api: request building, response decoding and the
mapping of error responses to status exceptions.

Run with:
    python -m unittest tests.test_api
"""
import requests

from ExpenseClient.core import api
from ExpenseClient.core.auth import auth_manager
from ExpenseClient.settings import lib
from ExpenseClient.status import status
from ExpenseClient.ui.actions import signals
from tests.base import BaseApiTestCase


class RequestTests(BaseApiTestCase):

    def test_url_joins_base_and_path(self):
        self.assertEqual(api.client.url('/expenses'), self.url('/expenses'))
        self.assertEqual(api.client.url('expenses'), self.url('/expenses'))

    def test_explicit_base_url(self):
        c = api.ApiClient(base_url='http://other:1234/api/', timeout=3)
        self.assertEqual(c.url('/auth/login'), 'http://other:1234/api/auth/login')
        self.assertEqual(c.timeout, 3)

    def test_base_url_follows_settings(self):
        lib.settings.set_section('server', {'base_url': 'https://expenses.example.com/api', 'timeout': 7})
        self.assertEqual(api.client.url('/categories'), 'https://expenses.example.com/api/categories')
        self.assertEqual(api.client.timeout, 7)

    def test_sends_bearer_token(self):
        self.respond({'ok': True})
        result = api.client.get('/expenses', params={'page': 0})

        method, url, kwargs = self.last_request()
        self.assertEqual(result, {'ok': True})
        self.assertEqual(method, 'GET')
        self.assertEqual(url, self.url('/expenses'))
        self.assertEqual(kwargs['params'], {'page': 0})
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer test-token')
        self.assertEqual(kwargs['timeout'], lib.DEFAULT_TIMEOUT)

    def test_unauthenticated_request_has_no_token(self):
        self.respond({'ok': True})
        api.client.post('/auth/login', json={}, authenticate=False)
        _, _, kwargs = self.last_request()
        self.assertNotIn('Authorization', kwargs['headers'])

    def test_no_token_when_signed_out(self):
        auth_manager.logout()
        self.respond([])
        api.client.get('/categories')
        _, _, kwargs = self.last_request()
        self.assertNotIn('Authorization', kwargs['headers'])

    def test_empty_response_is_none(self):
        self.respond(status_code=204)
        self.assertIsNone(api.client.delete('/expenses/1'))

        self.respond(status_code=200, content=b'')
        self.assertIsNone(api.client.post('/receipts/a/unlink'))

    def test_binary_response(self):
        self.respond(content=b'\x89PNG\r\n')
        self.assertEqual(api.client.get('/receipts/a', binary=True), b'\x89PNG\r\n')

    def test_invalid_json(self):
        self.respond(content=b'<html>')
        with self.assertRaises(status.RequestFailedException):
            api.client.get('/expenses')


class ErrorMappingTests(BaseApiTestCase):

    def test_validation_errors(self):
        self.respond({
            'status': 400,
            'error': 'Bad Request',
            'message': 'Validation failed',
            'validationErrors': [
                {'field': 'amount', 'message': 'must be greater than 0'},
                {'field': 'currency', 'message': 'must not be blank'},
            ],
        }, status_code=400)

        with self.assertRaises(status.ValidationFailedException) as ctx:
            api.client.post('/expenses', json={})

        ex = ctx.exception
        self.assertEqual(ex.http_status, 400)
        self.assertEqual(ex.server_message, 'Validation failed')
        self.assertEqual(
            status.describe(ex, 'Failed'),
            'Validation failed: amount: must be greater than 0, currency: must not be blank'
        )

    def test_status_codes(self):
        cases = {
            403: status.ForbiddenException,
            404: status.NotFoundException,
            409: status.ConflictException,
            500: status.ServerErrorException,
            503: status.ServerErrorException,
            418: status.RequestFailedException,
        }
        for code, cls in cases.items():
            with self.subTest(code=code):
                self.respond({'status': code, 'message': f'error {code}'}, status_code=code)
                with self.assertRaises(cls) as ctx:
                    api.client.get('/expenses/1')
                self.assertEqual(ctx.exception.server_message, f'error {code}')

    def test_error_without_body(self):
        self.respond(status_code=404, content=b'Not Found')
        with self.assertRaises(status.NotFoundException) as ctx:
            api.client.get('/expenses/99')
        self.assertEqual(status.describe(ctx.exception, 'Failed to load expense'), 'Failed to load expense')

    def test_unauthorized_logs_out(self):
        requested = []

        def _on_requested() -> None:
            requested.append(True)

        signals.authenticationRequested.connect(_on_requested)
        try:
            self.respond({'status': 401, 'message': 'Token expired'}, status_code=401)
            with self.assertRaises(status.NotAuthenticatedException):
                api.client.get('/expenses')
        finally:
            signals.authenticationRequested.disconnect(_on_requested)

        self.assertFalse(auth_manager.is_authenticated())
        self.assertTrue(requested)

    def test_unauthorized_login_keeps_state(self):
        self.respond({'status': 401, 'message': 'Bad credentials'}, status_code=401)
        with self.assertRaises(status.NotAuthenticatedException):
            api.client.post('/auth/login', json={}, authenticate=False)
        self.assertTrue(auth_manager.is_authenticated())

    def test_connection_error(self):
        self.http.request.side_effect = requests.exceptions.ConnectionError('refused')
        with self.assertRaises(status.ServiceUnavailableException):
            api.client.get('/expenses')

    def test_timeout(self):
        self.http.request.side_effect = requests.exceptions.Timeout('slow')
        with self.assertRaises(status.ServiceUnavailableException):
            api.client.get('/expenses')

    def test_other_request_error(self):
        self.http.request.side_effect = requests.exceptions.InvalidURL('bad url')
        with self.assertRaises(status.RequestFailedException):
            api.client.get('/expenses')
