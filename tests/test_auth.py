# tests/test_auth.py
"""
Tests for ExpenseClient.core.auth: signing in, the stored session and logout.

Run with:
    python -m unittest tests.test_auth
"""
from ExpenseClient.core import auth
from ExpenseClient.core.auth import auth_manager
from ExpenseClient.status import status
from ExpenseClient.ui import actions
from ExpenseClient.ui.actions import signals
from tests.base import BaseApiTestCase

LOGIN_RESPONSE = {
    'token': 'abc.def.ghi',
    'tokenType': 'Bearer',
    'userId': 7,
    'email': 'jane@example.com',
    'name': 'Jane Doe',
}


class AuthTests(BaseApiTestCase):

    def setUp(self) -> None:
        super().setUp()
        auth_manager.logout()

    def test_signed_out_by_default(self):
        self.assertFalse(auth_manager.is_authenticated())
        self.assertIsNone(auth_manager.token)
        self.assertIsNone(auth_manager.user_info())

    def test_login_stores_session(self):
        self.respond(LOGIN_RESPONSE)
        response = auth.login('jane@example.com', 'secret')

        method, url, kwargs = self.last_request()
        self.assertEqual(method, 'POST')
        self.assertEqual(url, self.url('/auth/login'))
        self.assertEqual(kwargs['json'], {'email': 'jane@example.com', 'password': 'secret'})
        self.assertNotIn('Authorization', kwargs['headers'])

        self.assertEqual(response.token, 'abc.def.ghi')
        self.assertEqual(response.user_id, 7)
        self.assertTrue(auth_manager.is_authenticated())
        self.assertEqual(auth_manager.token, 'abc.def.ghi')
        self.assertEqual(
            auth_manager.user_info(),
            {'user_id': 7, 'email': 'jane@example.com', 'name': 'Jane Doe'}
        )

    def test_session_token_is_sent(self):
        self.respond(LOGIN_RESPONSE)
        auth.login('jane@example.com', 'secret')

        self.respond([])
        from ExpenseClient.core import categories
        categories.list_categories()
        _, _, kwargs = self.last_request()
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer abc.def.ghi')

    def test_rejected_login(self):
        self.respond({'status': 401, 'message': 'Invalid email or password'}, status_code=401)
        with self.assertRaises(status.NotAuthenticatedException) as ctx:
            auth.login('jane@example.com', 'wrong')

        self.assertFalse(auth_manager.is_authenticated())
        self.assertEqual(
            status.describe(ctx.exception, 'Login failed. Please check your credentials.'),
            'Invalid email or password'
        )

    def test_logout(self):
        self.respond(LOGIN_RESPONSE)
        auth.login('jane@example.com', 'secret')

        logged_out = []

        def _on_logged_out() -> None:
            logged_out.append(True)

        signals.loggedOut.connect(_on_logged_out)
        try:
            actions.logout()
        finally:
            signals.loggedOut.disconnect(_on_logged_out)

        self.assertTrue(logged_out)
        self.assertFalse(auth_manager.is_authenticated())
        self.assertIsNone(auth_manager.session)
