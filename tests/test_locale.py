# tests/test_locale.py
"""
Tests for the Babel based formatting helpers and the status messages shown
for failed requests.

Run with:
    python -m unittest tests.test_locale
"""
import datetime
import unittest

from ExpenseClient.settings import locale
from ExpenseClient.status import status


class FormattingTests(unittest.TestCase):

    def test_format_currency_value(self):
        self.assertEqual(locale.format_currency_value(1234.5, 'USD', 'en_US'), '$1,234.50')
        self.assertEqual(locale.format_currency_value(10, 'GBP', 'en_GB'), '£10.00')

    def test_currency_defaults_to_locale_territory(self):
        self.assertEqual(locale.get_currency_from_locale('fr_FR'), 'EUR')
        self.assertEqual(locale.get_currency_from_locale('ja_JP'), 'JPY')
        self.assertEqual(locale.get_currency_from_locale('xx'), 'USD')
        self.assertEqual(locale.get_currency_from_locale('en_ZZ'), 'USD')

    def test_unknown_locale_falls_back(self):
        self.assertEqual(locale.format_currency_value(5, 'USD', 'not_a_locale'), '$5.00')

    def test_parse_date(self):
        self.assertEqual(locale.parse_date('2025-03-14'), datetime.date(2025, 3, 14))
        self.assertEqual(locale.parse_date('2025-03-14T10:00:00'), datetime.date(2025, 3, 14))
        self.assertIsNone(locale.parse_date('14/03/2025'))
        self.assertIsNone(locale.parse_date(''))
        self.assertIsNone(locale.parse_date(None))

    def test_format_date(self):
        self.assertEqual(locale.format_date('2025-03-04'), 'Mar 04, 2025')
        self.assertEqual(locale.format_date('garbage'), 'garbage')
        self.assertEqual(locale.format_date(None), '')

    def test_format_datetime_invalid(self):
        self.assertEqual(locale.format_datetime('yesterday'), 'yesterday')
        self.assertEqual(locale.format_datetime(None), '')

    def test_format_datetime_contains_date(self):
        value = datetime.datetime(2025, 3, 14, 12, 0)
        self.assertIn('2025', locale.format_datetime(value))

    def test_format_month_label(self):
        self.assertEqual(locale.format_month_label('2025-01'), 'Jan 2025')
        self.assertEqual(locale.format_month_label('bogus'), 'bogus')

    def test_format_percentage(self):
        self.assertEqual(locale.format_percentage(33.333), '33.3%')

    def test_format_file_size(self):
        self.assertEqual(locale.format_file_size(512), '512 B')
        self.assertEqual(locale.format_file_size(2048), '2.00 KB')
        self.assertEqual(locale.format_file_size(3 * 1024 * 1024), '3.00 MB')


class StatusMessageTests(unittest.TestCase):

    def test_validation_errors_take_precedence(self):
        ex = status.ValidationFailedException(
            http_status=400,
            server_message='Validation failed',
            validation_errors=[{'field': 'name', 'message': 'must not be blank'}],
        )
        self.assertEqual(status.describe(ex, 'Failed to save category'), 'Validation failed: name: must not be blank')

    def test_server_message(self):
        ex = status.ConflictException(http_status=409, server_message='Category already exists')
        self.assertEqual(status.describe(ex, 'Failed to save category'), 'Category already exists')

    def test_fallback(self):
        self.assertEqual(status.describe(status.ServiceUnavailableException(), 'Failed to load'), 'Failed to load')
        self.assertEqual(status.describe(ValueError('x'), 'Failed to load'), 'Failed to load')

    def test_exception_for_status(self):
        self.assertIs(status.exception_for_status(400), status.ValidationFailedException)
        self.assertIs(status.exception_for_status(401), status.NotAuthenticatedException)
        self.assertIs(status.exception_for_status(502), status.ServerErrorException)
        self.assertIs(status.exception_for_status(422), status.RequestFailedException)

    def test_format_validation_errors(self):
        self.assertEqual(
            status.format_validation_errors([
                {'field': 'amount', 'message': 'must be positive'},
                {'field': 'date', 'message': 'must not be null'},
            ]),
            'amount: must be positive, date: must not be null'
        )

    def test_exception_message_includes_status(self):
        ex = status.NotFoundException(http_status=404, server_message='Expense not found')
        self.assertEqual(str(ex), f'{status.get_message(status.Status.NotFound)} Expense not found')
