# tests/test_validation.py
"""
Tests for ExpenseClient.data.validation and ExpenseClient.data.filters.

Run with:
    python -m unittest tests.test_validation
"""
import unittest

from ExpenseClient.core.types import Expense, ExpenseFilters, Page
from ExpenseClient.data import filters
from ExpenseClient.data import validation
from ExpenseClient.data.validation import ExpenseFormData


def valid_form(**kwargs) -> ExpenseFormData:
    data = dict(amount='12.50', currency='USD', date='2025-03-14', category_id=3,
                description='Lunch', tags='food, work')
    data.update(kwargs)
    return ExpenseFormData(**data)


class ExpenseFormTests(unittest.TestCase):

    def test_valid_form(self):
        self.assertEqual(validation.validate_expense_form(valid_form()), {})

    def test_amount_rules(self):
        cases = {
            '': 'Amount is required',
            '   ': 'Amount is required',
            'abc': 'Amount must be a number',
            'nan': 'Amount must be a number',
            '0': 'Amount must be greater than 0',
            '-5': 'Amount must be greater than 0',
            '0.001': 'Amount must be greater than 0',
            '1000000000': 'Amount is too large',
        }
        for value, message in cases.items():
            with self.subTest(amount=value):
                errors = validation.validate_expense_form(valid_form(amount=value))
                self.assertEqual(errors.get('amount'), message)

    def test_smallest_amount_is_valid(self):
        self.assertNotIn('amount', validation.validate_expense_form(valid_form(amount='0.01')))

    def test_currency_rules(self):
        self.assertEqual(
            validation.validate_expense_form(valid_form(currency=''))['currency'],
            'Currency is required'
        )
        self.assertEqual(
            validation.validate_expense_form(valid_form(currency='XYZ'))['currency'],
            'Currency is not supported'
        )

    def test_date_rules(self):
        self.assertEqual(
            validation.validate_expense_form(valid_form(date=''))['date'],
            'Date is required'
        )
        self.assertEqual(
            validation.validate_expense_form(valid_form(date='2025-02-30'))['date'],
            'Date must be a valid date (YYYY-MM-DD)'
        )

    def test_description_length(self):
        errors = validation.validate_expense_form(valid_form(description='x' * 1001))
        self.assertIn('description', errors)
        errors = validation.validate_expense_form(valid_form(description='x' * 1000))
        self.assertNotIn('description', errors)

    def test_every_invalid_field_is_reported(self):
        errors = validation.validate_expense_form(ExpenseFormData(amount='', currency='', date=''))
        self.assertEqual(set(errors), {'amount', 'currency', 'date'})

    def test_parse_amount(self):
        self.assertEqual(validation.parse_amount(' 12.5 '), 12.5)
        self.assertEqual(validation.parse_amount(3), 3.0)
        self.assertIsNone(validation.parse_amount('inf'))
        self.assertIsNone(validation.parse_amount(True))
        self.assertIsNone(validation.parse_amount(None))

    def test_parse_tags(self):
        self.assertEqual(validation.parse_tags(' food ,, work , '), ['food', 'work'])
        self.assertEqual(validation.parse_tags(''), [])

    def test_build_draft(self):
        draft = validation.build_expense_draft(valid_form(category_id=0, description='', tags=''))
        self.assertEqual(draft.to_json(), {'amount': 12.5, 'currency': 'USD', 'date': '2025-03-14'})

    def test_build_draft_with_receipt(self):
        draft = validation.build_expense_draft(valid_form(), receipt_mongo_id='r1')
        self.assertEqual(draft.to_json(), {
            'categoryId': 3,
            'amount': 12.5,
            'currency': 'USD',
            'date': '2025-03-14',
            'description': 'Lunch',
            'receiptMongoId': 'r1',
            'tags': ['food', 'work'],
        })

    def test_build_changes_always_sends_tags(self):
        changes = validation.build_expense_changes(valid_form(tags=''))
        self.assertEqual(changes.to_json()['tags'], [])

    def test_build_changes_clears_description(self):
        expense = Expense(id=1, amount=5.0, currency='USD', date='2024-01-01',
                          description='old', tags=['a'])
        form = ExpenseFormData.from_expense(expense)
        form.description = ''
        self.assertEqual(validation.build_expense_changes(form).to_json(), {
            'amount': 5.0,
            'currency': 'USD',
            'date': '2024-01-01',
            'description': '',
            'tags': ['a'],
        })

    def test_form_from_expense(self):
        expense = Expense(id=1, amount=7.0, currency='EUR', date='2025-01-02', category_id=2,
                          description=None, tags=['a', 'b'])
        form = ExpenseFormData.from_expense(expense)
        self.assertEqual(form.amount, '7.00')
        self.assertEqual(form.currency, 'EUR')
        self.assertEqual(form.description, '')
        self.assertEqual(form.tags, 'a, b')


class CategoryAndReceiptValidationTests(unittest.TestCase):

    def test_category_name(self):
        self.assertEqual(validation.validate_category_name('  '), 'Category name is required')
        self.assertIsNone(validation.validate_category_name('Food'))

    def test_receipt_file(self):
        self.assertEqual(validation.validate_receipt_file(None), 'Please select a file')
        self.assertEqual(validation.validate_receipt_file('notes.txt'), 'Only images and PDF files are supported')
        self.assertIsNone(validation.validate_receipt_file('scan.PDF'))
        self.assertIsNone(validation.validate_receipt_file('photo.jpeg'))

    def test_receipt_mime_type_takes_precedence(self):
        self.assertTrue(validation.is_supported_receipt('upload.bin', 'image/png'))
        self.assertFalse(validation.is_supported_receipt('upload.png', 'text/plain'))


class FilterTests(unittest.TestCase):

    def test_build_filters_keeps_set_fields(self):
        fields = filters.FilterFields(q=' taxi ', from_date='2025-01-01', category_id=2,
                                      min_amount='0', max_amount='', currency='EUR')
        result = filters.build_filters(fields)
        self.assertEqual(result, ExpenseFilters(from_date='2025-01-01', category_id=2, min_amount=0.0,
                                                q='taxi', currency='EUR'))
        self.assertEqual(result.to_params(), {
            'fromDate': '2025-01-01',
            'categoryId': 2,
            'minAmount': 0.0,
            'q': 'taxi',
            'currency': 'EUR',
        })

    def test_build_filters_rejects_bad_amounts(self):
        with self.assertRaisesRegex(ValueError, 'Minimum amount must be a number'):
            filters.build_filters(filters.FilterFields(min_amount='abc'))
        with self.assertRaisesRegex(ValueError, 'Maximum amount must be a number'):
            filters.build_filters(filters.FilterFields(max_amount='x1'))

    def test_zero_category_is_not_sent(self):
        self.assertEqual(ExpenseFilters(category_id=0).to_params(), {})


class ExpenseListStateTests(unittest.TestCase):

    def page(self, rows, total, total_pages):
        return Page(content=[object()] * rows, total_elements=total, total_pages=total_pages)

    def test_defaults(self):
        state = filters.ExpenseListState()
        self.assertEqual(state.page, 0)
        self.assertEqual(state.size, 10)
        self.assertEqual(state.range_text(), 'Showing 0 - 0 of 0 expenses')
        self.assertEqual(state.page_text(), 'Page 1 of 1')

    def test_invalid_initial_size(self):
        self.assertEqual(filters.ExpenseListState(size=7).size, 10)

    def test_paging(self):
        state = filters.ExpenseListState(size=10)
        state.update(self.page(10, 25, 3))
        self.assertFalse(state.has_previous())
        self.assertTrue(state.has_next())
        self.assertEqual(state.range_text(), 'Showing 1 - 10 of 25 expenses')

        state.next_page()
        state.next_page()
        state.update(self.page(5, 25, 3))
        self.assertEqual(state.page, 2)
        self.assertFalse(state.has_next())
        self.assertEqual(state.range_text(), 'Showing 21 - 25 of 25 expenses')
        self.assertEqual(state.page_text(), 'Page 3 of 3')

        state.next_page()
        self.assertEqual(state.page, 2)
        state.previous_page()
        self.assertEqual(state.page, 1)

    def test_filters_and_size_reset_page(self):
        state = filters.ExpenseListState()
        state.update(self.page(10, 50, 5))
        state.page = 3

        state.apply_filters(filters.FilterFields(q='coffee'))
        self.assertEqual(state.page, 0)
        self.assertEqual(state.filters.q, 'coffee')

        state.page = 2
        state.set_size(20)
        self.assertEqual((state.page, state.size), (0, 20))

        state.page = 1
        state.clear_filters()
        self.assertEqual(state.page, 0)
        self.assertEqual(state.filters, ExpenseFilters())

    def test_invalid_filters_leave_state(self):
        state = filters.ExpenseListState()
        state.apply_filters(filters.FilterFields(q='coffee'))
        state.page = 2
        with self.assertRaises(ValueError):
            state.apply_filters(filters.FilterFields(min_amount='lots'))
        self.assertEqual(state.page, 2)
        self.assertEqual(state.filters.q, 'coffee')

    def test_set_size_rejects_unknown(self):
        with self.assertRaises(ValueError):
            filters.ExpenseListState().set_size(15)
