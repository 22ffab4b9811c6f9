# tests/test_services.py
"""
Tests for the expense, category and receipt endpoints of ExpenseClient.core.

Requests are answered by a mocked HTTP session, the tests check the paths,
parameters and bodies sent and the records decoded from the answers.

Run with:
    python -m unittest tests.test_services
"""
import os
import tempfile

from ExpenseClient.core import categories
from ExpenseClient.core import expenses
from ExpenseClient.core import receipts
from ExpenseClient.core.types import (
    Category,
    ExpenseChanges,
    ExpenseDraft,
    ExpenseFilters,
    Page,
)
from tests.base import BaseApiTestCase, FakeResponse


def expense_json(expense_id=1, amount=12.5, **kwargs):
    data = {
        'id': expense_id,
        'userId': 1,
        'userName': 'Jane Doe',
        'categoryId': 3,
        'categoryName': 'Groceries',
        'amount': amount,
        'currency': 'USD',
        'date': '2025-03-14',
        'description': 'Weekly shop',
        'receiptMongoId': None,
        'tags': ['food'],
        'createdAt': '2025-03-14T10:00:00',
        'updatedAt': '2025-03-14T10:00:00',
    }
    data.update(kwargs)
    return data


def page_json(content, number=0, size=20, total=None, last=True):
    total = len(content) if total is None else total
    return {
        'content': content,
        'totalElements': total,
        'totalPages': max((total + size - 1) // size, 0),
        'size': size,
        'number': number,
        'first': number == 0,
        'last': last,
        'empty': not content,
    }


def receipt_json(receipt_id='65f0c0ffee', **kwargs):
    data = {
        'id': receipt_id,
        'userId': 1,
        'expenseId': None,
        'fileName': 'lunch.jpg',
        'mimeType': 'image/jpeg',
        'fileSize': 2048,
        'notes': None,
        'createdAt': '2025-03-14T12:00:00',
        'updatedAt': '2025-03-14T12:00:00',
    }
    data.update(kwargs)
    return data


class ExpenseEndpointTests(BaseApiTestCase):

    def test_list_expenses(self):
        self.respond(page_json([expense_json(1), expense_json(2, amount=3)], total=42, last=False))
        result = expenses.list_expenses(page=1, size=20)

        method, url, kwargs = self.last_request()
        self.assertEqual(method, 'GET')
        self.assertEqual(url, self.url('/expenses'))
        self.assertEqual(kwargs['params'], {'page': 1, 'size': 20, 'sort': 'date,desc'})

        self.assertIsInstance(result, Page)
        self.assertEqual(result.total_elements, 42)
        self.assertEqual(result.total_pages, 3)
        self.assertFalse(result.last)
        self.assertEqual([f.id for f in result.content], [1, 2])
        self.assertEqual(result.content[0].category_name, 'Groceries')
        self.assertEqual(result.content[0].tags, ['food'])

    def test_list_expenses_with_filters(self):
        self.respond(page_json([]))
        filters = ExpenseFilters(
            from_date='2025-01-01',
            to_date='2025-01-31',
            category_id=3,
            min_amount=0.0,
            q='coffee',
        )
        expenses.list_expenses(filters=filters)

        _, _, kwargs = self.last_request()
        self.assertEqual(kwargs['params'], {
            'page': 0,
            'size': 20,
            'sort': 'date,desc',
            'fromDate': '2025-01-01',
            'toDate': '2025-01-31',
            'categoryId': 3,
            'minAmount': 0.0,
            'q': 'coffee',
        })

    def test_get_expense(self):
        self.respond(expense_json(5))
        expense = expenses.get_expense(5)
        _, url, _ = self.last_request()
        self.assertEqual(url, self.url('/expenses/5'))
        self.assertEqual(expense.id, 5)
        self.assertEqual(expense.amount, 12.5)

    def test_create_expense(self):
        self.respond(expense_json(9, amount=20.0), status_code=201)
        draft = ExpenseDraft(amount=20.0, currency='USD', date='2025-03-14', description='Taxi')
        expense = expenses.create_expense(draft)

        method, url, kwargs = self.last_request()
        self.assertEqual(method, 'POST')
        self.assertEqual(url, self.url('/expenses'))
        self.assertEqual(kwargs['json'], {
            'amount': 20.0,
            'currency': 'USD',
            'date': '2025-03-14',
            'description': 'Taxi',
        })
        self.assertEqual(expense.id, 9)

    def test_update_expense(self):
        self.respond(expense_json(9, amount=25.0))
        changes = ExpenseChanges(amount=25.0, tags=[])
        expense = expenses.update_expense(9, changes)

        method, url, kwargs = self.last_request()
        self.assertEqual(method, 'PUT')
        self.assertEqual(url, self.url('/expenses/9'))
        self.assertEqual(kwargs['json'], {'amount': 25.0, 'tags': []})
        self.assertEqual(expense.amount, 25.0)

    def test_delete_expense(self):
        self.respond(status_code=204)
        self.assertIsNone(expenses.delete_expense(9))
        method, url, _ = self.last_request()
        self.assertEqual(method, 'DELETE')
        self.assertEqual(url, self.url('/expenses/9'))

    def test_total_ignores_search(self):
        self.respond(123.45)
        total = expenses.get_total(ExpenseFilters(from_date='2025-01-01', q='coffee'))

        _, url, kwargs = self.last_request()
        self.assertEqual(url, self.url('/expenses/total'))
        self.assertEqual(kwargs['params'], {'fromDate': '2025-01-01'})
        self.assertEqual(total, 123.45)

    def test_total_by_category(self):
        self.respond(50)
        total = expenses.get_total_by_category(3, '2025-01-01')

        _, url, kwargs = self.last_request()
        self.assertEqual(url, self.url('/expenses/total-by-category'))
        self.assertEqual(kwargs['params'], {'categoryId': 3, 'fromDate': '2025-01-01'})
        self.assertEqual(total, 50.0)


class CategoryEndpointTests(BaseApiTestCase):

    def test_list_categories_unpaged(self):
        self.respond([{'id': 1, 'name': 'Food', 'userId': 1}, {'id': 2, 'name': 'Travel', 'userId': 1}])
        result = categories.list_categories()

        method, url, kwargs = self.last_request()
        self.assertEqual(method, 'GET')
        self.assertEqual(url, self.url('/categories'))
        self.assertIsNone(kwargs['params'])
        self.assertEqual(result, [Category(1, 'Food', 1), Category(2, 'Travel', 1)])

    def test_list_categories_paged(self):
        self.respond(page_json([{'id': 1, 'name': 'Food'}], size=5))
        result = categories.list_categories(page=0, size=5)

        _, _, kwargs = self.last_request()
        self.assertEqual(kwargs['params'], {'page': 0, 'size': 5, 'sort': 'name,asc'})
        self.assertIsInstance(result, Page)
        self.assertEqual([f.name for f in categories.as_list(result)], ['Food'])

    def test_create_rename_delete(self):
        self.respond({'id': 4, 'name': 'Books'}, status_code=201)
        category = categories.create_category('Books')
        method, url, kwargs = self.last_request()
        self.assertEqual((method, url, kwargs['json']), ('POST', self.url('/categories'), {'name': 'Books'}))
        self.assertEqual(category.id, 4)

        self.respond({'id': 4, 'name': 'Reading'})
        category = categories.update_category(4, 'Reading')
        method, url, kwargs = self.last_request()
        self.assertEqual((method, url, kwargs['json']), ('PUT', self.url('/categories/4'), {'name': 'Reading'}))
        self.assertEqual(category.name, 'Reading')

        self.respond(status_code=204)
        categories.delete_category(4)
        method, url, _ = self.last_request()
        self.assertEqual((method, url), ('DELETE', self.url('/categories/4')))

    def test_get_category(self):
        self.respond({'id': 2, 'name': 'Travel'})
        self.assertEqual(categories.get_category(2).name, 'Travel')
        _, url, _ = self.last_request()
        self.assertEqual(url, self.url('/categories/2'))

    def test_search_categories(self):
        self.respond([{'id': 2, 'name': 'Travel'}])
        result = categories.search_categories('tra')

        _, url, kwargs = self.last_request()
        self.assertEqual(url, self.url('/categories/search'))
        self.assertEqual(kwargs['params'], {'q': 'tra'})
        self.assertEqual([f.name for f in categories.as_list(result)], ['Travel'])


class ReceiptEndpointTests(BaseApiTestCase):

    def setUp(self) -> None:
        super().setUp()
        fd, self.path = tempfile.mkstemp(suffix='.png')
        with os.fdopen(fd, 'wb') as f:
            f.write(b'\x89PNG\r\n\x1a\n')

    def tearDown(self) -> None:
        super().tearDown()
        os.remove(self.path)

    def test_guess_mime_type(self):
        self.assertEqual(receipts.guess_mime_type('scan.pdf'), 'application/pdf')
        self.assertEqual(receipts.guess_mime_type('photo.png'), 'image/png')
        self.assertEqual(receipts.guess_mime_type('noextension'), 'application/octet-stream')

    def test_upload_receipt(self):
        self.respond(receipt_json(fileName=os.path.basename(self.path), mimeType='image/png'), status_code=201)
        receipt = receipts.upload_receipt(self.path, 'Lunch with client')

        method, url, kwargs = self.last_request()
        self.assertEqual(method, 'POST')
        self.assertEqual(url, self.url('/receipts'))
        name, _, mime_type = kwargs['files']['file']
        self.assertEqual(name, os.path.basename(self.path))
        self.assertEqual(mime_type, 'image/png')
        self.assertEqual(kwargs['data'], {'notes': 'Lunch with client'})
        self.assertTrue(receipt.is_image)

    def test_upload_without_notes(self):
        self.respond(receipt_json())
        receipts.upload_receipt(self.path)
        _, _, kwargs = self.last_request()
        self.assertIsNone(kwargs['data'])

    def test_upload_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            receipts.upload_receipt(self.path + '.missing')
        self.assertFalse(self.http.request.called)

    def test_download_receipt(self):
        self.respond(content=b'\x89PNG')
        self.assertEqual(receipts.download_receipt('abc'), b'\x89PNG')
        _, url, _ = self.last_request()
        self.assertEqual(url, self.url('/receipts/abc'))

    def test_metadata_and_notes(self):
        self.respond(receipt_json('abc', notes='old', expenseId=3))
        receipt = receipts.get_receipt_metadata('abc')
        _, url, _ = self.last_request()
        self.assertEqual(url, self.url('/receipts/abc/metadata'))
        self.assertEqual(receipt.expense_id, 3)

        self.respond(receipt_json('abc', notes='new'))
        receipt = receipts.update_receipt_notes('abc', 'new')
        method, url, kwargs = self.last_request()
        self.assertEqual((method, url, kwargs['json']), ('PATCH', self.url('/receipts/abc'), {'notes': 'new'}))
        self.assertEqual(receipt.notes, 'new')

    def test_link_and_unlink(self):
        self.http.request.return_value = FakeResponse(200)
        receipts.link_receipt('abc', 12)
        method, url, _ = self.last_request()
        self.assertEqual((method, url), ('POST', self.url('/receipts/abc/link/12')))

        receipts.unlink_receipt('abc')
        method, url, _ = self.last_request()
        self.assertEqual((method, url), ('POST', self.url('/receipts/abc/unlink')))

    def test_delete_receipt(self):
        self.respond(status_code=204)
        receipts.delete_receipt('abc')
        method, url, _ = self.last_request()
        self.assertEqual((method, url), ('DELETE', self.url('/receipts/abc')))

    def test_list_unassigned_receipts(self):
        self.respond([receipt_json('a'), receipt_json('b', mimeType='application/pdf', fileName='bill.pdf')])
        result = receipts.list_unassigned_receipts()
        _, url, _ = self.last_request()
        self.assertEqual(url, self.url('/receipts/unassigned'))
        self.assertEqual([f.id for f in result], ['a', 'b'])
        self.assertTrue(result[1].is_pdf)
