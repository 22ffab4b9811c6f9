# tests/test_data.py
"""
Tests for the dashboard aggregation in ExpenseClient.data.data.

Run with:
    python -m unittest tests.test_data
"""
import datetime
import unittest
from unittest.mock import patch

from ExpenseClient.core import expenses as expenses_api
from ExpenseClient.core.types import Expense, Page
from ExpenseClient.data import data

TODAY = datetime.date(2025, 3, 14)


def make_expense(expense_id, amount, date, category='Groceries', description=''):
    return Expense(
        id=expense_id,
        amount=amount,
        currency='USD',
        date=date,
        category_name=category,
        description=description,
    )


EXPENSES = [
    make_expense(1, 40.0, '2025-03-01', 'Groceries'),
    make_expense(2, 60.0, '2025-03-10', 'Transport'),
    make_expense(3, 100.0, '2025-03-12', 'Groceries'),
    make_expense(4, 25.0, '2025-02-05', None),
    make_expense(5, 300.0, '2024-12-24', 'Gifts'),
]


class MonthWindowTests(unittest.TestCase):

    def test_dashboard_range(self):
        self.assertEqual(data.dashboard_range(TODAY, 12), ('2024-04-01', '2025-03-14'))
        self.assertEqual(data.dashboard_range(TODAY, 1), ('2025-03-01', '2025-03-14'))

    def test_month_keys(self):
        keys = data.month_keys(TODAY, 3)
        self.assertEqual(keys, ['2025-01', '2025-02', '2025-03'])
        self.assertEqual(len(data.month_keys(TODAY)), 12)
        self.assertEqual(data.month_keys(TODAY)[0], '2024-04')

    def test_month_keys_across_year(self):
        self.assertEqual(data.month_keys(datetime.date(2025, 1, 31), 2), ['2024-12', '2025-01'])

    def test_month_options_newest_first(self):
        options = data.month_options(TODAY, 2)
        self.assertEqual(options, [('2025-03', 'Mar 2025'), ('2025-02', 'Feb 2025')])


class AggregationTests(unittest.TestCase):

    def test_to_frame(self):
        df = data.to_frame(EXPENSES)
        self.assertEqual(list(df.columns), data.EXPENSE_FRAME_COLUMNS)
        self.assertEqual(len(df), 5)
        self.assertEqual(df.loc[3, 'category'], data.UNCATEGORIZED)
        self.assertEqual(df.loc[0, 'month'], '2025-03')

    def test_to_frame_drops_invalid_dates(self):
        df = data.to_frame([make_expense(1, 5.0, 'not-a-date'), make_expense(2, 5.0, '2025-03-01')])
        self.assertEqual(list(df['id']), [2])

    def test_to_frame_empty(self):
        df = data.to_frame([])
        self.assertTrue(df.empty)
        self.assertEqual(list(df.columns), data.EXPENSE_FRAME_COLUMNS)

    def test_monthly_totals_zero_fill(self):
        df = data.to_frame(EXPENSES)
        monthly = data.monthly_totals(df, data.month_keys(TODAY, 4))
        self.assertEqual(list(monthly['month']), ['2024-12', '2025-01', '2025-02', '2025-03'])
        self.assertEqual(list(monthly['amount']), [300.0, 0.0, 25.0, 200.0])
        self.assertEqual(monthly.loc[0, 'label'], 'Dec 2024')

    def test_monthly_totals_ignore_outside_window(self):
        df = data.to_frame(EXPENSES)
        monthly = data.monthly_totals(df, data.month_keys(TODAY, 2))
        self.assertEqual(list(monthly['amount']), [25.0, 200.0])

    def test_monthly_trend(self):
        df = data.to_frame(EXPENSES)
        monthly = data.monthly_trend(data.monthly_totals(df, data.month_keys(TODAY, 6)))
        self.assertIn('loess', monthly.columns)
        self.assertEqual(len(monthly['loess']), 6)

    def test_monthly_trend_flat_series(self):
        monthly = data.monthly_totals(data.to_frame([]), data.month_keys(TODAY, 4))
        trend = data.monthly_trend(monthly)
        self.assertEqual(list(trend['loess']), [0.0, 0.0, 0.0, 0.0])

    def test_category_breakdown(self):
        df = data.to_frame(EXPENSES)
        breakdown, total = data.category_breakdown(df, '2025-03')
        self.assertEqual(total, 200.0)
        self.assertEqual(list(breakdown['category']), ['Groceries', 'Transport'])
        self.assertEqual(list(breakdown['value']), [140.0, 60.0])
        self.assertAlmostEqual(breakdown.loc[0, 'percentage'], 70.0)
        self.assertAlmostEqual(breakdown['percentage'].sum(), 100.0)

    def test_category_breakdown_empty_month(self):
        breakdown, total = data.category_breakdown(data.to_frame(EXPENSES), '2025-01')
        self.assertTrue(breakdown.empty)
        self.assertEqual(total, 0.0)

    def test_top_expenses(self):
        top = data.top_expenses(EXPENSES, 2)
        self.assertEqual([f.id for f in top], [5, 3])
        self.assertEqual(data.top_expenses(EXPENSES, 0), [])


class ComputeDashboardTests(unittest.TestCase):

    def test_compute_dashboard(self):
        result = data.compute_dashboard(EXPENSES, today=TODAY, months=12, top=3)
        self.assertEqual(result.month, '2025-03')
        self.assertEqual(result.month_total, 200.0)
        self.assertEqual(result.month_count, 3)
        self.assertEqual(result.period_total, 525.0)
        self.assertEqual(result.period_count, 5)
        self.assertEqual(result.monthly_average, 43.75)
        self.assertEqual([f.id for f in result.top], [5, 3, 2])
        self.assertEqual(len(result.monthly), 12)
        self.assertFalse(result.empty)

    def test_compute_dashboard_selected_month(self):
        result = data.compute_dashboard(EXPENSES, month='2025-02', today=TODAY)
        self.assertEqual(result.month_total, 25.0)
        self.assertEqual(list(result.breakdown['category']), [data.UNCATEGORIZED])

    def test_compute_dashboard_empty(self):
        result = data.compute_dashboard([], today=TODAY)
        self.assertTrue(result.empty)
        self.assertEqual(result.month_total, 0.0)
        self.assertEqual(result.period_total, 0.0)
        self.assertTrue(result.breakdown.empty)


class LoadDashboardTests(unittest.TestCase):

    def test_loads_every_page(self):
        pages = [
            Page(content=EXPENSES[:3], total_elements=5, total_pages=2, number=0, last=False, empty=False),
            Page(content=EXPENSES[3:], total_elements=5, total_pages=2, number=1, last=True, empty=False),
        ]
        with patch.object(expenses_api, '_list_expenses', side_effect=pages) as mocked:
            result = data._load_dashboard_expenses(TODAY, 12)

        self.assertEqual([f.id for f in result], [1, 2, 3, 4, 5])
        self.assertEqual(mocked.call_count, 2)
        first_call = mocked.call_args_list[0].kwargs
        self.assertEqual(first_call['size'], data.DASHBOARD_PAGE_SIZE)
        self.assertEqual(first_call['filters'].from_date, '2024-04-01')
        self.assertEqual(first_call['filters'].to_date, '2025-03-14')
        self.assertEqual(mocked.call_args_list[1].kwargs['page'], 1)

    def test_stops_on_empty_page(self):
        pages = [Page(content=[], last=False)]
        with patch.object(expenses_api, '_list_expenses', side_effect=pages) as mocked:
            self.assertEqual(data._load_dashboard_expenses(TODAY), [])
        self.assertEqual(mocked.call_count, 1)
