"""Dashboard aggregation of fetched expenses.

The dashboard fetches every expense of the last months through the paginated
listing endpoint and aggregates them locally with pandas:

    - monthly totals over a fixed month window, zero-filled, with a LOESS trend line
    - category breakdown of a selected month with percentages
    - the largest expenses
"""
import dataclasses
import datetime
import logging
from typing import List, Optional, Tuple

import pandas as pd
from dateutil.relativedelta import relativedelta
from statsmodels.nonparametric.smoothers_lowess import lowess

from ..core import expenses as expenses_api
from ..core import service
from ..core.types import Expense, ExpenseFilters
from ..settings import locale

DASHBOARD_MONTHS: int = 12
DASHBOARD_PAGE_SIZE: int = 100
TOP_EXPENSES: int = 5
LOESS_FRACTION: float = 0.5

UNCATEGORIZED: str = 'Uncategorized'

EXPENSE_FRAME_COLUMNS: List[str] = ['id', 'date', 'month', 'amount', 'currency', 'category', 'description']
MONTHLY_COLUMNS: List[str] = ['month', 'label', 'amount', 'loess']
BREAKDOWN_COLUMNS: List[str] = ['category', 'value', 'percentage']


def dashboard_range(today: Optional[datetime.date] = None,
                    months: int = DASHBOARD_MONTHS) -> Tuple[str, str]:
    """Return the ``(from_date, to_date)`` of the dashboard window.

    The window starts on the first day of the month ``months - 1`` months ago
    and ends today. This is a calendar-month window rather than a rolling
    ``months`` back from today: on 2025-03-14 a twelve month window starts on
    2024-04-01, not 2024-03-14, so every charted month is complete except
    the current one.
    """
    today = today or datetime.date.today()
    start = today.replace(day=1) - relativedelta(months=max(months, 1) - 1)
    return start.isoformat(), today.isoformat()


def month_keys(today: Optional[datetime.date] = None, months: int = DASHBOARD_MONTHS) -> List[str]:
    """The ``YYYY-MM`` keys of the dashboard window, oldest first."""
    today = today or datetime.date.today()
    first = today.replace(day=1)
    return [
        (first - relativedelta(months=i)).strftime('%Y-%m')
        for i in range(max(months, 1) - 1, -1, -1)
    ]


def month_options(today: Optional[datetime.date] = None,
                  months: int = DASHBOARD_MONTHS) -> List[Tuple[str, str]]:
    """``(key, label)`` pairs of the selectable months, newest first."""
    return [(k, locale.format_month_label(k)) for k in reversed(month_keys(today, months))]


def _load_dashboard_expenses(today: Optional[datetime.date] = None,
                             months: int = DASHBOARD_MONTHS,
                             page_size: int = DASHBOARD_PAGE_SIZE) -> List[Expense]:
    """
    Fetch every expense of the dashboard window, page by page.

    Stops at the last page, or at the first empty one.
    """
    from_date, to_date = dashboard_range(today, months)
    filters = ExpenseFilters(from_date=from_date, to_date=to_date)

    result: List[Expense] = []
    page = 0
    while True:
        response = expenses_api._list_expenses(page=page, size=page_size, sort='date,desc', filters=filters)
        result.extend(response.content)
        if response.last or not response.content:
            break
        page += 1

    logging.debug(f'Loaded {len(result)} expenses between {from_date} and {to_date} in {page + 1} page(s).')
    return result


def load_dashboard_expenses(today: Optional[datetime.date] = None,
                            months: int = DASHBOARD_MONTHS) -> List[Expense]:
    return service.start_asynchronous(
        _load_dashboard_expenses, today, months,
        status_text='Loading dashboard...'
    )


def to_frame(expenses: List[Expense]) -> pd.DataFrame:
    """Convert expenses to a DataFrame. Expenses with unparsable dates are dropped."""
    if not expenses:
        return pd.DataFrame(columns=EXPENSE_FRAME_COLUMNS)

    df = pd.DataFrame({
        'id': [f.id for f in expenses],
        'date': [f.date for f in expenses],
        'amount': [f.amount for f in expenses],
        'currency': [f.currency for f in expenses],
        'category': [f.category_name or UNCATEGORIZED for f in expenses],
        'description': [f.description or '' for f in expenses],
    })
    df['date'] = pd.to_datetime(df['date'], format='%Y-%m-%d', errors='coerce')
    clean_df = df.dropna(subset=['date'])
    if len(df) != len(clean_df):
        logging.warning(f'Dropped {len(df) - len(clean_df)} expenses with invalid dates.')

    clean_df = clean_df.copy()
    clean_df['amount'] = pd.to_numeric(clean_df['amount'], errors='coerce').fillna(0.0)
    clean_df['month'] = clean_df['date'].dt.strftime('%Y-%m')
    return clean_df[EXPENSE_FRAME_COLUMNS].reset_index(drop=True)


def monthly_totals(df: pd.DataFrame, months: List[str]) -> pd.DataFrame:
    """
    Sum amounts by month over the given month keys.

    Months without expenses are zero. Expenses outside the window are ignored.

    Returns:
        pd.DataFrame: Columns ``month``, ``label``, ``amount``; one row per month key.
    """
    if df.empty:
        totals = pd.Series(0.0, index=months)
    else:
        totals = df.groupby('month')['amount'].sum().reindex(months, fill_value=0.0)

    return pd.DataFrame({
        'month': months,
        'label': [locale.format_month_label(m) for m in months],
        'amount': [round(float(v), 2) for v in totals.values],
    })


def monthly_trend(monthly: pd.DataFrame, loess_fraction: float = LOESS_FRACTION) -> pd.DataFrame:
    """Add a ``loess`` column smoothing the monthly amounts."""
    monthly = monthly.copy()
    values = monthly['amount'].astype(float).values
    m = len(values)

    # Flat series have nothing to smooth
    if m < 3 or (values == values[0]).all():
        monthly['loess'] = values.copy()
        return monthly

    x = pd.RangeIndex(stop=m)
    monthly['loess'] = lowess(values, x, frac=loess_fraction, return_sorted=False)
    return monthly


def category_breakdown(df: pd.DataFrame, month: str) -> Tuple[pd.DataFrame, float]:
    """
    Sum the amounts of one month by category.

    Args:
        df (pd.DataFrame): Frame built by :func:`to_frame`.
        month (str): ``YYYY-MM`` key.

    Returns:
        tuple: The breakdown (columns ``category``, ``value``, ``percentage``, sorted by
            value descending) and the month total.
    """
    if df.empty:
        return pd.DataFrame(columns=BREAKDOWN_COLUMNS), 0.0

    df_month = df[df['month'] == month]
    if df_month.empty:
        return pd.DataFrame(columns=BREAKDOWN_COLUMNS), 0.0

    total = round(float(df_month['amount'].sum()), 2)
    grouped = (
        df_month.groupby('category')['amount']
        .sum()
        .round(2)
        .rename('value')
        .reset_index()
        .sort_values(by='value', ascending=False, kind='stable')
        .reset_index(drop=True)
    )
    if total > 0:
        grouped['percentage'] = grouped['value'] / total * 100.0
    else:
        grouped['percentage'] = 0.0
    return grouped[BREAKDOWN_COLUMNS], total


def top_expenses(expenses: List[Expense], n: int = TOP_EXPENSES) -> List[Expense]:
    """The ``n`` largest expenses by amount."""
    return sorted(expenses, key=lambda f: f.amount, reverse=True)[:max(n, 0)]


@dataclasses.dataclass
class DashboardData:
    """Everything the dashboard page shows."""
    month: str
    monthly: pd.DataFrame
    breakdown: pd.DataFrame
    month_total: float = 0.0
    month_count: int = 0
    period_total: float = 0.0
    period_count: int = 0
    monthly_average: float = 0.0
    top: List[Expense] = dataclasses.field(default_factory=list)

    @property
    def empty(self) -> bool:
        return self.period_count == 0


def compute_dashboard(
        expenses: List[Expense],
        month: Optional[str] = None,
        today: Optional[datetime.date] = None,
        months: int = DASHBOARD_MONTHS,
        top: int = TOP_EXPENSES,
        loess_fraction: float = LOESS_FRACTION,
) -> DashboardData:
    """
    Aggregate fetched expenses for the dashboard.

    Args:
        expenses: The expenses of the dashboard window.
        month (str): Selected ``YYYY-MM``. Defaults to the current month.
        today (datetime.date): Reference date. Defaults to today.
        months (int): Length of the month window.
        top (int): Number of largest expenses to keep.
        loess_fraction (float): LOESS smoothing fraction.

    Returns:
        DashboardData: The aggregates.
    """
    keys = month_keys(today, months)
    month = month or keys[-1]

    df = to_frame(expenses)
    monthly = monthly_trend(monthly_totals(df, keys), loess_fraction)
    breakdown, month_total = category_breakdown(df, month)
    month_count = int((df['month'] == month).sum()) if not df.empty else 0
    period_total = round(float(monthly['amount'].sum()), 2)

    return DashboardData(
        month=month,
        monthly=monthly,
        breakdown=breakdown,
        month_total=month_total,
        month_count=month_count,
        period_total=period_total,
        period_count=len(expenses),
        monthly_average=round(period_total / len(keys), 2) if keys else 0.0,
        top=top_expenses(expenses, top),
    )
