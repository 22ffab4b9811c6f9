"""Expense endpoints.

Every operation comes as a blocking ``_function`` that talks to the server and a
public wrapper that runs it with :func:`service.start_asynchronous`.
"""
import logging
from typing import Optional

from . import service
from .api import client
from .types import Expense, ExpenseChanges, ExpenseDraft, ExpenseFilters, Page


def _list_expenses(
        page: int = 0,
        size: int = 20,
        sort: str = 'date,desc',
        filters: Optional[ExpenseFilters] = None,
) -> Page[Expense]:
    """
    Fetch one page of expenses.

    Args:
        page (int): Zero-based page index.
        size (int): Page size.
        sort (str): Sort expression, e.g. ``'date,desc'``.
        filters (ExpenseFilters): Optional filters; unset fields are not sent.

    Returns:
        Page[Expense]: The requested page.
    """
    params = {'page': page, 'size': size, 'sort': sort}
    if filters:
        params.update(filters.to_params())
    data = client.get('/expenses', params=params)
    result = Page.from_json(data or {}, Expense.from_json)
    logging.debug(f'Fetched {len(result.content)} of {result.total_elements} expenses (page {page}).')
    return result


def list_expenses(page: int = 0, size: int = 20, sort: str = 'date,desc',
                  filters: Optional[ExpenseFilters] = None) -> Page[Expense]:
    return service.start_asynchronous(
        _list_expenses, page=page, size=size, sort=sort, filters=filters,
        status_text='Loading expenses...'
    )


def _get_expense(expense_id: int) -> Expense:
    return Expense.from_json(client.get(f'/expenses/{expense_id}'))


def get_expense(expense_id: int) -> Expense:
    return service.start_asynchronous(_get_expense, expense_id, status_text='Loading expense...')


def _create_expense(draft: ExpenseDraft) -> Expense:
    data = client.post('/expenses', json=draft.to_json())
    expense = Expense.from_json(data)
    logging.info(f'Created expense {expense.id}')
    return expense


def create_expense(draft: ExpenseDraft) -> Expense:
    return service.start_asynchronous(_create_expense, draft, status_text='Saving expense...')


def _update_expense(expense_id: int, changes: ExpenseChanges) -> Expense:
    data = client.put(f'/expenses/{expense_id}', json=changes.to_json())
    logging.info(f'Updated expense {expense_id}')
    return Expense.from_json(data)


def update_expense(expense_id: int, changes: ExpenseChanges) -> Expense:
    return service.start_asynchronous(_update_expense, expense_id, changes, status_text='Saving expense...')


def _delete_expense(expense_id: int) -> None:
    client.delete(f'/expenses/{expense_id}')
    logging.info(f'Deleted expense {expense_id}')


def delete_expense(expense_id: int) -> None:
    return service.start_asynchronous(_delete_expense, expense_id, status_text='Deleting expense...')


def _get_total(filters: Optional[ExpenseFilters] = None) -> float:
    """Sum of the expenses matching ``filters``. The search text is not applied."""
    params = filters.to_params(include_search=False) if filters else {}
    data = client.get('/expenses/total', params=params)
    return float(data or 0.0)


def get_total(filters: Optional[ExpenseFilters] = None) -> float:
    return service.start_asynchronous(_get_total, filters, status_text='Loading total...')


def _get_total_by_category(category_id: int, from_date: Optional[str] = None,
                           to_date: Optional[str] = None) -> float:
    params = {'categoryId': category_id}
    if from_date:
        params['fromDate'] = from_date
    if to_date:
        params['toDate'] = to_date
    data = client.get('/expenses/total-by-category', params=params)
    return float(data or 0.0)


def get_total_by_category(category_id: int, from_date: Optional[str] = None,
                          to_date: Optional[str] = None) -> float:
    return service.start_asynchronous(
        _get_total_by_category, category_id, from_date, to_date,
        status_text='Loading total...'
    )
