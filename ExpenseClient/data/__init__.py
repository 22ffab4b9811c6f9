"""
ExpenseClient data package: validation, filters, dashboard aggregation, models and views.

This package provides:

- :mod:`ExpenseClient.data.validation` – Expense, category and receipt form validation and request building.
- :mod:`ExpenseClient.data.filters` – Expense list filters and pagination state.
- :mod:`ExpenseClient.data.data` – Dashboard aggregation of fetched expenses (:func:`ExpenseClient.data.data.compute_dashboard`).
- :mod:`ExpenseClient.data.model` – Qt models of expenses, categories and receipts.
- :mod:`ExpenseClient.data.view` – The pages: dashboard, expenses, expense form, categories and receipts.
"""
