"""
Core package for ExpenseClient: access to the REST backend.

This package includes:

- :mod:`ExpenseClient.core.types` – Records mirrored from the REST resources.
- :mod:`ExpenseClient.core.auth` – In-memory login session.
- :mod:`ExpenseClient.core.api` – HTTP access, bearer token and error mapping.
- :mod:`ExpenseClient.core.service` – Asynchronous workers and progress dialogs for blocking calls.
- :mod:`ExpenseClient.core.expenses` – Expense endpoints.
- :mod:`ExpenseClient.core.categories` – Category endpoints.
- :mod:`ExpenseClient.core.receipts` – Receipt endpoints.
"""
