"""
Settings package: configuration API, formatting and editors.

This package provides:

- :mod:`ExpenseClient.settings.lib` – Core settings management and schema validation.
- :mod:`ExpenseClient.settings.locale` – Localization utilities for formatting.
- :mod:`ExpenseClient.settings.settings` – UI widgets for editing application preferences.
- :mod:`ExpenseClient.settings.editors` – Qt-based editors of the server and metadata sections.
"""
