"""
UI package: application actions, main application setup, theming, and widgets.

This package provides:

- :mod:`ExpenseClient.ui.actions` – Application-wide Qt signals and utility slots.
- :mod:`ExpenseClient.ui.app` – QApplication subclass and setup functions.
- :mod:`ExpenseClient.ui.main` – Main window composition and page navigation.
- :mod:`ExpenseClient.ui.login` – Sign-in dialog.
- :mod:`ExpenseClient.ui.ui` – Styling constants for fonts, sizes, and colors.
- :mod:`ExpenseClient.ui.widgets` – Shared combo boxes, message banner and confirmation helper.
- :mod:`ExpenseClient.ui.basechart` – Chart model and base chart view (:class:`ExpenseClient.ui.basechart.BaseChartView`).
- :mod:`ExpenseClient.ui.dockable_widget` – Base class for dockable widgets.
"""
