"""
ExpenseClient: desktop client for a personal expense tracking REST service.

This package provides:

- :mod:`ExpenseClient.core` – REST client, session handling and the expense, category and receipt endpoints.
- :mod:`ExpenseClient.data` – Form validation, list filters, dashboard aggregation and the Qt models and views of the pages.
- :mod:`ExpenseClient.ui` – PySide6 main window, login dialog, charts and shared widgets.
- :mod:`ExpenseClient.settings` – Settings management, schema validation, formatting and editors.
- :mod:`ExpenseClient.status` – Status codes and the exceptions raised for failed requests.
- :mod:`ExpenseClient.log` – In-app logging with real-time log viewer.

Use :func:`ExpenseClient.exec_` to launch the application.
"""

import sys

from PySide6 import QtCore

# Fail on Python < 3.11
if not (sys.version_info.major == 3 and sys.version_info.minor >= 11):
    raise RuntimeError('ExpenseClient requires Python 3.11 or higher.')

__version__ = '0.1.0'
__author__ = 'Gergely Wootsch'
__license__ = 'GPL-3.0'
__copyright__ = 'Copyright (C) 2025 Gergely Wootsch'
__description__ = 'ExpenseClient: desktop client for tracking expenses, categories and receipts on a REST backend.'

from .log import log

log.setup_logging()


def exec_() -> None:
    """Launch the ExpenseClient GUI application and enter its event loop.

    Initializes the QApplication, shows the main window and asks for a sign-in.
    The pages load their data once the session is established.
    """
    from .ui import app
    from .ui import main
    from .ui.actions import signals
    app = app.Application(sys.argv)
    main.show()

    QtCore.QTimer.singleShot(100, signals.authenticationRequested)

    sys.exit(app.exec())


if __name__ == '__main__':
    exec_()
