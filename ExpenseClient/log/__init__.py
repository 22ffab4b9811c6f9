"""
Logging subsystem: handlers, models, and views for application logging.

Modules:

- :mod:`ExpenseClient.log.log` – Root logger setup, the in-memory TankHandler and the Qt message bridge.
- :mod:`ExpenseClient.log.model` – Table model and proxy for displaying and filtering in-memory logs.
- :mod:`ExpenseClient.log.view` – Log table view and the log dock widget.
"""
