"""Dashboard page.

This module provides:
    - SummaryCard: a titled figure
    - TopExpensesView: the largest expenses of the dashboard window
    - DashboardWidget: summary cards, month selector, category pie chart and
      the monthly trend graph
"""
import logging
from typing import List, Optional

from PySide6 import QtWidgets, QtCore, QtGui

from .. import data
from .piechart import PieChartView
from .trends import MonthlyTrendGraph
from ...core.types import Expense
from ...settings import lib
from ...settings import locale
from ...status import status
from ...ui import ui
from ...ui.actions import signals
from ...ui.widgets import MessageLabel, PopupCombobox

RECOMPUTE_KEYS = ('loess_fraction', 'top_expenses', 'locale', 'currency')


class SummaryCard(QtWidgets.QFrame):
    """A title above a large value."""

    def __init__(self, title: str, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setProperty('card', True)

        layout = QtWidgets.QVBoxLayout(self)
        o = ui.Size.Margin(0.5)
        layout.setContentsMargins(o, o, o, o)
        layout.setSpacing(ui.Size.Indicator(1.0))

        self.title_label = QtWidgets.QLabel(title, self)
        self.title_label.setProperty('secondary', True)
        layout.addWidget(self.title_label)

        self.value_label = QtWidgets.QLabel('-', self)
        self.value_label.setProperty('heading', True)
        layout.addWidget(self.value_label)

    def set_value(self, text: str) -> None:
        self.value_label.setText(text)


class TopExpensesView(QtWidgets.QTreeWidget):
    """Flat list of the largest expenses. Double-click requests an edit."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setHeaderLabels(['Date', 'Description', 'Category', 'Amount'])
        self.setRootIsDecorated(False)
        self.setUniformRowHeights(True)
        self.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.header().setStretchLastSection(False)
        self.header().setSectionResizeMode(1, QtWidgets.QHeaderView.Stretch)

        self.itemDoubleClicked.connect(self._on_double_clicked)

    def set_expenses(self, expenses: List[Expense]) -> None:
        self.clear()
        loc = lib.settings['locale']
        font, _ = ui.Font.BoldFont(ui.Size.MediumText(1.0))
        for expense in expenses:
            item = QtWidgets.QTreeWidgetItem([
                locale.format_date(expense.date, loc),
                expense.description or '-',
                expense.category_name or data.UNCATEGORIZED,
                locale.format_currency_value(expense.amount, expense.currency, loc),
            ])
            item.setData(0, QtCore.Qt.UserRole, expense)
            item.setTextAlignment(3, QtCore.Qt.AlignRight | QtCore.Qt.AlignVCenter)
            item.setFont(3, font)
            self.addTopLevelItem(item)
        for column in (0, 2, 3):
            self.resizeColumnToContents(column)

    @QtCore.Slot(QtWidgets.QTreeWidgetItem, int)
    def _on_double_clicked(self, item: QtWidgets.QTreeWidgetItem, column: int) -> None:
        expense = item.data(0, QtCore.Qt.UserRole)
        if expense is not None:
            signals.editExpenseRequested.emit(expense)


class DashboardWidget(QtWidgets.QWidget):
    """Spending overview of the last months.

    The expenses of the whole window are fetched once per reload; changing the
    month or the smoothing only recomputes the aggregates.
    """

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setObjectName('ExpenseClientDashboardWidget')

        self._expenses: List[Expense] = []
        self._dashboard: Optional[data.DashboardData] = None

        self._init_data_timer = QtCore.QTimer(self)
        self._init_data_timer.setSingleShot(True)
        self._init_data_timer.setInterval(50)

        self._create_ui()
        self._connect_signals()

    def _create_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)
        o = ui.Size.Margin(1.0)
        layout.setContentsMargins(o, o, o, o)
        layout.setSpacing(ui.Size.Indicator(2.0))

        row = QtWidgets.QHBoxLayout()
        heading = QtWidgets.QLabel('Dashboard', self)
        heading.setProperty('heading', True)
        row.addWidget(heading)
        row.addStretch(1)

        self.month_editor = PopupCombobox(self)
        self.month_editor.setMinimumWidth(ui.Size.DefaultWidth(0.25))
        row.addWidget(self.month_editor)

        self.refresh_button = QtWidgets.QPushButton('Refresh', self)
        row.addWidget(self.refresh_button)
        layout.addLayout(row)

        self.message_label = MessageLabel(self)
        layout.addWidget(self.message_label)

        cards = QtWidgets.QHBoxLayout()
        cards.setSpacing(ui.Size.Indicator(2.0))
        self.month_total_card = SummaryCard('This month', self)
        self.month_count_card = SummaryCard('Expenses this month', self)
        self.period_total_card = SummaryCard('Last 12 months', self)
        self.period_count_card = SummaryCard('Expenses in 12 months', self)
        self.average_card = SummaryCard('Monthly average', self)
        for card in (
                self.month_total_card, self.month_count_card, self.period_total_card,
                self.period_count_card, self.average_card
        ):
            cards.addWidget(card, 1)
        layout.addLayout(cards)

        splitter = QtWidgets.QSplitter(QtCore.Qt.Horizontal, self)
        splitter.setChildrenCollapsible(False)

        self.pie_chart = PieChartView(splitter)
        self.pie_chart.set_empty_text('No expenses for selected month')
        splitter.addWidget(self.pie_chart)

        self.trend_graph = MonthlyTrendGraph(splitter)
        splitter.addWidget(self.trend_graph)
        splitter.setSizes([1, 1])

        layout.addWidget(splitter, 2)

        label = QtWidgets.QLabel('Top expenses', self)
        label.setProperty('secondary', True)
        layout.addWidget(label)

        self.top_view = TopExpensesView(self)
        layout.addWidget(self.top_view, 1)

    def _connect_signals(self) -> None:
        self._init_data_timer.timeout.connect(self.init_data)
        self.refresh_button.clicked.connect(self._init_data_timer.start)
        self.month_editor.activated.connect(self._on_month_activated)
        self.trend_graph.monthClicked.connect(self.set_month)

        signals.initializationRequested.connect(self._init_data_timer.start)
        signals.expensesChanged.connect(self._init_data_timer.start)
        signals.loggedOut.connect(self.clear_data)

        @QtCore.Slot(str, object)
        def on_metadata_changed(key: str, value: object) -> None:
            if key == 'dashboard_months':
                self._init_data_timer.start()
            elif key in RECOMPUTE_KEYS and self._expenses:
                self.update_dashboard()

        signals.metadataChanged.connect(on_metadata_changed)

    def current_month(self) -> Optional[str]:
        return self.month_editor.currentData() or None

    def _init_months(self) -> None:
        """Fill the month selector, keeping the selected month when still listed."""
        current = self.current_month()
        self.month_editor.blockSignals(True)
        self.month_editor.clear()
        for key, label in data.month_options(months=lib.settings['dashboard_months']):
            self.month_editor.addItem(label, userData=key)
        idx = self.month_editor.findData(current) if current else -1
        self.month_editor.setCurrentIndex(max(idx, 0))
        self.month_editor.blockSignals(False)

    @QtCore.Slot()
    def init_data(self) -> None:
        """Fetch the expenses of the dashboard window and recompute."""
        self.message_label.clear_message()
        self._init_months()

        try:
            self._expenses = data.load_dashboard_expenses(months=lib.settings['dashboard_months'])
        except status.BaseStatusException as ex:
            self.message_label.show_error(status.describe(ex, 'Failed to load dashboard'))
            return

        self.update_dashboard()

    @QtCore.Slot(int)
    def _on_month_activated(self, index: int) -> None:
        self.update_dashboard()

    @QtCore.Slot(str)
    def set_month(self, month: str) -> None:
        idx = self.month_editor.findData(month)
        if idx < 0:
            return
        self.month_editor.setCurrentIndex(idx)
        self.update_dashboard()

    @QtCore.Slot()
    def update_dashboard(self) -> None:
        """Aggregate the fetched expenses for the selected month."""
        try:
            dashboard = data.compute_dashboard(
                self._expenses,
                month=self.current_month(),
                months=lib.settings['dashboard_months'],
                top=lib.settings['top_expenses'],
                loess_fraction=lib.settings['loess_fraction'],
            )
        except (ValueError, KeyError) as ex:
            logging.error(f'Failed to compute the dashboard: {ex}')
            self.message_label.show_error('Failed to compute the dashboard')
            return

        self._dashboard = dashboard
        self._update_ui()

    def _update_ui(self) -> None:
        dashboard = self._dashboard
        currency = lib.settings['currency']
        loc = lib.settings['locale']

        def money(value: float) -> str:
            return locale.format_currency_value(value, currency, loc)

        months = lib.settings['dashboard_months']
        self.period_total_card.title_label.setText(f'Last {months} months')
        self.period_count_card.title_label.setText(f'Expenses in {months} months')

        self.month_total_card.set_value(money(dashboard.month_total))
        self.month_count_card.set_value(str(dashboard.month_count))
        self.period_total_card.set_value(money(dashboard.period_total))
        self.period_count_card.set_value(str(dashboard.period_count))
        self.average_card.set_value(money(dashboard.monthly_average))

        self.pie_chart.set_breakdown(dashboard.breakdown, currency)
        self.trend_graph.set_data(dashboard.monthly, currency)
        self.trend_graph.set_selected_month(dashboard.month)
        self.top_view.set_expenses(dashboard.top)

        if dashboard.empty:
            self.message_label.show_info('No expenses found')
        else:
            self.message_label.clear_message()

    @QtCore.Slot()
    def clear_data(self) -> None:
        self._expenses = []
        self._dashboard = None
        self.message_label.clear_message()
        self.month_editor.clear()
        for card in (
                self.month_total_card, self.month_count_card, self.period_total_card,
                self.period_count_card, self.average_card
        ):
            card.set_value('-')
        self.pie_chart.clear_data()
        self.trend_graph.clear_data()
        self.top_view.clear()
