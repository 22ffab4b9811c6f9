"""Qt views and delegates for the ExpenseClient application.

This subpackage provides the pages and their widgets:

- DashboardWidget: summary cards, category pie chart, monthly trend and top expenses
- ExpensesWidget: filterable, paginated expense table
- ExpenseFormWidget and ExpenseFormDialog: create and edit expenses
- CategoriesWidget: category management
- ReceiptsWidget: receipt upload and gallery
- PieChartView and MonthlyTrendGraph: chart widgets
"""
