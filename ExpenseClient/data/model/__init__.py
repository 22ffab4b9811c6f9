"""Qt models for the ExpenseClient application.

This subpackage provides the expense table model, the category list model and
the receipt list model with background thumbnail loading.
"""
