"""Expense validation package."""

from expense_tracker.validation.validator import (
    REQUIRED_FIELDS,
    UPDATABLE_FIELDS,
    ExpenseValidator,
    ValidationError,
)

__all__ = [
    "REQUIRED_FIELDS",
    "UPDATABLE_FIELDS",
    "ExpenseValidator",
    "ValidationError",
]
