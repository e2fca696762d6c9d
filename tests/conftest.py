"""Shared fixtures: every test gets its own data file under tmp_path."""

from datetime import date
from decimal import Decimal

import pytest

from expense_tracker.config import AppSettings
from expense_tracker.ledger import ExpenseStore
from expense_tracker.models import Expense
from expense_tracker.validation import ExpenseValidator


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment and any local .env file."""
    return AppSettings(
        data_file=tmp_path / "expenses.txt",
        save_retry_attempts=1,
        _env_file=None,
    )


@pytest.fixture
def validator(settings):
    return ExpenseValidator(settings)


@pytest.fixture
def store(validator):
    return ExpenseStore(validator=validator)


@pytest.fixture
def make_expense():
    """Factory for expenses with sensible defaults."""

    def _make(expense_id=1, **overrides):
        fields = {
            "id": expense_id,
            "description": "Lunch",
            "amount": Decimal("12.50"),
            "category": "Food",
            "date": date(2024, 3, 15),
        }
        fields.update(overrides)
        return Expense(**fields)

    return _make
