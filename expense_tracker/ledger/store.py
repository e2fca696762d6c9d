"""
Expense Store

The in-memory ledger: an ordered sequence of expenses plus the indices
derived from it (category set and category usage counts).

GUARANTEES:
- Every mutation (add, update, delete, duplicate, clear) validates first,
  then takes exactly one history checkpoint, then applies the change
- Failed operations change nothing and take no checkpoint
- Derived indices are recomputed from the full sequence after every change,
  undo and redo; they are never patched incrementally
- Ids come from the store's own allocator and are never reused
- Read operations hand out copies, so callers cannot bypass the history
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

import structlog

from expense_tracker.ledger.history import DEFAULT_HISTORY_LIMIT, HistoryManager
from expense_tracker.ledger.ids import IdAllocator
from expense_tracker.models.expense import (
    Expense,
    ExpenseSummary,
    SearchCriteria,
    SortKey,
)
from expense_tracker.queries import executor
from expense_tracker.services.storage.interface import NotFoundError
from expense_tracker.validation import ExpenseValidator, ValidationError


DEFAULT_CATEGORY = "General"

logger = structlog.get_logger(__name__)


class ExpenseStore:
    """
    Owns the expenses, their derived indices and the undo/redo history.

    Usage:
        store = ExpenseStore(loaded_expenses)
        lunch = store.add(description="Lunch", amount="12.50", category="Food")
        store.delete(lunch.id)
        store.undo()
    """

    def __init__(
        self,
        expenses: Optional[Iterable[Expense]] = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        validator: Optional[ExpenseValidator] = None,
    ):
        self._expenses: list[Expense] = [e.model_copy(deep=True) for e in (expenses or [])]

        ids = [e.id for e in self._expenses]
        if len(ids) != len(set(ids)):
            raise ValueError("Expense ids must be unique")

        self._ids = IdAllocator(max(ids, default=0))
        self._history = HistoryManager(history_limit)
        self._validator = validator or ExpenseValidator()
        self._categories: set[str] = set()
        self._category_counts: dict[str, int] = {}
        self._recompute_indices()

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _recompute_indices(self) -> None:
        """Rebuild derived state from the full sequence."""
        counts: dict[str, int] = {}
        for expense in self._expenses:
            counts[expense.category] = counts.get(expense.category, 0) + 1
        self._category_counts = counts
        self._categories = set(counts)

    def _index_of(self, expense_id: int) -> int:
        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                return index
        raise NotFoundError(f"Expense with ID {expense_id} not found")

    def _checkpoint(self) -> None:
        self._history.checkpoint(self._expenses)

    # -------------------------------------------------------------------------
    # Read operations
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._expenses)

    @property
    def expenses(self) -> list[Expense]:
        """Copy of the expenses in insertion order."""
        return [e.model_copy(deep=True) for e in self._expenses]

    @property
    def categories(self) -> set[str]:
        return set(self._categories)

    @property
    def category_counts(self) -> dict[str, int]:
        return dict(self._category_counts)

    @property
    def history(self) -> HistoryManager:
        return self._history

    @property
    def validator(self) -> ExpenseValidator:
        return self._validator

    @property
    def last_issued_id(self) -> int:
        return self._ids.last_issued

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def find(self, expense_id: int) -> Optional[Expense]:
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense.model_copy(deep=True)
        return None

    def get(self, expense_id: int) -> Expense:
        """Like find(), but raise NotFoundError when the id does not exist."""
        return self._expenses[self._index_of(expense_id)].model_copy(deep=True)

    def list(self, sort_key: SortKey = SortKey.INSERTION) -> list[Expense]:
        return executor.sort_expenses(self.expenses, SortKey(sort_key))

    def search(self, criteria: SearchCriteria) -> list[Expense]:
        return executor.search(self.expenses, criteria)

    def aggregate(self) -> ExpenseSummary:
        return executor.summarize(self._expenses)

    def recurring(self) -> list[Expense]:
        return [e for e in self.expenses if e.is_recurring]

    def by_category(self) -> dict[str, list[Expense]]:
        """Expenses grouped by category, categories in alphabetical order."""
        grouped: dict[str, list[Expense]] = {name: [] for name in sorted(self._categories)}
        for expense in self.expenses:
            grouped[expense.category].append(expense)
        return grouped

    def payment_methods(self) -> set[str]:
        return {e.payment_method for e in self._expenses}

    def most_used_category(self, default: str = DEFAULT_CATEGORY) -> str:
        """Category with the most expenses; ties go to the alphabetically first."""
        if not self._category_counts:
            return default
        name, _count = min(self._category_counts.items(), key=lambda item: (-item[1], item[0]))
        return name

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(self, **fields: Any) -> Expense:
        """
        Validate the fields and append a new expense.

        Required: description, amount, category. The date defaults to today.

        Raises:
            ValidationError: If any field is invalid
        """
        values = self._validator.require_valid(fields).values
        self._checkpoint()

        expense = Expense(id=self._ids.next(), **values)
        self._expenses.append(expense)
        self._recompute_indices()

        logger.debug("expense_added", id=expense.id)
        return expense.model_copy(deep=True)

    def update(self, expense_id: int, field: str, value: Any) -> bool:
        """
        Change one field of an expense.

        Returns False (and leaves the expense untouched) if the value is
        invalid for that field.

        Raises:
            NotFoundError: If the expense does not exist
        """
        return self.update_fields(expense_id, {field: value})

    def update_fields(self, expense_id: int, changes: dict[str, Any]) -> bool:
        """
        Change several fields at once; either every change applies or none do.

        Raises:
            NotFoundError: If the expense does not exist
        """
        index = self._index_of(expense_id)
        if not changes:
            return False

        try:
            values = self._validator.require_valid(changes, partial=True).values
        except ValidationError as e:
            logger.warning(
                "expense_update_rejected",
                id=expense_id,
                issues=[issue.message for issue in e.issues],
            )
            return False

        self._checkpoint()
        expense = self._expenses[index]
        for name, value in values.items():
            setattr(expense, name, value)
        self._recompute_indices()

        logger.debug("expense_updated", id=expense_id, fields=sorted(values))
        return True

    def delete(self, expense_id: int) -> bool:
        """
        Raises:
            NotFoundError: If the expense does not exist
        """
        index = self._index_of(expense_id)
        self._checkpoint()
        del self._expenses[index]
        self._recompute_indices()

        logger.debug("expense_deleted", id=expense_id)
        return True

    def duplicate(self, expense_id: int) -> Expense:
        """
        Append a copy of an expense under a fresh id, dated today.

        Raises:
            NotFoundError: If the expense does not exist
        """
        source = self._expenses[self._index_of(expense_id)]
        self._checkpoint()

        copy = source.create_copy(self._ids.next())
        self._expenses.append(copy)
        self._recompute_indices()

        logger.debug("expense_duplicated", source_id=expense_id, id=copy.id)
        return copy.model_copy(deep=True)

    def clear(self) -> int:
        """
        Remove every expense. Confirmation is the caller's job.

        Returns the number of expenses removed.
        """
        removed = len(self._expenses)
        self._checkpoint()
        self._expenses = []
        self._recompute_indices()

        logger.debug("ledger_cleared", removed=removed)
        return removed

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def _restore(self, expenses: list[Expense]) -> None:
        self._expenses = expenses
        for expense in expenses:
            self._ids.observe(expense.id)
        self._recompute_indices()

    def undo(self) -> None:
        """
        Raises:
            EmptyHistoryError: If there is nothing to undo
        """
        self._restore(self._history.undo(self._expenses))

    def redo(self) -> None:
        """
        Raises:
            EmptyHistoryError: If there is nothing to redo
        """
        self._restore(self._history.redo(self._expenses))
