"""
Undo/Redo History

Two bounded stacks of full ledger snapshots. Standard linear semantics:
- checkpoint() saves the state before a mutation and wipes the redo stack
- undo() moves the current state onto the redo stack and returns the
  most recent snapshot
- redo() is the mirror image

When a stack grows past its limit the oldest snapshot is dropped.
"""

from collections import deque

from expense_tracker.models.expense import Expense


DEFAULT_HISTORY_LIMIT = 20


class EmptyHistoryError(Exception):
    """Undo or redo requested with nothing to undo or redo."""
    pass


def snapshot(expenses: list[Expense]) -> list[Expense]:
    """Deep copy of a ledger sequence."""
    return [expense.model_copy(deep=True) for expense in expenses]


class HistoryManager:
    """Owns the undo and redo stacks. Snapshots never leave it un-copied."""

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self._limit = limit
        # Right end is the top of each stack
        self._undo: deque[list[Expense]] = deque(maxlen=limit)
        self._redo: deque[list[Expense]] = deque(maxlen=limit)

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def checkpoint(self, current: list[Expense]) -> None:
        """Save the pre-mutation state. Any new mutation invalidates redo."""
        self._undo.append(snapshot(current))
        self._redo.clear()

    def undo(self, current: list[Expense]) -> list[Expense]:
        if not self._undo:
            raise EmptyHistoryError("No operations to undo")
        self._redo.append(snapshot(current))
        return self._undo.pop()

    def redo(self, current: list[Expense]) -> list[Expense]:
        if not self._redo:
            raise EmptyHistoryError("No operations to redo")
        self._undo.append(snapshot(current))
        return self._redo.pop()
