"""In-memory ledger: expense store, id allocation and undo/redo history."""

from expense_tracker.ledger.history import (
    DEFAULT_HISTORY_LIMIT,
    EmptyHistoryError,
    HistoryManager,
)
from expense_tracker.ledger.ids import IdAllocator
from expense_tracker.ledger.store import DEFAULT_CATEGORY, ExpenseStore

__all__ = [
    "DEFAULT_CATEGORY",
    "DEFAULT_HISTORY_LIMIT",
    "EmptyHistoryError",
    "ExpenseStore",
    "HistoryManager",
    "IdAllocator",
]
