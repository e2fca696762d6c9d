"""
Abstract Storage Interface

The ledger talks to storage only through this interface. This allows us to:
1. Swap the flat file for a real database later
2. Use in-memory or failing storage in tests
3. Keep the store and history logic decoupled from file formats
"""

from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, Field

from expense_tracker.models.expense import Expense


class LoadResult(BaseModel):
    """Expenses restored from storage plus the number of unreadable entries."""

    expenses: list[Expense] = Field(default_factory=list)
    skipped: int = Field(default=0, ge=0)

    @property
    def max_id(self) -> int:
        return max((expense.id for expense in self.expenses), default=0)


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Any storage implementation (flat file, SQLite, etc.)
    must implement these methods.
    """

    @abstractmethod
    def load(self) -> LoadResult:
        """
        Load every stored expense.

        Entries that cannot be parsed are skipped and counted, never raised.

        Raises:
            PersistenceError: If the storage exists but cannot be read
        """
        pass

    @abstractmethod
    def save(self, expenses: list[Expense]) -> None:
        """
        Replace the stored expenses with the given sequence.

        Raises:
            PersistenceError: If the write fails
        """
        pass

    @abstractmethod
    def backup(self, expenses: list[Expense]) -> Path:
        """
        Write a timestamped copy of the expenses that never overwrites
        an earlier backup.

        Returns:
            Location of the backup

        Raises:
            PersistenceError: If the backup cannot be written
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Expense not found in the ledger."""
    pass


class PersistenceError(StorageError):
    """Could not read from or write to the storage backend."""
    pass
