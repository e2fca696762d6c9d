"""
Storage Services Package

Provides the abstract storage interface and the flat file implementation.
"""

from expense_tracker.services.storage.interface import (
    ExpenseStorageInterface,
    LoadResult,
    NotFoundError,
    PersistenceError,
    StorageError,
)
from expense_tracker.services.storage.flat_file import (
    FlatFileExpenseStorage,
    deserialize_expense,
    serialize_expense,
)

__all__ = [
    # Interfaces
    "ExpenseStorageInterface",
    "LoadResult",
    # Exceptions
    "NotFoundError",
    "PersistenceError",
    "StorageError",
    # Flat file implementation
    "FlatFileExpenseStorage",
    "deserialize_expense",
    "serialize_expense",
]
