"""Services package."""

from expense_tracker.services.export import (
    CSV_HEADER,
    ExportError,
    export_expenses_to_csv,
)
from expense_tracker.services.storage import (
    ExpenseStorageInterface,
    FlatFileExpenseStorage,
    LoadResult,
    NotFoundError,
    PersistenceError,
    StorageError,
)

__all__ = [
    # Export
    "CSV_HEADER",
    "ExportError",
    "export_expenses_to_csv",
    # Storage
    "ExpenseStorageInterface",
    "FlatFileExpenseStorage",
    "LoadResult",
    "NotFoundError",
    "PersistenceError",
    "StorageError",
]
