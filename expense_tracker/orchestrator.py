"""
Main Orchestrator for Expense Tracker

Ties the store, the flat file storage and the audit logger together and
defines what happens for every user action:

    validate -> mutate store (history checkpoint inside) -> save file -> audit

RULES:
- Every successful mutation is flushed to the data file immediately
- A failed flush never rolls back the in-memory change; it becomes a
  warning on the result and an audit event
- If the data file could not be loaded at startup it is never written
  during the session; Backup still writes a separate file
- Expected failures (invalid input, unknown id, empty history, export
  errors) are returned as unsuccessful results, never raised
"""

from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from expense_tracker.audit import AuditLogger
from expense_tracker.config import AppSettings, get_settings
from expense_tracker.ledger import EmptyHistoryError, ExpenseStore
from expense_tracker.models.expense import Expense, ExpenseSummary
from expense_tracker.services.export import ExportError, export_expenses_to_csv
from expense_tracker.services.storage import (
    ExpenseStorageInterface,
    FlatFileExpenseStorage,
    NotFoundError,
    PersistenceError,
)
from expense_tracker.validation import ExpenseValidator


class ActionResult(BaseModel):
    """Outcome of one user action, ready to be shown to the user."""

    success: bool
    message: str
    warnings: list[str] = Field(default_factory=list)
    expense: Optional[Expense] = None
    path: Optional[Path] = None


class ExpenseTracker:
    """
    Application service behind the CLI.

    The store is exposed read-only for views and searches; all changes go
    through the methods here so they are saved and audited.
    """

    def __init__(
        self,
        store: ExpenseStore,
        storage: ExpenseStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        read_only: bool = False,
    ):
        self._store = store
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._read_only = read_only
        self.startup_warnings: list[str] = []

    @property
    def store(self) -> ExpenseStore:
        return self._store

    @property
    def validator(self) -> ExpenseValidator:
        return self._store.validator

    @property
    def read_only(self) -> bool:
        """True when the data file could not be loaded and must not be overwritten."""
        return self._read_only

    def _storage_name(self) -> str:
        path = getattr(self._storage, "path", None)
        return str(path) if path is not None else type(self._storage).__name__

    def _persist(self) -> list[str]:
        """Save the ledger; return warnings instead of raising."""
        if self._read_only:
            return [
                f"{self._storage_name()} was not loaded, so changes are not saved to it. "
                "Use Backup Data to keep them in a separate file."
            ]
        try:
            self._storage.save(self._store.expenses)
        except PersistenceError as e:
            self._audit.log_save_failed(self._storage_name(), str(e))
            return [f"Could not save to {self._storage_name()}: {e}. Changes are kept for this session."]
        return []

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_expense(self, **fields: Any) -> ActionResult:
        """Validate and add a new expense."""
        validation = self.validator.validate(fields)
        if validation.has_errors:
            return ActionResult(
                success=False,
                message=self.validator.get_user_friendly_summary(validation),
            )

        expense = self._store.add(**fields)
        self._audit.log_expense_added(expense.id, expense.description, f"{expense.amount:.2f}")

        message = f"Expense added successfully with ID: {expense.id}"
        if expense.is_recurring:
            message += " (marked as recurring)"
        return ActionResult(
            success=True,
            message=message,
            warnings=validation.warnings + self._persist(),
            expense=expense,
        )

    def quick_add_expense(
        self,
        description: Any,
        amount: Any,
        category: Optional[str] = None,
    ) -> ActionResult:
        """Add with only description and amount; category defaults to the most used."""
        if category is None or not str(category).strip():
            category = self._store.most_used_category()
        return self.add_expense(description=description, amount=amount, category=category)

    def update_expense(self, expense_id: int, changes: dict[str, Any]) -> ActionResult:
        """Apply one or more field changes; all of them or none."""
        validation = self.validator.validate(changes, partial=True)
        try:
            updated = self._store.update_fields(expense_id, changes)
        except NotFoundError as e:
            return ActionResult(success=False, message=str(e))

        if not updated:
            issues = [issue.model_dump() for issue in validation.issues if issue.severity == "error"]
            self._audit.log_expense_update_rejected(expense_id, issues)
            summary = self.validator.get_user_friendly_summary(validation)
            return ActionResult(
                success=False,
                message=f"Expense {expense_id} was not changed.\n{summary}",
            )

        self._audit.log_expense_updated(expense_id, sorted(changes))
        return ActionResult(
            success=True,
            message="Expense updated successfully!",
            warnings=validation.warnings + self._persist(),
            expense=self._store.get(expense_id),
        )

    def delete_expense(self, expense_id: int) -> ActionResult:
        try:
            expense = self._store.get(expense_id)
            self._store.delete(expense_id)
        except NotFoundError as e:
            return ActionResult(success=False, message=str(e))

        self._audit.log_expense_deleted(expense_id)
        return ActionResult(
            success=True,
            message="Expense deleted successfully!",
            warnings=self._persist(),
            expense=expense,
        )

    def duplicate_expense(self, expense_id: int) -> ActionResult:
        try:
            copy = self._store.duplicate(expense_id)
        except NotFoundError as e:
            return ActionResult(success=False, message=str(e))

        self._audit.log_expense_duplicated(expense_id, copy.id)
        return ActionResult(
            success=True,
            message=f"Expense duplicated successfully! New ID: {copy.id}",
            warnings=self._persist(),
            expense=copy,
        )

    def clear_all(self) -> ActionResult:
        """Remove every expense. The caller must have asked for confirmation."""
        removed = self._store.clear()
        self._audit.log_ledger_cleared(removed)
        return ActionResult(
            success=True,
            message="All expenses have been deleted.",
            warnings=self._persist(),
        )

    def undo(self) -> ActionResult:
        try:
            self._store.undo()
        except EmptyHistoryError as e:
            return ActionResult(success=False, message=str(e))

        self._audit.log_history_applied("undo", len(self._store))
        return ActionResult(
            success=True,
            message="Last operation undone successfully!",
            warnings=self._persist(),
        )

    def redo(self) -> ActionResult:
        try:
            self._store.redo()
        except EmptyHistoryError as e:
            return ActionResult(success=False, message=str(e))

        self._audit.log_history_applied("redo", len(self._store))
        return ActionResult(
            success=True,
            message="Last operation redone successfully!",
            warnings=self._persist(),
        )

    # -------------------------------------------------------------------------
    # Reports and files
    # -------------------------------------------------------------------------

    def summary(self) -> ExpenseSummary:
        return self._store.aggregate()

    def export_csv(self, filename: Union[str, Path]) -> ActionResult:
        expenses = self._store.expenses
        try:
            path = export_expenses_to_csv(expenses, filename)
        except ExportError as e:
            self._audit.log_export_failed(str(filename), str(e))
            return ActionResult(success=False, message=str(e))

        self._audit.log_export_completed(str(path), len(expenses))
        return ActionResult(
            success=True,
            message=f"Expenses exported to {path} successfully!",
            path=path,
        )

    def backup(self) -> ActionResult:
        expenses = self._store.expenses
        try:
            path = self._storage.backup(expenses)
        except PersistenceError as e:
            self._audit.log_backup_failed(self._storage_name(), str(e))
            return ActionResult(success=False, message=f"Could not create backup file: {e}")

        self._audit.log_backup_created(str(path), len(expenses))
        return ActionResult(
            success=True,
            message=f"Data backed up to: {path}",
            path=path,
        )

    def save(self) -> list[str]:
        """Flush the ledger, e.g. on exit. Returns warnings."""
        return self._persist()


def create_app_components(
    settings: Optional[AppSettings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> ExpenseTracker:
    """
    Build a tracker from settings: open the data file, load it and seed the
    store (and therefore the id allocator) with what was found.
    """
    settings = settings or get_settings()
    audit_logger = audit_logger or AuditLogger()

    storage = FlatFileExpenseStorage(
        settings.data_file,
        retry_attempts=settings.save_retry_attempts,
    )

    startup_warnings = []
    read_only = False
    try:
        loaded = storage.load()
        expenses = loaded.expenses
        audit_logger.log_ledger_loaded(str(storage.path), len(loaded.expenses), loaded.skipped)
        if loaded.skipped:
            startup_warnings.append(f"Skipped {loaded.skipped} corrupted entries.")
    except PersistenceError as e:
        audit_logger.log_error("load_failed", str(e), {"path": str(storage.path)})
        startup_warnings.append(
            f"Could not read {storage.path}: {e}. Starting with an empty ledger; "
            "the file will not be overwritten this session."
        )
        expenses = []
        read_only = True

    store = ExpenseStore(
        expenses,
        history_limit=settings.history_limit,
        validator=ExpenseValidator(settings),
    )
    tracker = ExpenseTracker(store, storage, audit_logger, read_only=read_only)
    tracker.startup_warnings = startup_warnings
    return tracker
