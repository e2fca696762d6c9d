"""
CSV export for Expense Tracker

CSV columns: ID, Description, Amount, Category, Date, Notes, Recurring,
PaymentMethod, Location

Text columns are always quoted (embedded quotes doubled), Recurring is
written as Yes/No and amounts always carry two decimals.

Rows are formatted by hand rather than with ``csv.writer``: its quoting
modes quote either every column or only the ones that need it, and this
layout quotes the text columns while leaving ID, Amount, Date and
Recurring bare.
"""

from pathlib import Path
from typing import Union

from expense_tracker.models.expense import Expense


CSV_HEADER = "ID,Description,Amount,Category,Date,Notes,Recurring,PaymentMethod,Location"


class ExportError(Exception):
    """Export could not be written."""
    pass


def _quoted(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def expense_to_csv_row(expense: Expense) -> str:
    """Format one expense as a CSV line (no newline)."""
    return ",".join([
        str(expense.id),
        _quoted(expense.description),
        f"{expense.amount:.2f}",
        _quoted(expense.category),
        expense.date.isoformat(),
        _quoted(expense.notes),
        "Yes" if expense.is_recurring else "No",
        _quoted(expense.payment_method),
        _quoted(expense.location),
    ])


def csv_path_for(name: Union[str, Path]) -> Path:
    """Append the .csv extension unless it is already there."""
    path = Path(name)
    if path.suffix.lower() != ".csv":
        path = path.with_name(path.name + ".csv")
    return path


def export_expenses_to_csv(expenses: list[Expense], filepath: Union[str, Path]) -> Path:
    """
    Export expenses to a CSV file.

    Returns the path written, with the .csv extension added if missing.

    Raises:
        ExportError: If there is nothing to export or the file cannot be written
    """
    if not expenses:
        raise ExportError("No expenses to export")

    path = csv_path_for(filepath)
    lines = [CSV_HEADER] + [expense_to_csv_row(expense) for expense in expenses]

    try:
        with path.open("w", encoding="utf-8", newline="") as f:
            f.write("\n".join(lines) + "\n")
    except OSError as e:
        raise ExportError(f"Could not create CSV file {path}: {e}") from e

    return path
