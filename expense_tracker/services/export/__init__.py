"""Export services package."""

from expense_tracker.services.export.csv_exporter import (
    CSV_HEADER,
    ExportError,
    export_expenses_to_csv,
)

__all__ = ["CSV_HEADER", "ExportError", "export_expenses_to_csv"]
