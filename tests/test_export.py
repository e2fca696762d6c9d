"""Tests for CSV export."""

import pytest

from expense_tracker.services.export import CSV_HEADER, ExportError, export_expenses_to_csv
from expense_tracker.services.export.csv_exporter import csv_path_for, expense_to_csv_row


class TestCsvExport:

    def test_row_format(self, make_expense):
        """Test quoting of text columns and the Yes/No flag."""
        expense = make_expense(
            2,
            description='Said "hi"',
            notes="a, b",
            is_recurring=True,
            payment_method="Card",
        )
        assert expense_to_csv_row(expense) == (
            '2,"Said ""hi""",12.50,"Food",2024-03-15,"a, b",Yes,"Card",""'
        )

    def test_extension_added_once(self):
        assert csv_path_for("report").name == "report.csv"
        assert csv_path_for("report.csv").name == "report.csv"

    def test_export_writes_header_and_rows(self, tmp_path, make_expense):
        path = export_expenses_to_csv(
            [make_expense(1), make_expense(2, description="Taxi")],
            tmp_path / "march",
        )
        assert path == tmp_path / "march.csv"

        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == CSV_HEADER
        assert len(lines) == 3
        assert lines[2].startswith('2,"Taxi",12.50,')
        assert lines[1].endswith(',No,"Cash",""')

    def test_empty_ledger_is_not_exported(self, tmp_path):
        with pytest.raises(ExportError, match="No expenses to export"):
            export_expenses_to_csv([], tmp_path / "empty")
        assert not (tmp_path / "empty.csv").exists()

    def test_unwritable_path(self, tmp_path, make_expense):
        with pytest.raises(ExportError, match="Could not create CSV file"):
            export_expenses_to_csv([make_expense()], tmp_path / "missing" / "out")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
