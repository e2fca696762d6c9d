"""
Tests for the interactive CLI

Each test feeds a full session (ending with menu option 0) through
typer's CliRunner against a data file under tmp_path.
"""

import logging

import pytest
import typer
from typer.testing import CliRunner

from expense_tracker import cli
from expense_tracker.cli import ExpenseTrackerApp, app


runner = CliRunner()

LUNCH_LINE = "1|Lunch|12.50|Food|2024-03-15||0|Cash|\n"


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI replaces the root handlers; put the originals back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def data_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path / "expenses.txt"


def run_session(data_file, *lines, args=()):
    return runner.invoke(
        app,
        ["--data-file", str(data_file), *args],
        input="\n".join(lines) + "\n",
    )


class TestMenuSession:

    def test_add_and_exit(self, data_file):
        """Test a full add followed by a clean exit."""
        result = run_session(
            data_file,
            "1", "Lunch", "12.50", "Food", "2024-03-15", "", "Card", "", "n",
            "0",
        )
        assert result.exit_code == 0
        assert "Expense added successfully with ID: 1" in result.output
        assert "Thank you for using Expense Tracker!" in result.output
        assert data_file.read_text(encoding="utf-8") == "1|Lunch|12.50|Food|2024-03-15||0|Card|\n"

    def test_invalid_input_is_asked_again(self, data_file):
        result = run_session(data_file, "2", "Coffee", "-5", "3.50", "", "0")
        assert result.exit_code == 0
        assert "Error: Please enter a valid positive amount" in result.output
        assert data_file.read_text(encoding="utf-8").startswith("1|Coffee|3.50|General|")

    def test_oversized_amount_is_asked_again(self, data_file):
        result = run_session(data_file, "2", "Big", "1" * 28, "12.50", "", "0")
        assert result.exit_code == 0
        assert "Error: Amount is too large" in result.output
        assert "Fatal error" not in result.output
        assert "|12.50|" in data_file.read_text(encoding="utf-8")

    def test_invalid_menu_choice(self, data_file):
        result = run_session(data_file, "17", "abc", "0")
        assert result.exit_code == 0
        assert "Please enter a number between 0 and 16." in result.output
        assert "Please enter a valid number." in result.output

    def test_view_all(self, data_file):
        data_file.write_text(LUNCH_LINE, encoding="utf-8")
        result = run_session(data_file, "3", "2", "0")
        assert "Lunch" in result.output
        assert "Total: $12.50 (1 expenses)" in result.output

    def test_view_empty_ledger(self, data_file):
        result = run_session(data_file, "3", "0")
        assert "No expenses found." in result.output

    def test_search_by_category(self, data_file):
        data_file.write_text(LUNCH_LINE, encoding="utf-8")
        result = run_session(data_file, "7", "2", "food", "0")
        assert "Search: category: food" in result.output
        assert "Found 1 expenses, total $12.50" in result.output

    def test_update_amount(self, data_file):
        data_file.write_text(LUNCH_LINE, encoding="utf-8")
        result = run_session(data_file, "8", "1", "2", "20", "0")
        assert "Expense updated successfully!" in result.output
        assert "|20.00|" in data_file.read_text(encoding="utf-8")

    def test_delete_requires_confirmation(self, data_file):
        data_file.write_text(LUNCH_LINE, encoding="utf-8")
        cancelled = run_session(data_file, "9", "1", "n", "0")
        assert "Deletion cancelled." in cancelled.output
        assert data_file.read_text(encoding="utf-8") == LUNCH_LINE

        deleted = run_session(data_file, "9", "1", "y", "0")
        assert "Expense deleted successfully!" in deleted.output
        assert data_file.read_text(encoding="utf-8") == ""

    def test_clear_requires_typed_phrase(self, data_file):
        data_file.write_text(LUNCH_LINE, encoding="utf-8")
        cancelled = run_session(data_file, "16", "delete all", "0")
        assert "Operation cancelled." in cancelled.output
        assert data_file.read_text(encoding="utf-8") == LUNCH_LINE

        cleared = run_session(data_file, "16", "DELETE ALL", "0")
        assert "All expenses have been deleted." in cleared.output
        assert data_file.read_text(encoding="utf-8") == ""

    def test_undo_with_empty_history(self, data_file):
        result = run_session(data_file, "11", "0")
        assert "Error: No operations to undo" in result.output

    def test_duplicate_then_undo(self, data_file):
        data_file.write_text(LUNCH_LINE, encoding="utf-8")
        result = run_session(data_file, "10", "1", "11", "0")
        assert "Expense duplicated successfully! New ID: 2" in result.output
        assert "Last operation undone successfully!" in result.output
        assert data_file.read_text(encoding="utf-8") == LUNCH_LINE

    def test_summary(self, data_file):
        data_file.write_text(
            LUNCH_LINE + "2|Rent|900.00|Housing|2024-04-01||1|Online|\n", encoding="utf-8"
        )
        result = run_session(data_file, "13", "0")
        assert "Total amount: $912.50" in result.output
        assert "Annual projection: $10,800.00" in result.output
        assert "2024-04: $900.00" in result.output

    def test_export(self, data_file, tmp_path):
        data_file.write_text(LUNCH_LINE, encoding="utf-8")
        result = run_session(data_file, "14", "report", "0")
        assert "exported to" in result.output
        assert (tmp_path / "report.csv").exists()

    def test_backup(self, data_file, tmp_path):
        data_file.write_text(LUNCH_LINE, encoding="utf-8")
        result = run_session(data_file, "15", "0")
        assert "Data backed up to:" in result.output
        assert list(tmp_path.glob("expenses.txt.backup.*"))

    def test_corrupt_lines_reported_at_startup(self, data_file):
        data_file.write_text(LUNCH_LINE + "not|an|expense\n", encoding="utf-8")
        result = run_session(data_file, "0")
        assert "Warning: Skipped 1 corrupted entries." in result.output


class TestExitCodes:

    def test_end_of_input_exits_cleanly(self, data_file, monkeypatch):
        def closed(prompt):
            raise typer.Abort()

        monkeypatch.setattr(ExpenseTrackerApp, "_read", staticmethod(closed))
        result = runner.invoke(app, ["--data-file", str(data_file)])
        assert result.exit_code == 0
        assert "Goodbye" in result.output

    def test_fatal_error_exits_with_one(self, data_file, monkeypatch):
        def broken(settings, audit_logger):
            raise RuntimeError("boom")

        monkeypatch.setattr(cli, "create_app_components", broken)
        result = runner.invoke(app, ["--data-file", str(data_file)])
        assert result.exit_code == 1
        assert "Fatal error: boom" in result.output

    def test_bad_log_level(self, data_file):
        result = runner.invoke(app, ["--data-file", str(data_file), "--log-level", "LOUD"])
        assert result.exit_code == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
