"""
Command-line interface for Expense Tracker

A numbered menu over the orchestrator. Every prompt re-asks until the input
is valid, so invalid values never reach the ledger from here. Business
logic lives in ``expense_tracker.orchestrator`` and the ledger package.

Run with ``expense-tracker --data-file expenses.txt``.
"""

from pathlib import Path
from typing import Any, Callable, Optional

import typer

from expense_tracker.audit import AuditLogger, configure_logging
from expense_tracker.config import AppSettings
from expense_tracker.ledger import ExpenseStore
from expense_tracker.models.expense import Expense, SearchCriteria, SortKey, parse_bool
from expense_tracker.orchestrator import ActionResult, ExpenseTracker, create_app_components
from expense_tracker.queries import describe_criteria
from expense_tracker.validation import ValidationError


MENU = """
========================================
        ENHANCED EXPENSE TRACKER
========================================
  EXPENSE MANAGEMENT
  1.  Add Expense
  2.  Quick Add Expense
  3.  View All Expenses
  4.  View Expense Details
  5.  View Expenses by Category
  6.  View Recurring Expenses

  SEARCH & FILTER
  7.  Search Expenses

  EDIT & MANAGE
  8.  Update Expense
  9.  Delete Expense
  10. Duplicate Expense

  UNDO/REDO
  11. Undo Last Operation
  12. Redo Last Operation

  REPORTS & ANALYTICS
  13. Generate Summary & Analytics
  14. Export to CSV

  UTILITIES
  15. Backup Data
  16. Clear All Data

  0.  Exit Application
========================================"""

SORT_OPTIONS = {
    1: SortKey.DATE,
    2: SortKey.AMOUNT,
    3: SortKey.CATEGORY,
    4: SortKey.INSERTION,
}

UPDATE_OPTIONS = {
    1: "description",
    2: "amount",
    3: "category",
    4: "date",
    5: "notes",
    6: "payment_method",
    7: "location",
    8: "is_recurring",
}

CLEAR_CONFIRMATION = "DELETE ALL"


def format_currency(amount: Any) -> str:
    return f"${amount:,.2f}"


def format_row(expense: Expense) -> str:
    return (
        f"{expense.id:<5}"
        f"{expense.description[:19]:<20}"
        f"{format_currency(expense.amount):<12}"
        f"{expense.category[:11]:<12}"
        f"{expense.date.isoformat():<12}"
        f"{expense.payment_method[:7]:<8}"
        f"{'Y' if expense.is_recurring else 'N':<3}"
    )


TABLE_HEADER = (
    f"{'ID':<5}{'Description':<20}{'Amount':<12}{'Category':<12}"
    f"{'Date':<12}{'Payment':<8}{'Rec':<3}"
)


def format_details(expense: Expense) -> str:
    lines = [
        "",
        "--- Expense Details ---",
        f"ID: {expense.id}",
        f"Description: {expense.description}",
        f"Amount: {format_currency(expense.amount)}",
        f"Category: {expense.category}",
        f"Date: {expense.date.isoformat()}",
        f"Payment Method: {expense.payment_method}",
        f"Location: {expense.location}",
        f"Recurring: {'Yes' if expense.is_recurring else 'No'}",
    ]
    if expense.notes:
        lines.append(f"Notes: {expense.notes}")
    lines.append("----------------------")
    return "\n".join(lines)


class ExpenseTrackerApp:
    """Interactive menu loop. One action runs to completion before the next."""

    def __init__(self, tracker: ExpenseTracker):
        self._tracker = tracker
        self._actions: dict[int, Callable[[], None]] = {
            1: self.add_expense,
            2: self.quick_add_expense,
            3: self.view_all,
            4: self.view_details,
            5: self.view_by_category,
            6: self.view_recurring,
            7: self.search,
            8: self.update_expense,
            9: self.delete_expense,
            10: self.duplicate_expense,
            11: self.undo,
            12: self.redo,
            13: self.summary,
            14: self.export_csv,
            15: self.backup,
            16: self.clear_all,
        }

    @property
    def store(self) -> ExpenseStore:
        return self._tracker.store

    # -------------------------------------------------------------------------
    # Input helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _read(prompt: str) -> str:
        return typer.prompt(prompt, default="", show_default=False, prompt_suffix=" ").strip()

    def _ask_text(self, prompt: str, allow_empty: bool = False) -> str:
        while True:
            value = self._read(prompt)
            if value or allow_empty:
                return value
            typer.echo("Error: Input cannot be empty. Please try again.")

    def _ask_field(self, prompt: str, field: str) -> Any:
        """Ask until the validator accepts the value for ``field``."""
        while True:
            raw = self._read(prompt)
            try:
                return self._tracker.validator.validate_field(field, raw)
            except ValidationError as e:
                typer.echo(f"Error: {e}")

    def _ask_int(self, prompt: str, minimum: int = 1, maximum: Optional[int] = None) -> int:
        while True:
            raw = self._read(prompt)
            try:
                value = int(raw)
            except ValueError:
                typer.echo("Error: Please enter a valid number.")
                continue
            if value >= minimum and (maximum is None or value <= maximum):
                return value
            if maximum is None:
                typer.echo(f"Error: Please enter a number of at least {minimum}.")
            else:
                typer.echo(f"Error: Please enter a number between {minimum} and {maximum}.")

    def _ask_yes_no(self, prompt: str) -> bool:
        while True:
            try:
                return parse_bool(self._read(prompt))
            except ValueError as e:
                typer.echo(f"Error: {e}")

    def _ask_optional(self, prompt: str, field: str) -> Optional[Any]:
        """Empty input means 'no filter'; anything else must be valid."""
        while True:
            raw = self._read(prompt)
            if not raw:
                return None
            try:
                return self._tracker.validator.validate_field(field, raw)
            except ValidationError as e:
                typer.echo(f"Error: {e}")

    def _show_category_suggestions(self) -> None:
        categories = sorted(self.store.categories)
        if categories:
            typer.echo(f"Category suggestions: {', '.join(categories[:5])}")

    def _report(self, result: ActionResult) -> None:
        prefix = "* " if result.success else "Error: "
        typer.echo(f"{prefix}{result.message}")
        for warning in result.warnings:
            typer.echo(f"Warning: {warning}")

    def _show_table(self, expenses: list[Expense]) -> None:
        typer.echo(TABLE_HEADER)
        typer.echo("-" * len(TABLE_HEADER))
        for expense in expenses:
            typer.echo(format_row(expense))

    def _select_existing(self, verb: str) -> Optional[Expense]:
        if not len(self.store):
            typer.echo(f"No expenses to {verb}.")
            return None
        expense_id = self._ask_int(f"Enter expense ID to {verb}:")
        expense = self.store.find(expense_id)
        if expense is None:
            typer.echo(f"Expense with ID {expense_id} not found.")
        return expense

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def add_expense(self) -> None:
        typer.echo("\n=== Add New Expense ===")
        fields = {
            "description": self._ask_field("Enter description:", "description"),
            "amount": self._ask_field("Enter amount: $", "amount"),
        }
        self._show_category_suggestions()
        fields["category"] = self._ask_field("Enter category:", "category")
        fields["date"] = self._ask_field("Enter date (YYYY-MM-DD) or press Enter for today:", "date")
        fields["notes"] = self._ask_field("Enter notes (optional):", "notes")
        fields["payment_method"] = self._ask_field(
            "Enter payment method (Cash/Card/Online, Enter for Cash):", "payment_method"
        )
        fields["location"] = self._ask_field("Enter location (optional):", "location")
        fields["is_recurring"] = self._ask_field("Is this a recurring expense? (y/n):", "is_recurring")
        self._report(self._tracker.add_expense(**fields))

    def quick_add_expense(self) -> None:
        typer.echo("\n=== Quick Add Expense ===")
        description = self._ask_field("Description:", "description")
        amount = self._ask_field("Amount: $", "amount")
        default_category = self.store.most_used_category()
        category = self._ask_text(f"Category (Enter for '{default_category}'):", allow_empty=True)
        self._report(self._tracker.quick_add_expense(description, amount, category or None))

    def view_all(self) -> None:
        typer.echo("\n=== All Expenses ===")
        if not len(self.store):
            typer.echo("No expenses found.")
            return
        typer.echo("Sort by: 1. Date (newest first)  2. Amount (highest first)  3. Category  4. ID")
        choice = self._ask_int("Choose sort option (1-4):", 1, 4)
        expenses = self.store.list(SORT_OPTIONS[choice])
        self._show_table(expenses)
        summary = self.store.aggregate()
        typer.echo(f"Total: {format_currency(summary.total)} ({summary.count} expenses)")

    def view_details(self) -> None:
        expense = self._select_existing("view")
        if expense is not None:
            typer.echo(format_details(expense))

    def view_by_category(self) -> None:
        typer.echo("\n=== Expenses by Category ===")
        if not len(self.store):
            typer.echo("No expenses found.")
            return
        summary = self.store.aggregate()
        for category, expenses in self.store.by_category().items():
            breakdown = summary.by_category[category]
            typer.echo(
                f"\n[{category}] (Total: {format_currency(breakdown.total)}"
                f" - {breakdown.percentage:.1f}%)"
            )
            self._show_table(expenses)

    def view_recurring(self) -> None:
        typer.echo("\n=== Recurring Expenses ===")
        expenses = self.store.recurring()
        if not expenses:
            typer.echo("No recurring expenses found.")
            return
        self._show_table(expenses)
        summary = self.store.aggregate()
        typer.echo(f"Monthly recurring total: {format_currency(summary.recurring_total)}")
        typer.echo(f"Annual projection: {format_currency(summary.annual_projection)}")

    def search(self) -> None:
        typer.echo("\n=== Search Expenses ===")
        typer.echo("1. By description  2. By category  3. By date range")
        typer.echo("4. By amount range  5. By payment method  6. Advanced search")
        choice = self._ask_int("Choose search option (1-6):", 1, 6)

        if choice == 1:
            criteria = SearchCriteria(description=self._ask_text("Enter description to search:"))
        elif choice == 2:
            self._show_category_suggestions()
            criteria = SearchCriteria(category=self._ask_text("Enter category to search:"))
        elif choice == 3:
            criteria = SearchCriteria(
                start_date=self._ask_field("Enter start date (YYYY-MM-DD, Enter for today):", "date"),
                end_date=self._ask_field("Enter end date (YYYY-MM-DD, Enter for today):", "date"),
            )
        elif choice == 4:
            criteria = SearchCriteria(
                min_amount=self._ask_field("Enter minimum amount: $", "amount"),
                max_amount=self._ask_field("Enter maximum amount: $", "amount"),
            )
        elif choice == 5:
            methods = sorted(self.store.payment_methods())
            if methods:
                typer.echo(f"Payment methods: {', '.join(methods)}")
            criteria = SearchCriteria(payment_method=self._ask_text("Enter payment method to search:"))
        else:
            typer.echo("Leave any field empty to skip it.")
            criteria = SearchCriteria(
                description=self._ask_text("Description contains:", allow_empty=True),
                category=self._ask_text("Category:", allow_empty=True),
                payment_method=self._ask_text("Payment method:", allow_empty=True),
                min_amount=self._ask_optional("Minimum amount (or empty):", "amount"),
                max_amount=self._ask_optional("Maximum amount (or empty):", "amount"),
                start_date=self._ask_optional("Start date (YYYY-MM-DD or empty):", "date"),
                end_date=self._ask_optional("End date (YYYY-MM-DD or empty):", "date"),
            )

        results = self.store.search(criteria)
        typer.echo(f"\nSearch: {describe_criteria(criteria)}")
        if not results:
            typer.echo("No expenses found matching the criteria.")
            return
        self._show_table(results)
        total = sum(expense.amount for expense in results)
        typer.echo(f"Found {len(results)} expenses, total {format_currency(total)}")

    def update_expense(self) -> None:
        expense = self._select_existing("update")
        if expense is None:
            return
        typer.echo(format_details(expense))
        typer.echo("1. Description  2. Amount  3. Category  4. Date  5. Notes")
        typer.echo("6. Payment method  7. Location  8. Recurring  9. All fields")
        choice = self._ask_int("Choose option (1-9):", 1, 9)

        prompts = {
            "description": "Enter new description:",
            "amount": "Enter new amount: $",
            "category": "Enter new category:",
            "date": "Enter new date (YYYY-MM-DD) or press Enter for today:",
            "notes": "Enter new notes:",
            "payment_method": "Enter new payment method (Enter for Cash):",
            "location": "Enter new location:",
            "is_recurring": "Is this a recurring expense? (y/n):",
        }
        fields = list(UPDATE_OPTIONS.values()) if choice == 9 else [UPDATE_OPTIONS[choice]]

        changes = {}
        for field in fields:
            if field == "category":
                self._show_category_suggestions()
            changes[field] = self._ask_field(prompts[field], field)
        self._report(self._tracker.update_expense(expense.id, changes))

    def delete_expense(self) -> None:
        expense = self._select_existing("delete")
        if expense is None:
            return
        typer.echo(format_details(expense))
        if self._ask_yes_no("Are you sure you want to delete this expense? (y/n):"):
            self._report(self._tracker.delete_expense(expense.id))
        else:
            typer.echo("Deletion cancelled.")

    def duplicate_expense(self) -> None:
        expense = self._select_existing("duplicate")
        if expense is not None:
            self._report(self._tracker.duplicate_expense(expense.id))

    def undo(self) -> None:
        self._report(self._tracker.undo())

    def redo(self) -> None:
        self._report(self._tracker.redo())

    def summary(self) -> None:
        typer.echo("\n=== Expense Summary & Analytics ===")
        summary = self._tracker.summary()
        if not summary.count:
            typer.echo("No expenses found.")
            return

        typer.echo("[*] Overall Statistics:")
        typer.echo(f"Total expenses: {summary.count}")
        typer.echo(f"Total amount: {format_currency(summary.total)}")
        typer.echo(f"Average expense: {format_currency(summary.average)}")
        typer.echo(
            f"Highest expense: {format_currency(summary.highest.amount)} ({summary.highest.description})"
        )
        typer.echo(
            f"Lowest expense: {format_currency(summary.lowest.amount)} ({summary.lowest.description})"
        )

        typer.echo("\n[*] Category Breakdown:")
        typer.echo(f"{'Category':<15}{'Count':<10}{'Total':<14}{'Avg':<12}Percentage")
        typer.echo("-" * 65)
        for name, breakdown in summary.by_category.items():
            typer.echo(
                f"{name[:14]:<15}{breakdown.count:<10}"
                f"{format_currency(breakdown.total):<14}{format_currency(breakdown.average):<12}"
                f"{breakdown.percentage:.1f}%"
            )

        typer.echo("\n[*] Payment Method Breakdown:")
        for name, breakdown in summary.by_payment_method.items():
            typer.echo(f"{name:<15}: {format_currency(breakdown.total)} ({breakdown.percentage:.1f}%)")

        if len(summary.by_month) > 1:
            typer.echo("\n[*] Monthly Breakdown:")
            for month, total in summary.by_month.items():
                typer.echo(f"{month}: {format_currency(total)}")

        if summary.recurring_count:
            typer.echo("\n[*] Recurring Expenses:")
            typer.echo(f"Count: {summary.recurring_count}")
            typer.echo(f"Monthly total: {format_currency(summary.recurring_total)}")
            typer.echo(f"Annual projection: {format_currency(summary.annual_projection)}")

    def export_csv(self) -> None:
        typer.echo("\n=== Export to CSV ===")
        if not len(self.store):
            typer.echo("No expenses to export.")
            return
        filename = self._ask_text("Enter CSV filename (without .csv extension):")
        self._report(self._tracker.export_csv(filename))

    def backup(self) -> None:
        self._report(self._tracker.backup())

    def clear_all(self) -> None:
        typer.echo("\n=== Clear All Data ===")
        typer.echo("WARNING: This will permanently delete ALL expenses!")
        confirmation = self._ask_text(f"Type '{CLEAR_CONFIRMATION}' to confirm:", allow_empty=True)
        if confirmation == CLEAR_CONFIRMATION:
            self._report(self._tracker.clear_all())
        else:
            typer.echo("Operation cancelled.")

    def run(self) -> None:
        for warning in self._tracker.startup_warnings:
            typer.echo(f"Warning: {warning}")

        while True:
            typer.echo(MENU)
            choice = self._ask_int("Enter your choice (0-16):", 0, 16)
            if choice == 0:
                break
            self._actions[choice]()

        for warning in self._tracker.save():
            typer.echo(f"Warning: {warning}")
        typer.echo("Thank you for using Expense Tracker! Your data has been saved.")


app = typer.Typer(add_completion=False, help="Personal expense tracker.")


@app.command()
def run(
    data_file: Optional[Path] = typer.Option(
        None, "--data-file", "-f", help="Expense data file (default: expenses.txt)"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL"
    ),
) -> None:
    """Start the interactive expense tracker menu."""
    overrides = {}
    if data_file is not None:
        overrides["data_file"] = data_file
    if log_level is not None:
        overrides["log_level"] = log_level
    try:
        settings = AppSettings(**overrides)
    except ValueError as e:
        raise typer.BadParameter(str(e))

    configure_logging(settings.log_level, settings.log_file)
    audit_logger = AuditLogger()

    try:
        tracker = create_app_components(settings, audit_logger)
        ExpenseTrackerApp(tracker).run()
    except typer.Abort:
        # End of input: leave like option 0 would, data is saved after each change
        typer.echo("\nInput closed. Goodbye!")
    except Exception as e:
        audit_logger.log_error(type(e).__name__, str(e))
        typer.echo(f"\nFatal error: {e}")
        typer.echo("The application will now exit.")
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
