"""
Tests for Expense Tracker models

Test strategy:
1. Unit tests for the field rules and models
2. Calendar edge cases (leap years, year range)
3. Audit event construction
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from expense_tracker.models import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    Expense,
    SearchCriteria,
    ValidationIssue,
    ValidationResult,
)
from expense_tracker.models.expense import (
    clean_text,
    parse_amount,
    parse_bool,
    parse_expense_date,
)


class TestFieldRules:
    """Tests for the parse functions shared by models and validator."""

    def test_parse_amount_accepts_plain_strings(self):
        """Test integer and two-decimal strings."""
        assert parse_amount("10") == Decimal("10.00")
        assert parse_amount("10.5") == Decimal("10.50")
        assert parse_amount(" 12.50 ") == Decimal("12.50")

    @pytest.mark.parametrize("raw", ["0", "0.00", "-5", "abc", "10.555", "1e3", "", "$10"])
    def test_parse_amount_rejects_invalid(self, raw):
        """Test that zero, negative, malformed and over-precise amounts are rejected."""
        with pytest.raises(ValueError):
            parse_amount(raw)

    def test_parse_amount_rejects_bool_and_non_finite(self):
        """Test that booleans and infinities are not amounts."""
        with pytest.raises(ValueError):
            parse_amount(True)
        with pytest.raises(ValueError):
            parse_amount(float("inf"))

    @pytest.mark.parametrize("raw", ["1" * 28, 1e30])
    def test_parse_amount_rejects_oversized(self, raw):
        """Test that amounts too long to quantize are a ValueError, not a decimal error."""
        with pytest.raises(ValueError, match="Amount is too large"):
            parse_amount(raw)

    def test_parse_amount_accepts_long_amount(self):
        assert parse_amount("1" * 26) == Decimal("1" * 26 + ".00")

    def test_parse_amount_accepts_numbers(self):
        """Test Decimal, int and float inputs."""
        assert parse_amount(Decimal("3.1")) == Decimal("3.10")
        assert parse_amount(7) == Decimal("7.00")
        assert parse_amount(2.25) == Decimal("2.25")

    @pytest.mark.parametrize("raw", ["2024-02-29", "2000-02-29", "1900-01-01", "2100-12-31"])
    def test_parse_date_accepts_valid(self, raw):
        """Test leap days in leap years and the year range bounds."""
        assert parse_expense_date(raw).isoformat() == raw

    @pytest.mark.parametrize(
        "raw",
        [
            "2023-02-29",  # not a leap year
            "1900-02-29",  # divisible by 100
            "2100-02-29",
            "2024-04-31",
            "2024-13-01",
            "1899-12-31",
            "2101-01-01",
            "15/03/2024",
            "2024-3-15",
        ],
    )
    def test_parse_date_rejects_invalid(self, raw):
        """Test impossible days, out-of-range years and wrong formats."""
        with pytest.raises(ValueError):
            parse_expense_date(raw)

    def test_clean_text_rejects_delimiter(self):
        """Test that text cannot contain the flat file delimiter."""
        with pytest.raises(ValueError, match="cannot contain"):
            clean_text("a|b", "description")

    def test_clean_text_rejects_line_breaks(self):
        with pytest.raises(ValueError):
            clean_text("line\nbreak", "notes")

    def test_clean_text_required(self):
        """Test that a required field cannot be blank."""
        with pytest.raises(ValueError, match="cannot be empty"):
            clean_text("   ", "category", required=True)
        assert clean_text("  Food ", "category", required=True) == "Food"

    @pytest.mark.parametrize("raw,expected", [("y", True), ("YES", True), ("1", True), ("n", False), ("No", False), ("0", False)])
    def test_parse_bool(self, raw, expected):
        assert parse_bool(raw) is expected

    def test_parse_bool_rejects_other(self):
        with pytest.raises(ValueError):
            parse_bool("maybe")


class TestExpenseModel:
    """Tests for the Expense model."""

    def test_expense_creation(self):
        """Test Expense model creation with defaults."""
        expense = Expense(id=1, description="Lunch", amount="12.50", category="Food")
        assert expense.amount == Decimal("12.50")
        assert expense.date == date.today()
        assert expense.payment_method == "Cash"
        assert expense.notes == ""
        assert expense.location == ""
        assert expense.is_recurring is False

    def test_expense_strips_whitespace(self):
        """Test that whitespace is stripped from text fields."""
        expense = Expense(id=1, description="  Lunch  ", amount="1", category=" Food ")
        assert expense.description == "Lunch"
        assert expense.category == "Food"

    def test_empty_payment_method_defaults_to_cash(self):
        expense = Expense(id=1, description="Bus", amount="2", category="Transport", payment_method="")
        assert expense.payment_method == "Cash"

    def test_expense_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            Expense(id=1, description="Test", amount=Decimal("-100"), category="Food")

    def test_expense_rejects_non_positive_id(self):
        with pytest.raises(ValueError):
            Expense(id=0, description="Test", amount="1", category="Food")

    def test_expense_id_is_frozen(self, make_expense):
        """Test that the id cannot be reassigned."""
        expense = make_expense()
        with pytest.raises(ValueError):
            expense.id = 2

    def test_assignment_is_validated(self, make_expense):
        """Test that invalid values are rejected on assignment too."""
        expense = make_expense()
        with pytest.raises(ValueError):
            expense.amount = "0"
        assert expense.amount == Decimal("12.50")

    def test_month_key(self, make_expense):
        assert make_expense(date=date(2024, 1, 5)).month == "2024-01"

    def test_create_copy(self, make_expense):
        """Test duplicate gets a new id, a (Copy) suffix and today's date."""
        original = make_expense(
            notes="team lunch",
            is_recurring=True,
            payment_method="Card",
            location="Cafe",
        )
        copy = original.create_copy(9)
        assert copy.id == 9
        assert copy.description == "Lunch (Copy)"
        assert copy.date == date.today()
        assert copy.amount == original.amount
        assert copy.category == original.category
        assert copy.notes == "team lunch"
        assert copy.is_recurring is True
        assert copy.payment_method == "Card"
        assert copy.location == "Cafe"


class TestSearchCriteria:
    """Tests for search criteria normalization."""

    def test_blank_strings_are_ignored(self):
        criteria = SearchCriteria(description="", category="   ")
        assert criteria.description is None
        assert criteria.category is None
        assert criteria.is_empty

    def test_reversed_amount_range_is_swapped(self):
        criteria = SearchCriteria(min_amount="50", max_amount="10")
        assert criteria.min_amount == Decimal("10")
        assert criteria.max_amount == Decimal("50")

    def test_reversed_date_range_is_swapped(self):
        criteria = SearchCriteria(start_date=date(2024, 3, 31), end_date=date(2024, 3, 1))
        assert criteria.start_date == date(2024, 3, 1)
        assert criteria.end_date == date(2024, 3, 31)

    def test_not_empty_with_any_criterion(self):
        assert not SearchCriteria(category="Food").is_empty


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            description="Expense 3 deleted",
        )
        assert event.event_type == AuditEventType.EXPENSE_DELETED
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.expense_added(4, "Lunch", "12.50")
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "expense_added"
        assert log_dict["entity_id"] == 4
        assert log_dict["details"]["amount"] == "12.50"
        assert log_dict["correlation_id"] is None

    def test_builder_passes_correlation_id(self):
        correlation_id = uuid4()
        event = AuditEventBuilder.expense_duplicated(1, 2, correlation_id=correlation_id)
        assert event.entity_id == 2
        assert event.details["source_id"] == 1
        assert event.correlation_id == correlation_id

    def test_ledger_loaded_with_skipped_lines_is_warning(self):
        """Test that skipped lines produce a warning event."""
        event = AuditEventBuilder.ledger_loaded("expenses.txt", loaded=3, skipped=2)
        assert event.event_type == AuditEventType.CORRUPT_LINES_SKIPPED
        assert event.severity == AuditSeverity.WARNING

        clean = AuditEventBuilder.ledger_loaded("expenses.txt", loaded=3, skipped=0)
        assert clean.event_type == AuditEventType.LEDGER_LOADED
        assert clean.severity == AuditSeverity.INFO

    def test_history_event_type_follows_direction(self):
        assert AuditEventBuilder.history_applied("undo", 1).event_type == AuditEventType.UNDO_APPLIED
        assert AuditEventBuilder.history_applied("redo", 1).event_type == AuditEventType.REDO_APPLIED

    def test_system_error_is_critical(self):
        event = AuditEventBuilder.system_error("RuntimeError", "boom")
        assert event.severity == AuditSeverity.CRITICAL
        assert event.error_message == "boom"


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Amount is required",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.is_valid is False
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            issues=[
                ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message="Date in future",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0
        assert result.warnings == ["Date in future"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
