"""Tests for the two-stage expense validator."""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from expense_tracker.validation import ExpenseValidator, ValidationError


class TestSchemaValidation:
    """Stage 1: errors that block the change."""

    def test_valid_fields_are_normalized(self, validator):
        """Test a full valid add."""
        result = validator.validate({
            "description": " Lunch ",
            "amount": "12.5",
            "category": "Food",
            "date": "2024-03-15",
            "is_recurring": "y",
            "payment_method": "",
        })
        assert result.is_valid
        assert result.values["description"] == "Lunch"
        assert result.values["amount"] == Decimal("12.50")
        assert result.values["date"] == date(2024, 3, 15)
        assert result.values["is_recurring"] is True
        assert result.values["payment_method"] == "Cash"

    def test_missing_date_means_today(self, validator):
        result = validator.validate({"description": "Bus", "amount": "2", "category": "Transport"})
        assert result.values["date"] == date.today()

    def test_blank_date_means_today(self, validator):
        assert validator.validate_field("date", "") == date.today()

    def test_missing_required_fields(self, validator):
        """Test that description, amount and category are required for an add."""
        result = validator.validate({"notes": "nothing else"})
        missing = {issue.field for issue in result.issues if issue.issue_type == "missing"}
        assert missing == {"description", "amount", "category"}
        assert result.has_errors

    def test_partial_validation_skips_required_check(self, validator):
        result = validator.validate({"notes": "updated"}, partial=True)
        assert result.is_valid
        assert "date" not in result.values

    def test_unknown_field_is_rejected(self, validator):
        """Test that the id and unknown names cannot be set."""
        result = validator.validate({"id": 5}, partial=True)
        assert result.has_errors
        assert result.issues[0].issue_type == "unknown_field"

    def test_invalid_value_has_suggested_fix(self, validator):
        result = validator.validate({"amount": "-5"}, partial=True)
        assert result.error_count == 1
        assert result.issues[0].field == "amount"
        assert result.issues[0].suggested_fix is not None

    def test_require_valid_raises(self, validator):
        with pytest.raises(ValidationError) as exc_info:
            validator.require_valid({"date": "2023-02-29"}, partial=True)
        assert exc_info.value.issues[0].field == "date"

    def test_validate_field_returns_normalized_value(self, validator):
        assert validator.validate_field("amount", "7") == Decimal("7.00")
        with pytest.raises(ValidationError):
            validator.validate_field("category", "")


class TestSemanticValidation:
    """Stage 2: warnings only."""

    def test_future_date_warning(self, validator):
        future = (date.today() + timedelta(days=30)).isoformat()
        result = validator.validate(
            {"description": "Trip", "amount": "100", "category": "Travel", "date": future}
        )
        assert result.is_valid
        assert any("future" in warning for warning in result.warnings)

    def test_date_within_tolerance_has_no_warning(self, validator):
        soon = (date.today() + timedelta(days=2)).isoformat()
        result = validator.validate(
            {"description": "Trip", "amount": "100", "category": "Travel", "date": soon}
        )
        assert result.warnings == []

    def test_large_amount_warning(self, validator):
        result = validator.validate({"amount": "25000"}, partial=True)
        assert result.is_valid
        assert len(result.warnings) == 1

    def test_threshold_comes_from_settings(self, settings):
        settings.large_amount_warning = 50
        validator = ExpenseValidator(settings)
        assert validator.validate({"amount": "60"}, partial=True).warnings

    def test_semantic_stage_skipped_on_errors(self, validator):
        """Test that warnings are not added when stage 1 fails."""
        result = validator.validate({"amount": "25000", "category": ""}, partial=True)
        assert result.has_errors
        assert result.warnings == []


class TestUserFriendlySummary:

    def test_all_checks_passed(self, validator):
        result = validator.validate({"notes": "ok"}, partial=True)
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    def test_errors_and_hints_listed(self, validator):
        result = validator.validate({"amount": "abc"}, partial=True)
        summary = validator.get_user_friendly_summary(result)
        assert summary.startswith("Some fields are invalid:")
        assert "Hint:" in summary


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
