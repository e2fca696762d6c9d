"""
Two-Stage Expense Validation

STAGE 1 - SCHEMA VALIDATION:
- Required field presence (description, amount, category)
- Amount format: positive, at most two decimal places
- Date format: real Gregorian YYYY-MM-DD between 1900 and 2100
- Text fields free of the flat-file delimiter

STAGE 2 - SEMANTIC VALIDATION:
- Future date detection
- Unusually large amount detection

Stage 1 issues are errors and block the change. Stage 2 issues are warnings
that are shown to the user but never block.

IMPORTANT: Validation NEVER silently fixes issues. Values are only
normalized (whitespace stripped, amount quantized to cents).
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Optional

from expense_tracker.config import AppSettings, get_settings
from expense_tracker.models.expense import (
    DEFAULT_PAYMENT_METHOD,
    ValidationIssue,
    ValidationResult,
    clean_text,
    parse_amount,
    parse_bool,
    parse_expense_date,
)


REQUIRED_FIELDS = ("description", "amount", "category")

UPDATABLE_FIELDS = (
    "description",
    "amount",
    "category",
    "date",
    "notes",
    "payment_method",
    "location",
    "is_recurring",
)

_SUGGESTED_FIXES = {
    "description": "Enter a short description such as 'Lunch'",
    "category": "Enter a category such as 'Food'",
    "amount": "Enter a positive amount such as 10.50",
    "date": "Enter the date as YYYY-MM-DD, e.g. 2024-03-15",
    "is_recurring": "Answer 'y' or 'n'",
}


class ValidationError(Exception):
    """One or more expense fields failed validation."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        message = "; ".join(issue.message for issue in issues) or "Validation failed"
        super().__init__(message)


class ExpenseValidator:
    """
    Validates expense fields through a two-stage pipeline.

    Used by the store for every add and update, so a field can never
    reach the ledger without passing the same rules.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings()

    def _normalize(self, field: str, value: Any) -> Any:
        """Apply the field rule, raising ValueError when it fails."""
        if field in ("description", "category"):
            return clean_text(value, field, required=True)
        if field in ("notes", "location"):
            return clean_text(value, field)
        if field == "payment_method":
            return clean_text(value, field) or DEFAULT_PAYMENT_METHOD
        if field == "amount":
            return parse_amount(value)
        if field == "date":
            # Missing date means "today", like pressing Enter at the prompt
            if value is None or (isinstance(value, str) and not value.strip()):
                return date.today()
            return parse_expense_date(value)
        if field == "is_recurring":
            return parse_bool(value)
        raise ValueError(f"Unknown field: {field}")

    def _validate_schema(
        self,
        fields: dict[str, Any],
        partial: bool,
    ) -> tuple[dict[str, Any], list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (normalized_values, list_of_issues)
        """
        issues = []
        values = {}

        if not partial:
            for name in REQUIRED_FIELDS:
                if name not in fields or fields[name] is None:
                    issues.append(ValidationIssue(
                        field=name,
                        issue_type="missing",
                        message=f"{name.capitalize()} is required",
                        severity="error",
                        suggested_fix=_SUGGESTED_FIXES.get(name),
                    ))

        for name, value in fields.items():
            if name not in UPDATABLE_FIELDS:
                issues.append(ValidationIssue(
                    field=name,
                    issue_type="unknown_field",
                    message=f"Unknown or read-only field: {name}",
                    severity="error",
                ))
                continue
            if value is None and name in REQUIRED_FIELDS:
                continue  # already reported as missing
            try:
                values[name] = self._normalize(name, value)
            except ValueError as e:
                issues.append(ValidationIssue(
                    field=name,
                    issue_type="invalid_value",
                    message=str(e),
                    severity="error",
                    suggested_fix=_SUGGESTED_FIXES.get(name),
                ))

        if not partial and "date" not in values and not any(i.field == "date" for i in issues):
            values["date"] = date.today()

        return values, issues

    def _validate_semantic(self, values: dict[str, Any]) -> list[ValidationIssue]:
        """
        Stage 2: Semantic validation.

        Only produces warnings.
        """
        issues = []
        today = date.today()

        max_future_date = today + timedelta(days=self._settings.future_date_tolerance_days)
        expense_date = values.get("date")
        if expense_date and expense_date > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Expense date ({expense_date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        threshold = Decimal(str(self._settings.large_amount_warning))
        amount = values.get("amount")
        if amount is not None and amount > threshold:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount (${amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        return issues

    def validate(
        self,
        fields: dict[str, Any],
        partial: bool = False,
    ) -> ValidationResult:
        """
        Run full two-stage validation.

        Args:
            fields: Field name -> raw value
            partial: True for updates (required fields may be absent)

        Returns:
            ValidationResult with normalized values and all issues found
        """
        values, issues = self._validate_schema(fields, partial)

        # Only run stage 2 if stage 1 passes
        if not issues:
            issues.extend(self._validate_semantic(values))

        return ValidationResult(issues=issues, values=values)

    def require_valid(
        self,
        fields: dict[str, Any],
        partial: bool = False,
    ) -> ValidationResult:
        """Like validate(), but raise ValidationError when any error is found."""
        result = self.validate(fields, partial=partial)
        if result.has_errors:
            raise ValidationError(
                [issue for issue in result.issues if issue.severity == "error"]
            )
        return result

    def validate_field(self, field: str, value: Any) -> Any:
        """Validate a single field and return its normalized value."""
        return self.require_valid({field: value}, partial=True).values[field]

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []

        if result.has_errors:
            lines.append("Some fields are invalid:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   - {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     Hint: {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please double-check:")
            for warning in result.warnings:
                lines.append(f"   - {warning}")

        return "\n".join(lines)
