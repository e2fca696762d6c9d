"""
Core Data Models for Expense Tracker

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce the expense rules at runtime (positive amount, real dates)
2. Provide clear validation error messages
3. Be serializable for storage and logging

Field rules live in small parse functions so the validator can apply exactly
the same rules to a single field during an update.
"""

import datetime
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


DEFAULT_PAYMENT_METHOD = "Cash"
MIN_YEAR = 1900
MAX_YEAR = 2100
CENTS = Decimal("0.01")

_AMOUNT_PATTERN = re.compile(r"^\d+(\.\d{1,2})?$")
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_FORBIDDEN_CHARS = ("|", "\n", "\r")


# =============================================================================
# FIELD RULES
# =============================================================================

def clean_text(value: Any, field: str, required: bool = False) -> str:
    """
    Strip a text field and reject characters the flat file cannot hold.

    Raises ValueError if the field is required and empty.
    """
    text = "" if value is None else str(value).strip()
    if required and not text:
        raise ValueError(f"{field.replace('_', ' ').capitalize()} cannot be empty")
    for char in _FORBIDDEN_CHARS:
        if char in text:
            shown = "|" if char == "|" else "line breaks"
            raise ValueError(f"{field.replace('_', ' ').capitalize()} cannot contain {shown}")
    return text


def parse_amount(value: Any) -> Decimal:
    """
    Parse a monetary amount.

    Accepts Decimal, int, float or a plain string like "10" or "10.50".
    The result is strictly positive and quantized to two decimal places.
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be a number")

    if isinstance(value, str):
        text = value.strip()
        if not _AMOUNT_PATTERN.match(text):
            raise ValueError("Please enter a valid positive amount (e.g., 10.50)")
        amount = Decimal(text)
    else:
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValueError("Amount must be a number")

    if not amount.is_finite():
        raise ValueError("Amount must be a finite number")
    if amount <= 0:
        raise ValueError("Amount must be greater than zero")
    if amount.normalize().as_tuple().exponent < -2:
        raise ValueError("Amount can have at most two decimal places")

    try:
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the decimal context can hold
        raise ValueError("Amount is too large")


def parse_expense_date(value: Any) -> datetime.date:
    """
    Parse a YYYY-MM-DD date.

    The year must fall in [1900, 2100] and the day must exist in the
    Gregorian calendar (so 2100-02-29 is rejected).
    """
    if isinstance(value, datetime.datetime):
        value = value.date()

    if isinstance(value, datetime.date):
        parsed = value
    else:
        text = "" if value is None else str(value).strip()
        if not _DATE_PATTERN.match(text):
            raise ValueError("Please enter date in YYYY-MM-DD format")
        try:
            parsed = datetime.date.fromisoformat(text)
        except ValueError:
            raise ValueError(f"{text} is not a valid calendar date")

    if not MIN_YEAR <= parsed.year <= MAX_YEAR:
        raise ValueError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}")
    return parsed


def parse_bool(value: Any) -> bool:
    """Parse a yes/no flag ("y", "yes", "1", "true" and their negatives)."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"y", "yes", "1", "true"}:
        return True
    if text in {"n", "no", "0", "false"}:
        return False
    raise ValueError("Please enter 'y' for yes or 'n' for no")


# =============================================================================
# ENUMS
# =============================================================================

class SortKey(str, Enum):
    """
    Orderings offered when listing expenses.

    Every ordering is a stable sort, so ties keep insertion order.
    """
    INSERTION = "insertion"    # Order the expenses were added
    DATE = "date"              # Most recent first
    AMOUNT = "amount"          # Highest first
    CATEGORY = "category"      # Alphabetical


# =============================================================================
# CORE EXPENSE MODEL
# =============================================================================

class Expense(BaseModel):
    """
    A single recorded expense.

    The id is assigned by the store and can never change. All other fields
    are validated again whenever they are assigned.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: int = Field(
        ...,
        ge=1,
        frozen=True,
        description="Unique expense ID"
    )
    description: str = Field(
        ...,
        description="What the money was spent on"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount spent, two decimal places"
    )
    category: str = Field(
        ...,
        description="Category (Food, Transport, etc.)"
    )
    date: datetime.date = Field(
        default_factory=datetime.date.today,
        description="Date of the expense"
    )
    notes: str = Field(
        default="",
        description="Additional notes"
    )
    is_recurring: bool = Field(
        default=False,
        description="Whether this expense repeats every month"
    )
    payment_method: str = Field(
        default=DEFAULT_PAYMENT_METHOD,
        description="Cash, Card, Online, etc."
    )
    location: str = Field(
        default="",
        description="Where the expense occurred"
    )

    @field_validator("description", "category", mode="before")
    @classmethod
    def validate_required_text(cls, v: Any, info) -> str:
        return clean_text(v, info.field_name, required=True)

    @field_validator("notes", "location", mode="before")
    @classmethod
    def validate_optional_text(cls, v: Any, info) -> str:
        return clean_text(v, info.field_name)

    @field_validator("payment_method", mode="before")
    @classmethod
    def validate_payment_method(cls, v: Any) -> str:
        """An empty payment method falls back to cash."""
        return clean_text(v, "payment_method") or DEFAULT_PAYMENT_METHOD

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Decimal:
        return parse_amount(v)

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v: Any) -> datetime.date:
        return parse_expense_date(v)

    @field_validator("is_recurring", mode="before")
    @classmethod
    def validate_is_recurring(cls, v: Any) -> bool:
        return parse_bool(v)

    @property
    def month(self) -> str:
        """YYYY-MM key used for monthly breakdowns."""
        return self.date.isoformat()[:7]

    def create_copy(self, new_id: int) -> "Expense":
        """
        Build a duplicate of this expense under a new id.

        The description gets a " (Copy)" suffix and the date is reset to today.
        """
        return Expense(
            id=new_id,
            description=f"{self.description} (Copy)",
            amount=self.amount,
            category=self.category,
            date=datetime.date.today(),
            notes=self.notes,
            is_recurring=self.is_recurring,
            payment_method=self.payment_method,
            location=self.location,
        )


# =============================================================================
# QUERY MODELS
# =============================================================================

class SearchCriteria(BaseModel):
    """
    Filters for searching expenses.

    Every supplied criterion must match (logical AND). Empty or missing
    criteria are ignored. Text matches are case-insensitive: description
    is a substring match, category and payment method are exact matches.
    Ranges are inclusive and swapped when given in the wrong order.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    description: Optional[str] = None
    category: Optional[str] = None
    payment_method: Optional[str] = None
    min_amount: Optional[Decimal] = Field(default=None, ge=0)
    max_amount: Optional[Decimal] = Field(default=None, ge=0)
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_means_missing(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def order_ranges(self) -> "SearchCriteria":
        """Swap reversed ranges instead of returning nothing."""
        if (
            self.min_amount is not None
            and self.max_amount is not None
            and self.min_amount > self.max_amount
        ):
            self.min_amount, self.max_amount = self.max_amount, self.min_amount
        if (
            self.start_date is not None
            and self.end_date is not None
            and self.start_date > self.end_date
        ):
            self.start_date, self.end_date = self.end_date, self.start_date
        return self

    @property
    def is_empty(self) -> bool:
        """True when no criterion is set (everything matches)."""
        return all(value is None for value in self.model_dump().values())


class CategoryBreakdown(BaseModel):
    """Totals for one category."""

    total: Decimal
    count: int = Field(ge=0)
    average: Decimal
    percentage: float = Field(ge=0.0, le=100.0)


class PaymentMethodBreakdown(BaseModel):
    """Totals for one payment method."""

    total: Decimal
    percentage: float = Field(ge=0.0, le=100.0)


class ExpenseSummary(BaseModel):
    """
    Analytics over the whole ledger.

    Highest and lowest resolve ties to the first expense in insertion order.
    The annual projection is simply the recurring total times twelve; it
    ignores when recurring expenses started or stopped.
    """

    count: int = Field(ge=0)
    total: Decimal = Decimal("0.00")
    average: Decimal = Decimal("0.00")
    highest: Optional[Expense] = None
    lowest: Optional[Expense] = None

    by_category: dict[str, CategoryBreakdown] = Field(default_factory=dict)
    by_payment_method: dict[str, PaymentMethodBreakdown] = Field(default_factory=dict)
    by_month: dict[str, Decimal] = Field(default_factory=dict)

    recurring_count: int = Field(default=0, ge=0)
    recurring_total: Decimal = Decimal("0.00")
    annual_projection: Decimal = Decimal("0.00")


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of validating a set of expense fields.

    Errors block the change, warnings are shown to the user but do not.
    """

    issues: list[ValidationIssue] = Field(default_factory=list)
    values: dict[str, Any] = Field(
        default_factory=dict,
        description="Normalized values for every field that passed"
    )

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]
