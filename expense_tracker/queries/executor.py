"""
Query Execution Engine

Search, sorting and summary analytics over a sequence of expenses.

Everything here is a pure function of the expenses passed in: nothing is
cached and nothing is mutated, so results always reflect the current ledger.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from expense_tracker.models.expense import (
    CENTS,
    CategoryBreakdown,
    Expense,
    ExpenseSummary,
    PaymentMethodBreakdown,
    SearchCriteria,
    SortKey,
)


ZERO = Decimal("0.00")


class QueryExecutionError(Exception):
    """Error during query execution."""
    pass


def matches(expense: Expense, criteria: SearchCriteria) -> bool:
    """True if the expense satisfies every supplied criterion."""
    if criteria.description is not None:
        if criteria.description.lower() not in expense.description.lower():
            return False
    if criteria.category is not None:
        if expense.category.lower() != criteria.category.lower():
            return False
    if criteria.payment_method is not None:
        if expense.payment_method.lower() != criteria.payment_method.lower():
            return False
    if criteria.min_amount is not None and expense.amount < criteria.min_amount:
        return False
    if criteria.max_amount is not None and expense.amount > criteria.max_amount:
        return False
    if criteria.start_date is not None and expense.date < criteria.start_date:
        return False
    if criteria.end_date is not None and expense.date > criteria.end_date:
        return False
    return True


def search(expenses: Iterable[Expense], criteria: SearchCriteria) -> list[Expense]:
    """Return matching expenses in insertion order."""
    return [expense for expense in expenses if matches(expense, criteria)]


def sort_expenses(expenses: Iterable[Expense], sort_key: SortKey = SortKey.INSERTION) -> list[Expense]:
    """
    Return a sorted copy of the expenses.

    Sorting is stable, so expenses with equal keys keep insertion order
    (reverse=True preserves stability too).
    """
    items = list(expenses)

    if sort_key == SortKey.DATE:
        return sorted(items, key=lambda e: e.date, reverse=True)
    elif sort_key == SortKey.AMOUNT:
        return sorted(items, key=lambda e: e.amount, reverse=True)
    elif sort_key == SortKey.CATEGORY:
        return sorted(items, key=lambda e: e.category)
    elif sort_key == SortKey.INSERTION:
        return items
    raise QueryExecutionError(f"Unsupported sort key: {sort_key}")


def _percentage(part: Decimal, whole: Decimal) -> float:
    if whole <= 0:
        return 0.0
    return float(part / whole * 100)


def summarize(expenses: Iterable[Expense]) -> ExpenseSummary:
    """
    Compute analytics over the expenses.

    Category, payment method and month breakdowns are keyed in sorted order.
    """
    items = list(expenses)
    if not items:
        return ExpenseSummary(count=0)

    total = sum((e.amount for e in items), ZERO)
    count = len(items)

    category_totals: dict[str, Decimal] = {}
    category_counts: dict[str, int] = {}
    payment_totals: dict[str, Decimal] = {}
    monthly_totals: dict[str, Decimal] = {}
    recurring_total = ZERO
    recurring_count = 0

    for expense in items:
        category_totals[expense.category] = category_totals.get(expense.category, ZERO) + expense.amount
        category_counts[expense.category] = category_counts.get(expense.category, 0) + 1
        payment_totals[expense.payment_method] = (
            payment_totals.get(expense.payment_method, ZERO) + expense.amount
        )
        monthly_totals[expense.month] = monthly_totals.get(expense.month, ZERO) + expense.amount
        if expense.is_recurring:
            recurring_total += expense.amount
            recurring_count += 1

    by_category = {
        name: CategoryBreakdown(
            total=category_totals[name],
            count=category_counts[name],
            average=(category_totals[name] / category_counts[name]).quantize(CENTS),
            percentage=_percentage(category_totals[name], total),
        )
        for name in sorted(category_totals)
    }
    by_payment_method = {
        name: PaymentMethodBreakdown(
            total=payment_totals[name],
            percentage=_percentage(payment_totals[name], total),
        )
        for name in sorted(payment_totals)
    }

    # max()/min() return the first extreme element, i.e. earliest inserted
    highest = max(items, key=lambda e: e.amount)
    lowest = min(items, key=lambda e: e.amount)

    return ExpenseSummary(
        count=count,
        total=total,
        average=(total / count).quantize(CENTS),
        highest=highest.model_copy(deep=True),
        lowest=lowest.model_copy(deep=True),
        by_category=by_category,
        by_payment_method=by_payment_method,
        by_month={month: monthly_totals[month] for month in sorted(monthly_totals)},
        recurring_count=recurring_count,
        recurring_total=recurring_total,
        annual_projection=recurring_total * 12,
    )


def _date_range_str(
    date_from: Optional[date],
    date_to: Optional[date],
) -> str:
    """Format date range for description."""
    if date_from and date_to:
        if date_from == date_to:
            return f"on {date_from.isoformat()}"
        return f"from {date_from.isoformat()} to {date_to.isoformat()}"
    elif date_from:
        return f"from {date_from.isoformat()}"
    elif date_to:
        return f"until {date_to.isoformat()}"
    return ""


def describe_criteria(criteria: SearchCriteria) -> str:
    """Human-readable description of the active search criteria."""
    if criteria.is_empty:
        return "All expenses"

    desc_parts = []
    if criteria.description is not None:
        desc_parts.append(f"description containing '{criteria.description}'")
    if criteria.category is not None:
        desc_parts.append(f"category: {criteria.category}")
    if criteria.payment_method is not None:
        desc_parts.append(f"payment method: {criteria.payment_method}")
    if criteria.min_amount is not None and criteria.max_amount is not None:
        desc_parts.append(f"amount ${criteria.min_amount:.2f} to ${criteria.max_amount:.2f}")
    elif criteria.min_amount is not None:
        desc_parts.append(f"amount at least ${criteria.min_amount:.2f}")
    elif criteria.max_amount is not None:
        desc_parts.append(f"amount at most ${criteria.max_amount:.2f}")
    if criteria.start_date or criteria.end_date:
        desc_parts.append(_date_range_str(criteria.start_date, criteria.end_date))

    return " | ".join(desc_parts)
