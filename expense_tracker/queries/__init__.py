"""Query execution package."""

from expense_tracker.queries.executor import (
    QueryExecutionError,
    describe_criteria,
    matches,
    search,
    sort_expenses,
    summarize,
)

__all__ = [
    "QueryExecutionError",
    "describe_criteria",
    "matches",
    "search",
    "sort_expenses",
    "summarize",
]
