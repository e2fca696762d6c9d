"""
Flat File Storage Implementation

Expenses are stored one per line, fields separated by '|':

    id|description|amount|category|date|notes|recurring|paymentMethod|location

Amounts are written with two decimals and the recurring flag as 0/1.
The older five-field form (id|description|amount|category|date) is still
accepted when loading; missing fields take their defaults.

TRADEOFFS:
- The whole file is rewritten after every change (fine for personal use)
- No transactions: a failed write leaves the in-memory ledger authoritative
"""

import time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from pathlib import Path
from typing import Union

import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_tracker.models.expense import CENTS, Expense
from expense_tracker.services.storage.interface import (
    ExpenseStorageInterface,
    LoadResult,
    PersistenceError,
)


DELIMITER = "|"
FULL_FIELD_COUNT = 9
LEGACY_FIELD_COUNT = 5

logger = structlog.get_logger(__name__)


def serialize_expense(expense: Expense) -> str:
    """Convert an expense to one line of the flat file (no newline)."""
    return DELIMITER.join([
        str(expense.id),
        expense.description,
        f"{expense.amount:.2f}",
        expense.category,
        expense.date.isoformat(),
        expense.notes,
        "1" if expense.is_recurring else "0",
        expense.payment_method,
        expense.location,
    ])


def deserialize_expense(line: str) -> Expense:
    """
    Parse one line of the flat file.

    Raises:
        ValueError: If the line is malformed or any field is invalid
    """
    tokens = line.rstrip("\r\n").split(DELIMITER)

    if len(tokens) < LEGACY_FIELD_COUNT:
        raise ValueError(f"Expected at least {LEGACY_FIELD_COUNT} fields, got {len(tokens)}")

    try:
        expense_id = int(tokens[0].strip())
    except ValueError:
        raise ValueError(f"Non-numeric id: {tokens[0]!r}")

    try:
        amount = Decimal(tokens[2].strip()).quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Non-numeric amount: {tokens[2]!r}")

    fields = {
        "id": expense_id,
        "description": tokens[1],
        "amount": amount,
        "category": tokens[3],
        "date": tokens[4],
    }

    if len(tokens) >= FULL_FIELD_COUNT:
        fields.update(
            notes=tokens[5],
            is_recurring=tokens[6].strip() == "1",
            payment_method=tokens[7],
            location=tokens[8],
        )

    # pydantic's ValidationError is a ValueError
    return Expense(**fields)


class FlatFileExpenseStorage(ExpenseStorageInterface):
    """
    Flat file implementation of expense storage.

    Writes are retried on OSError before giving up with PersistenceError.
    """

    def __init__(self, path: Union[str, Path], retry_attempts: int = 3):
        self._path = Path(path)
        self._retry_attempts = retry_attempts

    @property
    def path(self) -> Path:
        return self._path

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=0.1, max=1),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )

    @staticmethod
    def _render(expenses: list[Expense]) -> str:
        return "".join(serialize_expense(expense) + "\n" for expense in expenses)

    def load(self) -> LoadResult:
        """
        Load expenses from the file.

        A missing file is an empty ledger. Blank lines are ignored. Lines
        that fail to parse (including lines that are not valid UTF-8), and
        lines repeating an id already loaded, are skipped and counted.
        """
        if not self._path.exists():
            return LoadResult()

        try:
            raw = self._path.read_bytes()
        except OSError as e:
            raise PersistenceError(f"Could not read {self._path}: {e}") from e

        expenses = []
        seen_ids = set()
        skipped = 0

        # Each line is decoded on its own
        for line_number, raw_line in enumerate(raw.splitlines(), start=1):
            if not raw_line.strip():
                continue
            try:
                # UnicodeDecodeError is a ValueError
                expense = deserialize_expense(raw_line.decode("utf-8"))
            except ValueError as e:
                skipped += 1
                logger.debug("corrupt_line_skipped", line_number=line_number, error=str(e))
                continue
            if expense.id in seen_ids:
                skipped += 1
                logger.debug("duplicate_id_skipped", line_number=line_number, id=expense.id)
                continue
            seen_ids.add(expense.id)
            expenses.append(expense)

        return LoadResult(expenses=expenses, skipped=skipped)

    def save(self, expenses: list[Expense]) -> None:
        """Overwrite the file with the given expenses."""
        content = self._render(expenses)
        try:
            for attempt in self._retrying():
                with attempt:
                    self._path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Could not write {self._path}: {e}") from e

    def backup(self, expenses: list[Expense]) -> Path:
        """
        Write <file>.backup.<unix timestamp> next to the data file.

        If a backup with that name already exists, a -1, -2, ... counter is
        appended so earlier backups are never overwritten.
        """
        content = self._render(expenses)
        base_name = f"{self._path.name}.backup.{int(time.time())}"
        candidate = self._path.with_name(base_name)
        counter = 0

        while True:
            try:
                with candidate.open("x", encoding="utf-8") as f:
                    f.write(content)
                return candidate
            except FileExistsError:
                counter += 1
                candidate = self._path.with_name(f"{base_name}-{counter}")
            except OSError as e:
                raise PersistenceError(f"Could not write backup {candidate}: {e}") from e
