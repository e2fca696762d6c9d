"""Identifier allocation for expenses."""


class IdAllocator:
    """
    Hands out strictly increasing expense ids.

    Ids are never reused, not even after the expense holding one is
    deleted or an add is undone. Seed it with the highest id loaded from
    storage so new expenses never collide with restored ones.
    """

    def __init__(self, highest_issued: int = 0):
        self._last = max(0, highest_issued)

    @property
    def last_issued(self) -> int:
        return self._last

    def next(self) -> int:
        self._last += 1
        return self._last

    def observe(self, expense_id: int) -> None:
        """Make sure future ids are greater than ``expense_id``."""
        if expense_id > self._last:
            self._last = expense_id
