"""Tests for id allocation and the undo/redo history."""

import pytest

from expense_tracker.ledger import EmptyHistoryError, HistoryManager, IdAllocator


class TestIdAllocator:

    def test_ids_start_at_one(self):
        ids = IdAllocator()
        assert ids.next() == 1
        assert ids.next() == 2
        assert ids.last_issued == 2

    def test_seeded_with_highest_loaded_id(self):
        ids = IdAllocator(41)
        assert ids.next() == 42

    def test_observe_only_moves_forward(self):
        ids = IdAllocator(10)
        ids.observe(3)
        assert ids.last_issued == 10
        ids.observe(15)
        assert ids.next() == 16


class TestHistoryManager:
    """Tests for the bounded undo/redo stacks."""

    def test_empty_history(self):
        history = HistoryManager()
        assert not history.can_undo
        assert not history.can_redo
        with pytest.raises(EmptyHistoryError, match="No operations to undo"):
            history.undo([])
        with pytest.raises(EmptyHistoryError, match="No operations to redo"):
            history.redo([])

    def test_undo_returns_checkpoint_and_enables_redo(self, make_expense):
        history = HistoryManager()
        before = [make_expense(1)]
        history.checkpoint(before)

        after = [make_expense(1), make_expense(2)]
        restored = history.undo(after)

        assert [e.id for e in restored] == [1]
        assert history.can_redo
        assert [e.id for e in history.redo(restored)] == [1, 2]

    def test_checkpoint_is_a_snapshot(self, make_expense):
        """Test that later changes to the live list do not leak into history."""
        history = HistoryManager()
        current = [make_expense(1)]
        history.checkpoint(current)
        current[0].description = "Changed"

        restored = history.undo(current)
        assert restored[0].description == "Lunch"

    def test_checkpoint_clears_redo(self, make_expense):
        history = HistoryManager()
        history.checkpoint([])
        history.undo([make_expense(1)])
        assert history.can_redo

        history.checkpoint([])
        assert not history.can_redo

    def test_oldest_entry_is_evicted(self, make_expense):
        """Test that only the most recent `limit` snapshots are kept."""
        history = HistoryManager(limit=3)
        for n in range(1, 6):
            history.checkpoint([make_expense(n)])
        assert history.undo_depth == 3

        ids = [history.undo([])[0].id for _ in range(3)]
        assert ids == [5, 4, 3]
        assert not history.can_undo

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            HistoryManager(limit=0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
