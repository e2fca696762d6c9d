"""
Expense Tracker - Source Package

A single-user personal finance ledger that records expenses in a flat
file and supports searching, summaries, undo/redo, CSV export and backups.

PRINCIPLES:
1. Validate every field before it touches the ledger
2. Fail early, fail visibly
3. Every mutation can be undone
4. Every mutation is audited
5. Storage layer is swappable
"""

__version__ = "2.0.0"
__author__ = "Expense Tracker Team"
