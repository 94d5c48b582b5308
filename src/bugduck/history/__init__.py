"""
Injection history: SQLite key-value store plus an append-only JSON-lines log.
"""

from .ledger import HistoryLedger

__all__ = ["HistoryLedger"]
