"""Data layer for persistent storage of the trade ledger."""

from trade_journal.data.database import DatabaseManager
from trade_journal.data.models import (
    Base,
    CapitalAdjustmentRecord,
    CapitalSetting,
    TradeRecord,
    TransactionRecord,
)
from trade_journal.data.repositories import CapitalRepository, TradeRepository

__all__ = [
    "Base",
    "CapitalAdjustmentRecord",
    "CapitalRepository",
    "CapitalSetting",
    "DatabaseManager",
    "TradeRecord",
    "TradeRepository",
    "TransactionRecord",
]
