"""Repository classes for data access."""

from trade_journal.data.repositories.capital import CapitalRepository
from trade_journal.data.repositories.trades import TradeRepository

__all__ = [
    "CapitalRepository",
    "TradeRepository",
]
