"""
Trade Journal.

Single-user trading journal: a SQLite ledger of buy/sell transactions and an analytics
engine that derives P&L, R-multiples, streaks, drawdowns and win-rate breakdowns.
"""

__version__ = "0.1.0"

# Configure structlog once at import time (quiet by default).
from trade_journal.logging import configure_structlog

configure_structlog()

__all__ = [
    "__version__",
]
