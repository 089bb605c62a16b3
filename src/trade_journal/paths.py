"""
Centralized path defaults for the trade journal.

All paths are expressed relative to the current working directory. Every path default can be
overridden via CLI options or `TRADE_JOURNAL_DB_PATH`.
"""

from pathlib import Path

DEFAULT_DATA_DIR = Path("data")
DEFAULT_DB_PATH = DEFAULT_DATA_DIR / "trades.db"

__all__ = [
    "DEFAULT_DATA_DIR",
    "DEFAULT_DB_PATH",
]
