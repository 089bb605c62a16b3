"""
Configuration for the trade journal (database location, capital defaults).
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

from trade_journal.constants import DEFAULT_STARTING_CAPITAL
from trade_journal.paths import DEFAULT_DB_PATH

DB_PATH_ENV_VAR = "TRADE_JOURNAL_DB_PATH"
STARTING_CAPITAL_ENV_VAR = "TRADE_JOURNAL_STARTING_CAPITAL"


class JournalConfig(BaseModel):
    """Runtime configuration for the journal CLI."""

    db_path: Path = DEFAULT_DB_PATH
    default_starting_capital: float = Field(default=DEFAULT_STARTING_CAPITAL, gt=0)


def load_config() -> JournalConfig:
    """
    Build configuration from the environment.

    Raises:
        ValueError: If `TRADE_JOURNAL_STARTING_CAPITAL` is not a positive number.
    """
    values: dict[str, object] = {}

    db_path = os.getenv(DB_PATH_ENV_VAR)
    if db_path:
        values["db_path"] = Path(db_path)

    raw_capital = os.getenv(STARTING_CAPITAL_ENV_VAR)
    if raw_capital:
        try:
            values["default_starting_capital"] = float(raw_capital)
        except ValueError:
            raise ValueError(
                f"{STARTING_CAPITAL_ENV_VAR} must be a number (got {raw_capital!r})"
            ) from None

    return JournalConfig.model_validate(values)
