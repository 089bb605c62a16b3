from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from trade_journal.config import DB_PATH_ENV_VAR, STARTING_CAPITAL_ENV_VAR

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _isolate_journal_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv(DB_PATH_ENV_VAR, raising=False)
    monkeypatch.delenv(STARTING_CAPITAL_ENV_VAR, raising=False)
    # Keep .env discovery away from the developer's working copy.
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "journal.db")
