"""Fixtures for data layer tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from trade_journal.data.repositories import CapitalRepository, TradeRepository


@pytest.fixture
def trade_repo(db_session: AsyncSession) -> TradeRepository:
    from trade_journal.data.repositories import TradeRepository

    return TradeRepository(db_session)


@pytest.fixture
def capital_repo(db_session: AsyncSession) -> CapitalRepository:
    from trade_journal.data.repositories import CapitalRepository

    return CapitalRepository(db_session)
