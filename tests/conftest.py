"""
Shared test fixtures.

PHILOSOPHY: Use REAL objects wherever possible.
- Real Pydantic models (not dicts pretending to be models)
- Real SQLite in-memory for repository tests
"""

from __future__ import annotations

import itertools
from datetime import date
from typing import TYPE_CHECKING, Any

import pytest

from trade_journal.journal.models import Trade, TradeStatus, Transaction, TransactionKind

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable

    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession


# ============================================================================
# Database Fixtures (REAL in-memory SQLite, not mocks)
# ============================================================================
@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create real async SQLite engine for testing."""
    from sqlalchemy.ext.asyncio import create_async_engine

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create real database session with the ledger schema."""
    from sqlalchemy.ext.asyncio import AsyncSession

    from trade_journal.data.models import Base

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSession(db_engine, expire_on_commit=False) as session:
        yield session


# ============================================================================
# Domain Object Builders (create REAL objects, not dicts)
# ============================================================================
Fill = tuple[str, float, float, date]
"""(kind, price, quantity, date) where kind is "buy", "sell" or "sell_all"."""

_KINDS = {
    "buy": TransactionKind.BUY,
    "sell": TransactionKind.SELL_PARTIAL,
    "sell_all": TransactionKind.SELL_ALL,
}


@pytest.fixture
def make_trade() -> Callable[..., Trade]:
    """Factory for Trade models built from (kind, price, quantity, date) fills.

    Status defaults to closed when the fills end flat with at least one sell.
    """
    trade_ids = itertools.count(1)
    transaction_ids = itertools.count(1)

    def _make(
        ticker: str,
        fills: list[Fill],
        *,
        trade_id: int | None = None,
        status: TradeStatus | None = None,
        **overrides: Any,
    ) -> Trade:
        tid = trade_id if trade_id is not None else next(trade_ids)
        transactions = tuple(
            Transaction(
                id=next(transaction_ids),
                trade_id=tid,
                kind=_KINDS[kind],
                price=price,
                quantity=quantity,
                transaction_date=on,
            )
            for kind, price, quantity, on in fills
        )
        if status is None:
            bought = sum(t.quantity for t in transactions if not t.kind.is_sell)
            sold = sum(t.quantity for t in transactions if t.kind.is_sell)
            flat = sold > 0 and abs(bought - sold) < 1e-9
            status = TradeStatus.CLOSED if flat else TradeStatus.ACTIVE
        return Trade(id=tid, ticker=ticker, status=status, transactions=transactions, **overrides)

    return _make


@pytest.fixture
def round_trip(make_trade: Callable[..., Trade]) -> Callable[..., Trade]:
    """Factory for a closed trade: one buy then one full sell."""

    def _make(
        ticker: str,
        buy_price: float,
        sell_price: float,
        quantity: float,
        entry: date,
        exit_: date,
        **overrides: Any,
    ) -> Trade:
        return make_trade(
            ticker,
            [
                ("buy", buy_price, quantity, entry),
                ("sell_all", sell_price, quantity, exit_),
            ],
            **overrides,
        )

    return _make
