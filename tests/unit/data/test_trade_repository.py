"""
Trade repository tests - use REAL SQLAlchemy objects with in-memory SQLite.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from trade_journal.exceptions import (
    InvalidTransactionError,
    OversellError,
    TradeClosedError,
    TradeNotFoundError,
    TransactionNotFoundError,
)
from trade_journal.journal import (
    TimeOfEntry,
    TradeStatus,
    TradeType,
    TransactionKind,
    compute_position_metrics,
)

NOV_1 = date(2025, 11, 1)
NOV_2 = date(2025, 11, 2)
NOV_3 = date(2025, 11, 3)


@pytest.mark.asyncio
async def test_record_buy_opens_trade_with_classification(trade_repo) -> None:
    trade = await trade_repo.record_buy(
        " aapl ",
        150.0,
        10,
        NOV_1,
        rating=4,
        trade_type=TradeType.BREAKOUT,
        ncfd=42.0,
        time_of_entry=TimeOfEntry.ORB5,
        notes="first entry",
    )

    assert trade.ticker == "AAPL"
    assert trade.status is TradeStatus.ACTIVE
    assert trade.rating == 4
    assert trade.trade_type is TradeType.BREAKOUT
    assert trade.ncfd == 42.0
    assert trade.time_of_entry is TimeOfEntry.ORB5
    assert len(trade.transactions) == 1
    assert trade.transactions[0].kind is TransactionKind.BUY
    assert trade.transactions[0].notes == "first entry"


@pytest.mark.asyncio
async def test_second_buy_appends_to_active_trade(trade_repo) -> None:
    first = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_1, rating=2)
    second = await trade_repo.record_buy("AAPL", 130.0, 20, NOV_2, rating=5)

    assert second.id == first.id
    assert second.rating == 2
    assert len(second.transactions) == 2
    assert compute_position_metrics(second).average_buy_price == pytest.approx(120.0)
    assert len(await trade_repo.get_trades_ordered()) == 1


@pytest.mark.asyncio
async def test_buy_after_close_opens_new_trade(trade_repo) -> None:
    first = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_1)
    await trade_repo.record_sell_all(first.id, 110.0, NOV_2)

    second = await trade_repo.record_buy("AAPL", 105.0, 5, NOV_3)

    assert second.id != first.id
    trades = await trade_repo.get_trades_ordered()
    assert [trade.status for trade in trades] == [TradeStatus.CLOSED, TradeStatus.ACTIVE]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("ticker", "price", "quantity", "kwargs"),
    [
        ("AAPL", 0.0, 10, {}),
        ("AAPL", 150.0, -1, {}),
        ("   ", 150.0, 10, {}),
        ("AAPL", 150.0, 10, {"rating": 7}),
        ("AAPL", 150.0, 10, {"ncfd": 101.0}),
    ],
)
async def test_record_buy_rejects_invalid_input(
    trade_repo, ticker, price, quantity, kwargs
) -> None:
    with pytest.raises(InvalidTransactionError):
        await trade_repo.record_buy(ticker, price, quantity, NOV_1, **kwargs)


@pytest.mark.asyncio
async def test_record_buy_rejects_future_date(trade_repo) -> None:
    with pytest.raises(InvalidTransactionError, match="future"):
        await trade_repo.record_buy("AAPL", 150.0, 10, date.today() + timedelta(days=1))


@pytest.mark.asyncio
async def test_partial_sell_keeps_trade_open(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_1)

    updated = await trade_repo.record_sell_partial(trade.id, 4, 110.0, NOV_2)

    assert updated.status is TradeStatus.ACTIVE
    assert compute_position_metrics(updated).current_quantity == pytest.approx(6)
    assert updated.transactions[-1].kind is TransactionKind.SELL_PARTIAL


@pytest.mark.asyncio
async def test_partial_sell_of_remaining_position_closes_trade(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_1)
    await trade_repo.record_sell_partial(trade.id, 4, 110.0, NOV_2)

    closed = await trade_repo.record_sell_partial(trade.id, 6, 120.0, NOV_3)

    assert closed.status is TradeStatus.CLOSED
    assert compute_position_metrics(closed).current_quantity == pytest.approx(0)


@pytest.mark.asyncio
async def test_oversell_is_rejected(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_1)

    with pytest.raises(OversellError) as exc:
        await trade_repo.record_sell_partial(trade.id, 11, 110.0, NOV_2)

    assert exc.value.available == pytest.approx(10)
    reloaded = await trade_repo.get_trade(trade.id)
    assert len(reloaded.transactions) == 1


@pytest.mark.asyncio
async def test_sell_all_closes_whole_position(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_1)
    await trade_repo.record_buy("AAPL", 90.0, 5, NOV_2)

    closed = await trade_repo.record_sell_all(trade.id, 95.0, NOV_3, notes="stopped out")

    assert closed.status is TradeStatus.CLOSED
    last = closed.transactions[-1]
    assert last.kind is TransactionKind.SELL_ALL
    assert last.quantity == pytest.approx(15)
    assert last.notes == "stopped out"


@pytest.mark.asyncio
async def test_closed_trade_accepts_no_sells(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_1)
    await trade_repo.record_sell_all(trade.id, 110.0, NOV_2)

    with pytest.raises(TradeClosedError):
        await trade_repo.record_sell_all(trade.id, 110.0, NOV_3)
    with pytest.raises(TradeClosedError):
        await trade_repo.record_sell_partial(trade.id, 1, 110.0, NOV_3)


@pytest.mark.asyncio
async def test_unknown_trade_raises(trade_repo) -> None:
    assert await trade_repo.get_trade(404) is None
    with pytest.raises(TradeNotFoundError):
        await trade_repo.record_sell_all(404, 10.0, NOV_1)
    with pytest.raises(TradeNotFoundError):
        await trade_repo.delete_trade(404)


@pytest.mark.asyncio
async def test_transactions_are_returned_in_date_order(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_2)
    await trade_repo.record_buy("AAPL", 90.0, 10, NOV_1)

    reloaded = await trade_repo.get_trade(trade.id)

    assert [txn.transaction_date for txn in reloaded.transactions] == [NOV_1, NOV_2]
    assert reloaded.entry_date == NOV_1


@pytest.mark.asyncio
async def test_get_trades_ordered_filters_by_status(trade_repo) -> None:
    aapl = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_1)
    await trade_repo.record_buy("TSLA", 250.0, 5, NOV_2)
    await trade_repo.record_sell_all(aapl.id, 105.0, NOV_2)

    active = await trade_repo.get_trades_ordered(TradeStatus.ACTIVE)
    closed = await trade_repo.get_trades_ordered(TradeStatus.CLOSED)
    everything = await trade_repo.get_trades_ordered()

    assert [trade.ticker for trade in active] == ["TSLA"]
    assert [trade.ticker for trade in closed] == ["AAPL"]
    assert [trade.ticker for trade in everything] == ["AAPL", "TSLA"]


@pytest.mark.asyncio
async def test_update_transaction_changes_fill(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_1)
    txn_id = trade.transactions[0].id

    updated = await trade_repo.update_transaction(txn_id, 101.0, 12, NOV_2, notes="fixed")

    txn = updated.transactions[0]
    assert txn.price == pytest.approx(101.0)
    assert txn.quantity == pytest.approx(12)
    assert txn.transaction_date == NOV_2
    assert txn.notes == "fixed"


@pytest.mark.asyncio
async def test_update_transaction_cannot_oversell(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_1)
    trade = await trade_repo.record_sell_partial(trade.id, 8, 110.0, NOV_2)
    buy_id = trade.transactions[0].id

    with pytest.raises(InvalidTransactionError):
        await trade_repo.update_transaction(buy_id, 100.0, 5, NOV_1)


@pytest.mark.asyncio
async def test_update_unknown_transaction_raises(trade_repo) -> None:
    with pytest.raises(TransactionNotFoundError):
        await trade_repo.update_transaction(404, 1.0, 1, NOV_1)


@pytest.mark.asyncio
async def test_delete_transaction_keeps_trade_with_remaining_transactions(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_1)
    trade = await trade_repo.record_buy("AAPL", 110.0, 5, NOV_2)

    removed = await trade_repo.delete_transaction(trade.transactions[1].id)

    assert removed is False
    reloaded = await trade_repo.get_trade(trade.id)
    assert len(reloaded.transactions) == 1


@pytest.mark.asyncio
async def test_delete_last_transaction_removes_trade(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_1)

    removed = await trade_repo.delete_transaction(trade.transactions[0].id)

    assert removed is True
    assert await trade_repo.get_trade(trade.id) is None


@pytest.mark.asyncio
async def test_delete_trade_cascades_to_transactions(trade_repo, db_session) -> None:
    from sqlalchemy import func, select

    from trade_journal.data.models import TransactionRecord

    trade = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_1)
    await trade_repo.record_sell_partial(trade.id, 5, 105.0, NOV_2)

    await trade_repo.delete_trade(trade.id)

    assert await trade_repo.get_trade(trade.id) is None
    count = await db_session.scalar(select(func.count()).select_from(TransactionRecord))
    assert count == 0


@pytest.mark.asyncio
async def test_get_active_trade_by_ticker(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_1)

    assert (await trade_repo.get_active_trade(" aapl")).id == trade.id
    assert await trade_repo.get_active_trade("TSLA") is None

    await trade_repo.record_sell_all(trade.id, 101.0, NOV_2)
    assert await trade_repo.get_active_trade("AAPL") is None


@pytest.mark.asyncio
async def test_deleting_buy_of_closed_trade_is_rejected(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 150.0, 10, NOV_1)
    trade = await trade_repo.record_sell_all(trade.id, 155.0, NOV_2)

    with pytest.raises(InvalidTransactionError, match="more than was bought"):
        await trade_repo.delete_transaction(trade.transactions[0].id)

    reloaded = await trade_repo.get_trade(trade.id)
    assert len(reloaded.transactions) == 2
    assert compute_position_metrics(reloaded).current_quantity == pytest.approx(0)


@pytest.mark.asyncio
async def test_deleting_buy_that_leaves_position_negative_is_rejected(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_1)
    await trade_repo.record_buy("AAPL", 100.0, 5, NOV_1)
    trade = await trade_repo.record_sell_partial(trade.id, 12, 110.0, NOV_2)

    with pytest.raises(InvalidTransactionError):
        await trade_repo.delete_transaction(trade.transactions[0].id)

    reloaded = await trade_repo.get_trade(trade.id)
    assert reloaded.status is TradeStatus.ACTIVE
    assert compute_position_metrics(reloaded).current_quantity == pytest.approx(3)


@pytest.mark.asyncio
async def test_deleting_sell_of_closed_trade_is_rejected(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 150.0, 10, NOV_1)
    trade = await trade_repo.record_sell_all(trade.id, 155.0, NOV_2)

    with pytest.raises(InvalidTransactionError, match="open position"):
        await trade_repo.delete_transaction(trade.transactions[1].id)

    reloaded = await trade_repo.get_trade(trade.id)
    assert compute_position_metrics(reloaded).current_quantity == pytest.approx(0)


@pytest.mark.asyncio
async def test_editing_closed_trade_cannot_leave_open_quantity(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 150.0, 10, NOV_1)
    trade = await trade_repo.record_sell_all(trade.id, 155.0, NOV_2)
    buy_id = trade.transactions[0].id

    with pytest.raises(InvalidTransactionError, match="open position"):
        await trade_repo.update_transaction(buy_id, 150.0, 15, NOV_1)

    reloaded = await trade_repo.get_trade(trade.id)
    assert reloaded.transactions[0].quantity == pytest.approx(10)


@pytest.mark.asyncio
async def test_editing_closed_trade_price_keeps_it_flat(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 150.0, 10, NOV_1)
    trade = await trade_repo.record_sell_all(trade.id, 155.0, NOV_2)

    updated = await trade_repo.update_transaction(trade.transactions[1].id, 160.0, 10, NOV_2)

    assert updated.status is TradeStatus.CLOSED
    assert updated.transactions[1].price == pytest.approx(160.0)


@pytest.mark.asyncio
async def test_sell_dated_before_entry_is_rejected(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_2)

    with pytest.raises(InvalidTransactionError, match="before the entry date"):
        await trade_repo.record_sell_partial(trade.id, 5, 110.0, NOV_1)
    with pytest.raises(InvalidTransactionError, match="before the entry date"):
        await trade_repo.record_sell_all(trade.id, 110.0, NOV_1)

    same_day = await trade_repo.record_sell_partial(trade.id, 5, 110.0, NOV_2)
    assert same_day.entry_date == NOV_2


@pytest.mark.asyncio
async def test_editing_buy_after_its_sell_is_rejected(trade_repo) -> None:
    trade = await trade_repo.record_buy("AAPL", 100.0, 10, NOV_1)
    trade = await trade_repo.record_sell_partial(trade.id, 5, 110.0, NOV_2)

    with pytest.raises(InvalidTransactionError, match="before the first buy"):
        await trade_repo.update_transaction(trade.transactions[0].id, 100.0, 10, NOV_3)
