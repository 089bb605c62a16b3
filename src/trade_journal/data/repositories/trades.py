"""Trade ledger repository: recording buys/sells and reading trades back in order."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from trade_journal.constants import (
    DEFAULT_COMMISSION,
    MAX_NCFD,
    MAX_RATING,
    MIN_NCFD,
    MIN_RATING,
    QUANTITY_EPSILON,
)
from trade_journal.data._converters import trade_from_record
from trade_journal.data.models import TradeRecord, TransactionRecord, utc_now
from trade_journal.data.repositories.base import BaseRepository
from trade_journal.exceptions import (
    InvalidTransactionError,
    OversellError,
    TradeClosedError,
    TradeNotFoundError,
    TransactionNotFoundError,
)
from trade_journal.journal.models import TradeStatus, TransactionKind
from trade_journal.journal.positions import compute_position_metrics

if TYPE_CHECKING:
    from sqlalchemy import Select

    from trade_journal.journal.models import TimeOfEntry, Trade, TradeType, Transaction

logger = structlog.get_logger()


def _validate_fill(price: float, quantity: float, on: date) -> None:
    if price <= 0 or quantity <= 0:
        raise InvalidTransactionError("Price and quantity must be greater than 0")
    if on > date.today():
        raise InvalidTransactionError(f"Transaction date {on.isoformat()} is in the future")


def _validate_classification(rating: int | None, ncfd: float | None) -> None:
    if rating is not None and not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidTransactionError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    if ncfd is not None and not MIN_NCFD <= ncfd <= MAX_NCFD:
        raise InvalidTransactionError(f"NCFD must be between {MIN_NCFD:g} and {MAX_NCFD:g}")


def _validate_sell_date(trade: Trade, on: date) -> None:
    entry = trade.entry_date
    if entry is not None and on < entry:
        raise InvalidTransactionError(
            f"Sell date {on.isoformat()} is before the entry date {entry.isoformat()}"
        )


def _validate_rewrite(trade: Trade, transactions: tuple[Transaction, ...], action: str) -> None:
    """Check that a trade's rewritten transaction history is still a valid ledger.

    The position must never go negative, a closed trade must stay flat, and the
    earliest transaction must be a buy.

    Raises:
        InvalidTransactionError: If the rewritten history breaks any of these rules.
    """
    if not transactions:
        return
    rewritten = trade.model_copy(update={"transactions": transactions})
    remaining = compute_position_metrics(rewritten).current_quantity
    if remaining < -QUANTITY_EPSILON:
        raise InvalidTransactionError(f"{action} would sell more than was bought")
    if trade.status is TradeStatus.CLOSED and remaining > QUANTITY_EPSILON:
        raise InvalidTransactionError(
            f"{action} would leave closed trade {trade.id} with an open position"
        )
    first = min(transactions, key=lambda txn: (txn.transaction_date, txn.id))
    if first.kind.is_sell:
        raise InvalidTransactionError(f"{action} would date a sell before the first buy")


class TradeRepository(BaseRepository[TradeRecord]):
    """
    Repository for trades and their transactions.

    Enforces the ledger's write-time invariants:
    - at most one active trade per ticker (a buy appends to it)
    - sells never exceed the open position
    - a sell that empties the position closes the trade; closed trades never reopen
    - transaction dates are never in the future
    """

    model = TradeRecord

    @staticmethod
    def _with_transactions() -> Select[tuple[TradeRecord]]:
        return (
            select(TradeRecord)
            .options(selectinload(TradeRecord.transactions))
            .execution_options(populate_existing=True)
        )

    async def _get_record(self, trade_id: int) -> TradeRecord:
        stmt = self._with_transactions().where(TradeRecord.id == trade_id)
        result = await self._session.execute(stmt)
        record = result.scalar_one_or_none()
        if record is None:
            raise TradeNotFoundError(trade_id)
        return record

    async def _get_transaction_record(self, transaction_id: int) -> TransactionRecord:
        record = await self._session.get(TransactionRecord, transaction_id)
        if record is None:
            raise TransactionNotFoundError(transaction_id)
        return record

    async def get_trade(self, trade_id: int) -> Trade | None:
        """Get a trade with its transactions, or None if it does not exist."""
        try:
            record = await self._get_record(trade_id)
        except TradeNotFoundError:
            return None
        return trade_from_record(record)

    async def get_trades_ordered(self, status: TradeStatus | None = None) -> list[Trade]:
        """
        Get trades in creation order with transactions sorted by date (ties by id).

        Args:
            status: Only return trades with this status (default: all).
        """
        stmt = self._with_transactions().order_by(TradeRecord.created_at, TradeRecord.id)
        if status is not None:
            stmt = stmt.where(TradeRecord.status == status.value)
        result = await self._session.execute(stmt)
        return [trade_from_record(record) for record in result.scalars().all()]

    async def get_active_trade(self, ticker: str) -> Trade | None:
        """Get the active trade for a ticker, if any."""
        record = await self._get_active_record(ticker.strip().upper())
        return trade_from_record(record) if record is not None else None

    async def _get_active_record(self, ticker: str) -> TradeRecord | None:
        stmt = self._with_transactions().where(
            TradeRecord.ticker == ticker,
            TradeRecord.status == TradeStatus.ACTIVE.value,
        )
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def record_buy(
        self,
        ticker: str,
        price: float,
        quantity: float,
        on: date,
        *,
        notes: str | None = None,
        rating: int | None = None,
        trade_type: TradeType | None = None,
        ncfd: float | None = None,
        time_of_entry: TimeOfEntry | None = None,
        commission: float = DEFAULT_COMMISSION,
    ) -> Trade:
        """
        Record a buy, appending to the ticker's active trade or opening a new one.

        Classification metadata only applies when a new trade is opened.

        Raises:
            InvalidTransactionError: If the ticker is blank, price/quantity are not positive,
                the date is in the future, or rating/NCFD are out of range.
        """
        normalized = ticker.strip().upper()
        if not normalized:
            raise InvalidTransactionError("Ticker is required")
        _validate_fill(price, quantity, on)
        _validate_classification(rating, ncfd)

        record = await self._get_active_record(normalized)
        if record is None:
            record = TradeRecord(
                ticker=normalized,
                status=TradeStatus.ACTIVE.value,
                rating=rating,
                trade_type=trade_type.value if trade_type is not None else None,
                ncfd=ncfd,
                time_of_entry=time_of_entry.value if time_of_entry is not None else None,
                transactions=[],
            )
            self._session.add(record)
            logger.info("Opened trade", ticker=normalized)

        record.transactions.append(
            TransactionRecord(
                kind=TransactionKind.BUY.value,
                price=price,
                quantity=quantity,
                transaction_date=on,
                commission=commission,
                notes=notes,
            )
        )
        record.updated_at = utc_now()
        await self._session.flush()
        logger.info("Recorded buy", ticker=normalized, quantity=quantity, price=price)
        return trade_from_record(record)

    async def record_sell_partial(
        self,
        trade_id: int,
        quantity: float,
        price: float,
        on: date,
        *,
        notes: str | None = None,
        commission: float = DEFAULT_COMMISSION,
    ) -> Trade:
        """
        Sell part of an open position. Closes the trade if nothing remains.

        Raises:
            TradeNotFoundError: If the trade does not exist.
            TradeClosedError: If the trade is already closed.
            OversellError: If quantity exceeds the open position.
            InvalidTransactionError: If price/quantity/date are invalid.
        """
        record = await self._get_record(trade_id)
        if record.status == TradeStatus.CLOSED.value:
            raise TradeClosedError(trade_id)
        _validate_fill(price, quantity, on)
        current = trade_from_record(record)
        _validate_sell_date(current, on)

        available = compute_position_metrics(current).current_quantity
        if quantity > available + QUANTITY_EPSILON:
            raise OversellError(trade_id, quantity, available)

        record.transactions.append(
            TransactionRecord(
                kind=TransactionKind.SELL_PARTIAL.value,
                price=price,
                quantity=quantity,
                transaction_date=on,
                commission=commission,
                notes=notes,
            )
        )
        if available - quantity <= QUANTITY_EPSILON:
            record.status = TradeStatus.CLOSED.value
            logger.info("Closed trade", trade_id=trade_id, ticker=record.ticker)
        record.updated_at = utc_now()
        await self._session.flush()
        logger.info("Recorded partial sell", trade_id=trade_id, quantity=quantity, price=price)
        return trade_from_record(record)

    async def record_sell_all(
        self,
        trade_id: int,
        price: float,
        on: date,
        *,
        notes: str | None = None,
        commission: float = DEFAULT_COMMISSION,
    ) -> Trade:
        """
        Sell the whole open position and close the trade.

        Raises:
            TradeNotFoundError: If the trade does not exist.
            TradeClosedError: If the trade is already closed.
            InvalidTransactionError: If nothing is open or price/date are invalid.
        """
        record = await self._get_record(trade_id)
        if record.status == TradeStatus.CLOSED.value:
            raise TradeClosedError(trade_id)

        current = trade_from_record(record)
        quantity = compute_position_metrics(current).current_quantity
        if quantity <= QUANTITY_EPSILON:
            raise InvalidTransactionError(f"Trade {trade_id} has no open quantity to sell")
        _validate_fill(price, quantity, on)
        _validate_sell_date(current, on)

        record.transactions.append(
            TransactionRecord(
                kind=TransactionKind.SELL_ALL.value,
                price=price,
                quantity=quantity,
                transaction_date=on,
                commission=commission,
                notes=notes,
            )
        )
        record.status = TradeStatus.CLOSED.value
        record.updated_at = utc_now()
        await self._session.flush()
        logger.info("Closed trade", trade_id=trade_id, ticker=record.ticker, price=price)
        return trade_from_record(record)

    async def update_transaction(
        self,
        transaction_id: int,
        price: float,
        quantity: float,
        on: date,
        *,
        notes: str | None = None,
    ) -> Trade:
        """
        Edit a transaction's price, quantity, date and notes.

        Trade status is left unchanged; derived metrics are recomputed on the next read.

        Raises:
            TransactionNotFoundError: If the transaction does not exist.
            InvalidTransactionError: If the edit is invalid, would sell more than was bought,
                would leave a closed trade with an open position, or would date a sell
                before the first buy.
        """
        txn = await self._get_transaction_record(transaction_id)
        _validate_fill(price, quantity, on)
        record = await self._get_record(txn.trade_id)

        current = trade_from_record(record)
        _validate_rewrite(
            current,
            tuple(
                existing.model_copy(
                    update={"price": price, "quantity": quantity, "transaction_date": on}
                )
                if existing.id == transaction_id
                else existing
                for existing in current.transactions
            ),
            f"Editing transaction {transaction_id}",
        )

        txn.price = price
        txn.quantity = quantity
        txn.transaction_date = on
        txn.notes = notes
        record.updated_at = utc_now()
        await self._session.flush()
        logger.info("Updated transaction", transaction_id=transaction_id, trade_id=record.id)
        return trade_from_record(record)

    async def delete_transaction(self, transaction_id: int) -> bool:
        """
        Delete a transaction. A trade left without transactions is deleted too.

        Returns:
            True if the owning trade was removed.

        Raises:
            TransactionNotFoundError: If the transaction does not exist.
            InvalidTransactionError: If removing it would sell more than was bought, leave a
                closed trade with an open position, or leave a sell before the first buy.
        """
        txn = await self._get_transaction_record(transaction_id)
        record = await self._get_record(txn.trade_id)

        current = trade_from_record(record)
        _validate_rewrite(
            current,
            tuple(existing for existing in current.transactions if existing.id != transaction_id),
            f"Deleting transaction {transaction_id}",
        )

        record.transactions.remove(txn)
        if not record.transactions:
            await self._session.delete(record)
            await self._session.flush()
            logger.info("Deleted transaction and trade", transaction_id=transaction_id)
            return True

        record.updated_at = utc_now()
        await self._session.flush()
        logger.info("Deleted transaction", transaction_id=transaction_id, trade_id=record.id)
        return False

    async def delete_trade(self, trade_id: int) -> None:
        """
        Delete a trade and all of its transactions.

        Raises:
            TradeNotFoundError: If the trade does not exist.
        """
        record = await self._get_record(trade_id)
        await self.delete(record)
        logger.info("Deleted trade", trade_id=trade_id, ticker=record.ticker)
