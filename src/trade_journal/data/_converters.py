"""Converters from ORM records to engine domain models."""

from __future__ import annotations

from typing import TYPE_CHECKING

from trade_journal.journal.models import (
    CapitalAdjustment,
    Trade,
    TradeStatus,
    Transaction,
    TransactionKind,
)

if TYPE_CHECKING:
    from trade_journal.data.models import (
        CapitalAdjustmentRecord,
        TradeRecord,
        TransactionRecord,
    )


def transaction_from_record(record: TransactionRecord) -> Transaction:
    """Convert a TransactionRecord into a Transaction."""
    return Transaction(
        id=record.id,
        trade_id=record.trade_id,
        kind=TransactionKind(record.kind),
        price=record.price,
        quantity=record.quantity,
        transaction_date=record.transaction_date,
        commission=record.commission,
        notes=record.notes,
    )


def trade_from_record(record: TradeRecord) -> Trade:
    """Convert a TradeRecord (with transactions loaded) into a Trade.

    Transactions are ordered by date, then id, regardless of collection order.
    """
    transactions = sorted(record.transactions, key=lambda txn: (txn.transaction_date, txn.id))
    return Trade(
        id=record.id,
        ticker=record.ticker,
        status=TradeStatus(record.status),
        rating=record.rating,
        trade_type=record.trade_type,
        ncfd=record.ncfd,
        time_of_entry=record.time_of_entry,
        transactions=tuple(transaction_from_record(txn) for txn in transactions),
        created_at=record.created_at,
    )


def adjustment_from_record(record: CapitalAdjustmentRecord) -> CapitalAdjustment:
    """Convert a CapitalAdjustmentRecord into a CapitalAdjustment."""
    return CapitalAdjustment(
        id=record.id,
        amount=record.amount,
        reason=record.reason,
        adjusted_at=record.adjusted_at,
    )
