"""Custom exceptions for the trade journal."""

from __future__ import annotations


class JournalError(Exception):
    """Base exception for trade journal errors."""


class LedgerError(JournalError):
    """A ledger write was rejected."""


class InvalidTransactionError(LedgerError):
    """Transaction fields failed validation (non-positive price/quantity, future date)."""


class OversellError(LedgerError):
    """Sell quantity exceeds the open position."""

    def __init__(self, trade_id: int, requested: float, available: float) -> None:
        self.trade_id = trade_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Sell quantity {requested:g} exceeds current position {available:g} "
            f"for trade {trade_id}"
        )


class TradeClosedError(LedgerError):
    """Trade is already closed and accepts no further sells."""

    def __init__(self, trade_id: int) -> None:
        self.trade_id = trade_id
        super().__init__(f"Trade {trade_id} is already closed")


class TradeNotFoundError(JournalError):
    """Trade id not found in the ledger."""

    def __init__(self, trade_id: int) -> None:
        self.trade_id = trade_id
        super().__init__(f"Trade not found: {trade_id}")


class TransactionNotFoundError(JournalError):
    """Transaction id not found in the ledger."""

    def __init__(self, transaction_id: int) -> None:
        self.transaction_id = transaction_id
        super().__init__(f"Transaction not found: {transaction_id}")


class AdjustmentNotFoundError(JournalError):
    """Capital adjustment id not found in the ledger."""

    def __init__(self, adjustment_id: int) -> None:
        self.adjustment_id = adjustment_id
        super().__init__(f"Capital adjustment not found: {adjustment_id}")


class ActiveTradeError(JournalError, ValueError):
    """A closed-trade computation was requested for a trade that is still active."""

    def __init__(self, trade_id: int) -> None:
        self.trade_id = trade_id
        super().__init__(f"Trade {trade_id} is still active; closed outcome is undefined")
