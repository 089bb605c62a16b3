"""Position metrics and realized outcome for a single trade.

Cost accounting uses one synthetic lot per open position: every buy updates a single
weighted-average cost, and sells never select individual lots (no FIFO/LIFO).

Commission is recorded on each transaction but is not netted into any P&L figure here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from trade_journal.exceptions import ActiveTradeError
from trade_journal.journal.models import (
    ClosedTradeMetrics,
    ClosedTradeOutcome,
    PositionMetrics,
    TradeMetrics,
    TransactionKind,
)

if TYPE_CHECKING:
    from trade_journal.journal.models import Trade, Transaction


@dataclass
class _Totals:
    bought: float = 0.0
    buy_cost: float = 0.0
    sold: float = 0.0
    sell_proceeds: float = 0.0


def _accumulate(transactions: tuple[Transaction, ...]) -> _Totals:
    totals = _Totals()
    for txn in transactions:
        if txn.kind is TransactionKind.BUY:
            totals.bought += txn.quantity
            totals.buy_cost += txn.price * txn.quantity
        else:
            totals.sold += txn.quantity
            totals.sell_proceeds += txn.price * txn.quantity
    return totals


def compute_position_metrics(trade: Trade) -> PositionMetrics:
    """
    Reduce a trade's transactions to its current position.

    Args:
        trade: Trade with its transactions.

    Returns:
        PositionMetrics where `current_quantity = total_bought - total_sold` and
        `total_cost = current_quantity * average_buy_price`. Averages are 0 when nothing
        was bought.
    """
    totals = _accumulate(trade.transactions)
    current_quantity = totals.bought - totals.sold
    average_buy_price = totals.buy_cost / totals.bought if totals.bought > 0 else 0.0

    return PositionMetrics(
        current_quantity=current_quantity,
        average_buy_price=average_buy_price,
        total_cost=current_quantity * average_buy_price,
        total_bought=totals.bought,
        total_sold=totals.sold,
    )


def compute_closed_outcome(
    trade: Trade, metrics: PositionMetrics | None = None
) -> ClosedTradeOutcome:
    """
    Compute average exit price, realized P&L and return for a closed trade.

    Realized P&L compares sell proceeds against the weighted-average cost of everything
    bought: `realized_pl = sell_proceeds - total_bought * average_buy_price`.

    Args:
        trade: A closed trade.
        metrics: Precomputed position metrics (computed from `trade` when omitted).

    Returns:
        ClosedTradeOutcome. `return_percentage` is 0 when the cost basis is 0.

    Raises:
        ActiveTradeError: If the trade is still active.
    """
    if not trade.is_closed:
        raise ActiveTradeError(trade.id)

    if metrics is None:
        metrics = compute_position_metrics(trade)

    totals = _accumulate(trade.transactions)
    average_exit_price = totals.sell_proceeds / totals.sold if totals.sold > 0 else 0.0
    cost_basis = metrics.total_bought * metrics.average_buy_price
    realized_pl = totals.sell_proceeds - cost_basis
    return_percentage = realized_pl / cost_basis * 100 if cost_basis != 0 else 0.0

    return ClosedTradeOutcome(
        average_exit_price=average_exit_price,
        realized_pl=realized_pl,
        return_percentage=return_percentage,
        entry_date=trade.entry_date,
        exit_date=trade.exit_date,
    )


def build_trade_metrics(trade: Trade) -> TradeMetrics:
    """Combine a trade's fields with its position metrics into one flat record."""
    metrics = compute_position_metrics(trade)
    return TradeMetrics(
        **_trade_fields(trade),
        **metrics.model_dump(),
    )


def build_closed_trade_metrics(
    trade: Trade,
    *,
    account_value_at_entry: float | None = None,
    r_multiple: float | None = None,
) -> ClosedTradeMetrics:
    """
    Build the flat closed-trade record (position metrics, outcome and optional R-metrics).

    Raises:
        ActiveTradeError: If the trade is still active.
    """
    metrics = compute_position_metrics(trade)
    outcome = compute_closed_outcome(trade, metrics)
    return ClosedTradeMetrics(
        **_trade_fields(trade),
        **metrics.model_dump(),
        **outcome.model_dump(),
        account_value_at_entry=account_value_at_entry,
        r_multiple=r_multiple,
    )


def _trade_fields(trade: Trade) -> dict[str, object]:
    return {
        "id": trade.id,
        "ticker": trade.ticker,
        "status": trade.status,
        "rating": trade.rating,
        "trade_type": trade.trade_type,
        "ncfd": trade.ncfd,
        "time_of_entry": trade.time_of_entry,
        "transactions": trade.transactions,
    }
