"""Portfolio-wide rollup over active and closed trades."""

from __future__ import annotations

from typing import TYPE_CHECKING

from trade_journal.journal._stats_models import PortfolioStats
from trade_journal.journal._win_rates import trade_type_label

if TYPE_CHECKING:
    from collections.abc import Sequence

    from trade_journal.journal.models import ClosedTradeMetrics, TradeMetrics


def compute_portfolio_stats(
    active_trades: Sequence[TradeMetrics],
    closed_trades: Sequence[ClosedTradeMetrics],
    starting_capital: float,
) -> PortfolioStats:
    """
    Summarize counts, realized P&L, win rate, trade size and capital growth.

    Unrealized P&L is always 0 (the journal has no market prices). Best/worst trade ties go
    to the first trade encountered; both are None without closed trades.
    """
    total_portfolio_value = sum(trade.total_cost for trade in active_trades)
    total_realized_pl = sum(trade.realized_pl for trade in closed_trades)

    winning_trades = sum(1 for trade in closed_trades if trade.is_win)
    win_rate = winning_trades / len(closed_trades) * 100 if closed_trades else 0.0

    trade_sizes = [trade.total_cost for trade in active_trades] + [
        trade.cost_basis for trade in closed_trades
    ]
    average_trade_size = sum(trade_sizes) / len(trade_sizes) if trade_sizes else 0.0
    average_trade_size_percentage = (
        average_trade_size / starting_capital * 100 if starting_capital > 0 else 0.0
    )

    best_trade: ClosedTradeMetrics | None = None
    worst_trade: ClosedTradeMetrics | None = None
    for trade in closed_trades:
        if best_trade is None or trade.realized_pl > best_trade.realized_pl:
            best_trade = trade
        if worst_trade is None or trade.realized_pl < worst_trade.realized_pl:
            worst_trade = trade

    trades_by_type: dict[str, int] = {}
    trades_by_rating: dict[int, int] = {}
    for trade in [*active_trades, *closed_trades]:
        label = trade_type_label(trade)
        trades_by_type[label] = trades_by_type.get(label, 0) + 1
        if trade.rating is not None:
            trades_by_rating[trade.rating] = trades_by_rating.get(trade.rating, 0) + 1

    current_capital = starting_capital + total_realized_pl
    capital_growth = current_capital - starting_capital
    roi_percentage = capital_growth / starting_capital * 100 if starting_capital > 0 else 0.0

    return PortfolioStats(
        total_trades=len(active_trades) + len(closed_trades),
        active_trades=len(active_trades),
        closed_trades=len(closed_trades),
        total_portfolio_value=total_portfolio_value,
        total_realized_pl=total_realized_pl,
        total_unrealized_pl=0.0,
        win_rate=win_rate,
        average_trade_size=average_trade_size,
        average_trade_size_percentage=average_trade_size_percentage,
        best_trade=best_trade,
        worst_trade=worst_trade,
        trades_by_type=trades_by_type,
        trades_by_rating=trades_by_rating,
        current_capital=current_capital,
        roi_percentage=roi_percentage,
        capital_growth=capital_growth,
    )
