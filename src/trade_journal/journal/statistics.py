"""Aggregate statistics over a set of active and closed trades.

Each projection is computed independently from the same input snapshot:

- portfolio rollup (counts, realized P&L, win rate, trade size, ROI)
- win rates by NCFD band, trade type and time of entry
- best (type, NCFD band, time of entry) combinations, gated on sample size
- win/loss streaks
- drawdowns (peak-based)
- monthly performance

Usage:
    active = [build_trade_metrics(t) for t in trades if not t.is_closed]
    closed = compute_closed_trades_with_r_metrics(trades, capital)
    active, closed = filter_trades_by_date_range(active, closed, start, end)
    stats = compute_aggregate_statistics(active, closed, capital)
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import structlog

from trade_journal.journal._combinations import compute_combination_stats
from trade_journal.journal._drawdown import compute_drawdown_stats
from trade_journal.journal._monthly import (
    compute_equity_curve,
    compute_monthly_performance_stats,
)
from trade_journal.journal._portfolio import compute_portfolio_stats
from trade_journal.journal._stats_models import AggregateStatistics
from trade_journal.journal._streaks import compute_streak_stats
from trade_journal.journal._win_rates import compute_win_rate_stats, ncfd_range

if TYPE_CHECKING:
    from collections.abc import Sequence

    from trade_journal.journal.models import ClosedTradeMetrics, TradeMetrics

logger = structlog.get_logger()

__all__ = [
    "compute_aggregate_statistics",
    "compute_combination_stats",
    "compute_drawdown_stats",
    "compute_equity_curve",
    "compute_monthly_performance_stats",
    "compute_portfolio_stats",
    "compute_streak_stats",
    "compute_win_rate_stats",
    "filter_trades_by_date_range",
    "ncfd_range",
]


def filter_trades_by_date_range(
    active_trades: Sequence[TradeMetrics],
    closed_trades: Sequence[ClosedTradeMetrics],
    start: date | None,
    end: date | None = None,
) -> tuple[list[TradeMetrics], list[ClosedTradeMetrics]]:
    """
    Restrict trades to an inclusive date window.

    Active trades are matched on their earliest transaction date, closed trades on their
    exit date. Without `start` nothing is filtered; `end` defaults to today.
    """
    if start is None:
        return list(active_trades), list(closed_trades)

    end = end or date.today()

    def _in_window(day: date | None) -> bool:
        return day is not None and start <= day <= end

    filtered_active = [
        trade
        for trade in active_trades
        if _in_window(
            min((txn.transaction_date for txn in trade.transactions), default=None)
        )
    ]
    filtered_closed = [trade for trade in closed_trades if _in_window(trade.exit_date)]
    return filtered_active, filtered_closed


def compute_aggregate_statistics(
    active_trades: Sequence[TradeMetrics],
    closed_trades: Sequence[ClosedTradeMetrics],
    starting_capital: float,
) -> AggregateStatistics:
    """
    Compute every aggregate projection.

    Args:
        active_trades: Metrics of open trades.
        closed_trades: Metrics of closed trades (R-metrics optional).
        starting_capital: Capital base, already including manual adjustments.

    Returns:
        AggregateStatistics. Empty inputs yield zeros, None selectors and empty lists.
    """
    stats = AggregateStatistics(
        starting_capital=starting_capital,
        portfolio=compute_portfolio_stats(active_trades, closed_trades, starting_capital),
        win_rates=compute_win_rate_stats(closed_trades),
        best_combinations=compute_combination_stats(closed_trades),
        streaks=compute_streak_stats(closed_trades),
        drawdown=compute_drawdown_stats(closed_trades, starting_capital),
        monthly=compute_monthly_performance_stats(closed_trades, starting_capital),
    )
    logger.debug(
        "Computed aggregate statistics",
        active=len(active_trades),
        closed=len(closed_trades),
        win_rate=stats.portfolio.win_rate,
    )
    return stats
