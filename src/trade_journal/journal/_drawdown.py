"""Drawdown statistics over closed trades in exit-date order.

Each step is measured against the running peak rather than the running balance:
`capital_after = peak + realized_pl`. A losing streak therefore reports the depth of its
latest losing trade below the peak, not the cumulative decline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from trade_journal.journal._stats_models import DrawdownStats
from trade_journal.journal._streaks import by_exit_date

if TYPE_CHECKING:
    from collections.abc import Sequence

    from trade_journal.journal.models import ClosedTradeMetrics


def _percent_of(amount: float, base: float) -> float:
    return amount / base * 100 if base != 0 else 0.0


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def compute_drawdown_stats(
    closed_trades: Sequence[ClosedTradeMetrics], starting_capital: float
) -> DrawdownStats:
    """
    Compute the biggest drawdown and the average of recorded drawdown episodes.

    An episode is recorded when a new high closes it out (depth measured against the peak
    it drew down from) or when it is still open after the last trade.

    Returns:
        DrawdownStats with every magnitude <= 0; all zero when capital never fell below
        its preceding peak.
    """
    peak = starting_capital
    current_drawdown = 0.0
    biggest_drawdown = 0.0
    biggest_drawdown_percentage = 0.0
    drawdowns: list[float] = []
    drawdown_percentages: list[float] = []

    for trade in by_exit_date(closed_trades):
        capital_after_trade = peak + trade.realized_pl

        if capital_after_trade > peak:
            if current_drawdown < 0:
                drawdowns.append(current_drawdown)
                drawdown_percentages.append(_percent_of(current_drawdown, peak))
                current_drawdown = 0.0
            peak = capital_after_trade
        else:
            current_drawdown = capital_after_trade - peak
            biggest_drawdown = min(biggest_drawdown, current_drawdown)
            biggest_drawdown_percentage = min(
                biggest_drawdown_percentage, _percent_of(current_drawdown, peak)
            )

    if current_drawdown < 0:
        drawdowns.append(current_drawdown)
        drawdown_percentages.append(_percent_of(current_drawdown, peak))

    return DrawdownStats(
        biggest_drawdown=biggest_drawdown,
        biggest_drawdown_percentage=biggest_drawdown_percentage,
        average_drawdown=_mean(drawdowns),
        average_drawdown_percentage=_mean(drawdown_percentages),
        drawdown_count=len(drawdowns),
    )
