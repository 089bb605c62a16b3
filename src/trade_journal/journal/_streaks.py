"""Win and loss streaks over closed trades in exit-date order."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from trade_journal.journal._stats_models import StreakStats

if TYPE_CHECKING:
    from collections.abc import Sequence

    from trade_journal.journal.models import ClosedTradeMetrics


def by_exit_date(closed_trades: Sequence[ClosedTradeMetrics]) -> list[ClosedTradeMetrics]:
    """Closed trades sorted by exit date (stable; undated trades last)."""
    return sorted(
        closed_trades,
        key=lambda trade: (trade.exit_date is None, trade.exit_date or date.min),
    )


def compute_streak_stats(closed_trades: Sequence[ClosedTradeMetrics]) -> StreakStats:
    """Longest runs of wins and of losses. Breakeven trades extend the loss streak."""
    win_streak = loss_streak = 0
    biggest_win_streak = biggest_loss_streak = 0

    for trade in by_exit_date(closed_trades):
        if trade.is_win:
            win_streak += 1
            loss_streak = 0
            biggest_win_streak = max(biggest_win_streak, win_streak)
        else:
            loss_streak += 1
            win_streak = 0
            biggest_loss_streak = max(biggest_loss_streak, loss_streak)

    return StreakStats(
        biggest_win_streak=biggest_win_streak,
        biggest_loss_streak=biggest_loss_streak,
    )
