"""Monthly performance buckets and the account-value curve."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from trade_journal.journal._stats_models import (
    EquityPoint,
    MonthlyPerformance,
    MonthlyPerformanceStats,
)
from trade_journal.journal._streaks import by_exit_date

if TYPE_CHECKING:
    from collections.abc import Sequence

    from trade_journal.journal.models import ClosedTradeMetrics


@dataclass
class _MonthBucket:
    total_pl: float = 0.0
    trade_count: int = 0


def compute_monthly_performance_stats(
    closed_trades: Sequence[ClosedTradeMetrics], starting_capital: float
) -> MonthlyPerformanceStats:
    """
    Bucket realized P&L by exit month and express each month as % of starting capital.

    Every month uses the starting capital as its base, not the capital at month start.
    Best/worst ties go to the first month encountered; both are None without trades.
    """
    buckets: dict[str, _MonthBucket] = {}
    for trade in closed_trades:
        if trade.exit_date is None:
            continue
        bucket = buckets.setdefault(trade.exit_date.strftime("%Y-%m"), _MonthBucket())
        bucket.total_pl += trade.realized_pl
        bucket.trade_count += 1

    months = [
        MonthlyPerformance(
            month=month,
            performance=(
                bucket.total_pl / starting_capital * 100 if starting_capital > 0 else 0.0
            ),
            total_pl=bucket.total_pl,
            trade_count=bucket.trade_count,
        )
        for month, bucket in buckets.items()
    ]

    best_month: MonthlyPerformance | None = None
    worst_month: MonthlyPerformance | None = None
    for month in months:
        if best_month is None or month.performance > best_month.performance:
            best_month = month
        if worst_month is None or month.performance < worst_month.performance:
            worst_month = month

    average = sum(month.performance for month in months) / len(months) if months else 0.0

    return MonthlyPerformanceStats(
        best_month=best_month,
        worst_month=worst_month,
        average_month_performance=average,
        months=sorted(months, key=lambda month: month.month),
    )


def compute_equity_curve(
    closed_trades: Sequence[ClosedTradeMetrics], starting_capital: float
) -> list[EquityPoint]:
    """
    Account value after each closed trade, in exit-date order.

    The curve starts at the first trade's entry date with the starting capital (0%).
    Returns an empty list when no closed trade has an exit date.
    """
    dated = [trade for trade in by_exit_date(closed_trades) if trade.exit_date is not None]
    if not dated:
        return []

    def _return_pct(value: float) -> float:
        if starting_capital == 0:
            return 0.0
        return (value - starting_capital) / starting_capital * 100

    first = dated[0]
    points = [
        EquityPoint(
            point_date=first.entry_date or first.exit_date,
            value=0.0,
            absolute_value=starting_capital,
            label="Starting Capital",
        )
    ]
    value = starting_capital
    for trade in dated:
        value += trade.realized_pl
        sign = "+" if trade.realized_pl >= 0 else "-"
        points.append(
            EquityPoint(
                point_date=trade.exit_date,
                value=_return_pct(value),
                absolute_value=value,
                label=f"{trade.ticker} ({sign}${abs(trade.realized_pl):.2f})",
            )
        )
    return points
