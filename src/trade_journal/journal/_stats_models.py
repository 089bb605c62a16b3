"""Result records for the aggregate statistics engine.

All records are read-side projections with no identity of their own. They serialize to
flat camelCase JSON like the per-trade records.
"""

from __future__ import annotations

from datetime import date  # noqa: TC003 - Required at runtime for pydantic
from enum import Enum

from pydantic import Field

from trade_journal.journal.models import ClosedTradeMetrics, _Record


class NcfdRange(str, Enum):
    """NCFD score bands. Upper bounds are inclusive; missing or zero NCFD falls in `<20`."""

    BELOW_20 = "<20"
    FROM_20_TO_50 = "20-50"
    FROM_50_TO_80 = "50-80"
    ABOVE_80 = ">80"


class PortfolioStats(_Record):
    """Portfolio-wide rollup."""

    total_trades: int
    active_trades: int
    closed_trades: int
    total_portfolio_value: float
    total_realized_pl: float = Field(alias="totalRealizedPL")
    total_unrealized_pl: float = Field(alias="totalUnrealizedPL")
    win_rate: float
    average_trade_size: float
    average_trade_size_percentage: float
    best_trade: ClosedTradeMetrics | None
    worst_trade: ClosedTradeMetrics | None
    trades_by_type: dict[str, int]
    trades_by_rating: dict[int, int]
    current_capital: float
    roi_percentage: float
    capital_growth: float


class CategoryWinRate(_Record):
    """Win rate of one group of closed trades."""

    win_rate: float
    total_trades: int
    winning_trades: int


class WinRateStats(_Record):
    """Win rates sliced by NCFD band, trade type and time of entry."""

    win_rate_by_ncfd: dict[str, CategoryWinRate] = Field(alias="winRateByNCFD")
    win_rate_by_trade_type: dict[str, CategoryWinRate]
    win_rate_by_time_of_entry: dict[str, CategoryWinRate]


class CombinationWinRate(_Record):
    """Win rate of one (trade type, NCFD band, time of entry) triple."""

    trade_type: str
    ncfd_range: str
    time_of_entry: str
    win_rate: float
    total_trades: int
    winning_trades: int


class StreakStats(_Record):
    """Longest consecutive runs of wins and of losses (breakeven counts as a loss)."""

    biggest_win_streak: int
    biggest_loss_streak: int


class DrawdownStats(_Record):
    """Drawdown magnitudes. Values are <= 0 (losses from a peak)."""

    biggest_drawdown: float
    biggest_drawdown_percentage: float
    average_drawdown: float
    average_drawdown_percentage: float
    drawdown_count: int = 0


class MonthlyPerformance(_Record):
    """Realized P&L of one calendar month (`YYYY-MM`) as a percentage of starting capital."""

    month: str
    performance: float
    total_pl: float = Field(alias="totalPL")
    trade_count: int


class MonthlyPerformanceStats(_Record):
    """Best, worst and average month, plus every month in calendar order."""

    best_month: MonthlyPerformance | None
    worst_month: MonthlyPerformance | None
    average_month_performance: float
    months: list[MonthlyPerformance] = []


class EquityPoint(_Record):
    """One point of the account-value curve."""

    point_date: date = Field(alias="date")
    value: float
    """Return vs starting capital, in percent."""
    absolute_value: float
    label: str


class AggregateStatistics(_Record):
    """Every aggregate projection over a (possibly date-filtered) set of trades."""

    starting_capital: float
    portfolio: PortfolioStats
    win_rates: WinRateStats
    best_combinations: list[CombinationWinRate]
    streaks: StreakStats
    drawdown: DrawdownStats
    monthly: MonthlyPerformanceStats
