"""Trade analytics engine: pure computations over an in-memory trade ledger."""

from trade_journal.journal._stats_models import (
    AggregateStatistics,
    CategoryWinRate,
    CombinationWinRate,
    DrawdownStats,
    EquityPoint,
    MonthlyPerformance,
    MonthlyPerformanceStats,
    NcfdRange,
    PortfolioStats,
    StreakStats,
    WinRateStats,
)
from trade_journal.journal.equity import (
    EquityReplay,
    compute_account_value_at_entry,
    compute_closed_trades_with_r_metrics,
    compute_r_multiple,
)
from trade_journal.journal.models import (
    CapitalAdjustment,
    CapitalSettings,
    ClosedTradeMetrics,
    ClosedTradeOutcome,
    PositionMetrics,
    TimeOfEntry,
    Trade,
    TradeMetrics,
    TradeStatus,
    TradeType,
    Transaction,
    TransactionKind,
)
from trade_journal.journal.positions import (
    build_closed_trade_metrics,
    build_trade_metrics,
    compute_closed_outcome,
    compute_position_metrics,
)
from trade_journal.journal.statistics import (
    compute_aggregate_statistics,
    compute_equity_curve,
    filter_trades_by_date_range,
)

__all__ = [
    "AggregateStatistics",
    "CapitalAdjustment",
    "CapitalSettings",
    "CategoryWinRate",
    "ClosedTradeMetrics",
    "ClosedTradeOutcome",
    "CombinationWinRate",
    "DrawdownStats",
    "EquityPoint",
    "EquityReplay",
    "MonthlyPerformance",
    "MonthlyPerformanceStats",
    "NcfdRange",
    "PortfolioStats",
    "PositionMetrics",
    "StreakStats",
    "TimeOfEntry",
    "Trade",
    "TradeMetrics",
    "TradeStatus",
    "TradeType",
    "Transaction",
    "TransactionKind",
    "WinRateStats",
    "build_closed_trade_metrics",
    "build_trade_metrics",
    "compute_account_value_at_entry",
    "compute_aggregate_statistics",
    "compute_closed_outcome",
    "compute_closed_trades_with_r_metrics",
    "compute_equity_curve",
    "compute_position_metrics",
    "compute_r_multiple",
    "filter_trades_by_date_range",
]
