"""Account equity reconstruction and R-multiples.

The account's capital at the moment a trade was entered is reconstructed by replaying the
ledger in entry-date order: starting from the starting capital, every *closed* trade that
entered earlier contributes its realized P&L. Trades still open contribute nothing (no
mark-to-market), and the queried trade's own P&L is not included.

The replay builds a prefix sum of realized P&L once; each lookup is a single index.

R-multiple = realized P&L / account value at entry (a plain ratio; x100 for percent).
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import numpy as np
import structlog

from trade_journal.journal.positions import build_closed_trade_metrics, compute_position_metrics

if TYPE_CHECKING:
    from collections.abc import Sequence

    from trade_journal.journal.models import ClosedTradeMetrics, Trade

logger = structlog.get_logger()


def _replay_key(trade: Trade) -> date:
    # Trades without transactions have no entry date; they sort after everything else.
    entry = trade.entry_date
    return entry if entry is not None else date.max


def realized_pl_of(trade: Trade) -> float:
    """Realized P&L a trade contributes to the replay (0 for active trades)."""
    if not trade.is_closed:
        return 0.0
    metrics = compute_position_metrics(trade)
    sell_proceeds = sum(txn.value for txn in trade.transactions if txn.kind.is_sell)
    return sell_proceeds - metrics.total_bought * metrics.average_buy_price


class EquityReplay:
    """
    Replay of the ledger in entry-date order with cumulative realized P&L.

    Usage:
        replay = EquityReplay(trades, starting_capital=10_000)
        value = replay.account_value_at_entry(trade.id)
        r = replay.r_multiple(trade)
    """

    def __init__(self, trades: Sequence[Trade], starting_capital: float) -> None:
        self._starting_capital = starting_capital
        # sorted() is stable, so same-day entries keep ledger order.
        self._ordered = sorted(trades, key=_replay_key)
        self._index = {trade.id: position for position, trade in enumerate(self._ordered)}

        pnls = np.array([realized_pl_of(trade) for trade in self._ordered], dtype=float)
        # prefix[i] = realized P&L of every trade replayed before position i
        self._prefix = np.concatenate(([0.0], np.cumsum(pnls)))
        logger.debug(
            "Built equity replay",
            trades=len(self._ordered),
            starting_capital=starting_capital,
            final_value=self.final_account_value,
        )

    @property
    def starting_capital(self) -> float:
        return self._starting_capital

    @property
    def ordered_trades(self) -> list[Trade]:
        """Trades in replay (entry-date) order."""
        return list(self._ordered)

    @property
    def final_account_value(self) -> float:
        """Account value after every closed trade in the ledger."""
        return self._starting_capital + float(self._prefix[-1])

    def account_value_at_entry(self, trade_id: int) -> float:
        """
        Account value immediately before the trade entered.

        An id not in the ledger yields the value after the whole replay.
        """
        position = self._index.get(trade_id)
        if position is None:
            return self.final_account_value
        return self._starting_capital + float(self._prefix[position])

    def r_multiple(self, trade: Trade) -> float | None:
        """R-multiple of a closed trade (None for active trades, 0 when capital <= 0)."""
        if not trade.is_closed:
            return None
        account_value = self.account_value_at_entry(trade.id)
        if account_value <= 0:
            return 0.0
        return realized_pl_of(trade) / account_value


def compute_account_value_at_entry(
    trade_id: int, trades: Sequence[Trade], starting_capital: float
) -> float:
    """
    Reconstruct the account value immediately before a trade entered.

    Args:
        trade_id: Trade to query.
        trades: Every trade in the ledger (any order; replayed by entry date).
        starting_capital: Capital before the first trade.

    Returns:
        Starting capital plus the realized P&L of every closed trade that entered earlier.
    """
    return EquityReplay(trades, starting_capital).account_value_at_entry(trade_id)


def compute_r_multiple(
    trade: Trade, trades: Sequence[Trade], starting_capital: float
) -> float | None:
    """
    R-multiple of a closed trade against the account value at its entry.

    Returns:
        `realized_pl / account_value_at_entry` when that value is positive, 0 otherwise,
        and None for active trades.
    """
    return EquityReplay(trades, starting_capital).r_multiple(trade)


def compute_closed_trades_with_r_metrics(
    trades: Sequence[Trade], starting_capital: float
) -> list[ClosedTradeMetrics]:
    """
    Build closed-trade records enriched with account value at entry and R-multiple.

    One replay serves every lookup. Records are returned in replay (entry-date) order.
    """
    replay = EquityReplay(trades, starting_capital)
    enriched: list[ClosedTradeMetrics] = []
    for trade in replay.ordered_trades:
        if not trade.is_closed:
            continue
        enriched.append(
            build_closed_trade_metrics(
                trade,
                account_value_at_entry=replay.account_value_at_entry(trade.id),
                r_multiple=replay.r_multiple(trade),
            )
        )
    return enriched
