"""Best (trade type, NCFD band, time of entry) combinations.

Small groups are noisy: a triple needs at least `MIN_COMBINATION_TRADES` closed trades to
qualify, and nothing is surfaced until at least `MIN_QUALIFYING_COMBINATIONS` triples
qualify. Ranking is by win rate only; trade count does not weight the ranking.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from trade_journal.constants import (
    MIN_COMBINATION_TRADES,
    MIN_QUALIFYING_COMBINATIONS,
    TOP_COMBINATIONS,
)
from trade_journal.journal._stats_models import CombinationWinRate
from trade_journal.journal._win_rates import (
    WinTally,
    ncfd_range,
    time_of_entry_label,
    trade_type_label,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from trade_journal.journal.models import ClosedTradeMetrics


def compute_combination_stats(
    closed_trades: Sequence[ClosedTradeMetrics],
) -> list[CombinationWinRate]:
    """
    Return the top combinations by win rate, or an empty list below the sample threshold.

    Ties keep first-observed order.
    """
    tallies: dict[tuple[str, str, str], WinTally] = {}
    for trade in closed_trades:
        key = (trade_type_label(trade), ncfd_range(trade.ncfd).value, time_of_entry_label(trade))
        tallies.setdefault(key, WinTally()).add(trade)

    qualifying = [
        (key, tally) for key, tally in tallies.items() if tally.total >= MIN_COMBINATION_TRADES
    ]
    if len(qualifying) < MIN_QUALIFYING_COMBINATIONS:
        return []

    ranked = sorted(qualifying, key=lambda item: item[1].win_rate, reverse=True)
    return [
        CombinationWinRate(
            trade_type=trade_type,
            ncfd_range=band,
            time_of_entry=time_of_entry,
            win_rate=tally.win_rate,
            total_trades=tally.total,
            winning_trades=tally.wins,
        )
        for (trade_type, band, time_of_entry), tally in ranked[:TOP_COMBINATIONS]
    ]
