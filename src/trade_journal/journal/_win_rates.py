"""Win rates of closed trades grouped by NCFD band, trade type and time of entry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from trade_journal.constants import UNSPECIFIED
from trade_journal.journal._stats_models import CategoryWinRate, NcfdRange, WinRateStats

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from trade_journal.journal.models import ClosedTradeMetrics, TradeMetrics


def ncfd_range(ncfd: float | None) -> NcfdRange:
    """
    Bucket an NCFD score into one of four bands.

    Upper bounds are inclusive: 20 and 50 fall in `20-50`, 80 in `50-80`. Missing or zero
    scores fall in `<20`.
    """
    if not ncfd or ncfd < 20:
        return NcfdRange.BELOW_20
    if ncfd <= 50:
        return NcfdRange.FROM_20_TO_50
    if ncfd <= 80:
        return NcfdRange.FROM_50_TO_80
    return NcfdRange.ABOVE_80


def trade_type_label(trade: TradeMetrics) -> str:
    return trade.trade_type.value if trade.trade_type is not None else UNSPECIFIED


def time_of_entry_label(trade: TradeMetrics) -> str:
    return trade.time_of_entry.value if trade.time_of_entry is not None else UNSPECIFIED


@dataclass
class WinTally:
    """Running win/total counter for one group."""

    total: int = 0
    wins: int = 0

    def add(self, trade: ClosedTradeMetrics) -> None:
        self.total += 1
        if trade.is_win:
            self.wins += 1

    @property
    def win_rate(self) -> float:
        return self.wins / self.total * 100 if self.total > 0 else 0.0

    def to_record(self) -> CategoryWinRate:
        return CategoryWinRate(
            win_rate=self.win_rate, total_trades=self.total, winning_trades=self.wins
        )


def _tally_by(
    trades: Iterable[ClosedTradeMetrics],
    label_of: Callable[[ClosedTradeMetrics], str],
    seed: Iterable[str] = (),
) -> dict[str, CategoryWinRate]:
    tallies: dict[str, WinTally] = {label: WinTally() for label in seed}
    for trade in trades:
        label = label_of(trade)
        tallies.setdefault(label, WinTally()).add(trade)
    return {label: tally.to_record() for label, tally in tallies.items()}


def compute_win_rate_stats(closed_trades: Sequence[ClosedTradeMetrics]) -> WinRateStats:
    """
    Compute win rates by NCFD band, trade type and time of entry.

    All four NCFD bands are always present (zeroed when empty). Trades without a trade
    type or time of entry are grouped under "Unspecified".
    """
    return WinRateStats(
        win_rate_by_ncfd=_tally_by(
            closed_trades,
            lambda trade: ncfd_range(trade.ncfd).value,
            seed=[band.value for band in NcfdRange],
        ),
        win_rate_by_trade_type=_tally_by(closed_trades, trade_type_label),
        win_rate_by_time_of_entry=_tally_by(closed_trades, time_of_entry_label),
    )
