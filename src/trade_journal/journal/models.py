"""Pydantic domain models for the trade ledger and its derived metric records.

Ledger records (`Trade`, `Transaction`, `CapitalAdjustment`) are what the ledger layer hands
to the analytics engine. Derived records (`PositionMetrics`, `ClosedTradeOutcome`,
`TradeMetrics`, `ClosedTradeMetrics`) are produced by the engine and recomputed on every read.

Derived records serialize to flat JSON with camelCase keys:

    metrics.model_dump(mode="json", by_alias=True)
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from trade_journal.constants import (
    DEFAULT_COMMISSION,
    MAX_NCFD,
    MAX_RATING,
    MIN_NCFD,
    MIN_RATING,
    UNSPECIFIED,
)

logger = structlog.get_logger()


class TransactionKind(str, Enum):
    """Ledger event kinds."""

    BUY = "buy"
    SELL_PARTIAL = "sell_partial"
    SELL_ALL = "sell_all"

    @property
    def is_sell(self) -> bool:
        return self is not TransactionKind.BUY


class TradeStatus(str, Enum):
    """Trade lifecycle state. Transitions active -> closed only."""

    ACTIVE = "active"
    CLOSED = "closed"


class TradeType(str, Enum):
    """Strategy tags a trade can be classified with."""

    BREAKOUT = "Breakout"
    SHORT_PIVOT = "Short Pivot"
    PARABOLIC_LONG = "Parabolic Long"
    DAY_TRADE = "Day Trade"
    EP = "EP"
    UNR = "UnR"


class TimeOfEntry(str, Enum):
    """Entry-timing buckets (opening-range minutes, end of day, other)."""

    ORB1 = "ORB1"
    ORB5 = "ORB5"
    ORB15 = "ORB15"
    ORB30 = "ORB30"
    ORB60 = "ORB60"
    EOD = "EOD"
    OTHER = "Other"


def _coerce_enum(enum_cls: type[Enum], value: Any, *, field: str) -> Any:
    """Map blank or unknown labels to None so they land in the Unspecified bucket."""
    if value is None or isinstance(value, enum_cls):
        return value
    label = str(value).strip()
    if not label or label == UNSPECIFIED:
        return None
    try:
        return enum_cls(label)
    except ValueError:
        logger.warning(
            "Unknown classification label; treating as unspecified", field=field, value=label
        )
        return None


class _Record(BaseModel):
    """Base for immutable records serialized with camelCase aliases."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class Transaction(_Record):
    """An atomic ledger event (buy, partial sell, full sell)."""

    id: int
    trade_id: int
    kind: TransactionKind
    price: float = Field(gt=0)
    quantity: float = Field(gt=0)
    transaction_date: date
    commission: float = DEFAULT_COMMISSION
    """Informational fee; not netted into P&L."""
    notes: str | None = None

    @property
    def value(self) -> float:
        """Price times quantity."""
        return self.price * self.quantity


class Trade(_Record):
    """A position in one ticker, open or closed, with its chronological transactions."""

    id: int
    ticker: str
    status: TradeStatus = TradeStatus.ACTIVE
    rating: int | None = Field(default=None, ge=MIN_RATING, le=MAX_RATING)
    trade_type: TradeType | None = None
    ncfd: float | None = Field(default=None, ge=MIN_NCFD, le=MAX_NCFD)
    time_of_entry: TimeOfEntry | None = None
    transactions: tuple[Transaction, ...] = ()
    created_at: datetime | None = None

    @field_validator("ticker")
    @classmethod
    def _normalize_ticker(cls, value: str) -> str:
        ticker = value.strip().upper()
        if not ticker:
            raise ValueError("ticker must not be blank")
        return ticker

    @field_validator("trade_type", mode="before")
    @classmethod
    def _coerce_trade_type(cls, value: Any) -> Any:
        return _coerce_enum(TradeType, value, field="trade_type")

    @field_validator("time_of_entry", mode="before")
    @classmethod
    def _coerce_time_of_entry(cls, value: Any) -> Any:
        return _coerce_enum(TimeOfEntry, value, field="time_of_entry")

    @property
    def is_closed(self) -> bool:
        return self.status is TradeStatus.CLOSED

    @property
    def entry_date(self) -> date | None:
        """Date of the first transaction (transactions are chronological)."""
        return self.transactions[0].transaction_date if self.transactions else None

    @property
    def exit_date(self) -> date | None:
        """Date of the last transaction."""
        return self.transactions[-1].transaction_date if self.transactions else None


class CapitalAdjustment(_Record):
    """Manual correction to the account's capital (deposit, withdrawal, fix-up)."""

    id: int
    amount: float
    reason: str | None = None
    adjusted_at: datetime


class CapitalSettings(_Record):
    """Starting capital plus the manual adjustments recorded against it."""

    starting_capital: float = Field(gt=0)
    adjustments: tuple[CapitalAdjustment, ...] = ()

    @property
    def total_adjustments(self) -> float:
        return sum(adjustment.amount for adjustment in self.adjustments)

    @property
    def effective_capital(self) -> float:
        """Capital fed into equity, drawdown and statistics computations."""
        return self.starting_capital + self.total_adjustments


class PositionMetrics(_Record):
    """Current position derived from a trade's transactions (weighted-average cost)."""

    current_quantity: float
    average_buy_price: float
    total_cost: float
    total_bought: float
    total_sold: float


class ClosedTradeOutcome(_Record):
    """Realized outcome of a closed trade."""

    average_exit_price: float
    realized_pl: float = Field(alias="realizedPL")
    return_percentage: float
    entry_date: date | None
    exit_date: date | None


class TradeMetrics(_Record):
    """Flat record: trade classification fields plus its position metrics."""

    id: int
    ticker: str
    status: TradeStatus
    rating: int | None = None
    trade_type: TradeType | None = None
    ncfd: float | None = None
    time_of_entry: TimeOfEntry | None = None
    transactions: tuple[Transaction, ...] = ()

    current_quantity: float
    average_buy_price: float
    total_cost: float
    total_bought: float
    total_sold: float

    @property
    def first_transaction_date(self) -> date | None:
        return self.transactions[0].transaction_date if self.transactions else None

    @property
    def cost_basis(self) -> float:
        """Cost of everything bought over the trade's lifetime."""
        return self.average_buy_price * self.total_bought


class ClosedTradeMetrics(TradeMetrics):
    """Flat record for a closed trade: position metrics, outcome and R-metrics."""

    average_exit_price: float
    realized_pl: float = Field(alias="realizedPL")
    return_percentage: float
    entry_date: date | None
    exit_date: date | None
    account_value_at_entry: float | None = None
    r_multiple: float | None = None

    @property
    def is_win(self) -> bool:
        """Winning means strictly positive realized P&L; breakeven counts as a loss."""
        return self.realized_pl > 0
