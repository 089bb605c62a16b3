"""SQLAlchemy ORM models for the trade ledger."""

from __future__ import annotations

from datetime import UTC, date, datetime

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from trade_journal.constants import DEFAULT_COMMISSION


def utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class TradeRecord(Base):
    """A position in one ticker. At most one active trade per ticker."""

    __tablename__ = "trades"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ticker: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(10), nullable=False, default="active")
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    trade_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    ncfd: Mapped[float | None] = mapped_column(Float, nullable=True)
    time_of_entry: Mapped[str | None] = mapped_column(String(16), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
    )

    # Relationships
    transactions: Mapped[list[TransactionRecord]] = relationship(
        "TransactionRecord",
        back_populates="trade",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TransactionRecord.id",
    )

    __table_args__ = (
        CheckConstraint("status IN ('active', 'closed')", name="ck_trades_status"),
        CheckConstraint(
            "rating IS NULL OR (rating >= 0 AND rating <= 5)", name="ck_trades_rating"
        ),
        Index("idx_trades_ticker", "ticker"),
        Index("idx_trades_status", "status"),
    )


class TransactionRecord(Base):
    """A buy or sell event belonging to a trade."""

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    trade_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("trades.id", ondelete="CASCADE"), nullable=False
    )
    kind: Mapped[str] = mapped_column(String(16), nullable=False)  # buy/sell_partial/sell_all
    price: Mapped[float] = mapped_column(Float, nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    commission: Mapped[float] = mapped_column(Float, default=DEFAULT_COMMISSION, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    # Relationships
    trade: Mapped[TradeRecord] = relationship("TradeRecord", back_populates="transactions")

    __table_args__ = (
        CheckConstraint("kind IN ('buy', 'sell_partial', 'sell_all')", name="ck_txn_kind"),
        Index("idx_transactions_trade", "trade_id"),
    )


class CapitalSetting(Base):
    """Named numeric setting (currently only `starting_capital`)."""

    __tablename__ = "capital_settings"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[float] = mapped_column(Float, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
    )


class CapitalAdjustmentRecord(Base):
    """Manual capital correction (deposit, withdrawal, fix-up)."""

    __tablename__ = "capital_adjustments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    adjusted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    __table_args__ = (Index("idx_capital_adjustments_adjusted_at", "adjusted_at"),)
