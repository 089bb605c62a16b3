"""Capital repository: starting capital and manual adjustments."""

from __future__ import annotations

import structlog
from sqlalchemy import select

from trade_journal.constants import DEFAULT_STARTING_CAPITAL
from trade_journal.data._converters import adjustment_from_record
from trade_journal.data.models import CapitalAdjustmentRecord, CapitalSetting
from trade_journal.data.repositories.base import BaseRepository
from trade_journal.exceptions import AdjustmentNotFoundError, LedgerError
from trade_journal.journal.models import CapitalAdjustment, CapitalSettings

logger = structlog.get_logger()

STARTING_CAPITAL_KEY = "starting_capital"


class CapitalRepository(BaseRepository[CapitalAdjustmentRecord]):
    """Repository for the stored starting capital and capital adjustments."""

    model = CapitalAdjustmentRecord

    async def get_starting_capital(self, default: float = DEFAULT_STARTING_CAPITAL) -> float:
        """Get the stored starting capital, or `default` if none was set."""
        setting = await self._session.get(CapitalSetting, STARTING_CAPITAL_KEY)
        return setting.value if setting is not None else default

    async def set_starting_capital(self, value: float) -> None:
        """
        Store the starting capital.

        Raises:
            LedgerError: If value is not positive.
        """
        if value <= 0:
            raise LedgerError("Starting capital must be greater than 0")

        setting = await self._session.get(CapitalSetting, STARTING_CAPITAL_KEY)
        if setting is None:
            self._session.add(CapitalSetting(name=STARTING_CAPITAL_KEY, value=value))
        else:
            setting.value = value
        await self._session.flush()
        logger.info("Set starting capital", value=value)

    async def add_adjustment(self, amount: float, reason: str | None = None) -> CapitalAdjustment:
        """
        Record a manual capital adjustment (positive deposit, negative withdrawal).

        Raises:
            LedgerError: If amount is zero.
        """
        if amount == 0:
            raise LedgerError("Adjustment amount must be non-zero")
        record = await self.add(CapitalAdjustmentRecord(amount=amount, reason=reason))
        logger.info("Added capital adjustment", adjustment_id=record.id, amount=amount)
        return adjustment_from_record(record)

    async def list_adjustments(self) -> list[CapitalAdjustment]:
        """List adjustments oldest first."""
        stmt = select(CapitalAdjustmentRecord).order_by(
            CapitalAdjustmentRecord.adjusted_at, CapitalAdjustmentRecord.id
        )
        result = await self._session.execute(stmt)
        return [adjustment_from_record(record) for record in result.scalars().all()]

    async def delete_adjustment(self, adjustment_id: int) -> None:
        """
        Delete an adjustment.

        Raises:
            AdjustmentNotFoundError: If the adjustment does not exist.
        """
        record = await self.get(adjustment_id)
        if record is None:
            raise AdjustmentNotFoundError(adjustment_id)
        await self.delete(record)
        logger.info("Deleted capital adjustment", adjustment_id=adjustment_id)

    async def get_capital_settings(
        self, default: float = DEFAULT_STARTING_CAPITAL
    ) -> CapitalSettings:
        """Get starting capital together with every adjustment."""
        return CapitalSettings(
            starting_capital=await self.get_starting_capital(default),
            adjustments=tuple(await self.list_adjustments()),
        )
