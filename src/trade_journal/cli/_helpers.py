"""Shared helper functions for journal CLI commands."""

from __future__ import annotations

import json
from datetime import date
from typing import TYPE_CHECKING, Any

import typer
from rich.markup import escape

from trade_journal.cli.utils import console
from trade_journal.config import JournalConfig, load_config
from trade_journal.data.repositories import CapitalRepository, TradeRepository

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncSession

    from trade_journal.journal.models import Trade


def load_journal_config() -> JournalConfig:
    """Load configuration from the environment, exiting on invalid values.

    Raises:
        typer.Exit: If the environment holds an invalid setting.
    """
    try:
        return load_config()
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None


def resolve_db_path(db_path: Path | None) -> Path:
    """Use the `--db` flag when given, else `TRADE_JOURNAL_DB_PATH` or the default path."""
    if db_path is not None:
        return db_path
    return load_journal_config().db_path


def parse_date(value: str | None, *, option: str = "--date") -> date:
    """Parse a YYYY-MM-DD option value; missing values mean today.

    Raises:
        typer.Exit: If the value is not a valid ISO date.
    """
    if value is None:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        console.print(f"[red]Error:[/red] Invalid {option} value: {escape(str(e))}")
        console.print("[dim]Use YYYY-MM-DD format.[/dim]")
        raise typer.Exit(1) from None


def format_signed_currency(amount: float) -> str:
    """Format a dollar amount as a signed currency string with color.

    Args:
        amount: Amount in dollars (can be positive, negative, or zero).

    Returns:
        Formatted string with color markup.
    """
    value = f"${abs(amount):,.2f}"
    if amount > 0:
        return f"[green]+{value}[/green]"
    if amount < 0:
        return f"[red]-{value}[/red]"
    return value


def format_signed_percent(value: float) -> str:
    text = f"{value:.2f}%"
    if value > 0:
        return f"[green]+{text}[/green]"
    if value < 0:
        return f"[red]{text}[/red]"
    return text


def format_optional(value: float | int | None, fmt: str = "{}") -> str:
    return "-" if value is None else fmt.format(value)


def print_json(payload: Any) -> None:
    """Print a JSON payload to stdout."""
    typer.echo(json.dumps(payload, indent=2, default=str))


async def load_ledger(
    session: AsyncSession, capital: float | None
) -> tuple[list[Trade], float]:
    """Load every trade plus the capital base used for R-metrics and statistics.

    Args:
        session: Open database session.
        capital: Starting capital override; the stored (or configured default) starting
            capital is used when omitted. Manual adjustments are always added.

    Returns:
        Trades in ledger order and the effective capital.
    """
    config = load_journal_config()
    settings = await CapitalRepository(session).get_capital_settings(
        default=config.default_starting_capital
    )
    starting = capital if capital is not None else settings.starting_capital
    trades = await TradeRepository(session).get_trades_ordered()
    return trades, starting + settings.total_adjustments
