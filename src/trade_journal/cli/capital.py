"""Typer CLI commands for starting capital and capital adjustments."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 - Required at runtime for Typer introspection
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from trade_journal.cli._helpers import (
    format_signed_currency,
    load_journal_config,
    print_json,
    resolve_db_path,
)
from trade_journal.cli.utils import console, run_async
from trade_journal.data.repositories import CapitalRepository
from trade_journal.exceptions import JournalError
from trade_journal.journal import CapitalAdjustment, CapitalSettings

app = typer.Typer(help="Starting capital and manual capital adjustments.")


def capital_show(
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    db_path: Annotated[
        Path | None,
        typer.Option("--db", "-d", help="Path to SQLite database file.", show_default=False),
    ] = None,
) -> None:
    """Show starting capital, total adjustments and effective capital."""
    from trade_journal.cli.db import open_db_session

    path = resolve_db_path(db_path)
    default = load_journal_config().default_starting_capital

    async def _show() -> CapitalSettings:
        async with open_db_session(path) as session:
            return await CapitalRepository(session).get_capital_settings(default=default)

    settings = run_async(_show())

    if output_json:
        payload = settings.model_dump(mode="json", by_alias=True)
        payload["totalAdjustments"] = settings.total_adjustments
        payload["effectiveCapital"] = settings.effective_capital
        print_json(payload)
        return

    table = Table(title="Capital", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Starting Capital", f"${settings.starting_capital:,.2f}")
    table.add_row("Adjustments", format_signed_currency(settings.total_adjustments))
    table.add_row("Effective Capital", f"[bold]${settings.effective_capital:,.2f}[/bold]")
    console.print(table)


def capital_set(
    amount: Annotated[float, typer.Argument(help="Starting capital in dollars.")],
    db_path: Annotated[
        Path | None,
        typer.Option("--db", "-d", help="Path to SQLite database file.", show_default=False),
    ] = None,
) -> None:
    """Set the starting capital."""
    from trade_journal.cli.db import open_db_session

    path = resolve_db_path(db_path)

    async def _set() -> None:
        async with open_db_session(path) as session:
            try:
                await CapitalRepository(session).set_starting_capital(amount)
            except JournalError as e:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
                raise typer.Exit(1) from None
            await session.commit()

    run_async(_set())
    console.print(f"[green]✓[/green] Starting capital set to ${amount:,.2f}")


def capital_adjust(
    amount: Annotated[
        float, typer.Argument(help="Amount in dollars (negative for withdrawals).")
    ],
    reason: Annotated[
        str | None, typer.Option("--reason", "-r", help="Why the capital changed.")
    ] = None,
    db_path: Annotated[
        Path | None,
        typer.Option("--db", "-d", help="Path to SQLite database file.", show_default=False),
    ] = None,
) -> None:
    """Record a manual capital adjustment (deposit, withdrawal, correction)."""
    from trade_journal.cli.db import open_db_session

    path = resolve_db_path(db_path)

    async def _adjust() -> CapitalAdjustment:
        async with open_db_session(path) as session:
            try:
                adjustment = await CapitalRepository(session).add_adjustment(amount, reason)
            except JournalError as e:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
                raise typer.Exit(1) from None
            await session.commit()
            return adjustment

    adjustment = run_async(_adjust())
    console.print(
        f"[green]✓[/green] Recorded adjustment {adjustment.id}: "
        f"{format_signed_currency(adjustment.amount)}"
    )


def capital_adjustments(
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    db_path: Annotated[
        Path | None,
        typer.Option("--db", "-d", help="Path to SQLite database file.", show_default=False),
    ] = None,
) -> None:
    """List capital adjustments, oldest first."""
    from trade_journal.cli.db import open_db_session

    path = resolve_db_path(db_path)

    async def _list() -> list[CapitalAdjustment]:
        async with open_db_session(path) as session:
            return await CapitalRepository(session).list_adjustments()

    adjustments = run_async(_list())

    if output_json:
        print_json([adj.model_dump(mode="json", by_alias=True) for adj in adjustments])
        return

    if not adjustments:
        console.print("[yellow]No capital adjustments[/yellow]")
        return

    table = Table(title="Capital Adjustments", show_header=True)
    table.add_column("ID", style="dim", justify="right")
    table.add_column("When")
    table.add_column("Amount", justify="right")
    table.add_column("Reason")

    for adj in adjustments:
        table.add_row(
            str(adj.id),
            adj.adjusted_at.strftime("%Y-%m-%d %H:%M"),
            format_signed_currency(adj.amount),
            adj.reason or "",
        )

    console.print(table)
    total = sum(adj.amount for adj in adjustments)
    console.print(f"\nTotal Adjustments: {format_signed_currency(total)}")


def capital_remove_adjustment(
    adjustment_id: Annotated[int, typer.Argument(help="Adjustment ID.")],
    db_path: Annotated[
        Path | None,
        typer.Option("--db", "-d", help="Path to SQLite database file.", show_default=False),
    ] = None,
) -> None:
    """Delete a capital adjustment."""
    from trade_journal.cli.db import open_db_session

    path = resolve_db_path(db_path)

    async def _remove() -> None:
        async with open_db_session(path) as session:
            try:
                await CapitalRepository(session).delete_adjustment(adjustment_id)
            except JournalError as e:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
                raise typer.Exit(1) from None
            await session.commit()

    run_async(_remove())
    console.print(f"[green]✓[/green] Removed adjustment {adjustment_id}")


app.command("show")(capital_show)
app.command("set")(capital_set)
app.command("adjust")(capital_adjust)
app.command("adjustments")(capital_adjustments)
app.command("remove-adjustment")(capital_remove_adjustment)
