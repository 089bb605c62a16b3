"""Typer CLI commands for recording and reviewing trades."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 - Required at runtime for Typer introspection
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from trade_journal.cli._helpers import (
    format_optional,
    format_signed_currency,
    format_signed_percent,
    load_ledger,
    parse_date,
    print_json,
    resolve_db_path,
)
from trade_journal.cli.utils import console, run_async
from trade_journal.constants import DEFAULT_COMMISSION, UNSPECIFIED
from trade_journal.data.repositories import TradeRepository
from trade_journal.exceptions import JournalError
from trade_journal.journal import (
    TimeOfEntry,
    Trade,
    TradeStatus,
    TradeType,
    build_trade_metrics,
    compute_closed_trades_with_r_metrics,
)

app = typer.Typer(help="Record buys and sells, and review trades.")


def _print_trade_summary(trade: Trade) -> None:
    metrics = build_trade_metrics(trade)
    status = "[green]active[/green]" if trade.status is TradeStatus.ACTIVE else "[dim]closed[/dim]"
    console.print(
        f"Trade {trade.id} {trade.ticker} ({status}): "
        f"{metrics.current_quantity:g} @ ${metrics.average_buy_price:,.2f} avg"
    )


def trades_buy(
    ticker: Annotated[str, typer.Argument(help="Ticker symbol.")],
    price: Annotated[float, typer.Option("--price", "-p", help="Fill price per share.")],
    quantity: Annotated[float, typer.Option("--qty", "-q", help="Number of shares.")],
    on: Annotated[
        str | None,
        typer.Option("--date", help="Transaction date (YYYY-MM-DD). Defaults to today."),
    ] = None,
    notes: Annotated[str | None, typer.Option("--notes", help="Free-form notes.")] = None,
    rating: Annotated[
        int | None, typer.Option("--rating", help="Setup rating (0-5), new trades only.")
    ] = None,
    trade_type: Annotated[
        TradeType | None,
        typer.Option("--type", help="Trade type, new trades only.", case_sensitive=False),
    ] = None,
    ncfd: Annotated[
        float | None, typer.Option("--ncfd", help="NCFD score (0-100), new trades only.")
    ] = None,
    time_of_entry: Annotated[
        TimeOfEntry | None,
        typer.Option("--time", help="Time of entry, new trades only.", case_sensitive=False),
    ] = None,
    commission: Annotated[
        float, typer.Option("--commission", help="Commission paid (informational).")
    ] = DEFAULT_COMMISSION,
    db_path: Annotated[
        Path | None,
        typer.Option("--db", "-d", help="Path to SQLite database file.", show_default=False),
    ] = None,
) -> None:
    """Record a buy. Adds to the ticker's active trade or opens a new one."""
    from trade_journal.cli.db import open_db_session

    transaction_date = parse_date(on)
    path = resolve_db_path(db_path)

    async def _buy() -> Trade:
        async with open_db_session(path) as session:
            try:
                trade = await TradeRepository(session).record_buy(
                    ticker,
                    price,
                    quantity,
                    transaction_date,
                    notes=notes,
                    rating=rating,
                    trade_type=trade_type,
                    ncfd=ncfd,
                    time_of_entry=time_of_entry,
                    commission=commission,
                )
            except JournalError as e:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
                raise typer.Exit(1) from None
            await session.commit()
            return trade

    trade = run_async(_buy())
    console.print(f"[green]✓[/green] Bought {quantity:g} {trade.ticker} @ ${price:,.2f}")
    _print_trade_summary(trade)


def trades_sell(
    trade_id: Annotated[int, typer.Argument(help="Trade ID.")],
    quantity: Annotated[float, typer.Option("--qty", "-q", help="Number of shares to sell.")],
    price: Annotated[float, typer.Option("--price", "-p", help="Fill price per share.")],
    on: Annotated[
        str | None,
        typer.Option("--date", help="Transaction date (YYYY-MM-DD). Defaults to today."),
    ] = None,
    notes: Annotated[str | None, typer.Option("--notes", help="Free-form notes.")] = None,
    db_path: Annotated[
        Path | None,
        typer.Option("--db", "-d", help="Path to SQLite database file.", show_default=False),
    ] = None,
) -> None:
    """Sell part of a position. The trade closes when nothing remains."""
    from trade_journal.cli.db import open_db_session

    transaction_date = parse_date(on)
    path = resolve_db_path(db_path)

    async def _sell() -> Trade:
        async with open_db_session(path) as session:
            try:
                trade = await TradeRepository(session).record_sell_partial(
                    trade_id, quantity, price, transaction_date, notes=notes
                )
            except JournalError as e:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
                raise typer.Exit(1) from None
            await session.commit()
            return trade

    trade = run_async(_sell())
    console.print(f"[green]✓[/green] Sold {quantity:g} {trade.ticker} @ ${price:,.2f}")
    _print_trade_summary(trade)


def trades_sell_all(
    trade_id: Annotated[int, typer.Argument(help="Trade ID.")],
    price: Annotated[float, typer.Option("--price", "-p", help="Fill price per share.")],
    on: Annotated[
        str | None,
        typer.Option("--date", help="Transaction date (YYYY-MM-DD). Defaults to today."),
    ] = None,
    notes: Annotated[str | None, typer.Option("--notes", help="Free-form notes.")] = None,
    db_path: Annotated[
        Path | None,
        typer.Option("--db", "-d", help="Path to SQLite database file.", show_default=False),
    ] = None,
) -> None:
    """Sell the whole open position and close the trade."""
    from trade_journal.cli.db import open_db_session

    transaction_date = parse_date(on)
    path = resolve_db_path(db_path)

    async def _sell_all() -> Trade:
        async with open_db_session(path) as session:
            try:
                trade = await TradeRepository(session).record_sell_all(
                    trade_id, price, transaction_date, notes=notes
                )
            except JournalError as e:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
                raise typer.Exit(1) from None
            await session.commit()
            return trade

    trade = run_async(_sell_all())
    console.print(f"[green]✓[/green] Closed trade {trade.id} ({trade.ticker}) @ ${price:,.2f}")


def trades_active(
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    db_path: Annotated[
        Path | None,
        typer.Option("--db", "-d", help="Path to SQLite database file.", show_default=False),
    ] = None,
) -> None:
    """List active trades with their current position."""
    from trade_journal.cli.db import open_db_session

    path = resolve_db_path(db_path)

    async def _active() -> list[Trade]:
        async with open_db_session(path) as session:
            return await TradeRepository(session).get_trades_ordered(TradeStatus.ACTIVE)

    active = [build_trade_metrics(trade) for trade in run_async(_active())]

    if output_json:
        print_json([trade.model_dump(mode="json", by_alias=True) for trade in active])
        return

    if not active:
        console.print("[yellow]No active trades[/yellow]")
        return

    table = Table(title="Active Trades", show_header=True)
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Ticker", style="cyan", no_wrap=True)
    table.add_column("Qty", justify="right")
    table.add_column("Avg Price", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("Type", style="magenta")
    table.add_column("Rating", justify="right")
    table.add_column("NCFD", justify="right")
    table.add_column("Entered")

    for trade in active:
        table.add_row(
            str(trade.id),
            trade.ticker,
            f"{trade.current_quantity:g}",
            f"${trade.average_buy_price:,.2f}",
            f"${trade.total_cost:,.2f}",
            trade.trade_type.value if trade.trade_type is not None else UNSPECIFIED,
            format_optional(trade.rating),
            format_optional(trade.ncfd, "{:g}"),
            format_optional(trade.first_transaction_date),
        )

    console.print(table)
    total = sum(trade.total_cost for trade in active)
    console.print(f"\nTotal Portfolio Value (at cost): ${total:,.2f}")


def trades_closed(
    capital: Annotated[
        float | None,
        typer.Option(
            "--capital",
            help="Override the stored starting capital (adjustments still apply).",
            show_default=False,
        ),
    ] = None,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    db_path: Annotated[
        Path | None,
        typer.Option("--db", "-d", help="Path to SQLite database file.", show_default=False),
    ] = None,
) -> None:
    """List closed trades with realized P&L and R-multiples."""
    from trade_journal.cli.db import open_db_session

    path = resolve_db_path(db_path)

    async def _load() -> tuple[list[Trade], float]:
        async with open_db_session(path) as session:
            return await load_ledger(session, capital)

    trades, effective_capital = run_async(_load())
    closed = compute_closed_trades_with_r_metrics(trades, effective_capital)

    if output_json:
        print_json([trade.model_dump(mode="json", by_alias=True) for trade in closed])
        return

    if not closed:
        console.print("[yellow]No closed trades[/yellow]")
        return

    table = Table(title="Closed Trades", show_header=True)
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Ticker", style="cyan", no_wrap=True)
    table.add_column("Entry")
    table.add_column("Exit")
    table.add_column("Avg Buy", justify="right")
    table.add_column("Avg Exit", justify="right")
    table.add_column("Realized P&L", justify="right")
    table.add_column("Return", justify="right")
    table.add_column("R", justify="right")

    for trade in closed:
        table.add_row(
            str(trade.id),
            trade.ticker,
            format_optional(trade.entry_date),
            format_optional(trade.exit_date),
            f"${trade.average_buy_price:,.2f}",
            f"${trade.average_exit_price:,.2f}",
            format_signed_currency(trade.realized_pl),
            format_signed_percent(trade.return_percentage),
            format_optional(
                trade.r_multiple * 100 if trade.r_multiple is not None else None, "{:.2f}%"
            ),
        )

    console.print(table)
    total = sum(trade.realized_pl for trade in closed)
    console.print(f"\nTotal Realized P&L: {format_signed_currency(total)}")


def trades_transactions(
    trade_id: Annotated[int, typer.Argument(help="Trade ID.")],
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    db_path: Annotated[
        Path | None,
        typer.Option("--db", "-d", help="Path to SQLite database file.", show_default=False),
    ] = None,
) -> None:
    """Show a trade's transactions in chronological order."""
    from trade_journal.cli.db import open_db_session

    path = resolve_db_path(db_path)

    async def _load() -> Trade | None:
        async with open_db_session(path) as session:
            return await TradeRepository(session).get_trade(trade_id)

    trade = run_async(_load())
    if trade is None:
        console.print(f"[red]Error:[/red] Trade not found: {trade_id}")
        raise typer.Exit(1)

    if output_json:
        print_json([txn.model_dump(mode="json", by_alias=True) for txn in trade.transactions])
        return

    table = Table(title=f"Transactions: {trade.ticker} (trade {trade.id})", show_header=True)
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Date")
    table.add_column("Kind", style="magenta")
    table.add_column("Qty", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("Notes", style="dim")

    for txn in trade.transactions:
        table.add_row(
            str(txn.id),
            txn.transaction_date.isoformat(),
            txn.kind.value,
            f"{txn.quantity:g}",
            f"${txn.price:,.2f}",
            f"${txn.value:,.2f}",
            txn.notes or "",
        )

    console.print(table)
    _print_trade_summary(trade)


def trades_edit_transaction(
    transaction_id: Annotated[int, typer.Argument(help="Transaction ID.")],
    price: Annotated[float, typer.Option("--price", "-p", help="Fill price per share.")],
    quantity: Annotated[float, typer.Option("--qty", "-q", help="Number of shares.")],
    on: Annotated[str, typer.Option("--date", help="Transaction date (YYYY-MM-DD).")],
    notes: Annotated[str | None, typer.Option("--notes", help="Free-form notes.")] = None,
    db_path: Annotated[
        Path | None,
        typer.Option("--db", "-d", help="Path to SQLite database file.", show_default=False),
    ] = None,
) -> None:
    """Edit a transaction's price, quantity, date and notes."""
    from trade_journal.cli.db import open_db_session

    transaction_date = parse_date(on)
    path = resolve_db_path(db_path)

    async def _edit() -> Trade:
        async with open_db_session(path) as session:
            try:
                trade = await TradeRepository(session).update_transaction(
                    transaction_id, price, quantity, transaction_date, notes=notes
                )
            except JournalError as e:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
                raise typer.Exit(1) from None
            await session.commit()
            return trade

    trade = run_async(_edit())
    console.print(f"[green]✓[/green] Updated transaction {transaction_id}")
    _print_trade_summary(trade)


def trades_delete_transaction(
    transaction_id: Annotated[int, typer.Argument(help="Transaction ID.")],
    db_path: Annotated[
        Path | None,
        typer.Option("--db", "-d", help="Path to SQLite database file.", show_default=False),
    ] = None,
) -> None:
    """Delete a transaction. A trade left without transactions is deleted too."""
    from trade_journal.cli.db import open_db_session

    path = resolve_db_path(db_path)

    async def _delete() -> bool:
        async with open_db_session(path) as session:
            try:
                trade_removed = await TradeRepository(session).delete_transaction(
                    transaction_id
                )
            except JournalError as e:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
                raise typer.Exit(1) from None
            await session.commit()
            return trade_removed

    trade_removed = run_async(_delete())
    console.print(f"[green]✓[/green] Deleted transaction {transaction_id}")
    if trade_removed:
        console.print("[dim]The trade had no transactions left and was deleted.[/dim]")


def trades_delete(
    trade_id: Annotated[int, typer.Argument(help="Trade ID.")],
    db_path: Annotated[
        Path | None,
        typer.Option("--db", "-d", help="Path to SQLite database file.", show_default=False),
    ] = None,
) -> None:
    """Delete a trade and all of its transactions."""
    from trade_journal.cli.db import open_db_session

    path = resolve_db_path(db_path)

    async def _delete() -> None:
        async with open_db_session(path) as session:
            try:
                await TradeRepository(session).delete_trade(trade_id)
            except JournalError as e:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
                raise typer.Exit(1) from None
            await session.commit()

    run_async(_delete())
    console.print(f"[green]✓[/green] Deleted trade {trade_id}")


app.command("buy")(trades_buy)
app.command("sell")(trades_sell)
app.command("sell-all")(trades_sell_all)
app.command("active")(trades_active)
app.command("closed")(trades_closed)
app.command("transactions")(trades_transactions)
app.command("edit-transaction")(trades_edit_transaction)
app.command("delete-transaction")(trades_delete_transaction)
app.command("delete")(trades_delete)
