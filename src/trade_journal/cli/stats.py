"""Typer CLI command for aggregate trading statistics."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 - Required at runtime for Typer introspection
from typing import TYPE_CHECKING, Annotated

import typer
from rich.table import Table

from trade_journal.cli._helpers import (
    format_signed_currency,
    format_signed_percent,
    load_ledger,
    parse_date,
    print_json,
    resolve_db_path,
)
from trade_journal.cli.utils import console, run_async
from trade_journal.journal import (
    build_trade_metrics,
    compute_aggregate_statistics,
    compute_closed_trades_with_r_metrics,
    compute_equity_curve,
    filter_trades_by_date_range,
)

if TYPE_CHECKING:
    from trade_journal.journal import AggregateStatistics, CategoryWinRate, EquityPoint, Trade


def _win_rate_table(title: str, groups: dict[str, CategoryWinRate]) -> Table:
    table = Table(title=title, show_header=True)
    table.add_column("Group", style="cyan")
    table.add_column("Trades", justify="right")
    table.add_column("Wins", justify="right")
    table.add_column("Win Rate", justify="right")
    for label, group in groups.items():
        table.add_row(
            label, str(group.total_trades), str(group.winning_trades), f"{group.win_rate:.1f}%"
        )
    return table


def _print_stats(stats: AggregateStatistics, curve: list[EquityPoint]) -> None:
    portfolio = stats.portfolio

    summary = Table(title="Portfolio", show_header=False)
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value", justify="right")
    summary.add_row("Starting Capital", f"${stats.starting_capital:,.2f}")
    summary.add_row("Current Capital", f"${portfolio.current_capital:,.2f}")
    summary.add_row("Capital Growth", format_signed_currency(portfolio.capital_growth))
    summary.add_row("ROI", format_signed_percent(portfolio.roi_percentage))
    summary.add_row(
        "Trades",
        f"{portfolio.total_trades} ({portfolio.active_trades} active, "
        f"{portfolio.closed_trades} closed)",
    )
    summary.add_row("Win Rate", f"{portfolio.win_rate:.1f}%")
    summary.add_row("Realized P&L", format_signed_currency(portfolio.total_realized_pl))
    summary.add_row("Open Positions (at cost)", f"${portfolio.total_portfolio_value:,.2f}")
    summary.add_row(
        "Avg Trade Size",
        f"${portfolio.average_trade_size:,.2f} "
        f"({portfolio.average_trade_size_percentage:.1f}% of capital)",
    )
    if portfolio.best_trade is not None:
        summary.add_row(
            "Best Trade",
            f"{portfolio.best_trade.ticker} "
            f"{format_signed_currency(portfolio.best_trade.realized_pl)}",
        )
    if portfolio.worst_trade is not None:
        summary.add_row(
            "Worst Trade",
            f"{portfolio.worst_trade.ticker} "
            f"{format_signed_currency(portfolio.worst_trade.realized_pl)}",
        )
    summary.add_row("Biggest Win Streak", str(stats.streaks.biggest_win_streak))
    summary.add_row("Biggest Loss Streak", str(stats.streaks.biggest_loss_streak))
    summary.add_row(
        "Biggest Drawdown",
        f"{format_signed_currency(stats.drawdown.biggest_drawdown)} "
        f"({stats.drawdown.biggest_drawdown_percentage:.2f}%)",
    )
    summary.add_row(
        "Average Drawdown",
        f"{format_signed_currency(stats.drawdown.average_drawdown)} "
        f"({stats.drawdown.average_drawdown_percentage:.2f}%)",
    )
    console.print(summary)

    if portfolio.closed_trades == 0:
        console.print("\n[yellow]No closed trades in range[/yellow]")
        return

    console.print(_win_rate_table("Win Rate by NCFD", stats.win_rates.win_rate_by_ncfd))
    console.print(_win_rate_table("Win Rate by Type", stats.win_rates.win_rate_by_trade_type))
    console.print(
        _win_rate_table("Win Rate by Time of Entry", stats.win_rates.win_rate_by_time_of_entry)
    )

    if stats.best_combinations:
        combos = Table(title="Best Setups", show_header=True)
        combos.add_column("Type", style="magenta")
        combos.add_column("NCFD")
        combos.add_column("Time")
        combos.add_column("Trades", justify="right")
        combos.add_column("Win Rate", justify="right")
        for combo in stats.best_combinations:
            combos.add_row(
                combo.trade_type,
                combo.ncfd_range,
                combo.time_of_entry,
                str(combo.total_trades),
                f"{combo.win_rate:.1f}%",
            )
        console.print(combos)
    else:
        console.print("[dim]Not enough qualifying setups to rank combinations yet.[/dim]")

    monthly = Table(title="Monthly Performance", show_header=True)
    monthly.add_column("Month", style="cyan")
    monthly.add_column("Trades", justify="right")
    monthly.add_column("P&L", justify="right")
    monthly.add_column("Performance", justify="right")
    for month in stats.monthly.months:
        monthly.add_row(
            month.month,
            str(month.trade_count),
            format_signed_currency(month.total_pl),
            format_signed_percent(month.performance),
        )
    console.print(monthly)
    console.print(
        f"Average month: {format_signed_percent(stats.monthly.average_month_performance)}"
    )

    if curve:
        console.print(
            f"Equity: ${curve[0].absolute_value:,.2f} -> ${curve[-1].absolute_value:,.2f} "
            f"over {len(curve) - 1} closed trade(s)"
        )


def stats(
    start: Annotated[
        str | None,
        typer.Option("--from", help="Start date (YYYY-MM-DD), inclusive.", show_default=False),
    ] = None,
    end: Annotated[
        str | None,
        typer.Option(
            "--to", help="End date (YYYY-MM-DD), inclusive. Defaults to today.", show_default=False
        ),
    ] = None,
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
    """Show aggregate statistics: win rates, streaks, drawdowns and monthly performance."""
    from trade_journal.cli.db import open_db_session

    start_date = parse_date(start, option="--from") if start is not None else None
    end_date = parse_date(end, option="--to") if end is not None else None
    if start_date is None and end_date is not None:
        console.print("[red]Error:[/red] --to requires --from")
        raise typer.Exit(1)
    if start_date is not None and end_date is not None and start_date > end_date:
        console.print("[red]Error:[/red] Start date must be on or before end date")
        raise typer.Exit(1)

    path = resolve_db_path(db_path)

    async def _load() -> tuple[list[Trade], float]:
        async with open_db_session(path) as session:
            return await load_ledger(session, capital)

    trades, effective_capital = run_async(_load())

    active = [build_trade_metrics(trade) for trade in trades if not trade.is_closed]
    closed = compute_closed_trades_with_r_metrics(trades, effective_capital)
    active, closed = filter_trades_by_date_range(active, closed, start_date, end_date)

    aggregate = compute_aggregate_statistics(active, closed, effective_capital)
    curve = compute_equity_curve(closed, effective_capital)

    if output_json:
        payload = aggregate.model_dump(mode="json", by_alias=True)
        payload["equityCurve"] = [point.model_dump(mode="json", by_alias=True) for point in curve]
        print_json(payload)
        return

    _print_stats(aggregate, curve)
