"""
CLI application for the trade journal.

Provides commands for recording trades, managing capital, and reviewing statistics.
"""

from __future__ import annotations

import typer
from dotenv import find_dotenv, load_dotenv

from trade_journal.cli.capital import app as capital_app
from trade_journal.cli.stats import stats
from trade_journal.cli.trades import app as trades_app
from trade_journal.cli.utils import console

app = typer.Typer(
    name="journal",
    help="Trade journal CLI - record trades and analyze performance.",
    add_completion=False,
)

app.add_typer(trades_app, name="trades")
app.add_typer(capital_app, name="capital")
app.command("stats")(stats)


@app.callback()
def main() -> None:
    """Trade journal CLI."""
    load_dotenv(find_dotenv(usecwd=True))


@app.command()
def version() -> None:
    """Show version information."""
    from trade_journal import __version__

    console.print(f"trade-journal v{__version__}")
