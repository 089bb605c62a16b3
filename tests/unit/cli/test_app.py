from __future__ import annotations

import json
import runpy
import sys
from unittest.mock import patch

import pytest

from trade_journal.cli import app
from trade_journal.config import DB_PATH_ENV_VAR, STARTING_CAPITAL_ENV_VAR


def _invoke_ok(runner, args: list[str]):
    result = runner.invoke(app, args)
    assert result.exit_code == 0, result.stdout
    return result


def _json(runner, args: list[str]):
    return json.loads(_invoke_ok(runner, [*args, "--json"]).stdout)


def _seed_round_trips(runner, db_path: str) -> None:
    _invoke_ok(
        runner,
        ["trades", "buy", "AAPL", "--price", "150", "--qty", "10", "--date", "2025-11-01",
         "--type", "Breakout", "--ncfd", "35", "--time", "ORB5", "--rating", "4",
         "--db", db_path],
    )  # fmt: skip
    _invoke_ok(
        runner,
        ["trades", "sell-all", "1", "--price", "155", "--date", "2025-11-02", "--db", db_path],
    )
    _invoke_ok(
        runner,
        ["trades", "buy", "TSLA", "--price", "250", "--qty", "5", "--date", "2025-11-02",
         "--db", db_path],
    )  # fmt: skip
    _invoke_ok(
        runner,
        ["trades", "sell-all", "2", "--price", "245", "--date", "2025-11-03", "--db", db_path],
    )


def test_version(runner) -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "trade-journal v0.1.0" in result.stdout


def test_module_entrypoint_executes() -> None:
    with (
        patch.object(sys, "argv", ["journal"]),
        pytest.raises(SystemExit) as exc,
    ):
        runpy.run_module("trade_journal.cli.__main__", run_name="__main__")
    assert exc.value.code == 2


# ============================================================================
# trades
# ============================================================================
def test_buy_then_active_lists_position(runner, db_path) -> None:
    result = _invoke_ok(
        runner,
        ["trades", "buy", "nvda", "--price", "100", "--qty", "10", "--date", "2025-11-01",
         "--db", db_path],
    )  # fmt: skip
    assert "Bought 10 NVDA" in result.stdout
    _invoke_ok(
        runner,
        ["trades", "buy", "NVDA", "--price", "130", "--qty", "20", "--date", "2025-11-02",
         "--db", db_path],
    )  # fmt: skip

    active = _json(runner, ["trades", "active", "--db", db_path])

    assert len(active) == 1
    assert active[0]["ticker"] == "NVDA"
    assert active[0]["currentQuantity"] == 30
    assert active[0]["averageBuyPrice"] == pytest.approx(120.0)

    table = _invoke_ok(runner, ["trades", "active", "--db", db_path])
    assert "NVDA" in table.stdout


def test_active_without_trades(runner, db_path) -> None:
    result = _invoke_ok(runner, ["trades", "active", "--db", db_path])
    assert "No active trades" in result.stdout


def test_closed_reports_realized_pl_and_r_multiple(runner, db_path) -> None:
    _seed_round_trips(runner, db_path)

    closed = _json(runner, ["trades", "closed", "--db", db_path])

    assert [trade["ticker"] for trade in closed] == ["AAPL", "TSLA"]
    assert closed[0]["realizedPL"] == pytest.approx(50.0)
    assert closed[0]["rMultiple"] == pytest.approx(0.005)
    assert closed[0]["tradeType"] == "Breakout"
    assert closed[1]["accountValueAtEntry"] == pytest.approx(10_050.0)

    table = _invoke_ok(runner, ["trades", "closed", "--db", db_path])
    assert "Closed Trades" in table.stdout


def test_closed_capital_override(runner, db_path) -> None:
    _seed_round_trips(runner, db_path)

    closed = _json(runner, ["trades", "closed", "--capital", "5000", "--db", db_path])

    assert closed[0]["accountValueAtEntry"] == pytest.approx(5_000.0)
    assert closed[0]["rMultiple"] == pytest.approx(0.01)


def test_partial_sell_and_oversell(runner, db_path) -> None:
    _invoke_ok(
        runner,
        ["trades", "buy", "AAPL", "--price", "100", "--qty", "10", "--date", "2025-11-01",
         "--db", db_path],
    )  # fmt: skip
    _invoke_ok(
        runner,
        ["trades", "sell", "1", "--qty", "4", "--price", "110", "--date", "2025-11-02",
         "--db", db_path],
    )  # fmt: skip

    result = runner.invoke(
        app,
        ["trades", "sell", "1", "--qty", "7", "--price", "110", "--date", "2025-11-02",
         "--db", db_path],
    )  # fmt: skip

    assert result.exit_code == 1
    assert "Error:" in result.stdout
    assert "exceeds current position" in result.stdout


def test_sell_unknown_trade_exits_with_error(runner, db_path) -> None:
    result = runner.invoke(app, ["trades", "sell-all", "42", "--price", "10", "--db", db_path])

    assert result.exit_code == 1
    assert "Trade not found: 42" in result.stdout


def test_invalid_date_exits_with_error(runner, db_path) -> None:
    result = runner.invoke(
        app,
        ["trades", "buy", "AAPL", "--price", "1", "--qty", "1", "--date", "yesterday",
         "--db", db_path],
    )  # fmt: skip

    assert result.exit_code == 1
    assert "Invalid --date" in result.stdout


def test_error_text_is_printed_literally(runner, db_path) -> None:
    result = runner.invoke(
        app,
        ["trades", "buy", "AAPL", "--price", "1", "--qty", "1", "--date", "[bold]2025",
         "--db", db_path],
    )  # fmt: skip

    assert result.exit_code == 1
    assert "[bold]2025" in result.stdout


def test_delete_transaction_of_closed_trade_is_rejected(runner, db_path) -> None:
    _seed_round_trips(runner, db_path)

    result = runner.invoke(app, ["trades", "delete-transaction", "1", "--db", db_path])

    assert result.exit_code == 1
    assert "would sell more than was bought" in result.stdout
    closed = _json(runner, ["trades", "closed", "--db", db_path])
    assert closed[0]["realizedPL"] == pytest.approx(50.0)


def test_transactions_edit_and_delete(runner, db_path) -> None:
    _invoke_ok(
        runner,
        ["trades", "buy", "AAPL", "--price", "100", "--qty", "10", "--date", "2025-11-01",
         "--db", db_path],
    )  # fmt: skip
    _invoke_ok(
        runner,
        ["trades", "buy", "AAPL", "--price", "90", "--qty", "10", "--date", "2025-11-02",
         "--notes", "add", "--db", db_path],
    )  # fmt: skip

    transactions = _json(runner, ["trades", "transactions", "1", "--db", db_path])
    assert [txn["quantity"] for txn in transactions] == [10, 10]
    assert transactions[1]["notes"] == "add"

    _invoke_ok(
        runner,
        ["trades", "edit-transaction", "2", "--price", "95", "--qty", "5", "--date",
         "2025-11-02", "--db", db_path],
    )  # fmt: skip
    transactions = _json(runner, ["trades", "transactions", "1", "--db", db_path])
    assert transactions[1]["price"] == pytest.approx(95.0)
    assert transactions[1]["quantity"] == 5

    result = _invoke_ok(runner, ["trades", "delete-transaction", "2", "--db", db_path])
    assert "Deleted transaction 2" in result.stdout
    assert "was deleted" not in result.stdout

    result = _invoke_ok(runner, ["trades", "delete-transaction", "1", "--db", db_path])
    assert "was deleted" in result.stdout

    missing = runner.invoke(app, ["trades", "transactions", "1", "--db", db_path])
    assert missing.exit_code == 1


def test_delete_trade(runner, db_path) -> None:
    _seed_round_trips(runner, db_path)

    _invoke_ok(runner, ["trades", "delete", "1", "--db", db_path])

    closed = _json(runner, ["trades", "closed", "--db", db_path])
    assert [trade["ticker"] for trade in closed] == ["TSLA"]

    again = runner.invoke(app, ["trades", "delete", "1", "--db", db_path])
    assert again.exit_code == 1


def test_db_path_from_environment(runner, tmp_path, monkeypatch) -> None:
    env_db = tmp_path / "from-env.db"
    monkeypatch.setenv(DB_PATH_ENV_VAR, str(env_db))

    _invoke_ok(
        runner, ["trades", "buy", "AAPL", "--price", "1", "--qty", "1", "--date", "2025-01-02"]
    )

    assert env_db.exists()


# ============================================================================
# capital
# ============================================================================
def test_capital_set_adjust_and_show(runner, db_path) -> None:
    _invoke_ok(runner, ["capital", "set", "20000", "--db", db_path])
    _invoke_ok(runner, ["capital", "adjust", "1500", "--reason", "deposit", "--db", db_path])
    _invoke_ok(runner, ["capital", "adjust", "--db", db_path, "--", "-500"])

    settings = _json(runner, ["capital", "show", "--db", db_path])
    assert settings["startingCapital"] == pytest.approx(20_000.0)
    assert settings["totalAdjustments"] == pytest.approx(1_000.0)
    assert settings["effectiveCapital"] == pytest.approx(21_000.0)

    adjustments = _json(runner, ["capital", "adjustments", "--db", db_path])
    assert [adj["amount"] for adj in adjustments] == [1500.0, -500.0]
    assert adjustments[0]["reason"] == "deposit"

    _invoke_ok(runner, ["capital", "remove-adjustment", "2", "--db", db_path])
    settings = _json(runner, ["capital", "show", "--db", db_path])
    assert settings["effectiveCapital"] == pytest.approx(21_500.0)


def test_capital_show_uses_configured_default(runner, db_path, monkeypatch) -> None:
    monkeypatch.setenv(STARTING_CAPITAL_ENV_VAR, "7500")

    settings = _json(runner, ["capital", "show", "--db", db_path])

    assert settings["startingCapital"] == pytest.approx(7_500.0)


def test_capital_set_rejects_non_positive(runner, db_path) -> None:
    result = runner.invoke(app, ["capital", "set", "0", "--db", db_path])

    assert result.exit_code == 1
    assert "Error:" in result.stdout


def test_remove_unknown_adjustment(runner, db_path) -> None:
    result = runner.invoke(app, ["capital", "remove-adjustment", "9", "--db", db_path])

    assert result.exit_code == 1
    assert "Capital adjustment not found: 9" in result.stdout


# ============================================================================
# stats
# ============================================================================
def test_stats_end_to_end(runner, db_path) -> None:
    _seed_round_trips(runner, db_path)

    stats = _json(runner, ["stats", "--db", db_path])

    assert stats["startingCapital"] == pytest.approx(10_000.0)
    assert stats["portfolio"]["winRate"] == pytest.approx(50.0)
    assert stats["portfolio"]["totalRealizedPL"] == pytest.approx(25.0)
    assert stats["streaks"] == {"biggestWinStreak": 1, "biggestLossStreak": 1}
    assert stats["drawdown"]["biggestDrawdown"] == pytest.approx(-25.0)
    assert stats["winRates"]["winRateByNCFD"]["20-50"]["winningTrades"] == 1
    assert stats["bestCombinations"] == []
    assert [point["label"] for point in stats["equityCurve"]] == [
        "Starting Capital",
        "AAPL (+$50.00)",
        "TSLA (-$25.00)",
    ]

    table = _invoke_ok(runner, ["stats", "--db", db_path])
    assert "Portfolio" in table.stdout
    assert "Monthly Performance" in table.stdout


def test_stats_date_filter_and_adjustments(runner, db_path) -> None:
    _seed_round_trips(runner, db_path)
    _invoke_ok(runner, ["capital", "adjust", "2000", "--db", db_path])

    stats = _json(
        runner, ["stats", "--from", "2025-11-03", "--to", "2025-11-30", "--db", db_path]
    )

    assert stats["startingCapital"] == pytest.approx(12_000.0)
    assert stats["portfolio"]["closedTrades"] == 1
    assert stats["portfolio"]["worstTrade"]["ticker"] == "TSLA"


def test_stats_rejects_inverted_range(runner, db_path) -> None:
    result = runner.invoke(
        app, ["stats", "--from", "2025-12-01", "--to", "2025-11-01", "--db", db_path]
    )

    assert result.exit_code == 1
    assert "Start date must be on or before end date" in result.stdout


def test_stats_invalid_configured_capital(runner, db_path, monkeypatch) -> None:
    monkeypatch.setenv(STARTING_CAPITAL_ENV_VAR, "lots")

    result = runner.invoke(app, ["stats", "--db", db_path])

    assert result.exit_code == 1
    assert STARTING_CAPITAL_ENV_VAR in result.stdout


def test_stats_empty_ledger(runner, db_path) -> None:
    result = _invoke_ok(runner, ["stats", "--db", db_path])

    assert "No closed trades in range" in result.stdout
