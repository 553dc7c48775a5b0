# -*- coding: utf-8 -*-
from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from contracts.tools import simulate
from ledger_vm import logging as vlog

SCENARIOS = Path(__file__).resolve().parents[1] / "tools" / "scenarios"

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    # `run` attaches handlers to the runner's (now closed) stderr.
    vlog.clear_context()
    for name in ("ledger_vm", "contracts"):
        lg = logging.getLogger(name)
        for h in list(lg.handlers):
            lg.removeHandler(h)
        lg.setLevel(logging.NOTSET)
        lg.propagate = True


def test_version() -> None:
    result = runner.invoke(simulate.app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.startswith("shareswap ")


def test_run_json(monkeypatch) -> None:
    result = runner.invoke(
        simulate.app, ["run", str(SCENARIOS / "epoch_cap.yaml"), "--json", "--log-level", "ERROR"]
    )
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["ok"] is True
    assert data["name"] == "epoch-cap"
    assert [s["status"] for s in data["steps"]] == ["success", "revert", "ok", "success", "success", "revert"]
    assert data["steps"][1]["reason"] == "Epoch Aalto limit reached"
    assert data["balances"]["alice"]["aalto"] == 1000


def test_run_tables() -> None:
    result = runner.invoke(
        simulate.app, ["run", str(SCENARIOS / "basic.yaml"), "--log-level", "ERROR"], env={"COLUMNS": "200"}
    )
    assert result.exit_code == 0, result.output
    assert "Scenario: basic" in result.stdout
    assert "Zero share amount" in result.stdout
    assert "Balances" in result.stdout


def test_run_exit_code_on_mismatch(tmp_path) -> None:
    p = tmp_path / "wrong.yaml"
    p.write_text(
        "name: wrong\n"
        "fund: {users: {eve: 10}}\n"
        "approve: [eve]\n"
        "steps:\n"
        "  - swap: {user: eve, amount: 10}\n"
        "    expect: Swap not enabled\n",
        encoding="utf-8",
    )
    result = runner.invoke(simulate.app, ["run", str(p), "--json", "--log-level", "ERROR"])
    assert result.exit_code == 1
    data = json.loads(result.stdout)
    assert data["ok"] is False
    assert data["steps"][0]["status"] == "success"


def test_run_malformed_scenario(tmp_path) -> None:
    p = tmp_path / "bad.yaml"
    p.write_text("steps:\n  - teleport: 5\n", encoding="utf-8")
    result = runner.invoke(simulate.app, ["run", str(p), "--json", "--log-level", "ERROR"])
    assert result.exit_code == 2
    data = json.loads(result.stdout)
    assert data["ok"] is False
    assert "unknown step" in data["error"]


@pytest.mark.parametrize(
    "body,needle",
    [
        ("params: {epoch_duration: 0}\n", "setup: SWAP:BAD_CONFIG"),
        ("fund: {users: [alice, bob]}\n", "fund.users"),
        ("supply: 10\nfund: {swap_aalto: 100}\n", "setup: TOKEN:INSUFFICIENT_BALANCE"),
        ("supply: 1e-3\n", "fractional amount"),
        ("steps:\n  - swap: [alice, 10]\n", "steps[0].swap"),
    ],
)
def test_run_bad_input_exits_2(tmp_path, body, needle) -> None:
    p = tmp_path / "bad.yaml"
    p.write_text(body, encoding="utf-8")
    result = runner.invoke(simulate.app, ["run", str(p), "--json", "--log-level", "ERROR"])
    assert result.exit_code == 2, result.output
    data = json.loads(result.stdout)
    assert data["ok"] is False
    assert needle in data["error"]


def test_config_json(monkeypatch) -> None:
    from ledger_vm.config import reload_config

    monkeypatch.setenv("LEDGER_VM_CHAIN_ID", "42")
    reload_config()
    try:
        result = runner.invoke(simulate.app, ["config", "--json"])
    finally:
        monkeypatch.delenv("LEDGER_VM_CHAIN_ID")
        reload_config()
    assert result.exit_code == 0
    assert json.loads(result.stdout)["chain_id"] == 42
