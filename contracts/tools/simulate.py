#!/usr/bin/env python3
"""
contracts.tools.simulate
========================

Replay a ShareSwap scenario on an in-process engine and print what happened:

- one row per step (status, revert reason, Aalto credited, epoch counter)
- final Share/Aalto balances of every account involved

By default prints rich tables; use --json for machine-readable output.
Exit code is 1 when a step does not match its `expect:` entry, 2 when the
scenario file is malformed or its setup (deploy, funding, approvals) fails.

Examples:
  shareswap-sim run contracts/tools/scenarios/epoch_cap.yaml
  shareswap-sim run my_scenario.yaml --json --log-level DEBUG
  shareswap-sim config
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from contracts.tools.scenario import ScenarioError, ScenarioReport, load_scenario, run_scenario
from ledger_vm import logging as vlog
from ledger_vm.config import load_config
from ledger_vm.version import __version__

app = typer.Typer(
    name="shareswap-sim",
    add_completion=False,
    no_args_is_help=True,
    help="Run ShareSwap scenarios on the deterministic ledger VM.",
)


def _to_jsonable(x: Any) -> Any:
    if isinstance(x, (bytes, bytearray)):
        return "0x" + bytes(x).hex()
    if isinstance(x, dict):
        return {k: _to_jsonable(v) for k, v in x.items()}
    if isinstance(x, (list, tuple)):
        return [_to_jsonable(v) for v in x]
    return x


def _render(console: Console, report: ScenarioReport) -> None:
    t = Table(title=f"Scenario: {report.name}", box=box.SIMPLE)
    t.add_column("#", justify="right")
    t.add_column("Step")
    t.add_column("Status")
    t.add_column("Reason")
    t.add_column("Aalto out", justify="right")
    t.add_column("Epoch total", justify="right")
    t.add_column("Time", justify="right")
    for s in report.steps:
        status = s.status if s.ok else f"[red]{s.status} (expected {s.expected})[/red]"
        t.add_row(
            str(s.index),
            s.detail,
            status,
            s.reason or "",
            "" if s.output is None else str(s.output),
            "" if s.epoch_output is None else str(s.epoch_output),
            "" if s.timestamp is None else str(s.timestamp),
        )
    console.print(t)

    b = Table(title="Balances", box=box.SIMPLE)
    b.add_column("Account")
    b.add_column("Share", justify="right")
    b.add_column("Aalto", justify="right")
    for label, bal in report.balances.items():
        b.add_row(label, str(bal["share"]), str(bal["aalto"]))
    console.print(b)


def _version_cb(value: bool) -> None:
    if value:
        typer.echo(f"shareswap {__version__}")
        raise typer.Exit(0)


@app.callback()
def _meta(
    version: bool = typer.Option(
        False, "--version", "-V", help="Print version and exit", callback=_version_cb, is_eager=True
    ),
) -> None:
    """Run ShareSwap scenarios on the deterministic ledger VM."""


@app.command("run")
def run_cmd(
    scenario: Path = typer.Argument(..., exists=True, dir_okay=False, help="Scenario YAML file"),
    json_out: bool = typer.Option(False, "--json", help="Print machine-readable JSON result"),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Override LEDGER_VM_LOG_LEVEL (DEBUG, INFO, WARNING...)"
    ),
) -> None:
    """
    Deploy Share, Aalto and ShareSwap, fund accounts, then replay the steps.
    """
    cfg = load_config()
    if log_level:
        cfg = cfg.with_overrides(log_level=log_level.upper())
    vlog.configure_from_config(cfg)

    try:
        sc = load_scenario(scenario)
        with vlog.trace_scope():
            vlog.bind(scenario=sc.name)
            report = run_scenario(sc, config=cfg)
    except ScenarioError as e:
        if json_out:
            typer.echo(json.dumps({"ok": False, "error": str(e), "file": str(scenario)}))
        else:
            typer.echo(f"[run] {scenario}: {e}", err=True)
        raise typer.Exit(2)

    if json_out:
        typer.echo(json.dumps(_to_jsonable(report.to_dict()), indent=2, sort_keys=True))
    else:
        _render(Console(), report)

    if not report.ok:
        raise typer.Exit(1)


@app.command("config")
def config_cmd(
    json_out: bool = typer.Option(False, "--json", help="Print machine-readable JSON"),
) -> None:
    """Show the effective VM configuration (LEDGER_VM_* environment)."""
    data: Dict[str, Any] = load_config().as_dict()
    if json_out:
        typer.echo(json.dumps(data, indent=2, sort_keys=True))
        return
    t = Table(title="ledger_vm config", box=box.SIMPLE)
    t.add_column("Key")
    t.add_column("Value", justify="right")
    for k, v in data.items():
        t.add_row(k, str(v))
    Console().print(t)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
