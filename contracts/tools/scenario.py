"""
contracts.tools.scenario — load and replay ShareSwap scenarios on a fresh Engine.

A scenario is a YAML (or already-parsed) mapping:

    name: epoch-cap
    params:                       # SwapParams overrides (optional)
      max_aalto_per_epoch: 1500
      epoch_duration: 3600
    supply: 100000000000e18       # minted to the owner on each token (optional)
    fund:
      swap_aalto: 1000000e18      # Aalto sent to the swap contract
      users: {alice: 100e18, bob: 50}
    approve: [alice, bob]         # infinite Share allowance for the swap
    steps:
      - swap: {user: alice, amount: 100}
        expect: success           # success | revert | <exact revert reason>
      - advance: 3601             # seconds added to the next block
      - enable: false             # owner toggles the swap flag

Amounts are ints, or strings like "100e18" / "1_000".
Accounts are labels; addresses come from `derive_address(label)`.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import yaml

from contracts.share_swap import SwapFailure, SwapParams, deploy_share_swap
from contracts.token import CONTRACT_MODULE as TOKEN_MODULE
from ledger_vm import logging as vlog
from ledger_vm.config import VMConfig
from ledger_vm.errors import Revert, VmError
from ledger_vm.runtime import Engine, Receipt, derive_address
from ledger_vm.runtime.storage_api import U256_MAX

log = logging.getLogger(__name__)

DEFAULT_SUPPLY = 100_000_000_000 * 10**18
DEFAULT_SWAP_AALTO = 1_000_000 * 10**18

OWNER = "owner"
TREASURY = "treasury"


class ScenarioError(ValueError):
    """Malformed scenario document."""


def parse_amount(value: Any, *, where: str = "amount") -> int:
    if isinstance(value, bool):
        raise ScenarioError(f"{where}: expected an amount, got a boolean")
    if isinstance(value, int):
        amount = value
    elif isinstance(value, str):
        raw = value.strip().replace("_", "").lower()
        try:
            if "e" in raw and not raw.startswith("0x"):
                mant, exp = raw.split("e", 1)
                amount, power = int(mant), int(exp)
            else:
                amount, power = int(raw, 0), 0
        except ValueError as e:
            raise ScenarioError(f"{where}: cannot parse amount {value!r}") from e
        if power < 0:
            raise ScenarioError(f"{where}: fractional amount {value!r}")
        amount *= 10**power
    else:
        raise ScenarioError(f"{where}: expected int or string, got {type(value).__name__}")
    if amount < 0:
        raise ScenarioError(f"{where}: amount must be non-negative")
    return amount


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Step:
    action: str  # swap | advance | enable
    user: Optional[str] = None
    amount: int = 0
    enabled: bool = True
    expect: Optional[str] = None


@dataclass(frozen=True)
class Scenario:
    name: str
    params: SwapParams
    supply: int
    swap_aalto: int
    users: Dict[str, int]
    approve: Sequence[str]
    steps: Sequence[Step]

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any]) -> "Scenario":
        if not isinstance(doc, Mapping):
            raise ScenarioError("scenario must be a mapping")
        raw_params = _mapping(doc.get("params"), "params")
        try:
            params = SwapParams.from_dict(
                {k: parse_amount(v, where=f"params.{k}") for k, v in raw_params.items()}
            )
        except ScenarioError:
            raise
        except (AttributeError, TypeError, ValueError) as e:
            raise ScenarioError(f"params: {e}") from e

        fund = _mapping(doc.get("fund"), "fund")
        users = {
            str(label): parse_amount(amt, where=f"fund.users.{label}")
            for label, amt in _mapping(fund.get("users"), "fund.users").items()
        }
        approve = doc.get("approve") or ()
        if not isinstance(approve, (list, tuple)):
            raise ScenarioError("approve: expected a list of account labels")
        raw_steps = doc.get("steps") or []
        if not isinstance(raw_steps, (list, tuple)):
            raise ScenarioError("steps: expected a list")
        steps = [_parse_step(i, raw) for i, raw in enumerate(raw_steps)]
        return cls(
            name=str(doc.get("name", "scenario")),
            params=params,
            supply=parse_amount(doc.get("supply", DEFAULT_SUPPLY), where="supply"),
            swap_aalto=parse_amount(fund.get("swap_aalto", DEFAULT_SWAP_AALTO), where="fund.swap_aalto"),
            users=users,
            approve=tuple(str(u) for u in approve),
            steps=tuple(steps),
        )


def _mapping(value: Any, where: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ScenarioError(f"{where}: expected a mapping, got {type(value).__name__}")
    return value


def _parse_step(i: int, raw: Any) -> Step:
    where = f"steps[{i}]"
    if not isinstance(raw, Mapping):
        raise ScenarioError(f"{where}: expected a mapping")
    expect = raw.get("expect")
    expect = None if expect is None else str(expect)
    if "swap" in raw:
        body = _mapping(raw["swap"], f"{where}.swap")
        if "user" not in body:
            raise ScenarioError(f"{where}.swap: missing 'user'")
        return Step(
            action="swap",
            user=str(body["user"]),
            amount=parse_amount(body.get("amount", 0), where=f"{where}.swap.amount"),
            expect=expect,
        )
    if "advance" in raw:
        return Step(action="advance", amount=parse_amount(raw["advance"], where=f"{where}.advance"))
    if "enable" in raw:
        if not isinstance(raw["enable"], bool):
            raise ScenarioError(f"{where}.enable: expected true/false")
        return Step(action="enable", enabled=raw["enable"], expect=expect)
    raise ScenarioError(f"{where}: unknown step {sorted(raw)}")


def load_scenario(path: Union[str, Path]) -> Scenario:
    p = Path(path)
    try:
        doc = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ScenarioError(f"{p}: invalid YAML: {e}") from e
    return Scenario.from_dict(doc or {})


# ---------------------------------------------------------------------------
# Replay
# ---------------------------------------------------------------------------


@dataclass
class StepResult:
    index: int
    action: str
    detail: str
    status: str
    reason: Optional[str] = None
    failure: Optional[str] = None
    output: Optional[int] = None
    epoch_output: Optional[int] = None
    timestamp: Optional[int] = None
    expected: Optional[str] = None
    ok: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ScenarioReport:
    name: str
    swap_address: bytes
    steps: List[StepResult] = field(default_factory=list)
    balances: Dict[str, Dict[str, int]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(s.ok for s in self.steps)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "swap": "0x" + self.swap_address.hex(),
            "ok": self.ok,
            "steps": [s.to_dict() for s in self.steps],
            "balances": self.balances,
        }


def _matches(expect: Optional[str], receipt: Receipt) -> bool:
    if expect is None:
        return True
    if expect == "success":
        return receipt.is_success
    if expect == "revert":
        return not receipt.is_success
    return receipt.revert_reason == expect


def _setup(engine: Engine, scenario: Scenario, owner: bytes, treasury: bytes) -> Tuple[bytes, bytes, bytes]:
    share = engine.deploy(TOKEN_MODULE, owner, b"Share", b"SHARE", 18, scenario.supply)
    aalto = engine.deploy(TOKEN_MODULE, owner, b"Aalto", b"AALTO", 18, scenario.supply)
    swap = deploy_share_swap(engine, owner, share, aalto, treasury, scenario.params)
    log.info("scenario deployed", extra={"swap": swap, "share": share, "aalto": aalto})

    engine.call(owner, aalto, "transfer", swap, scenario.swap_aalto)
    for label, amount in scenario.users.items():
        engine.call(owner, share, "transfer", derive_address(label), amount)
    for label in scenario.approve:
        engine.call(derive_address(label), share, "approve", swap, U256_MAX)
    return share, aalto, swap


def run_scenario(scenario: Scenario, *, config: Optional[VMConfig] = None) -> ScenarioReport:
    """
    Deploy both tokens and the swap, fund and approve, then replay the steps.

    A setup transaction that fails (bad params, funding above supply, ...)
    raises ScenarioError; failing steps are recorded in the report instead.
    """
    engine = Engine(config)
    owner = derive_address(OWNER)
    treasury = derive_address(TREASURY)

    try:
        share, aalto, swap = _setup(engine, scenario, owner, treasury)
    except Revert as e:
        raise ScenarioError(f"setup: {e.reason}") from e
    except VmError as e:
        raise ScenarioError(f"setup: {e.code}: {e.message}") from e

    report = ScenarioReport(name=scenario.name, swap_address=swap)
    for i, step in enumerate(scenario.steps):
        vlog.bind(step=i)
        if step.action == "advance":
            engine.advance_time(step.amount)
            report.steps.append(
                StepResult(index=i, action="advance", detail=f"+{step.amount}s", status="ok")
            )
            continue

        if step.action == "swap":
            receipt = engine.execute(derive_address(step.user or ""), swap, "swap", step.amount)
            detail = f"{step.user} swaps {step.amount}"
        else:
            receipt = engine.execute(owner, swap, "set_swap_enabled", step.enabled)
            detail = f"enabled={step.enabled}"

        failure = SwapFailure.from_reason(receipt.revert_reason)
        result = StepResult(
            index=i,
            action=step.action,
            detail=detail,
            status=receipt.status.value,
            reason=receipt.revert_reason,
            failure=failure.name if failure is not None else None,
            output=receipt.return_value if step.action == "swap" and receipt.is_success else None,
            epoch_output=engine.view(swap, "current_aalto_for_epoch"),
            timestamp=receipt.timestamp,
            expected=step.expect,
            ok=_matches(step.expect, receipt),
        )
        if not result.ok:
            log.warning("step did not match expectation", extra={"expected": step.expect, "status": result.status})
        report.steps.append(result)
    vlog.unbind("step")

    labels = [OWNER, TREASURY, *scenario.users]
    for label in labels:
        addr = derive_address(label)
        report.balances[label] = {
            "share": engine.view(share, "balance_of", addr),
            "aalto": engine.view(aalto, "balance_of", addr),
        }
    report.balances["burn"] = {
        "share": engine.view(share, "balance_of", engine.view(swap, "burn_address")),
        "aalto": 0,
    }
    report.balances["swap"] = {
        "share": engine.view(share, "balance_of", swap),
        "aalto": engine.view(aalto, "balance_of", swap),
    }
    return report


__all__ = [
    "ScenarioError",
    "Scenario",
    "Step",
    "StepResult",
    "ScenarioReport",
    "parse_amount",
    "load_scenario",
    "run_scenario",
]
