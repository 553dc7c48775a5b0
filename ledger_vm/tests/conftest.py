from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable, Dict

import pytest

from ledger_vm.config import VMConfig, load_config
from ledger_vm.runtime import Engine, derive_address

# Small contract used across engine tests. Written to a temp file and loaded by
# path, the way operators deploy ad-hoc contracts.
COUNTER_SRC = textwrap.dedent(
    '''
    from ledger_vm.errors import Revert
    from ledger_vm.stdlib import abi, calls, env, events, storage

    __views__ = ("get", "now", "who")


    def init(start):
        storage.set_int(b"n", start)


    def inc(by):
        n = storage.get_int(b"n") + by
        storage.set_int(b"n", n)
        events.emit(b"Inc", {"n": n, "who": env.caller()})
        return n


    def inc_then_fail(by):
        inc(by)
        abi.revert(b"nope")


    def divide(x):
        return 10 // x


    def get():
        return storage.get_int(b"n")


    def now():
        return env.block_timestamp()


    def who():
        return env.caller()


    def poke(other, by):
        return calls.call(other, "inc", by)


    def poke_failing(other):
        try:
            calls.call(other, "inc_then_fail", 5)
        except Revert as e:
            storage.set(b"last_error", e.reason.encode())
        return storage.get(b"last_error")


    def recurse(depth):
        if depth == 0:
            return 0
        return calls.call(env.self_address(), "recurse", depth - 1) + 1


    def big_key():
        storage.set(b"k" * 1000, b"v")


    def spam(n):
        for i in range(n):
            events.emit(b"Spam", {"i": i})


    def _hidden():
        return 1
    '''
)

FAILING_INIT_SRC = textwrap.dedent(
    '''
    from ledger_vm.stdlib import abi


    def init():
        abi.revert(b"constructor says no")


    def ping():
        return 1
    '''
)


@pytest.fixture
def vm_config() -> VMConfig:
    return load_config().with_overrides(
        chain_id=1337,
        genesis_timestamp=1_700_000_000,
        block_interval=1,
        max_call_depth=8,
        max_logs_per_tx=16,
    )


@pytest.fixture
def engine(vm_config: VMConfig) -> Engine:
    return Engine(vm_config)


@pytest.fixture
def accounts() -> Dict[str, bytes]:
    return {label: derive_address(label) for label in ("alice", "bob", "carol")}


@pytest.fixture
def write_contract(tmp_path: Path) -> Callable[[str, str], Path]:
    def _write(name: str, src: str) -> Path:
        p = tmp_path / f"{name}.py"
        p.write_text(src, encoding="utf-8")
        return p

    return _write


@pytest.fixture
def counter_path(write_contract) -> Path:
    return write_contract("counter", COUNTER_SRC)


@pytest.fixture
def counter(engine: Engine, counter_path: Path, accounts) -> bytes:
    return engine.deploy(counter_path, accounts["alice"], 5)
