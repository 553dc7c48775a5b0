from __future__ import annotations

import pytest

from ledger_vm.errors import (
    CallDepthExceeded,
    ContextError,
    ContractNotFound,
    LoadError,
    Revert,
    UnknownMethod,
)
from ledger_vm.runtime import Engine, TxStatus, derive_address
from ledger_vm.runtime import context as ctx

from .conftest import FAILING_INIT_SRC


# -----------------------------------------------------------------------------
# Deploy
# -----------------------------------------------------------------------------


def test_deploy_runs_init_and_mines_a_block(engine: Engine, counter: bytes) -> None:
    assert engine.is_contract(counter)
    assert engine.view(counter, "get") == 5
    assert engine.head.height == 1
    assert engine.head.timestamp == 1_700_000_001
    (receipt,) = engine.receipts
    assert receipt.method == "init"
    assert receipt.is_success


def test_deploy_address_is_deterministic_per_sender_and_nonce(vm_config, counter_path, accounts) -> None:
    a = Engine(vm_config)
    b = Engine(vm_config)
    first_a = a.deploy(counter_path, accounts["alice"], 0)
    first_b = b.deploy(counter_path, accounts["alice"], 0)
    second_a = a.deploy(counter_path, accounts["alice"], 0)
    assert first_a == first_b
    assert first_a != second_a
    assert len(first_a) == 20


def test_deploy_by_dotted_module_name(engine: Engine, accounts) -> None:
    token = engine.deploy("contracts.token.contract", accounts["alice"], b"Share", b"SHARE", 18, 1000)
    assert engine.view(token, "balance_of", accounts["alice"]) == 1000


def test_failed_init_leaves_no_contract(engine: Engine, write_contract, accounts) -> None:
    path = write_contract("failing", FAILING_INIT_SRC)
    with pytest.raises(Revert) as excinfo:
        engine.deploy(path, accounts["alice"])
    assert excinfo.value.reason == "constructor says no"
    assert engine.receipts[-1].status is TxStatus.REVERT
    assert not any(engine.is_contract(r.to) for r in engine.receipts)


def test_deploy_missing_source_raises_load_error(engine: Engine, tmp_path, accounts) -> None:
    with pytest.raises(LoadError):
        engine.deploy(tmp_path / "nope.py", accounts["alice"])
    with pytest.raises(LoadError):
        engine.deploy("not_a_real_package.contract", accounts["alice"])


def test_deploy_rejects_taken_address(engine: Engine, counter: bytes, counter_path, accounts) -> None:
    with pytest.raises(LoadError):
        engine.deploy(counter_path, accounts["bob"], 1, address=counter)


# -----------------------------------------------------------------------------
# Transactions
# -----------------------------------------------------------------------------


def test_execute_success_receipt(engine: Engine, counter: bytes, accounts) -> None:
    r = engine.execute(accounts["bob"], counter, "inc", 2)
    assert r.status is TxStatus.SUCCESS
    assert r.return_value == 7
    assert r.sender == accounts["bob"]
    assert r.block_height == 2
    assert r.timestamp == 1_700_000_002
    (ev,) = r.logs
    assert ev.name == b"Inc"
    assert ev.address == counter
    assert ev.args == {"n": 7, "who": accounts["bob"]}
    assert engine.nonce_of(accounts["bob"]) == 1


def test_revert_rolls_back_state_and_events(engine: Engine, counter: bytes, accounts) -> None:
    before = engine.storage_of(counter)
    r = engine.execute(accounts["bob"], counter, "inc_then_fail", 3)
    assert r.status is TxStatus.REVERT
    assert r.revert_reason == "nope"
    assert r.logs == ()
    assert r.error["code"] == "REVERT"
    assert engine.storage_of(counter) == before
    assert engine.view(counter, "get") == 5
    # The failed tx still consumed a nonce and a block.
    assert engine.nonce_of(accounts["bob"]) == 1
    assert engine.head.height == 2


def test_call_raises_after_rollback(engine: Engine, counter: bytes, accounts) -> None:
    with pytest.raises(Revert):
        engine.call(accounts["bob"], counter, "inc_then_fail", 1)
    assert engine.view(counter, "get") == 5


def test_python_exception_becomes_error_receipt(engine: Engine, counter: bytes, accounts) -> None:
    r = engine.execute(accounts["bob"], counter, "divide", 0)
    assert r.status is TxStatus.ERROR
    assert r.error["code"] == "CONTRACT_EXCEPTION"
    assert "ZeroDivisionError" in r.error["message"]
    with pytest.raises(ZeroDivisionError):
        engine.call(accounts["bob"], counter, "divide", 0)


def test_unknown_private_and_init_methods_are_not_callable(engine: Engine, counter: bytes, accounts) -> None:
    for method in ("missing", "_hidden", "init"):
        r = engine.execute(accounts["bob"], counter, method)
        assert r.status is TxStatus.ERROR
        assert r.error["code"] == "UNKNOWN_METHOD"
    with pytest.raises(UnknownMethod):
        engine.call(accounts["bob"], counter, "missing")


def test_call_to_empty_address(engine: Engine, accounts) -> None:
    r = engine.execute(accounts["bob"], derive_address("nobody"), "inc", 1)
    assert r.error["code"] == "CONTRACT_NOT_FOUND"
    with pytest.raises(ContractNotFound):
        engine.view(derive_address("nobody"), "get")


def test_view_never_mines_or_records(engine: Engine, counter: bytes, accounts) -> None:
    head = engine.head
    n = len(engine.receipts)
    # A state-changing method run as a view is rolled back.
    assert engine.view(counter, "inc", 10, sender=accounts["bob"]) == 15
    assert engine.view(counter, "get") == 5
    assert engine.head == head
    assert len(engine.receipts) == n
    assert engine.nonce_of(accounts["bob"]) == 0


def test_logs_filter_by_address_and_name(engine: Engine, counter: bytes, counter_path, accounts) -> None:
    other = engine.deploy(counter_path, accounts["bob"], 0)
    engine.call(accounts["alice"], counter, "inc", 1)
    engine.call(accounts["alice"], other, "inc", 1)
    engine.execute(accounts["alice"], other, "inc_then_fail", 1)
    assert len(engine.logs(name=b"Inc")) == 2
    assert [ev.address for ev in engine.logs(address=other)] == [other]


# -----------------------------------------------------------------------------
# Nested calls
# -----------------------------------------------------------------------------


def test_nested_call_sees_contract_as_caller(engine: Engine, counter: bytes, counter_path, accounts) -> None:
    other = engine.deploy(counter_path, accounts["bob"], 100)
    r = engine.execute(accounts["carol"], counter, "poke", other, 1)
    assert r.return_value == 101
    (ev,) = r.logs
    assert ev.address == other
    assert ev.args["who"] == counter


def test_caught_nested_revert_only_discards_inner_frame(engine: Engine, counter: bytes, counter_path, accounts) -> None:
    other = engine.deploy(counter_path, accounts["bob"], 100)
    r = engine.execute(accounts["carol"], counter, "poke_failing", other)
    assert r.is_success
    assert r.return_value == b"nope"
    assert r.logs == ()
    assert engine.view(other, "get") == 100


def test_call_depth_is_capped(engine: Engine, counter: bytes, accounts) -> None:
    assert engine.call(accounts["bob"], counter, "recurse", 3) == 3
    r = engine.execute(accounts["bob"], counter, "recurse", 50)
    assert r.status is TxStatus.ERROR
    assert r.error["code"] == "CALL_DEPTH"
    with pytest.raises(CallDepthExceeded):
        engine.call(accounts["bob"], counter, "recurse", 50)


# -----------------------------------------------------------------------------
# Block clock
# -----------------------------------------------------------------------------


def test_advance_time_applies_to_next_block(engine: Engine, counter: bytes, accounts) -> None:
    engine.advance_time(3600)
    assert engine.view(counter, "now") == 1_700_000_001 + 1 + 3600
    r = engine.execute(accounts["bob"], counter, "inc", 1)
    assert r.timestamp == 1_700_000_001 + 1 + 3600
    r2 = engine.execute(accounts["bob"], counter, "inc", 1)
    assert r2.timestamp == r.timestamp + 1


def test_set_next_timestamp_and_mine(engine: Engine, counter: bytes) -> None:
    engine.set_next_timestamp(1_800_000_000)
    head = engine.mine()
    assert head.timestamp == 1_800_000_000
    assert engine.mine(3).height == head.height + 3
    with pytest.raises(ContextError):
        engine.set_next_timestamp(1_800_000_000)
    with pytest.raises(ContextError):
        engine.advance_time(-1)


# -----------------------------------------------------------------------------
# Handles & context
# -----------------------------------------------------------------------------


def test_contract_handle_routes_views_and_transactions(engine: Engine, counter: bytes, accounts) -> None:
    h = engine.at(counter)
    assert h.get() == 5
    with pytest.raises(ContextError):
        h.inc(1)

    bob = h.connect(accounts["bob"])
    n = len(engine.receipts)
    assert bob.inc(2) == 7
    assert len(engine.receipts) == n + 1
    assert bob.who() == accounts["bob"]
    assert len(engine.receipts) == n + 1

    receipt = bob.transact("inc_then_fail", 1)
    assert receipt.revert_reason == "nope"
    with pytest.raises(AttributeError):
        bob._secret


def test_stdlib_outside_a_call_raises_context_error() -> None:
    from ledger_vm.stdlib import env, storage

    assert not ctx.is_active()
    with pytest.raises(ContextError):
        storage.get(b"k")
    with pytest.raises(ContextError):
        env.caller()


def test_block_env_fields_and_hex_coercion() -> None:
    env = ctx.BlockEnv(height=3, timestamp=1_700_000_000, chain_id=1)
    assert [f for f in env.__dataclass_fields__] == ["height", "timestamp", "chain_id"]
    with pytest.raises(ContextError):
        ctx.BlockEnv(height=-1, timestamp=0, chain_id=1)
    assert ctx.to_bytes("0xdead") == b"\xde\xad"
    assert ctx.to_bytes(bytearray(b"\x01")) == b"\x01"
    with pytest.raises(ContextError):
        ctx.to_bytes("zz")
