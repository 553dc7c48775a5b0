# -*- coding: utf-8 -*-
"""
Fungible token contract (contracts.token.contract) on a live engine.

Covers metadata & supply after init, transfer/approve/transfer_from including
the infinite-allowance rule, owner-only mint, self-burn, and rollback on
failure.
"""
from __future__ import annotations

import pytest

from contracts.stdlib.token import INFINITE_ALLOWANCE, ZERO_ADDRESS
from contracts.token import CONTRACT_MODULE as TOKEN_MODULE
from ledger_vm.errors import Revert
from ledger_vm.runtime import TxStatus

SUPPLY = 1_000_000


@pytest.fixture
def token(engine, owner):
    return engine.deploy(TOKEN_MODULE, owner, b"Share", b"SHARE", 18, SUPPLY)


def test_init_sets_metadata_and_mints_to_deployer(engine, token, owner) -> None:
    assert engine.view(token, "name") == b"Share"
    assert engine.view(token, "symbol") == b"SHARE"
    assert engine.view(token, "decimals") == 18
    assert engine.view(token, "total_supply") == SUPPLY
    assert engine.view(token, "balance_of", owner) == SUPPLY
    assert engine.view(token, "owner") == owner

    init = engine.last_receipt
    (mint,) = init.events_named(b"Transfer")
    assert mint.args == {"from": ZERO_ADDRESS, "to": owner, "value": SUPPLY}
    assert len(init.events_named(b"OwnershipTransferred")) == 1


@pytest.mark.parametrize(
    "name,symbol",
    [(b"", b"SHARE"), (b"Share", b""), (b"Share", b"share token with spaces")],
)
def test_init_rejects_bad_metadata(engine, owner, name, symbol) -> None:
    with pytest.raises(Revert):
        engine.deploy(TOKEN_MODULE, owner, name, symbol, 18, SUPPLY)


def test_transfer_moves_balance_and_emits(engine, token, owner, user) -> None:
    r = engine.execute(owner, token, "transfer", user, 250)
    assert r.return_value is True
    assert engine.view(token, "balance_of", user) == 250
    assert engine.view(token, "balance_of", owner) == SUPPLY - 250
    (ev,) = r.logs
    assert ev.args == {"from": owner, "to": user, "value": 250}


def test_transfer_more_than_balance_reverts(engine, token, owner, user) -> None:
    r = engine.execute(user, token, "transfer", owner, 1)
    assert r.status is TxStatus.REVERT
    assert r.revert_reason == "TOKEN:INSUFFICIENT_BALANCE"
    assert engine.view(token, "balance_of", owner) == SUPPLY


def test_transfer_to_self_keeps_balance(engine, token, owner) -> None:
    engine.call(owner, token, "transfer", owner, 10)
    assert engine.view(token, "balance_of", owner) == SUPPLY


def test_bad_amount_and_address(engine, token, owner, user) -> None:
    assert engine.execute(owner, token, "transfer", user, -5).revert_reason == "TOKEN:BAD_AMOUNT"
    assert engine.execute(owner, token, "transfer", b"", 5).revert_reason == "TOKEN:BAD_ADDR"


def test_approve_and_transfer_from(engine, token, owner, user, other_user) -> None:
    r = engine.execute(owner, token, "approve", user, 100)
    (ev,) = r.logs
    assert ev.name == b"Approval"
    assert engine.view(token, "allowance", owner, user) == 100

    engine.call(user, token, "transfer_from", owner, other_user, 60)
    assert engine.view(token, "balance_of", other_user) == 60
    assert engine.view(token, "allowance", owner, user) == 40

    r = engine.execute(user, token, "transfer_from", owner, other_user, 41)
    assert r.revert_reason == "TOKEN:ALLOWANCE_LOW"
    assert engine.view(token, "allowance", owner, user) == 40


def test_infinite_allowance_is_never_decremented(engine, token, owner, user, other_user) -> None:
    engine.call(owner, token, "approve", user, INFINITE_ALLOWANCE)
    engine.call(user, token, "transfer_from", owner, other_user, 1_000)
    engine.call(user, token, "transfer_from", owner, other_user, 2_000)
    assert engine.view(token, "allowance", owner, user) == INFINITE_ALLOWANCE
    assert engine.view(token, "balance_of", other_user) == 3_000


def test_zero_value_transfer_from_needs_no_allowance(engine, token, owner, user, other_user) -> None:
    r = engine.execute(user, token, "transfer_from", owner, other_user, 0)
    assert r.is_success
    (ev,) = r.logs
    assert ev.args["value"] == 0


def test_transfer_from_with_allowance_but_no_balance(engine, token, owner, user, other_user) -> None:
    engine.call(other_user, token, "approve", user, 10)
    r = engine.execute(user, token, "transfer_from", other_user, owner, 5)
    assert r.revert_reason == "TOKEN:INSUFFICIENT_BALANCE"
    # The allowance decrement was rolled back with the failed move.
    assert engine.view(token, "allowance", other_user, user) == 10


def test_mint_is_owner_only(engine, token, owner, user) -> None:
    assert engine.execute(user, token, "mint", user, 5).revert_reason == "ACCESS:NOT_OWNER"
    engine.call(owner, token, "mint", user, 5)
    assert engine.view(token, "balance_of", user) == 5
    assert engine.view(token, "total_supply") == SUPPLY + 5


def test_burn_shrinks_supply(engine, token, owner) -> None:
    r = engine.execute(owner, token, "burn", 1_000)
    (ev,) = r.logs
    assert ev.args == {"from": owner, "to": ZERO_ADDRESS, "value": 1_000}
    assert engine.view(token, "total_supply") == SUPPLY - 1_000
    assert engine.execute(owner, token, "burn", SUPPLY).revert_reason == "TOKEN:INSUFFICIENT_BALANCE"


def test_tokens_are_independent(engine, token, owner, user) -> None:
    other = engine.deploy(TOKEN_MODULE, owner, b"Aalto", b"AALTO", 18, 7)
    engine.call(owner, token, "transfer", user, 3)
    assert engine.view(other, "balance_of", user) == 0
    assert engine.view(other, "total_supply") == 7
