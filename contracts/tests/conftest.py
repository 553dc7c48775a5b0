# -*- coding: utf-8 -*-
"""
contracts.tests.conftest
========================

Pytest fixtures for the token and ShareSwap contracts.

Every test gets a fresh in-process `ledger_vm.Engine` with a pinned chain id
and genesis time, plus stable labelled accounts (addresses come from
`derive_address(label)`, so they are identical across runs).

Usage (inside a test file):
    def test_swap_flow(engine, swap, funded, user, share, aalto):
        engine.call(user, swap, "swap", 100 * E18)
        assert engine.view(aalto, "balance_of", user) == 1000 * E18

`funded` mirrors a typical deployment: the swap holds 1,000,000 Aalto, the
user holds 100 Share and has granted the swap an infinite Share allowance.
"""
from __future__ import annotations

import os
from typing import Callable, Dict

import pytest

from contracts.share_swap import SwapParams, deploy_share_swap
from contracts.token import CONTRACT_MODULE as TOKEN_MODULE
from ledger_vm.config import VMConfig, load_config
from ledger_vm.runtime import Engine, derive_address
from ledger_vm.runtime.storage_api import U256_MAX

# Prefer UTC everywhere.
os.environ.setdefault("TZ", "UTC")

E18 = 10**18
TOKEN_SUPPLY = 100_000_000_000 * E18
SWAP_AALTO_FUNDING = 1_000_000 * E18
USER_SHARE_FUNDING = 100 * E18
GENESIS_TS = 1_700_000_000


@pytest.fixture
def vm_config() -> VMConfig:
    return load_config().with_overrides(chain_id=1337, genesis_timestamp=GENESIS_TS, block_interval=1)


@pytest.fixture
def engine(vm_config: VMConfig) -> Engine:
    return Engine(vm_config)


@pytest.fixture
def owner() -> bytes:
    return derive_address("owner")


@pytest.fixture
def user() -> bytes:
    return derive_address("user")


@pytest.fixture
def other_user() -> bytes:
    return derive_address("other-user")


@pytest.fixture
def treasury() -> bytes:
    return derive_address("treasury")


@pytest.fixture
def share(engine: Engine, owner: bytes) -> bytes:
    return engine.deploy(TOKEN_MODULE, owner, b"Share", b"SHARE", 18, TOKEN_SUPPLY)


@pytest.fixture
def aalto(engine: Engine, owner: bytes) -> bytes:
    return engine.deploy(TOKEN_MODULE, owner, b"Aalto", b"AALTO", 18, TOKEN_SUPPLY)


@pytest.fixture
def deploy_swap(engine: Engine, owner: bytes, share: bytes, aalto: bytes, treasury: bytes) -> Callable[..., bytes]:
    """Deploy a ShareSwap with optional SwapParams field overrides."""

    def _deploy(**overrides: int) -> bytes:
        return deploy_share_swap(engine, owner, share, aalto, treasury, SwapParams(**overrides))

    return _deploy


@pytest.fixture
def swap(deploy_swap: Callable[..., bytes]) -> bytes:
    return deploy_swap()


@pytest.fixture
def fund(engine: Engine, owner: bytes, share: bytes, aalto: bytes) -> Callable[..., None]:
    """fund(swap, user, share_amount=..., aalto_amount=..., approve=True)"""

    def _fund(
        swap_addr: bytes,
        holder: bytes,
        *,
        share_amount: int = USER_SHARE_FUNDING,
        aalto_amount: int = SWAP_AALTO_FUNDING,
        approve: bool = True,
    ) -> None:
        if aalto_amount:
            engine.call(owner, aalto, "transfer", swap_addr, aalto_amount)
        if share_amount:
            engine.call(owner, share, "transfer", holder, share_amount)
        if approve:
            engine.call(holder, share, "approve", swap_addr, U256_MAX)

    return _fund


@pytest.fixture
def funded(fund: Callable[..., None], swap: bytes, user: bytes) -> Dict[str, bytes]:
    fund(swap, user)
    return {"swap": swap, "user": user}
