# -*- coding: utf-8 -*-
"""
Fungible Token contract
-----------------------

ERC-20-like token deployed once per asset. All logic lives in
`contracts.stdlib.token.fungible`; this module binds it to `env.caller()`.

Views:
  - name() -> bytes
  - symbol() -> bytes
  - decimals() -> int
  - total_supply() -> int
  - balance_of(addr: bytes) -> int
  - allowance(owner: bytes, spender: bytes) -> int
  - owner() -> bytes
State-changing:
  - init(name: bytes, symbol: bytes, decimals: int, initial_supply: int) -> None
  - transfer(to: bytes, amount: int) -> bool
  - approve(spender: bytes, amount: int) -> bool
  - transfer_from(src: bytes, dst: bytes, amount: int) -> bool
  - mint(to: bytes, amount: int) -> bool           (owner-only)
  - burn(amount: int) -> bool                      (self-burn)

An allowance of 2**256-1 is infinite: `transfer_from` never decrements it.
"""
from __future__ import annotations

from ledger_vm.stdlib import env

from contracts.stdlib.access import ownable
from contracts.stdlib.token import fungible

CONTRACT_NAME = "FungibleToken"


def init(name: bytes, symbol: bytes, decimals: int, initial_supply: int) -> None:
    """Set metadata, make the deployer owner and mint `initial_supply` to them."""
    deployer = env.caller()
    fungible.init_metadata(name, symbol, decimals)
    ownable.init_owner(deployer)
    fungible.mint_to(deployer, initial_supply)


# ----------------------------
# Views
# ----------------------------

def name() -> bytes:
    return fungible.name()


def symbol() -> bytes:
    return fungible.symbol()


def decimals() -> int:
    return fungible.decimals()


def total_supply() -> int:
    return fungible.total_supply()


def balance_of(addr: bytes) -> int:
    return fungible.balance_of(addr)


def allowance(owner: bytes, spender: bytes) -> int:
    return fungible.allowance(owner, spender)


def owner() -> bytes:
    return ownable.get_owner() or b""


# ----------------------------
# Mutations
# ----------------------------

def transfer(to: bytes, amount: int) -> bool:
    return fungible.transfer(env.caller(), to, amount)


def approve(spender: bytes, amount: int) -> bool:
    return fungible.approve(env.caller(), spender, amount)


def transfer_from(src: bytes, dst: bytes, amount: int) -> bool:
    return fungible.transfer_from(env.caller(), src, dst, amount)


def mint(to: bytes, amount: int) -> bool:
    ownable.require_owner(env.caller())
    fungible.mint_to(to, amount)
    return True


def burn(amount: int) -> bool:
    return fungible.burn(env.caller(), amount)


__views__ = (
    "name",
    "symbol",
    "decimals",
    "total_supply",
    "balance_of",
    "allowance",
    "owner",
)

__all__ = [
    "name",
    "symbol",
    "decimals",
    "total_supply",
    "balance_of",
    "allowance",
    "owner",
    "transfer",
    "approve",
    "transfer_from",
    "mint",
    "burn",
]
