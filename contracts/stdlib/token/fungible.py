# -*- coding: utf-8 -*-
"""
ERC-20-like fungible token library
==================================

Deterministic, float-free, storage-backed token logic. The API takes an
explicit `caller` for every mutation so the same functions serve a standalone
token contract (which passes `env.caller()`) and tests that drive the library
directly.

Highlights
----------
- Storage layout from `contracts.stdlib.token` prefixes.
- Events via `ledger_vm.stdlib.events`:
    - b"Transfer" { "from": bytes, "to": bytes, "value": int }
    - b"Approval" { "owner": bytes, "spender": bytes, "value": int }
- U256-checked math via `contracts.stdlib.math.safe_uint`.
- `transfer_from` leaves an allowance of INFINITE_ALLOWANCE untouched.

Public interface
----------------
init_metadata(name, symbol, decimals) -> None
name() / symbol() / decimals() / total_supply()
balance_of(addr) -> int
allowance(owner, spender) -> int
transfer(caller, to, amount) -> bool
approve(caller, spender, amount) -> bool
transfer_from(caller, owner, to, amount) -> bool
mint_to(to, amount) -> None          # no permission check; gate in the contract
burn(caller, amount) -> bool
"""

from __future__ import annotations

from typing import Final

from ledger_vm.stdlib import abi, events, storage

from ..math.safe_uint import u256_add, u256_sub
from . import (
    DEFAULT_DECIMALS,
    ERR_ALLOWANCE_LOW,
    ERR_INSUFFICIENT_BALANCE,
    EVT_APPROVAL,
    EVT_TRANSFER,
    INFINITE_ALLOWANCE,
    ZERO_ADDRESS,
    clamp_decimals,
    key_allow,
    key_balance,
    require_address,
    require_amount,
    require_name,
    require_symbol,
)

# ------------------------------------------------------------------------------
# Storage keys (metadata)
# ------------------------------------------------------------------------------

K_NAME: Final[bytes] = b"tok:meta:name"
K_SYMBOL: Final[bytes] = b"tok:meta:symbol"
K_DECIMALS: Final[bytes] = b"tok:meta:dec"
K_TOTAL: Final[bytes] = b"tok:meta:total"
K_INIT: Final[bytes] = b"tok:meta:inited"


def _get_u256(k: bytes) -> int:
    return storage.get_int(k)


def _set_u256(k: bytes, n: int) -> None:
    require_amount(n)
    storage.set_int(k, n)


# ------------------------------------------------------------------------------
# Metadata
# ------------------------------------------------------------------------------


def init_metadata(name: bytes, symbol: bytes, decimals: int = DEFAULT_DECIMALS) -> None:
    """One-time metadata setup. Reverts if already initialized."""
    if storage.exists(K_INIT):
        abi.revert(b"TOKEN:ALREADY_INIT")
    require_name(name)
    require_symbol(symbol)
    storage.set(K_NAME, bytes(name))
    storage.set(K_SYMBOL, bytes(symbol))
    storage.set_int(K_DECIMALS, clamp_decimals(decimals))
    storage.set(K_INIT, b"\x01")


def name() -> bytes:
    return storage.get(K_NAME) or b""


def symbol() -> bytes:
    return storage.get(K_SYMBOL) or b""


def decimals() -> int:
    return storage.get_int(K_DECIMALS)


def total_supply() -> int:
    return _get_u256(K_TOTAL)


# ------------------------------------------------------------------------------
# Views
# ------------------------------------------------------------------------------


def balance_of(addr: bytes) -> int:
    return _get_u256(key_balance(addr))


def allowance(owner: bytes, spender: bytes) -> int:
    return _get_u256(key_allow(owner, spender))


# ------------------------------------------------------------------------------
# Mutations (explicit caller)
# ------------------------------------------------------------------------------


def _move(src: bytes, dst: bytes, amount: int) -> None:
    src_key = key_balance(src)
    src_bal = _get_u256(src_key)
    if src_bal < amount:
        abi.revert(ERR_INSUFFICIENT_BALANCE)
    _set_u256(src_key, u256_sub(src_bal, amount))
    dst_key = key_balance(dst)
    _set_u256(dst_key, u256_add(_get_u256(dst_key), amount))


def transfer(caller: bytes, to: bytes, amount: int) -> bool:
    require_address(caller)
    require_address(to)
    require_amount(amount)

    if amount > 0:
        _move(caller, to, amount)
    events.emit(EVT_TRANSFER, {b"from": caller, b"to": to, b"value": amount})
    return True


def approve(caller: bytes, spender: bytes, amount: int) -> bool:
    require_address(caller)
    require_address(spender)
    require_amount(amount)

    _set_u256(key_allow(caller, spender), amount)
    events.emit(EVT_APPROVAL, {b"owner": caller, b"spender": spender, b"value": amount})
    return True


def transfer_from(caller: bytes, owner: bytes, to: bytes, amount: int) -> bool:
    """
    Spender (`caller`) moves `amount` from `owner` to `to` using its allowance.
    Zero-value transfers need no allowance and still emit Transfer.
    """
    require_address(caller)
    require_address(owner)
    require_address(to)
    require_amount(amount)

    if amount > 0:
        allow_key = key_allow(owner, caller)
        current = _get_u256(allow_key)
        if current < amount:
            abi.revert(ERR_ALLOWANCE_LOW)
        if current != INFINITE_ALLOWANCE:
            _set_u256(allow_key, u256_sub(current, amount))
        _move(owner, to, amount)

    events.emit(EVT_TRANSFER, {b"from": owner, b"to": to, b"value": amount})
    return True


def mint_to(to: bytes, amount: int) -> None:
    """Credit `amount` to `to` and grow total supply. No permission check."""
    require_address(to)
    require_amount(amount)
    if amount == 0:
        return
    _set_u256(K_TOTAL, u256_add(total_supply(), amount))
    to_key = key_balance(to)
    _set_u256(to_key, u256_add(_get_u256(to_key), amount))
    events.emit(EVT_TRANSFER, {b"from": ZERO_ADDRESS, b"to": to, b"value": amount})


def burn(caller: bytes, amount: int) -> bool:
    """Holder destroys their own tokens, shrinking total supply."""
    require_address(caller)
    require_amount(amount)
    if amount == 0:
        return True

    bal_key = key_balance(caller)
    cur = _get_u256(bal_key)
    if cur < amount:
        abi.revert(ERR_INSUFFICIENT_BALANCE)
    _set_u256(bal_key, u256_sub(cur, amount))
    _set_u256(K_TOTAL, u256_sub(total_supply(), amount))
    events.emit(EVT_TRANSFER, {b"from": caller, b"to": ZERO_ADDRESS, b"value": amount})
    return True


__all__ = [
    "init_metadata",
    "name",
    "symbol",
    "decimals",
    "total_supply",
    "balance_of",
    "allowance",
    "transfer",
    "approve",
    "transfer_from",
    "mint_to",
    "burn",
]
