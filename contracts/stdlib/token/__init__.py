# -*- coding: utf-8 -*-
"""
contracts.stdlib.token
======================

Layout and validation shared by fungible token contracts. Nothing here reads
or writes storage; `fungible.py` does.

Storage:
    b"tok:bal:"   + holder                     -> U256 balance
    b"tok:allow:" + owner + b"|" + spender     -> U256 allowance

Events:
    b"Transfer" {"from", "to", "value"}       (mint/burn use ZERO_ADDRESS)
    b"Approval" {"owner", "spender", "value"}

An allowance equal to INFINITE_ALLOWANCE (2**256-1) is never decremented.
"""

from __future__ import annotations

from typing import Final

from ledger_vm.stdlib import abi

from ..math import U256_MAX, is_u256

BAL_PREFIX: Final[bytes] = b"tok:bal:"
ALLOW_PREFIX: Final[bytes] = b"tok:allow:"

EVT_TRANSFER: Final[bytes] = b"Transfer"
EVT_APPROVAL: Final[bytes] = b"Approval"

DEFAULT_DECIMALS: Final[int] = 18
MAX_DECIMALS: Final[int] = 36
INFINITE_ALLOWANCE: Final[int] = U256_MAX
ZERO_ADDRESS: Final[bytes] = bytes(20)

ERR_BAD_ADDR: Final[bytes] = b"TOKEN:BAD_ADDR"
ERR_BAD_AMOUNT: Final[bytes] = b"TOKEN:BAD_AMOUNT"
ERR_BAD_SYMBOL: Final[bytes] = b"TOKEN:BAD_SYMBOL"
ERR_BAD_NAME: Final[bytes] = b"TOKEN:BAD_NAME"
ERR_INSUFFICIENT_BALANCE: Final[bytes] = b"TOKEN:INSUFFICIENT_BALANCE"
ERR_ALLOWANCE_LOW: Final[bytes] = b"TOKEN:ALLOWANCE_LOW"


def require_address(addr: bytes) -> None:
    """Any non-empty bytes value is accepted; width is up to the host."""
    if not isinstance(addr, (bytes, bytearray)) or not addr:
        abi.revert(ERR_BAD_ADDR)


def require_amount(n: int) -> None:
    if not is_u256(n):
        abi.revert(ERR_BAD_AMOUNT)


def key_balance(addr: bytes) -> bytes:
    require_address(addr)
    return BAL_PREFIX + bytes(addr)


def key_allow(owner: bytes, spender: bytes) -> bytes:
    require_address(owner)
    require_address(spender)
    return b"".join((ALLOW_PREFIX, bytes(owner), b"|", bytes(spender)))


def is_printable_ascii(s: bytes) -> bool:
    return isinstance(s, (bytes, bytearray)) and len(s) > 0 and all(0x20 <= c <= 0x7E for c in s)


def require_symbol(sym: bytes) -> None:
    if not (is_printable_ascii(sym) and len(sym) <= 11):
        abi.revert(ERR_BAD_SYMBOL)


def require_name(name: bytes) -> None:
    if not (is_printable_ascii(name) and len(name) <= 64):
        abi.revert(ERR_BAD_NAME)


def clamp_decimals(n: int) -> int:
    return min(MAX_DECIMALS, max(0, int(n)))


__all__ = [
    "BAL_PREFIX",
    "ALLOW_PREFIX",
    "EVT_TRANSFER",
    "EVT_APPROVAL",
    "DEFAULT_DECIMALS",
    "MAX_DECIMALS",
    "INFINITE_ALLOWANCE",
    "ZERO_ADDRESS",
    "ERR_BAD_ADDR",
    "ERR_BAD_AMOUNT",
    "ERR_BAD_SYMBOL",
    "ERR_BAD_NAME",
    "ERR_INSUFFICIENT_BALANCE",
    "ERR_ALLOWANCE_LOW",
    "key_balance",
    "key_allow",
    "require_address",
    "require_amount",
    "require_symbol",
    "require_name",
    "is_printable_ascii",
    "clamp_decimals",
]
