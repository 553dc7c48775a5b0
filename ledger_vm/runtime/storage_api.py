"""
ledger_vm.runtime.storage_api — host hooks for deterministic key/value storage.

This module provides the contract-facing storage primitives that
`ledger_vm.stdlib.storage` re-exports. Every call is bound to the address of
the contract currently executing (the top call frame), and all writes go
through the engine's journal so a revert discards them.

Public API (re-exported by stdlib.storage)
------------------------------------------
- get(key: bytes) -> Optional[bytes]
- set(key: bytes, value: bytes) -> None
- delete(key: bytes) -> None
- exists(key: bytes) -> bool
- get_int(key: bytes) -> int                     # big-endian, unsigned; 0 if absent
- set_int(key: bytes, value: int) -> None        # big-endian, unsigned, 32 bytes

Notes
-----
Length caps are read from the active execution's VMConfig.
"""

from __future__ import annotations

from typing import Optional

from ledger_vm.errors import InvalidAccess

from . import context

U256_MAX = 2**256 - 1


# --------------------------- Validation helpers --------------------------- #


def _check_key(key: bytes, max_len: int) -> bytes:
    if not isinstance(key, (bytes, bytearray)):
        raise InvalidAccess("storage key must be bytes", context={"py_type": type(key).__name__})
    if len(key) == 0:
        raise InvalidAccess("storage key must be non-empty")
    if len(key) > max_len:
        raise InvalidAccess("storage key too long", context={"len": len(key), "max": max_len})
    return bytes(key)


def _check_value(value: bytes, max_len: int) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise InvalidAccess("storage value must be bytes", context={"py_type": type(value).__name__})
    if len(value) > max_len:
        raise InvalidAccess("storage value too long", context={"len": len(value), "max": max_len})
    return bytes(value)


def _bound():
    ex = context.current()
    return ex, ex.frame.address


# ------------------------------ Public API ------------------------------- #


def get(key: bytes) -> Optional[bytes]:
    ex, addr = _bound()
    k = _check_key(key, ex.config.max_storage_key_bytes)
    return ex.journal.storage_get(addr, k)


def set(key: bytes, value: bytes) -> None:  # noqa: A001 - mirrors stdlib.storage.set
    ex, addr = _bound()
    k = _check_key(key, ex.config.max_storage_key_bytes)
    v = _check_value(value, ex.config.max_storage_value_bytes)
    ex.journal.storage_set(addr, k, v)


def delete(key: bytes) -> None:
    ex, addr = _bound()
    k = _check_key(key, ex.config.max_storage_key_bytes)
    ex.journal.storage_delete(addr, k)


def exists(key: bytes) -> bool:
    return get(key) is not None


def get_int(key: bytes) -> int:
    v = get(key)
    return int.from_bytes(v, "big") if v else 0


def set_int(key: bytes, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAccess("set_int expects int", context={"py_type": type(value).__name__})
    if value < 0 or value > U256_MAX:
        raise InvalidAccess("set_int value outside u256", context={"bits": value.bit_length()})
    set(key, value.to_bytes(32, "big"))


__all__ = ["get", "set", "delete", "exists", "get_int", "set_int", "U256_MAX"]
