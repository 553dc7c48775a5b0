"""
ledger_vm.runtime.context — block/tx environments and the active execution.

`BlockEnv` and `TxEnv` are frozen, validated records the engine builds for
every transaction; contracts read them through `ledger_vm.stdlib.env`.
There is no wall clock here: `timestamp` is the block time the engine assigns.

The running `_Execution` (see `ledger_vm.runtime.engine`) is installed in a
ContextVar for the duration of a call. The contract-facing stdlib resolves
"current contract", "caller" and "current journal" through `current()`.
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Any, Optional, Union

from ledger_vm.errors import ContextError


def to_bytes(value: Union[bytes, bytearray, memoryview, str]) -> bytes:
    """Bytes-like values are copied; str is read as hex, with or without 0x."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if not isinstance(value, str):
        raise ContextError(f"expected bytes or hex str, got {type(value).__name__}")
    text = value.strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise ContextError(f"not a hex string: {value!r}") from e


def _uint(name: str, v: Any) -> int:
    if isinstance(v, bool) or not isinstance(v, int) or v < 0:
        raise ContextError(f"{name} must be a non-negative int", context={name: repr(v)})
    return v


@dataclass(frozen=True)
class BlockEnv:
    height: int
    timestamp: int
    chain_id: int

    def __post_init__(self) -> None:
        for name in ("height", "timestamp", "chain_id"):
            _uint(name, getattr(self, name))


@dataclass(frozen=True)
class TxEnv:
    """`sender` is the externally owned origin; `to` is the top-level target."""

    tx_hash: bytes
    sender: bytes
    to: Optional[bytes]
    nonce: int

    def __post_init__(self) -> None:
        _uint("nonce", self.nonce)
        if not self.sender:
            raise ContextError("tx sender must be non-empty")


@dataclass(frozen=True)
class CallFrame:
    """One entry of the call stack: which contract runs, and who called it."""

    address: bytes
    caller: bytes
    method: str
    depth: int


_ACTIVE: ContextVar[Optional[Any]] = ContextVar("ledger_vm_active_execution", default=None)


def current() -> Any:
    ex = _ACTIVE.get()
    if ex is None:
        raise ContextError("no active contract call")
    return ex


def activate(execution: Any) -> Token:
    return _ACTIVE.set(execution)


def deactivate(token: Token) -> None:
    _ACTIVE.reset(token)


def is_active() -> bool:
    return _ACTIVE.get() is not None


__all__ = ["BlockEnv", "TxEnv", "CallFrame", "to_bytes", "current", "activate", "deactivate", "is_active"]
