"""
Cross-contract calls.

    calls.call(token_addr, "transfer_from", owner, to, amount)

The callee sees the calling contract as `env.caller()`. The callee runs in its
own journal checkpoint: if it fails, its writes and events are dropped and the
failure propagates to the caller, which reverts as a whole unless it catches
the exception.
"""

from __future__ import annotations

from typing import Any

from ledger_vm.runtime import context
from ledger_vm.runtime.context import to_bytes


def call(address: bytes, method: str, *args: Any) -> Any:
    if not isinstance(method, str) or not method:
        raise TypeError("method must be a non-empty str")
    ex = context.current()
    return ex.invoke(to_bytes(address), method, args, caller=ex.frame.address)


__all__ = ["call"]
