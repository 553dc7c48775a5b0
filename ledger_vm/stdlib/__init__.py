"""
ledger_vm.stdlib
================

Contract-facing standard library surface.

Contracts do:

    from ledger_vm.stdlib import abi, calls, env, events, storage

Every function here resolves "the current contract" from the execution the
engine installed for the running call, so contract modules stay plain Python
with no globals of their own.

Exports
-------
- storage : get/set/delete/exists/get_int/set_int (scoped to the running contract)
- events  : emit(name: bytes, args: dict) -> None
- abi     : revert(reason), require(cond, reason)
- env     : caller(), self_address(), origin(), block_timestamp(), block_height(), chain_id()
- calls   : call(address, method, *args) -> Any (cross-contract call)
"""

from __future__ import annotations

from . import abi, calls, env, events, storage

__all__ = ("storage", "events", "abi", "env", "calls")
