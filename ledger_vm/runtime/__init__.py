"""
ledger_vm.runtime — runtime package

This package contains the deterministic execution engine and the host-facing
APIs (storage/events/abi) that contracts reach through `ledger_vm.stdlib`.

Convenience re-exports live here so callers can do:

    from ledger_vm.runtime import Engine, BlockEnv, TxEnv, Receipt
    from ledger_vm.runtime import abi, storage, events  # module namespaces

Notes
-----
- All code that can affect determinism is behind explicit APIs.
- No wall-clock I/O or system randomness is exposed here.
- Contract code imports only from `ledger_vm.stdlib`.
"""

from __future__ import annotations

from ..version import __version__  # re-export
from . import abi as abi
from . import events_api as events
from . import storage_api as storage
from .context import BlockEnv, CallFrame, TxEnv
from .engine import ContractHandle, Engine, derive_address
from .journal import Journal
from .receipts import Receipt, TxStatus

__all__ = [
    "__version__",
    "abi",
    "events",
    "storage",
    "BlockEnv",
    "CallFrame",
    "TxEnv",
    "ContractHandle",
    "Engine",
    "derive_address",
    "Journal",
    "Receipt",
    "TxStatus",
]
