"""
ledger_vm — deterministic in-process contract VM (package marker and façade).

Contracts are plain Python modules that talk to the chain only through
`ledger_vm.stdlib`. The engine deploys them, runs each transaction atomically
(per-frame journal checkpoints, events dropped on revert) and returns receipts.

    from ledger_vm import Engine, derive_address

    eng = Engine()
    owner = derive_address("owner")
    token = eng.deploy("contracts.token.contract", owner, b"Share", b"SHARE", 18, 10**24)
    receipt = eng.execute(owner, token, "transfer", derive_address("alice"), 5)
    assert receipt.is_success
"""

from __future__ import annotations

from .config import VMConfig, load_config, reload_config
from .errors import (
    CallDepthExceeded,
    ContextError,
    ContractNotFound,
    InvalidAccess,
    LoadError,
    Revert,
    UnknownMethod,
    VmError,
)
from .runtime import BlockEnv, ContractHandle, Engine, Receipt, TxEnv, TxStatus, derive_address
from .version import __version__


def version() -> str:
    """Return the ledger_vm semantic version string."""
    return __version__


__all__ = [
    "__version__",
    "version",
    "VMConfig",
    "load_config",
    "reload_config",
    "Engine",
    "ContractHandle",
    "Receipt",
    "TxStatus",
    "BlockEnv",
    "TxEnv",
    "derive_address",
    "VmError",
    "Revert",
    "InvalidAccess",
    "ContextError",
    "ContractNotFound",
    "UnknownMethod",
    "CallDepthExceeded",
    "LoadError",
]
