from __future__ import annotations

from ledger_vm.runtime.abi import require, revert

__all__ = ["revert", "require"]
