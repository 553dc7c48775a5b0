from __future__ import annotations

from ledger_vm.runtime.storage_api import U256_MAX, delete, exists, get, get_int, set, set_int  # noqa: A004

__all__ = ["get", "set", "delete", "exists", "get_int", "set_int", "U256_MAX"]
