from __future__ import annotations

from typing import Any, Mapping, NoReturn, Optional

from ledger_vm.errors import Revert


def revert(reason: Any = b"revert", *, context: Optional[Mapping[str, Any]] = None) -> NoReturn:
    """Abort the current call; the engine rolls back its writes and events."""
    raise Revert(reason if isinstance(reason, (bytes, bytearray, str)) else str(reason), context=context)


def require(
    condition: bool,
    reason: Any = b"abi.require failed",
    *,
    context: Optional[Mapping[str, Any]] = None,
) -> None:
    """
    Simple assertion helper for contracts.

    Usage in contracts:

        abi.require(amount > 0, b"Zero share amount")
        abi.require(owner == caller, b"ACCESS:NOT_OWNER")
    """
    if condition:
        return
    revert(reason, context=context)


__all__ = ["revert", "require"]
