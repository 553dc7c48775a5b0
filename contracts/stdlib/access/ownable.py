# -*- coding: utf-8 -*-
"""
contracts.stdlib.access.ownable
================================

Minimal **Ownable** helper:
- read the current owner (`get_owner`)
- initialize the owner once (`init_owner`)
- check that a caller is the owner (`require_owner`)
- hand over or give up ownership (`transfer_ownership`, `renounce_ownership`)

Typical usage
-------------
    from ledger_vm.stdlib import env
    from contracts.stdlib.access.ownable import init_owner, require_owner

    def init() -> None:
        init_owner(env.caller())

    def admin_only() -> None:
        require_owner(env.caller())
        ...

`transfer_ownership` rejects an empty `new_owner`; use `renounce_ownership`
to leave the contract without an owner.
"""
from __future__ import annotations

from typing import Optional

from ledger_vm.stdlib import abi, events, storage

from . import ERR_NEW_OWNER_EMPTY, ERR_NOT_OWNER, EVT_OWNERSHIP_TRANSFERRED, OWNER_KEY


def get_owner() -> Optional[bytes]:
    """Return the current owner address, or None if not set."""
    v = storage.get(OWNER_KEY)
    return v if v else None


def init_owner(owner: bytes) -> None:
    """Set the owner if none is set yet; never overwrites."""
    if get_owner() is None:
        storage.set(OWNER_KEY, bytes(owner))
        events.emit(EVT_OWNERSHIP_TRANSFERRED, {"previous": b"", "new": bytes(owner)})


def require_owner(caller: bytes) -> None:
    owner = get_owner()
    if owner is None or owner != caller:
        abi.revert(ERR_NOT_OWNER)


def transfer_ownership(caller: bytes, new_owner: bytes) -> None:
    require_owner(caller)
    if not isinstance(new_owner, (bytes, bytearray)) or len(new_owner) == 0:
        abi.revert(ERR_NEW_OWNER_EMPTY)
    previous = get_owner() or b""
    storage.set(OWNER_KEY, bytes(new_owner))
    events.emit(EVT_OWNERSHIP_TRANSFERRED, {"previous": previous, "new": bytes(new_owner)})


def renounce_ownership(caller: bytes) -> None:
    """After this, `require_owner` fails for everyone."""
    require_owner(caller)
    previous = get_owner() or b""
    storage.delete(OWNER_KEY)
    events.emit(EVT_OWNERSHIP_TRANSFERRED, {"previous": previous, "new": b""})


__all__ = [
    "get_owner",
    "init_owner",
    "require_owner",
    "transfer_ownership",
    "renounce_ownership",
]
