# -*- coding: utf-8 -*-
"""
contracts.stdlib.access
=======================

Deterministic access-control helpers for Python contracts.

Helpers take `caller: bytes` explicitly so contracts plumb `env.caller()` from
their entrypoints. Storage layout:

- Owner: key `b"access:owner"` → address bytes (absent or empty when unset)

Events:

- "OwnershipTransferred" args: {"previous": bytes, "new": bytes}
"""
from __future__ import annotations

from typing import Final

OWNER_KEY: Final[bytes] = b"access:owner"
EVT_OWNERSHIP_TRANSFERRED: Final[bytes] = b"OwnershipTransferred"
ERR_NOT_OWNER: Final[bytes] = b"ACCESS:NOT_OWNER"
ERR_NEW_OWNER_EMPTY: Final[bytes] = b"ACCESS:NEW_OWNER_EMPTY"

from .ownable import (  # noqa: E402
    get_owner,
    init_owner,
    renounce_ownership,
    require_owner,
    transfer_ownership,
)

__all__ = [
    "OWNER_KEY",
    "EVT_OWNERSHIP_TRANSFERRED",
    "ERR_NOT_OWNER",
    "ERR_NEW_OWNER_EMPTY",
    "get_owner",
    "init_owner",
    "require_owner",
    "transfer_ownership",
    "renounce_ownership",
]
