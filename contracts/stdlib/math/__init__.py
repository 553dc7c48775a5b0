# -*- coding: utf-8 -*-
"""
contracts.stdlib.math
=====================

Deterministic, integer-only math primitives for Python contracts.

Contracts must avoid floats. This package holds the numeric envelope
(`U256_MAX`) and domain guards; `safe_uint` builds the checked operators on
top of them.

    from contracts.stdlib.math import U256_MAX, require_u256
    from contracts.stdlib.math.safe_uint import u256_add, u256_mul
"""
from __future__ import annotations

from typing import Final

from ledger_vm.stdlib import abi

U256_MAX: Final[int] = 2**256 - 1

ERR_OOB: Final[bytes] = b"UINT:OOB"


def is_u256(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= U256_MAX


def require_u256(*xs: int) -> None:
    """Revert with UINT:OOB unless every argument is an int in [0, U256_MAX]."""
    for x in xs:
        if not is_u256(x):
            abi.revert(ERR_OOB)


__all__ = ["U256_MAX", "ERR_OOB", "is_u256", "require_u256"]
