# -*- coding: utf-8 -*-
"""
contracts.stdlib.math.safe_uint
===============================

U256 arithmetic for contracts. The checked operators revert the calling
contract with a short tag:

    UINT:OOB        an operand is not an int in [0, U256_MAX]
    UINT:OVERFLOW   result above U256_MAX
    UINT:UNDERFLOW  subtraction below zero
"""
from __future__ import annotations

from typing import Final

from ledger_vm.stdlib import abi

from . import ERR_OOB, U256_MAX, require_u256

ERR_OVER: Final[bytes] = b"UINT:OVERFLOW"
ERR_UNDER: Final[bytes] = b"UINT:UNDERFLOW"


def _bounded(result: int) -> int:
    if result > U256_MAX:
        abi.revert(ERR_OVER)
    return result


def u256_add(x: int, y: int) -> int:
    require_u256(x, y)
    return _bounded(x + y)


def u256_sub(x: int, y: int) -> int:
    require_u256(x, y)
    if x < y:
        abi.revert(ERR_UNDER)
    return x - y


def u256_mul(x: int, y: int) -> int:
    require_u256(x, y)
    return _bounded(x * y)


__all__ = [
    "ERR_OOB", "ERR_OVER", "ERR_UNDER",
    "u256_add", "u256_sub", "u256_mul",
]
