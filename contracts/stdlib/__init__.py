# -*- coding: utf-8 -*-
"""
contracts.stdlib
================

Reusable helpers for Python contracts. Everything here is deterministic and
reaches the chain only through `ledger_vm.stdlib` (storage/events/abi).

- math.safe_uint  checked U256 arithmetic (UINT:* revert tags)
- token           storage prefixes, event names, validation
- token.fungible  ERC-20-like balances/allowances with an explicit caller
- access.ownable  single-owner access control
"""
from __future__ import annotations

# Bump when stdlib layout/conventions change (not ABI of individual contracts).
__version__ = "0.1.0"

__all__ = ["__version__"]
