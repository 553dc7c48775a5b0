"""contracts.token — deployable ERC-20-like token (used for both Share and Aalto)."""

from __future__ import annotations

CONTRACT_MODULE = "contracts.token.contract"

__all__ = ["CONTRACT_MODULE"]
