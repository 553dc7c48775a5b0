"""
contracts.share_swap — fixed-rate Share→Aalto swap with a rolling per-epoch cap.

Host-side helpers live here; the contract itself is `contracts.share_swap.contract`.

    from contracts.share_swap import SwapParams, deploy_share_swap

    swap = deploy_share_swap(engine, owner, share, aalto, treasury, SwapParams(epoch_duration=3600))
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional

CONTRACT_MODULE = "contracts.share_swap.contract"

# Non-recoverable sink for the burned half of every swap.
BURN_ADDRESS = bytes.fromhex("000000000000000000000000000000000000dEaD")

DEFAULT_AALTO_PER_SHARE = 10
DEFAULT_MAX_AALTO_PER_EPOCH = 100_000 * 10**18
DEFAULT_EPOCH_DURATION = 86_400

EVT_SWAPPED = b"Swapped"


class SwapFailure(str, Enum):
    """Swap failure kinds, valued by the revert reason the contract raises."""

    SWAP_DISABLED = "Swap not enabled"
    ZERO_AMOUNT = "Zero share amount"
    INSUFFICIENT_CALLER_BALANCE = "User Share balance too low"
    EPOCH_CAP_EXCEEDED = "Epoch Aalto limit reached"
    INSUFFICIENT_CONTRACT_OUTPUT_BALANCE = "Contract Aalto balance too low"

    @property
    def reason(self) -> bytes:
        return self.value.encode("ascii")

    @classmethod
    def from_reason(cls, reason: Optional[str | bytes]) -> Optional["SwapFailure"]:
        """Classify a revert reason; None if it is not a swap failure."""
        if reason is None:
            return None
        if isinstance(reason, (bytes, bytearray)):
            reason = bytes(reason).decode("utf-8", errors="replace")
        try:
            return cls(reason.strip())
        except ValueError:
            return None


@dataclass(frozen=True)
class SwapParams:
    aalto_per_share: int = DEFAULT_AALTO_PER_SHARE
    max_aalto_per_epoch: int = DEFAULT_MAX_AALTO_PER_EPOCH
    epoch_duration: int = DEFAULT_EPOCH_DURATION

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "SwapParams":
        d = dict(d or {})
        unknown = set(d) - {"aalto_per_share", "max_aalto_per_epoch", "epoch_duration"}
        if unknown:
            raise ValueError(f"unknown swap params: {sorted(unknown)}")
        return cls(**{k: int(v) for k, v in d.items()})

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


def deploy_share_swap(
    engine: Any,
    deployer: bytes,
    share_token: bytes,
    aalto_token: bytes,
    treasury: bytes,
    params: Optional[SwapParams] = None,
) -> bytes:
    """Deploy the swap contract on `engine`; `deployer` becomes its owner."""
    p = params or SwapParams()
    return engine.deploy(
        CONTRACT_MODULE,
        deployer,
        share_token,
        aalto_token,
        treasury,
        p.aalto_per_share,
        p.max_aalto_per_epoch,
        p.epoch_duration,
    )


__all__ = [
    "CONTRACT_MODULE",
    "BURN_ADDRESS",
    "DEFAULT_AALTO_PER_SHARE",
    "DEFAULT_MAX_AALTO_PER_EPOCH",
    "DEFAULT_EPOCH_DURATION",
    "EVT_SWAPPED",
    "SwapFailure",
    "SwapParams",
    "deploy_share_swap",
]
