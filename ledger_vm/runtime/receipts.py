"""
ledger_vm.runtime.receipts — transaction status enum and Receipt container.

TxStatus models the *logical* outcome of executing a transaction:
  - SUCCESS : Execution completed without a failure
  - REVERT  : Contract-triggered revert (explicit failure)
  - ERROR   : Host-level failure (unknown method, limits, bad context)

String forms:
  - str(TxStatus.SUCCESS) -> "success"   (good for logs)
  - TxStatus.SUCCESS.code  -> "SUCCESS"  (good for receipts)

`Receipt` is frozen for determinism and serializable with `.to_dict()`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from .events_api import Event, events_for_receipt


class TxStatus(str, Enum):
    SUCCESS = "success"
    REVERT = "revert"
    ERROR = "error"

    @property
    def code(self) -> str:
        """Uppercase code form, e.g., 'SUCCESS' / 'REVERT' / 'ERROR'."""
        return self.value.upper()

    @property
    def is_success(self) -> bool:
        return self is TxStatus.SUCCESS

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.value

    @classmethod
    def from_str(cls, s: str, *, default: Optional["TxStatus"] = None) -> "TxStatus":
        """
        Parse a status from a string (case/format-insensitive).

        Accepted values:
          - success: "success", "ok", "s", "passed"
          - revert : "revert", "rv", "reverted"
          - error  : "error", "err", "failed", "fail"
        """
        if not s:
            if default is not None:
                return default
            raise ValueError("empty status string")
        key = s.strip().lower().replace("-", "_")
        aliases = {
            "success": cls.SUCCESS,
            "ok": cls.SUCCESS,
            "s": cls.SUCCESS,
            "passed": cls.SUCCESS,
            "revert": cls.REVERT,
            "rv": cls.REVERT,
            "reverted": cls.REVERT,
            "error": cls.ERROR,
            "err": cls.ERROR,
            "failed": cls.ERROR,
            "fail": cls.ERROR,
        }
        if key in aliases:
            return aliases[key]
        if default is not None:
            return default
        raise ValueError(f"unknown tx status: {s!r}")


def _jsonable(v: Any) -> Any:
    if isinstance(v, (bytes, bytearray)):
        return "0x" + bytes(v).hex()
    if isinstance(v, (list, tuple)):
        return [_jsonable(x) for x in v]
    if isinstance(v, Mapping):
        return {str(k): _jsonable(x) for k, x in v.items()}
    return v


@dataclass(frozen=True)
class Receipt:
    """Result of executing one transaction (a deploy or a top-level call)."""

    status: TxStatus
    tx_hash: bytes
    sender: bytes
    to: Optional[bytes]
    method: str
    block_height: int
    timestamp: int
    return_value: Any = None
    logs: Tuple[Event, ...] = field(default_factory=tuple)
    error: Optional[Dict[str, Any]] = None

    @property
    def is_success(self) -> bool:
        return self.status.is_success

    @property
    def revert_reason(self) -> Optional[str]:
        if self.status is TxStatus.REVERT and self.error:
            return self.error.get("message")
        return None

    def events_named(self, name: bytes) -> Tuple[Event, ...]:
        return tuple(ev for ev in self.logs if ev.name == name)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "status": self.status.code,
            "txHash": "0x" + self.tx_hash.hex(),
            "from": "0x" + self.sender.hex(),
            "to": ("0x" + self.to.hex()) if self.to is not None else None,
            "method": self.method,
            "blockHeight": self.block_height,
            "timestamp": self.timestamp,
            "return": _jsonable(self.return_value),
            "logs": [
                {"address": ce.address, "name": ce.name, "args": list(ce.args)}
                for ce in events_for_receipt(self.logs)
            ],
        }
        if self.error is not None:
            out["error"] = _jsonable(self.error)
        return out


__all__ = ["TxStatus", "Receipt"]
