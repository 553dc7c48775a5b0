"""
ledger_vm.errors — typed exceptions for the contract VM.

The engine communicates failures via *typed exceptions* that are converted
into receipts and structured error payloads at higher layers. These classes
are pure-Python and dependency-free so low-level modules (journal, storage,
events) can raise them without import cycles.

Hierarchy
---------
VmError (base)
 ├─ Revert            : Contract-triggered revert (explicit failure, carries a reason)
 ├─ InvalidAccess     : Storage/event limits breached or forbidden operation
 ├─ ContextError      : Bad or missing execution context (BlockEnv/TxEnv/frames)
 ├─ ContractNotFound  : Call target has no deployed code
 ├─ UnknownMethod     : Method not exported by the target contract
 ├─ CallDepthExceeded : Nested contract calls went past the configured depth
 └─ LoadError         : Contract source could not be located or imported

Notes
-----
* `Revert` is a *semantic* failure of the call, not a host bug; it maps to a
  deterministic REVERT receipt.
* Every other subclass indicates misuse of the host API or a rules violation
  and maps to an ERROR receipt.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Union


class VmError(Exception):
    """
    Structured error used by the runtime.

    Attributes:
        code:    short machine-readable code string
        message: human-readable message
        context: optional extra fields for debugging / receipts
    """

    default_code = "VM_ERROR"

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code: str = code or self.default_code
        self.message: str = message
        self.context: Dict[str, Any] = dict(context or {})

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.context:
            return f"{self.code}: {self.message} ({self.context})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for receipts/logs."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.context:
            out["context"] = dict(self.context)
        return out


class Revert(VmError):
    """
    Contract-triggered revert.

    The reason is kept as text; contracts usually pass short ASCII byte tags
    (b"TOKEN:ALLOWANCE_LOW") or sentences (b"Swap not enabled").

    Usage:
        raise Revert(b"Zero share amount")
    """

    default_code = "REVERT"

    def __init__(
        self,
        reason: Union[str, bytes, bytearray] = "reverted",
        *,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if isinstance(reason, (bytes, bytearray)):
            reason = bytes(reason).decode("utf-8", errors="replace")
        super().__init__(str(reason), context=context)

    @property
    def reason(self) -> str:
        return self.message

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


class InvalidAccess(VmError):
    """
    Illegal access or forbidden operation under deterministic rules.

    Examples:
      - Storage key/value size limits exceeded
      - Malformed event names or arguments
      - Too many logs in one transaction
    """

    default_code = "INVALID_ACCESS"


class ContextError(VmError):
    """Validation or coercion failure for BlockEnv/TxEnv, or no active call."""

    default_code = "CONTEXT"


class ContractNotFound(VmError):
    default_code = "CONTRACT_NOT_FOUND"


class UnknownMethod(VmError):
    default_code = "UNKNOWN_METHOD"


class CallDepthExceeded(VmError):
    default_code = "CALL_DEPTH"


class LoadError(VmError):
    """Contract code could not be resolved into a module."""

    default_code = "LOAD_ERROR"


__all__ = [
    "VmError",
    "Revert",
    "InvalidAccess",
    "ContextError",
    "ContractNotFound",
    "UnknownMethod",
    "CallDepthExceeded",
    "LoadError",
]
