from __future__ import annotations

from typing import Any, Mapping

from ledger_vm.runtime import events_api as _rt

# Re-export types so tests and contracts can import them from stdlib.events
Event = _rt.Event
CanonicalEvent = _rt.CanonicalEvent


def emit(name: bytes, args: Mapping[Any, Any]) -> None:
    """
    Contract-facing emit:

        emit(b"Swapped", {b"caller": addr, b"input_amount": 100, b"output_amount": 1000})

    Keys may be bytes or str; the runtime stores them as str.
    """
    if not isinstance(name, (bytes, bytearray)):
        raise TypeError(f"event name must be bytes, got {type(name).__name__}")
    _rt.emit(bytes(name), args)


__all__ = ["Event", "CanonicalEvent", "emit"]
