"""
ledger_vm.runtime.events_api — validated contract events and their receipt form.

A contract emits `(name: bytes, args: mapping)`. Names are 1..64 bytes; arg
keys are identifier-like ASCII (bytes keys are decoded); values are bytes,
bool, or ints that fit in 256 bits. Anything else raises InvalidAccess with
code "event_invalid" and aborts the emitting call.

Events land in the running transaction's log, tagged with the emitting
contract; the engine drops a frame's events when that frame fails.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, NoReturn, Sequence

from ledger_vm.errors import InvalidAccess

from . import context

MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64
MAX_BYTES_LEN = 4096
MAX_INT_BITS = 256

_KEY_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

ArgValue = Any


@dataclass(frozen=True)
class Event:
    address: bytes
    name: bytes
    args: Mapping[str, ArgValue]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": "0x" + self.address.hex(),
            "name": self.name.decode("ascii", errors="replace"),
            "args": {k: ("0x" + v.hex()) if isinstance(v, bytes) else v for k, v in self.args.items()},
        }


@dataclass(frozen=True)
class CanonicalEvent:
    """
    Receipt form of an event. `name` is 0x-hex of the name bytes; each arg is
    `{"k": key, "t": tag, "v": value}` with tag "b" (bytes as 0x-hex), "i"
    (int) or "z" (bool), in emission order.
    """

    address: str
    name: str
    args: Sequence[Mapping[str, Any]]


def _reject(message: str, where: str, **extra: Any) -> NoReturn:
    raise InvalidAccess(message, code="event_invalid", context={"where": where, **extra})


def _check_name(name: Any) -> bytes:
    if not isinstance(name, (bytes, bytearray)):
        _reject("event name must be bytes", "name_type")
    if not 0 < len(name) <= MAX_EVENT_NAME_BYTES:
        _reject("event name length out of range", "name_length", len=len(name))
    return bytes(name)


def _check_key(key: Any) -> str:
    if isinstance(key, (bytes, bytearray)):
        try:
            key = bytes(key).decode("ascii")
        except UnicodeDecodeError:
            _reject("event key must be ASCII", "key_ascii")
    if not isinstance(key, str):
        _reject("event key must be str or bytes", "key_type")
    if len(key) > MAX_KEY_LEN or not _KEY_RE.fullmatch(key):
        _reject("event key must be an identifier", "key_grammar", key=key[:MAX_KEY_LEN])
    return key


def _check_value(value: Any) -> ArgValue:
    if isinstance(value, (bytes, bytearray)):
        if len(value) > MAX_BYTES_LEN:
            _reject("event bytes arg too long", "value_bytes_length", len=len(value))
        return bytes(value)
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value.bit_length() > MAX_INT_BITS:
            _reject("event int arg out of range", "value_int_bits", bits=value.bit_length())
        return value
    _reject("unsupported event arg type", "value_type", py_type=type(value).__name__)


def make_event(address: bytes, name: bytes, args: Mapping[Any, Any]) -> Event:
    checked_name = _check_name(name)
    if not isinstance(args, Mapping):
        _reject("event args must be a mapping", "args_type")
    return Event(bytes(address), checked_name, {_check_key(k): _check_value(v) for k, v in args.items()})


def emit(name: bytes, args: Mapping[Any, Any]) -> None:
    """Record an event for the executing contract in the current transaction."""
    ex = context.current()
    cap = ex.config.max_logs_per_tx
    if len(ex.events) >= cap:
        raise InvalidAccess("too many logs in one transaction", context={"max": cap})
    ex.events.append(make_event(ex.frame.address, name, args))


def _encode_arg(key: str, value: ArgValue) -> Dict[str, Any]:
    if isinstance(value, bytes):
        return {"k": key, "t": "b", "v": "0x" + value.hex()}
    if isinstance(value, bool):
        return {"k": key, "t": "z", "v": value}
    return {"k": key, "t": "i", "v": value}


def events_for_receipt(logs: Iterable[Event]) -> List[CanonicalEvent]:
    return [
        CanonicalEvent(
            address="0x" + ev.address.hex(),
            name="0x" + ev.name.hex(),
            args=tuple(_encode_arg(k, v) for k, v in ev.args.items()),
        )
        for ev in logs
    ]


__all__ = [
    "Event",
    "CanonicalEvent",
    "make_event",
    "emit",
    "events_for_receipt",
    "MAX_EVENT_NAME_BYTES",
    "MAX_KEY_LEN",
    "MAX_BYTES_LEN",
    "MAX_INT_BITS",
]
