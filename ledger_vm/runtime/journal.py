"""
ledger_vm.runtime.journal — layered storage writes with nested checkpoints.

Committed state is a plain mapping `address -> {key: value}`. On top of it sits
a stack of layers; the bottom layer (the *root*) is always present and holds
the writes of the running transaction. Each layer is a flat dict keyed by
`(address, key)`; a `_TOMBSTONE` value records a deletion.

    j = Journal()
    j.begin()                       # one layer per call frame
    j.storage_set(addr, b"k", b"v")
    j.commit()                      # fold into the layer below
    j.commit()                      # root -> committed state

Reads walk the stack from the top and fall back to committed state. The engine
opens one layer per call frame, so a failing nested call drops only its own
writes; the transaction root is committed or cleared as a whole.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, MutableMapping, Optional, Tuple, Union

BytesLike = Union[bytes, bytearray, memoryview]
Base = MutableMapping[bytes, Dict[bytes, bytes]]
Slot = Tuple[bytes, bytes]

_TOMBSTONE = object()


def _as_bytes(x: BytesLike, what: str) -> bytes:
    if not isinstance(x, (bytes, bytearray, memoryview)):
        raise TypeError(f"{what} must be bytes-like, got {type(x).__name__}")
    return bytes(x)


class Journal:
    """Copy-on-write view over committed contract storage."""

    def __init__(self, base: Optional[Base] = None) -> None:
        self._base: Base = {} if base is None else base
        self._stack: List[Dict[Slot, object]] = [{}]

    # -- checkpoints ---------------------------------------------------------

    def depth(self) -> int:
        return len(self._stack)

    def begin(self) -> int:
        self._stack.append({})
        return len(self._stack)

    def commit(self) -> None:
        """Fold the top layer into the one below; the root folds into committed state."""
        top = self._stack.pop()
        if self._stack:
            self._stack[-1].update(top)
            return
        self._stack.append({})
        for (addr, key), value in top.items():
            account = self._base.setdefault(addr, {})
            if value is _TOMBSTONE:
                account.pop(key, None)
            else:
                account[key] = value  # type: ignore[assignment]
            if not account:
                del self._base[addr]

    def revert(self) -> None:
        """Drop the top layer; reverting the root just empties it."""
        if len(self._stack) == 1:
            self._stack[0] = {}
        else:
            self._stack.pop()

    # -- storage -------------------------------------------------------------

    def storage_get(self, address: BytesLike, key: BytesLike) -> Optional[bytes]:
        slot = (_as_bytes(address, "address"), _as_bytes(key, "key"))
        for layer in reversed(self._stack):
            if slot in layer:
                value = layer[slot]
                return None if value is _TOMBSTONE else value  # type: ignore[return-value]
        return self._base.get(slot[0], {}).get(slot[1])

    def storage_set(self, address: BytesLike, key: BytesLike, value: BytesLike) -> None:
        """Stage a write in the top layer. Writing b"" deletes the key."""
        slot = (_as_bytes(address, "address"), _as_bytes(key, "key"))
        data = _as_bytes(value, "value")
        self._stack[-1][slot] = data if data else _TOMBSTONE

    def storage_delete(self, address: BytesLike, key: BytesLike) -> None:
        self._stack[-1][(_as_bytes(address, "address"), _as_bytes(key, "key"))] = _TOMBSTONE

    def storage_items(self, address: BytesLike) -> Iterator[Tuple[bytes, bytes]]:
        """Visible (key, value) pairs of one contract, sorted by key."""
        addr = _as_bytes(address, "address")
        merged: Dict[bytes, object] = dict(self._base.get(addr, {}))
        for layer in self._stack:
            for (a, key), value in layer.items():
                if a == addr:
                    merged[key] = value
        for key in sorted(merged):
            if merged[key] is not _TOMBSTONE:
                yield key, merged[key]  # type: ignore[misc]


__all__ = ["Journal"]
