"""
ledger_vm.runtime.engine — deploy contract modules and execute calls atomically.

The engine is a small, deterministic, in-process chain:

  1) Contracts are plain Python modules (or `.py` files) whose exported
     functions are the contract methods. They read/write state only through
     `ledger_vm.stdlib` (storage/events/abi/env/calls).
  2) Every transaction mines one block (height+1, timestamp+block_interval,
     plus any pending `advance_time`).
  3) Every call frame opens a journal checkpoint. A failing frame discards its
     writes and events and re-raises; a top-level failure leaves no trace
     except a REVERT/ERROR receipt.
  4) Transactions are serialized by a re-entrant lock.

Exports
-------
A contract's callable surface is its `__all__` (or, if absent, the public
functions defined in the module), minus `init`, which only runs once at deploy
time. A module may declare `__views__` to mark read-only methods; handles route
those through `Engine.view`, which never mines a block and always rolls back.

Usage
-----
    eng = Engine()
    token = eng.deploy("contracts.token.contract", owner, b"Share", b"SHARE", 18, 10**24)
    eng.call(owner, token, "transfer", alice, 100)
    h = eng.at(token, sender=alice)
    h.approve(spender, 50)
    assert h.balance_of(alice) == 100
"""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import inspect
import logging
import threading
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ledger_vm.config import VMConfig, load_config
from ledger_vm.errors import (
    CallDepthExceeded,
    ContextError,
    ContractNotFound,
    LoadError,
    Revert,
    UnknownMethod,
    VmError,
)

from . import context
from .context import BlockEnv, CallFrame, TxEnv, to_bytes
from .events_api import Event
from .journal import Journal
from .receipts import Receipt, TxStatus

log = logging.getLogger(__name__)

AddressLike = Union[bytes, bytearray, str]
CodeLike = Union[ModuleType, str, Path]

ADDRESS_BYTES = 20


# ----------------------------- helpers ----------------------------- #


def derive_address(label: Union[str, bytes]) -> bytes:
    """Produce a stable 20-byte address from a label (accounts in tests/tools)."""
    raw = label.encode("utf-8") if isinstance(label, str) else bytes(label)
    return hashlib.sha3_256(b"ledger-vm/account|" + raw).digest()[-ADDRESS_BYTES:]


def _addr(value: AddressLike, *, name: str = "address") -> bytes:
    b = to_bytes(value)
    if len(b) == 0:
        raise ContextError(f"{name} must be non-empty")
    return b


def _load_module(code: CodeLike) -> ModuleType:
    if isinstance(code, ModuleType):
        return code
    path = Path(code)
    if path.suffix == ".py":
        if not path.is_file():
            raise LoadError(f"contract source not found: {path}")
        src = path.read_bytes()
        mod_name = "ledger_vm_contract_" + hashlib.sha3_256(src).hexdigest()[:16]
        spec = importlib.util.spec_from_file_location(mod_name, str(path))
        if spec is None or spec.loader is None:
            raise LoadError(f"cannot load contract source: {path}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module
    try:
        return importlib.import_module(str(code))
    except ImportError as e:
        raise LoadError(f"cannot import contract module {code!r}", context={"error": str(e)}) from e


def _exports(module: ModuleType) -> Tuple[str, ...]:
    names: Iterable[str]
    declared = getattr(module, "__all__", None)
    if declared is not None:
        names = declared
    else:
        names = [
            n
            for n, obj in vars(module).items()
            if not n.startswith("_") and inspect.isfunction(obj) and obj.__module__ == module.__name__
        ]
    return tuple(n for n in names if n != "init" and callable(getattr(module, n, None)))


@dataclass(frozen=True)
class Deployment:
    address: bytes
    module: ModuleType
    name: str
    exports: Tuple[str, ...]
    views: Tuple[str, ...]
    deployer: bytes
    block_height: int

    def resolve(self, method: str) -> Callable[..., Any]:
        if method not in self.exports:
            raise UnknownMethod(
                f"contract {self.name} has no method {method!r}",
                context={"address": "0x" + self.address.hex(), "method": method},
            )
        return getattr(self.module, method)


# ----------------------------- execution --------------------------- #


class _Execution:
    """
    State of one transaction while it runs: block/tx env, call frames, and the
    events emitted so far. Installed in `context` so the stdlib can find it.
    """

    def __init__(self, engine: "Engine", block: BlockEnv, tx: TxEnv) -> None:
        self.engine = engine
        self.config: VMConfig = engine.config
        self.journal: Journal = engine._journal
        self.block = block
        self.tx = tx
        self.frames: List[CallFrame] = []
        self.events: List[Event] = []

    @property
    def frame(self) -> CallFrame:
        if not self.frames:
            raise ContextError("no call frame on the stack")
        return self.frames[-1]

    def invoke(self, address: bytes, method: str, args: Sequence[Any], caller: bytes, *, allow_init: bool = False) -> Any:
        depth = len(self.frames)
        if depth >= self.config.max_call_depth:
            raise CallDepthExceeded("call depth exceeded", context={"max": self.config.max_call_depth})
        dep = self.engine.deployment(address)
        if allow_init and method == "init":
            fn = getattr(dep.module, "init")
        else:
            fn = dep.resolve(method)

        self.journal.begin()
        n_events = len(self.events)
        self.frames.append(CallFrame(address=dep.address, caller=caller, method=method, depth=depth))
        try:
            result = fn(*args)
        except BaseException:
            self.journal.revert()
            del self.events[n_events:]
            raise
        else:
            self.journal.commit()
            return result
        finally:
            self.frames.pop()


# ------------------------------- engine ---------------------------- #


class Engine:
    """
    In-process deterministic chain hosting contract modules.

    Parameters
    ----------
    config : VMConfig | None
        Defaults to `load_config()` (environment-driven).
    """

    def __init__(self, config: Optional[VMConfig] = None) -> None:
        self.config: VMConfig = config or load_config()
        self._journal = Journal()
        self._deployments: Dict[bytes, Deployment] = {}
        self._nonces: Dict[bytes, int] = {}
        self._head = BlockEnv(height=0, timestamp=self.config.genesis_timestamp, chain_id=self.config.chain_id)
        self._time_offset = 0
        self._next_timestamp: Optional[int] = None
        self._receipts: List[Receipt] = []
        self._lock = threading.RLock()

    # ------------------------------------------------------------------ #
    # Block clock
    # ------------------------------------------------------------------ #

    @property
    def head(self) -> BlockEnv:
        """Latest mined block."""
        return self._head

    @property
    def timestamp(self) -> int:
        return self._head.timestamp

    def pending_block(self) -> BlockEnv:
        """The block the next transaction would be mined in."""
        if self._next_timestamp is not None:
            ts = self._next_timestamp
        else:
            ts = self._head.timestamp + self.config.block_interval + self._time_offset
        return BlockEnv(
            height=self._head.height + 1,
            timestamp=ts,
            chain_id=self.config.chain_id,
        )

    def advance_time(self, seconds: int) -> None:
        """Shift the next block's timestamp forward by `seconds`."""
        if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds < 0:
            raise ContextError("advance_time expects a non-negative int", context={"seconds": seconds})
        with self._lock:
            if self._next_timestamp is not None:
                self._next_timestamp += seconds
            else:
                self._time_offset += seconds

    def set_next_timestamp(self, timestamp: int) -> None:
        """Pin the next block's timestamp (must move strictly forward)."""
        if isinstance(timestamp, bool) or not isinstance(timestamp, int):
            raise ContextError("timestamp must be int")
        if timestamp <= self._head.timestamp:
            raise ContextError(
                "next timestamp must be greater than head timestamp",
                context={"head": self._head.timestamp, "requested": timestamp},
            )
        with self._lock:
            self._next_timestamp = timestamp
            self._time_offset = 0

    def mine(self, blocks: int = 1) -> BlockEnv:
        """Mine empty blocks; returns the new head."""
        if blocks < 1:
            raise ContextError("mine expects at least one block")
        with self._lock:
            for _ in range(blocks):
                self._seal(self.pending_block())
            return self._head

    def _seal(self, block: BlockEnv) -> None:
        self._head = block
        self._time_offset = 0
        self._next_timestamp = None

    # ------------------------------------------------------------------ #
    # Deployments
    # ------------------------------------------------------------------ #

    def deployment(self, address: AddressLike) -> Deployment:
        addr = _addr(address)
        dep = self._deployments.get(addr)
        if dep is None:
            raise ContractNotFound("no contract at address", context={"address": "0x" + addr.hex()})
        return dep

    def is_contract(self, address: AddressLike) -> bool:
        return _addr(address) in self._deployments

    def deploy(
        self,
        code: CodeLike,
        sender: AddressLike,
        *args: Any,
        address: Optional[AddressLike] = None,
        name: Optional[str] = None,
    ) -> bytes:
        """
        Register `code` at a fresh address and run its `init(*args)` (if any)
        as a transaction from `sender`. Raises the init failure (after undoing
        the registration) if the constructor reverts.
        """
        module = _load_module(code)
        sender_b = _addr(sender, name="sender")
        with self._lock:
            nonce = self._nonces.get(sender_b, 0)
            if address is not None:
                addr = _addr(address)
            else:
                addr = hashlib.sha3_256(b"ledger-vm/deploy|" + sender_b + nonce.to_bytes(8, "big")).digest()[
                    -ADDRESS_BYTES:
                ]
            if addr in self._deployments:
                raise LoadError("address already holds a contract", context={"address": "0x" + addr.hex()})

            dep = Deployment(
                address=addr,
                module=module,
                name=name or getattr(module, "CONTRACT_NAME", module.__name__),
                exports=_exports(module),
                views=tuple(getattr(module, "__views__", ())),
                deployer=sender_b,
                block_height=self._head.height + 1,
            )
            self._deployments[addr] = dep
            receipt, err = self._run_tx(sender_b, addr, "init", args, allow_init=True)
            if err is not None:
                del self._deployments[addr]
                raise err
            log.debug(
                "deployed contract",
                extra={"contract": dep.name, "address": "0x" + addr.hex(), "height": receipt.block_height},
            )
            return addr

    # ------------------------------------------------------------------ #
    # Transactions & views
    # ------------------------------------------------------------------ #

    def execute(self, sender: AddressLike, to: AddressLike, method: str, *args: Any) -> Receipt:
        """Run a state-changing call; never raises for contract failures."""
        receipt, _ = self._run_tx(_addr(sender, name="sender"), _addr(to), method, args)
        return receipt

    def call(self, sender: AddressLike, to: AddressLike, method: str, *args: Any) -> Any:
        """Run a state-changing call; returns the method's value or raises its failure."""
        receipt, err = self._run_tx(_addr(sender, name="sender"), _addr(to), method, args)
        if err is not None:
            raise err
        return receipt.return_value

    def view(self, to: AddressLike, method: str, *args: Any, sender: Optional[AddressLike] = None) -> Any:
        """
        Evaluate a call against the pending block and roll everything back.
        No block is mined, no receipt is recorded, no nonce is consumed.
        """
        to_b = _addr(to)
        sender_b = _addr(sender, name="sender") if sender is not None else b"\x00" * ADDRESS_BYTES
        with self._lock:
            block = self.pending_block()
            tx = TxEnv(tx_hash=b"\x00" * 32, sender=sender_b, to=to_b, nonce=self._nonces.get(sender_b, 0))
            ex = _Execution(self, block, tx)
            token = context.activate(ex)
            try:
                return ex.invoke(to_b, method, args, caller=sender_b)
            finally:
                context.deactivate(token)
                self._journal.revert()

    def _tx_hash(self, sender: bytes, nonce: int, to: bytes, method: str) -> bytes:
        h = hashlib.sha3_256()
        h.update(b"ledger-vm/tx|")
        h.update(self.config.chain_id.to_bytes(8, "big"))
        h.update(sender)
        h.update(nonce.to_bytes(8, "big"))
        h.update(to)
        h.update(method.encode("utf-8"))
        return h.digest()

    def _run_tx(
        self,
        sender: bytes,
        to: bytes,
        method: str,
        args: Sequence[Any],
        *,
        allow_init: bool = False,
    ) -> Tuple[Receipt, Optional[BaseException]]:
        with self._lock:
            nonce = self._nonces.get(sender, 0)
            block = self.pending_block()
            tx = TxEnv(tx_hash=self._tx_hash(sender, nonce, to, method), sender=sender, to=to, nonce=nonce)
            ex = _Execution(self, block, tx)

            status = TxStatus.SUCCESS
            result: Any = None
            error: Optional[Dict[str, Any]] = None
            failure: Optional[BaseException] = None

            token = context.activate(ex)
            try:
                if allow_init and not callable(getattr(self.deployment(to).module, "init", None)):
                    result = None
                else:
                    result = ex.invoke(to, method, args, caller=sender, allow_init=allow_init)
            except Revert as e:
                status, error, failure = TxStatus.REVERT, e.to_dict(), e
            except VmError as e:
                status, error, failure = TxStatus.ERROR, e.to_dict(), e
            except Exception as e:
                status, failure = TxStatus.ERROR, e
                error = {"code": "CONTRACT_EXCEPTION", "message": f"{type(e).__name__}: {e}"}
            finally:
                context.deactivate(token)

            if failure is None:
                self._journal.commit()
            else:
                self._journal.revert()

            self._nonces[sender] = nonce + 1
            self._seal(block)

            receipt = Receipt(
                status=status,
                tx_hash=tx.tx_hash,
                sender=sender,
                to=to,
                method=method,
                block_height=block.height,
                timestamp=block.timestamp,
                return_value=result,
                logs=tuple(ex.events) if failure is None else (),
                error=error,
            )
            self._receipts.append(receipt)

            if failure is None:
                log.debug(
                    "tx committed",
                    extra={"method": method, "height": block.height, "logs": len(receipt.logs)},
                )
            else:
                log.info(
                    "tx failed",
                    extra={
                        "method": method,
                        "height": block.height,
                        "status": status.code,
                        "reason": error.get("message") if error else None,
                    },
                )
            return receipt, failure

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    @property
    def receipts(self) -> Tuple[Receipt, ...]:
        return tuple(self._receipts)

    @property
    def last_receipt(self) -> Optional[Receipt]:
        return self._receipts[-1] if self._receipts else None

    def logs(self, address: Optional[AddressLike] = None, name: Optional[bytes] = None) -> List[Event]:
        """Events from successful transactions, oldest first, optionally filtered."""
        addr = _addr(address) if address is not None else None
        out: List[Event] = []
        for r in self._receipts:
            for ev in r.logs:
                if addr is not None and ev.address != addr:
                    continue
                if name is not None and ev.name != name:
                    continue
                out.append(ev)
        return out

    def storage_of(self, address: AddressLike) -> Dict[bytes, bytes]:
        return dict(self._journal.storage_items(_addr(address)))

    def nonce_of(self, address: AddressLike) -> int:
        return self._nonces.get(_addr(address), 0)

    def at(self, address: AddressLike, sender: Optional[AddressLike] = None) -> "ContractHandle":
        return ContractHandle(self, _addr(address), _addr(sender, name="sender") if sender is not None else None)


class ContractHandle:
    """
    Attribute-style access to a deployed contract.

        swap = engine.at(swap_addr, sender=owner)
        swap.set_swap_enabled(False)                 # transaction from owner
        swap.connect(user).swap(100)                 # transaction from user
        swap.current_aalto_for_epoch()               # view (declared in __views__)
    """

    def __init__(self, engine: Engine, address: bytes, sender: Optional[bytes] = None) -> None:
        self.engine = engine
        self.address = address
        self.sender = sender

    def connect(self, sender: AddressLike) -> "ContractHandle":
        return ContractHandle(self.engine, self.address, _addr(sender, name="sender"))

    def transact(self, method: str, *args: Any) -> Receipt:
        """Like attribute calls, but returns the receipt instead of raising."""
        if self.sender is None:
            raise ContextError("handle has no sender; use connect()")
        return self.engine.execute(self.sender, self.address, method, *args)

    def _dispatch(self, method: str, *args: Any) -> Any:
        dep = self.engine.deployment(self.address)
        if method in dep.views:
            return self.engine.view(self.address, method, *args, sender=self.sender)
        if self.sender is None:
            raise ContextError("handle has no sender; use connect()", context={"method": method})
        return self.engine.call(self.sender, self.address, method, *args)

    def __getattr__(self, method: str) -> Callable[..., Any]:
        if method.startswith("_"):
            raise AttributeError(method)
        return partial(self._dispatch, method)

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"ContractHandle(0x{self.address.hex()})"


__all__ = ["Engine", "ContractHandle", "Deployment", "derive_address", "ADDRESS_BYTES"]
