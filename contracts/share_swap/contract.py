# -*- coding: utf-8 -*-
"""
ShareSwap contract
------------------

Swaps the Share token for the Aalto token at a fixed rate. Half of every
input is burned (sent to 0x…dEaD), the other half goes to the treasury, and
the Aalto paid out is capped per rolling epoch.

State-changing:
  - init(share_token, aalto_token, treasury,
         aalto_per_share=10, max_aalto_per_epoch=100_000e18, epoch_duration=86_400)
  - swap(share_amount: int) -> int                      (returns Aalto credited)
  - set_swap_enabled(enabled: bool) -> None            (owner-only)
  - transfer_ownership(new_owner: bytes) -> None       (owner-only)
  - renounce_ownership() -> None                       (owner-only)
Views:
  - aalto_per_share(), max_aalto_per_epoch(), current_aalto_for_epoch()
  - epoch_start_time(), epoch_duration(), remaining_aalto_for_epoch()
  - swap_enabled(), share_token(), aalto_token(), treasury(), burn_address(), owner()
  - quote(share_amount: int) -> int

swap() checks, in order (the first failure reverts everything):
  1. "Swap not enabled"
  2. "Zero share amount"
  3. "User Share balance too low"
  4. epoch rollover when now > start + duration, then "Epoch Aalto limit reached"
  5. "Contract Aalto balance too low"

The caller must have approved this contract on the Share token. For an odd
input the unit left by the half split stays with the caller.

Event:
  b"Swapped" { "caller": bytes, "input_amount": int, "output_amount": int }
"""
from __future__ import annotations

from typing import Final

from ledger_vm.stdlib import abi, calls, env, events, storage

from contracts.share_swap import (
    BURN_ADDRESS,
    DEFAULT_AALTO_PER_SHARE,
    DEFAULT_EPOCH_DURATION,
    DEFAULT_MAX_AALTO_PER_EPOCH,
    EVT_SWAPPED,
    SwapFailure,
)
from contracts.stdlib.access import ownable
from contracts.stdlib.math import is_u256
from contracts.stdlib.math.safe_uint import u256_add, u256_mul
from contracts.stdlib.token import require_address

CONTRACT_NAME = "ShareSwap"

# ----------------------------
# Storage keys
# ----------------------------

K_SHARE: Final[bytes] = b"swap:cfg:share"
K_AALTO: Final[bytes] = b"swap:cfg:aalto"
K_TREASURY: Final[bytes] = b"swap:cfg:treasury"
K_RATE: Final[bytes] = b"swap:cfg:rate"
K_MAX_EPOCH: Final[bytes] = b"swap:cfg:max_epoch"
K_EPOCH_DURATION: Final[bytes] = b"swap:cfg:epoch_duration"

K_ENABLED: Final[bytes] = b"swap:enabled"
K_EPOCH_OUTPUT: Final[bytes] = b"swap:epoch:output"
K_EPOCH_START: Final[bytes] = b"swap:epoch:start"

ERR_BAD_CONFIG: Final[bytes] = b"SWAP:BAD_CONFIG"
ERR_BAD_AMOUNT: Final[bytes] = b"SWAP:BAD_AMOUNT"


# ----------------------------
# Init
# ----------------------------

def init(
    share_token: bytes,
    aalto_token: bytes,
    treasury: bytes,
    aalto_per_share: int = DEFAULT_AALTO_PER_SHARE,
    max_aalto_per_epoch: int = DEFAULT_MAX_AALTO_PER_EPOCH,
    epoch_duration: int = DEFAULT_EPOCH_DURATION,
) -> None:
    require_address(share_token)
    require_address(aalto_token)
    require_address(treasury)
    abi.require(share_token != aalto_token, ERR_BAD_CONFIG, context={"field": "tokens"})
    abi.require(is_u256(aalto_per_share) and aalto_per_share > 0, ERR_BAD_CONFIG, context={"field": "aalto_per_share"})
    abi.require(is_u256(max_aalto_per_epoch), ERR_BAD_CONFIG, context={"field": "max_aalto_per_epoch"})
    abi.require(is_u256(epoch_duration) and epoch_duration > 0, ERR_BAD_CONFIG, context={"field": "epoch_duration"})

    ownable.init_owner(env.caller())

    storage.set(K_SHARE, bytes(share_token))
    storage.set(K_AALTO, bytes(aalto_token))
    storage.set(K_TREASURY, bytes(treasury))
    storage.set_int(K_RATE, aalto_per_share)
    storage.set_int(K_MAX_EPOCH, max_aalto_per_epoch)
    storage.set_int(K_EPOCH_DURATION, epoch_duration)

    storage.set(K_ENABLED, b"\x01")
    storage.set_int(K_EPOCH_OUTPUT, 0)
    storage.set_int(K_EPOCH_START, env.block_timestamp())


# ----------------------------
# Internals
# ----------------------------

def _epoch_expired(now: int) -> bool:
    return now > storage.get_int(K_EPOCH_START) + storage.get_int(K_EPOCH_DURATION)


def _fail(kind: SwapFailure) -> None:
    abi.revert(kind.reason)


# ----------------------------
# Swap
# ----------------------------

def swap(share_amount: int) -> int:
    caller = env.caller()
    share = storage.get(K_SHARE)
    aalto = storage.get(K_AALTO)

    if not swap_enabled():
        _fail(SwapFailure.SWAP_DISABLED)
    if share_amount == 0:
        _fail(SwapFailure.ZERO_AMOUNT)
    abi.require(is_u256(share_amount), ERR_BAD_AMOUNT)

    if calls.call(share, "balance_of", caller) < share_amount:
        _fail(SwapFailure.INSUFFICIENT_CALLER_BALANCE)

    aalto_amount = u256_mul(share_amount, storage.get_int(K_RATE))

    now = env.block_timestamp()
    if _epoch_expired(now):
        storage.set_int(K_EPOCH_OUTPUT, 0)
        storage.set_int(K_EPOCH_START, now)
    issued = u256_add(storage.get_int(K_EPOCH_OUTPUT), aalto_amount)
    if issued > storage.get_int(K_MAX_EPOCH):
        _fail(SwapFailure.EPOCH_CAP_EXCEEDED)

    if calls.call(aalto, "balance_of", env.self_address()) < aalto_amount:
        _fail(SwapFailure.INSUFFICIENT_CONTRACT_OUTPUT_BALANCE)

    half = share_amount // 2
    calls.call(share, "transfer_from", caller, BURN_ADDRESS, half)
    calls.call(share, "transfer_from", caller, storage.get(K_TREASURY), half)
    calls.call(aalto, "transfer", caller, aalto_amount)

    storage.set_int(K_EPOCH_OUTPUT, issued)

    events.emit(
        EVT_SWAPPED,
        {"caller": caller, "input_amount": share_amount, "output_amount": aalto_amount},
    )
    return aalto_amount


# ----------------------------
# Admin
# ----------------------------

def set_swap_enabled(enabled: bool) -> None:
    ownable.require_owner(env.caller())
    storage.set(K_ENABLED, b"\x01" if enabled else b"\x00")


def transfer_ownership(new_owner: bytes) -> None:
    ownable.transfer_ownership(env.caller(), new_owner)


def renounce_ownership() -> None:
    ownable.renounce_ownership(env.caller())


# ----------------------------
# Views
# ----------------------------

def aalto_per_share() -> int:
    return storage.get_int(K_RATE)


def max_aalto_per_epoch() -> int:
    return storage.get_int(K_MAX_EPOCH)


def current_aalto_for_epoch() -> int:
    """Output issued in the epoch as last recorded (rollover happens on the next swap)."""
    return storage.get_int(K_EPOCH_OUTPUT)


def epoch_start_time() -> int:
    return storage.get_int(K_EPOCH_START)


def epoch_duration() -> int:
    return storage.get_int(K_EPOCH_DURATION)


def remaining_aalto_for_epoch() -> int:
    """Headroom the next swap would see at the current block time."""
    cap = max_aalto_per_epoch()
    if _epoch_expired(env.block_timestamp()):
        return cap
    return max(0, cap - current_aalto_for_epoch())


def quote(share_amount: int) -> int:
    abi.require(is_u256(share_amount), ERR_BAD_AMOUNT)
    return u256_mul(share_amount, aalto_per_share())


def swap_enabled() -> bool:
    return storage.get(K_ENABLED) == b"\x01"


def share_token() -> bytes:
    return storage.get(K_SHARE) or b""


def aalto_token() -> bytes:
    return storage.get(K_AALTO) or b""


def treasury() -> bytes:
    return storage.get(K_TREASURY) or b""


def burn_address() -> bytes:
    return BURN_ADDRESS


def owner() -> bytes:
    return ownable.get_owner() or b""


__views__ = (
    "aalto_per_share",
    "max_aalto_per_epoch",
    "current_aalto_for_epoch",
    "epoch_start_time",
    "epoch_duration",
    "remaining_aalto_for_epoch",
    "quote",
    "swap_enabled",
    "share_token",
    "aalto_token",
    "treasury",
    "burn_address",
    "owner",
)

__all__ = [
    "swap",
    "set_swap_enabled",
    "transfer_ownership",
    "renounce_ownership",
    *__views__,
]
