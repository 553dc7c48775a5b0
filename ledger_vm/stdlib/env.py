"""
Read-only view of the running call's environment.

    caller()          address that invoked the current frame (tx sender or calling contract)
    self_address()    address of the executing contract
    origin()          transaction sender (never a contract)
    block_timestamp() timestamp of the block being built
    block_height()    height of the block being built
    chain_id()        configured chain id
"""

from __future__ import annotations

from ledger_vm.runtime import context


def caller() -> bytes:
    return context.current().frame.caller


def self_address() -> bytes:
    return context.current().frame.address


def origin() -> bytes:
    return context.current().tx.sender


def block_timestamp() -> int:
    return context.current().block.timestamp


def block_height() -> int:
    return context.current().block.height


def chain_id() -> int:
    return context.current().block.chain_id


__all__ = ["caller", "self_address", "origin", "block_timestamp", "block_height", "chain_id"]
