"""
ledger_vm.config — chain defaults, block-time stepping, and numeric caps.

This module centralizes configuration for the deterministic contract VM. It has
NO third-party deps and is safe to import very early.

Configuration precedence:
  1) Environment variables (LEDGER_VM_*)
  2) Hardcoded safe defaults below

Key env vars:
  - LEDGER_VM_CHAIN_ID                (int)    default: 1337
  - LEDGER_VM_GENESIS_TIMESTAMP       (int)    default: 1_700_000_000
  - LEDGER_VM_BLOCK_INTERVAL          (int)    default: 1        (seconds added per mined block)
  - LEDGER_VM_MAX_CALL_DEPTH          (int)    default: 64
  - LEDGER_VM_MAX_STORAGE_KEY_BYTES   (int)    default: 128
  - LEDGER_VM_MAX_STORAGE_VAL_BYTES   (int)    default: 131_072  (128 KiB)
  - LEDGER_VM_MAX_LOGS_PER_TX         (int)    default: 1024
  - LEDGER_VM_LOG_LEVEL               (str)    default: INFO
  - LEDGER_VM_LOG_FORMAT              (str)    default: text     (text|json)

Usage:
    from ledger_vm.config import load_config
    CFG = load_config()
    if CFG.max_call_depth < 8: ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any, Dict

ENV_PREFIX = "LEDGER_VM_"


# ----------------------------- helpers ---------------------------------------


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_str(name: str, default: str, *, choices: tuple[str, ...] = ()) -> str:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    val = raw.strip()
    if choices and val.lower() not in choices:
        return default
    return val.lower() if choices else val


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class VMConfig:
    # Chain identity & block clock
    chain_id: int
    genesis_timestamp: int
    block_interval: int

    # Execution caps
    max_call_depth: int
    max_storage_key_bytes: int
    max_storage_value_bytes: int
    max_logs_per_tx: int

    # Logging
    log_level: str
    log_format: str

    def with_overrides(self, **kwargs: Any) -> "VMConfig":
        """Return a copy with selected fields replaced (tests, CLI flags)."""
        return replace(self, **kwargs)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "chain_id": self.chain_id,
            "genesis_timestamp": self.genesis_timestamp,
            "block_interval": self.block_interval,
            "max_call_depth": self.max_call_depth,
            "max_storage_key_bytes": self.max_storage_key_bytes,
            "max_storage_value_bytes": self.max_storage_value_bytes,
            "max_logs_per_tx": self.max_logs_per_tx,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }


@lru_cache(maxsize=1)
def load_config() -> VMConfig:
    """
    Load configuration from the environment (cached).

    Integers are clamped to sane bounds rather than rejected; unparsable values
    fall back to defaults.
    """
    return VMConfig(
        chain_id=_env_int("CHAIN_ID", 1337, min_v=0, max_v=2**63 - 1),
        genesis_timestamp=_env_int("GENESIS_TIMESTAMP", 1_700_000_000, min_v=0, max_v=2**63 - 1),
        block_interval=_env_int("BLOCK_INTERVAL", 1, min_v=0, max_v=86_400),
        max_call_depth=_env_int("MAX_CALL_DEPTH", 64, min_v=1, max_v=1024),
        max_storage_key_bytes=_env_int("MAX_STORAGE_KEY_BYTES", 128, min_v=1, max_v=4096),
        max_storage_value_bytes=_env_int("MAX_STORAGE_VAL_BYTES", 131_072, min_v=32, max_v=16 * 1024 * 1024),
        max_logs_per_tx=_env_int("MAX_LOGS_PER_TX", 1024, min_v=1, max_v=1_000_000),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
        log_format=_env_str("LOG_FORMAT", "text", choices=("text", "json")),
    )


def reload_config() -> VMConfig:
    """Drop the cached config and re-read the environment."""
    load_config.cache_clear()
    return load_config()


__all__ = ["VMConfig", "load_config", "reload_config", "ENV_PREFIX"]
