"""ledger_vm.version — version string for the VM and the `shareswap` distribution.

`LEDGER_VM_VERSION` overrides everything (useful when stamping CI builds);
otherwise the installed distribution's metadata wins, and a source checkout
reports `BASE_VERSION+dev`.
"""

from __future__ import annotations

import os
from importlib import metadata

BASE_VERSION = "0.1.0"
DIST_NAME = "shareswap"


def compute_version() -> str:
    override = os.getenv("LEDGER_VM_VERSION")
    if override:
        return override
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return f"{BASE_VERSION}+dev"


__version__ = compute_version()

__all__ = ["__version__", "BASE_VERSION", "compute_version"]
