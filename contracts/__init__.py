"""
contracts — Python contracts for the ledger VM.

- contracts.stdlib      reusable, VM-safe helpers (math, token, access)
- contracts.token       ERC-20-like token contract (Share / Aalto)
- contracts.share_swap  fixed-rate Share→Aalto swap with a per-epoch cap
- contracts.tools       operator tooling (scenario simulator CLI)
"""
