"""Tests for the ledger_vm engine, journal, storage/events, config and logging."""
