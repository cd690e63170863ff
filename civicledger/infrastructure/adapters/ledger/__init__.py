"""Ledger contract adapters."""
