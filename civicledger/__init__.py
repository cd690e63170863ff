"""
Civic Ledger - civic issue reporting with an immutable ledger mirror.

Citizens file complaints that are registered on an append-only external
ledger before they are stored in the queryable off-chain database.
Every status change follows the same rule: the ledger write must be
confirmed first, the off-chain record follows.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
