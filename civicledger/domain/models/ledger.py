"""Ledger value objects.

Receipts and connection reports returned by the ledger gateway. The ledger
itself is append-only; these objects only describe what it confirmed.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LedgerReceipt:
    """Confirmation of a mined ledger transaction.

    Attributes:
        transaction_id: Hex transaction hash.
        block_number: Block that included the transaction.
    """

    transaction_id: str
    block_number: int


@dataclass(frozen=True)
class LedgerConnectionReport:
    """Result of a successful startup connection check.

    Attributes:
        chain_id: Network chain id.
        total_complaints: Complaints registered on the contract.
        signer_address: Address that signs transactions.
        signer_balance_wei: Signer balance in wei (always > 0).
    """

    chain_id: int
    total_complaints: int
    signer_address: str
    signer_balance_wei: int

    def to_dict(self) -> dict[str, object]:
        """Serialize for logging and health output."""
        return {
            "chain_id": self.chain_id,
            "total_complaints": self.total_complaints,
            "signer_address": self.signer_address,
            "signer_balance_wei": str(self.signer_balance_wei),
        }
