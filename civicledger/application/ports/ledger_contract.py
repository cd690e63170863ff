"""Ledger contract port.

The raw surface of the complaint registry contract. Only the ledger
gateway talks to implementations of this protocol; application services
go through the gateway.

Developer Golden Rules:
1. NO TIMEOUTS HERE - The gateway owns deadlines, adapters just await
2. FAIL LOUD - Adapters raise LedgerTransactionError on any failure
3. APPEND ONLY - Nothing on the ledger is ever removed or rewritten
"""

from __future__ import annotations

from typing import Protocol

from civicledger.domain.models.ledger import LedgerReceipt


class LedgerContractProtocol(Protocol):
    """Protocol for the complaint registry contract.

    Send methods sign and broadcast a transaction and return its id
    without waiting for confirmation. wait_for_receipt() then blocks until
    the transaction is mined.

    Status codes: Reported=0, Verified=1, InProgress=2, Resolved=3.
    """

    async def send_register_complaint(self, complaint_id: str, content_hash: str) -> str:
        """Broadcast registerComplaint(complaint_id, content_hash).

        Returns:
            Transaction id.

        Raises:
            LedgerTransactionError: If signing or sending fails.
        """
        ...

    async def send_update_complaint_status(self, complaint_id: str, status_code: int) -> str:
        """Broadcast updateComplaintStatus(complaint_id, status_code)."""
        ...

    async def send_resolve_complaint(self, complaint_id: str, resolution_hash: str) -> str:
        """Broadcast resolveComplaint(complaint_id, resolution_hash)."""
        ...

    async def wait_for_receipt(self, transaction_id: str, timeout_seconds: float) -> LedgerReceipt:
        """Wait until a transaction is mined.

        Args:
            transaction_id: Transaction returned by a send method.
            timeout_seconds: Upper bound passed to the underlying client.

        Returns:
            Receipt with the confirming block number.

        Raises:
            LedgerTransactionError: If the transaction reverted or the
                receipt could not be obtained.
        """
        ...

    async def verify_complaint(self, complaint_id: str, content_hash: str) -> bool:
        """Call verifyComplaint; True if the stored hash equals content_hash."""
        ...

    async def complaint_exists(self, complaint_id: str) -> bool:
        """Call complaintExists."""
        ...

    async def get_total_complaints(self) -> int:
        """Call getTotalComplaints."""
        ...

    async def get_chain_id(self) -> int:
        """Return the network chain id."""
        ...

    async def get_signer_address(self) -> str:
        """Return the address that signs transactions."""
        ...

    async def get_signer_balance(self) -> int:
        """Return the signer balance in wei."""
        ...
