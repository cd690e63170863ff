"""Reconciliation gap errors.

A reconciliation gap exists when the ledger holds an entry that the
off-chain store does not reflect. Gaps are detected, not prevented: there is
no cross-store transaction, so a persistence failure after a confirmed
ledger write cannot be undone. The auditor surfaces such gaps later.
"""

from __future__ import annotations

from civicledger.domain.exceptions import CivicLedgerError


class PersistenceGapError(CivicLedgerError):
    """Raised when the off-chain write fails after the ledger confirmed.

    The ledger entry is permanent. The caller must not assume the
    off-chain record changed.

    Attributes:
        complaint_id: The affected complaint.
        operation: Lifecycle operation that was in progress.
        transaction_id: The confirmed ledger transaction.
        cause: The persistence exception.
    """

    def __init__(
        self,
        complaint_id: str,
        operation: str,
        transaction_id: str,
        cause: Exception,
    ) -> None:
        """Initialize the error.

        Args:
            complaint_id: The affected complaint.
            operation: Lifecycle operation name.
            transaction_id: Confirmed ledger transaction ID.
            cause: Underlying persistence error.
        """
        self.complaint_id = complaint_id
        self.operation = operation
        self.transaction_id = transaction_id
        self.cause = cause
        super().__init__(
            f"Ledger transaction {transaction_id} for {operation} on complaint "
            f"{complaint_id} confirmed but off-chain persistence failed: {cause}"
        )
