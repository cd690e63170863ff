"""Ledger errors.

Two families with very different propagation:

- LedgerConfigurationError is fatal and startup-only. The service must not
  accept any request until the ledger connection has been verified.
- LedgerUnavailableError is per-operation. The ledger write did not
  complete, nothing was changed off-chain, and the caller may retry the
  whole operation.

LedgerTransactionError is raised by contract adapters and is always
translated into LedgerUnavailableError by the gateway.
"""

from __future__ import annotations

from civicledger.domain.exceptions import CivicLedgerError


class LedgerError(CivicLedgerError):
    """Base error for ledger interaction."""

    pass


class LedgerConfigurationError(LedgerError):
    """Raised when the ledger connection cannot be established at startup.

    Covers missing or malformed configuration, the zero contract address,
    a malformed signer key, an unreachable network or contract, and an
    unfunded signer.

    Attributes:
        check: Name of the startup check that failed.
        reason: Human-readable reason.
    """

    def __init__(self, check: str, reason: str) -> None:
        """Initialize the error.

        Args:
            check: The failed check (e.g. "config", "network", "balance").
            reason: Why the check failed.
        """
        self.check = check
        self.reason = reason
        super().__init__(f"Ledger startup check '{check}' failed: {reason}")


class LedgerConnectionNotVerifiedError(LedgerConfigurationError):
    """Raised when a ledger call is made before verify_connection() passed."""

    def __init__(self, operation: str) -> None:
        """Initialize the error.

        Args:
            operation: The ledger operation that was attempted.
        """
        self.operation = operation
        super().__init__(
            check="connection_verified",
            reason=f"'{operation}' called before the ledger connection was verified",
        )


class LedgerUnavailableError(LedgerError):
    """Raised when a ledger operation did not complete.

    The operation either was rejected, failed to sign, reverted, or its
    confirmation did not arrive before the deadline. A timeout is treated
    as failure even though the transaction might still confirm later.

    Attributes:
        operation: Gateway operation name.
        complaint_id: Complaint the operation concerned.
        reason: Short failure reason (e.g. "confirmation_timeout").
    """

    def __init__(self, operation: str, complaint_id: str, reason: str) -> None:
        """Initialize the error.

        Args:
            operation: Gateway operation that failed.
            complaint_id: Complaint ID the operation concerned.
            reason: Why the operation failed.
        """
        self.operation = operation
        self.complaint_id = complaint_id
        self.reason = reason
        super().__init__(
            f"Ledger unavailable during {operation} for complaint "
            f"{complaint_id}: {reason}. State not changed."
        )


class LedgerTransactionError(LedgerError):
    """Raised by contract adapters when a call or transaction fails.

    Attributes:
        reason: Adapter-level failure description.
        transaction_id: Transaction hash, when one was obtained.
    """

    def __init__(self, reason: str, transaction_id: str | None = None) -> None:
        """Initialize the error.

        Args:
            reason: Failure description.
            transaction_id: Transaction hash if the failure happened after send.
        """
        self.reason = reason
        self.transaction_id = transaction_id
        suffix = f" (tx {transaction_id})" if transaction_id else ""
        super().__init__(f"{reason}{suffix}")
