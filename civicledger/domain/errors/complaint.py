"""Complaint domain errors.

These errors represent requests the system refused on their own merits:
bad input, unknown complaints, or transitions the lifecycle rejects. They
are always raised before any ledger call is attempted, so the caller knows
nothing was written anywhere.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from civicledger.domain.exceptions import CivicLedgerError

if TYPE_CHECKING:
    from civicledger.domain.models.complaint import ComplaintStatus


class ComplaintError(CivicLedgerError):
    """Base error for complaint operations."""

    pass


class ComplaintValidationError(ComplaintError):
    """Raised when complaint input fails validation.

    Attributes:
        field: Name of the offending field (None for whole-request errors).
        reason: Human-readable reason.
    """

    def __init__(self, reason: str, field: str | None = None) -> None:
        """Initialize the error.

        Args:
            reason: Why the input was rejected.
            field: Optional name of the field that failed validation.
        """
        self.field = field
        self.reason = reason
        prefix = f"{field}: " if field else ""
        super().__init__(f"{prefix}{reason}")


class ComplaintNotFoundError(ComplaintError):
    """Raised when an operation references an unknown complaint.

    Attributes:
        complaint_id: The ID that was looked up.
    """

    def __init__(self, complaint_id: UUID | str) -> None:
        """Initialize the error.

        Args:
            complaint_id: The unknown complaint ID.
        """
        self.complaint_id = str(complaint_id)
        super().__init__(f"Complaint not found: {complaint_id}")


class InvalidStatusTransitionError(ComplaintError):
    """Raised when nominal transition enforcement rejects a status change.

    Only raised when the lifecycle is configured to enforce the nominal
    edge set (Reported -> Verified -> InProgress -> Resolved). In the
    default permissive mode any target status is accepted.

    Attributes:
        complaint_id: The complaint being transitioned.
        from_status: Current status.
        to_status: Requested status.
        allowed: Statuses reachable from the current one.
    """

    def __init__(
        self,
        complaint_id: UUID | str,
        from_status: ComplaintStatus,
        to_status: ComplaintStatus,
        allowed: list[ComplaintStatus] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            complaint_id: The complaint being transitioned.
            from_status: Current complaint status.
            to_status: Requested target status.
            allowed: Valid targets from the current status.
        """
        self.complaint_id = str(complaint_id)
        self.from_status = from_status
        self.to_status = to_status
        self.allowed = allowed or []
        allowed_str = (
            f" Valid transitions: {[s.value for s in self.allowed]}"
            if self.allowed
            else " No further transitions are permitted."
        )
        super().__init__(
            f"Invalid status transition for complaint {complaint_id}: "
            f"{from_status.value} -> {to_status.value}.{allowed_str}"
        )


class ResolutionAlreadyRecordedError(ComplaintError):
    """Raised when resolving a complaint whose resolution is already on record.

    Resolution fields (hash, transaction, timestamp, images) are write-once.

    Attributes:
        complaint_id: The complaint that is already resolved.
        resolution_transaction_id: Transaction that recorded the resolution.
    """

    def __init__(
        self, complaint_id: UUID | str, resolution_transaction_id: str | None
    ) -> None:
        """Initialize the error.

        Args:
            complaint_id: The already-resolved complaint.
            resolution_transaction_id: Existing resolution transaction ID.
        """
        self.complaint_id = str(complaint_id)
        self.resolution_transaction_id = resolution_transaction_id
        super().__init__(
            f"Complaint {complaint_id} already has a recorded resolution "
            f"(transaction {resolution_transaction_id})"
        )
