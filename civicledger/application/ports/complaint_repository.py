"""Complaint repository port.

Off-chain storage for complaints. The repository stores and retrieves; the
lifecycle service decides when a write is allowed (after the ledger
confirmed).

Developer Golden Rules:
1. FIELD-SCOPED WRITES - update_lifecycle never touches voters and
   toggle_voter never touches lifecycle fields
2. ATOMIC TOGGLE - Membership flips in a single store operation
3. FAIL LOUD - Storage errors propagate to the caller
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from civicledger.domain.models.complaint import (
    Complaint,
    ComplaintCategory,
    ComplaintStatus,
)

SORT_FIELDS: frozenset[str] = frozenset({"created_at", "votes", "impact_score"})


@dataclass(frozen=True)
class ComplaintQuery:
    """Filter, sort and pagination options for listing complaints.

    Attributes:
        status: Only complaints with this status.
        category: Only complaints in this category.
        search: Case-insensitive substring over title, description,
            address and category.
        exclude_status: Drop complaints with this status.
        sort_by: One of created_at, votes, impact_score.
        descending: Sort direction.
        offset: Rows to skip.
        limit: Maximum rows to return.
    """

    status: ComplaintStatus | None = None
    category: ComplaintCategory | None = None
    search: str | None = None
    exclude_status: ComplaintStatus | None = None
    sort_by: str = "created_at"
    descending: bool = True
    offset: int = 0
    limit: int = field(default=20)

    def __post_init__(self) -> None:
        if self.sort_by not in SORT_FIELDS:
            raise ValueError(f"sort_by must be one of {sorted(SORT_FIELDS)}")
        if self.offset < 0 or self.limit < 1:
            raise ValueError("offset must be >= 0 and limit >= 1")


class ComplaintRepositoryProtocol(Protocol):
    """Protocol for complaint persistence.

    Implementations: in-memory stub and PostgreSQL.
    """

    async def insert(self, complaint: Complaint) -> None:
        """Store a new complaint.

        Raises:
            ValueError: If a complaint with the same id exists.
        """
        ...

    async def get(self, complaint_id: UUID) -> Complaint | None:
        """Return the complaint, or None if unknown."""
        ...

    async def list_ids(self) -> list[UUID]:
        """Return all complaint ids ordered by creation time (oldest first)."""
        ...

    async def find(self, query: ComplaintQuery) -> tuple[list[Complaint], int]:
        """List complaints matching a query.

        Returns:
            Tuple of (page of complaints, total matching count).
        """
        ...

    async def find_nearby(
        self,
        longitude: float,
        latitude: float,
        max_distance_m: float,
        exclude_status: ComplaintStatus | None = None,
    ) -> list[tuple[Complaint, float]]:
        """Return complaints within max_distance_m, nearest first.

        Returns:
            List of (complaint, distance in meters).
        """
        ...

    async def update_lifecycle(self, complaint: Complaint) -> Complaint:
        """Write the lifecycle and resolution fields of complaint.

        Only status, status_history, verification, resolution and
        updated_at are written. Voters stay as stored.

        Returns:
            The stored complaint after the update.

        Raises:
            ComplaintNotFoundError: If the complaint no longer exists.
        """
        ...

    async def toggle_voter(self, complaint_id: UUID, user_id: str) -> tuple[Complaint, bool]:
        """Add user_id to voters if absent, remove it if present.

        Returns:
            Tuple of (stored complaint after the toggle, True if added).

        Raises:
            ComplaintNotFoundError: If the complaint does not exist.
        """
        ...

    async def delete(self, complaint_id: UUID) -> bool:
        """Remove the off-chain record. Returns True if it existed."""
        ...
