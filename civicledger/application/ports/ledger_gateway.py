"""Ledger gateway port.

The single component through which the application reaches the ledger.

Developer Golden Rules:
1. VERIFY FIRST - No ledger I/O before verify_connection() succeeded
2. DEADLINE ALWAYS - Every call is bounded by a timeout
3. TIMEOUT IS FAILURE - A late confirmation is reported as unavailable
4. NO RETRY - Callers decide whether to retry the whole operation
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol
from uuid import UUID

from civicledger.domain.models.complaint import ComplaintStatus
from civicledger.domain.models.ledger import LedgerConnectionReport, LedgerReceipt


class LedgerGatewayProtocol(Protocol):
    """Protocol for ledger access used by the application services.

    Methods:
        compute_content_hash: Deterministic payload hash (no I/O)
        submit_registration: Register a new complaint
        submit_status_transition: Record a status change
        submit_resolution: Record a resolution
        exists: Read-only existence check
        verify_integrity: Read-only hash comparison
        verify_connection: Startup gate
    """

    @property
    def is_connected(self) -> bool:
        """True once verify_connection() has succeeded."""
        ...

    def compute_content_hash(self, payload: Mapping[str, Any]) -> str:
        """Hash a payload; independent of key insertion order."""
        ...

    async def submit_registration(
        self,
        complaint_id: UUID,
        content_hash: str,
        timeout_seconds: float | None = None,
    ) -> LedgerReceipt:
        """Register a complaint and wait for confirmation.

        Raises:
            LedgerUnavailableError: On rejection, revert or timeout.
            LedgerConnectionNotVerifiedError: Before verify_connection().
        """
        ...

    async def submit_status_transition(
        self,
        complaint_id: UUID,
        status: ComplaintStatus,
        timeout_seconds: float | None = None,
    ) -> LedgerReceipt:
        """Record a status change and wait for confirmation.

        Raises:
            LedgerUnavailableError: On rejection, revert or timeout.
            LedgerConnectionNotVerifiedError: Before verify_connection().
        """
        ...

    async def submit_resolution(
        self,
        complaint_id: UUID,
        resolution_hash: str,
        timeout_seconds: float | None = None,
    ) -> LedgerReceipt:
        """Record a resolution and wait for confirmation.

        Raises:
            LedgerUnavailableError: On rejection, revert or timeout.
            LedgerConnectionNotVerifiedError: Before verify_connection().
        """
        ...

    async def exists(self, complaint_id: UUID, timeout_seconds: float | None = None) -> bool:
        """Check whether the ledger knows the complaint.

        Raises:
            LedgerUnavailableError: If the query fails or times out.
        """
        ...

    async def verify_integrity(
        self,
        complaint_id: UUID,
        content_hash: str,
        timeout_seconds: float | None = None,
    ) -> bool:
        """Check the registered hash against content_hash.

        Raises:
            LedgerUnavailableError: If the query fails or times out.
        """
        ...

    async def verify_connection(self) -> LedgerConnectionReport:
        """Run the startup checks.

        Raises:
            LedgerConfigurationError: If any check fails.
        """
        ...
