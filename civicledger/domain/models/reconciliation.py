"""Reconciliation audit models.

Anomaly records are ephemeral: they are produced by an audit run and
returned to the caller, never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID


class AnomalyKind(Enum):
    """Kind of divergence between the off-chain store and the ledger.

    Kinds:
        MISSING_ON_CHAIN: Off-chain record has no ledger registration.
        CONTENT_HASH_MISMATCH: Off-chain content no longer hashes to the
            value registered on the ledger.
    """

    MISSING_ON_CHAIN = "missing_on_chain"
    CONTENT_HASH_MISMATCH = "content_hash_mismatch"


ANOMALY_MESSAGES: dict[AnomalyKind, str] = {
    AnomalyKind.MISSING_ON_CHAIN: "Complaint exists in DB but not on blockchain",
    AnomalyKind.CONTENT_HASH_MISMATCH: (
        "Complaint content does not match the hash registered on blockchain"
    ),
}


@dataclass(frozen=True)
class AnomalyRecord:
    """A single divergence found by an audit."""

    complaint_id: UUID
    kind: AnomalyKind
    message: str

    @classmethod
    def of(cls, complaint_id: UUID, kind: AnomalyKind) -> AnomalyRecord:
        """Build a record with the standard message for its kind."""
        return cls(complaint_id=complaint_id, kind=kind, message=ANOMALY_MESSAGES[kind])

    def to_dict(self) -> dict[str, str]:
        """Serialize using the external field names."""
        return {
            "complaintId": str(self.complaint_id),
            "type": self.kind.value,
            "message": self.message,
        }


@dataclass(frozen=True)
class ReconciliationReport:
    """Outcome of one audit run.

    Attributes:
        audit_id: UUIDv7 of this run.
        started_at: When the sweep began.
        completed_at: When the sweep finished.
        checked_count: Number of off-chain records examined.
        anomalies: Anomalies in enumeration order.
        check_integrity: Whether content hashes were also verified.
    """

    audit_id: UUID
    started_at: datetime
    completed_at: datetime
    checked_count: int
    anomalies: tuple[AnomalyRecord, ...] = field(default=())
    check_integrity: bool = False

    @property
    def anomaly_count(self) -> int:
        return len(self.anomalies)

    @property
    def is_clean(self) -> bool:
        return not self.anomalies

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()
