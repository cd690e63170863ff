"""Admin API request/response models."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field

from civicledger.api.models.complaint import DateTimeWithZ
from civicledger.domain.models.reconciliation import ReconciliationReport


class UpdateStatusRequest(BaseModel):
    """Target status by value ("InProgress") or name ("IN_PROGRESS")."""

    status: str = Field(..., min_length=1)


class ResolveComplaintRequest(BaseModel):
    resolution_image_refs: list[str] = Field(default_factory=list, max_length=5)


class AnomalyModel(BaseModel):
    complaintId: str
    type: str
    message: str


class AnomalyReportResponse(BaseModel):
    """Result of one reconciliation audit.

    Attributes:
        audit_id: Identifier of this run.
        checked_count: Off-chain complaints checked.
        anomaly_count: Number of anomalies found.
        anomalies: One entry per divergent complaint, in listing order.
        check_integrity: Whether content hashes were compared as well.
    """

    audit_id: UUID
    checked_count: int
    anomaly_count: int
    anomalies: list[AnomalyModel]
    check_integrity: bool
    started_at: DateTimeWithZ
    completed_at: DateTimeWithZ

    @classmethod
    def from_report(cls, report: ReconciliationReport) -> AnomalyReportResponse:
        return cls(
            audit_id=report.audit_id,
            checked_count=report.checked_count,
            anomaly_count=report.anomaly_count,
            anomalies=[AnomalyModel(**a.to_dict()) for a in report.anomalies],
            check_integrity=report.check_integrity,
            started_at=report.started_at,
            completed_at=report.completed_at,
        )
