"""API request/response models."""

from civicledger.api.models.admin import (
    AnomalyModel,
    AnomalyReportResponse,
    ResolveComplaintRequest,
    UpdateStatusRequest,
)
from civicledger.api.models.complaint import (
    AnalyzeRequest,
    AnalyzeResponse,
    ComplaintErrorResponse,
    ComplaintListResponse,
    ComplaintResponse,
    CreateComplaintRequest,
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    IntegrityResponse,
    NearbyComplaintsResponse,
    VoteResponse,
)
from civicledger.api.models.health import HealthResponse

__all__: list[str] = [
    "AnalyzeRequest",
    "AnalyzeResponse",
    "AnomalyModel",
    "AnomalyReportResponse",
    "ComplaintErrorResponse",
    "ComplaintListResponse",
    "ComplaintResponse",
    "CreateComplaintRequest",
    "DuplicateCheckRequest",
    "DuplicateCheckResponse",
    "HealthResponse",
    "IntegrityResponse",
    "NearbyComplaintsResponse",
    "ResolveComplaintRequest",
    "UpdateStatusRequest",
    "VoteResponse",
]
