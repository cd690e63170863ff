"""Complaint API request/response models.

Pydantic models for the public complaint endpoints. Requests are checked
for shape here; lifecycle rules (lengths after trimming, category and
status names) are enforced by the services, which answer with 400
problem details.

Developer Golden Rules:
1. VALIDATE EARLY - Pydantic handles schema validation
2. NEVER STORE SCORES - impact_score is computed per response
3. TYPE SAFETY - All fields typed
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field, PlainSerializer, model_validator

from civicledger.domain.models.complaint import Complaint, StatusHistoryEntry
from civicledger.domain.models.duplicate import ContentAnalysis, DuplicateCandidate
from civicledger.domain.models.query import ComplaintPage, ComplaintView
from civicledger.domain.models.vote import VoteToggleResult

# ISO 8601 with Z suffix (Pydantic v2)
DateTimeWithZ = Annotated[
    datetime,
    PlainSerializer(
        lambda v: v.isoformat().replace("+00:00", "Z") if v else None, return_type=str
    ),
]


class CreateComplaintRequest(BaseModel):
    """Request to report a new complaint.

    Attributes:
        title: Short summary.
        description: Full description.
        category: Category value (pothole, garbage, ...).
        longitude: Degrees east.
        latitude: Degrees north.
        address: Optional free-text address.
        image_refs: Opaque references to already-uploaded images.
    """

    title: str = Field(..., min_length=1, max_length=Complaint.MAX_TITLE_LENGTH)
    description: str = Field(
        ..., min_length=1, max_length=Complaint.MAX_DESCRIPTION_LENGTH
    )
    category: str = Field(..., description="Complaint category value")
    longitude: float = Field(..., ge=-180.0, le=180.0)
    latitude: float = Field(..., ge=-90.0, le=90.0)
    address: str | None = Field(default=None, max_length=500)
    image_refs: list[str] = Field(default_factory=list, max_length=5)


class LocationModel(BaseModel):
    """GeoJSON point plus address."""

    type: str = "Point"
    coordinates: list[float]
    address: str


class StatusHistoryModel(BaseModel):
    status: str
    timestamp: DateTimeWithZ
    actor_id: str

    @classmethod
    def from_entry(cls, entry: StatusHistoryEntry) -> StatusHistoryModel:
        return cls(status=entry.status.value, timestamp=entry.timestamp, actor_id=entry.actor_id)


class ComplaintResponse(BaseModel):
    """A complaint with its ledger linkage and read-time impact score."""

    id: UUID
    title: str
    description: str
    category: str
    location: LocationModel
    reporter_id: str
    image_refs: list[str]
    status: str
    status_history: list[StatusHistoryModel]
    votes: int
    impact_score: int
    content_hash: str
    transaction_id: str
    block_number: int | None = None
    verified_by: str | None = None
    verified_at: DateTimeWithZ | None = None
    resolved_at: DateTimeWithZ | None = None
    resolved_by: str | None = None
    resolution_image_refs: list[str] = Field(default_factory=list)
    resolution_hash: str | None = None
    resolution_transaction_id: str | None = None
    distance_m: float | None = None
    created_at: DateTimeWithZ
    updated_at: DateTimeWithZ

    @classmethod
    def from_complaint(
        cls,
        complaint: Complaint,
        impact_score: int | None = None,
        distance_m: float | None = None,
    ) -> ComplaintResponse:
        location = complaint.location
        return cls(
            id=complaint.id,
            title=complaint.title,
            description=complaint.description,
            category=complaint.category.value,
            location=LocationModel(
                coordinates=[location.longitude, location.latitude],
                address=location.address,
            ),
            reporter_id=complaint.reporter_id,
            image_refs=list(complaint.image_refs),
            status=complaint.status.value,
            status_history=[
                StatusHistoryModel.from_entry(e) for e in complaint.status_history
            ],
            votes=complaint.votes,
            impact_score=(
                impact_score if impact_score is not None else complaint.impact_score()
            ),
            content_hash=complaint.content_hash,
            transaction_id=complaint.transaction_id,
            block_number=complaint.block_number,
            verified_by=complaint.verified_by,
            verified_at=complaint.verified_at,
            resolved_at=complaint.resolved_at,
            resolved_by=complaint.resolved_by,
            resolution_image_refs=list(complaint.resolution_image_refs),
            resolution_hash=complaint.resolution_hash,
            resolution_transaction_id=complaint.resolution_transaction_id,
            distance_m=round(distance_m, 1) if distance_m is not None else None,
            created_at=complaint.created_at,
            updated_at=complaint.updated_at,
        )

    @classmethod
    def from_view(cls, view: ComplaintView) -> ComplaintResponse:
        return cls.from_complaint(view.complaint, view.impact_score, view.distance_m)


class ComplaintListResponse(BaseModel):
    """One page of complaints."""

    items: list[ComplaintResponse]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def from_page(cls, page: ComplaintPage) -> ComplaintListResponse:
        return cls(
            items=[ComplaintResponse.from_view(v) for v in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
        )


class NearbyComplaintsResponse(BaseModel):
    items: list[ComplaintResponse]
    count: int


class VoteResponse(BaseModel):
    """Result of toggling the caller's vote."""

    complaint_id: UUID
    voted: bool
    votes: int
    impact_score: int

    @classmethod
    def from_result(cls, result: VoteToggleResult) -> VoteResponse:
        return cls(
            complaint_id=result.complaint_id,
            voted=result.voted,
            votes=result.votes,
            impact_score=result.impact_score,
        )


class IntegrityResponse(BaseModel):
    """Whether the stored content still matches the ledger hash."""

    complaint_id: UUID
    verified: bool
    content_hash: str
    transaction_id: str


class DuplicateCheckRequest(BaseModel):
    """Draft complaint text, optionally with a location."""

    title: str | None = Field(default=None, max_length=Complaint.MAX_TITLE_LENGTH)
    description: str | None = Field(
        default=None, max_length=Complaint.MAX_DESCRIPTION_LENGTH
    )
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)

    @model_validator(mode="after")
    def validate_coordinates_pair(self) -> DuplicateCheckRequest:
        if (self.longitude is None) != (self.latitude is None):
            raise ValueError("longitude and latitude must be given together")
        return self

    @property
    def coordinates(self) -> tuple[float, float] | None:
        if self.longitude is None or self.latitude is None:
            return None
        return (self.longitude, self.latitude)


class DuplicateModel(BaseModel):
    id: UUID
    title: str
    status: str
    category: str
    votes: int
    similarity_percent: int
    created_at: DateTimeWithZ

    @classmethod
    def from_candidate(cls, candidate: DuplicateCandidate) -> DuplicateModel:
        complaint = candidate.complaint
        return cls(
            id=complaint.id,
            title=complaint.title,
            status=complaint.status.value,
            category=complaint.category.value,
            votes=complaint.votes,
            similarity_percent=candidate.similarity_percent,
            created_at=complaint.created_at,
        )


class DuplicateCheckResponse(BaseModel):
    duplicates: list[DuplicateModel]
    has_duplicates: bool


class AnalyzeRequest(BaseModel):
    title: str | None = Field(default=None, max_length=Complaint.MAX_TITLE_LENGTH)
    description: str | None = Field(
        default=None, max_length=Complaint.MAX_DESCRIPTION_LENGTH
    )


class CategorySuggestionModel(BaseModel):
    category: str
    score: int


class AnalyzeResponse(BaseModel):
    """Suggested category and severity for draft text."""

    suggested_category: str
    category_confidence: int
    severity: str
    severity_score: float
    powered_by: str
    category_suggestions: list[CategorySuggestionModel]
    severity_factors: list[str]

    @classmethod
    def from_analysis(cls, analysis: ContentAnalysis) -> AnalyzeResponse:
        return cls(
            suggested_category=analysis.suggested_category.value,
            category_confidence=analysis.category_confidence,
            severity=analysis.severity.value,
            severity_score=analysis.severity_score,
            powered_by=analysis.powered_by,
            category_suggestions=[
                CategorySuggestionModel(category=s.category.value, score=s.score)
                for s in analysis.category_suggestions
            ],
            severity_factors=list(analysis.severity_factors),
        )


class ComplaintErrorResponse(BaseModel):
    """Error response for complaint operations (RFC 7807).

    Attributes:
        type: Error type URI.
        title: Human-readable error title.
        status: HTTP status code.
        detail: Detailed error message.
        instance: Request URL that caused the error.
    """

    type: str
    title: str
    status: int
    detail: str
    instance: str
