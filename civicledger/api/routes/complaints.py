"""Public complaint routes.

Developer Golden Rules:
1. LEDGER FIRST - Writes go through ComplaintLifecycleService, which
   confirms on the ledger before touching the off-chain store
2. FAIL LOUD - Domain errors become RFC 7807 responses; 503 means nothing
   changed, 500 persistence-gap means the ledger moved without the store
3. READS ARE OPEN - Only writes need X-Actor-ID
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from civicledger.api.auth.actor_auth import get_actor_id
from civicledger.api.errors import to_http_exception
from civicledger.api.models.complaint import (
    AnalyzeRequest,
    AnalyzeResponse,
    ComplaintErrorResponse,
    ComplaintListResponse,
    ComplaintResponse,
    CreateComplaintRequest,
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    DuplicateModel,
    IntegrityResponse,
    NearbyComplaintsResponse,
    VoteResponse,
)
from civicledger.application.services.complaint_lifecycle_service import (
    ComplaintLifecycleService,
)
from civicledger.application.services.complaint_query_service import (
    ComplaintQueryService,
)
from civicledger.application.services.duplicate_detection_service import (
    DuplicateDetectionService,
)
from civicledger.application.services.vote_service import VoteService
from civicledger.bootstrap.complaints import (
    get_duplicate_service,
    get_lifecycle_service,
    get_query_service,
    get_vote_service,
)
from civicledger.domain.exceptions import CivicLedgerError

router = APIRouter(prefix="/v1/complaints", tags=["complaints"])

_WRITE_ERRORS = {
    400: {"model": ComplaintErrorResponse, "description": "Invalid complaint data"},
    401: {"description": "X-Actor-ID header missing"},
    500: {
        "model": ComplaintErrorResponse,
        "description": "Ledger committed but off-chain persistence failed",
    },
    503: {
        "model": ComplaintErrorResponse,
        "description": "Ledger unavailable, state not changed",
    },
}


@router.post(
    "",
    response_model=ComplaintResponse,
    status_code=201,
    responses=_WRITE_ERRORS,
    summary="Report a complaint",
    description=(
        "Registers the complaint content hash on the ledger and stores the "
        "complaint once the registration is confirmed."
    ),
)
async def create_complaint(
    request_data: CreateComplaintRequest,
    request: Request,
    actor_id: str = Depends(get_actor_id),
    service: ComplaintLifecycleService = Depends(get_lifecycle_service),
) -> ComplaintResponse:
    try:
        result = await service.create_complaint(
            reporter_id=actor_id,
            title=request_data.title,
            description=request_data.description,
            category=request_data.category,
            longitude=request_data.longitude,
            latitude=request_data.latitude,
            address=request_data.address,
            image_refs=request_data.image_refs,
        )
    except CivicLedgerError as e:
        raise to_http_exception(e, request) from None
    return ComplaintResponse.from_complaint(result.complaint)


@router.get(
    "",
    response_model=ComplaintListResponse,
    responses={400: {"model": ComplaintErrorResponse}},
    summary="List complaints",
)
async def list_complaints(
    request: Request,
    status: str | None = Query(default=None),
    category: str | None = Query(default=None),
    search: str | None = Query(default=None, max_length=200),
    sort_by: str = Query(default="created_at"),
    order: str = Query(default="desc"),
    page: int = Query(default=1),
    limit: int | None = Query(default=None),
    service: ComplaintQueryService = Depends(get_query_service),
) -> ComplaintListResponse:
    try:
        result = await service.list_complaints(
            status=status,
            category=category,
            search=search,
            sort_by=sort_by,
            order=order,
            page=page,
            limit=limit,
        )
    except CivicLedgerError as e:
        raise to_http_exception(e, request) from None
    return ComplaintListResponse.from_page(result)


@router.get(
    "/nearby",
    response_model=NearbyComplaintsResponse,
    responses={400: {"model": ComplaintErrorResponse}},
    summary="Complaints near a point",
)
async def get_nearby_complaints(
    request: Request,
    lng: float = Query(...),
    lat: float = Query(...),
    max_distance: float | None = Query(default=None, description="Radius in meters"),
    service: ComplaintQueryService = Depends(get_query_service),
) -> NearbyComplaintsResponse:
    try:
        views = await service.find_nearby(lng, lat, max_distance)
    except CivicLedgerError as e:
        raise to_http_exception(e, request) from None
    return NearbyComplaintsResponse(
        items=[ComplaintResponse.from_view(v) for v in views], count=len(views)
    )


@router.post(
    "/duplicates",
    response_model=DuplicateCheckResponse,
    responses={400: {"model": ComplaintErrorResponse}},
    summary="Find likely duplicates of a draft complaint",
)
async def check_duplicates(
    request_data: DuplicateCheckRequest,
    request: Request,
    service: DuplicateDetectionService = Depends(get_duplicate_service),
) -> DuplicateCheckResponse:
    try:
        duplicates = await service.find_duplicates(
            request_data.title, request_data.description, request_data.coordinates
        )
    except CivicLedgerError as e:
        raise to_http_exception(e, request) from None
    return DuplicateCheckResponse(
        duplicates=[DuplicateModel.from_candidate(d) for d in duplicates],
        has_duplicates=bool(duplicates),
    )


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    summary="Suggest category and severity for draft text",
)
async def analyze_complaint(
    request_data: AnalyzeRequest,
    service: DuplicateDetectionService = Depends(get_duplicate_service),
) -> AnalyzeResponse:
    return AnalyzeResponse.from_analysis(
        service.analyze(request_data.title, request_data.description)
    )


@router.get(
    "/{complaint_id}",
    response_model=ComplaintResponse,
    responses={404: {"model": ComplaintErrorResponse}},
    summary="Get a complaint",
)
async def get_complaint(
    complaint_id: UUID,
    request: Request,
    service: ComplaintQueryService = Depends(get_query_service),
) -> ComplaintResponse:
    try:
        view = await service.get_complaint_view(complaint_id)
    except CivicLedgerError as e:
        raise to_http_exception(e, request) from None
    return ComplaintResponse.from_view(view)


@router.post(
    "/{complaint_id}/vote",
    response_model=VoteResponse,
    responses={
        401: {"description": "X-Actor-ID header missing"},
        404: {"model": ComplaintErrorResponse},
    },
    summary="Toggle the caller's vote",
)
async def toggle_vote(
    complaint_id: UUID,
    request: Request,
    actor_id: str = Depends(get_actor_id),
    service: VoteService = Depends(get_vote_service),
) -> VoteResponse:
    try:
        result = await service.toggle_vote(complaint_id, actor_id)
    except CivicLedgerError as e:
        raise to_http_exception(e, request) from None
    return VoteResponse.from_result(result)


@router.get(
    "/{complaint_id}/integrity",
    response_model=IntegrityResponse,
    responses={
        404: {"model": ComplaintErrorResponse},
        503: {"model": ComplaintErrorResponse},
    },
    summary="Check stored content against the ledger hash",
)
async def verify_integrity(
    complaint_id: UUID,
    request: Request,
    service: ComplaintLifecycleService = Depends(get_lifecycle_service),
) -> IntegrityResponse:
    try:
        complaint = await service.get_complaint(complaint_id)
        verified = await service.verify_complaint_integrity(complaint_id)
    except CivicLedgerError as e:
        raise to_http_exception(e, request) from None
    return IntegrityResponse(
        complaint_id=complaint_id,
        verified=verified,
        content_hash=complaint.content_hash,
        transaction_id=complaint.transaction_id,
    )
