"""Administrative complaint routes.

All routes require X-Actor-ID and X-Actor-Role: admin. Status changes and
resolutions follow the same ledger-first protocol as creation; deletion
only removes the off-chain record, the ledger entry stays.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response

from civicledger.api.auth.actor_auth import get_admin_actor_id
from civicledger.api.errors import to_http_exception
from civicledger.api.models.admin import (
    AnomalyReportResponse,
    ResolveComplaintRequest,
    UpdateStatusRequest,
)
from civicledger.api.models.complaint import ComplaintErrorResponse, ComplaintResponse
from civicledger.application.services.complaint_lifecycle_service import (
    ComplaintLifecycleService,
)
from civicledger.application.services.reconciliation_audit_service import (
    ReconciliationAuditService,
)
from civicledger.bootstrap.complaints import get_audit_service, get_lifecycle_service
from civicledger.domain.exceptions import CivicLedgerError

router = APIRouter(prefix="/v1/admin", tags=["admin"])

_TRANSITION_ERRORS = {
    400: {"model": ComplaintErrorResponse},
    401: {"description": "X-Actor-ID header missing"},
    403: {"description": "Admin role required"},
    404: {"model": ComplaintErrorResponse},
    409: {"model": ComplaintErrorResponse},
    500: {"model": ComplaintErrorResponse},
    503: {"model": ComplaintErrorResponse},
}


@router.patch(
    "/complaints/{complaint_id}/verify",
    response_model=ComplaintResponse,
    responses=_TRANSITION_ERRORS,
    summary="Verify a complaint",
)
async def verify_complaint(
    complaint_id: UUID,
    request: Request,
    actor_id: str = Depends(get_admin_actor_id),
    service: ComplaintLifecycleService = Depends(get_lifecycle_service),
) -> ComplaintResponse:
    try:
        complaint = await service.verify_complaint(complaint_id, actor_id)
    except CivicLedgerError as e:
        raise to_http_exception(e, request) from None
    return ComplaintResponse.from_complaint(complaint)


@router.patch(
    "/complaints/{complaint_id}/status",
    response_model=ComplaintResponse,
    responses=_TRANSITION_ERRORS,
    summary="Change a complaint's status",
)
async def update_complaint_status(
    complaint_id: UUID,
    request_data: UpdateStatusRequest,
    request: Request,
    actor_id: str = Depends(get_admin_actor_id),
    service: ComplaintLifecycleService = Depends(get_lifecycle_service),
) -> ComplaintResponse:
    try:
        complaint = await service.update_status(complaint_id, request_data.status, actor_id)
    except CivicLedgerError as e:
        raise to_http_exception(e, request) from None
    return ComplaintResponse.from_complaint(complaint)


@router.patch(
    "/complaints/{complaint_id}/resolve",
    response_model=ComplaintResponse,
    responses=_TRANSITION_ERRORS,
    summary="Record a complaint resolution",
)
async def resolve_complaint(
    complaint_id: UUID,
    request: Request,
    request_data: ResolveComplaintRequest | None = None,
    actor_id: str = Depends(get_admin_actor_id),
    service: ComplaintLifecycleService = Depends(get_lifecycle_service),
) -> ComplaintResponse:
    images = request_data.resolution_image_refs if request_data else []
    try:
        complaint = await service.resolve_complaint(complaint_id, actor_id, images)
    except CivicLedgerError as e:
        raise to_http_exception(e, request) from None
    return ComplaintResponse.from_complaint(complaint)


@router.delete(
    "/complaints/{complaint_id}",
    status_code=204,
    response_class=Response,
    responses={
        401: {"description": "X-Actor-ID header missing"},
        403: {"description": "Admin role required"},
        404: {"model": ComplaintErrorResponse},
    },
    summary="Delete the off-chain record of a complaint",
)
async def delete_complaint(
    complaint_id: UUID,
    request: Request,
    actor_id: str = Depends(get_admin_actor_id),
    service: ComplaintLifecycleService = Depends(get_lifecycle_service),
) -> Response:
    try:
        await service.delete_complaint(complaint_id, actor_id)
    except CivicLedgerError as e:
        raise to_http_exception(e, request) from None
    return Response(status_code=204)


@router.get(
    "/anomalies",
    response_model=AnomalyReportResponse,
    responses={
        401: {"description": "X-Actor-ID header missing"},
        403: {"description": "Admin role required"},
        503: {"model": ComplaintErrorResponse},
    },
    summary="Run a reconciliation audit",
    description=(
        "Checks every off-chain complaint against the ledger. With "
        "check_integrity=true the stored content hash is verified as well."
    ),
)
async def detect_anomalies(
    request: Request,
    check_integrity: bool = Query(default=False),
    actor_id: str = Depends(get_admin_actor_id),
    service: ReconciliationAuditService = Depends(get_audit_service),
) -> AnomalyReportResponse:
    try:
        report = await service.run_audit(check_integrity=check_integrity)
    except CivicLedgerError as e:
        raise to_http_exception(e, request) from None
    return AnomalyReportResponse.from_report(report)
