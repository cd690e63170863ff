"""RFC 7807 problem details for domain errors.

4xx bodies mean the request itself was refused and nothing was written.
503 means the ledger write did not complete and nothing changed; the
caller may retry. 500 with the persistence-gap type means the ledger
committed but the off-chain record did not follow; the gap is picked up
by the reconciliation audit.
"""

from typing import Any

from fastapi import HTTPException, Request

from civicledger.domain.errors import (
    ComplaintNotFoundError,
    ComplaintValidationError,
    InvalidStatusTransitionError,
    LedgerConfigurationError,
    LedgerUnavailableError,
    PersistenceGapError,
    ResolutionAlreadyRecordedError,
)
from civicledger.domain.exceptions import CivicLedgerError

ERROR_TYPE_BASE = "urn:civicledger:error"

# Most specific first: isinstance() decides the first matching row
_PROBLEM_TABLE: tuple[tuple[type[CivicLedgerError], int, str, str], ...] = (
    (ComplaintValidationError, 400, "invalid-complaint", "Invalid Complaint Request"),
    (ComplaintNotFoundError, 404, "complaint-not-found", "Complaint Not Found"),
    (
        InvalidStatusTransitionError,
        409,
        "invalid-status-transition",
        "Invalid Status Transition",
    ),
    (
        ResolutionAlreadyRecordedError,
        409,
        "resolution-already-recorded",
        "Resolution Already Recorded",
    ),
    (LedgerUnavailableError, 503, "ledger-unavailable", "Ledger Unavailable"),
    (LedgerConfigurationError, 503, "ledger-not-ready", "Ledger Not Ready"),
    (PersistenceGapError, 500, "persistence-gap", "Ledger Committed, Storage Failed"),
)


def problem_detail(
    status: int, error_type: str, title: str, detail: str, request: Request
) -> dict[str, Any]:
    return {
        "type": f"{ERROR_TYPE_BASE}:{error_type}",
        "title": title,
        "status": status,
        "detail": detail,
        "instance": str(request.url),
    }


def to_http_exception(error: CivicLedgerError, request: Request) -> HTTPException:
    """Map a domain error to an HTTPException with a problem-details body.

    Unmapped CivicLedgerError subclasses become a generic 500.
    """
    for error_class, status, error_type, title in _PROBLEM_TABLE:
        if isinstance(error, error_class):
            break
    else:
        status, error_type, title = 500, "internal", "Internal Error"

    detail = problem_detail(status, error_type, title, str(error), request)
    headers: dict[str, str] | None = None

    if isinstance(error, ComplaintValidationError) and error.field:
        detail["field"] = error.field
    elif isinstance(error, InvalidStatusTransitionError):
        detail["current_status"] = error.from_status.value
        detail["requested_status"] = error.to_status.value
        detail["allowed_statuses"] = [s.value for s in error.allowed]
    elif isinstance(error, ResolutionAlreadyRecordedError):
        detail["resolution_transaction_id"] = error.resolution_transaction_id
    elif isinstance(error, LedgerUnavailableError):
        detail["operation"] = error.operation
        detail["reason"] = error.reason
        detail["state_changed"] = False
        headers = {"Retry-After": "30"}
    elif isinstance(error, PersistenceGapError):
        detail["operation"] = error.operation
        detail["transaction_id"] = error.transaction_id
        detail["complaint_id"] = error.complaint_id

    return HTTPException(status_code=status, detail=detail, headers=headers)
