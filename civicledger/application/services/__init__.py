"""Application services for Civic Ledger."""

from civicledger.application.services.complaint_lifecycle_service import (
    ComplaintLifecycleService,
    parse_category,
    parse_status,
)
from civicledger.application.services.complaint_query_service import (
    ComplaintQueryService,
)
from civicledger.application.services.content_hash_service import (
    Blake3ContentHashService,
)
from civicledger.application.services.duplicate_detection_service import (
    DuplicateDetectionService,
)
from civicledger.application.services.keyed_lock import KeyedLock
from civicledger.application.services.ledger_gateway_service import (
    LedgerGatewayService,
)
from civicledger.application.services.reconciliation_audit_service import (
    ReconciliationAuditService,
)
from civicledger.application.services.vote_service import VoteService

__all__: list[str] = [
    "Blake3ContentHashService",
    "ComplaintLifecycleService",
    "ComplaintQueryService",
    "DuplicateDetectionService",
    "KeyedLock",
    "LedgerGatewayService",
    "ReconciliationAuditService",
    "VoteService",
    "parse_category",
    "parse_status",
]
