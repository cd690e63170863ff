"""Domain models for Civic Ledger."""

from civicledger.domain.models.complaint import (
    LEDGER_STATUS_CODES,
    NOMINAL_TRANSITION_MATRIX,
    Complaint,
    ComplaintCategory,
    ComplaintLocation,
    ComplaintStatus,
    StatusHistoryEntry,
    build_creation_payload,
    build_resolution_payload,
)
from civicledger.domain.models.duplicate import (
    CategorySuggestion,
    ContentAnalysis,
    DuplicateCandidate,
    Severity,
)
from civicledger.domain.models.ledger import LedgerConnectionReport, LedgerReceipt
from civicledger.domain.models.query import (
    ComplaintCreationResult,
    ComplaintPage,
    ComplaintView,
)
from civicledger.domain.models.reconciliation import (
    AnomalyKind,
    AnomalyRecord,
    ReconciliationReport,
)
from civicledger.domain.models.vote import VoteToggleResult

__all__: list[str] = [
    "LEDGER_STATUS_CODES",
    "NOMINAL_TRANSITION_MATRIX",
    "AnomalyKind",
    "AnomalyRecord",
    "CategorySuggestion",
    "Complaint",
    "ComplaintCategory",
    "ComplaintCreationResult",
    "ComplaintLocation",
    "ComplaintPage",
    "ComplaintStatus",
    "ComplaintView",
    "ContentAnalysis",
    "DuplicateCandidate",
    "LedgerConnectionReport",
    "LedgerReceipt",
    "ReconciliationReport",
    "Severity",
    "StatusHistoryEntry",
    "VoteToggleResult",
    "build_creation_payload",
    "build_resolution_payload",
]
