"""Bootstrap wiring for complaint services.

The repository is PostgreSQL when DATABASE_URL is set and the in-memory
stub otherwise. A configured database that cannot be reached fails
startup; the service never silently switches stores.
"""

from __future__ import annotations

import os

from structlog import get_logger

from civicledger.application.ports.complaint_repository import (
    ComplaintRepositoryProtocol,
)
from civicledger.application.ports.text_analyzer import TextAnalyzerProtocol
from civicledger.application.services.complaint_lifecycle_service import (
    ComplaintLifecycleService,
)
from civicledger.application.services.complaint_query_service import (
    ComplaintQueryService,
)
from civicledger.application.services.duplicate_detection_service import (
    DuplicateDetectionService,
)
from civicledger.application.services.reconciliation_audit_service import (
    ReconciliationAuditService,
)
from civicledger.application.services.vote_service import VoteService
from civicledger.bootstrap.ledger import get_ledger_gateway
from civicledger.config.complaint_config import (
    ComplaintLifecycleConfig,
    ComplaintQueryConfig,
    ReconciliationConfig,
)
from civicledger.infrastructure.adapters.text.keyword_text_analyzer import (
    KeywordTextAnalyzer,
)
from civicledger.infrastructure.stubs.complaint_repository_stub import (
    ComplaintRepositoryStub,
)

logger = get_logger()

_complaint_repository: ComplaintRepositoryProtocol | None = None
_text_analyzer: TextAnalyzerProtocol | None = None
_lifecycle_service: ComplaintLifecycleService | None = None
_vote_service: VoteService | None = None
_query_service: ComplaintQueryService | None = None
_duplicate_service: DuplicateDetectionService | None = None
_audit_service: ReconciliationAuditService | None = None
_reconciliation_config: ReconciliationConfig | None = None
_query_config: ComplaintQueryConfig | None = None


def get_complaint_repository() -> ComplaintRepositoryProtocol:
    """Return the complaint repository selected by DATABASE_URL."""
    global _complaint_repository
    if _complaint_repository is None:
        if os.environ.get("DATABASE_URL"):
            from civicledger.bootstrap.database import get_session_factory
            from civicledger.infrastructure.adapters.persistence.complaint_repository import (
                PostgresComplaintRepository,
            )

            _complaint_repository = PostgresComplaintRepository(get_session_factory())
            logger.info("complaint_repository_initialized", repository_type="PostgreSQL")
        else:
            logger.warning(
                "complaint_repository_initialized",
                repository_type="InMemoryStub",
                message="DATABASE_URL not set - using in-memory stub (data will not persist)",
            )
            _complaint_repository = ComplaintRepositoryStub()
    return _complaint_repository


def get_text_analyzer() -> TextAnalyzerProtocol:
    global _text_analyzer
    if _text_analyzer is None:
        _text_analyzer = KeywordTextAnalyzer()
    return _text_analyzer


def get_reconciliation_config() -> ReconciliationConfig:
    global _reconciliation_config
    if _reconciliation_config is None:
        _reconciliation_config = ReconciliationConfig.from_environment()
    return _reconciliation_config


def get_query_config() -> ComplaintQueryConfig:
    global _query_config
    if _query_config is None:
        _query_config = ComplaintQueryConfig.from_environment()
    return _query_config


def get_lifecycle_service() -> ComplaintLifecycleService:
    global _lifecycle_service
    if _lifecycle_service is None:
        _lifecycle_service = ComplaintLifecycleService(
            gateway=get_ledger_gateway(),
            repository=get_complaint_repository(),
            config=ComplaintLifecycleConfig.from_environment(),
        )
    return _lifecycle_service


def get_vote_service() -> VoteService:
    global _vote_service
    if _vote_service is None:
        _vote_service = VoteService(repository=get_complaint_repository())
    return _vote_service


def get_query_service() -> ComplaintQueryService:
    global _query_service
    if _query_service is None:
        _query_service = ComplaintQueryService(
            repository=get_complaint_repository(), config=get_query_config()
        )
    return _query_service


def get_duplicate_service() -> DuplicateDetectionService:
    global _duplicate_service
    if _duplicate_service is None:
        _duplicate_service = DuplicateDetectionService(
            repository=get_complaint_repository(),
            analyzer=get_text_analyzer(),
            config=get_query_config(),
        )
    return _duplicate_service


def get_audit_service() -> ReconciliationAuditService:
    global _audit_service
    if _audit_service is None:
        _audit_service = ReconciliationAuditService(
            gateway=get_ledger_gateway(),
            repository=get_complaint_repository(),
            config=get_reconciliation_config(),
        )
    return _audit_service


def reset_complaint_services() -> None:
    """Reset all complaint singletons (tests only)."""
    global _complaint_repository, _text_analyzer, _lifecycle_service, _vote_service
    global _query_service, _duplicate_service, _audit_service
    global _reconciliation_config, _query_config
    _complaint_repository = None
    _text_analyzer = None
    _lifecycle_service = None
    _vote_service = None
    _query_service = None
    _duplicate_service = None
    _audit_service = None
    _reconciliation_config = None
    _query_config = None
