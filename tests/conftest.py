"""
Pytest configuration and shared fixtures for CivicLedger tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async function mocking
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
- Ledger and store are the in-memory stubs unless a test needs a mock
"""

import pytest
from prometheus_client import CollectorRegistry

from civicledger.application.services.complaint_lifecycle_service import (
    ComplaintLifecycleService,
)
from civicledger.application.services.ledger_gateway_service import (
    LedgerGatewayService,
)
from civicledger.application.services.reconciliation_audit_service import (
    ReconciliationAuditService,
)
from civicledger.application.services.vote_service import VoteService
from civicledger.config.complaint_config import TEST_RECONCILIATION_CONFIG
from civicledger.config.ledger_config import TEST_LEDGER_CONFIG
from civicledger.infrastructure.monitoring.metrics import MetricsCollector
from civicledger.infrastructure.stubs.complaint_repository_stub import (
    ComplaintRepositoryStub,
)
from civicledger.infrastructure.stubs.ledger_contract_stub import LedgerContractStub


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from civicledger import __version__

    return __version__


@pytest.fixture
def metrics() -> MetricsCollector:
    """Metrics collector on a private registry."""
    return MetricsCollector(registry=CollectorRegistry())


@pytest.fixture
def ledger_contract() -> LedgerContractStub:
    return LedgerContractStub()


@pytest.fixture
def repository() -> ComplaintRepositoryStub:
    return ComplaintRepositoryStub()


@pytest.fixture
async def gateway(
    ledger_contract: LedgerContractStub, metrics: MetricsCollector
) -> LedgerGatewayService:
    """Gateway over the in-memory ledger with the startup check passed."""
    service = LedgerGatewayService(
        contract=ledger_contract, config=TEST_LEDGER_CONFIG, metrics=metrics
    )
    await service.verify_connection()
    return service


@pytest.fixture
def lifecycle_service(
    gateway: LedgerGatewayService,
    repository: ComplaintRepositoryStub,
    metrics: MetricsCollector,
) -> ComplaintLifecycleService:
    return ComplaintLifecycleService(
        gateway=gateway, repository=repository, metrics=metrics
    )


@pytest.fixture
def vote_service(repository: ComplaintRepositoryStub) -> VoteService:
    return VoteService(repository=repository)


@pytest.fixture
def audit_service(
    gateway: LedgerGatewayService,
    repository: ComplaintRepositoryStub,
    metrics: MetricsCollector,
) -> ReconciliationAuditService:
    return ReconciliationAuditService(
        gateway=gateway,
        repository=repository,
        config=TEST_RECONCILIATION_CONFIG,
        metrics=metrics,
    )
