"""Fixtures for API tests.

The app runs its real lifespan against the in-memory ledger and store:
LEDGER_MODE=stub, no DATABASE_URL and the background audit disabled.
"""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from civicledger.bootstrap.complaints import (
    get_complaint_repository,
    reset_complaint_services,
)
from civicledger.bootstrap.database import reset_database_bootstrap
from civicledger.bootstrap.ledger import get_ledger_contract, reset_ledger_bootstrap
from civicledger.infrastructure.monitoring.metrics import reset_metrics_collector
from civicledger.infrastructure.stubs.complaint_repository_stub import (
    ComplaintRepositoryStub,
)
from civicledger.infrastructure.stubs.ledger_contract_stub import LedgerContractStub


def _reset_singletons() -> None:
    reset_ledger_bootstrap()
    reset_complaint_services()
    reset_database_bootstrap()
    reset_metrics_collector()


@pytest.fixture
def api_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEDGER_MODE", "stub")
    monkeypatch.setenv("RECONCILIATION_INTERVAL_SECONDS", "0")
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("LIFECYCLE_ENFORCE_NOMINAL_TRANSITIONS", raising=False)


@pytest.fixture
def client(api_env: None) -> Iterator[TestClient]:
    """TestClient with the application lifespan running."""
    from civicledger.api.main import app

    _reset_singletons()
    with TestClient(app) as test_client:
        yield test_client
    _reset_singletons()


@pytest.fixture
def ledger_stub(client: TestClient) -> LedgerContractStub:
    contract = get_ledger_contract()
    assert isinstance(contract, LedgerContractStub)
    return contract


@pytest.fixture
def store_stub(client: TestClient) -> ComplaintRepositoryStub:
    repository = get_complaint_repository()
    assert isinstance(repository, ComplaintRepositoryStub)
    return repository
