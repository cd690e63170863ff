"""In-memory stubs for development and testing."""

from civicledger.infrastructure.stubs.complaint_repository_stub import (
    ComplaintRepositoryStub,
)
from civicledger.infrastructure.stubs.ledger_contract_stub import (
    LedgerContractStub,
    LedgerEntry,
    SentTransaction,
)

__all__: list[str] = [
    "ComplaintRepositoryStub",
    "LedgerContractStub",
    "LedgerEntry",
    "SentTransaction",
]
