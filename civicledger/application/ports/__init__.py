"""Application ports (interfaces) for Civic Ledger.

Ports are typing.Protocol classes. Infrastructure provides adapters and
stubs that satisfy them structurally.
"""

from civicledger.application.ports.complaint_repository import (
    SORT_FIELDS,
    ComplaintQuery,
    ComplaintRepositoryProtocol,
)
from civicledger.application.ports.content_hash_service import (
    ContentHashServiceProtocol,
)
from civicledger.application.ports.ledger_contract import LedgerContractProtocol
from civicledger.application.ports.ledger_gateway import LedgerGatewayProtocol
from civicledger.application.ports.text_analyzer import TextAnalyzerProtocol

__all__: list[str] = [
    "SORT_FIELDS",
    "ComplaintQuery",
    "ComplaintRepositoryProtocol",
    "ContentHashServiceProtocol",
    "LedgerContractProtocol",
    "LedgerGatewayProtocol",
    "TextAnalyzerProtocol",
]
