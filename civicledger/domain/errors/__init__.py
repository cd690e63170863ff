"""Domain errors for Civic Ledger.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from CivicLedgerError.
"""

from civicledger.domain.errors.complaint import (
    ComplaintError,
    ComplaintNotFoundError,
    ComplaintValidationError,
    InvalidStatusTransitionError,
    ResolutionAlreadyRecordedError,
)
from civicledger.domain.errors.ledger import (
    LedgerConfigurationError,
    LedgerConnectionNotVerifiedError,
    LedgerError,
    LedgerTransactionError,
    LedgerUnavailableError,
)
from civicledger.domain.errors.reconciliation import PersistenceGapError

__all__: list[str] = [
    "ComplaintError",
    "ComplaintNotFoundError",
    "ComplaintValidationError",
    "InvalidStatusTransitionError",
    "LedgerConfigurationError",
    "LedgerConnectionNotVerifiedError",
    "LedgerError",
    "LedgerTransactionError",
    "LedgerUnavailableError",
    "PersistenceGapError",
    "ResolutionAlreadyRecordedError",
]
