"""Configuration dataclasses loaded from the environment."""

from civicledger.config.complaint_config import (
    DEFAULT_LIFECYCLE_CONFIG,
    DEFAULT_QUERY_CONFIG,
    DEFAULT_RECONCILIATION_CONFIG,
    STRICT_LIFECYCLE_CONFIG,
    TEST_RECONCILIATION_CONFIG,
    ComplaintLifecycleConfig,
    ComplaintQueryConfig,
    ReconciliationConfig,
)
from civicledger.config.ledger_config import (
    LEDGER_MODE_STUB,
    LEDGER_MODE_WEB3,
    TEST_LEDGER_CONFIG,
    ZERO_ADDRESS,
    LedgerConfig,
)

__all__: list[str] = [
    "DEFAULT_LIFECYCLE_CONFIG",
    "DEFAULT_QUERY_CONFIG",
    "DEFAULT_RECONCILIATION_CONFIG",
    "LEDGER_MODE_STUB",
    "LEDGER_MODE_WEB3",
    "STRICT_LIFECYCLE_CONFIG",
    "TEST_LEDGER_CONFIG",
    "TEST_RECONCILIATION_CONFIG",
    "ZERO_ADDRESS",
    "ComplaintLifecycleConfig",
    "ComplaintQueryConfig",
    "LedgerConfig",
    "ReconciliationConfig",
]
