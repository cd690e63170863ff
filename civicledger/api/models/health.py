"""Health check response models."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response model.

    Attributes:
        status: "healthy" once the ledger connection is verified,
            "degraded" otherwise.
        ledger_connected: Whether the startup ledger check passed.
        reconciliation_worker_running: Whether the audit loop is active.
    """

    status: str
    ledger_connected: bool
    reconciliation_worker_running: bool = False
