"""Health check endpoint."""

from fastapi import APIRouter, Request

from civicledger.api.models.health import HealthResponse
from civicledger.bootstrap.ledger import get_ledger_gateway

router = APIRouter(prefix="/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Return health status.

    Returns:
        "healthy" with 200 once the ledger connection was verified.
    """
    connected = get_ledger_gateway().is_connected
    worker = getattr(request.app.state, "reconciliation_worker", None)
    return HealthResponse(
        status="healthy" if connected else "degraded",
        ledger_connected=connected,
        reconciliation_worker_running=bool(worker and worker.is_running),
    )
