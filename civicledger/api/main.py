"""FastAPI application entry point for CivicLedger."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from civicledger.api.errors import problem_detail
from civicledger.api.middleware import LoggingMiddleware, MetricsMiddleware
from civicledger.api.routes import (
    admin_router,
    complaints_router,
    health_router,
    metrics_router,
)
from civicledger.api.startup import (
    configure_logging,
    prepare_complaint_store,
    record_service_startup,
    verify_ledger_connection_at_startup,
)
from civicledger.bootstrap.complaints import get_audit_service, get_reconciliation_config
from civicledger.bootstrap.database import close_database_engine
from civicledger.workers.reconciliation_worker import ReconciliationWorker


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    await verify_ledger_connection_at_startup()
    await prepare_complaint_store()
    record_service_startup()

    worker = ReconciliationWorker(get_audit_service(), get_reconciliation_config())
    app.state.reconciliation_worker = worker
    worker.start()
    try:
        yield
    finally:
        await worker.stop()
        await close_database_engine()


app = FastAPI(
    title="CivicLedger API",
    description="Civic complaints mirrored to an immutable ledger",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(MetricsMiddleware)
app.add_middleware(LoggingMiddleware)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed requests get a 400 problem-details body like domain validation."""
    detail = problem_detail(
        400, "invalid-request", "Invalid Request", "Request validation failed", request
    )
    detail["errors"] = [
        {"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": detail})


app.include_router(health_router)
app.include_router(metrics_router)
app.include_router(complaints_router)
app.include_router(admin_router)
