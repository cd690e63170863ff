"""Startup hooks for the CivicLedger API.

Run in order by the application lifespan:
1. Configure structured logging
2. Verify the ledger connection (network, contract, signer, balance)
3. Prepare the complaint store
4. Record service startup for metrics

Step 2 is a gate: LedgerConfigurationError propagates out of the lifespan,
so the server never accepts a request against an unverified ledger.

Usage standalone:
    configure_logging()
    await verify_ledger_connection_at_startup()
    await prepare_complaint_store()
    record_service_startup()
"""

import os

from structlog import get_logger

from civicledger.bootstrap.complaints import get_complaint_repository
from civicledger.bootstrap.ledger import get_ledger_gateway
from civicledger.bootstrap.logging import configure_structlog
from civicledger.domain.errors import LedgerConfigurationError
from civicledger.domain.models.ledger import LedgerConnectionReport
from civicledger.infrastructure.adapters.persistence.complaint_repository import (
    PostgresComplaintRepository,
)
from civicledger.infrastructure.monitoring.metrics import get_metrics_collector

ENVIRONMENT_VAR = "ENVIRONMENT"
DEFAULT_ENVIRONMENT = "development"
SERVICE_NAME = "api"

logger = get_logger()


def configure_logging() -> None:
    """Configure structlog from ENVIRONMENT (JSON in production)."""
    environment = os.getenv(ENVIRONMENT_VAR, DEFAULT_ENVIRONMENT)
    configure_structlog(environment=environment)
    get_logger().bind(component="startup_logging").info(
        "structured_logging_configured", environment=environment
    )


async def verify_ledger_connection_at_startup() -> LedgerConnectionReport:
    """Verify the ledger before the application starts serving.

    Raises:
        LedgerConfigurationError: If any startup check fails.
    """
    log = logger.bind(component="startup_ledger")
    log.info("ledger_startup_verification_started")
    try:
        report = await get_ledger_gateway().verify_connection()
    except LedgerConfigurationError as e:
        log.critical(
            "ledger_startup_verification_failed",
            check=e.check,
            reason=e.reason,
            message="Startup blocked - ledger connection not verified",
        )
        raise
    log.info("ledger_startup_verification_passed", **report.to_dict())
    return report


async def prepare_complaint_store() -> None:
    """Create the PostgreSQL schema when the database store is configured."""
    repository = get_complaint_repository()
    if isinstance(repository, PostgresComplaintRepository):
        await repository.ensure_schema()
        logger.bind(component="startup_store").info("complaint_schema_ready")


def record_service_startup() -> None:
    """Record service start for the uptime gauge."""
    get_metrics_collector().record_startup(SERVICE_NAME)
    logger.bind(component="startup_metrics").info(
        "service_startup_recorded", service=SERVICE_NAME
    )
