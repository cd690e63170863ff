"""Periodic reconciliation audit worker.

Runs ReconciliationAuditService.run_audit() every interval_seconds inside
the API process. A failed run is logged and the loop carries on with the
next one; stop() cancels the loop on application shutdown.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from civicledger.application.services.reconciliation_audit_service import (
    ReconciliationAuditService,
)
from civicledger.config.complaint_config import ReconciliationConfig
from civicledger.domain.exceptions import CivicLedgerError
from civicledger.domain.models.reconciliation import ReconciliationReport

logger = structlog.get_logger()


class ReconciliationWorker:
    """Background asyncio task running the reconciliation audit."""

    def __init__(
        self,
        audit_service: ReconciliationAuditService,
        config: ReconciliationConfig,
    ) -> None:
        self._audit_service = audit_service
        self._config = config
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._runs = 0
        self._failures = 0
        self._last_report: ReconciliationReport | None = None
        self._log = logger.bind(component="audit", worker="reconciliation")

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def last_report(self) -> ReconciliationReport | None:
        return self._last_report

    def start(self) -> None:
        """Start the loop; no-op when disabled or already running."""
        if not self._config.worker_enabled:
            self._log.info("reconciliation_worker_disabled")
            return
        if self.is_running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop(), name="reconciliation-worker")
        self._log.info(
            "reconciliation_worker_started", interval_seconds=self._config.interval_seconds
        )

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        self._running = False
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self._log.info("reconciliation_worker_stopped", runs=self._runs, failures=self._failures)

    async def run_once(self) -> ReconciliationReport | None:
        """Run one audit; failures are logged and reported as None."""
        self._runs += 1
        try:
            report = await self._audit_service.run_audit(
                check_integrity=self._config.check_integrity
            )
        except CivicLedgerError as e:
            self._failures += 1
            self._log.error(
                "reconciliation_run_failed", error=str(e), error_type=type(e).__name__
            )
            return None
        self._last_report = report
        return report

    async def _loop(self) -> None:
        while self._running:
            await asyncio.sleep(self._config.interval_seconds)
            try:
                await self.run_once()
            except Exception as e:
                # Store errors must not end the loop
                self._failures += 1
                self._log.exception(
                    "reconciliation_run_crashed", error=str(e), error_type=type(e).__name__
                )

    def get_stats(self) -> dict[str, Any]:
        return {
            "running": self.is_running,
            "runs": self._runs,
            "failures": self._failures,
            "last_anomaly_count": (
                self._last_report.anomaly_count if self._last_report else None
            ),
        }
