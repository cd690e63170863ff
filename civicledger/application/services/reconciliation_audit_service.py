"""Reconciliation audit between the off-chain store and the ledger.

There is no cross-store transaction, so divergence is detected after the
fact. The audit enumerates every off-chain complaint and asks the ledger
whether it knows the id; optionally it also recomputes the content hash
and compares it with the registered one.

Developer Golden Rules:
1. READ ONLY - The audit never writes to either store
2. BOUNDED - At most `concurrency` ledger lookups are in flight
3. DETERMINISTIC - Anomalies come back in enumeration order
4. ALL OR NOTHING - A ledger failure aborts the run; no partial report
"""

from __future__ import annotations

import asyncio
from collections import Counter
from datetime import datetime, timezone
from uuid import UUID

from uuid6 import uuid7

from civicledger.application.ports.complaint_repository import (
    ComplaintRepositoryProtocol,
)
from civicledger.application.ports.ledger_gateway import LedgerGatewayProtocol
from civicledger.application.services.base import LoggingMixin
from civicledger.config.complaint_config import (
    DEFAULT_RECONCILIATION_CONFIG,
    ReconciliationConfig,
)
from civicledger.domain.errors.ledger import LedgerUnavailableError
from civicledger.domain.models.reconciliation import (
    AnomalyKind,
    AnomalyRecord,
    ReconciliationReport,
)
from civicledger.infrastructure.monitoring.metrics import (
    MetricsCollector,
    get_metrics_collector,
)


class ReconciliationAuditService(LoggingMixin):
    """Detects complaints whose off-chain record has no matching ledger entry."""

    def __init__(
        self,
        gateway: LedgerGatewayProtocol,
        repository: ComplaintRepositoryProtocol,
        config: ReconciliationConfig = DEFAULT_RECONCILIATION_CONFIG,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._gateway = gateway
        self._repository = repository
        self._config = config
        self._metrics = metrics or get_metrics_collector()
        self._init_logger(component="audit")

    async def detect_anomalies(self, check_integrity: bool = False) -> list[AnomalyRecord]:
        """Compare every off-chain complaint with the ledger.

        Args:
            check_integrity: Also recompute content hashes for complaints
                the ledger knows and report mismatches.

        Returns:
            Anomalies in the order returned by repository.list_ids().

        Raises:
            LedgerUnavailableError: If any ledger lookup fails.
        """
        _, anomalies = await self._sweep(check_integrity)
        return anomalies

    async def _sweep(self, check_integrity: bool) -> tuple[int, list[AnomalyRecord]]:
        complaint_ids = await self._repository.list_ids()
        semaphore = asyncio.Semaphore(self._config.concurrency)

        async def check(complaint_id: UUID) -> AnomalyRecord | None:
            async with semaphore:
                if not await self._gateway.exists(complaint_id):
                    return AnomalyRecord.of(complaint_id, AnomalyKind.MISSING_ON_CHAIN)
                if check_integrity:
                    return await self._check_content_hash(complaint_id)
                return None

        tasks = [asyncio.create_task(check(cid)) for cid in complaint_ids]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return len(complaint_ids), [record for record in results if record is not None]

    async def run_audit(self, check_integrity: bool = False) -> ReconciliationReport:
        """Run one audit and publish its outcome to logs and metrics."""
        audit_id = uuid7()
        log = self._log_operation(
            "run_audit", audit_id=str(audit_id), check_integrity=check_integrity
        )
        started_at = datetime.now(timezone.utc)
        log.info("reconciliation_audit_started")

        try:
            checked_count, anomalies = await self._sweep(check_integrity)
        except LedgerUnavailableError as e:
            self._metrics.increment_reconciliation_runs("ledger_unavailable")
            log.error("reconciliation_audit_failed", reason=e.reason)
            raise

        report = ReconciliationReport(
            audit_id=audit_id,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
            checked_count=checked_count,
            anomalies=tuple(anomalies),
            check_integrity=check_integrity,
        )

        counts = Counter(a.kind.value for a in anomalies)
        self._metrics.set_reconciliation_anomalies(
            {kind.value: counts.get(kind.value, 0) for kind in AnomalyKind}
        )
        self._metrics.increment_reconciliation_runs("clean" if report.is_clean else "anomalies")
        for anomaly in anomalies:
            log.warning(
                "reconciliation_anomaly",
                complaint_id=str(anomaly.complaint_id),
                kind=anomaly.kind.value,
            )
        log.info(
            "reconciliation_audit_completed",
            checked_count=report.checked_count,
            anomaly_count=report.anomaly_count,
            duration_seconds=report.duration_seconds,
        )
        return report

    async def _check_content_hash(self, complaint_id: UUID) -> AnomalyRecord | None:
        complaint = await self._repository.get(complaint_id)
        if complaint is None:
            # Deleted since enumeration
            return None
        content_hash = self._gateway.compute_content_hash(complaint.creation_payload())
        if await self._gateway.verify_integrity(complaint_id, content_hash):
            return None
        return AnomalyRecord.of(complaint_id, AnomalyKind.CONTENT_HASH_MISMATCH)
