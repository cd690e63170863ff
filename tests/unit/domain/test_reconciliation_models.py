"""Unit tests for reconciliation report models."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from civicledger.domain.models.reconciliation import (
    AnomalyKind,
    AnomalyRecord,
    ReconciliationReport,
)


class TestAnomalyRecord:
    def test_missing_on_chain_wire_form(self) -> None:
        complaint_id = uuid4()
        record = AnomalyRecord.of(complaint_id, AnomalyKind.MISSING_ON_CHAIN)

        assert record.to_dict() == {
            "complaintId": str(complaint_id),
            "type": "missing_on_chain",
            "message": "Complaint exists in DB but not on blockchain",
        }


class TestReconciliationReport:
    def test_clean_report(self) -> None:
        now = datetime.now(timezone.utc)
        report = ReconciliationReport(
            audit_id=uuid4(),
            started_at=now,
            completed_at=now + timedelta(seconds=2),
            checked_count=3,
            anomalies=(),
        )
        assert report.is_clean
        assert report.anomaly_count == 0
        assert report.duration_seconds == 2.0

    def test_report_with_anomalies(self) -> None:
        now = datetime.now(timezone.utc)
        record = AnomalyRecord.of(uuid4(), AnomalyKind.CONTENT_HASH_MISMATCH)
        report = ReconciliationReport(
            audit_id=uuid4(),
            started_at=now,
            completed_at=now,
            checked_count=1,
            anomalies=(record,),
            check_integrity=True,
        )
        assert not report.is_clean
        assert report.anomaly_count == 1
