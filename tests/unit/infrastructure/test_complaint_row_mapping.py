"""Unit tests for the PostgreSQL row mapping helpers."""

import json

import pytest

from civicledger.application.services.complaint_lifecycle_service import (
    ComplaintLifecycleService,
)
from civicledger.domain.models.complaint import ComplaintStatus
from civicledger.infrastructure.adapters.persistence.complaint_repository import (
    _history_from_json,
    _lifecycle_params,
    _row_to_complaint,
)
from tests.helpers import create_complaint


class TestRowMapping:
    @pytest.mark.asyncio
    async def test_row_builds_equal_complaint(
        self, lifecycle_service: ComplaintLifecycleService
    ) -> None:
        created = (await create_complaint(lifecycle_service)).complaint
        complaint = (
            await lifecycle_service.verify_complaint(created.id, "admin-1")
        ).with_voter("u1")
        params = _lifecycle_params(complaint)
        row = {
            **params,
            "title": complaint.title,
            "description": complaint.description,
            "category": complaint.category.value,
            "longitude": complaint.location.longitude,
            "latitude": complaint.location.latitude,
            "address": complaint.location.address,
            "reporter_id": complaint.reporter_id,
            "content_hash": complaint.content_hash,
            "transaction_id": complaint.transaction_id,
            "block_number": complaint.block_number,
            "image_refs": list(complaint.image_refs),
            "voters": ["u1"],
            "created_at": complaint.created_at,
        }

        assert _row_to_complaint(row) == complaint

    def test_history_accepts_decoded_jsonb(self) -> None:
        raw = [
            {"status": "Reported", "timestamp": "2026-01-05T10:00:00+00:00", "actor_id": "c1"},
            {"status": "InProgress", "timestamp": "2026-01-06T09:30:00+00:00", "actor_id": "a1"},
        ]

        from_list = _history_from_json(raw)
        from_text = _history_from_json(json.dumps(raw))

        assert from_list == from_text
        assert [e.status for e in from_list] == [
            ComplaintStatus.REPORTED,
            ComplaintStatus.IN_PROGRESS,
        ]
        assert from_list[1].timestamp.tzinfo is not None
