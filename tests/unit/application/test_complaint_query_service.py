"""Unit tests for ComplaintQueryService."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from civicledger.application.services.complaint_lifecycle_service import (
    ComplaintLifecycleService,
)
from civicledger.application.services.complaint_query_service import (
    ComplaintQueryService,
)
from civicledger.application.services.vote_service import VoteService
from civicledger.config.complaint_config import ComplaintQueryConfig
from civicledger.domain.errors import ComplaintNotFoundError, ComplaintValidationError
from civicledger.infrastructure.stubs.complaint_repository_stub import (
    ComplaintRepositoryStub,
)
from tests.helpers import create_complaint


@pytest.fixture
def query_service(repository: ComplaintRepositoryStub) -> ComplaintQueryService:
    return ComplaintQueryService(
        repository, ComplaintQueryConfig(default_page_limit=2, max_page_limit=10)
    )


@pytest.fixture
async def seeded(
    lifecycle_service: ComplaintLifecycleService,
    vote_service: VoteService,
    repository: ComplaintRepositoryStub,
) -> dict[str, object]:
    """Three complaints of different age, category and votes."""
    now = datetime.now(timezone.utc)
    pothole = (await create_complaint(lifecycle_service)).complaint
    garbage = (
        await create_complaint(
            lifecycle_service,
            title="Garbage pile near market",
            description="Uncollected trash for a week",
            category="garbage",
            longitude=77.6100,
            latitude=12.9800,
            address="Market Road",
        )
    ).complaint
    light = (
        await create_complaint(
            lifecycle_service,
            title="Streetlight out",
            description="Dark stretch after sunset",
            category="streetlight",
            longitude=72.8777,
            latitude=19.0760,
            address="Marine Drive, Mumbai",
        )
    ).complaint
    await repository.update_lifecycle(replace(pothole, created_at=now - timedelta(days=10)))
    await repository.update_lifecycle(replace(garbage, created_at=now - timedelta(days=1)))
    await repository.update_lifecycle(replace(light, created_at=now - timedelta(hours=1)))
    for user in ("u1", "u2"):
        await vote_service.toggle_vote(garbage.id, user)
    await vote_service.toggle_vote(pothole.id, "u1")
    return {"pothole": pothole, "garbage": garbage, "light": light}


class TestGetComplaintView:
    @pytest.mark.asyncio
    async def test_view_carries_impact(
        self, query_service: ComplaintQueryService, seeded: dict
    ) -> None:
        view = await query_service.get_complaint_view(seeded["pothole"].id)
        assert view.impact_score == 1 * (10 + 1)
        assert view.distance_m is None

    @pytest.mark.asyncio
    async def test_unknown(self, query_service: ComplaintQueryService) -> None:
        with pytest.raises(ComplaintNotFoundError):
            await query_service.get_complaint_view(uuid4())


class TestListComplaints:
    @pytest.mark.asyncio
    async def test_default_newest_first_paginated(
        self, query_service: ComplaintQueryService, seeded: dict
    ) -> None:
        page = await query_service.list_complaints()

        assert page.total == 3
        assert page.limit == 2
        assert page.total_pages == 2
        assert [v.complaint.id for v in page.items] == [
            seeded["light"].id,
            seeded["garbage"].id,
        ]

        second = await query_service.list_complaints(page=2)
        assert [v.complaint.id for v in second.items] == [seeded["pothole"].id]

    @pytest.mark.asyncio
    async def test_sort_by_impact(
        self, query_service: ComplaintQueryService, seeded: dict
    ) -> None:
        page = await query_service.list_complaints(sort_by="impact_score", limit=3)

        assert [v.complaint.id for v in page.items] == [
            seeded["pothole"].id,
            seeded["garbage"].id,
            seeded["light"].id,
        ]
        assert [v.impact_score for v in page.items] == [11, 4, 0]

    @pytest.mark.asyncio
    async def test_sort_by_votes_ascending(
        self, query_service: ComplaintQueryService, seeded: dict
    ) -> None:
        page = await query_service.list_complaints(sort_by="votes", order="asc", limit=3)
        assert [v.complaint.votes for v in page.items] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_filters(self, query_service: ComplaintQueryService, seeded: dict) -> None:
        by_category = await query_service.list_complaints(category="garbage")
        by_status = await query_service.list_complaints(status="Verified")
        by_search = await query_service.list_complaints(search="MUMBAI")

        assert [v.complaint.id for v in by_category.items] == [seeded["garbage"].id]
        assert by_status.total == 0
        assert [v.complaint.id for v in by_search.items] == [seeded["light"].id]

    @pytest.mark.parametrize(
        "kwargs, field",
        [
            ({"sort_by": "title"}, "sort_by"),
            ({"order": "up"}, "order"),
            ({"page": 0}, "page"),
            ({"limit": 11}, "limit"),
            ({"limit": 0}, "limit"),
            ({"limit": -1}, "limit"),
            ({"status": "Closed"}, "status"),
            ({"category": "noise"}, "category"),
        ],
    )
    @pytest.mark.asyncio
    async def test_rejects_bad_arguments(
        self, query_service: ComplaintQueryService, kwargs: dict, field: str
    ) -> None:
        with pytest.raises(ComplaintValidationError) as exc_info:
            await query_service.list_complaints(**kwargs)
        assert exc_info.value.field == field


class TestFindNearby:
    @pytest.mark.asyncio
    async def test_nearest_first_within_radius(
        self, query_service: ComplaintQueryService, seeded: dict
    ) -> None:
        views = await query_service.find_nearby(77.5950, 12.9720, 5000)

        assert [v.complaint.id for v in views] == [
            seeded["pothole"].id,
            seeded["garbage"].id,
        ]
        assert views[0].distance_m < views[1].distance_m <= 5000

    @pytest.mark.asyncio
    async def test_default_radius(
        self, query_service: ComplaintQueryService, seeded: dict
    ) -> None:
        views = await query_service.find_nearby(72.8777, 19.0760)
        assert [v.complaint.id for v in views] == [seeded["light"].id]

    @pytest.mark.asyncio
    async def test_invalid_coordinates(self, query_service: ComplaintQueryService) -> None:
        with pytest.raises(ComplaintValidationError):
            await query_service.find_nearby(181.0, 0.0)
        with pytest.raises(ComplaintValidationError):
            await query_service.find_nearby(0.0, 0.0, -5)

    @pytest.mark.asyncio
    async def test_zero_radius_is_rejected_not_defaulted(
        self, query_service: ComplaintQueryService, seeded: dict
    ) -> None:
        with pytest.raises(ComplaintValidationError) as exc_info:
            await query_service.find_nearby(72.8777, 19.0760, 0)
        assert exc_info.value.field == "max_distance"
