"""Read-side queries over complaints.

Impact scores are computed at the moment a view is built and never read
from storage.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from civicledger.application.ports.complaint_repository import (
    SORT_FIELDS,
    ComplaintQuery,
    ComplaintRepositoryProtocol,
)
from civicledger.application.services.base import LoggingMixin
from civicledger.application.services.complaint_lifecycle_service import (
    parse_category,
    parse_status,
)
from civicledger.config.complaint_config import DEFAULT_QUERY_CONFIG, ComplaintQueryConfig
from civicledger.domain.errors.complaint import (
    ComplaintNotFoundError,
    ComplaintValidationError,
)
from civicledger.domain.models.complaint import ComplaintCategory, ComplaintStatus
from civicledger.domain.models.query import ComplaintPage, ComplaintView


class ComplaintQueryService(LoggingMixin):
    """Listing, lookup and geo search for complaints."""

    def __init__(
        self,
        repository: ComplaintRepositoryProtocol,
        config: ComplaintQueryConfig = DEFAULT_QUERY_CONFIG,
    ) -> None:
        self._repository = repository
        self._config = config
        self._init_logger(component="query")

    async def get_complaint_view(self, complaint_id: UUID) -> ComplaintView:
        """Return one complaint with its current impact score.

        Raises:
            ComplaintNotFoundError: Unknown complaint.
        """
        complaint = await self._repository.get(complaint_id)
        if complaint is None:
            raise ComplaintNotFoundError(complaint_id)
        return ComplaintView(complaint=complaint, impact_score=complaint.impact_score(_now()))

    async def list_complaints(
        self,
        status: ComplaintStatus | str | None = None,
        category: ComplaintCategory | str | None = None,
        search: str | None = None,
        sort_by: str = "created_at",
        order: str = "desc",
        page: int = 1,
        limit: int | None = None,
    ) -> ComplaintPage:
        """List complaints with filters, sorting and pagination.

        Args:
            status: Only this status.
            category: Only this category.
            search: Case-insensitive substring over title, description,
                address and category.
            sort_by: created_at, votes or impact_score.
            order: asc or desc.
            page: 1-based page number.
            limit: Page size (default from config, capped at max_page_limit).

        Raises:
            ComplaintValidationError: Bad sort field, order or paging values.
        """
        if sort_by not in SORT_FIELDS:
            raise ComplaintValidationError(
                f"sort_by must be one of {sorted(SORT_FIELDS)}", "sort_by"
            )
        if order not in ("asc", "desc"):
            raise ComplaintValidationError("order must be asc or desc", "order")
        if page < 1:
            raise ComplaintValidationError("page must be >= 1", "page")
        if limit is None:
            limit = self._config.default_page_limit
        if not 1 <= limit <= self._config.max_page_limit:
            raise ComplaintValidationError(
                f"limit must be between 1 and {self._config.max_page_limit}", "limit"
            )

        query = ComplaintQuery(
            status=parse_status(status) if status is not None else None,
            category=parse_category(category) if category is not None else None,
            search=(search or "").strip() or None,
            sort_by=sort_by,
            descending=order == "desc",
            offset=(page - 1) * limit,
            limit=limit,
        )
        complaints, total = await self._repository.find(query)
        now = _now()
        return ComplaintPage(
            items=tuple(ComplaintView(c, c.impact_score(now)) for c in complaints),
            total=total,
            page=page,
            limit=limit,
        )

    async def find_nearby(
        self,
        longitude: float,
        latitude: float,
        max_distance_m: float | None = None,
    ) -> list[ComplaintView]:
        """Complaints within max_distance_m of a point, nearest first.

        Raises:
            ComplaintValidationError: Coordinates or radius out of range.
        """
        if not -180.0 <= longitude <= 180.0 or not -90.0 <= latitude <= 90.0:
            raise ComplaintValidationError("coordinates out of range", "location")
        radius = (
            self._config.nearby_default_distance_m if max_distance_m is None else max_distance_m
        )
        if radius <= 0:
            raise ComplaintValidationError("max_distance must be positive", "max_distance")

        pairs = await self._repository.find_nearby(longitude, latitude, radius)
        now = _now()
        return [
            ComplaintView(complaint=c, impact_score=c.impact_score(now), distance_m=d)
            for c, d in pairs
        ]


def _now() -> datetime:
    return datetime.now(timezone.utc)
