"""In-memory complaint repository.

Stores complaints in a dict for development and tests. Writes are
serialized by an asyncio.Lock, which gives update_lifecycle and
toggle_voter the same field-scoped atomicity the PostgreSQL adapter gets
from row locks. update_lifecycle merges with the stored record the same
way the PostgreSQL adapter does.

It is NOT suitable for production use.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from uuid import UUID

from civicledger.application.ports.complaint_repository import (
    ComplaintQuery,
    ComplaintRepositoryProtocol,
)
from civicledger.domain.errors.complaint import ComplaintNotFoundError
from civicledger.domain.geo import haversine_m
from civicledger.domain.models.complaint import Complaint, ComplaintStatus, merge_lifecycle


def _matches(complaint: Complaint, query: ComplaintQuery) -> bool:
    if query.status is not None and complaint.status != query.status:
        return False
    if query.exclude_status is not None and complaint.status == query.exclude_status:
        return False
    if query.category is not None and complaint.category != query.category:
        return False
    if query.search:
        needle = query.search.lower()
        haystack = (
            complaint.title,
            complaint.description,
            complaint.location.address,
            complaint.category.value,
        )
        if not any(needle in field.lower() for field in haystack):
            return False
    return True


class ComplaintRepositoryStub(ComplaintRepositoryProtocol):
    """In-memory implementation of ComplaintRepositoryProtocol.

    Attributes:
        _complaints: Mapping of complaint id to stored complaint.
    """

    def __init__(self) -> None:
        self._complaints: dict[UUID, Complaint] = {}
        self._lock = asyncio.Lock()
        self._fail_next_write: Exception | None = None

    def fail_next_write(self, error: Exception) -> None:
        """Make the next insert or update_lifecycle raise error."""
        self._fail_next_write = error

    def _raise_injected(self) -> None:
        if self._fail_next_write is not None:
            error, self._fail_next_write = self._fail_next_write, None
            raise error

    async def insert(self, complaint: Complaint) -> None:
        async with self._lock:
            self._raise_injected()
            if complaint.id in self._complaints:
                raise ValueError(f"Complaint already exists: {complaint.id}")
            self._complaints[complaint.id] = complaint

    async def get(self, complaint_id: UUID) -> Complaint | None:
        return self._complaints.get(complaint_id)

    async def list_ids(self) -> list[UUID]:
        ordered = sorted(self._complaints.values(), key=lambda c: (c.created_at, c.id))
        return [c.id for c in ordered]

    async def find(self, query: ComplaintQuery) -> tuple[list[Complaint], int]:
        """Filter, sort and paginate stored complaints."""
        matching = [c for c in self._complaints.values() if _matches(c, query)]
        now = datetime.now(timezone.utc)
        if query.sort_by == "votes":
            key = lambda c: (c.votes, c.created_at)  # noqa: E731
        elif query.sort_by == "impact_score":
            key = lambda c: (c.impact_score(now), c.created_at)  # noqa: E731
        else:
            key = lambda c: (c.created_at, c.id)  # noqa: E731
        matching.sort(key=key, reverse=query.descending)
        total = len(matching)
        return matching[query.offset : query.offset + query.limit], total

    async def find_nearby(
        self,
        longitude: float,
        latitude: float,
        max_distance_m: float,
        exclude_status: ComplaintStatus | None = None,
    ) -> list[tuple[Complaint, float]]:
        results: list[tuple[Complaint, float]] = []
        for complaint in self._complaints.values():
            if exclude_status is not None and complaint.status == exclude_status:
                continue
            distance = haversine_m(
                longitude,
                latitude,
                complaint.location.longitude,
                complaint.location.latitude,
            )
            if distance <= max_distance_m:
                results.append((complaint, distance))
        results.sort(key=lambda pair: pair[1])
        return results

    async def update_lifecycle(self, complaint: Complaint) -> Complaint:
        async with self._lock:
            self._raise_injected()
            stored = self._complaints.get(complaint.id)
            if stored is None:
                raise ComplaintNotFoundError(complaint.id)
            updated = merge_lifecycle(stored, complaint)
            self._complaints[complaint.id] = updated
            return updated

    async def toggle_voter(self, complaint_id: UUID, user_id: str) -> tuple[Complaint, bool]:
        async with self._lock:
            stored = self._complaints.get(complaint_id)
            if stored is None:
                raise ComplaintNotFoundError(complaint_id)
            added = user_id not in stored.voters
            updated = stored.with_voter(user_id) if added else stored.without_voter(user_id)
            self._complaints[complaint_id] = updated
            return updated, added

    async def delete(self, complaint_id: UUID) -> bool:
        async with self._lock:
            return self._complaints.pop(complaint_id, None) is not None

    def clear(self) -> None:
        """Remove everything (tests only)."""
        self._complaints.clear()

    def __len__(self) -> int:
        return len(self._complaints)
