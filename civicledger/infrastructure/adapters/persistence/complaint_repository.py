"""PostgreSQL complaint repository.

Field-scoped atomicity comes from PostgreSQL row locking, so it holds across
API worker processes:
- update_lifecycle locks the row (SELECT ... FOR UPDATE), merges the
  caller's snapshot with the stored record and rewrites lifecycle and
  resolution columns only; history appended meanwhile by another process
  is kept
- toggle_voter flips membership with one UPDATE ... RETURNING

Voters are stored as TEXT[] and status history as JSONB. Distances use the
haversine formula in SQL on the same Earth radius as the in-memory store.

Usage:
    repository = PostgresComplaintRepository(get_session_factory())
    await repository.ensure_schema()
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from civicledger.application.ports.complaint_repository import ComplaintQuery
from civicledger.domain.errors.complaint import ComplaintNotFoundError
from civicledger.domain.geo import EARTH_RADIUS_M
from civicledger.domain.models.complaint import (
    Complaint,
    ComplaintCategory,
    ComplaintLocation,
    ComplaintStatus,
    StatusHistoryEntry,
    merge_lifecycle,
)

logger = get_logger()

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS complaints (
        id UUID PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT NOT NULL,
        category TEXT NOT NULL,
        longitude DOUBLE PRECISION NOT NULL,
        latitude DOUBLE PRECISION NOT NULL,
        address TEXT NOT NULL,
        reporter_id TEXT NOT NULL,
        image_refs TEXT[] NOT NULL DEFAULT '{}',
        status TEXT NOT NULL,
        status_history JSONB NOT NULL,
        verified_by TEXT,
        verified_at TIMESTAMPTZ,
        resolved_at TIMESTAMPTZ,
        resolved_by TEXT,
        resolution_image_refs TEXT[] NOT NULL DEFAULT '{}',
        content_hash TEXT NOT NULL,
        transaction_id TEXT NOT NULL,
        block_number BIGINT,
        resolution_hash TEXT,
        resolution_transaction_id TEXT,
        voters TEXT[] NOT NULL DEFAULT '{}',
        created_at TIMESTAMPTZ NOT NULL,
        updated_at TIMESTAMPTZ NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_complaints_created_at ON complaints (created_at, id)",
    "CREATE INDEX IF NOT EXISTS ix_complaints_status ON complaints (status)",
)

COLUMNS = (
    "id, title, description, category, longitude, latitude, address, reporter_id, "
    "image_refs, status, status_history, verified_by, verified_at, resolved_at, "
    "resolved_by, resolution_image_refs, content_hash, transaction_id, block_number, "
    "resolution_hash, resolution_transaction_id, voters, created_at, updated_at"
)

_DISTANCE_SQL = f"""
    2 * {EARTH_RADIUS_M} * asin(least(1.0, sqrt(
        power(sin(radians(latitude - :lat) / 2), 2)
        + cos(radians(:lat)) * cos(radians(latitude))
        * power(sin(radians(longitude - :lng) / 2), 2)
    )))
"""

_IMPACT_SQL = (
    "cardinality(voters) * "
    "(floor(extract(epoch from (now() - created_at)) / 86400) + 1)"
)

_SORT_SQL: dict[str, str] = {
    "created_at": "created_at",
    "votes": "cardinality(voters)",
    "impact_score": _IMPACT_SQL,
}


def _history_to_json(history: tuple[StatusHistoryEntry, ...]) -> str:
    return json.dumps(
        [
            {
                "status": entry.status.value,
                "timestamp": entry.timestamp.isoformat(),
                "actor_id": entry.actor_id,
            }
            for entry in history
        ]
    )


def _history_from_json(raw: Any) -> tuple[StatusHistoryEntry, ...]:
    items = json.loads(raw) if isinstance(raw, str) else raw
    return tuple(
        StatusHistoryEntry(
            status=ComplaintStatus(item["status"]),
            timestamp=datetime.fromisoformat(item["timestamp"]),
            actor_id=item["actor_id"],
        )
        for item in items
    )


def _row_to_complaint(row: Mapping[str, Any]) -> Complaint:
    return Complaint(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        category=ComplaintCategory(row["category"]),
        location=ComplaintLocation(
            longitude=row["longitude"],
            latitude=row["latitude"],
            address=row["address"],
        ),
        reporter_id=row["reporter_id"],
        content_hash=row["content_hash"],
        transaction_id=row["transaction_id"],
        block_number=row["block_number"],
        image_refs=tuple(row["image_refs"] or ()),
        status=ComplaintStatus(row["status"]),
        status_history=_history_from_json(row["status_history"]),
        verified_by=row["verified_by"],
        verified_at=row["verified_at"],
        resolved_at=row["resolved_at"],
        resolved_by=row["resolved_by"],
        resolution_image_refs=tuple(row["resolution_image_refs"] or ()),
        resolution_hash=row["resolution_hash"],
        resolution_transaction_id=row["resolution_transaction_id"],
        voters=frozenset(row["voters"] or ()),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _lifecycle_params(complaint: Complaint) -> dict[str, Any]:
    return {
        "id": complaint.id,
        "status": complaint.status.value,
        "status_history": _history_to_json(complaint.status_history),
        "verified_by": complaint.verified_by,
        "verified_at": complaint.verified_at,
        "resolved_at": complaint.resolved_at,
        "resolved_by": complaint.resolved_by,
        "resolution_image_refs": list(complaint.resolution_image_refs),
        "resolution_hash": complaint.resolution_hash,
        "resolution_transaction_id": complaint.resolution_transaction_id,
        "updated_at": complaint.updated_at,
    }


class PostgresComplaintRepository:
    """ComplaintRepositoryProtocol implementation on PostgreSQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def ensure_schema(self) -> None:
        """Create the complaints table and indexes if missing."""
        async with self._session_factory() as session, session.begin():
            for statement in SCHEMA_STATEMENTS:
                await session.execute(text(statement))
        logger.info("complaint_schema_ready")

    async def insert(self, complaint: Complaint) -> None:
        params = _lifecycle_params(complaint) | {
            "title": complaint.title,
            "description": complaint.description,
            "category": complaint.category.value,
            "longitude": complaint.location.longitude,
            "latitude": complaint.location.latitude,
            "address": complaint.location.address,
            "reporter_id": complaint.reporter_id,
            "image_refs": list(complaint.image_refs),
            "content_hash": complaint.content_hash,
            "transaction_id": complaint.transaction_id,
            "block_number": complaint.block_number,
            "voters": sorted(complaint.voters),
            "created_at": complaint.created_at,
        }
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text(f"""
                    INSERT INTO complaints ({COLUMNS})
                    VALUES (
                        :id, :title, :description, :category, :longitude, :latitude,
                        :address, :reporter_id, :image_refs, :status,
                        CAST(:status_history AS JSONB), :verified_by, :verified_at,
                        :resolved_at, :resolved_by, :resolution_image_refs,
                        :content_hash, :transaction_id, :block_number,
                        :resolution_hash, :resolution_transaction_id, :voters,
                        :created_at, :updated_at
                    )
                """),
                params,
            )

    async def get(self, complaint_id: UUID) -> Complaint | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"SELECT {COLUMNS} FROM complaints WHERE id = :id"),
                {"id": complaint_id},
            )
            row = result.mappings().first()
        return _row_to_complaint(row) if row else None

    async def list_ids(self) -> list[UUID]:
        async with self._session_factory() as session:
            result = await session.execute(
                text("SELECT id FROM complaints ORDER BY created_at, id")
            )
            return [row[0] for row in result.fetchall()]

    async def find(self, query: ComplaintQuery) -> tuple[list[Complaint], int]:
        clauses: list[str] = []
        params: dict[str, Any] = {"limit": query.limit, "offset": query.offset}
        if query.status is not None:
            clauses.append("status = :status")
            params["status"] = query.status.value
        if query.exclude_status is not None:
            clauses.append("status <> :exclude_status")
            params["exclude_status"] = query.exclude_status.value
        if query.category is not None:
            clauses.append("category = :category")
            params["category"] = query.category.value
        if query.search:
            clauses.append(
                "(title ILIKE :pattern OR description ILIKE :pattern "
                "OR address ILIKE :pattern OR category ILIKE :pattern)"
            )
            escaped = (
                query.search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            )
            params["pattern"] = f"%{escaped}%"
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        direction = "DESC" if query.descending else "ASC"
        order_by = f"{_SORT_SQL[query.sort_by]} {direction}, created_at {direction}"

        async with self._session_factory() as session:
            count = await session.execute(
                text(f"SELECT COUNT(*) FROM complaints {where}"), params
            )
            total = int(count.scalar() or 0)
            result = await session.execute(
                text(f"""
                    SELECT {COLUMNS} FROM complaints {where}
                    ORDER BY {order_by}
                    LIMIT :limit OFFSET :offset
                """),
                params,
            )
            rows = result.mappings().all()
        return [_row_to_complaint(row) for row in rows], total

    async def find_nearby(
        self,
        longitude: float,
        latitude: float,
        max_distance_m: float,
        exclude_status: ComplaintStatus | None = None,
    ) -> list[tuple[Complaint, float]]:
        params: dict[str, Any] = {"lng": longitude, "lat": latitude, "max": max_distance_m}
        status_clause = ""
        if exclude_status is not None:
            status_clause = "AND status <> :exclude_status"
            params["exclude_status"] = exclude_status.value
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"""
                    SELECT * FROM (
                        SELECT {COLUMNS}, {_DISTANCE_SQL} AS distance_m
                        FROM complaints
                        WHERE TRUE {status_clause}
                    ) AS located
                    WHERE distance_m <= :max
                    ORDER BY distance_m
                """),
                params,
            )
            rows = result.mappings().all()
        return [(_row_to_complaint(row), float(row["distance_m"])) for row in rows]

    async def update_lifecycle(self, complaint: Complaint) -> Complaint:
        async with self._session_factory() as session, session.begin():
            # Row lock: writers in other processes merge one after another
            current = await session.execute(
                text(f"SELECT {COLUMNS} FROM complaints WHERE id = :id FOR UPDATE"),
                {"id": complaint.id},
            )
            stored = current.mappings().first()
            if stored is None:
                raise ComplaintNotFoundError(complaint.id)
            merged = merge_lifecycle(_row_to_complaint(stored), complaint)
            result = await session.execute(
                text(f"""
                    UPDATE complaints SET
                        status = :status,
                        status_history = CAST(:status_history AS JSONB),
                        verified_by = :verified_by,
                        verified_at = :verified_at,
                        resolved_at = :resolved_at,
                        resolved_by = :resolved_by,
                        resolution_image_refs = :resolution_image_refs,
                        resolution_hash = :resolution_hash,
                        resolution_transaction_id = :resolution_transaction_id,
                        updated_at = :updated_at
                    WHERE id = :id
                    RETURNING {COLUMNS}
                """),
                _lifecycle_params(merged),
            )
            row = result.mappings().one()
        return _row_to_complaint(row)

    async def toggle_voter(self, complaint_id: UUID, user_id: str) -> tuple[Complaint, bool]:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                text(f"""
                    UPDATE complaints SET voters = CASE
                        WHEN CAST(:user_id AS TEXT) = ANY(voters)
                            THEN array_remove(voters, CAST(:user_id AS TEXT))
                        ELSE array_append(voters, CAST(:user_id AS TEXT))
                    END
                    WHERE id = :id
                    RETURNING {COLUMNS}, (CAST(:user_id AS TEXT) = ANY(voters)) AS added
                """),
                {"id": complaint_id, "user_id": user_id},
            )
            row = result.mappings().first()
        if row is None:
            raise ComplaintNotFoundError(complaint_id)
        return _row_to_complaint(row), bool(row["added"])

    async def delete(self, complaint_id: UUID) -> bool:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                text("DELETE FROM complaints WHERE id = :id RETURNING id"),
                {"id": complaint_id},
            )
            return result.first() is not None
