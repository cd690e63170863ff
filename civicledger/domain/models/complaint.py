"""Complaint domain model.

A complaint is a citizen report of a civic issue. Its off-chain record is
mutable and queryable; every state change is mirrored first to the ledger,
so the off-chain record always trails a confirmed ledger entry.

Invariants:
- status_history is non-empty, starts with REPORTED and its last entry
  matches status
- content_hash and transaction_id are populated together, and so are
  resolution_hash and resolution_transaction_id
- votes is len(voters); a user votes at most once
- impact_score is recomputed on every read and never stored
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar
from uuid import UUID

SECONDS_PER_DAY = 86_400


class ComplaintStatus(Enum):
    """Lifecycle status of a complaint.

    Nominal flow:
        REPORTED -> VERIFIED -> IN_PROGRESS -> RESOLVED

    Each status has a fixed small-integer code on the ledger contract.
    """

    REPORTED = "Reported"
    VERIFIED = "Verified"
    IN_PROGRESS = "InProgress"
    RESOLVED = "Resolved"

    @property
    def ledger_code(self) -> int:
        """Integer code used by the ledger contract."""
        return LEDGER_STATUS_CODES[self]

    @classmethod
    def from_ledger_code(cls, code: int) -> ComplaintStatus:
        """Map a ledger status code back to the enum.

        Raises:
            ValueError: If the code is unknown.
        """
        for status, status_code in LEDGER_STATUS_CODES.items():
            if status_code == code:
                return status
        raise ValueError(f"Unknown ledger status code: {code}")

    def nominal_transitions(self) -> frozenset[ComplaintStatus]:
        """Statuses reachable from this one under nominal enforcement."""
        return NOMINAL_TRANSITION_MATRIX.get(self, frozenset())


LEDGER_STATUS_CODES: dict[ComplaintStatus, int] = {
    ComplaintStatus.REPORTED: 0,
    ComplaintStatus.VERIFIED: 1,
    ComplaintStatus.IN_PROGRESS: 2,
    ComplaintStatus.RESOLVED: 3,
}

# Only consulted when nominal enforcement is switched on
NOMINAL_TRANSITION_MATRIX: dict[ComplaintStatus, frozenset[ComplaintStatus]] = {
    ComplaintStatus.REPORTED: frozenset({ComplaintStatus.VERIFIED}),
    ComplaintStatus.VERIFIED: frozenset({ComplaintStatus.IN_PROGRESS}),
    ComplaintStatus.IN_PROGRESS: frozenset({ComplaintStatus.RESOLVED}),
    ComplaintStatus.RESOLVED: frozenset(),
}


class ComplaintCategory(Enum):
    """Kind of civic issue being reported."""

    POTHOLE = "pothole"
    GARBAGE = "garbage"
    WATER_LEAKAGE = "water_leakage"
    STREETLIGHT = "streetlight"
    DRAINAGE = "drainage"
    ROAD_DAMAGE = "road_damage"
    OTHER = "other"


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ComplaintLocation:
    """Point location of a complaint plus a free-text address.

    Attributes:
        longitude: Degrees east, -180..180.
        latitude: Degrees north, -90..90.
        address: Human-readable address.
    """

    longitude: float
    latitude: float
    address: str

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")

    def to_geojson(self) -> dict[str, object]:
        """Return the GeoJSON point form used in ledger payloads."""
        return {"type": "Point", "coordinates": [self.longitude, self.latitude]}


def build_creation_payload(
    title: str,
    description: str,
    category: ComplaintCategory,
    location: ComplaintLocation,
    image_refs: tuple[str, ...] = (),
) -> dict[str, object]:
    """Content registered on the ledger when a complaint is created."""
    return {
        "title": title,
        "description": description,
        "category": category.value,
        "location": location.to_geojson(),
        "address": location.address,
        "images": list(image_refs),
    }


def build_resolution_payload(
    complaint_id: UUID,
    resolution_image_refs: tuple[str, ...],
    resolved_at: datetime,
    resolved_by: str,
) -> dict[str, object]:
    """Content registered on the ledger when a complaint is resolved."""
    return {
        "complaintId": str(complaint_id),
        "resolutionImages": list(resolution_image_refs),
        "resolvedAt": resolved_at.isoformat(),
        "resolvedBy": resolved_by,
    }


@dataclass(frozen=True)
class StatusHistoryEntry:
    """One append-only record in a complaint's status history."""

    status: ComplaintStatus
    timestamp: datetime
    actor_id: str


@dataclass(frozen=True, eq=True)
class Complaint:
    """A civic complaint mirrored to the ledger.

    Attributes:
        id: UUIDv7 identifier, assigned before the ledger registration.
        title: Short summary.
        description: Full description.
        category: Issue category.
        location: Where the issue is.
        reporter_id: Opaque id of the reporting user.
        content_hash: Hash of the creation payload recorded on the ledger.
        transaction_id: Ledger transaction that registered the complaint.
        block_number: Block that confirmed the registration.
        image_refs: Opaque references to uploaded images.
        status: Current lifecycle status.
        status_history: Append-only history, oldest first.
        verified_by: Actor that first verified the complaint.
        verified_at: When the complaint was first verified.
        resolved_at: When the resolution was recorded.
        resolved_by: Actor that recorded the resolution.
        resolution_image_refs: Proof-of-fix image references.
        resolution_hash: Hash of the resolution payload on the ledger.
        resolution_transaction_id: Ledger transaction of the resolution.
        voters: User ids that currently vote for the complaint.
        created_at: Creation timestamp (UTC).
        updated_at: Last modification timestamp (UTC).
    """

    id: UUID
    title: str
    description: str
    category: ComplaintCategory
    location: ComplaintLocation
    reporter_id: str
    content_hash: str
    transaction_id: str
    block_number: int | None = field(default=None)
    image_refs: tuple[str, ...] = field(default=())
    status: ComplaintStatus = field(default=ComplaintStatus.REPORTED)
    status_history: tuple[StatusHistoryEntry, ...] = field(default=())
    verified_by: str | None = field(default=None)
    verified_at: datetime | None = field(default=None)
    resolved_at: datetime | None = field(default=None)
    resolved_by: str | None = field(default=None)
    resolution_image_refs: tuple[str, ...] = field(default=())
    resolution_hash: str | None = field(default=None)
    resolution_transaction_id: str | None = field(default=None)
    voters: frozenset[str] = field(default_factory=frozenset)
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    MAX_TITLE_LENGTH: ClassVar[int] = 200
    MAX_DESCRIPTION_LENGTH: ClassVar[int] = 5_000

    def __post_init__(self) -> None:
        """Validate lifecycle and ledger-linkage invariants."""
        if not self.title.strip():
            raise ValueError("Complaint title must not be empty")
        if len(self.title) > self.MAX_TITLE_LENGTH:
            raise ValueError(
                f"Complaint title exceeds maximum length of {self.MAX_TITLE_LENGTH}"
            )
        if not self.description.strip():
            raise ValueError("Complaint description must not be empty")
        if len(self.description) > self.MAX_DESCRIPTION_LENGTH:
            raise ValueError(
                "Complaint description exceeds maximum length of "
                f"{self.MAX_DESCRIPTION_LENGTH}"
            )
        if not self.content_hash or not self.transaction_id:
            raise ValueError("content_hash and transaction_id must both be set")
        if (self.resolution_hash is None) != (self.resolution_transaction_id is None):
            raise ValueError(
                "resolution_hash and resolution_transaction_id must be set together"
            )
        if not self.status_history:
            raise ValueError("status_history must not be empty")
        if self.status_history[0].status != ComplaintStatus.REPORTED:
            raise ValueError("status_history must start with Reported")
        if self.status_history[-1].status != self.status:
            raise ValueError(
                f"Last history status {self.status_history[-1].status.value} "
                f"does not match status {self.status.value}"
            )

    @property
    def votes(self) -> int:
        """Number of distinct users voting for this complaint."""
        return len(self.voters)

    @property
    def is_resolution_recorded(self) -> bool:
        """True once a resolution has been written to the ledger."""
        return self.resolution_transaction_id is not None

    def days_pending(self, now: datetime | None = None) -> int:
        """Whole days since creation, never negative."""
        now = now or _utc_now()
        elapsed = (now - self.created_at).total_seconds()
        return max(0, int(elapsed // SECONDS_PER_DAY))

    def impact_score(self, now: datetime | None = None) -> int:
        """Votes weighted by how long the complaint has been pending.

        impact = votes * (days_pending + 1)
        """
        return self.votes * (self.days_pending(now) + 1)

    def creation_payload(self) -> dict[str, object]:
        """Payload whose hash is registered on the ledger at creation."""
        return build_creation_payload(
            self.title, self.description, self.category, self.location, self.image_refs
        )

    def with_transition(
        self,
        new_status: ComplaintStatus,
        actor_id: str,
        at: datetime | None = None,
    ) -> Complaint:
        """Return a copy with a new status and one appended history entry.

        Setting VERIFIED also fills verified_by and verified_at when they
        are not yet set. Resolution is recorded through with_resolution().

        Args:
            new_status: Target status.
            actor_id: Actor performing the change.
            at: Transition timestamp, defaults to now.

        Returns:
            New Complaint instance.
        """
        at = at or _utc_now()
        changes: dict[str, object] = {
            "status": new_status,
            "status_history": self.status_history
            + (StatusHistoryEntry(status=new_status, timestamp=at, actor_id=actor_id),),
            "updated_at": at,
        }
        if new_status == ComplaintStatus.VERIFIED and self.verified_by is None:
            changes["verified_by"] = actor_id
            changes["verified_at"] = at
        return replace(self, **changes)

    def with_resolution(
        self,
        actor_id: str,
        resolution_hash: str,
        resolution_transaction_id: str,
        resolution_image_refs: tuple[str, ...] = (),
        at: datetime | None = None,
    ) -> Complaint:
        """Return a resolved copy with the resolution linkage populated.

        Raises:
            ValueError: If a resolution is already recorded.
        """
        if self.is_resolution_recorded:
            raise ValueError(f"Complaint {self.id} already has a resolution")
        at = at or _utc_now()
        resolved = self.with_transition(ComplaintStatus.RESOLVED, actor_id, at)
        return replace(
            resolved,
            resolved_at=at,
            resolved_by=actor_id,
            resolution_image_refs=tuple(resolution_image_refs),
            resolution_hash=resolution_hash,
            resolution_transaction_id=resolution_transaction_id,
        )

    def with_voter(self, user_id: str) -> Complaint:
        """Return a copy with user_id added to voters."""
        return replace(self, voters=self.voters | {user_id})

    def without_voter(self, user_id: str) -> Complaint:
        """Return a copy with user_id removed from voters."""
        return replace(self, voters=self.voters - {user_id})


def merge_lifecycle(stored: Complaint, incoming: Complaint) -> Complaint:
    """Apply the lifecycle change carried by incoming on top of stored.

    incoming was derived from an earlier read of stored. History entries
    another writer appended since that read are kept and the new entries
    of incoming follow them, so no history entry is lost. Verification
    and resolution fields already stored are write-once, and voters
    always come from stored.

    Returns:
        incoming with merged history, status and write-once fields.
    """
    shared = 0
    for ours, theirs in zip(stored.status_history, incoming.status_history):
        if ours != theirs:
            break
        shared += 1
    history = stored.status_history + incoming.status_history[shared:]
    changes: dict[str, object] = {
        "status": history[-1].status,
        "status_history": history,
        "voters": stored.voters,
    }
    if stored.verified_by is not None:
        changes["verified_by"] = stored.verified_by
        changes["verified_at"] = stored.verified_at
    if stored.is_resolution_recorded:
        changes.update(
            resolved_at=stored.resolved_at,
            resolved_by=stored.resolved_by,
            resolution_image_refs=stored.resolution_image_refs,
            resolution_hash=stored.resolution_hash,
            resolution_transaction_id=stored.resolution_transaction_id,
        )
    return replace(incoming, **changes)
