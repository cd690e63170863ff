"""Complaint lifecycle service.

Drives complaints through Reported -> Verified -> InProgress -> Resolved
using a ledger-first protocol: every state change is confirmed on the
ledger before the off-chain record is touched.

Protocol for every state-changing operation:
1. Validate input and current state (nothing written on failure)
2. Submit to the ledger and wait for the receipt
3. Ledger failure: abort with no off-chain change and re-raise
4. Build the new immutable complaint (status, history, linkage fields)
5. Persist it; a failure here is a persistence gap because the ledger
   entry already exists

Steps 1-5 run while holding the complaint's lock, so transitions on one
complaint are strictly ordered while different complaints proceed in
parallel.

Developer Golden Rules:
1. LEDGER FIRST - Never persist a change the ledger has not confirmed
2. VALIDATE BEFORE LEDGER - Rejections must not leave ledger traces
3. FAIL LOUD - Persistence gaps raise PersistenceGapError, never pass silently
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from uuid import UUID

from uuid6 import uuid7

from civicledger.application.ports.complaint_repository import (
    ComplaintRepositoryProtocol,
)
from civicledger.application.ports.ledger_gateway import LedgerGatewayProtocol
from civicledger.application.services.base import LoggingMixin
from civicledger.application.services.keyed_lock import KeyedLock
from civicledger.config.complaint_config import (
    DEFAULT_LIFECYCLE_CONFIG,
    ComplaintLifecycleConfig,
)
from civicledger.domain.errors.complaint import (
    ComplaintNotFoundError,
    ComplaintValidationError,
    InvalidStatusTransitionError,
    ResolutionAlreadyRecordedError,
)
from civicledger.domain.errors.ledger import LedgerUnavailableError
from civicledger.domain.errors.reconciliation import PersistenceGapError
from civicledger.domain.models.complaint import (
    Complaint,
    ComplaintCategory,
    ComplaintLocation,
    ComplaintStatus,
    StatusHistoryEntry,
    build_creation_payload,
    build_resolution_payload,
)
from civicledger.domain.models.query import ComplaintCreationResult
from civicledger.infrastructure.monitoring.metrics import (
    MetricsCollector,
    get_metrics_collector,
)

DEFAULT_ADDRESS = "Unknown location"


def parse_status(value: ComplaintStatus | str) -> ComplaintStatus:
    """Parse a status given as enum, value ("InProgress") or name ("IN_PROGRESS").

    Raises:
        ComplaintValidationError: If the value names no status.
    """
    if isinstance(value, ComplaintStatus):
        return value
    for status in ComplaintStatus:
        if value in (status.value, status.name):
            return status
    valid = [s.value for s in ComplaintStatus]
    raise ComplaintValidationError(f"invalid status {value!r}, expected one of {valid}", "status")


def parse_category(value: ComplaintCategory | str) -> ComplaintCategory:
    """Parse a category given as enum or value.

    Raises:
        ComplaintValidationError: If the value names no category.
    """
    if isinstance(value, ComplaintCategory):
        return value
    try:
        return ComplaintCategory(value)
    except ValueError:
        valid = [c.value for c in ComplaintCategory]
        raise ComplaintValidationError(
            f"invalid category {value!r}, expected one of {valid}", "category"
        ) from None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ComplaintLifecycleService(LoggingMixin):
    """Ledger-first complaint lifecycle.

    Example:
        service = ComplaintLifecycleService(gateway, repository)
        result = await service.create_complaint(
            reporter_id="user-1",
            title="Pothole on Main St",
            description="Deep pothole near the bus stop",
            category="pothole",
            longitude=77.59,
            latitude=12.97,
            address="Main St",
        )
        await service.verify_complaint(result.complaint.id, actor_id="admin-1")
    """

    def __init__(
        self,
        gateway: LedgerGatewayProtocol,
        repository: ComplaintRepositoryProtocol,
        config: ComplaintLifecycleConfig = DEFAULT_LIFECYCLE_CONFIG,
        metrics: MetricsCollector | None = None,
        locks: KeyedLock | None = None,
    ) -> None:
        """Initialize the lifecycle service.

        Args:
            gateway: Ledger gateway (verified at startup).
            repository: Off-chain complaint store.
            config: Transition enforcement switch.
            metrics: Metrics collector (default: process-wide collector).
            locks: Per-complaint lock table (injectable for tests).
        """
        self._gateway = gateway
        self._repository = repository
        self._config = config
        self._metrics = metrics or get_metrics_collector()
        self._locks = locks or KeyedLock()
        self._init_logger(component="lifecycle")

    async def create_complaint(
        self,
        reporter_id: str,
        title: str,
        description: str,
        category: ComplaintCategory | str,
        longitude: float,
        latitude: float,
        address: str | None = None,
        image_refs: Iterable[str] = (),
    ) -> ComplaintCreationResult:
        """Register a new complaint on the ledger, then store it.

        A complaint exists off-chain only if its ledger registration was
        confirmed.

        Args:
            reporter_id: Opaque id of the reporting user.
            title: Short summary.
            description: Full description.
            category: Category enum or value.
            longitude: Degrees east.
            latitude: Degrees north.
            address: Free-text address (default "Unknown location").
            image_refs: Opaque image references.

        Returns:
            The stored complaint and the confirming block number.

        Raises:
            ComplaintValidationError: If input is invalid (no ledger call).
            LedgerUnavailableError: If registration did not confirm
                (nothing stored).
            PersistenceGapError: If the ledger confirmed but storing failed.
        """
        title = (title or "").strip()
        description = (description or "").strip()
        reporter_id = (reporter_id or "").strip()
        if not reporter_id:
            raise ComplaintValidationError("reporter id is required", "reporter_id")
        if not title:
            raise ComplaintValidationError("title is required", "title")
        if len(title) > Complaint.MAX_TITLE_LENGTH:
            raise ComplaintValidationError(
                f"title exceeds {Complaint.MAX_TITLE_LENGTH} characters", "title"
            )
        if not description:
            raise ComplaintValidationError("description is required", "description")
        if len(description) > Complaint.MAX_DESCRIPTION_LENGTH:
            raise ComplaintValidationError(
                f"description exceeds {Complaint.MAX_DESCRIPTION_LENGTH} characters",
                "description",
            )
        parsed_category = parse_category(category)
        try:
            location = ComplaintLocation(
                longitude=float(longitude),
                latitude=float(latitude),
                address=(address or "").strip() or DEFAULT_ADDRESS,
            )
        except (TypeError, ValueError) as e:
            raise ComplaintValidationError(str(e), "location") from None
        images = tuple(image_refs)

        complaint_id = uuid7()
        log = self._log_operation(
            "create_complaint",
            complaint_id=str(complaint_id),
            reporter_id=reporter_id,
            category=parsed_category.value,
        )
        log.info("complaint_creation_started")

        content_hash = self._gateway.compute_content_hash(
            build_creation_payload(title, description, parsed_category, location, images)
        )
        try:
            receipt = await self._gateway.submit_registration(complaint_id, content_hash)
        except LedgerUnavailableError as e:
            log.warning("complaint_creation_aborted", reason=e.reason)
            raise

        now = _utc_now()
        complaint = Complaint(
            id=complaint_id,
            title=title,
            description=description,
            category=parsed_category,
            location=location,
            reporter_id=reporter_id,
            content_hash=content_hash,
            transaction_id=receipt.transaction_id,
            block_number=receipt.block_number,
            image_refs=images,
            status=ComplaintStatus.REPORTED,
            status_history=(
                StatusHistoryEntry(
                    status=ComplaintStatus.REPORTED, timestamp=now, actor_id=reporter_id
                ),
            ),
            created_at=now,
            updated_at=now,
        )
        await self._persist(complaint, "create_complaint", receipt.transaction_id, insert=True)

        log.info(
            "complaint_created",
            transaction_id=receipt.transaction_id,
            block_number=receipt.block_number,
            content_hash=content_hash,
        )
        return ComplaintCreationResult(complaint=complaint, block_number=receipt.block_number)

    async def verify_complaint(self, complaint_id: UUID, actor_id: str) -> Complaint:
        """Mark a complaint as verified.

        verified_by and verified_at are only set the first time.
        """
        return await self._transition(
            "verify_complaint", complaint_id, ComplaintStatus.VERIFIED, actor_id
        )

    async def update_status(
        self,
        complaint_id: UUID,
        target_status: ComplaintStatus | str,
        actor_id: str,
    ) -> Complaint:
        """Move a complaint to target_status.

        A Resolved target is handled by resolve_complaint() so the
        resolution linkage is always recorded. A complaint reopened after
        its resolution was recorded is moved back to Resolved with a plain
        status transition; the recorded resolution is kept.

        Raises:
            ComplaintValidationError: Unknown status (no ledger call).
            ComplaintNotFoundError: Unknown complaint.
            InvalidStatusTransitionError: Edge rejected under nominal enforcement.
            ResolutionAlreadyRecordedError: A concurrent resolve recorded first.
            LedgerUnavailableError: Ledger did not confirm (nothing changed).
            PersistenceGapError: Ledger confirmed but storing failed.
        """
        status = parse_status(target_status)
        if status == ComplaintStatus.RESOLVED:
            complaint = await self._load(complaint_id)
            if not complaint.is_resolution_recorded:
                return await self.resolve_complaint(complaint_id, actor_id)
        return await self._transition("update_status", complaint_id, status, actor_id)

    async def resolve_complaint(
        self,
        complaint_id: UUID,
        actor_id: str,
        resolution_image_refs: Iterable[str] = (),
    ) -> Complaint:
        """Record a resolution on the ledger, then off-chain.

        Resolution fields are write-once: a second call raises
        ResolutionAlreadyRecordedError before anything reaches the ledger.
        """
        actor_id = self._require_actor(actor_id)
        images = tuple(resolution_image_refs)
        log = self._log_operation(
            "resolve_complaint", complaint_id=str(complaint_id), actor_id=actor_id
        )

        async with self._locks.hold(complaint_id):
            complaint = await self._load(complaint_id)
            if complaint.is_resolution_recorded:
                log.info(
                    "resolution_rejected_already_recorded",
                    resolution_transaction_id=complaint.resolution_transaction_id,
                )
                raise ResolutionAlreadyRecordedError(
                    complaint_id, complaint.resolution_transaction_id
                )
            self._check_transition(complaint, ComplaintStatus.RESOLVED)

            resolved_at = _utc_now()
            resolution_hash = self._gateway.compute_content_hash(
                build_resolution_payload(complaint_id, images, resolved_at, actor_id)
            )
            try:
                receipt = await self._gateway.submit_resolution(complaint_id, resolution_hash)
            except LedgerUnavailableError as e:
                log.warning("complaint_resolution_aborted", reason=e.reason)
                raise

            resolved = complaint.with_resolution(
                actor_id=actor_id,
                resolution_hash=resolution_hash,
                resolution_transaction_id=receipt.transaction_id,
                resolution_image_refs=images,
                at=resolved_at,
            )
            stored = await self._persist(
                resolved, "resolve_complaint", receipt.transaction_id
            )

        log.info(
            "complaint_resolved",
            transaction_id=receipt.transaction_id,
            resolution_hash=resolution_hash,
            image_count=len(images),
        )
        return stored

    async def delete_complaint(self, complaint_id: UUID, actor_id: str) -> None:
        """Delete the off-chain record (administrative).

        The ledger entry is permanent and is left without an off-chain
        record. The deletion is logged as a warning with the registration
        transaction so that entry can be traced.

        Raises:
            ComplaintNotFoundError: Unknown complaint.
        """
        actor_id = self._require_actor(actor_id)
        async with self._locks.hold(complaint_id):
            complaint = await self._load(complaint_id)
            await self._repository.delete(complaint_id)
        self._log_operation(
            "delete_complaint", complaint_id=str(complaint_id), actor_id=actor_id
        ).warning(
            "complaint_deleted_off_chain_only",
            transaction_id=complaint.transaction_id,
            status=complaint.status.value,
        )

    async def verify_complaint_integrity(self, complaint_id: UUID) -> bool:
        """Recompute the content hash and compare it with the ledger.

        Returns:
            True if the stored content still matches the registered hash.
        """
        complaint = await self._load(complaint_id)
        content_hash = self._gateway.compute_content_hash(complaint.creation_payload())
        verified = await self._gateway.verify_integrity(complaint_id, content_hash)
        log = self._log_operation("verify_complaint_integrity", complaint_id=str(complaint_id))
        if verified:
            log.info("complaint_integrity_verified")
        else:
            log.warning(
                "complaint_integrity_mismatch",
                recomputed_hash=content_hash,
                stored_hash=complaint.content_hash,
            )
        return verified

    async def get_complaint(self, complaint_id: UUID) -> Complaint:
        """Return a stored complaint.

        Raises:
            ComplaintNotFoundError: Unknown complaint.
        """
        return await self._load(complaint_id)

    async def _transition(
        self,
        operation: str,
        complaint_id: UUID,
        target: ComplaintStatus,
        actor_id: str,
    ) -> Complaint:
        actor_id = self._require_actor(actor_id)
        log = self._log_operation(
            operation,
            complaint_id=str(complaint_id),
            actor_id=actor_id,
            target_status=target.value,
        )

        async with self._locks.hold(complaint_id):
            complaint = await self._load(complaint_id)
            self._check_transition(complaint, target)
            try:
                receipt = await self._gateway.submit_status_transition(complaint_id, target)
            except LedgerUnavailableError as e:
                log.warning("status_transition_aborted", reason=e.reason)
                raise

            updated = complaint.with_transition(target, actor_id)
            stored = await self._persist(updated, operation, receipt.transaction_id)

        log.info(
            "status_transition_recorded",
            from_status=complaint.status.value,
            transaction_id=receipt.transaction_id,
            history_length=len(stored.status_history),
        )
        return stored

    def _check_transition(self, complaint: Complaint, target: ComplaintStatus) -> None:
        if not self._config.enforce_nominal_transitions:
            return
        allowed = complaint.status.nominal_transitions()
        if target not in allowed:
            raise InvalidStatusTransitionError(
                complaint.id, complaint.status, target, sorted(allowed, key=lambda s: s.ledger_code)
            )

    async def _load(self, complaint_id: UUID) -> Complaint:
        complaint = await self._repository.get(complaint_id)
        if complaint is None:
            raise ComplaintNotFoundError(complaint_id)
        return complaint

    @staticmethod
    def _require_actor(actor_id: str) -> str:
        actor_id = (actor_id or "").strip()
        if not actor_id:
            raise ComplaintValidationError("actor id is required", "actor_id")
        return actor_id

    async def _persist(
        self,
        complaint: Complaint,
        operation: str,
        transaction_id: str,
        insert: bool = False,
    ) -> Complaint:
        try:
            if insert:
                await self._repository.insert(complaint)
                return complaint
            return await self._repository.update_lifecycle(complaint)
        except Exception as e:
            self._metrics.increment_persistence_gaps(operation)
            self._log_operation(operation, complaint_id=str(complaint.id)).error(
                "persistence_gap_detected",
                transaction_id=transaction_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PersistenceGapError(
                str(complaint.id), operation, transaction_id, e
            ) from e
