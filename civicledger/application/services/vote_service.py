"""Vote toggling and impact scoring.

Votes never touch the ledger. A toggle flips one user's membership in a
complaint's voter set in a single repository operation, so a double click
from the same user cannot count twice and a concurrent lifecycle update
cannot overwrite the voter set.

impact_score = votes * (days_pending + 1), recomputed on every read.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from civicledger.application.ports.complaint_repository import (
    ComplaintRepositoryProtocol,
)
from civicledger.application.services.base import LoggingMixin
from civicledger.application.services.keyed_lock import KeyedLock
from civicledger.domain.errors.complaint import ComplaintValidationError
from civicledger.domain.models.complaint import Complaint
from civicledger.domain.models.vote import VoteToggleResult


class VoteService(LoggingMixin):
    """Per-user vote toggles on complaints."""

    def __init__(
        self,
        repository: ComplaintRepositoryProtocol,
        locks: KeyedLock | None = None,
    ) -> None:
        self._repository = repository
        self._locks = locks or KeyedLock()
        self._init_logger(component="votes")

    async def toggle_vote(self, complaint_id: UUID, user_id: str) -> VoteToggleResult:
        """Add the user's vote if absent, remove it if present.

        Args:
            complaint_id: Complaint to vote on.
            user_id: Opaque voting user id.

        Returns:
            The new membership, vote count and impact score.

        Raises:
            ComplaintValidationError: Empty user id.
            ComplaintNotFoundError: Unknown complaint.
        """
        user_id = (user_id or "").strip()
        if not user_id:
            raise ComplaintValidationError("user id is required", "user_id")

        async with self._locks.hold((complaint_id, user_id)):
            complaint, added = await self._repository.toggle_voter(complaint_id, user_id)

        result = VoteToggleResult(
            complaint_id=complaint_id,
            user_id=user_id,
            voted=added,
            votes=complaint.votes,
            impact_score=self.impact_score_for(complaint),
        )
        self._log_operation(
            "toggle_vote", complaint_id=str(complaint_id), user_id=user_id
        ).info("vote_toggled", voted=added, votes=result.votes)
        return result

    @staticmethod
    def impact_score_for(complaint: Complaint, now: datetime | None = None) -> int:
        return complaint.impact_score(now or datetime.now(timezone.utc))
