"""Vote toggle result."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class VoteToggleResult:
    """Outcome of toggling one user's vote on a complaint.

    Attributes:
        complaint_id: The complaint voted on.
        user_id: The voting user.
        voted: True if the user now votes for the complaint.
        votes: Vote count after the toggle.
        impact_score: Impact score computed after the toggle.
    """

    complaint_id: UUID
    user_id: str
    voted: bool
    votes: int
    impact_score: int
