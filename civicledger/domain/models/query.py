"""Read-model results for complaint queries.

Impact scores here are computed at read time and are valid only for the
moment the view was built.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from civicledger.domain.models.complaint import Complaint


@dataclass(frozen=True)
class ComplaintView:
    """A complaint plus its impact score at read time."""

    complaint: Complaint
    impact_score: int
    distance_m: float | None = field(default=None)


@dataclass(frozen=True)
class ComplaintPage:
    """One page of a filtered, sorted complaint listing."""

    items: tuple[ComplaintView, ...]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit


@dataclass(frozen=True)
class ComplaintCreationResult:
    """Outcome of a confirmed and persisted complaint creation."""

    complaint: Complaint
    block_number: int
