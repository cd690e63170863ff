"""Duplicate detection and content analysis models.

These are user-experience aids only. They carry no consistency role and
are never written to the ledger.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from civicledger.domain.models.complaint import Complaint, ComplaintCategory


class Severity(Enum):
    """Suggested urgency of a complaint."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class DuplicateCandidate:
    """An existing complaint that looks like the one being reported."""

    complaint: Complaint
    similarity_percent: int


@dataclass(frozen=True)
class CategorySuggestion:
    """A category and the keyword score that supports it."""

    category: ComplaintCategory
    score: int


@dataclass(frozen=True)
class ContentAnalysis:
    """Category and severity suggestion for complaint text.

    Attributes:
        suggested_category: Best matching category (OTHER when nothing matched).
        category_confidence: 0..100.
        severity: Suggested severity.
        severity_score: Average keyword weight, one decimal.
        powered_by: Name of the analyzer that produced the suggestion.
        category_suggestions: All matching categories, best first.
        severity_factors: Matched severity keywords (at most five).
    """

    suggested_category: ComplaintCategory
    category_confidence: int
    severity: Severity
    severity_score: float
    powered_by: str
    category_suggestions: tuple[CategorySuggestion, ...] = field(default=())
    severity_factors: tuple[str, ...] = field(default=())
