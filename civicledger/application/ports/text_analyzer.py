"""Text analyzer port for duplicate detection and category suggestion."""

from __future__ import annotations

from typing import Protocol

from civicledger.domain.models.duplicate import ContentAnalysis


class TextAnalyzerProtocol(Protocol):
    """Protocol for complaint text analysis."""

    def similarity(self, text_a: str, text_b: str) -> float:
        """Return a similarity score in [0, 1]."""
        ...

    def suggest_category_and_severity(self, text: str) -> ContentAnalysis:
        """Suggest a category and severity for free text."""
        ...
