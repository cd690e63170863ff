"""Duplicate detection and content analysis.

Helps a reporter notice that an issue was already filed nearby before a new
complaint is registered on the ledger. Results are advisory only.
"""

from __future__ import annotations

from civicledger.application.ports.complaint_repository import (
    ComplaintQuery,
    ComplaintRepositoryProtocol,
)
from civicledger.application.ports.text_analyzer import TextAnalyzerProtocol
from civicledger.application.services.base import LoggingMixin
from civicledger.config.complaint_config import DEFAULT_QUERY_CONFIG, ComplaintQueryConfig
from civicledger.domain.errors.complaint import ComplaintValidationError
from civicledger.domain.models.complaint import Complaint, ComplaintStatus
from civicledger.domain.models.duplicate import ContentAnalysis, DuplicateCandidate


class DuplicateDetectionService(LoggingMixin):
    """Finds similar open complaints and suggests categories."""

    def __init__(
        self,
        repository: ComplaintRepositoryProtocol,
        analyzer: TextAnalyzerProtocol,
        config: ComplaintQueryConfig = DEFAULT_QUERY_CONFIG,
    ) -> None:
        self._repository = repository
        self._analyzer = analyzer
        self._config = config
        self._init_logger(component="duplicates")

    async def find_duplicates(
        self,
        title: str | None,
        description: str | None,
        coordinates: tuple[float, float] | None = None,
    ) -> list[DuplicateCandidate]:
        """Return open complaints similar to the given text.

        Candidates are the newest unresolved complaints, limited to the
        duplicate radius around coordinates when given. Those at or above
        the similarity threshold are returned, most similar first.

        Args:
            title: Draft title.
            description: Draft description.
            coordinates: Optional (longitude, latitude).

        Raises:
            ComplaintValidationError: If both title and description are empty.
        """
        text = f"{title or ''} {description or ''}".strip()
        if not text:
            raise ComplaintValidationError("title or description required")

        candidates = await self._candidates(coordinates)
        scored: list[DuplicateCandidate] = []
        for complaint in candidates:
            similarity = self._analyzer.similarity(
                text, f"{complaint.title} {complaint.description}"
            )
            percent = round(similarity * 100)
            if percent >= self._config.duplicate_min_similarity_percent:
                scored.append(DuplicateCandidate(complaint=complaint, similarity_percent=percent))

        scored.sort(key=lambda d: d.similarity_percent, reverse=True)
        duplicates = scored[: self._config.duplicate_max_results]
        self._log_operation("find_duplicates").info(
            "duplicates_checked",
            candidate_count=len(candidates),
            duplicate_count=len(duplicates),
        )
        return duplicates

    def analyze(self, title: str | None, description: str | None) -> ContentAnalysis:
        """Suggest a category and severity for draft complaint text."""
        return self._analyzer.suggest_category_and_severity(
            f"{title or ''} {description or ''}".strip()
        )

    async def _candidates(
        self, coordinates: tuple[float, float] | None
    ) -> list[Complaint]:
        limit = self._config.duplicate_candidate_limit
        if coordinates is not None:
            longitude, latitude = coordinates
            nearby = await self._repository.find_nearby(
                longitude,
                latitude,
                self._config.duplicate_radius_m,
                exclude_status=ComplaintStatus.RESOLVED,
            )
            newest = sorted((c for c, _ in nearby), key=lambda c: c.created_at, reverse=True)
            return newest[:limit]

        complaints, _ = await self._repository.find(
            ComplaintQuery(exclude_status=ComplaintStatus.RESOLVED, limit=limit)
        )
        return complaints
