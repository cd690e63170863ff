"""Unit tests for KeywordTextAnalyzer."""

import pytest

from civicledger.domain.models.complaint import ComplaintCategory
from civicledger.domain.models.duplicate import Severity
from civicledger.infrastructure.adapters.text.keyword_text_analyzer import (
    KeywordTextAnalyzer,
)


@pytest.fixture
def analyzer() -> KeywordTextAnalyzer:
    return KeywordTextAnalyzer()


class TestSimilarity:
    def test_identical_text(self, analyzer: KeywordTextAnalyzer) -> None:
        assert analyzer.similarity("Broken pipe on road", "broken PIPE on road") == 1.0

    def test_short_words_ignored(self, analyzer: KeywordTextAnalyzer) -> None:
        assert analyzer.similarity("a an to", "of at in") == 0.0

    def test_partial_overlap(self, analyzer: KeywordTextAnalyzer) -> None:
        # {garbage, near, school} vs {garbage, near, market}
        assert analyzer.similarity("garbage near school", "garbage near market") == 0.5


class TestSuggestions:
    def test_multi_word_phrase_outweighs_single_word(
        self, analyzer: KeywordTextAnalyzer
    ) -> None:
        analysis = analyzer.suggest_category_and_severity(
            "Broken pipe causing water leak, road has a crack"
        )

        assert analysis.suggested_category is ComplaintCategory.WATER_LEAKAGE
        assert analysis.category_suggestions[0].category is ComplaintCategory.WATER_LEAKAGE
        assert analysis.category_confidence == 100

    def test_severity_average(self, analyzer: KeywordTextAnalyzer) -> None:
        analysis = analyzer.suggest_category_and_severity("minor small garbage")

        assert analysis.severity is Severity.LOW
        assert analysis.severity_score == 2.0
        assert analysis.severity_factors == ("minor", "small")

    def test_factors_capped(self, analyzer: KeywordTextAnalyzer) -> None:
        analysis = analyzer.suggest_category_and_severity(
            "urgent emergency danger accident collapse fire death"
        )
        assert len(analysis.severity_factors) == 5
        assert analysis.severity is Severity.CRITICAL
