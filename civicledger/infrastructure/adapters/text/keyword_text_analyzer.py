"""Keyword-based text analyzer.

Word-set Jaccard similarity for duplicate detection and keyword tables for
category and severity suggestions. Works offline with no model behind it.
"""

from __future__ import annotations

from civicledger.domain.models.complaint import ComplaintCategory
from civicledger.domain.models.duplicate import (
    CategorySuggestion,
    ContentAnalysis,
    Severity,
)

MIN_WORD_LENGTH = 3

CATEGORY_KEYWORDS: dict[ComplaintCategory, tuple[str, ...]] = {
    ComplaintCategory.POTHOLE: (
        "pothole", "pot hole", "hole in road", "crater", "ditch", "bump",
        "uneven road", "road pit", "gaddha",
    ),
    ComplaintCategory.GARBAGE: (
        "garbage", "trash", "waste", "litter", "dump", "rubbish", "filth",
        "dirty", "stink", "kachra", "dustbin", "rotting",
    ),
    ComplaintCategory.WATER_LEAKAGE: (
        "water leak", "leakage", "pipe burst", "flooding", "waterlog", "sewage",
        "water pipe", "paani", "broken pipe", "leaking",
    ),
    ComplaintCategory.STREETLIGHT: (
        "streetlight", "street light", "lamp", "bulb", "dark", "no light",
        "broken light", "bijli", "flickering",
    ),
    ComplaintCategory.DRAINAGE: (
        "drain", "drainage", "sewer", "gutter", "nala", "clogged", "blocked",
        "manhole", "stagnant water", "naali",
    ),
    ComplaintCategory.ROAD_DAMAGE: (
        "road damage", "broken road", "crack", "road repair", "footpath",
        "speed breaker", "cave in", "sinkhole", "sadak",
    ),
}

SEVERITY_KEYWORDS: dict[Severity, tuple[tuple[str, ...], int]] = {
    Severity.CRITICAL: (
        ("urgent", "emergency", "danger", "accident", "collapse", "flood", "fire",
         "death", "injury"),
        10,
    ),
    Severity.HIGH: (
        ("major", "severe", "big", "large", "deep", "massive", "children", "school",
         "daily"),
        7,
    ),
    Severity.MEDIUM: (
        ("moderate", "growing", "several", "frequent", "problem", "issue"),
        4,
    ),
    Severity.LOW: (
        ("minor", "small", "slight", "cosmetic", "occasional", "rare"),
        2,
    ),
}

DEFAULT_SEVERITY_SCORE = 4.0
MAX_SEVERITY_FACTORS = 5


def _words(text: str) -> set[str]:
    return {w for w in text.lower().split() if len(w) >= MIN_WORD_LENGTH}


def _severity_for(average: float) -> Severity:
    if average >= 8:
        return Severity.CRITICAL
    if average >= 6:
        return Severity.HIGH
    if average >= 3:
        return Severity.MEDIUM
    return Severity.LOW


class KeywordTextAnalyzer:
    """TextAnalyzerProtocol implementation using keyword tables."""

    name = "keywords"

    def similarity(self, text_a: str, text_b: str) -> float:
        """Jaccard similarity of the word sets (words of 3+ characters)."""
        words_a = _words(text_a or "")
        words_b = _words(text_b or "")
        union = words_a | words_b
        if not union:
            return 0.0
        return len(words_a & words_b) / len(union)

    def suggest_category_and_severity(self, text: str) -> ContentAnalysis:
        lower = (text or "").lower()

        suggestions: list[CategorySuggestion] = []
        best, best_score = ComplaintCategory.OTHER, 0
        for category, keywords in CATEGORY_KEYWORDS.items():
            # Multi-word phrases weigh more than single words
            score = sum(len(kw.split()) for kw in keywords if kw in lower)
            if score > 0:
                suggestions.append(CategorySuggestion(category=category, score=score))
            if score > best_score:
                best, best_score = category, score
        suggestions.sort(key=lambda s: s.score, reverse=True)

        total, factors = 0, []
        for words, weight in SEVERITY_KEYWORDS.values():
            for word in words:
                if word in lower:
                    total += weight
                    factors.append(word)
        average = total / len(factors) if factors else DEFAULT_SEVERITY_SCORE

        return ContentAnalysis(
            suggested_category=best,
            category_confidence=min(round(best_score / 3 * 100), 100),
            severity=_severity_for(average),
            severity_score=round(average, 1),
            powered_by=self.name,
            category_suggestions=tuple(suggestions),
            severity_factors=tuple(factors[:MAX_SEVERITY_FACTORS]),
        )
