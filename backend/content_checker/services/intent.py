"""Intent relevance: cosine similarity of term-frequency vectors."""

import math
from collections import Counter

from content_checker.services.analyzer import AnalyzerResult, clamp
from content_checker.utils.text import term_tokens

MIN_TERM_LENGTH = 3
HIGH_THRESHOLD = 70
MODERATE_THRESHOLD = 40


def cosine_similarity(left: Counter[str], right: Counter[str]) -> float:
    """Cosine similarity of two sparse count vectors (0 when either is empty)."""
    if not left or not right:
        return 0.0
    dot = sum(count * right[term] for term, count in left.items() if term in right)
    left_norm = math.sqrt(sum(c * c for c in left.values()))
    right_norm = math.sqrt(sum(c * c for c in right.values()))
    return clamp(dot / (left_norm * right_norm))


def relevance_tier(score: int) -> str:
    if score >= HIGH_THRESHOLD:
        return "High"
    if score >= MODERATE_THRESHOLD:
        return "Moderate"
    return "Low"


def analyze_intent_relevance(expected: str, actual: str) -> AnalyzerResult:
    """Compare what the pasted copy is about with what the live page is about."""
    expected_terms = Counter(term_tokens(expected, min_length=MIN_TERM_LENGTH))
    actual_terms = Counter(term_tokens(actual, min_length=MIN_TERM_LENGTH))

    similarity = cosine_similarity(expected_terms, actual_terms)
    score = round(similarity * 100)
    shared = set(expected_terms) & set(actual_terms)

    return AnalyzerResult(
        score=score,
        details={
            "similarity": round(similarity, 4),
            "tier": relevance_tier(score),
            "expectedTerms": len(expected_terms),
            "actualTerms": len(actual_terms),
            "sharedTerms": len(shared),
        },
    )
