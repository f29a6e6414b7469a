"""Duplicate-content detection.

Combines internal repetition (the same sentence pasted more than once) with
sentence overlap against the live page. Pasted copy that matches the live
page is not harmful duplication, but it earns no credit for being
differentiated either, so overlap only carries a small, tunable weight.
"""

from content_checker.core.logging import get_logger
from content_checker.services.analyzer import AnalyzerResult, to_score
from content_checker.utils.text import split_sentences, term_tokens

logger = get_logger(__name__)

DEFAULT_OVERLAP_WEIGHT = 0.3


def sentence_keys(text: str) -> list[str]:
    """Comparable sentence keys: lowercased, punctuation stripped, words joined."""
    keys = []
    for sentence in split_sentences(text):
        key = " ".join(term_tokens(sentence))
        if key:
            keys.append(key)
    return keys


def analyze_duplication(
    expected: str,
    actual: str,
    overlap_weight: float = DEFAULT_OVERLAP_WEIGHT,
) -> AnalyzerResult:
    """Score duplication of normalized pasted text.

    Args:
        expected: Normalized pasted text
        actual: Normalized live text
        overlap_weight: Share of the score given to low overlap with actual

    Returns:
        AnalyzerResult with internal duplication and overlap ratios
    """
    expected_keys = sentence_keys(expected)
    actual_keys = set(sentence_keys(actual))

    total = len(expected_keys)
    unique = set(expected_keys)
    internal_dup_ratio = 1.0 - len(unique) / total if total else 0.0

    overlapping = sorted(unique & actual_keys)
    overlap_ratio = len(overlapping) / len(unique) if unique else 0.0

    score = to_score(
        (1.0 - overlap_weight) * (1.0 - internal_dup_ratio)
        + overlap_weight * (1.0 - overlap_ratio)
    )

    duplicates = sorted(k for k in unique if expected_keys.count(k) > 1)

    logger.debug(
        "Duplication analysis complete",
        extra={
            "sentence_count": total,
            "unique_sentences": len(unique),
            "overlap_count": len(overlapping),
            "score": score,
        },
    )

    return AnalyzerResult(
        score=score,
        details={
            "sentenceCount": total,
            "uniqueSentences": len(unique),
            "internalDupRatio": round(internal_dup_ratio, 4),
            "overlapRatio": round(overlap_ratio, 4),
            "overlapWeight": overlap_weight,
            "duplicateSentences": duplicates[:10],
        },
    )
