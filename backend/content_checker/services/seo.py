"""SEO keyword density analysis.

Scores how well pasted copy covers its target keywords and how close each
keyword's density is to an ideal of 1.5%. When no keywords are supplied the
five most frequent non-stop-word terms are used instead.
"""

import re
from collections import Counter

from content_checker.core.logging import get_logger
from content_checker.services.analyzer import AnalyzerResult, clamp, to_score
from content_checker.utils.text import split_words, term_tokens

logger = get_logger(__name__)

IDEAL_DENSITY = 0.015
AUTO_KEYWORD_COUNT = 5
AUTO_KEYWORD_MIN_LENGTH = 3
COVERAGE_WEIGHT = 0.6
DENSITY_WEIGHT = 0.4


def parse_keywords(keywords: list[str] | str | None) -> list[str]:
    """Normalize a keyword list or comma-separated string.

    Returns lowercased, de-duplicated keywords in input order.
    """
    if keywords is None:
        return []
    raw = keywords.split(",") if isinstance(keywords, str) else keywords
    seen: dict[str, None] = {}
    for keyword in raw:
        cleaned = " ".join(str(keyword).lower().split())
        if cleaned and cleaned not in seen:
            seen[cleaned] = None
    return list(seen)


def extract_top_terms(text: str, limit: int = AUTO_KEYWORD_COUNT) -> list[str]:
    """Most frequent non-stop-word terms, ties broken by first appearance."""
    counts = Counter(
        term_tokens(text, min_length=AUTO_KEYWORD_MIN_LENGTH, drop_stop_words=True)
    )
    return [term for term, _ in counts.most_common(limit)]


def count_keyword(text: str, keyword: str) -> int:
    """Count whole-word (or whole-phrase) case-insensitive occurrences."""
    parts = keyword.split()
    if not parts:
        return 0
    pattern = r"(?<!\w)" + r"\s+".join(re.escape(p) for p in parts) + r"(?!\w)"
    return len(re.findall(pattern, text, flags=re.IGNORECASE))


def density_proximity(density: float, ideal: float = IDEAL_DENSITY) -> float:
    """1.0 at the ideal density, falling linearly to 0 at 0% or 2x ideal."""
    return clamp(1.0 - abs(density - ideal) / ideal)


def analyze_seo(text: str, keywords: list[str] | str | None = None) -> AnalyzerResult:
    """Score keyword coverage and density for normalized text.

    Args:
        text: Normalized pasted text
        keywords: Target keywords; auto-extracted when empty

    Returns:
        AnalyzerResult with per-keyword counts and densities
    """
    total_words = len(split_words(text))
    requested = parse_keywords(keywords)
    auto_extracted = not requested
    targets = requested or extract_top_terms(text)

    if total_words == 0 or not targets:
        return AnalyzerResult(
            score=0,
            details={
                "totalWords": total_words,
                "keywords": [],
                "autoExtracted": auto_extracted,
                "coverage": 0.0,
                "densityProximity": 0.0,
                "idealDensity": IDEAL_DENSITY,
            },
        )

    keyword_stats = []
    proximities = []
    present = 0
    for keyword in targets:
        count = count_keyword(text, keyword)
        density = count / total_words
        if count > 0:
            present += 1
        proximities.append(density_proximity(density))
        keyword_stats.append(
            {
                "keyword": keyword,
                "count": count,
                "density": round(density, 4),
                "present": count > 0,
            }
        )

    coverage = present / len(targets)
    proximity = sum(proximities) / len(proximities)
    score = to_score(COVERAGE_WEIGHT * coverage + DENSITY_WEIGHT * proximity)

    logger.debug(
        "SEO keyword analysis complete",
        extra={
            "keyword_count": len(targets),
            "auto_extracted": auto_extracted,
            "coverage": round(coverage, 4),
            "score": score,
        },
    )

    return AnalyzerResult(
        score=score,
        details={
            "totalWords": total_words,
            "keywords": keyword_stats,
            "autoExtracted": auto_extracted,
            "coverage": round(coverage, 4),
            "densityProximity": round(proximity, 4),
            "idealDensity": IDEAL_DENSITY,
        },
    )
