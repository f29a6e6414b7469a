"""Engagement signal detection.

Looks for the structural cues that keep readers moving through copy:
headings, list items, calls to action and links. Very long copy with many
sentences is penalized. Works on the raw pasted text because line
structure is lost once text is normalized.
"""

import re

from content_checker.core.logging import get_logger
from content_checker.services.analyzer import AnalyzerResult, clamp, to_score
from content_checker.utils.text import extract_urls, normalize_text, split_sentences

logger = get_logger(__name__)

HEADING_WEIGHT = 0.2
LIST_WEIGHT = 0.15
CTA_WEIGHT = 0.3
LINK_WEIGHT = 0.15
SENTENCE_WEIGHT = 0.2

HEADINGS_FOR_FULL_SCORE = 2
LIST_ITEMS_FOR_FULL_SCORE = 3
CTAS_FOR_FULL_SCORE = 2
SENTENCE_SOFT_LIMIT = 20
SENTENCE_PENALTY_SPAN = 40
HEADING_MAX_WORDS = 10

CTA_PHRASES = (
    "contact us",
    "get started",
    "get in touch",
    "sign up",
    "learn more",
    "read more",
    "find out more",
    "book a demo",
    "request a demo",
    "book now",
    "buy now",
    "shop now",
    "order now",
    "subscribe",
    "download",
    "register",
    "join now",
    "try it free",
    "start your free trial",
    "free trial",
    "call us",
    "schedule a call",
    "get a quote",
    "request a quote",
)

_CTA_PATTERN = re.compile(
    r"(?<!\w)(?:" + "|".join(re.escape(p) for p in CTA_PHRASES) + r")(?!\w)",
    re.IGNORECASE,
)
_MARKDOWN_HEADING = re.compile(r"^#{1,6}\s+\S")
_LIST_ITEM = re.compile(r"^(?:[-*•]|\d+[.)])\s+\S")
_TERMINAL_PUNCTUATION = ".!?,;:"


def _is_list_item(line: str) -> bool:
    return bool(_LIST_ITEM.match(line))


def _is_heading(line: str, multi_line: bool) -> bool:
    if _MARKDOWN_HEADING.match(line):
        return True
    if not multi_line or _is_list_item(line):
        return False
    words = line.split()
    if not 0 < len(words) <= HEADING_MAX_WORDS:
        return False
    if line[-1] in _TERMINAL_PUNCTUATION or not line[0].isalpha():
        return False
    if line.isupper():
        return True
    capitalized = sum(1 for w in words if w[0].isupper())
    return capitalized / len(words) >= 0.5


def analyze_engagement(raw_text: str) -> AnalyzerResult:
    """Score engagement signals in pasted text.

    Args:
        raw_text: Pasted text with its original line breaks

    Returns:
        AnalyzerResult with signal counts and sub-scores
    """
    lines = [normalize_text(line) for line in (raw_text or "").splitlines()]
    lines = [line for line in lines if line]
    multi_line = len(lines) > 1

    headings = sum(1 for line in lines if _is_heading(line, multi_line))
    list_items = sum(1 for line in lines if _is_list_item(line))

    flat = normalize_text(raw_text or "")
    cta_matches = [m.group().lower() for m in _CTA_PATTERN.finditer(flat)]
    urls = extract_urls(flat)
    sentence_count = len(split_sentences(flat))

    heading_score = min(1.0, headings / HEADINGS_FOR_FULL_SCORE)
    list_score = min(1.0, list_items / LIST_ITEMS_FOR_FULL_SCORE)
    cta_score = min(1.0, len(cta_matches) / CTAS_FOR_FULL_SCORE)
    link_score = 1.0 if urls else 0.0
    if sentence_count <= SENTENCE_SOFT_LIMIT:
        sentence_score = 1.0
    else:
        sentence_score = clamp(
            1.0 - (sentence_count - SENTENCE_SOFT_LIMIT) / SENTENCE_PENALTY_SPAN
        )

    if not flat:
        score = 0
    else:
        score = to_score(
            HEADING_WEIGHT * heading_score
            + LIST_WEIGHT * list_score
            + CTA_WEIGHT * cta_score
            + LINK_WEIGHT * link_score
            + SENTENCE_WEIGHT * sentence_score
        )

    logger.debug(
        "Engagement analysis complete",
        extra={
            "headings": headings,
            "list_items": list_items,
            "cta_count": len(cta_matches),
            "url_count": len(urls),
            "sentence_count": sentence_count,
            "score": score,
        },
    )

    return AnalyzerResult(
        score=score,
        details={
            "headings": headings,
            "listItems": list_items,
            "ctaCount": len(cta_matches),
            "ctaPhrases": sorted(set(cta_matches)),
            "linkCount": len(urls),
            "sentenceCount": sentence_count,
            "subScores": {
                "heading": round(heading_score, 4),
                "list": round(list_score, 4),
                "cta": round(cta_score, 4),
                "link": link_score,
                "sentence": round(sentence_score, 4),
            },
        },
    )
