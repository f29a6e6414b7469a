"""Spelling analysis against a pluggable dictionary."""

import re
from collections import Counter

from content_checker.core.logging import get_logger
from content_checker.services.analyzer import AnalyzerResult, to_score
from content_checker.services.dictionaries import Dictionary
from content_checker.utils.text import split_words

logger = get_logger(__name__)

DEFAULT_SAMPLE_LIMIT = 5000
TOP_OFFENDERS = 10
MAX_SUGGESTIONS = 3
MIN_WORD_LENGTH = 2

# Unicode letters (accents included), optionally joined by inner apostrophes
_WORD_PATTERN = re.compile(r"[^\W\d_]+(?:'[^\W\d_]+)*")


def candidate_words(text: str, sample_limit: int = DEFAULT_SAMPLE_LIMIT) -> list[str]:
    """Words worth spell-checking from the first sample_limit tokens.

    All-caps tokens are treated as acronyms and skipped, as are URLs.
    """
    sample = " ".join(
        word for word in split_words(text)[:sample_limit] if "://" not in word
    )
    return [
        word
        for word in _WORD_PATTERN.findall(sample)
        if len(word) >= MIN_WORD_LENGTH and not word.isupper()
    ]


def unavailable_result(lang: str, reason: str = "No dictionary loaded") -> AnalyzerResult:
    return AnalyzerResult(
        score=None,
        details={"available": False, "lang": lang, "reason": reason},
    )


def analyze_spelling(
    text: str,
    dictionary: Dictionary | None,
    sample_limit: int = DEFAULT_SAMPLE_LIMIT,
    lang: str = "en",
) -> AnalyzerResult:
    """Flag words the dictionary does not recognize.

    Args:
        text: Normalized pasted text
        dictionary: Loaded dictionary, or None when unavailable
        sample_limit: Maximum number of words to check
        lang: Language the dictionary was requested for

    Returns:
        AnalyzerResult; score is None when no dictionary is available
    """
    if dictionary is None:
        return unavailable_result(lang)

    words = candidate_words(text, sample_limit)
    counts = Counter(word.lower() for word in words)

    misspelled = {word: count for word, count in counts.items() if not dictionary.correct(word)}
    occurrences = sum(misspelled.values())
    checked = len(words)

    score = to_score(1.0 - occurrences / checked) if checked else 100

    offenders = sorted(misspelled.items(), key=lambda item: (-item[1], item[0]))
    top = [
        {
            "word": word,
            "count": count,
            "suggestions": dictionary.suggest(word)[:MAX_SUGGESTIONS],
        }
        for word, count in offenders[:TOP_OFFENDERS]
    ]

    logger.debug(
        "Spelling analysis complete",
        extra={
            "lang": lang,
            "checked_words": checked,
            "misspelled_occurrences": occurrences,
            "score": score,
        },
    )

    return AnalyzerResult(
        score=score,
        details={
            "available": True,
            "lang": lang,
            "checkedWords": checked,
            "uniqueWords": len(counts),
            "misspelledOccurrences": occurrences,
            "misspelledUnique": len(misspelled),
            "misspelled": top,
        },
    )
