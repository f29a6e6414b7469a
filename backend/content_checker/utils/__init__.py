"""Utility modules for the application.

This package contains shared text utilities.
"""

from content_checker.utils.text import (
    STOP_WORDS,
    clean_term,
    extract_urls,
    normalize_text,
    split_sentences,
    split_words,
    term_tokens,
)

__all__ = [
    "STOP_WORDS",
    "clean_term",
    "extract_urls",
    "normalize_text",
    "split_sentences",
    "split_words",
    "term_tokens",
]
