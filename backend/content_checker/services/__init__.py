"""Services layer - Diffing, scoring and orchestration.

Analyzers are plain functions over normalized text. The comparison service
coordinates them with the integrations (browser, Claude) and the shared
dictionary cache.
"""

from content_checker.services.analyzer import AnalyzerResult
from content_checker.services.comparison import (
    ComparisonResult,
    ComparisonService,
    ComparisonServiceError,
    ComparisonValidationError,
    ContentScoreResult,
    get_comparison_service,
)
from content_checker.services.cqi import CqiResult, calculate_cqi
from content_checker.services.diff import DiffResult, build_diff, strip_markup
from content_checker.services.dictionaries import (
    Dictionary,
    DictionaryCache,
    DictionaryUnavailableError,
    PySpellCheckerDictionary,
)
from content_checker.services.duplication import analyze_duplication
from content_checker.services.engagement import analyze_engagement
from content_checker.services.intent import analyze_intent_relevance
from content_checker.services.link_checker import BrokenLinkChecker
from content_checker.services.semantic_drift import (
    ClaudeDriftProvider,
    DriftResult,
    LexicalDriftProvider,
    SemanticDriftService,
)
from content_checker.services.seo import analyze_seo
from content_checker.services.spelling import analyze_spelling

__all__ = [
    # Comparison
    "ComparisonResult",
    "ComparisonService",
    "ComparisonServiceError",
    "ComparisonValidationError",
    "ContentScoreResult",
    "get_comparison_service",
    # Diff and CQI
    "DiffResult",
    "build_diff",
    "strip_markup",
    "CqiResult",
    "calculate_cqi",
    # Auxiliary analyzers
    "AnalyzerResult",
    "analyze_duplication",
    "analyze_engagement",
    "analyze_intent_relevance",
    "analyze_seo",
    "analyze_spelling",
    "BrokenLinkChecker",
    # Dictionaries
    "Dictionary",
    "DictionaryCache",
    "DictionaryUnavailableError",
    "PySpellCheckerDictionary",
    # Meaning drift
    "ClaudeDriftProvider",
    "DriftResult",
    "LexicalDriftProvider",
    "SemanticDriftService",
]
