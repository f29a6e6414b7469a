"""Comparison orchestration: pasted copy vs. live page text.

Features:
- Normalizes both sides once, then builds the character diff
- Runs the CQI scorer and every auxiliary analyzer on normalized text
- Link checking, dictionary loading and meaning drift run as concurrent
  tasks while the synchronous analyzers execute
- One analyzer failing degrades its own result; only a page fetch failure
  fails the whole comparison

ERROR LOGGING REQUIREMENTS:
- Log method entry/exit at DEBUG level with parameters (sanitized)
- Log all exceptions with full stack trace and context
- Log validation failures with field names and rejected values
- Add timing logs for operations >1 second
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from content_checker.core.config import AnalysisConfig, get_settings
from content_checker.core.logging import get_logger
from content_checker.integrations.browser import (
    LOCATOR_TYPES,
    PageFetcher,
    PlaywrightPageFetcher,
)
from content_checker.integrations.claude import ClaudeClient
from content_checker.services.analyzer import AnalyzerResult
from content_checker.services.cqi import CqiResult, calculate_cqi
from content_checker.services.diff import DiffResult, build_diff
from content_checker.services.dictionaries import (
    Dictionary,
    DictionaryCache,
    get_dictionary_loader,
    normalize_lang,
)
from content_checker.services.duplication import analyze_duplication
from content_checker.services.engagement import analyze_engagement
from content_checker.services.intent import analyze_intent_relevance
from content_checker.services.link_checker import BrokenLinkChecker
from content_checker.services.semantic_drift import (
    DriftResult,
    SemanticDriftService,
    build_drift_service,
)
from content_checker.services.seo import analyze_seo
from content_checker.services.spelling import analyze_spelling, unavailable_result
from content_checker.utils.text import normalize_text

logger = get_logger(__name__)

SLOW_OPERATION_THRESHOLD_MS = 1000

T = TypeVar("T")


# =============================================================================
# EXCEPTIONS
# =============================================================================


class ComparisonServiceError(Exception):
    """Base exception for comparison service errors."""

    pass


class ComparisonValidationError(ComparisonServiceError):
    """Raised when comparison input fails validation."""

    def __init__(self, field_name: str, value: Any, message: str) -> None:
        super().__init__(message)
        self.field_name = field_name
        self.value = value


# =============================================================================
# DATA MODELS
# =============================================================================


@dataclass
class ContentScoreResult:
    """CQI and spelling for pasted content alone."""

    cqi: CqiResult
    spelling: AnalyzerResult

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"cqi": self.cqi.to_dict(), "spelling": self.spelling.to_dict()}


@dataclass
class ComparisonResult:
    """Full comparison payload."""

    diff: DiffResult
    cqi: CqiResult
    spelling: AnalyzerResult
    seo: AnalyzerResult
    engagement: AnalyzerResult
    duplication: AnalyzerResult
    broken_links: AnalyzerResult
    intent_relevance: AnalyzerResult
    meaning_drift: DriftResult
    duration_ms: float = 0.0

    @property
    def passed(self) -> bool:
        return self.diff.passed

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "expectedHtml": self.diff.expected_markup,
            "actualHtml": self.diff.actual_markup,
            "passed": self.passed,
            "cqi": self.cqi.to_dict(),
            "spelling": self.spelling.to_dict(),
            "seo": self.seo.to_dict(),
            "engagement": self.engagement.to_dict(),
            "duplication": self.duplication.to_dict(),
            "brokenLinks": self.broken_links.to_dict(),
            "intentRelevance": self.intent_relevance.to_dict(),
            "meaningDrift": self.meaning_drift.to_dict(),
        }


def degraded_result(analyzer: str, error: Exception) -> AnalyzerResult:
    """Result reported in place of an analyzer that raised."""
    return AnalyzerResult(
        score=None,
        details={
            "available": False,
            "error": f"{analyzer} analysis failed: {type(error).__name__}",
        },
    )


# =============================================================================
# SERVICE
# =============================================================================


class ComparisonService:
    """Runs the diff and scoring pipeline.

    All collaborators are passed in so tests can substitute fakes for the
    browser, dictionaries, link checker and drift providers.
    """

    def __init__(
        self,
        config: AnalysisConfig,
        page_fetcher: PageFetcher,
        dictionaries: DictionaryCache,
        link_checker: BrokenLinkChecker | None = None,
        drift_service: SemanticDriftService | None = None,
    ) -> None:
        self._config = config
        self._page_fetcher = page_fetcher
        self._dictionaries = dictionaries
        self._link_checker = link_checker or BrokenLinkChecker(config)
        self._drift_service = drift_service or build_drift_service()

    @property
    def config(self) -> AnalysisConfig:
        return self._config

    @property
    def dictionaries(self) -> DictionaryCache:
        return self._dictionaries

    @property
    def drift_service(self) -> SemanticDriftService:
        return self._drift_service

    def _run_soft(
        self, analyzer: str, fn: Callable[..., AnalyzerResult], *args: Any
    ) -> AnalyzerResult:
        try:
            return fn(*args)
        except Exception as e:
            logger.error(
                f"{analyzer} analyzer failed",
                extra={
                    "analyzer": analyzer,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            return degraded_result(analyzer, e)

    async def _await_soft(
        self, analyzer: str, task: Awaitable[T], fallback: Callable[[Exception], T]
    ) -> T:
        try:
            return await task
        except Exception as e:
            logger.error(
                f"{analyzer} analyzer failed",
                extra={
                    "analyzer": analyzer,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            return fallback(e)

    def _spelling(
        self, text: str, dictionary: Dictionary | None, lang: str
    ) -> AnalyzerResult:
        return self._run_soft(
            "spelling",
            analyze_spelling,
            text,
            dictionary,
            self._config.spelling_sample_limit,
            lang,
        )

    async def compare(
        self,
        expected_raw: str,
        actual_raw: str,
        keywords: list[str] | str | None = None,
        lang: str | None = None,
    ) -> ComparisonResult:
        """Compare pasted text against already-fetched live text.

        Args:
            expected_raw: Pasted (expected) text as submitted
            actual_raw: Live page text as fetched
            keywords: Optional SEO target keywords
            lang: Dictionary language; defaults to the configured language

        Returns:
            ComparisonResult with the diff and every analyzer result
        """
        start_time = time.monotonic()
        lang_code = normalize_lang(lang, self._config.default_lang)

        expected = normalize_text(expected_raw)
        actual = normalize_text(actual_raw)

        logger.debug(
            "Comparison started",
            extra={
                "expected_length": len(expected),
                "actual_length": len(actual),
                "lang": lang_code,
                "has_keywords": bool(keywords),
            },
        )

        link_task = asyncio.create_task(self._link_checker.check(expected))
        dictionary_task = asyncio.create_task(self._dictionaries.get_or_none(lang_code))
        drift_task = asyncio.create_task(
            self._drift_service.score_semantic_drift(expected, actual)
        )

        diff = await asyncio.to_thread(build_diff, expected, actual)

        cqi = calculate_cqi(expected, self._config)
        seo = self._run_soft("seo", analyze_seo, expected, keywords)
        engagement = self._run_soft("engagement", analyze_engagement, expected_raw)
        duplication = self._run_soft(
            "duplication",
            analyze_duplication,
            expected,
            actual,
            self._config.duplicate_overlap_weight,
        )
        intent = self._run_soft("intent", analyze_intent_relevance, expected, actual)

        broken_links = await self._await_soft(
            "broken_links", link_task, lambda e: degraded_result("broken_links", e)
        )
        dictionary = await self._await_soft("dictionary", dictionary_task, lambda e: None)
        spelling = self._spelling(expected, dictionary, lang_code)
        meaning_drift = await self._await_soft(
            "meaning_drift",
            drift_task,
            lambda e: DriftResult(
                score=None, summary="Analysis unavailable", provider=None, available=False
            ),
        )

        duration_ms = (time.monotonic() - start_time) * 1000
        logger.info(
            "Comparison complete",
            extra={
                "passed": diff.passed,
                "cqi_score": cqi.score,
                "cqi_status": cqi.status,
                "broken_link_score": broken_links.score,
                "duration_ms": round(duration_ms, 2),
            },
        )
        if duration_ms > SLOW_OPERATION_THRESHOLD_MS:
            logger.warning(
                "Slow comparison",
                extra={
                    "duration_ms": round(duration_ms, 2),
                    "threshold_ms": SLOW_OPERATION_THRESHOLD_MS,
                },
            )

        return ComparisonResult(
            diff=diff,
            cqi=cqi,
            spelling=spelling,
            seo=seo,
            engagement=engagement,
            duplication=duplication,
            broken_links=broken_links,
            intent_relevance=intent,
            meaning_drift=meaning_drift,
            duration_ms=duration_ms,
        )

    async def compare_page(
        self,
        url: str,
        locator: str,
        locator_type: str,
        pasted_content: str,
        keywords: list[str] | str | None = None,
        lang: str | None = None,
    ) -> ComparisonResult:
        """Fetch the live element text, then compare it with pasted content.

        Raises:
            ComparisonValidationError: If locator_type is not supported
            PageFetchError: If the live page text cannot be fetched
        """
        if locator_type not in LOCATOR_TYPES:
            logger.warning(
                "Validation error",
                extra={"field": "type", "value": str(locator_type)[:50]},
            )
            raise ComparisonValidationError(
                "type",
                locator_type,
                f"Invalid type '{locator_type}'. Must be one of: {', '.join(LOCATOR_TYPES)}",
            )

        actual_raw = await self._page_fetcher.fetch_page_text(url, locator, locator_type)
        return await self.compare(pasted_content, actual_raw, keywords=keywords, lang=lang)

    async def score_content(
        self, pasted_content: str, lang: str | None = None
    ) -> ContentScoreResult:
        """CQI and spelling for pasted content without a live page."""
        lang_code = normalize_lang(lang, self._config.default_lang)
        text = normalize_text(pasted_content)

        cqi = calculate_cqi(text, self._config)
        if not text:
            return ContentScoreResult(
                cqi=cqi, spelling=unavailable_result(lang_code, "No pasted content")
            )

        dictionary = await self._dictionaries.get_or_none(lang_code)
        return ContentScoreResult(
            cqi=cqi, spelling=self._spelling(text, dictionary, lang_code)
        )


# =============================================================================
# SINGLETON
# =============================================================================


_comparison_service: ComparisonService | None = None
_claude_client: ClaudeClient | None = None


def get_comparison_service() -> ComparisonService:
    """Get the global comparison service instance.

    Usage:
        @router.post("/compare")
        async def compare(
            service: ComparisonService = Depends(get_comparison_service),
        ): ...
    """
    global _comparison_service, _claude_client
    if _comparison_service is None:
        settings = get_settings()
        config = settings.analysis_config()
        _claude_client = ClaudeClient()
        _comparison_service = ComparisonService(
            config=config,
            page_fetcher=PlaywrightPageFetcher(settings.browser_timeout_ms),
            dictionaries=DictionaryCache(
                get_dictionary_loader(settings.dictionary_source),
                default_lang=config.default_lang,
            ),
            link_checker=BrokenLinkChecker(config),
            drift_service=build_drift_service(_claude_client),
        )
        logger.info(
            "ComparisonService singleton created",
            extra={
                "broken_link_mode": config.broken_link_mode,
                "drift_providers": _comparison_service.drift_service.provider_names,
            },
        )
    return _comparison_service


async def close_comparison_service() -> None:
    """Release the global service and its HTTP clients."""
    global _comparison_service, _claude_client
    if _claude_client is not None:
        await _claude_client.close()
    _claude_client = None
    _comparison_service = None
