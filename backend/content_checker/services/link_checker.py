"""Broken-link checking for URLs found in pasted content.

Features:
- Unique URL extraction in first-seen order
- Modes: off (no network), fast (capped URL count, short timeout),
  sync (all URLs up to a hard cap, longer timeout)
- Concurrent HEAD requests (GET fallback when HEAD is not allowed)
- Independent per-URL timeout via cancellation, bounded concurrency
- Never raises: timeouts and network errors count as broken links

ERROR LOGGING REQUIREMENTS:
- Log all outbound checks with URL, status and timing
- Log timeouts and network failures at WARNING
- Log batch completion with counts at INFO
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any

import httpx

from content_checker.core.config import AnalysisConfig
from content_checker.core.logging import get_logger, link_check_logger
from content_checker.services.analyzer import AnalyzerResult
from content_checker.utils.text import extract_urls

logger = get_logger(__name__)

USER_AGENT = "ContentChecker/1.0 (+link-check)"
HEAD_NOT_SUPPORTED = frozenset({405, 501})

STATUS_TIMEOUT = "timeout"
STATUS_ERROR = "error"


@dataclass
class LinkStatus:
    """Outcome of checking one URL."""

    url: str
    status: int | str
    ok: bool
    duration_ms: float = 0.0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "url": self.url,
            "status": self.status,
            "ok": self.ok,
            "durationMs": round(self.duration_ms, 2),
            "error": self.error,
        }


class BrokenLinkChecker:
    """Checks that URLs in content resolve to a successful status.

    Usage:
        checker = BrokenLinkChecker(AnalysisConfig(broken_link_mode="fast"))
        result = await checker.check(text)
    """

    def __init__(
        self,
        config: AnalysisConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._client = client

    @property
    def mode(self) -> str:
        return self._config.broken_link_mode

    def _limits(self) -> tuple[int, float]:
        if self.mode == "fast":
            return (
                self._config.broken_link_fast_max_urls,
                self._config.broken_link_fast_timeout,
            )
        return (
            self._config.broken_link_sync_max_urls,
            self._config.broken_link_sync_timeout,
        )

    async def _fetch_status(self, client: httpx.AsyncClient, url: str) -> int:
        response = await client.head(url)
        if response.status_code in HEAD_NOT_SUPPORTED:
            response = await client.get(url)
        return response.status_code

    async def _check_one(
        self,
        client: httpx.AsyncClient,
        url: str,
        timeout: float,
        semaphore: asyncio.Semaphore,
    ) -> LinkStatus:
        async with semaphore:
            start_time = time.monotonic()
            try:
                status_code = await asyncio.wait_for(
                    self._fetch_status(client, url), timeout=timeout
                )
            except (TimeoutError, httpx.TimeoutException):
                duration_ms = (time.monotonic() - start_time) * 1000
                link_check_logger.link_failed(url, STATUS_TIMEOUT, duration_ms)
                return LinkStatus(
                    url=url,
                    status=STATUS_TIMEOUT,
                    ok=False,
                    duration_ms=duration_ms,
                    error=f"No response within {timeout}s",
                )
            except Exception as e:
                duration_ms = (time.monotonic() - start_time) * 1000
                link_check_logger.link_failed(url, STATUS_ERROR, duration_ms, str(e))
                return LinkStatus(
                    url=url,
                    status=STATUS_ERROR,
                    ok=False,
                    duration_ms=duration_ms,
                    error=f"{type(e).__name__}: {e}",
                )

            duration_ms = (time.monotonic() - start_time) * 1000
            ok = 200 <= status_code < 400
            if not ok:
                link_check_logger.link_failed(url, status_code, duration_ms)
            return LinkStatus(
                url=url, status=status_code, ok=ok, duration_ms=duration_ms
            )

    async def check(self, text: str) -> AnalyzerResult:
        """Check every unique URL in text according to the configured mode.

        Args:
            text: Normalized pasted text

        Returns:
            AnalyzerResult scored as the percentage of reachable URLs
        """
        urls = extract_urls(text)

        if self.mode == "off":
            return AnalyzerResult(
                score=100,
                details={
                    "mode": "off",
                    "skipped": True,
                    "urlCount": len(urls),
                    "checked": 0,
                    "broken": 0,
                    "links": [],
                },
            )

        max_urls, timeout = self._limits()
        targets = urls[:max_urls]
        if not targets:
            return AnalyzerResult(
                score=100,
                details={
                    "mode": self.mode,
                    "skipped": False,
                    "urlCount": len(urls),
                    "checked": 0,
                    "broken": 0,
                    "links": [],
                },
            )

        start_time = time.monotonic()
        link_check_logger.batch_start(self.mode, len(urls), len(targets))

        owns_client = self._client is None
        client = self._client or httpx.AsyncClient(
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            timeout=httpx.Timeout(timeout),
        )
        semaphore = asyncio.Semaphore(self._config.broken_link_concurrency)
        try:
            statuses = await asyncio.gather(
                *(self._check_one(client, url, timeout, semaphore) for url in targets)
            )
        finally:
            if owns_client:
                await client.aclose()

        ok_count = sum(1 for s in statuses if s.ok)
        duration_ms = (time.monotonic() - start_time) * 1000
        link_check_logger.batch_complete(self.mode, len(statuses), ok_count, duration_ms)

        return AnalyzerResult(
            score=round(100 * ok_count / len(statuses)),
            details={
                "mode": self.mode,
                "skipped": False,
                "urlCount": len(urls),
                "checked": len(statuses),
                "broken": len(statuses) - ok_count,
                "truncated": len(urls) > len(targets),
                "timeoutSeconds": timeout,
                "links": [s.to_dict() for s in statuses],
            },
        )
