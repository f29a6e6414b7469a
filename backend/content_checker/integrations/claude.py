"""Claude/Anthropic LLM integration client for meaning-drift assessment.

Features:
- Async HTTP client using httpx (direct API calls)
- Retry logic with exponential backoff
- Request/response logging per requirements
- Handles timeouts, rate limits (429), auth failures (401/403)
- Masks API keys in all logs

ERROR LOGGING REQUIREMENTS:
- Log all outbound API calls with model, timing and retry attempt
- Log response bodies at DEBUG level (truncated)
- Log and handle: timeouts, rate limits (429), auth failures (401/403)
- Never log or expose API keys
"""

import asyncio
import json
import time
from dataclasses import dataclass
from typing import Any

import httpx

from content_checker.core.config import get_settings
from content_checker.core.logging import claude_logger, get_logger

logger = get_logger(__name__)

ANTHROPIC_API_URL = "https://api.anthropic.com"
ANTHROPIC_API_VERSION = "2023-06-01"

# Each side of the comparison is truncated to this many characters
MAX_PROMPT_TEXT = 6000

DRIFT_SYSTEM_PROMPT = """You compare two versions of web page copy and judge how far the meaning of the second drifts from the first.

Respond with JSON only, in this exact shape:
{"score": <integer 0-100>, "summary": "<one or two sentences>"}

Score guidance:
- 0-9: same meaning, wording changes only
- 10-29: minor differences in emphasis or detail
- 30-59: some claims, offers or concepts added or removed
- 60-100: substantially different message

Mention the most important removed or added concepts in the summary."""


@dataclass
class CompletionResult:
    """Result of a Claude completion request."""

    success: bool
    text: str | None = None
    stop_reason: str | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None
    error: str | None = None
    status_code: int | None = None
    duration_ms: float = 0.0


@dataclass
class DriftAssessment:
    """Parsed meaning-drift judgement from Claude."""

    success: bool
    score: int | None = None
    summary: str | None = None
    error: str | None = None
    duration_ms: float = 0.0


class ClaudeError(Exception):
    """Base exception for Claude API errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ClaudeTimeoutError(ClaudeError):
    """Raised when a request times out."""

    pass


def _strip_code_fence(text: str) -> str:
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    lines = stripped.split("\n")[1:]
    if lines and lines[-1].strip() == "```":
        lines = lines[:-1]
    return "\n".join(lines)


class ClaudeClient:
    """Async client for the Anthropic Messages API.

    Usage:
        client = ClaudeClient()
        if client.available:
            assessment = await client.assess_meaning_drift(expected, actual)
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        max_tokens: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize Claude client.

        Args:
            api_key: Anthropic API key. Defaults to settings.
            model: Model to use. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.
            max_retries: Maximum attempts. Defaults to settings.
            retry_delay: Base delay between retries. Defaults to settings.
            max_tokens: Maximum response tokens. Defaults to settings.
            transport: Optional httpx transport (used by tests).
        """
        settings = get_settings()

        self._api_key = api_key or settings.anthropic_api_key
        self._model = model or settings.claude_model
        self._timeout = timeout or settings.claude_timeout
        self._max_retries = max(1, max_retries or settings.claude_max_retries)
        self._retry_delay = (
            retry_delay if retry_delay is not None else settings.claude_retry_delay
        )
        self._max_tokens = max_tokens or settings.claude_max_tokens
        self._transport = transport

        self._client: httpx.AsyncClient | None = None
        self._available = bool(self._api_key)

    @property
    def available(self) -> bool:
        """Check if Claude is configured and available."""
        return self._available

    @property
    def model(self) -> str:
        return self._model

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            headers: dict[str, str] = {
                "Content-Type": "application/json",
                "Accept": "application/json",
                "anthropic-version": ANTHROPIC_API_VERSION,
            }
            if self._api_key:
                headers["x-api-key"] = self._api_key

            self._client = httpx.AsyncClient(
                base_url=ANTHROPIC_API_URL,
                headers=headers,
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        logger.info("Claude client closed")

    async def _backoff(self, attempt: int, reason: str) -> None:
        delay = self._retry_delay * (2**attempt)
        logger.warning(
            f"Claude request attempt {attempt + 1} failed, retrying in {delay}s",
            extra={
                "attempt": attempt + 1,
                "max_retries": self._max_retries,
                "delay_seconds": delay,
                "reason": reason,
            },
        )
        await asyncio.sleep(delay)

    async def complete(
        self,
        user_prompt: str,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
        temperature: float = 0.0,
    ) -> CompletionResult:
        """Send a completion request to Claude.

        Args:
            user_prompt: The user message/prompt
            system_prompt: Optional system prompt
            max_tokens: Maximum response tokens (overrides default)
            temperature: Sampling temperature (0.0 = deterministic)

        Returns:
            CompletionResult with response text and metadata
        """
        if not self._available:
            return CompletionResult(
                success=False,
                error="Claude not configured (missing API key)",
            )

        start_time = time.monotonic()
        client = await self._get_client()
        last_error: Exception | None = None

        request_body: dict[str, Any] = {
            "model": self._model,
            "max_tokens": max_tokens or self._max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        if system_prompt:
            request_body["system"] = system_prompt

        for attempt in range(self._max_retries):
            attempt_start = time.monotonic()
            has_retries_left = attempt < self._max_retries - 1

            try:
                claude_logger.api_call_start(
                    self._model, len(user_prompt), retry_attempt=attempt
                )
                response = await client.post("/v1/messages", json=request_body)
                duration_ms = (time.monotonic() - attempt_start) * 1000

                if response.status_code == 429:
                    retry_after_str = response.headers.get("retry-after")
                    retry_after = float(retry_after_str) if retry_after_str else None
                    claude_logger.rate_limit(self._model, retry_after=retry_after)
                    if has_retries_left and retry_after and retry_after <= 60:
                        await asyncio.sleep(retry_after)
                        continue
                    return CompletionResult(
                        success=False,
                        error="Rate limit exceeded",
                        status_code=429,
                        duration_ms=duration_ms,
                    )

                if response.status_code in (401, 403):
                    claude_logger.auth_failure(response.status_code, self._api_key)
                    return CompletionResult(
                        success=False,
                        error=f"Authentication failed ({response.status_code})",
                        status_code=response.status_code,
                        duration_ms=duration_ms,
                    )

                if response.status_code >= 500:
                    error_msg = f"Server error ({response.status_code})"
                    claude_logger.api_call_error(
                        self._model,
                        duration_ms,
                        response.status_code,
                        error_msg,
                        "ServerError",
                        retry_attempt=attempt,
                    )
                    if has_retries_left:
                        await self._backoff(attempt, error_msg)
                        continue
                    return CompletionResult(
                        success=False,
                        error=error_msg,
                        status_code=response.status_code,
                        duration_ms=duration_ms,
                    )

                if response.status_code >= 400:
                    error_body = response.json() if response.content else None
                    error_msg = (
                        error_body.get("error", {}).get("message", str(error_body))
                        if isinstance(error_body, dict)
                        else "Client error"
                    )
                    claude_logger.api_call_error(
                        self._model,
                        duration_ms,
                        response.status_code,
                        error_msg,
                        "ClientError",
                        retry_attempt=attempt,
                    )
                    return CompletionResult(
                        success=False,
                        error=f"Client error ({response.status_code}): {error_msg}",
                        status_code=response.status_code,
                        duration_ms=duration_ms,
                    )

                response_data = response.json()
                content = response_data.get("content", [])
                text = content[0].get("text", "") if content else ""
                usage = response_data.get("usage", {})

                claude_logger.api_call_success(
                    self._model,
                    duration_ms,
                    input_tokens=usage.get("input_tokens"),
                    output_tokens=usage.get("output_tokens"),
                )
                claude_logger.response_body(self._model, text, duration_ms)

                return CompletionResult(
                    success=True,
                    text=text,
                    stop_reason=response_data.get("stop_reason"),
                    input_tokens=usage.get("input_tokens"),
                    output_tokens=usage.get("output_tokens"),
                    duration_ms=(time.monotonic() - start_time) * 1000,
                )

            except httpx.TimeoutException:
                duration_ms = (time.monotonic() - attempt_start) * 1000
                claude_logger.timeout(self._model, self._timeout)
                if has_retries_left:
                    await self._backoff(attempt, "timeout")
                    continue
                last_error = ClaudeTimeoutError(
                    f"Request timed out after {self._timeout}s"
                )

            except httpx.RequestError as e:
                duration_ms = (time.monotonic() - attempt_start) * 1000
                claude_logger.api_call_error(
                    self._model,
                    duration_ms,
                    None,
                    str(e),
                    type(e).__name__,
                    retry_attempt=attempt,
                )
                if has_retries_left:
                    await self._backoff(attempt, str(e))
                    continue
                last_error = ClaudeError(f"Request failed: {e}")

        return CompletionResult(
            success=False,
            error=str(last_error) if last_error else "Request failed after all retries",
            duration_ms=(time.monotonic() - start_time) * 1000,
        )

    async def assess_meaning_drift(self, expected: str, actual: str) -> DriftAssessment:
        """Ask Claude how far the meaning of actual drifts from expected.

        Args:
            expected: Normalized pasted text
            actual: Normalized live page text

        Returns:
            DriftAssessment; success is False on API or parse failure
        """
        user_prompt = (
            f"EXPECTED TEXT:\n{expected[:MAX_PROMPT_TEXT]}\n\n"
            f"ACTUAL TEXT:\n{actual[:MAX_PROMPT_TEXT]}\n\n"
            "Respond with JSON only."
        )
        result = await self.complete(
            user_prompt=user_prompt,
            system_prompt=DRIFT_SYSTEM_PROMPT,
            temperature=0.0,
        )
        if not result.success:
            return DriftAssessment(
                success=False, error=result.error, duration_ms=result.duration_ms
            )

        try:
            parsed = json.loads(_strip_code_fence(result.text or ""))
            score = max(0, min(100, round(float(parsed["score"]))))
            summary = str(parsed.get("summary") or "").strip()
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(
                f"Failed to parse drift response: {e}",
                extra={"response": (result.text or "")[:500], "error": str(e)},
            )
            return DriftAssessment(
                success=False,
                error=f"Failed to parse response: {e}",
                duration_ms=result.duration_ms,
            )

        return DriftAssessment(
            success=True,
            score=score,
            summary=summary,
            duration_ms=result.duration_ms,
        )
