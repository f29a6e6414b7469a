"""Structured logging configuration.

All logs go to stdout. Uses JSON format for structured logging in
production and a plain text format in development.

ERROR LOGGING REQUIREMENTS:
- Log all outbound calls (browser fetches, link checks, Claude) with timing
- Log timeouts and failed calls with the target and error type
- Mask API keys in all logs
- Truncate long prompts, responses and URLs
"""

import logging
import sys
from datetime import UTC, datetime
from typing import Any

from pythonjsonlogger import jsonlogger

from content_checker.core.config import get_settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):  # type: ignore[name-defined]
    """Custom JSON formatter with additional fields."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(UTC).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


def mask_api_key(key: str | None) -> str:
    """Mask an API key, keeping only a short prefix for identification."""
    if not key:
        return ""
    if len(key) <= 8:
        return "****"
    return f"{key[:4]}****"


def setup_logging() -> None:
    """Configure application logging.

    Uses JSON format in production, text format in development.
    """
    settings = get_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper()))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    formatter: logging.Formatter
    if settings.log_format == "json":
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Set log levels for noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)


def _truncate(text: str | None, max_length: int) -> str:
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}... (truncated, {len(text)} chars)"


class PageFetchLogger:
    """Logger for headless-browser page fetches."""

    def __init__(self) -> None:
        self.logger = get_logger("page_fetch")

    def fetch_start(self, url: str, locator: str, locator_type: str) -> None:
        """Log fetch start at DEBUG level."""
        self.logger.debug(
            "Page fetch started",
            extra={
                "target_url": _truncate(url, 300),
                "locator": _truncate(locator, 200),
                "locator_type": locator_type,
            },
        )

    def fetch_success(self, url: str, duration_ms: float, text_length: int) -> None:
        """Log fetch completion at INFO level."""
        self.logger.info(
            "Page fetch completed",
            extra={
                "target_url": _truncate(url, 300),
                "duration_ms": round(duration_ms, 2),
                "text_length": text_length,
                "success": True,
            },
        )

    def fetch_error(
        self,
        url: str,
        locator: str,
        duration_ms: float,
        error: str,
        error_type: str,
    ) -> None:
        """Log a failed fetch at ERROR level."""
        self.logger.error(
            "Page fetch failed",
            extra={
                "target_url": _truncate(url, 300),
                "locator": _truncate(locator, 200),
                "duration_ms": round(duration_ms, 2),
                "error": _truncate(error, 500),
                "error_type": error_type,
                "success": False,
            },
        )


class LinkCheckLogger:
    """Logger for outbound link checks."""

    def __init__(self) -> None:
        self.logger = get_logger("link_check")

    def batch_start(self, mode: str, url_count: int, checked_count: int) -> None:
        """Log the start of a link-check batch at DEBUG level."""
        self.logger.debug(
            "Link check batch started",
            extra={
                "mode": mode,
                "url_count": url_count,
                "checked_count": checked_count,
            },
        )

    def link_failed(
        self, url: str, status: str | int, duration_ms: float, error: str | None = None
    ) -> None:
        """Log a broken, timed out or unreachable link at WARNING level."""
        self.logger.warning(
            "Link check failed",
            extra={
                "target_url": _truncate(url, 300),
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "error": _truncate(error, 300) if error else None,
            },
        )

    def batch_complete(
        self, mode: str, checked_count: int, ok_count: int, duration_ms: float
    ) -> None:
        """Log batch completion at INFO level."""
        self.logger.info(
            "Link check batch completed",
            extra={
                "mode": mode,
                "checked_count": checked_count,
                "ok_count": ok_count,
                "broken_count": checked_count - ok_count,
                "duration_ms": round(duration_ms, 2),
            },
        )


class ClaudeLogger:
    """Logger for Claude/Anthropic API calls.

    Logs outbound calls with timing and retry attempt, timeouts, rate limits
    and auth failures. Masks API keys.
    """

    def __init__(self) -> None:
        self.logger = get_logger("claude")

    def api_call_start(
        self, model: str, prompt_length: int, retry_attempt: int = 0
    ) -> None:
        """Log outbound API call start at DEBUG level."""
        self.logger.debug(
            f"Claude API call: {model}",
            extra={
                "model": model,
                "prompt_length": prompt_length,
                "retry_attempt": retry_attempt,
            },
        )

    def api_call_success(
        self,
        model: str,
        duration_ms: float,
        input_tokens: int | None = None,
        output_tokens: int | None = None,
    ) -> None:
        """Log successful API call at DEBUG level with token usage."""
        self.logger.debug(
            f"Claude API call completed: {model}",
            extra={
                "model": model,
                "duration_ms": round(duration_ms, 2),
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
                "success": True,
            },
        )

    def api_call_error(
        self,
        model: str,
        duration_ms: float,
        status_code: int | None,
        error: str,
        error_type: str,
        retry_attempt: int = 0,
    ) -> None:
        """Log failed API call at WARNING or ERROR level based on status."""
        # 4xx at WARNING, 5xx and others at ERROR
        level = logging.WARNING if status_code and 400 <= status_code < 500 else logging.ERROR
        self.logger.log(
            level,
            f"Claude API call failed: {model}",
            extra={
                "model": model,
                "duration_ms": round(duration_ms, 2),
                "status_code": status_code,
                "error": _truncate(error, 500),
                "error_type": error_type,
                "retry_attempt": retry_attempt,
                "success": False,
            },
        )

    def timeout(self, model: str, timeout_seconds: float) -> None:
        """Log request timeout at WARNING level."""
        self.logger.warning(
            "Claude API request timeout",
            extra={"model": model, "timeout_seconds": timeout_seconds},
        )

    def rate_limit(self, model: str, retry_after: float | None = None) -> None:
        """Log rate limit hit (429) at WARNING level."""
        self.logger.warning(
            "Claude API rate limit hit",
            extra={"model": model, "retry_after_seconds": retry_after},
        )

    def auth_failure(self, status_code: int, api_key: str | None) -> None:
        """Log authentication failure (401/403) at WARNING level."""
        self.logger.warning(
            f"Claude API authentication failed ({status_code})",
            extra={"status_code": status_code, "api_key": mask_api_key(api_key)},
        )

    def response_body(self, model: str, response_text: str, duration_ms: float) -> None:
        """Log response body at DEBUG level (truncated)."""
        self.logger.debug(
            "Claude API response body",
            extra={
                "model": model,
                "response": _truncate(response_text, 500),
                "duration_ms": round(duration_ms, 2),
            },
        )


page_fetch_logger = PageFetchLogger()
link_check_logger = LinkCheckLogger()
claude_logger = ClaudeLogger()
