"""FastAPI application entry point.

Deployment Requirements:
- Binds to HOST/PORT from environment variables
- Liveness endpoint at /health
- All logs to stdout

Error Logging Requirements:
- Log all incoming requests with method, path, request_id
- Log request body at DEBUG level (sanitize sensitive fields)
- Log response status and timing for every request
- Return structured error responses: {"error": str, "code": str, "request_id": str}
- Log 4xx errors at WARNING, 5xx at ERROR
"""

import asyncio
import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from content_checker.api import router as api_router
from content_checker.core.config import get_settings
from content_checker.core.logging import get_logger, setup_logging
from content_checker.services.comparison import close_comparison_service
from content_checker.services.cqi import prepare_readability_corpus, readability_available

# Set up logging before anything else
setup_logging()
logger = get_logger(__name__)

# Sensitive fields to redact from request body logs
SENSITIVE_FIELDS = {
    "password",
    "token",
    "secret",
    "api_key",
    "authorization",
}

# Large text fields are logged by length only
TEXT_FIELDS = {"pastedcontent"}


def sanitize_body(body: Any) -> Any:
    """Redact sensitive fields and summarize large text fields for logging."""
    if not isinstance(body, dict):
        return body
    sanitized: dict[str, Any] = {}
    for key, value in body.items():
        lowered = key.lower()
        if lowered in SENSITIVE_FIELDS:
            sanitized[key] = "****"
        elif lowered in TEXT_FIELDS and isinstance(value, str):
            sanitized[key] = f"<{len(value)} chars>"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_body(value)
        else:
            sanitized[key] = value
    return sanitized


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all incoming requests with timing and request_id."""

    async def dispatch(self, request: Request, call_next: Any) -> Any:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.monotonic()
        method = request.method
        path = request.url.path

        logger.info(
            "Request started",
            extra={"request_id": request_id, "method": method, "path": path},
        )

        if method not in ("GET", "HEAD", "OPTIONS") and logger.isEnabledFor(
            logging.DEBUG
        ):
            body = await request.body()
            if body:
                try:
                    logger.debug(
                        "Request body",
                        extra={
                            "request_id": request_id,
                            "body": sanitize_body(json.loads(body)),
                        },
                    )
                except (json.JSONDecodeError, UnicodeDecodeError):
                    logger.debug(
                        "Request body (non-JSON)",
                        extra={"request_id": request_id, "body_length": len(body)},
                    )

        response = await call_next(request)

        duration_ms = (time.monotonic() - start_time) * 1000
        status_code = response.status_code
        response.headers["X-Request-ID"] = request_id

        log_extra = {
            "request_id": request_id,
            "method": method,
            "path": path,
            "status_code": status_code,
            "duration_ms": round(duration_ms, 2),
        }

        if status_code >= 500:
            logger.error("Request failed", extra=log_extra)
        elif status_code >= 400:
            logger.warning("Request error", extra=log_extra)
        else:
            logger.info("Request completed", extra=log_extra)

        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Application lifespan manager for startup/shutdown."""
    settings = get_settings()
    logger.info(
        "Starting application",
        extra={
            "app_name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "broken_link_mode": settings.broken_link_mode,
        },
    )
    if not settings.anthropic_api_key:
        logger.info("Claude not configured (missing ANTHROPIC_API_KEY), using lexical drift")

    try:
        await asyncio.wait_for(
            asyncio.to_thread(
                prepare_readability_corpus, settings.readability_corpus_download
            ),
            timeout=settings.readability_corpus_timeout,
        )
    except TimeoutError:
        logger.warning(
            "Readability corpus preparation timed out",
            extra={"timeout_seconds": settings.readability_corpus_timeout},
        )

    yield

    logger.info("Shutting down application")
    await close_comparison_service()
    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # Request logging middleware (added first, runs last)
    app.add_middleware(RequestLoggingMiddleware)

    # CORS middleware - use FRONTEND_URL when set, allow all origins otherwise
    cors_origins: list[str] = ["*"]
    if settings.frontend_url:
        cors_origins = [settings.frontend_url]
        logger.info(
            "CORS configured for frontend",
            extra={"allowed_origins": cors_origins},
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=bool(settings.frontend_url),
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle malformed request bodies with a 400 structured response."""
        request_id = getattr(request.state, "request_id", "unknown")
        errors = exc.errors()
        error_msg = "; ".join(
            f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}" for e in errors
        )
        logger.warning(
            "Validation error",
            extra={"request_id": request_id, "errors": error_msg},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": error_msg or "Invalid request",
                "code": "VALIDATION_ERROR",
                "request_id": request_id,
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected errors with structured response."""
        request_id = getattr(request.state, "request_id", "unknown")
        logger.error(
            "Unhandled exception",
            extra={
                "request_id": request_id,
                "error_type": type(exc).__name__,
                "error_message": str(exc),
            },
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": str(exc) or "An internal error occurred",
                "code": "INTERNAL_ERROR",
                "request_id": request_id,
            },
        )

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, bool]:
        """Liveness check.

        Returns {"ok": true} if the service is running.
        """
        return {"ok": True}

    @app.get("/health/integrations", tags=["Health"])
    async def integrations_health() -> dict[str, Any]:
        """Report which optional integrations are configured. Never exposes keys."""
        settings = get_settings()
        claude_configured = bool(settings.anthropic_api_key)
        return {
            "claude": {
                "api_key_set": claude_configured,
                "model": settings.claude_model,
            },
            "drift_providers": (["claude"] if claude_configured else []) + ["lexical"],
            "broken_links": {
                "mode": settings.broken_link_mode,
                "fast_max_urls": settings.broken_link_fast_max_urls,
                "sync_max_urls": settings.broken_link_sync_max_urls,
            },
            "spelling": {
                "source": settings.dictionary_source,
                "default_lang": settings.default_lang,
            },
            "readability": {"corpus_ready": readability_available()},
        }

    app.include_router(api_router)

    return app


# Create the application instance
app = create_app()


def main() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "content_checker.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
