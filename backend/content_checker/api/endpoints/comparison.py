"""Comparison API endpoints.

- POST /compare - Diff pasted content against a live page element and score it
- POST /cqi - Score pasted content on its own (CQI + spelling)

Error Logging Requirements:
- Log all incoming requests with method, path, request_id
- Log response status and timing for every request
- Return structured error responses: {"error": str, "code": str, "request_id": str}
- Log 4xx errors at WARNING, 5xx at ERROR
"""

import time

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from content_checker.core.logging import get_logger
from content_checker.integrations.browser import PageFetchError
from content_checker.schemas.comparison import (
    CompareRequest,
    CompareResponse,
    CqiRequest,
    CqiScoreResponse,
    ErrorResponse,
)
from content_checker.services.comparison import (
    ComparisonService,
    ComparisonValidationError,
    get_comparison_service,
)

logger = get_logger(__name__)

router = APIRouter()

MISSING_FIELDS_MESSAGE = "Missing required fields"


def _get_request_id(request: Request) -> str:
    """Get request_id from request state."""
    return getattr(request.state, "request_id", "unknown")


def _error(status_code: int, message: str, code: str, request_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "code": code, "request_id": request_id},
    )


@router.post(
    "/compare",
    response_model=CompareResponse,
    summary="Compare pasted content with a live page",
    description=(
        "Fetch the inner text of an element on a live page, diff it against "
        "pasted content and score the pasted content."
    ),
    responses={
        400: {
            "model": ErrorResponse,
            "description": "Missing or invalid fields",
            "content": {
                "application/json": {
                    "example": {
                        "error": MISSING_FIELDS_MESSAGE,
                        "code": "VALIDATION_ERROR",
                        "request_id": "<request_id>",
                    }
                }
            },
        },
        500: {"model": ErrorResponse, "description": "Page fetch or internal failure"},
    },
)
async def compare(
    request: Request,
    data: CompareRequest = Body(default_factory=CompareRequest),
    service: ComparisonService = Depends(get_comparison_service),
) -> CompareResponse | JSONResponse:
    """Compare pasted content with the live text of a page element.

    1. Fetches the element text with a headless browser
    2. Normalizes both sides and renders a character diff
    3. Scores the pasted content (CQI, SEO, engagement, duplication,
       broken links, intent relevance, spelling, meaning drift)
    """
    request_id = _get_request_id(request)
    start_time = time.monotonic()

    missing = data.missing_fields()
    if missing:
        logger.warning(
            "Compare request missing fields",
            extra={"request_id": request_id, "missing_fields": missing},
        )
        return _error(
            status.HTTP_400_BAD_REQUEST,
            MISSING_FIELDS_MESSAGE,
            "VALIDATION_ERROR",
            request_id,
        )

    logger.debug(
        "Compare request",
        extra={
            "request_id": request_id,
            "url": (data.url or "")[:200],
            "locator_type": data.type,
            "pasted_length": len(data.pasted_content or ""),
            "lang": data.lang,
        },
    )

    try:
        result = await service.compare_page(
            url=data.url or "",
            locator=data.locator or "",
            locator_type=data.type or "",
            pasted_content=data.pasted_content or "",
            keywords=data.keywords,
            lang=data.lang,
        )
    except ComparisonValidationError as e:
        logger.warning(
            "Compare validation error",
            extra={
                "request_id": request_id,
                "field": e.field_name,
                "value": str(e.value)[:100],
                "message": str(e),
            },
        )
        return _error(
            status.HTTP_400_BAD_REQUEST, str(e), "VALIDATION_ERROR", request_id
        )
    except PageFetchError as e:
        logger.error(
            "Page fetch failed",
            extra={
                "request_id": request_id,
                "url": e.url[:200],
                "error_message": str(e),
            },
        )
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            str(e),
            "PAGE_FETCH_ERROR",
            request_id,
        )
    except Exception as e:
        logger.error(
            "Compare failed",
            extra={
                "request_id": request_id,
                "error_type": type(e).__name__,
                "error_message": str(e),
            },
            exc_info=True,
        )
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            str(e) or type(e).__name__,
            "INTERNAL_ERROR",
            request_id,
        )

    duration_ms = (time.monotonic() - start_time) * 1000
    logger.info(
        "Compare complete",
        extra={
            "request_id": request_id,
            "passed": result.passed,
            "cqi_score": result.cqi.score,
            "duration_ms": round(duration_ms, 2),
        },
    )
    return CompareResponse.model_validate(result.to_dict())


@router.post(
    "/cqi",
    response_model=CqiScoreResponse,
    summary="Score pasted content",
    description="Compute the Content Quality Index and spelling score for pasted content.",
    responses={
        400: {"model": ErrorResponse, "description": "pastedContent missing"},
        500: {"model": ErrorResponse, "description": "Internal failure"},
    },
)
async def score_cqi(
    request: Request,
    data: CqiRequest = Body(default_factory=CqiRequest),
    service: ComparisonService = Depends(get_comparison_service),
) -> CqiScoreResponse | JSONResponse:
    """Score pasted content without fetching a page.

    An empty string is valid and returns the zero "No pasted content" score.
    """
    request_id = _get_request_id(request)

    if data.pasted_content is None:
        logger.warning(
            "CQI request missing pastedContent",
            extra={"request_id": request_id},
        )
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "Missing required field: pastedContent",
            "VALIDATION_ERROR",
            request_id,
        )

    try:
        result = await service.score_content(data.pasted_content, lang=data.lang)
    except Exception as e:
        logger.error(
            "CQI scoring failed",
            extra={
                "request_id": request_id,
                "error_type": type(e).__name__,
                "error_message": str(e),
            },
            exc_info=True,
        )
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            str(e) or type(e).__name__,
            "INTERNAL_ERROR",
            request_id,
        )

    logger.info(
        "CQI scored",
        extra={
            "request_id": request_id,
            "score": result.cqi.score,
            "status": result.cqi.status,
        },
    )
    return CqiScoreResponse.model_validate(result.to_dict())
