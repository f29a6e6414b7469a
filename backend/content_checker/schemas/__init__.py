"""Pydantic schemas for API request/response validation."""

from content_checker.schemas.comparison import (
    AnalyzerResultResponse,
    CompareRequest,
    CompareResponse,
    CqiRequest,
    CqiResponse,
    CqiScoreResponse,
    ErrorResponse,
    MeaningDriftResponse,
)

__all__ = [
    "AnalyzerResultResponse",
    "CompareRequest",
    "CompareResponse",
    "CqiRequest",
    "CqiResponse",
    "CqiScoreResponse",
    "ErrorResponse",
    "MeaningDriftResponse",
]
