"""Pydantic schemas for the comparison API endpoints.

Schemas:
- CompareRequest / CompareResponse: pasted copy vs. live page element
- CqiRequest / CqiResponse: quality score for pasted copy alone
- ErrorResponse: structured error body

Request fields are optional at the schema level so that missing or empty
required fields produce the documented 400 response instead of a schema
validation error. Field names on the wire are camelCase.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# REQUESTS
# =============================================================================


class CompareRequest(BaseModel):
    """Request schema for comparing pasted content with a live page element."""

    model_config = ConfigDict(populate_by_name=True)

    url: str | None = Field(
        None,
        description="Page to fetch",
        examples=["https://example.com/pricing"],
    )
    locator: str | None = Field(
        None,
        description="Element locator resolved according to type",
        examples=["main .hero h1"],
    )
    type: str | None = Field(
        None,
        description="Locator type: css, id or xpath",
        examples=["css"],
    )
    pasted_content: str | None = Field(
        None,
        alias="pastedContent",
        description="Expected text as approved copy",
    )
    keywords: list[str] | str | None = Field(
        None,
        description="SEO target keywords (list or comma-separated string)",
        examples=[["content checker", "seo"]],
    )
    lang: str | None = Field(
        None,
        description="Spell-check dictionary language",
        examples=["en"],
    )

    def missing_fields(self) -> list[str]:
        """Required fields that are absent or empty."""
        required = {
            "url": self.url,
            "locator": self.locator,
            "type": self.type,
            "pastedContent": self.pasted_content,
        }
        return [name for name, value in required.items() if not value]


class CqiRequest(BaseModel):
    """Request schema for scoring pasted content on its own."""

    model_config = ConfigDict(populate_by_name=True)

    pasted_content: str | None = Field(
        None,
        alias="pastedContent",
        description="Text to score; an empty string yields a zero score",
    )
    lang: str | None = Field(None, description="Spell-check dictionary language")


# =============================================================================
# RESPONSES
# =============================================================================


class AnalyzerResultResponse(BaseModel):
    """Score and details from one auxiliary analyzer."""

    score: int | None = Field(None, description="0-100, null when unavailable")
    details: dict[str, Any] = Field(default_factory=dict)


class CqiResponse(BaseModel):
    """Content Quality Index result."""

    model_config = ConfigDict(populate_by_name=True)

    score: int = Field(..., ge=0, le=100)
    summary: str
    status: str = Field(
        ..., description="exceeds, meets, near, needs_improvement or poor"
    )
    reliable: bool
    section_type: str = Field(..., alias="sectionType")
    target_cqi: int = Field(..., alias="targetCQI")
    section_note: str = Field(..., alias="sectionNote")
    details: dict[str, Any] = Field(default_factory=dict)


class MeaningDriftResponse(BaseModel):
    """Meaning drift between pasted and live text."""

    score: int | None = None
    summary: str
    provider: str | None = None
    available: bool = True


class CompareResponse(BaseModel):
    """Response schema for a comparison."""

    model_config = ConfigDict(populate_by_name=True)

    expected_html: str = Field(..., alias="expectedHtml")
    actual_html: str = Field(..., alias="actualHtml")
    passed: bool
    cqi: CqiResponse
    spelling: AnalyzerResultResponse
    seo: AnalyzerResultResponse
    engagement: AnalyzerResultResponse
    duplication: AnalyzerResultResponse
    broken_links: AnalyzerResultResponse = Field(..., alias="brokenLinks")
    intent_relevance: AnalyzerResultResponse = Field(..., alias="intentRelevance")
    meaning_drift: MeaningDriftResponse = Field(..., alias="meaningDrift")


class CqiScoreResponse(BaseModel):
    """Response schema for scoring pasted content."""

    cqi: CqiResponse
    spelling: AnalyzerResultResponse


class ErrorResponse(BaseModel):
    """Structured error body."""

    error: str
    code: str | None = None
    request_id: str | None = None
