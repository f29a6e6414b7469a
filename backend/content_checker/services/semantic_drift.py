"""Meaning drift between pasted copy and the live page.

Providers are tried in priority order and the first one that returns a
result wins. A provider that fails returns None (after logging) so the next
one gets a chance. Providers may disagree; that is never an error.
"""

import math
from collections import Counter
from dataclasses import dataclass
from typing import Any, Protocol

from nltk.stem import PorterStemmer

from content_checker.core.logging import get_logger
from content_checker.integrations.claude import ClaudeClient
from content_checker.services.analyzer import clamp
from content_checker.utils.text import term_tokens

logger = get_logger(__name__)

JACCARD_WEIGHT = 0.4
COSINE_WEIGHT = 0.6
MIN_TERM_LENGTH = 3
TOP_CONCEPTS = 3


@dataclass
class DriftResult:
    """Meaning drift score (0 = same meaning, 100 = unrelated)."""

    score: int | None
    summary: str
    provider: str | None
    available: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "score": self.score,
            "summary": self.summary,
            "provider": self.provider,
            "available": self.available,
        }


class DriftProvider(Protocol):
    name: str

    async def score(self, expected: str, actual: str) -> DriftResult | None: ...


def drift_summary(score: int) -> str:
    if score < 10:
        return "Meaning is highly similar"
    if score < 30:
        return "Minor meaning differences detected"
    if score < 60:
        return "Moderate meaning drift detected"
    return "Significant meaning drift detected"


def _first_unique(tokens: list[str], exclude: set[str], limit: int) -> list[str]:
    found: dict[str, None] = {}
    for token in tokens:
        if token not in exclude and token not in found:
            found[token] = None
            if len(found) == limit:
                break
    return list(found)


class LexicalDriftProvider:
    """Local drift estimate from stemmed content-word overlap."""

    name = "lexical"

    def __init__(self) -> None:
        self._stemmer = PorterStemmer()

    def _stems(self, text: str) -> list[str]:
        return [
            self._stemmer.stem(token)
            for token in term_tokens(
                text, min_length=MIN_TERM_LENGTH, drop_stop_words=True
            )
        ]

    def measure(self, expected: str, actual: str) -> DriftResult:
        """Synchronous drift computation."""
        if not expected or not actual:
            return DriftResult(
                score=0, summary="Insufficient text for analysis", provider=self.name
            )

        expected_stems = self._stems(expected)
        actual_stems = self._stems(actual)

        if not expected_stems and not actual_stems:
            return DriftResult(
                score=0,
                summary="Both texts contain only stop words",
                provider=self.name,
            )
        if not expected_stems or not actual_stems:
            return DriftResult(
                score=100,
                summary="One text is empty or contains only stop words",
                provider=self.name,
            )

        expected_counts = Counter(expected_stems)
        actual_counts = Counter(actual_stems)
        expected_set = set(expected_counts)
        actual_set = set(actual_counts)

        jaccard = len(expected_set & actual_set) / len(expected_set | actual_set)
        dot = sum(c * actual_counts[t] for t, c in expected_counts.items())
        norm = math.sqrt(sum(c * c for c in expected_counts.values())) * math.sqrt(
            sum(c * c for c in actual_counts.values())
        )
        cosine = dot / norm if norm else 0.0

        similarity = JACCARD_WEIGHT * clamp(jaccard) + COSINE_WEIGHT * clamp(cosine)
        score = max(0, min(100, round((1.0 - similarity) * 100)))

        summary = drift_summary(score)
        removed = _first_unique(expected_stems, actual_set, TOP_CONCEPTS)
        added = _first_unique(actual_stems, expected_set, TOP_CONCEPTS)
        changes = []
        if removed:
            changes.append(f"Removed concepts: {', '.join(removed)}")
        if added:
            changes.append(f"Added concepts: {', '.join(added)}")
        if changes:
            summary = f"{summary}. {'. '.join(changes)}"

        return DriftResult(score=score, summary=summary, provider=self.name)

    async def score(self, expected: str, actual: str) -> DriftResult | None:
        return self.measure(expected, actual)


class ClaudeDriftProvider:
    """Drift judgement from Claude; returns None when the call fails."""

    name = "claude"

    def __init__(self, client: ClaudeClient) -> None:
        self._client = client

    async def score(self, expected: str, actual: str) -> DriftResult | None:
        if not self._client.available:
            return None
        assessment = await self._client.assess_meaning_drift(expected, actual)
        if not assessment.success or assessment.score is None:
            logger.warning(
                "Claude drift provider failed, falling back",
                extra={"error": assessment.error},
            )
            return None
        return DriftResult(
            score=assessment.score,
            summary=assessment.summary or drift_summary(assessment.score),
            provider=self.name,
        )


class SemanticDriftService:
    """Runs drift providers in priority order until one answers."""

    def __init__(self, providers: list[DriftProvider]) -> None:
        self._providers = list(providers)

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self._providers]

    async def score_semantic_drift(self, expected: str, actual: str) -> DriftResult:
        for provider in self._providers:
            try:
                result = await provider.score(expected, actual)
            except Exception as e:
                logger.warning(
                    "Drift provider raised, trying next",
                    extra={
                        "provider": provider.name,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    },
                    exc_info=True,
                )
                continue
            if result is not None:
                logger.debug(
                    "Meaning drift scored",
                    extra={"provider": provider.name, "score": result.score},
                )
                return result

        return DriftResult(
            score=None,
            summary="Analysis unavailable",
            provider=None,
            available=False,
        )


def build_drift_service(claude_client: ClaudeClient | None = None) -> SemanticDriftService:
    """Claude first when configured, then the local lexical estimate."""
    providers: list[DriftProvider] = []
    if claude_client is not None and claude_client.available:
        providers.append(ClaudeDriftProvider(claude_client))
    providers.append(LexicalDriftProvider())
    return SemanticDriftService(providers)
