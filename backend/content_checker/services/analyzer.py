"""Result shape shared by the auxiliary analyzers."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class AnalyzerResult:
    """Score plus analyzer-specific details.

    score is None only when the analyzer could not run at all
    (for example, no spelling dictionary for the requested language).
    """

    score: int | None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"score": self.score, "details": self.details}


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def to_score(fraction: float) -> int:
    """Convert a 0..1 fraction into a 0..100 integer score."""
    return round(clamp(fraction) * 100)
