"""Content Quality Index (CQI) scoring.

Combines three sub-metrics computed from normalized pasted text into one
0-100 score, then compares it with a target that depends on how long the
content is (a hero tagline is held to a lower bar than a whitepaper).

Sub-metrics:
- Vocabulary: type-token ratio with Bayesian shrinkage toward a prior. The raw
  ratio is inflated for short samples (ten distinct words give 1.0), so
  small samples are pulled toward the prior until enough words accumulate.
- Readability: average sentence length mapped through a logistic curve.
  Syllable-based formulas penalize domain vocabulary (technical and
  enterprise writing is full of long words); sentence length is a
  controllable, domain-neutral proxy. 18 words/sentence scores 0.5,
  ~10 words approaches 1.0 and past ~26 words drops toward 0.2.
- Length: saturating 1 - exp(-words / scale) curve.

The scorer fails soft: it never raises, and empty input returns a zero score.

ERROR LOGGING REQUIREMENTS:
- Log method entry/exit at DEBUG level with parameters (sanitized)
- Log soft failures of the informational readability library at WARNING
- Log readability corpus preparation at INFO, download failures at WARNING
- Add timing logs for operations >1 second
"""

import math
import time
from dataclasses import dataclass, field
from typing import Any

import nltk
import textstat

from content_checker.core.config import AnalysisConfig
from content_checker.core.logging import get_logger
from content_checker.utils.text import clean_term, split_sentences, split_words

logger = get_logger(__name__)

SLOW_OPERATION_THRESHOLD_MS = 1000

# Vocabulary shrinkage
VOCAB_PRIOR = 0.5
VOCAB_PRIOR_STRENGTH = 20

# Readability logistic curve
READABILITY_NEUTRAL_WORDS = 18.0
READABILITY_SPREAD = 5.0

EMPTY_SUMMARY = "No pasted content"

CMUDICT_PACKAGE = "cmudict"
CMUDICT_RESOURCE = "corpora/cmudict"

_readability_ready: bool | None = None

STATUS_EXCEEDS = "exceeds"
STATUS_MEETS = "meets"
STATUS_NEAR = "near"
STATUS_NEEDS_IMPROVEMENT = "needs_improvement"
STATUS_POOR = "poor"

VALID_STATUSES = frozenset(
    {STATUS_EXCEEDS, STATUS_MEETS, STATUS_NEAR, STATUS_NEEDS_IMPROVEMENT, STATUS_POOR}
)

EXCEEDS_MARGIN = 20
NEAR_GAP = 10
NEEDS_IMPROVEMENT_GAP = 25


@dataclass(frozen=True)
class SectionBand:
    """A word-count band with its CQI target."""

    min_words: int
    name: str
    target: int
    note: str


# Ordered by min_words; a text belongs to the last band whose min it reaches.
SECTION_BANDS: tuple[SectionBand, ...] = (
    SectionBand(
        0,
        "Hero / Tagline",
        55,
        "Very short copy. Vocabulary and length carry little signal, so the bar is lower.",
    ),
    SectionBand(
        50,
        "Service Card / Feature",
        55,
        "Short descriptive copy. Aim for concrete wording and short sentences.",
    ),
    SectionBand(
        100,
        "Section Intro / About",
        60,
        "Introductory copy. Expect varied vocabulary and readable sentence length.",
    ),
    SectionBand(
        200,
        "Page Section / Landing Copy",
        65,
        "Full page section. Length is sufficient for all metrics to be meaningful.",
    ),
    SectionBand(
        500,
        "Case Study / Blog Post",
        70,
        "Long-form copy. Repetition and long sentences weigh more heavily here.",
    ),
    SectionBand(
        1000,
        "Technical Article / Whitepaper",
        72,
        "Long technical copy. Keep sentences short despite dense vocabulary.",
    ),
)

_SUMMARY_TEMPLATES = {
    STATUS_EXCEEDS: "Excellent for {section}: CQI {score} comfortably exceeds the target of {target}.",
    STATUS_MEETS: "Good for {section}: CQI {score} meets the target of {target}.",
    STATUS_NEAR: "Close for {section}: CQI {score} is just under the target of {target}.",
    STATUS_NEEDS_IMPROVEMENT: (
        "Needs improvement for {section}: CQI {score} is below the target of {target}."
    ),
    STATUS_POOR: "Poor for {section}: CQI {score} is well below the target of {target}.",
}


@dataclass
class CqiDetails:
    """Intermediate values behind a CQI score."""

    total_words: int = 0
    sample_size: int = 0
    sampled: bool = False
    unique_sample: int = 0
    avg_sentence_words: float = 0.0
    sentence_count: int = 0
    vocab_ratio: float = 0.0
    readability_score: float = 0.0
    length_score: float = 0.0
    vocab_weight: float = 0.4
    read_weight: float = 0.3
    length_weight: float = 0.3
    flesch_reading_ease: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "totalWords": self.total_words,
            "sampleSize": self.sample_size,
            "sampled": self.sampled,
            "uniqueSample": self.unique_sample,
            "avgSentenceWords": round(self.avg_sentence_words, 2),
            "sentenceCount": self.sentence_count,
            "vocabRatio": round(self.vocab_ratio, 4),
            "readabilityScore": round(self.readability_score, 4),
            "lengthScore": round(self.length_score, 4),
            "weights": {
                "vocabWeight": self.vocab_weight,
                "readWeight": self.read_weight,
                "lengthWeight": self.length_weight,
            },
            "fleschReadingEase": self.flesch_reading_ease,
        }


@dataclass
class CqiResult:
    """Content Quality Index for one piece of text."""

    score: int
    summary: str
    status: str
    reliable: bool
    section_type: str
    target_cqi: int
    section_note: str
    details: CqiDetails = field(default_factory=CqiDetails)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "score": self.score,
            "summary": self.summary,
            "status": self.status,
            "reliable": self.reliable,
            "sectionType": self.section_type,
            "targetCQI": self.target_cqi,
            "sectionNote": self.section_note,
            "details": self.details.to_dict(),
        }


def classify_section(total_words: int) -> SectionBand:
    """Pick the section band for a word count."""
    band = SECTION_BANDS[0]
    for candidate in SECTION_BANDS:
        if total_words >= candidate.min_words:
            band = candidate
    return band


def derive_status(score: int, target: int) -> str:
    """Map a score and its target to a status label."""
    if score >= target + EXCEEDS_MARGIN:
        return STATUS_EXCEEDS
    if score >= target:
        return STATUS_MEETS
    gap = target - score
    if gap <= NEAR_GAP:
        return STATUS_NEAR
    if gap <= NEEDS_IMPROVEMENT_GAP:
        return STATUS_NEEDS_IMPROVEMENT
    return STATUS_POOR


def build_summary(status: str, section_type: str, score: int, target: int) -> str:
    """Render the human-readable summary for a status."""
    return _SUMMARY_TEMPLATES[status].format(
        section=section_type, score=score, target=target
    )


def vocabulary_ratio(unique_count: int, sample_size: int) -> float:
    """Type-token ratio shrunk toward VOCAB_PRIOR."""
    return (unique_count + VOCAB_PRIOR_STRENGTH * VOCAB_PRIOR) / (
        sample_size + VOCAB_PRIOR_STRENGTH
    )


def readability_score(avg_sentence_words: float) -> float:
    """Logistic mapping of average sentence length to 0..1 (shorter is better)."""
    z = (avg_sentence_words - READABILITY_NEUTRAL_WORDS) / READABILITY_SPREAD
    # exp() overflows past ~709
    if z > 700:
        return 0.0
    return 1.0 / (1.0 + math.exp(z))


def length_score(total_words: int, length_scale: float) -> float:
    """Saturating length curve: near 0 for empty text, approaching 1 for long text."""
    return 1.0 - math.exp(-total_words / length_scale)


def prepare_readability_corpus(download: bool = True) -> bool:
    """Make the CMU pronouncing dictionary available to textstat.

    textstat fetches the corpus through nltk on first use and retries the
    download on every call while it is missing. This blocks on network I/O,
    so it runs once at startup in a worker thread. Until it has succeeded,
    the Flesch reading ease detail is reported as None.

    Args:
        download: Fetch the corpus when it is not installed locally

    Returns:
        True when the corpus is installed
    """
    global _readability_ready

    try:
        nltk.data.find(CMUDICT_RESOURCE)
        _readability_ready = True
        return True
    except LookupError:
        if not download:
            logger.info(
                "Readability corpus not installed, download disabled",
                extra={"resource": CMUDICT_RESOURCE},
            )
            _readability_ready = False
            return False

    start_time = time.monotonic()
    try:
        nltk.download(CMUDICT_PACKAGE, quiet=True)
        nltk.data.find(CMUDICT_RESOURCE)
        _readability_ready = True
    except (LookupError, OSError, ValueError) as e:
        logger.warning(
            "Readability corpus download failed",
            extra={
                "resource": CMUDICT_RESOURCE,
                "error_type": type(e).__name__,
                "error_message": str(e),
            },
        )
        _readability_ready = False

    logger.info(
        "Readability corpus prepared",
        extra={
            "ready": _readability_ready,
            "duration_ms": round((time.monotonic() - start_time) * 1000, 2),
        },
    )
    return _readability_ready


def readability_available() -> bool:
    """Whether the readability corpus is installed. Never downloads."""
    global _readability_ready

    if _readability_ready is None:
        try:
            nltk.data.find(CMUDICT_RESOURCE)
            _readability_ready = True
        except LookupError:
            _readability_ready = False
    return _readability_ready


def _flesch_reading_ease(sample_text: str) -> float | None:
    if not readability_available():
        return None
    try:
        return round(float(textstat.flesch_reading_ease(sample_text)), 2)
    except Exception as e:
        logger.warning(
            "Flesch reading ease unavailable",
            extra={
                "error_type": type(e).__name__,
                "error_message": str(e),
                "text_length": len(sample_text),
            },
        )
        return None


def _empty_result(config: AnalysisConfig) -> CqiResult:
    band = classify_section(0)
    return CqiResult(
        score=0,
        summary=EMPTY_SUMMARY,
        status=STATUS_POOR,
        reliable=False,
        section_type=band.name,
        target_cqi=band.target,
        section_note=band.note,
        details=CqiDetails(
            vocab_weight=config.vocab_weight,
            read_weight=config.read_weight,
            length_weight=config.length_weight,
        ),
    )


def calculate_cqi(text: str, config: AnalysisConfig | None = None) -> CqiResult:
    """Compute the Content Quality Index for normalized text.

    Vocabulary and readability use at most config.cqi_sample_limit words;
    the length score and section classification always use the full count.

    Args:
        text: Normalized pasted text
        config: Analyzer configuration (defaults when omitted)

    Returns:
        CqiResult; never raises for empty input
    """
    config = config or AnalysisConfig()
    start_time = time.monotonic()

    words = split_words(text or "")
    total_words = len(words)
    if total_words == 0:
        logger.debug("CQI requested for empty content")
        return _empty_result(config)

    sample = words[: config.cqi_sample_limit]
    sample_size = len(sample)
    sampled = total_words > config.cqi_sample_limit
    sample_text = " ".join(sample)

    unique_sample = len({term for term in (clean_term(w) for w in sample) if term})
    vocab = vocabulary_ratio(unique_sample, sample_size)

    sentence_count = len(split_sentences(sample_text)) or 1
    avg_sentence_words = sample_size / sentence_count
    readability = readability_score(avg_sentence_words)

    length = length_score(total_words, config.cqi_length_scale)

    combined = (
        vocab * config.vocab_weight
        + readability * config.read_weight
        + length * config.length_weight
    )
    combined = max(0.0, min(1.0, combined))
    score = round(combined * 100)

    band = classify_section(total_words)
    status = derive_status(score, band.target)

    result = CqiResult(
        score=score,
        summary=build_summary(status, band.name, score, band.target),
        status=status,
        reliable=total_words >= config.reliable_min_words,
        section_type=band.name,
        target_cqi=band.target,
        section_note=band.note,
        details=CqiDetails(
            total_words=total_words,
            sample_size=sample_size,
            sampled=sampled,
            unique_sample=unique_sample,
            avg_sentence_words=avg_sentence_words,
            sentence_count=sentence_count,
            vocab_ratio=vocab,
            readability_score=readability,
            length_score=length,
            vocab_weight=config.vocab_weight,
            read_weight=config.read_weight,
            length_weight=config.length_weight,
            flesch_reading_ease=_flesch_reading_ease(sample_text),
        ),
    )

    duration_ms = (time.monotonic() - start_time) * 1000
    logger.debug(
        "CQI calculated",
        extra={
            "score": score,
            "status": status,
            "section_type": band.name,
            "total_words": total_words,
            "sampled": sampled,
            "duration_ms": round(duration_ms, 2),
        },
    )
    if duration_ms > SLOW_OPERATION_THRESHOLD_MS:
        logger.warning(
            "Slow CQI calculation",
            extra={
                "total_words": total_words,
                "duration_ms": round(duration_ms, 2),
                "threshold_ms": SLOW_OPERATION_THRESHOLD_MS,
            },
        )

    return result
