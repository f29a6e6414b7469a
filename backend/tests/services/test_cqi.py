"""Unit tests for the Content Quality Index scorer.

Tests cover:
- Empty input (zero score, "No pasted content")
- Section classification boundaries
- Status thresholds against targets
- Reliability flag
- Score and sub-metric bounds
- Length monotonicity
- Sampling cap
- Sub-metric formulas
- Serialization keys
- Readability corpus gating of the Flesch reading ease detail
"""

import math

import nltk
import pytest

from content_checker.core.config import AnalysisConfig
from content_checker.services import cqi
from content_checker.services.cqi import (
    EMPTY_SUMMARY,
    SECTION_BANDS,
    VALID_STATUSES,
    calculate_cqi,
    classify_section,
    derive_status,
    length_score,
    prepare_readability_corpus,
    readability_score,
    vocabulary_ratio,
)


def make_words(count: int, prefix: str = "word") -> str:
    """Distinct words, ten per sentence."""
    words = [f"{prefix}{i}" for i in range(count)]
    sentences = [" ".join(words[i : i + 10]) + "." for i in range(0, count, 10)]
    return " ".join(sentences)


class TestEmptyInput:
    """Empty text yields the zero result without raising."""

    def test_empty_string(self) -> None:
        result = calculate_cqi("")

        assert result.score == 0
        assert result.summary == EMPTY_SUMMARY
        assert result.reliable is False
        assert result.details.total_words == 0

    def test_whitespace_only(self) -> None:
        assert calculate_cqi("   ").summary == EMPTY_SUMMARY


class TestSectionClassification:
    """Word-count bands and their targets."""

    def test_49_words_is_hero(self) -> None:
        result = calculate_cqi(make_words(49))
        assert result.section_type == "Hero / Tagline"
        assert result.target_cqi == 55

    def test_50_words_is_service_card(self) -> None:
        result = calculate_cqi(make_words(50))
        assert result.section_type == "Service Card / Feature"
        assert result.target_cqi == 55

    @pytest.mark.parametrize(
        ("words", "name", "target"),
        [
            (0, "Hero / Tagline", 55),
            (99, "Service Card / Feature", 55),
            (100, "Section Intro / About", 60),
            (199, "Section Intro / About", 60),
            (200, "Page Section / Landing Copy", 65),
            (499, "Page Section / Landing Copy", 65),
            (500, "Case Study / Blog Post", 70),
            (999, "Case Study / Blog Post", 70),
            (1000, "Technical Article / Whitepaper", 72),
            (25000, "Technical Article / Whitepaper", 72),
        ],
    )
    def test_band_boundaries(self, words: int, name: str, target: int) -> None:
        band = classify_section(words)
        assert band.name == name
        assert band.target == target

    def test_every_band_has_a_note(self) -> None:
        assert all(band.note for band in SECTION_BANDS)


class TestStatusThresholds:
    """derive_status against a target of 65."""

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (65, "meets"),
            (84, "meets"),
            (85, "exceeds"),
            (100, "exceeds"),
            (60, "near"),
            (55, "near"),
            (54, "needs_improvement"),
            (45, "needs_improvement"),
            (40, "needs_improvement"),
            (39, "poor"),
            (30, "poor"),
            (0, "poor"),
        ],
    )
    def test_status(self, score: int, expected: str) -> None:
        assert derive_status(score, 65) == expected

    def test_summary_mentions_section_score_and_target(self) -> None:
        result = calculate_cqi(make_words(60))
        assert result.status in VALID_STATUSES
        assert result.section_type in result.summary
        assert str(result.score) in result.summary
        assert str(result.target_cqi) in result.summary


class TestReliability:
    """reliable flips at 30 words."""

    def test_20_words_unreliable(self) -> None:
        assert calculate_cqi(make_words(20)).reliable is False

    def test_31_words_reliable(self) -> None:
        assert calculate_cqi(make_words(31)).reliable is True

    def test_threshold_is_configurable(self) -> None:
        config = AnalysisConfig(reliable_min_words=10)
        assert calculate_cqi(make_words(12), config).reliable is True


class TestBounds:
    """Score and sub-metrics stay within range."""

    @pytest.mark.parametrize(
        "text",
        [
            "a",
            "word " * 3000,
            "One. Two. Three. Four.",
            " ".join(["verylongsentence"] * 400),
            "Hello!!! ??? ...",
            make_words(1200),
        ],
    )
    def test_score_and_submetrics_in_range(self, text: str) -> None:
        result = calculate_cqi(text)
        details = result.details

        assert 0 <= result.score <= 100
        assert 0.0 <= details.vocab_ratio <= 1.0
        assert 0.0 <= details.readability_score <= 1.0
        assert 0.0 <= details.length_score <= 1.0
        assert result.status in VALID_STATUSES

    def test_readability_guard_for_huge_sentences(self) -> None:
        assert readability_score(10_000) == 0.0
        assert readability_score(18) == pytest.approx(0.5)


class TestLengthMonotonicity:
    """Appending distinct content never lowers the length score."""

    def test_length_score_non_decreasing(self) -> None:
        previous = -1.0
        for count in (1, 10, 50, 100, 250, 600, 1500):
            current = calculate_cqi(make_words(count)).details.length_score
            assert current >= previous
            previous = current

    def test_length_formula(self) -> None:
        assert length_score(200, 200.0) == pytest.approx(1 - math.exp(-1))
        assert length_score(0, 200.0) == 0.0


class TestSubMetrics:
    """Vocabulary shrinkage, sampling and details."""

    def test_vocabulary_shrinkage(self) -> None:
        # Ten distinct words: raw ratio 1.0, shrunk to (10 + 10) / 30
        assert vocabulary_ratio(10, 10) == pytest.approx(20 / 30)

    def test_unique_sample_ignores_case_and_punctuation(self) -> None:
        result = calculate_cqi("Hello hello, HELLO! world.")
        assert result.details.unique_sample == 2
        assert result.details.sentence_count == 2

    def test_no_sentence_boundary_counts_as_one_sentence(self) -> None:
        result = calculate_cqi("just some words without punctuation")
        assert result.details.sentence_count == 1
        assert result.details.avg_sentence_words == 5

    def test_sampling_cap(self) -> None:
        config = AnalysisConfig(cqi_sample_limit=100)
        result = calculate_cqi(make_words(250), config)

        assert result.details.total_words == 250
        assert result.details.sample_size == 100
        assert result.details.sampled is True
        # Length still uses the full word count
        assert result.details.length_score == pytest.approx(
            length_score(250, config.cqi_length_scale)
        )

    def test_weights_must_sum_to_one(self) -> None:
        with pytest.raises(ValueError):
            AnalysisConfig(vocab_weight=0.5, read_weight=0.5, length_weight=0.5)

    def test_to_dict_shape(self) -> None:
        data = calculate_cqi(make_words(40)).to_dict()

        assert set(data) == {
            "score",
            "summary",
            "status",
            "reliable",
            "sectionType",
            "targetCQI",
            "sectionNote",
            "details",
        }
        assert set(data["details"]) >= {
            "totalWords",
            "sampleSize",
            "sampled",
            "uniqueSample",
            "avgSentenceWords",
            "sentenceCount",
            "vocabRatio",
            "readabilityScore",
            "lengthScore",
            "weights",
            "fleschReadingEase",
        }
        assert data["details"]["weights"] == {
            "vocabWeight": 0.4,
            "readWeight": 0.3,
            "lengthWeight": 0.3,
        }


class FakeCorpusStore:
    """Stands in for nltk's data lookup and downloader."""

    def __init__(self, installed: bool = False, download_error: Exception | None = None) -> None:
        self.installed = installed
        self.download_error = download_error
        self.downloads: list[str] = []

    def find(self, resource: str) -> str:
        if not self.installed:
            raise LookupError(f"Resource {resource} not found.")
        return f"/nltk_data/{resource}"

    def download(self, package: str, quiet: bool = False) -> bool:
        self.downloads.append(package)
        if self.download_error is not None:
            raise self.download_error
        self.installed = True
        return True


@pytest.fixture
def corpus_store(monkeypatch: pytest.MonkeyPatch) -> FakeCorpusStore:
    store = FakeCorpusStore()
    monkeypatch.setattr(cqi, "_readability_ready", None)
    monkeypatch.setattr(nltk.data, "find", store.find)
    monkeypatch.setattr(nltk, "download", store.download)
    return store


@pytest.fixture
def reading_ease_calls(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    calls: list[str] = []

    def fake_reading_ease(text: str) -> float:
        calls.append(text)
        return 72.456

    monkeypatch.setattr(cqi.textstat, "flesch_reading_ease", fake_reading_ease)
    return calls


READABLE_TEXT = "The cat sat on the mat. The dog ran to the park."


class TestReadabilityCorpus:
    """The Flesch detail never triggers a download while scoring."""

    def test_missing_corpus_reports_none_without_downloading(
        self, corpus_store: FakeCorpusStore, reading_ease_calls: list[str]
    ) -> None:
        first = calculate_cqi(READABLE_TEXT)
        second = calculate_cqi(READABLE_TEXT)

        assert first.details.flesch_reading_ease is None
        assert second.details.flesch_reading_ease is None
        assert corpus_store.downloads == []
        assert reading_ease_calls == []

    def test_prepare_downloads_once(
        self, corpus_store: FakeCorpusStore, reading_ease_calls: list[str]
    ) -> None:
        assert prepare_readability_corpus() is True

        result = calculate_cqi(READABLE_TEXT)
        calculate_cqi(READABLE_TEXT)

        assert corpus_store.downloads == ["cmudict"]
        assert result.details.flesch_reading_ease == 72.46
        assert result.to_dict()["details"]["fleschReadingEase"] == 72.46

    def test_failed_download_degrades_to_none(
        self, corpus_store: FakeCorpusStore, reading_ease_calls: list[str]
    ) -> None:
        corpus_store.download_error = OSError("network unreachable")

        assert prepare_readability_corpus() is False
        result = calculate_cqi(READABLE_TEXT)

        assert result.details.flesch_reading_ease is None
        assert corpus_store.downloads == ["cmudict"]

    def test_download_disabled(self, corpus_store: FakeCorpusStore) -> None:
        assert prepare_readability_corpus(download=False) is False
        assert corpus_store.downloads == []

    def test_installed_corpus_skips_download(
        self, corpus_store: FakeCorpusStore, reading_ease_calls: list[str]
    ) -> None:
        corpus_store.installed = True

        assert prepare_readability_corpus() is True
        assert calculate_cqi(READABLE_TEXT).details.flesch_reading_ease == 72.46
        assert corpus_store.downloads == []

    def test_reading_ease_value_with_real_corpus(self, monkeypatch: pytest.MonkeyPatch) -> None:
        try:
            nltk.data.find("corpora/cmudict")
        except LookupError:
            pytest.skip("cmudict corpus not installed")
        monkeypatch.setattr(cqi, "_readability_ready", None)

        value = calculate_cqi(READABLE_TEXT).details.flesch_reading_ease

        assert isinstance(value, float)
        assert 60 < value <= 122
