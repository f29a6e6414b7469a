"""Unit tests for SEO keyword density analysis."""

import pytest

from content_checker.services.seo import (
    IDEAL_DENSITY,
    analyze_seo,
    count_keyword,
    density_proximity,
    extract_top_terms,
    parse_keywords,
)


class TestParseKeywords:
    """Keyword input normalization."""

    def test_comma_separated_string(self) -> None:
        assert parse_keywords("SEO, Content ,seo,") == ["seo", "content"]

    def test_list_input(self) -> None:
        assert parse_keywords(["Content  Checker", "", "content checker"]) == [
            "content checker"
        ]

    def test_none(self) -> None:
        assert parse_keywords(None) == []


class TestCounting:
    """Whole-word and phrase matching."""

    def test_whole_word_only(self) -> None:
        assert count_keyword("category cat cats Cat.", "cat") == 2

    def test_phrase_across_whitespace(self) -> None:
        assert count_keyword("Content  checker and content checker", "content checker") == 2

    def test_density_proximity(self) -> None:
        assert density_proximity(IDEAL_DENSITY) == pytest.approx(1.0)
        assert density_proximity(0.0) == 0.0
        assert density_proximity(IDEAL_DENSITY * 2) == pytest.approx(0.0)
        assert density_proximity(IDEAL_DENSITY * 1.5) == pytest.approx(0.5)


class TestAnalyzeSeo:
    """Scoring behavior."""

    def test_ideal_density_scores_full_marks(self) -> None:
        text = " ".join(["filler"] * 197 + ["seo"] * 3)
        result = analyze_seo(text, ["seo"])

        assert result.score == 100
        assert result.details["keywords"][0] == {
            "keyword": "seo",
            "count": 3,
            "density": 0.015,
            "present": True,
        }

    def test_keyword_stuffing_keeps_only_coverage(self) -> None:
        text = "Content checker helps teams. The content checker compares copy."
        result = analyze_seo(text, ["content checker"])

        assert result.details["totalWords"] == 9
        assert result.details["coverage"] == 1.0
        assert result.details["densityProximity"] == 0.0
        assert result.score == 60

    def test_missing_keyword_scores_zero(self) -> None:
        result = analyze_seo("Nothing relevant here at all", ["absent"])
        assert result.score == 0
        assert result.details["keywords"][0]["present"] is False

    def test_auto_extracts_top_terms(self) -> None:
        text = "apple banana apple cherry apple banana the the the"
        result = analyze_seo(text)

        assert result.details["autoExtracted"] is True
        assert [k["keyword"] for k in result.details["keywords"]] == [
            "apple",
            "banana",
            "cherry",
        ]

    def test_extract_top_terms_limit(self) -> None:
        text = "one1 two2 three3 four4 five5 six6 seven7"
        assert len(extract_top_terms(text)) == 5

    def test_empty_text(self) -> None:
        result = analyze_seo("", ["anything"])
        assert result.score == 0
        assert result.details["totalWords"] == 0
        assert result.details["keywords"] == []
