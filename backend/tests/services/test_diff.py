"""Unit tests for the character diff engine.

Tests cover:
- Identity (no spans, PASS)
- Minimal insert and delete rendering
- Replace rendered as delete + insert
- Empty sides
- Reconstruction of both inputs from markup
- HTML escaping of span and literal text
- Shortest edit scripts and bounded runtime on long texts
"""

import random
import time

import pytest

from content_checker.services.diff import (
    DiffOpType,
    build_diff,
    compute_ops,
    strip_markup,
)


class TestBuildDiff:
    """Tests for build_diff rendering."""

    def test_identical_text_passes(self) -> None:
        text = "The quick brown fox jumps over the lazy dog."
        result = build_diff(text, text)

        assert result.passed is True
        assert result.expected_markup == text
        assert result.actual_markup == text
        assert "<span" not in result.expected_markup
        assert result.removed_count == 0
        assert result.added_count == 0

    def test_inserted_word_marked_as_added(self) -> None:
        result = build_diff("Hello world", "Hello there world")

        assert result.passed is False
        assert result.expected_markup == "Hello world"
        assert result.actual_markup == 'Hello <span class="added">there </span>world'
        assert result.added_count == 1
        assert result.removed_count == 0

    def test_deleted_word_marked_as_removed(self) -> None:
        result = build_diff("Hello there world", "Hello world")

        assert result.passed is False
        assert result.expected_markup == 'Hello <span class="removed">there </span>world'
        assert result.actual_markup == "Hello world"

    def test_empty_expected_is_one_added_span(self) -> None:
        result = build_diff("", "Live text")

        assert result.expected_markup == ""
        assert result.actual_markup == '<span class="added">Live text</span>'
        assert result.passed is False

    def test_empty_actual_is_one_removed_span(self) -> None:
        result = build_diff("Pasted text", "")

        assert result.expected_markup == '<span class="removed">Pasted text</span>'
        assert result.actual_markup == ""

    def test_both_empty_passes(self) -> None:
        result = build_diff("", "")
        assert result.passed is True
        assert result.expected_markup == ""
        assert result.actual_markup == ""

    def test_replace_is_delete_then_insert(self) -> None:
        ops = compute_ops("cat", "cut")
        kinds = [op.op for op in ops]

        assert kinds == [
            DiffOpType.EQUAL,
            DiffOpType.DELETE,
            DiffOpType.INSERT,
            DiffOpType.EQUAL,
        ]
        assert [op.text for op in ops] == ["c", "a", "u", "t"]

    def test_markup_is_html_escaped(self) -> None:
        result = build_diff("a < b", "a < b & c")

        assert "&lt;" in result.expected_markup
        assert '<span class="added"> &amp; c</span>' in result.actual_markup

    def test_to_dict_keys(self) -> None:
        data = build_diff("a", "b").to_dict()
        assert set(data) == {
            "expectedHtml",
            "actualHtml",
            "passed",
            "removedSpans",
            "addedSpans",
        }


class TestDiffReconstruction:
    """Stripping markup recovers each input exactly."""

    @pytest.mark.parametrize(
        ("expected", "actual"),
        [
            ("Hello world", "Hello there world"),
            ("The price is $10.", "The price is $12!"),
            ("<b>bold</b> & co", "bold & company"),
            ("", "only actual"),
            ("only expected", ""),
            ("same", "same"),
            ("abc", "xyz"),
            ("Tom & Jerry's \"show\"", "Tom & Jerry show"),
        ],
    )
    def test_strip_markup_recovers_inputs(self, expected: str, actual: str) -> None:
        result = build_diff(expected, actual)

        assert strip_markup(result.expected_markup) == expected
        assert strip_markup(result.actual_markup) == actual

    @pytest.mark.parametrize("text", ["", "x", "repeat repeat repeat", "a<b>c"])
    def test_identity_has_no_spans(self, text: str) -> None:
        result = build_diff(text, text)
        assert result.removed_count == 0
        assert result.added_count == 0
        assert result.passed is True


def make_article(word_count: int, seed: int) -> str:
    rng = random.Random(seed)
    vocabulary = [
        "content", "quality", "page", "launch", "customer", "pricing", "team",
        "product", "release", "search", "brand", "message", "update", "copy",
        "review", "editor", "publish", "draft", "section", "headline",
    ]
    return " ".join(rng.choice(vocabulary) for _ in range(word_count))


class TestEditScript:
    """Minimal edit scripts and long inputs."""

    def test_edit_script_keeps_longest_common_subsequence(self) -> None:
        ops = compute_ops("b b b", "aba bb ")

        kept = "".join(op.text for op in ops if op.op is DiffOpType.EQUAL)
        assert len(kept) == 4

    def test_deletes_precede_inserts_in_a_changed_region(self) -> None:
        ops = compute_ops("one two three", "one 2 three")

        kinds = [op.op for op in ops]
        assert kinds.index(DiffOpType.DELETE) < kinds.index(DiffOpType.INSERT)

    def test_long_text_diff_is_fast(self) -> None:
        expected = make_article(4000, seed=7)
        rng = random.Random(11)
        words = expected.split(" ")
        for index in rng.sample(range(len(words)), 200):
            words[index] = words[index].upper()
        actual = " ".join(words)

        started = time.monotonic()
        result = build_diff(expected, actual)
        elapsed = time.monotonic() - started

        assert elapsed < 5
        assert result.passed is False
        assert strip_markup(result.expected_markup) == expected
        assert strip_markup(result.actual_markup) == actual

    def test_long_identical_text_passes(self) -> None:
        text = make_article(4000, seed=3)

        result = build_diff(text, text)

        assert result.passed is True
        assert result.actual_markup == text

    def test_long_text_insertion_is_localized(self) -> None:
        expected = make_article(1000, seed=5)
        actual = expected + " plus one closing sentence"

        result = build_diff(expected, actual)

        assert result.removed_count == 0
        assert result.actual_markup.endswith(
            '<span class="added"> plus one closing sentence</span>'
        )
