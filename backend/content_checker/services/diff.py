"""Character-level diff between expected (pasted) and actual (live) text.

Builds an ordered edit script with diff-match-patch (Myers' O(ND) algorithm)
and renders it into two marked-up HTML strings: deletions appear only in the
expected markup, insertions only in the actual markup, unchanged text in both.

Short inputs are diffed character by character. Long inputs are first diffed
word by word, then each changed block is refined at character level. All
passes share one deadline; once it expires the remaining blocks degrade to a
plain delete + insert, which is still a valid edit script.
"""

import html
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from diff_match_patch import diff_match_patch

REMOVED_CLASS = "removed"
ADDED_CLASS = "added"

DIFF_TIMEOUT_SECONDS = 1.0
WORD_MODE_MIN_LENGTH = 2000

_TAG_PATTERN = re.compile(r"<[^>]+>")
_TOKEN_PATTERN = re.compile(r"\s+|\S+")


class DiffOpType(Enum):
    """Edit operation kinds."""

    EQUAL = "equal"
    INSERT = "insert"
    DELETE = "delete"


_DMP_OPS = {
    diff_match_patch.DIFF_EQUAL: DiffOpType.EQUAL,
    diff_match_patch.DIFF_INSERT: DiffOpType.INSERT,
    diff_match_patch.DIFF_DELETE: DiffOpType.DELETE,
}


@dataclass
class DiffOp:
    """A single edit operation and the text it covers."""

    op: DiffOpType
    text: str


@dataclass
class DiffResult:
    """Rendered diff of expected vs. actual text."""

    expected_markup: str
    actual_markup: str
    ops: list[DiffOp] = field(default_factory=list)

    @property
    def removed_count(self) -> int:
        return sum(1 for o in self.ops if o.op is DiffOpType.DELETE and o.text)

    @property
    def added_count(self) -> int:
        return sum(1 for o in self.ops if o.op is DiffOpType.INSERT and o.text)

    @property
    def passed(self) -> bool:
        """True when no removed or added span is non-empty."""
        return self.removed_count == 0 and self.added_count == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "expectedHtml": self.expected_markup,
            "actualHtml": self.actual_markup,
            "passed": self.passed,
            "removedSpans": self.removed_count,
            "addedSpans": self.added_count,
        }


def _span(css_class: str, text: str) -> str:
    return f'<span class="{css_class}">{html.escape(text, quote=False)}</span>'


def _new_differ() -> diff_match_patch:
    differ = diff_match_patch()
    differ.Diff_Timeout = DIFF_TIMEOUT_SECONDS
    return differ


def _word_diff(
    differ: diff_match_patch, expected: str, actual: str, deadline: float
) -> list[tuple[int, str]]:
    """Diff whitespace/word tokens, then refine changed blocks per character."""
    vocabulary: dict[str, str] = {}
    tokens: list[str] = []

    def encode(text: str) -> str:
        chars = []
        for token in _TOKEN_PATTERN.findall(text):
            code = vocabulary.get(token)
            if code is None:
                code = chr(len(tokens))
                vocabulary[token] = code
                tokens.append(token)
            chars.append(code)
        return "".join(chars)

    encoded = differ.diff_main(encode(expected), encode(actual), False, deadline)

    diffs: list[tuple[int, str]] = []
    deleted: list[str] = []
    inserted: list[str] = []

    def flush() -> None:
        if deleted or inserted:
            diffs.extend(
                differ.diff_main("".join(deleted), "".join(inserted), False, deadline)
            )
            deleted.clear()
            inserted.clear()

    for op, chars in encoded:
        text = "".join(tokens[ord(c)] for c in chars)
        if op == diff_match_patch.DIFF_DELETE:
            deleted.append(text)
        elif op == diff_match_patch.DIFF_INSERT:
            inserted.append(text)
        else:
            flush()
            diffs.append((op, text))
    flush()
    return diffs


def compute_ops(expected: str, actual: str) -> list[DiffOp]:
    """Compute the character-level edit script.

    A replaced region is emitted as a delete followed by an insert.
    Adjacent operations of the same kind are merged.
    """
    differ = _new_differ()
    deadline = time.time() + DIFF_TIMEOUT_SECONDS

    if max(len(expected), len(actual)) < WORD_MODE_MIN_LENGTH:
        diffs = differ.diff_main(expected, actual, False, deadline)
    else:
        diffs = _word_diff(differ, expected, actual, deadline)

    ops: list[DiffOp] = []
    pending_insert: list[str] = []

    def push(op: DiffOpType, text: str) -> None:
        if not text:
            return
        if ops and ops[-1].op is op:
            ops[-1].text += text
        else:
            ops.append(DiffOp(op=op, text=text))

    for dmp_op, text in diffs:
        op = _DMP_OPS[dmp_op]
        if op is DiffOpType.INSERT:
            pending_insert.append(text)
            continue
        if op is DiffOpType.EQUAL:
            push(DiffOpType.INSERT, "".join(pending_insert))
            pending_insert.clear()
        push(op, text)
    push(DiffOpType.INSERT, "".join(pending_insert))

    return ops


def build_diff(expected: str, actual: str) -> DiffResult:
    """Diff two normalized strings and render both sides as markup.

    Args:
        expected: Normalized pasted text
        actual: Normalized live text

    Returns:
        DiffResult with expected/actual markup and the edit script
    """
    ops = compute_ops(expected, actual)
    expected_parts: list[str] = []
    actual_parts: list[str] = []

    for op in ops:
        if op.op is DiffOpType.EQUAL:
            escaped = html.escape(op.text, quote=False)
            expected_parts.append(escaped)
            actual_parts.append(escaped)
        elif op.op is DiffOpType.DELETE:
            expected_parts.append(_span(REMOVED_CLASS, op.text))
        else:
            actual_parts.append(_span(ADDED_CLASS, op.text))

    return DiffResult(
        expected_markup="".join(expected_parts),
        actual_markup="".join(actual_parts),
        ops=ops,
    )


def strip_markup(markup: str) -> str:
    """Remove diff spans and unescape entities, recovering the source text."""
    return html.unescape(_TAG_PATTERN.sub("", markup))
