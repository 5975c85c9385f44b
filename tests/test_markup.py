"""Tests for doccorpus.markup scanning helpers."""

from __future__ import annotations

from doccorpus.markup import iter_prose_lines, mask_inline_code, split_frontmatter, split_segments, unbalanced_braces


def test_split_frontmatter_reports_body_offset() -> None:
    split = split_frontmatter("---\r\ntitle: A\r\n---\r\nBody\r\n")

    assert split.block == "title: A\n"
    assert split.body == "Body\n"
    assert split.body_line_offset == 3


def test_split_frontmatter_without_block() -> None:
    split = split_frontmatter("Body\n---\n")

    assert split.block is None
    assert split.body_line_offset == 0


def test_split_segments_round_trips_and_marks_code() -> None:
    text = "intro\n```py\nx = {\n```\noutro\n"

    segments = split_segments(text)

    assert "".join(chunk for _, chunk in segments) == text
    assert [is_code for is_code, _ in segments] == [False, True, False]


def test_unclosed_fence_runs_to_end_of_text() -> None:
    segments = split_segments("a\n~~~\nb {\n")

    assert segments[-1] == (True, "~~~\nb {\n")


def test_iter_prose_lines_skips_fenced_lines() -> None:
    lines = ["a", "```", "b", "```", "c"]

    assert list(iter_prose_lines(lines)) == [(0, "a"), (4, "c")]


def test_mask_inline_code_preserves_positions() -> None:
    line = "x `{` y"

    masked = mask_inline_code(line)

    assert len(masked) == len(line)
    assert "{" not in masked


def test_unbalanced_braces_ignores_escapes() -> None:
    assert unbalanced_braces("{a} \\{ b") == []
    assert unbalanced_braces("} {") == [0, 2]
