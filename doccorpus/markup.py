"""Low-level markdown/MDX scanning helpers shared by the sanitizer and validators."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

FRONTMATTER_PATTERN = re.compile(r"\A---[ \t]*\n(.*?)^---[ \t]*(?:\n|\Z)", re.DOTALL | re.MULTILINE)
_FENCE_PATTERN = re.compile(r"^\s{0,3}(`{3,}|~{3,})")
_INLINE_CODE_PATTERN = re.compile(r"(`+)(?:(?!\1)[^\n])+?\1")
LINK_PATTERN = re.compile(r"(!?)\[([^\]]*)\]\(([^)]*)\)")


@dataclass
class FrontmatterSplit:
    """Result of separating a leading ``---`` block from the rest of a document."""

    block: Optional[str]
    body: str
    body_line_offset: int


def split_frontmatter(text: str) -> FrontmatterSplit:
    """Split ``text`` into its frontmatter block (if any) and body."""
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    match = FRONTMATTER_PATTERN.match(normalized)
    if not match:
        return FrontmatterSplit(block=None, body=normalized, body_line_offset=0)
    consumed = match.group(0)
    offset = consumed.count("\n")
    if not consumed.endswith("\n"):
        offset += 1
    return FrontmatterSplit(block=match.group(1), body=normalized[match.end():], body_line_offset=offset)


def iter_prose_lines(lines: List[str]) -> Iterator[Tuple[int, str]]:
    """Yield ``(index, line)`` for lines outside fenced code blocks."""
    fence: Optional[str] = None
    for index, line in enumerate(lines):
        match = _FENCE_PATTERN.match(line)
        if match:
            marker = match.group(1)
            if fence is None:
                fence = marker[0] * len(marker)
                continue
            if marker[0] == fence[0] and len(marker) >= len(fence):
                fence = None
                continue
        if fence is None:
            yield index, line


def split_segments(text: str) -> List[Tuple[bool, str]]:
    """Split ``text`` into ``(is_code, chunk)`` runs separated by code fences.

    Fence marker lines belong to the code chunk; joining the chunks
    reproduces ``text`` exactly.
    """
    segments: List[Tuple[bool, str]] = []
    current: List[str] = []
    in_code = False
    fence = ""
    for line in text.splitlines(keepends=True):
        match = _FENCE_PATTERN.match(line)
        if match and not in_code:
            if current:
                segments.append((False, "".join(current)))
            current = [line]
            in_code = True
            fence = match.group(1)
            continue
        current.append(line)
        if match and in_code and match.group(1)[0] == fence[0] and len(match.group(1)) >= len(fence):
            segments.append((True, "".join(current)))
            current = []
            in_code = False
    if current:
        segments.append((in_code, "".join(current)))
    return segments


def mask_inline_code(text: str) -> str:
    """Blank out inline code spans while preserving character positions."""
    return _INLINE_CODE_PATTERN.sub(lambda match: " " * len(match.group(0)), text)


def unbalanced_braces(line: str) -> List[int]:
    """Return positions of ``{``/``}`` in ``line`` that have no partner.

    Backslash-escaped braces are ignored. Callers are expected to pass a line
    with inline code already masked.
    """
    stack: List[int] = []
    unmatched: List[int] = []
    for position, char in enumerate(line):
        if char not in "{}":
            continue
        if position > 0 and line[position - 1] == "\\":
            continue
        if char == "{":
            stack.append(position)
        elif stack:
            stack.pop()
        else:
            unmatched.append(position)
    unmatched.extend(stack)
    return sorted(unmatched)


__all__ = [
    "FRONTMATTER_PATTERN",
    "LINK_PATTERN",
    "FrontmatterSplit",
    "iter_prose_lines",
    "mask_inline_code",
    "split_frontmatter",
    "split_segments",
    "unbalanced_braces",
]
