"""Lossy rewrite of copied documentation into render-safe MDX."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Tuple

from .markup import iter_prose_lines, mask_inline_code, split_segments, unbalanced_braces

_DOCTYPE_LINE_PATTERN = re.compile(r"^[ \t]*<!DOCTYPE[^>\n]*>[ \t]*(?:\n|\Z)", re.IGNORECASE | re.MULTILINE)
_DOCTYPE_PATTERN = re.compile(r"<!DOCTYPE[^>\n]*>", re.IGNORECASE)
_HTML_COMMENT_PATTERN = re.compile(r"<!--(.*?)-->", re.DOTALL)
_VOID_TAG_PATTERN = re.compile(
    r"<(area|base|br|col|embed|hr|img|input|link|meta|source|track|wbr)\b([^<>]*?)\s*/?>",
    re.IGNORECASE,
)
_OPEN_TAG_PATTERN = re.compile(r"<([A-Za-z][\w.-]*)(?:\s[^<>]*)?>")
_CLOSE_TAG_PATTERN = re.compile(r"</([A-Za-z][\w.-]*)\s*>")
_TEMPLATE_PATTERN = re.compile(r"\{\{\s*([^{}\n]*?)\s*\}\}")
_DIGIT_EXPRESSION_PATTERN = re.compile(r"(?<!\\)\{([^{}\n]*\d[^{}\n]*?)(?<!\\)\}")
_HEADING_PATTERN = re.compile(r"^( {0,3})(#+)[ \t]+(.*)$")
_ENUMERATION_PATTERN = re.compile(r"^\d+(?:\.\d+)*[.):]?\s+(?=[^\W\d_])")
_CALLOUT_PATTERN = re.compile(r"^ {0,3}>[ \t]*\*\*(Note|Warning|Info):\*\*[ \t]*(.*)$")
_QUOTE_PATTERN = re.compile(r"^ {0,3}>[ \t]?(.*)$")
_NON_NEWLINE_PATTERN = re.compile(r"[^\n]")

_VOID_TAGS = {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}

Segment = Tuple[bool, str]


def has_template_syntax(value: str) -> bool:
    return "{{" in value or "}}" in value


@dataclass
class MarkupSanitizer:
    """Rewrites body text so it is safe for the MDX renderer.

    The transform is intentionally lossy: code fences and inline code are kept
    verbatim, everything else is rewritten until expressions, tags and
    headings are acceptable to the renderer.
    """

    neutralize_numeric_expressions: bool = True
    convert_callouts: bool = True

    def sanitize(self, text: str) -> str:
        if not text:
            return ""
        normalized = text.replace("\r\n", "\n").replace("\r", "\n")
        segments = [
            (is_code, segment if is_code else self._rewrite_markup(segment))
            for is_code, segment in split_segments(normalized)
        ]
        # Tags are paired across the whole document so a wrapper element may
        # enclose a fenced block.
        segments = self._escape_unmatched_tags(segments)
        chunks = [segment if is_code else self._rewrite_lines(segment) for is_code, segment in segments]
        return self._normalise_whitespace("".join(chunks))

    def _rewrite_markup(self, segment: str) -> str:
        segment = self._replace_outside_code(segment, _DOCTYPE_LINE_PATTERN, lambda match: "")
        segment = self._replace_outside_code(segment, _DOCTYPE_PATTERN, lambda match: "")
        segment = self._replace_outside_code(segment, _HTML_COMMENT_PATTERN, self._convert_comment)
        segment = self._replace_outside_code(segment, _VOID_TAG_PATTERN, self._self_close)
        if self.convert_callouts:
            segment = self._convert_callouts(segment)
        return segment

    def _rewrite_lines(self, segment: str) -> str:
        return "\n".join(self._sanitize_line(line) for line in segment.split("\n"))

    def _sanitize_line(self, line: str) -> str:
        line = self._normalise_heading(line)
        line = self._replace_outside_code(line, _TEMPLATE_PATTERN, lambda m: f"`{{{{ {m.group(1)} }}}}`")
        if self.neutralize_numeric_expressions:
            line = self._replace_outside_code(line, _DIGIT_EXPRESSION_PATTERN, self._comment_expression)
        positions = unbalanced_braces(mask_inline_code(line))
        for position in reversed(positions):
            line = f"{line[:position]}\\{line[position:]}"
        return line

    @staticmethod
    def _replace_outside_code(text: str, pattern: re.Pattern[str], replace: Callable[[re.Match[str]], str]) -> str:
        """Apply ``pattern`` only where it matches with inline code masked."""
        masked = mask_inline_code(text)
        pieces: List[str] = []
        cursor = 0
        for match in pattern.finditer(masked):
            start, end = match.span()
            original = pattern.match(text, start, end)
            if original is None or original.end() != end:
                continue
            pieces.append(text[cursor:start])
            pieces.append(replace(original))
            cursor = end
        if not pieces:
            return text
        pieces.append(text[cursor:])
        return "".join(pieces)

    @staticmethod
    def _comment_expression(match: re.Match[str]) -> str:
        inner = match.group(1).strip()
        if inner.startswith("/*") and inner.endswith("*/"):
            return match.group(0)
        inner = inner.replace("*/", "* /")
        return f"{{/* {inner} */}}"

    @staticmethod
    def _convert_comment(match: re.Match[str]) -> str:
        inner = match.group(1).strip()
        if "\n" in inner or not inner:
            return ""
        inner = inner.replace("*/", "* /").replace("{", "").replace("}", "")
        return f"{{/* {inner} */}}"

    @staticmethod
    def _self_close(match: re.Match[str]) -> str:
        tag = match.group(1).lower()
        attributes = match.group(2).rstrip()
        if attributes:
            return f"<{tag}{attributes} />"
        return f"<{tag}/>"

    @staticmethod
    def _convert_callouts(segment: str) -> str:
        """Turn ``> **Note:** ...`` blockquotes into ``<Note>`` components."""
        lines = segment.split("\n")
        converted: List[str] = []
        index = 0
        while index < len(lines):
            match = _CALLOUT_PATTERN.match(lines[index])
            if not match:
                converted.append(lines[index])
                index += 1
                continue
            kind, first = match.groups()
            body = [first] if first.strip() else []
            index += 1
            while index < len(lines) and not _CALLOUT_PATTERN.match(lines[index]):
                quoted = _QUOTE_PATTERN.match(lines[index])
                if quoted is None:
                    break
                body.append(quoted.group(1))
                index += 1
            converted.append(f"<{kind}>")
            converted.extend(body)
            converted.append(f"</{kind}>")
        return "\n".join(converted)

    @staticmethod
    def _escape_unmatched_tags(segments: List[Segment]) -> List[Segment]:
        masked = "".join(
            _NON_NEWLINE_PATTERN.sub(" ", segment) if is_code else mask_inline_code(segment)
            for is_code, segment in segments
        )
        tokens: List[Tuple[int, str, bool]] = []
        for match in _OPEN_TAG_PATTERN.finditer(masked):
            if match.group(0).endswith("/>") or match.group(1).lower() in _VOID_TAGS:
                continue
            tokens.append((match.start(), match.group(1).lower(), True))
        for match in _CLOSE_TAG_PATTERN.finditer(masked):
            tokens.append((match.start(), match.group(1).lower(), False))
        tokens.sort()

        stack: List[Tuple[int, str]] = []
        unmatched: List[int] = []
        for position, name, is_open in tokens:
            if is_open:
                stack.append((position, name))
                continue
            for depth in range(len(stack) - 1, -1, -1):
                if stack[depth][1] == name:
                    unmatched.extend(open_pos for open_pos, _ in stack[depth + 1:])
                    del stack[depth:]
                    break
            else:
                unmatched.append(position)
        unmatched.extend(position for position, _ in stack)
        if not unmatched:
            return segments

        escaped: List[Segment] = []
        offset = 0
        for is_code, segment in segments:
            end = offset + len(segment)
            for position in sorted((p for p in unmatched if offset <= p < end), reverse=True):
                local = position - offset
                segment = f"{segment[:local]}&lt;{segment[local + 1:]}"
            escaped.append((is_code, segment))
            offset = end
        return escaped

    @staticmethod
    def _normalise_heading(line: str) -> str:
        match = _HEADING_PATTERN.match(line)
        if not match:
            return line
        indent, hashes, text = match.groups()
        if not text[:1].isdigit():
            return line
        stripped = _ENUMERATION_PATTERN.sub("", text, count=1)
        if stripped[:1].isdigit():
            stripped = f"Section {stripped}"
        return f"{indent}{hashes} {stripped}"

    @staticmethod
    def _normalise_whitespace(text: str) -> str:
        lines = text.split("\n")
        prose = {index for index, _ in iter_prose_lines(lines)}
        cleaned: List[str] = []
        previous_blank = False
        for index, line in enumerate(lines):
            if index not in prose:
                cleaned.append(line)
                previous_blank = False
                continue
            stripped = line.rstrip()
            if not stripped:
                if previous_blank:
                    continue
                previous_blank = True
                cleaned.append("")
                continue
            cleaned.append(stripped)
            previous_blank = False
        while cleaned and not cleaned[0]:
            cleaned.pop(0)
        while cleaned and not cleaned[-1]:
            cleaned.pop()
        return "\n".join(cleaned)


def clean_preamble(mapping: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop preamble entries that would leak template placeholders into frontmatter."""
    cleaned: Dict[str, Any] = {}
    for key, value in mapping.items():
        if has_template_syntax(str(key)):
            continue
        if isinstance(value, list):
            items = [item for item in value if not has_template_syntax(str(item))]
            if items:
                cleaned[key] = items
            continue
        if isinstance(value, str) and has_template_syntax(value):
            continue
        cleaned[key] = value
    return cleaned


def sanitize(text: str) -> str:
    """Sanitize ``text`` with the default settings."""
    return MarkupSanitizer().sanitize(text)


__all__ = ["MarkupSanitizer", "clean_preamble", "has_template_syntax", "sanitize"]
