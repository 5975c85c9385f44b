"""Syntax rules that keep documents parseable by the MDX renderer."""

from __future__ import annotations

import re
from typing import List

from ..markup import LINK_PATTERN, mask_inline_code, unbalanced_braces
from ..models import ERROR, WARNING, ValidationIssue
from .base import DocumentContext

_HEADING_DIGIT_PATTERN = re.compile(r"^ {0,3}#+[ \t]+\d")
_DOCTYPE_PATTERN = re.compile(r"<!DOCTYPE", re.IGNORECASE)
_NUMERIC_EXPRESSION_PATTERN = re.compile(r"(?<!\\)\{(?!/\*)[^{}]*\d[^{}]*\}")


class SyntaxRules:
    """Line level checks on headings, expressions, links and frontmatter."""

    name = "syntax"

    def check(self, document: DocumentContext) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        if document.frontmatter is not None and ("{{" in document.frontmatter or "}}" in document.frontmatter):
            issues.append(
                document.issue(
                    ERROR,
                    "Template placeholder in frontmatter",
                    "syntax.frontmatter-template",
                    line=1,
                )
            )

        for line_number, line in document.prose_lines():
            masked = mask_inline_code(line)
            if _DOCTYPE_PATTERN.search(masked):
                issues.append(document.issue(ERROR, "Doctype declaration", "syntax.doctype", line=line_number))
            if _HEADING_DIGIT_PATTERN.match(masked):
                issues.append(
                    document.issue(
                        ERROR,
                        f'Heading starts with number: "{line.strip()}"',
                        "syntax.heading-digit",
                        line=line_number,
                    )
                )
            if unbalanced_braces(masked):
                issues.append(
                    document.issue(
                        ERROR,
                        f'Unbalanced expression delimiters: "{line.strip()}"',
                        "syntax.unbalanced-expression",
                        line=line_number,
                    )
                )
            elif _NUMERIC_EXPRESSION_PATTERN.search(masked):
                issues.append(
                    document.issue(
                        WARNING,
                        f'Potential invalid expression: "{line.strip()}"',
                        "syntax.numeric-expression",
                        line=line_number,
                    )
                )
            issues.extend(self._check_links(document, masked, line_number))
        return issues

    @staticmethod
    def _check_links(document: DocumentContext, line: str, line_number: int) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        for match in LINK_PATTERN.finditer(line):
            is_image, text, target = match.groups()
            if not target.strip():
                issues.append(
                    document.issue(ERROR, f"Empty link target: {match.group(0)}", "syntax.empty-link-target", line=line_number)
                )
            if not is_image and not text.strip():
                issues.append(
                    document.issue(WARNING, f"Empty link text: {match.group(0)}", "syntax.empty-link-text", line=line_number)
                )
        return issues


__all__ = ["SyntaxRules"]
