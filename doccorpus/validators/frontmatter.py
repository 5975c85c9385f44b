"""Frontmatter completeness rules."""

from __future__ import annotations

from typing import List, Sequence

import yaml

from ..models import ERROR, WARNING, ValidationIssue
from .base import DocumentContext

REQUIRED_FIELDS = ("title", "description")
RECOMMENDED_FIELDS = ("category", "tags", "lastUpdated")


class FrontmatterRules:
    """Checks that every document carries a usable metadata block."""

    name = "frontmatter"

    def __init__(
        self,
        *,
        required: Sequence[str] = REQUIRED_FIELDS,
        recommended: Sequence[str] = RECOMMENDED_FIELDS,
    ) -> None:
        self._required = tuple(required)
        self._recommended = tuple(recommended)

    def check(self, document: DocumentContext) -> List[ValidationIssue]:
        if document.frontmatter is None:
            return [document.issue(ERROR, "Missing frontmatter", "frontmatter.missing")]
        try:
            data = yaml.safe_load(document.frontmatter)
        except yaml.YAMLError as exc:
            return [document.issue(ERROR, f"Invalid frontmatter: {exc}", "frontmatter.invalid")]
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return [document.issue(ERROR, "Frontmatter must be a mapping", "frontmatter.invalid")]

        issues: List[ValidationIssue] = []
        for field_name in self._required:
            if not _has_value(data.get(field_name)):
                issues.append(
                    document.issue(
                        ERROR,
                        f"Missing required frontmatter field: {field_name}",
                        "frontmatter.required",
                    )
                )
        for field_name in self._recommended:
            if not _has_value(data.get(field_name)):
                issues.append(
                    document.issue(
                        WARNING,
                        f"Missing recommended frontmatter field: {field_name}",
                        "frontmatter.recommended",
                    )
                )
        return issues


def _has_value(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, dict)):
        return bool(value)
    return True


__all__ = ["FrontmatterRules", "RECOMMENDED_FIELDS", "REQUIRED_FIELDS"]
