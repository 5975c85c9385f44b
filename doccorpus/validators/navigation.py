"""Navigation file integrity rules."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List

from ..models import ERROR, WARNING, ValidationIssue


class NavigationRules:
    """Checks that every navigation page maps to a written document."""

    name = "navigation"

    def __init__(self, *, extension: str = ".mdx") -> None:
        self._extension = extension if extension.startswith(".") else f".{extension}"

    def check_file(self, navigation_file: Path, docs_dir: Path) -> List[ValidationIssue]:
        location = navigation_file.name
        try:
            payload = json.loads(navigation_file.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            return [
                ValidationIssue(
                    severity=WARNING,
                    location=location,
                    message=f"Could not validate navigation: {exc}",
                    rule="navigation.unreadable",
                )
            ]
        groups = payload.get("navigation") if isinstance(payload, dict) else None
        if not isinstance(groups, list):
            return [
                ValidationIssue(
                    severity=ERROR,
                    location=location,
                    message="Invalid navigation structure: expected a 'navigation' list",
                    rule="navigation.invalid",
                )
            ]
        issues: List[ValidationIssue] = []
        for group in groups:
            self._check_group(group, docs_dir, location, issues)
        return issues

    def _check_group(self, group: Any, docs_dir: Path, location: str, issues: List[ValidationIssue]) -> None:
        if not isinstance(group, dict) or not group.get("group") or not isinstance(group.get("pages"), list):
            issues.append(
                ValidationIssue(
                    severity=WARNING,
                    location=location,
                    message=f"Navigation group missing required fields: {json.dumps(group, sort_keys=True)}",
                    rule="navigation.group-fields",
                )
            )
            return
        for page in group["pages"]:
            if isinstance(page, dict):
                self._check_group(page, docs_dir, location, issues)
                continue
            page_ref = str(page)
            if not (docs_dir / f"{page_ref}{self._extension}").is_file():
                issues.append(
                    ValidationIssue(
                        severity=ERROR,
                        location=location,
                        message=f"Navigation references missing file: {page_ref}{self._extension}",
                        rule="navigation.missing-page",
                    )
                )


__all__ = ["NavigationRules"]
