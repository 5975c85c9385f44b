"""Core validation data structures shared by every rule family."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol

from ..markup import iter_prose_lines, split_frontmatter
from ..models import ERROR, WARNING, Severity, ValidationIssue


@dataclass
class DocumentContext:
    """A corpus document as seen by the validation rules.

    ``root`` is the corpus output directory; it is ``None`` when a document
    is checked in memory before it has been written.
    """

    relative_path: str
    text: str
    frontmatter: Optional[str]
    body: str
    body_line_offset: int
    root: Optional[Path] = None

    @classmethod
    def from_text(cls, relative_path: str, text: str, *, root: Optional[Path] = None) -> "DocumentContext":
        split = split_frontmatter(text)
        return cls(
            relative_path=relative_path,
            text=text,
            frontmatter=split.block,
            body=split.body,
            body_line_offset=split.body_line_offset,
            root=root,
        )

    @property
    def path(self) -> Optional[Path]:
        if self.root is None:
            return None
        return self.root / self.relative_path

    def prose_lines(self) -> Iterable[tuple[int, str]]:
        """Yield ``(line_number, line)`` for body lines outside code fences."""
        lines = self.body.split("\n")
        for index, line in iter_prose_lines(lines):
            yield self.body_line_offset + index + 1, line

    def issue(self, severity: Severity, message: str, rule: str, *, line: Optional[int] = None) -> ValidationIssue:
        location = self.relative_path if line is None else f"{self.relative_path}:{line}"
        return ValidationIssue(severity=severity, location=location, message=message, rule=rule)


class Rule(Protocol):
    """Protocol implemented by per-document rule families."""

    name: str

    def check(self, document: DocumentContext) -> List[ValidationIssue]:
        """Run the rule family and return any issues."""


@dataclass
class ValidationReport:
    """Collected findings of one validation pass."""

    issues: List[ValidationIssue] = field(default_factory=list)
    documents_checked: int = 0

    @property
    def errors(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == WARNING]

    @property
    def passed(self) -> bool:
        return not self.errors

    def extend(self, issues: Iterable[ValidationIssue]) -> None:
        self.issues.extend(issues)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "documentsChecked": self.documents_checked,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
        }

    def render(self) -> str:
        """Human readable report, errors first."""
        lines = ["Validation report", "================="]
        errors = self.errors
        warnings = self.warnings
        if not errors and not warnings:
            lines.append("All validations passed.")
            return "\n".join(lines)
        if errors:
            lines.append("")
            lines.append(f"Errors ({len(errors)}):")
            lines.extend(f"  - {issue}" for issue in errors)
        if warnings:
            lines.append("")
            lines.append(f"Warnings ({len(warnings)}):")
            lines.extend(f"  - {issue}" for issue in warnings)
        lines.append("")
        lines.append(f"Summary: {len(errors)} errors, {len(warnings)} warnings")
        return "\n".join(lines)


def run_rules(document: DocumentContext, rules: Iterable[Rule]) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    for rule in rules:
        issues.extend(rule.check(document))
    return issues


__all__ = ["DocumentContext", "Rule", "ValidationReport", "run_rules"]
