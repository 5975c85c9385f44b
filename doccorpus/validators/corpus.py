"""Final read-only validation pass over a written corpus."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from ..logging import get_logger
from ..models import ERROR, ValidationIssue
from .base import DocumentContext, Rule, ValidationReport, run_rules
from .frontmatter import FrontmatterRules
from .links import LinkRules
from .navigation import NavigationRules
from .syntax import SyntaxRules

logger = get_logger("validators.corpus")


class CorpusValidator:
    """Runs every rule family over the output directory and navigation file."""

    def __init__(
        self,
        output_dir: Path,
        navigation_file: Optional[Path] = None,
        *,
        extension: str = ".mdx",
        rules: Optional[Sequence[Rule]] = None,
    ) -> None:
        self.output_dir = output_dir
        self.navigation_file = navigation_file
        self.extension = extension if extension.startswith(".") else f".{extension}"
        self.rules: List[Rule] = list(
            rules if rules is not None else (SyntaxRules(), LinkRules(extension=self.extension), FrontmatterRules())
        )

    def validate(self) -> ValidationReport:
        report = ValidationReport()
        if not self.output_dir.is_dir():
            logger.warning("Output directory %s does not exist", self.output_dir)
            report.extend(
                [
                    ValidationIssue(
                        severity=ERROR,
                        location=str(self.output_dir),
                        message="Output directory does not exist",
                        rule="corpus.missing-output",
                    )
                ]
            )
            return report

        for path in sorted(self.output_dir.rglob(f"*{self.extension}")):
            if not path.is_file():
                continue
            relative_path = path.relative_to(self.output_dir).as_posix()
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                report.extend(
                    [
                        ValidationIssue(
                            severity=ERROR,
                            location=relative_path,
                            message=f"Failed to read document: {exc}",
                            rule="corpus.unreadable",
                        )
                    ]
                )
                continue
            document = DocumentContext.from_text(relative_path, text, root=self.output_dir)
            report.extend(run_rules(document, self.rules))
            report.documents_checked += 1

        if self.navigation_file is not None:
            navigation_rules = NavigationRules(extension=self.extension)
            report.extend(navigation_rules.check_file(self.navigation_file, self.output_dir))

        logger.info(
            "Validated %d documents: %d errors, %d warnings",
            report.documents_checked,
            len(report.errors),
            len(report.warnings),
        )
        return report


def check_syntax(relative_path: str, text: str) -> List[ValidationIssue]:
    """Run the syntax rule family over an in-memory document."""
    return SyntaxRules().check(DocumentContext.from_text(relative_path, text))


__all__ = ["CorpusValidator", "check_syntax"]
