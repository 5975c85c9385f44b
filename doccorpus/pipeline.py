"""Pipeline orchestration: discover, extract, generate, navigate, validate."""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import UTC, datetime
from functools import reduce
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .classifier import Classifier
from .config import DocCorpusConfig
from .discovery import ProjectDiscovery
from .extractor import load_source_file
from .generator import DocumentGenerator
from .logging import get_logger, log_exception
from .models import (
    ERROR,
    WARNING,
    CorpusSummary,
    GeneratedDocument,
    NavigationGroup,
    ProjectResult,
    SourceFile,
    SourceProject,
    ValidationIssue,
)
from .navigation import NavigationBuilder
from .sanitizer import MarkupSanitizer
from .synthetic import SyntheticTemplates
from .validators import CorpusValidator, ValidationReport


@dataclass(frozen=True)
class MergedCorpus:
    """Accumulator folded over per-project results in configuration order."""

    documents: Tuple[GeneratedDocument, ...] = ()
    groups: Tuple[NavigationGroup, ...] = ()
    issues: Tuple[ValidationIssue, ...] = ()
    files_processed: int = 0
    files_skipped: int = 0
    documents_rejected: int = 0


def _fold(merged: MergedCorpus, result: ProjectResult) -> MergedCorpus:
    return MergedCorpus(
        documents=merged.documents + result.documents,
        groups=merged.groups + (result.navigation,),
        issues=merged.issues + result.issues,
        files_processed=merged.files_processed + result.files_processed,
        files_skipped=merged.files_skipped + result.files_skipped,
        documents_rejected=merged.documents_rejected + result.documents_rejected,
    )


def merge_results(results: Sequence[ProjectResult], issues: Sequence[ValidationIssue] = ()) -> MergedCorpus:
    """Fold project results into one corpus, seeded with run-level issues."""
    return reduce(_fold, results, MergedCorpus(issues=tuple(issues)))


def build_summary(
    results: Sequence[ProjectResult], merged: MergedCorpus, *, generated_at: str
) -> CorpusSummary:
    categories: Dict[str, int] = {}
    document_types: Dict[str, int] = {}
    projects: List[Dict[str, Any]] = []
    for result in results:
        project = result.project
        categories[project.category] = categories.get(project.category, 0) + 1
        for document in result.documents:
            document_types[document.doc_type] = document_types.get(document.doc_type, 0) + 1
        projects.append(
            {
                "id": project.id,
                "name": project.display_name,
                "category": project.category,
                "priority": project.priority,
                "description": project.description,
                "version": project.version,
                "scanStrategy": project.scan_strategy,
                "filesProcessed": result.files_processed,
                "filesSkipped": result.files_skipped,
                "documents": [document.page_name for document in result.documents],
                "documentsSynthesized": result.documents_synthesized,
                "documentsRejected": result.documents_rejected,
            }
        )
    statistics = {
        "totalFiles": merged.files_processed,
        "filesSkipped": merged.files_skipped,
        "documentsGenerated": len(merged.documents),
        "documentsSynthesized": sum(1 for document in merged.documents if document.synthetic),
        "documentsRejected": merged.documents_rejected,
        "errors": sum(1 for issue in merged.issues if issue.severity == ERROR),
        "warnings": sum(1 for issue in merged.issues if issue.severity == WARNING),
    }
    return CorpusSummary(
        generated_at=generated_at,
        total_projects=len(results),
        categories=categories,
        document_types=document_types,
        projects=projects,
        statistics=statistics,
    )


@dataclass
class PipelineOutcome:
    """Everything a build produced, written or not."""

    results: List[ProjectResult]
    navigation: Dict[str, Any]
    summary: CorpusSummary
    issues: List[ValidationIssue] = field(default_factory=list)
    report: Optional[ValidationReport] = None
    dry_run: bool = False

    @property
    def documents(self) -> List[GeneratedDocument]:
        return [document for result in self.results for document in result.documents]

    @property
    def all_issues(self) -> List[ValidationIssue]:
        issues = list(self.issues)
        if self.report is not None:
            issues.extend(self.report.issues)
        return issues

    @property
    def passed(self) -> bool:
        return not any(issue.severity == ERROR for issue in self.all_issues)


class Pipeline:
    """Coordinates a full corpus build for one configuration."""

    def __init__(
        self,
        config: DocCorpusConfig,
        *,
        classifier: Classifier | None = None,
        discovery: ProjectDiscovery | None = None,
        generator: DocumentGenerator | None = None,
        navigation: NavigationBuilder | None = None,
        today: Optional[str] = None,
        generated_at: Optional[str] = None,
        dry_run: bool = False,
    ) -> None:
        self.config = config
        self.dry_run = dry_run
        self.classifier = classifier or Classifier()
        self.discovery = discovery or ProjectDiscovery(config.extraction, config.scan.exclude_dirs)
        self.generator = generator or DocumentGenerator(
            config.output,
            sanitizer=MarkupSanitizer(),
            templates=SyntheticTemplates(),
            today=today,
            dry_run=dry_run,
        )
        self.navigation = navigation or NavigationBuilder(config.navigation_groups)
        self.generated_at = generated_at
        self.logger = get_logger("pipeline")

    def run(self) -> PipelineOutcome:
        """Build the corpus, then validate what was written."""
        self.logger.info("Starting build%s", " (dry-run)" if self.dry_run else "")
        discovered = self.discovery.discover(self.config)
        if not discovered.projects:
            self.logger.warning("No projects discovered; the corpus will be empty")

        results = self._process_all(discovered.projects)
        merged = merge_results(results, discovered.issues)
        tree = self.navigation.build_tree(merged.groups)
        generated_at = self.generated_at or datetime.now(UTC).isoformat()
        summary = build_summary(results, merged, generated_at=generated_at)

        outcome = PipelineOutcome(
            results=results,
            navigation=tree,
            summary=summary,
            issues=list(merged.issues),
            dry_run=self.dry_run,
        )
        if self.dry_run:
            self.logger.info(
                "Dry-run complete: %d documents would be written for %d projects",
                len(merged.documents),
                len(results),
            )
            return outcome

        output = self.config.output
        output.dir.mkdir(parents=True, exist_ok=True)
        self.navigation.save(tree, output.navigation_file)
        _write_json(output.summary_file, summary.to_dict())
        self.logger.info("Wrote summary to %s", output.summary_file)

        outcome.report = CorpusValidator(
            output.dir,
            output.navigation_file,
            extension=output.extension,
        ).validate()
        if output.report_file is not None:
            _write_json(output.report_file, outcome.report.to_dict())
            self.logger.info("Wrote validation report to %s", output.report_file)

        self.logger.info(
            "Build complete: %d documents for %d projects, %d errors",
            len(merged.documents),
            len(results),
            sum(1 for issue in outcome.all_issues if issue.severity == ERROR),
        )
        return outcome

    def process_project(self, project: SourceProject) -> ProjectResult:
        """Extract, classify and generate one project; never raises."""
        self.logger.info("Processing project %s", project.id)
        extraction = self.config.extraction
        files: List[SourceFile] = []
        skipped = 0
        for path in self.discovery.iter_project_files(project):
            source = load_source_file(
                path,
                project.root,
                classifier=self.classifier,
                max_file_size=extraction.max_file_size,
                min_comment_length=extraction.min_comment_length,
            )
            if source is None:
                skipped += 1
                continue
            files.append(source)
        self.logger.debug("Project %s: %d files read, %d skipped", project.id, len(files), skipped)

        generation = self.generator.generate(project, files)
        group = self.navigation.build_group(project, generation.documents)
        return ProjectResult(
            project=project,
            documents=tuple(generation.documents),
            navigation=group,
            issues=tuple(generation.issues),
            files_processed=len(files),
            files_skipped=skipped,
            documents_rejected=generation.rejected,
        )

    def _process_all(self, projects: Sequence[SourceProject]) -> List[ProjectResult]:
        workers = max(1, self.config.workers)
        if workers == 1 or len(projects) <= 1:
            return [self._process_safely(project) for project in projects]
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() yields in submission order, which keeps configuration order.
            return list(executor.map(self._process_safely, projects))

    def _process_safely(self, project: SourceProject) -> ProjectResult:
        try:
            return self.process_project(project)
        except Exception as exc:  # pragma: no cover - defensive guard
            log_exception(self.logger, f"Project {project.id} failed", exc)
            return ProjectResult(
                project=project,
                documents=(),
                navigation=NavigationGroup(project_id=project.id, group=project.display_name, category=project.category),
                issues=(
                    ValidationIssue(
                        severity=ERROR,
                        location=project.id,
                        message=f"Project processing failed: {exc}",
                        rule="pipeline.project-failed",
                    ),
                ),
            )


def validate_corpus(config: DocCorpusConfig, *, docs_dir: Optional[Path] = None) -> ValidationReport:
    """Run only the final validation pass over an existing corpus."""
    output = config.output
    output_dir = docs_dir or output.dir
    navigation_file = output.navigation_file if docs_dir is None else docs_dir.parent / output.navigation_file.name
    return CorpusValidator(output_dir, navigation_file, extension=output.extension).validate()


def _write_json(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


__all__ = [
    "MergedCorpus",
    "Pipeline",
    "PipelineOutcome",
    "build_summary",
    "merge_results",
    "validate_corpus",
]
