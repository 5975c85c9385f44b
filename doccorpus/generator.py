"""Turns classified project files into corpus documents."""

from __future__ import annotations

import re
import shutil
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path, PurePosixPath
from typing import Collection, Dict, Iterator, List, Optional, Sequence, Tuple

import yaml

from .config import OutputConfig
from .constants import COMPREHENSIVE, INDEX_PAGE, PAGE_EXCLUDED, SOURCE_PREFERENCES, document_type_title
from .extractor import extract_description
from .logging import get_logger
from .models import ERROR, Frontmatter, GeneratedDocument, SourceFile, SourceProject, ValidationIssue
from .sanitizer import MarkupSanitizer, clean_preamble, has_template_syntax
from .synthetic import DocumentLink, SyntheticTemplates, TemplateContext
from .validators import check_syntax

ATTRIBUTION_TEMPLATE = (
    "*This content was automatically extracted from {project} (`{source}`). "
    "For the most up-to-date information, refer to the source project.*"
)

# Only prose files become standalone pages; config-like files stay sources.
_PAGE_SUFFIXES = {".md", ".mdx", ".txt", ".rst"}
_SLUG_PATTERN = re.compile(r"[^a-z0-9_-]+")

logger = get_logger("generator")


@dataclass
class GenerationResult:
    """Documents produced for one project plus any rejections."""

    documents: List[GeneratedDocument] = field(default_factory=list)
    issues: List[ValidationIssue] = field(default_factory=list)
    rejected: int = 0


def page_name(relative_path: str, taken: Collection[str] = ()) -> str:
    """Return the output page name for a per-file document.

    Directory parts and the file stem are joined with ``-`` and slugged.
    Agent context files are published as ``ai-context``. Names already in
    ``taken`` and the index page get a numeric suffix.
    """
    path = PurePosixPath(relative_path)
    stem = path.stem.lower()
    if "claude" in stem:
        stem = "ai-context"
    parts = [part.lower() for part in path.parts[:-1]] + [stem]
    base = _SLUG_PATTERN.sub("-", "-".join(parts)).strip("-") or "page"
    name = base
    counter = 2
    while name in taken or name == INDEX_PAGE:
        name = f"{base}-{counter}"
        counter += 1
    return name


class DocumentGenerator:
    """Builds one document per declared type, sourced or synthesized.

    Comprehensive projects additionally get one page per remaining
    documentation file and an ``index`` page linking everything.

    ``today`` pins the ``lastUpdated`` value so repeated runs are
    byte-identical. With ``dry_run`` every step runs except writing.
    """

    def __init__(
        self,
        output: OutputConfig,
        *,
        sanitizer: Optional[MarkupSanitizer] = None,
        templates: Optional[SyntheticTemplates] = None,
        today: Optional[str] = None,
        dry_run: bool = False,
    ) -> None:
        self.output = output
        self.sanitizer = sanitizer or MarkupSanitizer()
        self.templates = templates or SyntheticTemplates()
        self.today = today or date.today().isoformat()
        self.dry_run = dry_run

    @property
    def extension(self) -> str:
        ext = self.output.extension
        return ext if ext.startswith(".") else f".{ext}"

    def generate(self, project: SourceProject, files: Sequence[SourceFile]) -> GenerationResult:
        result = GenerationResult()
        if self.output.clean_build and not self.dry_run:
            self._clean_project_dir(project)

        # Keyed by page name; declared types use their own name as page.
        generated: Dict[str, GeneratedDocument] = {}
        declared = list(project.document_types)
        comprehensive = project.scan_strategy == COMPREHENSIVE
        for doc_type in declared:
            if doc_type == "introduction":
                continue
            self._generate_declared(project, doc_type, files, generated, result)

        if comprehensive:
            for name, source in self.select_pages(files, generated.values(), reserved=declared):
                document = self._emit(project, source.classification, name, source, result, title=source.title)
                if document is not None:
                    generated[name] = document

        if "introduction" in declared:
            self._generate_declared(project, "introduction", files, generated, result)

        if comprehensive:
            self._generate_index(project, files, generated, result)

        ordered = [generated[doc_type] for doc_type in declared if doc_type in generated]
        ordered.extend(document for name, document in generated.items() if name not in declared)
        result.documents = ordered
        return result

    def select_source(self, doc_type: str, files: Sequence[SourceFile]) -> Optional[SourceFile]:
        """Return the best source file for ``doc_type``.

        Candidates are ranked by classification preference, then by path
        depth (shallower first), then by relative path.
        """
        preferences = SOURCE_PREFERENCES.get(doc_type)
        if not preferences:
            return None
        candidates = [file for file in files if file.classification in preferences and file.body.strip()]
        if not candidates:
            return None
        candidates.sort(
            key=lambda file: (preferences.index(file.classification), file.depth, file.relative_path)
        )
        return candidates[0]

    def select_pages(
        self,
        files: Sequence[SourceFile],
        documents: Collection[GeneratedDocument],
        *,
        reserved: Sequence[str] = (),
    ) -> Iterator[Tuple[str, SourceFile]]:
        """Yield ``(page name, file)`` for files that deserve their own page.

        Files already used as a declared document's source, files with an
        empty body and non-prose classifications are skipped.
        """
        used = {document.source_file for document in documents if document.source_file}
        taken = set(reserved) | {document.page_name for document in documents}
        for file in sorted(files, key=lambda item: item.relative_path):
            if file.relative_path in used or file.classification in PAGE_EXCLUDED:
                continue
            if PurePosixPath(file.relative_path).suffix.lower() not in _PAGE_SUFFIXES:
                continue
            if not file.body.strip():
                continue
            name = page_name(file.relative_path, taken)
            taken.add(name)
            yield name, file

    def build_frontmatter(
        self,
        project: SourceProject,
        doc_type: str,
        source: Optional[SourceFile],
        body: str,
        *,
        title: Optional[str] = None,
    ) -> Frontmatter:
        preamble = clean_preamble(source.preamble) if source is not None else {}
        type_title = title or document_type_title(doc_type)

        title = _text(preamble.get("title")) or f"{project.display_name} - {type_title}"

        description = _text(preamble.get("description"))
        if not description and source is not None:
            description = extract_description(body)
        if not description or has_template_syntax(description):
            description = f"{type_title} documentation for {project.display_name}"

        tags = preamble.get("tags")
        if isinstance(tags, str):
            tags = [tag.strip() for tag in tags.split(",") if tag.strip()]
        if not isinstance(tags, list) or not tags:
            tags = [doc_type, project.category]

        return Frontmatter(
            title=title,
            description=description,
            category=project.category,
            project=project.id,
            last_updated=self.today,
            source_file=source.relative_path if source is not None else None,
            tags=[str(tag) for tag in tags],
        )

    def render(self, frontmatter: Frontmatter, body: str) -> str:
        block = yaml.safe_dump(
            frontmatter.to_mapping(),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
            width=1000,
        )
        return f"---\n{block}---\n\n{body.rstrip()}\n"

    def _generate_declared(
        self,
        project: SourceProject,
        doc_type: str,
        files: Sequence[SourceFile],
        generated: Dict[str, GeneratedDocument],
        result: GenerationResult,
    ) -> None:
        source = self.select_source(doc_type, files)
        if source is None:
            body = self._synthesize(project, doc_type, files, generated)
            document = self._emit(project, doc_type, doc_type, None, result, body=body)
        else:
            document = self._emit(project, doc_type, doc_type, source, result)
        if document is not None:
            generated[doc_type] = document

    def _generate_index(
        self,
        project: SourceProject,
        files: Sequence[SourceFile],
        generated: Dict[str, GeneratedDocument],
        result: GenerationResult,
    ) -> None:
        body = self._synthesize(project, INDEX_PAGE, files, generated)
        document = self._emit(project, INDEX_PAGE, INDEX_PAGE, None, result, body=body)
        if document is not None:
            generated[INDEX_PAGE] = document

    def _synthesize(
        self,
        project: SourceProject,
        doc_type: str,
        files: Sequence[SourceFile],
        generated: Dict[str, GeneratedDocument],
    ) -> str:
        context = TemplateContext(
            project=project,
            doc_type=doc_type,
            last_updated=self.today,
            readme=self.select_source("readme", files),
            documents=[
                DocumentLink(title=document.frontmatter.title, link=document.page_name)
                for document in generated.values()
            ],
            fragments=[fragment for file in files for fragment in file.fragments],
            files_processed=len(files),
        )
        logger.debug("Synthesizing %s for %s", doc_type, project.id)
        return self.sanitizer.sanitize(self.templates.render(doc_type, context))

    def _emit(
        self,
        project: SourceProject,
        doc_type: str,
        name: str,
        source: Optional[SourceFile],
        result: GenerationResult,
        *,
        body: Optional[str] = None,
        title: Optional[str] = None,
    ) -> Optional[GeneratedDocument]:
        """Render, pre-check and write one page; ``None`` when rejected."""
        output_path = f"{project.id}/{name}{self.extension}"
        if source is not None:
            body = self.sanitizer.sanitize(source.body)
            if self.output.attribution:
                footer = ATTRIBUTION_TEMPLATE.format(project=project.display_name, source=source.relative_path)
                body = f"{body}\n\n---\n\n{footer}"
            logger.debug("Using %s as %s for %s", source.relative_path, name, project.id)
        body = body or ""

        frontmatter = self.build_frontmatter(
            project, doc_type, source, source.body if source else body, title=title
        )
        content = self.render(frontmatter, body)

        syntax_errors = [issue for issue in check_syntax(output_path, content) if issue.severity == ERROR]
        if syntax_errors:
            for issue in syntax_errors:
                logger.error("Pre-check failed: %s", issue)
            result.rejected += 1
            result.issues.append(
                ValidationIssue(
                    severity=ERROR,
                    location=output_path,
                    message=(
                        f"Rejected {doc_type} document with {len(syntax_errors)} syntax error(s); "
                        f"first: {syntax_errors[0].message} at {syntax_errors[0].location}"
                    ),
                    rule="generation.rejected",
                )
            )
            return None

        document = GeneratedDocument(
            project_id=project.id,
            doc_type=doc_type,
            output_path=output_path,
            frontmatter=frontmatter,
            body=body,
            content=content,
            synthetic=source is None,
            source_file=source.relative_path if source is not None else None,
        )
        if not self.dry_run:
            try:
                self._write(document)
            except OSError as exc:
                logger.error("Failed to write %s: %s", output_path, exc)
                result.rejected += 1
                result.issues.append(
                    ValidationIssue(
                        severity=ERROR,
                        location=output_path,
                        message=f"Failed to write document: {exc}",
                        rule="generation.write-failed",
                    )
                )
                return None
        return document

    def _write(self, document: GeneratedDocument) -> Path:
        target = self.output.dir / document.output_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(document.content, encoding="utf-8")
        logger.info("Wrote %s", target)
        return target

    def _clean_project_dir(self, project: SourceProject) -> None:
        project_dir = self.output.dir / project.id
        if project_dir.is_dir():
            logger.debug("Removing previous output %s", project_dir)
            shutil.rmtree(project_dir)


def _text(value: object) -> str:
    if isinstance(value, str):
        return value.strip()
    if value is None:
        return ""
    return str(value).strip()


__all__ = ["ATTRIBUTION_TEMPLATE", "DocumentGenerator", "GenerationResult", "page_name"]
