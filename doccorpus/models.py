"""Core data models shared across doccorpus components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple

Severity = Literal["error", "warning"]

ERROR: Severity = "error"
WARNING: Severity = "warning"


@dataclass
class SourceProject:
    """A documentation source resolved from a descriptor or legacy scan."""

    id: str
    display_name: str
    root: Path
    category: str
    priority: int
    document_types: List[str]
    include: List[str] = field(default_factory=list)
    skip: List[str] = field(default_factory=list)
    description: str = ""
    scan_strategy: str = "selective"
    version: str = "1.0.0"
    dependencies: Dict[str, str] = field(default_factory=dict)


@dataclass
class SourceFile:
    """A single project file after reading, classification and extraction."""

    path: Path
    relative_path: str
    content: str
    size: int
    modified: float
    classification: str
    preamble: Dict[str, Any] = field(default_factory=dict)
    fragments: List[str] = field(default_factory=list)
    body: str = ""
    title: str = ""

    @property
    def depth(self) -> int:
        return self.relative_path.count("/")


@dataclass
class Frontmatter:
    """Metadata block written at the top of every generated document."""

    title: str
    description: str
    category: str
    project: str
    last_updated: str
    source_file: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    def to_mapping(self) -> Dict[str, Any]:
        """Return the serialisable mapping in its fixed key order."""
        mapping: Dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "project": self.project,
            "lastUpdated": self.last_updated,
        }
        if self.source_file:
            mapping["sourceFile"] = self.source_file
        if self.tags:
            mapping["tags"] = list(self.tags)
        return mapping


@dataclass
class GeneratedDocument:
    """A rendered corpus document for one project and document type."""

    project_id: str
    doc_type: str
    output_path: str
    frontmatter: Frontmatter
    body: str
    content: str
    synthetic: bool = False
    source_file: Optional[str] = None

    @property
    def page_ref(self) -> str:
        """Navigation reference: output path without its extension."""
        stem, _, _ = self.output_path.rpartition(".")
        return stem or self.output_path

    @property
    def page_name(self) -> str:
        """Page reference relative to the project directory."""
        return self.page_ref.rpartition("/")[2]


@dataclass(frozen=True)
class NavigationEntry:
    """A single page reference inside a project's navigation group."""

    title: str
    path: str
    category: str


@dataclass
class NavigationGroup:
    """Ordered table of contents for one project."""

    project_id: str
    group: str
    category: str
    entries: List[NavigationEntry] = field(default_factory=list)

    @property
    def pages(self) -> List[str]:
        return [entry.path for entry in self.entries]

    def to_dict(self) -> Dict[str, Any]:
        return {"group": self.group, "pages": self.pages}


@dataclass(frozen=True)
class ValidationIssue:
    """A single finding produced by discovery, generation or validation."""

    severity: Severity
    location: str
    message: str
    rule: str

    @property
    def is_error(self) -> bool:
        return self.severity == ERROR

    def to_dict(self) -> Dict[str, str]:
        return {
            "severity": self.severity,
            "location": self.location,
            "message": self.message,
            "rule": self.rule,
        }

    def __str__(self) -> str:
        return f"{self.location} - {self.message} [{self.rule}]"


@dataclass(frozen=True)
class ProjectResult:
    """Immutable outcome of processing one project, merged after all projects finish."""

    project: SourceProject
    documents: Tuple[GeneratedDocument, ...]
    navigation: NavigationGroup
    issues: Tuple[ValidationIssue, ...] = ()
    files_processed: int = 0
    files_skipped: int = 0
    documents_rejected: int = 0

    @property
    def documents_synthesized(self) -> int:
        return sum(1 for document in self.documents if document.synthetic)


@dataclass
class CorpusSummary:
    """Run-wide statistics written next to the navigation file."""

    generated_at: str
    total_projects: int
    categories: Dict[str, int]
    document_types: Dict[str, int]
    projects: List[Dict[str, Any]]
    statistics: Dict[str, int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generatedAt": self.generated_at,
            "totalProjects": self.total_projects,
            "categories": dict(self.categories),
            "documentTypes": dict(self.document_types),
            "projects": [dict(project) for project in self.projects],
            "statistics": dict(self.statistics),
        }
