"""Project discovery and file selection."""

from __future__ import annotations

import json
import os
import re
import time
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Set

from .config import DocCorpusConfig, ExtractionConfig, ProjectDescriptor, ScanConfig
from .constants import DOCUMENT_TYPES, SCAN_STRATEGIES
from .extractor import extract_description
from .logging import get_logger
from .models import ERROR, WARNING, SourceProject, ValidationIssue

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

_DOC_SUFFIXES = {".md", ".mdx", ".txt", ".rst"}
_RELEVANT_FILENAMES = {"package.json", "tsconfig.json", "docker-compose.yml", "pyproject.toml"}
_API_SPEC_MARKERS = ("openapi", "swagger", "api")
_INDEX_CODE_SUFFIXES = {".js", ".ts", ".py"}

_DESCRIPTION_SOURCES = ("CLAUDE.md", "README.md")

# Legacy project categorisation, first match wins.
_CATEGORY_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("turborepo", "monorepo"), "main-platform"),
    (("ai", "rag", "embed"), "ai-services"),
    (("web", "site", "marketing"), "websites"),
    (("tool", "util", "helper"), "development-tools"),
    (("doc", "guide"), "documentation"),
    (("api", "service", "backend"), "backend-services"),
    (("crawler", "scraper"), "data-processing"),
)

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")
_PROJECT_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")

RECENT_ACTIVITY_SECONDS = 30 * 24 * 60 * 60
_RECENT_ACTIVITY_CAP = 20

logger = get_logger("discovery")


@dataclass
class SkipRule:
    """Glob pattern matched against every segment of a relative path."""

    pattern: str
    has_slash: bool

    def matches(self, rel_path: str) -> bool:
        if not self.pattern:
            return False
        if self.has_slash:
            return fnmatchcase(rel_path, self.pattern) or rel_path.startswith(f"{self.pattern}/")
        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_skip_rules(patterns: Sequence[str]) -> List[SkipRule]:
    rules: List[SkipRule] = []
    for raw in patterns:
        pattern = raw.strip().strip("/")
        if pattern:
            rules.append(SkipRule(pattern=pattern, has_slash="/" in pattern))
    return rules


def glob_matches(rel_path: str, pattern: str) -> bool:
    """Return True when ``rel_path`` matches an include glob.

    ``**/`` matches zero or more directories; a bare file name matches that
    name at any depth.
    """
    normalized = rel_path.replace("\\", "/")
    pattern = pattern.replace("\\", "/")
    if pattern.startswith("./"):
        pattern = pattern[2:]
    if pattern.endswith("/**"):
        prefix = pattern[:-3]
        return normalized == prefix or normalized.startswith(f"{prefix}/")
    if pattern.endswith("/"):
        return normalized.startswith(pattern)
    if "**/" in pattern:
        if fnmatchcase(normalized, pattern):
            return True
        return fnmatchcase(normalized, pattern.replace("**/", ""))
    if "/" in pattern:
        return fnmatchcase(normalized, pattern)
    if any(ch in pattern for ch in "*?["):
        return fnmatchcase(normalized, pattern) and "/" not in normalized
    return normalized == pattern or normalized.endswith(f"/{pattern}")


def is_relevant(path: Path) -> bool:
    """Default file filter used when a project declares no include globs."""
    filename = path.name.lower()
    suffix = path.suffix.lower()
    if suffix in _DOC_SUFFIXES:
        return True
    if filename in _RELEVANT_FILENAMES:
        return True
    if any(marker in filename for marker in _API_SPEC_MARKERS):
        return True
    return suffix in _INDEX_CODE_SUFFIXES and "index" in filename


def slugify(name: str) -> str:
    return _SLUG_PATTERN.sub("-", name.lower()).strip("-") or "project"


@dataclass
class DiscoveryResult:
    """Projects found by discovery plus the issues raised along the way."""

    projects: List[SourceProject] = field(default_factory=list)
    issues: List[ValidationIssue] = field(default_factory=list)


class ProjectDiscovery:
    """Resolves configured or auto-detected project roots."""

    def __init__(self, extraction: ExtractionConfig | None = None, exclude_dirs: Sequence[str] | None = None) -> None:
        self.extraction = extraction or ExtractionConfig()
        self.exclude_dirs: Set[str] = set(exclude_dirs if exclude_dirs is not None else ScanConfig().exclude_dirs)

    def discover(self, config: DocCorpusConfig) -> DiscoveryResult:
        """Return projects from explicit descriptors, or from a legacy scan."""
        if config.uses_descriptors:
            return self.from_descriptors(config.projects)
        return self.scan_base_paths(config.scan)

    def from_descriptors(self, descriptors: Sequence[ProjectDescriptor]) -> DiscoveryResult:
        result = DiscoveryResult()
        seen: Set[str] = set()
        for index, descriptor in enumerate(descriptors):
            location = f"projects[{index}]"
            if not descriptor.id:
                self._reject(result, location, "Project descriptor is missing an id", "discovery.invalid-descriptor")
                continue
            location = descriptor.id
            if not _PROJECT_ID_PATTERN.match(descriptor.id):
                self._reject(
                    result, location, f"Project id is not a valid path segment: {descriptor.id}", "discovery.invalid-descriptor"
                )
                continue
            if descriptor.id in seen:
                self._reject(
                    result, location, f"Duplicate project id: {descriptor.id}", "discovery.invalid-descriptor"
                )
                continue
            if descriptor.source_path is None:
                self._reject(
                    result, location, "Project descriptor is missing a source path", "discovery.invalid-descriptor"
                )
                continue
            if not descriptor.source_path.is_dir():
                self._reject(
                    result, location, f"Project path not found: {descriptor.source_path}", "discovery.missing-path"
                )
                continue
            if descriptor.scan_strategy not in SCAN_STRATEGIES:
                self._reject(
                    result,
                    location,
                    f"Unknown scan strategy: {descriptor.scan_strategy}",
                    "discovery.invalid-descriptor",
                )
                continue
            seen.add(descriptor.id)
            document_types = self._known_document_types(descriptor.document_types, location, result)
            project = SourceProject(
                id=descriptor.id,
                display_name=descriptor.display_name or descriptor.id,
                root=descriptor.source_path.resolve(),
                category=descriptor.category,
                priority=descriptor.priority,
                document_types=document_types,
                include=list(descriptor.include),
                skip=list(descriptor.skip),
                description=descriptor.description or "",
                scan_strategy=descriptor.scan_strategy,
                dependencies=_dependencies(_read_package_json(descriptor.source_path / "package.json")),
            )
            logger.info("Discovered configured project %s at %s", project.id, project.root)
            result.projects.append(project)
        return result

    def scan_base_paths(self, scan: ScanConfig) -> DiscoveryResult:
        result = DiscoveryResult()
        seen: Set[str] = set()
        for base_path in scan.base_paths:
            if not base_path.is_dir():
                self._reject(result, str(base_path), f"Base path not found: {base_path}", "discovery.missing-path")
                continue
            logger.info("Scanning base path %s", base_path)
            try:
                entries = sorted(base_path.iterdir(), key=lambda entry: entry.name)
            except OSError as exc:
                self._reject(result, str(base_path), f"Failed to list base path: {exc}", "discovery.missing-path")
                continue
            for entry in entries:
                if not entry.is_dir() or entry.name in self.exclude_dirs:
                    continue
                if not self._is_project(entry, scan.indicators):
                    continue
                project = self._analyze_project(entry, scan)
                if project.id in seen:
                    result.issues.append(
                        ValidationIssue(
                            severity=WARNING,
                            location=str(entry),
                            message=f"Skipping duplicate project id: {project.id}",
                            rule="discovery.invalid-descriptor",
                        )
                    )
                    continue
                seen.add(project.id)
                result.projects.append(project)
        logger.info("Found %d projects", len(result.projects))
        return result

    def iter_project_files(self, project: SourceProject) -> Iterator[Path]:
        """Yield candidate files below ``project.root`` in a stable order."""
        root = project.root
        skip_rules = build_skip_rules(project.skip)
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""
            depth = rel_dir.count("/") + 1 if rel_dir else 0

            kept_dirs = []
            for name in sorted(dirnames):
                if name in self.exclude_dirs or depth >= self.extraction.max_depth:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if any(rule.matches(rel_path) for rule in skip_rules):
                    continue
                kept_dirs.append(name)
            dirnames[:] = kept_dirs

            for filename in sorted(filenames):
                if filename in _EXCLUDED_FILES:
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if any(rule.matches(rel_path) for rule in skip_rules):
                    continue
                path = current_dir / filename
                if project.include:
                    if not any(glob_matches(rel_path, pattern) for pattern in project.include):
                        continue
                elif not is_relevant(path):
                    continue
                yield path

    @staticmethod
    def _reject(result: DiscoveryResult, location: str, message: str, rule: str) -> None:
        logger.error("%s: %s", location, message)
        result.issues.append(ValidationIssue(severity=ERROR, location=location, message=message, rule=rule))

    @staticmethod
    def _known_document_types(
        document_types: Sequence[str], location: str, result: DiscoveryResult
    ) -> List[str]:
        known: List[str] = []
        for doc_type in document_types:
            if doc_type not in DOCUMENT_TYPES:
                logger.warning("%s: unknown document type %s", location, doc_type)
                result.issues.append(
                    ValidationIssue(
                        severity=WARNING,
                        location=location,
                        message=f"Unknown document type: {doc_type}",
                        rule="discovery.unknown-document-type",
                    )
                )
                continue
            if doc_type not in known:
                known.append(doc_type)
        return known

    @staticmethod
    def _is_project(path: Path, indicators: Sequence[str]) -> bool:
        return any((path / indicator).exists() for indicator in indicators)

    def _analyze_project(self, path: Path, scan: ScanConfig) -> SourceProject:
        package_info = _read_package_json(path / "package.json")
        name = path.name
        display_name = _as_text(package_info.get("name")) or name
        description = ""
        for candidate in _DESCRIPTION_SOURCES:
            source = path / candidate
            if not source.is_file():
                continue
            try:
                description = extract_description(source.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError) as exc:
                logger.debug("Could not read %s: %s", source, exc)
                continue
            if description:
                break
        description = description or _as_text(package_info.get("description")) or f"{name} project"

        project = SourceProject(
            id=slugify(name),
            display_name=display_name,
            root=path.resolve(),
            category=categorize_project(name),
            priority=0,
            document_types=[doc_type for doc_type in scan.document_types if doc_type in DOCUMENT_TYPES],
            description=description,
            scan_strategy=scan.strategy,
            version=_as_text(package_info.get("version")) or "1.0.0",
            dependencies=_dependencies(package_info),
        )
        project.priority = calculate_priority(name, list(self.iter_project_files(project)))
        return project


def categorize_project(name: str) -> str:
    lowered = name.lower()
    for needles, category in _CATEGORY_RULES:
        if any(needle in lowered for needle in needles):
            return category
    return "miscellaneous"


def calculate_priority(name: str, files: Sequence[Path], *, now: Optional[float] = None) -> int:
    """Score a legacy project between 0 and 100; higher is more prominent.

    ``files`` are the project's scanned files. Each one modified within the
    last 30 days adds 2 points, up to 20.
    """
    priority = 50
    lowered = name.lower()
    if "turborepo" in lowered or "main" in lowered:
        priority += 30
    if "ai" in lowered or "core" in lowered:
        priority += 20
    if "prod" in lowered:
        priority += 15

    names = [path.name.lower() for path in files]
    if len(names) > 10:
        priority += 10
    if any("readme" in entry for entry in names):
        priority += 5
    if any("claude" in entry for entry in names):
        priority += 8

    cutoff = (time.time() if now is None else now) - RECENT_ACTIVITY_SECONDS
    recent = 0
    for path in files:
        try:
            if path.stat().st_mtime > cutoff:
                recent += 1
        except OSError:
            continue
    priority += min(recent * 2, _RECENT_ACTIVITY_CAP)
    return min(priority, 100)


def _read_package_json(path: Path) -> dict:
    if not path.is_file():
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        logger.error("Failed to parse %s: %s", path, exc)
        return {}
    return payload if isinstance(payload, dict) else {}


def _dependencies(package_info: dict) -> Dict[str, str]:
    dependencies = package_info.get("dependencies")
    if not isinstance(dependencies, dict):
        return {}
    return {str(name): str(version) for name, version in dependencies.items()}


def _as_text(value: object) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


__all__ = [
    "DiscoveryResult",
    "ProjectDiscovery",
    "RECENT_ACTIVITY_SECONDS",
    "SkipRule",
    "build_skip_rules",
    "calculate_priority",
    "categorize_project",
    "glob_matches",
    "is_relevant",
    "slugify",
]
