"""Configuration loading for doccorpus (.doccorpus.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .constants import COMPREHENSIVE, SCAN_STRATEGIES, SELECTIVE

CONFIG_FILENAME = ".doccorpus.yml"

DEFAULT_EXCLUDE_DIRS: tuple[str, ...] = (
    "node_modules",
    ".git",
    ".next",
    "dist",
    "build",
    "__pycache__",
    ".venv",
    "venv",
    "env",
    "target",
    "bin",
    "obj",
    ".pytest_cache",
)

DEFAULT_INDICATORS: tuple[str, ...] = (
    "package.json",
    "pyproject.toml",
    "go.mod",
    "pom.xml",
    "Cargo.toml",
    "composer.json",
    "requirements.txt",
    "README.md",
    "README.txt",
    "CLAUDE.md",
    "docs",
)

DEFAULT_DOCUMENT_TYPES: tuple[str, ...] = ("introduction", "readme", "architecture", "development")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ProjectDescriptor:
    """Static description of one documentation source.

    Fields are kept optional so that an incomplete descriptor can be reported
    and skipped by discovery instead of failing the whole configuration.
    """

    id: Optional[str]
    source_path: Optional[Path]
    display_name: Optional[str] = None
    category: str = "miscellaneous"
    priority: int = 50
    document_types: List[str] = field(default_factory=lambda: list(DEFAULT_DOCUMENT_TYPES))
    include: List[str] = field(default_factory=list)
    skip: List[str] = field(default_factory=list)
    description: Optional[str] = None
    scan_strategy: str = SELECTIVE


@dataclass
class ScanConfig:
    """Legacy directory-walk discovery settings."""

    base_paths: List[Path] = field(default_factory=list)
    indicators: List[str] = field(default_factory=lambda: list(DEFAULT_INDICATORS))
    exclude_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    document_types: List[str] = field(default_factory=lambda: list(DEFAULT_DOCUMENT_TYPES))
    strategy: str = COMPREHENSIVE


@dataclass
class ExtractionConfig:
    """Limits applied while reading and extracting project files."""

    max_file_size: int = 10 * 1024 * 1024
    max_depth: int = 10
    min_comment_length: int = 20


@dataclass
class OutputConfig:
    """Where and how the corpus is written."""

    dir: Path
    navigation_file: Path
    summary_file: Path
    report_file: Optional[Path] = None
    extension: str = ".mdx"
    clean_build: bool = True
    attribution: bool = True


@dataclass
class NavigationGroupConfig:
    """Display settings for a project category in the navigation tree."""

    title: str
    description: str = ""
    order: int = 99


@dataclass
class DocCorpusConfig:
    """Represents the high-level settings defined in .doccorpus.yml."""

    root: Path
    output: OutputConfig
    projects: List[ProjectDescriptor] = field(default_factory=list)
    scan: ScanConfig = field(default_factory=ScanConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    navigation_groups: Dict[str, NavigationGroupConfig] = field(default_factory=dict)
    workers: int = 1

    @property
    def uses_descriptors(self) -> bool:
        return bool(self.projects)


def default_output(root: Path) -> OutputConfig:
    docs_root = root / "docs"
    return OutputConfig(
        dir=docs_root / "projects",
        navigation_file=docs_root / "navigation.json",
        summary_file=docs_root / "project-summary.json",
    )


def load_config(config_path: Path) -> DocCorpusConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DocCorpusConfig(root=root, output=default_output(root))

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    projects_data = data.get("projects")
    if projects_data is not None and not isinstance(projects_data, list):
        raise ConfigError("'projects' must be a list of project descriptors")
    projects = [_parse_descriptor(entry, root) for entry in projects_data or []]

    scan = ScanConfig()
    scan_data = _as_dict(data.get("scan"))
    if scan_data:
        base_paths = _as_str_list(_first(scan_data, "base_paths", "basePaths"))
        scan.base_paths = [_resolve_path(root, value) for value in base_paths]
        if "indicators" in scan_data:
            scan.indicators = _as_str_list(scan_data.get("indicators"))
        exclude_dirs = _first(scan_data, "exclude_dirs", "excludeDirs")
        if exclude_dirs is not None:
            scan.exclude_dirs = _as_str_list(exclude_dirs)
        document_types = _first(scan_data, "document_types", "documentTypes")
        if document_types is not None:
            scan.document_types = _as_str_list(document_types)
        strategy = _as_str(_first(scan_data, "strategy", "scan_strategy", "scanStrategy"))
        if strategy:
            scan.strategy = _parse_scan_strategy(strategy)

    extraction = ExtractionConfig()
    extraction_data = _as_dict(data.get("extraction"))
    if extraction_data:
        max_size = _as_int(_first(extraction_data, "max_file_size", "maxFileSize"))
        if max_size is not None and max_size > 0:
            extraction.max_file_size = max_size
        max_depth = _as_int(_first(extraction_data, "max_depth", "maxDepth"))
        if max_depth is not None and max_depth >= 0:
            extraction.max_depth = max_depth
        min_length = _as_int(_first(extraction_data, "min_comment_length", "minContentLength"))
        if min_length is not None and min_length >= 0:
            extraction.min_comment_length = min_length

    output = _parse_output(_as_dict(data.get("output")), root)

    navigation_groups: Dict[str, NavigationGroupConfig] = {}
    for key, value in _as_dict(_first(data, "navigation_groups", "navigationGroups")).items():
        group_data = _as_dict(value)
        title = _as_str(group_data.get("title")) or str(key)
        navigation_groups[str(key)] = NavigationGroupConfig(
            title=title,
            description=_as_str(group_data.get("description")) or "",
            order=_as_int(group_data.get("order")) or 99,
        )

    workers = _as_int(data.get("workers")) or 1

    return DocCorpusConfig(
        root=root,
        output=output,
        projects=projects,
        scan=scan,
        extraction=extraction,
        navigation_groups=navigation_groups,
        workers=max(workers, 1),
    )


def _parse_descriptor(entry: Any, root: Path) -> ProjectDescriptor:
    data = _as_dict(entry)
    source = _as_str(_first(data, "source_path", "sourcePath", "path"))
    descriptor = ProjectDescriptor(
        id=_as_str(data.get("id")),
        source_path=_resolve_path(root, source) if source else None,
        display_name=_as_str(_first(data, "display_name", "displayName", "name")),
        description=_as_str(data.get("description")),
    )
    category = _as_str(data.get("category"))
    if category:
        descriptor.category = category
    priority = _as_int(data.get("priority"))
    if priority is not None:
        descriptor.priority = priority
    document_types = _first(data, "document_types", "documentTypes")
    if document_types is not None:
        descriptor.document_types = _as_str_list(document_types)
    descriptor.include = _as_str_list(_first(data, "include", "primary_files", "primaryFiles"))
    descriptor.skip = _as_str_list(_first(data, "skip", "skip_patterns", "skipPatterns"))
    strategy = _as_str(_first(data, "scan_strategy", "scanStrategy"))
    if strategy:
        descriptor.scan_strategy = strategy.lower()
    return descriptor


def _parse_scan_strategy(value: str) -> str:
    strategy = value.strip().lower()
    if strategy not in SCAN_STRATEGIES:
        raise ConfigError(f"scan.strategy must be one of {', '.join(SCAN_STRATEGIES)}, got {value!r}")
    return strategy


def _parse_output(data: Mapping[str, Any], root: Path) -> OutputConfig:
    output = default_output(root)
    if not data:
        return output
    directory = _as_str(data.get("dir"))
    if directory:
        output.dir = _resolve_path(root, directory)
        # Navigation and summary default to siblings of the projects directory.
        output.navigation_file = output.dir.parent / "navigation.json"
        output.summary_file = output.dir.parent / "project-summary.json"
    navigation_file = _as_str(_first(data, "navigation_file", "navigationFile"))
    if navigation_file:
        output.navigation_file = _resolve_path(root, navigation_file)
    summary_file = _as_str(_first(data, "summary_file", "summaryFile"))
    if summary_file:
        output.summary_file = _resolve_path(root, summary_file)
    report_file = _as_str(_first(data, "report_file", "reportFile"))
    if report_file:
        output.report_file = _resolve_path(root, report_file)
    extension = _as_str(data.get("extension"))
    if extension:
        output.extension = extension if extension.startswith(".") else f".{extension}"
    clean_build = _as_bool(_first(data, "clean_build", "cleanBuild"))
    if clean_build is not None:
        output.clean_build = clean_build
    attribution = _as_bool(data.get("attribution"))
    if attribution is not None:
        output.attribution = attribution
    return output


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _resolve_path(root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = root / path
    return path


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (str, int, float)):
        text = str(value).strip()
        return text or None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float)) and not isinstance(item, bool)]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DocCorpusConfig",
    "ExtractionConfig",
    "NavigationGroupConfig",
    "OutputConfig",
    "ProjectDescriptor",
    "ScanConfig",
    "default_output",
    "load_config",
]
