"""Shared constants for document types and their sources."""

from __future__ import annotations

DOCUMENT_TYPES: tuple[str, ...] = (
    "introduction",
    "readme",
    "quickstart",
    "guide",
    "api-reference",
    "architecture",
    "development",
    "deployment",
    "security",
    "migration",
    "changelog",
    "ai-context",
    "documentation",
)

DOCUMENT_TYPE_TITLES: dict[str, str] = {
    "introduction": "Introduction",
    "readme": "README",
    "quickstart": "Quick Start",
    "guide": "Guide",
    "api-reference": "API Reference",
    "architecture": "Architecture",
    "development": "Development",
    "deployment": "Deployment",
    "security": "Security",
    "migration": "Migration",
    "changelog": "Changelog",
    "ai-context": "AI Context",
    "documentation": "Documentation",
    "index": "Overview",
}

# Classifications accepted as the source of each document type, best first.
# Types absent from this table are always synthesized.
SOURCE_PREFERENCES: dict[str, tuple[str, ...]] = {
    "readme": ("readme",),
    "quickstart": ("quickstart",),
    "guide": ("guide",),
    "api-reference": ("api-reference",),
    "architecture": ("architecture",),
    "development": ("development", "ai-context"),
    "deployment": ("deployment",),
    "security": ("security",),
    "migration": ("migration",),
    "changelog": ("changelog",),
    "ai-context": ("ai-context",),
    "documentation": ("documentation",),
}

# Classifications that never appear in navigation.
NAVIGATION_EXCLUDED: frozenset[str] = frozenset({"code", "misc"})

# Classifications never copied as standalone pages by a comprehensive scan.
PAGE_EXCLUDED: frozenset[str] = frozenset({"code", "config", "api-spec"})

COMPREHENSIVE = "comprehensive"
SELECTIVE = "selective"
SCAN_STRATEGIES: tuple[str, ...] = (COMPREHENSIVE, SELECTIVE)

INDEX_PAGE = "index"


def document_type_title(doc_type: str) -> str:
    return DOCUMENT_TYPE_TITLES.get(doc_type, doc_type.replace("-", " ").replace("_", " ").title())


__all__ = [
    "COMPREHENSIVE",
    "DOCUMENT_TYPES",
    "DOCUMENT_TYPE_TITLES",
    "INDEX_PAGE",
    "NAVIGATION_EXCLUDED",
    "PAGE_EXCLUDED",
    "SCAN_STRATEGIES",
    "SELECTIVE",
    "SOURCE_PREFERENCES",
    "document_type_title",
]
