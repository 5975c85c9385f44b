"""Heuristic classification of project files into document categories."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Callable, Sequence, Tuple

LABELS: tuple[str, ...] = (
    "readme",
    "ai-context",
    "changelog",
    "api-reference",
    "guide",
    "quickstart",
    "architecture",
    "deployment",
    "development",
    "security",
    "migration",
    "documentation",
    "code",
    "config",
    "api-spec",
    "misc",
)


@dataclass(frozen=True)
class FileFacts:
    """Normalised inputs every rule predicate receives."""

    filename: str
    extension: str
    content: str


Predicate = Callable[[FileFacts], bool]
Rule = Tuple[Predicate, str]


def filename_contains(*needles: str) -> Predicate:
    def _match(facts: FileFacts) -> bool:
        return any(needle in facts.filename for needle in needles)

    return _match


def content_contains(*needles: str) -> Predicate:
    def _match(facts: FileFacts) -> bool:
        return any(needle in facts.content for needle in needles)

    return _match


def extension_in(*extensions: str) -> Predicate:
    def _match(facts: FileFacts) -> bool:
        return facts.extension in extensions

    return _match


def filename_is(*names: str) -> Predicate:
    def _match(facts: FileFacts) -> bool:
        return facts.filename in names

    return _match


def all_of(*predicates: Predicate) -> Predicate:
    def _match(facts: FileFacts) -> bool:
        return all(predicate(facts) for predicate in predicates)

    return _match


# Evaluated top to bottom, first match wins. Filename rules come before
# content rules, extension defaults come last.
DEFAULT_RULES: tuple[Rule, ...] = (
    (filename_contains("readme"), "readme"),
    (filename_contains("claude"), "ai-context"),
    (filename_contains("changelog", "changes"), "changelog"),
    (filename_contains("api", "reference"), "api-reference"),
    (filename_contains("guide", "tutorial"), "guide"),
    (filename_contains("quickstart", "getting-started"), "quickstart"),
    (filename_contains("architecture", "design"), "architecture"),
    (filename_contains("deployment", "deploy"), "deployment"),
    (filename_contains("development", "dev"), "development"),
    (filename_contains("security", "auth"), "security"),
    (filename_contains("migration", "upgrade"), "migration"),
    (content_contains("# api", "## endpoints"), "api-reference"),
    (content_contains("# quick start", "## getting started"), "quickstart"),
    (content_contains("# architecture", "## system design"), "architecture"),
    (extension_in(".md", ".mdx", ".rst"), "documentation"),
    (extension_in(".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".go"), "code"),
    (filename_is("package.json", "pyproject.toml", "go.mod", "pom.xml", "cargo.toml"), "config"),
    (all_of(extension_in(".json", ".yaml", ".yml"), filename_contains("api", "openapi", "swagger")), "api-spec"),
)

FALLBACK_LABEL = "misc"

_NAVIGATION_ORDER: dict[str, int] = {
    "index": 0,
    "introduction": 0,
    "readme": 1,
    "quickstart": 2,
    "guide": 3,
    "api-reference": 4,
    "architecture": 5,
    "development": 6,
    "deployment": 7,
    "security": 8,
    "migration": 9,
    "changelog": 10,
    "ai-context": 11,
    "documentation": 12,
    "misc": 99,
}

UNMAPPED_ORDER = 999


class Classifier:
    """Maps a file path and optional content to a single category label."""

    def __init__(self, rules: Sequence[Rule] | None = None, fallback: str = FALLBACK_LABEL) -> None:
        self.rules: tuple[Rule, ...] = tuple(rules) if rules is not None else DEFAULT_RULES
        self.fallback = fallback

    def classify(self, path: str, content: str = "") -> str:
        """Return the label of the first rule matching ``path``/``content``."""
        pure = PurePosixPath(str(path).replace("\\", "/"))
        facts = FileFacts(
            filename=pure.name.lower(),
            extension=pure.suffix.lower(),
            content=(content or "").lower(),
        )
        for predicate, label in self.rules:
            if predicate(facts):
                return label
        return self.fallback


def classify(path: str, content: str = "") -> str:
    """Classify with the default rule table."""
    return _DEFAULT_CLASSIFIER.classify(path, content)


def navigation_order(label: str) -> int:
    """Return the sort weight for ``label``; lower sorts first."""
    return _NAVIGATION_ORDER.get(label, UNMAPPED_ORDER)


_DEFAULT_CLASSIFIER = Classifier()


__all__ = [
    "Classifier",
    "DEFAULT_RULES",
    "FileFacts",
    "LABELS",
    "Rule",
    "UNMAPPED_ORDER",
    "classify",
    "navigation_order",
]
