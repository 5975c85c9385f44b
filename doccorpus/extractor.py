"""Preamble, doc-comment and description extraction for project files."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .classifier import Classifier
from .logging import get_logger
from .markup import split_frontmatter
from .models import SourceFile

_BLOCK_COMMENT_PATTERN = re.compile(r"/\*\*(.*?)\*/", re.DOTALL)
_TRIPLE_QUOTE_PATTERN = re.compile(r"(\"\"\"|''')(.*?)\1", re.DOTALL)
_COMMENT_STAR_PATTERN = re.compile(r"^[ \t]*\*[ \t]?", re.MULTILINE)
_HEADING_MARKER_PATTERN = re.compile(r"^#+\s*")
_PREAMBLE_KEY_PATTERN = re.compile(r"^[A-Za-z_][\w-]*$")

_BLOCK_COMMENT_SUFFIXES = {".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs", ".java", ".go", ".kt", ".swift", ".php"}
_TRIPLE_QUOTE_SUFFIXES = {".py", ".pyi"}
_MARKUP_SUFFIXES = {".md", ".mdx"}
_TEXT_SUFFIXES = {
    ".md",
    ".mdx",
    ".txt",
    ".rst",
    ".json",
    ".yaml",
    ".yml",
    ".toml",
    ".js",
    ".jsx",
    ".ts",
    ".tsx",
    ".py",
    ".java",
    ".go",
}

DESCRIPTION_MIN_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 200

logger = get_logger("extractor")


@dataclass
class Preamble:
    """Leading metadata block split away from a document body."""

    mapping: Dict[str, Any] = field(default_factory=dict)
    body: str = ""


def split_preamble(text: str) -> Preamble:
    """Separate a leading ``---`` key/value block from the body.

    Lines that do not parse as ``key: value`` are skipped; when no block is
    present the body is returned unchanged.
    """
    split = split_frontmatter(text or "")
    if split.block is None:
        return Preamble(mapping={}, body=text or "")
    mapping: Dict[str, Any] = {}
    for raw_line in split.block.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip()
        if not _PREAMBLE_KEY_PATTERN.match(key):
            continue
        mapping[key] = _parse_preamble_value(value.strip())
    return Preamble(mapping=mapping, body=split.body)


def _parse_preamble_value(value: str) -> Any:
    if value.startswith("[") and value.endswith("]"):
        try:
            loaded = yaml.safe_load(value)
        except yaml.YAMLError:
            loaded = None
        if isinstance(loaded, list):
            return [str(item) for item in loaded if item is not None]
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def extract_doc_comments(path: str | Path, content: str, *, min_length: int = 20) -> List[str]:
    """Return documentation comment fragments from a source file.

    ``/** ... */`` blocks are read from C-family sources and triple-quoted
    blocks from Python sources. Fragments shorter than ``min_length`` are
    discarded.
    """
    suffix = Path(path).suffix.lower()
    fragments: List[str] = []
    if suffix in _BLOCK_COMMENT_SUFFIXES:
        for match in _BLOCK_COMMENT_PATTERN.finditer(content):
            fragments.append(_COMMENT_STAR_PATTERN.sub("", match.group(1)).strip())
    elif suffix in _TRIPLE_QUOTE_SUFFIXES:
        for match in _TRIPLE_QUOTE_PATTERN.finditer(content):
            fragments.append(match.group(2).strip())
    return [fragment for fragment in fragments if len(fragment) > min_length]


def extract_description(content: str) -> str:
    """Return the first meaningful line of ``content`` as a short description."""
    in_code = False
    for raw_line in (content or "").splitlines():
        line = raw_line.strip()
        if line.startswith("```"):
            in_code = not in_code
            continue
        if in_code or not line or line.startswith("|") or line.startswith("<"):
            continue
        cleaned = _HEADING_MARKER_PATTERN.sub("", line).strip()
        if len(cleaned) > DESCRIPTION_MIN_LENGTH:
            if len(cleaned) > DESCRIPTION_MAX_LENGTH:
                return cleaned[:DESCRIPTION_MAX_LENGTH] + "..."
            return cleaned
    return ""


def generate_title(stem: str) -> str:
    """Turn a file stem such as ``getting-started`` into ``Getting Started``."""
    words = re.sub(r"[-_]+", " ", stem).split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def is_text_file(path: Path) -> bool:
    return path.suffix.lower() in _TEXT_SUFFIXES


def load_source_file(
    path: Path,
    root: Path,
    *,
    classifier: Classifier,
    max_file_size: int,
    min_comment_length: int = 20,
) -> Optional[SourceFile]:
    """Read, classify and extract a single project file.

    Returns ``None`` when the file is over ``max_file_size`` or cannot be
    read as UTF-8 text; those files are skipped, never fatal.
    """
    try:
        stat_result = path.stat()
    except OSError as exc:
        logger.warning("Skipping %s: %s", path, exc)
        return None
    if stat_result.st_size > max_file_size:
        logger.debug("Skipping %s: %d bytes exceeds limit of %d", path, stat_result.st_size, max_file_size)
        return None

    content = ""
    if is_text_file(path):
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable file %s: %s", path, exc)
            return None

    relative_path = path.relative_to(root).as_posix()
    preamble = Preamble(mapping={}, body=content)
    if path.suffix.lower() in _MARKUP_SUFFIXES:
        preamble = split_preamble(content)

    classification = classifier.classify(relative_path, preamble.body)
    fragments: List[str] = []
    if classification == "code":
        fragments = extract_doc_comments(path, content, min_length=min_comment_length)

    title = preamble.mapping.get("title")
    if not isinstance(title, str) or not title.strip():
        title = generate_title(path.stem)

    return SourceFile(
        path=path,
        relative_path=relative_path,
        content=content,
        size=stat_result.st_size,
        modified=stat_result.st_mtime,
        classification=classification,
        preamble=preamble.mapping,
        fragments=fragments,
        body=preamble.body,
        title=title,
    )


__all__ = [
    "Preamble",
    "extract_description",
    "extract_doc_comments",
    "generate_title",
    "is_text_file",
    "load_source_file",
    "split_preamble",
]
