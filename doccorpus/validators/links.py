"""Link and image integrity rules."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from ..markup import LINK_PATTERN, mask_inline_code
from ..models import ERROR, WARNING, ValidationIssue
from .base import DocumentContext

_EXTERNAL_PREFIXES = ("http://", "https://", "mailto:", "tel:", "//", "data:")


def is_external(target: str) -> bool:
    return target.lower().startswith(_EXTERNAL_PREFIXES)


def clean_target(target: str) -> str:
    """Strip an optional link title, anchor and query from ``target``."""
    cleaned = target.strip()
    if cleaned.startswith("<") and ">" in cleaned:
        cleaned = cleaned[1:cleaned.index(">")]
    elif " " in cleaned:
        cleaned = cleaned.split(" ", 1)[0]
    cleaned = cleaned.split("#", 1)[0]
    cleaned = cleaned.split("?", 1)[0]
    return cleaned.replace("\\", "/")


class LinkRules:
    """Checks that relative links and images resolve inside the corpus."""

    name = "links"

    def __init__(self, *, extension: str = ".mdx") -> None:
        self._extension = extension if extension.startswith(".") else f".{extension}"

    def check(self, document: DocumentContext) -> List[ValidationIssue]:
        document_path = document.path
        if document_path is None or document.root is None:
            return []
        base_dir = document_path.parent
        issues: List[ValidationIssue] = []
        for line_number, line in document.prose_lines():
            for match in LINK_PATTERN.finditer(mask_inline_code(line)):
                is_image, text, target = match.groups()
                if is_image:
                    issues.extend(self._check_image(document, base_dir, text, target, line_number))
                    continue
                raw = target.strip()
                if not raw or raw.startswith("#") or is_external(raw):
                    continue
                cleaned = clean_target(raw)
                if not cleaned:
                    continue
                if self.resolve(cleaned, base_dir=base_dir, root=document.root) is None:
                    issues.append(
                        document.issue(
                            ERROR,
                            f"Broken link: [{text}]({raw})",
                            "links.broken",
                            line=line_number,
                        )
                    )
        return issues

    def resolve(self, target: str, *, base_dir: Path, root: Path) -> Optional[Path]:
        """Return the file ``target`` points at, or ``None`` when it does not exist.

        Absolute targets resolve against the corpus root. Targets without a
        suffix may name a document without its extension or a directory
        holding an index document.
        """
        if target.startswith("/"):
            candidate = root / target.lstrip("/")
        else:
            candidate = base_dir / target
        if candidate.is_file():
            return candidate
        if not candidate.suffix:
            with_extension = candidate.parent / f"{candidate.name}{self._extension}"
            if with_extension.is_file():
                return with_extension
            index = candidate / f"index{self._extension}"
            if index.is_file():
                return index
        if candidate.is_dir():
            return candidate
        return None

    @staticmethod
    def _check_image(
        document: DocumentContext, base_dir: Path, alt: str, target: str, line_number: int
    ) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        raw = target.strip()
        if raw and not is_external(raw):
            cleaned = clean_target(raw)
            candidate = (document.root / cleaned.lstrip("/")) if cleaned.startswith("/") else base_dir / cleaned
            if cleaned and not candidate.is_file():
                issues.append(
                    document.issue(ERROR, f"Missing image: ![{alt}]({raw})", "images.missing", line=line_number)
                )
        if not alt.strip():
            issues.append(
                document.issue(WARNING, f"Image missing alt text: {raw}", "images.missing-alt", line=line_number)
            )
        return issues


__all__ = ["LinkRules", "clean_target", "is_external"]
