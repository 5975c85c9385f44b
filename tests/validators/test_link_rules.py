"""Tests for link and image integrity rules."""

from __future__ import annotations

from pathlib import Path
from typing import List

from doccorpus.models import ValidationIssue
from doccorpus.validators import DocumentContext, LinkRules


def _write(path: Path, content: str = "x") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _check(root: Path, body: str, relative_path: str = "p1/readme.mdx") -> List[ValidationIssue]:
    text = "---\ntitle: T\n---\n" + body
    _write(root / relative_path, text)
    return LinkRules(extension=".mdx").check(DocumentContext.from_text(relative_path, text, root=root))


def test_broken_relative_link_names_document_and_target(tmp_path: Path) -> None:
    issues = _check(tmp_path, "[x](./missing.ext)\n")

    assert len(issues) == 1
    issue = issues[0]
    assert issue.is_error
    assert issue.rule == "links.broken"
    assert issue.location.startswith("p1/readme.mdx")
    assert "./missing.ext" in issue.message


def test_existing_targets_resolve_relative_to_document(tmp_path: Path) -> None:
    _write(tmp_path / "p1" / "guide.mdx")
    _write(tmp_path / "p2" / "index.mdx")
    _write(tmp_path / "shared" / "notes.txt")

    body = (
        "[guide](./guide.mdx) [bare](guide) [other](../p2) [root](/shared/notes.txt) "
        "[anchor](#top) [section](./guide.mdx#setup) [web](https://example.com) [mail](mailto:a@b.c)\n"
    )

    assert _check(tmp_path, body) == []


def test_links_in_code_are_not_checked(tmp_path: Path) -> None:
    body = "`[x](./nope.mdx)`\n\n```\n[y](./nope.mdx)\n```\n"

    assert _check(tmp_path, body) == []


def test_missing_image_is_an_error_and_missing_alt_a_warning(tmp_path: Path) -> None:
    _write(tmp_path / "p1" / "img" / "present.png")

    issues = _check(tmp_path, "![](./img/present.png)\n![Diagram](./img/absent.png)\n![Remote](https://x.test/a.png)\n")

    assert [(issue.rule, issue.severity) for issue in issues] == [
        ("images.missing-alt", "warning"),
        ("images.missing", "error"),
    ]
    assert issues[1].location == "p1/readme.mdx:5"


def test_documents_checked_in_memory_are_skipped() -> None:
    document = DocumentContext.from_text("p1/readme.mdx", "[x](./missing.mdx)\n")

    assert LinkRules().check(document) == []
