"""Tests for doccorpus.generator and the synthetic templates."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import yaml

from doccorpus.config import OutputConfig
from doccorpus.generator import DocumentGenerator, page_name
from doccorpus.markup import split_frontmatter
from doccorpus.models import SourceFile, SourceProject
from doccorpus.navigation import NavigationBuilder
from doccorpus.synthetic import DocumentLink, SyntheticTemplates, TemplateContext

TODAY = "2026-10-17"


def _output(tmp_path: Path, **overrides: object) -> OutputConfig:
    output = OutputConfig(
        dir=tmp_path / "out" / "projects",
        navigation_file=tmp_path / "out" / "navigation.json",
        summary_file=tmp_path / "out" / "summary.json",
    )
    for key, value in overrides.items():
        setattr(output, key, value)
    return output


def _project(tmp_path: Path, document_types: List[str], **overrides: object) -> SourceProject:
    values = {
        "id": "p1",
        "display_name": "Project One",
        "root": tmp_path / "src",
        "category": "tools",
        "priority": 60,
        "document_types": document_types,
    }
    values.update(overrides)
    return SourceProject(**values)  # type: ignore[arg-type]


def _source(
    relative_path: str,
    classification: str,
    body: str,
    preamble: Optional[dict] = None,
    fragments: Optional[List[str]] = None,
    title: str = "",
) -> SourceFile:
    return SourceFile(
        path=Path("/src") / relative_path,
        relative_path=relative_path,
        content=body,
        size=len(body),
        modified=0.0,
        classification=classification,
        preamble=preamble or {},
        fragments=fragments or [],
        body=body,
        title=title,
    )


def _frontmatter(content: str) -> dict:
    split = split_frontmatter(content)
    assert split.block is not None
    return yaml.safe_load(split.block)


def test_sourced_readme_and_synthetic_architecture(tmp_path: Path) -> None:
    generator = DocumentGenerator(_output(tmp_path), today=TODAY)
    project = _project(tmp_path, ["readme", "architecture"])
    readme = _source("README.md", "readme", "# Project One\n\nA toolkit that turns scattered notes into a searchable handbook.\n")

    result = generator.generate(project, [readme])

    assert result.issues == []
    assert [document.doc_type for document in result.documents] == ["readme", "architecture"]
    sourced, synthetic = result.documents
    assert not sourced.synthetic
    assert sourced.source_file == "README.md"
    assert synthetic.synthetic
    assert synthetic.source_file is None

    written = (tmp_path / "out" / "projects" / "p1" / "readme.mdx").read_text(encoding="utf-8")
    assert written == sourced.content
    assert "automatically extracted from Project One (`README.md`)" in written
    assert (tmp_path / "out" / "projects" / "p1" / "architecture.mdx").is_file()


def test_frontmatter_defaults_and_key_order(tmp_path: Path) -> None:
    generator = DocumentGenerator(_output(tmp_path), today=TODAY, dry_run=True)
    project = _project(tmp_path, ["architecture"])

    document = generator.generate(project, []).documents[0]
    mapping = _frontmatter(document.content)

    assert list(mapping) == ["title", "description", "category", "project", "lastUpdated", "tags"]
    assert mapping["title"] == "Project One - Architecture"
    assert mapping["description"] == "Architecture documentation for Project One"
    assert mapping["category"] == "tools"
    assert mapping["project"] == "p1"
    assert mapping["lastUpdated"] == TODAY
    assert mapping["tags"] == ["architecture", "tools"]


def test_frontmatter_prefers_source_preamble(tmp_path: Path) -> None:
    generator = DocumentGenerator(_output(tmp_path), today=TODAY, dry_run=True)
    project = _project(tmp_path, ["guide"])
    guide = _source(
        "docs/guide.md",
        "guide",
        "# Guide\n\nBody text.\n",
        preamble={"title": "Operator Guide", "description": "{{ desc }}", "tags": ["ops"]},
    )

    document = generator.generate(project, [guide]).documents[0]
    mapping = _frontmatter(document.content)

    assert mapping["title"] == "Operator Guide"
    assert mapping["description"] == "Guide documentation for Project One"
    assert mapping["sourceFile"] == "docs/guide.md"
    assert mapping["tags"] == ["ops"]


def test_select_source_prefers_classification_then_depth_then_path(tmp_path: Path) -> None:
    generator = DocumentGenerator(_output(tmp_path), today=TODAY)
    files = [
        _source("docs/deep/DEVELOPMENT.md", "development", "deep"),
        _source("CLAUDE.md", "ai-context", "context"),
        _source("b/development.md", "development", "b"),
        _source("a/development.md", "development", "a"),
        _source("empty/development.md", "development", "   "),
    ]

    chosen = generator.select_source("development", files)

    assert chosen is not None
    assert chosen.relative_path == "a/development.md"
    assert generator.select_source("development", files[1:2]).relative_path == "CLAUDE.md"
    assert generator.select_source("introduction", files) is None


def test_introduction_links_only_generated_documents(tmp_path: Path) -> None:
    generator = DocumentGenerator(_output(tmp_path), today=TODAY)
    project = _project(tmp_path, ["introduction", "readme", "guide"])
    readme = _source("README.md", "readme", "# Project One\n\nFirst line.\nSecond line.\nThird line.\nFourth line.\n")
    broken_guide = _source("guide.md", "guide", "## 1\n\nUnclosed block { here\n")

    # A pass-through sanitizer lets the malformed guide reach the pre-check.
    class _Passthrough:
        def sanitize(self, text: str) -> str:
            return text.strip()

    generator.sanitizer = _Passthrough()  # type: ignore[assignment]
    result = generator.generate(project, [readme, broken_guide])

    assert [document.doc_type for document in result.documents] == ["introduction", "readme"]
    assert result.rejected == 1
    assert [issue.rule for issue in result.issues] == ["generation.rejected"]
    assert result.issues[0].location == "p1/guide.mdx"
    assert not (tmp_path / "out" / "projects" / "p1" / "guide.mdx").exists()

    introduction = result.documents[0]
    assert "[Project One - README](./readme)" in introduction.content
    assert "./guide" not in introduction.content
    assert "First line.\nSecond line.\nThird line." in introduction.body
    assert "Fourth line." not in introduction.body


def test_dry_run_writes_nothing(tmp_path: Path) -> None:
    generator = DocumentGenerator(_output(tmp_path), today=TODAY, dry_run=True)
    project = _project(tmp_path, ["readme", "architecture"])

    result = generator.generate(project, [])

    assert len(result.documents) == 2
    assert not (tmp_path / "out").exists()


def test_regeneration_is_byte_identical(tmp_path: Path) -> None:
    project = _project(tmp_path, ["introduction", "readme", "architecture"])
    readme = _source("README.md", "readme", "# Project One\n\nStable {1} content.\n")

    first = DocumentGenerator(_output(tmp_path), today=TODAY).generate(project, [readme])
    snapshot = {path.name: path.read_bytes() for path in (tmp_path / "out" / "projects" / "p1").iterdir()}
    second = DocumentGenerator(_output(tmp_path), today=TODAY).generate(project, [readme])
    again = {path.name: path.read_bytes() for path in (tmp_path / "out" / "projects" / "p1").iterdir()}

    assert [doc.content for doc in first.documents] == [doc.content for doc in second.documents]
    assert snapshot == again


def test_clean_build_removes_stale_files(tmp_path: Path) -> None:
    stale = tmp_path / "out" / "projects" / "p1" / "old.mdx"
    stale.parent.mkdir(parents=True)
    stale.write_text("stale", encoding="utf-8")

    DocumentGenerator(_output(tmp_path), today=TODAY).generate(_project(tmp_path, ["readme"]), [])

    assert not stale.exists()


def test_attribution_can_be_disabled(tmp_path: Path) -> None:
    generator = DocumentGenerator(_output(tmp_path, attribution=False), today=TODAY, dry_run=True)
    readme = _source("README.md", "readme", "# Hello\n")

    document = generator.generate(_project(tmp_path, ["readme"]), [readme]).documents[0]

    assert "automatically extracted" not in document.content


def test_synthetic_architecture_includes_doc_comment_fragments(tmp_path: Path) -> None:
    templates = SyntheticTemplates()
    context = TemplateContext(
        project=_project(tmp_path, ["architecture"]),
        doc_type="architecture",
        last_updated=TODAY,
        fragments=["Wires the ingestion queue to\nthe indexer."],
    )

    rendered = templates.render("architecture", context)

    assert "## Notes From Source" in rendered
    assert "> Wires the ingestion queue to the indexer." in rendered


def test_unknown_template_falls_back_to_default(tmp_path: Path) -> None:
    context = TemplateContext(
        project=_project(tmp_path, ["changelog"], description="Handbook tooling for operators."),
        doc_type="changelog",
        last_updated=TODAY,
        documents=[DocumentLink(title="X", link="x")],
    )

    rendered = SyntheticTemplates().render("changelog", context)

    assert rendered.startswith("# Changelog\n")
    assert "Handbook tooling for operators." in rendered


def _comprehensive_files() -> List[SourceFile]:
    return [
        _source("README.md", "readme", "# Project One\n\nA toolkit that turns scattered notes into a handbook.\n"),
        _source("docs/Guide.md", "guide", "# Setup\n\n> **Warning:** Back up first.\n\nThen run it.\n", title="Guide"),
        _source("CLAUDE.md", "ai-context", "# Context\n\nInternal notes.\n"),
        _source("notes.txt", "misc", "Loose notes.\n"),
        _source("src/app.py", "code", "print(1)\n"),
        _source("package.json", "config", '{"name": "p1"}\n'),
        _source("docs/empty.md", "documentation", "   \n"),
    ]


def test_comprehensive_scan_writes_a_page_per_documentation_file(tmp_path: Path) -> None:
    generator = DocumentGenerator(_output(tmp_path), today=TODAY)
    project = _project(
        tmp_path,
        ["readme"],
        scan_strategy="comprehensive",
        dependencies={"pyyaml": "6.0", "jinja2": "^3.1"},
    )

    result = generator.generate(project, _comprehensive_files())

    assert result.issues == []
    assert [document.page_name for document in result.documents] == [
        "readme",
        "ai-context",
        "docs-guide",
        "notes",
        "index",
    ]
    assert [document.doc_type for document in result.documents] == ["readme", "ai-context", "guide", "misc", "index"]

    guide = result.documents[2]
    assert guide.source_file == "docs/Guide.md"
    mapping = _frontmatter(guide.content)
    assert mapping["title"] == "Project One - Guide"
    assert mapping["tags"] == ["guide", "tools"]
    assert "<Warning>\nBack up first.\n</Warning>" in guide.body
    assert (tmp_path / "out" / "projects" / "p1" / "docs-guide.mdx").is_file()
    assert not (tmp_path / "out" / "projects" / "p1" / "app.mdx").exists()
    assert not (tmp_path / "out" / "projects" / "p1" / "package.mdx").exists()


def test_comprehensive_index_lists_pages_and_dependencies(tmp_path: Path) -> None:
    generator = DocumentGenerator(_output(tmp_path), today=TODAY, dry_run=True)
    project = _project(tmp_path, ["readme"], scan_strategy="comprehensive", dependencies={"pyyaml": "6.0", "jinja2": "^3.1"})

    index = generator.generate(project, _comprehensive_files()).documents[-1]

    assert index.synthetic
    assert index.output_path == "p1/index.mdx"
    assert "[Project One - Guide](./docs-guide)" in index.body
    assert "[Project One - README](./readme)" in index.body
    assert "- **Files Processed**: 7" in index.body
    assert "- `jinja2`: `^3.1`\n- `pyyaml`: `6.0`" in index.body


def test_index_without_dependencies_says_so(tmp_path: Path) -> None:
    generator = DocumentGenerator(_output(tmp_path), today=TODAY, dry_run=True)
    project = _project(tmp_path, [], scan_strategy="comprehensive")

    result = generator.generate(project, [])

    assert [document.page_name for document in result.documents] == ["index"]
    assert "No dependencies found." in result.documents[0].body
    assert "No documentation pages were generated." in result.documents[0].body


def test_misc_pages_are_written_but_left_out_of_navigation(tmp_path: Path) -> None:
    generator = DocumentGenerator(_output(tmp_path), today=TODAY)
    project = _project(tmp_path, ["readme"], scan_strategy="comprehensive")

    result = generator.generate(project, _comprehensive_files())
    group = NavigationBuilder().build_group(project, result.documents)

    assert (tmp_path / "out" / "projects" / "p1" / "notes.mdx").is_file()
    assert group.pages == ["p1/index", "p1/readme", "p1/docs-guide", "p1/ai-context"]


def test_selective_scan_only_writes_declared_types(tmp_path: Path) -> None:
    generator = DocumentGenerator(_output(tmp_path), today=TODAY, dry_run=True)
    project = _project(tmp_path, ["readme"])

    result = generator.generate(project, _comprehensive_files())

    assert [document.page_name for document in result.documents] == ["readme"]


def test_page_name_slugs_paths_and_avoids_collisions() -> None:
    assert page_name("docs/My Guide.md") == "docs-my-guide"
    assert page_name("CLAUDE.md") == "ai-context"
    assert page_name("index.md") == "index-2"
    assert page_name("docs/guide.md", {"docs-guide"}) == "docs-guide-2"
    assert page_name("docs/guide.md", {"docs-guide", "docs-guide-2"}) == "docs-guide-3"
