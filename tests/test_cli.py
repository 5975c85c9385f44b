"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from doccorpus.cli import _build_parser, main
from tests._fixtures.project_builder import ProjectBuilder


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "build"])
    assert args.verbose is True
    assert args.command == "build"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["validate", "-v"])
    assert args.verbose is True
    assert args.command == "validate"


def test_cli_accepts_build_flags() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["build", "--dry-run", "--base-path", "a", "--base-path", "b", "--config", "x.yml", "--workers", "2"]
    )
    assert args.dry_run is True
    assert args.base_path == ["a", "b"]
    assert args.config == "x.yml"
    assert args.workers == 2


def test_cli_accepts_docs_dir_for_validate() -> None:
    parser = _build_parser()
    args = parser.parse_args(["validate", "--docs-dir", "out/projects"])
    assert args.docs_dir == "out/projects"


def test_build_command_writes_corpus(project_builder: ProjectBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    project_builder.write("p1", {"README.md": "# P1\n\nHello.\n"})
    project_builder.add_project("p1", document_types=["readme"])
    config_path = project_builder.write_config()

    main(["build", "--config", str(config_path), "--date", "2026-10-17"])

    output = capsys.readouterr().out
    assert "All validations passed." in output
    assert "1 documents for 1 projects" in output
    assert (project_builder.output_dir / "p1" / "readme.mdx").is_file()


def test_build_exits_non_zero_on_errors(project_builder: ProjectBuilder) -> None:
    project_builder.add_project("ghost", source_path="sources/missing")
    config_path = project_builder.write_config()

    with pytest.raises(SystemExit) as excinfo:
        main(["build", "--config", str(config_path)])

    assert excinfo.value.code == 1


def test_build_with_base_path_scans_legacy_projects(project_builder: ProjectBuilder) -> None:
    project_builder.write("legacy-tool", {"README.md": "# Legacy\n", "package.json": json.dumps({"name": "legacy"})})
    config_path = project_builder.write_config()

    main(["build", "--config", str(config_path), "--base-path", str(project_builder.sources), "--date", "2026-10-17"])

    navigation = json.loads(project_builder.navigation_file.read_text(encoding="utf-8"))
    assert navigation["navigation"][0]["group"] == "legacy"
    assert (project_builder.output_dir / "legacy-tool" / "introduction.mdx").is_file()


def test_dry_run_writes_nothing(project_builder: ProjectBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    project_builder.write("p1", {"README.md": "# P1\n"})
    project_builder.add_project("p1", document_types=["readme"])
    config_path = project_builder.write_config()

    main(["build", "--config", str(config_path), "--dry-run"])

    assert "(dry-run)" in capsys.readouterr().out
    assert not (project_builder.root / "docs").exists()


def test_validate_command_reports_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    docs = tmp_path / "docs" / "projects"
    (docs / "p1").mkdir(parents=True)
    (docs / "p1" / "readme.mdx").write_text("---\ntitle: T\ndescription: D\n---\n\n[x](./missing.ext)\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["validate", "--config", str(tmp_path), "--docs-dir", str(docs)])

    assert excinfo.value.code == 1
    output = capsys.readouterr().out
    assert "Broken link: [x](./missing.ext)" in output


def test_invalid_configuration_exits_with_status_two(tmp_path: Path) -> None:
    (tmp_path / ".doccorpus.yml").write_text("projects: [unclosed\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["validate", "--config", str(tmp_path)])

    assert excinfo.value.code == 2
