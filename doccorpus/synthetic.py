"""Synthetic documents rendered when a project has no matching source file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from .constants import document_type_title
from .extractor import extract_description
from .models import SourceFile, SourceProject

_DEFAULT_TEMPLATES_DIR = Path(__file__).with_name("templates")
_INTRO_EXCERPT_LINES = 3
_MAX_FRAGMENTS = 3


@dataclass(frozen=True)
class DocumentLink:
    title: str
    link: str


@dataclass
class TemplateContext:
    """Everything a synthetic template may draw on."""

    project: SourceProject
    doc_type: str
    last_updated: str
    readme: Optional[SourceFile] = None
    documents: Sequence[DocumentLink] = ()
    fragments: List[str] = field(default_factory=list)
    files_processed: int = 0


class SyntheticTemplates:
    """Renders templated stand-ins keyed by document type."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self._env = _create_env(templates_dir)

    def render(self, doc_type: str, context: TemplateContext) -> str:
        builder = _TEMPLATE_BUILDERS.get(doc_type, _default_template)
        return builder(self._env, context).strip() + "\n"


def _create_env(templates_dir: Path | None) -> Environment:
    directories: List[str] = []
    if templates_dir:
        directories.append(str(templates_dir))
    directories.append(str(_DEFAULT_TEMPLATES_DIR))
    loader = FileSystemLoader(directories)
    return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


def _category_words(project: SourceProject) -> str:
    return project.category.replace("-", " ").replace("_", " ")


def _project_description(project: SourceProject, readme: Optional[SourceFile]) -> str:
    if project.description:
        return project.description
    if readme is not None:
        extracted = extract_description(readme.body)
        if extracted:
            return extracted
    return f"This project focuses on {_category_words(project)}."


def _introduction_template(env: Environment, context: TemplateContext) -> str:
    project = context.project
    if context.readme is not None:
        lines = [line for line in context.readme.body.splitlines() if line.strip()]
        # The README title duplicates the page heading.
        if lines and lines[0].lstrip().startswith("# "):
            lines = lines[1:]
        summary = "\n".join(lines[:_INTRO_EXCERPT_LINES])
    else:
        summary = ""
    if not summary.strip():
        summary = project.description or (
            f"{project.display_name} is a project in the {_category_words(project)} category."
        )
    return env.get_template("introduction.md.j2").render(
        project=project,
        summary=summary,
        category_words=_category_words(project),
        documents=list(context.documents),
        last_updated=context.last_updated,
    )


def _readme_template(env: Environment, context: TemplateContext) -> str:
    return env.get_template("readme.md.j2").render(
        project=context.project,
        description=_project_description(context.project, None),
    )


def _architecture_template(env: Environment, context: TemplateContext) -> str:
    return env.get_template("architecture.md.j2").render(
        project=context.project,
        category_words=_category_words(context.project),
        fragments=context.fragments[:_MAX_FRAGMENTS],
    )


def _development_template(env: Environment, context: TemplateContext) -> str:
    return env.get_template("development.md.j2").render(project=context.project)


def _index_template(env: Environment, context: TemplateContext) -> str:
    project = context.project
    return env.get_template("index.md.j2").render(
        project=project,
        description=_project_description(project, context.readme),
        documents=list(context.documents),
        dependencies=sorted(project.dependencies.items()),
        files_processed=context.files_processed,
        last_updated=context.last_updated,
    )


def _default_template(env: Environment, context: TemplateContext) -> str:
    return env.get_template("default.md.j2").render(
        project=context.project,
        type_title=document_type_title(context.doc_type),
        description=_project_description(context.project, context.readme),
    )


_TEMPLATE_BUILDERS: Dict[str, Callable[[Environment, TemplateContext], str]] = {
    "introduction": _introduction_template,
    "readme": _readme_template,
    "architecture": _architecture_template,
    "development": _development_template,
    "index": _index_template,
}


__all__ = ["DocumentLink", "SyntheticTemplates", "TemplateContext"]
