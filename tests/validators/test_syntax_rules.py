"""Tests for the syntax rule family."""

from __future__ import annotations

from typing import List

from doccorpus.models import ValidationIssue
from doccorpus.validators import DocumentContext, SyntaxRules, check_syntax

FRONTMATTER = "---\ntitle: T\ndescription: D\n---\n"


def _check(body: str, frontmatter: str = FRONTMATTER) -> List[ValidationIssue]:
    return SyntaxRules().check(DocumentContext.from_text("p1/readme.mdx", frontmatter + body))


def _rules(issues: List[ValidationIssue]) -> List[str]:
    return [issue.rule for issue in issues]


def test_heading_starting_with_digit_is_an_error_with_line_number() -> None:
    issues = _check("\n### 1 Getting Started\n")

    assert _rules(issues) == ["syntax.heading-digit"]
    assert issues[0].is_error
    # Four frontmatter lines, a blank line, then the heading.
    assert issues[0].location == "p1/readme.mdx:6"


def test_unbalanced_expression_is_an_error() -> None:
    issues = _check("Value { open\n")

    assert _rules(issues) == ["syntax.unbalanced-expression"]
    assert issues[0].is_error


def test_escaped_braces_and_inline_code_are_ignored() -> None:
    assert _check("Use \\{ literally and `{` in code.\n") == []


def test_fenced_code_is_ignored() -> None:
    body = "```\n# 1 not a heading\nconst x = {\n```\n"

    assert _check(body) == []


def test_numeric_expression_is_a_warning() -> None:
    issues = _check("Wait {5} seconds.\n")

    assert _rules(issues) == ["syntax.numeric-expression"]
    assert issues[0].severity == "warning"


def test_neutralised_expression_comments_pass() -> None:
    assert _check("Wait {/* 5 */} seconds.\n") == []


def test_empty_link_text_warns_and_empty_target_errors() -> None:
    issues = _check("See [](./a.mdx) and [docs]().\n")

    assert sorted(_rules(issues)) == ["syntax.empty-link-target", "syntax.empty-link-text"]
    by_rule = {issue.rule: issue for issue in issues}
    assert by_rule["syntax.empty-link-text"].severity == "warning"
    assert by_rule["syntax.empty-link-target"].is_error


def test_doctype_is_an_error() -> None:
    assert _rules(_check("<!DOCTYPE html>\n")) == ["syntax.doctype"]


def test_template_placeholder_in_frontmatter_is_an_error() -> None:
    issues = _check("Body\n", frontmatter="---\ntitle: '{{ page.title }}'\n---\n")

    assert _rules(issues) == ["syntax.frontmatter-template"]
    assert issues[0].location == "p1/readme.mdx:1"


def test_check_syntax_helper_runs_in_memory() -> None:
    issues = check_syntax("p1/guide.mdx", FRONTMATTER + "## 2 Steps\n")

    assert [issue.location for issue in issues] == ["p1/guide.mdx:5"]


def test_indented_atx_heading_with_digit_is_an_error() -> None:
    assert _rules(_check("   ## 1. Install\n")) == ["syntax.heading-digit"]


def test_hash_without_space_is_not_a_heading() -> None:
    assert _check("#1 priority is speed\n") == []
    assert _check("    # 1 indented code\n") == []
