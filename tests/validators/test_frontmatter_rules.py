"""Tests for frontmatter completeness rules."""

from __future__ import annotations

from doccorpus.validators import DocumentContext, FrontmatterRules


def _check(text: str):  # type: ignore[no-untyped-def]
    return FrontmatterRules().check(DocumentContext.from_text("p1/readme.mdx", text))


def test_complete_frontmatter_passes() -> None:
    text = (
        "---\n"
        "title: Readme\n"
        "description: About the project\n"
        "category: tools\n"
        "lastUpdated: '2026-10-17'\n"
        "tags:\n"
        "- readme\n"
        "---\n"
        "Body\n"
    )

    assert _check(text) == []


def test_missing_required_fields_are_errors() -> None:
    issues = _check("---\ntitle: ''\ncategory: tools\ntags: [a]\nlastUpdated: today\n---\nBody\n")

    assert [(issue.rule, issue.message) for issue in issues] == [
        ("frontmatter.required", "Missing required frontmatter field: title"),
        ("frontmatter.required", "Missing required frontmatter field: description"),
    ]
    assert all(issue.is_error for issue in issues)


def test_missing_recommended_fields_are_warnings() -> None:
    issues = _check("---\ntitle: T\ndescription: D\n---\nBody\n")

    assert [issue.message for issue in issues] == [
        "Missing recommended frontmatter field: category",
        "Missing recommended frontmatter field: tags",
        "Missing recommended frontmatter field: lastUpdated",
    ]
    assert {issue.severity for issue in issues} == {"warning"}


def test_missing_frontmatter_is_an_error() -> None:
    issues = _check("# No metadata\n")

    assert [issue.rule for issue in issues] == ["frontmatter.missing"]
    assert issues[0].is_error


def test_unparseable_frontmatter_is_an_error() -> None:
    issues = _check("---\ntitle: [unclosed\n---\nBody\n")

    assert [issue.rule for issue in issues] == ["frontmatter.invalid"]
