"""Validation package for generated documentation corpora."""

from .base import DocumentContext, Rule, ValidationReport, run_rules
from .corpus import CorpusValidator, check_syntax
from .frontmatter import FrontmatterRules
from .links import LinkRules
from .navigation import NavigationRules
from .syntax import SyntaxRules

__all__ = [
    "CorpusValidator",
    "DocumentContext",
    "FrontmatterRules",
    "LinkRules",
    "NavigationRules",
    "Rule",
    "SyntaxRules",
    "ValidationReport",
    "check_syntax",
    "run_rules",
]
