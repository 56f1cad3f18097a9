"""source subpackage: rule-driven rewrite of Python source trees (libcst)."""

from __future__ import annotations

from rule_rewriter.source.fields import FieldRewriter
from rule_rewriter.source.imports import ImportRewriter
from rule_rewriter.source.migrator import SourceMigrator, SourceOutcome
from rule_rewriter.source.registry import FileSystemRegistry, SourceUnit
from rule_rewriter.source.rules import FieldRule, ImportRule, SourceRuleTable, StubRule
from rule_rewriter.source.stubs import GeneratedStub, StubGenerator

__all__ = [
    "FieldRewriter",
    "FieldRule",
    "FileSystemRegistry",
    "GeneratedStub",
    "ImportRewriter",
    "ImportRule",
    "SourceMigrator",
    "SourceOutcome",
    "SourceRuleTable",
    "SourceUnit",
    "StubGenerator",
    "StubRule",
]
