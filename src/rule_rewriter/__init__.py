"""rule-rewriter - rule-table-driven migration of configuration and source trees."""

from __future__ import annotations

from rule_rewriter.api import migrate, preview
from rule_rewriter.config import (
    DocumentFormat,
    EngineConfig,
    MigrationMode,
    ProfileMarkers,
)
from rule_rewriter.engine import MigrationEngine
from rule_rewriter.errors import (
    DiscoveryFailure,
    ParseFailure,
    PathCollision,
    RewriteError,
    WriteFailure,
)
from rule_rewriter.result import ChangeLog, ChangeRecord, MigrationReport, Severity
from rule_rewriter.rules import (
    PropertyMappingRule,
    RuleApplier,
    RuleTable,
    TransformKind,
    ValueTransformers,
    get_table,
)
from rule_rewriter.source import FieldRule, ImportRule, SourceRuleTable, StubRule

__version__: str = "0.1.0"
__all__: list[str] = [
    "ChangeLog",
    "ChangeRecord",
    "DiscoveryFailure",
    "DocumentFormat",
    "EngineConfig",
    "FieldRule",
    "ImportRule",
    "MigrationEngine",
    "MigrationMode",
    "MigrationReport",
    "ParseFailure",
    "PathCollision",
    "ProfileMarkers",
    "PropertyMappingRule",
    "RewriteError",
    "RuleApplier",
    "RuleTable",
    "Severity",
    "SourceRuleTable",
    "StubRule",
    "TransformKind",
    "ValueTransformers",
    "WriteFailure",
    "get_table",
    "migrate",
    "preview",
]
