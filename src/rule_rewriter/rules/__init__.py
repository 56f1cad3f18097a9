"""rules subpackage: rule tables, value transformers and the Rule Applier.

Example::

    from rule_rewriter.rules import RuleApplier, RuleTable
    from rule_rewriter.result import ChangeLog
    from rule_rewriter.tree import FlatTable

    table = RuleTable.from_mapping("demo", {"logging.file": "logging.file.name"})
    props = FlatTable.parse("logging.file=app.log\\n")
    RuleApplier(table).apply(props, "application.properties", ChangeLog())
    # props.entries == {"logging.file.name": "app.log"}
"""

from __future__ import annotations

from rule_rewriter.rules.applier import RuleApplier, TransformOutcome
from rule_rewriter.rules.table import PropertyMappingRule, RuleTable, TransformKind
from rule_rewriter.rules.tables import TABLES, get_table
from rule_rewriter.rules.transformers import ValueTransformers, forward_headers_strategy

__all__ = [
    "TABLES",
    "PropertyMappingRule",
    "RuleApplier",
    "RuleTable",
    "TransformKind",
    "TransformOutcome",
    "ValueTransformers",
    "forward_headers_strategy",
    "get_table",
]
