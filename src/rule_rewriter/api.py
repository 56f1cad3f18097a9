"""Public API functions for rule-rewriter.

``migrate`` and ``preview`` each build a fresh MigrationEngine per call, so
nothing is shared between calls.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from pathlib import Path

from rule_rewriter.config import EngineConfig, MigrationMode
from rule_rewriter.engine import MigrationEngine
from rule_rewriter.result import MigrationReport
from rule_rewriter.rules.table import RuleTable
from rule_rewriter.rules.tables import BOOT_23_TO_24, get_table
from rule_rewriter.rules.transformers import ValueTransformers
from rule_rewriter.source.rules import SourceRuleTable

__all__ = ["migrate", "preview", "resolve_tables"]


def resolve_tables(tables: Sequence[str | RuleTable]) -> tuple[RuleTable, bool]:
    """Join built-in table names and RuleTable objects into one table.

    Returns:
        The joined table and whether the 2.3 -> 2.4 step (profile syntax) is
        part of it.

    Raises:
        KeyError: If a name is not a built-in table.
    """
    resolved = [get_table(t) if isinstance(t, str) else t for t in tables]
    profiles = any(t.name == BOOT_23_TO_24.name for t in resolved)
    return RuleTable.concat(*resolved), profiles


def migrate(
    base_path: str | Path,
    tables: Sequence[str | RuleTable] = ("2.1-2.2",),
    *,
    apply: bool = False,
    source_rules: SourceRuleTable | None = None,
    transformers: ValueTransformers | None = None,
    config: EngineConfig | None = None,
) -> MigrationReport:
    """Migrate the project at ``base_path`` and return the report.

    Args:
        base_path:    Project root.
        tables:       Built-in table names (e.g. ``"2.1-2.2"``) or RuleTables,
                      applied in order as one joined table.
        apply:        Write results to disk.  Defaults to a dry run.
        source_rules: Optional source-tree rules.
        transformers: Value Transformer registry.  Defaults to the built-ins.
        config:       Base configuration; ``base_path`` and the mode derived
                      from ``apply`` override its values.

    Returns:
        A ``MigrationReport``.  Identical for apply and preview apart from
        its ``mode``.

    Raises:
        DiscoveryFailure: If ``base_path`` is not a directory.
        KeyError:         If a table name is unknown.
    """
    mode = MigrationMode.APPLY if apply else MigrationMode.PREVIEW
    if config is None:
        config = EngineConfig(base_path=Path(base_path), mode=mode)
    else:
        config = dataclasses.replace(config, base_path=Path(base_path), mode=mode)
    table, profiles = resolve_tables(tables)
    engine = MigrationEngine(
        config,
        table,
        transformers=transformers,
        source_rules=source_rules,
        rewrite_profiles=profiles,
    )
    return engine.run()


def preview(
    base_path: str | Path,
    tables: Sequence[str | RuleTable] = ("2.1-2.2",),
    *,
    source_rules: SourceRuleTable | None = None,
    transformers: ValueTransformers | None = None,
    config: EngineConfig | None = None,
) -> MigrationReport:
    """Like ``migrate`` but never writes anything."""
    return migrate(
        base_path,
        tables,
        apply=False,
        source_rules=source_rules,
        transformers=transformers,
        config=config,
    )
