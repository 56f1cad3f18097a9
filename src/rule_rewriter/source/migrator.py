"""SourceMigrator: runs a SourceRuleTable over one parsed module.

Rules run in three passes, each on the output of the previous one: import
rules, then field rules, then stub rules.  ``migrate`` returns the rewritten
module, the generated stubs and a ChangeLog for this unit, and leaves writing
to the caller.  A stub whose file already exists is still returned but is not
recorded as generated, so a second run reports no new changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import libcst as cst

from rule_rewriter.result import ChangeLog
from rule_rewriter.source.fields import FieldRewriter
from rule_rewriter.source.imports import ImportRewriter
from rule_rewriter.source.registry import SourceUnit
from rule_rewriter.source.rules import SourceRuleTable
from rule_rewriter.source.stubs import STUB_MARKER, GeneratedStub, StubGenerator
from rule_rewriter.source.syntax import decorator_names, ensure_import

__all__ = ["SourceMigrator", "SourceOutcome"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SourceOutcome:
    """Result of ``SourceMigrator.migrate``.

    Attributes:
        module:   Rewritten tree; equal to the input when nothing fired.
        log:      Records for the unit and for its generated stubs.
        stubs:    Stub modules to write.
        modified: True when the module's code changed.
    """

    module: cst.Module
    log: ChangeLog
    stubs: tuple[GeneratedStub, ...] = ()
    modified: bool = False

    @property
    def requires_review(self) -> bool:
        return any(self.log.requires_review(f) for f in self.log.files)


class SourceMigrator:
    """Applies import, field and stub rules to source trees.

    Args:
        table: The rules to apply.

    Example::
        migrator = SourceMigrator(SourceRuleTable(imports=(ImportRule("cassandra", "scylla"),)))
        outcome = migrator.migrate(unit, cst.parse_module(code))
        if outcome.modified:
            unit.path.write_text(outcome.module.code, encoding="utf-8")
    """

    def __init__(self, table: SourceRuleTable) -> None:
        self.table = table

    def migrate(self, unit: SourceUnit, tree: cst.Module) -> SourceOutcome:
        file = str(unit.path)
        log = ChangeLog()
        module = tree

        # Imports
        if self.table.imports:
            rewriter = ImportRewriter(self.table.imports)
            module = module.visit(rewriter)
            for old, new in rewriter.rewrites:
                log.change(file, f"{old} → {new}")

        # Fields
        if self.table.fields:
            fields = FieldRewriter(self.table.fields, decorator_names(module))
            module = module.visit(fields)
            for text in fields.changes:
                log.change(file, text)
            for text in fields.warnings:
                log.warn(file, text)
                log.flag_review(file)
                logger.warning("%s: %s", file, text)
            for rule in fields.applied:
                if rule.new_module is None:
                    continue
                for name in rule.imported_names:
                    module, added = ensure_import(module, rule.new_module, name)
                    if added:
                        log.change(file, f"import {rule.new_module}.{name} added")

        # Stubs
        stubs: list[GeneratedStub] = []
        for stub_rule in self.table.stubs:
            result = StubGenerator(stub_rule).generate(module, unit.module, unit.path)
            module = result.module
            for text in result.changes:
                log.change(file, text)
            for text in result.warnings:
                log.warn(file, text)
                log.flag_review(file)
            fresh = 0
            for stub in result.stubs:
                # Left to the writer, which reports the existing file.
                if stub.path.exists():
                    continue
                fresh += 1
                log.change(
                    file,
                    f"{stub.owner}: generated {stub.class_name} for @{stub_rule.definition}"
                    f'({stub_rule.definition_argument}="{stub.type_name}")',
                )
                log.change(
                    str(stub.path),
                    f"generated {stub.class_name}; complete the {STUB_MARKER} markers",
                )
                log.mark_generated(str(stub.path))
            if fresh:
                log.warn(
                    file,
                    f"{unit.module}: complete {fresh} generated stub(s) and remove "
                    f"@{stub_rule.definition} if unused",
                )
                log.flag_review(file)
            stubs.extend(result.stubs)

        modified = not module.deep_equals(tree)
        if modified:
            log.mark_modified(file)
            logger.debug("%s: %d source change(s)", file, log.change_count)
        return SourceOutcome(module=module, log=log, stubs=tuple(stubs), modified=modified)
