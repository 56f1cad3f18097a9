"""MigrationEngine: one run over one project directory.

Pipeline per configuration document::

    discover -> load -> [classify] -> transform (pure) -> write-back

followed, when source rules are supplied, by the source pass::

    units -> parse -> migrate (pure) -> write-back (module + stubs)

Documents are handled strictly one after another.  The only state shared
between them is the run's ChangeLog.  A failure in one document is recorded
against that document and the run moves on; only a missing discovery root
aborts the run.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path

from rule_rewriter.cache import CachingRegistry
from rule_rewriter.classifier import DocumentClassifier
from rule_rewriter.config import DocumentFormat, EngineConfig
from rule_rewriter.discovery import DiscoveredDocument, DocumentDiscovery
from rule_rewriter.errors import ParseFailure, PathCollision
from rule_rewriter.protocols import SourceRegistry, WriteBackStrategy
from rule_rewriter.result import ChangeLog, MigrationReport
from rule_rewriter.rules.applier import RuleApplier
from rule_rewriter.rules.table import RuleTable
from rule_rewriter.rules.transformers import ValueTransformers
from rule_rewriter.source.migrator import SourceMigrator
from rule_rewriter.source.registry import FileSystemRegistry
from rule_rewriter.source.rules import SourceRuleTable
from rule_rewriter.tree.document import ConfigurationDocument, DocumentLoader
from rule_rewriter.writeback import writer_for

__all__ = ["NO_MIGRATIONS", "PROJECT", "MigrationEngine"]

logger = logging.getLogger(__name__)

PROJECT = "<project>"
NO_MIGRATIONS = "No migrations needed"


class MigrationEngine:
    """Rewrites a project's configuration and source files from rule tables.

    Args:
        config:           Project location, file conventions and mode.
        table:            Property rules applied to every configuration document.
        transformers:     Value Transformer registry.  Defaults to the built-ins.
        source_rules:     Source-tree rules.  The source pass is skipped when
                          None or empty.
        registry:         Source registry.  Defaults to a cached
                          FileSystemRegistry over ``config``.
        writer:           Write-back strategy.  Defaults to the one matching
                          ``config.mode``.
        rewrite_profiles: Also move scalar legacy profile selectors to the
                          current syntax where rewriting is allowed.

    Example::
        config = EngineConfig(base_path=Path("my-service"), mode=MigrationMode.APPLY)
        report = MigrationEngine(config, get_table("2.1-2.2")).run()
        print(report.render())
    """

    def __init__(
        self,
        config: EngineConfig,
        table: RuleTable,
        *,
        transformers: ValueTransformers | None = None,
        source_rules: SourceRuleTable | None = None,
        registry: SourceRegistry | None = None,
        writer: WriteBackStrategy | None = None,
        rewrite_profiles: bool = False,
    ) -> None:
        self.config = config
        self.table = table
        self.source_rules = source_rules
        self.rewrite_profiles = rewrite_profiles
        self._applier = RuleApplier(table, transformers)
        self._classifier = DocumentClassifier(config.markers)
        self._loader = DocumentLoader(config.flat_encoding_fallback)
        self._discovery = DocumentDiscovery(config)
        self._registry = registry
        self._writer = writer if writer is not None else writer_for(config)

    def run(self) -> MigrationReport:
        """Run every phase and return the report.

        Raises:
            DiscoveryFailure: If ``config.base_path`` is missing or not a
                directory.
        """
        log = ChangeLog()
        documents = self._discovery.discover()
        logger.info(
            "Migrating %d document(s) with table %s (%s)",
            len(documents),
            self.table.name,
            self.config.mode,
        )
        for discovered in documents:
            self._run_document(discovered, log)

        if self.source_rules:
            self._run_sources(self.source_rules, log)

        if log.change_count == 0:
            log.change(PROJECT, NO_MIGRATIONS)
        return log.report(self.config.mode)

    # ------------------------------------------------------------------
    # Configuration documents
    # ------------------------------------------------------------------

    def _run_document(self, discovered: DiscoveredDocument, log: ChangeLog) -> None:
        file = str(discovered.path)
        logger.info("Processing %s", file)
        try:
            document = self._loader.load(discovered.path, discovered.format)
        except ParseFailure as exc:
            log.error(file, str(exc))
            logger.warning("Skipping %s: %s", file, exc.reason)
            return
        try:
            self.migrate_document(document, log)
        except Exception as exc:
            logger.exception("Unexpected failure while migrating %s", file)
            log.error(file, f"unexpected error: {exc}")

    def migrate_document(self, document: ConfigurationDocument, log: ChangeLog) -> bool:
        """Transform one loaded document and hand it to the writer.

        Returns:
            True when the document changed (whether or not it was written).
        """
        file = str(document.path)
        doc_log = ChangeLog()
        rewritten = self._transform(document, doc_log)
        log.extend(doc_log)
        if rewritten is None:
            return False
        self._writer.write_document(rewritten, self._loader.dump(rewritten), log)
        logger.debug("%s: %d change(s)", file, doc_log.change_count)
        return True

    def _transform(
        self, document: ConfigurationDocument, log: ChangeLog
    ) -> ConfigurationDocument | None:
        """Return the rewritten copy of ``document``, or None when nothing changed."""
        file = str(document.path)
        if document.format is DocumentFormat.FLAT:
            outcome = self._applier.transform(document)
            log.extend(outcome.log)
            return outcome.document if outcome.modified else None

        decision = self._classifier.decide(document.roots)
        if decision.requires_review:
            log.warn(file, decision.reason)
            log.flag_review(file)
            logger.warning("%s: %s", file, decision.reason)

        if not decision.rewrite_allowed:
            if not decision.insert_escape_hatch:
                return None
            rewritten = copy.deepcopy(document)
            hatch = self.config.markers.escape_hatch
            try:
                inserted = self._classifier.insert_escape_hatch(rewritten.roots)
            except PathCollision as exc:
                log.warn(file, f"{hatch} not added: {exc}")
                return None
            if not inserted:
                return None
            log.change(file, f"{hatch}=true added")
            log.mark_modified(file)
            return rewritten

        outcome = self._applier.transform(document)
        log.extend(outcome.log)
        rewritten = outcome.document
        modified = outcome.modified
        if self.rewrite_profiles:
            for root in rewritten.roots:
                modified |= self._classifier.rewrite_profile_syntax(root, file, log)
        if not modified:
            return None
        log.mark_modified(file)
        return rewritten

    # ------------------------------------------------------------------
    # Source trees
    # ------------------------------------------------------------------

    def _run_sources(self, rules: SourceRuleTable, log: ChangeLog) -> None:
        registry = self._registry
        if registry is None:
            registry = CachingRegistry(FileSystemRegistry(self.config))
        migrator = SourceMigrator(rules)
        generated: set[Path] = set()

        for unit in registry.units():
            file = str(unit.path)
            try:
                tree = registry.parse(unit.path)
            except ParseFailure as exc:
                log.error(file, str(exc))
                logger.warning("Skipping %s: %s", file, exc.reason)
                continue
            except Exception as exc:
                logger.exception("Unexpected failure while parsing %s", file)
                log.error(file, f"unexpected error: {exc}")
                continue
            try:
                outcome = migrator.migrate(unit, tree)
            except Exception as exc:
                logger.exception("Unexpected failure while migrating %s", file)
                log.error(file, f"unexpected error: {exc}")
                continue

            log.extend(outcome.log)
            if outcome.modified:
                self._writer.write_source(unit.path, outcome.module.code, log)
            for stub in outcome.stubs:
                # Two modules of one package may define the same name.
                if stub.path in generated:
                    continue
                generated.add(stub.path)
                self._writer.write_generated(stub.path, stub.code, log)
