"""RuleApplier: drives a RuleTable over one document.

For each rule in table order:

1. ``exists(old_path)``.  Absent means skip, which is what makes a second run
   a no-op.  A rule that nests the value under its own old key
   (``logging.file -> logging.file.name``) also skips when the old key
   already holds a mapping.
2. ``read(old_path)`` and pass the value through the Value Transformer when
   the rule asks for one.
3. ``write(new_path, value)``, creating missing parent mappings, then
   ``remove(old_path)``.  When one path lies inside the other the old leaf is
   removed first.
4. Append a ChangeRecord ``"<old> → <new>"``.

A ``PathCollision`` on write leaves the target exactly as it was, records a
warning and moves on to the next rule.  The rest of the table still applies.

``transform`` is the pure entry point used by the engine: it works on a deep
copy of the document and returns the copy together with its own ChangeLog, so
rule application can be tested without touching a file system.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass

from rule_rewriter.config import DocumentFormat
from rule_rewriter.errors import PathCollision
from rule_rewriter.protocols import PathTarget
from rule_rewriter.result import ChangeLog
from rule_rewriter.rules.table import RuleTable
from rule_rewriter.rules.transformers import ValueTransformers
from rule_rewriter.tree.document import ConfigurationDocument
from rule_rewriter.tree.paths import TreeTarget

__all__ = ["RuleApplier", "TransformOutcome"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TransformOutcome:
    """Result of ``RuleApplier.transform``.

    Attributes:
        document: The rewritten copy; the input document is untouched.
        log:      Records produced for this document only.
        applied:  Number of rules that fired.
    """

    document: ConfigurationDocument
    log: ChangeLog
    applied: int

    @property
    def modified(self) -> bool:
        return self.applied > 0


class RuleApplier:
    """Applies one RuleTable through the PathTarget protocol.

    Args:
        table:        Ordered rules to apply.
        transformers: Value Transformer registry.  Defaults to the built-ins.
    """

    def __init__(
        self,
        table: RuleTable,
        transformers: ValueTransformers | None = None,
    ) -> None:
        self._table = table
        self._transformers = transformers if transformers is not None else ValueTransformers()

    @property
    def table(self) -> RuleTable:
        return self._table

    def apply(self, target: PathTarget, file: str, log: ChangeLog) -> int:
        """Apply every rule to ``target`` in place; return how many fired."""
        applied = 0
        for rule in self._table:
            if not target.exists(rule.old_path):
                logger.debug("%s: %s absent, skipping", file, rule.old_path)
                continue
            nested = rule.new_path.startswith(rule.old_path + ".")
            if nested and isinstance(target.read(rule.old_path), dict):
                # The old key already holds the expanded form of its new path.
                logger.debug("%s: %s already expanded, skipping", file, rule.old_path)
                continue

            value = self._transformers.apply(rule.transformer_key, target.read(rule.old_path))
            try:
                if nested or rule.old_path.startswith(rule.new_path + "."):
                    # One path lies inside the other and every parent of
                    # old_path is a mapping, so this write cannot collide.
                    target.remove(rule.old_path)
                    target.write(rule.new_path, value)
                else:
                    # A collision raises before the target is touched.
                    target.write(rule.new_path, value)
                    target.remove(rule.old_path)
            except PathCollision as exc:
                log.warn(file, f"{rule.describe()} skipped: {exc}")
                logger.warning("%s: %s", file, exc)
                continue

            log.change(file, rule.describe())
            logger.debug("%s: applied %s", file, rule.describe())
            applied += 1
        return applied

    def transform(
        self,
        document: ConfigurationDocument,
        *,
        roots: list[int] | None = None,
    ) -> TransformOutcome:
        """Apply the table to a deep copy of ``document``.

        Args:
            document: Parsed document; never mutated.
            roots:    Indexes of the YAML documents to rewrite.  Defaults to
                      all of them.  Ignored for flat documents.

        Returns:
            A TransformOutcome holding the rewritten copy and its records.
        """
        rewritten = copy.deepcopy(document)
        log = ChangeLog()
        file = str(document.path)
        applied = 0

        if rewritten.format is DocumentFormat.FLAT:
            if rewritten.table is not None:
                applied += self.apply(rewritten.table, file, log)
        else:
            indexes = range(len(rewritten.roots)) if roots is None else roots
            for index in indexes:
                applied += self.apply(TreeTarget(rewritten.roots[index]), file, log)

        if applied:
            log.mark_modified(file)
        return TransformOutcome(document=rewritten, log=log, applied=applied)
