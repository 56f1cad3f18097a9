"""ImportRewriter: renames import edges by package prefix.

``import a.b.c``, ``from a.b import c`` and ``from a.b import *`` each carry
one dotted import edge (``a.b.c``, ``a.b``, ``a.b``).  An edge equal to a
rule's old package, or below it, gets the new package with the remainder of
the name preserved.  Wildcards are renamed the same way and never expanded.
Relative imports are never touched.
"""

from __future__ import annotations

from collections.abc import Iterable

import libcst as cst

from rule_rewriter.source.rules import ImportRule
from rule_rewriter.source.syntax import dotted, full_name

__all__ = ["ImportRewriter"]


class ImportRewriter(cst.CSTTransformer):
    """libcst transformer applying ImportRules.

    Longer packages are tried first so a rule for ``a.b`` wins over a rule
    for ``a`` regardless of table order.

    Attributes:
        rewrites: ``(old, new)`` edge pairs in source order.

    Example::
        rewriter = ImportRewriter([ImportRule("cassandra", "scylla")])
        module = cst.parse_module("from cassandra.cluster import *\\n").visit(rewriter)
        # module.code == "from scylla.cluster import *\\n"
        # rewriter.rewrites == [("cassandra.cluster.*", "scylla.cluster.*")]
    """

    def __init__(self, rules: Iterable[ImportRule]) -> None:
        super().__init__()
        self._rules = sorted(rules, key=lambda r: len(r.old_package), reverse=True)
        self.rewrites: list[tuple[str, str]] = []

    def rename(self, name: str) -> str | None:
        for rule in self._rules:
            renamed = rule.rewrite(name)
            if renamed is not None:
                return renamed
        return None

    def leave_Import(self, original_node: cst.Import, updated_node: cst.Import) -> cst.Import:
        aliases = []
        changed = False
        for alias in updated_node.names:
            name = full_name(alias.name)
            renamed = self.rename(name) if name else None
            if renamed is None:
                aliases.append(alias)
                continue
            aliases.append(alias.with_changes(name=dotted(renamed)))
            self.rewrites.append((name, renamed))
            changed = True
        if not changed:
            return updated_node
        return updated_node.with_changes(names=aliases)

    def leave_ImportFrom(
        self,
        original_node: cst.ImportFrom,
        updated_node: cst.ImportFrom,
    ) -> cst.ImportFrom:
        if updated_node.relative or updated_node.module is None:
            return updated_node
        name = full_name(updated_node.module)
        renamed = self.rename(name) if name else None
        if renamed is None:
            return updated_node
        if isinstance(updated_node.names, cst.ImportStar):
            self.rewrites.append((f"{name}.*", f"{renamed}.*"))
        else:
            self.rewrites.append((name, renamed))
        return updated_node.with_changes(module=dotted(renamed))
