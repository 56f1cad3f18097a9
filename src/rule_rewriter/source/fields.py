"""FieldRewriter: retypes class-level fields and swaps their annotation.

A field is a class-level annotated assignment.  Its declared type is the
annotation, or the first argument of ``Annotated[...]``.  When the declared
type equals a rule's ``old_type`` the field is retyped, and an
``old_annotation(...)`` call in the ``Annotated`` metadata becomes
``new_annotation(...)`` with the same arguments.

A rule with a ``guard`` only fires when a decorator of that name appears
somewhere in the same module.  Without it the surrounding context cannot be
confirmed, so the field is left alone and a warning is recorded.
"""

from __future__ import annotations

from collections.abc import Iterable

import libcst as cst

from rule_rewriter.source.rules import FieldRule, matches_name
from rule_rewriter.source.syntax import dotted, full_name, join_annotated, split_annotated

__all__ = ["FieldRewriter"]


class FieldRewriter(cst.CSTTransformer):
    """libcst transformer applying FieldRules.

    Args:
        rules:      Field rules; the first rule whose ``old_type`` matches wins.
        decorators: Decorator names present in the module, used for guards.

    Attributes:
        changes:  Descriptions of the rewrites made.
        warnings: Descriptions of guarded rewrites that were skipped.
        applied:  Rules that fired at least once, in first-fired order.
    """

    def __init__(self, rules: Iterable[FieldRule], decorators: Iterable[str]) -> None:
        super().__init__()
        self._rules = tuple(rules)
        self._decorators = frozenset(decorators)
        # Innermost scope last; None marks a function body.
        self._scopes: list[str | None] = []
        self.changes: list[str] = []
        self.warnings: list[str] = []
        self.applied: list[FieldRule] = []

    def _guarded(self, rule: FieldRule) -> bool:
        if rule.guard is None:
            return True
        return any(matches_name(name, rule.guard) for name in self._decorators)

    # ------------------------------------------------------------------
    # Scope tracking
    # ------------------------------------------------------------------

    def visit_ClassDef(self, node: cst.ClassDef) -> None:
        self._scopes.append(node.name.value)

    def leave_ClassDef(self, original_node: cst.ClassDef, updated_node: cst.ClassDef) -> cst.ClassDef:
        self._scopes.pop()
        return updated_node

    def visit_FunctionDef(self, node: cst.FunctionDef) -> None:
        self._scopes.append(None)

    def leave_FunctionDef(
        self, original_node: cst.FunctionDef, updated_node: cst.FunctionDef
    ) -> cst.FunctionDef:
        self._scopes.pop()
        return updated_node

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def leave_AnnAssign(
        self, original_node: cst.AnnAssign, updated_node: cst.AnnAssign
    ) -> cst.AnnAssign:
        if not self._scopes or self._scopes[-1] is None:
            return updated_node
        if not isinstance(updated_node.target, cst.Name):
            return updated_node

        expr = updated_node.annotation.annotation
        declared, metadata = split_annotated(expr)
        # Parameterized types (``dict[str, int]``) are left alone.
        if not isinstance(declared, cst.Name | cst.Attribute):
            return updated_node
        declared_name = full_name(declared)
        rule = next((r for r in self._rules if r.old_type == declared_name), None)
        if rule is None:
            return updated_node

        field = f"{self._scopes[-1]}.{updated_node.target.value}"
        if not self._guarded(rule):
            self.warnings.append(
                f"{field}: {rule.describe()} skipped: no @{rule.guard} found in module"
            )
            return updated_node

        if metadata is not None and rule.old_annotation and rule.new_annotation:
            metadata = [
                self._swap_annotation(element, rule, field) for element in metadata
            ]
        new_expr = join_annotated(expr, dotted(rule.new_type), metadata)

        self.changes.append(f"{field}: {rule.describe()}")
        if rule not in self.applied:
            self.applied.append(rule)
        return updated_node.with_changes(
            annotation=updated_node.annotation.with_changes(annotation=new_expr)
        )

    def _swap_annotation(
        self, element: cst.SubscriptElement, rule: FieldRule, field: str
    ) -> cst.SubscriptElement:
        index = element.slice
        if (
            not isinstance(index, cst.Index)
            or rule.old_annotation is None
            or rule.new_annotation is None
        ):
            return element
        value = index.value
        if isinstance(value, cst.Call) and matches_name(full_name(value.func), rule.old_annotation):
            replacement: cst.BaseExpression = value.with_changes(func=dotted(rule.new_annotation))
        elif isinstance(value, cst.Name | cst.Attribute) and matches_name(
            full_name(value), rule.old_annotation
        ):
            replacement = dotted(rule.new_annotation)
        else:
            return element
        self.changes.append(f"{field}: {rule.old_annotation} → {rule.new_annotation}")
        return element.with_changes(slice=index.with_changes(value=replacement))
