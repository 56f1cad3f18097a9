"""Helpers over libcst nodes shared by the source rewriters.

The source side speaks in three node kinds:

- import edge:  the dotted module name of an ``import`` / ``from ... import``
- annotation:   a decorator call, or a call inside ``Annotated[...]`` metadata
- field:        a class-level annotated assignment ``name: Type = ...``

Everything here is a pure function of its input tree.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

import libcst as cst
from libcst.helpers import get_full_name_for_node

__all__ = [
    "call_keyword",
    "decorator_names",
    "dotted",
    "ensure_import",
    "full_name",
    "join_annotated",
    "pascal_case",
    "referenced_names",
    "remove_imported_name",
    "snake_case",
    "split_annotated",
]

_WORD_BOUNDARY = re.compile(r"[^0-9A-Za-z]+|(?<=[a-z0-9])(?=[A-Z])")


def dotted(name: str) -> cst.Attribute | cst.Name:
    """Build a Name/Attribute chain for ``a.b.c``."""
    expr = cst.parse_expression(name)
    if not isinstance(expr, cst.Attribute | cst.Name):
        msg = f"not a dotted name: {name!r}"
        raise ValueError(msg)
    return expr


def full_name(node: cst.CSTNode | None) -> str | None:
    if node is None:
        return None
    return get_full_name_for_node(node)


def snake_case(text: str) -> str:
    return "_".join(w.lower() for w in _WORD_BOUNDARY.split(text) if w)


def pascal_case(text: str) -> str:
    return "".join(w[:1].upper() + w[1:] for w in _WORD_BOUNDARY.split(text) if w)


def call_keyword(call: cst.Call, keyword: str) -> str | None:
    """Return the string literal passed as ``keyword=...``, if any."""
    for arg in call.args:
        if arg.keyword is None or arg.keyword.value != keyword:
            continue
        value = arg.value
        if isinstance(value, cst.SimpleString | cst.ConcatenatedString):
            evaluated = value.evaluated_value
            if isinstance(evaluated, str):
                return evaluated
        return None
    return None


# ---------------------------------------------------------------------------
# Annotated[...] fields
# ---------------------------------------------------------------------------


def split_annotated(
    expr: cst.BaseExpression,
) -> tuple[cst.BaseExpression, list[cst.SubscriptElement] | None]:
    """Split ``Annotated[T, m1, m2]`` into ``T`` and its metadata elements.

    Returns ``(expr, None)`` for any other annotation.
    """
    if (
        isinstance(expr, cst.Subscript)
        and full_name(expr.value) in ("Annotated", "typing.Annotated", "typing_extensions.Annotated")
        and expr.slice
        and isinstance(expr.slice[0].slice, cst.Index)
    ):
        return expr.slice[0].slice.value, list(expr.slice[1:])
    return expr, None


def join_annotated(
    original: cst.BaseExpression,
    declared: cst.BaseExpression,
    metadata: list[cst.SubscriptElement] | None,
) -> cst.BaseExpression:
    """Inverse of ``split_annotated``, keeping the original node's formatting."""
    if metadata is None or not isinstance(original, cst.Subscript):
        return declared
    first = original.slice[0]
    index = first.slice
    if not isinstance(index, cst.Index):
        return declared
    return original.with_changes(
        slice=[first.with_changes(slice=index.with_changes(value=declared)), *metadata]
    )


# ---------------------------------------------------------------------------
# Module-level queries
# ---------------------------------------------------------------------------


class _DecoratorCollector(cst.CSTVisitor):
    def __init__(self) -> None:
        self.names: set[str] = set()

    def visit_Decorator(self, node: cst.Decorator) -> None:
        target = node.decorator.func if isinstance(node.decorator, cst.Call) else node.decorator
        name = full_name(target)
        if name is not None:
            self.names.add(name)


def decorator_names(module: cst.Module) -> set[str]:
    """Dotted names of every decorator anywhere in ``module``."""
    collector = _DecoratorCollector()
    module.visit(collector)
    return collector.names


class _NameCollector(cst.CSTVisitor):
    def __init__(self) -> None:
        self.names: set[str] = set()

    def visit_Import(self, node: cst.Import) -> bool:
        return False

    def visit_ImportFrom(self, node: cst.ImportFrom) -> bool:
        return False

    def visit_Name(self, node: cst.Name) -> None:
        self.names.add(node.value)


def referenced_names(module: cst.Module) -> set[str]:
    """Identifiers used anywhere in ``module`` outside import statements."""
    collector = _NameCollector()
    module.visit(collector)
    return collector.names


# ---------------------------------------------------------------------------
# Import bookkeeping
# ---------------------------------------------------------------------------


def _is_docstring(statement: cst.CSTNode) -> bool:
    return (
        isinstance(statement, cst.SimpleStatementLine)
        and len(statement.body) == 1
        and isinstance(statement.body[0], cst.Expr)
        and isinstance(statement.body[0].value, cst.SimpleString | cst.ConcatenatedString)
    )


def _is_import_line(statement: cst.CSTNode) -> bool:
    return isinstance(statement, cst.SimpleStatementLine) and any(
        isinstance(small, cst.Import | cst.ImportFrom) for small in statement.body
    )


def _imports_name(statement: cst.CSTNode, from_module: str, name: str) -> bool:
    if not isinstance(statement, cst.SimpleStatementLine):
        return False
    for small in statement.body:
        if not isinstance(small, cst.ImportFrom) or small.relative:
            continue
        if full_name(small.module) != from_module:
            continue
        if isinstance(small.names, cst.ImportStar):
            return True
        if any(full_name(alias.name) == name for alias in small.names):
            return True
    return False


def ensure_import(module: cst.Module, from_module: str, name: str) -> tuple[cst.Module, bool]:
    """Make sure ``from <from_module> import <name>`` is present.

    The statement goes after the last top-level import, or after the module
    docstring when there are no imports.

    Returns:
        The (possibly new) module and whether an import was added.
    """
    body = list(module.body)
    if any(_imports_name(statement, from_module, name) for statement in body):
        return module, False

    index = 0
    after_docstring = False
    for position, statement in enumerate(body):
        if position == 0 and _is_docstring(statement):
            index, after_docstring = 1, True
        elif _is_import_line(statement):
            index, after_docstring = position + 1, False

    statement = cst.parse_statement(f"from {from_module} import {name}\n")
    if after_docstring:
        statement = statement.with_changes(leading_lines=[cst.EmptyLine()])
    body.insert(index, statement)
    return module.with_changes(body=body), True


class _ImportedNameRemover(cst.CSTTransformer):
    def __init__(self, name: str) -> None:
        self.name = name
        self.removed_from: list[str] = []

    def _keep(self, alias: cst.ImportAlias) -> bool:
        bound = alias.evaluated_alias or alias.evaluated_name
        return bound != self.name

    def leave_SimpleStatementLine(
        self,
        original_node: cst.SimpleStatementLine,
        updated_node: cst.SimpleStatementLine,
    ) -> cst.SimpleStatementLine | cst.RemovalSentinel:
        body: list[cst.BaseSmallStatement] = []
        changed = False
        for small in updated_node.body:
            if not isinstance(small, cst.ImportFrom) or isinstance(small.names, cst.ImportStar):
                body.append(small)
                continue
            names: Sequence[cst.ImportAlias] = small.names
            kept = [alias for alias in names if self._keep(alias)]
            if len(kept) == len(names):
                body.append(small)
                continue
            changed = True
            self.removed_from.append(full_name(small.module) or "." * len(small.relative))
            if kept:
                kept[-1] = kept[-1].with_changes(comma=cst.MaybeSentinel.DEFAULT)
                body.append(small.with_changes(names=kept))
        if not changed:
            return updated_node
        if not body:
            return cst.RemovalSentinel.REMOVE
        body[-1] = body[-1].with_changes(semicolon=cst.MaybeSentinel.DEFAULT)
        return updated_node.with_changes(body=body)


def remove_imported_name(module: cst.Module, name: str) -> tuple[cst.Module, list[str]]:
    """Drop ``name`` from every ``from ... import`` that binds it.

    Returns:
        The new module and the modules the name was removed from.
    """
    remover = _ImportedNameRemover(name)
    updated = module.visit(remover)
    return updated, remover.removed_from
