"""StubGenerator: companion stubs for constructs with no mechanical translation.

With the default StubRule, a module ``shop.models`` containing::

    @TypeDef(name="jsonb", type_class=JsonBinaryType)
    class Order(Base):
        payload: Annotated[dict, Type(type="jsonb")]

gets a generated module ``shop.converters.jsonb_attribute_converter`` with a
``JsonbAttributeConverter`` class whose methods raise ``NotImplementedError``,
and the field becomes::

        payload: Annotated[dict, Convert(converter=JsonbAttributeConverter)]

The ``Type`` import is dropped once nothing references it.  References to
names with no matching definition are left alone and reported.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import libcst as cst

from rule_rewriter.source.rules import StubRule, matches_name
from rule_rewriter.source.syntax import (
    call_keyword,
    ensure_import,
    full_name,
    pascal_case,
    referenced_names,
    remove_imported_name,
    snake_case,
    split_annotated,
)

__all__ = ["GeneratedStub", "StubGenerator", "StubResult", "STUB_MARKER", "render_stub"]

STUB_MARKER = "TODO(rule-rewriter)"


@dataclass(frozen=True, slots=True)
class GeneratedStub:
    """A stub module to be written next to the module that needs it.

    Attributes:
        module:     Dotted module name of the stub.
        path:       File the stub is written to.
        class_name: Name of the generated class.
        type_name:  Definition name the stub stands for.
        owner:      Class carrying the definition decorator.
        code:       Full source text.
    """

    module: str
    path: Path
    class_name: str
    type_name: str
    owner: str
    code: str


@dataclass
class StubResult:
    """Output of ``StubGenerator.generate`` for one module."""

    module: cst.Module
    stubs: list[GeneratedStub] = field(default_factory=list)
    changes: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def render_stub(class_name: str, type_name: str, rule: StubRule) -> str:
    """Source text of a stub class; every method raises NotImplementedError."""
    return f'''"""Generated stub for the "{type_name}" {rule.definition}.

{STUB_MARKER}: implement the conversion logic, then remove this marker.
"""

from __future__ import annotations

from typing import Any


class {class_name}:
    """Converts "{type_name}" values between the attribute and its stored column."""

    # {STUB_MARKER}: configure any required dependencies (e.g. a JSON codec).

    def convert_to_database_column(self, attribute: Any) -> Any:
        # {STUB_MARKER}: convert the entity attribute to the database column.
        raise NotImplementedError("convert_to_database_column for {type_name!r}")

    def convert_to_entity_attribute(self, column: Any) -> Any:
        # {STUB_MARKER}: convert the database column to the entity attribute.
        raise NotImplementedError("convert_to_entity_attribute for {type_name!r}")
'''


class _DefinitionCollector(cst.CSTVisitor):
    def __init__(self, rule: StubRule) -> None:
        self.rule = rule
        self.found: dict[str, str] = {}
        self.unnamed: list[str] = []

    def visit_ClassDef(self, node: cst.ClassDef) -> None:
        for decorator in node.decorators:
            call = decorator.decorator
            if not isinstance(call, cst.Call):
                continue
            if not matches_name(full_name(call.func), self.rule.definition):
                continue
            name = call_keyword(call, self.rule.definition_argument)
            if name is None:
                self.unnamed.append(node.name.value)
            else:
                self.found.setdefault(name, node.name.value)


class _UsageRewriter(cst.CSTTransformer):
    def __init__(self, rule: StubRule, targets: dict[str, str]) -> None:
        super().__init__()
        self.rule = rule
        self.targets = targets
        self._scopes: list[str | None] = []
        self.changes: list[str] = []
        self.warnings: list[str] = []
        self.used: set[str] = set()

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

    def leave_AnnAssign(
        self, original_node: cst.AnnAssign, updated_node: cst.AnnAssign
    ) -> cst.AnnAssign:
        if not self._scopes or self._scopes[-1] is None:
            return updated_node
        if not isinstance(updated_node.target, cst.Name):
            return updated_node
        expr = updated_node.annotation.annotation
        declared, metadata = split_annotated(expr)
        if not metadata:
            return updated_node

        field_name = f"{self._scopes[-1]}.{updated_node.target.value}"
        changed = False
        elements = []
        for element in metadata:
            index = element.slice
            if not isinstance(index, cst.Index):
                elements.append(element)
                continue
            value = index.value
            if not isinstance(value, cst.Call) or not matches_name(
                full_name(value.func), self.rule.usage
            ):
                elements.append(element)
                continue
            referenced = call_keyword(value, self.rule.usage_argument)
            stub_class = self.targets.get(referenced) if referenced is not None else None
            if stub_class is None:
                self.warnings.append(
                    f"{field_name}: {self.rule.usage} references unknown "
                    f"{self.rule.definition} {referenced!r}; manual migration may be required"
                )
                elements.append(element)
                continue
            replacement = cst.parse_expression(
                f"{self.rule.replacement}({self.rule.replacement_argument}={stub_class})"
            )
            elements.append(element.with_changes(slice=index.with_changes(value=replacement)))
            self.changes.append(
                f'{field_name}: {self.rule.usage}({self.rule.usage_argument}="{referenced}") → '
                f"{self.rule.replacement}({self.rule.replacement_argument}={stub_class})"
            )
            self.used.add(referenced)
            changed = True

        if not changed:
            return updated_node
        new_expr = expr.with_changes(slice=[expr.slice[0], *elements])
        return updated_node.with_changes(
            annotation=updated_node.annotation.with_changes(annotation=new_expr)
        )


class StubGenerator:
    """Applies one StubRule to a module.

    Args:
        rule: What to look for and what to generate.

    Example::
        generator = StubGenerator(StubRule(replacement_module="sqlalchemy_types"))
        result = generator.generate(module, "shop.models", Path("src/shop/models.py"))
        for stub in result.stubs:
            print(stub.path, stub.class_name)
    """

    def __init__(self, rule: StubRule) -> None:
        self.rule = rule

    def stub_location(self, module_name: str, path: Path, type_name: str) -> tuple[str, Path, str]:
        """Return ``(stub module, stub path, class name)`` for a definition name."""
        class_name = pascal_case(type_name) + self.rule.stub_suffix
        stem = f"{snake_case(type_name)}_{snake_case(self.rule.stub_suffix)}"
        if path.name == "__init__.py":
            package = module_name
        else:
            package = module_name.rpartition(".")[0]
        parts = [p for p in (package, self.rule.stub_package, stem) if p]
        directory = path.parent.joinpath(*self.rule.stub_package.split("."))
        return ".".join(parts), directory / f"{stem}.py", class_name

    def generate(self, module: cst.Module, module_name: str, path: Path) -> StubResult:
        rule = self.rule
        collector = _DefinitionCollector(rule)
        module.visit(collector)
        result = StubResult(module=module)
        for owner in collector.unnamed:
            result.warnings.append(
                f"{owner}: @{rule.definition} without {rule.definition_argument}=...; "
                "no stub generated"
            )
        if not collector.found:
            return result

        targets: dict[str, str] = {}
        for type_name, owner in collector.found.items():
            stub_module, stub_path, class_name = self.stub_location(module_name, path, type_name)
            if not class_name.isidentifier():
                result.warnings.append(
                    f"{owner}: cannot derive a class name from {rule.definition} {type_name!r}"
                )
                continue
            targets[type_name] = class_name
            result.stubs.append(
                GeneratedStub(
                    module=stub_module,
                    path=stub_path,
                    class_name=class_name,
                    type_name=type_name,
                    owner=owner,
                    code=render_stub(class_name, type_name, rule),
                )
            )

        rewriter = _UsageRewriter(rule, targets)
        updated = module.visit(rewriter)
        result.changes.extend(rewriter.changes)
        result.warnings.extend(rewriter.warnings)

        for stub in result.stubs:
            if stub.type_name in rewriter.used:
                updated, _ = ensure_import(updated, stub.module, stub.class_name)
        if rewriter.used:
            if rule.replacement_module is not None:
                updated, _ = ensure_import(updated, rule.replacement_module, rule.replacement)
            if rule.usage not in referenced_names(updated):
                updated, removed_from = remove_imported_name(updated, rule.usage)
                result.changes.extend(
                    f"import {source}.{rule.usage} removed" for source in removed_from
                )
        result.module = updated
        return result
