"""Rule dataclasses for the source-tree rewrite.

Three rule classes, evaluated in this order by SourceMigrator:

- ImportRule: rename an imported package by prefix.
- FieldRule:  retype class-level fields and swap their metadata annotation.
- StubRule:   generate a stub class for a construct with no mechanical
  translation and point the field annotation at it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = ["FieldRule", "ImportRule", "SourceRuleTable", "StubRule"]

_DOTTED = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _require_dotted(owner: str, name: str, value: str | None, *, optional: bool = False) -> None:
    if value is None and optional:
        return
    if value is None or not _DOTTED.match(value):
        msg = f"{owner}.{name} must be a dotted identifier, got {value!r}"
        raise ValueError(msg)


def _require_identifier(owner: str, name: str, value: str) -> None:
    if not _IDENTIFIER.match(value):
        msg = f"{owner}.{name} must be an identifier, got {value!r}"
        raise ValueError(msg)


def matches_name(name: str | None, expected: str) -> bool:
    """True when ``name`` is ``expected`` or a dotted name ending in it."""
    if name is None:
        return False
    return name == expected or name.endswith("." + expected)


@dataclass(frozen=True, slots=True)
class ImportRule:
    """Rename ``old_package`` (and everything below it) to ``new_package``.

    Example::
        rule = ImportRule("cassandra.cqlengine", "scylla.cqlengine")
        rule.rewrite("cassandra.cqlengine.models")   # "scylla.cqlengine.models"
        rule.rewrite("cassandra.cluster")            # None
    """

    old_package: str
    new_package: str

    def __post_init__(self) -> None:
        _require_dotted("ImportRule", "old_package", self.old_package)
        _require_dotted("ImportRule", "new_package", self.new_package)
        if self.old_package == self.new_package:
            msg = f"ImportRule maps {self.old_package!r} onto itself"
            raise ValueError(msg)

    def rewrite(self, name: str) -> str | None:
        """Return the renamed import target, or None when the rule does not match."""
        if name == self.old_package:
            return self.new_package
        if name.startswith(self.old_package + "."):
            return self.new_package + name[len(self.old_package) :]
        return None


@dataclass(frozen=True, slots=True)
class FieldRule:
    """Retype class-level fields declared as ``old_type``.

    Attributes:
        old_type:       Declared type to match, simple or dotted.
        new_type:       Replacement type expression.
        guard:          Decorator that must appear somewhere in the module for
                        the rewrite to be safe.  None disables the check.
        old_annotation: Metadata call inside ``Annotated[...]`` to replace.
        new_annotation: Call name substituted for ``old_annotation``; the
                        original arguments are kept.
        new_module:     Module ``new_type`` and ``new_annotation`` are imported
                        from.  None adds no import.
    """

    old_type: str
    new_type: str
    guard: str | None = None
    old_annotation: str | None = None
    new_annotation: str | None = None
    new_module: str | None = None

    def __post_init__(self) -> None:
        _require_dotted("FieldRule", "old_type", self.old_type)
        _require_dotted("FieldRule", "new_type", self.new_type)
        _require_dotted("FieldRule", "guard", self.guard, optional=True)
        _require_dotted("FieldRule", "old_annotation", self.old_annotation, optional=True)
        _require_dotted("FieldRule", "new_annotation", self.new_annotation, optional=True)
        _require_dotted("FieldRule", "new_module", self.new_module, optional=True)
        if (self.old_annotation is None) != (self.new_annotation is None):
            msg = "FieldRule.old_annotation and new_annotation must be given together"
            raise ValueError(msg)

    @property
    def imported_names(self) -> tuple[str, ...]:
        """Simple names that must be importable from ``new_module``."""
        names = [self.new_type]
        if self.new_annotation is not None:
            names.append(self.new_annotation)
        return tuple(n for n in names if "." not in n)

    def describe(self) -> str:
        return f"{self.old_type} → {self.new_type}"


@dataclass(frozen=True, slots=True)
class StubRule:
    """Generate a stub for each ``definition`` decorator and rewire its users.

    With the defaults, ``@TypeDef(name="jsonb")`` on a class in ``shop.models``
    produces ``shop.converters.jsonb_attribute_converter`` holding class
    ``JsonbAttributeConverter``, and a field annotated
    ``Annotated[dict, Type(type="jsonb")]`` becomes
    ``Annotated[dict, Convert(converter=JsonbAttributeConverter)]``.
    """

    definition: str = "TypeDef"
    definition_argument: str = "name"
    usage: str = "Type"
    usage_argument: str = "type"
    replacement: str = "Convert"
    replacement_argument: str = "converter"
    replacement_module: str | None = None
    stub_package: str = "converters"
    stub_suffix: str = "AttributeConverter"

    def __post_init__(self) -> None:
        for name in (
            "definition",
            "definition_argument",
            "usage",
            "usage_argument",
            "replacement",
            "replacement_argument",
            "stub_suffix",
        ):
            _require_identifier("StubRule", name, getattr(self, name))
        _require_dotted("StubRule", "replacement_module", self.replacement_module, optional=True)
        _require_dotted("StubRule", "stub_package", self.stub_package)


@dataclass(frozen=True, slots=True)
class SourceRuleTable:
    """The three ordered rule lists the SourceMigrator runs."""

    imports: tuple[ImportRule, ...] = ()
    fields: tuple[FieldRule, ...] = ()
    stubs: tuple[StubRule, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.imports or self.fields or self.stubs)
