"""PropertyMappingRule, TransformKind and RuleTable.

A rule table is supplied data: an ordered list of ``old_path -> new_path``
entries with a transform kind.  One engine is parameterized by a table; there
is no per-version engine type.  Order matters because a later rule may rely
on an earlier rule having vacated a path.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum, auto

__all__ = ["PropertyMappingRule", "RuleTable", "TransformKind"]


class TransformKind(StrEnum):
    """How a rule treats the value it moves.

    - RENAME:          move the value unchanged
    - VALUE_TRANSFORM: move the value through a registered Value Transformer
    """

    RENAME = auto()
    VALUE_TRANSFORM = auto()


@dataclass(frozen=True, slots=True)
class PropertyMappingRule:
    """One entry of a rule table.

    Attributes:
        old_path:       Dotted path of the deprecated key.
        new_path:       Dotted path the value moves to.
        transform_kind: RENAME or VALUE_TRANSFORM.
        transformer:    Key of the Value Transformer to use.  Defaults to
                        ``old_path`` for VALUE_TRANSFORM rules.
    """

    old_path: str
    new_path: str
    transform_kind: TransformKind = TransformKind.RENAME
    transformer: str | None = None

    def __post_init__(self) -> None:
        for name in ("old_path", "new_path"):
            value = getattr(self, name)
            if not value or any(not part for part in value.split(".")):
                msg = f"{name} must be a non-empty dotted path, got {value!r}"
                raise ValueError(msg)
        if self.old_path == self.new_path:
            msg = f"rule maps {self.old_path!r} onto itself"
            raise ValueError(msg)

    @property
    def transformer_key(self) -> str | None:
        if self.transform_kind is not TransformKind.VALUE_TRANSFORM:
            return None
        return self.transformer or self.old_path

    def describe(self) -> str:
        return f"{self.old_path} → {self.new_path}"


@dataclass(frozen=True, slots=True)
class RuleTable:
    """Immutable, ordered collection of PropertyMappingRules.

    Attributes:
        name:  Label used in logs and reports, e.g. ``"2.1-2.2"``.
        rules: Rules in evaluation order.
    """

    name: str
    rules: tuple[PropertyMappingRule, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for rule in self.rules:
            if rule.old_path in seen:
                msg = f"duplicate old_path {rule.old_path!r} in rule table {self.name!r}"
                raise ValueError(msg)
            seen.add(rule.old_path)

    def __iter__(self) -> Iterator[PropertyMappingRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    @classmethod
    def from_mapping(
        cls,
        name: str,
        mapping: Mapping[str, str | tuple[str, TransformKind]],
    ) -> RuleTable:
        """Build a table from ``{old: new}`` or ``{old: (new, kind)}`` data.

        Example::
            RuleTable.from_mapping("2.1-2.2", {
                "logging.file": "logging.file.name",
                "server.use-forward-headers": (
                    "server.forward-headers-strategy",
                    TransformKind.VALUE_TRANSFORM,
                ),
            })
        """
        rules = []
        for old, target in mapping.items():
            if isinstance(target, str):
                rules.append(PropertyMappingRule(old, target))
            else:
                new, kind = target
                rules.append(PropertyMappingRule(old, new, TransformKind(kind)))
        return cls(name=name, rules=tuple(rules))

    @classmethod
    def concat(cls, *tables: RuleTable, name: str | None = None) -> RuleTable:
        """Join tables in order.  Duplicate old paths across tables are rejected."""
        joined = name if name is not None else "+".join(t.name for t in tables)
        return cls(name=joined, rules=tuple(r for t in tables for r in t.rules))
