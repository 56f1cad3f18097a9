"""Tests for SourceMigrator and FileSystemRegistry."""

from __future__ import annotations

from pathlib import Path

import libcst as cst
import pytest

from rule_rewriter.config import EngineConfig, MigrationMode
from rule_rewriter.errors import ParseFailure
from rule_rewriter.protocols import SourceRegistry
from rule_rewriter.result import Severity
from rule_rewriter.source import (
    FieldRule,
    FileSystemRegistry,
    ImportRule,
    SourceMigrator,
    SourceRuleTable,
    SourceUnit,
    StubRule,
)
from rule_rewriter.source.registry import module_name_for

MODELS = '''\
"""Models."""

from typing import Annotated

from cassandra.cqlengine import columns
from orm import Type, TypeDef, entity


@entity
@TypeDef(name="jsonb")
class Order:
    payload: Annotated[dict, Type(type="jsonb")]
    tags: Annotated[list, Kind()]
'''

UNIT = SourceUnit(module="shop.models", path=Path("src/shop/models.py"))
FILE = str(UNIT.path)
STUB_FILE = str(Path("src/shop/converters/jsonb_attribute_converter.py"))

TABLE = SourceRuleTable(
    imports=(ImportRule("cassandra", "scylla"),),
    fields=(
        FieldRule(
            "list",
            "JsonList",
            guard="entity",
            old_annotation="Kind",
            new_annotation="JsonKind",
            new_module="shop.types",
        ),
    ),
    stubs=(StubRule(),),
)

# ---------------------------------------------------------------------------
# SourceMigrator
# ---------------------------------------------------------------------------


class TestSourceMigrator:
    def test_all_passes(self) -> None:
        outcome = SourceMigrator(TABLE).migrate(UNIT, cst.parse_module(MODELS))
        code = outcome.module.code

        assert "from scylla.cqlengine import columns\n" in code
        assert "tags: Annotated[JsonList, JsonKind()]" in code
        assert "from shop.types import JsonList\n" in code
        assert "from shop.types import JsonKind\n" in code
        assert "payload: Annotated[dict, Convert(converter=JsonbAttributeConverter)]" in code
        assert outcome.modified
        assert len(outcome.stubs) == 1

        descriptions = [r.description for r in outcome.log.records_for(FILE)]
        assert descriptions[:5] == [
            "cassandra.cqlengine → scylla.cqlengine",
            "Order.tags: Kind → JsonKind",
            "Order.tags: list → JsonList",
            "import shop.types.JsonList added",
            "import shop.types.JsonKind added",
        ]

    def test_stub_file_recorded_as_generated(self) -> None:
        outcome = SourceMigrator(TABLE).migrate(UNIT, cst.parse_module(MODELS))
        report = outcome.log.report(MigrationMode.APPLY)
        assert report.generated_files == [STUB_FILE]
        (record,) = outcome.log.records_for(STUB_FILE)
        assert record.description == (
            "generated JsonbAttributeConverter; complete the TODO(rule-rewriter) markers"
        )
        assert outcome.requires_review
        assert 'Order: generated JsonbAttributeConverter for @TypeDef(name="jsonb")' in [
            r.description for r in outcome.log.records_for(FILE)
        ]

    def test_existing_stub_not_recorded(self, tmp_path: Path) -> None:
        unit = SourceUnit(module="shop.models", path=tmp_path / "shop" / "models.py")
        stub = tmp_path / "shop" / "converters" / "jsonb_attribute_converter.py"
        stub.parent.mkdir(parents=True)
        stub.write_text("# mine\n", encoding="utf-8")

        outcome = SourceMigrator(SourceRuleTable(stubs=(StubRule(),))).migrate(
            unit, cst.parse_module(MODELS)
        )
        assert len(outcome.stubs) == 1
        assert outcome.log.records_for(str(stub)) == []
        report = outcome.log.report(MigrationMode.APPLY)
        assert report.generated_files == []
        assert not any("generated" in r.description for r in report.changes)

    def test_guard_warning_flags_review(self) -> None:
        table = SourceRuleTable(fields=TABLE.fields)
        source = MODELS.replace("@entity\n", "")
        outcome = SourceMigrator(table).migrate(UNIT, cst.parse_module(source))
        assert not outcome.modified
        (record,) = outcome.log.records_for(FILE)
        assert record.severity is Severity.WARNING
        assert outcome.log.requires_review(FILE)

    def test_unmodified_module(self) -> None:
        tree = cst.parse_module("import json\n")
        outcome = SourceMigrator(TABLE).migrate(UNIT, tree)
        assert not outcome.modified
        assert outcome.module.deep_equals(tree)
        assert len(outcome.log) == 0
        assert not outcome.requires_review

    def test_input_tree_untouched(self) -> None:
        tree = cst.parse_module(MODELS)
        SourceMigrator(TABLE).migrate(UNIT, tree)
        assert tree.code == MODELS


# ---------------------------------------------------------------------------
# FileSystemRegistry
# ---------------------------------------------------------------------------


@pytest.fixture
def project(tmp_path: Path) -> Path:
    package = tmp_path / "src" / "shop"
    package.mkdir(parents=True)
    (package / "__init__.py").write_text("", encoding="utf-8")
    (package / "models.py").write_text("x = 1\n", encoding="utf-8")
    return tmp_path


class TestFileSystemRegistry:
    def test_satisfies_protocol(self, project: Path) -> None:
        assert isinstance(FileSystemRegistry(EngineConfig(base_path=project)), SourceRegistry)

    def test_units(self, project: Path) -> None:
        units = FileSystemRegistry(EngineConfig(base_path=project)).units()
        assert [u.module for u in units] == ["shop", "shop.models"]

    def test_parse(self, project: Path) -> None:
        registry = FileSystemRegistry(EngineConfig(base_path=project))
        module = registry.parse(project / "src" / "shop" / "models.py")
        assert module.code == "x = 1\n"

    def test_parse_syntax_error(self, project: Path) -> None:
        path = project / "src" / "shop" / "broken.py"
        path.write_text("def broken(:\n", encoding="utf-8")
        with pytest.raises(ParseFailure):
            FileSystemRegistry(EngineConfig(base_path=project)).parse(path)

    def test_parse_missing(self, project: Path) -> None:
        with pytest.raises(ParseFailure):
            FileSystemRegistry(EngineConfig(base_path=project)).parse(project / "nope.py")

    def test_module_name_for(self, tmp_path: Path) -> None:
        assert module_name_for(tmp_path / "a" / "b.py", tmp_path) == "a.b"
        assert module_name_for(tmp_path / "a" / "__init__.py", tmp_path) == "a"
