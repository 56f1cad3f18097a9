"""Tests for TreeBuilder and TreeNode.

Covers dispatch (mapping / sequence / scalar), bool-vs-int value
preservation, non-string YAML keys, deep-copy isolation and the exact
``to_data`` inverse.
"""

from __future__ import annotations

import datetime

import pytest

from rule_rewriter.tree.builder import TreeBuilder
from rule_rewriter.tree.nodes import NodeType, TreeNode

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def builder() -> TreeBuilder:
    """A fresh TreeBuilder instance for each test."""
    return TreeBuilder()


# ---------------------------------------------------------------------------
# Node factories
# ---------------------------------------------------------------------------


class TestTreeNode:
    def test_mapping_factory(self) -> None:
        node = TreeNode.mapping()
        assert node.node_type is NodeType.MAPPING
        assert node.is_mapping
        assert node.children == {}

    def test_sequence_factory(self) -> None:
        node = TreeNode.sequence()
        assert node.node_type is NodeType.SEQUENCE
        assert not node.is_mapping
        assert node.items == []

    def test_scalar_factory(self) -> None:
        node = TreeNode.scalar(8080)
        assert node.node_type is NodeType.SCALAR
        assert node.value == 8080

    def test_factories_never_share_containers(self) -> None:
        a, b = TreeNode.mapping(), TreeNode.mapping()
        a.children["x"] = TreeNode.scalar(1)
        assert b.children == {}

    def test_node_type_values(self) -> None:
        assert NodeType.MAPPING == "mapping"
        assert NodeType.SEQUENCE == "sequence"
        assert NodeType.SCALAR == "scalar"


# ---------------------------------------------------------------------------
# build()
# ---------------------------------------------------------------------------


class TestBuild:
    def test_dict_becomes_mapping(self, builder: TreeBuilder) -> None:
        tree = builder.build({"server": {"port": 8080}})
        assert tree.node_type is NodeType.MAPPING
        server = tree.children["server"]
        assert server.node_type is NodeType.MAPPING
        assert server.children["port"].value == 8080

    def test_list_becomes_sequence(self, builder: TreeBuilder) -> None:
        tree = builder.build({"hosts": ["a", "b"]})
        hosts = tree.children["hosts"]
        assert hosts.node_type is NodeType.SEQUENCE
        assert [item.value for item in hosts.items] == ["a", "b"]

    def test_key_order_preserved(self, builder: TreeBuilder) -> None:
        tree = builder.build({"z": 1, "a": 2, "m": 3})
        assert list(tree.children) == ["z", "a", "m"]

    @pytest.mark.parametrize(
        "value",
        [True, False, 0, 1, 1.5, "text", None, datetime.date(2024, 1, 31)],
    )
    def test_scalars_keep_type(self, builder: TreeBuilder, value: object) -> None:
        node = builder.build(value)
        assert node.node_type is NodeType.SCALAR
        assert node.value == value
        assert type(node.value) is type(value)

    def test_non_string_key_kept_as_raw_key(self, builder: TreeBuilder) -> None:
        tree = builder.build({8080: "http", True: "yes"})
        assert set(tree.children) == {"8080", "True"}
        assert tree.children["8080"].raw_key == 8080
        assert tree.children["True"].raw_key is True

    def test_string_key_has_no_raw_key(self, builder: TreeBuilder) -> None:
        tree = builder.build({"name": "x"})
        assert tree.children["name"].raw_key is None

    def test_build_copies_input(self, builder: TreeBuilder) -> None:
        data = {"tags": ["a"], "meta": {"k": [1, 2]}}
        tree = builder.build(data)
        data["meta"]["k"].append(3)
        assert builder.to_data(tree) == {"tags": ["a"], "meta": {"k": [1, 2]}}


# ---------------------------------------------------------------------------
# to_data()
# ---------------------------------------------------------------------------


class TestToData:
    def test_inverse_of_build(self, builder: TreeBuilder) -> None:
        data = {
            "spring": {"datasource": {"url": "jdbc:h2:mem", "pool": [1, 2, {"x": None}]}},
            "enabled": True,
        }
        assert builder.to_data(builder.build(data)) == data

    def test_raw_keys_restored(self, builder: TreeBuilder) -> None:
        data = {8080: "http", "name": "svc"}
        result = builder.to_data(builder.build(data))
        assert result == data
        assert 8080 in result

    def test_empty_containers(self, builder: TreeBuilder) -> None:
        assert builder.to_data(builder.build({})) == {}
        assert builder.to_data(builder.build([])) == []

    def test_unknown_node_type_raises(self, builder: TreeBuilder) -> None:
        node = TreeNode.scalar(1)
        node.node_type = "bogus"  # type: ignore[assignment]
        with pytest.raises(TypeError, match="Unsupported node type"):
            builder.to_data(node)
