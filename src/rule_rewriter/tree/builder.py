"""TreeBuilder: converts loaded YAML data into a typed TreeNode tree and back.

Uses recursive dispatch: dicts become MAPPING nodes, lists become SEQUENCE
nodes, and every other value (str, int, float, bool, None, date, ...) becomes
a SCALAR node holding the original Python value.  ``to_data`` is the exact
inverse and is what the serializer dumps.

Mapping keys are stored as strings so dotted paths can address them.  When
YAML produced a non-string key (``8080: x`` or ``on: y``) the original key is
kept in ``TreeNode.raw_key`` and restored by ``to_data``.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any

from rule_rewriter.tree.nodes import NodeType, TreeNode


@dataclass
class TreeBuilder:
    """Converts plain Python data into a TreeNode tree and back.

    Example::
        builder = TreeBuilder()
        tree = builder.build({"server": {"port": 8080}})
        # tree: MAPPING -> "server": MAPPING -> "port": SCALAR(8080)
        assert builder.to_data(tree) == {"server": {"port": 8080}}
    """

    def build(self, value: Any) -> TreeNode:
        """Convert a loaded value to a TreeNode tree.

        Args:
            value: Any value produced by a YAML safe loader.

        Returns:
            A TreeNode tree rooted at the appropriate node type.  Scalars are
            deep-copied so the tree never aliases caller data.
        """
        if isinstance(value, dict):
            node = TreeNode.mapping()
            for key, child_value in value.items():
                child = self.build(child_value)
                label = key if isinstance(key, str) else str(key)
                if not isinstance(key, str):
                    child.raw_key = key
                node.children[label] = child
            return node

        if isinstance(value, list | tuple):
            node = TreeNode.sequence()
            node.items.extend(self.build(item) for item in value)
            return node

        return TreeNode.scalar(copy.deepcopy(value))

    def to_data(self, node: TreeNode) -> Any:
        """Convert a TreeNode tree back into plain dicts, lists and scalars."""
        match node.node_type:
            case NodeType.MAPPING:
                return {
                    (child.raw_key if child.raw_key is not None else key): self.to_data(
                        child
                    )
                    for key, child in node.children.items()
                }
            case NodeType.SEQUENCE:
                return [self.to_data(item) for item in node.items]
            case NodeType.SCALAR:
                return node.value
        msg = f"Unsupported node type: {node.node_type!r}"
        raise TypeError(msg)
