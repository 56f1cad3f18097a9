"""TreeNode dataclass and NodeType StrEnum for hierarchical documents.

A parsed YAML document is held as a tree of TreeNode objects: mappings own
their children exclusively (ordered by first appearance, keys unique),
sequences own an ordered list of items, and scalars are leaves.  Trees are
never graphs; TreeBuilder copies every value it receives.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import Any


class NodeType(StrEnum):
    """Enumeration of the three structural node types in a document tree.

    - MAPPING  -> "mapping"  : ordered string -> node table
    - SEQUENCE -> "sequence" : ordered list of nodes
    - SCALAR   -> "scalar"   : a leaf value (string, number, bool, null, date)
    """

    MAPPING = auto()
    SEQUENCE = auto()
    SCALAR = auto()


@dataclass(slots=True)
class TreeNode:
    """A node in the document tree.

    Attributes:
        node_type: Which kind of node this is (see NodeType).
        value:     Original typed Python value for SCALAR nodes; None otherwise.
        children:  Child nodes of a MAPPING, keyed by string key.
        items:     Child nodes of a SEQUENCE, in order.
        raw_key:   Original key under the parent mapping when YAML produced a
                   non-string key (e.g. ``8080:``); None for string keys.
    """

    node_type: NodeType
    value: Any = None
    children: dict[str, TreeNode] = field(default_factory=dict)
    items: list[TreeNode] = field(default_factory=list)
    raw_key: Any = None

    @classmethod
    def mapping(cls) -> TreeNode:
        return cls(node_type=NodeType.MAPPING)

    @classmethod
    def sequence(cls) -> TreeNode:
        return cls(node_type=NodeType.SEQUENCE)

    @classmethod
    def scalar(cls, value: Any) -> TreeNode:
        return cls(node_type=NodeType.SCALAR, value=value)

    @property
    def is_mapping(self) -> bool:
        return self.node_type is NodeType.MAPPING
