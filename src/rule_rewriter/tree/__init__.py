"""Tree subpackage: document model and dotted-path resolution.

Re-exports the public API for the tree module:
- TreeNode / NodeType: typed mapping / sequence / scalar nodes
- TreeBuilder: converts loaded YAML data to TreeNode trees and back
- PathResolver / TreeTarget / ABSENT: dotted-path exists/read/write/remove
- FlatTable: literal-key table for properties files
- ConfigurationDocument / DocumentLoader: one file <-> one in-memory model
"""

from rule_rewriter.tree.builder import TreeBuilder
from rule_rewriter.tree.document import ConfigurationDocument, DocumentLoader
from rule_rewriter.tree.flat import FlatTable
from rule_rewriter.tree.nodes import NodeType, TreeNode
from rule_rewriter.tree.paths import ABSENT, PathResolver, TreeTarget

__all__ = [
    "ABSENT",
    "ConfigurationDocument",
    "DocumentLoader",
    "FlatTable",
    "NodeType",
    "PathResolver",
    "TreeBuilder",
    "TreeNode",
    "TreeTarget",
]
