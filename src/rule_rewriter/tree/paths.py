"""PathResolver: dotted-path lookup and creation over TreeNode mappings.

A dotted path such as ``"server.servlet.encoding.charset"`` addresses a value
nested four mapping levels deep.  Navigation passes through MAPPING nodes
only: a segment that lands on a sequence or scalar before the leaf means the
path does not exist (no error).  Writing creates every missing intermediate
mapping but never replaces a non-mapping intermediate; that is a
``PathCollision``.  Removing deletes the leaf key only and leaves parents in
place, even when they become empty.
"""

from __future__ import annotations

from typing import Any, Final

from rule_rewriter.errors import PathCollision
from rule_rewriter.tree.builder import TreeBuilder
from rule_rewriter.tree.nodes import TreeNode

__all__ = ["ABSENT", "PathResolver", "TreeTarget"]


class _Absent:
    """Sentinel returned by ``read``/``remove`` when a path does not exist.

    Distinct from ``None`` because ``key: null`` is a legitimate value.
    """

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False

    def __deepcopy__(self, memo: dict[int, Any]) -> _Absent:
        return self


ABSENT: Final = _Absent()

# Module-level builder (stateless, safe to share).
_builder = TreeBuilder()


class PathResolver:
    """Resolves, creates and removes dotted paths inside a mapping tree.

    All methods take the root TreeNode explicitly; the resolver holds no state.

    Example::
        resolver = PathResolver()
        root = TreeBuilder().build({"logging": {"file": "app.log"}})
        resolver.exists(root, "logging.file")           # True
        resolver.write(root, "logging.file.name", "x")  # PathCollision: file is a scalar
    """

    @staticmethod
    def split(path: str) -> list[str]:
        """Split a dotted path into segments.

        Raises:
            ValueError: If the path is empty or has an empty segment (``a..b``).
        """
        segments = path.split(".")
        if not path or any(not segment for segment in segments):
            msg = f"invalid dotted path: {path!r}"
            raise ValueError(msg)
        return segments

    def lookup(self, root: TreeNode, path: str) -> TreeNode | None:
        """Return the node at ``path``, or None when it does not exist."""
        current = root
        for segment in self.split(path):
            if not current.is_mapping:
                return None
            child = current.children.get(segment)
            if child is None:
                return None
            current = child
        return current

    def exists(self, root: TreeNode, path: str) -> bool:
        return self.lookup(root, path) is not None

    def read(self, root: TreeNode, path: str) -> Any:
        """Return the plain value at ``path`` (subtrees as dicts/lists) or ABSENT."""
        node = self.lookup(root, path)
        if node is None:
            return ABSENT
        return _builder.to_data(node)

    def write(self, root: TreeNode, path: str, value: Any) -> None:
        """Store ``value`` at ``path``, creating missing intermediate mappings.

        Writes accumulate: a mapping created by an earlier write is reused, not
        replaced.  An existing leaf is overwritten.

        Args:
            root:  Mapping root of the document.
            path:  Dotted target path.
            value: Plain value or TreeNode to store.

        Raises:
            PathCollision: If the root or an intermediate segment is not a
                mapping.  The tree is left unchanged in that case.
        """
        segments = self.split(path)
        if not root.is_mapping:
            raise PathCollision(path, "<root>")
        # Check the whole chain first so a collision never leaves a half-built
        # branch behind.
        current = root
        for segment in segments[:-1]:
            child = current.children.get(segment)
            if child is None:
                break
            if not child.is_mapping:
                raise PathCollision(path, segment)
            current = child

        parent = root
        for segment in segments[:-1]:
            child = parent.children.get(segment)
            if child is None:
                child = TreeNode.mapping()
                parent.children[segment] = child
            parent = child

        node = value if isinstance(value, TreeNode) else _builder.build(value)
        node.raw_key = None
        parent.children[segments[-1]] = node

    def remove(self, root: TreeNode, path: str) -> Any:
        """Delete the leaf at ``path`` and return its plain value, or ABSENT.

        Parent mappings are never pruned, so removing the only key of a
        section leaves an empty mapping behind.
        """
        segments = self.split(path)
        parent = self.lookup(root, ".".join(segments[:-1])) if len(segments) > 1 else root
        if parent is None or not parent.is_mapping:
            return ABSENT
        node = parent.children.pop(segments[-1], None)
        if node is None:
            return ABSENT
        return _builder.to_data(node)


# Module-level resolver (stateless, safe to share).
_resolver = PathResolver()


class TreeTarget:
    """Adapts one document root to the ``PathTarget`` protocol.

    The Rule Applier talks to TreeTarget and FlatTable through the same four
    methods, so it never needs to know which format it is rewriting.
    """

    def __init__(self, root: TreeNode) -> None:
        self.root = root

    def exists(self, path: str) -> bool:
        return _resolver.exists(self.root, path)

    def read(self, path: str) -> Any:
        return _resolver.read(self.root, path)

    def write(self, path: str, value: Any) -> None:
        _resolver.write(self.root, path, value)

    def remove(self, path: str) -> Any:
        return _resolver.remove(self.root, path)
