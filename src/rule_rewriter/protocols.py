"""Structural interfaces shared by the engine's components.

Each protocol is ``runtime_checkable`` so any conformant object passes
``isinstance`` checks without inheriting from anything.

Example::

    from rule_rewriter.protocols import PathTarget

    class DictTarget:
        def __init__(self) -> None:
            self.data: dict[str, object] = {}
        def exists(self, path: str) -> bool: return path in self.data
        def read(self, path: str) -> object: return self.data.get(path)
        def write(self, path: str, value: object) -> None: self.data[path] = value
        def remove(self, path: str) -> object: return self.data.pop(path)

    assert isinstance(DictTarget(), PathTarget)
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    import libcst as cst

    from rule_rewriter.result import ChangeLog
    from rule_rewriter.source.registry import SourceUnit
    from rule_rewriter.tree.document import ConfigurationDocument


@runtime_checkable
class PathTarget(Protocol):
    """Something the Rule Applier can rewrite through dotted paths.

    Implemented by ``TreeTarget`` (nested mappings) and ``FlatTable``
    (literal keys).  ``read`` and ``remove`` return ``ABSENT`` for missing
    paths; ``write`` may raise ``PathCollision``.
    """

    def exists(self, path: str) -> bool: ...

    def read(self, path: str) -> Any: ...

    def write(self, path: str, value: Any) -> None: ...

    def remove(self, path: str) -> Any: ...


@runtime_checkable
class SourceRegistry(Protocol):
    """Resolves and parses the project's source files.

    The project-wide registry is an external collaborator; the engine only
    consumes it.  ``units`` lists what to visit, ``parse`` returns the tree.
    """

    def units(self) -> list[SourceUnit]: ...

    def parse(self, path: Path) -> cst.Module: ...


@runtime_checkable
class WriteBackStrategy(Protocol):
    """Final step of a run: persist or discard mutated artifacts."""

    def write_document(self, document: ConfigurationDocument, text: str, log: ChangeLog) -> bool: ...

    def write_source(self, path: Path, code: str, log: ChangeLog) -> bool: ...

    def write_generated(self, path: Path, code: str, log: ChangeLog) -> bool: ...
