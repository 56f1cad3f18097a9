"""Exception taxonomy for the rewrite engine.

Only ``DiscoveryFailure`` is allowed to escape ``MigrationEngine.run``; every
other error is raised by a component, caught by the engine for the document
it belongs to, and recorded in the report.
"""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "DiscoveryFailure",
    "ParseFailure",
    "PathCollision",
    "RewriteError",
    "WriteFailure",
]


class RewriteError(Exception):
    """Base class for all errors raised by rule_rewriter."""


class ParseFailure(RewriteError):
    """A candidate file could not be parsed into a tree."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"cannot parse {self.path}: {reason}")


class PathCollision(RewriteError):
    """A write target's intermediate segment holds a non-mapping node."""

    def __init__(self, path: str, segment: str) -> None:
        self.path = path
        self.segment = segment
        super().__init__(
            f"cannot write {path!r}: segment {segment!r} is not a mapping"
        )


class WriteFailure(RewriteError):
    """Serializing a document back to disk failed."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"cannot write {self.path}: {reason}")


class DiscoveryFailure(RewriteError):
    """The discovery root is missing or unreadable; fatal to the run."""

    def __init__(self, root: Path | str, reason: str = "not a directory") -> None:
        self.root = Path(root)
        self.reason = reason
        super().__init__(f"cannot discover documents under {self.root}: {reason}")
