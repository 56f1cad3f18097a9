"""FileSystemRegistry: the default SourceRegistry adapter.

A SourceUnit pairs a dotted module name with its file.  Module names are
derived from the file's position under the source root that contains it, so
``src/shop/models.py`` under root ``src`` is ``shop.models`` and
``src/shop/__init__.py`` is ``shop``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import libcst as cst

from rule_rewriter.config import EngineConfig
from rule_rewriter.discovery import DocumentDiscovery
from rule_rewriter.errors import ParseFailure

__all__ = ["FileSystemRegistry", "SourceUnit", "module_name_for"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SourceUnit:
    """One source file and the module name it is imported as."""

    module: str
    path: Path


def module_name_for(path: Path, root: Path) -> str:
    parts = list(path.relative_to(root).with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    return ".".join(parts)


class FileSystemRegistry:
    """Lists and parses the source files of one project.

    Args:
        config: Supplies the base path, source roots and source extensions.
    """

    def __init__(self, config: EngineConfig) -> None:
        self.config = config
        self._discovery = DocumentDiscovery(config)

    def units(self) -> list[SourceUnit]:
        roots = [self.config.base_path / r for r in self.config.source_roots]
        units = []
        for path in self._discovery.discover_sources():
            root = next(r for r in roots if path.is_relative_to(r))
            units.append(SourceUnit(module=module_name_for(path, root), path=path))
        return units

    def parse(self, path: Path) -> cst.Module:
        """Parse ``path`` into a libcst Module.

        Raises:
            ParseFailure: The file cannot be read, is not UTF-8, or is not
                valid Python.
        """
        logger.debug("Parsing source %s", path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseFailure(path, str(exc)) from exc
        try:
            return cst.parse_module(text)
        except cst.ParserSyntaxError as exc:
            raise ParseFailure(path, str(exc)) from exc
