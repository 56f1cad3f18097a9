"""DocumentDiscovery: finds the configuration and source files of a project.

Configuration documents are files whose name starts with the configured
prefix (``application`` by default) and ends with a hierarchical or flat
extension.  They are looked up under the resource roots; when none of those
exist the whole project is searched instead.  Results are deterministic:
hierarchical files first, then flat files, each group sorted by path.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from rule_rewriter.config import DocumentFormat, EngineConfig
from rule_rewriter.errors import DiscoveryFailure

__all__ = ["DiscoveredDocument", "DocumentDiscovery"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DiscoveredDocument:
    """A candidate configuration file and the format it will be parsed as."""

    path: Path
    format: DocumentFormat


class DocumentDiscovery:
    """Walks a project tree according to an EngineConfig.

    Args:
        config: Supplies the base path, roots, prefix, extensions and
            excluded directory names.
    """

    def __init__(self, config: EngineConfig) -> None:
        self.config = config

    def _check_base(self) -> Path:
        base = self.config.base_path
        if not base.exists():
            raise DiscoveryFailure(base, "does not exist")
        if not base.is_dir():
            raise DiscoveryFailure(base)
        return base

    def _walk(self, directory: Path) -> Iterator[Path]:
        excluded = set(self.config.excluded_dirs)
        for root, dirs, files in os.walk(directory):
            # Prune in place so os.walk never descends into excluded trees.
            dirs[:] = sorted(d for d in dirs if d not in excluded)
            for fname in sorted(files):
                yield Path(root) / fname

    def resource_directories(self) -> list[Path]:
        """Existing resource roots, or the base path when there are none."""
        base = self._check_base()
        found = [base / r for r in self.config.resource_roots if (base / r).is_dir()]
        if not found:
            logger.debug("No resource root under %s; searching the whole project", base)
            return [base]
        return found

    def format_of(self, path: Path) -> DocumentFormat | None:
        """Return the format ``path`` would be parsed as, or None if it is not a candidate."""
        if not path.name.startswith(self.config.file_prefix):
            return None
        suffix = path.suffix.lower()
        if suffix in self.config.hierarchical_extensions:
            return DocumentFormat.HIERARCHICAL
        if suffix in self.config.flat_extensions:
            return DocumentFormat.FLAT
        return None

    def discover(self) -> list[DiscoveredDocument]:
        """List every configuration document of the project.

        Raises:
            DiscoveryFailure: If the base path is missing or not a directory.
        """
        seen: set[Path] = set()
        hierarchical: list[Path] = []
        flat: list[Path] = []
        for directory in self.resource_directories():
            for path in self._walk(directory):
                if path in seen or not path.is_file():
                    continue
                fmt = self.format_of(path)
                if fmt is None:
                    continue
                seen.add(path)
                (hierarchical if fmt is DocumentFormat.HIERARCHICAL else flat).append(path)

        documents = [
            DiscoveredDocument(p, DocumentFormat.HIERARCHICAL) for p in sorted(hierarchical)
        ]
        documents.extend(DiscoveredDocument(p, DocumentFormat.FLAT) for p in sorted(flat))
        logger.info(
            "Discovered %d configuration document(s) under %s",
            len(documents),
            self.config.base_path,
        )
        return documents

    def discover_sources(self) -> list[Path]:
        """List source files under the source roots, sorted by path.

        Missing source roots are ignored.

        Raises:
            DiscoveryFailure: If the base path is missing or not a directory.
        """
        base = self._check_base()
        extensions = {e.lower() for e in self.config.source_extensions}
        found: set[Path] = set()
        for root in self.config.source_roots:
            directory = base / root
            if not directory.is_dir():
                continue
            found.update(p for p in self._walk(directory) if p.suffix.lower() in extensions)
        return sorted(found)
