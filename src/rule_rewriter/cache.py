"""CachingRegistry: LRU-backed caching proxy for any SourceRegistry.

Wraps a SourceRegistry-conformant object and caches parsed modules in
memory, keyed by path and modification time.  An unchanged file is never
parsed twice; a file rewritten on disk gets a new key and is parsed again.
LRU eviction is silent.

Each ``CachingRegistry`` instance owns its own ``LRUCache``, so two
instances never interfere with each other.

Example::

    from rule_rewriter.cache import CachingRegistry
    from rule_rewriter.source import FileSystemRegistry

    registry = CachingRegistry(FileSystemRegistry(config), max_size=256)
    for unit in registry.units():
        module = registry.parse(unit.path)   # parsed once
        again = registry.parse(unit.path)    # served from memory
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from cachetools import LRUCache

if TYPE_CHECKING:
    import libcst as cst

    from rule_rewriter.protocols import SourceRegistry
    from rule_rewriter.source.registry import SourceUnit


class CachingRegistry:
    """LRU-backed caching proxy around any SourceRegistry.

    Satisfies the ``SourceRegistry`` Protocol structurally.  Parse failures
    are not cached.

    Args:
        registry: Any object with ``units()`` and ``parse(path)``.
        max_size: Maximum number of parsed modules held in memory.
    """

    def __init__(self, registry: SourceRegistry, max_size: int = 256) -> None:
        self._registry: Any = registry
        self._cache: LRUCache[tuple[Path, int], cst.Module] = LRUCache(maxsize=max_size)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def max_size(self) -> int:
        return int(self._cache.maxsize)

    @property
    def curr_size(self) -> int:
        return int(self._cache.currsize)

    # ------------------------------------------------------------------
    # SourceRegistry Protocol surface
    # ------------------------------------------------------------------

    def units(self) -> list[SourceUnit]:
        return list(self._registry.units())

    def parse(self, path: Path) -> cst.Module:
        """Return the parsed module for ``path``, parsing only on a cache miss.

        A file whose modification time cannot be read is parsed every time;
        the wrapped registry reports the failure.
        """
        try:
            key = (path, path.stat().st_mtime_ns)
        except OSError:
            return self._registry.parse(path)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        module = self._registry.parse(path)
        self._cache[key] = module
        return module

    def clear(self) -> None:
        self._cache.clear()
