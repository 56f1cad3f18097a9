"""EngineConfig, ProfileMarkers and the mode/format enums.

EngineConfig is a frozen (immutable) dataclass holding everything the engine
needs to know about one project: where to look, which file names count as
configuration, and whether mutations are written or only previewed.  It is
passed explicitly into every component constructor; nothing in the package
reads ambient global settings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum, auto
from pathlib import Path


class DocumentFormat(StrEnum):
    """On-disk representation of a configuration document.

    - HIERARCHICAL -> "hierarchical" : YAML, one or more documents per file
    - FLAT         -> "flat"         : line-oriented key=value properties
    """

    HIERARCHICAL = auto()
    FLAT = auto()


class MigrationMode(StrEnum):
    """Whether the final write step touches the file system.

    - APPLY:   serialize mutated trees back to disk.
    - PREVIEW: run every step identically but discard the result.
    """

    APPLY = auto()
    PREVIEW = auto()


@dataclass(frozen=True, slots=True)
class ProfileMarkers:
    """Dotted paths the multi-document classifier inspects.

    Attributes:
        legacy: Profile selector in the old syntax.  Counts as a marker only
            when it holds a scalar.
        current: Profile selector in the current syntax.
        group: Profile-group definition.  Counts as a marker only when it
            holds a mapping.
        escape_hatch: Top-level compatibility switch inserted (as ``true``)
            when legacy-profile documents are found in a multi-document stream.
    """

    legacy: str = "spring.profiles"
    current: str = "spring.config.activate.on-profile"
    group: str = "spring.profiles.group"
    escape_hatch: str = "spring.config.use-legacy-processing"

    def __post_init__(self) -> None:
        for name in ("legacy", "current", "group", "escape_hatch"):
            value = getattr(self, name)
            if not value or any(not part for part in value.split(".")):
                msg = f"{name} must be a non-empty dotted path, got {value!r}"
                raise ValueError(msg)


_DEFAULT_EXCLUDED = (
    ".git",
    "__pycache__",
    ".venv",
    "venv",
    "node_modules",
    "build",
    "dist",
    "target",
)


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Immutable configuration for one migration run.

    Attributes:
        base_path: Project root.  Must exist when the engine runs.
        resource_roots: Directories (relative to ``base_path``) searched for
            configuration documents.  When none of them exist the whole
            project is searched.
        file_prefix: Configuration file names must start with this prefix.
        hierarchical_extensions: Extensions parsed as YAML streams.
        flat_extensions: Extensions parsed as key=value tables.
        source_roots: Directories (relative to ``base_path``) holding source
            files for the source-tree rules.
        source_extensions: Extensions of source files.
        excluded_dirs: Directory names never descended into.
        mode: APPLY writes results, PREVIEW discards them.
        markers: Paths used by the multi-document classifier.
        flat_encoding_fallback: Encoding used for flat files that are not
            valid UTF-8.
        backup: In APPLY mode, keep ``<file>.bak`` with the original text.
    """

    base_path: Path
    resource_roots: tuple[str, ...] = ("src/main/resources",)
    file_prefix: str = "application"
    hierarchical_extensions: tuple[str, ...] = (".yml", ".yaml")
    flat_extensions: tuple[str, ...] = (".properties",)
    source_roots: tuple[str, ...] = ("src",)
    source_extensions: tuple[str, ...] = (".py",)
    excluded_dirs: tuple[str, ...] = _DEFAULT_EXCLUDED
    mode: MigrationMode = MigrationMode.PREVIEW
    markers: ProfileMarkers = field(default_factory=ProfileMarkers)
    flat_encoding_fallback: str = "iso-8859-1"
    backup: bool = False

    def __post_init__(self) -> None:
        # Accept plain strings for convenience; frozen needs object.__setattr__.
        if not isinstance(self.base_path, Path):
            object.__setattr__(self, "base_path", Path(self.base_path))
        if not self.file_prefix:
            msg = "file_prefix must be a non-empty string"
            raise ValueError(msg)
        if not self.hierarchical_extensions and not self.flat_extensions:
            msg = "at least one hierarchical or flat extension is required"
            raise ValueError(msg)
        for ext in (
            *self.hierarchical_extensions,
            *self.flat_extensions,
            *self.source_extensions,
        ):
            if not ext.startswith("."):
                msg = f"extensions must start with '.', got {ext!r}"
                raise ValueError(msg)
        overlap = set(self.hierarchical_extensions) & set(self.flat_extensions)
        if overlap:
            msg = f"extension(s) {sorted(overlap)} cannot be both hierarchical and flat"
            raise ValueError(msg)

    @property
    def dry_run(self) -> bool:
        """True when the run must not touch the file system."""
        return self.mode is MigrationMode.PREVIEW
