"""Tests for DocumentDiscovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from rule_rewriter.config import DocumentFormat, EngineConfig
from rule_rewriter.discovery import DocumentDiscovery
from rule_rewriter.errors import DiscoveryFailure

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def touch(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    resources = tmp_path / "src" / "main" / "resources"
    touch(resources / "application.yml")
    touch(resources / "application-dev.yaml")
    touch(resources / "application.properties")
    touch(resources / "config" / "application-prod.properties")
    touch(resources / "logback.xml")
    touch(resources / "other.yml")
    touch(tmp_path / "application.yml")
    return tmp_path


# ---------------------------------------------------------------------------
# discover
# ---------------------------------------------------------------------------


class TestDiscover:
    def test_resource_root_only(self, project: Path) -> None:
        docs = DocumentDiscovery(EngineConfig(base_path=project)).discover()
        resources = project / "src" / "main" / "resources"
        assert [d.path for d in docs] == [
            resources / "application-dev.yaml",
            resources / "application.yml",
            resources / "application.properties",
            resources / "config" / "application-prod.properties",
        ]

    def test_hierarchical_first(self, project: Path) -> None:
        docs = DocumentDiscovery(EngineConfig(base_path=project)).discover()
        formats = [d.format for d in docs]
        assert formats == [
            DocumentFormat.HIERARCHICAL,
            DocumentFormat.HIERARCHICAL,
            DocumentFormat.FLAT,
            DocumentFormat.FLAT,
        ]

    def test_falls_back_to_whole_project(self, tmp_path: Path) -> None:
        touch(tmp_path / "conf" / "application.yml")
        docs = DocumentDiscovery(EngineConfig(base_path=tmp_path)).discover()
        assert [d.path for d in docs] == [tmp_path / "conf" / "application.yml"]

    def test_excluded_dirs_pruned(self, tmp_path: Path) -> None:
        touch(tmp_path / "target" / "classes" / "application.yml")
        touch(tmp_path / ".git" / "application.yml")
        touch(tmp_path / "application.yml")
        docs = DocumentDiscovery(EngineConfig(base_path=tmp_path)).discover()
        assert [d.path for d in docs] == [tmp_path / "application.yml"]

    def test_custom_prefix(self, tmp_path: Path) -> None:
        touch(tmp_path / "bootstrap.yml")
        touch(tmp_path / "application.yml")
        config = EngineConfig(base_path=tmp_path, file_prefix="bootstrap")
        docs = DocumentDiscovery(config).discover()
        assert [d.path.name for d in docs] == ["bootstrap.yml"]

    def test_empty_project(self, tmp_path: Path) -> None:
        assert DocumentDiscovery(EngineConfig(base_path=tmp_path)).discover() == []

    def test_missing_base(self, tmp_path: Path) -> None:
        discovery = DocumentDiscovery(EngineConfig(base_path=tmp_path / "nope"))
        with pytest.raises(DiscoveryFailure, match="does not exist"):
            discovery.discover()

    def test_base_is_file(self, tmp_path: Path) -> None:
        path = touch(tmp_path / "file.txt")
        with pytest.raises(DiscoveryFailure, match="not a directory"):
            DocumentDiscovery(EngineConfig(base_path=path)).discover()


# ---------------------------------------------------------------------------
# format_of
# ---------------------------------------------------------------------------


class TestFormatOf:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("application.yml", DocumentFormat.HIERARCHICAL),
            ("application-dev.YAML", DocumentFormat.HIERARCHICAL),
            ("application.properties", DocumentFormat.FLAT),
            ("application.xml", None),
            ("app.yml", None),
        ],
    )
    def test_format(self, tmp_path: Path, name: str, expected: DocumentFormat | None) -> None:
        discovery = DocumentDiscovery(EngineConfig(base_path=tmp_path))
        assert discovery.format_of(tmp_path / name) is expected


# ---------------------------------------------------------------------------
# discover_sources
# ---------------------------------------------------------------------------


class TestDiscoverSources:
    def test_lists_sorted_sources(self, tmp_path: Path) -> None:
        touch(tmp_path / "src" / "pkg" / "b.py")
        touch(tmp_path / "src" / "pkg" / "a.py")
        touch(tmp_path / "src" / "pkg" / "notes.txt")
        touch(tmp_path / "src" / "pkg" / "__pycache__" / "a.py")
        sources = DocumentDiscovery(EngineConfig(base_path=tmp_path)).discover_sources()
        assert sources == [tmp_path / "src" / "pkg" / "a.py", tmp_path / "src" / "pkg" / "b.py"]

    def test_missing_source_root(self, tmp_path: Path) -> None:
        assert DocumentDiscovery(EngineConfig(base_path=tmp_path)).discover_sources() == []

    def test_several_roots(self, tmp_path: Path) -> None:
        touch(tmp_path / "app" / "m.py")
        touch(tmp_path / "lib" / "n.py")
        config = EngineConfig(base_path=tmp_path, source_roots=("app", "lib"))
        sources = DocumentDiscovery(config).discover_sources()
        assert [p.name for p in sources] == ["m.py", "n.py"]
