"""Packaging correctness verification for rule-rewriter.

Tests validate that:
- The top-level import exposes the documented public API
- py.typed marker is present in the wheel
- The pytest plugin and console script entry points are registered
- Package metadata is correct

These tests inspect the built wheel and current installation rather than
creating temporary virtualenvs (faster, more reliable in CI).
"""

from __future__ import annotations

import subprocess
import sys
import zipfile
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent.parent


class TestBaseInstall:
    """Verify the installed package imports and runs."""

    def test_import_rule_rewriter(self):  # type: ignore[no-untyped-def]
        """Top-level import succeeds."""
        import rule_rewriter

        assert hasattr(rule_rewriter, "migrate")
        assert hasattr(rule_rewriter, "preview")
        assert hasattr(rule_rewriter, "MigrationEngine")

    def test_builtin_tables(self):  # type: ignore[no-untyped-def]
        """Built-in rule tables resolve by name."""
        from rule_rewriter import get_table

        assert len(get_table("2.1-2.2")) == 4

    def test_preview_on_empty_project(self, tmp_path: Path):  # type: ignore[no-untyped-def]
        """preview() works on a project with nothing to migrate."""
        from rule_rewriter import preview

        report = preview(tmp_path)
        assert report.change_count == 1


class TestWheelContents:
    """Verify the built wheel contains required files."""

    @pytest.fixture(scope="class")
    def wheel_path(self) -> Path:
        """Build a fresh wheel and return its path."""
        dist_dir = PROJECT_ROOT / "dist"
        # Use poetry build since that's the project's build system
        result = subprocess.run(
            ["poetry", "build", "-f", "wheel"],
            cwd=str(PROJECT_ROOT),
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            pytest.skip(f"poetry build failed: {result.stderr}")

        wheels = sorted(dist_dir.glob("*.whl"), key=lambda p: p.stat().st_mtime)
        if not wheels:
            pytest.skip("No wheel found in dist/")
        return wheels[-1]

    def test_py_typed_in_wheel(self, wheel_path: Path):  # type: ignore[no-untyped-def]
        """py.typed marker must be included in the wheel."""
        with zipfile.ZipFile(wheel_path) as zf:
            names = zf.namelist()
            py_typed_files = [n for n in names if n.endswith("py.typed")]
            assert py_typed_files, f"py.typed not found in wheel. Contents: {names}"

    def test_no_pycache_in_wheel(self, wheel_path: Path):  # type: ignore[no-untyped-def]
        """__pycache__ directories must not be in the wheel."""
        with zipfile.ZipFile(wheel_path) as zf:
            pycache_files = [n for n in zf.namelist() if "__pycache__" in n]
            assert not pycache_files, f"__pycache__ found in wheel: {pycache_files}"

    def test_all_source_modules_in_wheel(self, wheel_path: Path):  # type: ignore[no-untyped-def]
        """All source modules must be present in the wheel."""
        expected_modules = [
            "rule_rewriter/__init__.py",
            "rule_rewriter/api.py",
            "rule_rewriter/cache.py",
            "rule_rewriter/classifier.py",
            "rule_rewriter/cli.py",
            "rule_rewriter/config.py",
            "rule_rewriter/discovery.py",
            "rule_rewriter/engine.py",
            "rule_rewriter/errors.py",
            "rule_rewriter/protocols.py",
            "rule_rewriter/result.py",
            "rule_rewriter/writeback.py",
            "rule_rewriter/rules/__init__.py",
            "rule_rewriter/rules/applier.py",
            "rule_rewriter/rules/table.py",
            "rule_rewriter/rules/tables.py",
            "rule_rewriter/rules/transformers.py",
            "rule_rewriter/source/__init__.py",
            "rule_rewriter/source/fields.py",
            "rule_rewriter/source/imports.py",
            "rule_rewriter/source/migrator.py",
            "rule_rewriter/source/registry.py",
            "rule_rewriter/source/rules.py",
            "rule_rewriter/source/stubs.py",
            "rule_rewriter/source/syntax.py",
            "rule_rewriter/tree/__init__.py",
            "rule_rewriter/tree/builder.py",
            "rule_rewriter/tree/document.py",
            "rule_rewriter/tree/flat.py",
            "rule_rewriter/tree/nodes.py",
            "rule_rewriter/tree/paths.py",
            "rule_rewriter/integrations/__init__.py",
            "rule_rewriter/integrations/_pytest_plugin.py",
        ]
        with zipfile.ZipFile(wheel_path) as zf:
            names = zf.namelist()
            for module in expected_modules:
                assert any(module in n for n in names), (
                    f"Module {module} not found in wheel"
                )

    def test_metadata_in_wheel(self, wheel_path: Path):  # type: ignore[no-untyped-def]
        """Wheel metadata must include correct package info."""
        with zipfile.ZipFile(wheel_path) as zf:
            metadata_files = [n for n in zf.namelist() if "METADATA" in n]
            assert metadata_files, "No METADATA found in wheel"
            metadata = zf.read(metadata_files[0]).decode()
            assert "rule-rewriter" in metadata.lower() or "rule_rewriter" in metadata.lower()
            assert "0.1.0" in metadata


class TestEntryPoints:
    """Verify the pytest plugin and console script are discoverable."""

    def test_pytest11_registered(self):  # type: ignore[no-untyped-def]
        """pytest11 entry point must be registered for rule-rewriter."""
        from importlib.metadata import entry_points

        pytest11_eps = entry_points(group="pytest11")

        rr_eps = [
            ep
            for ep in pytest11_eps
            if "rule" in ep.name.lower() or "rule_rewriter" in str(ep.value).lower()
        ]
        assert rr_eps, (
            f"No pytest11 entry point found for rule-rewriter. "
            f"Available: {[ep.name for ep in pytest11_eps]}"
        )

    def test_console_script_registered(self):  # type: ignore[no-untyped-def]
        """rule-rewriter console script must point at the CLI."""
        from importlib.metadata import entry_points

        scripts = [ep for ep in entry_points(group="console_scripts") if ep.name == "rule-rewriter"]
        assert scripts
        assert scripts[0].value == "rule_rewriter.cli:main"

    def test_fixture_available(self):  # type: ignore[no-untyped-def]
        """migration_project fixture must be importable from plugin."""
        import importlib

        mod = importlib.import_module("rule_rewriter.integrations._pytest_plugin")
        assert hasattr(mod, "migration_project")
        assert callable(mod.migration_project)


class TestPackageMetadata:
    """Verify version and exports."""

    def test_version(self):  # type: ignore[no-untyped-def]
        """Package version must be 0.1.0."""
        import rule_rewriter

        assert rule_rewriter.__version__ == "0.1.0"

    def test_all_exports(self):  # type: ignore[no-untyped-def]
        """__all__ must include the documented public API."""
        import rule_rewriter

        expected = {
            "ChangeLog",
            "ChangeRecord",
            "DiscoveryFailure",
            "DocumentFormat",
            "EngineConfig",
            "FieldRule",
            "ImportRule",
            "MigrationEngine",
            "MigrationMode",
            "MigrationReport",
            "ParseFailure",
            "PathCollision",
            "ProfileMarkers",
            "PropertyMappingRule",
            "RewriteError",
            "RuleApplier",
            "RuleTable",
            "Severity",
            "SourceRuleTable",
            "StubRule",
            "TransformKind",
            "ValueTransformers",
            "WriteFailure",
            "get_table",
            "migrate",
            "preview",
        }
        actual = set(rule_rewriter.__all__)
        assert expected == actual, (
            f"Missing: {expected - actual}, Extra: {actual - expected}"
        )
        for name in actual:
            assert hasattr(rule_rewriter, name)

    def test_cli_module_runs(self):  # type: ignore[no-untyped-def]
        """python -m rule_rewriter.cli --version prints the version."""
        result = subprocess.run(
            [sys.executable, "-m", "rule_rewriter.cli", "--version"],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0
        assert "0.1.0" in result.stdout
