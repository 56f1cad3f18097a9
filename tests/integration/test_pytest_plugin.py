"""Integration tests for the rule-rewriter pytest plugin.

These tests verify that the migration_project fixture is auto-discovered
via the pytest11 entry point and behaves correctly.

NOTE: These tests require rule-rewriter to be installed (even in editable mode
via ``pip install -e .``). The pytest11 entry point is only registered at
install time -- running from a raw source checkout without installing will not
discover the fixture.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Any

import rule_rewriter


def test_fixture_returns_callable(migration_project: Any) -> None:
    """The fixture should return a factory, not a path."""
    assert callable(migration_project)


def test_fixture_lays_out_resources(migration_project: Any) -> None:
    """Resources land under the default resource root."""
    root = migration_project(resources={"application.yml": "a: 1\n"})
    assert (root / "src/main/resources/application.yml").read_text(encoding="utf-8") == "a: 1\n"


def test_fixture_lays_out_sources(migration_project: Any) -> None:
    """Sources land relative to the project root."""
    root = migration_project(sources={"src/app/m.py": "x = 1\n"})
    assert (root / "src/app/m.py").is_file()


def test_fixture_same_name_accumulates(migration_project: Any) -> None:
    """Calling the factory twice with one name extends the same project."""
    first = migration_project(resources={"application.yml": "a: 1\n"})
    second = migration_project(resources={"application.properties": "b=2\n"})
    assert first == second
    assert len(list((first / "src/main/resources").iterdir())) == 2


def test_fixture_distinct_names(migration_project: Any) -> None:
    """Different names give independent projects."""
    assert migration_project(name="one") != migration_project(name="two")


def test_fixture_drives_a_migration(migration_project: Any) -> None:
    """A laid-out project can be migrated end to end."""
    root = migration_project(resources={"application.properties": "logging.file=app.log\n"})
    report = rule_rewriter.migrate(root, apply=True)
    assert report.change_count == 1
    text = (root / "src/main/resources/application.properties").read_text(encoding="utf-8")
    assert text == "logging.file.name=app.log\n"


def test_plugin_discovery() -> None:
    """Verify migration_project appears in pytest --fixtures output."""
    result = subprocess.run(
        [sys.executable, "-m", "pytest", "--fixtures", "-q"],
        capture_output=True,
        text=True,
        cwd=str(Path(__file__).resolve().parents[2]),
    )
    assert "migration_project" in result.stdout, (
        f"migration_project not found in pytest --fixtures output.\n"
        f"stdout:\n{result.stdout}\n"
        f"stderr:\n{result.stderr}"
    )
