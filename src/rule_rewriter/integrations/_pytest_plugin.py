"""pytest plugin for rule-rewriter.

Auto-discovered by pytest via the pytest11 entry point declared in pyproject.toml.
When the package is installed (even in editable mode), pytest discovers this plugin
automatically -- no conftest.py changes are needed.

Source: https://docs.pytest.org/en/stable/how-to/writing_plugins.html
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path

import pytest

DEFAULT_RESOURCE_ROOT = "src/main/resources"


@pytest.fixture
def migration_project(tmp_path: Path) -> Callable[..., Path]:
    """Fixture that returns a factory laying out a throwaway project.

    Usage in tests::

        def test_rename(migration_project):
            root = migration_project(
                resources={"application.properties": "logging.file=app.log\\n"},
            )
            report = rule_rewriter.migrate(root, apply=True)
            assert report.change_count == 1

    Args:
        No arguments -- the fixture is injected by pytest.

    Returns:
        A callable ``_make(resources=None, sources=None, resource_root=...,
        name="project") -> Path`` that writes ``resources`` (file name -> text)
        under the resource root and ``sources`` (relative path -> text) under
        the project root, and returns the project root.  Calling it twice with
        the same ``name`` adds files to the same project.
    """

    def _make(
        resources: Mapping[str, str] | None = None,
        sources: Mapping[str, str] | None = None,
        resource_root: str = DEFAULT_RESOURCE_ROOT,
        name: str = "project",
    ) -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        for relative, text in (resources or {}).items():
            target = root / resource_root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        for relative, text in (sources or {}).items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        return root

    return _make
