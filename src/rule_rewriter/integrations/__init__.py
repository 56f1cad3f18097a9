"""Integrations subpackage for rule-rewriter.

Contains integration adapters for external frameworks:
- pytest plugin (auto-discovered via pytest11 entry point), providing the
  ``migration_project`` fixture

The plugin module is loaded by pytest itself and is not re-exported here, so
importing rule_rewriter never imports pytest.
"""

from __future__ import annotations

__all__: list[str] = []
