"""Command line entry point: ``rule-rewriter PROJECT [options]``.

Exit codes:

- 0: the run finished without per-file errors
- 1: the run finished but some files failed (see the report)
- 2: the project could not be searched, or a table name is unknown
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from rule_rewriter import __version__
from rule_rewriter.api import migrate
from rule_rewriter.config import EngineConfig
from rule_rewriter.errors import DiscoveryFailure
from rule_rewriter.rules.tables import TABLES

__all__ = ["build_parser", "main"]

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rule-rewriter",
        description="Rewrite a project's configuration files from version rule tables.",
    )
    parser.add_argument("project", type=Path, help="project root directory")
    parser.add_argument(
        "--table",
        dest="tables",
        action="append",
        metavar="NAME",
        help=f"rule table to apply, repeatable (known: {', '.join(TABLES)}; default: 2.1-2.2)",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="write the changes (default is a dry run)",
    )
    parser.add_argument(
        "--backup",
        action="store_true",
        help="keep <file>.bak copies of overwritten files",
    )
    parser.add_argument(
        "--resource-root",
        dest="resource_roots",
        action="append",
        metavar="DIR",
        help="directory searched for configuration files, repeatable "
        "(default: src/main/resources)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="more logging (-v info, -vv debug)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    settings: dict[str, object] = {"base_path": args.project, "backup": args.backup}
    if args.resource_roots:
        settings["resource_roots"] = tuple(args.resource_roots)
    config = EngineConfig(**settings)  # type: ignore[arg-type]

    try:
        report = migrate(
            args.project,
            args.tables or ("2.1-2.2",),
            apply=args.apply,
            config=config,
        )
    except DiscoveryFailure as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except KeyError as exc:
        print(f"error: {exc.args[0]}", file=sys.stderr)
        return 2

    print(report.render())
    return 1 if report.errors else 0


if __name__ == "__main__":
    sys.exit(main())
