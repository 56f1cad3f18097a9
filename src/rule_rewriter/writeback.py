"""Write-Back strategies: the only step that differs between apply and preview.

Both strategies run the same checks and record the same entries, so a
preview report is an accurate picture of what apply would do.  Only
``ApplyWriter`` touches the file system.

- PreviewWriter: discards every artifact.
- ApplyWriter:   writes documents, source modules and generated stubs.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rule_rewriter.config import DocumentFormat, EngineConfig
from rule_rewriter.errors import WriteFailure
from rule_rewriter.protocols import WriteBackStrategy
from rule_rewriter.result import ChangeLog
from rule_rewriter.tree.document import ConfigurationDocument

__all__ = ["ApplyWriter", "PreviewWriter", "writer_for"]

logger = logging.getLogger(__name__)


class _Writer:
    """Shared policy of both strategies; subclasses implement ``_store``."""

    def _store(self, path: Path, text: str, encoding: str) -> None:
        raise NotImplementedError

    def _write(
        self,
        path: Path,
        text: str,
        log: ChangeLog,
        *,
        encoding: str = "utf-8",
    ) -> bool:
        try:
            self._store(path, text, encoding)
        except WriteFailure as exc:
            log.error(str(path), str(exc))
            logger.error("%s", exc)
            return False
        return True

    def write_document(self, document: ConfigurationDocument, text: str, log: ChangeLog) -> bool:
        # Properties files keep the encoding they were read with.
        encoding = document.encoding if document.format is DocumentFormat.FLAT else "utf-8"
        return self._write(document.path, text, log, encoding=encoding)

    def write_source(self, path: Path, code: str, log: ChangeLog) -> bool:
        return self._write(path, code, log)

    def write_generated(self, path: Path, code: str, log: ChangeLog) -> bool:
        if path.exists():
            log.warn(str(path), "already exists; generated stub not written")
            logger.warning("%s already exists; generated stub not written", path)
            return False
        return self._write(path, code, log)


class PreviewWriter(_Writer):
    """Discards everything; nothing on disk changes."""

    def _store(self, path: Path, text: str, encoding: str) -> None:
        logger.debug("Dry run: would write %s", path)


class ApplyWriter(_Writer):
    """Writes artifacts to disk.

    Args:
        backup: Copy an existing file to ``<file>.bak`` byte for byte before
            overwriting it.
    """

    def __init__(self, backup: bool = False) -> None:
        self.backup = backup

    def _store(self, path: Path, text: str, encoding: str) -> None:
        try:
            if self.backup and path.exists():
                path.with_name(path.name + ".bak").write_bytes(path.read_bytes())
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding=encoding)
        except (OSError, UnicodeEncodeError) as exc:
            raise WriteFailure(path, str(exc)) from exc
        logger.info("Wrote %s", path)


def writer_for(config: EngineConfig) -> WriteBackStrategy:
    """Pick the strategy matching ``config.mode``."""
    if config.dry_run:
        return PreviewWriter()
    return ApplyWriter(backup=config.backup)
