"""ConfigurationDocument and DocumentLoader: one file <-> one in-memory model.

Hierarchical files are YAML streams loaded with ``yaml.safe_load_all``; each
non-empty document becomes a MAPPING root.  Flat files are parsed into a
FlatTable.  Dumping always renders block style in insertion order, whatever
layout the source used.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from rule_rewriter.config import DocumentFormat
from rule_rewriter.errors import ParseFailure
from rule_rewriter.tree.builder import TreeBuilder
from rule_rewriter.tree.flat import FlatTable
from rule_rewriter.tree.nodes import TreeNode

__all__ = ["ConfigurationDocument", "DocumentLoader"]

logger = logging.getLogger(__name__)

_builder = TreeBuilder()


@dataclass
class ConfigurationDocument:
    """One configuration file held in memory.

    Attributes:
        path:          File the document was loaded from.
        format:        HIERARCHICAL or FLAT.
        roots:         One MAPPING root per YAML document (hierarchical only).
        table:         Parsed key=value table (flat only).
        original_text: File content as read, used for backups and change checks.
        encoding:      Encoding the file decoded with.
    """

    path: Path
    format: DocumentFormat
    roots: list[TreeNode] = field(default_factory=list)
    table: FlatTable | None = None
    original_text: str = ""
    encoding: str = "utf-8"

    @property
    def is_multi_document(self) -> bool:
        return self.format is DocumentFormat.HIERARCHICAL and len(self.roots) > 1


class DocumentLoader:
    """Reads and serializes ConfigurationDocuments.

    Args:
        flat_encoding_fallback: Encoding tried for flat files that are not
            valid UTF-8.  Defaults to ISO-8859-1, the traditional encoding of
            properties files.
    """

    def __init__(self, flat_encoding_fallback: str = "iso-8859-1") -> None:
        self._fallback = flat_encoding_fallback

    def load(self, path: Path, fmt: DocumentFormat) -> ConfigurationDocument:
        """Parse ``path`` into a ConfigurationDocument.

        Raises:
            ParseFailure: The file cannot be read or decoded, is not valid
                YAML, or holds a top-level document that is not a mapping.
        """
        logger.debug("Loading %s document %s", fmt, path)
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise ParseFailure(path, str(exc)) from exc

        if fmt is DocumentFormat.FLAT:
            try:
                text, encoding = raw.decode("utf-8"), "utf-8"
            except UnicodeDecodeError:
                text, encoding = raw.decode(self._fallback), self._fallback
            return ConfigurationDocument(
                path=path,
                format=fmt,
                table=FlatTable.parse(text),
                original_text=text,
                encoding=encoding,
            )

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseFailure(path, f"not valid UTF-8: {exc}") from exc
        return ConfigurationDocument(
            path=path,
            format=fmt,
            roots=self.parse_stream(text, path),
            original_text=text,
        )

    def parse_stream(self, text: str, path: Path | str = "<string>") -> list[TreeNode]:
        """Parse a YAML stream into mapping roots (empty documents skipped)."""
        try:
            loaded = list(yaml.safe_load_all(text))
        except yaml.YAMLError as exc:
            raise ParseFailure(path, str(exc)) from exc

        roots: list[TreeNode] = []
        for index, data in enumerate(loaded):
            if data is None:
                continue
            if not isinstance(data, dict):
                raise ParseFailure(
                    path,
                    f"document {index + 1} is a {type(data).__name__}, expected a mapping",
                )
            roots.append(_builder.build(data))
        if not roots:
            roots.append(TreeNode.mapping())
        return roots

    def dump(self, document: ConfigurationDocument) -> str:
        """Serialize a document to text in block style, insertion order."""
        if document.format is DocumentFormat.FLAT:
            if document.table is None:
                return ""
            return document.table.serialize()
        return self.dump_roots(document.roots)

    @staticmethod
    def dump_roots(roots: list[TreeNode]) -> str:
        data = [_builder.to_data(root) for root in roots]
        if len(data) == 1:
            # An empty mapping would render as "{}", which is flow style.
            if not data[0]:
                return ""
            return yaml.safe_dump(
                data[0],
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )
        return yaml.safe_dump_all(
            data,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
            explicit_start=True,
        )
