"""FlatTable: ordered key=value table for line-oriented properties files.

Keys are opaque strings.  A dotted key such as ``logging.file.name`` is a
single entry, not a path through nested tables, so ``logging.file`` and
``logging.file.name`` can coexist and neither is the parent of the other.

Parsing follows the common properties-file grammar:
- ``#`` and ``!`` start comment lines; blank lines are kept as trivia.
- The key ends at the first unescaped ``=``, ``:`` or whitespace.
- A trailing unescaped backslash continues the logical line.
- ``\\t``, ``\\n``, ``\\r``, ``\\f``, ``\\uXXXX`` and escaped separators are
  decoded; serialization re-escapes what needs escaping.

Comment and blank lines stay attached to the entry that follows them, so a
rewrite changes only the lines of the entries it touches.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from rule_rewriter.tree.paths import ABSENT

__all__ = ["FlatTable"]

_DECODE_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_ENCODE_ESCAPES = {"\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f", "\\": "\\\\"}

# Matches an odd run of backslashes at end of line (a continuation marker).
_CONTINUATION = re.compile(r"(?<!\\)(\\\\)*\\$")


def _unescape(text: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch != "\\" or i + 1 >= len(text):
            out.append(ch)
            i += 1
            continue
        nxt = text[i + 1]
        if nxt == "u" and re.fullmatch(r"[0-9a-fA-F]{4}", text[i + 2 : i + 6]):
            out.append(chr(int(text[i + 2 : i + 6], 16)))
            i += 6
            continue
        out.append(_DECODE_ESCAPES.get(nxt, nxt))
        i += 2
    return "".join(out)


def _escape(text: str, *, is_key: bool) -> str:
    out: list[str] = []
    for idx, ch in enumerate(text):
        if ch in _ENCODE_ESCAPES:
            out.append(_ENCODE_ESCAPES[ch])
        elif ch in "=:#!" and (is_key or idx == 0):
            out.append("\\" + ch)
        elif ch == " " and (is_key or idx == 0):
            out.append("\\ ")
        else:
            out.append(ch)
    return "".join(out)


def _split_entry(line: str) -> tuple[str, str]:
    """Split one logical line into (raw key, raw value), both still escaped."""
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch in "=: \t\f":
            break
        i += 1
    key = line[:i]
    rest = line[i:].lstrip(" \t\f")
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(" \t\f")
    return key, rest


@dataclass
class FlatTable:
    """Ordered string -> string table with literal-key path semantics.

    Attributes:
        entries:  Key -> value, in first-seen order.
        leading:  Comment/blank lines that precede each key in the source.
        trailing: Comment/blank lines after the last entry.
    """

    entries: dict[str, str] = field(default_factory=dict)
    leading: dict[str, list[str]] = field(default_factory=dict)
    trailing: list[str] = field(default_factory=list)

    # ------------------------------------------------------------------
    # Parsing / serialization
    # ------------------------------------------------------------------

    @classmethod
    def parse(cls, text: str) -> FlatTable:
        """Parse properties text.  A repeated key keeps its last value."""
        table = cls()
        pending: list[str] = []
        physical = text.splitlines()
        i = 0
        while i < len(physical):
            line = physical[i]
            stripped = line.lstrip(" \t\f")
            i += 1
            if not stripped or stripped[0] in "#!":
                pending.append(line)
                continue
            logical = stripped
            while _CONTINUATION.search(logical) and i < len(physical):
                logical = logical[:-1] + physical[i].lstrip(" \t\f")
                i += 1
            if _CONTINUATION.search(logical):
                logical = logical[:-1]
            raw_key, raw_value = _split_entry(logical)
            key = _unescape(raw_key)
            table.entries.pop(key, None)
            table.entries[key] = _unescape(raw_value)
            if pending:
                table.leading[key] = pending
                pending = []
        table.trailing = pending
        return table

    def serialize(self) -> str:
        lines: list[str] = []
        for key, value in self.entries.items():
            lines.extend(self.leading.get(key, ()))
            lines.append(f"{_escape(key, is_key=True)}={_escape(value, is_key=False)}")
        lines.extend(self.trailing)
        return "\n".join(lines) + "\n" if lines else ""

    # ------------------------------------------------------------------
    # PathTarget protocol surface (literal keys, no nesting)
    # ------------------------------------------------------------------

    def exists(self, path: str) -> bool:
        return path in self.entries

    def read(self, path: str) -> Any:
        return self.entries.get(path, ABSENT)

    def write(self, path: str, value: Any) -> None:
        """Store ``value`` under the literal key ``path``.

        There are no parents to create, so this never collides.  Booleans are
        written lower-case to match how properties files spell them.
        """
        if isinstance(value, bool):
            text = "true" if value else "false"
        elif value is None:
            text = ""
        else:
            text = str(value)
        self.entries[path] = text

    def remove(self, path: str) -> Any:
        """Delete the entry; its comment lines move to the next entry."""
        if path not in self.entries:
            return ABSENT
        comments = self.leading.pop(path, [])
        keys = list(self.entries)
        position = keys.index(path)
        value = self.entries.pop(path)
        if comments:
            if position + 1 < len(keys):
                following = keys[position + 1]
                self.leading[following] = comments + self.leading.get(following, [])
            else:
                self.trailing = comments + self.trailing
        return value
