"""Change records, the append-only ChangeLog and the final MigrationReport.

Every component records what it did through a ChangeLog.  Entries are
immutable once appended; the log is read once at the end of a run to build a
MigrationReport, the only externally observable output besides the rewritten
files themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum, auto

from rule_rewriter.config import MigrationMode

__all__ = ["ChangeLog", "ChangeRecord", "FileReport", "MigrationReport", "Severity"]


class Severity(StrEnum):
    """Kind of a ChangeRecord.

    - CHANGE:  a mutation that was (or, in preview, would be) made
    - WARNING: something skipped or needing a human decision
    - ERROR:   a per-file failure; the file was skipped
    """

    CHANGE = auto()
    WARNING = auto()
    ERROR = auto()


@dataclass(frozen=True, slots=True)
class ChangeRecord:
    """One entry of the change log.

    Attributes:
        file:        File (or logical unit) the entry belongs to.
        description: Human-readable description, e.g. ``"logging.file → logging.file.name"``.
        severity:    CHANGE, WARNING or ERROR.
    """

    file: str
    description: str
    severity: Severity = Severity.CHANGE


@dataclass(frozen=True, slots=True)
class FileReport:
    """Everything recorded for a single file during one run.

    Attributes:
        file:            File path as recorded.
        records:         Entries in the order they were appended.
        requires_review: True when a human must look at this file.
        modified:        True when the file's content changed.
        generated:       True for files the engine created (stubs).
    """

    file: str
    records: tuple[ChangeRecord, ...]
    requires_review: bool = False
    modified: bool = False
    generated: bool = False

    @property
    def changes(self) -> list[ChangeRecord]:
        return [r for r in self.records if r.severity is Severity.CHANGE]


@dataclass(frozen=True, slots=True)
class MigrationReport:
    """Result of one engine run.

    Attributes:
        mode:  APPLY or PREVIEW.  Apart from this label, preview and apply
               reports for the same project are identical.
        files: Per-file reports in the order files were first recorded.
    """

    mode: MigrationMode
    files: tuple[FileReport, ...]

    def _records(self, severity: Severity) -> list[ChangeRecord]:
        return [r for f in self.files for r in f.records if r.severity is severity]

    @property
    def changes(self) -> list[ChangeRecord]:
        return self._records(Severity.CHANGE)

    @property
    def warnings(self) -> list[ChangeRecord]:
        return self._records(Severity.WARNING)

    @property
    def errors(self) -> list[ChangeRecord]:
        return self._records(Severity.ERROR)

    @property
    def change_count(self) -> int:
        return len(self.changes)

    @property
    def requires_review(self) -> bool:
        return any(f.requires_review for f in self.files)

    @property
    def modified_files(self) -> list[str]:
        return [f.file for f in self.files if f.modified]

    @property
    def generated_files(self) -> list[str]:
        return [f.file for f in self.files if f.generated]

    def for_file(self, file: str) -> FileReport | None:
        for report in self.files:
            if report.file == file:
                return report
        return None

    def render(self) -> str:
        """Render a plain-text summary suitable for a console."""
        verb = "Applied" if self.mode is MigrationMode.APPLY else "Dry run"
        lines = [
            f"{verb}: {self.change_count} change(s), {len(self.warnings)} warning(s), "
            f"{len(self.errors)} error(s) across {len(self.files)} file(s)",
        ]
        for report in self.files:
            tags = []
            if report.generated:
                tags.append("[GENERATED]")
            if report.requires_review:
                tags.append("[REVIEW]")
            header = report.file if not tags else f"{report.file} {' '.join(tags)}"
            lines.append("")
            lines.append(header)
            for record in report.records:
                marker = {
                    Severity.CHANGE: "  ✓",
                    Severity.WARNING: "  !",
                    Severity.ERROR: "  ✗",
                }[record.severity]
                lines.append(f"{marker} {record.description}")
        if self.requires_review:
            lines.append("")
            lines.append("Manual review required for files marked [REVIEW].")
        return "\n".join(lines)


@dataclass
class _FileState:
    records: list[ChangeRecord] = field(default_factory=list)
    requires_review: bool = False
    modified: bool = False
    generated: bool = False


class ChangeLog:
    """Append-only accumulator of ChangeRecords and per-file flags.

    A single run shares one ChangeLog across all documents.  Nothing ever
    removes or edits an appended record; flags only go from False to True.
    """

    def __init__(self) -> None:
        self._files: dict[str, _FileState] = {}

    def _state(self, file: str) -> _FileState:
        state = self._files.get(file)
        if state is None:
            state = self._files[file] = _FileState()
        return state

    def record(self, record: ChangeRecord) -> None:
        self._state(record.file).records.append(record)

    def change(self, file: str, description: str) -> None:
        self.record(ChangeRecord(file, description, Severity.CHANGE))

    def warn(self, file: str, description: str) -> None:
        self.record(ChangeRecord(file, description, Severity.WARNING))

    def error(self, file: str, description: str) -> None:
        self.record(ChangeRecord(file, description, Severity.ERROR))

    def flag_review(self, file: str) -> None:
        self._state(file).requires_review = True

    def mark_modified(self, file: str) -> None:
        self._state(file).modified = True

    def mark_generated(self, file: str) -> None:
        state = self._state(file)
        state.generated = True
        state.requires_review = True

    def extend(self, other: ChangeLog) -> None:
        """Append every record and flag of ``other``, preserving its order."""
        for file, state in other._files.items():
            target = self._state(file)
            target.records.extend(state.records)
            target.requires_review |= state.requires_review
            target.modified |= state.modified
            target.generated |= state.generated

    @property
    def files(self) -> list[str]:
        """Files seen so far, in first-recorded order."""
        return list(self._files)

    def records_for(self, file: str) -> list[ChangeRecord]:
        state = self._files.get(file)
        return list(state.records) if state else []

    def requires_review(self, file: str) -> bool:
        state = self._files.get(file)
        return bool(state and state.requires_review)

    @property
    def change_count(self) -> int:
        return sum(
            1
            for state in self._files.values()
            for r in state.records
            if r.severity is Severity.CHANGE
        )

    def __len__(self) -> int:
        return sum(len(state.records) for state in self._files.values())

    def report(self, mode: MigrationMode) -> MigrationReport:
        return MigrationReport(
            mode=mode,
            files=tuple(
                FileReport(
                    file=file,
                    records=tuple(state.records),
                    requires_review=state.requires_review,
                    modified=state.modified,
                    generated=state.generated,
                )
                for file, state in self._files.items()
            ),
        )
