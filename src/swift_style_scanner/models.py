from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


SEVERITIES = ("error", "warning", "info")
SEVERITY_RANK = {"info": 1, "warning": 2, "error": 3}

TRIVIA_KINDS = frozenset({"whitespace", "newline", "comment"})

DIAGNOSTIC_KINDS = ("lex-error", "parse-error", "rule-internal-error", "read-error", "internal-error")


class SourceError(Exception):
    """Base for errors located in analyzed source text."""

    def __init__(self, message: str, span: Span):
        self.message = message
        self.span = span
        super().__init__(f"line {span.start.line}, column {span.start.column}: {message}")


@dataclass(frozen=True)
class Position:
    line: int
    column: int
    offset: int

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "column": self.column, "offset": self.offset}


@dataclass(frozen=True)
class Span:
    start: Position
    end: Position

    def contains(self, other: Span) -> bool:
        return self.start.offset <= other.start.offset and other.end.offset <= self.end.offset

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    span: Span

    @property
    def line(self) -> int:
        return self.span.start.line

    @property
    def column(self) -> int:
        return self.span.start.column

    @property
    def is_trivia(self) -> bool:
        return self.kind in TRIVIA_KINDS

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.text!r}, L{self.line}:{self.column})"


@dataclass(frozen=True)
class Finding:
    rule_id: str
    severity: str
    span: Span
    message: str
    path: str = ""
    replacement: str | None = None

    @property
    def line(self) -> int:
        return self.span.start.line

    @property
    def column(self) -> int:
        return self.span.start.column

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "rule_id": self.rule_id,
            "severity": self.severity,
            "line": self.line,
            "column": self.column,
            "end_line": self.span.end.line,
            "end_column": self.span.end.column,
            "message": self.message,
            "fixable": self.replacement is not None,
        }


@dataclass(frozen=True)
class Diagnostic:
    kind: str
    path: str
    message: str
    span: Span | None = None
    rule_id: str | None = None

    def __post_init__(self) -> None:
        if self.kind not in DIAGNOSTIC_KINDS:
            raise ValueError(f"Unknown diagnostic kind: {self.kind}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "path": self.path,
            "rule_id": self.rule_id,
            "line": self.span.start.line if self.span else None,
            "column": self.span.start.column if self.span else None,
            "message": self.message,
        }


def severity_counts(findings) -> dict[str, int]:
    counts = {severity: 0 for severity in SEVERITIES}
    for item in findings:
        counts[item.severity] += 1
    return counts


@dataclass(frozen=True)
class FileReport:
    path: str
    findings: tuple[Finding, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def counts(self) -> dict[str, int]:
        return severity_counts(self.findings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "counts": self.counts,
            "findings": [item.to_dict() for item in self.findings],
            "diagnostics": [item.to_dict() for item in self.diagnostics],
        }


@dataclass(frozen=True)
class Report:
    files: tuple[FileReport, ...] = ()
    cancelled: bool = False

    @property
    def findings(self) -> tuple[Finding, ...]:
        return tuple(item for report in self.files for item in report.findings)

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return tuple(item for report in self.files for item in report.diagnostics)

    @property
    def counts(self) -> dict[str, int]:
        return severity_counts(self.findings)

    @property
    def files_analyzed(self) -> int:
        return len(self.files)

    def summary(self) -> dict[str, Any]:
        return {
            "files_analyzed": self.files_analyzed,
            "findings_total": len(self.findings),
            "diagnostics_total": len(self.diagnostics),
            "cancelled": self.cancelled,
            **self.counts,
        }


@dataclass(frozen=True)
class RuleSettings:
    enabled: bool = True
    severity: str | None = None
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LintConfig:
    rules: dict[str, RuleSettings] = field(default_factory=dict)
    fail_on: str = "error"
    fail_fast: bool = False
    jobs: int = 4
    rule_jobs: int = 1
    include_exts: tuple[str, ...] = (".swift",)
    exclude_dirs: tuple[str, ...] = (".git", ".build", "Pods", "Carthage", "DerivedData", "node_modules")
    max_file_size_bytes: int = 2_000_000

    def settings_for(self, rule_id: str) -> RuleSettings:
        return self.rules.get(rule_id, RuleSettings())
